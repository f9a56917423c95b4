"""Environment variables: ``{{ NAME }}`` placeholders.

Values may themselves contain placeholders, so resolution runs in rounds:
each round replaces every name currently visible, and rounds repeat until
the text stops changing. A missing name or a cycle aborts the resolution.
"""

import logging
import re

from reqbook.env.base import Environment
from reqbook.errors import CircularReferenceError, MaxDepthExceededError, MissingVariableError

logger = logging.getLogger(__name__)

MAX_RESOLUTION_DEPTH = 10

VARIABLE_PATTERN = re.compile(r"\{\{\s*([A-Za-z_][A-Za-z0-9_]*)\s*\}\}")


def _placeholder(name: str) -> re.Pattern:
    return re.compile(r"\{\{\s*" + re.escape(name) + r"\s*\}\}")


def extract_variables(text: str) -> list[str]:
    """Distinct variable names in order of first appearance."""
    return list(dict.fromkeys(VARIABLE_PATTERN.findall(text)))


def validate_variables(text: str, environment: Environment | None) -> list[str]:
    """Names referenced by text that the environment does not define."""
    return [
        name
        for name in extract_variables(text)
        if environment is None or name not in environment.variables
    ]


class EnvironmentResolver:
    def __init__(self, environment: Environment, max_depth: int = MAX_RESOLUTION_DEPTH):
        self.environment = environment
        self.max_depth = max_depth

    def resolve(self, text: str) -> str:
        """Substitute every environment placeholder in text.

        Raises:
            MissingVariableError: A referenced name is not defined.
            CircularReferenceError: A value references its own name.
            MaxDepthExceededError: The text did not stabilize within max_depth rounds.
        """
        resolved = text
        for _ in range(self.max_depth):
            names = extract_variables(resolved)
            if not names:
                return resolved

            changed = False
            for name in names:
                value = self._value(name)
                if _placeholder(name).search(value):
                    raise CircularReferenceError([name, name])
                updated = _placeholder(name).sub(lambda _m: value, resolved)
                if updated != resolved:
                    changed = True
                    resolved = updated

            if not changed:
                return resolved

        if extract_variables(resolved):
            raise MaxDepthExceededError(self.max_depth)
        return resolved

    def expand_variable(self, name: str, resolving: tuple[str, ...] = ()) -> str:
        """Fully expand one variable, depth first.

        ``resolving`` is the chain of names currently being expanded by the
        caller; it is passed down explicitly so concurrent expansions never
        share state.
        """
        if name in resolving:
            raise CircularReferenceError([*resolving, name])
        if len(resolving) >= self.max_depth:
            raise MaxDepthExceededError(self.max_depth)

        chain = (*resolving, name)
        value = self._value(name)
        return VARIABLE_PATTERN.sub(lambda m: self.expand_variable(m.group(1), chain), value)

    def _value(self, name: str) -> str:
        value = self.environment.variables.get(name)
        if value is None:
            raise MissingVariableError(name, self.environment.name)
        logger.debug("Resolved env variable: %s", name)
        return value
