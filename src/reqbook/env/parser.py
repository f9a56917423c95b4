"""Parser for ``.env`` style environment files.

    # comment
    BASE_URL=https://api.example.com
    MESSAGE="Hello World"
    GREETING='hi'
"""

import logging
import re
from pathlib import Path, PurePath

from .base import Environment, EnvParseError, EnvParseResult

logger = logging.getLogger(__name__)

KEY_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

DEFAULT_ENVIRONMENT = "default"


def parse_env(content: str, file_path: str | None = None) -> EnvParseResult:
    """Parse KEY=value lines into an Environment.

    Any malformed line makes the whole result unsuccessful; the errors list
    names every bad line.
    """
    variables: dict[str, str] = {}
    errors: list[EnvParseError] = []

    for line_number, line in enumerate(content.splitlines(), start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue

        key, equals, value = line.partition("=")
        if not equals:
            errors.append(
                EnvParseError(line=line_number, message=f'Invalid format: expected KEY=VALUE, got "{line}"')
            )
            continue

        key = key.strip()
        if not KEY_PATTERN.match(key):
            errors.append(
                EnvParseError(
                    line=line_number,
                    message=(
                        f'Invalid key: "{key}". Keys must start with letter/underscore '
                        "and contain only alphanumeric/underscore characters."
                    ),
                )
            )
            continue

        if key in variables:
            logger.warning(
                'Duplicate variable "%s" in %s. Last value will be used.', key, file_path or "environment"
            )
        variables[key] = _unquote(value.strip())
        logger.debug("Parsed env variable: %s", key)

    if errors:
        return EnvParseResult(errors=errors)

    name = environment_name(file_path) if file_path else DEFAULT_ENVIRONMENT
    return EnvParseResult(environment=Environment(name=name, variables=variables, file_path=file_path))


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value


def environment_name(file_path: str) -> str:
    """Derive the environment name from its file name.

    ``.env`` -> ``default``, ``.env.production`` -> ``production``.
    """
    filename = PurePath(file_path.replace("\\", "/")).name or ".env"
    if filename == ".env":
        return DEFAULT_ENVIRONMENT
    return filename.rsplit(".", 1)[-1] or DEFAULT_ENVIRONMENT


def load_env_file(file_path: Path) -> EnvParseResult:
    text = file_path.read_text(encoding="utf-8")
    return parse_env(text, str(file_path))
