"""Chain variables: values taken from earlier named responses.

    {{login.response.body.token}}
    {{login.response.body[0].id}}
    {{login.response.headers.x-request-id}}
    {{login.response.status}}

A placeholder that cannot be resolved (unknown response, path not found) is
left in the text untouched. This phase never raises.
"""

import logging
import re
from typing import Any, Protocol

from reqbook.store import SavedResponse
from .paths import NOT_FOUND, navigate, stringify

logger = logging.getLogger(__name__)

CHAIN_VARIABLE_PATTERN = re.compile(
    r"\{\{([A-Za-z0-9_]+)\.response\.(body|headers|status)([.\[\]A-Za-z0-9_\-]+)?\}\}"
)


class ChainResponseStore(Protocol):
    def get(self, name: str) -> SavedResponse | None: ...


class ChainResolver:
    def __init__(self, store: ChainResponseStore | None):
        self.store = store

    def resolve(self, text: str) -> str:
        if not text or "{{" not in text:
            return text
        return CHAIN_VARIABLE_PATTERN.sub(self._replace, text)

    def _replace(self, match: re.Match) -> str:
        placeholder = match.group(0)
        path = match.group(3) or ""
        if path.startswith("."):
            path = path[1:]
        value = self.lookup(match.group(1), match.group(2), path)
        if value is NOT_FOUND:
            logger.warning("Chain variable not found: %s", placeholder)
            return placeholder
        text = stringify(value)
        logger.info("Resolved chain variable: %s -> %s", placeholder, text)
        return text

    def lookup(self, request_name: str, section: str, path: str = "") -> Any:
        """Fetch one section of a saved response, optionally following a path.

        Returns NOT_FOUND when the response or the path does not exist.
        """
        saved = self.store.get(request_name) if self.store is not None else None
        if saved is None:
            logger.warning("No saved response found with name: %s", request_name)
            return NOT_FOUND

        if section == "status":
            return saved.status
        data = saved.body if section == "body" else dict(saved.headers)

        if not path:
            return data
        return navigate(data, path)
