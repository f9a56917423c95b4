"""Saved responses for request chaining.

A named request's response is written once after it completes and read by
every later resolution that references ``{{name.response...}}``.
"""

import json
import logging
import time
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class SavedResponse(BaseModel):
    name: str
    status: int
    headers: dict[str, str] = {}
    body: Any = None  # parsed JSON when the raw body is JSON, else the text
    raw_body: bytes = b""
    timestamp: float = Field(default_factory=time.time)


def _parse_body(raw_body: bytes) -> Any:
    text = raw_body.decode("utf-8", errors="replace")
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


class ResponseStore:
    """In-memory chain store keyed by request name.

    Single writer, many readers: the resolver only calls get().
    """

    def __init__(self):
        self._responses: dict[str, SavedResponse] = {}

    def save(
        self,
        name: str,
        status: int,
        headers: dict[str, str] | None = None,
        raw_body: bytes | str = b"",
    ) -> SavedResponse:
        if isinstance(raw_body, str):
            raw_body = raw_body.encode("utf-8")
        saved = SavedResponse(
            name=name,
            status=status,
            headers=dict(headers or {}),
            body=_parse_body(raw_body),
            raw_body=raw_body,
        )
        self._responses[name] = saved
        logger.info("Saved response: %s (status: %d)", name, status)
        return saved

    def get(self, name: str) -> SavedResponse | None:
        return self._responses.get(name)

    def all(self) -> dict[str, SavedResponse]:
        return dict(self._responses)

    def clear(self, name: str) -> bool:
        if self._responses.pop(name, None) is None:
            return False
        logger.info("Cleared saved response: %s", name)
        return True

    def clear_all(self) -> None:
        self._responses.clear()
        logger.info("Cleared all saved responses")

    def __len__(self) -> int:
        return len(self._responses)

    def __contains__(self, name: object) -> bool:
        return name in self._responses


def load_responses(file_path: Path) -> ResponseStore:
    """Load recorded responses from a YAML or JSON file.

    The file maps response names to ``{status, headers, body}``. A body given
    as a mapping or list is stored as JSON; a string body is stored verbatim.

    Raises:
        ValueError: If the file or one of its entries has the wrong shape.
        yaml.YAMLError: If the file is not valid YAML.
    """
    data = yaml.safe_load(file_path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{file_path}: expected a mapping of response names")

    store = ResponseStore()
    for name, entry in data.items():
        entry = entry or {}
        if not isinstance(entry, dict):
            raise ValueError(f"{file_path}: response '{name}' must be a mapping")

        headers = entry.get("headers") or {}
        if not isinstance(headers, dict):
            raise ValueError(f"{file_path}: headers of response '{name}' must be a mapping")

        status = entry.get("status", 200)
        if isinstance(status, bool) or not isinstance(status, int):
            raise ValueError(f"{file_path}: status of response '{name}' must be an integer")

        body = entry.get("body", "")
        raw = body if isinstance(body, str) else json.dumps(body)
        store.save(str(name), status, {str(k): str(v) for k, v in headers.items()}, raw)
    return store
