"""Exceptions raised by reqbook.

Parse problems are not exceptions: the request-file, multipart and env
parsers collect them as records with line numbers. The classes here cover
failures that abort a single operation, such as resolving one request.
"""

from typing import Any, Optional


class ReqbookError(Exception):
    """Base class carrying a message and optional structured details."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"error": {"type": type(self).__name__, "message": self.message}}
        if self.details:
            result["error"]["details"] = self.details
        return result


class ResolutionError(ReqbookError):
    """Variable resolution failed for one request.

    Fatal to that resolution call only; callers report it per request.
    """


class MissingVariableError(ResolutionError):
    def __init__(self, name: str, environment: str):
        super().__init__(
            f'Variable "{name}" not found in environment "{environment}"',
            details={"variable": name, "environment": environment},
        )
        self.name = name


class CircularReferenceError(ResolutionError):
    def __init__(self, cycle: list[str]):
        super().__init__(
            f"Circular reference detected: {' -> '.join(cycle)}",
            details={"cycle": cycle},
        )
        self.cycle = cycle


class MaxDepthExceededError(ResolutionError):
    def __init__(self, max_depth: int):
        super().__init__(
            "Variable resolution exceeded maximum depth (possible circular reference)",
            details={"max_depth": max_depth},
        )
        self.max_depth = max_depth


class MultipartFileError(ReqbookError):
    """A file referenced from a multipart part could not be read."""
