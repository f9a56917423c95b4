"""Detect body kinds from request headers."""

from .base import ParsedRequest
from .multipart import MultipartBodyParser


def get_header(headers: dict[str, str], name: str) -> str | None:
    """Case-insensitive header lookup. Returns the last matching value."""
    found = None
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            found = value
    return found


def is_multipart(request: ParsedRequest) -> bool:
    content_type = get_header(request.headers, "Content-Type") or ""
    return "multipart/form-data" in content_type.lower() and request.body is not None


def multipart_boundary(request: ParsedRequest) -> str | None:
    """Return the boundary declared by the request's Content-Type, if any."""
    content_type = get_header(request.headers, "Content-Type")
    if not content_type:
        return None
    return MultipartBodyParser.extract_boundary(content_type)
