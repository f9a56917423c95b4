"""Checks parsed requests for problems the parser deliberately lets through."""

import logging

from pydantic import BaseModel

from .base import METHODS_WITHOUT_BODY, ParsedRequest
from .detect import get_header

logger = logging.getLogger(__name__)


class RequestIssue(BaseModel):
    message: str
    suggestion: str = ""


def validate_request(request: ParsedRequest) -> RequestIssue | None:
    """Return the first issue found in a request, or None."""
    lowered = [key.lower() for key in request.headers]
    if len(lowered) != len(set(lowered)):
        return RequestIssue(
            message="Duplicate header keys found (headers are case-insensitive)",
            suggestion="Remove duplicate headers or combine their values",
        )

    if request.method in METHODS_WITHOUT_BODY and request.body:
        return RequestIssue(
            message=f"{request.method} requests should not have a body",
            suggestion="Remove the request body",
        )

    if request.body and get_header(request.headers, "Content-Length") is None:
        logger.debug("Request %s has body but no Content-Length header", request.id)

    return None


def validate_requests(requests: list[ParsedRequest]) -> dict[str, str]:
    """Validate every request.

    Returns dict of {request_id: error_message} for requests with issues.
    """
    errors = {}
    for request in requests:
        issue = validate_request(request)
        if issue is not None:
            errors[request.id] = issue.message
    return errors
