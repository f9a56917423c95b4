"""Request file (.http / .rest) parser.

A request file holds many requests separated by lines of ``###`` or ``---``:

    # @name login
    POST https://api.example.com/login  # inline comment
    Content-Type: application/json

    {"user": "{{USER}}"}

    ###

    GET {{BASE_URL}}/me
    Authorization: Bearer {{login.response.body.token}}

The parser is a line-oriented state machine. It never raises on bad input:
malformed lines become ParseError records and every well-formed request is
still returned.
"""

import logging
import re
from enum import Enum
from pathlib import Path
from urllib.parse import urlsplit

from .base import HTTP_METHODS, METHODS_WITHOUT_BODY, ParsedRequest, ParseError, ParseResult

logger = logging.getLogger(__name__)

SEPARATOR_PATTERN = re.compile(r"^\s*(#{3,}|-{3,})\s*$")
NAME_PATTERN = re.compile(r"@name\s+([A-Za-z0-9_]+)")
INLINE_COMMENT_PATTERN = re.compile(r"\s#")
LINE_SPLIT_PATTERN = re.compile(r"\r?\n")


class ParserState(Enum):
    READING_REQUEST_LINE = "reading_request_line"
    READING_HEADERS = "reading_headers"
    READING_BODY = "reading_body"


class _RequestBuilder:
    """Mutable accumulator for the request currently being read."""

    def __init__(self, method: str, url: str, line_number: int, name: str | None):
        self.method = method
        self.url = url
        self.line_number = line_number
        self.name = name
        self.headers: dict[str, str] = {}
        self.body_lines: list[str] = []
        self.headers_done = False

    def build(self) -> ParsedRequest:
        lines = list(self.body_lines)
        while lines and not lines[-1].strip():
            lines.pop()
        return ParsedRequest(
            name=self.name,
            method=self.method,
            url=self.url,
            headers=self.headers,
            body="\n".join(lines) if lines else None,
            line_number=self.line_number,
        )


def is_separator(line: str) -> bool:
    return SEPARATOR_PATTERN.match(line) is not None


def is_comment(line: str) -> bool:
    """Check a stripped line for a ``#`` or ``//`` comment prefix."""
    return line.startswith("#") or line.startswith("//")


def is_valid_url(url: str) -> bool:
    """Accept placeholders, relative paths and absolute URLs.

    URLs containing ``{{`` are accepted as-is; they are only checked for
    real once variables have been substituted. Anything else needs a
    scheme, so ``localhost:8080/api`` passes and ``example.com/api`` does not.
    """
    if "{{" in url or url.startswith("/"):
        return True
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    return bool(parts.scheme)


class RequestFileParser:
    """Splits a request file into ParsedRequest records."""

    def parse(self, content: str) -> ParseResult:
        lines = LINE_SPLIT_PATTERN.split(content)
        requests: list[ParsedRequest] = []
        errors: list[ParseError] = []

        state = ParserState.READING_REQUEST_LINE
        current: _RequestBuilder | None = None

        for index, line in enumerate(lines):
            line_number = index + 1

            if is_separator(line):
                if current is not None:
                    requests.append(current.build())
                    current = None
                state = ParserState.READING_REQUEST_LINE
                continue

            stripped = line.strip()

            if state is ParserState.READING_REQUEST_LINE:
                if not stripped or is_comment(stripped):
                    continue
                started = self._parse_request_line(stripped, line_number)
                if isinstance(started, ParseError):
                    errors.append(started)
                    continue
                started.name = self._extract_name(lines, index)
                current = started
                state = ParserState.READING_HEADERS
                continue

            if state is ParserState.READING_HEADERS:
                if is_comment(stripped):
                    continue
                if current.headers_done:
                    # body-less method: content after the blank line is not a body
                    if stripped:
                        logger.debug(
                            "Ignoring line %d: %s requests carry no body", line_number, current.method
                        )
                    continue
                if not stripped:
                    if current.method in METHODS_WITHOUT_BODY:
                        current.headers_done = True
                    else:
                        state = ParserState.READING_BODY
                    continue
                header = self._parse_header(line, line_number)
                if isinstance(header, ParseError):
                    errors.append(header)
                    continue
                key, value = header
                current.headers[key] = value
                continue

            # READING_BODY: verbatim, comments and blank lines included
            current.body_lines.append(line)

        if current is not None:
            requests.append(current.build())

        requests = [
            request.model_copy(update={"id": f"req-{n}"}) for n, request in enumerate(requests, start=1)
        ]

        if errors:
            logger.error("Parser encountered %d error(s)", len(errors))
            for error in errors:
                logger.error("  Line %d: %s", error.line_number, error.message)

        return ParseResult(requests=requests, errors=errors)

    def _parse_request_line(self, line: str, line_number: int) -> _RequestBuilder | ParseError:
        match = INLINE_COMMENT_PATTERN.search(line)
        clean = line[: match.start()].strip() if match else line

        parts = clean.split()
        if len(parts) < 2:
            return ParseError(
                message=f'Invalid request line: expected "METHOD URL", got "{clean}"',
                line_number=line_number,
            )

        method = parts[0].upper()
        url = parts[1]

        if method not in HTTP_METHODS:
            return ParseError(
                message=f'Invalid HTTP method: "{method}". Must be one of: {", ".join(HTTP_METHODS)}',
                line_number=line_number,
            )

        if not is_valid_url(url):
            return ParseError(
                message=f'Invalid URL format: "{url}". Must be a placeholder, a /path or carry a URL scheme',
                line_number=line_number,
            )

        return _RequestBuilder(method=method, url=url, line_number=line_number, name=None)

    def _parse_header(self, line: str, line_number: int) -> tuple[str, str] | ParseError:
        key, colon, value = line.partition(":")
        if not colon:
            return ParseError(
                message=(
                    f"Invalid header format at line {line_number}: missing colon. "
                    'Expected "Key: Value"'
                ),
                line_number=line_number,
            )
        key = key.strip()
        if not key:
            return ParseError(
                message=f"Invalid header at line {line_number}: empty header name",
                line_number=line_number,
            )
        return key, value.strip()

    def _extract_name(self, lines: list[str], request_index: int) -> str | None:
        """Look upward through the comment block right above the request line."""
        for i in range(request_index - 1, -1, -1):
            line = lines[i].strip()
            if not line or is_separator(line) or not is_comment(line):
                break
            match = NAME_PATTERN.search(line)
            if match:
                return match.group(1)
        return None


def parse_request_file(file_path: Path) -> ParseResult:
    """Read a UTF-8 request file and parse it."""
    text = file_path.read_text(encoding="utf-8")
    return RequestFileParser().parse(text)


def find_request(
    result: ParseResult,
    request_id: str | None = None,
    name: str | None = None,
    line: int | None = None,
) -> ParsedRequest | None:
    """Select a request by id, by @name, or by a line inside its block."""
    if request_id is not None:
        return next((r for r in result.requests if r.id == request_id), None)
    if name is not None:
        return next((r for r in result.requests if r.name == name), None)
    if line is not None:
        found = None
        for request in result.requests:
            if request.line_number > line:
                break
            found = request
        return found
    return None
