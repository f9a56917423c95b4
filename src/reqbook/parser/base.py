"""Data models for parsed request files.

The request-file parser and the multipart body parser both produce these
records. They are created fresh on every parse and treated as immutable
afterwards: resolution makes copies instead of editing them in place.
"""

from pydantic import BaseModel, ConfigDict, model_validator

HTTP_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS")

METHODS_WITHOUT_BODY = frozenset({"GET", "HEAD"})


class ParsedRequest(BaseModel):
    """A single request found in a request file."""

    model_config = ConfigDict(frozen=True)

    id: str = ""  # req-1, req-2, ... assigned after the scan
    name: str | None = None  # from "# @name <identifier>"
    method: str
    url: str
    headers: dict[str, str] = {}
    body: str | None = None
    line_number: int


class ParseError(BaseModel):
    """A malformed line. Collected, never raised."""

    message: str
    line_number: int
    column: int | None = None


class ParseResult(BaseModel):
    requests: list[ParsedRequest] = []
    errors: list[ParseError] = []

    @property
    def success(self) -> bool:
        return not self.errors


class MultipartPart(BaseModel):
    """One field or file reference inside a multipart body."""

    model_config = ConfigDict(frozen=True)

    name: str
    filename: str | None = None
    content_type: str | None = None
    value: str | None = None
    file_path: str | None = None  # read by the transport, never by the parser

    @model_validator(mode="after")
    def _value_or_file(self) -> "MultipartPart":
        if (self.value is None) == (self.file_path is None):
            raise ValueError("exactly one of value or file_path must be set")
        return self

    @property
    def is_file(self) -> bool:
        return self.file_path is not None


class MultipartBody(BaseModel):
    boundary: str
    parts: list[MultipartPart]


class MultipartParseResult(BaseModel):
    success: bool
    multipart: MultipartBody | None = None
    error: str | None = None
    errors: list[str] = []  # parts dropped without failing the parse
