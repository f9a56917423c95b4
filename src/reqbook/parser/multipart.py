"""Multipart body parser.

Turns the textual form description written in a request body into typed
parts. Both header styles are accepted:

    --boundary
    Content-Disposition: form-data; name="file"; filename="a.pdf"
    Content-Type: application/pdf

    < ./files/a.pdf
    --boundary
    name: comment
    content-type: text/plain

    literal value
    --boundary--

File references (lines starting with ``<``) are kept as paths; reading them
is left to whoever sends the request (see build_form_data).
"""

import logging
import random
import re
import string
from pathlib import Path

from pydantic import ValidationError

from reqbook.errors import MultipartFileError
from .base import MultipartBody, MultipartParseResult, MultipartPart

logger = logging.getLogger(__name__)

BOUNDARY_PREFIX = "----WebKitFormBoundary"

BOUNDARY_PATTERN = re.compile(r"boundary=([^;]+)", re.IGNORECASE)
DISPOSITION_NAME_PATTERN = re.compile(r'(?:^|[;\s])name=(?:"([^"]*)"|([^;\s]+))')
DISPOSITION_FILENAME_PATTERN = re.compile(r'(?:^|[;\s])filename=(?:"([^"]*)"|([^;\s]+))')
LINE_SPLIT_PATTERN = re.compile(r"\r?\n")

CONTENT_TYPES = {
    # images
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".svg": "image/svg+xml",
    # documents
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".xls": "application/vnd.ms-excel",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ".ppt": "application/vnd.ms-powerpoint",
    ".pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    # text
    ".txt": "text/plain",
    ".csv": "text/csv",
    ".json": "application/json",
    ".xml": "application/xml",
    ".html": "text/html",
    ".css": "text/css",
    ".js": "application/javascript",
    # archives
    ".zip": "application/zip",
    ".rar": "application/x-rar-compressed",
    ".7z": "application/x-7z-compressed",
    ".tar": "application/x-tar",
    ".gz": "application/gzip",
    # audio / video
    ".mp3": "audio/mpeg",
    ".mp4": "video/mp4",
    ".avi": "video/x-msvideo",
    ".mov": "video/quicktime",
    ".wav": "audio/wav",
}

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class MultipartBodyParser:
    """Parses a multipart body description into a MultipartBody."""

    def parse(self, body: str, boundary: str) -> MultipartParseResult:
        parts: list[MultipartPart] = []
        errors: list[str] = []

        sections = body.split(f"--{boundary}")

        # first section is the preamble, last one the closing "--"
        for index, raw in enumerate(sections[1:-1], start=1):
            section = raw.strip()
            if not section:
                continue
            part = self._parse_part(section)
            if isinstance(part, str):
                message = f"Part {index}: {part}"
                logger.error("Dropping multipart part: %s", message)
                errors.append(message)
                continue
            parts.append(part)

        if not parts:
            return MultipartParseResult(success=False, error="No multipart parts found", errors=errors)

        return MultipartParseResult(
            success=True,
            multipart=MultipartBody(boundary=boundary, parts=parts),
            errors=errors,
        )

    def _parse_part(self, section: str) -> MultipartPart | str:
        """Parse one section, returning the part or an error message."""
        fields: dict[str, str] = {}
        value_lines: list[str] = []
        file_path = None
        headers_done = False

        for line in LINE_SPLIT_PATTERN.split(section):
            stripped = line.strip()

            if not headers_done:
                if not stripped:
                    headers_done = True
                    continue
                self._parse_part_header(stripped, fields)
                continue

            if stripped.startswith("<"):
                file_path = stripped[1:].strip()
            else:
                value_lines.append(line)

        if not fields.get("name"):
            return 'missing required "name" field'

        try:
            return MultipartPart(
                name=fields["name"],
                filename=fields.get("filename"),
                content_type=fields.get("content_type"),
                value=None if file_path else "\n".join(value_lines).strip(),
                file_path=file_path or None,
            )
        except ValidationError as e:
            return str(e)

    def _parse_part_header(self, line: str, fields: dict[str, str]) -> None:
        key, colon, value = line.partition(":")
        if not colon:
            return
        key = key.strip().lower()
        value = value.strip()

        if key == "content-disposition":
            name = DISPOSITION_NAME_PATTERN.search(value)
            if name:
                fields["name"] = name.group(1) if name.group(1) is not None else name.group(2)
            filename = DISPOSITION_FILENAME_PATTERN.search(value)
            if filename:
                fields["filename"] = filename.group(1) if filename.group(1) is not None else filename.group(2)
        elif key == "content-type":
            fields["content_type"] = value
        # simplified syntax
        elif key == "name":
            fields["name"] = value
        elif key == "filename":
            fields["filename"] = value

    @staticmethod
    def extract_boundary(content_type: str) -> str | None:
        """Read the boundary attribute of a Content-Type header, quotes stripped."""
        match = BOUNDARY_PATTERN.search(content_type)
        if not match:
            return None
        boundary = match.group(1).strip().strip("\"'")
        return boundary or None

    @staticmethod
    def generate_boundary() -> str:
        suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=13))
        return f"{BOUNDARY_PREFIX}{suffix}"


def resolve_part_path(file_path: str, workspace_root: Path | None = None) -> Path:
    """Resolve a file reference against the workspace root."""
    path = Path(file_path)
    if path.is_absolute() or workspace_root is None:
        return path
    cleaned = re.sub(r"^\.[\\/]", "", file_path)
    return workspace_root / cleaned


def guess_content_type(path: Path) -> str:
    return CONTENT_TYPES.get(path.suffix.lower(), DEFAULT_CONTENT_TYPE)


def build_form_data(
    multipart: MultipartBody, workspace_root: Path | None = None
) -> tuple[dict[str, str], list[tuple[str, tuple[str, bytes, str]]]]:
    """Materialize parts into ``(data, files)`` in the shape requests accepts.

    Raises:
        MultipartFileError: If a referenced file cannot be read.
    """
    fields: dict[str, str] = {}
    files: list[tuple[str, tuple[str, bytes, str]]] = []

    for part in multipart.parts:
        if not part.is_file:
            fields[part.name] = part.value
            logger.info("Added field to form: %s", part.name)
            continue

        path = resolve_part_path(part.file_path, workspace_root)
        logger.debug("Resolving file path: %s -> %s", part.file_path, path)
        try:
            data = path.read_bytes()
        except OSError as e:
            raise MultipartFileError(
                f"File not found: {part.file_path}",
                details={"part": part.name, "path": str(path), "reason": str(e)},
            ) from e

        files.append(
            (
                part.name,
                (
                    part.filename or path.name,
                    data,
                    part.content_type or guess_content_type(path),
                ),
            )
        )
        logger.info("Added file to form: %s = %s (%d bytes)", part.name, path, len(data))

    return fields, files
