"""Request body form parsing — URL-encoded and multipart.

URL-encoded bodies use stdlib ``urllib.parse``. Multipart bodies need
``python-multipart`` (``pip install wicket[forms]``); it is imported on
first use so JSON-only apps never pay for it.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import parse_qs

from wicket.errors import ConfigurationError
from wicket.http.query import MultiValueDict

FORM_CONTENT_TYPES: frozenset[str] = frozenset(
    {"application/x-www-form-urlencoded", "multipart/form-data"}
)


@dataclass(frozen=True, slots=True)
class UploadFile:
    """A file part from a multipart submission, held in memory."""

    filename: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


class FormData(MultiValueDict):
    """Parsed form fields plus any uploaded files.

    Usage::

        message = ctx.form.get("message", "")
        avatar = ctx.form.files.get("avatar")  # UploadFile or None
    """

    __slots__ = ("files",)

    def __init__(
        self,
        data: Mapping[str, list[str]] | None = None,
        files: Mapping[str, UploadFile] | None = None,
    ) -> None:
        super().__init__(data)
        object.__setattr__(self, "files", dict(files or {}))


def media_type(content_type: str | None) -> str:
    """Return the bare, lower-cased media type of a Content-Type value."""
    return (content_type or "").split(";", 1)[0].strip().lower()


def is_form_content_type(content_type: str | None) -> bool:
    return media_type(content_type) in FORM_CONTENT_TYPES


def parse_form_data(body: bytes, content_type: str) -> FormData:
    """Parse a form body into ``FormData``.

    Raises:
        ValueError: If *content_type* is not a form encoding, or a
            multipart body has no boundary.
        ConfigurationError: If a multipart body arrives and
            ``python-multipart`` is not installed.
    """
    kind = media_type(content_type)
    if kind == "application/x-www-form-urlencoded":
        return FormData(parse_qs(body.decode("utf-8", errors="replace"), keep_blank_values=True))
    if kind == "multipart/form-data":
        return _parse_multipart(body, content_type)
    msg = f"Unsupported form content type: {content_type!r}"
    raise ValueError(msg)


def _parse_multipart(body: bytes, content_type: str) -> FormData:
    try:
        from python_multipart.multipart import MultipartParser, parse_options_header
    except ImportError:
        msg = (
            "Multipart form parsing requires the 'python-multipart' package. "
            "Install it with: pip install wicket[forms]"
        )
        raise ConfigurationError(msg) from None

    _, options = parse_options_header(content_type)
    boundary = options.get(b"boundary")
    if not boundary:
        msg = "Multipart form data missing boundary parameter"
        raise ValueError(msg)

    fields: dict[str, list[str]] = {}
    files: dict[str, UploadFile] = {}

    # Per-part parser state, reset by on_part_begin
    part: dict[str, Any] = {}

    def on_part_begin() -> None:
        part.clear()
        part.update(headers={}, field=bytearray(), value=bytearray(), data=bytearray())

    def on_header_field(chunk: bytes, start: int, end: int) -> None:
        part["field"].extend(chunk[start:end])

    def on_header_value(chunk: bytes, start: int, end: int) -> None:
        part["value"].extend(chunk[start:end])

    def on_header_end() -> None:
        name = bytes(part["field"]).decode("latin-1").lower()
        part["headers"][name] = bytes(part["value"]).decode("latin-1")
        part["field"] = bytearray()
        part["value"] = bytearray()

    def on_part_data(chunk: bytes, start: int, end: int) -> None:
        part["data"].extend(chunk[start:end])

    def on_part_end() -> None:
        disposition = part["headers"].get("content-disposition", "")
        _, params = parse_options_header(disposition)
        name = params.get(b"name")
        if name is None:
            return
        field_name = name.decode("utf-8")
        filename = params.get(b"filename")
        if filename is not None:
            files[field_name] = UploadFile(
                filename=filename.decode("utf-8"),
                content_type=part["headers"].get("content-type", "application/octet-stream"),
                content=bytes(part["data"]),
            )
        else:
            value = bytes(part["data"]).decode("utf-8", errors="replace")
            fields.setdefault(field_name, []).append(value)

    parser = MultipartParser(
        boundary,
        {
            "on_part_begin": on_part_begin,
            "on_header_field": on_header_field,
            "on_header_value": on_header_value,
            "on_header_end": on_header_end,
            "on_part_data": on_part_data,
            "on_part_end": on_part_end,
        },
    )
    parser.write(body)
    parser.finalize()
    return FormData(fields, files)
