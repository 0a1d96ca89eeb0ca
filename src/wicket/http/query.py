"""Multi-valued string mappings: query strings and form fields.

``MultiValueDict`` is the shared read-only shape; ``QueryParams`` keeps
the raw query string around for URL reconstruction.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from urllib.parse import parse_qs


class MultiValueDict(Mapping[str, str]):
    """Read-only mapping where a key can carry several values.

    ``__getitem__`` returns the first value for a key.
    ``get_list`` returns all of them.
    """

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[str, list[str]] | None = None) -> None:
        object.__setattr__(self, "_data", {k: list(v) for k, v in (data or {}).items()})

    def __getitem__(self, key: str) -> str:
        return self._data[key][0]

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._data!r})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        """Return the first value for *key*, or *default* if missing."""
        values = self._data.get(key)
        return values[0] if values else default

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key*."""
        return list(self._data.get(key, ()))


class QueryParams(MultiValueDict):
    """Parsed query string.

    Attributes:
        raw: The query string exactly as received (without ``?``).
    """

    __slots__ = ("raw",)

    def __init__(self, query_string: bytes = b"") -> None:
        text = query_string.decode("latin-1")
        super().__init__(parse_qs(text, keep_blank_values=True))
        object.__setattr__(self, "raw", text)
