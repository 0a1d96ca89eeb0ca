"""Path patterns shared by route dispatch and gate exemptions.

Two dialects compile through one engine:

- ``"exempt"`` — ``*`` matches any run of characters::

      /api/public*   matches /api/public, /api/publicXYZ, /api/public/v1

- ``"route"`` — ``:name`` captures one path segment::

      /hello/:name   matches /hello/World  → ("World",)

Both are anchored at both ends, so a pattern is a full-string match,
never a prefix test: ``/api/public*`` does not match ``/apiXpublic``.
Everything else in the pattern is handed to ``re`` unchanged, so a
malformed pattern fails loudly when it is compiled.
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Literal, TypeAlias

from wicket.errors import ConfigurationError

Dialect: TypeAlias = Literal["exempt", "route"]

_PARAM = re.compile(r":(\w+)")


@dataclass(frozen=True, slots=True)
class PathPattern:
    """A compiled, anchored path pattern.

    Attributes:
        source: The pattern as written.
        dialect: ``"exempt"`` or ``"route"``.
        param_names: Parameter names in occurrence order (route dialect).
    """

    source: str
    dialect: Dialect
    regex: re.Pattern[str]
    param_names: tuple[str, ...] = ()

    def matches(self, path: str) -> bool:
        """True if *path* matches the whole pattern."""
        return self.regex.fullmatch(path) is not None

    def extract(self, path: str) -> tuple[str, ...] | None:
        """Return captured parameters in order, or ``None`` on no match."""
        found = self.regex.fullmatch(path)
        if found is None:
            return None
        return found.groups()


@lru_cache(maxsize=512)
def compile_pattern(pattern: str, dialect: Dialect = "route") -> PathPattern:
    """Compile *pattern* in the given dialect.

    Raises ``ConfigurationError`` if the resulting expression is invalid.
    """
    if dialect == "exempt":
        expression = pattern.replace("*", ".*")
        names: tuple[str, ...] = ()
    elif dialect == "route":
        names = tuple(_PARAM.findall(pattern))
        expression = _PARAM.sub("([^/]+)", pattern)
    else:
        msg = f"Unknown pattern dialect {dialect!r}; expected 'exempt' or 'route'"
        raise ConfigurationError(msg)

    try:
        regex = re.compile(f"^{expression}$")
    except re.error as exc:
        msg = f"Invalid {dialect} pattern {pattern!r}: {exc}"
        raise ConfigurationError(msg) from exc
    return PathPattern(source=pattern, dialect=dialect, regex=regex, param_names=names)


def compile_exemptions(patterns: tuple[str, ...]) -> tuple[PathPattern, ...]:
    """Compile a gate's exemption list up front."""
    return tuple(compile_pattern(p, "exempt") for p in patterns)


def is_exempt(path: str, exemptions: tuple[PathPattern, ...]) -> bool:
    """True if *path* matches any compiled exemption."""
    return any(rule.matches(path) for rule in exemptions)


def normalize_path(path: str) -> str:
    """Strip one trailing slash, except from the root path."""
    if path != "/" and path.endswith("/"):
        return path[:-1]
    return path or "/"
