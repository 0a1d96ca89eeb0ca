"""Application configuration.

Every config object is a frozen dataclass — immutable after creation,
IDE-autocompletable, no string-key dict lookups. Build one at process
start and hand it to ``App``::

    config = AppConfig(
        debug=True,
        security=SecurityConfig(
            csrf=CSRFConfig(exempt=("/api/public*",)),
            bearer=BearerConfig(enabled=True, tokens=("secret-token-123",)),
        ),
    )

Or merge nested overrides over the defaults::

    config = AppConfig.from_mapping({
        "debug": True,
        "security": {"bearer": {"enabled": True, "tokens": ["secret-token-123"]}},
    })
"""

import dataclasses
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Self, TypeVar

from wicket.errors import ConfigurationError


def _as_tuple(owner: object, name: str) -> None:
    """Coerce a list/set field to a tuple in place; reject bare strings."""
    value = getattr(owner, name)
    if isinstance(value, tuple):
        return
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        msg = (
            f"{type(owner).__name__}.{name} must be a sequence of strings, "
            f"got {type(value).__name__}: {value!r}"
        )
        raise ConfigurationError(msg)
    object.__setattr__(owner, name, tuple(value))


@dataclass(frozen=True, slots=True)
class CSRFConfig:
    """CSRF gate configuration.

    Attributes:
        enabled: Validate tokens on unsafe methods.
        field_name: Form field carrying the submitted token.
        header_name: Header checked when the form field is absent.
        session_key: Session key holding the per-session token.
        token_length: Random bytes per token (hex-encoded, so 32 → 64 chars).
        exempt: Path patterns (``*`` wildcard) that skip validation.
    """

    enabled: bool = True
    field_name: str = "csrf_token"
    header_name: str = "X-CSRF-Token"
    session_key: str = "csrf_token"
    token_length: int = 32
    exempt: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        _as_tuple(self, "exempt")


@dataclass(frozen=True, slots=True)
class BearerConfig:
    """Bearer-token gate configuration.

    Attributes:
        enabled: Require a token on every non-exempt path.
        tokens: Accepted shared-secret tokens.
        exempt: Path patterns (``*`` wildcard) reachable without a token.
        header_name: Header carrying the credential.
        scheme: Scheme prefix, matched case-insensitively.
    """

    enabled: bool = False
    tokens: tuple[str, ...] = ()
    exempt: tuple[str, ...] = ()
    header_name: str = "Authorization"
    scheme: str = "Bearer"

    def __post_init__(self) -> None:
        _as_tuple(self, "tokens")
        _as_tuple(self, "exempt")


@dataclass(frozen=True, slots=True)
class CORSConfig:
    """CORS gate configuration.

    Nothing is allowed by default. ``allowed_origins=("*",)`` reflects
    the caller's ``Origin`` back (or sends ``*`` when there is none).
    """

    enabled: bool = False
    allowed_origins: tuple[str, ...] = ()
    exempt: tuple[str, ...] = ()
    allow_methods: tuple[str, ...] = ("GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS")
    allow_headers: tuple[str, ...] = (
        "Content-Type",
        "Authorization",
        "X-Requested-With",
        "X-API-KEY",
    )
    max_age: int = 86400  # 1 day

    def __post_init__(self) -> None:
        _as_tuple(self, "allowed_origins")
        _as_tuple(self, "exempt")
        _as_tuple(self, "allow_methods")
        _as_tuple(self, "allow_headers")


@dataclass(frozen=True, slots=True)
class SecurityConfig:
    """The gate chain's switches and rule sets."""

    headers_enabled: bool = True
    csrf: CSRFConfig = field(default_factory=CSRFConfig)
    bearer: BearerConfig = field(default_factory=BearerConfig)
    cors: CORSConfig = field(default_factory=CORSConfig)


@dataclass(frozen=True, slots=True)
class SessionConfig:
    """Session cookie settings shared by both session stores."""

    cookie_name: str = "wicket_session"
    max_age: int = 86400  # 24 hours
    path: str = "/"
    domain: str | None = None
    secure: bool = False
    httponly: bool = True
    samesite: str = "lax"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    """Credentials for the lazily opened database connection.

    ``url`` selects the driver: ``sqlite:///path.db`` (stdlib) or
    ``postgresql://host/db`` (``asyncpg``). ``options`` is passed through
    to the driver's connect call untouched.
    """

    url: str
    username: str = ""
    password: str = ""
    options: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(debug=True, secret_key="s3cr3t", log_dir="logs")
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False

    # Sessions: signed cookies when set, in-memory store otherwise
    secret_key: str = ""
    session: SessionConfig = field(default_factory=SessionConfig)

    # Logging
    log_dir: str | Path | None = None
    timezone: str = "UTC"

    # Maintenance mode
    maintenance_file: str | Path | None = ".maintenance"
    maintenance_page: str | Path | None = "maintenance.html"

    # Gates
    security: SecurityConfig = field(default_factory=SecurityConfig)

    # Database
    db: DatabaseConfig | None = None

    @classmethod
    def from_mapping(cls, overrides: Mapping[str, Any]) -> Self:
        """Build a config by merging nested *overrides* over the defaults.

        Nested dicts merge into nested config objects; lists become
        tuples. Unknown keys raise ``ConfigurationError``.
        """
        return _merge(cls(), overrides)


T = TypeVar("T")


def _merge(base: T, overrides: Mapping[str, Any]) -> T:
    known = {f.name for f in dataclasses.fields(base)}  # type: ignore[arg-type]
    changes: dict[str, Any] = {}
    for key, value in overrides.items():
        if key not in known:
            msg = f"Unknown {type(base).__name__} option {key!r}. Valid options: {sorted(known)}"
            raise ConfigurationError(msg)
        current = getattr(base, key)
        if isinstance(value, Mapping) and dataclasses.is_dataclass(current):
            changes[key] = _merge(current, value)
        elif key == "db" and isinstance(value, Mapping):
            try:
                changes[key] = DatabaseConfig(**value)
            except TypeError as exc:
                msg = f"Invalid database options: {exc}"
                raise ConfigurationError(msg) from exc
        else:
            changes[key] = value
    return dataclasses.replace(base, **changes)  # type: ignore[type-var]
