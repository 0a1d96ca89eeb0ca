"""Daily log files.

Every ``wicket.*`` logger (and ``App.log``) writes through the standard
``logging`` module. When ``AppConfig.log_dir`` is set, the app installs
a ``DailyFileHandler`` on the ``wicket`` logger at freeze time::

    logs/2026-10-19.log
        [14:02:11] [WARNING] 404 Not Found: GET /missing
        [14:02:15] [ERROR] Uncaught Exception: boom in app.py:41

Dates and times are taken in the configured timezone, so a file
rolls over at local midnight rather than UTC midnight.
"""

import logging
from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from wicket.errors import ConfigurationError

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
TIME_FORMAT = "%H:%M:%S"


def load_timezone(name: str) -> ZoneInfo:
    """Resolve an IANA timezone name, failing at setup on a bad one."""
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        msg = f"Unknown timezone {name!r} in AppConfig.timezone"
        raise ConfigurationError(msg) from exc


class TimezoneFormatter(logging.Formatter):
    """``[HH:MM:SS] [LEVEL] message`` with the clock read in *tz*."""

    def __init__(self, tz: ZoneInfo) -> None:
        super().__init__(LOG_FORMAT, datefmt=TIME_FORMAT)
        self.tz = tz

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:  # noqa: N802
        return datetime.fromtimestamp(record.created, self.tz).strftime(datefmt or TIME_FORMAT)


class DailyFileHandler(logging.Handler):
    """Append each record to ``<log_dir>/<YYYY-MM-DD>.log``.

    The directory is created on first write. The file is opened per
    record, so rollover needs no timer and several processes can share
    one directory.
    """

    def __init__(self, log_dir: str | Path, timezone: str = "UTC", level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self.log_dir = Path(log_dir)
        self.tz = load_timezone(timezone)
        self.setFormatter(TimezoneFormatter(self.tz))

    def path_for(self, record: logging.LogRecord) -> Path:
        """The file *record* belongs in."""
        day = datetime.fromtimestamp(record.created, self.tz).strftime("%Y-%m-%d")
        return self.log_dir / f"{day}.log"

    def emit(self, record: logging.LogRecord) -> None:
        try:
            line = self.format(record)
            path = self.path_for(record)
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("a", encoding="utf-8") as fh:
                fh.write(line + "\n")
        except Exception:
            self.handleError(record)


def configure_logging(
    log_dir: str | Path | None,
    timezone: str = "UTC",
    *,
    debug: bool = False,
) -> DailyFileHandler | None:
    """Install a ``DailyFileHandler`` on the ``wicket`` logger.

    Returns the installed handler, or ``None`` when *log_dir* is unset.
    Calling again for the same directory reuses the existing handler.
    """
    if log_dir is None:
        return None

    logger = logging.getLogger("wicket")
    target = Path(log_dir)
    for existing in logger.handlers:
        if isinstance(existing, DailyFileHandler) and existing.log_dir == target:
            return existing

    handler = DailyFileHandler(target, timezone)
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    return handler
