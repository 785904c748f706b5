"""
Process-wide logging.

All application modules log through the single "cyberguard" logger. Records
are written to the console and to LOG_DIR/<YYYY-MM-DD>/, either one file per
business area (chat.log, provider.log, admin.log, ...) or a single app.log.
Uvicorn's access and server logs get their own files in the same folder.
"""

import datetime
import logging
import shutil
from pathlib import Path
from typing import Callable, TextIO
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .settings import settings

LOGGER_NAME = "cyberguard"

_LOGGING_CONFIGURED = False

# Call-site path fragment -> business bucket. First match wins.
_BUSINESS_BY_PATH: tuple[tuple[str, str], ...] = (
    ("/cyberguard/api/chat_routes.py", "chat"),
    ("/cyberguard/services/chat_service.py", "chat"),
    ("/cyberguard/services/chat_orchestrator.py", "provider"),
    ("/cyberguard/provider/", "provider"),
    ("/cyberguard/api/admin_routes.py", "admin"),
    ("/cyberguard/admin_auth.py", "admin"),
    ("/cyberguard/services/admin_token_service.py", "admin"),
    ("/cyberguard/services/log_search_service.py", "admin"),
    ("/cyberguard/api/session_routes.py", "session"),
    ("/cyberguard/services/session_service.py", "session"),
    ("/cyberguard/db/", "db"),
)


def _resolve_tzinfo(timezone_name: str | None) -> datetime.tzinfo:
    if timezone_name:
        try:
            return ZoneInfo(timezone_name)
        except ZoneInfoNotFoundError:
            pass
    return datetime.datetime.now().astimezone().tzinfo or datetime.UTC


class LocalTimezoneFormatter(logging.Formatter):
    """Formatter whose %(asctime)s is rendered in LOG_TIMEZONE (or local time)."""

    def __init__(self, *args, timezone_name: str | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self._tzinfo = _resolve_tzinfo(timezone_name)

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        stamp = datetime.datetime.fromtimestamp(record.created, tz=self._tzinfo)
        return stamp.strftime(datefmt) if datefmt else stamp.isoformat(timespec="milliseconds")


def _resolve_log_dir(value: str | Path) -> Path:
    path = Path(value)
    if path.is_absolute():
        return path
    # Relative LOG_DIR is anchored at the repository root.
    return Path(__file__).resolve().parents[1] / path


def infer_log_business(record: logging.LogRecord) -> str:
    """Business bucket for a record: uvicorn by logger name, the rest by call site."""
    name = record.name or ""
    if name.startswith("uvicorn.access"):
        return "access"
    if name.startswith("uvicorn"):
        return "server"

    path = (record.pathname or "").replace("\\", "/")
    for fragment, business in _BUSINESS_BY_PATH:
        if fragment in path:
            return business
    return "app"


def prune_day_folders(log_dir: Path, keep: int) -> list[Path]:
    """Delete all but the newest `keep` YYYY-MM-DD folders; other entries are left alone."""
    if keep <= 0 or not log_dir.is_dir():
        return []

    days: list[tuple[datetime.date, Path]] = []
    for entry in log_dir.iterdir():
        if not entry.is_dir():
            continue
        try:
            days.append((datetime.date.fromisoformat(entry.name), entry))
        except ValueError:
            continue

    days.sort()
    removed = [path for _, path in days[: max(len(days) - keep, 0)]]
    for path in removed:
        shutil.rmtree(path, ignore_errors=True)
    return removed


class DayFolderHandler(logging.Handler):
    """
    Base handler writing into <log_dir>/<YYYY-MM-DD>/<file>.

    Subclasses choose the file per record. Streams are reopened whenever the
    local date changes, and old day folders are pruned at that moment.
    """

    terminator = "\n"

    def __init__(
        self,
        log_dir: Path,
        backup_days: int = 7,
        encoding: str = "utf-8",
        timezone_name: str | None = None,
        now_fn: Callable[[], datetime.datetime] | None = None,
    ) -> None:
        super().__init__()
        self.log_dir = Path(log_dir)
        self.backup_days = backup_days
        self.encoding = encoding
        self._tzinfo = _resolve_tzinfo(timezone_name)
        self._now_fn = now_fn
        self._day: datetime.date | None = None
        self._streams: dict[str, TextIO] = {}
        self._roll_if_needed()

    def filename_for(self, record: logging.LogRecord) -> str:
        raise NotImplementedError

    def _today(self) -> datetime.date:
        now = self._now_fn() if self._now_fn is not None else datetime.datetime.now(tz=self._tzinfo)
        if now.tzinfo is None:
            now = now.replace(tzinfo=self._tzinfo)
        return now.date()

    @property
    def day_dir(self) -> Path:
        assert self._day is not None
        return self.log_dir / self._day.isoformat()

    def _roll_if_needed(self) -> None:
        today = self._today()
        if today == self._day:
            return
        self._close_streams()
        self._day = today
        self.day_dir.mkdir(parents=True, exist_ok=True)
        prune_day_folders(self.log_dir, self.backup_days)

    def _stream(self, filename: str) -> TextIO:
        stream = self._streams.get(filename)
        if stream is None:
            stream = open(self.day_dir / filename, "a", encoding=self.encoding)
            self._streams[filename] = stream
        return stream

    def _close_streams(self) -> None:
        for stream in self._streams.values():
            try:
                stream.close()
            except OSError:
                pass
        self._streams.clear()

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self._roll_if_needed()
            filename = self.filename_for(record)
            stream = self._stream(filename)
            stream.write(self.format(record) + self.terminator)
            stream.flush()
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        try:
            self._close_streams()
        finally:
            super().close()


class DailyFolderFileHandler(DayFolderHandler):
    """Everything into one named file per day, e.g. access.log."""

    def __init__(self, log_dir: Path, filename: str, **kwargs) -> None:
        self.filename = filename
        super().__init__(log_dir, **kwargs)

    def filename_for(self, record: logging.LogRecord) -> str:
        return self.filename


class DailyFolderBusinessFileHandler(DayFolderHandler):
    """One file per business bucket per day: chat.log, provider.log, admin.log, ..."""

    def filename_for(self, record: logging.LogRecord) -> str:
        biz = infer_log_business(record)
        record.biz = biz
        safe = "".join(c if (c.isalnum() or c in "-_") else "_" for c in biz)
        return f"{safe}.log"


class EnsureBizFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
        if not hasattr(record, "biz"):
            record.biz = infer_log_business(record)
        return True


class FixedBizFilter(logging.Filter):
    def __init__(self, biz: str) -> None:
        super().__init__()
        self._biz = biz

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
        record.biz = self._biz
        return True


def _attach(
    logger_name: str,
    handler: logging.Handler,
    formatter: logging.Formatter,
    level: int,
    *filters,
) -> None:
    handler.setFormatter(formatter)
    for flt in filters:
        handler.addFilter(flt)
    target = logging.getLogger(logger_name)
    target.setLevel(level)
    target.addHandler(handler)


def setup_logging() -> None:
    """
    Configure console + day-folder logging once per process.

    LOG_SPLIT_BY_BUSINESS=false collapses the application files into app.log.
    """
    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED:
        return

    log_dir = _resolve_log_dir(settings.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    level = getattr(logging, str(settings.log_level).upper(), logging.INFO)
    tz_name = settings.log_timezone
    day_kwargs = {"backup_days": settings.log_backup_days, "timezone_name": tz_name}
    formatter = LocalTimezoneFormatter(
        "%(asctime)s [%(levelname)s] [%(biz)s] %(name)s - %(message)s",
        timezone_name=tz_name,
    )

    if settings.log_split_by_business:
        app_handler: logging.Handler = DailyFolderBusinessFileHandler(log_dir, **day_kwargs)
    else:
        app_handler = DailyFolderFileHandler(log_dir, "app.log", **day_kwargs)
    _attach(
        LOGGER_NAME,
        app_handler,
        formatter,
        level,
        EnsureBizFilter(),
        lambda record: record.name.startswith(LOGGER_NAME),
    )
    # Console output for application records comes from the root handler.
    logging.getLogger(LOGGER_NAME).propagate = True

    _attach(
        "uvicorn.access",
        DailyFolderFileHandler(log_dir, "access.log", **day_kwargs),
        formatter,
        level,
        FixedBizFilter("access"),
    )
    _attach(
        "uvicorn",
        DailyFolderFileHandler(log_dir, "server.log", **day_kwargs),
        formatter,
        level,
        FixedBizFilter("server"),
        lambda record: not (record.name or "").startswith("uvicorn.access"),
    )

    root = logging.getLogger()
    root.setLevel(level)
    if not any(type(h) is logging.StreamHandler for h in root.handlers):
        console = logging.StreamHandler()
        console.setFormatter(formatter)
        console.addFilter(EnsureBizFilter())
        root.addHandler(console)

    _LOGGING_CONFIGURED = True


logger = logging.getLogger(LOGGER_NAME)
