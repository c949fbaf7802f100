import logging
import logging.config
import os
from datetime import datetime
from logging import Logger

from pytz import timezone

LOGGER_NAME = "knowledge_bridge"
LOG_FILE_NAME = "knowledge_bridge.log"
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

ANSI_RESET = "\033[0m"
ANSI_COLORS: dict[str, str] = {
    "cyan": "\033[36m",
    "green": "\033[32m",
    "yellow": "\033[33m",
    "red": "\033[31m",
    "magenta": "\033[35m",
    "blue": "\033[34m",
    "white": "\033[37m",
    "dim": "\033[2m",
}

# prepended to the rendered message, checked from the highest level down
LEVEL_PREFIXES: list[tuple[int, str]] = [
    (logging.ERROR, "⛔ "),
    (logging.WARNING, "⚠️ "),
]


def _is_debug_mode() -> bool:
    return os.getenv("LOG_LEVEL", "info").lower() == "debug"


class PdfWarningFilter(logging.Filter):
    """Drop pypdf's recoverable structure warnings (broken xref tables, wrong pointers).

    Malformed PDFs are common in document folders and pypdf repairs most of them
    while logging one warning per object, which buries the ingestion progress.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith("pypdf") and record.levelno < logging.ERROR:
            return _is_debug_mode()
        return True


class CustomFormatter(logging.Formatter):
    """Renders timestamps in the configured time zone and marks warnings and errors."""

    def __init__(self, tz_name: str, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.tz = timezone(tz_name)

    def formatTime(self, record, datefmt=None):
        moment = datetime.fromtimestamp(record.created, self.tz)
        return moment.strftime(datefmt) if datefmt else moment.isoformat()

    def format(self, record):
        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            # a third-party logger passed arguments that do not fit its template
            message = str(record.msg)

        prefix = next((p for level, p in LEVEL_PREFIXES if record.levelno >= level), "")
        record.msg = prefix + message
        record.args = ()
        return super().format(record)


class ColoredFormatter(CustomFormatter):
    """Console variant that wraps a line in the ANSI color named by the record's ``color`` attribute."""

    def format(self, record) -> str:
        line = super().format(record)
        ansi = ANSI_COLORS.get(getattr(record, "color", None) or "")
        return f"{ansi}{line}{ANSI_RESET}" if ansi and line else line


class ColorLogger:
    """Wraps a :class:`logging.Logger` and accepts ``color=<name>`` on every log call.

    Usage::

        logger.info("Indexed %d chunks", n, color="green")

    Only the console handler renders the color; the log file stays plain.
    """

    def __init__(self, logger: Logger):
        self._logger = logger

    def log(self, level: int, msg, *args, color: str | None = None, **kwargs):
        if color is not None:
            kwargs["extra"] = {**(kwargs.get("extra") or {}), "color": color}
        # report the caller's location, not this wrapper's
        kwargs.setdefault("stacklevel", 3)
        self._logger.log(level, msg, *args, **kwargs)

    def debug(self, msg, *args, color: str | None = None, **kwargs):
        self.log(logging.DEBUG, msg, *args, color=color, **kwargs)

    def info(self, msg, *args, color: str | None = None, **kwargs):
        self.log(logging.INFO, msg, *args, color=color, **kwargs)

    def warning(self, msg, *args, color: str | None = None, **kwargs):
        self.log(logging.WARNING, msg, *args, color=color, **kwargs)

    def error(self, msg, *args, color: str | None = None, **kwargs):
        self.log(logging.ERROR, msg, *args, color=color, **kwargs)

    def critical(self, msg, *args, color: str | None = None, **kwargs):
        self.log(logging.CRITICAL, msg, *args, color=color, **kwargs)

    def exception(self, msg, *args, color: str | None = None, **kwargs):
        kwargs.setdefault("exc_info", True)
        self.log(logging.ERROR, msg, *args, color=color, **kwargs)

    def __getattr__(self, name):
        # setLevel, handlers, isEnabledFor ... come from the wrapped logger
        return getattr(self._logger, name)


def _formatter_config(formatter_class: type, tz_name: str) -> dict:
    return {"()": formatter_class, "format": LOG_FORMAT, "datefmt": DATE_FORMAT, "tz_name": tz_name}


def setup_logging() -> ColorLogger:
    """Configure console logging, plus a plain log file when LOG_DIR is set.

    Reads LOG_LEVEL ("debug" enables debug output), TIMEZONE (default
    Europe/Berlin) and LOG_DIR.

    Returns:
        ColorLogger: The application logger.
    """
    debug_mode = _is_debug_mode()
    level = logging.DEBUG if debug_mode else logging.INFO
    tz_name = os.getenv("TIMEZONE", "Europe/Berlin")
    log_dir = os.getenv("LOG_DIR")

    handlers: dict[str, dict] = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "colored",
            "level": level,
            "stream": "ext://sys.stdout",
            "filters": ["pdf_warnings"],
        },
    }
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        handlers["file"] = {
            "class": "logging.FileHandler",
            "formatter": "plain",
            "level": level,
            "filename": os.path.join(log_dir, LOG_FILE_NAME),
            "encoding": "utf-8",
            "filters": ["pdf_warnings"],
        }

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {"pdf_warnings": {"()": PdfWarningFilter}},
        "formatters": {
            "plain": _formatter_config(CustomFormatter, tz_name),
            "colored": _formatter_config(ColoredFormatter, tz_name),
        },
        "handlers": handlers,
        "root": {"handlers": list(handlers), "level": level},
    })

    # one line per backend request is only useful while debugging
    logging.getLogger("httpx").setLevel(logging.DEBUG if debug_mode else logging.WARNING)

    return ColorLogger(logging.getLogger(LOGGER_NAME))
