import logging
import os
import sys

from pythonjsonlogger.json import JsonFormatter

SERVICE_NAME = "parallel-lives"

# Third-party loggers that are too chatty at INFO
_QUIET_LOGGERS = {
    "httpx": logging.WARNING,
    "aiosqlite": logging.WARNING,
    "uvicorn.access": logging.WARNING,
}


def _make_formatter(json_format: bool) -> logging.Formatter:
    if not json_format:
        return logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    return JsonFormatter(
        fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
        rename_fields={"asctime": "timestamp", "levelname": "level", "name": "logger"},
        static_fields={"service": SERVICE_NAME},
    )


def _open_log_file(log_file: str) -> logging.Handler | None:
    try:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        return logging.FileHandler(log_file, encoding="utf-8")
    except OSError:
        return None


def configure_logging(
    level: str = "INFO", json_format: bool = True, log_file: str = ""
) -> None:
    """Route all logging to stderr, and to log_file when one is given.

    A log file that cannot be opened is reported and skipped; the service
    keeps logging to stderr.
    """
    root = logging.getLogger()
    root.setLevel(level.upper())
    root.handlers.clear()

    formatter = _make_formatter(json_format)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    file_handler = _open_log_file(log_file) if log_file else None
    if file_handler is not None:
        handlers.append(file_handler)

    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    if log_file and file_handler is None:
        logging.getLogger(__name__).warning("Cannot write log file %s, using stderr only", log_file)

    for name, quiet_level in _QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(quiet_level)
