"""Async logging configuration using QueueHandler

Log records are handed to a background thread so that tool calls never
block on stderr or file I/O. stdout is left alone: the stdio transport
owns it.
"""

import logging
import logging.handlers
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from queue import Queue

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"
LOG_DATEFMT = "%Y/%m/%d %H:%M:%S"

# Loggers pinned at INFO when the server runs at DEBUG
NOISY_LOGGERS = ("httpx", "httpcore", "sse_starlette.sse", "mcp.server.sse")


class MillisecondFormatter(logging.Formatter):
    """Formatter with sub-second precision as :XXXX"""

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:  # noqa: N802
        ct = datetime.fromtimestamp(record.created, tz=timezone.utc)
        if datefmt:
            s = ct.strftime(datefmt)
            ms = int((record.created % 1) * 10000)  # 4 digits of precision
            return f"{s}:{ms:04d}"
        return super().formatTime(record, datefmt)


def get_log_level(env: dict[str, str] | None = None) -> int:
    """Level from IBEX35_LOG_LEVEL (name or number), INFO when unset"""
    if env is None:
        env = dict(os.environ)
    raw = env.get("IBEX35_LOG_LEVEL", "INFO").strip().upper()
    if raw.isdigit():
        return int(raw)
    level = logging.getLevelName(raw)
    if not isinstance(level, int):
        msg = f"Invalid IBEX35_LOG_LEVEL value: {raw}"
        raise ValueError(msg)
    return level


def get_log_file(env: dict[str, str] | None = None) -> Path | None:
    if env is None:
        env = dict(os.environ)
    raw = env.get("IBEX35_LOG_FILE")
    return Path(raw) if raw else None


class AsyncLoggingManager:
    """Manages async logging state without using global variables"""

    def __init__(self) -> None:
        self.log_queue: Queue[logging.LogRecord] = Queue(-1)
        self.queue_handler: logging.handlers.QueueHandler | None = None
        self.listener: logging.handlers.QueueListener | None = None

    def setup(self, log_file: Path | None = None, level: int = logging.INFO) -> None:
        """Set up async logging with QueueHandler and QueueListener

        Call once at server startup.

        Args:
            log_file: Optional path to log file. If None, only logs to stderr.
            level: Logging level (default: INFO)
        """
        formatter = MillisecondFormatter(LOG_FORMAT, datefmt=LOG_DATEFMT)
        handlers: list[logging.Handler] = []

        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

        if log_file is not None:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(formatter)
            handlers.append(file_handler)

        self.listener = logging.handlers.QueueListener(
            self.log_queue, *handlers, respect_handler_level=True
        )
        self.listener.start()

        self.queue_handler = logging.handlers.QueueHandler(self.log_queue)

        root = logging.getLogger()
        root.setLevel(level)
        root.handlers.clear()
        root.addHandler(self.queue_handler)

        if level < logging.INFO:
            for name in NOISY_LOGGERS:
                logging.getLogger(name).setLevel(logging.INFO)

    def shutdown(self) -> None:
        """Flush queued records and stop the listener thread"""
        if self.listener is not None:
            self.listener.stop()
            self.listener = None
        if self.queue_handler is not None:
            logging.getLogger().removeHandler(self.queue_handler)
            self.queue_handler = None


# Singleton instance
_manager = AsyncLoggingManager()


def setup_async_logging(log_file: Path | None = None, level: int | None = None) -> None:
    """Set up async logging; level and file default to IBEX35_LOG_LEVEL / IBEX35_LOG_FILE"""
    _manager.setup(
        log_file if log_file is not None else get_log_file(),
        level if level is not None else get_log_level(),
    )


def shutdown_async_logging() -> None:
    _manager.shutdown()


def get_logger(name: str) -> logging.Logger:
    """Get a logger configured for async logging

    Args:
        name: Logger name (usually __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
