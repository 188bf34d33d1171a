"""
Logging configuration for the keyframe engine.

All modules log through the ``keyframe_engine`` logger hierarchy. That
hierarchy is also the diagnostic channel: rejected authoring calls are
reported there as warnings instead of raising.
"""

import functools
import logging
import time
from typing import Optional

ROOT_LOGGER_NAME = "keyframe_engine"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_configured = False


def get_logger(name: str) -> logging.Logger:
    """Get a logger inside the keyframe_engine hierarchy."""
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure the package logger.

    Safe to call more than once; later calls only adjust the level and
    add a file handler if one was not attached yet.

    Args:
        level: Logging level (e.g., logging.DEBUG, logging.INFO)
        log_file: Optional file path for logging output

    Returns:
        The package root logger
    """
    global _configured
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT)

    if not _configured:
        stream = logging.StreamHandler()
        stream.setFormatter(formatter)
        root.addHandler(stream)
        _configured = True

    if log_file and not any(
        isinstance(h, logging.FileHandler) and h.baseFilename.endswith(log_file)
        for h in root.handlers
    ):
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    return root


def log_performance(func):
    """Decorator to log how long a function took, at DEBUG level."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = get_logger(func.__module__)
        start = time.perf_counter()
        result = func(*args, **kwargs)
        elapsed = (time.perf_counter() - start) * 1000
        logger.debug(f"{func.__name__} took {elapsed:.2f}ms")
        return result

    return wrapper


class LogContext:
    """
    Context manager that logs start, end and duration of an operation.

    Usage:
        with LogContext(logger, "bake scene"):
            baker.bake(scene)
    """

    def __init__(self, logger: logging.Logger, operation: str, level: int = logging.INFO):
        self.logger = logger
        self.operation = operation
        self.level = level
        self.start_time = 0.0

    def __enter__(self) -> "LogContext":
        self.start_time = time.perf_counter()
        self.logger.log(self.level, f"Starting {self.operation}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        elapsed = time.perf_counter() - self.start_time
        if exc_type is not None:
            self.logger.error(f"{self.operation} failed after {elapsed:.3f}s: {exc_val}")
        else:
            self.logger.log(self.level, f"Finished {self.operation} in {elapsed:.3f}s")
        return False


__all__ = [
    "ROOT_LOGGER_NAME",
    "get_logger",
    "setup_logging",
    "log_performance",
    "LogContext",
]
