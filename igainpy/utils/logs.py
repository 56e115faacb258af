"""Utilities for logging"""
from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler

DEFAULT_LOG_LEVEL = logging.INFO
DEFAULT_LOG_FORMATTER = "\n%(asctime)s: %(levelname)s: %(filename)s:%(lineno)s::%(module)s::%(funcName)s:\n%(message)s"
DEFAULT_LOG_DATETIME = "%y-%m-%d %H:%M:%S"
DEFAULT_LOG_MAXBYTES = int(2e6)  # 2MB


def setup_logging(
    log_filename: str | None = None,
    max_bytes: int = DEFAULT_LOG_MAXBYTES,
    log_level: int = DEFAULT_LOG_LEVEL,
    delete_previous_logs: bool = False,
    log_stdout: bool = True,
    log_format_string: str | None = None,
) -> None:
    r"""Setup logging and handlers with default settings.

    Arguments
    ---------
    log_filename : str | None
        Path and name of the log file; no file handler is made when None.
    max_bytes : int
        Maximum size of the log file in bytes before it is rotated.
    log_level : int
        Log level to track, as defined by stdlib logging.
    delete_previous_logs : bool
        If True, remove an existing log file before writing.
    log_stdout : bool
        If True, also write the logs to stdout.
    log_format_string : str | None
        Logging format; defaults to DEFAULT_LOG_FORMATTER.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    formatter = logging.Formatter(log_format_string or DEFAULT_LOG_FORMATTER, DEFAULT_LOG_DATETIME)
    handlers: list[logging.Handler] = []
    if log_filename is not None:
        log_dir, _ = os.path.split(log_filename)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        if delete_previous_logs and os.path.exists(log_filename):
            os.remove(log_filename)
        handlers.append(RotatingFileHandler(log_filename, mode="a", maxBytes=max_bytes))
    if log_stdout:
        handlers.append(logging.StreamHandler(sys.stdout))
    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)


def close_logging(delete_logs: bool = False) -> None:
    r"""Close and remove every handler on the root logger.

    Arguments
    ---------
    delete_logs : bool
        If True, delete the files written by file handlers.
    """
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        handler.close()
        root_logger.removeHandler(handler)
        if delete_logs and isinstance(handler, logging.FileHandler) and os.path.exists(handler.baseFilename):
            os.remove(handler.baseFilename)
