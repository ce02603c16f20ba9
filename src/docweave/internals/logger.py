"""Logging setup: console plus file handlers, with the session id on every line."""

import logging

from docweave.internals.paths import user_log_dir_path
from docweave.internals.run_context import get_session_id

LOG_FILENAME = "docweave.log"
TRACE_LOG_FILENAME = "trace_docweave.log"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logger(
    name: str = "docweave",
    level: int = logging.DEBUG,
    enable_trace: bool = False,
) -> logging.Logger:
    """
    Configure the package logger.

    Console gets INFO and above; ~/Documents/docweave/logs/docweave.log gets
    everything. Calling this again returns the already-configured logger.

    Args:
        name: Logger name
        level: Minimum level accepted by the logger itself
        enable_trace: Also write a trace log with file/function/line info

    Example:
        >>> log = setup_logger()
        >>> log.info("Converting report.docx")
        2025-01-09 14:23:45 [INFO] Converting report.docx [run:a1b2c3d4]
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logger.setLevel(level)
    # Keep third-party library logs out of ours
    logger.propagate = False

    session_id = get_session_id()
    formatter = logging.Formatter(
        f"%(asctime)s [%(levelname)s] %(message)s [run:{session_id}]",
        datefmt=DATE_FORMAT,
    )

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(logging.INFO)
    logger.addHandler(console_handler)

    log_file = user_log_dir_path() / LOG_FILENAME
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setFormatter(formatter)
    file_handler.setLevel(logging.DEBUG)
    logger.addHandler(file_handler)

    if enable_trace:
        trace_formatter = logging.Formatter(
            f"%(filename)s: %(funcName)s(), Line: %(lineno)d: - [%(levelname)s] "
            f"%(asctime)s - %(message)s -- [run={session_id}]",
            datefmt=DATE_FORMAT,
        )
        trace_handler = logging.FileHandler(
            user_log_dir_path() / TRACE_LOG_FILENAME, encoding="utf-8"
        )
        trace_handler.setFormatter(trace_formatter)
        trace_handler.setLevel(logging.DEBUG)
        logger.addHandler(trace_handler)

    logger.info(f"Logger initialized. Writing to {log_file}")
    return logger
