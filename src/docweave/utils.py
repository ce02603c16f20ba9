"""Utilities for use across the entire program."""

import io
import logging
import os
import platform
import sys

from docweave.internals import constants

log = logging.getLogger("docweave")

DEBUG_ENV_VAR = "DOCWEAVE_DEBUG"


# region setup_console_encoding
def setup_console_encoding() -> None:
    """Use UTF-8 for the Windows console so CJK text in log lines doesn't raise UnicodeEncodeError."""
    if platform.system() == "Windows":
        sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding="utf-8")


# endregion


# region get_debug_mode
def get_debug_mode() -> bool:
    """DOCWEAVE_DEBUG if it holds a valid boolean, else the built-in default."""
    env_debug_str = os.environ.get(DEBUG_ENV_VAR)
    if env_debug_str is not None:
        try:
            return str_to_bool(env_debug_str)
        except ValueError:
            log.warning(f"Invalid value for {DEBUG_ENV_VAR} env var: '{env_debug_str}'. Using default.")

    return constants.DEBUG_MODE_DEFAULT


# endregion


# region str_to_bool
def str_to_bool(value: str) -> bool:
    """Convert strings like "True"/"no" to booleans"""
    if value.lower().strip() in {"false", "f", "0", "no", "n"}:
        return False
    elif value.lower().strip() in {"true", "t", "1", "yes", "y"}:
        return True
    else:
        log.warning(f"{value} is not a valid boolean value.")
        raise ValueError(f"{value} is not a valid boolean value.")


# endregion
