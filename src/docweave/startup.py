"""Startup logic run before anything else: console encoding, logging, user folders."""

import logging

from docweave.internals.logger import setup_logger
from docweave.internals.scaffold import ensure_user_scaffold
from docweave.utils import get_debug_mode, setup_console_encoding


# region initialize_application
def initialize_application() -> logging.Logger:
    """Common startup tasks for every entry point."""

    # Must happen before the logger's console handler is created
    setup_console_encoding()

    log = setup_logger(enable_trace=get_debug_mode())
    log.info("Starting docweave Log.")

    log.debug("Checking for existing docweave user folders and scaffolding if needed.")
    ensure_user_scaffold()

    return log


# endregion
