"""Entry point for docweave."""

from __future__ import annotations

import logging

from docweave import startup
from docweave.cli import run as run_cli


def main() -> None:
    """Application entry point.

    Call like:
    ```
    python -m docweave --input-docx contract.docx
    docweave --input-json docweave_blocks.json
    ```
    """
    log: logging.Logger = startup.initialize_application()

    try:
        run_cli()
    except Exception:
        log.exception("Unhandled exception - program crashed.")
        raise


if __name__ == "__main__":
    main()
