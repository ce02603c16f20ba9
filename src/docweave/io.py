# io.py
"""File I/O: input validation, JSON loading, and timestamped output files."""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from docweave.internals import constants
from docweave.internals.config.define_config import UserConfig
from docweave.internals.run_context import get_pipeline_run_id

log = logging.getLogger("docweave")


# region Path Helpers
def validate_path(user_path: str | Path | None) -> Path:
    """Ensure filepath exists and is a file."""
    pipeline_id = get_pipeline_run_id()
    if user_path is None:
        log.error(f"No input path given. [pipeline:{pipeline_id}]")
        raise ValueError("No input path given.")
    path = Path(user_path)
    if not path.exists():
        log.error(f"File not found: {user_path} [pipeline:{pipeline_id}]")
        raise FileNotFoundError(f"File not found: {user_path}")
    if not path.is_file():
        log.error(f"Path is not a file (might be a directory): {user_path} [pipeline:{pipeline_id}]")
        raise ValueError(f"Path is not a file: {user_path}")
    return path


def validate_docx_path(user_path: str | Path | None) -> Path:
    """Validates the filepath exists and is actually a docx file."""
    path = validate_path(user_path)
    pipeline_id = get_pipeline_run_id()

    if path.suffix.lower() == ".doc":
        log.error(f"Unsupported .doc file: {path} [pipeline:{pipeline_id}]")
        raise ValueError(
            "Only .docx files are supported. Please convert your .doc file to .docx format first."
        )
    if path.suffix.lower() != ".docx":
        log.error(f"Wrong file extension: expected .docx, got {path.suffix} [pipeline:{pipeline_id}]")
        raise ValueError(f"Expected a .docx file, but got: {path.suffix}")
    return path


def validate_json_path(user_path: str | Path | None) -> Path:
    """Validates the filepath exists and is a .json document file."""
    path = validate_path(user_path)
    if path.suffix.lower() != ".json":
        log.error(
            f"Wrong file extension: expected .json, got {path.suffix} [pipeline:{get_pipeline_run_id()}]"
        )
        raise ValueError(f"Expected a .json file, but got: {path.suffix}")
    return path


def _build_timestamped_output_filename(base_filename: str) -> str:
    """'docweave_blocks.json' -> 'docweave_blocks_2025-01-09_14-23-45.json'."""
    timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    name, ext = base_filename.rsplit(".", 1)
    return f"{name}_{timestamp}.{ext}"


# endregion


# region Disk I/O - Read
def load_json(input_filepath: Path) -> dict[str, Any]:
    """Read a saved document. The top level must be a JSON object."""
    pipeline_id = get_pipeline_run_id()
    try:
        with open(input_filepath, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        log.error(f"Invalid JSON in {input_filepath} [pipeline:{pipeline_id}]: {e}")
        raise ValueError(f"File is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        log.error(f"Expected a JSON object in {input_filepath}, got {type(data).__name__} [pipeline:{pipeline_id}]")
        raise ValueError("Document JSON must be an object at the top level.")
    return data


# endregion


# region Disk I/O - Write
def save_text_output(content: str, cfg: UserConfig, base_filename: str) -> Path:
    """Write text to a timestamped file in the configured output folder and return its path."""
    pipeline_id = get_pipeline_run_id()

    save_folder = cfg.get_output_folder()
    save_folder.mkdir(parents=True, exist_ok=True)
    output_filepath = save_folder / _build_timestamped_output_filename(base_filename)

    try:
        output_filepath.write_text(content, encoding="utf-8", newline="\n")
        log.info(f"Successfully saved to {output_filepath}. [pipeline:{pipeline_id}]")
    except PermissionError as e:
        log.error(f"Save failed due to permission error [pipeline:{pipeline_id}]: {e}")
        raise PermissionError("Save failed: File may be open in another program") from e
    except OSError as e:
        log.error(f"Save failed in [pipeline:{pipeline_id}]: {e}")
        raise OSError(f"Save failed (disk space or IO issue): {e}") from e

    return output_filepath


def save_json_output(data: dict[str, Any], cfg: UserConfig, base_filename: str) -> Path:
    """Serialize a document dict (non-ASCII kept as-is) and save it like save_text_output."""
    _validate_content_size(data)
    return save_text_output(json.dumps(data, ensure_ascii=False, indent=2), cfg, base_filename)


def _validate_content_size(data: dict[str, Any]) -> None:
    """Report if the document we're about to save is excessively large."""
    blocks = data.get("blocks") or data.get("content") or []
    if len(blocks) > constants.MAX_EXPECTED_BLOCKS:
        log.warning(
            f"About to save a document with over {constants.MAX_EXPECTED_BLOCKS} top-level blocks ... that seems a bit long!"
        )


# endregion
