# internals/config/define_config.py
"""User configuration dataclass, validation, and the conversion options derived from it."""

# region imports
from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import asdict, dataclass, fields
from enum import Enum
from pathlib import Path
from typing import Any, Optional

import tomli_w

from docweave.internals.paths import user_base_dir, user_input_dir, user_output_dir

log = logging.getLogger("docweave")
# endregion


# region Enums
class PipelineDirection(Enum):
    """Pipeline direction choices"""

    DOCX_TO_EDITOR = "docx2editor"
    EDITOR_TO_WORDXML = "editor2wordxml"


class DocumentModel(Enum):
    """Which internal document model a pipeline produces or consumes."""

    BLOCKS = "blocks"
    NODES = "nodes"


ENUM_FIELDS: dict[str, type[Enum]] = {
    "direction": PipelineDirection,
    "model": DocumentModel,
}

PATH_FIELDS = ("input_docx", "input_json", "output_folder")

BOOL_FIELDS = (
    "write_html",
    "extract_comments",
    "infer_headings",
    "preserve_run_formatting",
    "split_line_breaks",
)
# endregion


# region class UserConfig
@dataclass
class UserConfig:
    """All user-configurable settings for docweave."""

    # region define fields
    # Paths are kept as strings; convert to Path only when used.
    input_docx: Optional[str] = None  # Word document to import
    input_json: Optional[str] = None  # Saved block/node document to export
    output_folder: Optional[str] = None

    direction: PipelineDirection = PipelineDirection.DOCX_TO_EDITOR
    model: DocumentModel = DocumentModel.BLOCKS

    # Also write an HTML rendering of imported block documents
    write_html: bool = True
    extract_comments: bool = True
    # Promote unstyled, title-like paragraphs to headers
    infer_headings: bool = True
    # Keep per-run formatting as inline HTML inside block text
    preserve_run_formatting: bool = True
    # Split paragraphs containing line breaks into one block per line
    split_line_breaks: bool = True
    # endregion

    # region path helpers
    def _resolve_path(self, raw: str) -> Path:
        """Expand ~ and ${VARS}; relative paths resolve against the user base dir."""
        expanded = os.path.expandvars(raw)
        p = Path(expanded).expanduser()
        if p.is_absolute():
            return p.resolve()
        return (user_base_dir() / p).resolve()

    def _make_path_relative(self, path_str: str | None) -> str | None:
        """Paths under the user base dir are saved relative to it, everything else absolute."""
        if path_str is None:
            return None
        abs_path = self._resolve_path(path_str)
        try:
            return str(abs_path.relative_to(user_base_dir())).replace("\\", "/")
        except ValueError:
            return str(abs_path).replace("\\", "/")

    def get_input_docx_file(self) -> Path | None:
        return self._resolve_path(self.input_docx) if self.input_docx else None

    def get_input_json_file(self) -> Path | None:
        return self._resolve_path(self.input_json) if self.input_json else None

    def get_input_file(self) -> Path | None:
        """The input for the configured direction."""
        if self.direction == PipelineDirection.DOCX_TO_EDITOR:
            return self.get_input_docx_file()
        return self.get_input_json_file()

    def get_output_folder(self) -> Path:
        if self.output_folder:
            return self._resolve_path(self.output_folder)
        return user_output_dir()

    # endregion

    # region constructors
    @classmethod
    def with_defaults(cls) -> UserConfig:
        """Config pointing at the sample document in the user input folder."""
        cfg = cls()
        cfg.input_docx = str(user_input_dir() / "sample_doc.docx")
        return cfg

    @classmethod
    def from_toml(cls, path: Path) -> UserConfig:
        """
        Load configuration from a TOML file of flat key/value pairs named after the fields.

        Example TOML:
            input_docx = "~/contract.docx"
            direction = "docx2editor"
            model = "blocks"
            infer_headings = false

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the TOML is malformed or holds unknown keys / enum values
        """
        if not path.exists():
            log.error(f"Config file not found: {path}")
            raise FileNotFoundError(f"Config file not found: {path}")

        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            error_msg = f"Invalid TOML syntax in {path}"
            log.error(error_msg)
            raise ValueError(error_msg) from e

        if not data:
            log.warning(f"Config toml file is empty: {path}. Using all defaults.")

        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            error_msg = f"Unknown config keys in {path}: {sorted(unknown)}"
            log.error(error_msg)
            raise ValueError(error_msg)

        for name, enum_cls in ENUM_FIELDS.items():
            if name in data:
                try:
                    data[name] = enum_cls(data[name])
                except ValueError as e:
                    error_msg = (
                        f"Invalid {name}: '{data[name]}'. "
                        f"Valid options: {[member.value for member in enum_cls]}"
                    )
                    log.error(error_msg)
                    raise ValueError(error_msg) from e

        return cls(**data)

    # endregion

    # region serialization
    def config_to_dict(self) -> dict[str, Any]:
        """Plain-type dict of all fields (enums as values), None values kept."""
        data = asdict(self)
        for name in ENUM_FIELDS:
            data[name] = getattr(self, name).value
        return data

    def save_toml(self, path: Path) -> None:
        """Save configuration to a TOML file, creating parent folders as needed."""
        path = Path(path)
        if path.exists() and path.is_dir():
            error_msg = f"Cannot save config: path is a directory, not a file: {path}."
            log.error(error_msg)
            raise ValueError(error_msg)

        path.parent.mkdir(parents=True, exist_ok=True)

        data = self.config_to_dict()
        for name in PATH_FIELDS:
            data[name] = self._make_path_relative(data[name])
        # TOML has no null
        data = {k: v for k, v in data.items() if v is not None}

        try:
            with open(path, "wb") as f:
                tomli_w.dump(data, f)
        except PermissionError as e:
            error_msg = f"Permission denied writing to: {path}"
            log.error(error_msg)
            raise PermissionError(error_msg) from e
        except OSError as e:
            error_msg = f"Failed to write config file to {path}"
            log.error(error_msg)
            raise OSError(error_msg) from e

    # endregion

    # region validation
    def validate(self) -> None:
        """Validate intrinsic values (types, enums, empty strings). No filesystem access."""
        for name, enum_cls in ENUM_FIELDS.items():
            value = getattr(self, name)
            if not isinstance(value, enum_cls):
                raise ValueError(
                    f"{name} must be a {enum_cls.__name__} enum, got {type(value).__name__}. "
                    f"Valid values: {[member.value for member in enum_cls]}"
                )

        for name in BOOL_FIELDS:
            value = getattr(self, name)
            if not isinstance(value, bool):
                raise ValueError(f"{name} must be a boolean, got {type(value).__name__}")

        for name in PATH_FIELDS:
            value = getattr(self, name)
            if value is not None and not isinstance(value, str):
                raise ValueError(f"{name} must be a string, got {type(value).__name__}")
            if value == "":
                raise ValueError(f"{name} cannot be empty string; use None for default")

    def _validate_output_folder(self) -> None:
        output_folder = self.get_output_folder()
        if output_folder.exists() and not output_folder.is_dir():
            raise ValueError(f"Output path exists but is not a directory: {output_folder}")

    def _validate_input_file(self, path: Path | None, label: str, field_name: str) -> None:
        if path is None:
            raise ValueError(
                f"No input {label} file specified. Please set {field_name} before running the pipeline."
            )
        if not path.exists():
            raise FileNotFoundError(f"Input {label} file not found: {path}")
        if not path.is_file():
            raise ValueError(f"Input {label} path is not a file: {path}")

    def validate_docx_import_requirements(self) -> None:
        """Filesystem checks for the docx2editor pipeline."""
        self._validate_input_file(self.get_input_docx_file(), "docx", "input_docx")
        self._validate_output_folder()

    def validate_word_export_requirements(self) -> None:
        """Filesystem checks for the editor2wordxml pipeline."""
        self._validate_input_file(self.get_input_json_file(), "json", "input_json")
        self._validate_output_folder()

    def pre_run_check(self) -> None:
        """Intrinsic plus pipeline-specific validation, run right before a pipeline starts."""
        self.validate()
        if self.direction == PipelineDirection.DOCX_TO_EDITOR:
            self.validate_docx_import_requirements()
        elif self.direction == PipelineDirection.EDITOR_TO_WORDXML:
            self.validate_word_export_requirements()

    # endregion


# endregion


# region ConversionOptions
@dataclass(frozen=True)
class ConversionOptions:
    """The subset of settings the conversion code itself reads."""

    extract_comments: bool = True
    infer_headings: bool = True
    preserve_run_formatting: bool = True
    split_line_breaks: bool = True

    @classmethod
    def from_config(cls, cfg: UserConfig) -> ConversionOptions:
        return cls(
            extract_comments=cfg.extract_comments,
            infer_headings=cfg.infer_headings,
            preserve_run_formatting=cfg.preserve_run_formatting,
            split_line_breaks=cfg.split_line_breaks,
        )


# endregion
