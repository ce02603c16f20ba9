"""Track and record metadata for pipeline runs."""

from __future__ import annotations

import json
import logging
import platform
import sys
from datetime import datetime
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Any

from docweave.internals.config.define_config import PipelineDirection, UserConfig
from docweave.internals.paths import PACKAGE_NAME, user_log_dir_path, user_manifests_dir
from docweave.internals.run_context import get_session_id

log = logging.getLogger("docweave")

MANIFEST_VERSION = "1.0"

PIPELINE_NAMES = {
    PipelineDirection.DOCX_TO_EDITOR: "run_docx_import_pipeline",
    PipelineDirection.EDITOR_TO_WORDXML: "run_word_export_pipeline",
}


# region RunManifest
class RunManifest:
    """Tracks and records metadata for a pipeline run as JSON under the manifests folder."""

    def __init__(self, cfg: UserConfig, run_id: str) -> None:
        """Build the manifest in memory. Caller must call .start() to write it."""
        self.cfg = cfg
        self.run_id = run_id
        self.start_time: datetime = datetime.now()
        self.manifest_path = user_manifests_dir() / f"run_{self.run_id}_manifest.json"
        self.manifest: dict[str, Any] = self._build_manifest()

        # None until complete()/fail()
        self.end_time: datetime | None = None
        self.duration: float | None = None

    # region lifecycle
    def start(self) -> None:
        """Write initial manifest to disk"""
        self.manifest["status"] = "running"
        log.info(f"Writing initial manifest to disk with status = running, at {self.manifest_path}")
        self._write_manifest()

    def complete(self, output_path: Path) -> None:
        """Update manifest on success"""
        self._get_time_stats()
        self.manifest["status"] = "success"
        self.manifest["end_time"] = self.end_time.isoformat() if self.end_time else None
        self.manifest["duration_seconds"] = self.duration
        self.manifest["output_path"] = str(output_path)

        self._write_manifest()
        log.info(f"Updated manifest: success, at {self.manifest_path}")

    def fail(self, error: Exception) -> None:
        """Update manifest on failure with error information."""
        self._get_time_stats()
        self.manifest["status"] = "fail"
        self.manifest["error"] = str(error)
        self.manifest["error_type"] = type(error).__name__
        self.manifest["end_time"] = self.end_time.isoformat() if self.end_time else None
        self.manifest["duration_seconds"] = self.duration

        self._write_manifest()
        log.error(f"Updated manifest ({self.manifest_path}): failed - {error}")

    # endregion

    def _build_manifest(self) -> dict[str, Any]:
        return {
            "manifest_version": MANIFEST_VERSION,
            "run_id": self.run_id,
            "session_id": get_session_id(),
            "environment": self._get_environment_info(),
            "start_time": self.start_time.isoformat(),
            "end_time": None,
            "duration_seconds": None,
            "direction": self.cfg.direction.value,
            "model": self.cfg.model.value,
            "pipeline_name": PIPELINE_NAMES.get(self.cfg.direction, "unknown_pipeline"),
            "input_file": str(self.cfg.get_input_file()),
            "output_folder": str(self.cfg.get_output_folder()),
            "log_path": str(user_log_dir_path()),
            "config": self.cfg.config_to_dict(),
            "error": None,
            "error_type": None,
        }

    def _write_manifest(self) -> None:
        try:
            with open(self.manifest_path, "w", encoding="utf-8", newline="\n") as f:
                json.dump(self.manifest, f, indent=2)
        except OSError as e:
            log.error(f"Failed to write manifest to {self.manifest_path}: {e}")

    def _get_time_stats(self) -> None:
        self.end_time = datetime.now()
        self.duration = (self.end_time - self.start_time).total_seconds()

    def _get_environment_info(self) -> dict[str, Any]:
        """Get execution environment information."""
        return {
            "python_version": sys.version.split()[0],
            "platform": platform.system(),
            "platform_release": platform.release(),
            "app_version": get_app_version(),
        }


# endregion


def get_app_version() -> str:
    """Installed distribution version, or 'unknown' when running from a source tree."""
    try:
        return version(PACKAGE_NAME)
    except PackageNotFoundError:
        return "unknown"
