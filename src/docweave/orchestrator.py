"""Route program flow to the appropriate pipeline based on the configured direction."""

import logging
from pathlib import Path

from docweave.internals.config.define_config import PipelineDirection, UserConfig
from docweave.internals.manifest import RunManifest
from docweave.internals.run_context import (
    get_pipeline_run_id,
    get_session_id,
    start_pipeline_run,
)
from docweave.pipelines import docx_import, word_export

log = logging.getLogger("docweave")


# region run_pipeline
def run_pipeline(cfg: UserConfig) -> Path:
    """Run validation and then route to the appropriate pipeline based on config."""

    cfg.pre_run_check()

    pipeline_id = start_pipeline_run()
    log.info(f"Initializing pipeline run. [pipeline:{pipeline_id}]")

    run_manifest = RunManifest(cfg, run_id=pipeline_id)
    run_manifest.start()

    log_pipeline_info(cfg)

    try:
        if cfg.direction == PipelineDirection.DOCX_TO_EDITOR:
            output_path = docx_import.run_docx_import_pipeline(cfg)
        elif cfg.direction == PipelineDirection.EDITOR_TO_WORDXML:
            output_path = word_export.run_word_export_pipeline(cfg)
        else:
            raise ValueError(f"Unknown pipeline direction: {cfg.direction}")

        run_manifest.complete(output_path)
        return output_path

    except Exception as e:
        run_manifest.fail(e)
        raise


# endregion


# region log_pipeline_info
def log_pipeline_info(cfg: UserConfig) -> None:
    """Write this run's ids and configuration to the log."""
    log.info("=== Pipeline Run Started ===")
    log.info(f"Run ID: {get_pipeline_run_id()}")
    log.info(f"Session ID: {get_session_id()}")
    log.info(f"Direction: {cfg.direction.value}")
    log.info(f"Model: {cfg.model.value}")
    log.info(f"Input: {cfg.get_input_file()}")
    log.info(f"Configuration: {cfg}")


# endregion
