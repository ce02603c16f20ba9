"""editor2wordxml pipeline: saved block or node document JSON in, Word XML out."""

import logging
from pathlib import Path
from typing import Any

from docweave import io
from docweave.internals import constants
from docweave.internals.config.define_config import DocumentModel, UserConfig
from docweave.internals.run_context import get_pipeline_run_id
from docweave.models import Document, Node
from docweave.processing.html_word_xml import blocks_to_word_xml
from docweave.processing.word_xml import nodes_to_word_xml

log = logging.getLogger("docweave")


# region run_word_export_pipeline
def run_word_export_pipeline(cfg: UserConfig) -> Path:
    """Convert cfg.input_json to Word XML and save it. Returns the path of the saved XML."""
    pipeline_id = get_pipeline_run_id()
    log.info(f"Starting Word XML export pipeline. [pipeline:{pipeline_id}]")

    input_filepath = io.validate_json_path(cfg.get_input_json_file())
    data = io.load_json(input_filepath)

    word_xml = convert_to_word_xml(data, cfg.model)
    return io.save_text_output(word_xml, cfg, constants.OUTPUT_WORD_XML_FILENAME)


# endregion


# region convert_to_word_xml
def convert_to_word_xml(data: dict[str, Any], model: DocumentModel) -> str:
    """
    Word XML for a saved document dict.

    Block documents go through their HTML rendering; node documents are written directly.

    Raises:
        ValueError: If the data doesn't have the shape of the given model.
        ExportError: If the export produced no Word content.
    """
    pipeline_id = get_pipeline_run_id()
    if model == DocumentModel.NODES:
        if data.get("type") != "doc":
            log.error(f"Expected a node document (type 'doc'), got {data.get('type')!r} [pipeline:{pipeline_id}]")
            raise ValueError("Input JSON is not a node document. Did you mean --model blocks?")
        return nodes_to_word_xml(Node.from_dict(data))

    if "blocks" not in data:
        log.error(f"Expected a block document with a 'blocks' list [pipeline:{pipeline_id}]")
        raise ValueError("Input JSON is not a block document. Did you mean --model nodes?")
    document = Document.from_dict(data)
    log.debug(f"Exporting {len(document.blocks)} blocks. [pipeline:{pipeline_id}]")
    return blocks_to_word_xml(document.blocks)


# endregion
