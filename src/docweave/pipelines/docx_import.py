"""docx2editor pipeline: Word document in, block or node document JSON (and optional HTML) out."""

import logging
from pathlib import Path
from typing import Any, Mapping, Optional

from docweave import io
from docweave.annotations.associate import associate_comments
from docweave.annotations.extract import extract_comments
from docweave.internals import constants
from docweave.internals.config.define_config import (
    ConversionOptions,
    DocumentModel,
    UserConfig,
)
from docweave.internals.errors import ConversionError, StructuralAbsenceError
from docweave.internals.run_context import get_pipeline_run_id
from docweave.models import Block, Comment, Document
from docweave.processing.docx_reader import document_xml, read_docx
from docweave.processing.html_blocks import document_to_html
from docweave.processing.stats import document_stats
from docweave.processing.tree_walker import TreeWalker, extract_text, fallback_blocks
from docweave.processing.word_tree import WordNode, WordPackage, word_package_from_dict
from docweave.processing.word_xml import word_xml_to_nodes

log = logging.getLogger("docweave")


# region run_docx_import_pipeline
def run_docx_import_pipeline(cfg: UserConfig) -> Path:
    """Convert cfg.input_docx and save the result. Returns the path of the saved document JSON."""
    pipeline_id = get_pipeline_run_id()
    log.info(f"Starting docx import pipeline. [pipeline:{pipeline_id}]")

    input_filepath = io.validate_docx_path(cfg.get_input_docx_file())

    if cfg.model == DocumentModel.NODES:
        nodes = word_xml_to_nodes(document_xml(input_filepath))
        return io.save_json_output(nodes.to_dict(), cfg, constants.OUTPUT_NODES_FILENAME)

    package = read_docx(input_filepath)
    document = convert_word_package(package, ConversionOptions.from_config(cfg))

    stats = document_stats(document)
    log.info(
        f"Converted {stats.blocks} blocks, {stats.words} words, {stats.comments} comments. "
        f"[pipeline:{pipeline_id}]"
    )

    output_path = io.save_json_output(document.to_dict(), cfg, constants.OUTPUT_BLOCKS_FILENAME)
    if cfg.write_html:
        io.save_text_output(document_to_html(document), cfg, constants.OUTPUT_HTML_FILENAME)
    return output_path


# endregion


# region convert_word_package
def convert_word_package(
    package: WordPackage, options: Optional[ConversionOptions] = None
) -> Document:
    """
    Word package -> block document, with comments attached to the blocks they cover.

    A package without a body produces no blocks from the walk and falls back to
    plain-text splitting. A conversion that fails outright returns
    Document.empty() so callers always get something renderable.
    """
    options = options or ConversionOptions()
    pipeline_id = get_pipeline_run_id()

    try:
        blocks, document_comments = build_blocks(package, options)
    except ConversionError as e:
        log.error(f"Conversion failed, returning an empty document: {e} [pipeline:{pipeline_id}]")
        return Document.empty()

    if not blocks:
        log.debug(f"Conversion produced no blocks. [pipeline:{pipeline_id}]")
        return Document.empty()
    return Document(blocks=blocks, comments=document_comments)


def build_blocks(
    package: WordPackage, options: ConversionOptions
) -> tuple[list[Block], list[Comment]]:
    """
    Walk the body and attach comments.

    Raises:
        ConversionError: If anything in the walk or the comment pass fails.
    """
    try:
        blocks = _walk_body(package, options)
        comments = extract_comments(package) if options.extract_comments else []
        return associate_comments(blocks, comments)
    except Exception as e:
        raise ConversionError(f"{type(e).__name__}: {e}") from e


def convert_word_tree(data: Mapping[str, Any], options: Optional[ConversionOptions] = None) -> Document:
    """Same as convert_word_package, for an external parser's `{documentPart, commentsPart}` dict."""
    return convert_word_package(word_package_from_dict(data), options)


def _walk_body(package: WordPackage, options: ConversionOptions) -> list[Block]:
    try:
        body = require_body(package)
    except StructuralAbsenceError as e:
        log.warning(f"{e}; no blocks produced. [pipeline:{get_pipeline_run_id()}]")
        return []

    blocks = TreeWalker(options).walk(body)
    if blocks:
        return blocks

    text = extract_text(body)
    if text.strip():
        log.debug(
            f"Tree walk found no blocks; splitting the body text instead. [pipeline:{get_pipeline_run_id()}]"
        )
        return fallback_blocks(text)
    return []


def require_body(package: WordPackage) -> WordNode:
    if package.body is None or not package.body.children:
        raise StructuralAbsenceError("Word package has no document body content")
    return package.body


# endregion
