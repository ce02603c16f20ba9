"""Read .docx files with python-docx into the WordPackage tree the converters consume."""

import base64
import logging
from pathlib import Path
from typing import Callable, Optional

import docx
from docx import document

from docweave.internals.run_context import get_pipeline_run_id
from docweave.processing.word_tree import (
    W_NS,
    WordCommentRecord,
    WordPackage,
    ns,
    word_node_from_element,
)

log = logging.getLogger("docweave")


# region load_docx
def load_docx(input_filepath: Path) -> document.Document:
    """Open a docx with python-docx. Anything python-docx can't open is reported as corrupted."""
    pipeline_id = get_pipeline_run_id()
    try:
        doc = docx.Document(str(input_filepath))
    except Exception as e:
        log.error(f"Could not load document {input_filepath} [pipeline:{pipeline_id}]. Error: {e}")
        raise ValueError(f"Document appears to be corrupted: {e}") from e
    return doc


# endregion


# region read_docx
def read_docx(input_filepath: Path) -> WordPackage:
    """Body tree (with numbering formats and inline images resolved) plus the comments part."""
    doc = load_docx(input_filepath)
    formats = numbering_formats(doc)
    body = word_node_from_element(doc.element.body, formats, image_resolver(doc))
    comments = read_comments(doc)
    log.debug(
        f"Read {input_filepath}: {len(body.children)} body elements, {len(comments)} comments. "
        f"[pipeline:{get_pipeline_run_id()}]"
    )
    return WordPackage(body=body, comments=comments)


def document_xml(input_filepath: Path) -> str:
    """The main document part (word/document.xml) as a string."""
    doc = load_docx(input_filepath)
    return doc.part.blob.decode("utf-8")


# endregion


# region numbering
def numbering_formats(doc: document.Document) -> dict[tuple[str, int], str]:
    """
    Map (numId, ilvl) to the level's numFmt ("bullet", "decimal", ...).

    w:num points at a w:abstractNum, which holds one w:lvl per indent level.
    """
    try:
        numbering = doc.part.numbering_part.element
    except (KeyError, NotImplementedError) as e:
        log.debug(f"No numbering part in document: {e}")
        return {}

    val = f"{{{W_NS}}}val"
    abstract_levels: dict[str, dict[int, str]] = {}
    for abstract in numbering.findall("w:abstractNum", ns):
        levels: dict[int, str] = {}
        for lvl in abstract.findall("w:lvl", ns):
            ilvl = lvl.get(f"{{{W_NS}}}ilvl", "0")
            num_fmt = lvl.find("w:numFmt", ns)
            if ilvl.isdigit() and num_fmt is not None and num_fmt.get(val):
                levels[int(ilvl)] = num_fmt.get(val)
        abstract_levels[abstract.get(f"{{{W_NS}}}abstractNumId", "")] = levels

    formats: dict[tuple[str, int], str] = {}
    for num in numbering.findall("w:num", ns):
        num_id = num.get(f"{{{W_NS}}}numId")
        abstract_ref = num.find("w:abstractNumId", ns)
        if num_id is None or abstract_ref is None:
            continue
        for level, num_fmt in abstract_levels.get(abstract_ref.get(val, ""), {}).items():
            formats[(num_id, level)] = num_fmt
    return formats


# endregion


# region images
def image_resolver(doc: document.Document) -> Callable[[str], Optional[str]]:
    """Resolve image relationship ids to data URIs (embedded) or their target (linked)."""

    def resolve(rel_id: str) -> Optional[str]:
        rel = doc.part.rels.get(rel_id)
        if rel is None:
            log.warning(f"Image relationship {rel_id} not found in document part.")
            return None
        if rel.is_external:
            return rel.target_ref
        part = rel.target_part
        encoded = base64.b64encode(part.blob).decode("ascii")
        return f"data:{part.content_type};base64,{encoded}"

    return resolve


# endregion


# region comments
def read_comments(doc: document.Document) -> list[WordCommentRecord]:
    """Comments part entries, with each comment's paragraphs as WordNodes."""
    records: list[WordCommentRecord] = []
    if not (hasattr(doc, "comments") and doc.comments):
        return records

    for comment in doc.comments:
        timestamp = comment.timestamp
        records.append(
            WordCommentRecord(
                id=str(comment.comment_id),
                author=comment.author or None,
                date=timestamp.isoformat() if timestamp else None,
                initials=comment.initials or None,
                children=[word_node_from_element(p._p) for p in comment.paragraphs],
            )
        )
    return records


# endregion
