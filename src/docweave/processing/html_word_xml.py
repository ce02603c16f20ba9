"""HTML -> Word XML, the export path for block documents (blocks are rendered to HTML first)."""

# region imports
import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import replace
from typing import Optional

from bs4 import BeautifulSoup, NavigableString, Tag

from docweave.internals.run_context import get_pipeline_run_id
from docweave.models import Block
from docweave.processing.html_blocks import NON_TEXT_STRINGS, blocks_to_html
from docweave.processing.word_xml import (
    BULLET_NUM_ID,
    CODE_FONT,
    ORDERED_NUM_ID,
    PLAIN,
    QUOTE_INDENT_TWIPS,
    RunFormat,
    build_break_run,
    build_paragraph,
    build_table,
    build_text_run,
    serialize_document,
)
from docweave.styles.dom import heading_level_of, parse_inline_style
from docweave.styles.word_properties import (
    css_color_to_word_hex,
    css_size_to_half_points,
    nearest_highlight,
)

log = logging.getLogger("docweave")
# endregion

WHITESPACE_RUN = re.compile(r"\s+")

SKIPPED_TAGS = frozenset({"head", "script", "style", "meta", "link", "title", "hr", "img", "figure"})
TRANSPARENT_TAGS = frozenset({"html", "body", "section", "article", "main", "header", "footer", "center"})
BLOCK_TAGS = frozenset(
    {"p", "div", "ul", "ol", "li", "blockquote", "pre", "table", "h1", "h2", "h3", "h4", "h5", "h6"}
)


def heading_run_format(level: int) -> RunFormat:
    """Bold, 28pt for h1 shrinking 4pt per level down to 16pt."""
    return RunFormat(bold=True, size=max(28 - (level - 1) * 4, 16) * 2)


# region inline formatting
def apply_tag_format(tag: Tag, fmt: RunFormat) -> RunFormat:
    """Formatting a tag adds on top of what it inherits."""
    name = tag.name
    if name in ("b", "strong"):
        fmt = replace(fmt, bold=True)
    elif name in ("i", "em"):
        fmt = replace(fmt, italic=True)
    elif name in ("u", "ins"):
        fmt = replace(fmt, underline=True)
    elif name in ("s", "strike", "del"):
        fmt = replace(fmt, strike=True)
    elif name == "code":
        fmt = replace(fmt, font=CODE_FONT)
    elif name == "mark":
        fmt = replace(fmt, highlight="yellow")
    elif name == "font":
        color = css_color_to_word_hex(tag.get("color"))
        if color:
            fmt = replace(fmt, color=color)
        if tag.get("face"):
            fmt = replace(fmt, font=str(tag["face"]).split(",")[0].strip())

    return apply_style_format(parse_inline_style(tag.get("style")), fmt)


def apply_style_format(styles: dict[str, str], fmt: RunFormat) -> RunFormat:
    if not styles:
        return fmt

    weight = styles.get("fontWeight", "")
    if weight == "bold" or (weight.isdigit() and int(weight) >= 600):
        fmt = replace(fmt, bold=True)
    if styles.get("fontStyle") == "italic":
        fmt = replace(fmt, italic=True)

    decoration = styles.get("textDecoration", "")
    if "underline" in decoration:
        fmt = replace(fmt, underline=True)
    if "line-through" in decoration:
        fmt = replace(fmt, strike=True)

    color = css_color_to_word_hex(styles.get("color"))
    if color:
        fmt = replace(fmt, color=color)
    size = css_size_to_half_points(styles.get("fontSize"))
    if size:
        fmt = replace(fmt, size=size)
    family = styles.get("fontFamily")
    if family:
        fmt = replace(fmt, font=family.split(",")[0].strip().strip("\"'"))
    highlight = nearest_highlight(styles.get("backgroundColor"))
    if highlight:
        fmt = replace(fmt, highlight=highlight)
    return fmt


def inline_runs(element: Tag, fmt: RunFormat = PLAIN) -> list[ET.Element]:
    """Runs for an element's inline content. Nested blocks and images are left out."""
    runs: list[ET.Element] = []
    for child in element.children:
        if isinstance(child, NON_TEXT_STRINGS):
            continue
        if isinstance(child, NavigableString):
            text = WHITESPACE_RUN.sub(" ", str(child))
            if text.strip() or (text and runs):
                runs.append(build_text_run(text, fmt))
            continue
        if child.name == "br":
            runs.append(build_break_run())
        elif child.name in SKIPPED_TAGS or child.name in ("ul", "ol", "table"):
            continue
        else:
            runs.extend(inline_runs(child, apply_tag_format(child, fmt)))
    return runs


# endregion


# region block elements
def _alignment_of(tag: Tag) -> Optional[str]:
    alignment = parse_inline_style(tag.get("style")).get("textAlign") or tag.get("align")
    return str(alignment) if alignment else None


def _has_block_children(tag: Tag) -> bool:
    return any(isinstance(child, Tag) and child.name in BLOCK_TAGS for child in tag.children)


def block_elements(container: Tag) -> list[ET.Element]:
    """Word paragraphs and tables for a container's children, in order."""
    elements: list[ET.Element] = []
    pending: list[ET.Element] = []

    def flush() -> None:
        if any(run.find(".//{*}t") is not None for run in pending):
            elements.append(build_paragraph(list(pending)))
        pending.clear()

    for child in container.children:
        if isinstance(child, NON_TEXT_STRINGS):
            continue
        if isinstance(child, NavigableString):
            text = WHITESPACE_RUN.sub(" ", str(child))
            if text.strip() or (text and pending):
                pending.append(build_text_run(text))
            continue
        if child.name in SKIPPED_TAGS:
            continue
        if child.name in TRANSPARENT_TAGS or child.name in BLOCK_TAGS:
            flush()
            elements.extend(tag_to_elements(child))
            continue
        if child.name == "br":
            pending.append(build_break_run())
            continue
        pending.extend(inline_runs(child, apply_tag_format(child, PLAIN)))

    flush()
    return elements


def tag_to_elements(tag: Tag) -> list[ET.Element]:
    name = tag.name
    level = heading_level_of(tag)
    if level is not None:
        return [
            build_paragraph(
                inline_runs(tag, apply_tag_format(tag, heading_run_format(level))),
                style=f"Heading{level}",
                alignment=_alignment_of(tag),
            )
        ]
    if name in TRANSPARENT_TAGS or (name in ("div", "li") and _has_block_children(tag)):
        return block_elements(tag)

    match name:
        case "p" | "div":
            return [
                build_paragraph(
                    inline_runs(tag, apply_tag_format(tag, PLAIN)), alignment=_alignment_of(tag)
                )
            ]
        case "ul" | "ol":
            return list_elements(tag, ORDERED_NUM_ID if name == "ol" else BULLET_NUM_ID)
        case "li":
            return [build_paragraph(inline_runs(tag), style="ListParagraph", num_id=BULLET_NUM_ID)]
        case "blockquote":
            return quote_elements(tag)
        case "pre":
            return [build_paragraph([build_text_run(tag.get_text(), RunFormat(font=CODE_FONT))])]
        case "table":
            return [table_element(tag)]
        case _:
            return [build_paragraph(inline_runs(tag, apply_tag_format(tag, PLAIN)))]


def list_elements(tag: Tag, num_id: str) -> list[ET.Element]:
    """Each li as a numbered paragraph; nested lists follow their parent item."""
    elements: list[ET.Element] = []
    for item in tag.find_all("li", recursive=False):
        elements.append(build_paragraph(inline_runs(item), style="ListParagraph", num_id=num_id))
        for nested in item.find_all(["ul", "ol"], recursive=False):
            nested_id = ORDERED_NUM_ID if nested.name == "ol" else BULLET_NUM_ID
            elements.extend(list_elements(nested, nested_id))
    return elements


def quote_elements(tag: Tag) -> list[ET.Element]:
    paragraphs = tag.find_all("p", recursive=False)
    sources = paragraphs or [tag]
    return [
        build_paragraph(
            inline_runs(source, apply_tag_format(source, PLAIN)),
            style="Quote",
            indent_left=QUOTE_INDENT_TWIPS,
        )
        for source in sources
    ]


def table_element(tag: Tag) -> ET.Element:
    rows = []
    for row in tag.find_all("tr"):
        cells = []
        for cell in row.find_all(["td", "th"], recursive=False):
            fmt = RunFormat(bold=True) if cell.name == "th" else PLAIN
            if _has_block_children(cell):
                cells.append(block_elements(cell))
            else:
                cells.append([build_paragraph(inline_runs(cell, fmt), alignment=_alignment_of(cell))])
        rows.append(cells)
    return build_table(rows)


# endregion


def html_to_word_xml(markup: str) -> str:
    """
    Convert editor HTML into a Word XML document string.

    Raises:
        ExportError: If the HTML produced no Word content.
    """
    soup = BeautifulSoup(markup or "", "html.parser")
    elements = block_elements(soup)
    log.debug(f"HTML export produced {len(elements)} Word elements. [pipeline:{get_pipeline_run_id()}]")
    return serialize_document(elements)


def blocks_to_word_xml(blocks: list[Block]) -> str:
    """Blocks through their HTML templates, then into Word XML."""
    return html_to_word_xml(blocks_to_html(blocks))
