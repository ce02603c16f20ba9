"""Walk a parsed Word tree and build the flat block list.

Every node falls in exactly one category:
    block      builds a Block from the node (and its children) and appends it
    inline     merges its own text into the last Block, then visits its children
    container  emits nothing, visits its children
    ignore     skipped with its whole subtree

The walk is a left fold over the tree. WalkState carries the blocks built so
far and the index of the block that inline text merges into; every step
returns a new WalkState instead of mutating a shared list.
"""

# region imports
from __future__ import annotations

import html
import logging
import re
from dataclasses import dataclass, replace
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional

from docweave.internals.config.define_config import ConversionOptions
from docweave.internals.run_context import get_pipeline_run_id
from docweave.models import TEXT_BLOCK_TYPES, Block, BlockType, html_to_plain_text
from docweave.processing.run_html import FormattedRun, runs_to_html
from docweave.processing.word_tree import WordNode
from docweave.styles.extractor import DEFAULT_EXTRACTOR, StyleExtractor, StyleSubject
from docweave.styles.tables import DEFAULT_FONT_TABLE, FontAliasTable
from docweave.styles.text_analyzer import (
    clamp_heading_level,
    infer_title_level,
    is_likely_title,
)
from docweave.styles.word_properties import (
    extract_word_paragraph_styles,
    extract_word_run_styles,
)

log = logging.getLogger("docweave")
# endregion


# region Node categories
class NodeCategory(Enum):
    BLOCK = "block"
    INLINE = "inline"
    CONTAINER = "container"
    IGNORE = "ignore"


_B, _I, _C, _X = (
    NodeCategory.BLOCK,
    NodeCategory.INLINE,
    NodeCategory.CONTAINER,
    NodeCategory.IGNORE,
)

NODE_CATEGORIES: Mapping[str, NodeCategory] = MappingProxyType(
    {
        "paragraph": _B,
        "heading": _B,
        "table": _B,
        "list": _B,
        "listItem": _B,
        "image": _B,
        "pageBreak": _B,
        "run": _I,
        "text": _I,
        "tab": _I,
        "br": _I,
        "symbol": _I,
        "hyperlink": _I,
        "smartTag": _I,
        "insertion": _I,
        "fieldSimple": _I,
        "document": _C,
        "body": _C,
        "section": _C,
        "div": _C,
        "sdt": _C,
        "sdtContent": _C,
        "customXml": _C,
        "alternateContent": _C,
        "Fallback": _C,
        "tableRow": _C,
        "tableCell": _C,
        "bookmarkStart": _X,
        "bookmarkEnd": _X,
        "fieldChar": _X,
        "instrText": _X,
        "commentRangeStart": _X,
        "commentRangeEnd": _X,
        "commentReference": _X,
        "footnoteReference": _X,
        "endnoteReference": _X,
        "proofErr": _X,
        "lastRenderedPageBreak": _X,
        "sectionProperties": _X,
        "deletion": _X,
        "deletedText": _X,
    }
)

HEADING_STYLE_PATTERN = re.compile(r"(?:heading|title|标题)\s*(\d*)", re.IGNORECASE)
# Paragraph styles, spaces removed and casefolded, that make a quote block
QUOTE_STYLES = frozenset({"quote", "intensequote"})


def classify_node(node: WordNode) -> NodeCategory:
    """Type-table lookup; anything unrecognized is a block."""
    return NODE_CATEGORIES.get(node.type, NodeCategory.BLOCK)


# endregion


# region Text extraction
def node_own_text(node: WordNode) -> str:
    """Text a node contributes by itself, ignoring its children."""
    match node.type:
        case "tab":
            return "\t"
        case "br":
            return "\n"
        case "symbol":
            return _symbol_glyph(node)
        case _:
            return node.text or ""


def _symbol_glyph(node: WordNode) -> str:
    char = node.attributes.get("char") or node.text or ""
    if len(char) <= 1:
        return char
    try:
        return chr(int(char, 16))
    except ValueError:
        return char


def extract_text(node: WordNode) -> str:
    """Own text, then each child's text, then each run's text; ignored subtrees contribute nothing."""
    parts = [node_own_text(node)]
    for child in node.children:
        if classify_node(child) is not NodeCategory.IGNORE:
            parts.append(extract_text(child))
    for run in node.runs:
        if classify_node(run) is not NodeCategory.IGNORE:
            parts.append(extract_text(run))
    return "".join(parts)


def split_segments(text: str) -> list[str]:
    """Non-empty lines of a text with line breaks."""
    return [segment.strip() for segment in text.replace("\r\n", "\n").split("\n") if segment.strip()]


def fallback_blocks(text: str) -> list[Block]:
    """Last resort: paragraphs split on blank lines, or on single newlines if there are none."""
    normalized = text.replace("\r\n", "\n")
    chunks = [chunk.strip() for chunk in re.split(r"\n\s*\n", normalized) if chunk.strip()]
    if len(chunks) <= 1:
        chunks = [line.strip() for line in normalized.split("\n") if line.strip()]
    return [Block.paragraph(html.escape(chunk, quote=False)) for chunk in chunks]


# endregion


# region WalkState
@dataclass(frozen=True)
class WalkState:
    """Fold accumulator: blocks so far, where inline text goes, and which numbered list is open."""

    blocks: tuple[Block, ...] = ()
    last_open_index: Optional[int] = None
    open_list_key: Optional[str] = None

    def append(self, block: Block, list_key: Optional[str] = None) -> WalkState:
        return WalkState(
            blocks=self.blocks + (block,),
            last_open_index=len(self.blocks),
            open_list_key=list_key,
        )

    def replace_at(self, index: int, block: Block) -> WalkState:
        blocks = list(self.blocks)
        blocks[index] = block
        return replace(self, blocks=tuple(blocks))


def merge_inline_text(state: WalkState, text: str) -> WalkState:
    """Append text to the open block, or start a paragraph if there is none it can go into."""
    if not text:
        return state
    return merge_inline_fragment(state, html.escape(text, quote=False))


def merge_inline_fragment(state: WalkState, fragment: str) -> WalkState:
    """Like merge_inline_text, for a fragment that is already inline HTML."""
    if not fragment:
        return state

    index = state.last_open_index
    if index is not None:
        merged = _block_with_appended_fragment(state.blocks[index], fragment)
        if merged is not None:
            return state.replace_at(index, merged)

    if not html_to_plain_text(fragment).strip():
        return state
    return state.append(Block.paragraph(fragment))


def _block_with_appended_fragment(block: Block, fragment: str) -> Optional[Block]:
    data = dict(block.data)
    if block.type in TEXT_BLOCK_TYPES:
        data["text"] = data.get("text", "") + fragment
        data.pop("runs", None)
    elif block.type == BlockType.LIST and data.get("items"):
        items = list(data["items"])
        items[-1] = items[-1] + fragment
        data["items"] = items
    elif block.type == BlockType.CODE:
        data["code"] = data.get("code", "") + html_to_plain_text(fragment)
    else:
        return None
    return replace(block, data=data)


# endregion


# region TreeWalker
class TreeWalker:
    """Builds blocks from a WordNode tree. One instance may walk many trees."""

    def __init__(
        self,
        options: Optional[ConversionOptions] = None,
        extractor: StyleExtractor = DEFAULT_EXTRACTOR,
        fonts: FontAliasTable = DEFAULT_FONT_TABLE,
    ) -> None:
        self.options = options or ConversionOptions()
        self.extractor = extractor
        self.fonts = fonts

    def walk(self, root: WordNode) -> list[Block]:
        state = self.visit(root, WalkState(), isolated=True)
        log.debug(
            f"Tree walk produced {len(state.blocks)} blocks. [pipeline:{get_pipeline_run_id()}]"
        )
        return list(state.blocks)

    def visit(self, node: WordNode, state: WalkState, isolated: bool = False) -> WalkState:
        category = classify_node(node)
        if category is NodeCategory.IGNORE:
            return state
        if category is NodeCategory.CONTAINER:
            return self.visit_children(node, state)
        if category is NodeCategory.INLINE:
            state = merge_inline_text(state, node_own_text(node))
            return self.visit_children(node, state)
        return self.build_block(node, state, isolated)

    def visit_children(self, node: WordNode, state: WalkState) -> WalkState:
        siblings = node.children
        for index, child in enumerate(siblings):
            state = self.visit(child, state, _is_isolated(siblings, index))
        return state

    # region block builders
    def build_block(self, node: WordNode, state: WalkState, isolated: bool) -> WalkState:
        match node.type:
            case "paragraph" | "heading":
                return self._paragraph(node, state, isolated)
            case "list":
                return self._list(node, state)
            case "listItem":
                return self._list_item(node, state)
            case "table":
                return self._table(node, state)
            case "image":
                return self._image(node, state)
            case "pageBreak":
                return state
            case _:
                return self._unrecognized(node, state)

    def _paragraph(self, node: WordNode, state: WalkState, isolated: bool) -> WalkState:
        raw_text = extract_text(node)
        if raw_text.strip():
            props = node.paragraph_properties
            numbering = props.numbering if props is not None else None
            level = self._explicit_heading_level(node)
            if level is None and _is_quote_style(node.style_name):
                text = self._inline_content(node, raw_text)[0]
                state = state.append(Block.quote(text))
            elif level is None and numbering is not None:
                item = self._inline_content(node, raw_text)[0]
                state = self._add_list_item(
                    state, item, f"num:{numbering.num_id}", ordered=not numbering.is_bullet
                )
            else:
                if level is None:
                    level = self._inferred_heading_level(node, raw_text, isolated)
                state = self._text_blocks(node, state, raw_text, level, isolated)

        for descendant in node.iter_descendants():
            if descendant.type == "image":
                state = self._image(descendant, state)
        return state

    def _text_blocks(
        self,
        node: WordNode,
        state: WalkState,
        raw_text: str,
        level: Optional[int],
        isolated: bool,
    ) -> WalkState:
        styles = self.extractor.extract(self._subject(node, raw_text, level, isolated))

        segments = split_segments(raw_text) if self.options.split_line_breaks else []
        if len(segments) > 1:
            for segment in segments:
                state = state.append(
                    _text_block(html.escape(segment, quote=False), level, styles)
                )
            return state

        text, runs = self._inline_content(node, raw_text)
        return state.append(_text_block(text, level, styles, runs))

    def _list(self, node: WordNode, state: WalkState) -> WalkState:
        items = [
            html.escape(extract_text(child).strip(), quote=False)
            for child in node.children
            if child.type in ("listItem", "paragraph") and extract_text(child).strip()
        ]
        if not items:
            return state
        return state.append(Block.list_block(items, ordered=_has_numbering(node)))

    def _list_item(self, node: WordNode, state: WalkState) -> WalkState:
        text = extract_text(node).strip()
        if not text:
            return state
        return self._add_list_item(
            state, html.escape(text, quote=False), "listItem", ordered=_has_numbering(node)
        )

    def _add_list_item(self, state: WalkState, item: str, key: str, ordered: bool) -> WalkState:
        """Extend the open list when consecutive items share a numbering key, else start one."""
        index = state.last_open_index
        if state.open_list_key == key and index is not None:
            block = state.blocks[index]
            if block.type == BlockType.LIST:
                data = dict(block.data)
                data["items"] = [*data.get("items", []), item]
                return replace(state.replace_at(index, replace(block, data=data)), open_list_key=key)
        return state.append(Block.list_block([item], ordered=ordered), list_key=key)

    def _table(self, node: WordNode, state: WalkState) -> WalkState:
        content: list[list[str]] = []
        for row in node.children:
            if row.type != "tableRow":
                continue
            cells = [_cell_text(cell) for cell in row.children if cell.type == "tableCell"]
            content.append(cells)

        if not any(cell.strip() for row in content for cell in row):
            return state
        return state.append(Block.table(content))

    def _image(self, node: WordNode, state: WalkState) -> WalkState:
        url = node.attributes.get("src") or node.attributes.get("imageData")
        if not url:
            log.debug(f"Skipping image without a resolvable source: {node.attributes}")
            return state
        return state.append(Block.image(url, node.attributes.get("caption", "")))

    def _unrecognized(self, node: WordNode, state: WalkState) -> WalkState:
        text = extract_text(node)
        if not text.strip():
            return state
        log.debug(f"Unrecognized node type '{node.type}' treated as a paragraph.")
        return state.append(Block.paragraph(html.escape(text, quote=False)))

    # endregion

    # region heading levels
    def _explicit_heading_level(self, node: WordNode) -> Optional[int]:
        style = node.style_name
        if style:
            match = HEADING_STYLE_PATTERN.search(style)
            if match:
                return clamp_heading_level(int(match.group(1)) if match.group(1) else 1)
        if node.type == "heading":
            level = node.attributes.get("level", "")
            if level.isdigit():
                return clamp_heading_level(int(level))
        return None

    def _inferred_heading_level(self, node: WordNode, text: str, isolated: bool) -> Optional[int]:
        """Title inference for headings without a level and for unstyled paragraphs."""
        if node.type == "heading":
            return clamp_heading_level(infer_title_level(text))
        if node.style_name:
            return None
        if self.options.infer_headings and is_likely_title(text, isolated):
            return clamp_heading_level(infer_title_level(text))
        return None

    # endregion

    # region run formatting
    def _formatted_runs(self, node: WordNode) -> list[FormattedRun]:
        return [
            FormattedRun(
                text=extract_text(descendant),
                styles=extract_word_run_styles(descendant.run_properties, self.fonts),
            )
            for descendant in node.iter_descendants()
            if descendant.type == "run"
        ]

    def _inline_content(self, node: WordNode, raw_text: str) -> tuple[str, Optional[list[dict]]]:
        """Block text as inline HTML, plus the run records when formatting is kept."""
        if self.options.preserve_run_formatting:
            runs = self._formatted_runs(node)
            # Only when the runs account for all of the text
            if any(run.styles for run in runs) and "".join(run.text for run in runs) == raw_text:
                return runs_to_html(runs), [run.to_dict() for run in runs]
        return html.escape(raw_text, quote=False), None

    def _subject(
        self, node: WordNode, text: str, level: Optional[int], isolated: bool
    ) -> StyleSubject:
        declared = extract_word_paragraph_styles(node.paragraph_properties)
        alignment = {}
        if "textAlign" in declared:
            alignment["textAlign"] = declared.pop("textAlign")

        classes = tuple(
            token
            for token in [node.style_name or "", *node.attributes.get("class", "").split()]
            if token
        )
        runs = self._formatted_runs(node)
        return StyleSubject(
            kind="heading" if level is not None else node.type,
            text=text,
            classes=classes,
            declared=declared,
            alignment_declarations=alignment,
            heading_level=level,
            isolated=isolated,
            formatting_coverage=_run_coverage(runs),
            descendant_styles=_run_font_styles(runs),
        )

    # endregion


# endregion


# region helpers
def _text_block(
    text: str,
    level: Optional[int],
    styles: dict[str, str],
    runs: Optional[list[dict]] = None,
) -> Block:
    if level is not None:
        return Block.header(text, level, styles)
    return Block.paragraph(text, styles, runs)


def _is_isolated(siblings: list[WordNode], index: int) -> bool:
    """First among its siblings, or followed by a paragraph."""
    if index == 0:
        return True
    return index + 1 < len(siblings) and siblings[index + 1].type == "paragraph"


def _is_quote_style(style: Optional[str]) -> bool:
    return bool(style) and style.replace(" ", "").casefold() in QUOTE_STYLES


def _has_numbering(node: WordNode) -> bool:
    props = node.paragraph_properties
    if props is not None and props.numbering is not None:
        return not props.numbering.is_bullet
    return node.attributes.get("style") == "ordered" or node.attributes.get("ordered") in ("true", "1")


def _cell_text(cell: WordNode) -> str:
    parts = [extract_text(child).strip() for child in cell.children]
    return html.escape("\n".join(part for part in parts if part), quote=False)


def _run_coverage(runs: list[FormattedRun]) -> dict[str, float]:
    total = sum(len(run.text.strip()) for run in runs)
    if not total:
        return {}
    covered = {"bold": 0, "italic": 0, "underline": 0}
    for run in runs:
        length = len(run.text.strip())
        if run.styles.get("fontWeight") == "bold":
            covered["bold"] += length
        if run.styles.get("fontStyle") == "italic":
            covered["italic"] += length
        if "underline" in run.styles.get("textDecoration", ""):
            covered["underline"] += length
    return {key: value / total for key, value in covered.items()}


def _run_font_styles(runs: list[FormattedRun]) -> dict[str, str]:
    found: dict[str, str] = {}
    for run in runs:
        for key in ("fontFamily", "fontSize"):
            if key in run.styles and key not in found:
                found[key] = run.styles[key]
    return found


def walk_word_tree(root: WordNode, options: Optional[ConversionOptions] = None) -> list[Block]:
    """Build blocks from a Word tree with the default extractor."""
    return TreeWalker(options).walk(root)


# endregion
