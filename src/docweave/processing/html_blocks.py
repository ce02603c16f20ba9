"""Block model <-> HTML.

Export is a template per block type. Import walks the parsed HTML the same way
the Word tree walker walks Word nodes: each element is a block, inline,
container or ignored element, and inline content merges into the last block.
"""

# region imports
from __future__ import annotations

import html
import logging
import re
from types import MappingProxyType
from typing import Mapping, Optional

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import Comment as HtmlComment, Declaration, Doctype, ProcessingInstruction

from docweave.internals.config.define_config import ConversionOptions
from docweave.internals.run_context import get_pipeline_run_id
from docweave.models import Block, BlockType, Document, html_to_plain_text
from docweave.processing.tree_walker import (
    NodeCategory,
    WalkState,
    fallback_blocks,
    merge_inline_fragment,
)
from docweave.styles.dom import heading_level_of, style_map_to_css, subject_from_tag
from docweave.styles.extractor import DEFAULT_EXTRACTOR, StyleExtractor

log = logging.getLogger("docweave")
# endregion

_B, _I, _C, _X = (
    NodeCategory.BLOCK,
    NodeCategory.INLINE,
    NodeCategory.CONTAINER,
    NodeCategory.IGNORE,
)

TAG_CATEGORIES: Mapping[str, NodeCategory] = MappingProxyType(
    {
        **{f"h{level}": _B for level in range(1, 7)},
        "p": _B,
        "ul": _B,
        "ol": _B,
        "li": _B,
        "blockquote": _B,
        "pre": _B,
        "table": _B,
        "img": _B,
        "figure": _B,
        "div": _B,
        "strong": _I,
        "b": _I,
        "em": _I,
        "i": _I,
        "u": _I,
        "s": _I,
        "strike": _I,
        "del": _I,
        "ins": _I,
        "span": _I,
        "font": _I,
        "mark": _I,
        "code": _I,
        "a": _I,
        "sub": _I,
        "sup": _I,
        "small": _I,
        "br": _I,
        "html": _C,
        "body": _C,
        "section": _C,
        "article": _C,
        "main": _C,
        "header": _C,
        "footer": _C,
        "center": _C,
        "head": _X,
        "script": _X,
        "style": _X,
        "meta": _X,
        "link": _X,
        "title": _X,
        "hr": _X,
    }
)

# Inline tags kept on import. Everything else inline is unwrapped.
ALLOWED_INLINE_TAGS = frozenset({"strong", "b", "em", "i", "u", "s", "span", "mark", "code", "a"})
ALLOWED_INLINE_ATTRIBUTES = {"a": ("href", "style")}

BLOCK_CHILD_TAGS = [
    name for name, category in TAG_CATEGORIES.items() if category is _B and name != "li"
]

# String subclasses that are markup, not text
NON_TEXT_STRINGS = (HtmlComment, Declaration, Doctype, ProcessingInstruction)

LINE_BREAK_PATTERN = re.compile(r"<br\s*/?>|\n", re.IGNORECASE)


# region Block model -> HTML
def _style_attribute(styles: Mapping[str, str]) -> str:
    if not styles:
        return ""
    return f' style="{html.escape(style_map_to_css(dict(styles)))}"'


def block_to_html(block: Block) -> str:
    """One block through its template. Unknown types come out as a paragraph."""
    data = block.data
    match block.type:
        case BlockType.HEADER:
            level = min(max(int(data.get("level", 2)), 1), 6)
            return f"<h{level}{_style_attribute(block.styles)}>{data.get('text', '')}</h{level}>"
        case BlockType.LIST:
            tag = "ol" if data.get("style") == "ordered" else "ul"
            items = "".join(f"<li>{item}</li>" for item in data.get("items", []))
            return f"<{tag}>{items}</{tag}>"
        case BlockType.QUOTE:
            caption = data.get("caption", "")
            cite = f"<cite>{caption}</cite>" if caption else ""
            return f"<blockquote><p>{data.get('text', '')}</p>{cite}</blockquote>"
        case BlockType.CODE:
            return f"<pre><code>{html.escape(data.get('code', ''), quote=False)}</code></pre>"
        case BlockType.TABLE:
            return _table_html(data.get("content", []), bool(data.get("withHeadings")))
        case BlockType.IMAGE:
            url = html.escape((data.get("file") or {}).get("url", ""))
            caption = data.get("caption", "")
            figcaption = f"<figcaption>{caption}</figcaption>" if caption else ""
            return f'<figure><img src="{url}" alt="{html.escape(html_to_plain_text(caption))}">{figcaption}</figure>'
        case _:
            return f"<p{_style_attribute(block.styles)}>{data.get('text', '')}</p>"


def _table_html(content: list[list[str]], with_headings: bool) -> str:
    rows = []
    for index, row in enumerate(content):
        cell_tag = "th" if with_headings and index == 0 else "td"
        cells = "".join(f"<{cell_tag}>{cell}</{cell_tag}>" for cell in row)
        rows.append(f"<tr>{cells}</tr>")
    return f"<table><tbody>{''.join(rows)}</tbody></table>"


def blocks_to_html(blocks: list[Block]) -> str:
    return "\n".join(block_to_html(block) for block in blocks)


def document_to_html(document: Document) -> str:
    return blocks_to_html(document.blocks)


# endregion


# region inline sanitizing
def classify_tag(element) -> NodeCategory:
    if isinstance(element, NON_TEXT_STRINGS):
        return NodeCategory.IGNORE
    if isinstance(element, NavigableString):
        return NodeCategory.INLINE
    return TAG_CATEGORIES.get(element.name, NodeCategory.BLOCK)


def sanitize_inline(element, keep_breaks: bool = True) -> str:
    """Inline HTML of an element's content with only allow-listed tags kept."""
    parts = []
    for child in element.children:
        parts.append(_sanitize_node(child, keep_breaks))
    return "".join(parts)


def _sanitize_node(node, keep_breaks: bool) -> str:
    if isinstance(node, NON_TEXT_STRINGS):
        return ""
    if isinstance(node, NavigableString):
        return html.escape(str(node), quote=False)
    if classify_tag(node) is NodeCategory.IGNORE or node.name in ("ul", "ol", "img"):
        return ""
    if node.name == "br":
        return "<br>" if keep_breaks else "\n"

    inner = sanitize_inline(node, keep_breaks)
    if node.name not in ALLOWED_INLINE_TAGS:
        return inner

    allowed = ALLOWED_INLINE_ATTRIBUTES.get(node.name, ("style",))
    attrs = "".join(
        f' {name}="{html.escape(str(node[name]))}"' for name in allowed if node.get(name)
    )
    return f"<{node.name}{attrs}>{inner}</{node.name}>"


def split_fragment(fragment: str) -> list[str]:
    """Non-empty line segments of an inline fragment, each re-balanced."""
    segments = []
    for piece in LINE_BREAK_PATTERN.split(fragment):
        if not html_to_plain_text(piece).strip():
            continue
        segments.append(str(BeautifulSoup(piece.strip(), "html.parser")))
    return segments


# endregion


# region HTML -> Block model
class HtmlBlockWalker:
    """Builds blocks from parsed HTML with the same fold as TreeWalker."""

    def __init__(
        self,
        options: Optional[ConversionOptions] = None,
        extractor: StyleExtractor = DEFAULT_EXTRACTOR,
    ) -> None:
        self.options = options or ConversionOptions()
        self.extractor = extractor

    def walk(self, soup: Tag) -> list[Block]:
        state = self.visit_children(soup, WalkState())
        return list(state.blocks)

    def visit(self, element, state: WalkState) -> WalkState:
        category = classify_tag(element)
        if category is NodeCategory.IGNORE:
            return state
        if category is NodeCategory.CONTAINER:
            return self.visit_children(element, state)
        if category is NodeCategory.INLINE:
            if isinstance(element, NavigableString) and not element.strip():
                return state
            return merge_inline_fragment(state, _sanitize_node(element, keep_breaks=True))
        return self.build_block(element, state)

    def visit_children(self, element: Tag, state: WalkState) -> WalkState:
        for child in element.children:
            state = self.visit(child, state)
        return state

    def build_block(self, tag: Tag, state: WalkState) -> WalkState:
        name = tag.name
        if name == "div" and tag.find(BLOCK_CHILD_TAGS) is not None:
            return self.visit_children(tag, state)
        if heading_level_of(tag) is not None or name in ("p", "div"):
            return self._text_element(tag, state)
        match name:
            case "ul" | "ol":
                return self._list(tag, state)
            case "li":
                return self._loose_list_item(tag, state)
            case "blockquote":
                return self._quote(tag, state)
            case "pre":
                return self._code(tag, state)
            case "table":
                return self._table(tag, state)
            case "img" | "figure":
                return self._image(tag, state)
            case _:
                return self._unrecognized(tag, state)

    def _text_element(self, tag: Tag, state: WalkState) -> WalkState:
        level = heading_level_of(tag)
        styles = self.extractor.extract(subject_from_tag(tag))
        fragment = sanitize_inline(tag).strip()

        segments = split_fragment(fragment) if self.options.split_line_breaks else []
        if len(segments) <= 1:
            segments = [fragment] if html_to_plain_text(fragment).strip() else []

        for segment in segments:
            if level is not None:
                state = state.append(Block.header(segment, level, styles))
            else:
                state = state.append(Block.paragraph(segment, styles))

        for image in tag.find_all("img"):
            state = self._image(image, state)
        return state

    def _list(self, tag: Tag, state: WalkState) -> WalkState:
        items = []
        for item in tag.find_all("li"):
            text = sanitize_inline(item).strip()
            if html_to_plain_text(text).strip():
                items.append(text)
        if not items:
            return state
        return state.append(Block.list_block(items, ordered=tag.name == "ol"))

    def _loose_list_item(self, tag: Tag, state: WalkState) -> WalkState:
        text = sanitize_inline(tag).strip()
        if not html_to_plain_text(text).strip():
            return state
        return state.append(Block.list_block([text]))

    def _quote(self, tag: Tag, state: WalkState) -> WalkState:
        caption_tag = tag.find(["cite", "footer"])
        caption = sanitize_inline(caption_tag).strip() if caption_tag else ""
        text = "".join(
            _sanitize_node(child, keep_breaks=True) for child in tag.children if child is not caption_tag
        ).strip()
        if not html_to_plain_text(text).strip():
            return state
        return state.append(Block.quote(text, caption))

    def _code(self, tag: Tag, state: WalkState) -> WalkState:
        code = tag.get_text()
        if not code.strip():
            return state
        return state.append(Block.code(code))

    def _table(self, tag: Tag, state: WalkState) -> WalkState:
        content = [
            [sanitize_inline(cell).strip() for cell in row.find_all(["td", "th"])]
            for row in tag.find_all("tr")
        ]
        if not any(html_to_plain_text(cell).strip() for row in content for cell in row):
            return state
        return state.append(Block.table(content))

    def _image(self, tag: Tag, state: WalkState) -> WalkState:
        image = tag if tag.name == "img" else tag.find("img")
        if image is None or not image.get("src"):
            log.debug("Skipping image element without a src.")
            return state
        caption_tag = tag.find("figcaption") if tag.name == "figure" else None
        caption = sanitize_inline(caption_tag).strip() if caption_tag else ""
        return state.append(Block.image(str(image["src"]), caption))

    def _unrecognized(self, tag: Tag, state: WalkState) -> WalkState:
        text = tag.get_text()
        if not text.strip():
            return state
        log.debug(f"Unrecognized element <{tag.name}> treated as a paragraph.")
        return state.append(Block.paragraph(html.escape(text.strip(), quote=False)))


def html_to_blocks(
    markup: str,
    options: Optional[ConversionOptions] = None,
    extractor: StyleExtractor = DEFAULT_EXTRACTOR,
) -> list[Block]:
    """Parse HTML into blocks; falls back to plain paragraph splitting when no block comes out."""
    soup = BeautifulSoup(markup or "", "html.parser")
    blocks = HtmlBlockWalker(options, extractor).walk(soup)
    if not blocks:
        text = soup.get_text()
        if text.strip():
            log.debug(
                f"No blocks found in HTML, splitting plain text instead. [pipeline:{get_pipeline_run_id()}]"
            )
            blocks = fallback_blocks(text)
    return blocks


def html_to_document(markup: str, options: Optional[ConversionOptions] = None) -> Document:
    return Document(blocks=html_to_blocks(markup, options))


# endregion
