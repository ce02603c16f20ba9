"""Internal document models: the flat block model and the nested node model, plus comments.

JSON shapes (`to_dict` / `from_dict`) use camelCase keys, matching what browser
editors exchange.
"""

# region imports
from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Mapping, Optional

from bs4 import BeautifulSoup

# endregion

BLOCK_MODEL_VERSION = "2.28.2"


# region helpers
def new_block_id() -> str:
    return uuid.uuid4().hex[:10]


def now_ms() -> int:
    return int(time.time() * 1000)


def html_to_plain_text(fragment: str) -> str:
    """Strip inline markup and decode entities: '<b>a</b> &amp; b' -> 'a & b'."""
    if not fragment:
        return ""
    if "<" not in fragment and "&" not in fragment:
        return fragment
    return BeautifulSoup(fragment, "html.parser").get_text()


# endregion


# region Comment
@dataclass
class TextRange:
    """Offsets into a text, plus the ranged text itself."""

    start_offset: int = 0
    end_offset: int = 0
    text: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "startOffset": self.start_offset,
            "endOffset": self.end_offset,
            "text": self.text,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TextRange:
        return cls(
            start_offset=int(data.get("startOffset", 0)),
            end_offset=int(data.get("endOffset", 0)),
            text=str(data.get("text", "")),
        )


@dataclass
class Comment:
    """A review comment. `timestamp` is epoch milliseconds."""

    id: str
    content: str
    author: str
    timestamp: int
    range: TextRange = field(default_factory=TextRange)
    initials: str = ""
    resolved: bool = False
    replies: list[Comment] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "content": self.content,
            "author": self.author,
            "timestamp": self.timestamp,
            "range": self.range.to_dict(),
            "initials": self.initials,
            "resolved": self.resolved,
            "replies": [reply.to_dict() for reply in self.replies],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Comment:
        return cls(
            id=str(data["id"]),
            content=str(data.get("content", "")),
            author=str(data.get("author") or data.get("user") or ""),
            timestamp=int(data.get("timestamp", 0)),
            range=TextRange.from_dict(data.get("range") or {}),
            initials=str(data.get("initials") or ""),
            resolved=bool(data.get("resolved", False)),
            replies=[cls.from_dict(reply) for reply in data.get("replies") or []],
        )


# endregion


# region Block
class BlockType(Enum):
    """Block model types."""

    HEADER = "header"
    PARAGRAPH = "paragraph"
    LIST = "list"
    QUOTE = "quote"
    CODE = "code"
    TABLE = "table"
    IMAGE = "image"


# Block types whose payload text lives in data["text"]
TEXT_BLOCK_TYPES = frozenset({BlockType.HEADER, BlockType.PARAGRAPH, BlockType.QUOTE})


@dataclass
class Block:
    """
    One unit of the flat block model.

    `data` depends on `type`:
        header:    text, level, styles?
        paragraph: text, styles?, runs?
        list:      style ("ordered" | "unordered"), items
        quote:     text, caption, alignment
        code:      code
        table:     content (rows of cell texts), withHeadings
        image:     file.url, caption, withBorder, withBackground, stretched

    Text fields hold inline HTML, so `plain_text` is what matching and
    statistics should read.
    """

    type: BlockType
    data: dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=new_block_id)
    comments: list[Comment] = field(default_factory=list)

    # region constructors
    @classmethod
    def header(cls, text: str, level: int, styles: Optional[dict[str, str]] = None) -> Block:
        data: dict[str, Any] = {"text": text, "level": level}
        if styles:
            data["styles"] = dict(styles)
        return cls(BlockType.HEADER, data)

    @classmethod
    def paragraph(
        cls,
        text: str,
        styles: Optional[dict[str, str]] = None,
        runs: Optional[list[dict[str, Any]]] = None,
    ) -> Block:
        data: dict[str, Any] = {"text": text}
        if styles:
            data["styles"] = dict(styles)
        if runs:
            data["runs"] = runs
        return cls(BlockType.PARAGRAPH, data)

    @classmethod
    def list_block(cls, items: list[str], ordered: bool = False) -> Block:
        return cls(
            BlockType.LIST,
            {"style": "ordered" if ordered else "unordered", "items": list(items)},
        )

    @classmethod
    def quote(cls, text: str, caption: str = "") -> Block:
        return cls(BlockType.QUOTE, {"text": text, "caption": caption, "alignment": "left"})

    @classmethod
    def code(cls, code: str) -> Block:
        return cls(BlockType.CODE, {"code": code})

    @classmethod
    def table(cls, content: list[list[str]]) -> Block:
        with_headings = bool(content) and any(cell.strip() for cell in content[0])
        return cls(BlockType.TABLE, {"content": content, "withHeadings": with_headings})

    @classmethod
    def image(cls, url: str, caption: str = "") -> Block:
        return cls(
            BlockType.IMAGE,
            {
                "file": {"url": url},
                "caption": caption,
                "withBorder": False,
                "withBackground": False,
                "stretched": False,
            },
        )

    # endregion

    @property
    def styles(self) -> dict[str, str]:
        return self.data.get("styles") or {}

    @property
    def plain_text(self) -> str:
        """Text content without markup; list items and table cells are newline-joined."""
        if self.type in TEXT_BLOCK_TYPES:
            return html_to_plain_text(self.data.get("text", ""))
        if self.type == BlockType.LIST:
            return "\n".join(html_to_plain_text(item) for item in self.data.get("items", []))
        if self.type == BlockType.CODE:
            return self.data.get("code", "")
        if self.type == BlockType.TABLE:
            return "\n".join(
                "\t".join(html_to_plain_text(cell) for cell in row)
                for row in self.data.get("content", [])
            )
        if self.type == BlockType.IMAGE:
            return html_to_plain_text(self.data.get("caption", ""))
        return ""

    def with_comment(self, comment: Comment) -> Block:
        """Copy of this block with one more comment attached."""
        return replace(self, comments=[*self.comments, comment])

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"id": self.id, "type": self.type.value, "data": self.data}
        if self.comments:
            result["comments"] = [comment.to_dict() for comment in self.comments]
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Block:
        """Unknown block types degrade to paragraphs holding whatever text they carried."""
        raw_type = str(data.get("type", "paragraph"))
        payload = dict(data.get("data") or {})
        try:
            block_type = BlockType(raw_type)
        except ValueError:
            block_type = BlockType.PARAGRAPH
            payload = {"text": str(payload.get("text", ""))}
        return cls(
            type=block_type,
            data=payload,
            id=str(data.get("id") or new_block_id()),
            comments=[Comment.from_dict(c) for c in data.get("comments") or []],
        )


# endregion


# region Document
@dataclass
class Document:
    """Block-model document. `blocks` is reading order; `time` is epoch milliseconds."""

    blocks: list[Block] = field(default_factory=list)
    comments: list[Comment] = field(default_factory=list)
    time: int = field(default_factory=now_ms)
    version: str = BLOCK_MODEL_VERSION

    @classmethod
    def empty(cls) -> Document:
        """Minimal valid document: a single empty paragraph."""
        return cls(blocks=[Block.paragraph("")])

    @property
    def plain_text(self) -> str:
        return "\n".join(block.plain_text for block in self.blocks if block.plain_text)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "time": self.time,
            "blocks": [block.to_dict() for block in self.blocks],
            "version": self.version,
        }
        if self.comments:
            result["comments"] = [comment.to_dict() for comment in self.comments]
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Document:
        return cls(
            blocks=[Block.from_dict(block) for block in data.get("blocks") or []],
            comments=[Comment.from_dict(c) for c in data.get("comments") or []],
            time=int(data.get("time") or now_ms()),
            version=str(data.get("version") or BLOCK_MODEL_VERSION),
        )


# endregion


# region Node model
@dataclass
class Mark:
    """Inline formatting on a text node, e.g. Mark("bold") or Mark("textStyle", {"color": "#FF0000"})."""

    type: str
    attrs: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"type": self.type}
        if self.attrs:
            result["attrs"] = dict(self.attrs)
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Mark:
        return cls(type=str(data["type"]), attrs=dict(data.get("attrs") or {}))


@dataclass
class Node:
    """
    Nested document node.

    A node is either a text node (`text` set, optional `marks`) or an element
    node (`content` list). Never both.
    """

    type: str
    attrs: dict[str, Any] = field(default_factory=dict)
    content: Optional[list[Node]] = None
    text: Optional[str] = None
    marks: list[Mark] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.text is not None and self.content:
            raise ValueError(f"Text node cannot have content (type={self.type})")
        if self.marks and self.text is None:
            raise ValueError(f"Only text nodes may carry marks (type={self.type})")

    @classmethod
    def text_node(cls, text: str, marks: Optional[list[Mark]] = None) -> Node:
        return cls(type="text", text=text, marks=list(marks or []))

    @classmethod
    def document(cls, content: list[Node]) -> Node:
        return cls(type="doc", content=list(content))

    @property
    def plain_text(self) -> str:
        if self.text is not None:
            return self.text
        return "".join(child.plain_text for child in self.content or [])

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"type": self.type}
        if self.attrs:
            result["attrs"] = dict(self.attrs)
        if self.text is not None:
            result["text"] = self.text
            if self.marks:
                result["marks"] = [mark.to_dict() for mark in self.marks]
        elif self.content is not None:
            result["content"] = [child.to_dict() for child in self.content]
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Node:
        content = data.get("content")
        return cls(
            type=str(data["type"]),
            attrs=dict(data.get("attrs") or {}),
            content=[cls.from_dict(child) for child in content] if content is not None else None,
            text=data.get("text"),
            marks=[Mark.from_dict(mark) for mark in data.get("marks") or []],
        )


# endregion
