"""Shared test helper functions."""

import xml.etree.ElementTree as ET
from typing import Optional

from docweave.processing.word_tree import (
    W_NS,
    Numbering,
    ParagraphProperties,
    RunProperties,
    WordCommentRecord,
    WordNode,
)


# region WordNode builders
def text_node(text: str) -> WordNode:
    return WordNode("text", text=text)


def run(text: str, props: Optional[RunProperties] = None) -> WordNode:
    """A run holding one text node."""
    return WordNode("run", children=[text_node(text)], properties=props)


def line_break() -> WordNode:
    return WordNode("run", children=[WordNode("br")])


def paragraph(
    *content: str | WordNode,
    style: Optional[str] = None,
    alignment: Optional[str] = None,
    numbering: Optional[Numbering] = None,
) -> WordNode:
    """A paragraph; plain strings become unformatted runs."""
    children = [run(item) if isinstance(item, str) else item for item in content]
    props = None
    if style or alignment or numbering:
        props = ParagraphProperties(style_id=style, alignment=alignment, numbering=numbering)
    return WordNode("paragraph", children=children, properties=props)


def body(*children: WordNode) -> WordNode:
    return WordNode("body", children=list(children))


def table(*rows: list[str]) -> WordNode:
    return WordNode(
        "table",
        children=[
            WordNode(
                "tableRow",
                children=[WordNode("tableCell", children=[paragraph(cell)]) for cell in row],
            )
            for row in rows
        ],
    )


def comment_start(comment_id: str) -> WordNode:
    return WordNode("commentRangeStart", attributes={"id": comment_id})


def comment_end(comment_id: str) -> WordNode:
    return WordNode("commentRangeEnd", attributes={"id": comment_id})


def comment_record(
    comment_id: str,
    text: str = "",
    author: Optional[str] = "Reviewer",
    date: Optional[str] = "2024-01-01T00:00:00Z",
) -> WordCommentRecord:
    return WordCommentRecord(
        id=comment_id,
        author=author,
        date=date,
        children=[paragraph(text)] if text else [],
    )


# endregion


# region Word XML helpers
W_DECL = f'xmlns:w="{W_NS}"'


def word_document(body_xml: str) -> str:
    """Wrap body XML in a w:document with the w namespace declared."""
    return f"<w:document {W_DECL}><w:body>{body_xml}</w:body></w:document>"


def parse_word_xml(xml: str) -> ET.Element:
    """Parse exported Word XML and return its w:body."""
    root = ET.fromstring(xml)
    found = root.find(f"{{{W_NS}}}body")
    if found is None:
        raise AssertionError("Exported Word XML has no w:body")
    return found


def w(name: str) -> str:
    return f"{{{W_NS}}}{name}"


def body_paragraphs(body_element: ET.Element) -> list[ET.Element]:
    return body_element.findall(w("p"))


def paragraph_text(p: ET.Element) -> str:
    return "".join(t.text or "" for t in p.iter(w("t")))


def paragraph_style(p: ET.Element) -> Optional[str]:
    style = p.find(f"{w('pPr')}/{w('pStyle')}")
    return style.get(w("val")) if style is not None else None


# endregion
