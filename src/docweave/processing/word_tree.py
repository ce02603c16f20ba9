"""Typed model of a parsed Word document tree.

The tree comes from one of two producers:
    - an external parser handing us plain dictionaries (`type`, `children`, `text`,
      `paragraphProperties` / `runProperties` / `cssStyle` bags), or
    - an OOXML element tree (lxml from python-docx, or xml.etree.ElementTree).

Both are turned into WordNode objects so the rest of the code never probes
untyped dictionaries. Property bags are decoded into one dataclass per known
element type, with UnknownProperties as the catch-all.
"""

# region imports
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Mapping, Optional, Union

log = logging.getLogger("docweave")
# endregion

# region Namespaces
W_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"
R_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
A_NS = "http://schemas.openxmlformats.org/drawingml/2006/main"
V_NS = "urn:schemas-microsoft-com:vml"

ns = {"w": W_NS, "r": R_NS, "a": A_NS, "v": V_NS}

# OOXML local tag name -> WordNode type
ELEMENT_TYPES: Mapping[str, str] = {
    "body": "body",
    "p": "paragraph",
    "r": "run",
    "t": "text",
    "tab": "tab",
    "br": "br",
    "cr": "br",
    "sym": "symbol",
    "tbl": "table",
    "tr": "tableRow",
    "tc": "tableCell",
    "hyperlink": "hyperlink",
    "sdt": "sdt",
    "sdtContent": "sdtContent",
    "smartTag": "smartTag",
    "customXml": "customXml",
    "ins": "insertion",
    "del": "deletion",
    "fldSimple": "fieldSimple",
    "fldChar": "fieldChar",
    "instrText": "instrText",
    "delText": "deletedText",
    "commentRangeStart": "commentRangeStart",
    "commentRangeEnd": "commentRangeEnd",
    "commentReference": "commentReference",
    "bookmarkStart": "bookmarkStart",
    "bookmarkEnd": "bookmarkEnd",
    "proofErr": "proofErr",
    "footnoteReference": "footnoteReference",
    "endnoteReference": "endnoteReference",
    "lastRenderedPageBreak": "lastRenderedPageBreak",
    "sectPr": "sectionProperties",
    "drawing": "image",
    "pict": "image",
    "AlternateContent": "alternateContent",
}

# Property children are decoded into the parent's properties, never turned into nodes.
PROPERTY_TAGS = frozenset({"pPr", "rPr", "tblPr", "tblGrid", "trPr", "tcPr", "sdtPr", "sdtEndPr"})

TOGGLE_OFF_VALUES = frozenset({"0", "false", "off", "none"})
# endregion


# region Property dataclasses
@dataclass(frozen=True)
class Numbering:
    num_id: str
    level: int = 0
    num_format: Optional[str] = None

    @property
    def is_bullet(self) -> bool:
        return self.num_format == "bullet"


@dataclass(frozen=True)
class ParagraphProperties:
    """Decoded w:pPr. Lengths are raw twips strings as Word stores them."""

    style_id: Optional[str] = None
    alignment: Optional[str] = None
    spacing_before: Optional[str] = None
    spacing_after: Optional[str] = None
    line: Optional[str] = None
    line_rule: Optional[str] = None
    indent_left: Optional[str] = None
    indent_right: Optional[str] = None
    indent_first_line: Optional[str] = None
    indent_hanging: Optional[str] = None
    shading_fill: Optional[str] = None
    numbering: Optional[Numbering] = None


@dataclass(frozen=True)
class RunFonts:
    ascii: Optional[str] = None
    h_ansi: Optional[str] = None
    east_asia: Optional[str] = None
    cs: Optional[str] = None
    hint: Optional[str] = None

    def preferred(self) -> Optional[str]:
        """eastAsia when hinted, otherwise ascii, hAnsi, eastAsia, cs in that order."""
        if self.hint == "eastAsia" and self.east_asia:
            return self.east_asia
        return self.ascii or self.h_ansi or self.east_asia or self.cs


@dataclass(frozen=True)
class RunProperties:
    """Decoded w:rPr. `size` is in half-points."""

    fonts: Optional[RunFonts] = None
    size: Optional[str] = None
    color: Optional[str] = None
    bold: Optional[bool] = None
    italic: Optional[bool] = None
    underline: Optional[str] = None
    strike: Optional[bool] = None
    shading_fill: Optional[str] = None
    highlight: Optional[str] = None
    vert_align: Optional[str] = None
    spacing: Optional[str] = None


@dataclass(frozen=True)
class UnknownProperties:
    raw: Mapping[str, Any] = field(default_factory=dict)


NodeProperties = Union[ParagraphProperties, RunProperties, UnknownProperties]
# endregion


# region WordNode
@dataclass
class WordNode:
    """One node of the parsed Word tree. Children are in document order."""

    type: str
    children: list[WordNode] = field(default_factory=list)
    text: Optional[str] = None
    properties: Optional[NodeProperties] = None
    attributes: dict[str, str] = field(default_factory=dict)
    runs: list[WordNode] = field(default_factory=list)

    @property
    def paragraph_properties(self) -> Optional[ParagraphProperties]:
        if isinstance(self.properties, ParagraphProperties):
            return self.properties
        return None

    @property
    def run_properties(self) -> Optional[RunProperties]:
        if isinstance(self.properties, RunProperties):
            return self.properties
        return None

    @property
    def style_name(self) -> Optional[str]:
        """Explicit paragraph style, if the producer recorded one."""
        props = self.paragraph_properties
        if props is not None and props.style_id:
            return props.style_id
        return self.attributes.get("style") or None

    def iter_descendants(self) -> Iterator[WordNode]:
        """Depth-first, pre-order, excluding self."""
        for child in self.children:
            yield child
            yield from child.iter_descendants()
        for run in self.runs:
            yield run
            yield from run.iter_descendants()


@dataclass
class WordCommentRecord:
    """One entry of the document's comments part."""

    id: str
    author: Optional[str] = None
    date: Optional[str] = None
    initials: Optional[str] = None
    children: list[WordNode] = field(default_factory=list)
    replies: list[WordCommentRecord] = field(default_factory=list)
    resolved: bool = False


@dataclass
class WordPackage:
    """The two parts of a parsed .docx the converters read: body and comments."""

    body: Optional[WordNode] = None
    comments: list[WordCommentRecord] = field(default_factory=list)


# endregion


# region Dictionary input
def word_node_from_dict(data: Mapping[str, Any]) -> WordNode:
    """Build a WordNode tree from an external parser's dictionary output."""
    node_type = str(data.get("type") or "unknown")
    text = data.get("text")

    children = [
        word_node_from_dict(child)
        for child in data.get("children") or []
        if isinstance(child, Mapping)
    ]
    runs = [
        word_node_from_dict(run)
        for run in data.get("runs") or []
        if isinstance(run, Mapping)
    ]

    attributes = {
        str(key): str(value)
        for key, value in (data.get("attributes") or {}).items()
        if value is not None
    }
    for key in ("id", "src", "imageData", "caption", "char", "style", "class", "level"):
        if key in data and data[key] is not None and key not in attributes:
            attributes[key] = str(data[key])

    return WordNode(
        type=node_type,
        children=children,
        text=str(text) if text is not None else None,
        properties=_properties_from_dict(node_type, data),
        attributes=attributes,
        runs=runs,
    )


def _properties_from_dict(node_type: str, data: Mapping[str, Any]) -> Optional[NodeProperties]:
    match node_type:
        case "paragraph" | "heading" | "listItem" | "list":
            bag = data.get("paragraphProperties")
            if isinstance(bag, Mapping):
                return paragraph_properties_from_dict(bag)
        case "run" | "text":
            bag = data.get("runProperties")
            if isinstance(bag, Mapping):
                return run_properties_from_dict(bag)
        case _:
            pass

    for key in ("paragraphProperties", "runProperties", "cssStyle"):
        bag = data.get(key)
        if isinstance(bag, Mapping) and bag:
            return UnknownProperties(raw=dict(bag))
    return None


def _pick(bag: Mapping[str, Any], *keys: str) -> Optional[str]:
    for key in keys:
        value = bag.get(key)
        if value is not None and value != "":
            return str(value)
    return None


def _sub_bag(bag: Mapping[str, Any], *keys: str) -> Mapping[str, Any]:
    for key in keys:
        value = bag.get(key)
        if isinstance(value, Mapping):
            return value
    return {}


def _toggle(value: Any) -> Optional[bool]:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, Mapping):
        value = value.get("val", True)
        if isinstance(value, bool):
            return value
    return str(value).strip().lower() not in TOGGLE_OFF_VALUES


def paragraph_properties_from_dict(bag: Mapping[str, Any]) -> ParagraphProperties:
    spacing = _sub_bag(bag, "spacing")
    indent = _sub_bag(bag, "indentation", "ind", "indent")
    shading = _sub_bag(bag, "shading", "shd")
    numbering_bag = _sub_bag(bag, "numbering", "numPr")

    numbering = None
    num_id = _pick(numbering_bag, "id", "numId", "num_id")
    if num_id is not None:
        numbering = Numbering(
            num_id=num_id,
            level=_to_int(_pick(numbering_bag, "level", "ilvl")) or 0,
            num_format=_pick(numbering_bag, "format", "numFmt"),
        )

    return ParagraphProperties(
        style_id=_pick(bag, "style", "styleId", "styleName", "pStyle"),
        alignment=_pick(bag, "alignment", "justification", "jc"),
        spacing_before=_pick(spacing, "before"),
        spacing_after=_pick(spacing, "after"),
        line=_pick(spacing, "line") or _pick(bag, "lineSpacing"),
        line_rule=_pick(spacing, "lineRule", "rule"),
        indent_left=_pick(indent, "left", "start"),
        indent_right=_pick(indent, "right", "end"),
        indent_first_line=_pick(indent, "firstLine"),
        indent_hanging=_pick(indent, "hanging"),
        shading_fill=_pick(shading, "fill"),
        numbering=numbering,
    )


def run_properties_from_dict(bag: Mapping[str, Any]) -> RunProperties:
    fonts = None
    fonts_bag = _sub_bag(bag, "fonts", "rFonts")
    if fonts_bag:
        fonts = RunFonts(
            ascii=_pick(fonts_bag, "ascii"),
            h_ansi=_pick(fonts_bag, "hAnsi"),
            east_asia=_pick(fonts_bag, "eastAsia"),
            cs=_pick(fonts_bag, "cs"),
            hint=_pick(fonts_bag, "hint"),
        )
    elif _pick(bag, "font", "fontFamily"):
        fonts = RunFonts(ascii=_pick(bag, "font", "fontFamily"))

    underline = bag.get("underline", bag.get("u"))
    if isinstance(underline, bool):
        underline = "single" if underline else None
    elif isinstance(underline, Mapping):
        underline = _pick(underline, "val") or "single"
    elif underline is not None:
        underline = str(underline)

    shading = _sub_bag(bag, "shading", "shd")

    return RunProperties(
        fonts=fonts,
        size=_pick(bag, "size", "sz"),
        color=_pick(bag, "color"),
        bold=_toggle(bag.get("bold", bag.get("b"))),
        italic=_toggle(bag.get("italic", bag.get("i"))),
        underline=underline,
        strike=_toggle(bag.get("strike")),
        shading_fill=_pick(shading, "fill"),
        highlight=_pick(bag, "highlight"),
        vert_align=_pick(bag, "vertAlign", "verticalAlign"),
        spacing=_pick(bag, "spacing") if not isinstance(bag.get("spacing"), Mapping) else None,
    )


def _to_int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def word_package_from_dict(data: Mapping[str, Any]) -> WordPackage:
    """Build a WordPackage from `{documentPart: {body}, commentsPart: {comments}}`."""
    document_part = data.get("documentPart") or {}
    body_data = document_part.get("body") if isinstance(document_part, Mapping) else None
    body = word_node_from_dict(body_data) if isinstance(body_data, Mapping) else None

    comments_part = data.get("commentsPart") or {}
    raw_comments = comments_part.get("comments") if isinstance(comments_part, Mapping) else None
    comments = [
        comment_record_from_dict(item)
        for item in raw_comments or []
        if isinstance(item, Mapping)
    ]
    return WordPackage(body=body, comments=comments)


def comment_record_from_dict(data: Mapping[str, Any]) -> WordCommentRecord:
    return WordCommentRecord(
        id=str(data.get("id", "")),
        author=_pick(data, "author"),
        date=_pick(data, "date"),
        initials=_pick(data, "initials"),
        children=[
            word_node_from_dict(child)
            for child in data.get("children") or []
            if isinstance(child, Mapping)
        ],
        replies=[
            comment_record_from_dict(reply)
            for reply in data.get("replies") or []
            if isinstance(reply, Mapping)
        ],
        resolved=bool(data.get("resolved", False)),
    )


# endregion


# region Element input
def local_name(tag: Any) -> Optional[str]:
    """Strip the namespace from an element tag. None for comments/processing instructions."""
    if not isinstance(tag, str):
        return None
    return tag.rsplit("}", 1)[-1]


def _w_attr(element: Any, name: str) -> Optional[str]:
    value = element.get(f"{{{W_NS}}}{name}")
    if value is None:
        value = element.get(name)
    return value


def _w_child(element: Any, name: str) -> Any:
    found = element.find(f"{{{W_NS}}}{name}")
    if found is None:
        found = element.find(name)
    return found


def _element_toggle(element: Any) -> Optional[bool]:
    if element is None:
        return None
    val = _w_attr(element, "val")
    if val is None:
        return True
    return val.strip().lower() not in TOGGLE_OFF_VALUES


def paragraph_properties_from_element(
    ppr: Any, numbering_formats: Optional[Mapping[tuple[str, int], str]] = None
) -> ParagraphProperties:
    """Decode a w:pPr element."""
    style = _w_child(ppr, "pStyle")
    jc = _w_child(ppr, "jc")
    spacing = _w_child(ppr, "spacing")
    ind = _w_child(ppr, "ind")
    shd = _w_child(ppr, "shd")
    num_pr = _w_child(ppr, "numPr")

    numbering = None
    if num_pr is not None:
        num_id_el = _w_child(num_pr, "numId")
        ilvl_el = _w_child(num_pr, "ilvl")
        num_id = _w_attr(num_id_el, "val") if num_id_el is not None else None
        level = _to_int(_w_attr(ilvl_el, "val")) if ilvl_el is not None else None
        # numId 0 means "numbering removed"
        if num_id and num_id != "0":
            level = level or 0
            num_format = (numbering_formats or {}).get((num_id, level))
            numbering = Numbering(num_id=num_id, level=level, num_format=num_format)

    def attr(element: Any, *names: str) -> Optional[str]:
        if element is None:
            return None
        for name in names:
            value = _w_attr(element, name)
            if value is not None:
                return value
        return None

    return ParagraphProperties(
        style_id=attr(style, "val"),
        alignment=attr(jc, "val"),
        spacing_before=attr(spacing, "before"),
        spacing_after=attr(spacing, "after"),
        line=attr(spacing, "line"),
        line_rule=attr(spacing, "lineRule"),
        indent_left=attr(ind, "left", "start"),
        indent_right=attr(ind, "right", "end"),
        indent_first_line=attr(ind, "firstLine"),
        indent_hanging=attr(ind, "hanging"),
        shading_fill=attr(shd, "fill"),
        numbering=numbering,
    )


def run_properties_from_element(rpr: Any) -> RunProperties:
    """Decode a w:rPr element."""
    fonts_el = _w_child(rpr, "rFonts")
    fonts = None
    if fonts_el is not None:
        fonts = RunFonts(
            ascii=_w_attr(fonts_el, "ascii"),
            h_ansi=_w_attr(fonts_el, "hAnsi"),
            east_asia=_w_attr(fonts_el, "eastAsia"),
            cs=_w_attr(fonts_el, "cs"),
            hint=_w_attr(fonts_el, "hint"),
        )

    def val(name: str) -> Optional[str]:
        element = _w_child(rpr, name)
        return _w_attr(element, "val") if element is not None else None

    underline_el = _w_child(rpr, "u")
    underline = None
    if underline_el is not None:
        underline = _w_attr(underline_el, "val") or "single"

    shd = _w_child(rpr, "shd")

    return RunProperties(
        fonts=fonts,
        size=val("sz"),
        color=val("color"),
        bold=_element_toggle(_w_child(rpr, "b")),
        italic=_element_toggle(_w_child(rpr, "i")),
        underline=underline,
        strike=_element_toggle(_w_child(rpr, "strike")),
        shading_fill=_w_attr(shd, "fill") if shd is not None else None,
        highlight=val("highlight"),
        vert_align=val("vertAlign"),
        spacing=val("spacing"),
    )


def word_node_from_element(
    element: Any,
    numbering_formats: Optional[Mapping[tuple[str, int], str]] = None,
    resolve_image: Optional[Callable[[str], Optional[str]]] = None,
) -> WordNode:
    """
    Convert an OOXML element (lxml or ElementTree) into a WordNode tree.

    Args:
        element: The element to convert, usually w:body or a w:p.
        numbering_formats: (numId, ilvl) -> numFmt, from the numbering part.
        resolve_image: Maps a relationship id to an image URL (e.g. a data URI).
    """
    name = local_name(element.tag) or "unknown"
    node_type = ELEMENT_TYPES.get(name, name)

    attributes = {}
    for key, value in element.attrib.items():
        attr_name = local_name(key)
        if attr_name:
            attributes[attr_name] = value

    if node_type == "br" and attributes.get("type") == "page":
        node_type = "pageBreak"

    if node_type == "image":
        return _image_node(element, attributes, resolve_image)

    properties: Optional[NodeProperties] = None
    children: list[WordNode] = []
    for child in element:
        child_name = local_name(child.tag)
        if child_name is None:
            continue
        if child_name == "pPr":
            properties = paragraph_properties_from_element(child, numbering_formats)
            continue
        if child_name == "rPr" and node_type == "run":
            properties = run_properties_from_element(child)
            continue
        if child_name in PROPERTY_TAGS:
            continue
        # Only the fallback branch of mc:AlternateContent, so content is not duplicated
        if node_type == "alternateContent" and child_name != "Fallback":
            continue
        children.append(word_node_from_element(child, numbering_formats, resolve_image))

    text = element.text if node_type in ("text", "instrText", "deletedText") else None

    return WordNode(
        type=node_type,
        children=children,
        text=text,
        properties=properties,
        attributes=attributes,
    )


def _image_node(
    element: Any,
    attributes: dict[str, str],
    resolve_image: Optional[Callable[[str], Optional[str]]],
) -> WordNode:
    rel_id = None
    for descendant in element.iter():
        name = local_name(descendant.tag)
        if name == "blip":
            rel_id = descendant.get(f"{{{R_NS}}}embed")
        elif name == "imagedata":
            rel_id = descendant.get(f"{{{R_NS}}}id")
        if rel_id:
            break

    if rel_id:
        attributes["embed"] = rel_id
        if resolve_image is not None:
            url = resolve_image(rel_id)
            if url:
                attributes["src"] = url
    return WordNode(type="image", attributes=attributes)


# endregion
