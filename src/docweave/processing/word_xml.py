"""Word XML <-> nested node model, plus the WordprocessingML writer both export paths share."""

# region imports
from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Optional

from docweave.internals.errors import ExportError, StructuralAbsenceError
from docweave.internals.run_context import get_pipeline_run_id
from docweave.models import Mark, Node
from docweave.processing.word_tree import (
    W_NS,
    local_name,
    ns,
    paragraph_properties_from_element,
    run_properties_from_element,
)
from docweave.styles.text_analyzer import clamp_heading_level
from docweave.styles.word_properties import (
    css_color_to_word_hex,
    css_size_to_half_points,
    decode_alignment,
    half_points_to_pt,
    nearest_highlight,
    word_color_to_css,
)

log = logging.getLogger("docweave")
# endregion

ET.register_namespace("w", W_NS)

XML_NS = "http://www.w3.org/XML/1998/namespace"
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
HEADING_STYLE_PATTERN = re.compile(r"heading|title|标题", re.IGNORECASE)
FIRST_NUMERAL_PATTERN = re.compile(r"\d+")

BULLET_NUM_ID = "1"
ORDERED_NUM_ID = "2"
QUOTE_INDENT_TWIPS = "720"
CODE_FONT = "Courier New"

# Containers whose children are read as if they were the parent's own inline content
INLINE_CONTAINERS = frozenset({"hyperlink", "ins", "smartTag", "fldSimple", "sdt", "sdtContent", "customXml"})


def w(name: str) -> str:
    """Qualified WordprocessingML tag name."""
    return f"{{{W_NS}}}{name}"


# region parse_xml_blob
def parse_xml_blob(xml_blob: bytes | str) -> ET.Element:
    """Parse an XML blob (bytes or str) into an Element."""
    try:
        if isinstance(xml_blob, str):
            xml_string = xml_blob
        else:
            xml_string = bytes(xml_blob).decode("utf-8")

        return ET.fromstring(xml_string)
    except UnicodeDecodeError as e:
        log.error(f"Invalid encoding in XML blob: {e}")
        raise ValueError(f"XML has invalid encoding: {e}") from e
    except ET.ParseError as e:
        log.error(f"Malformed XML: {e}")
        raise ValueError(f"XML is malformed: {e}") from e


# endregion


# region Word XML -> nodes
def empty_node_document() -> Node:
    """Minimal valid node document: one empty paragraph."""
    return Node.document([Node("paragraph", content=[])])


def word_xml_to_nodes(xml_blob: bytes | str) -> Node:
    """
    Convert a w:document (or bare w:body) into the nested node model.

    Never raises for bad input: a missing body or a failing conversion is logged
    and gives an empty document, so callers always have something to render.
    """
    pipeline_id = get_pipeline_run_id()
    try:
        root = parse_xml_blob(xml_blob)
        content = block_nodes(find_body(root))
    except StructuralAbsenceError as e:
        log.warning(f"{e}. Producing an empty document. [pipeline:{pipeline_id}]")
        return empty_node_document()
    except Exception as e:
        log.error(f"Word XML to node conversion failed: {e} [pipeline:{pipeline_id}]")
        return empty_node_document()

    if not content:
        log.debug(f"Word XML body held no paragraphs. [pipeline:{pipeline_id}]")
        return empty_node_document()
    return Node.document(content)


def find_body(root: ET.Element) -> ET.Element:
    if local_name(root.tag) == "body":
        return root
    body = root.find("w:body", ns)
    if body is None:
        raise StructuralAbsenceError("Word XML has no w:body element")
    return body


def block_nodes(container: ET.Element) -> list[Node]:
    nodes: list[Node] = []
    for child in container:
        name = local_name(child.tag)
        if name == "p":
            node = paragraph_to_node(child)
            if node is not None:
                nodes.append(node)
        elif name == "tbl":
            nodes.append(table_to_node(child))
        elif name == "sdt":
            content = child.find("w:sdtContent", ns)
            if content is not None:
                nodes.extend(block_nodes(content))
    return nodes


def paragraph_to_node(paragraph: ET.Element) -> Optional[Node]:
    """
    heading, listItem (wrapping a paragraph) or paragraph, by paragraph style and numbering.

    Empty headings and list items keep a single-space text node; an empty plain
    paragraph gives None and is left out.
    """
    ppr = paragraph.find("w:pPr", ns)
    props = paragraph_properties_from_element(ppr) if ppr is not None else None
    content = inline_nodes(paragraph)

    attrs = {}
    alignment = decode_alignment(props.alignment) if props is not None else None
    if alignment:
        attrs["textAlign"] = alignment

    filled = content or [Node.text_node(" ")]
    style = props.style_id if props is not None else None
    if style and HEADING_STYLE_PATTERN.search(style):
        numeral = FIRST_NUMERAL_PATTERN.search(style)
        level = clamp_heading_level(int(numeral.group()) if numeral else 1)
        return Node("heading", {"level": level, **attrs}, content=filled)

    if props is not None and props.numbering is not None:
        return Node("listItem", content=[Node("paragraph", attrs, content=filled)])

    if not content:
        return None
    return Node("paragraph", attrs, content=content)


def table_to_node(table: ET.Element) -> Node:
    rows = []
    for row in table.findall("w:tr", ns):
        cells = []
        for cell in row.findall("w:tc", ns):
            paragraphs = block_nodes(cell) or [Node("paragraph", content=[])]
            cells.append(Node("tableCell", content=paragraphs))
        rows.append(Node("tableRow", content=cells))
    return Node("table", content=rows)


def inline_nodes(element: ET.Element) -> list[Node]:
    nodes: list[Node] = []
    for child in element:
        name = local_name(child.tag)
        if name == "r":
            nodes.extend(run_to_nodes(child))
        elif name in INLINE_CONTAINERS:
            nodes.extend(inline_nodes(child))
    return nodes


def run_to_nodes(run: ET.Element) -> list[Node]:
    """One text node per text-bearing child of the run, each carrying the run's marks."""
    marks = marks_from_run(run.find("w:rPr", ns))
    nodes: list[Node] = []
    for child in run:
        name = local_name(child.tag)
        if name == "t" and child.text:
            nodes.append(Node.text_node(child.text, marks))
        elif name == "tab":
            nodes.append(Node.text_node("\t", marks))
        elif name == "br" and child.get(w("type")) != "page":
            nodes.append(Node("hardBreak"))
        elif name == "sym":
            char = child.get(w("char"))
            if char:
                try:
                    nodes.append(Node.text_node(chr(int(char, 16)), marks))
                except ValueError:
                    log.warning(f"Skipping w:sym with unreadable char {char!r}")
    return nodes


def marks_from_run(rpr: Optional[ET.Element]) -> list[Mark]:
    """Marks for a w:rPr. Color, size and font each get their own textStyle mark."""
    if rpr is None:
        return []
    props = run_properties_from_element(rpr)

    marks: list[Mark] = []
    if props.bold:
        marks.append(Mark("bold"))
    if props.italic:
        marks.append(Mark("italic"))
    if props.underline and props.underline != "none":
        marks.append(Mark("underline"))
    if props.strike:
        marks.append(Mark("strike"))

    color = word_color_to_css(props.color)
    if color:
        marks.append(Mark("textStyle", {"color": color}))
    size = half_points_to_pt(props.size)
    if size:
        marks.append(Mark("textStyle", {"fontSize": size}))
    font = props.fonts.preferred() if props.fonts is not None else None
    if font:
        marks.append(Mark("textStyle", {"fontFamily": font}))
    return marks


# endregion


# region Word XML writer
@dataclass(frozen=True)
class RunFormat:
    """Character formatting of one output run. `size` is in half-points."""

    bold: bool = False
    italic: bool = False
    underline: bool = False
    strike: bool = False
    color: Optional[str] = None
    size: Optional[int] = None
    font: Optional[str] = None
    highlight: Optional[str] = None


PLAIN = RunFormat()


def build_run_properties(fmt: RunFormat) -> Optional[ET.Element]:
    """w:rPr with children in schema order, or None for plain text."""
    if fmt == PLAIN:
        return None
    rpr = ET.Element(w("rPr"))
    if fmt.font:
        ET.SubElement(
            rpr,
            w("rFonts"),
            {w("ascii"): fmt.font, w("hAnsi"): fmt.font, w("eastAsia"): fmt.font},
        )
    if fmt.bold:
        ET.SubElement(rpr, w("b"))
    if fmt.italic:
        ET.SubElement(rpr, w("i"))
    if fmt.strike:
        ET.SubElement(rpr, w("strike"))
    if fmt.color:
        ET.SubElement(rpr, w("color"), {w("val"): fmt.color})
    if fmt.size:
        ET.SubElement(rpr, w("sz"), {w("val"): str(fmt.size)})
    if fmt.highlight:
        ET.SubElement(rpr, w("highlight"), {w("val"): fmt.highlight})
    if fmt.underline:
        ET.SubElement(rpr, w("u"), {w("val"): "single"})
    return rpr


def build_text_run(text: str, fmt: RunFormat = PLAIN) -> ET.Element:
    """A w:r for text; newlines become w:br and tabs w:tab."""
    run = ET.Element(w("r"))
    rpr = build_run_properties(fmt)
    if rpr is not None:
        run.append(rpr)

    for line_index, line in enumerate(text.split("\n")):
        if line_index:
            ET.SubElement(run, w("br"))
        for part_index, part in enumerate(line.split("\t")):
            if part_index:
                ET.SubElement(run, w("tab"))
            if part:
                t = ET.SubElement(run, w("t"))
                t.text = part
                if part != part.strip() or "  " in part:
                    t.set(f"{{{XML_NS}}}space", "preserve")
    return run


def build_break_run() -> ET.Element:
    run = ET.Element(w("r"))
    ET.SubElement(run, w("br"))
    return run


def build_paragraph(
    runs: list[ET.Element],
    style: Optional[str] = None,
    alignment: Optional[str] = None,
    num_id: Optional[str] = None,
    indent_left: Optional[str] = None,
) -> ET.Element:
    """A w:p. An empty run list gets a single-space placeholder run."""
    paragraph = ET.Element(w("p"))
    if style or alignment or num_id or indent_left:
        ppr = ET.SubElement(paragraph, w("pPr"))
        if style:
            ET.SubElement(ppr, w("pStyle"), {w("val"): style})
        if num_id:
            num_pr = ET.SubElement(ppr, w("numPr"))
            ET.SubElement(num_pr, w("ilvl"), {w("val"): "0"})
            ET.SubElement(num_pr, w("numId"), {w("val"): num_id})
        if indent_left:
            ET.SubElement(ppr, w("ind"), {w("left"): indent_left})
        if alignment:
            ET.SubElement(ppr, w("jc"), {w("val"): word_alignment(alignment)})

    paragraph.extend(runs or [build_text_run(" ")])
    return paragraph


def word_alignment(css_alignment: str) -> str:
    return {"justify": "both", "left": "left", "right": "right", "center": "center"}.get(
        css_alignment.strip().lower(), "left"
    )


def build_table(rows: list[list[list[ET.Element]]]) -> ET.Element:
    """A w:tbl from rows of cells, each cell a list of w:p elements."""
    table = ET.Element(w("tbl"))
    tbl_pr = ET.SubElement(table, w("tblPr"))
    ET.SubElement(tbl_pr, w("tblStyle"), {w("val"): "TableGrid"})
    ET.SubElement(tbl_pr, w("tblW"), {w("w"): "0", w("type"): "auto"})

    grid = ET.SubElement(table, w("tblGrid"))
    for _ in range(max((len(row) for row in rows), default=0)):
        ET.SubElement(grid, w("gridCol"))

    for row in rows:
        tr = ET.SubElement(table, w("tr"))
        for paragraphs in row:
            tc = ET.SubElement(tr, w("tc"))
            tc.extend(paragraphs or [build_paragraph([])])
    return table


def serialize_document(body_children: list[ET.Element]) -> str:
    """Wrap body content in w:document/w:body and serialize it with an XML declaration."""
    if not body_children:
        error_msg = "Word XML export produced no content"
        log.error(f"{error_msg} [pipeline:{get_pipeline_run_id()}]")
        raise ExportError(error_msg)

    document = ET.Element(w("document"))
    body = ET.SubElement(document, w("body"))
    body.extend(body_children)
    return XML_DECLARATION + ET.tostring(document, encoding="unicode")


# endregion


# region nodes -> Word XML
def run_format_from_marks(marks: list[Mark]) -> RunFormat:
    values: dict = {}
    for mark in marks:
        match mark.type:
            case "bold" | "strong":
                values["bold"] = True
            case "italic" | "em":
                values["italic"] = True
            case "underline":
                values["underline"] = True
            case "strike":
                values["strike"] = True
            case "highlight":
                values["highlight"] = nearest_highlight(mark.attrs.get("color")) or "yellow"
            case "textStyle":
                color = css_color_to_word_hex(mark.attrs.get("color"))
                if color:
                    values["color"] = color
                size = css_size_to_half_points(mark.attrs.get("fontSize"))
                if size:
                    values["size"] = size
                family = mark.attrs.get("fontFamily")
                if family:
                    values["font"] = family.split(",")[0].strip().strip("\"'")
            case _:
                log.debug(f"Mark '{mark.type}' has no Word run property; dropped.")
    return RunFormat(**values)


def inline_runs(node: Node) -> list[ET.Element]:
    runs: list[ET.Element] = []
    for child in node.content or []:
        if child.text is not None:
            if child.text:
                runs.append(build_text_run(child.text, run_format_from_marks(child.marks)))
        elif child.type == "hardBreak":
            runs.append(build_break_run())
        elif child.content:
            runs.extend(inline_runs(child))
    return runs


def node_to_elements(node: Node) -> list[ET.Element]:
    """Word paragraphs (or a table) for one block-level node."""
    match node.type:
        case "heading":
            level = clamp_heading_level(int(node.attrs.get("level", 1)))
            return [
                build_paragraph(
                    inline_runs(node), style=f"Heading{level}", alignment=node.attrs.get("textAlign")
                )
            ]
        case "paragraph":
            return [build_paragraph(inline_runs(node), alignment=node.attrs.get("textAlign"))]
        case "bulletList" | "orderedList":
            num_id = ORDERED_NUM_ID if node.type == "orderedList" else BULLET_NUM_ID
            elements: list[ET.Element] = []
            for item in node.content or []:
                elements.extend(list_item_elements(item, num_id))
            return elements
        case "listItem":
            return list_item_elements(node, BULLET_NUM_ID)
        case "blockquote":
            return [
                build_paragraph(inline_runs(child), style="Quote", indent_left=QUOTE_INDENT_TWIPS)
                for child in node.content or []
            ] or [build_paragraph([], style="Quote", indent_left=QUOTE_INDENT_TWIPS)]
        case "codeBlock":
            return [build_paragraph([build_text_run(node.plain_text, RunFormat(font=CODE_FONT))])]
        case "table":
            rows = [
                [
                    [element for child in cell.content or [] for element in node_to_elements(child)]
                    for cell in row.content or []
                ]
                for row in node.content or []
            ]
            return [build_table(rows)]
        case "text" | "hardBreak":
            return [build_paragraph(inline_runs(Node("paragraph", content=[node])))]
        case "horizontalRule" | "image":
            return []
        case _:
            log.debug(f"Node type '{node.type}' exported as a plain paragraph.")
            return [build_paragraph([build_text_run(node.plain_text)] if node.plain_text else [])]


def list_item_elements(item: Node, num_id: str) -> list[ET.Element]:
    """A list item's paragraphs as numbered paragraphs. Nested lists are flattened into the same level."""
    elements: list[ET.Element] = []
    for child in item.content or []:
        if child.type == "paragraph":
            elements.append(build_paragraph(inline_runs(child), style="ListParagraph", num_id=num_id))
        else:
            elements.extend(node_to_elements(child))
    return elements


def nodes_to_word_xml(document: Node) -> str:
    """
    Serialize a node document as Word XML.

    Raises:
        ExportError: If the document produced no Word content.
    """
    children: list[ET.Element] = []
    for node in document.content or []:
        children.extend(node_to_elements(node))
    return serialize_document(children)


# endregion
