"""Tests for building typed WordNode trees from dictionaries and OOXML elements."""

import xml.etree.ElementTree as ET

from docweave.processing.word_tree import (
    ParagraphProperties,
    RunProperties,
    UnknownProperties,
    WordNode,
    local_name,
    word_node_from_dict,
    word_node_from_element,
    word_package_from_dict,
)
from tests.helpers import W_DECL


# region dictionary input
def test_word_node_from_dict_decodes_property_bags() -> None:
    data = {
        "type": "paragraph",
        "paragraphProperties": {
            "styleName": "Heading 2",
            "justification": "center",
            "spacing": {"before": "240", "line": "360", "lineRule": "auto"},
            "indentation": {"left": "720", "hanging": "360"},
            "numbering": {"id": "3", "level": "1", "format": "bullet"},
        },
        "children": [
            {
                "type": "run",
                "runProperties": {"bold": True, "sz": "28", "color": "FF0000", "rFonts": {"eastAsia": "黑体"}},
                "children": [{"type": "text", "text": "Scope"}],
            }
        ],
    }
    node = word_node_from_dict(data)

    props = node.paragraph_properties
    assert isinstance(props, ParagraphProperties)
    assert props.style_id == "Heading 2"
    assert props.alignment == "center"
    assert props.spacing_before == "240"
    assert props.line == "360"
    assert props.indent_left == "720"
    assert props.indent_hanging == "360"
    assert props.numbering is not None
    assert props.numbering.num_id == "3"
    assert props.numbering.level == 1
    assert props.numbering.is_bullet

    run_props = node.children[0].run_properties
    assert isinstance(run_props, RunProperties)
    assert run_props.bold is True
    assert run_props.size == "28"
    assert run_props.fonts is not None
    assert run_props.fonts.preferred() == "黑体"
    assert node.children[0].children[0].text == "Scope"


def test_word_node_from_dict_toggle_values() -> None:
    node = word_node_from_dict(
        {"type": "run", "runProperties": {"bold": {"val": "false"}, "italic": "1", "underline": True}}
    )
    props = node.run_properties
    assert props is not None
    assert props.bold is False
    assert props.italic is True
    assert props.underline == "single"


def test_word_node_from_dict_unknown_bags_are_kept_raw() -> None:
    node = word_node_from_dict({"type": "table", "cssStyle": {"width": "100%"}})
    assert isinstance(node.properties, UnknownProperties)
    assert node.properties.raw == {"width": "100%"}


def test_word_node_from_dict_copies_known_attributes() -> None:
    node = word_node_from_dict({"type": "image", "src": "data:image/png;base64,AAA", "caption": "Logo", "level": 2})
    assert node.attributes == {"src": "data:image/png;base64,AAA", "caption": "Logo", "level": "2"}


def test_word_node_from_dict_skips_non_mapping_children() -> None:
    node = word_node_from_dict({"type": "body", "children": ["junk", None, {"type": "paragraph"}]})
    assert [child.type for child in node.children] == ["paragraph"]


def test_style_name_falls_back_to_attribute() -> None:
    node = WordNode("paragraph", attributes={"style": "Title"})
    assert node.style_name == "Title"
    assert WordNode("paragraph").style_name is None


def test_iter_descendants_is_pre_order_and_includes_runs() -> None:
    inner = WordNode("text", text="a")
    run = WordNode("run", children=[inner])
    extra = WordNode("run", text="b")
    node = WordNode("paragraph", children=[run], runs=[extra])
    assert list(node.iter_descendants()) == [run, inner, extra]


def test_word_package_from_dict() -> None:
    package = word_package_from_dict(
        {
            "documentPart": {"body": {"type": "body", "children": [{"type": "paragraph"}]}},
            "commentsPart": {
                "comments": [
                    {
                        "id": 7,
                        "author": "Lee",
                        "date": "2024-03-01T10:00:00Z",
                        "children": [{"type": "paragraph", "children": [{"type": "text", "text": "Check"}]}],
                        "replies": [{"id": 8, "author": "Kim"}],
                    }
                ]
            },
        }
    )
    assert package.body is not None
    assert package.body.type == "body"
    assert len(package.comments) == 1
    record = package.comments[0]
    assert record.id == "7"
    assert record.author == "Lee"
    assert record.replies[0].id == "8"


def test_word_package_from_dict_without_body() -> None:
    package = word_package_from_dict({})
    assert package.body is None
    assert package.comments == []


# endregion


# region element input
def _element(xml: str) -> ET.Element:
    return ET.fromstring(xml)


def test_word_node_from_element_paragraph() -> None:
    element = _element(
        f"<w:p {W_DECL}>"
        '<w:pPr><w:pStyle w:val="Heading1"/><w:jc w:val="center"/>'
        '<w:numPr><w:ilvl w:val="0"/><w:numId w:val="4"/></w:numPr></w:pPr>'
        '<w:r><w:rPr><w:b/><w:i w:val="0"/><w:u w:val="double"/><w:sz w:val="32"/></w:rPr><w:t>Title</w:t></w:r>'
        "</w:p>"
    )
    node = word_node_from_element(element, numbering_formats={("4", 0): "decimal"})

    assert node.type == "paragraph"
    props = node.paragraph_properties
    assert props is not None
    assert props.style_id == "Heading1"
    assert props.alignment == "center"
    assert props.numbering is not None
    assert props.numbering.num_format == "decimal"
    assert not props.numbering.is_bullet

    run = node.children[0]
    assert run.type == "run"
    run_props = run.run_properties
    assert run_props is not None
    assert run_props.bold is True
    assert run_props.italic is False
    assert run_props.underline == "double"
    assert run_props.size == "32"
    assert run.children[0].type == "text"
    assert run.children[0].text == "Title"


def test_word_node_from_element_num_id_zero_is_not_numbered() -> None:
    element = _element(
        f'<w:p {W_DECL}><w:pPr><w:numPr><w:ilvl w:val="0"/><w:numId w:val="0"/></w:numPr></w:pPr></w:p>'
    )
    props = word_node_from_element(element).paragraph_properties
    assert props is not None
    assert props.numbering is None


def test_word_node_from_element_maps_types_and_page_breaks() -> None:
    element = _element(
        f"<w:body {W_DECL}>"
        '<w:p><w:r><w:t>a</w:t><w:tab/><w:br/><w:br w:type="page"/><w:sym w:char="F0B7"/></w:r></w:p>'
        '<w:p><w:commentRangeStart w:id="1"/><w:commentRangeEnd w:id="1"/></w:p>'
        "<w:sectPr/>"
        "</w:body>"
    )
    node = word_node_from_element(element)

    assert node.type == "body"
    run = node.children[0].children[0]
    assert [child.type for child in run.children] == ["text", "tab", "br", "pageBreak", "symbol"]
    assert run.children[4].attributes["char"] == "F0B7"
    markers = node.children[1].children
    assert [marker.type for marker in markers] == ["commentRangeStart", "commentRangeEnd"]
    assert markers[0].attributes["id"] == "1"
    assert node.children[2].type == "sectionProperties"


def test_word_node_from_element_resolves_images() -> None:
    element = _element(
        f'<w:drawing {W_DECL} xmlns:a="http://schemas.openxmlformats.org/drawingml/2006/main" '
        'xmlns:r="http://schemas.openxmlformats.org/officeDocument/2006/relationships">'
        '<a:blip r:embed="rId5"/></w:drawing>'
    )
    node = word_node_from_element(element, resolve_image=lambda rel_id: f"resolved:{rel_id}")
    assert node.type == "image"
    assert node.attributes["embed"] == "rId5"
    assert node.attributes["src"] == "resolved:rId5"


def test_local_name() -> None:
    assert local_name("{http://example.com}p") == "p"
    assert local_name("p") == "p"
    assert local_name(None) is None


# endregion
