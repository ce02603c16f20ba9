"""Tests for walking a Word tree into the flat block list."""

import pytest

from docweave.internals.config.define_config import ConversionOptions
from docweave.models import Block, BlockType
from docweave.processing.html_word_xml import blocks_to_word_xml
from docweave.processing.tree_walker import (
    NodeCategory,
    TreeWalker,
    WalkState,
    classify_node,
    extract_text,
    fallback_blocks,
    merge_inline_text,
    split_segments,
    walk_word_tree,
)
from docweave.processing.word_tree import Numbering, RunProperties, WordNode, word_node_from_element
from tests.helpers import body, line_break, paragraph, parse_word_xml, run, table


# region classification and text
@pytest.mark.parametrize(
    argnames="node_type,expected",
    argvalues=[
        ("paragraph", NodeCategory.BLOCK),
        ("run", NodeCategory.INLINE),
        ("hyperlink", NodeCategory.INLINE),
        ("body", NodeCategory.CONTAINER),
        ("tableCell", NodeCategory.CONTAINER),
        ("bookmarkStart", NodeCategory.IGNORE),
        ("deletion", NodeCategory.IGNORE),
        ("somethingNew", NodeCategory.BLOCK),
    ],
)
def test_classify_node(node_type: str, expected: NodeCategory) -> None:
    """Each type falls in exactly one category; unknown types are blocks."""
    assert classify_node(WordNode(node_type)) is expected


def test_extract_text_concatenates_in_document_order() -> None:
    node = paragraph(
        run("Tab"),
        WordNode("run", children=[WordNode("tab")]),
        run("here"),
        line_break(),
        WordNode("run", children=[WordNode("symbol", attributes={"char": "2022"})]),
    )
    assert extract_text(node) == "Tab\there\n•"


def test_extract_text_skips_ignored_subtrees() -> None:
    node = paragraph(
        run("kept "),
        WordNode("deletion", children=[run("deleted")]),
        WordNode("fieldChar"),
        WordNode("run", children=[WordNode("instrText", text="PAGE")]),
        run("text"),
    )
    assert extract_text(node) == "kept text"


def test_extract_text_includes_runs_after_children() -> None:
    node = WordNode("paragraph", children=[WordNode("text", text="a")], runs=[WordNode("text", text="b")])
    assert extract_text(node) == "ab"


def test_split_segments_drops_blank_lines() -> None:
    assert split_segments("one\r\n\n  two  \n") == ["one", "two"]


def test_fallback_blocks_split_on_blank_lines() -> None:
    blocks = fallback_blocks("First part\nstill first\n\nSecond <part>")
    assert [b.data["text"] for b in blocks] == ["First part\nstill first", "Second &lt;part&gt;"]
    assert all(b.type == BlockType.PARAGRAPH for b in blocks)


def test_fallback_blocks_split_on_lines_without_blank_lines() -> None:
    assert [b.data["text"] for b in fallback_blocks("one\ntwo\n")] == ["one", "two"]


# endregion


# region WalkState
def test_walk_state_append_returns_new_state() -> None:
    state = WalkState()
    block = Block.paragraph("a")
    new_state = state.append(block)
    assert state.blocks == ()
    assert new_state.blocks == (block,)
    assert new_state.last_open_index == 0


def test_merge_inline_text_appends_to_open_block() -> None:
    state = WalkState().append(Block.paragraph("Hello"))
    merged = merge_inline_text(state, " & bye")
    assert merged.blocks[0].data["text"] == "Hello &amp; bye"


def test_merge_inline_text_without_open_block_starts_paragraph() -> None:
    state = merge_inline_text(WalkState(), "loose")
    assert len(state.blocks) == 1
    assert state.blocks[0].type == BlockType.PARAGRAPH


def test_merge_inline_text_after_table_starts_paragraph() -> None:
    state = WalkState().append(Block.table([["a"]]))
    merged = merge_inline_text(state, "after")
    assert [b.type for b in merged.blocks] == [BlockType.TABLE, BlockType.PARAGRAPH]


def test_merge_inline_whitespace_alone_creates_nothing() -> None:
    assert merge_inline_text(WalkState(), "   ").blocks == ()


# endregion


# region paragraphs and headings
def test_n_paragraphs_give_n_blocks(no_inference: ConversionOptions) -> None:
    """Every non-empty paragraph is one block; empty paragraphs produce nothing."""
    root = body(
        paragraph("First paragraph."),
        paragraph(""),
        paragraph("Second paragraph."),
        paragraph("   "),
        paragraph("Third paragraph."),
    )
    blocks = walk_word_tree(root, no_inference)
    assert [b.plain_text for b in blocks] == ["First paragraph.", "Second paragraph.", "Third paragraph."]
    assert all(b.type == BlockType.PARAGRAPH for b in blocks)


@pytest.mark.parametrize(
    argnames="style,level",
    argvalues=[("Heading1", 1), ("heading 3", 3), ("Title", 1), ("标题 2", 2), ("Heading9", 6)],
)
def test_explicit_heading_styles(style: str, level: int) -> None:
    blocks = walk_word_tree(body(paragraph("Section text here.", style=style)))
    assert blocks[0].type == BlockType.HEADER
    assert blocks[0].data["level"] == level


def test_chapter_marker_is_inferred_as_level_one_heading() -> None:
    blocks = walk_word_tree(body(paragraph("第一章 总则"), paragraph("本合同的重要条款如下。")))
    assert blocks[0].type == BlockType.HEADER
    assert blocks[0].data["level"] == 1
    assert blocks[0].data["text"] == "第一章 总则"


def test_inference_off_keeps_paragraph(no_inference: ConversionOptions) -> None:
    blocks = walk_word_tree(body(paragraph("第一章 总则")), no_inference)
    assert blocks[0].type == BlockType.PARAGRAPH


def test_styled_non_heading_paragraph_is_never_inferred() -> None:
    blocks = walk_word_tree(body(paragraph("第一章 总则", style="BodyText")))
    assert blocks[0].type == BlockType.PARAGRAPH


def test_heading_node_level_attribute() -> None:
    node = WordNode("heading", children=[run("Scope")], attributes={"level": "2"})
    blocks = walk_word_tree(body(node))
    assert blocks[0].type == BlockType.HEADER
    assert blocks[0].data["level"] == 2


def test_heading_node_without_level_infers_one() -> None:
    node = WordNode("heading", children=[run("第二节 适用范围")])
    assert walk_word_tree(body(node))[0].data["level"] == 2


def test_paragraph_styles_include_alignment(no_inference: ConversionOptions) -> None:
    blocks = walk_word_tree(body(paragraph("Centered words.", alignment="center")), no_inference)
    assert blocks[0].styles["textAlign"] == "center"


# endregion


# region run formatting and line breaks
def test_run_formatting_becomes_inline_html(no_inference: ConversionOptions) -> None:
    root = body(paragraph(run("Bold", RunProperties(bold=True)), run(" rest.")))
    block = walk_word_tree(root, no_inference)[0]
    assert block.data["text"] == "<b>Bold</b> rest."
    assert block.plain_text == "Bold rest."
    assert block.data["runs"] == [
        {"text": "Bold", "styles": {"fontWeight": "bold"}},
        {"text": " rest.", "styles": {}},
    ]


def test_run_formatting_off_gives_escaped_text() -> None:
    options = ConversionOptions(infer_headings=False, preserve_run_formatting=False)
    root = body(paragraph(run("a < b", RunProperties(bold=True))))
    block = walk_word_tree(root, options)[0]
    assert block.data["text"] == "a &lt; b"
    assert "runs" not in block.data


def test_line_breaks_split_into_blocks(no_inference: ConversionOptions) -> None:
    root = body(paragraph(run("Line one"), line_break(), run("Line two")))
    blocks = walk_word_tree(root, no_inference)
    assert [b.plain_text for b in blocks] == ["Line one", "Line two"]


def test_line_breaks_kept_when_splitting_is_off() -> None:
    options = ConversionOptions(infer_headings=False, split_line_breaks=False)
    root = body(paragraph(run("Line one"), line_break(), run("Line two")))
    blocks = walk_word_tree(root, options)
    assert len(blocks) == 1
    assert blocks[0].plain_text == "Line one\nLine two"


# endregion


# region lists
def test_numbered_paragraphs_group_into_one_list() -> None:
    numbering = Numbering(num_id="5", num_format="decimal")
    root = body(
        paragraph("First item", numbering=numbering),
        paragraph("Second item", numbering=numbering),
    )
    blocks = walk_word_tree(root)
    assert len(blocks) == 1
    assert blocks[0].type == BlockType.LIST
    assert blocks[0].data == {"style": "ordered", "items": ["First item", "Second item"]}


def test_bullet_numbering_is_unordered() -> None:
    numbering = Numbering(num_id="1", num_format="bullet")
    blocks = walk_word_tree(body(paragraph("Point", numbering=numbering)))
    assert blocks[0].data["style"] == "unordered"


def test_different_numbering_ids_start_new_lists() -> None:
    root = body(
        paragraph("a", numbering=Numbering(num_id="1", num_format="bullet")),
        paragraph("b", numbering=Numbering(num_id="2", num_format="decimal")),
    )
    blocks = walk_word_tree(root)
    assert [b.data["items"] for b in blocks] == [["a"], ["b"]]


def test_paragraph_between_numbered_items_splits_the_list(no_inference: ConversionOptions) -> None:
    numbering = Numbering(num_id="5", num_format="decimal")
    root = body(
        paragraph("a", numbering=numbering),
        paragraph("Interruption."),
        paragraph("b", numbering=numbering),
    )
    blocks = walk_word_tree(root, no_inference)
    assert [b.type for b in blocks] == [BlockType.LIST, BlockType.PARAGRAPH, BlockType.LIST]


def test_heading_style_wins_over_numbering() -> None:
    numbering = Numbering(num_id="5", num_format="decimal")
    blocks = walk_word_tree(body(paragraph("1. Scope", style="Heading2", numbering=numbering)))
    assert blocks[0].type == BlockType.HEADER


@pytest.mark.parametrize("style", ["Quote", "Intense Quote"])
def test_quote_style_becomes_quote_block(style: str) -> None:
    blocks = walk_word_tree(body(paragraph("Stay hungry, stay foolish.", style=style)))
    assert blocks[0].type == BlockType.QUOTE
    assert blocks[0].data == {"text": "Stay hungry, stay foolish.", "caption": "", "alignment": "left"}


def test_exported_quote_comes_back_as_quote() -> None:
    """Quotes written to Word XML read back as quote blocks."""
    xml = blocks_to_word_xml([Block.quote("Knowledge is power.", "Bacon")])
    blocks = walk_word_tree(word_node_from_element(parse_word_xml(xml)))
    assert [b.type for b in blocks] == [BlockType.QUOTE]
    assert blocks[0].plain_text == "Knowledge is power."


def test_list_node_collects_items() -> None:
    node = WordNode(
        "list",
        children=[
            WordNode("listItem", children=[run("x")]),
            WordNode("listItem", children=[run("")]),
            WordNode("listItem", children=[run("y")]),
        ],
        attributes={"ordered": "true"},
    )
    blocks = walk_word_tree(body(node))
    assert blocks[0].data == {"style": "ordered", "items": ["x", "y"]}


def test_consecutive_list_item_nodes_merge() -> None:
    root = body(
        WordNode("listItem", children=[run("one")]),
        WordNode("listItem", children=[run("two")]),
    )
    blocks = walk_word_tree(root)
    assert len(blocks) == 1
    assert blocks[0].data["items"] == ["one", "two"]


# endregion


# region tables, images and other nodes
def test_table_block() -> None:
    blocks = walk_word_tree(body(table(["Name", "Role"], ["Alice", "Buyer"])))
    assert blocks[0].type == BlockType.TABLE
    assert blocks[0].data == {"content": [["Name", "Role"], ["Alice", "Buyer"]], "withHeadings": True}


def test_empty_table_is_dropped() -> None:
    assert walk_word_tree(body(table(["", ""]))) == []


def test_image_inside_paragraph_follows_it(no_inference: ConversionOptions) -> None:
    image = WordNode("image", attributes={"src": "data:image/png;base64,AAAA"})
    root = body(paragraph(run("Figure below."), WordNode("run", children=[image])))
    blocks = walk_word_tree(root, no_inference)
    assert [b.type for b in blocks] == [BlockType.PARAGRAPH, BlockType.IMAGE]
    assert blocks[1].data["file"]["url"] == "data:image/png;base64,AAAA"


def test_image_without_source_is_skipped() -> None:
    assert walk_word_tree(body(paragraph(WordNode("run", children=[WordNode("image")])))) == []


def test_page_break_produces_no_block(no_inference: ConversionOptions) -> None:
    root = body(paragraph("Before."), WordNode("pageBreak"), paragraph("After."))
    assert len(walk_word_tree(root, no_inference)) == 2


def test_unrecognized_block_becomes_paragraph() -> None:
    node = WordNode("textBox", children=[WordNode("text", text="Boxed text.")])
    blocks = walk_word_tree(body(node))
    assert blocks[0].type == BlockType.PARAGRAPH
    assert blocks[0].data["text"] == "Boxed text."


def test_inline_run_at_body_level_merges_into_previous_block(no_inference: ConversionOptions) -> None:
    root = body(paragraph("Hello."), run(" Again."))
    blocks = walk_word_tree(root, no_inference)
    assert len(blocks) == 1
    assert blocks[0].plain_text == "Hello. Again."


def test_containers_are_transparent(no_inference: ConversionOptions) -> None:
    root = body(
        WordNode("sdt", children=[WordNode("sdtContent", children=[paragraph("Inside a control.")])]),
        WordNode("bookmarkStart"),
    )
    assert [b.plain_text for b in walk_word_tree(root, no_inference)] == ["Inside a control."]


def test_walker_is_reusable() -> None:
    walker = TreeWalker(ConversionOptions(infer_headings=False))
    first = walker.walk(body(paragraph("One.")))
    second = walker.walk(body(paragraph("Two.")))
    assert [b.plain_text for b in first] == ["One."]
    assert [b.plain_text for b in second] == ["Two."]


# endregion
