"""Tests for the docx2editor pipeline and Word package conversion."""

import json
from pathlib import Path

import pytest

from docweave.internals.config.define_config import ConversionOptions, DocumentModel, UserConfig
from docweave.internals.errors import ConversionError
from docweave.models import BlockType, Document
from docweave.orchestrator import run_pipeline
from docweave.pipelines.docx_import import build_blocks, convert_word_package, convert_word_tree
from docweave.processing.word_tree import WordPackage
from tests.helpers import body, comment_end, comment_record, comment_start, paragraph


def _load(path: Path) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _manifests(base: Path) -> list[dict]:
    return [_load(path) for path in sorted((base / "manifests").glob("run_*_manifest.json"))]


# region run_pipeline
def test_import_pipeline_writes_block_document(sample_import_cfg: UserConfig, temp_output_dir: Path) -> None:
    output_path = run_pipeline(sample_import_cfg)

    assert output_path.parent == temp_output_dir.resolve()
    assert output_path.name.startswith("docweave_blocks_")
    assert output_path.suffix == ".json"

    data = _load(output_path)
    assert data["version"] == "2.28.2"
    document = Document.from_dict(data)

    first = document.blocks[0]
    assert first.type == BlockType.HEADER
    assert first.data["level"] == 1
    assert first.plain_text == "第一章 总则"

    texts = [block.plain_text for block in document.blocks]
    assert "本合同的重要条款如下。" in texts
    table = next(block for block in document.blocks if block.type == BlockType.TABLE)
    assert table.data["content"] == [["Name", "Role"], ["Alice", "Buyer"]]


def test_import_pipeline_attaches_comment(sample_import_cfg: UserConfig) -> None:
    document = Document.from_dict(_load(run_pipeline(sample_import_cfg)))

    [comment] = document.comments
    assert comment.author == "Reviewer"
    assert comment.initials == "RV"
    assert comment.content == "请核对"
    assert comment.range.text == "重要条款"

    [commented] = [block for block in document.blocks if block.comments]
    assert commented.plain_text == "本合同的重要条款如下。"
    attached = commented.comments[0]
    assert (attached.range.start_offset, attached.range.end_offset) == (4, 8)


def test_import_pipeline_writes_html(sample_import_cfg: UserConfig, temp_output_dir: Path) -> None:
    run_pipeline(sample_import_cfg)
    [html_file] = temp_output_dir.glob("docweave_document_*.html")
    html = html_file.read_text(encoding="utf-8")
    assert html.startswith("<h1")
    assert "<table>" in html


def test_import_pipeline_options(sample_import_cfg: UserConfig, temp_output_dir: Path) -> None:
    sample_import_cfg.write_html = False
    sample_import_cfg.extract_comments = False

    data = _load(run_pipeline(sample_import_cfg))

    assert "comments" not in data
    assert all("comments" not in block for block in data["blocks"])
    assert list(temp_output_dir.glob("*.html")) == []


def test_import_pipeline_node_model(sample_import_cfg: UserConfig) -> None:
    sample_import_cfg.model = DocumentModel.NODES
    output_path = run_pipeline(sample_import_cfg)

    assert output_path.name.startswith("docweave_nodes_")
    data = _load(output_path)
    assert data["type"] == "doc"
    assert data["content"][0]["type"] == "heading"
    assert data["content"][0]["attrs"]["level"] == 1
    assert any(node["type"] == "table" for node in data["content"])


def test_import_pipeline_records_manifest(sample_import_cfg: UserConfig, isolated_user_dirs: Path) -> None:
    output_path = run_pipeline(sample_import_cfg)

    [manifest] = _manifests(isolated_user_dirs)
    assert manifest["status"] == "success"
    assert manifest["output_path"] == str(output_path)


def test_import_pipeline_rejects_non_docx(tmp_path: Path, isolated_user_dirs: Path) -> None:
    not_docx = tmp_path / "notes.txt"
    not_docx.write_text("plain text", encoding="utf-8")
    cfg = UserConfig(input_docx=str(not_docx), output_folder=str(tmp_path / "out"))

    with pytest.raises(ValueError, match="Expected a .docx file"):
        run_pipeline(cfg)

    [manifest] = _manifests(isolated_user_dirs)
    assert manifest["status"] == "fail"
    assert manifest["error_type"] == "ValueError"


def test_import_pipeline_missing_input_fails_before_running(tmp_path: Path, isolated_user_dirs: Path) -> None:
    cfg = UserConfig(input_docx=str(tmp_path / "missing.docx"))
    with pytest.raises(FileNotFoundError):
        run_pipeline(cfg)
    assert _manifests(isolated_user_dirs) == []


# endregion


# region convert_word_package
def test_package_without_body_gives_empty_document() -> None:
    document = convert_word_package(WordPackage(body=None))
    assert [block.to_dict()["data"] for block in document.blocks] == [{"text": ""}]
    assert document.comments == []


def test_body_without_text_gives_empty_document() -> None:
    document = convert_word_package(WordPackage(body=body(paragraph(""), paragraph("   "))))
    assert len(document.blocks) == 1
    assert document.blocks[0].plain_text == ""


@pytest.mark.parametrize("error", [IndexError("list index out of range"), LookupError("no such key")])
def test_unexpected_failure_gives_empty_document(monkeypatch: pytest.MonkeyPatch, error: Exception) -> None:
    """Any failure during the walk or the comment pass degrades to Document.empty()."""

    def broken(package: WordPackage) -> list:
        raise error

    monkeypatch.setattr("docweave.pipelines.docx_import.extract_comments", broken)
    document = convert_word_package(WordPackage(body=body(paragraph("Some text here."))))
    assert [block.to_dict()["data"] for block in document.blocks] == [{"text": ""}]


def test_build_blocks_wraps_failures(monkeypatch: pytest.MonkeyPatch) -> None:
    def broken(package: WordPackage) -> list:
        raise IndexError("list index out of range")

    monkeypatch.setattr("docweave.pipelines.docx_import.extract_comments", broken)
    with pytest.raises(ConversionError, match="IndexError"):
        build_blocks(WordPackage(body=body(paragraph("Some text here."))), ConversionOptions())


def test_convert_word_package_with_comments(no_inference: ConversionOptions) -> None:
    package = WordPackage(
        body=body(
            paragraph("Scope", style="Heading1"),
            paragraph("The ", comment_start("5"), "deposit", comment_end("5"), " is due on signing."),
        ),
        comments=[comment_record("5", "Amount?", author="Kim")],
    )
    document = convert_word_package(package, no_inference)

    assert [block.type for block in document.blocks] == [BlockType.HEADER, BlockType.PARAGRAPH]
    [comment] = document.blocks[1].comments
    assert comment.content == "Amount?"
    assert (comment.range.start_offset, comment.range.end_offset) == (4, 11)
    assert document.comments == [comment]


def test_convert_word_package_comments_off() -> None:
    package = WordPackage(
        body=body(paragraph(comment_start("1"), "text", comment_end("1"))),
        comments=[comment_record("1", "note")],
    )
    document = convert_word_package(package, ConversionOptions(extract_comments=False))
    assert document.comments == []
    assert all(not block.comments for block in document.blocks)


def test_convert_word_package_unmatched_comment() -> None:
    package = WordPackage(body=body(paragraph("Body text here.")), comments=[comment_record("1", "orphan")])
    document = convert_word_package(package)

    assert document.comments[0].range.text == "(text not found)"
    assert all(not block.comments for block in document.blocks)


def test_convert_word_tree_from_dictionary() -> None:
    data = {
        "documentPart": {
            "body": {
                "type": "body",
                "children": [
                    {
                        "type": "paragraph",
                        "paragraphProperties": {"styleName": "Heading 2"},
                        "children": [{"type": "run", "children": [{"type": "text", "text": "Payment"}]}],
                    },
                    {
                        "type": "paragraph",
                        "children": [
                            {"type": "commentRangeStart", "id": "9"},
                            {"type": "run", "children": [{"type": "text", "text": "Net 30 days from invoice."}]},
                            {"type": "commentRangeEnd", "id": "9"},
                        ],
                    },
                ],
            }
        },
        "commentsPart": {
            "comments": [
                {
                    "id": "9",
                    "author": "Lee",
                    "date": "2024-03-01T10:00:00Z",
                    "children": [{"type": "paragraph", "children": [{"type": "text", "text": "Too long"}]}],
                }
            ]
        },
    }
    document = convert_word_tree(data, ConversionOptions(infer_headings=False))

    assert document.blocks[0].type == BlockType.HEADER
    assert document.blocks[0].data["level"] == 2
    assert document.blocks[1].plain_text == "Net 30 days from invoice."
    [comment] = document.blocks[1].comments
    assert comment.author == "Lee"
    assert comment.content == "Too long"
    assert comment.timestamp == 1709287200000


def test_convert_word_tree_without_document_part() -> None:
    document = convert_word_tree({})
    assert document.to_dict()["blocks"][0]["data"] == {"text": ""}


# endregion
