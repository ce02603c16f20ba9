"""Shared fixtures"""

# tests/conftest.py
from pathlib import Path

import docx
import pytest

from docweave.internals.config.define_config import ConversionOptions, UserConfig
from docweave.internals.run_context import seed_pipeline_run_id


@pytest.fixture(autouse=True)
def isolated_user_dirs(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point ~/Documents at a temp folder so no test writes into the real user folders.

    Every user folder helper goes through paths.user_documents_dir(), so patching that
    one name is enough for scaffold, manifests, logs and default output.
    """
    documents = tmp_path / "Documents"
    documents.mkdir()
    monkeypatch.setattr(
        "docweave.internals.paths.user_documents_dir", lambda: str(documents)
    )
    return documents / "docweave"


@pytest.fixture(autouse=True)
def reset_pipeline_run_id() -> None:
    """Each test starts outside of a pipeline run."""
    seed_pipeline_run_id(None)


@pytest.fixture
def temp_output_dir(tmp_path: Path) -> Path:
    """Temporary directory for test output files"""
    output = tmp_path / "output"
    output.mkdir()
    return output


@pytest.fixture
def no_inference() -> ConversionOptions:
    """Options with title inference off, for tests that care about paragraph vs header."""
    return ConversionOptions(infer_headings=False)


@pytest.fixture
def path_to_sample_docx(tmp_path: Path) -> Path:
    """A small .docx built with python-docx: a heading, two paragraphs, a table and one comment.

    Layout:
        Heading 1:  第一章 总则
        paragraph:  本合同的重要条款如下。   (comment "请核对" on the run "重要条款")
        paragraph:  The parties agree to the terms below, which apply from signing.
        table:      Name | Role / Alice | Buyer
    """
    doc = docx.Document()
    doc.add_heading("第一章 总则", level=1)

    para = doc.add_paragraph("本合同的")
    commented_run = para.add_run("重要条款")
    para.add_run("如下。")
    doc.add_comment(commented_run, text="请核对", author="Reviewer", initials="RV")

    doc.add_paragraph("The parties agree to the terms below, which apply from signing.")

    table = doc.add_table(rows=2, cols=2)
    table.cell(0, 0).text = "Name"
    table.cell(0, 1).text = "Role"
    table.cell(1, 0).text = "Alice"
    table.cell(1, 1).text = "Buyer"

    path = tmp_path / "sample.docx"
    doc.save(str(path))
    return path


@pytest.fixture
def sample_import_cfg(path_to_sample_docx: Path, temp_output_dir: Path) -> UserConfig:
    """Sample config object for docx2editor testing"""
    return UserConfig(
        input_docx=str(path_to_sample_docx),
        output_folder=str(temp_output_dir),
    )


@pytest.fixture
def clean_debug_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Ensure debug env var is not set before test.
    Used by at least test_utils + test_cli."""
    monkeypatch.delenv("DOCWEAVE_DEBUG", raising=False)
    return monkeypatch
