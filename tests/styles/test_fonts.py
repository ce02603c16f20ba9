"""Tests for font-name normalization and size conversion."""

import pytest

from docweave.styles.fonts import (
    contains_cjk,
    convert_word_size,
    is_fangsong_font,
    normalize_font_name,
)
from docweave.styles.tables import (
    FANGSONG_STACK,
    HEI_STACK,
    KAI_STACK,
    SONG_STACK,
    YAHEI_STACK,
    FontAliasTable,
)


# region normalize_font_name
@pytest.mark.parametrize(
    argnames="raw,expected",
    argvalues=[
        # Exact aliases, case-insensitive
        ("黑体", HEI_STACK),
        ("SimHei", HEI_STACK),
        ("simhei", HEI_STACK),
        ("仿宋_GB2312", FANGSONG_STACK),
        ("楷体", KAI_STACK),
        ("Microsoft YaHei", YAHEI_STACK),
        ("宋体", SONG_STACK),
        # Quotes around the name are ignored
        ('"SimSun"', SONG_STACK),
        # Fuzzy substring
        ("华文仿宋体", FANGSONG_STACK),
        # Latin/CJK pairs resolve to the CJK part
        ("Times New Roman, 黑体", HEI_STACK),
        ("Arial, 楷体_GB2312", KAI_STACK),
    ],
)
def test_normalize_font_name_known_families(raw: str, expected: str) -> None:
    """Known names, aliases and Latin/CJK stacks map onto the canonical stacks."""
    assert normalize_font_name(raw) == expected


def test_normalize_font_name_stack_without_cjk_uses_fallback() -> None:
    """A comma stack with nothing CJK or known in it gets the FangSong fallback stack."""
    assert normalize_font_name("Arial, Helvetica") == FANGSONG_STACK


def test_normalize_font_name_unknown_cjk_font_gets_fallback_families() -> None:
    """An unrecognized CJK name is kept first, followed by the CJK fallback families."""
    result = normalize_font_name("方正小标宋")
    assert result.startswith('"方正小标宋", "SimSun"')
    assert result.endswith("serif")


def test_normalize_font_name_unknown_latin_font_is_quoted() -> None:
    """Anything else comes back as the quoted name."""
    assert normalize_font_name("Garamond") == '"Garamond"'


@pytest.mark.parametrize("raw", ["", "   ", None])
def test_normalize_font_name_blank_input_gives_empty_string(raw) -> None:
    """Blank input has no font."""
    assert normalize_font_name(raw) == ""


@pytest.mark.parametrize(
    "raw",
    ["黑体", "SimSun", "Times New Roman, 黑体", "方正小标宋", "Garamond", "Arial, Helvetica", "微软雅黑"],
)
def test_normalize_font_name_is_idempotent(raw: str) -> None:
    """Normalizing an already-normalized stack changes nothing."""
    once = normalize_font_name(raw)
    assert normalize_font_name(once) == once


def test_normalize_font_name_uses_custom_table() -> None:
    """Callers can pass their own alias table instead of the default."""
    table = FontAliasTable(aliases={"corporate": '"Corporate Sans", sans-serif'})
    assert normalize_font_name("Corporate", table) == '"Corporate Sans", sans-serif'
    assert normalize_font_name("Arial, Helvetica", table) == table.stack_fallback


# endregion


# region helpers
@pytest.mark.parametrize(
    argnames="text,expected",
    argvalues=[("总则", True), ("abc 中", True), ("abc", False), ("", False)],
)
def test_contains_cjk(text: str, expected: bool) -> None:
    """True when at least one CJK ideograph is present."""
    assert contains_cjk(text) is expected


@pytest.mark.parametrize(
    argnames="name,expected",
    argvalues=[
        ("仿宋", True),
        ("FangSong_GB2312", True),
        ("  仿宋_GB2312 ", True),
        ("宋体", False),
        ('"FangSong", "仿宋", serif', True),
        ("Times New Roman, 宋体", False),
        ("", False),
    ],
)
def test_is_fangsong_font(name: str, expected: bool) -> None:
    """Only the FangSong family names count."""
    assert is_fangsong_font(name) is expected


# endregion


# region convert_word_size
@pytest.mark.parametrize(
    argnames="value,expected",
    argvalues=[
        ("3", "16px"),
        ("7", "48px"),
        (3, "16px"),
        ("12pt", "16px"),
        ("10.5pt", "14px"),
        ("14px", "14px"),
        ("1.2em", "1.2em"),
        ("50%", "50%"),
        ("large", None),
        ("", None),
        (None, None),
        ("abcpt", None),
    ],
)
def test_convert_word_size(value, expected) -> None:
    """Size codes, point sizes and pass-through units."""
    assert convert_word_size(value) == expected


# endregion
