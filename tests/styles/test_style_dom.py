"""Tests for turning parsed HTML elements into StyleSubjects."""

import pytest
from bs4 import BeautifulSoup

from docweave.styles.dom import (
    camel_to_kebab,
    font_size_of,
    heading_level_of,
    kebab_to_camel,
    parse_inline_style,
    style_map_to_css,
    subject_from_tag,
)


# region CSS helpers
@pytest.mark.parametrize(
    argnames="kebab,camel",
    argvalues=[("font-family", "fontFamily"), ("color", "color"), ("text-align-last", "textAlignLast")],
)
def test_kebab_camel_conversion(kebab: str, camel: str) -> None:
    assert kebab_to_camel(kebab) == camel
    assert camel_to_kebab(camel) == kebab


def test_parse_inline_style() -> None:
    """Malformed declarations are skipped and !important is dropped."""
    style = "font-size: 14px; color:red !important; broken; : nothing; margin-left: 2em;"
    assert parse_inline_style(style) == {
        "fontSize": "14px",
        "color": "red",
        "marginLeft": "2em",
    }


@pytest.mark.parametrize("style", [None, "", ";;"])
def test_parse_inline_style_empty(style) -> None:
    assert parse_inline_style(style) == {}


def test_style_map_to_css() -> None:
    assert style_map_to_css({"fontSize": "12px", "textAlign": "center"}) == "font-size: 12px; text-align: center"


# endregion


# region subject_from_tag
def test_subject_from_tag_splits_alignment_from_declarations() -> None:
    soup = BeautifulSoup(
        '<div style="color: blue; font-size: 18px"><p class="lead x" style="text-align: right; color: red">Hi</p></div>',
        "html.parser",
    )
    subject = subject_from_tag(soup.find("p"))

    assert subject.kind == "p"
    assert subject.text == "Hi"
    assert subject.classes == ("lead", "x")
    assert dict(subject.declared) == {"color": "red"}
    assert dict(subject.alignment_declarations) == {"textAlign": "right"}
    assert dict(subject.computed) == {"color": "blue", "fontSize": "18px"}
    assert subject.ancestors == ("div",)


def test_subject_from_tag_heading_level() -> None:
    soup = BeautifulSoup("<h3>Scope</h3>", "html.parser")
    subject = subject_from_tag(soup.find("h3"))
    assert subject.heading_level == 3
    assert subject.is_heading


def test_heading_level_of_non_heading() -> None:
    soup = BeautifulSoup("<p>x</p><header>y</header>", "html.parser")
    assert heading_level_of(soup.find("p")) is None
    assert heading_level_of(soup.find("header")) is None


def test_subject_from_tag_isolation() -> None:
    """First sibling, or followed by a paragraph."""
    soup = BeautifulSoup("<h2>A</h2><p>B</p><p>C</p><ul><li>D</li></ul>", "html.parser")
    first, second, third = soup.find_all(["h2", "p"])
    assert subject_from_tag(first).isolated
    assert subject_from_tag(second).isolated
    assert not subject_from_tag(third).isolated


def test_subject_from_tag_formatting_coverage() -> None:
    soup = BeautifulSoup("<p><b>bold</b><i>ital</i></p>", "html.parser")
    coverage = subject_from_tag(soup.find("p")).formatting_coverage
    assert coverage["bold"] == pytest.approx(0.5)
    assert coverage["italic"] == pytest.approx(0.5)
    assert coverage["underline"] == 0


def test_subject_from_tag_descendant_styles() -> None:
    soup = BeautifulSoup('<p><span style="font-size: 12pt">a</span><font face="SimHei">b</font></p>', "html.parser")
    subject = subject_from_tag(soup.find("p"))
    assert dict(subject.descendant_styles) == {"fontSize": "16px", "fontFamily": "SimHei"}


@pytest.mark.parametrize(
    argnames="markup,expected",
    argvalues=[
        ('<p><font size="5">x</font></p>', {"fontSize": "24px"}),
        ('<p><font size="9">x</font><span style="font-size: 10pt">y</span></p>', {"fontSize": "13px"}),
        ('<p><span style="font-size: large">x</span></p>', {}),
    ],
)
def test_descendant_font_sizes_are_converted(markup: str, expected: dict) -> None:
    """Size codes and pt sizes become px; sizes that cannot be converted are left out."""
    soup = BeautifulSoup(markup, "html.parser")
    assert dict(subject_from_tag(soup.find("p")).descendant_styles) == expected


@pytest.mark.parametrize(
    argnames="markup,expected",
    argvalues=[
        ('<p style="font-size: 12pt">x</p>', "16px"),
        ('<p style="font-size: 1.5em">x</p>', "1.5em"),
        ('<font size="3">x</font>', "16px"),
        ('<p style="font-size: huge">x</p>', None),
        ("<p>x</p>", None),
    ],
)
def test_font_size_of(markup: str, expected: str | None) -> None:
    assert font_size_of(BeautifulSoup(markup, "html.parser").find()) == expected
    subject = subject_from_tag(BeautifulSoup(markup, "html.parser").find())
    assert subject.declared.get("fontSize") == expected


# endregion
