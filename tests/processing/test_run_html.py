"""Tests for rendering formatted runs as inline HTML."""

from docweave.processing.run_html import FormattedRun, run_to_html, runs_to_html


def test_plain_run_is_escaped_text() -> None:
    assert run_to_html(FormattedRun("a < b & c")) == "a &lt; b &amp; c"


def test_empty_run_renders_nothing() -> None:
    assert run_to_html(FormattedRun("", {"fontWeight": "bold"})) == ""


def test_character_styles_go_on_a_span() -> None:
    run = FormattedRun("红色", {"color": "#FF0000", "fontSize": "12pt"})
    assert run_to_html(run) == '<span style="font-size: 12pt; color: #FF0000">红色</span>'


def test_toggles_wrap_the_span() -> None:
    run = FormattedRun(
        "x",
        {"fontWeight": "bold", "fontStyle": "italic", "textDecoration": "underline line-through", "color": "#00F"},
    )
    assert run_to_html(run) == '<b><i><u><s><span style="color: #00F">x</span></s></u></i></b>'


def test_white_background_is_not_rendered() -> None:
    assert run_to_html(FormattedRun("x", {"backgroundColor": "#FFFFFF"})) == "x"


def test_runs_to_html_concatenates() -> None:
    runs = [FormattedRun("Bold", {"fontWeight": "bold"}), FormattedRun(" plain")]
    assert runs_to_html(runs) == "<b>Bold</b> plain"


def test_fangsong_runs_get_the_fangsong_class() -> None:
    run = FormattedRun("通知", {"fontFamily": '"FangSong", "仿宋", serif'})
    assert run_to_html(run) == (
        '<span class="fangsong-font" style="font-family: &quot;FangSong&quot;, &quot;仿宋&quot;, serif">通知</span>'
    )


def test_other_fonts_have_no_class() -> None:
    assert "class=" not in run_to_html(FormattedRun("x", {"fontFamily": "SimHei"}))
