"""Render formatted Word runs as inline HTML.

Character styles go on a <span>; bold/italic/underline/strike become wrapping
<b>/<i>/<u>/<s> tags so editors that only understand tags still show them.
"""

import html
import logging
from dataclasses import dataclass, field

from docweave.styles.dom import style_map_to_css
from docweave.styles.fonts import is_fangsong_font

log = logging.getLogger("docweave")

# StyleMap keys rendered on the span, in output order
SPAN_STYLE_KEYS = (
    "fontFamily",
    "fontSize",
    "color",
    "backgroundColor",
    "letterSpacing",
    "verticalAlign",
)

IGNORED_BACKGROUNDS = frozenset({"#FFFFFF", "#FFF", "white", "transparent"})

# Editor stylesheet class for runs set in FangSong
FANGSONG_CLASS = "fangsong-font"


# region FormattedRun
@dataclass(frozen=True)
class FormattedRun:
    text: str
    styles: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"text": self.text, "styles": dict(self.styles)}


# endregion


# region run_to_html
def run_to_html(run: FormattedRun) -> str:
    """One run as escaped text inside its span and wrapping tags."""
    content = html.escape(run.text, quote=False)
    if not content:
        return ""

    span_styles = {
        key: run.styles[key]
        for key in SPAN_STYLE_KEYS
        if key in run.styles
        and not (key == "backgroundColor" and run.styles[key] in IGNORED_BACKGROUNDS)
    }
    if span_styles:
        css = html.escape(style_map_to_css(span_styles))
        if is_fangsong_font(run.styles.get("fontFamily", "")):
            content = f'<span class="{FANGSONG_CLASS}" style="{css}">{content}</span>'
        else:
            content = f'<span style="{css}">{content}</span>'

    decoration = run.styles.get("textDecoration", "")
    if "line-through" in decoration:
        content = f"<s>{content}</s>"
    if "underline" in decoration:
        content = f"<u>{content}</u>"
    if run.styles.get("fontStyle") == "italic":
        content = f"<i>{content}</i>"
    if run.styles.get("fontWeight") == "bold":
        content = f"<b>{content}</b>"
    return content


def runs_to_html(runs: list[FormattedRun]) -> str:
    return "".join(run_to_html(run) for run in runs)


# endregion
