"""Word paragraph/run property bags <-> CSS StyleMaps.

Unit conversions follow Word's storage units: font sizes are half-points,
spacing and indentation are twips (1/20 pt), line spacing in "auto" mode is in
240ths of a line.
"""

import logging
import re
from typing import Optional

from docweave.processing.word_tree import ParagraphProperties, RunProperties
from docweave.styles.fonts import normalize_font_name
from docweave.styles.tables import (
    CSS_NAMED_COLORS,
    DEFAULT_FONT_TABLE,
    HIGHLIGHT_COLORS,
    FontAliasTable,
)

log = logging.getLogger("docweave")

StyleMap = dict[str, str]

ALIGNMENT_MAP: dict[str, str] = {
    "left": "left",
    "start": "left",
    "center": "center",
    "right": "right",
    "end": "right",
    "both": "justify",
    "distribute": "justify",
    "justify": "justify",
}

VERT_ALIGN_MAP: dict[str, str] = {
    "superscript": "super",
    "subscript": "sub",
}


# region Unit helpers
def _format_number(value: float) -> str:
    return f"{round(value, 2):g}"


def _to_float(value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        log.debug(f"Ignoring non-numeric Word length value: {value!r}")
        return None


def twips_to_pt(value: Optional[str]) -> Optional[str]:
    """'360' -> '18pt'."""
    number = _to_float(value)
    if number is None:
        return None
    return f"{_format_number(number / 20)}pt"


def half_points_to_pt(value: Optional[str]) -> Optional[str]:
    """'24' -> '12pt', '21' -> '10.5pt'."""
    number = _to_float(value)
    if number is None:
        return None
    return f"{_format_number(number / 2)}pt"


def word_color_to_css(value: Optional[str]) -> Optional[str]:
    """'FF0000' -> '#FF0000'. 'auto' and blanks mean no color."""
    if value is None:
        return None
    cleaned = value.strip().lstrip("#")
    if not cleaned or cleaned.lower() == "auto":
        return None
    return f"#{cleaned.upper()}"


def decode_alignment(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return ALIGNMENT_MAP.get(value.strip(), "left")


def line_spacing_to_css(line: Optional[str], rule: Optional[str]) -> Optional[str]:
    """exact/atLeast lines are fixed point sizes; anything else is a multiple of 240."""
    number = _to_float(line)
    if number is None:
        return None
    if rule in ("exact", "atLeast"):
        return f"{round(number / 20)}pt"
    return _format_number(number / 240)


# endregion


# region extract_word_paragraph_styles
def extract_word_paragraph_styles(props: Optional[ParagraphProperties]) -> StyleMap:
    """StyleMap for a paragraph property bag. Includes textAlign when jc is set."""
    styles: StyleMap = {}
    if props is None:
        return styles

    alignment = decode_alignment(props.alignment)
    if alignment:
        styles["textAlign"] = alignment

    line_height = line_spacing_to_css(props.line, props.line_rule)
    if line_height:
        styles["lineHeight"] = line_height

    for key, raw in (
        ("marginTop", props.spacing_before),
        ("marginBottom", props.spacing_after),
        ("marginLeft", props.indent_left),
        ("marginRight", props.indent_right),
        ("textIndent", props.indent_first_line),
    ):
        converted = twips_to_pt(raw)
        if converted:
            styles[key] = converted

    # Hanging indent wins over first-line indent; Word never writes both.
    hanging = twips_to_pt(props.indent_hanging)
    if hanging and hanging != "0pt":
        styles["textIndent"] = f"-{hanging}"

    background = _shading_to_css(props.shading_fill)
    if background:
        styles["backgroundColor"] = background

    return styles


# endregion


# region extract_word_run_styles
def extract_word_run_styles(
    props: Optional[RunProperties], fonts: FontAliasTable = DEFAULT_FONT_TABLE
) -> StyleMap:
    """StyleMap for a run property bag. Only properties actually present are emitted."""
    styles: StyleMap = {}
    if props is None:
        return styles

    if props.fonts is not None:
        preferred = props.fonts.preferred()
        if preferred:
            family = normalize_font_name(preferred, fonts)
            if family:
                styles["fontFamily"] = family

    size = half_points_to_pt(props.size)
    if size:
        styles["fontSize"] = size

    color = word_color_to_css(props.color)
    if color:
        styles["color"] = color

    if props.bold:
        styles["fontWeight"] = "bold"
    if props.italic:
        styles["fontStyle"] = "italic"

    decorations = []
    if props.underline and props.underline.lower() != "none":
        decorations.append("underline")
    if props.strike:
        decorations.append("line-through")
    if decorations:
        styles["textDecoration"] = " ".join(decorations)

    background = _shading_to_css(props.shading_fill)
    if background is None and props.highlight:
        background = highlight_to_css(props.highlight)
    if background:
        styles["backgroundColor"] = background

    if props.vert_align in VERT_ALIGN_MAP:
        styles["verticalAlign"] = VERT_ALIGN_MAP[props.vert_align]

    letter_spacing = twips_to_pt(props.spacing)
    if letter_spacing and letter_spacing != "0pt":
        styles["letterSpacing"] = letter_spacing

    return styles


def highlight_to_css(name: str) -> Optional[str]:
    """Named Word highlight -> '#RRGGBB'. 'none' and unknown names give None."""
    hex_value = HIGHLIGHT_COLORS.get(name)
    return f"#{hex_value}" if hex_value else None


def _shading_to_css(fill: Optional[str]) -> Optional[str]:
    color = word_color_to_css(fill)
    if color is None or color == "#FFFFFF":
        return None
    return color


# endregion


# region CSS -> Word
RGB_PATTERN = re.compile(r"rgba?\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)")
LENGTH_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(px|pt)?\s*$", re.IGNORECASE)


def css_color_to_word_hex(value: Optional[str]) -> Optional[str]:
    """'#f00', 'rgb(255, 0, 0)' or 'red' -> 'FF0000'. Unparseable colors give None."""
    if not value:
        return None
    color = value.strip().lower()
    if color.startswith("#"):
        digits = color[1:]
        if len(digits) == 3:
            digits = "".join(ch * 2 for ch in digits)
        if len(digits) == 6 and all(ch in "0123456789abcdef" for ch in digits):
            return digits.upper()
        return None
    match = RGB_PATTERN.match(color)
    if match:
        return "".join(f"{min(int(part), 255):02X}" for part in match.groups())
    return CSS_NAMED_COLORS.get(color)


def css_size_to_half_points(value: Optional[str]) -> Optional[int]:
    """'12pt' -> 24, '16px' -> 24 (px x 1.5), bare numbers are points."""
    if not value:
        return None
    match = LENGTH_PATTERN.match(value)
    if not match:
        return None
    number, unit = float(match.group(1)), (match.group(2) or "pt").lower()
    if unit == "px":
        return round(number * 1.5)
    return round(number * 2)


def nearest_highlight(value: Optional[str]) -> Optional[str]:
    """The Word highlight name closest to a CSS color, by squared RGB distance."""
    hex_value = css_color_to_word_hex(value)
    if hex_value is None or hex_value == "FFFFFF":
        return None
    rgb = tuple(int(hex_value[i : i + 2], 16) for i in (0, 2, 4))

    def distance(candidate: str) -> int:
        other = tuple(int(candidate[i : i + 2], 16) for i in (0, 2, 4))
        return sum((a - b) ** 2 for a, b in zip(rgb, other))

    return min(HIGHLIGHT_COLORS, key=lambda name: distance(HIGHLIGHT_COLORS[name]))


# endregion
