"""Turn parsed-HTML elements (BeautifulSoup tags) into StyleSubjects."""

import logging
import re
from typing import Optional

from bs4 import NavigableString, Tag

from docweave.styles.extractor import ALIGNMENT_KEYS, StyleSubject
from docweave.styles.fonts import convert_word_size

log = logging.getLogger("docweave")

HEADING_TAG_PATTERN = re.compile(r"^h([1-6])$")

# Properties a child inherits from its ancestors' inline styles.
INHERITED_PROPERTIES = ("fontFamily", "fontSize", "color", "lineHeight", "letterSpacing")

BOLD_TAGS = frozenset({"b", "strong"})
ITALIC_TAGS = frozenset({"i", "em"})
UNDERLINE_TAGS = frozenset({"u", "ins"})


# region CSS helpers
def kebab_to_camel(name: str) -> str:
    """'font-family' -> 'fontFamily'."""
    head, *rest = name.strip().lower().split("-")
    return head + "".join(part.capitalize() for part in rest)


def camel_to_kebab(name: str) -> str:
    """'fontFamily' -> 'font-family'."""
    return re.sub(r"(?<!^)([A-Z])", r"-\1", name).lower()


def parse_inline_style(style: Optional[str]) -> dict[str, str]:
    """Parse a style attribute into a camelCase map. Malformed declarations are skipped."""
    result: dict[str, str] = {}
    if not style:
        return result
    for declaration in style.split(";"):
        if ":" not in declaration:
            continue
        name, value = declaration.split(":", 1)
        name, value = name.strip(), value.strip()
        if value.lower().endswith("!important"):
            value = value[: -len("!important")].strip()
        if name and value:
            result[kebab_to_camel(name)] = value
    return result


def style_map_to_css(styles: dict[str, str]) -> str:
    return "; ".join(f"{camel_to_kebab(key)}: {value}" for key, value in styles.items())


def heading_level_of(tag: Tag) -> Optional[int]:
    match = HEADING_TAG_PATTERN.match(tag.name or "")
    return int(match.group(1)) if match else None


def font_size_of(tag: Tag, styles: Optional[dict[str, str]] = None) -> Optional[str]:
    """px size from a font-size declaration or a <font size="1-7">; None when neither is usable."""
    if styles is None:
        styles = parse_inline_style(tag.get("style"))
    raw = styles.get("fontSize") or (tag.get("size") if tag.name == "font" else None)
    return convert_word_size(raw) if raw else None


# endregion


# region subject_from_tag
def subject_from_tag(tag: Tag) -> StyleSubject:
    """Collect the style signals of one HTML element."""
    inline = parse_inline_style(tag.get("style"))
    declared = {
        key: value for key, value in inline.items() if key not in ALIGNMENT_KEYS and key != "fontSize"
    }
    size = font_size_of(tag, inline)
    if size:
        declared["fontSize"] = size
    alignment = {key: value for key, value in inline.items() if key in ALIGNMENT_KEYS}

    align_attr = tag.get("align")
    if align_attr and "textAlign" not in alignment:
        alignment["textAlign"] = str(align_attr)

    classes = tuple(tag.get("class") or ())
    ancestors = tuple(parent.name for parent in tag.parents if parent.name and parent.name != "[document]")
    text = tag.get_text()

    return StyleSubject(
        kind=tag.name,
        text=text,
        classes=classes,
        declared=declared,
        alignment_declarations=alignment,
        computed=_inherited_styles(tag),
        ancestors=ancestors,
        heading_level=heading_level_of(tag),
        isolated=_is_isolated(tag),
        formatting_coverage=_formatting_coverage(tag),
        descendant_styles=_descendant_styles(tag),
    )


def _inherited_styles(tag: Tag) -> dict[str, str]:
    inherited: dict[str, str] = {}
    for parent in tag.parents:
        if not isinstance(parent, Tag):
            continue
        styles = parse_inline_style(parent.get("style"))
        for key in INHERITED_PROPERTIES:
            if key in styles and key not in inherited:
                inherited[key] = styles[key]
    return inherited


def _is_isolated(tag: Tag) -> bool:
    """First element among its siblings, or followed by a paragraph."""
    previous = tag.find_previous_sibling()
    if previous is None:
        return True
    following = tag.find_next_sibling()
    return following is not None and following.name == "p"


def _formatting_coverage(tag: Tag) -> dict[str, float]:
    total = 0
    covered = {"bold": 0, "italic": 0, "underline": 0}
    for string in tag.find_all(string=True):
        if not isinstance(string, NavigableString):
            continue
        length = len(string.strip())
        if not length:
            continue
        total += length
        flags = _inherited_flags(string, tag)
        for key in covered:
            if flags[key]:
                covered[key] += length

    if total == 0:
        return {}
    return {key: value / total for key, value in covered.items()}


def _inherited_flags(string: NavigableString, root: Tag) -> dict[str, bool]:
    flags = {"bold": False, "italic": False, "underline": False}
    for parent in string.parents:
        if parent is root or not isinstance(parent, Tag):
            break
        styles = parse_inline_style(parent.get("style"))
        weight = styles.get("fontWeight", "")
        if parent.name in BOLD_TAGS or weight == "bold" or (weight.isdigit() and int(weight) >= 600):
            flags["bold"] = True
        if parent.name in ITALIC_TAGS or styles.get("fontStyle") == "italic":
            flags["italic"] = True
        if parent.name in UNDERLINE_TAGS or "underline" in styles.get("textDecoration", ""):
            flags["underline"] = True
    return flags


def _descendant_styles(tag: Tag) -> dict[str, str]:
    found: dict[str, str] = {}
    for descendant in tag.find_all(True):
        styles = parse_inline_style(descendant.get("style"))
        if "fontFamily" in styles and "fontFamily" not in found:
            found["fontFamily"] = styles["fontFamily"]
        if "fontSize" not in found:
            size = font_size_of(descendant, styles)
            if size:
                found["fontSize"] = size
        face = descendant.get("face") if descendant.name == "font" else None
        if face and "fontFamily" not in found:
            found["fontFamily"] = str(face)
        if len(found) == 2:
            break
    return found


# endregion
