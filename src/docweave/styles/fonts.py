"""Font-name and font-size normalization.

Word documents name fonts inconsistently: the same family shows up as "黑体",
"SimHei", or a Latin/CJK pair like "Times New Roman, 黑体". These helpers map
whatever the source carries onto a canonical CSS font stack.
"""

import logging
import re

from docweave.styles.tables import (
    DEFAULT_FONT_TABLE,
    FANGSONG_FONT_NAMES,
    PASSTHROUGH_SIZE_UNITS,
    PT_TO_PX,
    WORD_SIZE_CODES,
    FontAliasTable,
)

log = logging.getLogger("docweave")

CJK_CHAR_PATTERN = re.compile(r"[\u3400-\u4dbf\u4e00-\u9fff\uf900-\ufaff]")
_QUOTE_CHARS = "\"'“”‘’"


# region helpers
def contains_cjk(text: str) -> bool:
    """True if the string holds at least one CJK ideograph."""
    return bool(CJK_CHAR_PATTERN.search(text))


def _clean_font_part(part: str) -> str:
    return part.strip().strip(_QUOTE_CHARS).strip()


# endregion


# region normalize_font_name
def normalize_font_name(raw: str, table: FontAliasTable = DEFAULT_FONT_TABLE) -> str:
    """
    Map a raw font name (or comma-separated stack) to a canonical CSS font stack.

    Resolution order:
        1. Comma stack: the first CJK or known-alias part is normalized on its own.
           A stack with no such part gets the table's FangSong fallback stack.
        2. Exact alias lookup.
        3. Fuzzy substring lookup.
        4. Unknown CJK name: synthesized stack with the CJK fallback families.
        5. Anything else: the name, quoted.

    Returns an empty string for blank input.
    """
    if raw is None:
        return ""
    stripped = raw.strip()
    if not stripped:
        return ""

    if "," in stripped:
        return _normalize_font_stack(stripped, table)

    name = _clean_font_part(stripped)
    if not name:
        return ""

    exact = table.lookup(name)
    if exact is not None:
        return exact

    fuzzy = table.fuzzy_lookup(name)
    if fuzzy is not None:
        return fuzzy

    if contains_cjk(name):
        families = [name, *table.cjk_fallback_families]
        quoted = ", ".join(f'"{family}"' for family in families)
        return f"{quoted}, {table.generic_family}"

    return f'"{name}"'


def _normalize_font_stack(stack: str, table: FontAliasTable) -> str:
    parts = [_clean_font_part(part) for part in stack.split(",")]
    for part in parts:
        if not part:
            continue
        if contains_cjk(part) or table.lookup(part) is not None:
            return normalize_font_name(part, table)

    log.debug(f"No CJK-capable font in stack '{stack}'; using the default CJK fallback.")
    return table.stack_fallback


# endregion


# region is_fangsong_font
def is_fangsong_font(name: str) -> bool:
    """True when the name, or any part of a font stack, is one of the FangSong family names."""
    return any(_clean_font_part(part) in FANGSONG_FONT_NAMES for part in (name or "").split(","))


# endregion


# region convert_word_size
def convert_word_size(value: str | int | float | None) -> str | None:
    """
    Convert a size value into a px string.

    Legacy 1-7 size codes map to fixed px values, unit-suffixed values other
    than pt pass through, and pt values become round(pt * 1.33)px.
    Returns None when the value carries no usable size.
    """
    if value is None:
        return None
    text = str(value).strip().lower()
    if not text:
        return None

    if text in WORD_SIZE_CODES:
        return WORD_SIZE_CODES[text]

    if text.endswith(PASSTHROUGH_SIZE_UNITS):
        return text

    if text.endswith("pt"):
        try:
            points = float(text[:-2])
        except ValueError:
            log.debug(f"Unparseable point size: {value!r}")
            return None
        return f"{round(points * PT_TO_PX)}px"

    return None


# endregion
