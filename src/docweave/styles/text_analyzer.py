"""Stateless text classification heuristics.

These look only at a string (plus, for titles, whether its source element stands
on its own). They are best-effort: a wrong guess is a policy outcome, not an error.
"""

import math
import re

# region Patterns
HEADING_MARKER_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^[第\d一二三四五六七八九十百]+[章节条款部分篇]"),
    re.compile(r"^[\d一二三四五六七八九十]+[、.．]"),
    re.compile(r"^[(（][一二三四五六七八九十\d]+[)）]"),
    re.compile(r"^[A-Za-z]+[.、]"),
    re.compile(r"^\d+\.\d+"),
    re.compile(r"^附录[A-Z\d]"),
    re.compile(r"^(参考文献|致谢|摘要)$"),
    re.compile(r"^(abstract|references|acknowledge?ments?)$", re.IGNORECASE),
)

LIST_ITEM_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^[•·▪▫◦‣⁃]\s"),
    re.compile(r"^\d+[.、]\s"),
    re.compile(r"^[a-zA-Z][.、]\s"),
)

QUOTE_PAIRS: tuple[tuple[str, str], ...] = (
    ('"', '"'),
    ("“", "”"),
    ("'", "'"),
    ("‘", "’"),
    ("「", "」"),
    ("『", "』"),
)
QUOTE_MARKERS: tuple[str, ...] = ("引用", "摘自", "quoted from", "cited from")

CJK_PATTERN = re.compile(r"[\u4e00-\u9fff]")
LATIN_PATTERN = re.compile(r"[a-zA-Z]")

CHINESE_RATIO = 0.3
ENGLISH_RATIO = 0.5
TITLE_MAX_LENGTH = 100

# Ordered: first match wins.
TITLE_LEVEL_RULES: tuple[tuple[re.Pattern[str], int], ...] = (
    (re.compile(r"^第[\d一二三四五六七八九十百]+章"), 1),
    (re.compile(r"^第[\d一二三四五六七八九十百]+节"), 2),
    (re.compile(r"^[一二三四五六七八九十\d]+[、.．]"), 3),
    (re.compile(r"^[(（][一二三四五六七八九十\d]+[)）]"), 4),
    (re.compile(r"^[A-Za-z]+[.、]"), 5),
)
# endregion


# region Title detection
def matches_heading_marker(text: str) -> bool:
    """True if the text starts with a chapter/section/numbering marker or is a known section title."""
    stripped = text.strip()
    return any(pattern.search(stripped) for pattern in HEADING_MARKER_PATTERNS)


def is_likely_title(text: str, isolated: bool = False) -> bool:
    """
    Guess whether a line of text is a heading.

    True if at least two structural signals hold (short, no period in either
    script, structurally isolated) or the text carries a heading marker.
    """
    stripped = text.strip()
    if not stripped:
        return False

    signals = [
        len(stripped) < TITLE_MAX_LENGTH,
        "。" not in stripped and "." not in stripped,
        isolated,
    ]
    if sum(signals) >= 2:
        return True
    return matches_heading_marker(stripped)


def infer_title_level(text: str) -> int:
    """Guess a heading level from numbering markers, falling back to length bands."""
    stripped = text.strip()
    for pattern, level in TITLE_LEVEL_RULES:
        if pattern.search(stripped):
            return level

    length = len(stripped)
    if length <= 10:
        return 2
    if length <= 20:
        return 3
    if length <= 30:
        return 4
    return 3


def clamp_heading_level(level: int) -> int:
    return max(1, min(6, level))


# endregion


# region List / quote detection
def is_likely_list_item(text: str) -> bool:
    stripped = text.strip()
    return any(pattern.search(stripped) for pattern in LIST_ITEM_PATTERNS)


def is_likely_quote(text: str) -> bool:
    """Text fully wrapped in a quote pair, or mentioning where it was quoted from."""
    stripped = text.strip()
    if len(stripped) >= 2:
        for opening, closing in QUOTE_PAIRS:
            if stripped.startswith(opening) and stripped.endswith(closing):
                return True
    lowered = stripped.lower()
    return any(marker in lowered for marker in QUOTE_MARKERS)


# endregion


# region Script detection
def is_chinese_paragraph(text: str) -> bool:
    """More than 30% of the characters are CJK ideographs."""
    if not text:
        return False
    return len(CJK_PATTERN.findall(text)) > len(text) * CHINESE_RATIO


def is_english_paragraph(text: str) -> bool:
    """More than 50% of the characters are Latin letters."""
    if not text:
        return False
    return len(LATIN_PATTERN.findall(text)) > len(text) * ENGLISH_RATIO


def detect_script(text: str) -> str | None:
    """Return "chinese", "english", or None. The Chinese check runs first."""
    if is_chinese_paragraph(text):
        return "chinese"
    if is_english_paragraph(text):
        return "english"
    return None


# endregion


# region Indentation
def leading_whitespace_width(text: str) -> int:
    """Width of the leading whitespace run; a full-width space counts as two, a tab as four."""
    width = 0
    for char in text:
        if char == " ":
            width += 1
        elif char == "\u3000":
            width += 2
        elif char == "\t":
            width += 4
        elif char.isspace() and char not in "\r\n":
            width += 1
        else:
            break
    return width


def detect_list_indent_level(text: str) -> int:
    """Length of the leading whitespace run divided by four, floored."""
    return math.floor((len(text) - len(text.lstrip())) / 4)


# endregion
