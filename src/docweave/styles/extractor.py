"""Paragraph/run style extraction as an ordered fold of passes.

Each pass looks at a StyleSubject (a source-neutral description of one element:
its kind, classes, declared styles, ancestors, text) and returns a partial
StyleMap. Passes are folded left to right and a key, once written, is never
overwritten. Reordering `StyleExtractor.passes` is therefore the only way to
change precedence.

Pass order:
    1. type defaults
    2. class presets
    3. inline declarations
    4. computed-style fallback
    5. container context and indentation
    6. alignment
    7. Word structural inference
    8. child aggregation
"""

# region imports
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Mapping, Optional, Sequence

from docweave.styles.fonts import normalize_font_name
from docweave.styles.tables import (
    DEFAULT_FONT_TABLE,
    DEFAULT_PRESETS,
    FontAliasTable,
    StylePresets,
)
from docweave.styles.text_analyzer import (
    detect_script,
    is_likely_list_item,
    is_likely_quote,
    is_likely_title,
    leading_whitespace_width,
    matches_heading_marker,
)

log = logging.getLogger("docweave")
# endregion

StyleMap = dict[str, str]

ALIGNMENT_KEYS = ("textAlign", "textAlignLast")
VALID_ALIGNMENTS = frozenset({"left", "right", "center", "justify", "start", "end"})

PARAGRAPH_KINDS = frozenset({"p", "paragraph", "div"})
LIST_ITEM_KINDS = frozenset({"li", "listItem"})
TABLE_CELL_KINDS = frozenset({"td", "th", "tableCell"})
NESTING_KINDS = frozenset({"ul", "ol", "list", "blockquote", "quote", "div"})

_PX_PATTERN = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*(px|pt)?\s*$")


# region StyleSubject
@dataclass(frozen=True)
class StyleSubject:
    """
    Everything the passes may look at for one element.

    Attributes:
        kind: Tag name ("p", "h2", "li", "td") or Word node type ("paragraph", "heading").
        text: Plain text content.
        classes: Class tokens (HTML class attribute, or Word style id for Word nodes).
        declared: Explicit styles, camelCase keys, alignment keys excluded.
        alignment_declarations: Explicit textAlign / textAlignLast, resolved in pass 6.
        computed: Effective/inherited styles used only to fill gaps.
        ancestors: Kinds of the enclosing elements, nearest first.
        heading_level: Set for headings.
        isolated: The element stands on its own structurally (for title detection).
        formatting_coverage: Share of the text inside bold/italic/underline markup.
        descendant_styles: fontFamily / fontSize found on descendants.
    """

    kind: str
    text: str = ""
    classes: tuple[str, ...] = ()
    declared: Mapping[str, str] = field(default_factory=dict)
    alignment_declarations: Mapping[str, str] = field(default_factory=dict)
    computed: Mapping[str, str] = field(default_factory=dict)
    ancestors: tuple[str, ...] = ()
    heading_level: Optional[int] = None
    isolated: bool = False
    formatting_coverage: Mapping[str, float] = field(default_factory=dict)
    descendant_styles: Mapping[str, str] = field(default_factory=dict)

    @property
    def is_heading(self) -> bool:
        return self.heading_level is not None

    @property
    def is_list_item(self) -> bool:
        return self.kind in LIST_ITEM_KINDS

    @property
    def parent(self) -> Optional[str]:
        return self.ancestors[0] if self.ancestors else None


# endregion


StylePass = Callable[[StyleSubject, StyleMap], StyleMap]
IndentPolicy = Callable[[StyleSubject], Optional[int]]


# region fold_style_passes
def fold_style_passes(subject: StyleSubject, passes: Sequence[StylePass]) -> StyleMap:
    """Run passes in order; the first pass to set a key owns it."""
    result: StyleMap = {}
    for style_pass in passes:
        partial = style_pass(subject, dict(result))
        for key, value in partial.items():
            if key not in result and value:
                result[key] = value
    return result


# endregion


# region Indentation policy
def parse_length_px(value: Optional[str]) -> Optional[float]:
    """'40px' -> 40.0, '30pt' -> 39.9, '12' -> 12.0. Other units give None."""
    if not value:
        return None
    match = _PX_PATTERN.match(value)
    if not match:
        return None
    number = float(match.group(1))
    if match.group(2) == "pt":
        number *= 1.33
    return number


def indent_level_from_signals(subject: StyleSubject, unit_px: int = 20) -> Optional[int]:
    """
    Indentation level from the first available signal:
        1. explicit paddingLeft / marginLeft / textIndent length,
        2. nesting depth among list/quote/div ancestors,
        3. leading whitespace in the text.
    """
    for key in ("paddingLeft", "marginLeft", "textIndent"):
        px = parse_length_px(subject.declared.get(key))
        if px is not None and px > 0:
            return int(px // unit_px)

    depth = sum(1 for ancestor in subject.ancestors if ancestor in NESTING_KINDS)
    if depth > 0:
        return depth

    width = leading_whitespace_width(subject.text)
    if width > 0:
        return width // 4
    return None


# endregion


# region StyleExtractor
class StyleExtractor:
    """Builds a StyleMap for a StyleSubject with the eight ordered passes."""

    def __init__(
        self,
        presets: StylePresets = DEFAULT_PRESETS,
        fonts: FontAliasTable = DEFAULT_FONT_TABLE,
        indent_policy: Optional[IndentPolicy] = None,
    ) -> None:
        self.presets = presets
        self.fonts = fonts
        self.indent_policy: IndentPolicy = indent_policy or (
            lambda subject: indent_level_from_signals(subject, presets.indent_unit_px)
        )
        self.passes: tuple[StylePass, ...] = (
            self.type_defaults,
            self.class_presets,
            self.inline_declarations,
            self.computed_fallback,
            self.context_inference,
            self.resolve_alignment,
            self.word_structure,
            self.child_aggregation,
        )

    def extract(self, subject: StyleSubject) -> StyleMap:
        return fold_style_passes(subject, self.passes)

    # Pass 1
    def type_defaults(self, subject: StyleSubject, current: StyleMap) -> StyleMap:
        if subject.heading_level is not None:
            level = max(1, min(6, subject.heading_level))
            return dict(self.presets.headings.get(level, {}))
        if subject.kind in PARAGRAPH_KINDS:
            return dict(self.presets.paragraph)
        return {}

    # Pass 2
    def class_presets(self, subject: StyleSubject, current: StyleMap) -> StyleMap:
        result: StyleMap = {}
        for token in subject.classes:
            preset = self.presets.classes.get(token.casefold())
            if preset is None:
                continue
            for key, value in preset.items():
                result.setdefault(key, value)
        return result

    # Pass 3
    def inline_declarations(self, subject: StyleSubject, current: StyleMap) -> StyleMap:
        result = {
            key: value
            for key, value in subject.declared.items()
            if key not in ALIGNMENT_KEYS
        }
        if "fontFamily" in result:
            result["fontFamily"] = normalize_font_name(result["fontFamily"], self.fonts)
        return result

    # Pass 4
    def computed_fallback(self, subject: StyleSubject, current: StyleMap) -> StyleMap:
        result = {
            key: value
            for key, value in subject.computed.items()
            if key not in ALIGNMENT_KEYS and key not in current
        }
        if "fontFamily" in result:
            result["fontFamily"] = normalize_font_name(result["fontFamily"], self.fonts)
        return result

    # Pass 5
    def context_inference(self, subject: StyleSubject, current: StyleMap) -> StyleMap:
        result: StyleMap = {}
        parent = subject.parent
        if subject.kind in TABLE_CELL_KINDS or parent in TABLE_CELL_KINDS:
            result.update(self.presets.table_cell)
        if subject.is_list_item or parent in LIST_ITEM_KINDS:
            result.update(self.presets.list_context)

        if "paddingLeft" not in current and "marginLeft" not in current:
            level = self.indent_policy(subject)
            if level:
                result["paddingLeft"] = f"{level * self.presets.indent_unit_px}px"
        return result

    # Pass 6
    def resolve_alignment(self, subject: StyleSubject, current: StyleMap) -> StyleMap:
        """Alignment is decided here and only here; the first rule that fires wins."""
        if "textAlign" in current:
            return {}

        declared = subject.alignment_declarations.get("textAlign")
        if declared and declared.strip().lower() in VALID_ALIGNMENTS:
            result = {"textAlign": declared.strip().lower()}
            last = subject.alignment_declarations.get("textAlignLast")
            if last:
                result["textAlignLast"] = last.strip().lower()
            return result

        class_names = " ".join(subject.classes).lower()
        for alignment in self.presets.alignment_class_order:
            if alignment in class_names:
                return {"textAlign": alignment}

        text = subject.text.strip()
        if (
            subject.is_heading
            and len(text) <= self.presets.short_title_length
            and is_likely_title(text, subject.isolated)
        ):
            return {"textAlign": "center"}

        script = detect_script(text)
        if script == "chinese":
            return {"textAlign": "justify", "textAlignLast": "justify"}
        # English text, lists, and everything else
        return {"textAlign": "left"}

    # Pass 7
    def word_structure(self, subject: StyleSubject, current: StyleMap) -> StyleMap:
        result: StyleMap = {}
        for token in subject.classes:
            preset = self.presets.mso_classes.get(token.casefold())
            if preset is not None:
                for key, value in preset.items():
                    result.setdefault(key, value)

        text = subject.text.strip()
        if not text:
            return result

        if subject.is_heading or matches_heading_marker(text):
            for key, value in self.presets.title.items():
                result.setdefault(key, value)
        if subject.is_list_item or is_likely_list_item(text):
            for key, value in self.presets.list_item.items():
                result.setdefault(key, value)
        if is_likely_quote(text):
            for key, value in self.presets.quote.items():
                result.setdefault(key, value)

        script = detect_script(text)
        if script == "chinese" and subject.kind in PARAGRAPH_KINDS:
            for key, value in self.presets.chinese_paragraph.items():
                result.setdefault(key, value)

        if "fontFamily" not in current and "fontFamily" not in subject.descendant_styles:
            if script == "chinese":
                result.setdefault("fontFamily", self.presets.cjk_font_family)
            elif script == "english":
                result.setdefault("fontFamily", self.presets.latin_font_family)
        return result

    # Pass 8
    def child_aggregation(self, subject: StyleSubject, current: StyleMap) -> StyleMap:
        result: StyleMap = {}
        threshold = self.presets.aggregation_threshold
        coverage = subject.formatting_coverage
        if coverage.get("bold", 0.0) >= threshold:
            result["fontWeight"] = "bold"
        if coverage.get("italic", 0.0) >= threshold:
            result["fontStyle"] = "italic"
        if coverage.get("underline", 0.0) >= threshold:
            result["textDecoration"] = "underline"

        for key in ("fontFamily", "fontSize"):
            value = subject.descendant_styles.get(key)
            if value and key not in current:
                if key == "fontFamily":
                    value = normalize_font_name(value, self.fonts)
                result[key] = value
        return result


# endregion


DEFAULT_EXTRACTOR = StyleExtractor()


def extract_styles(subject: StyleSubject, extractor: StyleExtractor = DEFAULT_EXTRACTOR) -> StyleMap:
    """Convenience wrapper around the default extractor."""
    return extractor.extract(subject)
