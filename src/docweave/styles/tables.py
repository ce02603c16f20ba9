"""Constant lookup tables shared by the font normalizer, the style extractor, and the converters.

Everything here is frozen. Callers that need different data build their own
table instance and pass it in; nothing reads these tables as hidden module state
except as a default argument.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping


def _frozen(values: Mapping) -> Mapping:
    return MappingProxyType(dict(values))


# region Canonical font stacks
SONG_STACK = '"SimSun", "宋体", "Songti SC", serif'
HEI_STACK = '"SimHei", "黑体", "Heiti SC", sans-serif'
KAI_STACK = '"KaiTi", "楷体", "Kaiti SC", serif'
FANGSONG_STACK = '"FangSong", "仿宋", "FangSong_GB2312", "仿宋_GB2312", serif'
LISU_STACK = '"LiSu", "隶书", serif'
YOUYUAN_STACK = '"YouYuan", "幼圆", sans-serif'
YAHEI_STACK = '"Microsoft YaHei", "微软雅黑", sans-serif'

LATIN_SERIF_STACK = '"Times New Roman", Times, serif'

# Appended after an unrecognized CJK font name.
CJK_FALLBACK_FAMILIES: tuple[str, ...] = (
    "SimSun",
    "宋体",
    "Microsoft YaHei",
    "微软雅黑",
)
# endregion


# region FontAliasTable
@dataclass(frozen=True)
class FontAliasTable:
    """Alias table used by normalize_font_name().

    Keys are case-folded. Order matters for the fuzzy substring pass: the
    more specific families (FangSong before Song) come first.
    """

    aliases: Mapping[str, str]
    stack_fallback: str = FANGSONG_STACK
    cjk_fallback_families: tuple[str, ...] = CJK_FALLBACK_FAMILIES
    generic_family: str = "serif"
    fuzzy_min_length: int = 2

    def lookup(self, name: str) -> str | None:
        return self.aliases.get(name.casefold())

    def fuzzy_lookup(self, name: str) -> str | None:
        folded = name.casefold()
        for key, stack in self.aliases.items():
            if len(key) >= self.fuzzy_min_length and key in folded:
                return stack
        return None


DEFAULT_FONT_TABLE = FontAliasTable(
    aliases=_frozen(
        {
            # FangSong
            "仿宋": FANGSONG_STACK,
            "仿宋体": FANGSONG_STACK,
            "仿宋_gb2312": FANGSONG_STACK,
            "fangsong": FANGSONG_STACK,
            "fangsong_gb2312": FANGSONG_STACK,
            "stfangsong": FANGSONG_STACK,
            "华文仿宋": FANGSONG_STACK,
            # KaiTi
            "楷体": KAI_STACK,
            "楷体_gb2312": KAI_STACK,
            "kaiti": KAI_STACK,
            "kaiti_gb2312": KAI_STACK,
            "stkaiti": KAI_STACK,
            "华文楷体": KAI_STACK,
            # Hei
            "黑体": HEI_STACK,
            "simhei": HEI_STACK,
            "heiti": HEI_STACK,
            "heiti sc": HEI_STACK,
            "stheiti": HEI_STACK,
            "华文黑体": HEI_STACK,
            # YaHei
            "微软雅黑": YAHEI_STACK,
            "microsoft yahei": YAHEI_STACK,
            "yahei": YAHEI_STACK,
            # LiSu
            "隶书": LISU_STACK,
            "lisu": LISU_STACK,
            "华文隶书": LISU_STACK,
            # YouYuan
            "幼圆": YOUYUAN_STACK,
            "youyuan": YOUYUAN_STACK,
            # Song
            "宋体": SONG_STACK,
            "新宋体": SONG_STACK,
            "simsun": SONG_STACK,
            "nsimsun": SONG_STACK,
            "songti": SONG_STACK,
            "songti sc": SONG_STACK,
            "stsong": SONG_STACK,
            "华文宋体": SONG_STACK,
        }
    )
)

FANGSONG_FONT_NAMES: frozenset[str] = frozenset(
    {"仿宋", "仿宋_GB2312", "FangSong", "FangSong_GB2312"}
)
# endregion


# region Size tables
# Legacy HTML <font size="N"> codes, which Word still emits when pasting.
WORD_SIZE_CODES: Mapping[str, str] = _frozen(
    {
        "1": "10px",
        "2": "13px",
        "3": "16px",
        "4": "18px",
        "5": "24px",
        "6": "32px",
        "7": "48px",
    }
)

PASSTHROUGH_SIZE_UNITS: tuple[str, ...] = ("px", "em", "rem", "%", "vw", "vh")

PT_TO_PX = 1.33
# endregion


# region Highlight colors
# Word's named highlight palette (w:highlight w:val) as RGB hex.
HIGHLIGHT_COLORS: Mapping[str, str] = _frozen(
    {
        "yellow": "FFFF00",
        "green": "00FF00",
        "cyan": "00FFFF",
        "magenta": "FF00FF",
        "blue": "0000FF",
        "red": "FF0000",
        "darkBlue": "000080",
        "darkCyan": "008080",
        "darkGreen": "008000",
        "darkMagenta": "800080",
        "darkRed": "800000",
        "darkYellow": "808000",
        "darkGray": "808080",
        "lightGray": "C0C0C0",
        "black": "000000",
    }
)

CSS_NAMED_COLORS: Mapping[str, str] = _frozen(
    {
        "black": "000000",
        "white": "FFFFFF",
        "red": "FF0000",
        "green": "008000",
        "lime": "00FF00",
        "blue": "0000FF",
        "yellow": "FFFF00",
        "cyan": "00FFFF",
        "aqua": "00FFFF",
        "magenta": "FF00FF",
        "fuchsia": "FF00FF",
        "gray": "808080",
        "grey": "808080",
        "silver": "C0C0C0",
        "maroon": "800000",
        "olive": "808000",
        "navy": "000080",
        "purple": "800080",
        "teal": "008080",
        "orange": "FFA500",
    }
)
# endregion


# region StylePresets
@dataclass(frozen=True)
class StylePresets:
    """Preset StyleMaps applied by the tag/class/structure passes of the style extractor."""

    headings: Mapping[int, Mapping[str, str]]
    paragraph: Mapping[str, str]
    classes: Mapping[str, Mapping[str, str]]
    mso_classes: Mapping[str, Mapping[str, str]]
    title: Mapping[str, str]
    list_item: Mapping[str, str]
    quote: Mapping[str, str]
    chinese_paragraph: Mapping[str, str]
    table_cell: Mapping[str, str]
    list_context: Mapping[str, str]
    cjk_font_family: str = SONG_STACK
    latin_font_family: str = LATIN_SERIF_STACK
    indent_unit_px: int = 20
    short_title_length: int = 30
    aggregation_threshold: float = 0.7
    alignment_class_order: tuple[str, ...] = field(
        default=("center", "right", "justify", "left")
    )


def _heading_preset(size: str, top: str, bottom: str) -> Mapping[str, str]:
    return _frozen(
        {
            "fontSize": size,
            "fontWeight": "bold",
            "marginTop": top,
            "marginBottom": bottom,
        }
    )


DEFAULT_PRESETS = StylePresets(
    headings=_frozen(
        {
            1: _heading_preset("28px", "24px", "16px"),
            2: _heading_preset("24px", "20px", "14px"),
            3: _heading_preset("20px", "18px", "12px"),
            4: _heading_preset("18px", "16px", "10px"),
            5: _heading_preset("16px", "14px", "8px"),
            6: _heading_preset("14px", "12px", "8px"),
        }
    ),
    paragraph=_frozen({"lineHeight": "1.6", "marginTop": "8px", "marginBottom": "8px"}),
    classes=_frozen(
        {
            "title": _frozen({"fontSize": "28px", "fontWeight": "bold", "marginBottom": "16px"}),
            "subtitle": _frozen({"fontSize": "20px", "fontWeight": "bold", "marginBottom": "12px"}),
            "heading": _frozen({"fontSize": "22px", "fontWeight": "bold", "marginBottom": "12px"}),
            "lead": _frozen({"fontSize": "18px", "lineHeight": "1.8"}),
            "large": _frozen({"fontSize": "18px"}),
            "small": _frozen({"fontSize": "12px"}),
            "caption": _frozen({"fontSize": "12px", "marginTop": "4px", "marginBottom": "4px"}),
            "bold": _frozen({"fontWeight": "bold"}),
        }
    ),
    mso_classes=_frozen(
        {
            "msotitle": _frozen({"fontSize": "26pt", "fontWeight": "bold"}),
            "msosubtitle": _frozen({"fontSize": "15pt", "fontStyle": "italic"}),
        }
    ),
    title=_frozen({"fontWeight": "bold"}),
    list_item=_frozen({"marginBottom": "4px"}),
    quote=_frozen(
        {
            "fontStyle": "italic",
            "borderLeft": "4px solid #ccc",
            "paddingLeft": "16px",
        }
    ),
    chinese_paragraph=_frozen({"textIndent": "2em"}),
    table_cell=_frozen({"padding": "8px", "border": "1px solid #ddd"}),
    list_context=_frozen({"marginBottom": "4px"}),
)
# endregion
