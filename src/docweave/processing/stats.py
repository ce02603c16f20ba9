"""Plain text and counts for a block document."""

import re
from dataclasses import asdict, dataclass

from docweave.models import Document
from docweave.styles.text_analyzer import CJK_PATTERN

LATIN_WORD_PATTERN = re.compile(r"[A-Za-z0-9]+(?:['’][A-Za-z]+)*")


@dataclass(frozen=True)
class DocumentStats:
    characters: int
    characters_no_spaces: int
    words: int
    blocks: int
    comments: int

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


def document_plain_text(document: Document) -> str:
    """Block texts without markup, one block per line."""
    return document.plain_text


def count_words(text: str) -> int:
    """Latin words plus CJK characters (each CJK character reads as a word)."""
    return len(LATIN_WORD_PATTERN.findall(text)) + len(CJK_PATTERN.findall(text))


def document_stats(document: Document) -> DocumentStats:
    text = document_plain_text(document)
    return DocumentStats(
        characters=len(text),
        characters_no_spaces=len("".join(text.split())),
        words=count_words(text),
        blocks=len(document.blocks),
        comments=len(document.comments),
    )
