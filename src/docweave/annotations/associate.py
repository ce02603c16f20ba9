"""Attach extracted comments to the blocks whose text they cover."""

import logging
import unicodedata
from dataclasses import dataclass, replace
from typing import Optional

from docweave.internals.constants import (
    EXACT_MATCH_SCORE,
    NORMALIZED_MATCH_SCORE,
    UNMATCHED_RANGE_TEXT,
)
from docweave.internals.run_context import get_pipeline_run_id
from docweave.models import Block, Comment, TextRange

log = logging.getLogger("docweave")


# region scoring
def normalize_for_matching(text: str) -> str:
    """Case-folded, with whitespace and punctuation removed."""
    return "".join(
        ch
        for ch in text.casefold()
        if not ch.isspace() and not unicodedata.category(ch).startswith("P")
    )


def score_match(block_text: str, range_text: str) -> int:
    """
    How well a block's text matches a comment's range text.

    EXACT_MATCH_SCORE when either contains the other, NORMALIZED_MATCH_SCORE when
    that only holds after normalize_for_matching, else 0.
    """
    if not block_text.strip() or not range_text.strip():
        return 0
    if range_text in block_text or block_text in range_text:
        return EXACT_MATCH_SCORE

    normalized_block = normalize_for_matching(block_text)
    normalized_range = normalize_for_matching(range_text)
    if normalized_block and normalized_range and (
        normalized_range in normalized_block or normalized_block in normalized_range
    ):
        return NORMALIZED_MATCH_SCORE
    return 0


@dataclass(frozen=True)
class CommentMatch:
    block_index: int
    score: int


def find_best_block(blocks: list[Block], range_text: str) -> Optional[CommentMatch]:
    """Highest-scoring block over the whole document. Ties go to the earliest block."""
    best: Optional[CommentMatch] = None
    for index, block in enumerate(blocks):
        score = score_match(block.plain_text, range_text)
        if score and (best is None or score > best.score):
            best = CommentMatch(block_index=index, score=score)
    return best


def range_in_block(block_text: str, range_text: str) -> TextRange:
    """Offsets of the range text inside the block's text; the whole block when it isn't a plain substring."""
    start = block_text.find(range_text)
    if start >= 0:
        return TextRange(start, start + len(range_text), range_text)
    return TextRange(0, len(block_text), range_text)


# endregion


# region associate_comments
def associate_comments(
    blocks: list[Block], comments: list[Comment]
) -> tuple[list[Block], list[Comment]]:
    """
    Attach each comment to its best-matching block.

    Every comment lands in the returned document-level list exactly once.
    Matched comments are also added to their block, with offsets relative to
    that block's text. Unmatched comments get UNMATCHED_RANGE_TEXT as range text.

    Returns:
        (blocks with comments attached, document-level comments)
    """
    pipeline_id = get_pipeline_run_id()
    result_blocks = list(blocks)
    document_comments: list[Comment] = []
    seen: set[str] = set()

    for comment in comments:
        if comment.id in seen:
            continue
        seen.add(comment.id)

        match = find_best_block(result_blocks, comment.range.text)
        if match is None:
            log.debug(
                f"No block matches the range of comment {comment.id}. [pipeline:{pipeline_id}]"
            )
            document_comments.append(replace(comment, range=TextRange(0, 0, UNMATCHED_RANGE_TEXT)))
            continue

        block = result_blocks[match.block_index]
        anchored = replace(comment, range=range_in_block(block.plain_text, comment.range.text))
        if all(existing.id != anchored.id for existing in block.comments):
            result_blocks[match.block_index] = block.with_comment(anchored)
        document_comments.append(anchored)

    log.debug(
        f"Associated {sum(len(b.comments) for b in result_blocks)} of {len(document_comments)} comments "
        f"with blocks. [pipeline:{pipeline_id}]"
    )
    return result_blocks, document_comments


# endregion
