"""Extract comments from a parsed Word package."""

import logging
from datetime import datetime, timezone
from typing import Optional

from docweave.internals.constants import DEFAULT_COMMENT_AUTHOR, EMPTY_COMMENT_CONTENT
from docweave.models import Comment, TextRange, now_ms
from docweave.processing.tree_walker import extract_text
from docweave.processing.word_tree import WordCommentRecord, WordNode, WordPackage

log = logging.getLogger("docweave")


# region collect_comment_ranges
def collect_comment_ranges(root: WordNode) -> dict[str, str]:
    """
    Reconstruct the commented text of every comment range in the tree.

    Traverses depth-first; a comment id starts collecting at its
    commentRangeStart and stops at the matching commentRangeEnd. Text nodes seen
    in between contribute their text in traversal order. A repeated start marker
    for an id that was already seen is ignored.

    Returns:
        {comment_id: range_text}
    """
    collected: dict[str, list[str]] = {}
    collecting: list[str] = []

    def visit(node: WordNode) -> None:
        comment_id = node.attributes.get("id")
        if node.type == "commentRangeStart" and comment_id and comment_id not in collected:
            collected[comment_id] = []
            collecting.append(comment_id)
        elif node.type == "commentRangeEnd" and comment_id in collecting:
            collecting.remove(comment_id)
        elif node.type == "text" and node.text:
            for active_id in collecting:
                collected[active_id].append(node.text)

        for child in node.children:
            visit(child)
        for run in node.runs:
            visit(run)

    visit(root)
    return {comment_id: "".join(parts) for comment_id, parts in collected.items()}


# endregion


# region extract_comments
def extract_comments(package: WordPackage) -> list[Comment]:
    """Comments part entries as Comment models, each carrying the text its range covers."""
    ranges = collect_comment_ranges(package.body) if package.body is not None else {}

    comments: list[Comment] = []
    seen: set[str] = set()
    for record in package.comments:
        if record.id in seen:
            log.debug(f"Skipping duplicate comment id {record.id}")
            continue
        seen.add(record.id)
        comments.append(comment_from_record(record, ranges.get(record.id, "")))

    log.debug(f"Extracted {len(comments)} comments, {len(ranges)} with ranges in the body.")
    return comments


def comment_from_record(record: WordCommentRecord, range_text: str = "") -> Comment:
    content = "\n".join(
        text for text in (extract_text(child).strip() for child in record.children) if text
    )
    return Comment(
        id=record.id,
        content=content or EMPTY_COMMENT_CONTENT,
        author=record.author or DEFAULT_COMMENT_AUTHOR,
        timestamp=parse_comment_timestamp(record.date),
        range=TextRange(0, len(range_text), range_text),
        initials=record.initials or "",
        resolved=record.resolved,
        replies=[comment_from_record(reply) for reply in record.replies],
    )


def parse_comment_timestamp(value: Optional[str]) -> int:
    """ISO 8601 date -> epoch milliseconds. Naive dates are read as UTC; bad or missing dates give now."""
    if not value:
        return now_ms()
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        log.warning(f"Could not parse comment date {value!r}; using the current time.")
        return now_ms()
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp() * 1000)


# endregion
