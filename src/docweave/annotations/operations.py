"""Comment editing operations. Each returns a new list and leaves its input untouched."""

import logging
import uuid
from dataclasses import replace
from typing import Callable

from docweave.models import Comment, TextRange, now_ms

log = logging.getLogger("docweave")


def new_comment_id() -> str:
    return f"comment-{uuid.uuid4().hex[:10]}"


# region create / delete
def create_comment(
    comments: list[Comment],
    content: str,
    author: str,
    text_range: TextRange,
    initials: str = "",
) -> tuple[list[Comment], Comment]:
    """Append a new comment. Returns the new list and the created comment."""
    if not content.strip():
        raise ValueError("Comment content cannot be empty")
    comment = Comment(
        id=new_comment_id(),
        content=content,
        author=author,
        timestamp=now_ms(),
        range=text_range,
        initials=initials,
    )
    return [*comments, comment], comment


def delete_comment(comments: list[Comment], comment_id: str) -> list[Comment]:
    """Remove a comment (or reply) by id, along with its replies."""
    _require(comments, comment_id)
    return _without(comments, comment_id)


def _without(comments: list[Comment], comment_id: str) -> list[Comment]:
    return [
        replace(comment, replies=_without(comment.replies, comment_id))
        for comment in comments
        if comment.id != comment_id
    ]


# endregion


# region update
def edit_comment(comments: list[Comment], comment_id: str, content: str) -> list[Comment]:
    if not content.strip():
        raise ValueError("Comment content cannot be empty")
    return _update(comments, comment_id, lambda c: replace(c, content=content, timestamp=now_ms()))


def resolve_comment(comments: list[Comment], comment_id: str) -> list[Comment]:
    return _update(comments, comment_id, lambda c: replace(c, resolved=True))


def reopen_comment(comments: list[Comment], comment_id: str) -> list[Comment]:
    return _update(comments, comment_id, lambda c: replace(c, resolved=False))


def add_reply(
    comments: list[Comment], comment_id: str, content: str, author: str, initials: str = ""
) -> list[Comment]:
    """Reply to a comment. The reply shares its parent's range."""
    if not content.strip():
        raise ValueError("Reply content cannot be empty")

    def append_reply(parent: Comment) -> Comment:
        reply = Comment(
            id=new_comment_id(),
            content=content,
            author=author,
            timestamp=now_ms(),
            range=parent.range,
            initials=initials,
        )
        return replace(parent, replies=[*parent.replies, reply])

    return _update(comments, comment_id, append_reply)


def _update(
    comments: list[Comment], comment_id: str, change: Callable[[Comment], Comment]
) -> list[Comment]:
    _require(comments, comment_id)
    return _apply(comments, comment_id, change)


def _apply(
    comments: list[Comment], comment_id: str, change: Callable[[Comment], Comment]
) -> list[Comment]:
    updated = []
    for comment in comments:
        if comment.id == comment_id:
            updated.append(change(comment))
        else:
            updated.append(replace(comment, replies=_apply(comment.replies, comment_id, change)))
    return updated


def _require(comments: list[Comment], comment_id: str) -> None:
    if find_comment(comments, comment_id) is None:
        log.error(f"No comment with id {comment_id}")
        raise KeyError(f"No comment with id {comment_id}")


# endregion


# region queries
def find_comment(comments: list[Comment], comment_id: str) -> Comment | None:
    """Search comments and their replies by id."""
    for comment in comments:
        if comment.id == comment_id:
            return comment
        found = find_comment(comment.replies, comment_id)
        if found is not None:
            return found
    return None


def find_comments_by_range(comments: list[Comment], start: int, end: int) -> list[Comment]:
    """Top-level comments whose range overlaps [start, end)."""
    return [
        comment
        for comment in comments
        if comment.range.start_offset < end and start < comment.range.end_offset
    ]


# endregion
