"""Field-level rules shared by task and column mutations, defined as data."""

from __future__ import annotations

from collections.abc import Iterable

from .exceptions import ConflictError, ValidationError
from .models import COLUMN_TITLES, Board, Priority

EDITABLE_BOARD_FIELDS: frozenset[str] = frozenset({"name"})
EDITABLE_COLUMN_FIELDS: frozenset[str] = frozenset({"title"})
EDITABLE_TASK_FIELDS: frozenset[str] = frozenset(
    {"title", "description", "priority", "tags"}
)


def validate_title(value, field: str = "title") -> str:
    """Return the trimmed value, or raise ValidationError if it is empty."""
    if not isinstance(value, str):
        raise ValidationError(field, "must be a string")
    stripped = value.strip()
    if not stripped:
        raise ValidationError(field, "must not be empty")
    return stripped


def validate_fields(kind: str, fields: dict, allowed: frozenset[str]) -> None:
    """Raise ValidationError for any patch key outside ``allowed``."""
    unknown = sorted(set(fields) - allowed)
    if unknown:
        raise ValidationError(unknown[0], f"not an editable {kind} field")


def parse_priority(value) -> Priority:
    if isinstance(value, Priority):
        return value
    if isinstance(value, str):
        try:
            return Priority(value.strip().lower())
        except ValueError:
            pass
    choices = ", ".join(p.value for p in Priority)
    raise ValidationError("priority", f"{value!r} is not one of {choices}")


def normalize_tags(raw: str | Iterable[str] | None) -> tuple[str, ...]:
    """Split, trim, drop empties and dedupe tags, keeping first-seen order.

    A string is treated as comma-separated form input ("infra, urgent").
    """
    if raw is None:
        return ()
    if isinstance(raw, str):
        parts = raw.split(",")
    else:
        parts = []
        for item in raw:
            if not isinstance(item, str):
                raise ValidationError("tags", f"{item!r} is not a string")
            parts.append(item)
    seen: dict[str, None] = {}
    for part in parts:
        tag = part.strip()
        if tag:
            seen.setdefault(tag, None)
    return tuple(seen)


def format_tags(tags: Iterable[str]) -> str:
    """Render tags back into the comma-separated form an edit field expects."""
    return ", ".join(tags)


def validate_column_title(
    board: Board, title, exclude_column_id: str | None = None
) -> str:
    """Check a label against the fixed set and against the board's other columns."""
    if not isinstance(title, str):
        raise ValidationError("title", "must be a string")
    title = title.strip()
    if title not in COLUMN_TITLES:
        raise ConflictError(
            f"Column title {title!r} is not one of: {', '.join(COLUMN_TITLES)}"
        )
    for column in board.columns:
        if column.id != exclude_column_id and column.title == title:
            raise ConflictError(
                f"Board {board.id} already has a column titled {title!r}"
            )
    return title
