"""Convert snapshots to and from the persisted JSON document.

Document shape::

    {"boards": [{"id", "name", "columns": [{"id", "title",
        "tasks": [{"id", "title", "description", "priority", "tags"}]}]}],
     "activeBoardId": str | null}

Back-references (``board_id``, ``column_id``) are not stored; they are
rebuilt from containment when a document is read.
"""

from __future__ import annotations

from typing import Any

from .exceptions import CorruptDataError
from .models import COLUMN_TITLES, Board, BoardState, Column, Priority, Task


def task_to_dict(task: Task) -> dict[str, Any]:
    return {
        "id": task.id,
        "title": task.title,
        "description": task.description,
        "priority": task.priority.value,
        "tags": list(task.tags),
    }


def board_to_dict(board: Board) -> dict[str, Any]:
    return {
        "id": board.id,
        "name": board.name,
        "columns": [
            {
                "id": column.id,
                "title": column.title,
                "tasks": [task_to_dict(task) for task in column.tasks],
            }
            for column in board.columns
        ],
    }


def state_to_dict(state: BoardState) -> dict[str, Any]:
    return {
        "boards": [board_to_dict(board) for board in state.boards],
        "activeBoardId": state.active_board_id,
    }


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def _expect(value, kind: type, location: str):
    if not isinstance(value, kind):
        raise CorruptDataError(location, f"expected {kind.__name__}, got {type(value).__name__}")
    return value


def _field(raw: dict, key: str, kind: type, location: str):
    if key not in raw:
        raise CorruptDataError(f"{location}.{key}", "missing")
    return _expect(raw[key], kind, f"{location}.{key}")


def _non_empty(value: str, location: str) -> str:
    if not value.strip():
        raise CorruptDataError(location, "must not be empty")
    return value


def _unique_id(value: str, seen: set[str], location: str) -> str:
    _non_empty(value, location)
    if value in seen:
        raise CorruptDataError(location, f"duplicate id {value!r}")
    seen.add(value)
    return value


def _parse_task(raw, board_id: str, column_id: str, seen: set[str], location: str) -> Task:
    _expect(raw, dict, location)
    priority = _field(raw, "priority", str, location)
    try:
        priority = Priority(priority)
    except ValueError:
        raise CorruptDataError(f"{location}.priority", f"unknown priority {priority!r}") from None

    tags = _field(raw, "tags", list, location)
    for i, tag in enumerate(tags):
        tag_location = f"{location}.tags[{i}]"
        _non_empty(_expect(tag, str, tag_location), tag_location)
        if tag != tag.strip():
            raise CorruptDataError(tag_location, "tag is not trimmed")
    if len(set(tags)) != len(tags):
        raise CorruptDataError(f"{location}.tags", "duplicate tags")

    return Task(
        id=_unique_id(_field(raw, "id", str, location), seen, f"{location}.id"),
        title=_non_empty(_field(raw, "title", str, location), f"{location}.title"),
        board_id=board_id,
        column_id=column_id,
        description=_field(raw, "description", str, location),
        priority=priority,
        tags=tuple(tags),
    )


def _parse_column(raw, board_id: str, seen: dict[str, set[str]], location: str) -> Column:
    _expect(raw, dict, location)
    column_id = _unique_id(_field(raw, "id", str, location), seen["column"], f"{location}.id")
    title = _field(raw, "title", str, location)
    if title not in COLUMN_TITLES:
        raise CorruptDataError(f"{location}.title", f"unknown column title {title!r}")
    tasks = tuple(
        _parse_task(t, board_id, column_id, seen["task"], f"{location}.tasks[{i}]")
        for i, t in enumerate(_field(raw, "tasks", list, location))
    )
    return Column(id=column_id, title=title, board_id=board_id, tasks=tasks)


def _parse_board(raw, seen: dict[str, set[str]], location: str) -> Board:
    _expect(raw, dict, location)
    board_id = _unique_id(_field(raw, "id", str, location), seen["board"], f"{location}.id")
    name = _non_empty(_field(raw, "name", str, location), f"{location}.name")
    columns = tuple(
        _parse_column(c, board_id, seen, f"{location}.columns[{i}]")
        for i, c in enumerate(_field(raw, "columns", list, location))
    )
    titles = [c.title for c in columns]
    if len(set(titles)) != len(titles):
        raise CorruptDataError(f"{location}.columns", "duplicate column titles")
    return Board(id=board_id, name=name, columns=columns)


def state_from_dict(data: Any) -> BoardState:
    """Build a snapshot from a decoded document, raising CorruptDataError on any violation."""
    _expect(data, dict, "$")
    seen: dict[str, set[str]] = {"board": set(), "column": set(), "task": set()}
    boards = tuple(
        _parse_board(b, seen, f"$.boards[{i}]")
        for i, b in enumerate(_field(data, "boards", list, "$"))
    )

    if "activeBoardId" not in data:
        raise CorruptDataError("$.activeBoardId", "missing")
    active = data["activeBoardId"]
    if active is not None:
        _expect(active, str, "$.activeBoardId")
        if active not in seen["board"]:
            raise CorruptDataError("$.activeBoardId", f"unknown board {active!r}")

    return BoardState(boards=boards, active_board_id=active)
