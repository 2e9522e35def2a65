"""Pure state transitions for boards, columns and tasks.

Each function takes the current ``BoardState`` snapshot plus a payload and
returns a new snapshot. Validation runs before anything is rebuilt, so a
failing call leaves no trace: the caller still holds the old snapshot.
No function here touches persistence, clocks or scheduling; new ids come
from the ``new_id`` argument or the injected ``IdGenerator``.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import replace

from .exceptions import ConflictError, NotFoundError, ValidationError
from .ids import IdGenerator, default_ids
from .models import COLUMN_TITLES, Board, BoardState, Column, Priority, Task
from .rules import (
    EDITABLE_BOARD_FIELDS,
    EDITABLE_COLUMN_FIELDS,
    EDITABLE_TASK_FIELDS,
    normalize_tags,
    parse_priority,
    validate_column_title,
    validate_fields,
    validate_title,
)

DEFAULT_BOARD_NAME = "My Board"


# ---------------------------------------------------------------------------
# Lookup and rebuild helpers
# ---------------------------------------------------------------------------

def _find_board(state: BoardState, board_id: str) -> tuple[int, Board]:
    index = state.board_index(board_id)
    if index is None:
        raise NotFoundError("board", board_id)
    return index, state.boards[index]


def _find_column(board: Board, column_id: str) -> tuple[int, Column]:
    index = board.column_index(column_id)
    if index is None:
        raise NotFoundError("column", column_id)
    return index, board.columns[index]


def _find_task(column: Column, task_id: str) -> tuple[int, Task]:
    index = column.task_index(task_id)
    if index is None:
        raise NotFoundError("task", task_id)
    return index, column.tasks[index]


def _replace_at(items: tuple, index: int, item) -> tuple:
    return items[:index] + (item,) + items[index + 1:]


def _remove_at(items: tuple, index: int) -> tuple:
    return items[:index] + items[index + 1:]


def _insert_at(items: tuple, index: int, item) -> tuple:
    return items[:index] + (item,) + items[index:]


def _clamp_index(value, upper: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError("dest_index", f"{value!r} is not an integer")
    return max(0, min(value, upper))


def _with_board(state: BoardState, index: int, board: Board) -> BoardState:
    return replace(state, boards=_replace_at(state.boards, index, board))


def _with_column(board: Board, index: int, column: Column) -> Board:
    return replace(board, columns=_replace_at(board.columns, index, column))


def _ids_in_use(state: BoardState, kind: str) -> set[str]:
    if kind == "board":
        return {b.id for b in state.boards}
    if kind == "column":
        return {c.id for b in state.boards for c in b.columns}
    return {t.id for b in state.boards for c in b.columns for t in c.tasks}


def _issue_id(
    state: BoardState, kind: str, new_id: str | None, ids: IdGenerator
) -> str:
    entity_id = new_id if new_id is not None else ids.new_id(kind)
    if not isinstance(entity_id, str) or not entity_id:
        raise ValidationError("id", "must be a non-empty string")
    if entity_id in _ids_in_use(state, kind):
        raise ConflictError(f"{kind.capitalize()} id already in use: {entity_id}")
    return entity_id


def _validate_description(value) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError("description", "must be a string")
    return value


# ---------------------------------------------------------------------------
# Boards
# ---------------------------------------------------------------------------

def add_board(
    state: BoardState,
    name: str,
    *,
    new_id: str | None = None,
    column_titles: Sequence[str] = COLUMN_TITLES,
    column_ids: Sequence[str] | None = None,
    ids: IdGenerator = default_ids,
) -> BoardState:
    """Append a board seeded with ``column_titles`` and make it active."""
    name = validate_title(name, "name")
    board_id = _issue_id(state, "board", new_id, ids)
    if column_ids is not None and len(column_ids) != len(column_titles):
        raise ValidationError("column_ids", "must match column_titles in length")

    board = Board(id=board_id, name=name)
    taken = _ids_in_use(state, "column")
    for i, title in enumerate(column_titles):
        column_id = column_ids[i] if column_ids is not None else ids.new_id("column")
        if column_id in taken:
            raise ConflictError(f"Column id already in use: {column_id}")
        taken.add(column_id)
        title = validate_column_title(board, title)
        board = replace(
            board,
            columns=board.columns + (Column(id=column_id, title=title, board_id=board_id),),
        )

    return BoardState(boards=state.boards + (board,), active_board_id=board_id)


def update_board(state: BoardState, board_id: str, /, **fields) -> BoardState:
    """Apply a partial update (currently only ``name``) to one board."""
    validate_fields("board", fields, EDITABLE_BOARD_FIELDS)
    index, board = _find_board(state, board_id)
    if "name" in fields:
        board = replace(board, name=validate_title(fields["name"], "name"))
    return _with_board(state, index, board)


def delete_board(state: BoardState, board_id: str) -> BoardState:
    """Remove a board with all its columns and tasks.

    If the removed board was active, the board that slides into its
    position becomes active, else the one before it, else nothing.
    """
    index, _ = _find_board(state, board_id)
    boards = _remove_at(state.boards, index)
    active = state.active_board_id
    if active == board_id:
        if index < len(boards):
            active = boards[index].id
        elif boards:
            active = boards[-1].id
        else:
            active = None
    return BoardState(boards=boards, active_board_id=active)


def set_active_board(state: BoardState, board_id: str) -> BoardState:
    _find_board(state, board_id)
    return replace(state, active_board_id=board_id)


# ---------------------------------------------------------------------------
# Columns
# ---------------------------------------------------------------------------

def add_column(
    state: BoardState,
    board_id: str,
    title: str,
    *,
    new_id: str | None = None,
    ids: IdGenerator = default_ids,
) -> BoardState:
    """Append a column to the end of a board."""
    index, board = _find_board(state, board_id)
    title = validate_column_title(board, title)
    column_id = _issue_id(state, "column", new_id, ids)
    column = Column(id=column_id, title=title, board_id=board_id)
    return _with_board(state, index, replace(board, columns=board.columns + (column,)))


def update_column(
    state: BoardState, board_id: str, column_id: str, /, **fields
) -> BoardState:
    """Apply a partial update (currently only ``title``) to one column."""
    validate_fields("column", fields, EDITABLE_COLUMN_FIELDS)
    b_index, board = _find_board(state, board_id)
    c_index, column = _find_column(board, column_id)
    if "title" in fields:
        title = validate_column_title(board, fields["title"], exclude_column_id=column_id)
        column = replace(column, title=title)
    return _with_board(state, b_index, _with_column(board, c_index, column))


def delete_column(state: BoardState, board_id: str, column_id: str) -> BoardState:
    """Remove a column and every task in it."""
    b_index, board = _find_board(state, board_id)
    c_index, _ = _find_column(board, column_id)
    board = replace(board, columns=_remove_at(board.columns, c_index))
    return _with_board(state, b_index, board)


def reorder_column(
    state: BoardState, board_id: str, column_id: str, dest_index: int
) -> BoardState:
    """Move one column to ``dest_index`` (clamped); other columns keep their order."""
    b_index, board = _find_board(state, board_id)
    c_index, column = _find_column(board, column_id)
    remaining = _remove_at(board.columns, c_index)
    target = _clamp_index(dest_index, len(remaining))
    board = replace(board, columns=_insert_at(remaining, target, column))
    return _with_board(state, b_index, board)


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------

def add_task(
    state: BoardState,
    board_id: str,
    column_id: str,
    title: str,
    description: str | None = "",
    priority: Priority | str = Priority.MEDIUM,
    tags: str | Iterable[str] | None = (),
    *,
    new_id: str | None = None,
    ids: IdGenerator = default_ids,
) -> BoardState:
    """Append a task to the end of a column."""
    b_index, board = _find_board(state, board_id)
    c_index, column = _find_column(board, column_id)
    task = Task(
        id="",
        title=validate_title(title),
        board_id=board_id,
        column_id=column_id,
        description=_validate_description(description),
        priority=parse_priority(priority),
        tags=normalize_tags(tags),
    )
    task = replace(task, id=_issue_id(state, "task", new_id, ids))
    column = replace(column, tasks=column.tasks + (task,))
    return _with_board(state, b_index, _with_column(board, c_index, column))


def update_task(
    state: BoardState, board_id: str, column_id: str, task_id: str, /, **fields
) -> BoardState:
    """Replace the editable fields of one task; its position is unchanged."""
    validate_fields("task", fields, EDITABLE_TASK_FIELDS)
    b_index, board = _find_board(state, board_id)
    c_index, column = _find_column(board, column_id)
    t_index, task = _find_task(column, task_id)

    changes = {}
    if "title" in fields:
        changes["title"] = validate_title(fields["title"])
    if "description" in fields:
        changes["description"] = _validate_description(fields["description"])
    if "priority" in fields:
        changes["priority"] = parse_priority(fields["priority"])
    if "tags" in fields:
        changes["tags"] = normalize_tags(fields["tags"])

    column = replace(column, tasks=_replace_at(column.tasks, t_index, replace(task, **changes)))
    return _with_board(state, b_index, _with_column(board, c_index, column))


def delete_task(
    state: BoardState, board_id: str, column_id: str, task_id: str
) -> BoardState:
    b_index, board = _find_board(state, board_id)
    c_index, column = _find_column(board, column_id)
    t_index, _ = _find_task(column, task_id)
    column = replace(column, tasks=_remove_at(column.tasks, t_index))
    return _with_board(state, b_index, _with_column(board, c_index, column))


def move_task(
    state: BoardState,
    board_id: str,
    source_column_id: str,
    dest_column_id: str,
    task_id: str,
    dest_index: int,
) -> BoardState:
    """Take a task out of its column and insert it at ``dest_index``.

    The index is clamped to the destination's length after removal, so for
    a same-column move it is the task's final position.
    """
    b_index, board = _find_board(state, board_id)
    s_index, source = _find_column(board, source_column_id)
    d_index, dest = _find_column(board, dest_column_id)
    t_index, task = _find_task(source, task_id)

    source = replace(source, tasks=_remove_at(source.tasks, t_index))
    if s_index == d_index:
        dest = source
    target = _clamp_index(dest_index, len(dest.tasks))
    dest = replace(
        dest, tasks=_insert_at(dest.tasks, target, replace(task, column_id=dest_column_id))
    )

    board = _with_column(board, s_index, source)
    board = _with_column(board, d_index, dest)
    return _with_board(state, b_index, board)


def default_state(ids: IdGenerator = default_ids) -> BoardState:
    """Seed used when nothing has been persisted yet."""
    return add_board(BoardState(), DEFAULT_BOARD_NAME, ids=ids)
