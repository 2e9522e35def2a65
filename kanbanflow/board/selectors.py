"""Read-only views over a ``BoardState`` snapshot.

Selectors never change the snapshot they are given. The ones presentation
code calls on every redraw remember their last input by identity, so
asking again for an unchanged snapshot is free. Their results are
read-only views (mapping proxies and tuples).
"""

from __future__ import annotations

import functools
from types import MappingProxyType
from typing import Any, Callable, Mapping, TypeVar

from .exceptions import NotFoundError
from .models import Board, BoardState, Column, Priority, Task

R = TypeVar("R")


def _memoize_last(fn: Callable[..., R]) -> Callable[..., R]:
    """Cache the most recent result, keyed on argument identity."""
    last_args: tuple = ()
    last_result: Any = None
    has_result = False

    @functools.wraps(fn)
    def wrapper(*args):
        nonlocal last_args, last_result, has_result
        if has_result and len(args) == len(last_args) and all(
            a is b for a, b in zip(args, last_args)
        ):
            return last_result
        last_result = fn(*args)
        last_args = args
        has_result = True
        return last_result

    return wrapper


def board_count(state: BoardState) -> int:
    return len(state.boards)


def active_board(state: BoardState) -> Board | None:
    if state.active_board_id is None:
        return None
    index = state.board_index(state.active_board_id)
    return state.boards[index] if index is not None else None


def get_board(state: BoardState, board_id: str) -> Board:
    index = state.board_index(board_id)
    if index is None:
        raise NotFoundError("board", board_id)
    return state.boards[index]


def get_column(state: BoardState, board_id: str, column_id: str) -> Column:
    board = get_board(state, board_id)
    index = board.column_index(column_id)
    if index is None:
        raise NotFoundError("column", column_id)
    return board.columns[index]


def get_task(state: BoardState, board_id: str, column_id: str, task_id: str) -> Task:
    column = get_column(state, board_id, column_id)
    index = column.task_index(task_id)
    if index is None:
        raise NotFoundError("task", task_id)
    return column.tasks[index]


def locate_task(state: BoardState, task_id: str) -> Task | None:
    """Find a task anywhere in the snapshot, or None."""
    for board in state.boards:
        for column in board.columns:
            for task in column.tasks:
                if task.id == task_id:
                    return task
    return None


@_memoize_last
def task_counts(board: Board) -> Mapping[str, int]:
    """Column id -> number of tasks, in column order."""
    return MappingProxyType({c.id: len(c.tasks) for c in board.columns})


@_memoize_last
def tag_list(source: Board | BoardState) -> tuple[str, ...]:
    """Sorted distinct tags of one board, or of every board in a snapshot."""
    boards = source.boards if isinstance(source, BoardState) else (source,)
    tags = {tag for b in boards for c in b.columns for t in c.tasks for tag in t.tags}
    return tuple(sorted(tags))


@_memoize_last
def priority_counts(board: Board) -> Mapping[Priority, int]:
    counts = {p: 0 for p in Priority}
    for column in board.columns:
        for task in column.tasks:
            counts[task.priority] += 1
    return MappingProxyType(counts)


def board_summary(board: Board) -> dict:
    """Plain-dict overview of one board for tools and the CLI."""
    return {
        "id": board.id,
        "name": board.name,
        "columns": [
            {"id": c.id, "title": c.title, "tasks": len(c.tasks)}
            for c in board.columns
        ],
        "task_count": sum(task_counts(board).values()),
        "by_priority": {p.value: n for p, n in priority_counts(board).items()},
        "tags": list(tag_list(board)),
    }
