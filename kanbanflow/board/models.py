"""Domain models for the board engine.

Every record is frozen and every ordered collection is a tuple, so a
``BoardState`` snapshot can be shared freely: changes always produce a new
snapshot through ``dataclasses.replace``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Priority(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class ColumnStateOption:
    """Presentation hints for one column label."""

    icon: str
    color: str


# Single source for column labels: validation reads the keys, presentation
# reads the icon/color. Order is the default seeding order.
COLUMN_STATE_OPTIONS: dict[str, ColumnStateOption] = {
    "Backlog": ColumnStateOption(icon="circle-dashed", color="#64748b"),
    "In Progress": ColumnStateOption(icon="timer", color="#3b82f6"),
    "Review": ColumnStateOption(icon="eye", color="#f59e0b"),
    "Done": ColumnStateOption(icon="circle-check", color="#22c55e"),
}

COLUMN_TITLES: tuple[str, ...] = tuple(COLUMN_STATE_OPTIONS)


@dataclass(frozen=True)
class Task:
    id: str
    title: str
    board_id: str
    column_id: str
    description: str = ""
    priority: Priority = Priority.MEDIUM
    tags: tuple[str, ...] = ()


@dataclass(frozen=True)
class Column:
    id: str
    title: str
    board_id: str
    tasks: tuple[Task, ...] = ()

    def task_index(self, task_id: str) -> int | None:
        for i, task in enumerate(self.tasks):
            if task.id == task_id:
                return i
        return None


@dataclass(frozen=True)
class Board:
    id: str
    name: str
    columns: tuple[Column, ...] = ()

    def column_index(self, column_id: str) -> int | None:
        for i, column in enumerate(self.columns):
            if column.id == column_id:
                return i
        return None

    @property
    def titles(self) -> tuple[str, ...]:
        return tuple(c.title for c in self.columns)


@dataclass(frozen=True)
class BoardState:
    """Root snapshot: the single source of truth for every board."""

    boards: tuple[Board, ...] = ()
    active_board_id: str | None = None

    def board_index(self, board_id: str) -> int | None:
        for i, board in enumerate(self.boards):
            if board.id == board_id:
                return i
        return None
