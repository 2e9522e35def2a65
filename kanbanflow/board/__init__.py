from .exceptions import (
    BoardError,
    ConflictError,
    CorruptDataError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from .ids import IdGenerator
from .interface import StateStore
from .models import (
    COLUMN_STATE_OPTIONS,
    COLUMN_TITLES,
    Board,
    BoardState,
    Column,
    Priority,
    Task,
)

__all__ = [
    "Board",
    "BoardState",
    "Column",
    "Task",
    "Priority",
    "COLUMN_TITLES",
    "COLUMN_STATE_OPTIONS",
    "IdGenerator",
    "StateStore",
    "BoardError",
    "ValidationError",
    "ConflictError",
    "NotFoundError",
    "StorageError",
    "CorruptDataError",
]
