"""Abstract persistence protocol."""

from typing import Protocol, runtime_checkable

from .models import BoardState


@runtime_checkable
class StateStore(Protocol):
    """Interface that any durable slot for the board state must implement.

    ``save`` raises StorageError without touching previously saved data;
    ``load`` returns the seed when nothing was saved and raises
    CorruptDataError when the saved document is unusable.
    """

    def save(self, state: BoardState) -> None: ...

    def load(self) -> BoardState: ...
