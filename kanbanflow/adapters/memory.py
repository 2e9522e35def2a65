"""In-memory state store for tests and demos."""

import json

from ..board.codec import state_from_dict, state_to_dict
from ..board.exceptions import CorruptDataError, StorageError
from ..board.ids import IdGenerator, default_ids
from ..board.models import BoardState
from ..board.mutations import default_state


class InMemoryStore:
    """StateStore that keeps the serialized document in a string.

    Saving and loading go through the same codec as ``JsonFileStore``, so a
    round trip here exercises the real document format.
    """

    def __init__(self, document: str | None = None, ids: IdGenerator = default_ids):
        self.document = document
        self.fail_saves = False
        self.save_count = 0
        self._ids = ids

    def save(self, state: BoardState) -> None:
        if self.fail_saves:
            raise StorageError("memory", "saves are disabled")
        self.document = json.dumps(state_to_dict(state))
        self.save_count += 1

    def load(self) -> BoardState:
        if self.document is None:
            return default_state(self._ids)
        try:
            data = json.loads(self.document)
        except json.JSONDecodeError as e:
            raise CorruptDataError("memory", f"invalid JSON: {e.msg}") from e
        return state_from_dict(data)
