"""JSON file persistence for the board state.

The whole snapshot lives in one document. Writes go to a sibling
``.tmp`` file which then replaces the real one, so a failed save leaves the
previous document intact.
"""

from __future__ import annotations

import contextlib
import json
import logging
from pathlib import Path

from ..board.codec import state_from_dict, state_to_dict
from ..board.exceptions import CorruptDataError, StorageError
from ..board.ids import IdGenerator, default_ids
from ..board.models import BoardState
from ..board.mutations import default_state

logger = logging.getLogger(__name__)


class JsonFileStore:
    """StateStore backed by a single JSON file."""

    def __init__(self, path: Path | str, ids: IdGenerator = default_ids):
        self._path = Path(path).expanduser()
        self._ids = ids

    @property
    def path(self) -> Path:
        return self._path

    def save(self, state: BoardState) -> None:
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        payload = json.dumps(state_to_dict(state), indent=2) + "\n"
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(payload, encoding="utf-8")
            tmp_path.replace(self._path)
        except OSError as e:
            with contextlib.suppress(OSError):
                tmp_path.unlink(missing_ok=True)
            raise StorageError(self._path, e.strerror or str(e)) from e
        logger.debug("Saved %d board(s) to %s", len(state.boards), self._path)

    def load(self) -> BoardState:
        if not self._path.exists():
            logger.info("No saved boards at %s, starting from the seed", self._path)
            return default_state(self._ids)
        try:
            text = self._path.read_text(encoding="utf-8")
        except OSError as e:
            raise CorruptDataError(str(self._path), e.strerror or str(e)) from e
        except UnicodeDecodeError as e:
            raise CorruptDataError(str(self._path), f"not UTF-8 text: {e.reason}") from e
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise CorruptDataError(str(self._path), f"invalid JSON: {e.msg}") from e
        return state_from_dict(data)
