"""BoardSession: the state holder that presentation code talks to.

A session owns the committed snapshot, the store it is saved to, and the
commit queue that simulates a remote round trip. Every mutation method:

1. applies the mutation to the projected snapshot right away, so engine
   errors surface at call time, before any delay;
2. queues the real commit on the board's FIFO chain, and on the root
   chain as well when the board list or the active board changes;
3. returns a ``PendingMutation`` whose ``entity_id`` is already known.

When the delay elapses the mutation is applied to the committed snapshot,
the snapshot is swapped in a single assignment, and the store saves it.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from functools import partial

from ..adapters.json_store import JsonFileStore
from ..board import mutations
from ..board.exceptions import BoardError, CorruptDataError, StorageError
from ..board.ids import IdGenerator, default_ids
from ..board.interface import StateStore
from ..board.models import COLUMN_TITLES, BoardState, Priority
from .config import EngineConfig
from .queue import CommitQueue

logger = logging.getLogger(__name__)

# Chain shared by every operation that changes the board list or the active board.
ROOT_KEY = "*"


def _bind(fn: Callable[..., BoardState], *args, **kwargs) -> Callable[[BoardState], BoardState]:
    """Fix a mutation's payload, leaving the snapshot as the only argument."""

    def apply(state: BoardState) -> BoardState:
        return fn(state, *args, **kwargs)

    return apply


def load_or_seed(store: StateStore, ids: IdGenerator = default_ids) -> BoardState:
    """Load the saved snapshot, or start from the seed if it is corrupt."""
    try:
        return store.load()
    except CorruptDataError as e:
        logger.warning("Saved boards are unusable, starting from the seed: %s", e)
        return mutations.default_state(ids)


@dataclass(frozen=True)
class Commit:
    """Outcome of one committed mutation."""

    operation: str
    state: BoardState
    entity_id: str | None = None
    saved: bool = True
    save_error: StorageError | None = None


@dataclass
class _Operation:
    name: str
    key: str | tuple[str, ...]
    apply: Callable[[BoardState], BoardState]
    entity_id: str | None = None


class PendingMutation:
    """Handle for an issued mutation. Await it for the ``Commit``.

    Awaiting is optional and cancelling the awaiting coroutine does not
    cancel the commit.
    """

    def __init__(self, operation: str, entity_id: str | None, task: asyncio.Task):
        self.operation = operation
        self.entity_id = entity_id
        self._task = task

    def done(self) -> bool:
        return self._task.done()

    def __await__(self):
        return asyncio.shield(self._task).__await__()


class BoardSession:
    def __init__(
        self,
        store: StateStore,
        state: BoardState | None = None,
        *,
        config: EngineConfig | None = None,
        ids: IdGenerator = default_ids,
        on_save_error: Callable[[StorageError], None] | None = None,
    ):
        self._store = store
        self._config = config or EngineConfig()
        self._ids = ids
        self._state = state if state is not None else load_or_seed(store, ids)
        self._projected = self._state
        self._inflight: list[_Operation] = []
        self._queue = CommitQueue()
        self._on_save_error = on_save_error
        self.last_save_error: StorageError | None = None

    @classmethod
    def open(cls, config: EngineConfig | None = None, **kwargs) -> "BoardSession":
        """Session over the JSON file named by the configuration."""
        config = config or EngineConfig.load()
        ids = kwargs.get("ids", default_ids)
        return cls(JsonFileStore(config.resolved_store_path, ids=ids), config=config, **kwargs)

    # --- Reads ---

    @property
    def state(self) -> BoardState:
        """Last committed snapshot."""
        return self._state

    @property
    def projected_state(self) -> BoardState:
        """Committed snapshot with every pending mutation applied."""
        return self._projected

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def pending_count(self) -> int:
        return len(self._inflight)

    async def drain(self) -> None:
        """Wait for every pending mutation to commit."""
        await self._queue.drain()

    # --- Commit pipeline ---

    def _delay_for(self, family: str, override: int | None) -> float:
        """Delay in seconds; raises TypeError for a non-numeric setting."""
        if override is not None:
            delay_ms = override
        elif family == "active":
            delay_ms = 0
        else:
            delay_ms = getattr(self._config, f"{family}_delay_ms")
        if isinstance(delay_ms, bool) or not isinstance(delay_ms, (int, float)):
            raise TypeError(f"{family} delay must be a number of milliseconds, got {delay_ms!r}")
        return delay_ms / 1000

    def _issue(
        self,
        name: str,
        key: str | tuple[str, ...],
        delay: float,
        apply: Callable[[BoardState], BoardState],
        entity_id: str | None = None,
    ) -> PendingMutation:
        projected = apply(self._projected)
        op = _Operation(name=name, key=key, apply=apply, entity_id=entity_id)
        task = self._queue.submit(key, delay, partial(self._commit, op))
        self._projected = projected
        self._inflight.append(op)
        logger.debug("Queued %s on %s (%.3f s)", name, key, delay)
        return PendingMutation(name, entity_id, task)

    def _commit(self, op: _Operation) -> Commit:
        self._inflight.remove(op)
        try:
            new_state = op.apply(self._state)
        except BoardError as e:
            logger.warning("%s on %s could not be committed: %s", op.name, op.key, e)
            self._rebuild_projection()
            raise

        self._state = new_state
        if not self._inflight:
            self._projected = new_state
        logger.debug("Committed %s on %s", op.name, op.key)

        try:
            self._store.save(new_state)
        except StorageError as e:
            logger.warning("Board state not saved after %s: %s", op.name, e)
            self.last_save_error = e
            if self._on_save_error is not None:
                self._on_save_error(e)
            return Commit(op.name, new_state, op.entity_id, saved=False, save_error=e)
        self.last_save_error = None
        return Commit(op.name, new_state, op.entity_id)

    def _rebuild_projection(self) -> None:
        projected = self._state
        for op in self._inflight:
            try:
                projected = op.apply(projected)
            except BoardError:
                continue
        self._projected = projected

    # --- Boards ---
    # Operations that touch the board list or the active board also join the
    # root chain, so those fields change in issue order across boards.

    def add_board(
        self, name: str, *, with_columns: bool = True, delay_ms: int | None = None
    ) -> PendingMutation:
        delay = self._delay_for("board", delay_ms)
        board_id = self._ids.new_id("board")
        titles = COLUMN_TITLES if with_columns else ()
        column_ids = tuple(self._ids.new_id("column") for _ in titles)
        apply = _bind(
            mutations.add_board,
            name,
            new_id=board_id,
            column_titles=titles,
            column_ids=column_ids,
        )
        return self._issue("add_board", (ROOT_KEY, board_id), delay, apply, board_id)

    def update_board(
        self, board_id: str, /, *, delay_ms: int | None = None, **fields
    ) -> PendingMutation:
        delay = self._delay_for("board", delay_ms)
        apply = _bind(mutations.update_board, board_id, **fields)
        return self._issue("update_board", board_id, delay, apply, board_id)

    def delete_board(self, board_id: str, *, delay_ms: int | None = None) -> PendingMutation:
        delay = self._delay_for("board", delay_ms)
        apply = _bind(mutations.delete_board, board_id)
        return self._issue("delete_board", (ROOT_KEY, board_id), delay, apply, board_id)

    def set_active_board(
        self, board_id: str, *, delay_ms: int | None = None
    ) -> PendingMutation:
        delay = self._delay_for("active", delay_ms)
        apply = _bind(mutations.set_active_board, board_id)
        return self._issue("set_active_board", (ROOT_KEY, board_id), delay, apply, board_id)

    # --- Columns ---

    def add_column(
        self, board_id: str, title: str, *, delay_ms: int | None = None
    ) -> PendingMutation:
        delay = self._delay_for("column", delay_ms)
        column_id = self._ids.new_id("column")
        apply = _bind(mutations.add_column, board_id, title, new_id=column_id)
        return self._issue("add_column", board_id, delay, apply, column_id)

    def update_column(
        self, board_id: str, column_id: str, /, *, delay_ms: int | None = None, **fields
    ) -> PendingMutation:
        delay = self._delay_for("column", delay_ms)
        apply = _bind(mutations.update_column, board_id, column_id, **fields)
        return self._issue("update_column", board_id, delay, apply, column_id)

    def delete_column(
        self, board_id: str, column_id: str, *, delay_ms: int | None = None
    ) -> PendingMutation:
        delay = self._delay_for("column", delay_ms)
        apply = _bind(mutations.delete_column, board_id, column_id)
        return self._issue("delete_column", board_id, delay, apply, column_id)

    def reorder_column(
        self, board_id: str, column_id: str, dest_index: int, *, delay_ms: int | None = None
    ) -> PendingMutation:
        delay = self._delay_for("column", delay_ms)
        apply = _bind(mutations.reorder_column, board_id, column_id, dest_index)
        return self._issue("reorder_column", board_id, delay, apply, column_id)

    # --- Tasks ---

    def add_task(
        self,
        board_id: str,
        column_id: str,
        title: str,
        description: str | None = "",
        priority: Priority | str = Priority.MEDIUM,
        tags: str | Iterable[str] | None = (),
        *,
        delay_ms: int | None = None,
    ) -> PendingMutation:
        delay = self._delay_for("task", delay_ms)
        task_id = self._ids.new_id("task")
        if tags is not None and not isinstance(tags, str):
            tags = tuple(tags)
        apply = _bind(
            mutations.add_task,
            board_id,
            column_id,
            title,
            description,
            priority,
            tags,
            new_id=task_id,
        )
        return self._issue("add_task", board_id, delay, apply, task_id)

    def update_task(
        self,
        board_id: str,
        column_id: str,
        task_id: str,
        /,
        *,
        delay_ms: int | None = None,
        **fields,
    ) -> PendingMutation:
        delay = self._delay_for("task", delay_ms)
        if "tags" in fields and fields["tags"] is not None and not isinstance(fields["tags"], str):
            fields["tags"] = tuple(fields["tags"])
        apply = _bind(mutations.update_task, board_id, column_id, task_id, **fields)
        return self._issue("update_task", board_id, delay, apply, task_id)

    def delete_task(
        self, board_id: str, column_id: str, task_id: str, *, delay_ms: int | None = None
    ) -> PendingMutation:
        delay = self._delay_for("task", delay_ms)
        apply = _bind(mutations.delete_task, board_id, column_id, task_id)
        return self._issue("delete_task", board_id, delay, apply, task_id)

    def move_task(
        self,
        board_id: str,
        source_column_id: str,
        dest_column_id: str,
        task_id: str,
        dest_index: int,
        *,
        delay_ms: int | None = None,
    ) -> PendingMutation:
        delay = self._delay_for("task", delay_ms)
        apply = _bind(
            mutations.move_task, board_id, source_column_id, dest_column_id, task_id, dest_index
        )
        return self._issue("move_task", board_id, delay, apply, task_id)
