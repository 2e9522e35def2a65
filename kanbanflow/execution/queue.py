"""Per-key FIFO scheduling of delayed commits.

Each key (a board id) has its own chain. A submitted commit first waits out
its own delay, measured from submission, then waits for the commit
submitted before it on the same key, then runs. Commits on one key
therefore land in submission order even when a later one has a shorter
delay; commits on different keys do not wait for each other. A commit can
belong to several chains at once (see ``submit``).

Usage:
    queue = CommitQueue()
    task = queue.submit("board-1", 0.25, commit_fn)
    result = await task
    await queue.drain()
"""

from __future__ import annotations

import asyncio
import functools
from collections.abc import Callable
from typing import TypeVar

T = TypeVar("T")


class CommitQueue:
    def __init__(self) -> None:
        self._tails: dict[str, asyncio.Task] = {}
        self._pending: set[asyncio.Task] = set()

    def submit(
        self, key: str | tuple[str, ...], delay: float, commit: Callable[[], T]
    ) -> asyncio.Task:
        """Schedule ``commit`` on the chain of ``key``. Requires a running loop.

        A tuple of keys joins several chains: the commit waits for the tail
        of each and becomes the new tail of all of them.
        """
        keys = (key,) if isinstance(key, str) else tuple(key)
        loop = asyncio.get_running_loop()
        previous = {self._tails[k] for k in keys if k in self._tails}
        task = loop.create_task(self._run(previous, delay, commit))
        for k in keys:
            self._tails[k] = task
        self._pending.add(task)
        task.add_done_callback(functools.partial(self._finished, keys))
        return task

    async def _run(self, previous: set[asyncio.Task], delay: float, commit: Callable[[], T]) -> T:
        await asyncio.sleep(max(delay, 0.0))
        waiting = {p for p in previous if not p.done()}
        if waiting:
            await asyncio.wait(waiting)
        return commit()

    def _finished(self, keys: tuple[str, ...], task: asyncio.Task) -> None:
        self._pending.discard(task)
        for key in keys:
            if self._tails.get(key) is task:
                del self._tails[key]
        # Failures are reported by the commit callable; mark them retrieved
        # so an unawaited handle does not produce a loop warning.
        if not task.cancelled():
            task.exception()

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def is_pending(self, key: str) -> bool:
        return key in self._tails

    async def drain(self) -> None:
        """Wait until every submitted commit has run."""
        while self._pending:
            await asyncio.wait(set(self._pending))
