"""Pure handler functions for board MCP tools.

Each handler takes (args, session) and returns MCP result format.
No SDK dependency, so they are testable with an InMemoryStore session.
Engine errors come back as "Error: ..." text instead of raising; a delete
that finds nothing reports the entity as already gone.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

from ..board import selectors
from ..board.codec import board_to_dict
from ..board.exceptions import BoardError, NotFoundError
from ..board.rules import format_tags
from ..execution.session import BoardSession, PendingMutation


def _text_result(text: str) -> dict[str, Any]:
    """Build MCP tool result with a text content block."""
    return {"content": [{"type": "text", "text": text}]}


def _json_result(data: Any) -> dict[str, Any]:
    """Build MCP tool result with JSON-serialized content."""
    return _text_result(json.dumps(data, indent=2, default=str))


def _board_id(args: dict[str, Any], session: BoardSession) -> str:
    board_id = args.get("board_id") or session.state.active_board_id
    if not board_id:
        raise NotFoundError("board", "(no active board)")
    return board_id


def _index(args: dict[str, Any]) -> int:
    return int(args["dest_index"])


async def _mutate(
    issue: Callable[[], PendingMutation], missing_ok: bool = False
) -> dict[str, Any]:
    """Issue a mutation, wait for its commit, and report the outcome."""
    try:
        pending = issue()
        commit = await pending
    except NotFoundError as e:
        if missing_ok:
            return _text_result(f"Already gone: {e}")
        return _text_result(f"Error: {e}")
    except BoardError as e:
        return _text_result(f"Error: {e}")
    except (KeyError, ValueError) as e:
        return _text_result(f"Error: bad arguments: {e}")

    result = {
        "operation": commit.operation,
        "id": commit.entity_id,
        "saved": commit.saved,
    }
    if commit.save_error is not None:
        result["warning"] = f"Not saved: {commit.save_error}"
    return _json_result(result)


# --- Reads ---


async def get_board_status_handler(
    args: dict[str, Any], session: BoardSession
) -> dict[str, Any]:
    """Overview: board count, active board summary, pending mutations."""
    state = session.state
    board = selectors.active_board(state)
    return _json_result({
        "board_count": selectors.board_count(state),
        "active_board": selectors.board_summary(board) if board else None,
        "all_tags": list(selectors.tag_list(state)),
        "pending_mutations": session.pending_count,
    })


async def list_boards_handler(
    args: dict[str, Any], session: BoardSession
) -> dict[str, Any]:
    state = session.state
    return _json_result([
        {
            "id": b.id,
            "name": b.name,
            "active": b.id == state.active_board_id,
            "columns": len(b.columns),
        }
        for b in state.boards
    ])


async def get_board_handler(
    args: dict[str, Any], session: BoardSession
) -> dict[str, Any]:
    """Full board document with columns and tasks."""
    try:
        board = selectors.get_board(session.state, _board_id(args, session))
    except NotFoundError as e:
        return _text_result(f"Error: {e}")
    return _json_result(board_to_dict(board))


async def get_task_handler(
    args: dict[str, Any], session: BoardSession
) -> dict[str, Any]:
    """One task, with tags pre-formatted for an edit field."""
    task = selectors.locate_task(session.state, args["task_id"])
    if task is None:
        return _text_result(f"Error: Task not found: {args['task_id']}")
    return _json_result({
        "id": task.id,
        "board_id": task.board_id,
        "column_id": task.column_id,
        "title": task.title,
        "description": task.description,
        "priority": task.priority.value,
        "tags": format_tags(task.tags),
    })


# --- Boards ---


async def create_board_handler(
    args: dict[str, Any], session: BoardSession
) -> dict[str, Any]:
    return await _mutate(lambda: session.add_board(args["name"]))


async def rename_board_handler(
    args: dict[str, Any], session: BoardSession
) -> dict[str, Any]:
    return await _mutate(
        lambda: session.update_board(_board_id(args, session), name=args["name"])
    )


async def delete_board_handler(
    args: dict[str, Any], session: BoardSession
) -> dict[str, Any]:
    return await _mutate(lambda: session.delete_board(args["board_id"]), missing_ok=True)


async def set_active_board_handler(
    args: dict[str, Any], session: BoardSession
) -> dict[str, Any]:
    return await _mutate(lambda: session.set_active_board(args["board_id"]))


# --- Columns ---


async def add_column_handler(
    args: dict[str, Any], session: BoardSession
) -> dict[str, Any]:
    return await _mutate(lambda: session.add_column(_board_id(args, session), args["title"]))


async def update_column_handler(
    args: dict[str, Any], session: BoardSession
) -> dict[str, Any]:
    return await _mutate(
        lambda: session.update_column(
            _board_id(args, session), args["column_id"], title=args["title"]
        )
    )


async def delete_column_handler(
    args: dict[str, Any], session: BoardSession
) -> dict[str, Any]:
    return await _mutate(
        lambda: session.delete_column(_board_id(args, session), args["column_id"]),
        missing_ok=True,
    )


async def reorder_column_handler(
    args: dict[str, Any], session: BoardSession
) -> dict[str, Any]:
    return await _mutate(
        lambda: session.reorder_column(
            _board_id(args, session), args["column_id"], _index(args)
        )
    )


# --- Tasks ---


async def add_task_handler(
    args: dict[str, Any], session: BoardSession
) -> dict[str, Any]:
    return await _mutate(
        lambda: session.add_task(
            _board_id(args, session),
            args["column_id"],
            args["title"],
            description=args.get("description") or "",
            priority=args.get("priority") or "medium",
            tags=args.get("tags") or "",
        )
    )


async def update_task_handler(
    args: dict[str, Any], session: BoardSession
) -> dict[str, Any]:
    fields = {
        k: args[k]
        for k in ("title", "description", "priority", "tags")
        if args.get(k) is not None
    }
    return await _mutate(
        lambda: session.update_task(
            _board_id(args, session), args["column_id"], args["task_id"], **fields
        )
    )


async def delete_task_handler(
    args: dict[str, Any], session: BoardSession
) -> dict[str, Any]:
    return await _mutate(
        lambda: session.delete_task(
            _board_id(args, session), args["column_id"], args["task_id"]
        ),
        missing_ok=True,
    )


async def move_task_handler(
    args: dict[str, Any], session: BoardSession
) -> dict[str, Any]:
    return await _mutate(
        lambda: session.move_task(
            _board_id(args, session),
            args["source_column_id"],
            args["dest_column_id"],
            args["task_id"],
            _index(args),
        )
    )
