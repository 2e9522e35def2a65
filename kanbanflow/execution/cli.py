"""CLI entry point for inspecting and editing boards.

Usage:
  python -m kanbanflow.execution show [--board ID]
  python -m kanbanflow.execution boards
  python -m kanbanflow.execution add-board NAME [--empty]
  python -m kanbanflow.execution add-column TITLE [--board ID]
  python -m kanbanflow.execution add-task COLUMN_ID TITLE [--priority high] [--tags "a, b"]
  python -m kanbanflow.execution move-task TASK_ID DEST_COLUMN_ID INDEX
  ...

Every command runs exactly one mutation through a BoardSession over the
configured JSON store. Global options: --config PATH, --store PATH, --no-delay.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from dataclasses import replace

from ..board import selectors
from ..board.exceptions import BoardError, NotFoundError
from ..board.models import COLUMN_TITLES, Board, BoardState, Priority
from .config import EngineConfig
from .session import BoardSession


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="kanbanflow", description="Kanban board CLI")
    parser.add_argument("--config", default=None, help="Path to config.yaml")
    parser.add_argument("--store", default=None, help="Override the board state file")
    parser.add_argument("--no-delay", action="store_true", help="Commit without simulated latency")
    subparsers = parser.add_subparsers(dest="command")

    show = subparsers.add_parser("show", help="Print a board with its columns and tasks")
    show.add_argument("--board", default=None, help="Board ID (default: active board)")

    subparsers.add_parser("boards", help="List boards")

    add_board = subparsers.add_parser("add-board", help="Create a board and make it active")
    add_board.add_argument("name")
    add_board.add_argument("--empty", action="store_true", help="Create without default columns")

    rename_board = subparsers.add_parser("rename-board", help="Rename a board")
    rename_board.add_argument("board_id")
    rename_board.add_argument("name")

    delete_board = subparsers.add_parser("delete-board", help="Delete a board and everything in it")
    delete_board.add_argument("board_id")

    use = subparsers.add_parser("use", help="Set the active board")
    use.add_argument("board_id")

    add_column = subparsers.add_parser("add-column", help="Add a column")
    add_column.add_argument("title", choices=COLUMN_TITLES)
    add_column.add_argument("--board", default=None)

    rename_column = subparsers.add_parser("rename-column", help="Change a column's label")
    rename_column.add_argument("column_id")
    rename_column.add_argument("title", choices=COLUMN_TITLES)
    rename_column.add_argument("--board", default=None)

    delete_column = subparsers.add_parser("delete-column", help="Delete a column and its tasks")
    delete_column.add_argument("column_id")
    delete_column.add_argument("--board", default=None)

    move_column = subparsers.add_parser("move-column", help="Move a column to a position")
    move_column.add_argument("column_id")
    move_column.add_argument("index", type=int)
    move_column.add_argument("--board", default=None)

    priorities = [p.value for p in Priority]

    add_task = subparsers.add_parser("add-task", help="Add a task to a column")
    add_task.add_argument("column_id")
    add_task.add_argument("title")
    add_task.add_argument("--description", default="")
    add_task.add_argument("--priority", default=Priority.MEDIUM.value, choices=priorities)
    add_task.add_argument("--tags", default="", help="Comma-separated tags")
    add_task.add_argument("--board", default=None)

    edit_task = subparsers.add_parser("edit-task", help="Edit a task's fields")
    edit_task.add_argument("task_id")
    edit_task.add_argument("--title", default=None)
    edit_task.add_argument("--description", default=None)
    edit_task.add_argument("--priority", default=None, choices=priorities)
    edit_task.add_argument("--tags", default=None, help="Comma-separated tags")

    delete_task = subparsers.add_parser("delete-task", help="Delete a task")
    delete_task.add_argument("task_id")

    move_task = subparsers.add_parser("move-task", help="Move a task to a column position")
    move_task.add_argument("task_id")
    move_task.add_argument("dest_column_id")
    move_task.add_argument("index", type=int)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    config = EngineConfig.load(args.config)
    logging.basicConfig(
        level=getattr(logging, str(config.log_level).upper(), logging.INFO),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    if args.store:
        config = replace(config, store_path=args.store)
    if args.no_delay:
        config = replace(config, board_delay_ms=0, column_delay_ms=0, task_delay_ms=0)

    sys.exit(asyncio.run(_run(args, config)))


async def _run(args, config: EngineConfig) -> int:
    session = BoardSession.open(config)
    handler = COMMANDS[args.command]
    try:
        await handler(session, args)
    except NotFoundError as e:
        if args.command.startswith("delete-"):
            print(f"Already gone: {e}")
            return 0
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except BoardError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        await session.drain()

    if session.last_save_error is not None:
        print(f"Warning: changes not saved: {session.last_save_error}", file=sys.stderr)
        return 1
    return 0


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

def render_board(board: Board, active: bool = False) -> list[str]:
    marker = " *" if active else ""
    lines = [f"{board.name} ({board.id}){marker}"]
    if not board.columns:
        lines.append("  (no columns)")
    for column in board.columns:
        lines.append(f"  [{column.title}] {column.id} ({len(column.tasks)})")
        for task in column.tasks:
            tags = "".join(f" #{tag}" for tag in task.tags)
            lines.append(f"    - {task.title} [{task.priority.value}]{tags} ({task.id})")
    return lines


def _board_id(state: BoardState, args) -> str:
    board_id = getattr(args, "board", None) or state.active_board_id
    if board_id is None:
        raise NotFoundError("board", "(no active board)")
    return board_id


def _locate(state: BoardState, task_id: str):
    task = selectors.locate_task(state, task_id)
    if task is None:
        raise NotFoundError("task", task_id)
    return task


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

async def _show(session: BoardSession, args) -> None:
    state = session.state
    board = selectors.get_board(state, _board_id(state, args))
    print("\n".join(render_board(board, board.id == state.active_board_id)))


async def _boards(session: BoardSession, args) -> None:
    state = session.state
    if not state.boards:
        print("No boards.")
    for board in state.boards:
        marker = " *" if board.id == state.active_board_id else ""
        total = sum(selectors.task_counts(board).values())
        print(f"{board.id}  {board.name}  ({len(board.columns)} columns, {total} tasks){marker}")


async def _add_board(session: BoardSession, args) -> None:
    commit = await session.add_board(args.name, with_columns=not args.empty)
    print(f"Created board {commit.entity_id}")


async def _rename_board(session: BoardSession, args) -> None:
    await session.update_board(args.board_id, name=args.name)
    print(f"Renamed board {args.board_id}")


async def _delete_board(session: BoardSession, args) -> None:
    await session.delete_board(args.board_id)
    print(f"Deleted board {args.board_id}")


async def _use(session: BoardSession, args) -> None:
    await session.set_active_board(args.board_id)
    print(f"Active board: {args.board_id}")


async def _add_column(session: BoardSession, args) -> None:
    commit = await session.add_column(_board_id(session.state, args), args.title)
    print(f"Created column {commit.entity_id}")


async def _rename_column(session: BoardSession, args) -> None:
    await session.update_column(_board_id(session.state, args), args.column_id, title=args.title)
    print(f"Renamed column {args.column_id} to {args.title}")


async def _delete_column(session: BoardSession, args) -> None:
    await session.delete_column(_board_id(session.state, args), args.column_id)
    print(f"Deleted column {args.column_id}")


async def _move_column(session: BoardSession, args) -> None:
    await session.reorder_column(_board_id(session.state, args), args.column_id, args.index)
    print(f"Moved column {args.column_id}")


async def _add_task(session: BoardSession, args) -> None:
    commit = await session.add_task(
        _board_id(session.state, args),
        args.column_id,
        args.title,
        description=args.description,
        priority=args.priority,
        tags=args.tags,
    )
    print(f"Created task {commit.entity_id}")


async def _edit_task(session: BoardSession, args) -> None:
    task = _locate(session.state, args.task_id)
    fields = {
        k: v
        for k, v in {
            "title": args.title,
            "description": args.description,
            "priority": args.priority,
            "tags": args.tags,
        }.items()
        if v is not None
    }
    await session.update_task(task.board_id, task.column_id, task.id, **fields)
    print(f"Updated task {task.id}")


async def _delete_task(session: BoardSession, args) -> None:
    task = _locate(session.state, args.task_id)
    await session.delete_task(task.board_id, task.column_id, task.id)
    print(f"Deleted task {task.id}")


async def _move_task(session: BoardSession, args) -> None:
    task = _locate(session.state, args.task_id)
    await session.move_task(
        task.board_id, task.column_id, args.dest_column_id, task.id, args.index
    )
    print(f"Moved task {task.id} to {args.dest_column_id}")


COMMANDS = {
    "show": _show,
    "boards": _boards,
    "add-board": _add_board,
    "rename-board": _rename_board,
    "delete-board": _delete_board,
    "use": _use,
    "add-column": _add_column,
    "rename-column": _rename_column,
    "delete-column": _delete_column,
    "move-column": _move_column,
    "add-task": _add_task,
    "edit-task": _edit_task,
    "delete-task": _delete_task,
    "move-task": _move_task,
}


if __name__ == "__main__":
    main()
