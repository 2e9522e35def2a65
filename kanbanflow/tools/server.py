"""MCP server factory binding board handlers to a session."""

from typing import Any

from claude_agent_sdk import create_sdk_mcp_server, tool

from ..board.models import COLUMN_TITLES
from ..execution.session import BoardSession
from . import handlers


def create_board_server(session: BoardSession):
    """Create an MCP server exposing the board engine as tools.

    Each handler is bound to the session via closure so the @tool wrappers
    are clean single-argument async functions as the SDK expects. Omitting
    ``board_id`` targets the active board.
    """

    # --- Reads ---

    @tool(
        "get_board_status",
        "Get an overview: board count, active board columns with task counts, priorities and tags",
        {},
    )
    async def get_board_status(args: dict[str, Any]) -> dict[str, Any]:
        return await handlers.get_board_status_handler(args, session)

    @tool("list_boards", "List all boards and which one is active", {})
    async def list_boards(args: dict[str, Any]) -> dict[str, Any]:
        return await handlers.list_boards_handler(args, session)

    @tool(
        "get_board",
        "Get a board with all its columns and tasks",
        {"board_id": str},
    )
    async def get_board(args: dict[str, Any]) -> dict[str, Any]:
        return await handlers.get_board_handler(args, session)

    @tool("get_task", "Get one task by ID", {"task_id": str})
    async def get_task(args: dict[str, Any]) -> dict[str, Any]:
        return await handlers.get_task_handler(args, session)

    # --- Boards ---

    @tool("create_board", "Create a board with the default columns and make it active", {"name": str})
    async def create_board(args: dict[str, Any]) -> dict[str, Any]:
        return await handlers.create_board_handler(args, session)

    @tool("rename_board", "Rename a board", {"board_id": str, "name": str})
    async def rename_board(args: dict[str, Any]) -> dict[str, Any]:
        return await handlers.rename_board_handler(args, session)

    @tool("delete_board", "Delete a board with all its columns and tasks", {"board_id": str})
    async def delete_board(args: dict[str, Any]) -> dict[str, Any]:
        return await handlers.delete_board_handler(args, session)

    @tool("set_active_board", "Make a board the active one", {"board_id": str})
    async def set_active_board(args: dict[str, Any]) -> dict[str, Any]:
        return await handlers.set_active_board_handler(args, session)

    # --- Columns ---

    @tool(
        "add_column",
        f"Add a column. Title must be one of: {', '.join(COLUMN_TITLES)}, unused on the board.",
        {"board_id": str, "title": str},
    )
    async def add_column(args: dict[str, Any]) -> dict[str, Any]:
        return await handlers.add_column_handler(args, session)

    @tool(
        "update_column",
        "Change a column's title to another unused label",
        {"board_id": str, "column_id": str, "title": str},
    )
    async def update_column(args: dict[str, Any]) -> dict[str, Any]:
        return await handlers.update_column_handler(args, session)

    @tool(
        "delete_column",
        "Delete a column and every task in it",
        {"board_id": str, "column_id": str},
    )
    async def delete_column(args: dict[str, Any]) -> dict[str, Any]:
        return await handlers.delete_column_handler(args, session)

    @tool(
        "reorder_column",
        "Move a column to a zero-based position on its board",
        {"board_id": str, "column_id": str, "dest_index": int},
    )
    async def reorder_column(args: dict[str, Any]) -> dict[str, Any]:
        return await handlers.reorder_column_handler(args, session)

    # --- Tasks ---

    @tool(
        "add_task",
        "Add a task to a column. Priority is low, medium or high; tags are comma-separated.",
        {
            "board_id": str,
            "column_id": str,
            "title": str,
            "description": str,
            "priority": str,
            "tags": str,
        },
    )
    async def add_task(args: dict[str, Any]) -> dict[str, Any]:
        return await handlers.add_task_handler(args, session)

    @tool(
        "update_task",
        "Edit a task's title, description, priority or comma-separated tags",
        {
            "board_id": str,
            "column_id": str,
            "task_id": str,
            "title": str,
            "description": str,
            "priority": str,
            "tags": str,
        },
    )
    async def update_task(args: dict[str, Any]) -> dict[str, Any]:
        return await handlers.update_task_handler(args, session)

    @tool(
        "delete_task",
        "Delete a task",
        {"board_id": str, "column_id": str, "task_id": str},
    )
    async def delete_task(args: dict[str, Any]) -> dict[str, Any]:
        return await handlers.delete_task_handler(args, session)

    @tool(
        "move_task",
        "Move a task to a zero-based position in the same or another column",
        {
            "board_id": str,
            "source_column_id": str,
            "dest_column_id": str,
            "task_id": str,
            "dest_index": int,
        },
    )
    async def move_task(args: dict[str, Any]) -> dict[str, Any]:
        return await handlers.move_task_handler(args, session)

    return create_sdk_mcp_server(
        name="kanbanflow",
        version="0.1.0",
        tools=[
            get_board_status,
            list_boards,
            get_board,
            get_task,
            create_board,
            rename_board,
            delete_board,
            set_active_board,
            add_column,
            update_column,
            delete_column,
            reorder_column,
            add_task,
            update_task,
            delete_task,
            move_task,
        ],
    )
