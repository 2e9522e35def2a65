"""Kanban board state engine: boards, columns and tasks with durable, ordered mutations."""

__version__ = "0.1.0"
