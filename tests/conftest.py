"""Shared test configuration."""

from __future__ import annotations

import pytest

from kanbanflow.board.ids import IdGenerator
from kanbanflow.board.models import BoardState
from kanbanflow.board.mutations import add_board


def pytest_addoption(parser):
    parser.addoption(
        "--run-slow", action="store_true", default=False, help="Run slow timing tests"
    )


def pytest_collection_modifyitems(config, items):
    if config.getoption("--run-slow"):
        return
    skip_slow = pytest.mark.skip(reason="Need --run-slow to run")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


@pytest.fixture
def ids():
    """Deterministic ids: fixed clock, no random suffix."""
    return IdGenerator(clock=lambda: 0, suffix=lambda: "")


@pytest.fixture
def board_state(ids):
    """One active board named "Sprint 1" with the four default columns."""
    return add_board(BoardState(), "Sprint 1", ids=ids)
