"""Tests for the pure board mutation functions."""

from collections import Counter

import pytest

from kanbanflow.board import mutations
from kanbanflow.board.exceptions import ConflictError, NotFoundError, ValidationError
from kanbanflow.board.models import COLUMN_TITLES, BoardState, Priority
from kanbanflow.board.selectors import get_board


def _all_task_ids(state: BoardState) -> Counter:
    return Counter(t.id for b in state.boards for c in b.columns for t in c.tasks)


@pytest.fixture
def seeded(board_state, ids):
    """Sprint 1 with three tasks in Backlog."""
    state = board_state
    for title in ("One", "Two", "Three"):
        state = mutations.add_task(state, "board-00001", "column-00002", title, ids=ids)
    return state


# --- Boards ---


class TestAddBoard:
    def test_seeds_default_columns_and_activates(self, board_state):
        board = board_state.boards[0]
        assert board.name == "Sprint 1"
        assert [c.title for c in board.columns] == list(COLUMN_TITLES)
        assert all(c.board_id == board.id for c in board.columns)
        assert all(c.tasks == () for c in board.columns)
        assert board_state.active_board_id == board.id

    def test_appends_and_switches_active(self, board_state, ids):
        state = mutations.add_board(board_state, "Sprint 2", ids=ids)
        assert [b.name for b in state.boards] == ["Sprint 1", "Sprint 2"]
        assert state.active_board_id == state.boards[1].id

    def test_name_is_trimmed(self, ids):
        state = mutations.add_board(BoardState(), "  Roadmap  ", ids=ids)
        assert state.boards[0].name == "Roadmap"

    def test_empty_name_rejected(self, board_state):
        with pytest.raises(ValidationError):
            mutations.add_board(board_state, "   ")

    def test_input_snapshot_untouched(self, board_state, ids):
        before = board_state
        mutations.add_board(board_state, "Sprint 2", ids=ids)
        assert board_state is before
        assert len(board_state.boards) == 1

    def test_without_columns(self, ids):
        state = mutations.add_board(BoardState(), "Empty", column_titles=(), ids=ids)
        assert state.boards[0].columns == ()

    def test_preissued_ids(self):
        state = mutations.add_board(
            BoardState(),
            "Fixed",
            new_id="b-x",
            column_titles=("Backlog", "Done"),
            column_ids=("c-a", "c-b"),
        )
        board = state.boards[0]
        assert board.id == "b-x"
        assert [c.id for c in board.columns] == ["c-a", "c-b"]

    def test_reused_board_id_is_conflict(self, board_state):
        with pytest.raises(ConflictError):
            mutations.add_board(board_state, "Again", new_id="board-00001")

    def test_column_ids_length_mismatch(self):
        with pytest.raises(ValidationError):
            mutations.add_board(BoardState(), "X", new_id="b-1", column_ids=("c-1",))


class TestUpdateBoard:
    def test_rename(self, board_state):
        state = mutations.update_board(board_state, "board-00001", name="Sprint 1b")
        assert state.boards[0].name == "Sprint 1b"
        assert state.boards[0].columns == board_state.boards[0].columns

    def test_unknown_field(self, board_state):
        with pytest.raises(ValidationError):
            mutations.update_board(board_state, "board-00001", columns=())

    def test_id_patch_rejected(self, board_state):
        with pytest.raises(ValidationError):
            mutations.update_board(board_state, "board-00001", board_id="board-00099")

    def test_missing_board(self, board_state):
        with pytest.raises(NotFoundError):
            mutations.update_board(board_state, "nope", name="x")


class TestDeleteBoard:
    @pytest.fixture
    def three_boards(self, ids):
        state = BoardState()
        for name in ("A", "B", "C"):
            state = mutations.add_board(state, name, column_titles=(), ids=ids)
        return state

    def test_removes_board(self, three_boards):
        a = three_boards.boards[0].id
        state = mutations.delete_board(three_boards, a)
        assert [b.name for b in state.boards] == ["B", "C"]

    def test_inactive_delete_keeps_active(self, three_boards):
        state = mutations.delete_board(three_boards, three_boards.boards[0].id)
        assert state.active_board_id == three_boards.active_board_id

    def test_active_moves_to_next_board(self, three_boards):
        b = three_boards.boards[1].id
        state = mutations.set_active_board(three_boards, b)
        state = mutations.delete_board(state, b)
        assert state.active_board_id == three_boards.boards[2].id

    def test_active_moves_to_previous_when_last(self, three_boards):
        c = three_boards.boards[2].id
        state = mutations.delete_board(three_boards, c)
        assert state.active_board_id == three_boards.boards[1].id

    def test_last_board_leaves_no_active(self, board_state):
        state = mutations.delete_board(board_state, "board-00001")
        assert state.boards == ()
        assert state.active_board_id is None

    def test_second_delete_not_found(self, board_state):
        state = mutations.delete_board(board_state, "board-00001")
        with pytest.raises(NotFoundError):
            mutations.delete_board(state, "board-00001")


class TestSetActiveBoard:
    def test_switch(self, board_state, ids):
        state = mutations.add_board(board_state, "Sprint 2", ids=ids)
        state = mutations.set_active_board(state, "board-00001")
        assert state.active_board_id == "board-00001"

    def test_unknown_board(self, board_state):
        with pytest.raises(NotFoundError):
            mutations.set_active_board(board_state, "nope")


# --- Columns ---


class TestColumns:
    @pytest.fixture
    def two_columns(self, ids):
        return mutations.add_board(
            BoardState(), "Small", column_titles=("Backlog", "Done"), ids=ids
        )

    def test_add_column_appends(self, two_columns, ids):
        board_id = two_columns.boards[0].id
        state = mutations.add_column(two_columns, board_id, "Review", ids=ids)
        columns = state.boards[0].columns
        assert [c.title for c in columns] == ["Backlog", "Done", "Review"]
        assert columns[-1].board_id == board_id

    def test_add_duplicate_title_conflicts(self, board_state):
        with pytest.raises(ConflictError):
            mutations.add_column(board_state, "board-00001", "Review")

    def test_add_unknown_title_conflicts(self, two_columns):
        board_id = two_columns.boards[0].id
        with pytest.raises(ConflictError):
            mutations.add_column(two_columns, board_id, "Icebox")

    def test_add_column_missing_board(self, board_state):
        with pytest.raises(NotFoundError):
            mutations.add_column(board_state, "nope", "Review")

    def test_update_title(self, two_columns):
        board = two_columns.boards[0]
        state = mutations.update_column(two_columns, board.id, board.columns[1].id, title="Review")
        assert state.boards[0].columns[1].title == "Review"

    def test_update_to_own_title_is_allowed(self, two_columns):
        board = two_columns.boards[0]
        column = board.columns[0]
        state = mutations.update_column(two_columns, board.id, column.id, title=column.title)
        assert state.boards[0].columns[0].title == "Backlog"

    def test_update_to_taken_title_conflicts(self, two_columns):
        board = two_columns.boards[0]
        with pytest.raises(ConflictError):
            mutations.update_column(two_columns, board.id, board.columns[1].id, title="Backlog")

    def test_update_unknown_field(self, board_state):
        with pytest.raises(ValidationError):
            mutations.update_column(board_state, "board-00001", "column-00002", tasks=())

    def test_update_column_rejects_board_id_patch(self, board_state):
        with pytest.raises(ValidationError):
            mutations.update_column(
                board_state, "board-00001", "column-00002", board_id="board-00099"
            )

    def test_delete_column_drops_its_tasks(self, seeded):
        state = mutations.delete_column(seeded, "board-00001", "column-00002")
        board = get_board(state, "board-00001")
        assert "column-00002" not in [c.id for c in board.columns]
        assert sum(_all_task_ids(state).values()) == 0

    def test_delete_missing_column(self, board_state):
        with pytest.raises(NotFoundError):
            mutations.delete_column(board_state, "board-00001", "nope")

    @pytest.mark.parametrize(
        "dest, expected",
        [
            (0, ["Done", "Backlog", "In Progress", "Review"]),
            (2, ["Backlog", "In Progress", "Done", "Review"]),
            (99, ["Backlog", "In Progress", "Review", "Done"]),
            (-5, ["Done", "Backlog", "In Progress", "Review"]),
        ],
    )
    def test_reorder_column(self, board_state, dest, expected):
        state = mutations.reorder_column(board_state, "board-00001", "column-00005", dest)
        assert [c.title for c in state.boards[0].columns] == expected

    def test_reorder_keeps_column_contents(self, seeded):
        state = mutations.reorder_column(seeded, "board-00001", "column-00002", 3)
        moved = state.boards[0].columns[-1]
        assert moved.id == "column-00002"
        assert [t.title for t in moved.tasks] == ["One", "Two", "Three"]

    def test_reorder_rejects_non_integer(self, board_state):
        with pytest.raises(ValidationError):
            mutations.reorder_column(board_state, "board-00001", "column-00002", "1")


# --- Tasks ---


class TestAddTask:
    def test_appends_with_defaults(self, board_state, ids):
        state = mutations.add_task(board_state, "board-00001", "column-00002", "Fix bug", ids=ids)
        task = state.boards[0].columns[0].tasks[-1]
        assert task.title == "Fix bug"
        assert task.description == ""
        assert task.priority is Priority.MEDIUM
        assert task.tags == ()
        assert task.board_id == "board-00001"
        assert task.column_id == "column-00002"

    def test_tag_string_is_normalized(self, board_state, ids):
        state = mutations.add_task(
            board_state,
            "board-00001",
            "column-00002",
            "Fix bug",
            priority="high",
            tags="infra, urgent, infra,",
            ids=ids,
        )
        task = state.boards[0].columns[0].tasks[0]
        assert task.priority is Priority.HIGH
        assert task.tags == ("infra", "urgent")

    def test_empty_title_rejected(self, board_state):
        with pytest.raises(ValidationError):
            mutations.add_task(board_state, "board-00001", "column-00002", "  ")

    def test_bad_priority_rejected(self, board_state):
        with pytest.raises(ValidationError):
            mutations.add_task(board_state, "board-00001", "column-00002", "x", priority="urgent")

    def test_missing_column(self, board_state):
        with pytest.raises(NotFoundError):
            mutations.add_task(board_state, "board-00001", "nope", "x")

    def test_reused_task_id_conflicts(self, seeded):
        existing = seeded.boards[0].columns[0].tasks[0].id
        with pytest.raises(ConflictError):
            mutations.add_task(seeded, "board-00001", "column-00003", "x", new_id=existing)

    def test_add_then_delete_restores_snapshot(self, board_state, ids):
        state = mutations.add_task(board_state, "board-00001", "column-00003", "Temp", ids=ids)
        task_id = state.boards[0].columns[1].tasks[0].id
        state = mutations.delete_task(state, "board-00001", "column-00003", task_id)
        assert state == board_state


class TestUpdateTask:
    def test_partial_update_keeps_position(self, seeded):
        task = seeded.boards[0].columns[0].tasks[1]
        state = mutations.update_task(
            seeded, "board-00001", "column-00002", task.id, title="Two!", priority=Priority.LOW
        )
        updated = state.boards[0].columns[0].tasks[1]
        assert updated.id == task.id
        assert updated.title == "Two!"
        assert updated.priority is Priority.LOW
        assert updated.description == task.description

    def test_tags_replace(self, seeded):
        task = seeded.boards[0].columns[0].tasks[0]
        state = mutations.update_task(seeded, "board-00001", "column-00002", task.id, tags="a,b")
        state = mutations.update_task(state, "board-00001", "column-00002", task.id, tags="")
        assert state.boards[0].columns[0].tasks[0].tags == ()

    def test_column_change_not_allowed(self, seeded):
        task = seeded.boards[0].columns[0].tasks[0]
        with pytest.raises(ValidationError):
            mutations.update_task(
                seeded, "board-00001", "column-00002", task.id, column_id="column-00003"
            )

    def test_board_change_not_allowed(self, seeded):
        task = seeded.boards[0].columns[0].tasks[0]
        with pytest.raises(ValidationError) as exc_info:
            mutations.update_task(
                seeded, "board-00001", "column-00002", task.id, board_id="board-00099"
            )
        assert exc_info.value.field == "board_id"

    def test_task_in_wrong_column(self, seeded):
        task = seeded.boards[0].columns[0].tasks[0]
        with pytest.raises(NotFoundError):
            mutations.update_task(seeded, "board-00001", "column-00003", task.id, title="x")


class TestDeleteTask:
    def test_delete(self, seeded):
        task = seeded.boards[0].columns[0].tasks[1]
        state = mutations.delete_task(seeded, "board-00001", "column-00002", task.id)
        assert [t.title for t in state.boards[0].columns[0].tasks] == ["One", "Three"]

    def test_second_delete_not_found(self, seeded):
        task = seeded.boards[0].columns[0].tasks[1]
        state = mutations.delete_task(seeded, "board-00001", "column-00002", task.id)
        with pytest.raises(NotFoundError):
            mutations.delete_task(state, "board-00001", "column-00002", task.id)


class TestMoveTask:
    def test_move_to_other_column(self, seeded):
        task = seeded.boards[0].columns[0].tasks[0]
        state = mutations.move_task(
            seeded, "board-00001", "column-00002", "column-00004", task.id, 0
        )
        backlog, _, review, _ = state.boards[0].columns
        assert [t.title for t in backlog.tasks] == ["Two", "Three"]
        assert [t.id for t in review.tasks] == [task.id]
        assert review.tasks[0].column_id == "column-00004"

    def test_index_is_clamped(self, seeded):
        task = seeded.boards[0].columns[0].tasks[0]
        state = mutations.move_task(
            seeded, "board-00001", "column-00002", "column-00004", task.id, 50
        )
        assert state.boards[0].columns[2].tasks[0].id == task.id

    @pytest.mark.parametrize(
        "dest, expected",
        [
            (0, ["Three", "One", "Two"]),
            (1, ["One", "Three", "Two"]),
            (2, ["One", "Two", "Three"]),
        ],
    )
    def test_same_column_index_is_final_position(self, seeded, dest, expected):
        task = seeded.boards[0].columns[0].tasks[2]
        state = mutations.move_task(
            seeded, "board-00001", "column-00002", "column-00002", task.id, dest
        )
        assert [t.title for t in state.boards[0].columns[0].tasks] == expected

    def test_moves_preserve_task_multiset(self, seeded):
        before = _all_task_ids(seeded)
        state = seeded
        for i, task in enumerate(seeded.boards[0].columns[0].tasks):
            dest = ("column-00003", "column-00004", "column-00005")[i]
            state = mutations.move_task(state, "board-00001", "column-00002", dest, task.id, 0)
        assert _all_task_ids(state) == before
        assert all(len(c.tasks) <= 1 for c in state.boards[0].columns)

    def test_missing_task(self, seeded):
        with pytest.raises(NotFoundError):
            mutations.move_task(seeded, "board-00001", "column-00002", "column-00003", "nope", 0)

    def test_missing_destination(self, seeded):
        task = seeded.boards[0].columns[0].tasks[0]
        with pytest.raises(NotFoundError):
            mutations.move_task(seeded, "board-00001", "column-00002", "nope", task.id, 0)


class TestScenario:
    def test_sprint_board_walkthrough(self, ids):
        state = mutations.add_board(BoardState(), "Sprint 1", ids=ids)
        board = state.boards[0]
        assert [c.title for c in board.columns] == ["Backlog", "In Progress", "Review", "Done"]

        review = board.columns[2]
        state = mutations.add_task(
            state, board.id, review.id, "Fix bug", priority="high", tags="infra, urgent", ids=ids
        )
        task = state.boards[0].columns[2].tasks[0]
        assert task.tags == ("infra", "urgent")

        done = board.columns[3]
        state = mutations.move_task(state, board.id, review.id, done.id, task.id, 0)
        columns = state.boards[0].columns
        assert columns[2].tasks == ()
        assert columns[3].tasks[0].id == task.id


class TestDefaultState:
    def test_seed(self, ids):
        state = mutations.default_state(ids)
        assert len(state.boards) == 1
        assert state.boards[0].name == mutations.DEFAULT_BOARD_NAME
        assert state.active_board_id == state.boards[0].id


class TestEmptyBoardScenario:
    def test_single_review_column(self, ids):
        state = mutations.add_board(BoardState(), "Sprint 1", column_titles=(), ids=ids)
        board_id = state.boards[0].id
        state = mutations.add_column(state, board_id, "Review", ids=ids)
        column_id = state.boards[0].columns[0].id
        state = mutations.add_task(
            state, board_id, column_id, "Fix bug", priority="high", tags="infra, urgent", ids=ids
        )

        assert len(state.boards) == 1
        board = state.boards[0]
        assert board.name == "Sprint 1"
        assert [c.title for c in board.columns] == ["Review"]
        (task,) = board.columns[0].tasks
        assert task.title == "Fix bug"
        assert task.priority is Priority.HIGH
        assert list(task.tags) == ["infra", "urgent"]

    def test_conflicting_column_leaves_state_unchanged(self, ids):
        state = mutations.add_board(BoardState(), "Sprint 1", column_titles=("Review",), ids=ids)
        before = state
        with pytest.raises(ConflictError):
            mutations.add_column(state, state.boards[0].id, "Review", ids=ids)
        assert state == before
        assert state.boards[0].titles == ("Review",)
