"""
Tests for the seat hall engine.

Covers allocation order, resizing, persistence between invocations and the
reset behaviour for untrusted state.
"""
import pathlib
import sys
from datetime import datetime

import pytest

# Ensure src package is on path
sys.path.append(str(pathlib.Path(__file__).resolve().parents[1] / "src"))

from seat_hall import codec
from seat_hall.allocation import allocate
from seat_hall.engine import Request, SeatingEngine
from seat_hall.errors import (
    CorruptPersistedState,
    DimensionsOutOfBounds,
    DuplicateRoll,
    HallFull,
    InvalidRoll,
    NoHallConfigured,
    RollNotFound,
)
from seat_hall.events import Action, EventLog, SeatEvent
from seat_hall.guard import CorruptionGuard
from seat_hall.lifecycle import ensure_grid
from seat_hall.models import MAX_STUDENTS, HallState
from seat_hall.rebuild import resize
from seat_hall.store import StateStore


def assert_consistent(state: HallState) -> None:
    grid = state.grid
    for s in state.roster:
        if state.in_bounds(s.row, s.col):
            assert grid is not None
            seat = grid.seat(s.row, s.col)
            assert seat.occupied and seat.roll == s.roll
    if grid is None:
        return
    for r in range(grid.rows):
        for c in range(grid.cols):
            seat = grid.seat(r, c)
            if seat.occupied:
                owners = [s for s in state.roster if s.roll == seat.roll and s.position == (r, c)]
                assert len(owners) == 1


@pytest.fixture
def paths(tmp_path):
    return tmp_path / "students.dat", tmp_path / "allocation_log.txt"


def open_engine(paths) -> SeatingEngine:
    data_file, log_file = paths
    engine = SeatingEngine(StateStore(data_file), EventLog(log_file))
    engine.load_state()
    return engine


class TestAllocation:
    def test_first_fit_fills_row_major(self, paths):
        engine = open_engine(paths)
        engine.resize(2, 2)
        seats = [engine.allocate(roll, f"S{roll}").position for roll in (1, 2, 3, 4)]
        assert seats == [(0, 0), (0, 1), (1, 0), (1, 1)]
        with pytest.raises(HallFull):
            engine.allocate(5, "S5")
        assert engine.state.count == 4
        assert_consistent(engine.state)

    def test_no_hall_configured(self, paths):
        engine = open_engine(paths)
        with pytest.raises(NoHallConfigured):
            engine.allocate(1, "Ann")
        assert engine.state.count == 0
        assert not paths[0].exists()

    def test_duplicate_roll_rejected(self, paths):
        engine = open_engine(paths)
        engine.resize(3, 3)
        engine.allocate(7, "Gia")
        with pytest.raises(DuplicateRoll) as exc:
            engine.allocate(7, "Gia again")
        assert exc.value.message == "Roll 7 is already allocated!"
        assert [s.roll for s in engine.state.roster] == [7]
        assert engine.state.grid.occupied_count() == 1

    def test_invalid_roll(self, paths):
        engine = open_engine(paths)
        engine.resize(1, 1)
        with pytest.raises(InvalidRoll):
            engine.allocate(0, "Nobody")

    def test_roll_beyond_int32_rejected(self, paths):
        engine = open_engine(paths)
        engine.resize(1, 2)
        engine.allocate(1, "A")
        before = paths[0].read_bytes()
        with pytest.raises(InvalidRoll):
            engine.allocate(2**31, "Big")
        assert [s.roll for s in engine.state.roster] == [1]
        assert engine.find_occupant(0, 1) is None
        assert paths[0].read_bytes() == before
        assert engine.allocate(2**31 - 1, "Max").position == (0, 1)
        assert open_engine(paths).find(2**31 - 1).name == "Max"

    def test_long_name_truncated(self, paths):
        engine = open_engine(paths)
        engine.resize(1, 1)
        student = engine.allocate(1, "n" * 80)
        assert student.name == "n" * 49
        assert open_engine(paths).find(1).name == "n" * 49

    def test_roster_cap_counts_orphans(self, tmp_path):
        guard = CorruptionGuard(StateStore(tmp_path / "s.dat"))
        state = HallState()
        resize(state, 20, 25, guard)
        for roll in range(1, MAX_STUDENTS + 1):
            allocate(state, roll, "x", guard)
        resize(state, 25, 20, guard)
        assert state.grid.first_free() is not None
        with pytest.raises(HallFull):
            allocate(state, MAX_STUDENTS + 1, "late", guard)
        assert state.count == MAX_STUDENTS


class TestDeallocation:
    def test_deallocate_then_reallocate_reuses_seat(self, paths):
        engine = open_engine(paths)
        engine.resize(2, 2)
        engine.allocate(5, "Eve")
        engine.allocate(6, "Fay")
        assert engine.deallocate(5).position == (0, 0)
        assert engine.find_occupant(0, 0) is None
        assert engine.allocate(9, "Ivy").position == (0, 0)
        assert_consistent(engine.state)

    def test_order_preserved(self, paths):
        engine = open_engine(paths)
        engine.resize(2, 3)
        for roll in (10, 20, 30, 40):
            engine.allocate(roll, str(roll))
        engine.deallocate(20)
        assert [s.roll for s in engine.state.roster] == [10, 30, 40]
        assert [s.roll for s in open_engine(paths).state.roster] == [10, 30, 40]

    def test_unknown_roll(self, paths):
        engine = open_engine(paths)
        engine.resize(1, 1)
        with pytest.raises(RollNotFound) as exc:
            engine.deallocate(42)
        assert exc.value.message == "Roll number not found!"


class TestResize:
    def test_shrink_orphans_student(self, paths):
        engine = open_engine(paths)
        engine.resize(2, 2)
        for roll in (2, 3, 4):
            engine.allocate(roll, f"S{roll}")
        engine.allocate(1, "One")
        assert engine.find(1).position == (1, 1)
        engine.deallocate(2)
        engine.deallocate(3)
        engine.deallocate(4)

        engine.resize(1, 1)
        assert engine.find(1).position == (1, 1)
        assert engine.find_occupant(0, 0) is None
        assert_consistent(engine.state)

        # the orphan does not block the only seat
        assert engine.allocate(8, "Hal").position == (0, 0)
        assert engine.deallocate(1).position == (1, 1)
        assert engine.find(1) is None
        assert_consistent(engine.state)

    def test_grow_restores_orphan(self, paths):
        engine = open_engine(paths)
        engine.resize(2, 2)
        for roll in (1, 2, 3, 4):
            engine.allocate(roll, f"S{roll}")
        engine.resize(1, 2)
        assert engine.find_occupant(1, 1) is None
        engine.resize(2, 2)
        assert engine.find_occupant(1, 1).roll == 4
        assert_consistent(engine.state)

    def test_resize_persists_immediately(self, paths):
        engine = open_engine(paths)
        engine.resize(4, 5)
        reloaded = open_engine(paths)
        assert (reloaded.state.rows, reloaded.state.cols) == (4, 5)
        assert reloaded.state.grid.rows == 4

    def test_same_or_non_positive_dimensions_are_ignored(self, paths):
        engine = open_engine(paths)
        engine.resize(2, 2)
        engine.allocate(1, "A")
        grid = engine.state.grid
        engine.resize(2, 2)
        engine.resize(0, 3)
        assert engine.state.grid is grid
        assert (engine.state.rows, engine.state.cols) == (2, 2)

    @pytest.mark.parametrize("dims", [(101, 2), (2, 101), (30, 30)])
    def test_oversized_dimensions_reset(self, paths, dims):
        engine = open_engine(paths)
        engine.resize(2, 2)
        engine.allocate(1, "A")
        engine.resize(*dims)
        assert (engine.state.rows, engine.state.cols, engine.state.count) == (0, 0, 0)
        assert engine.state.grid is None
        assert not paths[0].exists()
        assert isinstance(engine.guard.resets[-1], DimensionsOutOfBounds)


class TestLifecycle:
    def test_ensure_grid_is_idempotent(self, tmp_path):
        guard = CorruptionGuard(StateStore(tmp_path / "s.dat"))
        once = HallState(rows=3, cols=2)
        twice = HallState(rows=3, cols=2)
        ensure_grid(once, guard)
        ensure_grid(twice, guard)
        grid = twice.grid
        ensure_grid(twice, guard)
        assert twice.grid is grid
        assert ensure_grid(twice, guard) is grid
        assert once.grid == twice.grid

    def test_ensure_grid_without_dimensions(self, tmp_path):
        guard = CorruptionGuard(StateStore(tmp_path / "s.dat"))
        state = HallState(rows=0, cols=4)
        assert ensure_grid(state, guard) is None
        assert state.grid is None
        assert guard.resets == []

    def test_missing_file_starts_empty(self, paths):
        engine = open_engine(paths)
        assert (engine.state.rows, engine.state.cols, engine.state.count) == (0, 0, 0)
        assert engine.state.grid is None

    def test_corrupt_file_resets_and_deletes(self, paths):
        data_file, _ = paths
        data_file.write_bytes(codec.HEADER.pack(9999, 2, 0))
        engine = open_engine(paths)
        assert (engine.state.rows, engine.state.cols, engine.state.count) == (0, 0, 0)
        assert not data_file.exists()
        assert isinstance(engine.guard.resets[0], CorruptPersistedState)

    def test_truncated_file_loads_complete_records(self, paths):
        engine = open_engine(paths)
        engine.resize(2, 2)
        for roll in (1, 2, 3):
            engine.allocate(roll, f"S{roll}")
        data_file, _ = paths
        data_file.write_bytes(data_file.read_bytes()[:-5])
        reloaded = open_engine(paths)
        assert reloaded.state.count == 2
        assert reloaded.find_occupant(1, 0) is None
        assert_consistent(reloaded.state)

    def test_load_rebuilds_grid_from_roster(self, paths):
        engine = open_engine(paths)
        engine.resize(3, 3)
        engine.allocate(11, "K")
        engine.allocate(12, "L")
        reloaded = open_engine(paths)
        assert reloaded.find_occupant(0, 0).roll == 11
        assert reloaded.find_occupant(0, 1).roll == 12
        assert reloaded.state.roster == engine.state.roster
        assert_consistent(reloaded.state)

    def test_unwritable_store_keeps_in_memory_state(self, tmp_path):
        engine = SeatingEngine(StateStore(tmp_path), EventLog(tmp_path / "log.txt"))
        engine.load_state()
        engine.resize(1, 2)
        assert engine.allocate(1, "A").position == (0, 0)
        assert engine.persist() is False


class TestSnapshotAndEvents:
    def test_current_state_is_a_copy(self, paths):
        engine = open_engine(paths)
        engine.resize(1, 2)
        engine.allocate(3, "Cy")
        snap = engine.current_state()
        assert (snap.rows, snap.cols) == (1, 2)
        assert snap.occupant(0, 0).name == "Cy"
        snap.seats[0][0].occupied = False
        snap.roster[0].row = 9
        assert engine.state.grid.seat(0, 0).occupied
        assert engine.find(3).row == 0

    def test_events_are_logged(self, paths):
        engine = open_engine(paths)
        engine.resize(1, 2)
        engine.allocate(3, "Cy")
        engine.deallocate(3)
        lines = engine.event_log.read_text().splitlines()
        assert len(lines) == 2
        assert lines[0].endswith("ALLOCATED: Roll=3 at (0,0)")
        assert lines[1].endswith("DEALLOCATED: Roll=3 at (0,0)")

    def test_failed_operations_are_not_logged(self, paths):
        engine = open_engine(paths)
        engine.resize(1, 1)
        with pytest.raises(RollNotFound):
            engine.deallocate(3)
        assert engine.event_log.read_text() is None

    def test_event_line_format(self):
        event = SeatEvent(Action.ALLOCATED, 12, 1, 4, timestamp=datetime(2024, 3, 5, 9, 7, 2))
        assert event.format_line() == "05-03-2024 09:07:02 - ALLOCATED: Roll=12 at (1,4)"


class TestHandle:
    def test_resize_and_allocate_in_one_request(self, paths):
        engine = open_engine(paths)
        msg = engine.handle(Request(action="allocate", rows=2, cols=3, roll=1, name="Ann"))
        assert msg == "Hall dimensions updated. Allocated Ann (1) at (0, 0)"

    def test_operation_errors_become_messages(self, paths):
        engine = open_engine(paths)
        assert engine.handle(Request(action="allocate", roll=1, name="Ann")) == "Please set Rows and Columns first."
        engine.handle(Request(rows=1, cols=1))
        engine.handle(Request(action="allocate", roll=1, name="Ann"))
        assert engine.handle(Request(action="allocate", roll=2, name="Bo")) == (
            "Hall is full! Increase rows/cols to add more."
        )
        assert engine.handle(Request(action="deallocate", roll=1)) == "Deallocated Roll 1 from (0, 0)."

    def test_oversized_resize_does_not_claim_update(self, paths):
        engine = open_engine(paths)
        msg = engine.handle(Request(action="allocate", rows=101, cols=2, roll=1, name="Ann"))
        assert msg == "Please set Rows and Columns first."
        assert isinstance(engine.guard.resets[-1], DimensionsOutOfBounds)

    def test_resets_accumulate_in_order(self, paths):
        data_file, _ = paths
        data_file.write_bytes(codec.HEADER.pack(9999, 2, 0))
        engine = open_engine(paths)
        loaded = len(engine.guard.resets)
        assert loaded == 1
        engine.handle(Request(rows=101, cols=2))
        new = engine.guard.resets[loaded:]
        assert len(new) == 1
        assert isinstance(new[0], DimensionsOutOfBounds)

    def test_huge_roll_becomes_message(self, paths):
        engine = open_engine(paths)
        msg = engine.handle(Request(action="allocate", rows=1, cols=1, roll=2**31, name="Big"))
        assert msg == f"Hall dimensions updated. Roll {2**31} is not a valid roll number."
        assert open_engine(paths).state.count == 0

    def test_consistency_over_a_sequence(self, paths):
        engine = open_engine(paths)
        steps = [
            Request(rows=3, cols=3),
            *[Request(action="allocate", roll=r, name=f"S{r}") for r in range(1, 8)],
            Request(action="deallocate", roll=2),
            Request(rows=2, cols=2),
            Request(action="allocate", roll=20, name="T"),
            Request(action="deallocate", roll=7),
            Request(rows=3, cols=4),
            Request(action="allocate", roll=21, name="U"),
            Request(action="allocate", roll=1, name="dup"),
        ]
        for request in steps:
            engine.handle(request)
            assert_consistent(engine.state)
            reloaded = open_engine(paths)
            assert reloaded.state.roster == engine.state.roster
            assert_consistent(reloaded.state)
