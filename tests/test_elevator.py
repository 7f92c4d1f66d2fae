from __future__ import annotations

import pytest

from liftsim import (
    DispatchError,
    Elevator,
    ElevatorBusy,
    ElevatorTiming,
    InvalidConfiguration,
    MovementState,
)


@pytest.fixture
def elevator(env, bus):
    return Elevator(1, env=env, events=bus)


def test_starts_idle_on_ground_floor(elevator):
    assert elevator.is_idle
    assert elevator.current_floor == 0
    assert elevator.target_floor is None
    assert list(elevator.destinations) == []


def test_travel_time_is_distance_times_time_per_floor(env, elevator, recorder):
    elevator.enqueue_destination(4)

    started = recorder.of("move_started")
    assert len(started) == 1
    assert started[0].target_floor == 4
    assert started[0].duration == 12

    env.run()
    assert elevator.current_floor == 4

    elevator.enqueue_destination(4)
    assert recorder.of("move_started")[-1].duration == 0


def test_zero_distance_arrival_is_scheduled_not_inline(env, elevator, recorder):
    elevator.enqueue_destination(0)

    assert elevator.state is MovementState.MOVING
    assert recorder.of("arrived") == []

    env.run(until=1)
    arrived = recorder.of("arrived")
    assert [(event.floor, event.time) for event in arrived] == [(0, 0)]
    assert elevator.state is MovementState.DWELLING


def test_state_machine_moves_dwells_then_idles(env, elevator, recorder):
    freed = []
    elevator.on_free = freed.append
    elevator.enqueue_destination(2)

    env.run(until=5)
    assert elevator.state is MovementState.MOVING
    assert elevator.target_floor == 2

    env.run(until=7)
    assert elevator.state is MovementState.DWELLING
    assert elevator.current_floor == 2
    assert freed == []

    env.run(until=9)
    assert elevator.is_idle
    assert freed == [elevator]
    idle = recorder.of("became_idle")
    assert [(event.elevator_id, event.floor, event.time) for event in idle] == [(1, 2, 8)]


def test_queue_is_visited_in_order_including_dwell(env, elevator, recorder):
    elevator.enqueue_destination(2)
    elevator.enqueue_destination(5)

    assert [event.target_floor for event in recorder.of("move_started")] == [2]
    assert list(elevator.destinations) == [5]

    env.run(until=7)
    assert [event.target_floor for event in recorder.of("move_started")] == [2]

    env.run(until=8.5)
    second = recorder.of("move_started")[-1]
    assert (second.target_floor, second.duration, second.time) == (5, 9, 8)

    env.run()
    assert recorder.kinds() == [
        "move_started",
        "arrived",
        "move_started",
        "arrived",
        "became_idle",
    ]
    assert [event.time for event in recorder.of("arrived")] == [6, 17]
    assert recorder.of("became_idle")[0].time == 19


def test_enqueue_while_busy_does_not_start_a_second_move(env, elevator, recorder):
    elevator.enqueue_destination(6)
    elevator.enqueue_destination(1)
    elevator.enqueue_destination(3)

    assert len(recorder.of("move_started")) == 1
    assert list(elevator.destinations) == [1, 3]


def test_begin_move_while_moving_is_rejected(elevator):
    elevator.enqueue_destination(3)
    with pytest.raises(ElevatorBusy) as excinfo:
        elevator.begin_move(5)
    assert isinstance(excinfo.value, DispatchError)
    assert excinfo.value.target_floor == 3
    assert elevator.target_floor == 3


def test_custom_timing(env, bus, recorder):
    elevator = Elevator(7, env=env, events=bus, timing=ElevatorTiming(time_per_floor=1.5, dwell_time=0.5))
    elevator.enqueue_destination(4)
    assert recorder.of("move_started")[0].duration == 6.0

    env.run()
    assert recorder.of("became_idle")[0].time == 6.5


@pytest.mark.parametrize(
    "time_per_floor,dwell_time",
    [(0, 2), (3, 0), (-1, 2), (float("nan"), 2), (3, float("nan")), (float("inf"), 2), (3, float("inf"))],
)
def test_timing_must_be_positive_and_finite(time_per_floor, dwell_time):
    with pytest.raises(InvalidConfiguration):
        ElevatorTiming(time_per_floor=time_per_floor, dwell_time=dwell_time)


def test_snapshot_reflects_state(elevator):
    elevator.enqueue_destination(3)
    elevator.enqueue_destination(8)

    snapshot = elevator.snapshot()
    assert snapshot.elevator_id == 1
    assert snapshot.current_floor == 0
    assert snapshot.state == "moving"
    assert snapshot.target_floor == 3
    assert snapshot.destinations == (8,)
    assert not snapshot.is_idle
