from __future__ import annotations

import asyncio

import pytest
from fastapi.testclient import TestClient
from fastapi.websockets import WebSocketState

from api import app as app_module
from api.app import SimulationManager
from liftsim import InvalidConfiguration


@pytest.fixture
def manager(monkeypatch):
    manager = SimulationManager(num_floors=10, elevator_count=2, tick_interval=0.5, time_scale=30.0)
    monkeypatch.setattr(app_module, "manager", manager)
    return manager


@pytest.fixture
def client(manager):
    # Used without a context manager so the background clock task never starts.
    return TestClient(app_module.app)


def test_initial_state(client):
    response = client.get("/state")
    assert response.status_code == 200
    state = response.json()
    assert state["time"] == 0
    assert [elevator["state"] for elevator in state["elevators"]] == ["idle", "idle"]
    assert state["metrics"]["calls_received"] == 0


def test_request_floor_assigns_an_elevator(client):
    response = client.post("/calls", json={"floor": 4})
    assert response.status_code == 200
    state = response.json()
    assert state["call"]["floor"] == 4
    assert state["call"]["elevator_id"] == 1
    assert state["elevators"][0]["state"] == "moving"
    assert state["elevators"][0]["target_floor"] == 4


def test_out_of_range_floor_is_a_bad_request(client):
    response = client.post("/calls", json={"floor": 42})
    assert response.status_code == 400
    assert "outside the building" in response.json()["detail"]


def test_non_integer_floor_fails_validation(client):
    response = client.post("/calls", json={"floor": "lobby"})
    assert response.status_code == 422


def test_tick_advances_clock_and_drains_events(client, manager):
    client.post("/calls", json={"floor": 4})

    payload = manager.tick()

    assert payload["state"]["time"] == 15
    kinds = [event["type"] for event in payload["events"]]
    assert kinds == ["call_queued", "call_assigned", "move_started", "arrived", "call_served", "became_idle"]
    assert payload["state"]["metrics"]["calls_served"] == 1

    assert manager.tick()["events"] == []


def test_stream_sends_current_state_on_connect(client):
    client.post("/calls", json={"floor": 2})
    with client.websocket_connect("/ws/stream") as websocket:
        message = websocket.receive_json()
    assert message["events"] == []
    assert message["state"]["elevators"][0]["target_floor"] == 2


def test_manager_reads_environment(monkeypatch):
    monkeypatch.setenv("LIFTSIM_NUM_FLOORS", "20")
    monkeypatch.setenv("LIFTSIM_NUM_ELEVATORS", "4")
    monkeypatch.setenv("LIFTSIM_TIME_PER_FLOOR", "1.5")

    manager = SimulationManager.from_env()

    state = manager.current_state()
    assert state["num_floors"] == 20
    assert len(state["elevators"]) == 4
    assert manager.simulation.dispatcher.timing.time_per_floor == 1.5


@pytest.mark.parametrize("value", ["nan", "inf"])
def test_non_finite_timing_from_environment_is_rejected(monkeypatch, value):
    monkeypatch.setenv("LIFTSIM_TIME_PER_FLOOR", value)
    with pytest.raises(InvalidConfiguration):
        SimulationManager.from_env()


class FakeWebSocket:
    def __init__(self, client_state: WebSocketState, application_state: WebSocketState) -> None:
        self.client_state = client_state
        self.application_state = application_state
        self.closed = False

    async def close(self) -> None:
        if self.application_state is not WebSocketState.CONNECTED:
            raise RuntimeError("close after disconnect")
        self.closed = True


def test_unregister_closes_a_live_socket(manager):
    websocket = FakeWebSocket(WebSocketState.CONNECTED, WebSocketState.CONNECTED)
    manager.clients.add(websocket)

    asyncio.run(manager.unregister(websocket))

    assert websocket.closed
    assert websocket not in manager.clients


@pytest.mark.parametrize(
    "client_state,application_state",
    [
        (WebSocketState.DISCONNECTED, WebSocketState.CONNECTED),
        (WebSocketState.CONNECTED, WebSocketState.DISCONNECTED),
    ],
)
def test_unregister_leaves_a_dead_socket_alone(manager, client_state, application_state):
    websocket = FakeWebSocket(client_state, application_state)
    manager.clients.add(websocket)

    asyncio.run(manager.unregister(websocket))

    assert not websocket.closed
    assert manager.clients == set()
