from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import os
from dataclasses import asdict
from typing import List, Optional, Set

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.websockets import WebSocketState
from pydantic import BaseModel

from liftsim import ElevatorTiming, Simulation, SimulationEvent
from liftsim.events import ALL_EVENTS

load_dotenv()

logger = logging.getLogger(__name__)


class CallRequest(BaseModel):
    floor: int


class SimulationManager:
    def __init__(
        self,
        num_floors: int = 10,
        elevator_count: int = 5,
        time_per_floor: float = 3.0,
        dwell_time: float = 2.0,
        tick_interval: float = 0.5,
        time_scale: float = 1.0,
    ) -> None:
        self.simulation = Simulation(
            num_floors=num_floors,
            num_elevators=elevator_count,
            timing=ElevatorTiming(time_per_floor=time_per_floor, dwell_time=dwell_time),
        )
        self.tick_interval = tick_interval
        self.time_scale = time_scale
        self.clients: Set[WebSocket] = set()
        self._events: List[SimulationEvent] = []
        self.simulation.on_event(ALL_EVENTS, self._events.append)
        self._task: Optional[asyncio.Task] = None
        self._lock = asyncio.Lock()

    @classmethod
    def from_env(cls) -> "SimulationManager":
        return cls(
            num_floors=int(os.getenv("LIFTSIM_NUM_FLOORS", 10)),
            elevator_count=int(os.getenv("LIFTSIM_NUM_ELEVATORS", 5)),
            time_per_floor=float(os.getenv("LIFTSIM_TIME_PER_FLOOR", 3.0)),
            dwell_time=float(os.getenv("LIFTSIM_DWELL_TIME", 2.0)),
            tick_interval=float(os.getenv("LIFTSIM_TICK_INTERVAL", 0.5)),
            time_scale=float(os.getenv("LIFTSIM_TIME_SCALE", 1.0)),
        )

    async def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None

    async def _run(self) -> None:
        while True:
            async with self._lock:
                payload = self.tick()
            await self.broadcast(payload)
            await asyncio.sleep(self.tick_interval)

    def tick(self) -> dict:
        self.simulation.advance(self.tick_interval * self.time_scale)
        return {"events": self.drain_events(), "state": self.current_state()}

    def drain_events(self) -> List[dict]:
        drained = [event.to_dict() for event in self._events]
        self._events.clear()
        return drained

    async def broadcast(self, payload: dict) -> None:
        message = json.dumps(payload)
        disconnected: Set[WebSocket] = set()
        for client in set(self.clients):
            try:
                await client.send_text(message)
            except WebSocketDisconnect:
                disconnected.add(client)
        for client in disconnected:
            await self.unregister(client)

    async def register(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self.clients.add(websocket)
        await websocket.send_text(json.dumps({"events": [], "state": self.current_state()}))

    async def unregister(self, websocket: WebSocket) -> None:
        self.clients.discard(websocket)
        logger.debug("Stream client left, %d remaining", len(self.clients))
        if (
            websocket.client_state is WebSocketState.CONNECTED
            and websocket.application_state is WebSocketState.CONNECTED
        ):
            await websocket.close()

    def current_state(self) -> dict:
        state = self.simulation.snapshot()
        state["metrics"] = asdict(self.simulation.metrics_snapshot())
        return state

    async def request_floor(self, floor: int) -> dict:
        async with self._lock:
            call = self.simulation.request_floor(floor)
            state = self.current_state()
            state["call"] = asdict(call)
            return state


manager = SimulationManager.from_env()
app = FastAPI(title="Elevator Dispatch Simulation API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def on_startup() -> None:
    logger.info("Starting simulation clock")
    await manager.start()


@app.on_event("shutdown")
async def on_shutdown() -> None:
    await manager.stop()


@app.get("/state")
async def get_state() -> dict:
    return manager.current_state()


@app.post("/calls")
async def request_floor(request: CallRequest) -> dict:
    try:
        return await manager.request_floor(request.floor)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@app.websocket("/ws/stream")
async def websocket_endpoint(websocket: WebSocket) -> None:
    await manager.register(websocket)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        await manager.unregister(websocket)


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    uvicorn.run("api.app:app", host="0.0.0.0", port=8000, reload=False)
