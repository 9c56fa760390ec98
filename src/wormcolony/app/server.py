from __future__ import annotations

import asyncio
import json
import logging
from collections import deque
from dataclasses import asdict, dataclass
from typing import Dict, Set

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse

from ..sim.core.config import AppConfig
from ..sim.core.economy import EconomyAction
from ..sim.core.world import World
from ..sim.types.events import EventKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueuedSnapshot:
    tick: int
    payload: str


class SimulationController:
    """Steps the world and pushes throttled snapshots to websocket clients.

    Stepping runs every ``time_step``; snapshots go out at ``render_rate``
    and only read the world between steps.
    """

    def __init__(self, config: AppConfig):
        self.config = config
        self.world = World(config.simulation)
        self.running = False
        self.tick = 0
        self.speed_multiplier = 1.0
        self.clients: Set[WebSocket] = set()
        self._client_last_sent: Dict[WebSocket, int] = {}
        self._snapshot_queue: deque[QueuedSnapshot] = deque(maxlen=max(1, config.snapshot_queue_limit))
        self._render_accumulator = 0.0
        self._lock = asyncio.Lock()
        self._queue_lock = asyncio.Lock()
        self._loop_task: asyncio.Task | None = None

    async def start(self) -> None:
        if self._loop_task is None:
            self._loop_task = asyncio.create_task(self._loop())
        self.running = True

    async def stop(self) -> None:
        self.running = False

    async def reset(self) -> None:
        async with self._lock:
            self.world.reset()
            self.tick = 0
            self._render_accumulator = 0.0
        async with self._queue_lock:
            self._snapshot_queue.clear()
        for client in self._client_last_sent:
            self._client_last_sent[client] = -1
        await self._broadcast_snapshot()

    async def advance(self) -> bool:
        """Run one step; return True when a snapshot is due."""
        sim = self.config.simulation
        async with self._lock:
            self.world.step(self.tick)
            self.tick += 1
        self._render_accumulator += sim.time_step
        render_interval = 0.0 if sim.render_rate <= 0 else 1.0 / sim.render_rate
        if self._render_accumulator >= render_interval:
            self._render_accumulator = 0.0
            return True
        return False

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.config.simulation.time_step / self.speed_multiplier)
            if not self.running:
                continue
            if await self.advance():
                await self._broadcast_snapshot()

    async def apply_action(self, action: EconomyAction) -> None:
        async with self._lock:
            self.world.apply_action(action)

    async def acknowledge(self, tick: int) -> None:
        async with self._queue_lock:
            while self._snapshot_queue and self._snapshot_queue[0].tick <= tick:
                self._snapshot_queue.popleft()

    def _serialize_snapshot(self) -> QueuedSnapshot:
        snapshot = self.world.snapshot(self.tick)
        payload = {
            "type": "snapshot",
            "tick": snapshot.tick,
            "payload": {
                "tick": snapshot.tick,
                "metrics": asdict(snapshot.metrics),
                "colonies": snapshot.colonies,
                "economy": asdict(snapshot.economy),
                "boss": snapshot.boss,
                "metadata": asdict(snapshot.metadata),
            },
        }
        return QueuedSnapshot(tick=snapshot.tick, payload=json.dumps(payload))

    async def _send_pending_snapshots(self, client: WebSocket) -> None:
        last_sent = self._client_last_sent.get(client, -1)
        async with self._queue_lock:
            pending = [item for item in self._snapshot_queue if item.tick > last_sent]
        for item in pending:
            await client.send_text(item.payload)
            last_sent = item.tick
        self._client_last_sent[client] = last_sent

    async def _broadcast_snapshot(self) -> None:
        queued = self._serialize_snapshot()
        async with self._queue_lock:
            self._snapshot_queue.append(queued)
        stale: Set[WebSocket] = set()
        for client in self.clients:
            try:
                await self._send_pending_snapshots(client)
            except WebSocketDisconnect:
                stale.add(client)
        for client in stale:
            logger.info("dropping disconnected client")
            self.clients.discard(client)
            self._client_last_sent.pop(client, None)


app = FastAPI(title="Worm Colony Simulation")
controller = SimulationController(AppConfig())


@app.on_event("startup")
async def _startup() -> None:
    await controller.start()


@app.get("/api/status")
async def status() -> JSONResponse:
    snapshot = controller.world.snapshot(controller.tick)
    return JSONResponse(
        {
            "running": controller.running,
            "tick": controller.tick,
            "colonies": len(controller.world.colonies),
            "selected": controller.world.selected_index,
            "metrics": asdict(snapshot.metrics),
            "economy": asdict(snapshot.economy),
        }
    )


@app.get("/api/events")
async def events(kind: str | None = None) -> JSONResponse:
    try:
        filter_kind = EventKind(kind.upper()) if kind and kind.upper() != "ALL" else None
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown event kind: {kind}") from None
    entries = controller.world.event_log.entries(filter_kind)
    return JSONResponse({"events": [{**asdict(entry), "kind": entry.kind.value} for entry in entries]})


@app.post("/api/control/start")
async def start_simulation() -> JSONResponse:
    controller.running = True
    return JSONResponse({"running": True})


@app.post("/api/control/stop")
async def stop_simulation() -> JSONResponse:
    controller.running = False
    return JSONResponse({"running": False})


@app.post("/api/control/reset")
async def reset_simulation() -> JSONResponse:
    await controller.reset()
    return JSONResponse({"running": controller.running, "tick": controller.tick})


@app.post("/api/control/speed")
async def set_speed(payload: dict) -> JSONResponse:
    speed = float(payload.get("multiplier", 1.0))
    controller.speed_multiplier = max(0.1, min(5.0, speed))
    return JSONResponse({"multiplier": controller.speed_multiplier})


@app.post("/api/actions/{name}")
async def economic_action(name: str) -> JSONResponse:
    try:
        action = EconomyAction(name)
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown action: {name}") from None
    await controller.apply_action(action)
    return JSONResponse(asdict(controller.world.snapshot(controller.tick).economy))


@app.post("/api/mutate")
async def mutate() -> JSONResponse:
    async with controller._lock:
        worm = controller.world.trigger_mutation()
    return JSONResponse({"mutated": worm.id if worm is not None else None})


@app.post("/api/select")
async def select(payload: dict) -> JSONResponse:
    index = int(payload.get("index", 0))
    async with controller._lock:
        selected = controller.world.select_colony(index)
    return JSONResponse({"selected": controller.world.selected_index, "changed": selected})


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket) -> None:
    await websocket.accept()
    controller.clients.add(websocket)
    controller._client_last_sent[websocket] = -1
    await controller._send_pending_snapshots(websocket)
    try:
        while True:
            message = await websocket.receive_text()
            try:
                payload = json.loads(message)
            except json.JSONDecodeError:
                continue
            if payload.get("type") == "ack":
                tick = payload.get("tick")
                if isinstance(tick, int):
                    await controller.acknowledge(tick)
    except WebSocketDisconnect:
        controller.clients.discard(websocket)
        controller._client_last_sent.pop(websocket, None)


__all__ = ["app", "controller"]
