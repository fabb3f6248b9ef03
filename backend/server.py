import asyncio
import logging
from dataclasses import asdict
from typing import Any, Dict, Optional

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from catalog import promotion_requirements_met
from models import GameState
from persistence import state_to_dict, to_jsonable
from session import GameSession

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI()

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

DEFAULT_WEEK_INTERVAL = 1.0  # seconds between weeks while playing
MIN_WEEK_INTERVAL = 0.05


class SimulationManager:
    def __init__(self):
        self.session: Optional[GameSession] = None
        self.is_running = False
        self.week_interval = DEFAULT_WEEK_INTERVAL
        self.active_websocket: Optional[WebSocket] = None
        self.briefing_baseline: Optional[GameState] = None

    def initialize(self, config: Dict[str, Any] = None):
        if config is None:
            config = {}

        seed = config.get("seed")
        company_name = config.get("companyName", "New Game Studio")
        logger.info(f"Starting new game for {company_name!r} (seed={seed})")
        self.session = GameSession(seed=seed, company_name=company_name)
        self.briefing_baseline = self.session.snapshot()
        self.is_running = False

    def state_message(self) -> Dict[str, Any]:
        session = self.session
        report = session.last_report
        return {
            "type": "STATE",
            "state": state_to_dict(session.state),
            "netWorth": session.state.net_worth,
            "canApplyForPromotion": promotion_requirements_met(session.state),
            "report": to_jsonable(asdict(report)) if report is not None else None,
            "isRunning": self.is_running,
        }

    async def send_state(self):
        if self.active_websocket is not None:
            await self.active_websocket.send_json(self.state_message())

    async def advance(self, weeks: int):
        await self.session.advance_weeks(weeks, on_week=lambda _: self.send_state())

    async def run_loop(self):
        if not self.session:
            logger.warning("Attempted to run loop without a game. Waiting for SETUP.")
            return

        logger.info("Starting simulation loop")
        try:
            while self.is_running and self.active_websocket:
                start_time = asyncio.get_event_loop().time()
                await self.advance(1)

                # Throttle
                elapsed = asyncio.get_event_loop().time() - start_time
                await asyncio.sleep(max(MIN_WEEK_INTERVAL, self.week_interval - elapsed))

        except Exception as e:
            logger.error(f"Simulation loop error: {e}")
            self.is_running = False
            if self.active_websocket:
                await self.active_websocket.send_json({"error": str(e)})

    def stop(self):
        self.is_running = False
        if self.session:
            self.session.cancel()

    def set_speed(self, weeks_per_second: float):
        if weeks_per_second <= 0:
            raise ValueError("weeksPerSecond must be positive")
        self.week_interval = max(MIN_WEEK_INTERVAL, 1.0 / weeks_per_second)

    async def briefing(self) -> str:
        text = await self.session.briefing(self.briefing_baseline)
        self.briefing_baseline = self.session.snapshot()
        return text


manager = SimulationManager()


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    await websocket.accept()
    manager.active_websocket = websocket
    logger.info("WebSocket connected")

    try:
        while True:
            data = await websocket.receive_json()
            command = data.get("command")

            if command == "SETUP":
                manager.initialize(data.get("config", {}))
                await websocket.send_json({"type": "SETUP_COMPLETE"})
                await manager.send_state()
                continue

            if not manager.session:
                # Auto-initialize if not done yet (fallback)
                manager.initialize()

            if command == "ACTION":
                try:
                    manager.session.dispatch(data.get("action", {}))
                except ValidationError as e:
                    await websocket.send_json({"type": "ERROR", "error": str(e)})
                    continue
                await manager.send_state()
            elif command == "ADVANCE":
                if manager.is_running:
                    await websocket.send_json({"type": "ERROR", "error": "Cannot advance while the simulation is running"})
                    continue
                weeks = int(data.get("weeks", 1))
                await manager.advance(max(0, weeks))
            elif command == "START":
                if not manager.is_running:
                    manager.is_running = True
                    asyncio.create_task(manager.run_loop())
            elif command == "STOP":
                manager.stop()
                await manager.send_state()
            elif command == "SPEED":
                try:
                    manager.set_speed(float(data.get("weeksPerSecond", 1.0)))
                except ValueError as e:
                    await websocket.send_json({"type": "ERROR", "error": str(e)})
            elif command == "BRIEFING":
                text = await manager.briefing()
                await websocket.send_json({"type": "BRIEFING", "text": text})
            else:
                await websocket.send_json({"type": "ERROR", "error": f"Unknown command: {command}"})

    except WebSocketDisconnect:
        manager.stop()
        manager.active_websocket = None
        logger.info("Client disconnected")
