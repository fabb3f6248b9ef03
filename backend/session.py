"""
Game Session

Holds the current state and random source of one game and is the only place
that swaps one state snapshot for the next. Drivers (websocket server, CLI,
tests) talk to a GameSession instead of calling handlers directly.
"""

import asyncio
import copy
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Union

import ai
from actions import AddEvent, AdvanceWeek, EventPayload, apply_action, parse_action
from catalog import create_initial_state
from config import CONFIG
from engine import WeeklyReport, run_week
from models import GameState, Sentiment, make_rng

logger = logging.getLogger(__name__)

EventSource = Callable[[GameState], Awaitable[Optional[EventPayload]]]
WeekCallback = Callable[[GameState], Awaitable[None]]

COMMUNICATION_ERROR = EventPayload(
    title="Communication error",
    description="Lost contact with the outside world this week. No news could be gathered.",
    sentiment=Sentiment.NEGATIVE,
)


class GameSession:
    """Serial dispatcher around a single game state."""

    def __init__(
        self,
        state: Optional[GameState] = None,
        seed: Optional[int] = None,
        company_name: str = "New Game Studio",
        event_source: Optional[EventSource] = None,
    ):
        self.rng = make_rng(seed)
        self.state = state if state is not None else create_initial_state(self.rng, company_name)
        self.event_source: EventSource = event_source or ai.generate_game_event
        self.last_report: Optional[WeeklyReport] = None
        self.weeks_played = 0
        self._cancelled = False

    def dispatch(self, action: Union[Dict[str, Any], Any]) -> GameState:
        """Apply one action (model or raw dict) and make the result current."""
        if isinstance(action, dict):
            action = parse_action(action)
        if isinstance(action, AdvanceWeek):
            self.state, self.last_report = run_week(self.state, self.rng)
            self.weeks_played += 1
        else:
            self.state = apply_action(self.state, action, self.rng)
        return self.state

    async def advance_weeks(self, weeks: int, on_week: Optional[WeekCallback] = None) -> GameState:
        """
        Advance up to `weeks` weeks, asking the oracle for an event now and then.

        Each week is applied before the next starts, so a cancelled batch keeps
        the weeks already played. Call restore() with an earlier snapshot to
        roll those back.
        """
        self._cancelled = False
        for _ in range(weeks):
            if self._cancelled:
                logger.info("Batch advance cancelled after %d weeks", self.weeks_played)
                break
            self.dispatch(AdvanceWeek())
            if self.rng.random() < CONFIG.oracle.event_probability:
                await self._add_oracle_event()
            if on_week is not None:
                await on_week(self.state)
            await asyncio.sleep(0)
        return self.state

    async def _add_oracle_event(self) -> None:
        try:
            payload = await self.event_source(self.state)
        except Exception:
            logger.exception("Event oracle failed")
            payload = COMMUNICATION_ERROR
        if payload is not None:
            self.dispatch(AddEvent(event=payload))

    def cancel(self) -> None:
        self._cancelled = True

    def snapshot(self) -> GameState:
        return copy.deepcopy(self.state)

    def restore(self, snapshot: GameState) -> None:
        self.state = copy.deepcopy(snapshot)
        self.last_report = None

    async def briefing(self, since: GameState) -> str:
        return await ai.generate_weekly_briefing(since, self.state)
