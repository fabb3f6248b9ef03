"""
Event Oracle and Weekly Briefing

Thin OpenRouter chat-completions client plus the two prompts the game uses:
an external world event for the studio, and a short executive briefing that
compares two weeks. Without an OPENROUTER_API_KEY both degrade quietly
(no event / a fixed notice) so the simulation runs offline.
"""

import json
import logging
import os
from typing import Optional

import httpx
from dotenv import load_dotenv

from actions import EventPayload
from config import CONFIG
from models import GameState

# Load environment variables from .env
load_dotenv()

logger = logging.getLogger(__name__)

BRIEFING_UNAVAILABLE = "Briefing unavailable: no OpenRouter API key is configured."

EVENT_SYSTEM_PROMPT = (
    "You are the game master of a game-studio management simulation. "
    "Invent one realistic industry or world event that affects the player's studio. "
    "Reply with a single JSON object and nothing else, with keys: "
    '"title" (short), "description" (one or two sentences), '
    '"type" ("positive", "negative" or "neutral"), "isNews" (true/false), '
    'and optionally "marketTrend": {"genre": <one of the studio\'s genres>, "trend": "up" or "down"}.'
)

BRIEFING_SYSTEM_PROMPT = (
    "You are the chief of staff of a game studio. Write a concise weekly briefing for the CEO "
    "in plain prose, no more than {max_words} words. Mention money, projects and notable events."
)


def api_key() -> Optional[str]:
    return os.getenv("OPENROUTER_API_KEY")


def oracle_available() -> bool:
    return bool(api_key())


def build_payload(system_prompt: str, user_prompt: str, temperature: float = 0.2) -> dict:
    return {
        "model": os.getenv("OPENROUTER_MODEL", CONFIG.oracle.model),
        "messages": [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ],
        "temperature": temperature,
    }


async def send_request(payload: dict, key: str) -> dict:
    headers = {
        "Authorization": f"Bearer {key}",
        "Content-Type": "application/json",
    }
    async with httpx.AsyncClient(timeout=CONFIG.oracle.timeout_seconds) as client:
        r = await client.post(CONFIG.oracle.base_url, headers=headers, json=payload)
        r.raise_for_status()
        return r.json()


def extract_text(response_json: dict) -> str:
    return response_json["choices"][0]["message"]["content"]


async def call_llm(system_prompt: str, user_prompt: str, temperature: float = 0.2) -> Optional[str]:
    """Send one chat completion; None when no API key is configured."""
    key = api_key()
    if not key:
        logger.warning("OPENROUTER_API_KEY not set; skipping LLM call")
        return None
    payload = build_payload(system_prompt, user_prompt, temperature)
    response_json = await send_request(payload, key)
    return extract_text(response_json)


def _json_block(text: str) -> str:
    """The outermost {...} in a model reply (models like to wrap JSON in prose or fences)."""
    start = text.index("{")
    end = text.rindex("}") + 1
    return text[start:end]


def parse_event(text: str) -> EventPayload:
    """Validate the oracle's JSON reply; raises ValueError on malformed output."""
    return EventPayload.model_validate(json.loads(_json_block(text)))


def describe_state(state: GameState) -> str:
    company = state.company
    genres = sorted({p.genre for p in state.projects if p.in_development})
    lines = [
        f"Date: {state.date.isoformat()}",
        f"Studio: {company.name} ({company.tier.value})",
        f"Assets: {company.assets:,}  Annual revenue: {company.revenue:,}",
        f"Employees: {company.employees}/{company.employee_capacity}  Reputation: {company.reputation:.0f}",
        f"Projects in development: {', '.join(p.name for p in state.projects if p.in_development) or 'none'}",
        f"Genres in development: {', '.join(genres) or 'none'}",
    ]
    if state.market_trend is not None:
        lines.append(f"Market trend: {state.market_trend.genre} is trending {state.market_trend.direction}")
    return "\n".join(lines)


async def generate_game_event(state: GameState) -> Optional[EventPayload]:
    """
    Ask the oracle for one external event.

    Returns:
        Validated EventPayload, or None when the oracle is not configured.
        Transport and parsing errors propagate to the caller.
    """
    text = await call_llm(EVENT_SYSTEM_PROMPT, describe_state(state), CONFIG.oracle.temperature)
    if text is None:
        return None
    event = parse_event(text)
    logger.info("Oracle event: %s (%s)", event.title, event.sentiment.value)
    return event


async def generate_weekly_briefing(before: GameState, after: GameState) -> str:
    """Prose summary of what changed between two states."""
    known = {entry.id for entry in before.event_log}
    new_events = [entry for entry in after.event_log if entry.id not in known]
    progress = [
        f"{p.name}: {p.progress:.0f}%"
        for p in after.projects if p.in_development
    ]
    user_prompt = "\n".join([
        "Before:",
        describe_state(before),
        "",
        "After:",
        describe_state(after),
        "",
        f"Asset change: {after.company.assets - before.company.assets:+,}",
        f"Project progress: {', '.join(progress) or 'none'}",
        "Events:",
        *(f"- {e.title}: {e.description}" for e in reversed(new_events)),
    ])
    system_prompt = BRIEFING_SYSTEM_PROMPT.format(max_words=CONFIG.oracle.briefing_max_words)
    text = await call_llm(system_prompt, user_prompt, CONFIG.oracle.temperature)
    if text is None:
        return BRIEFING_UNAVAILABLE
    return text.strip()
