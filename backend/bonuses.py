"""
Bonus Calculator

Derives the aggregate multipliers the rest of the simulation consumes from
owned buildings, active policies, completed R&D and temporary boosts.
Nothing here is persisted and nothing here draws random numbers: the same
inputs always give the same Bonuses, which matters because the weekly tick
and release scoring call it with different boost snapshots.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable

from config import CONFIG
from models import BuildingType, GameState, TemporaryBoost


@dataclass(frozen=True)
class Bonuses:
    dev_speed_multiplier: float = 1.0
    review_score_bonus: float = 0.0
    rnd_speed_multiplier: float = 1.0
    department_efficiency_deltas: Dict[str, float] = field(default_factory=dict)

    def efficiency_delta(self, department_name: str) -> float:
        return self.department_efficiency_deltas.get(department_name, 0.0)


def boost_deltas(boosts: Iterable[TemporaryBoost]) -> Dict[str, float]:
    """Sum active efficiency boosts per department (magnitudes stack)."""
    deltas: Dict[str, float] = {}
    for boost in boosts:
        if boost.kind != "efficiency" or boost.weeks_remaining <= 0:
            continue
        deltas[boost.department_name] = deltas.get(boost.department_name, 0.0) + boost.amount
    return deltas


def calculate_bonuses(state: GameState, department_boosts: Dict[str, float]) -> Bonuses:
    """
    Compute bonuses for the given state.

    Args:
        state: Current game state
        department_boosts: department name -> efficiency delta from live boosts

    Returns:
        Bonuses; deltas only cover departments that currently exist
    """
    cfg = CONFIG.bonuses
    live_departments = [d.name for d in state.departments]

    dev_speed = 1.0
    rnd_speed = 1.0
    review_score = 0.0
    deltas = {name: department_boosts[name] for name in live_departments if name in department_boosts}

    # Buildings
    for building in state.buildings:
        if building.type == BuildingType.LAB:
            rnd_speed += cfg.research_lab_rnd_speed

    # Policies
    for policy in state.active_policies:
        if policy.policy_id == "ai_dev":
            dev_speed += cfg.ai_dev_policy_speed
        elif policy.policy_id == "salary_negotiation":
            for name in live_departments:
                deltas[name] = deltas.get(name, 0.0) + CONFIG.workforce.salary_negotiation_efficiency_delta

    # Completed R&D
    for strategy_id in state.completed_rnd_strategies:
        dev_speed += cfg.rnd_dev_speed.get(strategy_id, 0.0)

    return Bonuses(
        dev_speed_multiplier=dev_speed,
        review_score_bonus=review_score,
        rnd_speed_multiplier=rnd_speed,
        department_efficiency_deltas=deltas,
    )
