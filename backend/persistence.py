"""
Save / Load

Converts a GameState to and from plain JSON-compatible dicts. Loading is
forgiving: older or partial saves are migrated in one place (missing
collections default to empty, absent departments and buildings keys fall back to
the new-game ones) and derived values are recomputed rather than trusted.
"""

import json
import logging
from dataclasses import asdict
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import numpy as np

from catalog import FINANCIAL_ASSETS, create_initial_state
from config import CONFIG
from models import (
    ActivePolicy,
    AssetCategory,
    AssetHolding,
    Building,
    BuildingType,
    Company,
    CompanyTier,
    Department,
    EventLogEntry,
    FinancialAsset,
    Foundation,
    GameProject,
    GameState,
    MarketTrend,
    Portfolio,
    ProjectStatus,
    PromotionApplication,
    Recruitment,
    Review,
    Sentiment,
    StrategyProject,
    Subsidiary,
    TemporaryBoost,
    make_rng,
    new_id,
)

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def to_jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: to_jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(item) for item in value]
    return value


def state_to_dict(state: GameState) -> Dict[str, Any]:
    """JSON-compatible dict: enums as their values, dates as ISO strings."""
    return to_jsonable(asdict(state))


def _parse_date(value: Optional[str]) -> Optional[date]:
    return date.fromisoformat(value) if value else None


def _company(data: Dict[str, Any]) -> Company:
    return Company(
        name=data.get("name", "New Game Studio"),
        tier=CompanyTier(data.get("tier", CompanyTier.SMALL_MEDIUM.value)),
        assets=int(data.get("assets", 0)),
        revenue=int(data.get("revenue", 0)),
        debt=int(data.get("debt", 0)),
        reputation=float(data.get("reputation", 50.0)),
        employees=int(data.get("employees", 0)),
        headquarters_building_id=data.get("headquarters_building_id", ""),
    )


def _project(data: Dict[str, Any], fallback_date: date) -> GameProject:
    return GameProject(
        id=data["id"],
        name=data["name"],
        genre=data.get("genre", ""),
        platform=data.get("platform", ""),
        target_country=data.get("target_country", ""),
        budget=int(data.get("budget", 0)),
        expected_revenue=int(data.get("expected_revenue", 0)),
        start_date=_parse_date(data.get("start_date")) or fallback_date,
        progress=float(data.get("progress", 0.0)),
        release_date=_parse_date(data.get("release_date")),
        status=ProjectStatus(data.get("status", ProjectStatus.IN_DEVELOPMENT.value)),
    )


def _building(data: Dict[str, Any]) -> Building:
    # Saves without instance ids reuse the catalog id for both
    catalog_id = data.get("catalog_id") or data["id"]
    return Building(
        id=data.get("id") or f"{catalog_id}-{new_id()[:8]}",
        catalog_id=catalog_id,
        name=data["name"],
        type=BuildingType(data["type"]),
        cost=int(data["cost"]),
        maintenance_fee=int(data.get("maintenance_fee", 0)),
        employee_capacity=int(data.get("employee_capacity", 0)),
        effects=list(data.get("effects", [])),
        is_unique=bool(data.get("is_unique", False)),
    )


def _strategy_projects(items: List[Dict[str, Any]]) -> List[StrategyProject]:
    projects = []
    for item in items:
        total = int(item.get("total_weeks", item["weeks_remaining"]))
        projects.append(StrategyProject(
            id=item.get("id") or new_id(),
            strategy_id=item["strategy_id"],
            name=item.get("name", item["strategy_id"]),
            weeks_remaining=int(item["weeks_remaining"]),
            total_weeks=total,
        ))
    return projects


def state_from_dict(data: Dict[str, Any], rng: Optional[np.random.Generator] = None) -> GameState:
    """
    Rebuild a GameState from a saved dict, migrating older shapes.

    Args:
        data: Output of state_to_dict (possibly from an older version)
        rng: Random source used only when default departments must be created

    Returns:
        GameState with capacity, portfolio value and headquarters recomputed
    """
    current = date.fromisoformat(data["date"])
    defaults: Optional[GameState] = None

    def new_game() -> GameState:
        nonlocal defaults
        if defaults is None:
            defaults = create_initial_state(rng if rng is not None else make_rng())
        return defaults

    departments = [
        Department(
            name=d["name"],
            employees=int(d.get("employees", 0)),
            efficiency=float(d.get("efficiency", 50.0)),
            kpi=float(d.get("kpi", d.get("efficiency", 50.0))),
        )
        for d in data.get("departments") or []
    ]
    if "departments" not in data:
        logger.info("Save predates departments; using the new-game departments")
        departments = new_game().departments

    buildings = [_building(b) for b in data.get("buildings") or []]
    if "buildings" not in data:
        logger.info("Save predates buildings; using the new-game office")
        buildings = new_game().buildings

    saved_assets = data.get("financial_assets") or []
    if saved_assets:
        financial_assets = [
            FinancialAsset(a["id"], a["name"], AssetCategory(a["category"]), float(a["price"]), float(a["volatility"]))
            for a in saved_assets
        ]
    else:
        financial_assets = [
            FinancialAsset(a.id, a.name, a.category, a.price, a.volatility) for a in FINANCIAL_ASSETS
        ]

    portfolio_data = data.get("portfolio") or {}
    portfolio = Portfolio(holdings=[
        AssetHolding(h["asset_id"], int(h["quantity"]), float(h.get("average_price", 0.0)))
        for h in portfolio_data.get("holdings", [])
    ])

    promotion = data.get("promotion_application")
    trend = data.get("market_trend")

    state = GameState(
        company=_company(data.get("company") or {}),
        date=current,
        departments=departments,
        projects=[_project(p, current) for p in data.get("projects") or []],
        reviews=[
            Review(r["project_id"], float(r["expert_score"]), float(r["user_rating"]), int(r["overall_score"]))
            for r in data.get("reviews") or []
        ],
        buildings=buildings,
        financial_assets=financial_assets,
        portfolio=portfolio,
        recruitments=[
            Recruitment(r.get("id") or new_id(), {k: int(v) for k, v in r["hires"].items()}, int(r["weeks_remaining"]))
            for r in data.get("recruitments") or []
        ],
        global_strategies=_strategy_projects(data.get("global_strategies") or []),
        ip_strategies=_strategy_projects(data.get("ip_strategies") or []),
        rnd_strategies=_strategy_projects(data.get("rnd_strategies") or []),
        completed_global_strategies=list(data.get("completed_global_strategies") or []),
        completed_ip_strategies=list(data.get("completed_ip_strategies") or []),
        completed_rnd_strategies=list(data.get("completed_rnd_strategies") or []),
        active_policies=[
            ActivePolicy(p["policy_id"], p.get("name", p["policy_id"]), int(p["weeks_remaining"]))
            for p in data.get("active_policies") or []
        ],
        subsidiaries=[Subsidiary(**s) for s in data.get("subsidiaries") or []],
        foundations=[Foundation(**f) for f in data.get("foundations") or []],
        temporary_boosts=[
            TemporaryBoost(b["department_name"], float(b["amount"]), int(b["weeks_remaining"]),
                           b.get("kind", "efficiency"))
            for b in data.get("temporary_boosts") or []
        ],
        promotion_application=(
            PromotionApplication(int(promotion["weeks_remaining"]), bool(promotion["success"]))
            if promotion else None
        ),
        market_trend=MarketTrend(trend["genre"], trend["direction"], int(trend["weeks_remaining"])) if trend else None,
        event_log=[
            EventLogEntry(
                id=e.get("id") or new_id(),
                date=_parse_date(e.get("date")) or current,
                title=e["title"],
                description=e.get("description", ""),
                sentiment=Sentiment(e.get("sentiment", Sentiment.NEUTRAL.value)),
                is_news=bool(e.get("is_news", False)),
            )
            for e in (data.get("event_log") or [])[:CONFIG.time.event_log_limit]
        ],
    )

    # Derived values are never trusted from disk
    company = state.company
    company.employee_capacity = state.calculate_capacity()
    state.portfolio.revalue(state.financial_assets)
    headquarters = state.building(company.headquarters_building_id)
    if headquarters is None or not headquarters.is_office:
        offices = state.office_buildings()
        company.headquarters_building_id = offices[0].id if offices else ""
    return state


def save_state(state: GameState, path: PathLike) -> None:
    Path(path).write_text(json.dumps(state_to_dict(state), indent=2), encoding="utf-8")
    logger.info("Saved game state for %s to %s", state.date, path)


def load_state(path: PathLike, rng: Optional[np.random.Generator] = None) -> GameState:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return state_from_dict(data, rng)
