"""
Weekly Advancement Engine

Advances a game state by one week. Every time-based subsystem (boosts,
policies, departments, payroll and upkeep, projects, recruitment, the
financial market, strategy timers, promotion, market trends) is updated in
one pass over a private copy, so callers only ever see the state before or
after a whole week.

All randomness comes from the injected generator; the same seed and the
same input state always produce the same week.
"""

import copy
import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, List, Optional, Tuple

import numpy as np

from bonuses import Bonuses, boost_deltas, calculate_bonuses
from catalog import find_strategy
from config import CONFIG
from models import (
    ActivePolicy,
    BuildingType,
    CompanyTier,
    EventLogEntry,
    GameState,
    Sentiment,
    StrategyKind,
    TemporaryBoost,
    clamp,
    make_event,
    prepend_events,
)

logger = logging.getLogger(__name__)

COMPLETION_TITLES = {
    StrategyKind.GLOBAL: ("Global strategy complete", "The '{name}' strategy was completed successfully."),
    StrategyKind.IP: ("IP project complete", "The '{name}' project was completed successfully."),
    StrategyKind.RND: ("R&D project complete", "The '{name}' research was completed successfully."),
}


@dataclass
class WeeklyReport:
    """Itemized money flows and outcomes of one week."""

    week_ending: date
    employee_cost: int = 0
    maintenance_cost: int = 0
    subsidiary_cost: int = 0
    foundation_cost: int = 0
    project_cost: int = 0
    subsidiary_revenue: int = 0
    reputation_bonus: float = 0.0
    hires: int = 0
    lost_hires: int = 0
    hr_center_department: Optional[str] = None
    promoted_to: Optional[CompanyTier] = None

    @property
    def total_costs(self) -> int:
        return (
            self.employee_cost
            + self.maintenance_cost
            + self.subsidiary_cost
            + self.foundation_cost
            + self.project_cost
        )

    @property
    def total_revenue(self) -> int:
        return self.subsidiary_revenue

    @property
    def net(self) -> int:
        return self.total_revenue - self.total_costs


def advance_week(state: GameState, rng: np.random.Generator) -> GameState:
    """Return the state one week later; the input state is left untouched."""
    new_state, _ = run_week(state, rng)
    return new_state


def run_week(state: GameState, rng: np.random.Generator) -> Tuple[GameState, WeeklyReport]:
    """
    Execute one full simulation week.

    Follows strict phase ordering:
    1. Advance the calendar by seven days
    2. Count down temporary boosts, collect surviving efficiency deltas
    3. Compute bonuses from the pre-tick state and those deltas
    4. Count down policies (expired ones are logged and removed)
    5. Refresh department effective efficiency and KPI
    6. HR development center training proc
    7. Payroll, maintenance, subsidiary and foundation flows
    8. Project progress and project cost
    9. Recruitment pipelines, capped by office capacity
    10. Financial market random walk and portfolio revaluation
    11. Strategy / R&D countdowns and completions
    12. Promotion resolution
    13. Market trend countdown
    14. Assemble company totals and the event log

    Returns:
        (new_state, WeeklyReport)
    """
    new_state = copy.deepcopy(state)
    new_date = state.date + timedelta(days=CONFIG.time.days_per_week)
    report = WeeklyReport(week_ending=new_date)
    events: List[EventLogEntry] = []

    # Phases 2-3: boosts and bonuses
    new_state.temporary_boosts = _tick_boosts(new_state.temporary_boosts)
    deltas = boost_deltas(new_state.temporary_boosts)
    bonuses = calculate_bonuses(state, deltas)

    # Phase 4: policies
    new_state.active_policies, payroll_multiplier = _tick_policies(new_state.active_policies, new_date, events)

    # Phases 5-6: departments
    effective = _update_departments(new_state, bonuses, rng, report)

    # Phase 7: recurring costs and revenues
    _charge_upkeep(new_state, payroll_multiplier, report)

    # Phase 8: projects
    _advance_projects(new_state, effective, bonuses, report)

    # Phase 9: recruitment
    _resolve_recruitments(new_state, new_date, events, report)

    # Phase 10: financial market
    _walk_asset_prices(new_state, rng)

    # Phase 11: strategies
    for kind in StrategyKind:
        _tick_strategies(new_state, kind, new_date, events)

    # Phases 12-13: promotion and trend timers
    _resolve_promotion(new_state, new_date, events, report)
    _tick_market_trend(new_state)

    # Phase 14: final assembly
    company = new_state.company
    if new_date.year != state.date.year:
        company.revenue = 0
    company.revenue += report.subsidiary_revenue
    company.assets = state.company.assets + report.net
    company.employees = max(0, state.company.employees + report.hires)
    company.reputation = clamp(
        state.company.reputation + report.reputation_bonus,
        CONFIG.corporate.reputation_min,
        CONFIG.corporate.reputation_max,
    )
    new_state.date = new_date
    new_state.event_log = prepend_events(state.event_log, events)

    logger.debug(
        "Week ending %s: costs=%d revenue=%d hires=%d lost=%d",
        new_date, report.total_costs, report.total_revenue, report.hires, report.lost_hires,
    )
    return new_state, report


def _tick_boosts(boosts: List[TemporaryBoost]) -> List[TemporaryBoost]:
    survivors = []
    for boost in boosts:
        boost.weeks_remaining -= 1
        if boost.weeks_remaining > 0:
            survivors.append(boost)
    return survivors


def _tick_policies(
    policies: List[ActivePolicy],
    on: date,
    events: List[EventLogEntry],
) -> Tuple[List[ActivePolicy], float]:
    """Count down policies; returns survivors and the payroll multiplier they imply."""
    survivors = []
    payroll_multiplier = 1.0
    for policy in policies:
        policy.weeks_remaining -= 1
        if policy.weeks_remaining <= 0:
            events.append(make_event(on, "Policy expired", f"The '{policy.name}' policy has expired."))
            continue
        survivors.append(policy)
        if policy.policy_id == "salary_negotiation":
            payroll_multiplier += CONFIG.workforce.salary_negotiation_cost_increase
    return survivors, payroll_multiplier


def _update_departments(
    state: GameState,
    bonuses: Bonuses,
    rng: np.random.Generator,
    report: WeeklyReport,
) -> Dict[str, float]:
    """
    Refresh KPIs and apply the HR center proc.

    Stored efficiency stays the unboosted baseline; the boosted value only
    exists in the returned mapping (department name -> effective efficiency)
    for this week's derived rates.
    """
    cfg = CONFIG.workforce
    departments = state.departments
    effective: Dict[str, float] = {}
    if not departments:
        return effective

    noise = np.asarray(rng.uniform(-cfg.kpi_noise, cfg.kpi_noise, size=len(departments)), dtype=np.float64)
    for dept, jitter in zip(departments, noise):
        boosted = clamp(dept.efficiency + bonuses.efficiency_delta(dept.name), cfg.efficiency_min, cfg.efficiency_max)
        effective[dept.name] = boosted
        dept.kpi = float(clamp(round(boosted + float(jitter)), 0.0, 100.0))

    if state.owns_building_type(BuildingType.HR_CENTER) and rng.random() < cfg.hr_center_proc_chance:
        lucky = departments[int(rng.integers(0, len(departments)))]
        lucky.efficiency = clamp(lucky.efficiency + cfg.hr_center_efficiency_gain, cfg.efficiency_min, cfg.efficiency_max)
        effective[lucky.name] = clamp(
            lucky.efficiency + bonuses.efficiency_delta(lucky.name), cfg.efficiency_min, cfg.efficiency_max
        )
        report.hr_center_department = lucky.name

    return effective


def _charge_upkeep(state: GameState, payroll_multiplier: float, report: WeeklyReport) -> None:
    report.employee_cost = int(round(
        state.company.employees * CONFIG.workforce.weekly_salary_per_employee * payroll_multiplier
    ))
    report.maintenance_cost = sum(b.maintenance_fee for b in state.buildings)
    report.subsidiary_cost = sum(s.maintenance_fee for s in state.subsidiaries)
    report.subsidiary_revenue = sum(s.weekly_revenue for s in state.subsidiaries)
    report.foundation_cost = sum(f.maintenance_fee for f in state.foundations)
    report.reputation_bonus = sum(f.reputation_bonus for f in state.foundations)


def weekly_progress_rate(state: GameState, effective: Dict[str, float], bonuses: Bonuses) -> float:
    """Progress points per week shared by every project in development."""
    cfg = CONFIG.development
    dev = state.department(cfg.development_department)
    if dev is None:
        return cfg.no_department_progress * bonuses.dev_speed_multiplier

    efficiency = effective.get(dev.name, dev.efficiency)
    size_factor = cfg.base_progress_per_week + dev.employees * cfg.progress_per_developer
    efficiency_factor = 1 + (efficiency - cfg.efficiency_pivot) / cfg.efficiency_divisor
    return max(0.0, size_factor * efficiency_factor * bonuses.dev_speed_multiplier)


def _advance_projects(
    state: GameState,
    effective: Dict[str, float],
    bonuses: Bonuses,
    report: WeeklyReport,
) -> None:
    rate = weekly_progress_rate(state, effective, bonuses)
    if rate <= 0:
        return

    max_progress = CONFIG.development.max_progress
    weeks_to_complete = max_progress / rate
    for project in state.projects:
        if not project.in_development or project.is_complete:
            continue
        project.progress = min(max_progress, project.progress + rate)
        report.project_cost += int(project.budget / weeks_to_complete)


def _resolve_recruitments(
    state: GameState,
    on: date,
    events: List[EventLogEntry],
    report: WeeklyReport,
) -> None:
    """Place finished hires while office space lasts; the rest are lost."""
    available = max(0, state.calculate_capacity() - state.company.employees)
    ongoing = []
    for recruitment in state.recruitments:
        recruitment.weeks_remaining -= 1
        if recruitment.weeks_remaining > 0:
            ongoing.append(recruitment)
            continue

        for dept_name, count in recruitment.hires.items():
            dept = state.department(dept_name)
            if dept is None or count <= 0:
                report.lost_hires += max(0, count)
                continue
            placed = min(count, available)
            dept.employees += placed
            available -= placed
            report.hires += placed
            report.lost_hires += count - placed
    state.recruitments = ongoing

    if report.hires > 0:
        events.append(make_event(on, "Hiring complete",
                                 f"{report.hires} new employees joined their departments.",
                                 Sentiment.POSITIVE))
    if report.lost_hires > 0:
        events.append(make_event(on, "Hires lost",
                                 f"{report.lost_hires} candidates were lost for lack of office space.",
                                 Sentiment.NEGATIVE))


def _walk_asset_prices(state: GameState, rng: np.random.Generator) -> None:
    cfg = CONFIG.market
    assets = state.financial_assets
    if assets:
        prices = np.array([a.price for a in assets], dtype=np.float64)
        volatility = np.array([a.volatility for a in assets], dtype=np.float64)
        shocks = np.asarray(rng.uniform(-1.0, 1.0, size=len(assets)), dtype=np.float64)
        new_prices = np.maximum(cfg.min_asset_price, prices * (1.0 + shocks * volatility * cfg.volatility_scale))
        for asset, price in zip(assets, new_prices):
            asset.price = float(price)
    state.portfolio.revalue(assets)


def _tick_strategies(state: GameState, kind: StrategyKind, on: date, events: List[EventLogEntry]) -> None:
    projects = state.strategy_projects(kind)
    completed = state.completed_strategies(kind)
    title, template = COMPLETION_TITLES[kind]

    ongoing = []
    for project in projects:
        project.weeks_remaining -= 1
        if project.weeks_remaining > 0:
            ongoing.append(project)
            continue

        events.append(make_event(on, title, template.format(name=project.name), Sentiment.POSITIVE))
        definition = find_strategy(kind, project.strategy_id)
        if definition is None:
            logger.debug("Dropping completed %s strategy with unknown id %r", kind.value, project.strategy_id)
            continue
        if definition.id not in completed:
            completed.append(definition.id)
    projects[:] = ongoing


def _resolve_promotion(state: GameState, on: date, events: List[EventLogEntry], report: WeeklyReport) -> None:
    application = state.promotion_application
    if application is None:
        return

    application.weeks_remaining -= 1
    if application.weeks_remaining > 0:
        return

    next_tier = state.company.tier.next_tier
    if application.success and next_tier is not None:
        state.company.tier = next_tier
        report.promoted_to = next_tier
        events.append(make_event(on, "Promotion approved!",
                                 f"The company has grown into the {next_tier.value} tier!",
                                 Sentiment.POSITIVE))
    else:
        events.append(make_event(on, "Promotion denied",
                                 "The promotion review was not passed. Check the requirements again.",
                                 Sentiment.NEGATIVE))
    state.promotion_application = None


def _tick_market_trend(state: GameState) -> None:
    trend = state.market_trend
    if trend is None:
        return
    trend.weeks_remaining -= 1
    if trend.weeks_remaining <= 0:
        state.market_trend = None
