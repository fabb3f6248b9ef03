"""
Player Actions

The driver-facing action surface (one pydantic model per action, discriminated
by ``type``) and one handler per action. Every handler is a pure function of
(state, action, rng) returning a new GameState:

- accepted actions work on a deep copy of the state
- rejected actions return the original state plus one negative log entry

Handlers never raise for business conditions. Malformed input is caught
earlier, when parse_action validates the payload.
"""

import copy
import logging
import math
from dataclasses import replace
from typing import Annotated, Callable, Dict, Literal, Optional, Union

import numpy as np
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel

from bonuses import Bonuses, boost_deltas, calculate_bonuses
from catalog import (
    BUILDINGS_BY_ID,
    FOUNDATIONS_BY_ID,
    POLICIES_BY_ID,
    SUBSIDIARIES_BY_ID,
    find_strategy,
    new_building,
)
from config import CONFIG
from engine import advance_week
from models import (
    ActivePolicy,
    AssetHolding,
    BuildingType,
    Department,
    GameProject,
    GameState,
    MarketTrend,
    ProjectStatus,
    PromotionApplication,
    Recruitment,
    Review,
    Sentiment,
    StrategyKind,
    StrategyProject,
    TemporaryBoost,
    clamp,
    make_event,
    make_rng,
    new_id,
    prepend_events,
)

logger = logging.getLogger(__name__)


# ---------- Payload models ----------

class ActionModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class MarketTrendPayload(ActionModel):
    genre: str
    direction: Literal["up", "down"] = Field(validation_alias=AliasChoices("direction", "trend"))


class EventPayload(ActionModel):
    """What the event oracle hands back: a log entry and an optional trend."""
    title: str
    description: str
    sentiment: Sentiment = Field(default=Sentiment.NEUTRAL, validation_alias=AliasChoices("sentiment", "type"))
    is_news: bool = False
    market_trend: Optional[MarketTrendPayload] = None


class AdvanceWeek(ActionModel):
    type: Literal["ADVANCE_WEEK"] = "ADVANCE_WEEK"


class AddEvent(ActionModel):
    type: Literal["ADD_EVENT"] = "ADD_EVENT"
    event: EventPayload


class CreateProject(ActionModel):
    type: Literal["CREATE_PROJECT"] = "CREATE_PROJECT"
    name: str
    genre: str
    platform: str
    budget: int
    target_country: str = "Domestic"


class ReleaseProject(ActionModel):
    type: Literal["RELEASE_PROJECT"] = "RELEASE_PROJECT"
    project_id: str


class CreateDepartment(ActionModel):
    type: Literal["CREATE_DEPARTMENT"] = "CREATE_DEPARTMENT"
    name: str


class AbolishDepartment(ActionModel):
    type: Literal["ABOLISH_DEPARTMENT"] = "ABOLISH_DEPARTMENT"
    name: str


class StartRecruitment(ActionModel):
    type: Literal["START_RECRUITMENT"] = "START_RECRUITMENT"
    hires: Dict[str, int]


class BuyBuilding(ActionModel):
    type: Literal["BUY_BUILDING"] = "BUY_BUILDING"
    building_id: str  # catalog id


class SellBuilding(ActionModel):
    type: Literal["SELL_BUILDING"] = "SELL_BUILDING"
    building_id: str  # owned instance id


class MoveHeadquarters(ActionModel):
    type: Literal["MOVE_HEADQUARTERS"] = "MOVE_HEADQUARTERS"
    building_id: str


class BuyAsset(ActionModel):
    type: Literal["BUY_ASSET"] = "BUY_ASSET"
    asset_id: str
    quantity: int


class SellAsset(ActionModel):
    type: Literal["SELL_ASSET"] = "SELL_ASSET"
    asset_id: str
    quantity: int


class StartGlobalStrategy(ActionModel):
    type: Literal["START_GLOBAL_STRATEGY"] = "START_GLOBAL_STRATEGY"
    strategy_id: str


class StartIpStrategy(ActionModel):
    type: Literal["START_IP_STRATEGY"] = "START_IP_STRATEGY"
    strategy_id: str


class StartRndStrategy(ActionModel):
    type: Literal["START_RND_STRATEGY"] = "START_RND_STRATEGY"
    strategy_id: str


class StartPolicy(ActionModel):
    type: Literal["START_POLICY"] = "START_POLICY"
    policy_id: str


class EstablishSubsidiary(ActionModel):
    type: Literal["ESTABLISH_SUBSIDIARY"] = "ESTABLISH_SUBSIDIARY"
    subsidiary_id: str


class EstablishFoundation(ActionModel):
    type: Literal["ESTABLISH_FOUNDATION"] = "ESTABLISH_FOUNDATION"
    foundation_id: str


class ApplyForPromotion(ActionModel):
    type: Literal["APPLY_FOR_PROMOTION"] = "APPLY_FOR_PROMOTION"


class GiveBonus(ActionModel):
    type: Literal["GIVE_BONUS"] = "GIVE_BONUS"
    department_name: str
    amount: int


Action = Annotated[
    Union[
        AdvanceWeek, AddEvent, CreateProject, ReleaseProject, CreateDepartment, AbolishDepartment,
        StartRecruitment, BuyBuilding, SellBuilding, MoveHeadquarters, BuyAsset, SellAsset,
        StartGlobalStrategy, StartIpStrategy, StartRndStrategy, StartPolicy,
        EstablishSubsidiary, EstablishFoundation, ApplyForPromotion, GiveBonus,
    ],
    Field(discriminator="type"),
]

ACTION_ADAPTER: TypeAdapter = TypeAdapter(Action)


def parse_action(data: dict) -> Action:
    """Validate a JSON-style dict (camelCase or snake_case keys) into an action model."""
    return ACTION_ADAPTER.validate_python(data)


# ---------- Helpers ----------

def _reject(state: GameState, title: str, description: str) -> GameState:
    logger.info("Action rejected: %s (%s)", title, description)
    entry = make_event(state.date, title, description, Sentiment.NEGATIVE)
    return replace(state, event_log=prepend_events(state.event_log, [entry]))


def _log(state: GameState, title: str, description: str, sentiment: Sentiment = Sentiment.NEUTRAL) -> None:
    state.event_log = prepend_events(state.event_log, [make_event(state.date, title, description, sentiment)])


def _can_afford(state: GameState, cost: int) -> bool:
    return state.company.assets >= cost


def _effective_efficiency(state: GameState, name: str, bonuses: Bonuses) -> Optional[float]:
    dept = state.department(name)
    if dept is None:
        return None
    cfg = CONFIG.workforce
    return clamp(dept.efficiency + bonuses.efficiency_delta(name), cfg.efficiency_min, cfg.efficiency_max)


# ---------- Handlers ----------

def handle_advance_week(state: GameState, action: AdvanceWeek, rng: np.random.Generator) -> GameState:
    return advance_week(state, rng)


def handle_add_event(state: GameState, action: AddEvent, rng: np.random.Generator) -> GameState:
    payload = action.event
    entry = make_event(state.date, payload.title, payload.description, payload.sentiment, payload.is_news)
    market_trend = state.market_trend
    if payload.market_trend is not None:
        market_trend = MarketTrend(
            genre=payload.market_trend.genre,
            direction=payload.market_trend.direction,
            weeks_remaining=CONFIG.market.trend_duration_weeks,
        )
    return replace(state, event_log=prepend_events(state.event_log, [entry]), market_trend=market_trend)


def handle_create_project(state: GameState, action: CreateProject, rng: np.random.Generator) -> GameState:
    name = action.name.strip()
    if not name:
        return _reject(state, "Project not started", "A project needs a name.")
    if action.budget < 0:
        return _reject(state, "Project not started", f"Invalid budget for '{name}'.")

    new_state = copy.deepcopy(state)
    new_state.projects.append(GameProject(
        id=f"proj_{new_id()}",
        name=name,
        genre=action.genre,
        platform=action.platform,
        target_country=action.target_country,
        budget=action.budget,
        expected_revenue=action.budget * CONFIG.development.expected_revenue_multiplier,
        start_date=state.date,
    ))
    _log(new_state, "New project started", f"Development of '{name}' has begun. Budget: {action.budget:,}")
    return new_state


def release_review_bonus(state: GameState, project: GameProject, bonuses: Bonuses) -> float:
    """Review score bonus at release time, before the random base score is added."""
    cfg = CONFIG.development
    bonus = bonuses.review_score_bonus

    dev = _effective_efficiency(state, cfg.development_department, bonuses)
    qa = _effective_efficiency(state, cfg.qa_department, bonuses)
    bonus += ((dev - cfg.efficiency_pivot) if dev is not None else cfg.missing_department_penalty) / cfg.dev_efficiency_divisor
    bonus += ((qa - cfg.efficiency_pivot) if qa is not None else cfg.missing_department_penalty) / cfg.qa_efficiency_divisor

    if state.owns_building_type(BuildingType.MOTION_CAPTURE):
        bonus += cfg.motion_capture_review_bonus
    if state.has_active_policy("qa_reinforcement"):
        bonus += cfg.qa_policy_review_bonus
    for strategy_id in state.completed_rnd_strategies:
        bonus += cfg.rnd_review_bonus.get(strategy_id, 0.0)

    trend = state.market_trend
    if trend is not None and trend.genre == project.genre and trend.direction == "up":
        bonus += cfg.trend_up_review_bonus
    return bonus


def handle_release_project(state: GameState, action: ReleaseProject, rng: np.random.Generator) -> GameState:
    cfg = CONFIG.development
    project = state.project(action.project_id)
    if project is None:
        return _reject(state, "Release failed", f"No project with id '{action.project_id}'.")
    if project.status == ProjectStatus.RELEASED:
        return _reject(state, "Release failed", f"'{project.name}' has already been released.")
    if not project.is_complete:
        return _reject(state, "Release failed", f"'{project.name}' is only {project.progress:.0f}% complete.")

    bonuses = calculate_bonuses(state, boost_deltas(state.temporary_boosts))
    review_bonus = release_review_bonus(state, project, bonuses)

    base_score = cfg.review_base_score + float(rng.uniform(0.0, cfg.review_score_spread))
    expert_score = clamp(math.floor(base_score + review_bonus), 0, 100)
    user_rating = clamp(
        expert_score / 10 + cfg.user_rating_offset + float(rng.uniform(0.0, cfg.user_rating_spread)), 0.0, 10.0
    )
    overall_score = math.floor((expert_score + user_rating * 10) / 2)

    marketing = _effective_efficiency(state, cfg.marketing_department, bonuses)
    marketing_multiplier = 1 + (marketing - cfg.efficiency_pivot) / cfg.marketing_efficiency_divisor if marketing is not None else 1.0
    revenue_multiplier = max(cfg.min_revenue_multiplier, overall_score / cfg.break_even_score)
    revenue = math.floor(project.expected_revenue * revenue_multiplier * marketing_multiplier)
    reputation_change = math.floor((overall_score - cfg.reputation_pivot_score) / cfg.reputation_score_divisor)

    new_state = copy.deepcopy(state)
    released = new_state.project(project.id)
    released.status = ProjectStatus.RELEASED
    released.release_date = state.date
    new_state.reviews.append(Review(
        project_id=project.id,
        expert_score=expert_score,
        user_rating=user_rating,
        overall_score=overall_score,
    ))
    company = new_state.company
    company.assets += revenue
    company.revenue += revenue
    company.reputation = clamp(
        company.reputation + reputation_change, CONFIG.corporate.reputation_min, CONFIG.corporate.reputation_max
    )
    _log(new_state, f"New release: {project.name}",
         f"{project.name} launched and earned {revenue:,} in revenue. Reputation changes by {reputation_change}.",
         Sentiment.POSITIVE if revenue > project.budget else Sentiment.NEGATIVE)
    return new_state


def handle_create_department(state: GameState, action: CreateDepartment, rng: np.random.Generator) -> GameState:
    name = action.name.strip()
    if not name:
        return _reject(state, "Department not created", "A department needs a name.")
    if state.department(name) is not None:
        return _reject(state, "Department not created", f"A '{name}' department already exists.")

    new_state = copy.deepcopy(state)
    efficiency = float(rng.integers(0, 101))
    new_state.departments.append(Department(name=name, employees=0, efficiency=efficiency, kpi=efficiency))
    _log(new_state, "Department created", f"The {name} department has been set up.")
    return new_state


def handle_abolish_department(state: GameState, action: AbolishDepartment, rng: np.random.Generator) -> GameState:
    dept = state.department(action.name)
    if dept is None:
        return _reject(state, "Department not abolished", f"There is no '{action.name}' department.")

    new_state = copy.deepcopy(state)
    new_state.departments = [d for d in new_state.departments if d.name != dept.name]
    new_state.company.employees = max(0, new_state.company.employees - dept.employees)
    _log(new_state, "Department abolished",
         f"The {dept.name} department was abolished and {dept.employees} employees left the company.",
         Sentiment.NEGATIVE)
    return new_state


def handle_start_recruitment(state: GameState, action: StartRecruitment, rng: np.random.Generator) -> GameState:
    hires = {name: count for name, count in action.hires.items() if count != 0}
    if any(count < 0 for count in hires.values()):
        return _reject(state, "Recruitment failed", "Hire counts cannot be negative.")
    total = sum(hires.values())
    if total <= 0:
        return _reject(state, "Recruitment failed", "No positions to fill.")
    unknown = [name for name in hires if state.department(name) is None]
    if unknown:
        return _reject(state, "Recruitment failed", f"Unknown departments: {', '.join(sorted(unknown))}.")
    cost = total * CONFIG.workforce.recruitment_cost_per_hire
    if not _can_afford(state, cost):
        return _reject(state, "Recruitment failed", "Not enough funds to cover recruiting costs.")

    new_state = copy.deepcopy(state)
    new_state.company.assets -= cost
    new_state.recruitments.append(Recruitment(
        id=new_id(), hires=hires, weeks_remaining=CONFIG.workforce.recruitment_weeks,
    ))
    _log(new_state, "Recruitment opened", f"Hiring {total} people. Cost: {cost:,}")
    return new_state


def handle_buy_building(state: GameState, action: BuyBuilding, rng: np.random.Generator) -> GameState:
    template = BUILDINGS_BY_ID.get(action.building_id)
    if template is None:
        return _reject(state, "Purchase failed", f"Unknown building '{action.building_id}'.")
    if template.is_unique and any(b.catalog_id == template.catalog_id for b in state.buildings):
        return _reject(state, "Purchase failed", f"The company already owns a {template.name}.")
    if not _can_afford(state, template.cost):
        return _reject(state, "Purchase failed", f"Not enough funds to buy {template.name}.")

    new_state = copy.deepcopy(state)
    building = new_building(template.catalog_id)
    new_state.buildings.append(building)
    company = new_state.company
    company.assets -= building.cost
    company.employee_capacity = new_state.calculate_capacity()
    if building.is_office and not company.headquarters_building_id:
        company.headquarters_building_id = building.id
    _log(new_state, "Property acquired", f"Bought {building.name} for {building.cost:,}.")
    return new_state


def handle_sell_building(state: GameState, action: SellBuilding, rng: np.random.Generator) -> GameState:
    building = state.building(action.building_id)
    if building is None:
        return _reject(state, "Sale failed", f"The company does not own building '{action.building_id}'.")
    if building.is_office and len(state.office_buildings()) == 1:
        return _reject(state, "Sale failed", "The company's last remaining office cannot be sold.")

    new_state = copy.deepcopy(state)
    company = new_state.company
    proceeds = int(building.cost * CONFIG.corporate.building_resale_rate)
    new_state.buildings = [b for b in new_state.buildings if b.id != building.id]
    company.assets += proceeds
    company.employee_capacity = new_state.calculate_capacity()

    events = [make_event(state.date, "Property sold", f"Sold {building.name} for {proceeds:,}.")]
    shortfall = company.employees - company.employee_capacity
    if shortfall > 0:
        fired = 0
        while fired < shortfall:
            staffed = [d for d in new_state.departments if d.employees > 0]
            if not staffed:
                break
            staffed[int(rng.integers(0, len(staffed)))].employees -= 1
            fired += 1
        company.employees = max(0, company.employees - shortfall)
        events.insert(0, make_event(state.date, "Restructuring",
                                    f"{shortfall} employees were laid off for lack of office space.",
                                    Sentiment.NEGATIVE))

    if building.id == company.headquarters_building_id:
        offices = new_state.office_buildings()
        company.headquarters_building_id = offices[0].id if offices else ""

    new_state.event_log = prepend_events(new_state.event_log, events)
    return new_state


def handle_move_headquarters(state: GameState, action: MoveHeadquarters, rng: np.random.Generator) -> GameState:
    target = state.building(action.building_id)
    if target is None or not target.is_office:
        return _reject(state, "Move failed", "Headquarters must be an owned office building.")

    new_state = copy.deepcopy(state)
    new_state.company.headquarters_building_id = target.id
    _log(new_state, "Headquarters moved", f"Headquarters moved to {target.name}.")
    return new_state


def handle_buy_asset(state: GameState, action: BuyAsset, rng: np.random.Generator) -> GameState:
    if action.quantity <= 0:
        return _reject(state, "Trade failed", "Quantity must be positive.")
    asset = state.financial_asset(action.asset_id)
    if asset is None:
        return _reject(state, "Trade failed", f"Unknown asset '{action.asset_id}'.")
    cost = int(round(asset.price * action.quantity))
    if not _can_afford(state, cost):
        return _reject(state, "Trade failed", f"Not enough funds to buy {action.quantity} x {asset.name}.")

    new_state = copy.deepcopy(state)
    portfolio = new_state.portfolio
    holding = portfolio.holding(asset.id)
    if holding is None:
        portfolio.holdings.append(AssetHolding(asset_id=asset.id, quantity=action.quantity, average_price=asset.price))
    else:
        total_quantity = holding.quantity + action.quantity
        holding.average_price = (holding.average_price * holding.quantity + cost) / total_quantity
        holding.quantity = total_quantity
    new_state.company.assets -= cost
    portfolio.revalue(new_state.financial_assets)
    _log(new_state, "Asset purchased", f"Bought {action.quantity} x {asset.name} for {cost:,}.")
    return new_state


def handle_sell_asset(state: GameState, action: SellAsset, rng: np.random.Generator) -> GameState:
    if action.quantity <= 0:
        return _reject(state, "Trade failed", "Quantity must be positive.")
    asset = state.financial_asset(action.asset_id)
    if asset is None:
        return _reject(state, "Trade failed", f"Unknown asset '{action.asset_id}'.")
    holding = state.portfolio.holding(asset.id)
    if holding is None or holding.quantity < action.quantity:
        return _reject(state, "Trade failed", f"Not enough {asset.name} held to sell {action.quantity}.")

    new_state = copy.deepcopy(state)
    portfolio = new_state.portfolio
    proceeds = int(round(asset.price * action.quantity))
    remaining = holding.quantity - action.quantity
    if remaining > 0:
        portfolio.holding(asset.id).quantity = remaining
    else:
        portfolio.holdings = [h for h in portfolio.holdings if h.asset_id != asset.id]
    new_state.company.assets += proceeds
    portfolio.revalue(new_state.financial_assets)
    _log(new_state, "Asset sold", f"Sold {action.quantity} x {asset.name} for {proceeds:,}.")
    return new_state


STRATEGY_LABELS = {
    StrategyKind.GLOBAL: ("Global strategy started", "Strategy not started"),
    StrategyKind.IP: ("IP project started", "IP project not started"),
    StrategyKind.RND: ("R&D project started", "Research not started"),
}


def _start_strategy(state: GameState, kind: StrategyKind, strategy_id: str) -> GameState:
    started_title, failed_title = STRATEGY_LABELS[kind]
    definition = find_strategy(kind, strategy_id)
    if definition is None:
        return _reject(state, failed_title, f"Unknown {kind.value} strategy '{strategy_id}'.")
    if any(p.strategy_id == definition.id for p in state.strategy_projects(kind)):
        return _reject(state, failed_title, f"'{definition.name}' is already in progress.")
    if definition.id in state.completed_strategies(kind):
        return _reject(state, failed_title, f"'{definition.name}' has already been completed.")
    if not _can_afford(state, definition.cost):
        return _reject(state, failed_title, f"Not enough funds to start '{definition.name}'.")

    new_state = copy.deepcopy(state)
    new_state.company.assets -= definition.cost
    new_state.strategy_projects(kind).append(StrategyProject(
        id=new_id(),
        strategy_id=definition.id,
        name=definition.name,
        weeks_remaining=definition.duration,
        total_weeks=definition.duration,
    ))
    _log(new_state, started_title,
         f"'{definition.name}' started. Cost: {definition.cost:,}, duration: {definition.duration} weeks.")
    return new_state


def handle_start_global_strategy(state: GameState, action: StartGlobalStrategy, rng: np.random.Generator) -> GameState:
    return _start_strategy(state, StrategyKind.GLOBAL, action.strategy_id)


def handle_start_ip_strategy(state: GameState, action: StartIpStrategy, rng: np.random.Generator) -> GameState:
    return _start_strategy(state, StrategyKind.IP, action.strategy_id)


def handle_start_rnd_strategy(state: GameState, action: StartRndStrategy, rng: np.random.Generator) -> GameState:
    return _start_strategy(state, StrategyKind.RND, action.strategy_id)


def handle_start_policy(state: GameState, action: StartPolicy, rng: np.random.Generator) -> GameState:
    policy = POLICIES_BY_ID.get(action.policy_id)
    if policy is None:
        return _reject(state, "Policy not enacted", f"Unknown policy '{action.policy_id}'.")
    if state.has_active_policy(policy.id):
        return _reject(state, "Policy not enacted", f"'{policy.name}' is already in effect.")
    if not _can_afford(state, policy.cost):
        return _reject(state, "Policy not enacted", f"Not enough funds to enact '{policy.name}'.")

    new_state = copy.deepcopy(state)
    new_state.company.assets -= policy.cost
    new_state.active_policies.append(ActivePolicy(policy_id=policy.id, name=policy.name, weeks_remaining=policy.duration))
    _log(new_state, "Policy enacted",
         f"'{policy.name}' is in effect. Cost: {policy.cost:,}, duration: {policy.duration} weeks.")
    return new_state


def handle_establish_subsidiary(state: GameState, action: EstablishSubsidiary, rng: np.random.Generator) -> GameState:
    template = SUBSIDIARIES_BY_ID.get(action.subsidiary_id)
    if template is None:
        return _reject(state, "Subsidiary not established", f"Unknown subsidiary '{action.subsidiary_id}'.")
    if template.is_unique and any(s.id == template.id for s in state.subsidiaries):
        return _reject(state, "Subsidiary not established", f"'{template.name}' already exists.")
    if not _can_afford(state, template.cost):
        return _reject(state, "Subsidiary not established", f"Not enough funds to establish '{template.name}'.")

    new_state = copy.deepcopy(state)
    new_state.company.assets -= template.cost
    new_state.subsidiaries.append(replace(template))
    _log(new_state, "Subsidiary established", f"'{template.name}' was established. Cost: {template.cost:,}",
         Sentiment.POSITIVE)
    return new_state


def handle_establish_foundation(state: GameState, action: EstablishFoundation, rng: np.random.Generator) -> GameState:
    template = FOUNDATIONS_BY_ID.get(action.foundation_id)
    if template is None:
        return _reject(state, "Foundation not established", f"Unknown foundation '{action.foundation_id}'.")
    if any(f.id == template.id for f in state.foundations):
        return _reject(state, "Foundation not established", f"'{template.name}' already exists.")
    if not _can_afford(state, template.cost):
        return _reject(state, "Foundation not established", f"Not enough funds to establish '{template.name}'.")

    new_state = copy.deepcopy(state)
    new_state.company.assets -= template.cost
    new_state.foundations.append(replace(template))
    _log(new_state, "Foundation established", f"'{template.name}' was established. Cost: {template.cost:,}",
         Sentiment.POSITIVE)
    return new_state


def handle_apply_for_promotion(state: GameState, action: ApplyForPromotion, rng: np.random.Generator) -> GameState:
    if state.promotion_application is not None:
        return _reject(state, "Application refused", "A promotion review is already in progress.")

    cfg = CONFIG.corporate
    weeks = int(rng.integers(cfg.promotion_min_weeks, cfg.promotion_max_weeks + 1))
    success = bool(rng.random() < cfg.promotion_success_rate)

    new_state = copy.deepcopy(state)
    new_state.promotion_application = PromotionApplication(weeks_remaining=weeks, success=success)
    _log(new_state, "Promotion review requested",
         f"Applied for promotion to the next tier. Results will be announced in {weeks} weeks.")
    return new_state


def handle_give_bonus(state: GameState, action: GiveBonus, rng: np.random.Generator) -> GameState:
    if state.department(action.department_name) is None:
        return _reject(state, "Bonus not paid", f"There is no '{action.department_name}' department.")
    if action.amount <= 0:
        return _reject(state, "Bonus not paid", "Bonus amount must be positive.")
    if not _can_afford(state, action.amount):
        return _reject(state, "Bonus not paid", "Not enough funds.")

    cfg = CONFIG.workforce
    new_state = copy.deepcopy(state)
    new_state.company.assets -= action.amount
    new_state.temporary_boosts.append(TemporaryBoost(
        department_name=action.department_name,
        amount=cfg.bonus_boost_amount,
        weeks_remaining=cfg.bonus_boost_weeks,
    ))
    _log(new_state, "Bonus paid",
         f"Paid a {action.amount:,} performance bonus to {action.department_name}. "
         f"Efficiency +{cfg.bonus_boost_amount:g} for {cfg.bonus_boost_weeks} weeks.",
         Sentiment.POSITIVE)
    return new_state


HANDLERS: Dict[type, Callable[[GameState, BaseModel, np.random.Generator], GameState]] = {
    AdvanceWeek: handle_advance_week,
    AddEvent: handle_add_event,
    CreateProject: handle_create_project,
    ReleaseProject: handle_release_project,
    CreateDepartment: handle_create_department,
    AbolishDepartment: handle_abolish_department,
    StartRecruitment: handle_start_recruitment,
    BuyBuilding: handle_buy_building,
    SellBuilding: handle_sell_building,
    MoveHeadquarters: handle_move_headquarters,
    BuyAsset: handle_buy_asset,
    SellAsset: handle_sell_asset,
    StartGlobalStrategy: handle_start_global_strategy,
    StartIpStrategy: handle_start_ip_strategy,
    StartRndStrategy: handle_start_rnd_strategy,
    StartPolicy: handle_start_policy,
    EstablishSubsidiary: handle_establish_subsidiary,
    EstablishFoundation: handle_establish_foundation,
    ApplyForPromotion: handle_apply_for_promotion,
    GiveBonus: handle_give_bonus,
}


def apply_action(state: GameState, action: Action, rng: Optional[np.random.Generator] = None) -> GameState:
    """
    Apply one action and return the resulting state.

    Args:
        state: Current state (never modified)
        action: Parsed action model
        rng: Random source; a fresh unseeded generator if omitted

    Returns:
        New complete state snapshot
    """
    handler = HANDLERS[type(action)]
    return handler(state, action, rng if rng is not None else make_rng())
