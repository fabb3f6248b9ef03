"""
Studio Domain Model

This module defines the entities and value types that make up a game state:
the company, its departments, projects, real estate, investments, timed
strategy/policy projects, and the event log.

Everything here is plain data. Behavior that moves the simulation forward
lives in engine.py (weekly tick) and actions.py (player actions).
"""

import uuid
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, Iterable, List, Optional

import numpy as np

from config import CONFIG


class CompanyTier(str, Enum):
    """Ordered corporate size classification."""
    SMALL_MEDIUM = "small_medium"
    MID_SIZE = "mid_size"
    LARGE = "large"
    CONGLOMERATE = "conglomerate"
    GLOBAL_LARGE = "global_large"

    @property
    def rank(self) -> int:
        return TIER_ORDER.index(self)

    @property
    def next_tier(self) -> Optional["CompanyTier"]:
        position = self.rank + 1
        return TIER_ORDER[position] if position < len(TIER_ORDER) else None


TIER_ORDER: List[CompanyTier] = [
    CompanyTier.SMALL_MEDIUM,
    CompanyTier.MID_SIZE,
    CompanyTier.LARGE,
    CompanyTier.CONGLOMERATE,
    CompanyTier.GLOBAL_LARGE,
]


class BuildingType(str, Enum):
    OFFICE = "office"
    DATA_CENTER = "data-center"
    LAB = "lab"
    MOTION_CAPTURE = "motion-capture"
    HR_CENTER = "hr-center"


class AssetCategory(str, Enum):
    DOMESTIC_STOCK = "domestic-stock"
    FOREIGN_STOCK = "foreign-stock"
    ETF = "etf"
    BOND = "bond"
    CRYPTO = "crypto"


class ProjectStatus(str, Enum):
    IN_DEVELOPMENT = "in-development"
    RELEASED = "released"


class Sentiment(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class StrategyKind(str, Enum):
    GLOBAL = "global"
    IP = "ip"
    RND = "rnd"


def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    """Seedable random source shared by the engine and the action handlers."""
    return np.random.default_rng(seed)


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def new_id() -> str:
    return uuid.uuid4().hex


@dataclass(slots=True)
class Company:
    """The player's company. Created once at game start, never destroyed."""

    name: str
    tier: CompanyTier = CompanyTier.SMALL_MEDIUM
    assets: int = 0  # May go negative, no bankruptcy cutoff
    revenue: int = 0  # Annual revenue accumulator
    debt: int = 0
    reputation: float = 50.0  # [0, 100]
    employees: int = 0
    employee_capacity: int = 0  # Derived from owned buildings
    headquarters_building_id: str = ""

    def __post_init__(self):
        if self.employees < 0:
            raise ValueError(f"employees cannot be negative, got {self.employees}")
        self.reputation = clamp(self.reputation, CONFIG.corporate.reputation_min, CONFIG.corporate.reputation_max)


@dataclass(slots=True)
class Department:
    name: str
    employees: int = 0
    efficiency: float = 50.0  # Stored baseline, boosts are never folded in
    kpi: float = 50.0

    def __post_init__(self):
        if self.employees < 0:
            raise ValueError(f"department employees cannot be negative, got {self.employees}")
        self.efficiency = clamp(self.efficiency, CONFIG.workforce.efficiency_min, CONFIG.workforce.efficiency_max)


@dataclass(slots=True)
class GameProject:
    id: str
    name: str
    genre: str
    platform: str
    target_country: str
    budget: int
    expected_revenue: int
    start_date: date
    progress: float = 0.0  # [0, 100]
    release_date: Optional[date] = None
    status: ProjectStatus = ProjectStatus.IN_DEVELOPMENT

    @property
    def in_development(self) -> bool:
        return self.status == ProjectStatus.IN_DEVELOPMENT

    @property
    def is_complete(self) -> bool:
        return self.progress >= CONFIG.development.max_progress


@dataclass(slots=True, frozen=True)
class Review:
    project_id: str
    expert_score: float  # [0, 100]
    user_rating: float  # [0, 10]
    overall_score: int


@dataclass(slots=True)
class Building:
    id: str  # Unique per owned instance
    catalog_id: str
    name: str
    type: BuildingType
    cost: int
    maintenance_fee: int
    employee_capacity: int = 0
    effects: List[str] = field(default_factory=list)
    is_unique: bool = False

    @property
    def is_office(self) -> bool:
        return self.type == BuildingType.OFFICE


@dataclass(slots=True)
class FinancialAsset:
    id: str
    name: str
    category: AssetCategory
    price: float
    volatility: float  # [0, 1]

    def __post_init__(self):
        if self.price <= 0:
            raise ValueError(f"asset price must be positive, got {self.price}")
        if not (0.0 <= self.volatility <= 1.0):
            raise ValueError(f"volatility must be in [0,1], got {self.volatility}")


@dataclass(slots=True)
class AssetHolding:
    asset_id: str
    quantity: int
    average_price: float  # Volume-weighted cost basis


@dataclass(slots=True)
class Portfolio:
    holdings: List[AssetHolding] = field(default_factory=list)
    total_value: int = 0  # Mark-to-market, always recomputed

    def holding(self, asset_id: str) -> Optional[AssetHolding]:
        return next((h for h in self.holdings if h.asset_id == asset_id), None)

    def revalue(self, assets: Iterable[FinancialAsset]) -> int:
        """Recompute total_value from scratch; holdings of unknown assets count as 0."""
        prices = {a.id: a.price for a in assets}
        self.total_value = int(round(sum(prices.get(h.asset_id, 0.0) * h.quantity for h in self.holdings)))
        return self.total_value


@dataclass(slots=True, frozen=True)
class StrategyDefinition:
    """Static definition of a one-shot global, IP or R&D initiative."""
    id: str
    kind: StrategyKind
    name: str
    description: str
    cost: int
    duration: int  # weeks


@dataclass(slots=True)
class StrategyProject:
    id: str
    strategy_id: str
    name: str
    weeks_remaining: int
    total_weeks: int

    @property
    def progress(self) -> float:
        """Percent complete, for progress bars."""
        if self.total_weeks <= 0:
            return 100.0
        return clamp(100.0 * (self.total_weeks - self.weeks_remaining) / self.total_weeks, 0.0, 100.0)


@dataclass(slots=True, frozen=True)
class PolicyDefinition:
    id: str
    name: str
    description: str
    departments: tuple
    cost: int
    duration: int  # weeks


@dataclass(slots=True)
class ActivePolicy:
    policy_id: str
    name: str
    weeks_remaining: int


@dataclass(slots=True)
class Subsidiary:
    id: str
    name: str
    cost: int
    maintenance_fee: int
    weekly_revenue: int
    description: str = ""
    is_unique: bool = True


@dataclass(slots=True)
class Foundation:
    id: str
    name: str
    cost: int
    maintenance_fee: int
    reputation_bonus: float  # Weekly reputation gain
    description: str = ""


@dataclass(slots=True)
class Recruitment:
    id: str
    hires: Dict[str, int]  # department name -> head count
    weeks_remaining: int

    @property
    def total_hires(self) -> int:
        return sum(self.hires.values())


@dataclass(slots=True)
class TemporaryBoost:
    department_name: str
    amount: float  # Efficiency points while active
    weeks_remaining: int
    kind: str = "efficiency"


@dataclass(slots=True)
class PromotionApplication:
    weeks_remaining: int
    success: bool  # Drawn once at application time


@dataclass(slots=True)
class MarketTrend:
    genre: str
    direction: str  # "up" | "down"
    weeks_remaining: int


@dataclass(slots=True, frozen=True)
class EventLogEntry:
    id: str
    date: date
    title: str
    description: str
    sentiment: Sentiment = Sentiment.NEUTRAL
    is_news: bool = False


def make_event(
    on: date,
    title: str,
    description: str,
    sentiment: Sentiment = Sentiment.NEUTRAL,
    is_news: bool = False,
) -> EventLogEntry:
    return EventLogEntry(id=new_id(), date=on, title=title, description=description,
                         sentiment=sentiment, is_news=is_news)


def prepend_events(log: List[EventLogEntry], new_events: List[EventLogEntry]) -> List[EventLogEntry]:
    """Newest first, capped at the configured log length."""
    return (list(new_events) + list(log))[:CONFIG.time.event_log_limit]


@dataclass(slots=True)
class GameState:
    """Complete snapshot of one game. Handlers return a new instance."""

    company: Company
    date: date
    departments: List[Department] = field(default_factory=list)
    projects: List[GameProject] = field(default_factory=list)
    reviews: List[Review] = field(default_factory=list)
    buildings: List[Building] = field(default_factory=list)
    financial_assets: List[FinancialAsset] = field(default_factory=list)
    portfolio: Portfolio = field(default_factory=Portfolio)
    recruitments: List[Recruitment] = field(default_factory=list)
    global_strategies: List[StrategyProject] = field(default_factory=list)
    ip_strategies: List[StrategyProject] = field(default_factory=list)
    rnd_strategies: List[StrategyProject] = field(default_factory=list)
    completed_global_strategies: List[str] = field(default_factory=list)
    completed_ip_strategies: List[str] = field(default_factory=list)
    completed_rnd_strategies: List[str] = field(default_factory=list)
    active_policies: List[ActivePolicy] = field(default_factory=list)
    subsidiaries: List[Subsidiary] = field(default_factory=list)
    foundations: List[Foundation] = field(default_factory=list)
    temporary_boosts: List[TemporaryBoost] = field(default_factory=list)
    promotion_application: Optional[PromotionApplication] = None
    market_trend: Optional[MarketTrend] = None
    event_log: List[EventLogEntry] = field(default_factory=list)

    # Lookups

    def department(self, name: str) -> Optional[Department]:
        return next((d for d in self.departments if d.name == name), None)

    def project(self, project_id: str) -> Optional[GameProject]:
        return next((p for p in self.projects if p.id == project_id), None)

    def building(self, building_id: str) -> Optional[Building]:
        return next((b for b in self.buildings if b.id == building_id), None)

    def financial_asset(self, asset_id: str) -> Optional[FinancialAsset]:
        return next((a for a in self.financial_assets if a.id == asset_id), None)

    def owns_building_type(self, building_type: BuildingType) -> bool:
        return any(b.type == building_type for b in self.buildings)

    def office_buildings(self) -> List[Building]:
        return [b for b in self.buildings if b.is_office]

    def has_active_policy(self, policy_id: str) -> bool:
        return any(p.policy_id == policy_id for p in self.active_policies)

    def strategy_projects(self, kind: StrategyKind) -> List[StrategyProject]:
        return {
            StrategyKind.GLOBAL: self.global_strategies,
            StrategyKind.IP: self.ip_strategies,
            StrategyKind.RND: self.rnd_strategies,
        }[kind]

    def completed_strategies(self, kind: StrategyKind) -> List[str]:
        return {
            StrategyKind.GLOBAL: self.completed_global_strategies,
            StrategyKind.IP: self.completed_ip_strategies,
            StrategyKind.RND: self.completed_rnd_strategies,
        }[kind]

    # Derived values

    def calculate_capacity(self) -> int:
        return sum(b.employee_capacity for b in self.buildings)

    def department_headcount(self) -> int:
        return sum(d.employees for d in self.departments)

    @property
    def net_worth(self) -> int:
        return self.company.assets + self.portfolio.total_value - self.company.debt
