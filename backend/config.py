"""
Simulation Configuration

Centralizes all tunable parameters for the studio simulation.
This replaces scattered "magic numbers" throughout the engine and handlers.
"""

import os
from dataclasses import dataclass, field
from typing import Dict


@dataclass
class TimeConfig:
    """Calendar and log constants."""
    days_per_week: int = 7  # One tick = one week
    event_log_limit: int = 100  # Oldest entries dropped beyond this


@dataclass
class WorkforceConfig:
    """Departments, payroll and recruitment."""

    # Payroll
    weekly_salary_per_employee: int = 1_500_000
    salary_negotiation_cost_increase: float = 0.10  # Added to payroll multiplier while active

    # Recruitment pipeline
    recruitment_cost_per_hire: int = 10_000_000
    recruitment_weeks: int = 4

    # Efficiency & KPI
    efficiency_min: float = 0.0
    efficiency_max: float = 100.0
    kpi_noise: float = 5.0  # KPI = efficiency +/- noise
    salary_negotiation_efficiency_delta: float = 5.0

    # HR development center
    hr_center_proc_chance: float = 0.2
    hr_center_efficiency_gain: float = 1.0

    # Performance bonus (GIVE_BONUS)
    bonus_boost_amount: float = 10.0
    bonus_boost_weeks: int = 4


@dataclass
class DevelopmentConfig:
    """Project progress and release scoring."""

    # Department names the engine looks up
    development_department: str = "Development"
    qa_department: str = "Operations"
    marketing_department: str = "Marketing"

    # Weekly progress rate
    base_progress_per_week: float = 0.5
    progress_per_developer: float = 0.05
    efficiency_pivot: float = 50.0
    efficiency_divisor: float = 100.0
    no_department_progress: float = 0.5
    max_progress: float = 100.0

    # Project creation
    expected_revenue_multiplier: int = 3

    # Review scoring
    review_base_score: float = 50.0
    review_score_spread: float = 25.0  # Base score in [50, 75)
    user_rating_offset: float = -1.0
    user_rating_spread: float = 2.0
    missing_department_penalty: float = -20.0
    dev_efficiency_divisor: float = 5.0
    qa_efficiency_divisor: float = 4.0
    motion_capture_review_bonus: float = 5.0
    qa_policy_review_bonus: float = 10.0
    rnd_review_bonus: Dict[str, float] = field(default_factory=lambda: {
        "ai_npc": 5.0,
        "physics": 3.0,
    })
    trend_up_review_bonus: float = 20.0

    # Revenue & reputation after release
    break_even_score: float = 60.0  # overall/60 = revenue multiplier
    min_revenue_multiplier: float = 0.1
    marketing_efficiency_divisor: float = 200.0
    reputation_pivot_score: float = 65.0
    reputation_score_divisor: float = 5.0


@dataclass
class BonusConfig:
    """Aggregate multipliers from buildings, policies and R&D."""
    research_lab_rnd_speed: float = 0.2
    ai_dev_policy_speed: float = 0.25
    rnd_dev_speed: Dict[str, float] = field(default_factory=lambda: {
        "engine": 0.15,
        "ai_support": 0.10,
    })


@dataclass
class MarketConfig:
    """Financial market and genre trends."""
    volatility_scale: float = 0.5  # price *= 1 + U(-1,1) * volatility * scale
    min_asset_price: float = 1.0
    trend_duration_weeks: int = 12


@dataclass
class CorporateConfig:
    """Real estate and tier promotion."""
    building_resale_rate: float = 0.8
    promotion_success_rate: float = 0.9
    promotion_min_weeks: int = 1
    promotion_max_weeks: int = 4
    reputation_min: float = 0.0
    reputation_max: float = 100.0


@dataclass
class OracleConfig:
    """External event/briefing generator (OpenRouter)."""
    event_probability: float = 0.1  # Chance per simulated week to ask for an event
    base_url: str = "https://openrouter.ai/api/v1/chat/completions"
    model: str = field(default_factory=lambda: os.getenv("OPENROUTER_MODEL", "nvidia/nemotron-nano-9b-v2:free"))
    temperature: float = 0.7
    timeout_seconds: float = 60.0
    briefing_max_words: int = 150


@dataclass
class SimulationConfig:
    """Master configuration for the entire simulation."""

    # Sub-configurations
    time: TimeConfig = field(default_factory=TimeConfig)
    workforce: WorkforceConfig = field(default_factory=WorkforceConfig)
    development: DevelopmentConfig = field(default_factory=DevelopmentConfig)
    bonuses: BonusConfig = field(default_factory=BonusConfig)
    market: MarketConfig = field(default_factory=MarketConfig)
    corporate: CorporateConfig = field(default_factory=CorporateConfig)
    oracle: OracleConfig = field(default_factory=OracleConfig)

    # New game
    starting_assets: int = 100_000_000_000
    starting_reputation: float = 50.0
    start_date: str = "2025-01-01"

    def __post_init__(self):
        """Validation and derived values."""
        if self.time.days_per_week <= 0:
            raise ValueError("days_per_week must be positive")
        if self.time.event_log_limit <= 0:
            raise ValueError("event_log_limit must be positive")

        # Probabilities
        if not (0.0 <= self.workforce.hr_center_proc_chance <= 1.0):
            raise ValueError("hr_center_proc_chance must be in [0, 1]")
        if not (0.0 <= self.corporate.promotion_success_rate <= 1.0):
            raise ValueError("promotion_success_rate must be in [0, 1]")
        if not (0.0 <= self.oracle.event_probability <= 1.0):
            raise ValueError("event_probability must be in [0, 1]")

        if self.corporate.promotion_min_weeks < 1:
            raise ValueError("promotion_min_weeks must be at least 1")
        if self.corporate.promotion_max_weeks < self.corporate.promotion_min_weeks:
            raise ValueError("promotion_max_weeks cannot be below promotion_min_weeks")
        if self.market.min_asset_price <= 0:
            raise ValueError("min_asset_price must be positive")


# Global configuration instance
CONFIG = SimulationConfig()
