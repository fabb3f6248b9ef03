"""
Unit tests for the weekly advancement engine

Tests cover:
- Payroll, maintenance and project cost accounting
- Copy-on-write (input state never modified)
- Boost and HR center effects on stored efficiency
- Recruitment capacity cap
- Strategy, policy, promotion and trend timers
- Asset price floor and event log cap
"""

from dataclasses import replace
from datetime import date, timedelta

import numpy as np
import pytest

from catalog import SUBSIDIARIES_BY_ID, create_initial_state, new_building
from config import CONFIG
from engine import advance_week, run_week
from models import (
    ActivePolicy,
    AssetCategory,
    AssetHolding,
    CompanyTier,
    FinancialAsset,
    MarketTrend,
    PromotionApplication,
    Recruitment,
    Sentiment,
    StrategyProject,
    TemporaryBoost,
    make_event,
    make_rng,
)


class StubRng:
    """Deterministic stand-in for numpy's Generator."""

    def __init__(self, random_value=0.5, uniform_at="mid"):
        self.random_value = random_value
        self.uniform_at = uniform_at

    def random(self):
        return self.random_value

    def uniform(self, low=0.0, high=1.0, size=None):
        value = low if self.uniform_at == "low" else (low + high) / 2
        return np.full(size, value) if size is not None else value

    def integers(self, low, high=None):
        return low


def make_state(seed=0):
    state = create_initial_state(make_rng(seed))
    state.department("Development").efficiency = 50.0
    return state


class TestWeeklyCosts:
    """Money flows of a single week"""

    def test_week_without_projects_charges_payroll_and_maintenance(self):
        """17 employees and one small office: assets drop by payroll plus upkeep"""
        state = make_state()
        state.projects = []
        start_assets = state.company.assets

        new_state = advance_week(state, make_rng(1))

        assert new_state.company.assets == start_assets - (17 * 1_500_000 + 5_000_000)
        assert new_state.date == state.date + timedelta(days=7)

    def test_project_progress_and_cost(self):
        """10 developers at efficiency 50 progress 1 point per week"""
        state = make_state()
        start_assets = state.company.assets

        new_state, report = run_week(state, make_rng(1))

        project = new_state.project("proj_1")
        assert project.progress == pytest.approx(6.0)
        assert report.project_cost == 10_000_000
        assert new_state.company.assets == start_assets - 40_500_000

    def test_completed_project_costs_nothing(self):
        """A project waiting for release no longer draws budget"""
        state = make_state()
        state.project("proj_1").progress = 100.0

        new_state, report = run_week(state, make_rng(1))

        assert report.project_cost == 0
        assert new_state.project("proj_1").progress == 100.0

    def test_conservation(self):
        """Asset change equals revenue minus itemized costs"""
        state = make_state()
        state.subsidiaries.append(replace(SUBSIDIARIES_BY_ID["esports_corp"]))
        state.active_policies.append(ActivePolicy("salary_negotiation", "Salary negotiation season", 3))

        new_state, report = run_week(state, make_rng(3))

        assert report.total_costs == (
            report.employee_cost + report.maintenance_cost + report.subsidiary_cost
            + report.foundation_cost + report.project_cost
        )
        assert new_state.company.assets - state.company.assets == report.total_revenue - report.total_costs
        assert report.employee_cost == 28_050_000

    def test_input_state_is_not_modified(self):
        """The engine works on a copy"""
        state = make_state()
        state.temporary_boosts.append(TemporaryBoost("Development", 10.0, 3))
        before_assets = state.company.assets
        before_date = state.date
        before_log = list(state.event_log)
        before_progress = state.project("proj_1").progress

        advance_week(state, make_rng(5))

        assert state.company.assets == before_assets
        assert state.date == before_date
        assert state.event_log == before_log
        assert state.project("proj_1").progress == before_progress
        assert state.temporary_boosts[0].weeks_remaining == 3

    def test_revenue_accumulator_resets_on_new_year(self):
        """Annual revenue restarts when the calendar year changes"""
        state = make_state()
        state.date = date(2025, 12, 29)
        state.company.revenue = 5_000_000_000
        state.subsidiaries.append(replace(SUBSIDIARIES_BY_ID["esports_corp"]))

        new_state = advance_week(state, make_rng(1))

        assert new_state.date.year == 2026
        assert new_state.company.revenue == 35_000_000

    def test_same_seed_same_week(self):
        """Weeks are reproducible from the seed"""
        state = make_state()

        first = advance_week(state, make_rng(42))
        second = advance_week(state, make_rng(42))

        assert first.company.assets == second.company.assets
        assert [a.price for a in first.financial_assets] == [a.price for a in second.financial_assets]
        assert [d.kpi for d in first.departments] == [d.kpi for d in second.departments]


class TestDepartments:
    """Efficiency, KPI and boosts"""

    def test_boost_never_changes_stored_efficiency(self):
        """Boosted efficiency is used for the week but not written back"""
        state = make_state()
        state.temporary_boosts.append(TemporaryBoost("Development", 10.0, 2))

        boosted = advance_week(state, StubRng())
        plain = advance_week(make_state(), StubRng())

        assert boosted.department("Development").efficiency == 50.0
        assert boosted.department("Development").kpi == 60.0
        assert boosted.project("proj_1").progress > plain.project("proj_1").progress

        expired = advance_week(boosted, StubRng())
        assert expired.temporary_boosts == []
        assert expired.department("Development").efficiency == 50.0
        assert expired.department("Development").kpi == 50.0

    def test_hr_center_proc_raises_baseline(self):
        """A successful HR center roll adds one permanent efficiency point"""
        state = make_state()
        state.buildings.append(new_building("hr_dev_center"))

        new_state, report = run_week(state, StubRng(random_value=0.0))

        assert report.hr_center_department == "Development"
        assert new_state.department("Development").efficiency == 51.0

    def test_hr_center_proc_can_miss(self):
        """Rolls above the proc chance change nothing"""
        state = make_state()
        state.buildings.append(new_building("hr_dev_center"))

        new_state, report = run_week(state, StubRng(random_value=0.9))

        assert report.hr_center_department is None
        assert new_state.department("Development").efficiency == 50.0

    def test_kpi_stays_in_range(self):
        """KPI noise is clipped to [0, 100]"""
        state = make_state()
        for dept in state.departments:
            dept.efficiency = 0.0

        new_state = advance_week(state, StubRng(uniform_at="low"))

        assert all(d.kpi == 0.0 for d in new_state.departments)


class TestRecruitment:
    """Recruitment pipelines and office capacity"""

    def test_hires_capped_by_capacity(self):
        """Only the free desks get filled, the rest are lost"""
        state = make_state()
        state.recruitments.append(Recruitment("r1", {"Development": 20}, 1))

        new_state, report = run_week(state, make_rng(1))

        assert report.hires == 13
        assert report.lost_hires == 7
        assert new_state.company.employees == 30
        assert new_state.department("Development").employees == 23
        assert new_state.company.employees <= new_state.company.employee_capacity
        assert new_state.recruitments == []

    def test_hires_for_missing_department_are_lost(self):
        """A department abolished mid-recruitment gets nobody"""
        state = make_state()
        state.recruitments.append(Recruitment("r1", {"Ghost Team": 3}, 1))

        new_state, report = run_week(state, make_rng(1))

        assert report.hires == 0
        assert report.lost_hires == 3
        assert new_state.company.employees == 17

    def test_pending_recruitment_counts_down(self):
        state = make_state()
        state.recruitments.append(Recruitment("r1", {"Marketing": 2}, 4))

        new_state = advance_week(state, make_rng(1))

        assert new_state.recruitments[0].weeks_remaining == 3
        assert new_state.company.employees == 17


class TestTimers:
    """Strategies, policies, promotion and market trends"""

    def test_rnd_completion_records_definition(self):
        state = make_state()
        state.rnd_strategies.append(StrategyProject("s1", "engine", "Proprietary engine", 1, 104))

        new_state = advance_week(state, make_rng(1))

        assert new_state.rnd_strategies == []
        assert new_state.completed_rnd_strategies == ["engine"]
        assert new_state.event_log[0].title == "R&D project complete"

    def test_unknown_strategy_is_dropped(self):
        """Finished projects with no definition leave no completion record"""
        state = make_state()
        state.global_strategies.append(StrategyProject("s1", "moon_base", "Moon base", 1, 10))

        new_state = advance_week(state, make_rng(1))

        assert new_state.global_strategies == []
        assert new_state.completed_global_strategies == []

    def test_policy_expires(self):
        """An expiring policy is removed, logged and no longer charged"""
        state = make_state()
        state.projects = []
        state.active_policies.append(ActivePolicy("salary_negotiation", "Salary negotiation season", 1))

        new_state, report = run_week(state, make_rng(1))

        assert new_state.active_policies == []
        assert report.employee_cost == 17 * 1_500_000
        assert any(e.title == "Policy expired" for e in new_state.event_log)

    def test_promotion_resolves_exactly_once(self):
        """Tier changes on the week the review ends and never again"""
        state = make_state()
        state.promotion_application = PromotionApplication(weeks_remaining=2, success=True)

        week1 = advance_week(state, make_rng(1))
        assert week1.company.tier == CompanyTier.SMALL_MEDIUM
        assert week1.promotion_application.weeks_remaining == 1

        week2 = advance_week(week1, make_rng(2))
        assert week2.company.tier == CompanyTier.MID_SIZE
        assert week2.promotion_application is None
        assert week2.event_log[0].title == "Promotion approved!"

        week3 = advance_week(week2, make_rng(3))
        assert week3.company.tier == CompanyTier.MID_SIZE

    def test_promotion_denied(self):
        state = make_state()
        state.promotion_application = PromotionApplication(weeks_remaining=1, success=False)

        new_state = advance_week(state, make_rng(1))

        assert new_state.company.tier == CompanyTier.SMALL_MEDIUM
        assert new_state.promotion_application is None
        assert new_state.event_log[0].sentiment == Sentiment.NEGATIVE

    def test_market_trend_expires(self):
        state = make_state()
        state.market_trend = MarketTrend("Fantasy RPG", "up", 1)

        assert advance_week(state, make_rng(1)).market_trend is None

        state.market_trend = MarketTrend("Fantasy RPG", "up", 3)
        assert advance_week(state, make_rng(1)).market_trend.weeks_remaining == 2


class TestMarketAndLog:
    """Asset walk and event log housekeeping"""

    def test_asset_price_floor(self):
        """Prices never fall below the configured minimum"""
        state = make_state()
        state.financial_assets = [
            FinancialAsset("penny", "Penny stock", AssetCategory.CRYPTO, 1.5, 1.0),
            FinancialAsset("steady", "Steady stock", AssetCategory.DOMESTIC_STOCK, 100.0, 0.2),
        ]

        new_state = advance_week(state, StubRng(uniform_at="low"))

        assert new_state.financial_asset("penny").price == CONFIG.market.min_asset_price
        assert new_state.financial_asset("steady").price == pytest.approx(90.0)

    def test_portfolio_revalued(self):
        state = make_state()
        state.portfolio.holdings.append(
            AssetHolding("stock_kr_1", 10, 85000.0)
        )

        new_state = advance_week(state, make_rng(9))

        price = new_state.financial_asset("stock_kr_1").price
        assert new_state.portfolio.total_value == int(round(price * 10))

    def test_event_log_is_capped(self):
        """Newest entries first, never more than the limit"""
        state = make_state()
        state.event_log = [make_event(state.date, f"Old {i}", "") for i in range(CONFIG.time.event_log_limit)]
        state.active_policies.append(ActivePolicy("exec_meeting", "Executive meeting", 1))

        new_state = advance_week(state, make_rng(1))

        assert len(new_state.event_log) == CONFIG.time.event_log_limit
        assert new_state.event_log[0].title == "Policy expired"
        assert new_state.event_log[1].title == "Old 0"
