"""
Unit tests for the bonus calculator
"""

import pytest

from bonuses import boost_deltas, calculate_bonuses
from catalog import create_initial_state, new_building
from models import ActivePolicy, TemporaryBoost, make_rng


@pytest.fixture
def state():
    return create_initial_state(make_rng(0))


class TestBonuses:
    """Test suite for calculate_bonuses"""

    def test_new_game_has_neutral_bonuses(self, state):
        bonuses = calculate_bonuses(state, {})

        assert bonuses.dev_speed_multiplier == 1.0
        assert bonuses.rnd_speed_multiplier == 1.0
        assert bonuses.review_score_bonus == 0.0
        assert bonuses.department_efficiency_deltas == {}

    def test_research_lab_speeds_up_rnd(self, state):
        state.buildings.append(new_building("research_lab"))

        assert calculate_bonuses(state, {}).rnd_speed_multiplier == pytest.approx(1.2)

    def test_ai_dev_policy_speeds_up_development(self, state):
        state.active_policies.append(ActivePolicy("ai_dev", "AI-assisted development", 5))

        assert calculate_bonuses(state, {}).dev_speed_multiplier == pytest.approx(1.25)

    def test_completed_rnd_speeds_up_development(self, state):
        state.completed_rnd_strategies.extend(["engine", "ai_support", "patent"])

        assert calculate_bonuses(state, {}).dev_speed_multiplier == pytest.approx(1.25)

    def test_salary_negotiation_lifts_every_department(self, state):
        state.active_policies.append(ActivePolicy("salary_negotiation", "Salary negotiation season", 2))

        bonuses = calculate_bonuses(state, {"Marketing": 10.0})

        assert bonuses.efficiency_delta("Marketing") == 15.0
        assert bonuses.efficiency_delta("HR") == 5.0
        assert len(bonuses.department_efficiency_deltas) == len(state.departments)

    def test_boosts_for_missing_departments_ignored(self, state):
        bonuses = calculate_bonuses(state, {"Ghost Team": 10.0, "Development": 3.0})

        assert bonuses.department_efficiency_deltas == {"Development": 3.0}
        assert bonuses.efficiency_delta("Ghost Team") == 0.0

    def test_same_inputs_same_bonuses(self, state):
        state.buildings.append(new_building("research_lab"))
        state.active_policies.append(ActivePolicy("ai_dev", "AI-assisted development", 5))

        assert calculate_bonuses(state, {"HR": 2.0}) == calculate_bonuses(state, {"HR": 2.0})


class TestBoostDeltas:
    """Test suite for boost_deltas"""

    def test_boosts_stack_per_department(self):
        deltas = boost_deltas([
            TemporaryBoost("Development", 10.0, 3),
            TemporaryBoost("Development", 5.0, 1),
            TemporaryBoost("Marketing", 10.0, 2),
        ])

        assert deltas == {"Development": 15.0, "Marketing": 10.0}

    def test_expired_boosts_ignored(self):
        assert boost_deltas([TemporaryBoost("Development", 10.0, 0)]) == {}
