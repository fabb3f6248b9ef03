"""
Unit tests for player actions

Tests cover:
- Action parsing from camelCase payloads
- Rejections leave the state unchanged apart from one log entry
- Trading, real estate, workforce and corporate actions
- Release scoring and market trends
"""

import copy

import pytest
from pydantic import ValidationError

from actions import (
    AbolishDepartment,
    AddEvent,
    ApplyForPromotion,
    BuyAsset,
    BuyBuilding,
    CreateDepartment,
    CreateProject,
    EstablishFoundation,
    EstablishSubsidiary,
    EventPayload,
    GiveBonus,
    MoveHeadquarters,
    ReleaseProject,
    SellAsset,
    SellBuilding,
    StartGlobalStrategy,
    StartIpStrategy,
    StartPolicy,
    StartRecruitment,
    StartRndStrategy,
    apply_action,
    parse_action,
)
from catalog import create_initial_state
from models import MarketTrend, ProjectStatus, Sentiment, StrategyKind, make_rng
from persistence import state_to_dict


def make_state(seed=0):
    return create_initial_state(make_rng(seed))


def without_log(state):
    data = state_to_dict(state)
    data.pop("event_log")
    return data


def assert_rejected(before, after):
    assert without_log(after) == without_log(before)
    assert len(after.event_log) == len(before.event_log) + 1
    assert after.event_log[0].sentiment == Sentiment.NEGATIVE


def owned(state, catalog_id):
    return [b for b in state.buildings if b.catalog_id == catalog_id]


class TestParsing:
    """Wire format of actions"""

    def test_camel_case_payload(self):
        action = parse_action({"type": "BUY_ASSET", "assetId": "stock_kr_1", "quantity": 10})

        assert isinstance(action, BuyAsset)
        assert action.asset_id == "stock_kr_1"
        assert action.quantity == 10

    def test_snake_case_payload(self):
        action = parse_action({"type": "GIVE_BONUS", "department_name": "Marketing", "amount": 1000})

        assert isinstance(action, GiveBonus)
        assert action.department_name == "Marketing"

    def test_event_payload_accepts_oracle_keys(self):
        action = parse_action({
            "type": "ADD_EVENT",
            "event": {
                "title": "RPG boom",
                "description": "Fantasy games are everywhere.",
                "type": "positive",
                "isNews": True,
                "marketTrend": {"genre": "Fantasy RPG", "trend": "up"},
            },
        })

        assert isinstance(action, AddEvent)
        assert action.event.sentiment == Sentiment.POSITIVE
        assert action.event.market_trend.direction == "up"

    def test_unknown_type_raises(self):
        with pytest.raises(ValidationError):
            parse_action({"type": "LAUNCH_ROCKET"})

    def test_missing_field_raises(self):
        with pytest.raises(ValidationError):
            parse_action({"type": "BUY_ASSET", "assetId": "stock_kr_1"})


class TestTrading:
    """Financial asset purchases and sales"""

    def test_buy_asset(self):
        """Buying 10 shares at 85,000 costs 850,000"""
        state = make_state()

        new_state = apply_action(state, BuyAsset(asset_id="stock_kr_1", quantity=10), make_rng(1))

        holding = new_state.portfolio.holding("stock_kr_1")
        assert new_state.company.assets == state.company.assets - 850_000
        assert holding.quantity == 10
        assert holding.average_price == 85_000
        assert new_state.portfolio.total_value == 850_000
        assert state.portfolio.holdings == []

    def test_average_price_is_volume_weighted(self):
        state = make_state()
        state = apply_action(state, BuyAsset(asset_id="stock_kr_1", quantity=10), make_rng(1))
        state.financial_asset("stock_kr_1").price = 95_000.0

        new_state = apply_action(state, BuyAsset(asset_id="stock_kr_1", quantity=10), make_rng(1))

        holding = new_state.portfolio.holding("stock_kr_1")
        assert holding.quantity == 20
        assert holding.average_price == pytest.approx(90_000)

    def test_sell_part_and_all(self):
        state = apply_action(make_state(), BuyAsset(asset_id="etf_1", quantity=5), make_rng(1))

        partial = apply_action(state, SellAsset(asset_id="etf_1", quantity=2), make_rng(1))
        assert partial.portfolio.holding("etf_1").quantity == 3
        assert partial.company.assets == state.company.assets + 60_000

        emptied = apply_action(partial, SellAsset(asset_id="etf_1", quantity=3), make_rng(1))
        assert emptied.portfolio.holding("etf_1") is None
        assert emptied.portfolio.total_value == 0

    @pytest.mark.parametrize("action", [
        SellAsset(asset_id="stock_kr_1", quantity=1),
        BuyAsset(asset_id="stock_kr_1", quantity=0),
        BuyAsset(asset_id="tulip_bulbs", quantity=1),
    ])
    def test_invalid_trades_rejected(self, action):
        state = make_state()

        assert_rejected(state, apply_action(state, action, make_rng(1)))

    def test_unaffordable_purchase_rejected(self):
        state = make_state()
        state.company.assets = 100

        assert_rejected(state, apply_action(state, BuyAsset(asset_id="stock_kr_1", quantity=1), make_rng(1)))


class TestRealEstate:
    """Buying, selling and headquarters"""

    def test_buy_office_adds_capacity(self):
        state = make_state()

        new_state = apply_action(state, BuyBuilding(building_id="office_medium"), make_rng(1))

        assert new_state.company.employee_capacity == 90
        assert new_state.company.assets == state.company.assets - 5_000_000_000
        assert len(owned(new_state, "office_medium")) == 1

    def test_unique_building_bought_once(self):
        state = apply_action(make_state(), BuyBuilding(building_id="research_lab"), make_rng(1))

        assert_rejected(state, apply_action(state, BuyBuilding(building_id="research_lab"), make_rng(1)))

    def test_offices_can_be_owned_twice(self):
        state = apply_action(make_state(), BuyBuilding(building_id="office_small"), make_rng(1))

        offices = owned(state, "office_small")
        assert len(offices) == 2
        assert offices[0].id != offices[1].id

    def test_selling_only_office_rejected(self):
        state = make_state()
        office = state.office_buildings()[0]

        assert_rejected(state, apply_action(state, SellBuilding(building_id=office.id), make_rng(1)))

    def test_sell_building_refunds_resale_value(self):
        state = apply_action(make_state(), BuyBuilding(building_id="research_lab"), make_rng(1))
        lab = owned(state, "research_lab")[0]

        new_state = apply_action(state, SellBuilding(building_id=lab.id), make_rng(1))

        assert new_state.company.assets == state.company.assets + int(lab.cost * 0.8)
        assert owned(new_state, "research_lab") == []

    def test_selling_office_lays_off_overflow_and_moves_headquarters(self):
        state = apply_action(make_state(), BuyBuilding(building_id="office_medium"), make_rng(1))
        medium = owned(state, "office_medium")[0]
        small = owned(state, "office_small")[0]
        state.company.headquarters_building_id = medium.id
        state.company.employees = 80
        state.department("Development").employees += 63

        new_state = apply_action(state, SellBuilding(building_id=medium.id), make_rng(4))

        assert new_state.company.employee_capacity == 30
        assert new_state.company.employees == 30
        assert new_state.department_headcount() == 30
        assert new_state.company.headquarters_building_id == small.id
        assert new_state.event_log[0].title == "Restructuring"

    def test_move_headquarters(self):
        state = apply_action(make_state(), BuyBuilding(building_id="office_large"), make_rng(1))
        large = owned(state, "office_large")[0]

        new_state = apply_action(state, MoveHeadquarters(building_id=large.id), make_rng(1))
        assert new_state.company.headquarters_building_id == large.id

        state = apply_action(state, BuyBuilding(building_id="data_center"), make_rng(1))
        data_center = owned(state, "data_center")[0]
        assert_rejected(state, apply_action(state, MoveHeadquarters(building_id=data_center.id), make_rng(1)))


class TestWorkforce:
    """Departments, recruitment and bonuses"""

    def test_create_department(self):
        state = make_state()

        new_state = apply_action(state, CreateDepartment(name="Strategy Office"), make_rng(1))

        dept = new_state.department("Strategy Office")
        assert dept.employees == 0
        assert 0 <= dept.efficiency <= 100

    def test_duplicate_department_rejected(self):
        state = make_state()

        assert_rejected(state, apply_action(state, CreateDepartment(name="Marketing"), make_rng(1)))

    def test_abolish_department_releases_staff(self):
        state = make_state()

        new_state = apply_action(state, AbolishDepartment(name="Development"), make_rng(1))

        assert new_state.department("Development") is None
        assert new_state.company.employees == 7

    def test_abolish_never_leaves_negative_headcount(self):
        state = make_state()
        state.company.employees = 5

        new_state = apply_action(state, AbolishDepartment(name="Development"), make_rng(1))

        assert new_state.company.employees == 0

    def test_start_recruitment_charges_per_hire(self):
        state = make_state()

        new_state = apply_action(state, StartRecruitment(hires={"Development": 3, "Marketing": 2}), make_rng(1))

        assert new_state.company.assets == state.company.assets - 50_000_000
        assert new_state.recruitments[0].total_hires == 5
        assert new_state.recruitments[0].weeks_remaining == 4

    @pytest.mark.parametrize("hires", [{}, {"Development": -1}, {"Ghost Team": 2}])
    def test_invalid_recruitment_rejected(self, hires):
        state = make_state()

        assert_rejected(state, apply_action(state, StartRecruitment(hires=hires), make_rng(1)))

    def test_give_bonus_adds_boost_only(self):
        state = make_state()
        before = state.department("Operations").efficiency

        new_state = apply_action(state, GiveBonus(department_name="Operations", amount=50_000_000), make_rng(1))

        assert new_state.company.assets == state.company.assets - 50_000_000
        assert new_state.temporary_boosts[0].department_name == "Operations"
        assert new_state.temporary_boosts[0].amount == 10.0
        assert new_state.department("Operations").efficiency == before

    def test_bonus_for_unknown_department_rejected(self):
        state = make_state()

        assert_rejected(state, apply_action(state, GiveBonus(department_name="Nobody", amount=1), make_rng(1)))


class TestCorporate:
    """Strategies, policies, subsidiaries, foundations and promotion"""

    def test_start_rnd_strategy(self):
        state = make_state()

        new_state = apply_action(state, StartRndStrategy(strategy_id="patent"), make_rng(1))

        project = new_state.strategy_projects(StrategyKind.RND)[0]
        assert project.strategy_id == "patent"
        assert project.weeks_remaining == 24
        assert new_state.company.assets == state.company.assets - 1_000_000_000

    def test_duplicate_and_completed_strategies_rejected(self):
        state = apply_action(make_state(), StartRndStrategy(strategy_id="patent"), make_rng(1))
        assert_rejected(state, apply_action(state, StartRndStrategy(strategy_id="patent"), make_rng(1)))

        done = make_state()
        done.completed_rnd_strategies.append("patent")
        assert_rejected(done, apply_action(done, StartRndStrategy(strategy_id="patent"), make_rng(1)))

    def test_policy_cannot_run_twice(self):
        state = apply_action(make_state(), StartPolicy(policy_id="ai_dev"), make_rng(1))

        assert state.has_active_policy("ai_dev")
        assert_rejected(state, apply_action(state, StartPolicy(policy_id="ai_dev"), make_rng(1)))

    def test_unique_subsidiary(self):
        state = apply_action(make_state(), EstablishSubsidiary(subsidiary_id="esports_corp"), make_rng(1))

        assert len(state.subsidiaries) == 1
        assert_rejected(state, apply_action(state, EstablishSubsidiary(subsidiary_id="esports_corp"), make_rng(1)))

    def test_foundation(self):
        state = make_state()

        new_state = apply_action(state, EstablishFoundation(foundation_id="esports_youth"), make_rng(1))

        assert new_state.foundations[0].id == "esports_youth"
        assert new_state.company.assets == state.company.assets - 30_000_000_000

    def test_promotion_application(self):
        state = apply_action(make_state(), ApplyForPromotion(), make_rng(1))

        assert 1 <= state.promotion_application.weeks_remaining <= 4
        assert_rejected(state, apply_action(state, ApplyForPromotion(), make_rng(1)))

    @pytest.mark.parametrize("action", [
        StartGlobalStrategy(strategy_id="localization"),
        StartIpStrategy(strategy_id="collab"),
        StartRndStrategy(strategy_id="patent"),
        StartPolicy(policy_id="ai_dev"),
        EstablishSubsidiary(subsidiary_id="esports_corp"),
        EstablishFoundation(foundation_id="scholarship"),
        GiveBonus(department_name="Marketing", amount=1),
        StartRecruitment(hires={"Development": 1}),
    ])
    def test_unaffordable_actions_rejected(self, action):
        state = make_state()
        state.company.assets = 0

        assert_rejected(state, apply_action(state, action, make_rng(1)))


class TestProjects:
    """Project creation and release"""

    def test_create_project(self):
        state = make_state()

        new_state = apply_action(
            state, CreateProject(name="Star Miner", genre="Sci-fi FPS", platform="PC", budget=2_000_000_000),
            make_rng(1),
        )

        project = new_state.projects[-1]
        assert project.name == "Star Miner"
        assert project.expected_revenue == 6_000_000_000
        assert project.progress == 0.0
        assert new_state.company.assets == state.company.assets

    def test_release_unfinished_project_rejected(self):
        state = make_state()

        assert_rejected(state, apply_action(state, ReleaseProject(project_id="proj_1"), make_rng(1)))

    def test_release_once(self):
        """One review per release, a second release is rejected"""
        state = make_state()
        state.project("proj_1").progress = 100.0

        released = apply_action(state, ReleaseProject(project_id="proj_1"), make_rng(2))

        assert released.project("proj_1").status == ProjectStatus.RELEASED
        assert released.project("proj_1").release_date == state.date
        assert len(released.reviews) == 1
        review = released.reviews[0]
        assert 0 <= review.expert_score <= 100
        assert 0 <= review.user_rating <= 10
        assert released.company.revenue == released.company.assets - state.company.assets

        assert_rejected(released, apply_action(released, ReleaseProject(project_id="proj_1"), make_rng(3)))

    def test_up_trend_never_lowers_expert_score(self):
        state = make_state()
        state.project("proj_1").progress = 100.0
        trending = copy.deepcopy(state)
        trending.market_trend = MarketTrend("Fantasy RPG", "up", 5)

        plain = apply_action(state, ReleaseProject(project_id="proj_1"), make_rng(11))
        boosted = apply_action(trending, ReleaseProject(project_id="proj_1"), make_rng(11))

        assert boosted.reviews[0].expert_score >= plain.reviews[0].expert_score

    def test_add_event_sets_trend(self):
        state = make_state()
        payload = EventPayload(
            title="Puzzle slump",
            description="Players are tired of puzzles.",
            sentiment=Sentiment.NEGATIVE,
            is_news=True,
            market_trend={"genre": "Casual puzzle", "direction": "down"},
        )

        new_state = apply_action(state, AddEvent(event=payload), make_rng(1))

        assert new_state.event_log[0].title == "Puzzle slump"
        assert new_state.event_log[0].is_news
        assert new_state.market_trend.direction == "down"
        assert new_state.market_trend.weeks_remaining == 12
