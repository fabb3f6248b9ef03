"""
Static Game Catalog

Definitions the player picks from (buildings, financial assets, strategies,
policies, subsidiaries, foundations), tier requirements, and the factory
that builds a fresh game state.
"""

from datetime import date
from typing import Dict, List, NamedTuple, Optional

import numpy as np

from config import CONFIG
from models import (
    AssetCategory,
    Building,
    BuildingType,
    Company,
    CompanyTier,
    Department,
    FinancialAsset,
    Foundation,
    GameProject,
    GameState,
    PolicyDefinition,
    Portfolio,
    Sentiment,
    StrategyDefinition,
    StrategyKind,
    Subsidiary,
    make_event,
    new_id,
)

EOK = 100_000_000  # 1 eok = 100 million currency units


# ---------------------------------------------------------------------------
# Real estate
# ---------------------------------------------------------------------------

AVAILABLE_BUILDINGS: List[Building] = [
    Building("office_small", "office_small", "Small 3-floor office", BuildingType.OFFICE,
             20 * EOK, 5_000_000, 30, ["Houses 30 employees"]),
    Building("office_medium", "office_medium", "Mid-size 6-floor office", BuildingType.OFFICE,
             50 * EOK, 10_000_000, 60, ["Houses 60 employees"]),
    Building("office_large", "office_large", "Large 12-floor office", BuildingType.OFFICE,
             100 * EOK, 20_000_000, 120, ["Houses 120 employees"]),
    Building("office_xlarge", "office_xlarge", "20-floor office tower", BuildingType.OFFICE,
             250 * EOK, 50_000_000, 300, ["Houses 300 employees"]),
    Building("office_hq", "office_hq", "Headquarters building", BuildingType.OFFICE,
             1000 * EOK, 200_000_000, 1000, ["Houses 1000 employees"]),
    Building("data_center", "data_center", "Data center", BuildingType.DATA_CENTER,
             300 * EOK, 80_000_000, 0, ["Server stability up"], is_unique=True),
    Building("research_lab", "research_lab", "Research lab", BuildingType.LAB,
             200 * EOK, 60_000_000, 0, ["R&D speed up", "Patent success up"], is_unique=True),
    Building("motion_capture_studio", "motion_capture_studio", "Motion capture studio", BuildingType.MOTION_CAPTURE,
             150 * EOK, 40_000_000, 0, ["AAA quality bonus up"], is_unique=True),
    Building("hr_dev_center", "hr_dev_center", "HR development center", BuildingType.HR_CENTER,
             180 * EOK, 45_000_000, 0, ["Training efficiency up", "Employee skills grow"], is_unique=True),
]

BUILDINGS_BY_ID: Dict[str, Building] = {b.catalog_id: b for b in AVAILABLE_BUILDINGS}


def new_building(catalog_id: str) -> Optional[Building]:
    """Owned instance of a catalog building with its own id."""
    template = BUILDINGS_BY_ID.get(catalog_id)
    if template is None:
        return None
    return Building(
        id=f"{catalog_id}-{new_id()[:8]}",
        catalog_id=template.catalog_id,
        name=template.name,
        type=template.type,
        cost=template.cost,
        maintenance_fee=template.maintenance_fee,
        employee_capacity=template.employee_capacity,
        effects=list(template.effects),
        is_unique=template.is_unique,
    )


# ---------------------------------------------------------------------------
# Financial market
# ---------------------------------------------------------------------------

FINANCIAL_ASSETS: List[FinancialAsset] = [
    # Domestic stocks
    FinancialAsset("stock_kr_1", "K-Games", AssetCategory.DOMESTIC_STOCK, 85000, 0.15),
    FinancialAsset("stock_kr_2", "Metaverse Korea", AssetCategory.DOMESTIC_STOCK, 120000, 0.2),
    FinancialAsset("stock_kr_3", "Seoul Semiconductor", AssetCategory.DOMESTIC_STOCK, 55000, 0.1),
    FinancialAsset("stock_kr_4", "AI Solutions", AssetCategory.DOMESTIC_STOCK, 210000, 0.25),
    FinancialAsset("stock_kr_5", "Future Mobility", AssetCategory.DOMESTIC_STOCK, 95000, 0.18),
    # Foreign stocks
    FinancialAsset("stock_us_1", "Global Gaming Inc.", AssetCategory.FOREIGN_STOCK, 150, 0.12),
    FinancialAsset("stock_us_2", "Silicon Valley Tech", AssetCategory.FOREIGN_STOCK, 320, 0.18),
    FinancialAsset("stock_us_3", "NextGen AI Corp", AssetCategory.FOREIGN_STOCK, 500, 0.3),
    FinancialAsset("stock_us_4", "Quantum Computing Co.", AssetCategory.FOREIGN_STOCK, 80, 0.4),
    FinancialAsset("stock_us_5", "Cloud Services Giant", AssetCategory.FOREIGN_STOCK, 280, 0.1),
    # ETFs and bonds
    FinancialAsset("etf_1", "KODEX 200", AssetCategory.ETF, 30000, 0.05),
    FinancialAsset("etf_2", "TIGER Nasdaq 100", AssetCategory.ETF, 80000, 0.08),
    FinancialAsset("etf_3", "Global Lithium & Battery", AssetCategory.ETF, 15000, 0.22),
    FinancialAsset("bond_1", "Korea Treasury 10Y", AssetCategory.BOND, 100000, 0.01),
    FinancialAsset("bond_2", "US Treasury 20Y", AssetCategory.BOND, 105, 0.02),
    # Crypto
    FinancialAsset("crypto_1", "GameCoin (GMC)", AssetCategory.CRYPTO, 1500, 0.5),
    FinancialAsset("crypto_2", "Techrium (TCR)", AssetCategory.CRYPTO, 80000, 0.4),
    FinancialAsset("crypto_3", "AI Coin (AIC)", AssetCategory.CRYPTO, 500, 0.6),
    FinancialAsset("crypto_4", "Cyber Token (CYT)", AssetCategory.CRYPTO, 2200, 0.45),
    FinancialAsset("crypto_5", "Metaverse Cash (MVC)", AssetCategory.CRYPTO, 50, 0.8),
]


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

GLOBAL_STRATEGIES: List[StrategyDefinition] = [
    StrategyDefinition("localization", StrategyKind.GLOBAL, "Localization (translation, voice)",
                       "Translate and dub games for local audiences.", 30 * EOK, 8),
    StrategyDefinition("server", StrategyKind.GLOBAL, "Overseas servers",
                       "Build data centers in key overseas regions.", 100 * EOK, 24),
    StrategyDefinition("publishing", StrategyKind.GLOBAL, "Overseas publisher contract",
                       "Partner with a local publisher for marketing and operations.", 50 * EOK, 12),
    StrategyDefinition("advertising", StrategyKind.GLOBAL, "Global advertising",
                       "Run a worldwide marketing campaign.", 80 * EOK, 4),
    StrategyDefinition("pricing", StrategyKind.GLOBAL, "Global pricing policy",
                       "Tune prices per country to maximize revenue.", 10 * EOK, 6),
    StrategyDefinition("branch", StrategyKind.GLOBAL, "Overseas branch",
                       "Open branch offices in major markets.", 200 * EOK, 36),
]

IP_STRATEGIES: List[StrategyDefinition] = [
    StrategyDefinition("license_in", StrategyKind.IP, "Famous IP license",
                       "License a world-famous IP for a new title.", 150 * EOK, 4),
    StrategyDefinition("collab", StrategyKind.IP, "IP collaboration",
                       "Cross over with another well-known IP.", 50 * EOK, 12),
    StrategyDefinition("media_mix", StrategyKind.IP, "Media expansion",
                       "Extend the IP into webtoons, animation and goods.", 80 * EOK, 24),
    StrategyDefinition("animation", StrategyKind.IP, "Animation production",
                       "Produce a high-quality animated series.", 200 * EOK, 52),
    StrategyDefinition("license_renew", StrategyKind.IP, "License renewal",
                       "Renew an existing IP license.", 100 * EOK, 2),
    StrategyDefinition("co_dev", StrategyKind.IP, "Co-development",
                       "Develop a project jointly with another studio.", 0, 16),
    StrategyDefinition("platform_expansion", StrategyKind.IP, "Console/mobile expansion",
                       "Port a successful PC title to other platforms.", 60 * EOK, 30),
]

RND_STRATEGIES: List[StrategyDefinition] = [
    StrategyDefinition("engine", StrategyKind.RND, "Proprietary engine",
                       "Build an in-house engine for speed and quality.", 500 * EOK, 104),
    StrategyDefinition("ai_support", StrategyKind.RND, "AI development support",
                       "Automate development and predict bugs with AI.", 150 * EOK, 52),
    StrategyDefinition("ai_npc", StrategyKind.RND, "Adaptive AI NPCs",
                       "Research NPCs that learn from players.", 80 * EOK, 40),
    StrategyDefinition("physics", StrategyKind.RND, "Physics engine research",
                       "Simulate realistic physics for immersion.", 120 * EOK, 60),
    StrategyDefinition("patent", StrategyKind.RND, "Patent filing",
                       "Register and license proprietary technology.", 10 * EOK, 24),
    StrategyDefinition("security", StrategyKind.RND, "Anti-cheat security",
                       "Protect fair play with security tooling.", 70 * EOK, 36),
]

STRATEGIES: Dict[StrategyKind, Dict[str, StrategyDefinition]] = {
    StrategyKind.GLOBAL: {s.id: s for s in GLOBAL_STRATEGIES},
    StrategyKind.IP: {s.id: s for s in IP_STRATEGIES},
    StrategyKind.RND: {s.id: s for s in RND_STRATEGIES},
}


def find_strategy(kind: StrategyKind, strategy_id: str) -> Optional[StrategyDefinition]:
    return STRATEGIES[kind].get(strategy_id)


# ---------------------------------------------------------------------------
# Department policies
# ---------------------------------------------------------------------------

DEPARTMENT_POLICIES: List[PolicyDefinition] = [
    PolicyDefinition("salary_negotiation", "Salary negotiation season",
                     "Adjust salaries to reflect satisfaction. Payroll rises while active.",
                     ("HR",), 5 * 100_000_000, 4),
    PolicyDefinition("remote_work", "Remote work",
                     "Cut facility costs at some cost to communication.",
                     ("HR", "Development", "Operations"), 100_000_000, 24),
    PolicyDefinition("ai_dev", "AI-assisted development",
                     "Use AI tooling to speed up development.",
                     ("Development",), 1_000_000_000, 12),
    PolicyDefinition("qa_reinforcement", "QA reinforcement",
                     "Raise release stability and review scores.",
                     ("Operations",), 300_000_000, 8),
    PolicyDefinition("streamer_event", "Streamer event",
                     "Collaborate with streamers for a short-term boost.",
                     ("Marketing", "Esports & Content"), 800_000_000, 4),
    PolicyDefinition("global_ad", "Global ad contract",
                     "Manage user acquisition per country.",
                     ("Localization", "Marketing"), 1_200_000_000, 8),
    PolicyDefinition("offline_event", "Offline convention",
                     "Raise brand value and investor trust.",
                     ("Marketing",), 1_500_000_000, 2),
    PolicyDefinition("monetization_adjustment", "Monetization adjustment",
                     "Rework the monetization model.",
                     ("Operations", "Development", "Marketing", "Investment & Finance"), 200_000_000, 12),
    PolicyDefinition("exec_meeting", "Executive meeting",
                     "Coordinate company-wide policy and approvals.",
                     ("Strategy Office",), 50_000_000, 1),
]

POLICIES_BY_ID: Dict[str, PolicyDefinition] = {p.id: p for p in DEPARTMENT_POLICIES}


# ---------------------------------------------------------------------------
# Subsidiaries & foundations
# ---------------------------------------------------------------------------

AVAILABLE_SUBSIDIARIES: List[Subsidiary] = [
    Subsidiary("esports_corp", "Esports corporation", 50 * EOK, 20_000_000, 35_000_000,
               "Runs leagues, teams and streaming."),
    Subsidiary("animation_studio", "Video/animation studio", 80 * EOK, 30_000_000, 45_000_000,
               "Produces video content from game IP."),
    Subsidiary("merchandising_co", "Merchandising company", 30 * EOK, 15_000_000, 25_000_000,
               "Sells goods based on game characters."),
    Subsidiary("webtoon_studio", "Publishing/webtoon studio", 40 * EOK, 18_000_000, 30_000_000,
               "Extends game stories into webtoons and novels."),
    Subsidiary("ai_dev_co", "AI development company", 120 * EOK, 50_000_000, 70_000_000,
               "Sells AI tooling for game development."),
    Subsidiary("qa_outsourcing", "QA outsourcing company", 20 * EOK, 25_000_000, 30_000_000,
               "Handles QA for internal and external projects."),
    Subsidiary("global_publishing", "Overseas publishing corporation", 100 * EOK, 40_000_000, 60_000_000,
               "Publishes titles directly in overseas markets."),
]

SUBSIDIARIES_BY_ID: Dict[str, Subsidiary] = {s.id: s for s in AVAILABLE_SUBSIDIARIES}

AVAILABLE_FOUNDATIONS: List[Foundation] = [
    Foundation("scholarship", "Game developer scholarship foundation", 500 * EOK, 100_000_000, 0.1,
               "Supports the next generation of developers."),
    Foundation("esports_youth", "Youth esports foundation", 300 * EOK, 80_000_000, 0.08,
               "Hosts youth tournaments and scouts talent."),
    Foundation("ai_research", "AI research foundation", 800 * EOK, 150_000_000, 0.12,
               "Sponsors AI research."),
]

FOUNDATIONS_BY_ID: Dict[str, Foundation] = {f.id: f for f in AVAILABLE_FOUNDATIONS}


# ---------------------------------------------------------------------------
# Tiers
# ---------------------------------------------------------------------------

class TierRequirement(NamedTuple):
    assets: int
    employees: int
    revenue: int
    description: str = ""


TIER_REQUIREMENTS: Dict[CompanyTier, TierRequirement] = {
    CompanyTier.SMALL_MEDIUM: TierRequirement(100 * EOK, 50, 500 * EOK),
    CompanyTier.MID_SIZE: TierRequirement(500 * EOK, 300, 1000 * EOK),
    CompanyTier.LARGE: TierRequirement(0, 0, 0, "Expand into esports, real estate, finance or content"),
    CompanyTier.CONGLOMERATE: TierRequirement(2000 * EOK, 0, 0, "Meet global revenue goals"),
    CompanyTier.GLOBAL_LARGE: TierRequirement(0, 0, 0),
}


def promotion_requirements_met(state: GameState) -> bool:
    """Numeric requirements for leaving the current tier (drivers gate the button on this)."""
    company = state.company
    if company.tier.next_tier is None:
        return False
    req = TIER_REQUIREMENTS[company.tier]
    return (
        company.assets >= req.assets
        and company.employees >= req.employees
        and company.revenue >= req.revenue
    )


# ---------------------------------------------------------------------------
# New game
# ---------------------------------------------------------------------------

GAME_GENRES = ["Fantasy RPG", "Sci-fi FPS", "Management sim", "Casual puzzle", "Sports", "Horror", "Action adventure"]
PLATFORMS = ["PC", "Mobile", "Console", "VR/AR"]
TARGET_COUNTRIES = ["Domestic", "North America", "Europe", "Japan", "China", "Global"]

INITIAL_DEPARTMENTS = [
    ("Development", 10),
    ("Operations", 2),
    ("Marketing", 2),
    ("Investment & Finance", 1),
    ("HR", 1),
    ("Localization", 1),
    ("Esports & Content", 0),
]

STARTING_OFFICE = "office_small"


def create_initial_state(
    rng: np.random.Generator,
    company_name: str = "New Game Studio",
) -> GameState:
    """
    Build the state a new game starts from.

    Args:
        rng: Random source for starting department efficiencies
        company_name: Display name of the player's company

    Returns:
        GameState with one small office, seven departments and a starter project
    """
    start = date.fromisoformat(CONFIG.start_date)
    office = new_building(STARTING_OFFICE)

    departments = []
    for name, employees in INITIAL_DEPARTMENTS:
        efficiency = float(rng.integers(0, 101))
        departments.append(Department(name=name, employees=employees, efficiency=efficiency, kpi=efficiency))

    company = Company(
        name=company_name,
        tier=CompanyTier.SMALL_MEDIUM,
        assets=CONFIG.starting_assets,
        reputation=CONFIG.starting_reputation,
        employees=sum(d.employees for d in departments),
        employee_capacity=office.employee_capacity,
        headquarters_building_id=office.id,
    )

    starter = GameProject(
        id="proj_1",
        name="Project: Dragon Soul",
        genre=GAME_GENRES[0],
        platform="PC",
        target_country=TARGET_COUNTRIES[0],
        budget=1_000_000_000,
        expected_revenue=5_000_000_000,
        start_date=start,
        progress=5.0,
    )

    return GameState(
        company=company,
        date=start,
        departments=departments,
        projects=[starter],
        buildings=[office],
        financial_assets=[
            FinancialAsset(a.id, a.name, a.category, a.price, a.volatility) for a in FINANCIAL_ASSETS
        ],
        portfolio=Portfolio(),
        event_log=[make_event(start, "A new beginning",
                              "Your first week as CEO. Lead the company to success.",
                              Sentiment.NEUTRAL)],
    )
