"""
Run a headless studio simulation.

Plays a fresh game for a number of weeks without a UI. Progress is printed
every 10 weeks; weekly KPIs can be written to SQLite and the final state
saved as JSON for loading into the server later.
"""

import argparse
import asyncio
import logging
import sqlite3
import time
from pathlib import Path
from typing import Optional

from engine import WeeklyReport
from models import GameState
from persistence import save_state
from session import GameSession


def init_database(db_path: str) -> sqlite3.Connection:
    """Create the weekly KPI table and return an open connection."""
    conn = sqlite3.connect(db_path)
    cursor = conn.cursor()
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS weekly_kpis (
            week INTEGER PRIMARY KEY,
            date TEXT,
            assets INTEGER,
            net_worth INTEGER,
            annual_revenue INTEGER,
            weekly_costs INTEGER,
            weekly_net INTEGER,
            employees INTEGER,
            employee_capacity INTEGER,
            reputation REAL,
            tier TEXT,
            projects_in_development INTEGER,
            portfolio_value INTEGER,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """)
    conn.commit()
    return conn


def log_week(conn: sqlite3.Connection, week: int, state: GameState, report: WeeklyReport) -> None:
    company = state.company
    conn.execute(
        """
        INSERT INTO weekly_kpis (week, date, assets, net_worth, annual_revenue, weekly_costs, weekly_net,
                                 employees, employee_capacity, reputation, tier, projects_in_development,
                                 portfolio_value)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            week,
            state.date.isoformat(),
            company.assets,
            state.net_worth,
            company.revenue,
            report.total_costs,
            report.net,
            company.employees,
            company.employee_capacity,
            company.reputation,
            company.tier.value,
            sum(1 for p in state.projects if p.in_development),
            state.portfolio.total_value,
        ),
    )
    conn.commit()


def main(
    num_weeks: int = 52,
    seed: Optional[int] = None,
    db_path: Optional[str] = None,
    save_path: Optional[str] = None,
    company_name: str = "New Game Studio",
) -> GameState:
    """Run the simulation and return the final state."""
    print("=" * 80)
    print(f"STUDIO SIMULATION ({num_weeks} weeks, seed={seed})")
    print("=" * 80)
    print()

    session = GameSession(seed=seed, company_name=company_name)

    db_conn = None
    if db_path:
        path = Path(db_path)
        if path.exists():
            path.unlink()
            print(f"Removed existing database: {path}")
        print(f"Initializing database: {path}")
        db_conn = init_database(str(path))
        print()

    print("Week |       Date |            Assets | Staff | Rep | Tier")
    print("-" * 80)

    start_time = time.time()

    async def record(state: GameState) -> None:
        week = session.weeks_played
        if db_conn is not None:
            log_week(db_conn, week, state, session.last_report)
        # Print progress every 10 weeks
        if week % 10 == 0 or week == num_weeks:
            company = state.company
            print(f"{week:4d} | {state.date.isoformat()} | {company.assets:17,d} | "
                  f"{company.employees:5d} | {company.reputation:3.0f} | {company.tier.value}")

    final_state = asyncio.run(session.advance_weeks(num_weeks, on_week=record))

    if db_conn is not None:
        db_conn.close()

    total_time = time.time() - start_time
    print()
    print("Simulation complete!")
    print(f"  Total time: {total_time:.2f} seconds")
    print(f"  Final net worth: {final_state.net_worth:,}")
    print(f"  Releases: {len(final_state.reviews)}")
    if db_path:
        print(f"  Database saved to: {db_path}")

    if save_path:
        save_state(final_state, save_path)
        print(f"  State saved to: {save_path}")
    print()
    return final_state


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)

    parser = argparse.ArgumentParser(description="Run a headless game-studio simulation")
    parser.add_argument("--weeks", type=int, default=52, help="Number of weeks to simulate")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for a reproducible run")
    parser.add_argument("--db", type=str, default=None, help="SQLite file for weekly KPIs")
    parser.add_argument("--save", type=str, default=None, help="Write the final state to this JSON file")
    parser.add_argument("--company", type=str, default="New Game Studio", help="Company name")

    args = parser.parse_args()

    main(
        num_weeks=args.weeks,
        seed=args.seed,
        db_path=args.db,
        save_path=args.save,
        company_name=args.company,
    )
