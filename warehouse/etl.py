#!/usr/bin/env python3

"""
etl.py

Usage:
  # Flat CSV → landing table → star schema (optional CSV path or URL)
  python -m warehouse.etl flat [csv_url]

  # Star schema CSVs → warehouse, then every mart (optional base URL or directory)
  python -m warehouse.etl dw [base_url]

  # Rebuild flat / skills / company marts from the current warehouse
  python -m warehouse.etl marts

  # Priority roles (default seed) + initial priority snapshot
  python -m warehouse.etl priority-init

  # Reconcile the priority snapshot against warehouse + roles
  python -m warehouse.etl priority-refresh

  # Change (or add) a tracked role, e.g. "Data Scientist" 2
  python -m warehouse.etl set-priority <role_name> <priority_lvl>

  # Row counts + orphan checks for the star schema
  python -m warehouse.etl verify

Connection and source location come from WAREHOUSE_DATABASE_URL and
WAREHOUSE_SOURCE_BASE_URL (see data_sources/rdbms.py). Every step runs in its
own transaction; the first failing step aborts the run.
"""

import sys
import datetime
import logging

import pytz

from data_sources.rdbms import get_engine, PRIORITY_SCHEMA
from infra.logging_config import setup_logging
from warehouse import marts, priority
from warehouse.pipeline import (
    Step, run_steps,
    flat_to_warehouse_steps, warehouse_mart_steps, priority_pipeline_steps,
)
from warehouse.reconcile import ReconcileResult
from warehouse.verify import verify_star_schema, sample_join

log = logging.getLogger(__name__)


def _stamp() -> str:
    return datetime.datetime.now(pytz.UTC).strftime("%Y-%m-%d %H:%M:%S")


def run_flat_build(csv_url: str | None = None, engine=None) -> dict:
    engine = engine or get_engine()
    log.info("[%s] ▶️  Starting flat-to-warehouse build", _stamp())
    return run_steps(engine, flat_to_warehouse_steps(csv_url), title="flat-to-warehouse build")


def run_initial_load(base_url: str | None = None, engine=None) -> dict:
    """Full warehouse + marts build from the star schema CSVs."""
    engine = engine or get_engine()
    log.info("[%s] ▶️  Starting warehouse + marts build", _stamp())
    return run_steps(engine, warehouse_mart_steps(base_url), title="warehouse + marts build")


def run_marts(engine=None) -> dict:
    engine = engine or get_engine()
    steps = [
        Step("flat mart",    marts.build_flat_mart),
        Step("skills mart",  marts.build_skills_mart),
        Step("company mart", marts.build_company_mart),
    ]
    return run_steps(engine, steps, title="mart rebuild")


def run_priority_init(engine=None, schema: str = PRIORITY_SCHEMA) -> dict:
    engine = engine or get_engine()
    return run_steps(engine, priority_pipeline_steps(schema=schema), title="priority initial load")


def run_priority_refresh(engine=None, schema: str = PRIORITY_SCHEMA) -> ReconcileResult:
    engine = engine or get_engine()
    results = run_steps(
        engine,
        [Step("priority refresh", lambda conn: priority.refresh(conn, schema=schema))],
        title="priority refresh",
    )
    result = results["priority refresh"]
    with engine.connect() as conn:
        for row in priority.snapshot_summary(conn, schema=schema):
            log.info(
                "   • %-24s %5d jobs  priority %d  refreshed %s",
                row["job_title_short"], row["job_count"], row["priority_lvl"], row["last_refreshed"],
            )
    return result


def run_set_priority(role_name: str, priority_lvl: int, engine=None, schema: str = PRIORITY_SCHEMA) -> None:
    engine = engine or get_engine()
    with engine.begin() as conn:
        priority.set_role_priority(conn, role_name, priority_lvl, schema=schema)


def run_verify(engine=None) -> bool:
    engine = engine or get_engine()
    with engine.connect() as conn:
        report = verify_star_schema(conn)
        for problem in report.problems:
            log.error("   • %s", problem)
        if report.ok:
            for row in sample_join(conn):
                log.info("   • %s | %s | %s", row["job_title"], row["company_name"], row["skill"])
    return report.ok


COMMANDS = ("flat", "dw", "marts", "priority-init", "priority-refresh", "set-priority", "verify")


def main(argv=None) -> int:
    """Dispatch one CLI command; returns the process exit code."""
    argv = sys.argv[1:] if argv is None else argv
    if not argv or argv[0] not in COMMANDS:
        print(__doc__)
        return 1

    cmd, args = argv[0], argv[1:]
    if cmd == "set-priority" and (len(args) != 2 or not args[1].isdigit() or int(args[1]) < 1):
        print("Error: set-priority needs <role_name> and a priority_lvl of 1 or more")
        print(__doc__)
        return 1

    setup_logging()

    if cmd == "flat":
        run_flat_build(args[0] if args else None)
    elif cmd == "dw":
        run_initial_load(args[0] if args else None)
    elif cmd == "marts":
        run_marts()
    elif cmd == "priority-init":
        run_priority_init()
    elif cmd == "priority-refresh":
        run_priority_refresh()
    elif cmd == "set-priority":
        run_set_priority(args[0], int(args[1]))
    elif not run_verify():
        return 1

    log.info("[%s] ✅ %s complete.", _stamp(), cmd)
    return 0


if __name__ == "__main__":
    sys.exit(main())
