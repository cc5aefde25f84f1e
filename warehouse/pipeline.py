"""
pipeline.py

Ordered, fail-fast step runner for the batch builds. Every step runs in its
own transaction, so a failure leaves earlier steps committed and rolls back
only the step that broke. Each build drops/recreates or reconciles what it
touches, so re-running from the top is always safe.

Three step lists are defined here:

  flat_to_warehouse_steps  – flat CSV → landing table → star schema → verify
  warehouse_mart_steps     – star CSVs → star schema → verify → all marts
  priority_pipeline_steps  – roles + initial snapshot (+ optional refresh)
"""

import logging
from dataclasses import dataclass
from functools import partial
from typing import Callable

from data_sources.model import FLAT_POSTINGS_FILE, source_url
from data_sources.rdbms import PRIORITY_SCHEMA
from warehouse import build_flat, extract, load_dw, marts, priority, verify
from warehouse.star_schema import create_star_schema

log = logging.getLogger(__name__)


class PipelineStepError(RuntimeError):
    """A named pipeline step failed; the original error is chained as __cause__."""

    def __init__(self, step: str, cause: BaseException):
        super().__init__(f"step '{step}' failed: {cause}")
        self.step = step
        self.cause = cause


@dataclass(frozen=True)
class Step:
    name: str
    run:  Callable      # run(conn) -> anything


def run_steps(engine, steps, title: str = "pipeline") -> dict:
    """
    Execute `steps` in order, one `engine.begin()` block each.
    Returns {step name: return value}. Stops at the first failure.
    """
    results = {}
    log.info("▶️  Starting %s (%d steps)", title, len(steps))
    for i, step in enumerate(steps, start=1):
        log.info("▸ Running [%d/%d] %s", i, len(steps), step.name)
        try:
            with engine.begin() as conn:
                results[step.name] = step.run(conn)
        except Exception as exc:
            log.error("❌ %s FAILED, aborting %s: %s", step.name, title, exc)
            raise PipelineStepError(step.name, exc) from exc
        log.info("✅ %s completed", step.name)
    log.info("🎉 %s finished", title)
    return results


# ───────────── Step lists ───────────────────────────────────────────────────────

def flat_to_warehouse_steps(csv_url: str | None = None) -> list[Step]:
    url = csv_url or source_url(FLAT_POSTINGS_FILE)
    return [
        Step("extract flat postings",   partial(extract.load_flat_postings, url=url)),
        Step("create star schema",      create_star_schema),
        Step("populate company_dim",    build_flat.populate_company_dim),
        Step("populate skills_dim",     build_flat.populate_skills_dim),
        Step("populate fact table",     build_flat.populate_fact_table),
        Step("populate bridge table",   build_flat.populate_bridge_table),
        Step("verify star schema",      verify.assert_star_schema_healthy),
    ]


def priority_pipeline_steps(schema: str = PRIORITY_SCHEMA, source_prefix: str = "main",
                            roles=priority.DEFAULT_PRIORITY_ROLES,
                            include_refresh: bool = False) -> list[Step]:
    steps = [
        Step("priority roles",        partial(priority.create_priority_roles, schema=schema, roles=roles)),
        Step("priority snapshot",     partial(priority.initial_load, schema=schema, source_prefix=source_prefix)),
    ]
    if include_refresh:
        steps.append(
            Step("priority refresh",  partial(priority.refresh, schema=schema, source_prefix=source_prefix)),
        )
    return steps


def warehouse_mart_steps(base_url: str | None = None, schema: str = PRIORITY_SCHEMA) -> list[Step]:
    return [
        Step("create star schema",    create_star_schema),
        Step("load star schema",      partial(load_dw.load_star_schema, base_url=base_url)),
        Step("verify star schema",    verify.assert_star_schema_healthy),
        Step("flat mart",             marts.build_flat_mart),
        Step("skills mart",           marts.build_skills_mart),
        *priority_pipeline_steps(schema=schema),
        Step("company mart",          marts.build_company_mart),
    ]
