"""
Health checks for the star schema: every table has rows, no foreign key
points at a missing parent, and a four-table join returns something.
"""

import logging
from dataclasses import dataclass, field

from sqlalchemy import text

from warehouse.star_schema import STAR_TABLES

log = logging.getLogger(__name__)


class WarehouseVerificationError(RuntimeError):
    """The star schema failed one or more health checks."""


_ORPHAN_CHECKS = {
    "job_postings_fact.company_id": """
        SELECT COUNT(*) FROM job_postings_fact AS f
        WHERE f.company_id IS NOT NULL
          AND NOT EXISTS (SELECT 1 FROM company_dim AS c WHERE c.company_id = f.company_id)
    """,
    "skills_job_dim.skill_id": """
        SELECT COUNT(*) FROM skills_job_dim AS b
        WHERE NOT EXISTS (SELECT 1 FROM skills_dim AS s WHERE s.skill_id = b.skill_id)
    """,
    "skills_job_dim.job_id": """
        SELECT COUNT(*) FROM skills_job_dim AS b
        WHERE NOT EXISTS (SELECT 1 FROM job_postings_fact AS f WHERE f.job_id = b.job_id)
    """,
}


@dataclass
class VerificationReport:
    counts:  dict = field(default_factory=dict)
    orphans: dict = field(default_factory=dict)

    @property
    def problems(self) -> list[str]:
        found = [f"{table} is empty" for table, n in self.counts.items() if n == 0]
        found += [f"{n} orphaned {ref}" for ref, n in self.orphans.items() if n]
        return found

    @property
    def ok(self) -> bool:
        return not self.problems


def verify_star_schema(conn) -> VerificationReport:
    report = VerificationReport()
    for table in STAR_TABLES:
        report.counts[table] = conn.execute(text(f"SELECT COUNT(*) FROM {table}")).scalar_one()
    for ref, sql in _ORPHAN_CHECKS.items():
        report.orphans[ref] = conn.execute(text(sql)).scalar_one()

    for table, n in report.counts.items():
        log.info("   • %-18s %d rows", table, n)
    return report


def assert_star_schema_healthy(conn) -> VerificationReport:
    report = verify_star_schema(conn)
    if not report.ok:
        raise WarehouseVerificationError("; ".join(report.problems))
    log.info("   • star schema verified")
    return report


def sample_join(conn, limit: int = 5) -> list[dict]:
    """End-to-end join across all four tables: title, company and skill."""
    rows = conn.execute(text(f"""
        SELECT f.job_title, c.name AS company_name, s.skills AS skill
        FROM job_postings_fact AS f
        JOIN company_dim    AS c ON f.company_id = c.company_id
        JOIN skills_job_dim AS b ON f.job_id     = b.job_id
        JOIN skills_dim     AS s ON b.skill_id   = s.skill_id
        ORDER BY f.job_id, s.skills
        LIMIT {int(limit)}
    """)).mappings().all()
    return [dict(r) for r in rows]
