"""
priority.py

Priority jobs mart: a small roles table that says which job titles are
tracked (and how urgently), and a snapshot of every warehouse posting that
matches a tracked title.

  <schema>.priority_roles          (role_id, role_name, priority_lvl)
  <schema>.priority_jobs_snapshot  (job_id, job_title_short, company_name,
                                    job_posted_date, salary_year_avg,
                                    priority_lvl, updated_at)

Priority levels: 1 = critical, 2 = important, 3 = monitor.

The snapshot is filled once by `initial_load` and then kept current with
`refresh`, which reconciles it against warehouse + roles: changed rows are
re-stamped, new matches inserted, postings that stopped matching deleted.
"""

import logging
from dataclasses import dataclass

from sqlalchemy import (
    MetaData, Table, Column,
    Integer, String, DateTime, Double, text,
)

from data_sources.rdbms import PRIORITY_SCHEMA
from warehouse.reconcile import ReconcileResult, reconcile
from warehouse.sqlutil import validate_identifier

log = logging.getLogger(__name__)

SNAPSHOT_TABLE = "priority_jobs_snapshot"
ROLES_TABLE    = "priority_roles"


@dataclass(frozen=True)
class PriorityRole:
    role_id:      int
    role_name:    str
    priority_lvl: int


DEFAULT_PRIORITY_ROLES = (
    PriorityRole(1, "Data Engineer",        1),
    PriorityRole(2, "Senior Data Engineer", 1),
    PriorityRole(3, "Software Engineer",    3),
)


def priority_metadata(schema: str = PRIORITY_SCHEMA) -> MetaData:
    """Table definitions for the priority mart living in `schema`."""
    md = MetaData(schema=validate_identifier(schema))
    Table(
        ROLES_TABLE, md,
        Column("role_id",      Integer, primary_key=True, autoincrement=False),
        Column("role_name",    String,  nullable=False, unique=True),
        Column("priority_lvl", Integer, nullable=False),
    )
    Table(
        SNAPSHOT_TABLE, md,
        Column("job_id",          Integer, primary_key=True, autoincrement=False),
        Column("job_title_short", String),
        Column("company_name",    String),
        Column("job_posted_date", DateTime),
        Column("salary_year_avg", Double),
        Column("priority_lvl",    Integer),
        Column("updated_at",      DateTime),
    )
    return md


def snapshot_source_sql(schema: str = PRIORITY_SCHEMA, source_prefix: str = "main") -> str:
    """Current rows the snapshot should contain: postings of tracked titles."""
    validate_identifier(schema)
    validate_identifier(source_prefix)
    return f"""
        SELECT
            jpf.job_id,
            jpf.job_title_short,
            cd.name AS company_name,
            jpf.job_posted_date,
            jpf.salary_year_avg,
            r.priority_lvl
        FROM {source_prefix}.job_postings_fact AS jpf
        LEFT JOIN {source_prefix}.company_dim AS cd
          ON jpf.company_id = cd.company_id
        INNER JOIN {schema}.{ROLES_TABLE} AS r
          ON jpf.job_title_short = r.role_name
    """


# ───────────── Roles ────────────────────────────────────────────────────────────

def create_priority_roles(conn, schema: str = PRIORITY_SCHEMA, roles=DEFAULT_PRIORITY_ROLES) -> int:
    """(Re)create the roles table and seed it with `roles`."""
    md = priority_metadata(schema)
    roles_table = md.tables[f"{schema}.{ROLES_TABLE}"]
    conn.execute(text(f"CREATE SCHEMA IF NOT EXISTS {schema}"))
    roles_table.drop(conn, checkfirst=True)
    roles_table.create(conn)

    rows = [
        {"role_id": r.role_id, "role_name": r.role_name, "priority_lvl": r.priority_lvl}
        for r in roles
    ]
    if rows:
        conn.execute(roles_table.insert(), rows)
    log.info("   • seeded %s.%s (%d roles)", schema, ROLES_TABLE, len(rows))
    return len(rows)


def set_role_priority(conn, role_name: str, priority_lvl: int, schema: str = PRIORITY_SCHEMA) -> None:
    """Change the priority of a tracked title, or start tracking it."""
    validate_identifier(schema)
    if int(priority_lvl) < 1:
        raise ValueError(f"priority_lvl must be a positive integer, got {priority_lvl!r}")

    roles = f"{schema}.{ROLES_TABLE}"
    exists = conn.execute(
        text(f"SELECT COUNT(*) FROM {roles} WHERE role_name = :name"),
        {"name": role_name},
    ).scalar_one()

    if exists:
        conn.execute(
            text(f"UPDATE {roles} SET priority_lvl = :lvl WHERE role_name = :name"),
            {"lvl": int(priority_lvl), "name": role_name},
        )
        log.info("   • %s → priority %d", role_name, int(priority_lvl))
    else:
        conn.execute(text(f"""
            INSERT INTO {roles} (role_id, role_name, priority_lvl)
            SELECT COALESCE(MAX(role_id), 0) + 1, :name, :lvl
            FROM {roles}
        """), {"name": role_name, "lvl": int(priority_lvl)})
        log.info("   • now tracking %s at priority %d", role_name, int(priority_lvl))


# ───────────── Snapshot ─────────────────────────────────────────────────────────

def initial_load(conn, schema: str = PRIORITY_SCHEMA, source_prefix: str = "main") -> int:
    """Recreate the snapshot table empty and fill it from the warehouse."""
    md = priority_metadata(schema)
    snapshot = md.tables[f"{schema}.{SNAPSHOT_TABLE}"]
    conn.execute(text(f"CREATE SCHEMA IF NOT EXISTS {schema}"))
    snapshot.drop(conn, checkfirst=True)
    snapshot.create(conn)

    result = reconcile(
        conn,
        f"{schema}.{SNAPSHOT_TABLE}",
        snapshot_source_sql(schema, source_prefix),
        key_columns=["job_id"],
    )
    return result.inserted


def refresh(conn, schema: str = PRIORITY_SCHEMA, source_prefix: str = "main",
            refreshed_at=None) -> ReconcileResult:
    """Bring the snapshot in line with the current warehouse and roles."""
    return reconcile(
        conn,
        f"{schema}.{SNAPSHOT_TABLE}",
        snapshot_source_sql(schema, source_prefix),
        key_columns=["job_id"],
        refreshed_at=refreshed_at,
    )


def snapshot_summary(conn, schema: str = PRIORITY_SCHEMA) -> list[dict]:
    validate_identifier(schema)
    rows = conn.execute(text(f"""
        SELECT
            job_title_short,
            COUNT(*)          AS job_count,
            MIN(priority_lvl) AS priority_lvl,
            MAX(updated_at)   AS last_refreshed
        FROM {schema}.{SNAPSHOT_TABLE}
        GROUP BY job_title_short
        ORDER BY job_count DESC, job_title_short
    """)).mappings().all()
    return [dict(r) for r in rows]
