#!/usr/bin/env python3
# star_schema.py
# Star schema for job postings: two dimensions, one fact, one bridge.
# ────────────────────────────────────────────────────────────────────────────────

from sqlalchemy import (
    MetaData, Table, Column,
    Integer, String, Boolean, DateTime, Double, ForeignKey,
)

metadata = MetaData()

# ────────────────────────────────────────────────────────────────────────────────

# 1) Dimension: Companies (one row per hiring company)
company_dim = Table(
    "company_dim", metadata,
    Column("company_id",  Integer, primary_key=True, autoincrement=False),
    Column("name",        String,  unique=True),
    Column("link",        String),      # direct company URL
    Column("link_google", String),      # Google search fallback
    Column("thumbnail",   String),      # logo URL
)

# 2) Dimension: Skills (master list of skill tags)
skills_dim = Table(
    "skills_dim", metadata,
    Column("skill_id", Integer, primary_key=True, autoincrement=False),
    Column("skills",   String,  nullable=False, unique=True),
    Column("type",     String),         # e.g. "programming", "cloud"
)

# 3) Fact: Job postings (grain = one posting)
job_postings_fact = Table(
    "job_postings_fact", metadata,
    Column("job_id", Integer, primary_key=True, autoincrement=False),

    # FK → company_dim (NULL when the posting names no company)
    Column("company_id", Integer, ForeignKey("company_dim.company_id")),

    Column("job_title_short",       String),
    Column("job_title",             String),
    Column("job_location",          String),
    Column("job_via",               String),
    Column("job_schedule_type",     String),
    Column("job_work_from_home",    Boolean),
    Column("search_location",       String),
    Column("job_posted_date",       DateTime),
    Column("job_no_degree_mention", Boolean),
    Column("job_health_insurance",  Boolean),
    Column("job_country",           String),
    Column("salary_rate",           String),
    Column("salary_year_avg",       Double),
    Column("salary_hour_avg",       Double),
)

# 4) Bridge: Skills <-> Jobs (many-to-many)
skills_job_dim = Table(
    "skills_job_dim", metadata,
    Column("skill_id", Integer, ForeignKey("skills_dim.skill_id"),       primary_key=True, autoincrement=False),
    Column("job_id",   Integer, ForeignKey("job_postings_fact.job_id"), primary_key=True, autoincrement=False),
)

STAR_TABLES = ("company_dim", "skills_dim", "job_postings_fact", "skills_job_dim")

FACT_COLUMNS = [c.name for c in job_postings_fact.columns]


def drop_star_schema(conn) -> None:
    """Drop bridge, fact, then dimensions (reverse FK order)."""
    metadata.drop_all(conn)


def create_star_schema(conn) -> None:
    """
    Recreate the empty star schema. Dropping first makes the build
    re-runnable; MetaData orders the DDL by foreign-key dependency
    (dimensions → fact → bridge).
    """
    metadata.drop_all(conn)
    metadata.create_all(conn)


if __name__ == "__main__":
    from data_sources.rdbms import get_engine

    with get_engine().begin() as conn:
        create_star_schema(conn)
    print("✅ Star schema tables created (company_dim, skills_dim, job_postings_fact, skills_job_dim).")
