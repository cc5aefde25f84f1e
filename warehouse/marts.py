"""
marts.py

Consumption marts derived from the star schema. Each mart owns a schema and
is rebuilt from scratch on every run (DROP SCHEMA … CASCADE, then create and
fill):

  flat_mart     – one denormalized row per job, skills packed into a list of structs
  skills_mart   – monthly skill demand with additive counts
  company_mart  – monthly hiring per company / title / country, with title,
                  location and month dimensions and two bridges

The priority snapshot mart is reconciled incrementally instead; see
warehouse/priority.py.
"""

import logging

from sqlalchemy import (
    MetaData, Table, Column,
    Integer, String, Date, Double, ForeignKey, text,
)

from warehouse.surrogate_keys import assign_surrogate_keys

log = logging.getLogger(__name__)


def _reset_schema(conn, schema: str) -> None:
    conn.execute(text(f"DROP SCHEMA IF EXISTS {schema} CASCADE"))
    conn.execute(text(f"CREATE SCHEMA {schema}"))


def _count(conn, table: str) -> int:
    n = conn.execute(text(f"SELECT COUNT(*) FROM {table}")).scalar_one()
    log.info("   • loaded %s (%d rows)", table, n)
    return n


# ───────────── Flat mart ────────────────────────────────────────────────────────

def build_flat_mart(conn) -> int:
    _reset_schema(conn, "flat_mart")
    conn.execute(text("""
        CREATE TABLE flat_mart.job_postings (
            job_id                INTEGER PRIMARY KEY,
            job_title_short       VARCHAR,
            job_title             VARCHAR,
            job_location          VARCHAR,
            job_via               VARCHAR,
            job_schedule_type     VARCHAR,
            job_work_from_home    BOOLEAN,
            search_location       VARCHAR,
            job_posted_date       TIMESTAMP,
            job_no_degree_mention BOOLEAN,
            job_health_insurance  BOOLEAN,
            job_country           VARCHAR,
            salary_rate           VARCHAR,
            salary_year_avg       DOUBLE,
            salary_hour_avg       DOUBLE,
            company_id            INTEGER,
            company_name          VARCHAR,
            skills_and_types      STRUCT(type VARCHAR, name VARCHAR)[]
        )
    """))
    # FILTER leaves skills_and_types NULL for jobs without any skill
    conn.execute(text("""
        INSERT INTO flat_mart.job_postings
        SELECT
            jpf.job_id,
            jpf.job_title_short,
            jpf.job_title,
            jpf.job_location,
            jpf.job_via,
            jpf.job_schedule_type,
            jpf.job_work_from_home,
            jpf.search_location,
            jpf.job_posted_date,
            jpf.job_no_degree_mention,
            jpf.job_health_insurance,
            jpf.job_country,
            jpf.salary_rate,
            jpf.salary_year_avg,
            jpf.salary_hour_avg,
            cd.company_id,
            cd.name AS company_name,
            ARRAY_AGG({'type': sd.type, 'name': sd.skills} ORDER BY sd.skills)
                FILTER (WHERE sd.skill_id IS NOT NULL) AS skills_and_types
        FROM job_postings_fact AS jpf
        LEFT JOIN company_dim    AS cd  ON jpf.company_id = cd.company_id
        LEFT JOIN skills_job_dim AS sjd ON jpf.job_id     = sjd.job_id
        LEFT JOIN skills_dim     AS sd  ON sjd.skill_id   = sd.skill_id
        GROUP BY ALL
    """))
    return _count(conn, "flat_mart.job_postings")


# ───────────── Skills mart ──────────────────────────────────────────────────────

skills_mart = MetaData(schema="skills_mart")

skills_dim_skill = Table(
    "dim_skill", skills_mart,
    Column("skill_id", Integer, primary_key=True, autoincrement=False),
    Column("skills",   String),
    Column("type",     String),
)

skills_dim_date_month = Table(
    "dim_date_month", skills_mart,
    Column("month_start_date", Date, primary_key=True),
    Column("year",             Integer),
    Column("month",            Integer),
    Column("quarter",          Integer),
    Column("quarter_name",     String),     # "Q1"
    Column("year_quarter",     String),     # "2023-Q1"
)

fact_skill_demand_monthly = Table(
    "fact_skill_demand_monthly", skills_mart,
    Column("skill_id",         Integer, ForeignKey("skills_mart.dim_skill.skill_id"), primary_key=True, autoincrement=False),
    Column("month_start_date", Date, ForeignKey("skills_mart.dim_date_month.month_start_date"), primary_key=True),
    Column("job_title_short",  String, primary_key=True),
    Column("postings_count",                  Integer),
    Column("remote_postings_count",           Integer),
    Column("health_insurance_postings_count", Integer),
    Column("no_degree_mention_count",         Integer),
)


def build_skills_mart(conn) -> dict:
    _reset_schema(conn, "skills_mart")
    skills_mart.create_all(conn)

    conn.execute(text("""
        INSERT INTO skills_mart.dim_skill (skill_id, skills, type)
        SELECT skill_id, skills, type
        FROM skills_dim
    """))

    conn.execute(text("""
        INSERT INTO skills_mart.dim_date_month
            (month_start_date, year, month, quarter, quarter_name, year_quarter)
        SELECT DISTINCT
            DATE_TRUNC('month', job_posted_date)::DATE,
            EXTRACT(year FROM job_posted_date),
            EXTRACT(month FROM job_posted_date),
            EXTRACT(quarter FROM job_posted_date),
            'Q' || CAST(EXTRACT(quarter FROM job_posted_date) AS VARCHAR),
            CAST(EXTRACT(year FROM job_posted_date) AS VARCHAR)
                || '-Q' || CAST(EXTRACT(quarter FROM job_posted_date) AS VARCHAR)
        FROM job_postings_fact
        WHERE job_posted_date IS NOT NULL
    """))

    # booleans become 0/1 so the counts stay additive across any roll-up
    conn.execute(text("""
        INSERT INTO skills_mart.fact_skill_demand_monthly (
            skill_id, month_start_date, job_title_short,
            postings_count, remote_postings_count,
            health_insurance_postings_count, no_degree_mention_count
        )
        WITH job_postings_prepared AS (
            SELECT
                sj.skill_id,
                DATE_TRUNC('month', jp.job_posted_date)::DATE AS month_start_date,
                jp.job_title_short,
                CASE WHEN jp.job_work_from_home    THEN 1 ELSE 0 END AS is_remote,
                CASE WHEN jp.job_health_insurance  THEN 1 ELSE 0 END AS has_health_insurance,
                CASE WHEN jp.job_no_degree_mention THEN 1 ELSE 0 END AS no_degree_mention
            FROM job_postings_fact AS jp
            JOIN skills_job_dim AS sj ON jp.job_id = sj.job_id
            WHERE jp.job_posted_date IS NOT NULL
        )
        SELECT
            skill_id,
            month_start_date,
            job_title_short,
            COUNT(*),
            SUM(is_remote),
            SUM(has_health_insurance),
            SUM(no_degree_mention)
        FROM job_postings_prepared
        GROUP BY skill_id, month_start_date, job_title_short
    """))

    return {t.fullname: _count(conn, t.fullname) for t in skills_mart.sorted_tables}


# ───────────── Company mart ─────────────────────────────────────────────────────

company_mart = MetaData(schema="company_mart")

company_dim_company = Table(
    "dim_company", company_mart,
    Column("company_id",   Integer, primary_key=True, autoincrement=False),
    Column("company_name", String),
)

company_dim_job_title_short = Table(
    "dim_job_title_short", company_mart,
    Column("job_title_short_id", Integer, primary_key=True, autoincrement=False),
    Column("job_title_short",    String),
)

company_dim_job_title = Table(
    "dim_job_title", company_mart,
    Column("job_title_id", Integer, primary_key=True, autoincrement=False),
    Column("job_title",    String),
)

company_dim_location = Table(
    "dim_location", company_mart,
    Column("location_id",  Integer, primary_key=True, autoincrement=False),
    Column("job_country",  String),
    Column("job_location", String),
)

company_dim_date_month = Table(
    "dim_date_month", company_mart,
    Column("month_start_date", Date, primary_key=True),
    Column("year",             Integer),
    Column("month",            Integer),
)

bridge_company_location = Table(
    "bridge_company_location", company_mart,
    Column("company_id",  Integer, ForeignKey("company_mart.dim_company.company_id"),   primary_key=True, autoincrement=False),
    Column("location_id", Integer, ForeignKey("company_mart.dim_location.location_id"), primary_key=True, autoincrement=False),
)

bridge_job_title = Table(
    "bridge_job_title", company_mart,
    Column("job_title_short_id", Integer, ForeignKey("company_mart.dim_job_title_short.job_title_short_id"), primary_key=True, autoincrement=False),
    Column("job_title_id",       Integer, ForeignKey("company_mart.dim_job_title.job_title_id"),             primary_key=True, autoincrement=False),
)

fact_company_hiring_monthly = Table(
    "fact_company_hiring_monthly", company_mart,
    Column("company_id",         Integer, ForeignKey("company_mart.dim_company.company_id"), primary_key=True, autoincrement=False),
    Column("job_title_short_id", Integer, ForeignKey("company_mart.dim_job_title_short.job_title_short_id"), primary_key=True, autoincrement=False),
    Column("job_country",        String, primary_key=True),
    Column("month_start_date",   Date, ForeignKey("company_mart.dim_date_month.month_start_date"), primary_key=True),
    Column("postings_count",          Integer),
    Column("median_salary_year",      Double),
    Column("min_salary_year",         Double),
    Column("max_salary_year",         Double),
    Column("remote_share",            Double),   # 0-1
    Column("health_insurance_share",  Double),   # 0-1
    Column("no_degree_mention_share", Double),   # 0-1
)


def build_company_mart(conn) -> dict:
    _reset_schema(conn, "company_mart")
    company_mart.create_all(conn)

    conn.execute(text("""
        INSERT INTO company_mart.dim_company (company_id, company_name)
        SELECT company_id, name
        FROM company_dim
    """))

    assign_surrogate_keys(
        conn, "company_mart.dim_job_title_short", "job_title_short_id", ["job_title_short"],
        "SELECT job_title_short FROM job_postings_fact WHERE job_title_short IS NOT NULL",
    )
    assign_surrogate_keys(
        conn, "company_mart.dim_job_title", "job_title_id", ["job_title"],
        "SELECT job_title FROM job_postings_fact WHERE job_title IS NOT NULL",
    )
    assign_surrogate_keys(
        conn, "company_mart.dim_location", "location_id", ["job_country", "job_location"],
        """
            SELECT job_country, job_location
            FROM job_postings_fact
            WHERE job_country IS NOT NULL
              AND job_location IS NOT NULL
        """,
    )

    conn.execute(text("""
        INSERT INTO company_mart.dim_date_month (month_start_date, year, month)
        SELECT DISTINCT
            DATE_TRUNC('month', job_posted_date)::DATE,
            EXTRACT(year FROM job_posted_date),
            EXTRACT(month FROM job_posted_date)
        FROM job_postings_fact
        WHERE job_posted_date IS NOT NULL
    """))

    conn.execute(text("""
        INSERT INTO company_mart.bridge_company_location (company_id, location_id)
        SELECT DISTINCT jpf.company_id, loc.location_id
        FROM job_postings_fact AS jpf
        JOIN company_mart.dim_location AS loc
          ON jpf.job_country  = loc.job_country
         AND jpf.job_location = loc.job_location
        WHERE jpf.company_id IS NOT NULL
    """))

    conn.execute(text("""
        INSERT INTO company_mart.bridge_job_title (job_title_short_id, job_title_id)
        SELECT DISTINCT djs.job_title_short_id, djt.job_title_id
        FROM job_postings_fact AS jpf
        JOIN company_mart.dim_job_title_short AS djs ON jpf.job_title_short = djs.job_title_short
        JOIN company_mart.dim_job_title       AS djt ON jpf.job_title       = djt.job_title
    """))

    # AVG of a 0/1 flag is the share of postings with that flag
    conn.execute(text("""
        INSERT INTO company_mart.fact_company_hiring_monthly (
            company_id, job_title_short_id, job_country, month_start_date,
            postings_count, median_salary_year, min_salary_year, max_salary_year,
            remote_share, health_insurance_share, no_degree_mention_share
        )
        WITH job_postings_prepared AS (
            SELECT
                jpf.company_id,
                djs.job_title_short_id,
                jpf.job_country,
                DATE_TRUNC('month', jpf.job_posted_date)::DATE AS month_start_date,
                jpf.salary_year_avg,
                CASE WHEN jpf.job_work_from_home    THEN 1.0 ELSE 0.0 END AS is_remote,
                CASE WHEN jpf.job_health_insurance  THEN 1.0 ELSE 0.0 END AS has_health_insurance,
                CASE WHEN jpf.job_no_degree_mention THEN 1.0 ELSE 0.0 END AS no_degree_required
            FROM job_postings_fact AS jpf
            JOIN company_mart.dim_job_title_short AS djs
              ON jpf.job_title_short = djs.job_title_short
            WHERE jpf.company_id IS NOT NULL
              AND jpf.job_posted_date IS NOT NULL
              AND jpf.job_country IS NOT NULL
        )
        SELECT
            company_id,
            job_title_short_id,
            job_country,
            month_start_date,
            COUNT(*),
            MEDIAN(salary_year_avg),
            MIN(salary_year_avg),
            MAX(salary_year_avg),
            AVG(is_remote),
            AVG(has_health_insurance),
            AVG(no_degree_required)
        FROM job_postings_prepared
        GROUP BY company_id, job_title_short_id, job_country, month_start_date
    """))

    return {t.fullname: _count(conn, t.fullname) for t in company_mart.sorted_tables}
