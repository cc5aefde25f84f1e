"""
Landing-zone model for the flat job postings extract, plus the catalog of
CSV files the warehouse is built from.

The landing table mirrors the flat CSV column-for-column. Types are loose on
purpose (VARCHAR / DOUBLE / BOOLEAN / TIMESTAMP) so nothing breaks on import;
`job_skills` stays a raw Python-list string and is parsed later.
"""

from sqlalchemy import (
    MetaData,
    Table,
    Column,
    String,
    Boolean,
    DateTime,
    Double,
)

from data_sources.rdbms import SOURCE_BASE_URL

# ───────────── Source files ─────────────────────────────────────────────────────
FLAT_POSTINGS_FILE = "job_postings_flat.csv"
COMPANY_DIM_FILE   = "company_dim.csv"
SKILLS_DIM_FILE    = "skills_dim.csv"
POSTINGS_FACT_FILE = "job_postings_fact.csv"
SKILLS_JOB_FILE    = "skills_job_dim.csv"

STAR_SCHEMA_FILES = {
    "company_dim":       COMPANY_DIM_FILE,
    "skills_dim":        SKILLS_DIM_FILE,
    "job_postings_fact": POSTINGS_FACT_FILE,
    "skills_job_dim":    SKILLS_JOB_FILE,
}


def source_url(file_name: str, base_url: str | None = None) -> str:
    """Join a catalog file name onto a base URL or a local directory."""
    base = (base_url or SOURCE_BASE_URL).rstrip("/")
    return f"{base}/{file_name}"


# ───────────── Landing table ───────────────────────────────────────────────────
metadata = MetaData()

job_postings = Table(
    "job_postings", metadata,
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
    Column("company_name",          String),
    Column("job_skills",            String),   # "['python', 'sql']"
    Column("job_type_skills",       String),   # "{'programming': ['python']}"
)

FLAT_COLUMNS = [c.name for c in job_postings.columns]
