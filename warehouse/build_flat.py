"""
build_flat.py

Normalize the flat `job_postings` landing table into the star schema:

  company_dim        ← distinct company names, ranked
  skills_dim         ← skills parsed out of the raw "['a', 'b']" strings, ranked
  job_postings_fact  ← every posting, company name swapped for company_id
  skills_job_dim     ← (skill_id, job_id) pairs

Posting keys are ROW_NUMBER over (job_posted_date, landing row order). The
fact and bridge steps both derive them from the same expression over the
unchanged landing table, so the bridge never has to join back on
(job_title, job_posted_date), which is not unique.
"""

import logging

from sqlalchemy import text

from warehouse.star_schema import FACT_COLUMNS
from warehouse.surrogate_keys import assign_surrogate_keys

log = logging.getLogger(__name__)

# job_id for every landing row; `rowid` breaks ties on equal posting dates
POSTING_KEYS_SQL = """
    SELECT
        ROW_NUMBER() OVER (ORDER BY jp.job_posted_date, jp.rowid) AS job_id,
        jp.*
    FROM job_postings AS jp
"""

# strip [ ] and single quotes, split on commas, one row per raw token
_SKILL_TOKENS_SQL = """
    SELECT
        job_id,
        UNNEST(STRING_SPLIT(
            REPLACE(REPLACE(REPLACE(job_skills, '[', ''), ']', ''), '''', ''),
            ','
        )) AS skill
    FROM ({posting_keys}) AS pk
    WHERE job_skills IS NOT NULL
      AND job_skills <> '[]'
"""

PARSED_SKILLS_SQL = f"""
    SELECT DISTINCT job_id, TRIM(skill) AS skill
    FROM ({_SKILL_TOKENS_SQL.format(posting_keys=POSTING_KEYS_SQL)}) AS tokens
    WHERE skill IS NOT NULL
      AND TRIM(skill) <> ''
"""


def populate_company_dim(conn) -> int:
    """One row per distinct non-null company; NULL names would break the joins."""
    return assign_surrogate_keys(
        conn,
        target="company_dim",
        key_column="company_id",
        natural_keys=["name"],
        source_sql="""
            SELECT company_name AS name
            FROM job_postings
            WHERE company_name IS NOT NULL
        """,
    )


def populate_skills_dim(conn) -> int:
    return assign_surrogate_keys(
        conn,
        target="skills_dim",
        key_column="skill_id",
        natural_keys=["skills"],
        source_sql=f"SELECT skill AS skills FROM ({PARSED_SKILLS_SQL}) AS parsed",
    )


def populate_fact_table(conn) -> int:
    """
    Every landing row becomes one fact row. LEFT JOIN keeps postings without
    a company (company_id stays NULL) instead of silently dropping them.
    """
    fact_cols = ", ".join(FACT_COLUMNS)
    select_cols = ", ".join(
        "cd.company_id" if c == "company_id" else f"pk.{c}" for c in FACT_COLUMNS
    )
    conn.execute(text(f"""
        INSERT INTO job_postings_fact ({fact_cols})
        SELECT {select_cols}
        FROM ({POSTING_KEYS_SQL}) AS pk
        LEFT JOIN company_dim AS cd
          ON pk.company_name = cd.name
    """))
    count = conn.execute(text("SELECT COUNT(*) FROM job_postings_fact")).scalar_one()
    log.info("   • loaded job_postings_fact (%d rows)", count)
    return count


def populate_bridge_table(conn) -> int:
    conn.execute(text(f"""
        INSERT INTO skills_job_dim (skill_id, job_id)
        SELECT DISTINCT sd.skill_id, ps.job_id
        FROM ({PARSED_SKILLS_SQL}) AS ps
        JOIN skills_dim AS sd
          ON ps.skill = sd.skills
    """))
    count = conn.execute(text("SELECT COUNT(*) FROM skills_job_dim")).scalar_one()
    log.info("   • loaded skills_job_dim (%d rows)", count)
    return count
