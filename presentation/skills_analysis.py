#!/usr/bin/env python3
# skills_analysis.py

"""
Skill demand and pay for one job title, straight off the star schema.

Usage:
  python -m presentation.skills_analysis ["Data Engineer"]

  top_demanded_skills    – which skills show up in the most postings
  highest_paying_skills  – median yearly salary per skill (enough postings only)
  optimal_skills         – median salary weighted by ln(demand), i.e. skills
                           that are both well paid and widely asked for
"""

import sys

import pandas as pd
from sqlalchemy import text

from data_sources.rdbms import get_engine
from presentation.star_schema_sample import print_markdown

_POSTINGS_WITH_SKILLS = """
    FROM job_postings_fact AS jpf
    INNER JOIN skills_job_dim AS sjd ON jpf.job_id = sjd.job_id
    INNER JOIN skills_dim     AS sd  ON sjd.skill_id = sd.skill_id
"""


def _filters(remote_only: bool, salary_only: bool = False) -> str:
    where = ["jpf.job_title_short = :title"]
    if remote_only:
        where.append("jpf.job_work_from_home = true")
    if salary_only:
        where.append("jpf.salary_year_avg IS NOT NULL")
    return "WHERE " + "\n      AND ".join(where)


def top_demanded_skills(conn, title: str = "Data Engineer", remote_only: bool = True,
                        limit: int = 10) -> pd.DataFrame:
    sql = f"""
        SELECT
            sd.skills AS skill,
            COUNT(*) AS demand_count
        {_POSTINGS_WITH_SKILLS}
        {_filters(remote_only)}
        GROUP BY sd.skills
        ORDER BY demand_count DESC, skill
        LIMIT {int(limit)}
    """
    return pd.read_sql_query(text(sql), conn, params={"title": title})


def highest_paying_skills(conn, title: str = "Data Engineer", remote_only: bool = True,
                          min_postings: int = 100, limit: int = 25) -> pd.DataFrame:
    sql = f"""
        SELECT
            sd.skills AS skill,
            ROUND(MEDIAN(jpf.salary_year_avg), 0) AS median_salary,
            COUNT(*) AS skill_count
        {_POSTINGS_WITH_SKILLS}
        {_filters(remote_only)}
        GROUP BY sd.skills
        HAVING COUNT(*) >= {int(min_postings)}
        ORDER BY median_salary DESC, skill
        LIMIT {int(limit)}
    """
    return pd.read_sql_query(text(sql), conn, params={"title": title})


def optimal_skills(conn, title: str = "Data Engineer", remote_only: bool = True,
                   min_postings: int = 100, limit: int = 25) -> pd.DataFrame:
    """
    Only postings that report a yearly salary count here, so demand is
    measured on the same rows as pay.
    """
    sql = f"""
        SELECT
            sd.skills AS skill,
            ROUND(MEDIAN(jpf.salary_year_avg), 0) AS median_salary,
            COUNT(*) AS demand_count,
            ROUND(LN(COUNT(*)), 0) AS ln_demand_count,
            ROUND(MEDIAN(jpf.salary_year_avg) * LN(COUNT(*)) / 1000000, 2) AS optimal_score
        {_POSTINGS_WITH_SKILLS}
        {_filters(remote_only, salary_only=True)}
        GROUP BY sd.skills
        HAVING COUNT(*) >= {int(min_postings)}
        ORDER BY optimal_score DESC, skill
        LIMIT {int(limit)}
    """
    return pd.read_sql_query(text(sql), conn, params={"title": title})


if __name__ == "__main__":
    title = sys.argv[1] if len(sys.argv) > 1 else "Data Engineer"

    with get_engine().connect() as conn:
        print_markdown(top_demanded_skills(conn, title), f"Top demanded skills: remote {title}")
        print_markdown(highest_paying_skills(conn, title), f"Highest paying skills: remote {title}")
        print_markdown(optimal_skills(conn, title), f"Optimal skills: remote {title}")
