import datetime
import os

import pytest

from data_generation.generate_postings import (
    format_job_skills,
    format_job_type_skills,
    write_csvs,
)
from data_sources.model import FLAT_POSTINGS_FILE
from data_sources.rdbms import get_engine
from warehouse.load_dw import load_star_schema
from warehouse.star_schema import create_star_schema


def _posting(title_short, title, location, remote, posted, no_degree, health, country,
             rate, year, hour, company, skills):
    return {
        "job_title_short":       title_short,
        "job_title":             title,
        "job_location":          location,
        "job_via":               "via LinkedIn",
        "job_schedule_type":     "Full-time",
        "job_work_from_home":    remote,
        "search_location":       country,
        "job_posted_date":       posted,
        "job_no_degree_mention": no_degree,
        "job_health_insurance":  health,
        "job_country":           country,
        "salary_rate":           rate,
        "salary_year_avg":       year,
        "salary_hour_avg":       hour,
        "company_name":          company,
        "job_skills":            format_job_skills(skills),
        "job_type_skills":       format_job_type_skills(skills),
        "skills":                skills,
    }


def sample_postings():
    """
    Five postings, ordered by posting date. Companies rank Acme Corp=1,
    Beta LLC=2; skills rank excel=1, java=2, python=3, spark=4, sql=5.
    """
    dt = datetime.datetime
    return [
        _posting("Data Engineer", "Data Engineer", "Berlin, Germany", False,
                 dt(2023, 1, 5, 10, 0), False, True, "Germany",
                 "year", 120000.0, None, "Acme Corp", ["python", "sql"]),
        _posting("Data Analyst", "Data Analyst", "London, United Kingdom", False,
                 dt(2023, 1, 20, 9, 30), True, False, "United Kingdom",
                 "year", 80000.0, None, "Beta LLC", ["sql", "excel"]),
        _posting("Data Engineer", "Lead Data Engineer", "Anywhere", True,
                 dt(2023, 2, 3, 12, 0), False, True, "Germany",
                 "year", 150000.0, None, "Acme Corp", ["python", "spark"]),
        _posting("Software Engineer", "Software Engineer", "Austin, United States", False,
                 dt(2023, 2, 10, 8, 0), True, True, "United States",
                 "hour", None, 55.5, None, ["java"]),
        _posting("Data Scientist", "Data Scientist", "Paris, France", True,
                 dt(2023, 2, 10, 15, 0), False, False, "France",
                 None, None, None, "Beta LLC", []),
    ]


@pytest.fixture
def engine(tmp_path):
    eng = get_engine(f"duckdb:///{tmp_path / 'warehouse.duckdb'}", echo=False)
    yield eng
    eng.dispose()


@pytest.fixture
def source_dir(tmp_path):
    out = tmp_path / "source"
    write_csvs(sample_postings(), str(out))
    return str(out)


@pytest.fixture
def flat_csv(source_dir):
    return os.path.join(source_dir, FLAT_POSTINGS_FILE)


@pytest.fixture
def warehouse(engine, source_dir):
    """Engine whose database holds the loaded star schema."""
    with engine.begin() as conn:
        create_star_schema(conn)
        load_star_schema(conn, base_url=source_dir)
    return engine
