import csv
import os

import pytest
from sqlalchemy import text

from data_sources.model import SKILLS_DIM_FILE
from warehouse.load_dw import load_star_schema
from warehouse.star_schema import create_star_schema
from warehouse.verify import (
    VerificationReport,
    WarehouseVerificationError,
    assert_star_schema_healthy,
    sample_join,
    verify_star_schema,
)


def test_star_csvs_load_with_counts(warehouse):
    with warehouse.connect() as conn:
        report = verify_star_schema(conn)

    assert report.counts == {
        "company_dim": 2,
        "skills_dim": 5,
        "job_postings_fact": 5,
        "skills_job_dim": 7,
    }
    assert report.ok
    assert report.problems == []


def test_unnamed_skills_are_skipped(engine, source_dir):
    path = os.path.join(source_dir, SKILLS_DIM_FILE)
    with open(path, "a", newline="", encoding="utf-8") as fh:
        csv.writer(fh).writerow([99, "", "other"])

    with engine.begin() as conn:
        create_star_schema(conn)
        counts = load_star_schema(conn, base_url=source_dir)
        ids = conn.execute(text("SELECT skill_id FROM skills_dim ORDER BY skill_id")).scalars().all()

    assert counts["skills_dim"] == 5
    assert 99 not in ids


def test_sample_join_spans_all_four_tables(warehouse):
    with warehouse.connect() as conn:
        rows = sample_join(conn, limit=3)

    assert rows == [
        {"job_title": "Data Engineer", "company_name": "Acme Corp", "skill": "python"},
        {"job_title": "Data Engineer", "company_name": "Acme Corp", "skill": "sql"},
        {"job_title": "Data Analyst", "company_name": "Beta LLC", "skill": "excel"},
    ]


def test_empty_tables_fail_verification(engine):
    with engine.begin() as conn:
        create_star_schema(conn)
        report = verify_star_schema(conn)

    assert not report.ok
    assert "company_dim is empty" in report.problems

    with engine.begin() as conn:
        with pytest.raises(WarehouseVerificationError, match="skills_job_dim is empty"):
            assert_star_schema_healthy(conn)


def test_orphans_are_reported_as_problems():
    report = VerificationReport(
        counts={"company_dim": 1, "job_postings_fact": 3},
        orphans={"job_postings_fact.company_id": 2, "skills_job_dim.job_id": 0},
    )
    assert report.problems == ["2 orphaned job_postings_fact.company_id"]
    assert not report.ok
