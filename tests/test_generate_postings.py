import csv
import os

from data_generation.generate_postings import (
    SKILL_CATALOG,
    format_job_skills,
    format_job_type_skills,
    generate_postings,
    write_csvs,
)
from data_sources.model import FLAT_COLUMNS, FLAT_POSTINGS_FILE
from warehouse.pipeline import flat_to_warehouse_steps, run_steps


def _read(path):
    with open(path, newline="", encoding="utf-8") as fh:
        return list(csv.DictReader(fh))


def test_same_seed_same_postings():
    assert generate_postings(50, seed=7) == generate_postings(50, seed=7)
    assert generate_postings(50, seed=7) != generate_postings(50, seed=8)


def test_postings_look_like_the_flat_extract():
    postings = generate_postings(300, seed=1)

    for p in postings:
        assert set(FLAT_COLUMNS) <= set(p)
        assert p["job_posted_date"].year == 2023
        assert all(s in SKILL_CATALOG for s in p["skills"])
        if p["salary_year_avg"] is not None:
            assert 30_000 <= p["salary_year_avg"] <= 500_000
    assert any(p["salary_year_avg"] is None for p in postings)
    assert any(p["salary_year_avg"] is not None for p in postings)


def test_skill_strings():
    assert format_job_skills([]) is None
    assert format_job_skills(["sql", "power bi"]) == "['sql', 'power bi']"
    assert format_job_type_skills(["sql", "aws", "python"]) == (
        "{'programming': ['sql', 'python'], 'cloud': ['aws']}"
    )


def test_star_files_have_consistent_keys(tmp_path):
    postings = generate_postings(200, seed=3)
    written = write_csvs(postings, str(tmp_path))

    companies = _read(tmp_path / "company_dim.csv")
    skills = _read(tmp_path / "skills_dim.csv")
    facts = _read(tmp_path / "job_postings_fact.csv")
    bridge = _read(tmp_path / "skills_job_dim.csv")

    assert written[FLAT_POSTINGS_FILE] == 200
    assert len(facts) == 200
    company_ids = {c["company_id"] for c in companies}
    assert {f["company_id"] for f in facts if f["company_id"]} <= company_ids
    assert {b["skill_id"] for b in bridge} <= {s["skill_id"] for s in skills}
    assert len(bridge) == sum(len(p["skills"]) for p in postings)


def test_generated_flat_file_builds_a_healthy_star_schema(engine, tmp_path):
    write_csvs(generate_postings(200, seed=5), str(tmp_path / "gen"))
    results = run_steps(engine, flat_to_warehouse_steps(os.path.join(tmp_path, "gen", FLAT_POSTINGS_FILE)))

    assert results["populate fact table"] == 200
    assert results["verify star schema"].ok
