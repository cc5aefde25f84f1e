import pytest
from sqlalchemy import text

from warehouse.pipeline import flat_to_warehouse_steps, run_steps


@pytest.fixture
def flat_warehouse(engine, flat_csv):
    run_steps(engine, flat_to_warehouse_steps(flat_csv), title="flat build")
    return engine


def test_landing_table_holds_every_row(flat_warehouse):
    with flat_warehouse.connect() as conn:
        n = conn.execute(text("SELECT COUNT(*) FROM job_postings")).scalar_one()
    assert n == 5


def test_company_dim_ranks_distinct_names(flat_warehouse):
    with flat_warehouse.connect() as conn:
        rows = conn.execute(text("SELECT company_id, name FROM company_dim ORDER BY company_id")).all()
    assert [tuple(r) for r in rows] == [(1, "Acme Corp"), (2, "Beta LLC")]


def test_skills_are_parsed_trimmed_and_ranked(flat_warehouse):
    with flat_warehouse.connect() as conn:
        rows = conn.execute(text("SELECT skill_id, skills, type FROM skills_dim ORDER BY skill_id")).all()
    assert [(r.skill_id, r.skills) for r in rows] == [
        (1, "excel"), (2, "java"), (3, "python"), (4, "spark"), (5, "sql"),
    ]
    assert all(r.type is None for r in rows)


def test_fact_keys_follow_posting_date_and_keep_null_companies(flat_warehouse):
    with flat_warehouse.connect() as conn:
        rows = conn.execute(text("""
            SELECT job_id, job_title, company_id, job_work_from_home, salary_hour_avg
            FROM job_postings_fact
            ORDER BY job_id
        """)).all()

    assert [r.job_id for r in rows] == [1, 2, 3, 4, 5]
    assert [r.job_title for r in rows] == [
        "Data Engineer", "Data Analyst", "Lead Data Engineer", "Software Engineer", "Data Scientist",
    ]
    assert [r.company_id for r in rows] == [1, 2, 1, None, 2]
    assert rows[2].job_work_from_home is True
    assert rows[3].salary_hour_avg == pytest.approx(55.5)


def test_bridge_links_each_posting_to_its_skills(flat_warehouse):
    with flat_warehouse.connect() as conn:
        pairs = conn.execute(text("""
            SELECT b.job_id, s.skills
            FROM skills_job_dim AS b
            JOIN skills_dim AS s ON b.skill_id = s.skill_id
            ORDER BY b.job_id, s.skills
        """)).all()

    assert [tuple(p) for p in pairs] == [
        (1, "python"), (1, "sql"),
        (2, "excel"), (2, "sql"),
        (3, "python"), (3, "spark"),
        (4, "java"),
    ]


def test_rebuild_is_repeatable(engine, flat_csv):
    run_steps(engine, flat_to_warehouse_steps(flat_csv))
    results = run_steps(engine, flat_to_warehouse_steps(flat_csv))

    assert results["populate fact table"] == 5
    assert results["populate bridge table"] == 7
    assert results["verify star schema"].ok
