import pytest

from presentation.skills_analysis import highest_paying_skills, optimal_skills, top_demanded_skills
from presentation.star_schema_sample import sample_table


def test_top_demanded_skills(warehouse):
    with warehouse.connect() as conn:
        everywhere = top_demanded_skills(conn, "Data Engineer", remote_only=False)
        remote = top_demanded_skills(conn, "Data Engineer")

    assert list(everywhere.columns) == ["skill", "demand_count"]
    assert everywhere.values.tolist() == [["python", 2], ["spark", 1], ["sql", 1]]
    assert remote["skill"].tolist() == ["python", "spark"]


def test_highest_paying_skills_respects_minimum_postings(warehouse):
    with warehouse.connect() as conn:
        df = highest_paying_skills(conn, "Data Engineer", remote_only=False, min_postings=1)
        strict = highest_paying_skills(conn, "Data Engineer", remote_only=False, min_postings=2)

    assert df["skill"].tolist() == ["spark", "python", "sql"]
    assert df["median_salary"].tolist() == [150000.0, 135000.0, 120000.0]
    assert strict["skill"].tolist() == ["python"]


def test_optimal_skills_score(warehouse):
    with warehouse.connect() as conn:
        df = optimal_skills(conn, "Data Engineer", remote_only=False, min_postings=1)

    top = df.iloc[0]
    assert top["skill"] == "python"
    assert top["demand_count"] == 2
    assert top["ln_demand_count"] == pytest.approx(1.0)
    assert top["optimal_score"] == pytest.approx(0.09)
    assert df["skill"].tolist()[1:] == ["spark", "sql"]


def test_sample_table_limits_rows(warehouse):
    with warehouse.connect() as conn:
        df = sample_table(conn, "main", "job_postings_fact", limit=2)
    assert len(df) == 2
    with pytest.raises(ValueError):
        sample_table(conn, "main", "job_postings_fact; DROP TABLE x")
