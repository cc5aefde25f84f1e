import datetime

import pytest
from sqlalchemy import text

from warehouse import priority
from warehouse.reconcile import ReconcileResult

SCHEMA = "priority_mart"
LATER = datetime.datetime(2030, 1, 1, 2, 0, 0)


@pytest.fixture
def snapshot(warehouse):
    with warehouse.begin() as conn:
        priority.create_priority_roles(conn, schema=SCHEMA)
        priority.initial_load(conn, schema=SCHEMA)
    return warehouse


def _snapshot(conn):
    rows = conn.execute(text(f"""
        SELECT job_id, job_title_short, company_name, priority_lvl, updated_at
        FROM {SCHEMA}.priority_jobs_snapshot
        ORDER BY job_id
    """)).all()
    return {r.job_id: r for r in rows}


def test_default_roles_are_seeded(snapshot):
    with snapshot.connect() as conn:
        roles = conn.execute(text(
            f"SELECT role_id, role_name, priority_lvl FROM {SCHEMA}.priority_roles ORDER BY role_id"
        )).all()
    assert [tuple(r) for r in roles] == [
        (1, "Data Engineer", 1),
        (2, "Senior Data Engineer", 1),
        (3, "Software Engineer", 3),
    ]


def test_initial_snapshot_holds_tracked_titles_only(snapshot):
    with snapshot.connect() as conn:
        rows = _snapshot(conn)

    assert sorted(rows) == [1, 3, 4]
    assert rows[1].company_name == "Acme Corp"
    assert rows[4].company_name is None
    assert rows[4].priority_lvl == 3
    assert all(r.updated_at is not None for r in rows.values())


def test_refresh_without_changes_writes_nothing(snapshot):
    with snapshot.begin() as conn:
        result = priority.refresh(conn, schema=SCHEMA, refreshed_at=LATER)
        rows = _snapshot(conn)

    assert result == ReconcileResult()
    assert all(r.updated_at != LATER for r in rows.values())


def test_priority_change_updates_matching_jobs(snapshot):
    with snapshot.begin() as conn:
        priority.set_role_priority(conn, "Software Engineer", 2, schema=SCHEMA)
        result = priority.refresh(conn, schema=SCHEMA, refreshed_at=LATER)
        rows = _snapshot(conn)

    assert result == ReconcileResult(updated=1)
    assert rows[4].priority_lvl == 2
    assert rows[4].updated_at == LATER
    assert rows[1].updated_at != LATER


def test_new_role_inserts_and_renamed_role_deletes(snapshot):
    with snapshot.begin() as conn:
        priority.set_role_priority(conn, "Data Analyst", 2, schema=SCHEMA)
        conn.execute(text(
            f"UPDATE {SCHEMA}.priority_roles SET role_name = 'Data Engineering' WHERE role_name = 'Data Engineer'"
        ))
        result = priority.refresh(conn, schema=SCHEMA, refreshed_at=LATER)
        rows = _snapshot(conn)
        new_role_id = conn.execute(text(
            f"SELECT role_id FROM {SCHEMA}.priority_roles WHERE role_name = 'Data Analyst'"
        )).scalar_one()

    assert new_role_id == 4
    assert result == ReconcileResult(inserted=1, deleted=2)
    assert sorted(rows) == [2, 4]


def test_snapshot_summary_per_title(snapshot):
    with snapshot.connect() as conn:
        summary = priority.snapshot_summary(conn, schema=SCHEMA)

    assert [(s["job_title_short"], s["job_count"], s["priority_lvl"]) for s in summary] == [
        ("Data Engineer", 2, 1),
        ("Software Engineer", 1, 3),
    ]


def test_refresh_creates_a_missing_snapshot(warehouse):
    with warehouse.begin() as conn:
        priority.create_priority_roles(conn, schema="adhoc_priority")
        result = priority.refresh(conn, schema="adhoc_priority")
    assert result == ReconcileResult(inserted=3)


def test_invalid_priority_rejected(snapshot):
    with snapshot.begin() as conn:
        with pytest.raises(ValueError):
            priority.set_role_priority(conn, "Data Engineer", 0, schema=SCHEMA)


def test_snapshot_summary_orders_by_job_count(snapshot):
    with snapshot.begin() as conn:
        priority.set_role_priority(conn, "Data Engineer", 3, schema=SCHEMA)
        priority.set_role_priority(conn, "Software Engineer", 1, schema=SCHEMA)
        priority.refresh(conn, schema=SCHEMA, refreshed_at=LATER)
        summary = priority.snapshot_summary(conn, schema=SCHEMA)

    assert [(s["job_title_short"], s["job_count"], s["priority_lvl"]) for s in summary] == [
        ("Data Engineer", 2, 3),
        ("Software Engineer", 1, 1),
    ]
