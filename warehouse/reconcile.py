"""
reconcile.py

Incremental reconciliation (upsert) of a persisted target table against a
freshly computed source snapshot:

  • rows present on both sides whose compared attributes differ are
    overwritten and re-stamped,
  • rows only in the source are inserted,
  • rows only in the target are deleted.

The source query is materialized exactly once into a temp table, and all
three branches read from that one snapshot. Nothing here opens or commits a
transaction: call it inside `engine.begin()` so that either every branch
lands or none does. Running it twice against an unchanged source writes
nothing the second time.

Attribute comparison uses IS DISTINCT FROM, so NULL vs NULL counts as equal
and NULL vs a value counts as a change.
"""

import datetime
import logging
from dataclasses import dataclass

import pytz
from sqlalchemy import text

from warehouse.sqlutil import validate_identifier, split_qualified_name

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReconcileResult:
    updated:  int = 0
    inserted: int = 0
    deleted:  int = 0

    @property
    def writes(self) -> int:
        return self.updated + self.inserted + self.deleted


def utc_now() -> datetime.datetime:
    """Naive UTC timestamp, matching the TIMESTAMP columns in the marts."""
    return datetime.datetime.now(pytz.UTC).replace(tzinfo=None)


def table_exists(conn, qualified_name: str) -> bool:
    schema, table = split_qualified_name(qualified_name)
    found = conn.execute(text("""
        SELECT COUNT(*)
        FROM information_schema.tables
        WHERE table_catalog = current_database()
          AND table_schema  = :schema
          AND table_name    = :table
    """), {"schema": schema, "table": table}).scalar_one()
    return found > 0


def _columns_of(conn, relation: str) -> list[str]:
    return list(conn.execute(text(f"SELECT * FROM {relation} LIMIT 0")).keys())


def reconcile(
    conn,
    target: str,
    source_sql: str,
    key_columns,
    *,
    compare_columns=None,
    timestamp_column: str | None = "updated_at",
    refreshed_at: datetime.datetime | None = None,
    params: dict | None = None,
) -> ReconcileResult:
    """
    Reconcile `target` ([schema.]table) with the rows produced by `source_sql`.

    key_columns      – stable identifier shared by target and source
    compare_columns  – attributes to diff and overwrite; defaults to every
                       source column except the keys and the timestamp column
    timestamp_column – last-modified column written on update and insert
                       (None to skip); a source column of the same name is ignored
    refreshed_at     – value for the timestamp column; defaults to now (UTC)
    params           – bind parameters for `source_sql`

    A missing target is created empty from the source's shape, so every
    source row becomes an insert.
    """
    schema, table = split_qualified_name(target)
    keys = [validate_identifier(k) for k in key_columns]
    if not keys:
        raise ValueError("reconcile needs at least one key column")
    if timestamp_column is not None:
        validate_identifier(timestamp_column)
    refreshed_at = refreshed_at or utc_now()

    target_ref = f"{schema}.{table}"
    staging = f"src_{table}"

    # ─── 1) Materialize the source snapshot once ─────────────────────────────────
    conn.execute(text(f"CREATE OR REPLACE TEMP TABLE {staging} AS {source_sql}"), params or {})

    source_cols = _columns_of(conn, staging)
    missing_keys = [k for k in keys if k not in source_cols]
    if missing_keys:
        raise ValueError(f"source snapshot is missing key column(s): {missing_keys}")

    duplicates = conn.execute(text(f"""
        SELECT COUNT(*) FROM (
            SELECT {", ".join(keys)}
            FROM {staging}
            GROUP BY {", ".join(keys)}
            HAVING COUNT(*) > 1
        ) AS dup
    """)).scalar_one()
    if duplicates:
        raise ValueError(f"source snapshot for {target_ref} has {duplicates} duplicated key(s)")

    # a NULL key never matches, so it would be re-inserted and re-deleted on every run
    null_keys = conn.execute(text(f"""
        SELECT COUNT(*)
        FROM {staging}
        WHERE {" OR ".join(f"{k} IS NULL" for k in keys)}
    """)).scalar_one()
    if null_keys:
        raise ValueError(f"source snapshot for {target_ref} has {null_keys} row(s) with a NULL key")

    data_cols = [c for c in source_cols if c != timestamp_column]
    if compare_columns is None:
        compare = [c for c in data_cols if c not in keys]
    else:
        compare = [validate_identifier(c) for c in compare_columns]
        unknown = [c for c in compare if c not in source_cols]
        if unknown:
            raise ValueError(f"compare column(s) not in source snapshot: {unknown}")

    # ─── 2) A missing target behaves like an empty one ───────────────────────────
    if not table_exists(conn, target_ref):
        conn.execute(text(f"CREATE SCHEMA IF NOT EXISTS {schema}"))
        stamp = f", CAST(NULL AS TIMESTAMP) AS {timestamp_column}" if timestamp_column else ""
        conn.execute(text(f"""
            CREATE TABLE {target_ref} AS
            SELECT {", ".join(data_cols)}{stamp}
            FROM {staging}
            LIMIT 0
        """))
        log.info("   • created missing target %s", target_ref)

    target_cols = _columns_of(conn, target_ref)
    needed = keys + compare + data_cols + ([timestamp_column] if timestamp_column else [])
    absent = sorted({c for c in needed if c not in target_cols})
    if absent:
        raise ValueError(f"target {target_ref} is missing column(s): {absent}")

    match = " AND ".join(f"tgt.{k} = src.{k}" for k in keys)
    changed = " OR ".join(f"tgt.{c} IS DISTINCT FROM src.{c}" for c in compare)
    stamp_param = {"refreshed_at": refreshed_at}

    # ─── 3) Size each branch against the same snapshot ───────────────────────────
    updated = 0
    if compare:
        updated = conn.execute(text(f"""
            SELECT COUNT(*)
            FROM {target_ref} AS tgt
            JOIN {staging} AS src ON {match}
            WHERE {changed}
        """)).scalar_one()
    inserted = conn.execute(text(f"""
        SELECT COUNT(*)
        FROM {staging} AS src
        WHERE NOT EXISTS (SELECT 1 FROM {target_ref} AS tgt WHERE {match})
    """)).scalar_one()
    deleted = conn.execute(text(f"""
        SELECT COUNT(*)
        FROM {target_ref} AS tgt
        WHERE NOT EXISTS (SELECT 1 FROM {staging} AS src WHERE {match})
    """)).scalar_one()

    # ─── 4) Apply: update changed, insert new, delete vanished ───────────────────
    if updated:
        assignments = [f"{c} = src.{c}" for c in compare]
        if timestamp_column:
            assignments.append(f"{timestamp_column} = CAST(:refreshed_at AS TIMESTAMP)")
        conn.execute(text(f"""
            UPDATE {target_ref} AS tgt
               SET {", ".join(assignments)}
            FROM {staging} AS src
            WHERE {match}
              AND ({changed})
        """), stamp_param)

    if inserted:
        insert_cols = list(data_cols)
        select_cols = [f"src.{c}" for c in data_cols]
        if timestamp_column:
            insert_cols.append(timestamp_column)
            select_cols.append("CAST(:refreshed_at AS TIMESTAMP)")
        conn.execute(text(f"""
            INSERT INTO {target_ref} ({", ".join(insert_cols)})
            SELECT {", ".join(select_cols)}
            FROM {staging} AS src
            WHERE NOT EXISTS (SELECT 1 FROM {target_ref} AS tgt WHERE {match})
        """), stamp_param)

    if deleted:
        conn.execute(text(f"""
            DELETE FROM {target_ref} AS tgt
            WHERE NOT EXISTS (SELECT 1 FROM {staging} AS src WHERE {match})
        """))

    conn.execute(text(f"DROP TABLE IF EXISTS {staging}"))

    result = ReconcileResult(updated=updated, inserted=inserted, deleted=deleted)
    log.info(
        "   • reconciled %s: %d updated, %d inserted, %d deleted",
        target_ref, result.updated, result.inserted, result.deleted,
    )
    return result
