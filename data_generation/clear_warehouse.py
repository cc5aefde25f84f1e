#!/usr/bin/env python3
"""
clear_warehouse.py

Usage:
  # Drop every mart schema, the star schema and the landing table.
  python -m data_generation.clear_warehouse
"""

from sqlalchemy import text

from data_sources.model import metadata as landing_metadata
from data_sources.rdbms import get_engine, PRIORITY_SCHEMA
from warehouse.star_schema import drop_star_schema

MART_SCHEMAS = ("flat_mart", "skills_mart", "company_mart", PRIORITY_SCHEMA)


# ───────────── Clear Warehouse Function ─────────────────────────────────────────
def clear_warehouse(engine=None) -> None:
    """
    Remove everything the builds create, in one transaction:
      • each mart schema with DROP SCHEMA … CASCADE,
      • the four star tables (bridge and fact before the dimensions),
      • the flat landing table.
    """
    engine = engine or get_engine()
    with engine.begin() as conn:
        for schema in MART_SCHEMAS:
            conn.execute(text(f"DROP SCHEMA IF EXISTS {schema} CASCADE"))
        drop_star_schema(conn)
        landing_metadata.drop_all(conn)
    print("✅ Marts, star schema and landing table dropped.")


# ───────────── Main Entrypoint ───────────────────────────────────────────────────
if __name__ == "__main__":
    clear_warehouse()
