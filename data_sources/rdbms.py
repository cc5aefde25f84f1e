import os

from sqlalchemy import create_engine

# ───────────── Configuration ───────────────────────────────────────────────────
# `duckdb:///:memory:` for a throwaway build, `duckdb:///md:data_jobs` for the
# hosted warehouse (DuckDB picks `motherduck_token` up from the environment).
DATABASE_URL    = os.getenv("WAREHOUSE_DATABASE_URL", "duckdb:///jobs_mart.duckdb")
SOURCE_BASE_URL = os.getenv("WAREHOUSE_SOURCE_BASE_URL", "https://storage.googleapis.com/sql_de")
SQL_ECHO        = os.getenv("WAREHOUSE_SQL_ECHO", "0") == "1"
PRIORITY_SCHEMA = os.getenv("WAREHOUSE_PRIORITY_SCHEMA", "priority_mart")


def get_engine(url: str | None = None, echo: bool | None = None):
    """
    Build the SQLAlchemy engine for the warehouse database.
    Falls back to WAREHOUSE_DATABASE_URL / WAREHOUSE_SQL_ECHO when not given.
    """
    return create_engine(url or DATABASE_URL, echo=SQL_ECHO if echo is None else echo)
