"""
Extraction: land CSV files in DuckDB without transforming them.

URLs may be https:// (DuckDB's httpfs reader fetches them directly) or local
paths, which is what the tests and offline builds use.
"""

import logging

from sqlalchemy import text

from data_sources.model import metadata as landing_metadata, job_postings
from warehouse.sqlutil import quote_literal

log = logging.getLogger(__name__)


def read_csv_sql(url: str) -> str:
    """Table expression that reads a headered CSV with type auto-detection."""
    return f"read_csv({quote_literal(url)}, auto_detect = true, header = true)"


def load_flat_postings(conn, url: str) -> int:
    """
    (Re)create the `job_postings` landing table and COPY the flat extract into
    it. Column order of the CSV must match the landing table.
    """
    landing_metadata.drop_all(conn)
    landing_metadata.create_all(conn)
    conn.execute(text(f"""
        COPY {job_postings.name}
        FROM {quote_literal(url)}
        (FORMAT CSV, HEADER true, DELIMITER ',')
    """))
    count = conn.execute(text(f"SELECT COUNT(*) FROM {job_postings.name}")).scalar_one()
    log.info("   • landed %s (%d rows) from %s", job_postings.name, count, url)
    return count
