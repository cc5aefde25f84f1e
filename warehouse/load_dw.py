"""
Load the pre-normalized star schema CSVs (company_dim, skills_dim,
job_postings_fact, skills_job_dim) into freshly created tables.

Columns are selected by name, so the CSVs may carry extra columns or a
different column order. Parents load before children so the foreign keys
hold at every step.
"""

import logging

from sqlalchemy import text

from data_sources.model import STAR_SCHEMA_FILES, source_url
from warehouse.extract import read_csv_sql
from warehouse.star_schema import metadata as star_metadata

log = logging.getLogger(__name__)

# a few upstream skill rows carry no name
_ROW_FILTERS = {
    "skills_dim": "WHERE skills IS NOT NULL",
}


def load_table_from_csv(conn, table_name: str, url: str) -> int:
    table = star_metadata.tables[table_name]
    cols = ", ".join(c.name for c in table.columns)
    conn.execute(text(f"""
        INSERT INTO {table_name} ({cols})
        SELECT {cols}
        FROM {read_csv_sql(url)}
        {_ROW_FILTERS.get(table_name, "")}
    """))
    count = conn.execute(text(f"SELECT COUNT(*) FROM {table_name}")).scalar_one()
    log.info("   • loaded %s (%d rows)", table_name, count)
    return count


def load_star_schema(conn, base_url: str | None = None) -> dict:
    """Load all four star tables from `base_url`; returns row counts per table."""
    counts = {}
    for table_name, file_name in STAR_SCHEMA_FILES.items():
        counts[table_name] = load_table_from_csv(conn, table_name, source_url(file_name, base_url))
    return counts
