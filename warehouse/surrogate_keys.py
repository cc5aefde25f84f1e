"""
Surrogate keys for dimension tables.

Every distinct natural-key tuple gets a dense, 1-based integer equal to its
rank under a lexicographic order of the natural key columns. The ranking is
a true ordinal (ROW_NUMBER over the deduplicated set), so the mapping depends
only on the set of values, never on physical row order, and it stays linear
in the dimension size.
"""

import logging

from sqlalchemy import text

from warehouse.sqlutil import validate_identifier, validate_qualified_name

log = logging.getLogger(__name__)


def ranked_select(source_sql: str, natural_keys, key_column: str) -> str:
    """
    SQL that deduplicates `natural_keys` from `source_sql` and numbers them.

    Output columns: key_column, *natural_keys.
    """
    cols = [validate_identifier(c) for c in natural_keys]
    if not cols:
        raise ValueError("need at least one natural key column")
    validate_identifier(key_column)
    col_list = ", ".join(cols)
    return f"""
        SELECT
            ROW_NUMBER() OVER (ORDER BY {col_list}) AS {key_column},
            {col_list}
        FROM (
            SELECT DISTINCT {col_list}
            FROM ({source_sql}) AS natural_source
        ) AS distinct_keys
    """


def assign_surrogate_keys(conn, target: str, key_column: str, natural_keys, source_sql: str) -> int:
    """
    Insert one row per distinct natural key of `source_sql` into `target`,
    keyed by rank. Returns the number of dimension rows written.
    """
    validate_qualified_name(target)
    cols = [validate_identifier(c) for c in natural_keys]
    conn.execute(text(f"""
        INSERT INTO {target} ({key_column}, {", ".join(cols)})
        {ranked_select(source_sql, cols, key_column)}
    """))
    count = conn.execute(text(f"SELECT COUNT(*) FROM {target}")).scalar_one()
    log.info("   • loaded %s (%d rows)", target, count)
    return count
