#!/usr/bin/env python3
# star_schema_sample.py
#
# Usage:
#   python -m presentation.star_schema_sample

import pandas as pd

from data_sources.rdbms import get_engine
from warehouse.sqlutil import validate_identifier


def sample_table(conn, schema: str, table: str, limit: int = 5) -> pd.DataFrame:
    """
    Fetch up to `limit` rows from `schema.table` into a DataFrame.
    """
    sql = f"SELECT * FROM {validate_identifier(schema)}.{validate_identifier(table)} LIMIT {int(limit)}"
    return pd.read_sql_query(sql, conn)  # https://pandas.pydata.org/docs/reference/api/pandas.read_sql_query.html


def print_markdown(df: pd.DataFrame, title: str) -> None:
    """
    Print a DataFrame as a Markdown-style table.
    """
    print(f"\n## {title}\n")
    print(df.to_markdown(index=False))    # https://pandas.pydata.org/docs/reference/api/pandas.DataFrame.to_markdown.html


if __name__ == "__main__":
    with get_engine().connect() as conn:
        # 1) Dimensions
        print_markdown(sample_table(conn, "main", "company_dim"), "Sample Rows from company_dim (Dimension)")
        print_markdown(sample_table(conn, "main", "skills_dim"), "Sample Rows from skills_dim (Dimension)")

        # 2) Fact + bridge
        print_markdown(sample_table(conn, "main", "job_postings_fact"), "Sample Rows from job_postings_fact (Fact)")
        print_markdown(sample_table(conn, "main", "skills_job_dim"), "Sample Rows from skills_job_dim (Bridge)")

        # 3) One mart
        print_markdown(
            sample_table(conn, "skills_mart", "fact_skill_demand_monthly"),
            "Sample Rows from skills_mart.fact_skill_demand_monthly (Mart)",
        )
