#!/usr/bin/env python3
# File: flows/deploy_incremental.py
#
# Register the nightly priority-refresh deployment with the Prefect server.
# Usage (from the project root):
#   python -m flows.deploy_incremental

import os

from flows.etl_flows import incremental_refresh_flow

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

if __name__ == "__main__":
    # Deploy the priority refresh on a daily cron at 02:00 (UTC)
    incremental_refresh_flow.from_source(
        source=PROJECT_ROOT,
        entrypoint="flows/etl_flows.py:incremental_refresh_flow",
    ).deploy(
        name="daily-priority-refresh",
        cron="0 2 * * *",
        work_pool_name="default",
        work_queue_name="default",
    )

    print("✅ incremental_refresh_flow deployed as 'daily-priority-refresh'")
