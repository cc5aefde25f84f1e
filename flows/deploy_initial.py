#!/usr/bin/env python3
# File: flows/deploy_initial.py
#
# Register the on-demand initial-load deployment with the Prefect server.
# Usage (from the project root):
#   python -m flows.deploy_initial

import os

from flows.etl_flows import initial_load_flow

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

if __name__ == "__main__":
    # ─────────────────────────────────────────────────────────────────────────
    # Prefect needs to know where workers pick the flow code up from; the
    # entrypoint is relative to the project root.
    # ─────────────────────────────────────────────────────────────────────────
    initial_load_flow.from_source(
        source=PROJECT_ROOT,
        entrypoint="flows/etl_flows.py:initial_load_flow",
    ).deploy(
        name="initial-load",
        work_pool_name="default",      # must match your existing pool
        work_queue_name="default",     # must match your existing queue
    )

    print("✅ initial_load_flow deployed as 'initial-load'")
