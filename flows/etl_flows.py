# File: flows/etl_flows.py

from datetime import date

from prefect import flow, task, get_run_logger

from warehouse.etl import run_initial_load, run_priority_refresh
from notifications.telegram import send_telegram_message


# ─────────────────────────────────────────────────────────────────────────────
@task(name="notify", retries=0, retry_delay_seconds=0, log_prints=True)
def notify(message: str):
    """
    Send a message to Telegram. A missing bot configuration or a failed HTTP
    call is logged as a warning and never fails the flow.
    """
    try:
        send_telegram_message(message)
    except RuntimeError as exc:
        get_run_logger().warning("Telegram notification not sent: %s", exc)


# ─────────────────────────────────────────────────────────────────────────────
@task(name="warehouse_build_task", retries=1, retry_delay_seconds=300, log_prints=True)
def warehouse_build(base_url: str | None = None):
    """
    Star schema CSVs → warehouse → marts, including the initial priority
    snapshot. Prefect retries once after 5 minutes; the build starts from
    scratch every time.
    """
    counts = run_initial_load(base_url)
    return f"Warehouse build completed ({len(counts)} steps)"


# ─────────────────────────────────────────────────────────────────────────────
@task(name="priority_refresh_task", retries=1, retry_delay_seconds=300, log_prints=True)
def priority_refresh(batch_id: int):
    """Reconcile the priority snapshot; re-running an unchanged source writes nothing."""
    result = run_priority_refresh()
    return (
        f"Priority refresh for batch {batch_id}: "
        f"{result.updated} updated, {result.inserted} inserted, {result.deleted} deleted"
    )


# ─────────────────────────────────────────────────────────────────────────────
@flow(name="initial_load_flow")
def initial_load_flow(base_url: str | None = None):
    """
    1) Send "starting" message to Telegram.
    2) Run the warehouse + marts build (with retry).
    3) On success: send "success" message.
    4) On exception: send "failure" message and re-raise.
    """
    logger = get_run_logger()
    notify("🚀 Starting initial warehouse load")

    try:
        msg = warehouse_build(base_url)
    except Exception as e:
        notify(f"❌ Initial warehouse load FAILED\nError: {e}")
        raise

    notify(f"✅ {msg}")
    logger.info(msg)
    return msg


# ─────────────────────────────────────────────────────────────────────────────
@flow(name="incremental_refresh_flow")
def incremental_refresh_flow(execution_date: date | None = None):
    """
    1) Compute batch_id from execution_date (YYYYMMDD, today when omitted).
    2) Send "starting" message to Telegram.
    3) Reconcile the priority snapshot (with retry).
    4) Report the update / insert / delete counts, or the failure and re-raise.
    """
    logger = get_run_logger()
    batch_id = int((execution_date or date.today()).strftime("%Y%m%d"))

    notify(f"🚀 Starting priority refresh for batch {batch_id}")

    try:
        msg = priority_refresh(batch_id)
    except Exception as e:
        notify(f"❌ Priority refresh FAILED for batch {batch_id}\nError: {e}")
        raise

    notify(f"✅ {msg}")
    logger.info(msg)
    return msg


# ─────────────────────────────────────────────────────────────────────────────
if __name__ == "__main__":
    # -------------------------------------------------------
    # Serve the daily refresh from this process until CTRL+C
    # -------------------------------------------------------
    incremental_refresh_flow.serve(
        name="priority-refresh-daily",
        cron="0 2 * * *",
        tags=["jobs_warehouse"],
        pause_on_shutdown=False,
    )
