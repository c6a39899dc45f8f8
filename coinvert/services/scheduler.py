"""Scheduler setup for periodic latest-rate refresh."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from coinvert.errors import FetchError
from coinvert.services.rate_client import RateClient

logger = logging.getLogger(__name__)

REFRESH_JOB_ID = "refresh_latest_rates"


def run_refresh(client: RateClient, base: str, state: dict[str, Any]) -> None:
    """Refresh the cached latest table for `base`, recording the outcome in `state`."""

    try:
        table = client.get_latest(base)
    except FetchError as exc:
        state["last_failure"] = datetime.now(UTC)
        state["last_error"] = exc.reason.value
        logger.error("Scheduled refresh failed: %s", exc)
        return

    state["last_success"] = datetime.now(UTC)
    state["last_failure"] = None
    state["last_error"] = None
    state["last_table"] = {"base": table.base, "currencies": len(table)}
    logger.info("Scheduled refresh cached %s rates for %s", len(table), table.base)


def init_scheduler(
    client: RateClient,
    config: Mapping[str, Any],
    state: dict[str, Any] | None = None,
) -> BackgroundScheduler | None:
    """Start an APScheduler job that keeps the latest-rate cache warm, if enabled."""

    if not config.get("SCHEDULER_ENABLED", False):
        logger.info("Scheduler disabled via configuration.")
        return None

    refresh_state = state if state is not None else {}
    base = str(config.get("DEFAULT_BASE_CURRENCY", "usd"))
    scheduler = BackgroundScheduler(timezone=config.get("SCHEDULER_TIMEZONE", "UTC"))
    cron_expr = config.get("RATES_REFRESH_CRON", "0 */1 * * *")
    trigger = CronTrigger.from_crontab(cron_expr)
    scheduler.add_job(
        run_refresh,
        trigger=trigger,
        args=[client, base, refresh_state],
        id=REFRESH_JOB_ID,
        replace_existing=True,
    )
    scheduler.start()

    logger.info("APScheduler started with cron '%s'", cron_expr)
    return scheduler
