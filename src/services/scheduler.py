from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

logger = logging.getLogger(__name__)

REFRESH_JOB_ID = "refresh-prices"


class RefreshScheduler:
    """Runs ``refresh`` once at start and then every ``interval_seconds``.

    ``max_instances=1`` keeps runs from overlapping; a run that would start
    while the previous one is still going is coalesced into the next tick.
    """

    def __init__(
        self,
        refresh: Callable[[], object],
        *,
        interval_seconds: float,
        scheduler: BackgroundScheduler | None = None,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.refresh = refresh
        self.interval_seconds = interval_seconds
        self.scheduler = scheduler or BackgroundScheduler()

    @property
    def running(self) -> bool:
        return bool(self.scheduler.running)

    def start(self, *, paused: bool = False) -> None:
        self.scheduler.add_job(
            func=self._run_refresh,
            trigger=IntervalTrigger(seconds=self.interval_seconds),
            id=REFRESH_JOB_ID,
            max_instances=1,
            coalesce=True,
            next_run_time=datetime.now(),
            replace_existing=True,
        )
        self.scheduler.start(paused=paused)
        logger.info("Refresh scheduled every %.0fs", self.interval_seconds)

    def shutdown(self, *, wait: bool = False) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=wait)
            logger.info("Refresh scheduler shut down")

    def next_run_time(self) -> datetime | None:
        job = self.scheduler.get_job(REFRESH_JOB_ID)
        return job.next_run_time if job is not None else None

    def _run_refresh(self) -> None:
        try:
            self.refresh()
        except Exception:
            # keep the job scheduled; the next tick gets a fresh attempt
            logger.exception("Scheduled price refresh failed")


__all__ = ["REFRESH_JOB_ID", "RefreshScheduler"]
