"""
Periodic suspension sweep owned by the API process.

When SUSPENSION_SWEEP_MODE is "api", the application lifespan starts one
SuspensionSweeper on boot and stops it on shutdown. In "worker" mode the
same pass runs as an arq cron job instead (see tasks/worker.py).
"""

import asyncio
from datetime import datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from trust_engine.config import settings
from trust_engine.core.database import AsyncSessionLocal, utcnow
from trust_engine.core.logging import get_logger
from trust_engine.services.sanctions import expire_suspensions

logger = get_logger(__name__)


class SuspensionSweeper:
    """
    Runs expire_suspensions every `interval` seconds until stopped.

    A failing pass is logged and the loop carries on with the next one.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] = AsyncSessionLocal,
        interval: float | None = None,
        batch_size: int | None = None,
    ) -> None:
        self.session_factory = session_factory
        self.interval = interval or settings.SUSPENSION_SWEEP_INTERVAL_SECONDS
        self.batch_size = batch_size or settings.SUSPENSION_SWEEP_BATCH_SIZE
        self.last_run_at: datetime | None = None
        self.last_result: dict[str, Any] | None = None
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> dict[str, Any]:
        """One sweep pass in a fresh session."""
        async with self.session_factory() as db:
            result = await expire_suspensions(db, batch_size=self.batch_size)
        self.last_run_at = utcnow()
        self.last_result = result
        return result

    async def _loop(self) -> None:
        logger.info(
            "suspension_sweeper_started", interval=self.interval, batch_size=self.batch_size
        )
        while not self._stopping.is_set():
            try:
                await self.run_once()
            except Exception as e:
                logger.error(
                    "suspension_sweep_failed", error=str(e), error_type=type(e).__name__
                )
            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=self.interval)
            except TimeoutError:
                pass
        logger.info("suspension_sweeper_stopped")

    def start(self) -> None:
        if self.running:
            return
        self._stopping.clear()
        self._task = asyncio.create_task(self._loop(), name="suspension-sweeper")

    async def stop(self) -> None:
        """Signal the loop and wait for the current pass to finish."""
        if self._task is None:
            return
        self._stopping.set()
        try:
            await self._task
        finally:
            self._task = None


# Instance owned by the API lifespan (None unless SUSPENSION_SWEEP_MODE is "api")
sweeper: SuspensionSweeper | None = None


def get_sweeper() -> SuspensionSweeper | None:
    return sweeper


def set_sweeper(instance: SuspensionSweeper | None) -> None:
    global sweeper
    sweeper = instance
