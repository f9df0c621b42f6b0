"""Collector service - drives roster refresh and monitoring sweeps."""

import asyncio
import time

import structlog

from netpoll.adapters.http.client import JSONClient
from netpoll.adapters.icmp.pinger import ICMPPinger
from netpoll.adapters.snmp.poller import SNMPPoller
from netpoll.adapters.storage.cache import RosterCache
from netpoll.core.config import settings
from netpoll.core.models import ProbeResult, SweepStats, utcnow
from netpoll.core.reporter import BatchReporter
from netpoll.core.roster import RosterManager, RosterSnapshot
from netpoll.core.scheduler import ProbeScheduler

logger = structlog.get_logger()

# Global collector service instance
_service: "CollectorService | None" = None


def get_collector_service() -> "CollectorService":
    """Get the global collector service instance."""
    global _service
    if _service is None:
        _service = build_collector_service()
    return _service


def build_collector_service() -> "CollectorService":
    """Wire a collector service from settings."""
    http = JSONClient()
    snapshot = RosterSnapshot()
    return CollectorService(
        roster=RosterManager(http, RosterCache(), snapshot),
        scheduler=ProbeScheduler(SNMPPoller(), ICMPPinger()),
        reporter=BatchReporter(http),
        http=http,
    )


class CollectorService:
    """Runs the refresh loop and the sweep loop for the process lifetime.

    Each sweep tick spawns its own task, so a slow sweep never delays the
    next one and sweeps may overlap.
    """

    def __init__(
        self,
        roster: RosterManager,
        scheduler: ProbeScheduler,
        reporter: BatchReporter,
        http: JSONClient | None = None,
        refresh_interval_ms: int = settings.refresh_interval_ms,
        sweep_interval_ms: int = settings.sweep_interval_ms,
    ) -> None:
        self.roster = roster
        self.scheduler = scheduler
        self.reporter = reporter
        self.http = http
        self.refresh_interval = refresh_interval_ms / 1000
        self.sweep_interval = sweep_interval_ms / 1000
        self.stats = SweepStats()
        self.initialized = False
        self._running = False
        self._loops: list[asyncio.Task] = []
        self._sweeps: set[asyncio.Task] = set()

    @property
    def snapshot(self) -> RosterSnapshot:
        return self.roster.snapshot

    async def start(self) -> None:
        """Resolve the initial roster and start both loops."""
        devices = await self.roster.resolve_initial()
        self.initialized = True
        logger.info("Devices initialized", count=len(devices))

        self._running = True
        self._loops = [
            asyncio.create_task(self._refresh_loop()),
            asyncio.create_task(self._sweep_loop()),
        ]
        logger.info(
            "Collector service started",
            refresh_interval_s=self.refresh_interval,
            sweep_interval_s=self.sweep_interval,
        )

    async def stop(self) -> None:
        """Stop the loops and cancel any sweeps still running."""
        self._running = False
        tasks = [*self._loops, *self._sweeps]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._loops.clear()
        self._sweeps.clear()
        if self.http:
            await self.http.close()
        logger.info("Collector service stopped")

    async def _refresh_loop(self) -> None:
        while self._running:
            await asyncio.sleep(self.refresh_interval)
            try:
                await self.roster.refresh()
            except Exception as e:
                logger.error("Error in refresh loop", error=str(e))

    async def _sweep_loop(self) -> None:
        while self._running:
            await asyncio.sleep(self.sweep_interval)
            self.spawn_sweep()

    def spawn_sweep(self) -> asyncio.Task:
        """Start a sweep in the background without waiting for earlier ones."""
        task = asyncio.create_task(self.run_sweep_once())
        self._sweeps.add(task)
        task.add_done_callback(self._sweeps.discard)
        return task

    async def run_sweep_once(self) -> list[ProbeResult]:
        """Probe the current roster and report the batch."""
        devices = self.snapshot.current
        stats = self.stats
        stats.sweeps_started += 1
        stats.in_flight += 1
        stats.last_started_at = utcnow()
        started = time.monotonic()
        logger.info("Starting sweep", devices=len(devices))

        try:
            results = await self.scheduler.run_sweep(devices)
            report_ok = await self.reporter.submit_batch(results)
        except Exception as e:
            stats.sweeps_failed += 1
            logger.error("Sweep failed", error=str(e))
            return []
        finally:
            stats.in_flight -= 1

        stats.sweeps_completed += 1
        stats.last_completed_at = utcnow()
        stats.last_device_count = len(devices)
        stats.last_result_count = len(results)
        stats.last_duration_ms = round((time.monotonic() - started) * 1000, 1)
        stats.last_report_ok = report_ok
        logger.info(
            "Sweep complete",
            devices=len(devices),
            results=len(results),
            duration_ms=stats.last_duration_ms,
        )
        return results
