"""Bounded probe scheduler - runs one probe per device under a concurrency cap."""

import asyncio
from collections.abc import Sequence

import structlog

from netpoll.adapters.icmp.pinger import ICMPPinger
from netpoll.adapters.snmp.poller import SNMPPoller, SNMPResult
from netpoll.core.config import settings
from netpoll.core.errors import RetryExhausted
from netpoll.core.models import Device, ProbeResult

logger = structlog.get_logger()


def _check_limit(limit: int) -> int:
    if limit < 1:
        raise ValueError(f"concurrency_limit must be at least 1, got {limit}")
    return limit


class ProbeScheduler:
    """Probes every device in a sweep, at most ``concurrency_limit`` at a time."""

    def __init__(
        self,
        snmp: SNMPPoller,
        icmp: ICMPPinger,
        concurrency_limit: int = settings.concurrency_limit,
    ) -> None:
        self.snmp = snmp
        self.icmp = icmp
        self.concurrency_limit = _check_limit(concurrency_limit)

    async def run_sweep(
        self,
        devices: Sequence[Device],
        concurrency_limit: int | None = None,
    ) -> list[ProbeResult]:
        """Probe all devices and return the results that were produced.

        Result order is not guaranteed to match device order.
        """
        if concurrency_limit is None:
            limit = self.concurrency_limit
        else:
            limit = _check_limit(concurrency_limit)
        semaphore = asyncio.Semaphore(limit)

        async def bounded(device: Device) -> ProbeResult | None:
            async with semaphore:
                return await self.monitor_device(device)

        results = await asyncio.gather(*(bounded(device) for device in devices))
        return [result for result in results if result is not None]

    async def monitor_device(self, device: Device) -> ProbeResult | None:
        """Run SNMP and ICMP for one device concurrently and join them."""
        try:
            snmp_result, icmp_data = await asyncio.gather(
                self._probe_snmp(device),
                self.icmp.probe(device.ip),
            )
            return ProbeResult(
                host=device.ip,
                snmp_data=snmp_result.snmp_data,
                icmp_data=icmp_data,
            )
        except Exception as e:
            logger.error("Device monitoring failed", host=device.ip, error=str(e))
            return None

    async def _probe_snmp(self, device: Device) -> SNMPResult:
        if not device.snmp_enabled:
            return SNMPResult(host=device.ip)
        try:
            return await self.snmp.get_with_retries(
                device.ip, device.snmp_community, device.snmp_oids
            )
        except RetryExhausted as e:
            # Keep the device in the batch; ICMP data is still useful
            logger.error(
                "SNMP retries exhausted",
                host=device.ip,
                attempts=e.attempts,
                error=str(e.last_error),
            )
            return SNMPResult(host=device.ip)
