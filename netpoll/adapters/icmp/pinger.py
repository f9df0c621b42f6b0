"""ICMP echo via the system ping command."""

import asyncio
import contextlib
import math
import platform
import re

import structlog

from netpoll.core.config import settings
from netpoll.core.errors import IcmpFailure
from netpoll.core.models import LATENCY_UNAVAILABLE, IcmpData

logger = structlog.get_logger()

# "time=12.3 ms", "time=12.3ms", "time<1ms"
_TIME_PATTERN = re.compile(r"time[=<]\s*([\d.]+)\s*ms", re.IGNORECASE)
# "rtt min/avg/max/mdev = 0.1/0.2/0.3/0.0 ms" or "round-trip min/avg/max/stddev = ..."
_SUMMARY_PATTERN = re.compile(
    r"(?:rtt|round-trip)[^=]*=\s*[\d.]+/([\d.]+)/", re.IGNORECASE
)


def parse_latency(output: str) -> float | None:
    """Extract the round-trip time in milliseconds from ping output."""
    match = _TIME_PATTERN.search(output)
    if match:
        return float(match.group(1))
    match = _SUMMARY_PATTERN.search(output)
    if match:
        return float(match.group(1))
    return None


def build_ping_command(
    host: str, timeout_ms: int, command: str = "ping", system: str | None = None
) -> list[str]:
    """Build a one-echo ping command line for the current platform."""
    system = (system or platform.system()).lower()
    if "windows" in system:
        return [command, "-n", "1", "-w", str(timeout_ms), host]
    if "darwin" in system:
        # macOS -W takes milliseconds
        return [command, "-c", "1", "-W", str(timeout_ms), host]
    return [command, "-c", "1", "-W", str(max(1, math.ceil(timeout_ms / 1000))), host]


class ICMPPinger:
    """Probes host reachability and latency. Never raises."""

    def __init__(
        self,
        timeout_ms: int = settings.probe_timeout_ms,
        command: str = settings.ping_command,
    ) -> None:
        self.timeout_ms = timeout_ms
        self.command = command

    async def probe(self, host: str, timeout_ms: int | None = None) -> IcmpData:
        """Send one echo request and report the latency or the N/A sentinel."""
        timeout_ms = timeout_ms if timeout_ms is not None else self.timeout_ms
        try:
            latency = await self._ping(host, timeout_ms)
        except IcmpFailure as e:
            logger.debug("Host unreachable", host=host, reason=str(e))
            return IcmpData(latency=LATENCY_UNAVAILABLE)
        except Exception as e:
            logger.warning("Ping failed", host=host, error=str(e))
            return IcmpData(latency=LATENCY_UNAVAILABLE)
        return IcmpData(latency=latency)

    async def _ping(self, host: str, timeout_ms: int) -> float:
        cmd = build_ping_command(host, timeout_ms, self.command)
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
        )

        try:
            stdout, _ = await asyncio.wait_for(
                proc.communicate(), timeout=timeout_ms / 1000
            )
        except asyncio.TimeoutError:
            raise IcmpFailure(f"ping timed out after {timeout_ms}ms")
        finally:
            # Also reached on cancellation; never leave a ping child behind
            if proc.returncode is None:
                with contextlib.suppress(ProcessLookupError):
                    proc.kill()
                await proc.wait()

        if proc.returncode != 0:
            raise IcmpFailure(f"ping exited with status {proc.returncode}")

        latency = parse_latency(stdout.decode(errors="ignore"))
        if latency is None:
            raise IcmpFailure("no round-trip time in ping output")
        if latency > timeout_ms:
            raise IcmpFailure(f"reply took {latency}ms, over the {timeout_ms}ms timeout")
        return latency
