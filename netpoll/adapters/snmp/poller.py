"""SNMP poller with bounded retries."""

import asyncio
from dataclasses import dataclass, field
from typing import Any

import structlog
from pyasn1.type import univ
from pysnmp.hlapi.v3arch.asyncio import (
    CommunityData,
    ContextData,
    ObjectIdentity,
    ObjectType,
    SnmpEngine,
    UdpTransportTarget,
    get_cmd,
)

from netpoll.core.config import settings
from netpoll.core.errors import RetryExhausted, SnmpError

logger = structlog.get_logger()

# Common SNMP OIDs for monitoring
COMMON_OIDS = {
    "sysDescr": "1.3.6.1.2.1.1.1.0",
    "sysUpTime": "1.3.6.1.2.1.1.3.0",
    "sysName": "1.3.6.1.2.1.1.5.0",
    "sysLocation": "1.3.6.1.2.1.1.6.0",
    "ifNumber": "1.3.6.1.2.1.2.1.0",
}


@dataclass
class SNMPResult:
    """SNMP data collected from one host."""

    host: str
    snmp_data: dict[str, Any] = field(default_factory=dict)


def _convert_value(value: Any) -> Any:
    """Integer-family values become ints, everything else a display string."""
    if isinstance(value, univ.Integer):
        return int(value)
    return value.prettyPrint()


class SNMPPoller:
    """Fetches OID values from devices over SNMPv2c."""

    def __init__(
        self,
        timeout_ms: int = settings.probe_timeout_ms,
        max_retries: int = settings.max_retries,
        backoff_ms: int = settings.snmp_retry_backoff_ms,
        port: int = settings.snmp_port,
    ) -> None:
        self.timeout_ms = timeout_ms
        self.max_retries = max_retries
        self.backoff_ms = backoff_ms
        self.port = port

    async def get(
        self,
        host: str,
        community: str,
        oids: list[str],
        timeout_ms: int | None = None,
    ) -> dict[str, Any]:
        """Fetch all OIDs from a host in one GET request.

        Raises SnmpError on transport, timeout or protocol failure. The
        engine is created per call and its dispatcher is always closed.
        """
        timeout = (timeout_ms if timeout_ms is not None else self.timeout_ms) / 1000
        engine = SnmpEngine()
        try:
            target = await UdpTransportTarget.create(
                (host, self.port), timeout=timeout, retries=0
            )
            error_indication, error_status, error_index, var_binds = await get_cmd(
                engine,
                CommunityData(community, mpModel=1),
                target,
                ContextData(),
                *[ObjectType(ObjectIdentity(oid)) for oid in oids],
            )
        except Exception as e:
            raise SnmpError(f"SNMP error from {host}: {e}") from e
        finally:
            engine.close_dispatcher()

        if error_indication:
            raise SnmpError(f"SNMP error from {host}: {error_indication}")
        if error_status:
            raise SnmpError(
                f"SNMP error from {host}: {error_status.prettyPrint()} at {error_index}"
            )

        return {str(oid): _convert_value(value) for oid, value in var_binds}

    async def get_with_retries(
        self,
        host: str,
        community: str,
        oids: list[str],
        retries: int | None = None,
    ) -> SNMPResult:
        """Fetch OIDs, retrying failed attempts up to ``retries`` times.

        Raises RetryExhausted after ``retries + 1`` failed attempts.
        """
        remaining = self.max_retries if retries is None else retries
        attempts = 0

        while True:
            attempts += 1
            try:
                snmp_data = await self.get(host, community, oids)
                return SNMPResult(host=host, snmp_data=snmp_data)
            except SnmpError as e:
                if remaining <= 0:
                    raise RetryExhausted(host, attempts, e) from e
                logger.warning(
                    "SNMP attempt failed, retrying",
                    host=host,
                    remaining=remaining,
                    error=str(e),
                )
                remaining -= 1
                if self.backoff_ms:
                    await asyncio.sleep(self.backoff_ms / 1000)
