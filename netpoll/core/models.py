"""Core data models."""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Latency value reported when a host did not answer the echo
LATENCY_UNAVAILABLE = "N/A"


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


class Device(BaseModel):
    """One monitored target from the roster.

    Unknown roster fields are kept so the cached roster matches the remote
    one byte for byte (modulo formatting).
    """

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    ip: str
    snmp_community: str | None = Field(default=None, alias="snmpCommunity")
    snmp_oids: list[str] | None = Field(default=None, alias="snmpOids")

    @property
    def snmp_enabled(self) -> bool:
        """SNMP is probed only when both community and OIDs are present."""
        return bool(self.snmp_community) and bool(self.snmp_oids)

    def to_record(self) -> dict[str, Any]:
        """Roster record in its wire (camelCase) form."""
        return self.model_dump(by_alias=True, exclude_none=True)


class IcmpData(BaseModel):
    """Echo outcome: latency in milliseconds or the unavailable sentinel."""

    latency: float | str = LATENCY_UNAVAILABLE

    @property
    def alive(self) -> bool:
        return self.latency != LATENCY_UNAVAILABLE


class ProbeResult(BaseModel):
    """Outcome of monitoring one device in one sweep."""

    model_config = ConfigDict(populate_by_name=True)

    host: str
    snmp_data: dict[str, Any] = Field(default_factory=dict, alias="snmpData")
    icmp_data: IcmpData = Field(default_factory=IcmpData, alias="icmpData")
    timestamp: datetime = Field(default_factory=utcnow)

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready form sent to the collector."""
        return self.model_dump(mode="json", by_alias=True)


class SweepStats(BaseModel):
    """Running counters for the sweep loop."""

    sweeps_started: int = 0
    sweeps_completed: int = 0
    sweeps_failed: int = 0
    in_flight: int = 0
    last_started_at: datetime | None = None
    last_completed_at: datetime | None = None
    last_device_count: int = 0
    last_result_count: int = 0
    last_duration_ms: float | None = None
    last_report_ok: bool | None = None
