"""SNMP adapter for polling network devices."""

from netpoll.adapters.snmp.poller import (
    COMMON_OIDS,
    SNMPPoller,
    SNMPResult,
)

__all__ = [
    "SNMPPoller",
    "SNMPResult",
    "COMMON_OIDS",
]
