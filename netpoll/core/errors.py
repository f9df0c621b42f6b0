"""Exception taxonomy for the collector."""


class NetpollError(Exception):
    """Base class for collector errors."""


class FetchError(NetpollError):
    """Remote roster unreachable or invalid."""


class CacheError(NetpollError):
    """Local roster cache unreadable or invalid."""


class PersistError(NetpollError):
    """Roster cache could not be written."""


class SnmpError(NetpollError):
    """A single SNMP attempt failed (transport, timeout or protocol)."""


class RetryExhausted(SnmpError):
    """SNMP still failing after every allowed attempt."""

    def __init__(self, host: str, attempts: int, last_error: Exception) -> None:
        super().__init__(
            f"SNMP failed for {host} after {attempts} attempts: {last_error}"
        )
        self.host = host
        self.attempts = attempts
        self.last_error = last_error


class IcmpFailure(NetpollError):
    """Ping failed. Absorbed inside the ICMP adapter, never propagated."""


class ReportError(NetpollError):
    """Batch submission to the collector failed."""
