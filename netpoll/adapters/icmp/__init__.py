"""ICMP reachability adapter."""

from netpoll.adapters.icmp.pinger import ICMPPinger, build_ping_command, parse_latency

__all__ = [
    "ICMPPinger",
    "build_ping_command",
    "parse_latency",
]
