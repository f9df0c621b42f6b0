"""HTTP transport adapter."""

from netpoll.adapters.http.client import JSONClient

__all__ = ["JSONClient"]
