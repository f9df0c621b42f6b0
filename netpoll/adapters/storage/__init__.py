"""Persistent storage adapters."""

from netpoll.adapters.storage.cache import RosterCache

__all__ = ["RosterCache"]
