"""Shared fixtures."""

import pytest

from netpoll.adapters.storage.cache import RosterCache
from netpoll.core.models import Device

from tests.stubs import FakeRemote


@pytest.fixture
def remote():
    """Fake roster API / collector."""
    return FakeRemote()


@pytest.fixture
def cache(tmp_path):
    """Roster cache in a temp directory."""
    return RosterCache(tmp_path / "devices.json")


@pytest.fixture
def sample_devices():
    """The two-device roster from the reference scenario."""
    return [
        Device(ip="10.0.0.1", snmpCommunity="public", snmpOids=["1.3.6.1.2.1.1.3.0"]),
        Device(ip="10.0.0.2"),
    ]
