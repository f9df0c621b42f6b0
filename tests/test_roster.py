"""Tests for roster resolution, persistence and the snapshot holder."""

import json

import pytest

from netpoll.adapters.storage.cache import RosterCache
from netpoll.core.errors import CacheError, FetchError, PersistError
from netpoll.core.models import Device
from netpoll.core.roster import RosterManager, RosterSnapshot

REMOTE_ROSTER = [
    {"ip": "10.0.0.1", "snmpCommunity": "public", "snmpOids": ["1.3.6.1.2.1.1.3.0"]},
    {"ip": "10.0.0.2"},
]
CACHED_ROSTER = [{"ip": "192.168.1.1"}]


class CountingCache:
    """Wraps a cache and counts writes."""

    def __init__(self, cache, fail_save=False) -> None:
        self.inner = cache
        self.path = cache.path
        self.fail_save = fail_save
        self.saves = 0

    async def load(self):
        return await self.inner.load()

    async def save(self, data):
        self.saves += 1
        if self.fail_save:
            raise PersistError("disk full")
        await self.inner.save(data)


def make_manager(remote, cache):
    return RosterManager(remote.client(), cache, api_base_url="http://api.test/network")


@pytest.mark.asyncio
async def test_resolve_initial_prefers_remote_and_persists(remote, cache):
    """Test remote success overwrites the cache and is returned."""
    cache.path.write_text(json.dumps(CACHED_ROSTER))
    remote.roster = REMOTE_ROSTER
    manager = make_manager(remote, cache)

    devices = await manager.resolve_initial()

    assert [d.ip for d in devices] == ["10.0.0.1", "10.0.0.2"]
    assert json.loads(cache.path.read_text()) == REMOTE_ROSTER
    assert manager.snapshot.current == tuple(devices)
    assert str(remote.requests[0].url) == "http://api.test/network/devices.json"


@pytest.mark.asyncio
async def test_resolve_initial_falls_back_to_cache_without_writing(remote, cache):
    """Test remote failure returns cached data and leaves the cache alone."""
    cache.path.write_text(json.dumps(CACHED_ROSTER))
    remote.roster_status = 500
    counting = CountingCache(cache)
    manager = make_manager(remote, counting)

    devices = await manager.resolve_initial()

    assert [d.ip for d in devices] == ["192.168.1.1"]
    assert counting.saves == 0


@pytest.mark.asyncio
async def test_resolve_initial_returns_empty_when_everything_fails(remote, cache):
    """Test remote and cache failures yield an empty roster, not a crash."""
    remote.fail_connect = True
    manager = make_manager(remote, cache)

    devices = await manager.resolve_initial()

    assert devices == []
    assert manager.snapshot.current == ()


@pytest.mark.asyncio
async def test_resolve_initial_uses_remote_when_persist_fails(remote, cache):
    """Test a cache write failure does not discard a good remote roster."""
    remote.roster = REMOTE_ROSTER
    manager = make_manager(remote, CountingCache(cache, fail_save=True))

    devices = await manager.resolve_initial()

    assert len(devices) == 2


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [{"devices": []}, [{"snmpCommunity": "public"}], "nope"])
async def test_load_from_remote_rejects_bad_payloads(remote, cache, payload):
    """Test non-array bodies and records without ip are FetchErrors."""
    remote.roster = payload
    manager = make_manager(remote, cache)

    with pytest.raises(FetchError):
        await manager.load_from_remote()


@pytest.mark.asyncio
async def test_load_from_cache_errors(remote, cache):
    """Test missing and corrupt cache files are CacheErrors."""
    manager = make_manager(remote, cache)

    with pytest.raises(CacheError):
        await manager.load_from_cache()

    cache.path.write_text("{not json")
    with pytest.raises(CacheError):
        await manager.load_from_cache()

    cache.path.write_text(json.dumps({"ip": "10.0.0.1"}))
    with pytest.raises(CacheError):
        await manager.load_from_cache()


@pytest.mark.asyncio
async def test_persist_writes_pretty_json(remote, cache):
    """Test the cache holds an indented array and no temp files remain."""
    manager = make_manager(remote, cache)
    devices = [Device.model_validate(r) for r in REMOTE_ROSTER]

    await manager.persist(devices)

    text = cache.path.read_text()
    assert text == json.dumps(REMOTE_ROSTER, indent=2)
    assert [p.name for p in cache.path.parent.iterdir()] == ["devices.json"]


@pytest.mark.asyncio
async def test_persist_failure_raises_persist_error(remote, tmp_path):
    """Test an unwritable location surfaces PersistError."""
    blocker = tmp_path / "blocker"
    blocker.write_text("")

    manager = make_manager(remote, RosterCache(blocker / "devices.json"))

    with pytest.raises(PersistError):
        await manager.persist([Device(ip="10.0.0.1")])


@pytest.mark.asyncio
async def test_refresh_replaces_snapshot(remote, cache):
    """Test a successful refresh installs and caches the new roster."""
    snapshot = RosterSnapshot([Device(ip="192.168.1.1")])
    remote.roster = REMOTE_ROSTER
    manager = RosterManager(remote.client(), cache, snapshot, "http://api.test/network")

    await manager.refresh()

    assert [d.ip for d in snapshot.current] == ["10.0.0.1", "10.0.0.2"]
    assert snapshot.version == 1
    assert json.loads(cache.path.read_text()) == REMOTE_ROSTER


@pytest.mark.asyncio
async def test_refresh_failure_keeps_snapshot(remote, cache):
    """Test a failed refresh leaves the current roster untouched."""
    original = [Device(ip="192.168.1.1")]
    snapshot = RosterSnapshot(original)
    remote.roster_status = 503
    counting = CountingCache(cache)
    manager = RosterManager(remote.client(), counting, snapshot, "http://api.test/network")

    await manager.refresh()

    assert snapshot.current == tuple(original)
    assert snapshot.version == 0
    assert counting.saves == 0


def test_snapshot_replace_does_not_touch_captured_tuple():
    """Test readers keep the roster they captured."""
    snapshot = RosterSnapshot([Device(ip="10.0.0.1")])
    captured = snapshot.current

    snapshot.replace([Device(ip="10.0.0.2"), Device(ip="10.0.0.3")])

    assert [d.ip for d in captured] == ["10.0.0.1"]
    assert len(snapshot) == 2
