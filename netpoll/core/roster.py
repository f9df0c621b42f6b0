"""Device roster: remote-primary, cache-fallback resolution and the shared snapshot."""

from collections.abc import Iterable, Sequence
from typing import Any

import structlog
from pydantic import ValidationError

from netpoll.adapters.http.client import JSONClient
from netpoll.adapters.storage.cache import RosterCache
from netpoll.core.config import settings
from netpoll.core.errors import CacheError, FetchError, PersistError
from netpoll.core.models import Device

logger = structlog.get_logger()


class RosterSnapshot:
    """Holds the current roster as an immutable tuple, swapped wholesale.

    Readers take ``current`` once and keep using that tuple; a later
    ``replace`` never changes a tuple already handed out.
    """

    def __init__(self, devices: Iterable[Device] = ()) -> None:
        self._devices: tuple[Device, ...] = tuple(devices)
        self._version = 0

    @property
    def current(self) -> tuple[Device, ...]:
        return self._devices

    @property
    def version(self) -> int:
        """Number of times the roster has been replaced."""
        return self._version

    def replace(self, devices: Iterable[Device]) -> None:
        self._devices = tuple(devices)
        self._version += 1

    def __len__(self) -> int:
        return len(self._devices)


def parse_devices(data: Any) -> list[Device]:
    """Validate a decoded JSON document as a list of devices."""
    if not isinstance(data, list):
        raise ValueError(f"expected a JSON array, got {type(data).__name__}")
    return [Device.model_validate(record) for record in data]


class RosterManager:
    """Resolves the authoritative device list and keeps the snapshot current."""

    def __init__(
        self,
        http: JSONClient,
        cache: RosterCache,
        snapshot: RosterSnapshot | None = None,
        api_base_url: str = settings.api_base_url,
    ) -> None:
        self.http = http
        self.cache = cache
        self.snapshot = snapshot if snapshot is not None else RosterSnapshot()
        self.api_url = f"{api_base_url.rstrip('/')}/devices.json"

    async def load_from_remote(self) -> list[Device]:
        """Fetch the roster from the API."""
        data = await self.http.get_json(self.api_url)
        try:
            return parse_devices(data)
        except (ValueError, ValidationError) as e:
            raise FetchError(f"Invalid roster from {self.api_url}: {e}") from e

    async def load_from_cache(self) -> list[Device]:
        """Read the roster from the local cache."""
        data = await self.cache.load()
        try:
            return parse_devices(data)
        except (ValueError, ValidationError) as e:
            raise CacheError(f"Invalid roster in {self.cache.path}: {e}") from e

    async def persist(self, devices: Sequence[Device]) -> None:
        """Overwrite the cache with the full roster."""
        await self.cache.save([device.to_record() for device in devices])

    async def _fetch_and_persist(self) -> list[Device]:
        devices = await self.load_from_remote()
        try:
            await self.persist(devices)
        except PersistError as e:
            logger.error("Failed to persist roster", error=str(e))
        return devices

    async def resolve_initial(self) -> list[Device]:
        """Load the startup roster: remote, else cache, else empty."""
        try:
            devices = await self._fetch_and_persist()
            logger.info("Roster loaded from API", count=len(devices))
        except FetchError as e:
            logger.error("Failed to load roster from API, using cache", error=str(e))
            try:
                devices = await self.load_from_cache()
                logger.info("Roster loaded from cache", count=len(devices))
            except CacheError as cache_error:
                logger.error("Failed to load roster cache", error=str(cache_error))
                devices = []

        self.snapshot.replace(devices)
        return devices

    async def refresh(self) -> None:
        """Re-fetch the roster; keep the current snapshot on failure."""
        logger.info("Refreshing roster from API")
        try:
            devices = await self._fetch_and_persist()
        except FetchError as e:
            logger.error("Failed to refresh roster", error=str(e))
            return

        self.snapshot.replace(devices)
        logger.info("Roster refreshed", count=len(devices))
