"""Batch reporter - one POST per sweep to the remote collector."""

from collections.abc import Sequence

import structlog

from netpoll.adapters.http.client import JSONClient
from netpoll.core.config import settings
from netpoll.core.errors import ReportError
from netpoll.core.models import ProbeResult

logger = structlog.get_logger()


class BatchReporter:
    """Submits a sweep's results as a single ``{"data": [...]}`` payload."""

    def __init__(
        self,
        http: JSONClient,
        collector_base_url: str = settings.collector_base_url,
    ) -> None:
        self.http = http
        self.url = f"{collector_base_url.rstrip('/')}/server.php"

    async def submit_batch(self, results: Sequence[ProbeResult]) -> bool:
        """Send the batch. Returns False when nothing was sent or sending failed."""
        if not results:
            logger.debug("No results to report")
            return False

        payload = {"data": [result.to_payload() for result in results]}
        try:
            await self.http.post_json(self.url, payload)
        except ReportError as e:
            logger.error("Failed to send batch", count=len(results), error=str(e))
            return False

        logger.info("Batch sent", count=len(results))
        return True
