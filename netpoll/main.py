"""Main entry point for the netpoll collector daemon."""

import asyncio
import logging
import sys

import structlog
import uvicorn

from netpoll import __version__
from netpoll.api.app import create_app
from netpoll.core.config import settings
from netpoll.core.service import get_collector_service

logging.basicConfig(format="%(message)s", stream=sys.stdout, level=settings.log_level.upper())

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        (
            structlog.processors.JSONRenderer()
            if settings.log_format == "json"
            else structlog.dev.ConsoleRenderer()
        ),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


async def start_services() -> None:
    """Resolve the roster and start the refresh and sweep loops."""
    service = get_collector_service()
    await service.start()
    logger.info("All services started")


async def shutdown_services() -> None:
    """Shutdown all services gracefully."""
    service = get_collector_service()
    await service.stop()
    logger.info("All services stopped")


async def run_forever() -> None:
    """Block until cancelled; used when the status API is disabled."""
    await asyncio.Event().wait()


def main() -> None:
    """Main entry point."""
    logger.info(
        "Starting netpoll",
        version=__version__,
        api_base_url=settings.api_base_url,
        collector_base_url=settings.collector_base_url,
        status_api=settings.status_api_enabled,
        log_level=settings.log_level,
    )

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    try:
        loop.run_until_complete(start_services())
        if settings.status_api_enabled:
            config = uvicorn.Config(
                create_app(),
                host=settings.api_host,
                port=settings.api_port,
                log_level=settings.log_level.lower(),
            )
            loop.run_until_complete(uvicorn.Server(config).serve())
        else:
            loop.run_until_complete(run_forever())
    except KeyboardInterrupt:
        logger.info("Shutdown requested...")
    except Exception as e:
        logger.error("Fatal error", error=str(e))
        sys.exit(1)
    finally:
        loop.run_until_complete(shutdown_services())
        loop.close()
        logger.info("netpoll stopped")


if __name__ == "__main__":
    main()
