"""Entry point for running the booking agent service."""

import logging

import uvicorn

from .config import get_settings

logger = logging.getLogger(__name__)


def main():
    settings = get_settings()
    logger.info("Starting booking agent on %s:%s", settings.app_host, settings.app_port)
    uvicorn.run(
        "booking_agent.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
