"""Main entry point for the Bookings Hub service."""

import sys

import uvicorn

from src.app import create_app
from src.config import configure_logging, get_logger, settings

logger = get_logger(__name__)

app = create_app()


def run() -> int:
    """Configure logging and serve the API until interrupted.

    Returns:
        Exit code
    """
    configure_logging()

    logger.info("Starting Bookings Hub", host=settings.host, port=settings.port)
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_config=None,
        reload=False,
    )
    return 0


if __name__ == "__main__":
    sys.exit(run())
