"""Main entry point - runs the API server."""

import logging
import sys

import uvicorn

from profitpath.api.app import create_app
from profitpath.config import get_settings
from profitpath.errors import ConfigurationError

logger = logging.getLogger(__name__)


def main():
    """Main entry point."""
    settings = get_settings()

    # Configure logging
    log_level = logging.DEBUG if settings.debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    logger.info("Starting ProfitPath...")
    logger.info(f"Environment: {settings.environment}")

    try:
        settings.require_credentials()
    except ConfigurationError as e:
        logger.critical(e.message)
        sys.exit(1)

    logger.info(f"Starting API server on {settings.api_host}:{settings.api_port}")
    uvicorn.run(
        create_app(),
        host=settings.api_host,
        port=settings.api_port,
        log_level="debug" if settings.debug else "info",
    )


if __name__ == "__main__":
    main()
