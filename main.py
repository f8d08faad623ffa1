"""
Entry point for the Google Docs markdown MCP server.

Runs over stdio, so all logging goes to stderr.
"""

import logging
import sys

from auth.config import get_config
from core.server import server

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    # googleapiclient logs every discovery fetch at INFO
    logging.getLogger("googleapiclient.discovery_cache").setLevel(logging.ERROR)


def main() -> None:
    config = get_config()
    configure_logging(config.log_level)

    # Importing the package registers its tools on the shared server
    import gdocs  # noqa: F401

    logger.info(f"Starting {server.name} (credentials dir: {config.credentials_dir})")
    server.run()


if __name__ == "__main__":
    main()
