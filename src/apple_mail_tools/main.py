#!/usr/bin/env python3
"""Entry point for apple-mail-tools CLI."""

import logging
import sys

from apple_mail_tools.config import LOG_LEVEL, SERVER_NAME, SERVER_VERSION
from apple_mail_tools.server import mcp

logger = logging.getLogger(__name__)


def main():
    """Run the Apple Mail MCP server over stdio."""
    # stdout carries the protocol, so logs go to stderr
    logging.basicConfig(
        level=LOG_LEVEL,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info(f"Starting {SERVER_NAME} {SERVER_VERSION}")
    mcp.run()


if __name__ == "__main__":
    main()
