"""
FormBridge - Command-line entrypoint
=====================================

``python -m formbridge`` (or the ``formbridge`` console script) validates the
configuration, exits with status 1 when GITHUB_TOKEN is missing, and
otherwise serves the app with uvicorn on HOST:PORT (default 0.0.0.0:3000).
"""

import logging
import sys

import uvicorn

from formbridge.config import settings

logger = logging.getLogger("formbridge")


def main() -> None:
    try:
        settings.validate_required()
    except ValueError as e:
        logging.basicConfig(level=logging.ERROR, format="%(levelname)s %(name)s: %(message)s")
        logger.error("%s", e)
        sys.exit(1)

    uvicorn.run(
        "formbridge.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
