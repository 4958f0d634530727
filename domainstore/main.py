# domainstore/main.py
"""
Process entry point.

    $ SECRET_KEY=... python -m domainstore.main

Refuses to start (exit status 1) when SECRET_KEY is not configured.
"""
import logging
import os
import sys

import uvicorn
from pydantic import ValidationError

from domainstore.app.core.config import get_settings
from domainstore.app.core.logging import setup_logging
from domainstore.app.main import create_app

logger = logging.getLogger("domainstore")


def main() -> None:
    setup_logging(os.getenv("LOG_LEVEL", "INFO"))
    try:
        settings = get_settings()
    except ValidationError as exc:
        missing = [".".join(str(p) for p in err["loc"]) for err in exc.errors()]
        logger.error("Invalid configuration (%s). SECRET_KEY must be set. Exit.", ", ".join(missing))
        sys.exit(1)

    setup_logging(settings.LOG_LEVEL)
    uvicorn.run(create_app(settings), host=settings.HOST, port=settings.PORT, log_config=None)


if __name__ == "__main__":
    main()
