"""Logging setup shared by the server entry point and the init script."""
import logging
import sys

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """Route all records to stderr with one handler."""
    logging.basicConfig(
        level=level.upper(),
        format=_FORMAT,
        stream=sys.stderr,
        force=True,
    )

    # Third-party loggers are too chatty at INFO
    for name in ("sqlalchemy.engine", "aiosqlite", "passlib", "uvicorn.access"):
        logging.getLogger(name).setLevel(logging.WARNING)
