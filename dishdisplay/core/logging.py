"""
Logging setup.

Every module logs through `logging.getLogger(__name__)`; this configures the
root handler once at startup. Gunicorn's own access/error logs are set in
gunicorn.conf.py and also go to stdout.
"""
import logging

from dishdisplay.core.config import settings


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO),
        format=settings.LOG_FORMAT,
    )
    # SQL echo is too noisy outside of debugging sessions
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
