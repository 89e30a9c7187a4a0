from __future__ import annotations

import logging

from rosterdesk.config import settings

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Install the root handler once; later calls only adjust the level."""
    resolved = (level or settings.log_level or "INFO").upper()
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=resolved, format=_LOG_FORMAT)
    root.setLevel(resolved)
    # SQL echo is noisy at INFO; keep it opt-in.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
