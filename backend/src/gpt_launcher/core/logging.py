from __future__ import annotations

import logging


_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | int = "INFO") -> None:
    """Install a single formatted handler on the root logger."""
    if isinstance(level, str):
        resolved = logging.getLevelName(level.strip().upper())
        if not isinstance(resolved, int):
            resolved = logging.INFO
    else:
        resolved = level
    logging.basicConfig(level=resolved, format=_FORMAT, force=True)
    # SQL echo stays off unless explicitly asked for at DEBUG.
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if resolved <= logging.DEBUG else logging.WARNING
    )
    logging.getLogger("launcher.core.logging").debug("Logging configured (level=%s)", level)
