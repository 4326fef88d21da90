"""
Logging configuration.

Services log through module-level loggers (logging.getLogger(__name__)).
This module attaches a single console handler to the root logger;
the level comes from the LOG_LEVEL setting.
"""

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger. Calling it again only changes the level."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    if any(getattr(h, "_entity_ledger", False) for h in root.handlers):
        return

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    console_handler._entity_ledger = True
    root.addHandler(console_handler)

    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
