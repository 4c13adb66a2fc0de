"""
Central logging setup for ASCII Art.
"""

import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def setup_logging(level: str = "WARNING") -> None:
    level_value = getattr(logging, level.upper(), logging.WARNING)
    logging.basicConfig(level=level_value, format=LOG_FORMAT)
    logging.getLogger("PIL").setLevel(max(level_value, logging.INFO))
