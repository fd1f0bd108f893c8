"""Loggers for the scoring engine, batch runs and the valuation client.

Every line carries a UTC ISO timestamp so batch logs from different hosts
sort together.

Usage example:
    from dometrics_scoring.observability.logging import get_logger

    logger = get_logger("dometrics_scoring.engine")
    logger.warning("Valuation service failed for %s (%s)", "ab.com", "TimeoutError")
"""

from __future__ import annotations

import logging
import time

LINE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S%z"


def _utc_handler() -> logging.Handler:
    formatter = logging.Formatter(fmt=LINE_FORMAT, datefmt=TIMESTAMP_FORMAT)
    formatter.converter = time.gmtime
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    return handler


def get_logger(name: str) -> logging.Logger:
    """Return the named logger, attaching the UTC stderr handler on first use.

    The logger does not propagate, so scoring output is never duplicated by a
    root handler an embedding application configures.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    logger.addHandler(_utc_handler())
    logger.setLevel(logging.INFO)
    logger.propagate = False
    return logger
