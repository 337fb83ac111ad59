"""
logging_config.py — Log Setup for the Ticket Service

Every purchase step logs with an `[UUN: ...]` or `[Order: ...]` prefix, so a
single order can be followed from form check to ticket email. This module
sends those records to a log file (for chasing paid-but-not-emailed orders
after the fact) and to stdout (for uvicorn / container logs).
"""

import logging
import sys

from . import config


def setup_logging(log_file: str = None):
    """
    Installs the root handlers. Called once when `main` is imported.

    Args:
        log_file (str): Where to append records; defaults to `config.LOG_FILE`.

    Records carry the logger name so Stripe, Mailgun and workflow messages can
    be told apart. httpx and httpcore log every request at INFO, which would
    repeat each provider call, so they are held at WARNING.
    """
    log_format = '%(asctime)s - %(levelname)s - [PID:%(process)d] - %(name)s - %(message)s'

    logging.basicConfig(
        level=logging.INFO,
        format=log_format,
        handlers=[
            logging.FileHandler(log_file or config.LOG_FILE),
            logging.StreamHandler(sys.stdout)
        ]
    )

    for noisy in ("httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name):
    """Logger for a service module, e.g. `get_logger(__name__)`."""
    return logging.getLogger(name)
