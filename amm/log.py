"""Logging setup shared by the API server and scripts."""

import logging

import structlog


def configure_logging(verbose: bool = False) -> None:
    """Configure structlog with a console renderer.

    Args:
        verbose: Emit debug events (transaction discards, pair syncs) as well
    """
    log_level = logging.DEBUG if verbose else logging.INFO
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
    )
