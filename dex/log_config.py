"""structlog setup shared by the API server and scripts."""

import logging

import structlog


def configure_logging(level: str = "info") -> None:
    """Configure structlog with a console renderer filtered at level."""
    log_level = getattr(logging, level.upper(), logging.INFO)
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
    )
