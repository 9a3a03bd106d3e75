import logging
from typing import Any
import structlog


def configure_logging(level: int = logging.INFO) -> None:
    """Configure structlog for applications embedding the scheduler.

    Initializes stdlib logging at the given level and renders structlog events as JSON with
    ISO timestamps. The library itself never calls this; it only emits events.
    """
    logging.basicConfig(level=level)
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
    )


def get_logger(name: str) -> Any:
    return structlog.get_logger(name)


__all__ = ["configure_logging", "get_logger"]
