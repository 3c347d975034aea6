import logging

import structlog

DIRECTOR_LOGGER = "bosh_exporter.director"


def configure_logging(
    level: int | str = logging.INFO,
    director_level: int | str = logging.ERROR,
) -> None:
    """Configure structlog/standard logging bridge.

    Director and UAA client chatter goes through its own stdlib logger so it
    can be tuned independently with ``--bosh.log-level``.
    """

    timestamper = structlog.processors.TimeStamper(fmt="iso", utc=True)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            timestamper,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(level=_to_level(level), format="%(message)s")
    logging.getLogger(DIRECTOR_LOGGER).setLevel(_to_level(director_level))


def _to_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level}")
    return resolved
