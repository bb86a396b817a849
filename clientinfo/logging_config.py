# ─────────────────────────────────────────────────────────────────────────────
# Logging Configuration — structlog for Cloud Logging
# ─────────────────────────────────────────────────────────────────────────────


import logging
import sys

import structlog

# uvicorn installs its own handlers; route them through the root handler instead.
_UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def configure_logging(log_level: str = "INFO", json_output: bool = True) -> None:
    """Configure structlog for structured JSON logging.

    JSON output is Cloud Logging compatible: each log line is a parseable
    JSON object with timestamp, level, logger name, and structured fields.
    Console output is used for local development (human-readable).

    Records emitted through the stdlib (uvicorn, httpx) go through the same
    ProcessorFormatter, so every line on stdout has one shape.
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    # Foreign (non-structlog) records have not been through shared_processors
    # yet, so they get them here as foreign_pre_chain.
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, log_level.upper()))

    for name in _UVICORN_LOGGERS:
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.propagate = True

    # httpx logs every outbound request at INFO; the lookup logs its own outcome.
    logging.getLogger("httpx").setLevel(logging.WARNING)
