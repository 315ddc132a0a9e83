"""Structured logging setup using structlog.

One shared processor chain feeds either a coloured console renderer
(development) or a JSON renderer (production, chosen by ``app_env``).
Standard-library ``logging`` is routed through the same chain so that
discord.py, httpx and uvicorn records look like the bot's own.
"""

import logging
import sys

import structlog

# Third-party loggers that are chatty at INFO.
_NOISY_LOGGERS = ("discord.gateway", "discord.client", "httpx", "googleapiclient.discovery_cache")


def configure_logging(
    log_level: str = "INFO",
    json_output: bool = False,
    app_env: str = "development",
) -> structlog.BoundLogger:
    """Configure structlog and the stdlib root logger.

    Args:
        log_level: Logging level name (DEBUG, INFO, WARNING, ERROR).
        json_output: Force JSON rendering regardless of ``app_env``.
        app_env: ``"production"`` selects JSON; anything else the console renderer.

    Returns:
        The root structlog logger.
    """
    use_json = json_output or app_env == "production"

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if use_json:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer(ensure_ascii=False)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(log_level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
        foreign_pre_chain=shared_processors,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level.upper())
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return structlog.get_logger()


def get_logger(name: str) -> structlog.BoundLogger:
    """Return a structlog logger bound to *name*, configuring defaults on first use."""
    if not structlog.is_configured():
        configure_logging()

    return structlog.get_logger(logger_name=name)
