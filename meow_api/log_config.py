import logging

import structlog


_configured = False


def configure_logging(pretty=True, level=logging.INFO):
    logging.basicConfig(
        level=level,
    )

    # uvicorn access lines duplicate the per-operation events
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("multipart").setLevel(logging.INFO)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,  # add log level
    ]

    if pretty:
        processors += [
            structlog.dev.set_exc_info,  # add exception info
            structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
            structlog.dev.ConsoleRenderer(colors=True),
        ]
    else:
        processors += [
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,  # add exception info
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )

    global _configured
    _configured = True


def get_logger(*args, **kwargs) -> structlog.stdlib.BoundLogger:
    # Configure logging on first logger use, if not configured yet
    if not _configured:
        configure_logging()

    log = structlog.get_logger(*args, **kwargs)
    return log
