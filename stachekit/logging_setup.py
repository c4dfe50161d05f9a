import logging
import sys
import structlog

# every stachekit module logs below this stdlib logger.
LOGGER_NAME = "stachekit"

def _pick_renderer(force_json_logs: bool):
    if force_json_logs:
        return structlog.processors.JSONRenderer(sort_keys=True)
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

def configure_logging(log_level_str: str = "warning", force_json_logs: bool = False):
    # routes structlog events through the stdlib "stachekit" logger on stderr.
    # values bound with bind_template_context() (command, template name) ride along on every event.
    log_level = getattr(logging, log_level_str.upper(), logging.WARNING)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.dev.set_exc_info,
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(
        processor=_pick_renderer(force_json_logs),
        foreign_pre_chain=[structlog.stdlib.add_log_level],
    ))

    package_logger = logging.getLogger(LOGGER_NAME)
    package_logger.handlers.clear()
    package_logger.addHandler(handler)
    package_logger.setLevel(log_level)
    package_logger.propagate = False

    structlog.get_logger(__name__).info("logging_configured", level=log_level_str, json=force_json_logs)

def bind_template_context(command: str, template_name: str):
    # tags the loader/compiler events that follow with the cli command and template being processed.
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(command=command, template=template_name)
