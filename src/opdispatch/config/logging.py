"""structlog configuration for opdispatch.

Two output modes, both on stderr:
- Human (default): structlog's console renderer
- JSON (--log-json): one JSON object per line, tracebacks as structured
  frames under ``exception``

The package logger (``opdispatch``) follows ``--verbose``; everything else is
held at WARNING. Handlers installed by the host application are left alone.
"""

from __future__ import annotations

import logging
import sys

import structlog

PACKAGE_LOGGER = "opdispatch"
_HANDLER_NAME = "opdispatch-stderr"


def _build_formatter(log_json: bool) -> structlog.stdlib.ProcessorFormatter:
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    final: list[structlog.types.Processor] = [
        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
    ]
    if log_json:
        final += [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    else:
        final.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=final,
    )


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
) -> None:
    """Route structlog and stdlib logging to one stderr handler.

    Safe to call repeatedly: the handler from a previous call is replaced.

    Args:
        verbose: Enable DEBUG-level output for the ``opdispatch`` logger,
            including the per-call ``dispatch.complete`` events.
        log_json: Use the JSON renderer instead of the console renderer.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(_build_formatter(log_json))

    root_logger = logging.getLogger()
    for existing in [h for h in root_logger.handlers if h.get_name() == _HANDLER_NAME]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.WARNING)

    logging.getLogger(PACKAGE_LOGGER).setLevel(logging.DEBUG if verbose else logging.WARNING)
