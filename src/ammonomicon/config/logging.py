"""Log routing: every logger ends in one structlog-formatted stderr handler.

Services log structured events through structlog (``catalog.fetch_failed``,
``lookup.collision``, ``details.open``); the store and SQLAlchemy log
through stdlib :mod:`logging`. Both reach the same handler, so stdout only
ever carries command output.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

import structlog

HANDLER_NAME = "ammonomicon-stderr"


def logger_levels(*, verbose: bool = False, echo_sql: bool = False) -> dict[str, int]:
    """Level of each logger the CLI manages.

    ``sqlalchemy.engine`` logs one INFO record per statement; it is only let
    through when *echo_sql* is set (``[database] echo = true``).
    """
    return {
        "ammonomicon": logging.DEBUG if verbose else logging.WARNING,
        "sqlalchemy": logging.WARNING,
        "sqlalchemy.engine": logging.INFO if echo_sql else logging.WARNING,
    }


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
    echo_sql: bool = False,
    stream: TextIO | None = None,
) -> logging.Handler:
    """Install the stderr handler and set the managed logger levels.

    Calling it again replaces the handler it installed before and leaves
    any other root handler (pytest's capture, for one) in place.
    """
    stream = stream if stream is not None else sys.stderr

    pre_chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    if log_json:
        final: list[structlog.types.Processor] = [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]
    else:
        isatty = getattr(stream, "isatty", None)
        final = [structlog.dev.ConsoleRenderer(colors=bool(isatty and isatty()))]

    handler = logging.StreamHandler(stream)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *final],
        )
    )

    root = logging.getLogger()
    for existing in [h for h in root.handlers if h.get_name() == HANDLER_NAME]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    for name, level in logger_levels(verbose=verbose, echo_sql=echo_sql).items():
        logging.getLogger(name).setLevel(level)
    return handler
