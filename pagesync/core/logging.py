"""Structured logging via structlog.

Configured once by the CLI before the pipeline starts. Library modules
keep using `logging.getLogger(__name__)`; the stdlib bridge routes their
records through the same output stream.

Renderer selection:
  debug=True  — `ConsoleRenderer` for local runs.
  debug=False — `JSONRenderer` for CI log collectors.

The `run_id` ContextVar is injected into every structlog event so all
lines of one CI invocation can be grouped.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar

import structlog

_run_id_var: ContextVar[str] = ContextVar("run_id", default="")


def get_run_id() -> str:
    """Return the current run ID, or empty string if not set."""
    return _run_id_var.get()


def set_run_id(run_id: str) -> None:
    _run_id_var.set(run_id)


def _inject_context_vars(
    logger: logging.Logger,
    method: str,
    event_dict: dict,
) -> dict:
    """Structlog processor: inject run_id from its ContextVar."""
    run_id = get_run_id()
    if run_id:
        event_dict["run_id"] = run_id
    return event_dict


def configure_structlog(debug: bool = False) -> None:
    """Configure structlog for the process lifetime.

    Calling multiple times is safe.
    """
    shared_processors: list = [
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        _inject_context_vars,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if debug:
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if debug else logging.INFO
        ),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # structlog events and plain stdlib records (pagesync modules, httpx)
    # share one handler; stderr keeps stdout free for the CLI's JSON result.
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=logging.DEBUG if debug else logging.INFO,
        force=True,
    )
    # httpx logs every request at INFO; keep that for debug runs only
    logging.getLogger("httpx").setLevel(logging.DEBUG if debug else logging.WARNING)
