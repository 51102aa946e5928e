"""Shared fixtures for the pagesync test suite."""

import logging

import pytest
import structlog


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo configure_structlog() so one test's stream never leaks into the next.

    configure_structlog binds a root StreamHandler to whatever sys.stderr is
    at call time, which under capsys is a per-test buffer.
    """
    root = logging.getLogger()
    level = root.level
    httpx_level = logging.getLogger("httpx").level
    yield
    for handler in root.handlers[:]:
        # pytest's capture handlers are StreamHandler subclasses; keep them
        if type(handler) is logging.StreamHandler:
            root.removeHandler(handler)
    root.setLevel(level)
    logging.getLogger("httpx").setLevel(httpx_level)
    structlog.reset_defaults()
