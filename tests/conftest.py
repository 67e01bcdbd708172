from __future__ import annotations

import logging
from typing import Generator

import pytest

import depbump.utils.logger as logger_module
from depbump.utils.console import reconfigure_console


@pytest.fixture(autouse=True)
def reset_global_state(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Undo process-wide changes made by the CLI between tests.

    The CLI configures the ``depbump`` logger (which stops propagation to
    the root logger used by ``caplog``), toggles ``NO_COLOR`` and caches a
    Rich console.
    """
    # setenv first so the original state is restored afterwards
    monkeypatch.setenv("NO_COLOR", "")
    monkeypatch.delenv("NO_COLOR")
    monkeypatch.delenv("DEPBUMP_CONFIG", raising=False)

    yield

    root_logger = logging.getLogger(logger_module.ROOT_LOGGER_NAME)
    root_logger.handlers.clear()
    root_logger.setLevel(logging.NOTSET)
    root_logger.propagate = True
    logger_module._logging_configured = False
    reconfigure_console()
