from __future__ import annotations

import logging
from pathlib import Path

import pytest

from asyncapigen.plugins import ProtocolPluginRegistry, create_default_registry
from tests._fixtures.program_builder import ProgramBuilder


@pytest.fixture
def program_builder(tmp_path: Path) -> ProgramBuilder:
    """Provide a description/program builder rooted at the pytest tmp_path."""
    return ProgramBuilder(tmp_path)


@pytest.fixture
def registry() -> ProtocolPluginRegistry:
    """A fresh registry holding the built-in plugins."""
    return create_default_registry()


@pytest.fixture(autouse=True)
def _propagate_package_logs():
    """Keep asyncapigen records visible to caplog after a CLI test configured logging."""
    logger = logging.getLogger("asyncapigen")
    logger.propagate = True
    yield
    logger.propagate = True
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
