from __future__ import annotations

import logging
from pathlib import Path

import pytest

from tests._fixtures.tree_builder import TreeBuilder


@pytest.fixture
def source_tree(tmp_path: Path) -> TreeBuilder:
    """Provide a reusable project builder rooted at the pytest tmp_path."""
    return TreeBuilder(tmp_path)


@pytest.fixture(autouse=True)
def _reset_shaderaudit_logger():
    """Undo CLI logging setup so caplog keeps seeing shaderaudit records."""
    yield
    logger = logging.getLogger("shaderaudit")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
