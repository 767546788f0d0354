from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest

from tests._fixtures.icon_tree import IconTreeBuilder


@pytest.fixture
def icon_tree(tmp_path: Path) -> IconTreeBuilder:
    """Provide a reusable SVG source tree rooted at the pytest tmp_path."""
    return IconTreeBuilder(tmp_path)


@pytest.fixture(autouse=True)
def _reset_svgicon_logger() -> Iterator[None]:
    """Undo CLI logging setup so caplog sees svgicon records in every test."""
    yield
    logger = logging.getLogger("svgicon")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
