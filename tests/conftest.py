from __future__ import annotations

import pytest

from pydeepzoom.config import EngineConfig
from pydeepzoom.engine import ViewportEngine
from pydeepzoom.state import ViewportState


WIDTH = 800
HEIGHT = 600
FRAME = 1.0 / 60.0


@pytest.fixture
def config() -> EngineConfig:
    return EngineConfig()


@pytest.fixture
def state() -> ViewportState:
    return ViewportState()


@pytest.fixture
def engine(config) -> ViewportEngine:
    return ViewportEngine(config=config, width=WIDTH, height=HEIGHT)
