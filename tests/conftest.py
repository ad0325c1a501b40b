from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import List

import pytest
from loguru import logger

repo_root = Path(__file__).resolve().parents[1]
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from boardroom.config import TrackerConfig
from boardroom.states import Topic
from boardroom.tracker import TopicStateManager


class FakeClock:
    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, minutes: float) -> None:
        self.now = self.now + timedelta(minutes=minutes)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def tracker(clock: FakeClock) -> TopicStateManager:
    return TopicStateManager(config=TrackerConfig(), clock=clock)


@pytest.fixture
def topic() -> Topic:
    return Topic(id="t1", title="Market Expansion", estimated_duration=10)


@pytest.fixture
def log_messages():
    captured: List[str] = []
    handler_id = logger.add(lambda m: captured.append(m.record["message"]), level="DEBUG")
    yield captured
    logger.remove(handler_id)
