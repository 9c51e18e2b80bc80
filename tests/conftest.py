"""
Shared fixtures: a manual clock, deterministic ids and settings that keep
every snapshot inside the test's temporary directory.
"""

from datetime import datetime, timezone

import pytest

from smartagent.config import MemorySettings, SmartAgentSettings
from smartagent.domain.context.memory.memory_manager import MemoryStore
from smartagent.domain.context.state.conversation_tracker import ConversationTracker
from smartagent.infrastructure.util.clock import ManualClock
from smartagent.infrastructure.util.ids import SequentialIdGenerator


@pytest.fixture
def clock():
    return ManualClock(datetime(2024, 6, 1, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def ids():
    return SequentialIdGenerator()


@pytest.fixture
def storage_path(tmp_path):
    return tmp_path / "memory"


@pytest.fixture
def memory_settings(storage_path):
    return MemorySettings(storage_path=storage_path)


@pytest.fixture
def settings(tmp_path, storage_path):
    return SmartAgentSettings(
        project_root=tmp_path,
        memory=MemorySettings(storage_path=storage_path),
    )


@pytest.fixture
def memory(memory_settings, clock, ids):
    return MemoryStore(memory_settings, clock, ids)


@pytest.fixture
def tracker(memory, clock, ids):
    return ConversationTracker(memory, clock=clock, ids=ids)
