import json

import pytest

from smartagent.config import MemorySettings
from smartagent.domain.context.memory.memory_manager import MemoryStore, record_name
from smartagent.domain.models.memory import (
    Concept,
    MemoryKind,
    OutcomeResult,
    Pattern,
    Procedure,
    Workflow,
)


def test_record_name_uses_text_before_colon():
    assert record_name("GridLayout: responsive grids", "Pattern") == "GridLayout"
    assert record_name(": nothing before", "Pattern") == "Pattern"


def test_capacity_two_discards_unimportant_eviction(clock, ids, storage_path):
    memory = MemoryStore(MemorySettings(storage_path=storage_path, working_capacity=2), clock, ids)

    first = memory.add_to_working_memory("first", MemoryKind.PATTERN, importance=50)
    second = memory.add_to_working_memory("second", MemoryKind.PATTERN, importance=90)
    third = memory.add_to_working_memory("third", MemoryKind.PATTERN, importance=40)

    kept = {item.id for item in memory.working.items}
    assert kept == {second.id, third.id}
    assert first.id not in kept
    assert memory.semantic.patterns == []


def test_important_eviction_is_consolidated_by_kind(clock, ids, storage_path):
    memory = MemoryStore(MemorySettings(storage_path=storage_path, working_capacity=1), clock, ids)

    concept = memory.add_to_working_memory("Design tokens: named styling values", MemoryKind.CONCEPT, 85)
    clock.advance(minutes=1)
    pattern = memory.add_to_working_memory("Card grid: GridLayout with gap lg", MemoryKind.PATTERN, 75)
    clock.advance(minutes=1)
    procedure = memory.add_to_working_memory("Release: run validate:all", MemoryKind.PROCEDURE, 70)
    clock.advance(minutes=1)
    memory.add_to_working_memory("a plain fact", MemoryKind.FACT, 95)

    assert memory.semantic.get_concept(concept.id).name == "Design tokens"
    assert memory.semantic.get_pattern(pattern.id).name == "Card grid"
    assert memory.semantic.get_pattern(pattern.id).success_rate == 75
    assert memory.procedural.get_procedure(procedure.id).name == "Release"


def test_decay_is_monotonic_without_reinforcement(memory, clock):
    item = memory.add_to_working_memory("remember me", importance=90)

    clock.advance(days=2)
    memory.apply_forgetting_curve()
    first_pass = memory.working.get(item.id).importance

    clock.advance(days=3)
    memory.apply_forgetting_curve()
    second_pass = memory.working.get(item.id).importance

    assert second_pass <= first_pass


def test_importance_stays_in_range(memory, clock):
    item = memory.add_to_working_memory("boosted", importance=99)
    memory.apply_forgetting_curve()
    assert 0 <= memory.working.get(item.id).importance <= 100

    memory.reinforce(item.id)
    assert memory.working.get(item.id).importance == 100


def test_reinforce_increases_importance_and_resets_access(memory, clock):
    item = memory.add_to_working_memory("used again", importance=40)
    clock.advance(hours=5)

    assert memory.reinforce(item.id) is True

    reinforced = memory.working.get(item.id)
    assert reinforced.importance == 60
    assert reinforced.last_accessed_at == clock.now()
    assert reinforced.access_count == 2


def test_reinforce_updates_long_term_records(memory):
    memory.add_pattern(Pattern(id="p1", name="Cards", description="card grid", success_rate=60))
    memory.add_workflow(Workflow(id="w1", name="Release", success_rate=40))

    assert memory.reinforce("p1", success=True) is True
    assert memory.semantic.get_pattern("p1").success_rate == 80
    assert memory.semantic.get_pattern("p1").usage_count == 1

    assert memory.reinforce("w1", success=False) is True
    assert memory.procedural.workflows[0].success_rate == 20

    assert memory.reinforce("nothing") is False


def test_adding_existing_pattern_averages_success_rate(memory):
    memory.add_pattern(Pattern(id="p1", name="Cards", description="card grid", success_rate=90, usage_count=3))
    merged = memory.add_pattern(Pattern(id="p1", name="Cards", description="card grid", success_rate=50))

    assert len(memory.semantic.patterns) == 1
    assert merged.success_rate == 70
    assert merged.usage_count == 4


def test_search_orders_by_importance_then_recency(memory, clock):
    low = memory.add_to_working_memory("layout low", importance=60)
    clock.advance(minutes=1)
    older = memory.add_to_working_memory("layout high", importance=80)
    clock.advance(minutes=1)
    newer = memory.add_to_working_memory("layout high again", importance=80)
    memory.add_to_working_memory("unrelated", importance=100)

    results = memory.search(query="Layout")

    assert [item.id for item in results] == [newer.id, older.id, low.id]
    assert [item.id for item in memory.search(query="layout", limit=2)] == [newer.id, older.id]
    assert [item.id for item in memory.search(query="layout", min_importance=70)] == [newer.id, older.id]


def test_search_includes_concepts_and_patterns(memory):
    memory.add_concept(Concept(id="c1", name="GridLayout", definition="responsive grid", confidence=90))
    memory.add_pattern(Pattern(id="p1", name="Grid cards", description="cards in a grid", success_rate=70))
    memory.add_to_working_memory("grid gap is lg", importance=50)

    results = memory.search(query="grid")

    assert [item.id for item in results][:2] == ["c1", "p1"]
    assert results[0].kind == MemoryKind.CONCEPT
    assert [item.id for item in memory.search(query="grid", kind=MemoryKind.PATTERN)] == ["p1"]


def test_episodic_operations_and_stats(memory):
    session = memory.start_session("user", ["ship cards"])
    interaction = memory.add_interaction(session.id, input="build cards", output="done", tokens_used=12)
    memory.add_outcome(interaction.id, OutcomeResult.SUCCESS, user_satisfaction=90)
    memory.end_session(session.id, 80, ["GridLayout works"])
    memory.start_session("user")

    stats = memory.get_stats()

    assert memory.episodic.get_session(session.id).lessons_learned == ["GridLayout works"]
    assert stats.total_sessions == 2
    assert stats.average_session_satisfaction == 80
    assert memory.end_session("unknown", 50) is None


@pytest.mark.asyncio
async def test_missing_snapshots_load_as_empty_tiers(memory):
    await memory.load()

    stats = memory.get_stats()
    assert len(memory.working) == 0
    assert stats.total_concepts == 0
    assert stats.total_sessions == 0


@pytest.mark.asyncio
async def test_malformed_snapshot_is_ignored(memory, storage_path):
    storage_path.mkdir(parents=True)
    (storage_path / "working.json").write_text("{not json", encoding="utf-8")
    (storage_path / "semantic.json").write_text(
        json.dumps({"patterns": [{"id": "p1", "name": "ok", "description": "fine"}, {"id": "broken"}]}),
        encoding="utf-8",
    )

    await memory.load()

    assert len(memory.working) == 0
    assert [p.id for p in memory.semantic.patterns] == ["p1"]


@pytest.mark.asyncio
async def test_undecodable_snapshot_is_ignored(memory, storage_path):
    storage_path.mkdir(parents=True)
    (storage_path / "working.json").write_bytes(b'{"items": ["\xff\xfe"]}')

    await memory.load()

    assert len(memory.working) == 0


@pytest.mark.asyncio
async def test_failed_save_keeps_state(clock, ids, tmp_path):
    blocked = tmp_path / "not-a-directory"
    blocked.write_text("occupied", encoding="utf-8")
    memory = MemoryStore(MemorySettings(storage_path=blocked), clock, ids)
    item = memory.add_to_working_memory("Keep me", MemoryKind.FACT, 60)

    assert await memory.save() is False
    assert [i.id for i in memory.working.items] == [item.id]
    assert memory.working.items[0].content == "Keep me"


@pytest.mark.asyncio
async def test_save_then_load_round_trip(memory, memory_settings, clock, ids):
    item = memory.add_to_working_memory("GridLayout for cards", MemoryKind.PATTERN, 85)
    session = memory.start_session("user", ["cards"])
    memory.add_interaction(session.id, input="hi", output="hello")
    memory.add_concept(Concept(id="c1", name="Tokens", definition="design tokens"))
    memory.add_procedure(Procedure(id="proc1", name="Release", steps=["validate"]))

    assert await memory.save() is True

    fresh = MemoryStore(memory_settings, clock, ids)
    await fresh.load()

    assert [i.id for i in fresh.working.items] == [item.id]
    assert [s.id for s in fresh.episodic.sessions] == [session.id]
    assert len(fresh.episodic.interactions) == 1
    assert list(fresh.semantic.concepts) == ["c1"]
    assert [p.id for p in fresh.procedural.procedures] == ["proc1"]


@pytest.mark.asyncio
async def test_configured_capacity_wins_on_load(memory, storage_path, clock, ids):
    for i in range(4):
        clock.advance(minutes=1)
        memory.add_to_working_memory(f"note {i}", importance=50)
    await memory.save()

    smaller = MemoryStore(MemorySettings(storage_path=storage_path, working_capacity=2), clock, ids)
    await smaller.load()

    assert len(smaller.working) == 2
    assert [i.content for i in smaller.working.items] == ["note 2", "note 3"]
