from datetime import datetime, timezone

from smartagent.domain.context.memory.episodic_memory import EpisodicMemory
from smartagent.domain.context.memory.procedural_memory import ProceduralMemory
from smartagent.domain.context.memory.semantic_memory import SemanticMemory, blend_rate
from smartagent.domain.models.memory import (
    Concept,
    MemorySearchCriteria,
    Procedure,
    Relationship,
    RelationshipType,
    Skill,
)

NOW = datetime(2024, 6, 1, tzinfo=timezone.utc)


def test_blend_rate_is_clamped_average():
    assert blend_rate(60, 100) == 80
    assert blend_rate(0, 0) == 0


def test_state_round_trip_keeps_relationships():
    semantic = SemanticMemory()
    semantic.add_concept(Concept(id="grid", name="Grid", definition="layout grid"))
    semantic.add_relationship(Relationship(from_concept="grid", to_concept="flex", type=RelationshipType.SIMILAR_TO))

    restored = SemanticMemory()
    restored.restore(semantic.to_state())

    assert list(restored.concepts) == ["grid"]
    assert restored.relationships[0].type == RelationshipType.SIMILAR_TO


def test_record_usage_updates_confidence():
    semantic = SemanticMemory()
    semantic.add_concept(Concept(id="c1", name="Tokens", definition="named values", confidence=40))

    assert semantic.record_usage("c1", success=False) is True
    assert semantic.get_concept("c1").confidence == 20
    assert semantic.get_concept("c1").usage_count == 1
    assert semantic.record_usage("missing", success=True) is False


def test_search_respects_min_importance():
    semantic = SemanticMemory()
    semantic.add_concept(Concept(id="c1", name="Grid", definition="layout grid", confidence=30))
    semantic.add_concept(Concept(id="c2", name="Grid gap", definition="spacing", confidence=90))

    results = semantic.search("grid", MemorySearchCriteria(min_importance=50), NOW)

    assert [r.id for r in results] == ["c2"]
    assert results[0].content == "Grid gap: spacing"


def test_procedures_update_by_id_and_match_triggers():
    procedural = ProceduralMemory()
    procedural.add_procedure(Procedure(id="p1", name="Release", trigger="deploy"))
    procedural.add_procedure(Procedure(id="p1", name="Release v2", trigger="deploy"))
    procedural.add_skill(Skill(id="s1", name="Layouts", proficiency=50))

    assert [p.name for p in procedural.procedures] == ["Release v2"]
    assert [p.id for p in procedural.find_procedures("please deploy the app")] == ["p1"]

    assert procedural.record_usage("s1", True, NOW) is True
    assert procedural.skills[0].proficiency == 75
    assert procedural.skills[0].practice_count == 1


def test_episodic_sessions_record_tasks_and_rated_average():
    episodic = EpisodicMemory()
    episodic.start_session("s1", "user", ["cards"], NOW)
    episodic.start_session("s2", "user", [], NOW)
    episodic.complete_task("s1", "task_1")
    episodic.end_session("s1", NOW, 120, ["keep files small"])

    assert episodic.get_session("s1").satisfaction == 100
    assert episodic.get_session("s1").tasks_completed == ["task_1"]
    assert episodic.average_satisfaction() == 100
    assert episodic.complete_task("missing", "task_2") is False
