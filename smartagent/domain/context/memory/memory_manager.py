from typing import Any, Dict, List, Optional

import structlog

from smartagent.config import MemorySettings
from smartagent.domain.models.memory import (
    Concept,
    EpisodicMemoryState,
    Feedback,
    Interaction,
    KnowledgeItem,
    MemoryItem,
    MemoryKind,
    MemorySearchCriteria,
    MemoryStats,
    Outcome,
    OutcomeResult,
    Pattern,
    ProceduralMemoryState,
    Procedure,
    Relationship,
    SemanticMemoryState,
    Session,
    Shortcut,
    Skill,
    Workflow,
)
from smartagent.infrastructure.observability.logging import agent_logger
from smartagent.infrastructure.persistence.snapshot_store import SnapshotStore, validate_records
from smartagent.infrastructure.util.clock import Clock, SystemClock
from smartagent.infrastructure.util.ids import IdGenerator, UuidIdGenerator

from .episodic_memory import EpisodicMemory
from .procedural_memory import ProceduralMemory
from .semantic_memory import SemanticMemory
from .working_memory import WorkingMemory

logger = structlog.get_logger(__name__)

WORKING = "working"
EPISODIC = "episodic"
SEMANTIC = "semantic"
PROCEDURAL = "procedural"


def record_name(content: str, fallback: str) -> str:
    """Name of a consolidated record: the content up to the first colon"""
    return content.split(":", 1)[0].strip() or fallback


class MemoryStore:
    """Four-tier memory: working, episodic, semantic and procedural

    Working memory is bounded and evicts the least recently accessed item.
    Evicted or forgotten items that are still important enough are promoted
    into the long-term tier matching their kind; everything else is dropped.
    """

    def __init__(
        self,
        settings: Optional[MemorySettings] = None,
        clock: Optional[Clock] = None,
        ids: Optional[IdGenerator] = None,
        snapshots: Optional[SnapshotStore] = None,
    ):
        self.settings = settings or MemorySettings()
        self.clock = clock or SystemClock()
        self.ids = ids or UuidIdGenerator()
        self.snapshots = snapshots or SnapshotStore(self.settings.storage_path)

        self.working = WorkingMemory(self.settings.working_capacity, self.clock)
        self.episodic = EpisodicMemory()
        self.semantic = SemanticMemory()
        self.procedural = ProceduralMemory()

    # Persistence

    async def load(self):
        """Load every tier from its snapshot, then apply the forgetting curve"""

        working = await self.snapshots.load(WORKING)
        items = validate_records(working.get("items", []), MemoryItem, source=WORKING)
        self.working.restore(items)
        self._enforce_capacity()

        episodic = await self.snapshots.load(EPISODIC)
        self.episodic.restore(
            EpisodicMemoryState(
                sessions=validate_records(episodic.get("sessions", []), Session, source=EPISODIC),
                interactions=validate_records(episodic.get("interactions", []), Interaction, source=EPISODIC),
                outcomes=validate_records(episodic.get("outcomes", []), Outcome, source=EPISODIC),
            )
        )

        semantic = await self.snapshots.load(SEMANTIC)
        concepts = semantic.get("concepts", {})
        concept_records = list(concepts.values()) if isinstance(concepts, dict) else concepts
        self.semantic.restore(
            SemanticMemoryState(
                concepts={c.id: c for c in validate_records(concept_records, Concept, source=SEMANTIC)},
                relationships=validate_records(semantic.get("relationships", []), Relationship, source=SEMANTIC),
                patterns=validate_records(semantic.get("patterns", []), Pattern, source=SEMANTIC),
                knowledge=validate_records(semantic.get("knowledge", []), KnowledgeItem, source=SEMANTIC),
            )
        )

        procedural = await self.snapshots.load(PROCEDURAL)
        self.procedural.restore(
            ProceduralMemoryState(
                workflows=validate_records(procedural.get("workflows", []), Workflow, source=PROCEDURAL),
                procedures=validate_records(procedural.get("procedures", []), Procedure, source=PROCEDURAL),
                skills=validate_records(procedural.get("skills", []), Skill, source=PROCEDURAL),
                shortcuts=validate_records(procedural.get("shortcuts", []), Shortcut, source=PROCEDURAL),
            )
        )

        self.apply_forgetting_curve()

        logger.info(
            "Memory loaded",
            working=len(self.working),
            concepts=len(self.semantic.concepts),
            patterns=len(self.semantic.patterns),
            sessions=len(self.episodic.sessions),
        )

    async def save(self) -> bool:
        """Rewrite all four snapshots; in-memory state is kept either way"""

        results = [
            await self.snapshots.save(WORKING, self.working.to_state().model_dump(mode="json")),
            await self.snapshots.save(EPISODIC, self.episodic.to_state().model_dump(mode="json")),
            await self.snapshots.save(SEMANTIC, self.semantic.to_state().model_dump(mode="json")),
            await self.snapshots.save(PROCEDURAL, self.procedural.to_state().model_dump(mode="json")),
        ]
        if not all(results):
            logger.error("Memory save incomplete", failed=results.count(False))
            return False
        return True

    # Working memory

    def add_to_working_memory(
        self,
        content: str,
        kind: MemoryKind = MemoryKind.FACT,
        importance: float = 50,
        associations: Optional[List[str]] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> MemoryItem:
        now = self.clock.now()
        item = MemoryItem(
            id=self.ids.new_id("mem"),
            content=content,
            kind=kind,
            importance=max(0.0, min(100.0, importance)),
            access_count=1,
            created_at=now,
            last_accessed_at=now,
            associations=list(associations or []),
            metadata=dict(metadata or {}),
        )

        for evicted in self.working.add(item):
            agent_logger.log_memory_event(WORKING, "evicted", evicted.id, importance=evicted.importance)
            self._consolidate(evicted)

        agent_logger.log_memory_event(WORKING, "added", item.id, kind=item.kind.value)
        return item

    def apply_forgetting_curve(self) -> List[MemoryItem]:
        forgotten = self.working.decay(self.settings.decay_rate, self.settings.min_strength)
        for item in forgotten:
            agent_logger.log_memory_event(WORKING, "forgotten", item.id, importance=item.importance)
            self._consolidate(item)
        return forgotten

    def reinforce(self, item_id: str, success: bool = True) -> bool:
        """Signal that a remembered item was used again"""

        item = self.working.reinforce(item_id, self.settings.reinforcement_bonus)
        if item is not None:
            agent_logger.log_memory_event(WORKING, "reinforced", item_id, importance=item.importance)
            return True

        if self.semantic.record_usage(item_id, success):
            agent_logger.log_memory_event(SEMANTIC, "reinforced", item_id, success=success)
            return True

        if self.procedural.record_usage(item_id, success, self.clock.now()):
            agent_logger.log_memory_event(PROCEDURAL, "reinforced", item_id, success=success)
            return True

        logger.debug("Reinforce target not found", item_id=item_id)
        return False

    def _enforce_capacity(self):
        while len(self.working) > self.working.capacity:
            evicted = self.working.evict_least_recent()
            if evicted is None:
                break
            self._consolidate(evicted)

    def _consolidate(self, item: MemoryItem) -> bool:
        """Promote an item leaving working memory if it is important enough"""

        if item.importance < self.settings.consolidation_threshold:
            return False

        if item.kind == MemoryKind.CONCEPT:
            self.semantic.add_concept(
                Concept(
                    id=item.id,
                    name=record_name(item.content, item.content),
                    definition=item.content,
                    related_concepts=list(item.associations),
                    usage_count=item.access_count,
                    confidence=item.importance,
                )
            )
        elif item.kind == MemoryKind.PATTERN:
            self.semantic.add_pattern(
                Pattern(
                    id=item.id,
                    name=record_name(item.content, "Pattern"),
                    description=item.content,
                    applicability=list(item.associations),
                    success_rate=item.importance,
                    usage_count=item.access_count,
                )
            )
        elif item.kind == MemoryKind.PROCEDURE:
            self.procedural.add_procedure(
                Procedure(
                    id=item.id,
                    name=record_name(item.content, "Procedure"),
                    steps=[item.content],
                    last_used=item.last_accessed_at,
                    effectiveness=item.importance,
                )
            )
        else:
            return False

        agent_logger.log_memory_event(WORKING, "consolidated", item.id, kind=item.kind.value)
        return True

    # Episodic memory

    def start_session(self, user: str, goals: Optional[List[str]] = None) -> Session:
        session = self.episodic.start_session(self.ids.new_id("session"), user, goals or [], self.clock.now())
        agent_logger.log_memory_event(EPISODIC, "session_started", session.id, user=user)
        return session

    def end_session(
        self,
        session_id: str,
        satisfaction: float,
        lessons_learned: Optional[List[str]] = None,
    ) -> Optional[Session]:
        session = self.episodic.end_session(session_id, self.clock.now(), satisfaction, lessons_learned)
        if session is None:
            logger.warning("Cannot end unknown session", session_id=session_id)
            return None
        agent_logger.log_memory_event(EPISODIC, "session_ended", session_id, satisfaction=session.satisfaction)
        return session

    def add_interaction(
        self,
        session_id: str,
        input: str = "",
        output: str = "",
        success: bool = True,
        tokens_used: int = 0,
        feedback: Optional[Feedback] = None,
    ) -> Interaction:
        interaction = Interaction(
            id=self.ids.new_id("interaction"),
            session_id=session_id,
            timestamp=self.clock.now(),
            input=input,
            output=output,
            success=success,
            tokens_used=tokens_used,
            feedback=feedback,
        )
        self.episodic.add_interaction(interaction)
        return interaction

    def add_outcome(
        self,
        interaction_id: str,
        result: OutcomeResult,
        user_satisfaction: Optional[float] = None,
        lessons_learned: Optional[List[str]] = None,
        improvements: Optional[List[str]] = None,
    ) -> Outcome:
        outcome = Outcome(
            id=self.ids.new_id("outcome"),
            interaction_id=interaction_id,
            result=result,
            user_satisfaction=user_satisfaction,
            lessons_learned=list(lessons_learned or []),
            improvements=list(improvements or []),
        )
        self.episodic.add_outcome(outcome)
        return outcome

    # Semantic and procedural memory

    def add_concept(self, concept: Concept) -> Concept:
        return self.semantic.add_concept(concept)

    def add_relationship(self, relationship: Relationship):
        self.semantic.add_relationship(relationship)

    def add_pattern(self, pattern: Pattern) -> Pattern:
        return self.semantic.add_pattern(pattern)

    def add_knowledge(self, item: KnowledgeItem):
        self.semantic.add_knowledge(item)

    def add_workflow(self, workflow: Workflow) -> Workflow:
        return self.procedural.add_workflow(workflow)

    def add_procedure(self, procedure: Procedure) -> Procedure:
        return self.procedural.add_procedure(procedure)

    def add_skill(self, skill: Skill) -> Skill:
        return self.procedural.add_skill(skill)

    def add_shortcut(self, shortcut: Shortcut) -> Shortcut:
        return self.procedural.add_shortcut(shortcut)

    # Queries

    def search(self, criteria: Optional[MemorySearchCriteria] = None, **kwargs: Any) -> List[MemoryItem]:
        """Working items, concepts and patterns matching the criteria

        Ordered by importance, then by last access, both descending.
        """

        criteria = criteria or MemorySearchCriteria(**kwargs)
        query = (criteria.query or "").lower()
        now = self.clock.now()

        results = self.working.search(query, criteria)
        if criteria.kind in (None, MemoryKind.CONCEPT, MemoryKind.PATTERN):
            results.extend(self.semantic.search(query, criteria, now))

        results.sort(key=lambda item: (item.importance, item.last_accessed_at), reverse=True)
        if criteria.limit:
            results = results[: criteria.limit]
        return results

    def get_stats(self) -> MemoryStats:
        return MemoryStats(
            working_memory_usage=len(self.working) / self.working.capacity * 100,
            total_concepts=len(self.semantic.concepts),
            total_patterns=len(self.semantic.patterns),
            total_sessions=len(self.episodic.sessions),
            average_session_satisfaction=self.episodic.average_satisfaction(),
        )
