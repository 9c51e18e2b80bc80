from typing import Dict, List, Optional
from datetime import datetime

from smartagent.domain.models.memory import (
    Concept,
    KnowledgeItem,
    MemoryItem,
    MemoryKind,
    MemorySearchCriteria,
    Pattern,
    Relationship,
    SemanticMemoryState,
)


def blend_rate(current: float, observed: float) -> float:
    """Running average used for success rates and confidence"""
    return max(0.0, min(100.0, (current + observed) / 2))


class SemanticMemory:
    """Long-term store of concepts, relationships, patterns and facts"""

    def __init__(self):
        self.concepts: Dict[str, Concept] = {}
        self.relationships: List[Relationship] = []
        self.patterns: List[Pattern] = []
        self.knowledge: List[KnowledgeItem] = []

    def add_concept(self, concept: Concept) -> Concept:
        self.concepts[concept.id] = concept
        return concept

    def get_concept(self, concept_id: str) -> Optional[Concept]:
        return self.concepts.get(concept_id)

    def add_relationship(self, relationship: Relationship):
        self.relationships.append(relationship)

    def get_pattern(self, pattern_id: str) -> Optional[Pattern]:
        return next((p for p in self.patterns if p.id == pattern_id), None)

    def add_pattern(self, pattern: Pattern) -> Pattern:
        """Insert a pattern, or fold it into the existing one with the same id"""

        existing = self.get_pattern(pattern.id)
        if existing is None:
            self.patterns.append(pattern)
            return pattern

        existing.success_rate = blend_rate(existing.success_rate, pattern.success_rate)
        existing.usage_count += 1
        return existing

    def add_knowledge(self, item: KnowledgeItem):
        self.knowledge.append(item)

    def record_usage(self, item_id: str, success: bool) -> bool:
        """Count a use of a concept or pattern and fold the outcome into its rate"""

        observed = 100.0 if success else 0.0

        concept = self.concepts.get(item_id)
        if concept is not None:
            concept.usage_count += 1
            concept.confidence = blend_rate(concept.confidence, observed)
            return True

        pattern = self.get_pattern(item_id)
        if pattern is not None:
            pattern.usage_count += 1
            pattern.success_rate = blend_rate(pattern.success_rate, observed)
            return True

        return False

    def search(self, query: str, criteria: MemorySearchCriteria, now: datetime) -> List[MemoryItem]:
        """Concepts and patterns projected into memory items

        Concepts carry their confidence as importance, patterns their success rate.
        """

        results = []

        if criteria.kind in (None, MemoryKind.CONCEPT):
            for concept in self.concepts.values():
                text = f"{concept.name}: {concept.definition}"
                if query and query not in text.lower():
                    continue
                results.append(
                    MemoryItem(
                        id=concept.id,
                        content=text,
                        kind=MemoryKind.CONCEPT,
                        importance=concept.confidence,
                        access_count=concept.usage_count,
                        created_at=now,
                        last_accessed_at=now,
                        associations=list(concept.related_concepts),
                    )
                )

        if criteria.kind in (None, MemoryKind.PATTERN):
            for pattern in self.patterns:
                text = f"{pattern.name}: {pattern.description}"
                if query and query not in text.lower():
                    continue
                results.append(
                    MemoryItem(
                        id=pattern.id,
                        content=text,
                        kind=MemoryKind.PATTERN,
                        importance=pattern.success_rate,
                        access_count=pattern.usage_count,
                        created_at=now,
                        last_accessed_at=now,
                        associations=list(pattern.applicability),
                    )
                )

        if criteria.min_importance:
            results = [r for r in results if r.importance >= criteria.min_importance]
        return results

    def to_state(self) -> SemanticMemoryState:
        return SemanticMemoryState(
            concepts=dict(self.concepts),
            relationships=list(self.relationships),
            patterns=list(self.patterns),
            knowledge=list(self.knowledge),
        )

    def restore(self, state: SemanticMemoryState):
        self.concepts = dict(state.concepts)
        self.relationships = list(state.relationships)
        self.patterns = list(state.patterns)
        self.knowledge = list(state.knowledge)
