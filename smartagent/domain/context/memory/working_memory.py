from typing import List, Optional
from datetime import datetime
import math

from smartagent.domain.models.memory import MemoryItem, MemorySearchCriteria, WorkingMemoryState
from smartagent.infrastructure.util.clock import Clock, SystemClock

SECONDS_PER_DAY = 60 * 60 * 24
ACCESS_REINFORCEMENT = 0.1


def calculate_memory_strength(
    importance: float,
    days_since_access: float,
    access_count: int,
    decay_rate: float,
) -> float:
    """Modified Ebbinghaus curve: exponential decay, each access adds 10% strength"""

    decay_factor = math.exp(-decay_rate * days_since_access)
    reinforcement_factor = 1 + access_count * ACCESS_REINFORCEMENT
    return importance * decay_factor * reinforcement_factor


def clamp_importance(value: float) -> float:
    return max(0.0, min(100.0, value))


class WorkingMemory:
    """Small-capacity short-term memory with least-recently-accessed eviction"""

    def __init__(self, capacity: int = 7, clock: Optional[Clock] = None):
        if capacity < 1:
            raise ValueError("Working memory capacity must be at least 1")
        self.capacity = capacity
        self.items: List[MemoryItem] = []
        self.last_accessed: Optional[datetime] = None
        self.clock = clock or SystemClock()

    def __len__(self) -> int:
        return len(self.items)

    def add(self, item: MemoryItem) -> List[MemoryItem]:
        """Insert an item, returning whatever had to be evicted to make room"""

        evicted = []
        while len(self.items) >= self.capacity:
            lru = self.evict_least_recent()
            if lru is None:
                break
            evicted.append(lru)

        if item.anchor_importance is None:
            item.anchor_importance = item.importance
        self.items.append(item)
        self.last_accessed = self.clock.now()
        return evicted

    def evict_least_recent(self) -> Optional[MemoryItem]:
        """Remove and return the least recently accessed item"""

        if not self.items:
            return None

        # First of equally old items goes
        lru_index = 0
        for index in range(1, len(self.items)):
            if self.items[index].last_accessed_at < self.items[lru_index].last_accessed_at:
                lru_index = index

        return self.items.pop(lru_index)

    def get(self, item_id: str) -> Optional[MemoryItem]:
        return next((item for item in self.items if item.id == item_id), None)

    def reinforce(self, item_id: str, bonus: float) -> Optional[MemoryItem]:
        """Mark an item as used again"""

        item = self.get(item_id)
        if item is None:
            return None

        item.access_count += 1
        item.last_accessed_at = self.clock.now()
        item.importance = clamp_importance(item.importance + bonus)
        item.anchor_importance = item.importance
        self.last_accessed = item.last_accessed_at
        return item

    def decay(self, decay_rate: float, min_strength: float) -> List[MemoryItem]:
        """Apply the forgetting curve; returns the items that were forgotten

        Strength is recomputed from the importance recorded at the last access,
        so repeated passes without reinforcement never raise an item's importance.
        """

        now = self.clock.now()
        kept: List[MemoryItem] = []
        forgotten: List[MemoryItem] = []

        for item in self.items:
            days_since_access = max(0.0, (now - item.last_accessed_at).total_seconds() / SECONDS_PER_DAY)
            anchor = item.anchor_importance if item.anchor_importance is not None else item.importance
            strength = calculate_memory_strength(anchor, days_since_access, item.access_count, decay_rate)

            if strength < min_strength:
                forgotten.append(item)
                continue

            item.anchor_importance = anchor
            item.importance = clamp_importance(max(min_strength, strength))
            kept.append(item)

        self.items = kept
        return forgotten

    def search(self, query: str, criteria: MemorySearchCriteria) -> List[MemoryItem]:
        now = self.clock.now()
        results = []
        for item in self.items:
            if criteria.kind and item.kind != criteria.kind:
                continue
            if criteria.min_importance and item.importance < criteria.min_importance:
                continue
            if criteria.max_age_days is not None:
                age_days = (now - item.created_at).total_seconds() / SECONDS_PER_DAY
                if age_days > criteria.max_age_days:
                    continue
            if query and query not in item.content.lower():
                continue
            results.append(item)
        return results

    def to_state(self) -> WorkingMemoryState:
        return WorkingMemoryState(
            capacity=self.capacity,
            items=list(self.items),
            last_accessed=self.last_accessed,
        )

    def restore(self, items: List[MemoryItem], last_accessed: Optional[datetime] = None):
        """Replace contents from a snapshot; capacity is enforced by the caller"""

        self.items = list(items)
        self.last_accessed = last_accessed
