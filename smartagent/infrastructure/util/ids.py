from typing import Dict, Protocol
from collections import defaultdict
from uuid import uuid4


class IdGenerator(Protocol):
    def new_id(self, prefix: str) -> str: ...


class UuidIdGenerator:
    """Random identifiers, e.g. ``task_3f2a9c0e1b7d``"""

    def new_id(self, prefix: str) -> str:
        return f"{prefix}_{uuid4().hex[:12]}"


class SequentialIdGenerator:
    """Deterministic per-prefix counters: ``task_1``, ``task_2``, ``mem_1``..."""

    def __init__(self):
        self._counters: Dict[str, int] = defaultdict(int)

    def new_id(self, prefix: str) -> str:
        self._counters[prefix] += 1
        return f"{prefix}_{self._counters[prefix]}"
