from typing import Any, List, Optional
import time

import structlog

from smartagent.config import ContextSettings
from smartagent.domain.models.context import (
    ContextItem,
    ContextLayerName,
    ContextLayers,
    ContextWindow,
    ProjectContext,
)
from smartagent.domain.models.task_state import TaskKind
from smartagent.infrastructure.observability.logging import agent_logger
from smartagent.infrastructure.util.clock import Clock, SystemClock

from .context_ranker import ContextRanker
from .context_retriever import ContextRetriever

logger = structlog.get_logger(__name__)


class ContextAssembler:
    """Assembles a token-bounded context window from the five context layers"""

    def __init__(self, settings: Optional[ContextSettings] = None, clock: Optional[Clock] = None):
        self.settings = settings or ContextSettings()
        self.clock = clock or SystemClock()
        self.layers = ContextLayers()
        self.context_retriever = ContextRetriever(self.settings.recent_change_hours)
        self.context_ranker = ContextRanker(self.settings.max_tokens)

    def initialize(self, project: ProjectContext):
        self.update_layer(ContextLayerName.PROJECT, project)

    def update_layer(self, name: ContextLayerName, value: Any):
        """Replace one layer; the value is validated against the layer's model"""

        name = ContextLayerName(name)
        validated = ContextLayers.model_validate({name.value: value})
        setattr(self.layers, name.value, getattr(validated, name.value))
        agent_logger.log_context_update(name.value, "updated")

    def get_context(self) -> ContextLayers:
        """Copy of the layers currently held"""
        return self.layers.model_copy(deep=True)

    def gather_relevant_context(
        self,
        kind: TaskKind,
        user_text: str = "",
        current_file: Optional[str] = None,
    ) -> List[ContextItem]:
        now = self.clock.now()
        retriever = self.context_retriever
        items: List[ContextItem] = []

        if self.layers.project:
            items.extend(retriever.extract_project_context(self.layers.project, kind, now))
        if self.layers.session:
            items.extend(retriever.extract_session_context(self.layers.session, now, current_file))
        if self.layers.conversation:
            items.extend(retriever.extract_conversation_context(self.layers.conversation, now))
        if self.layers.semantic:
            items.extend(retriever.extract_semantic_context(self.layers.semantic, kind, now))
        if self.layers.temporal:
            items.extend(retriever.extract_temporal_context(self.layers.temporal, now))

        return items

    def build_task_context(
        self,
        kind: TaskKind,
        user_text: str = "",
        current_file: Optional[str] = None,
    ) -> ContextWindow:
        """Gather, rank and pack context for one prompt"""

        start_time = time.time()

        candidates = self.gather_relevant_context(TaskKind(kind), user_text, current_file)
        ranked = self.context_ranker.rank_by_relevance(candidates)
        window = self.context_ranker.optimize_window(ranked)

        agent_logger.log_context_update(
            "window",
            "built",
            {
                "task_kind": TaskKind(kind).value,
                "candidates": len(candidates),
                "selected": len(window.items),
                "tokens": window.current_tokens,
                "max_tokens": window.max_tokens,
                "duration_ms": round((time.time() - start_time) * 1000, 2),
            },
        )
        return window
