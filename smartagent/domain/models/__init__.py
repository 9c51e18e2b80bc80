from .context import (
    ContextItem,
    ContextLayerName,
    ContextLayers,
    ContextWindow,
    ProjectContext,
    SemanticContext,
    SessionContext,
    TemporalContext,
)
from .conversation import (
    ConversationContext,
    ConversationMood,
    ConversationState,
    MessageRole,
    Sentiment,
    UserPreferences,
)
from .memory import MemoryItem, MemoryKind, MemorySearchCriteria
from .rules import CodeValidation, ProjectRules, RulesSource
from .task_state import Task, TaskContext, TaskKind, TaskResult, TaskStatus

__all__ = [
    "ContextItem",
    "ContextLayerName",
    "ContextLayers",
    "ContextWindow",
    "ProjectContext",
    "SemanticContext",
    "SessionContext",
    "TemporalContext",
    "ConversationContext",
    "ConversationMood",
    "ConversationState",
    "MessageRole",
    "Sentiment",
    "UserPreferences",
    "MemoryItem",
    "MemoryKind",
    "MemorySearchCriteria",
    "CodeValidation",
    "ProjectRules",
    "RulesSource",
    "Task",
    "TaskContext",
    "TaskKind",
    "TaskResult",
    "TaskStatus",
]
