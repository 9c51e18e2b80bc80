from typing import List, Literal, Optional
from pydantic import BaseModel, Field
from datetime import datetime
from enum import Enum

from .conversation import ConversationContext
from .task_state import TaskKind

Level = Literal["low", "medium", "high"]


class ContextLayerName(str, Enum):
    """The five sources a context window is assembled from"""
    PROJECT = "project"
    SESSION = "session"
    CONVERSATION = "conversation"
    SEMANTIC = "semantic"
    TEMPORAL = "temporal"


# Project layer

class ProjectMilestone(BaseModel):
    phase: str
    description: str = ""
    completed_at: Optional[datetime] = None
    key_achievements: List[str] = Field(default_factory=list)


class TechnicalDecision(BaseModel):
    id: str
    decision: str
    rationale: str = ""
    alternatives: List[str] = Field(default_factory=list)
    made_at: Optional[datetime] = None
    impact: Level = "medium"


class LessonLearned(BaseModel):
    id: str
    lesson: str
    context: str = ""
    category: str = "General"
    severity: Literal["info", "warning", "critical"] = "info"


class TechnicalDebtItem(BaseModel):
    id: str
    description: str
    impact: Level = "medium"
    effort: Literal["small", "medium", "large"] = "medium"
    created_at: Optional[datetime] = None


class Goal(BaseModel):
    id: str
    title: str
    target_date: Optional[datetime] = None
    priority: Level = "medium"


class ProjectContext(BaseModel):
    """Project-level context that persists across sessions"""
    name: str
    version: str
    current_phase: str = "Unknown"
    tech_stack: List[str] = Field(default_factory=list)
    conventions: List[str] = Field(default_factory=list)
    milestones: List[ProjectMilestone] = Field(default_factory=list)
    decisions: List[TechnicalDecision] = Field(default_factory=list)
    lessons: List[LessonLearned] = Field(default_factory=list)
    active_features: List[str] = Field(default_factory=list)
    technical_debt: List[TechnicalDebtItem] = Field(default_factory=list)
    upcoming_goals: List[Goal] = Field(default_factory=list)


# Session layer

class Command(BaseModel):
    command: str
    executed_at: datetime
    result: Literal["success", "failure"] = "success"


class SessionContext(BaseModel):
    """The working session: where the user is and what they touched"""
    id: str
    start_time: datetime
    user: str = "user"
    working_directory: str = "."
    recent_files: List[str] = Field(default_factory=list)
    recent_commands: List[Command] = Field(default_factory=list)
    current_branch: str = "main"
    uncommitted_changes: List[str] = Field(default_factory=list)


# Semantic layer

class PastTask(BaseModel):
    id: str
    kind: TaskKind
    description: str
    completed_at: Optional[datetime] = None
    files_changed: List[str] = Field(default_factory=list)
    patterns: List[str] = Field(default_factory=list)
    outcome: Literal["success", "partial", "reverted"] = "success"


class SuggestedPattern(BaseModel):
    name: str
    description: str
    example: str = ""
    usage_count: int = 0
    success_rate: float = Field(default=50, ge=0, le=100)


class SemanticContext(BaseModel):
    task_kind: TaskKind
    related_components: List[str] = Field(default_factory=list)
    similar_past_tasks: List[PastTask] = Field(default_factory=list)
    suggested_patterns: List[SuggestedPattern] = Field(default_factory=list)
    relevant_documentation: List[str] = Field(default_factory=list)
    estimated_complexity: Literal["trivial", "simple", "moderate", "complex", "very_complex"] = "moderate"


# Temporal layer

class Change(BaseModel):
    file: str
    type: Literal["created", "modified", "deleted"]
    timestamp: datetime
    description: Optional[str] = None


class TimeRange(BaseModel):
    start: str = "09:00"
    end: str = "17:00"
    timezone: str = "UTC"


class DevelopmentVelocity(BaseModel):
    files_per_hour: float = 0
    lines_per_hour: float = 0
    tasks_completed: int = 0
    trend: Literal["increasing", "stable", "decreasing"] = "stable"


class Deadline(BaseModel):
    task: str
    due_date: datetime
    priority: Literal["low", "medium", "high", "critical"] = "medium"


class TemporalContext(BaseModel):
    recent_changes: List[Change] = Field(default_factory=list)
    last_interaction: Optional[datetime] = None
    working_hours: TimeRange = Field(default_factory=TimeRange)
    velocity: DevelopmentVelocity = Field(default_factory=DevelopmentVelocity)
    upcoming_deadlines: List[Deadline] = Field(default_factory=list)


class ContextLayers(BaseModel):
    """Whatever layers the assembler currently holds"""
    project: Optional[ProjectContext] = None
    session: Optional[SessionContext] = None
    conversation: Optional[ConversationContext] = None
    semantic: Optional[SemanticContext] = None
    temporal: Optional[TemporalContext] = None


# Window

class ContextItem(BaseModel):
    """One candidate fact for the prompt; built fresh per request"""
    id: str
    content: str
    tokens: int = Field(ge=0)
    priority: int = Field(ge=0, le=100)
    category: str
    added_at: datetime


class ContextWindow(BaseModel):
    """The token-bounded selection that goes into a prompt"""
    max_tokens: int
    current_tokens: int = 0
    items: List[ContextItem] = Field(default_factory=list)

    def find(self, category: str) -> Optional[ContextItem]:
        """First selected item of a category"""
        return next((item for item in self.items if item.category == category), None)

    def render(self) -> str:
        return "\n".join(item.content for item in self.items)
