from typing import List, Literal, Optional
from pydantic import BaseModel, Field
from datetime import datetime

from .context import Goal, LessonLearned, TechnicalDebtItem, TechnicalDecision


class Phase(BaseModel):
    """One ``### Phase N: name`` block of the development history"""
    number: int
    name: str
    description: str = ""
    completed_at: Optional[datetime] = None
    key_features: List[str] = Field(default_factory=list)
    components: List[str] = Field(default_factory=list)
    challenges: List[str] = Field(default_factory=list)


class Achievement(BaseModel):
    category: str
    description: str
    impact: Literal["low", "medium", "high"] = "high"


class ProjectStatus(BaseModel):
    phase: str = "Unknown"
    completion_percentage: int = Field(default=0, ge=0, le=100)
    ready_for_production: bool = False
    active_features: List[str] = Field(default_factory=list)
    upcoming_features: List[str] = Field(default_factory=list)


class ProjectHistory(BaseModel):
    """Everything parsed out of the project changelog"""
    overview: str = ""
    goals: List[Goal] = Field(default_factory=list)
    phases: List[Phase] = Field(default_factory=list)
    achievements: List[Achievement] = Field(default_factory=list)
    decisions: List[TechnicalDecision] = Field(default_factory=list)
    lessons: List[LessonLearned] = Field(default_factory=list)
    current_status: ProjectStatus = Field(default_factory=ProjectStatus)
    technical_debts: List[TechnicalDebtItem] = Field(default_factory=list)


class RelevantHistory(BaseModel):
    similar_phases: List[Phase] = Field(default_factory=list)
    relevant_lessons: List[LessonLearned] = Field(default_factory=list)
    related_components: List[str] = Field(default_factory=list)
    success_patterns: List[str] = Field(default_factory=list)
