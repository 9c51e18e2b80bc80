from typing import Dict, Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from enum import Enum


class MemoryKind(str, Enum):
    """What a remembered item represents"""
    FACT = "fact"
    EVENT = "event"
    CONCEPT = "concept"
    PROCEDURE = "procedure"
    PATTERN = "pattern"
    PREFERENCE = "preference"


class RelationshipType(str, Enum):
    IS_A = "is-a"
    HAS_A = "has-a"
    USES = "uses"
    SIMILAR_TO = "similar-to"
    OPPOSITE_OF = "opposite-of"
    DEPENDS_ON = "depends-on"
    IMPLEMENTS = "implements"
    EXTENDS = "extends"


class OutcomeResult(str, Enum):
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILURE = "failure"


class MemoryItem(BaseModel):
    """Atomic remembered fact, pattern or procedure"""
    id: str = Field(description="Unique memory identifier")
    content: str
    kind: MemoryKind = Field(default=MemoryKind.FACT)
    importance: float = Field(ge=0, le=100, description="Current strength, 0-100")
    access_count: int = Field(default=1, ge=0)
    created_at: datetime
    last_accessed_at: datetime
    associations: List[str] = Field(default_factory=list, description="IDs of related memories")
    metadata: Dict[str, Any] = Field(default_factory=dict)
    anchor_importance: Optional[float] = Field(
        None, description="Importance at the last access; the forgetting curve decays from it"
    )


# Semantic tier

class Concept(BaseModel):
    id: str
    name: str
    definition: str
    examples: List[str] = Field(default_factory=list)
    related_concepts: List[str] = Field(default_factory=list)
    usage_count: int = 0
    confidence: float = Field(default=50, ge=0, le=100)


class Relationship(BaseModel):
    from_concept: str
    to_concept: str
    type: RelationshipType
    strength: float = Field(default=50, ge=0, le=100)


class Example(BaseModel):
    input: str
    output: str
    explanation: Optional[str] = None


class Pattern(BaseModel):
    id: str
    name: str
    description: str
    structure: str = ""
    examples: List[Example] = Field(default_factory=list)
    applicability: List[str] = Field(default_factory=list)
    success_rate: float = Field(default=50, ge=0, le=100)
    usage_count: int = 0


class KnowledgeItem(BaseModel):
    id: str
    category: str
    fact: str
    source: str = ""
    confidence: float = Field(default=50, ge=0, le=100)
    verified_at: Optional[datetime] = None


# Procedural tier

class WorkflowStep(BaseModel):
    order: int
    action: str
    description: str = ""
    optional: bool = False
    conditions: List[str] = Field(default_factory=list)
    alternatives: List[str] = Field(default_factory=list)


class Workflow(BaseModel):
    id: str
    name: str
    description: str = ""
    steps: List[WorkflowStep] = Field(default_factory=list)
    prerequisites: List[str] = Field(default_factory=list)
    outcomes: List[str] = Field(default_factory=list)
    average_minutes: Optional[float] = None
    success_rate: float = Field(default=50, ge=0, le=100)


class ProcedureException(BaseModel):
    condition: str
    action: str


class Procedure(BaseModel):
    id: str
    name: str
    trigger: str = ""
    steps: List[str] = Field(default_factory=list)
    exceptions: List[ProcedureException] = Field(default_factory=list)
    last_used: Optional[datetime] = None
    effectiveness: float = Field(default=50, ge=0, le=100)


class Skill(BaseModel):
    id: str
    name: str
    description: str = ""
    proficiency: float = Field(default=0, ge=0, le=100)
    practice_count: int = 0
    last_practiced: Optional[datetime] = None
    related_skills: List[str] = Field(default_factory=list)


class Shortcut(BaseModel):
    id: str
    name: str
    original_process: str
    optimized_process: str
    time_saved: float = Field(default=0, description="Percentage of time saved")
    applicable_when: List[str] = Field(default_factory=list)


# Episodic tier

class Feedback(BaseModel):
    helpful: bool
    accurate: bool
    clear: bool
    comment: Optional[str] = None


class Session(BaseModel):
    """One episodic unit of engagement"""
    id: str
    start_time: datetime
    end_time: Optional[datetime] = None
    user: str
    goals: List[str] = Field(default_factory=list)
    tasks_completed: List[str] = Field(default_factory=list)
    lessons_learned: List[str] = Field(default_factory=list)
    satisfaction: float = Field(default=0, ge=0, le=100)


class Interaction(BaseModel):
    """One request/response pair; immutable once written"""
    model_config = ConfigDict(frozen=True)

    id: str
    session_id: str
    timestamp: datetime
    input: str = ""
    output: str = ""
    feedback: Optional[Feedback] = None
    success: bool = True
    tokens_used: int = 0


class Outcome(BaseModel):
    id: str
    interaction_id: str
    result: OutcomeResult
    user_satisfaction: Optional[float] = Field(None, ge=0, le=100)
    lessons_learned: List[str] = Field(default_factory=list)
    improvements: List[str] = Field(default_factory=list)


# Tier snapshots

class WorkingMemoryState(BaseModel):
    capacity: int = Field(default=7, ge=1)
    items: List[MemoryItem] = Field(default_factory=list)
    last_accessed: Optional[datetime] = None


class EpisodicMemoryState(BaseModel):
    sessions: List[Session] = Field(default_factory=list)
    interactions: List[Interaction] = Field(default_factory=list)
    outcomes: List[Outcome] = Field(default_factory=list)


class SemanticMemoryState(BaseModel):
    concepts: Dict[str, Concept] = Field(default_factory=dict)
    relationships: List[Relationship] = Field(default_factory=list)
    patterns: List[Pattern] = Field(default_factory=list)
    knowledge: List[KnowledgeItem] = Field(default_factory=list)


class ProceduralMemoryState(BaseModel):
    workflows: List[Workflow] = Field(default_factory=list)
    procedures: List[Procedure] = Field(default_factory=list)
    skills: List[Skill] = Field(default_factory=list)
    shortcuts: List[Shortcut] = Field(default_factory=list)


class MemorySearchCriteria(BaseModel):
    query: Optional[str] = None
    kind: Optional[MemoryKind] = None
    min_importance: Optional[float] = None
    max_age_days: Optional[float] = None
    limit: Optional[int] = Field(None, ge=1)


class MemoryStats(BaseModel):
    working_memory_usage: float = Field(description="Percentage of working capacity in use")
    total_concepts: int
    total_patterns: int
    total_sessions: int
    average_session_satisfaction: float
