from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from enum import Enum


class TaskKind(str, Enum):
    """Kinds of work a task can request"""
    CREATE_COMPONENT = "create_component"
    FIX_BUG = "fix_bug"
    REFACTOR = "refactor"
    ADD_FEATURE = "add_feature"
    UPDATE_STYLES = "update_styles"
    MIGRATE_LAYOUT = "migrate_layout"
    OPTIMIZE_PERFORMANCE = "optimize_performance"
    ADD_TESTS = "add_tests"
    UPDATE_DOCUMENTATION = "update_documentation"


class TaskStatus(str, Enum):
    """Task lifecycle: pending -> in_progress -> completed | failed"""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskStatus.COMPLETED, TaskStatus.FAILED)


class TaskContext(BaseModel):
    """Where the work lands and what it must satisfy"""
    component: Optional[str] = None
    feature: Optional[str] = None
    target_directory: Optional[str] = None
    affected_files: List[str] = Field(default_factory=list)
    requirements: List[str] = Field(default_factory=list)


class TaskResult(BaseModel):
    """Outcome of executing a task; never changes once attached"""
    model_config = ConfigDict(frozen=True)

    success: bool
    message: str
    validation_score: Optional[int] = Field(None, ge=0, le=100)
    files_changed: List[str] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class Task(BaseModel):
    """Represents one unit of requested work"""
    id: str = Field(description="Unique task identifier")
    kind: TaskKind
    title: str
    description: str
    context: TaskContext = Field(default_factory=TaskContext)
    rules: List[str] = Field(default_factory=list, description="Extra rules folded into the prompt")
    status: TaskStatus = Field(default=TaskStatus.PENDING)
    result: Optional[TaskResult] = Field(None, description="Set once the task leaves in_progress")
    created_at: datetime
    updated_at: Optional[datetime] = None

    def get_summary(self) -> dict:
        """Short view of the task for listings and logs"""
        return {
            "id": self.id,
            "kind": self.kind.value,
            "title": self.title,
            "status": self.status.value,
            "score": self.result.validation_score if self.result else None,
        }
