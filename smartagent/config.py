"""Runtime configuration powered by pydantic settings.

Every group is closed: unknown keys raise ``pydantic.ValidationError``.
Environment overrides use the ``SMART_AGENT_`` prefix and ``__`` for nesting,
e.g. ``SMART_AGENT_MEMORY__WORKING_CAPACITY=9``.
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from smartagent.domain.prompt.standards import ProjectStandards


class MemorySettings(BaseModel):
    """Memory tiers and forgetting curve"""
    model_config = ConfigDict(extra="forbid")

    storage_path: Path = Field(Path(".smart-agent/memory"), description="Directory for tier snapshots")
    working_capacity: int = Field(7, ge=1, description="Working memory capacity")
    consolidation_threshold: float = Field(70, ge=0, le=100, description="Importance needed for promotion")
    decay_rate: float = Field(0.1, ge=0, description="Forgetting-curve exponent per day")
    min_strength: float = Field(10, ge=0, le=100, description="Strength floor")
    reinforcement_bonus: float = Field(20, ge=0, le=100, description="Importance added on reinforcement")


class ContextSettings(BaseModel):
    """Context window assembly"""
    model_config = ConfigDict(extra="forbid")

    max_tokens: int = Field(8000, ge=1, description="Token budget of a context window")
    recent_change_hours: float = Field(2, gt=0, description="Age limit for recent file changes")


class ConversationSettings(BaseModel):
    """Conversation tracking"""
    model_config = ConfigDict(extra="forbid")

    max_message_history: int = Field(20, ge=1, description="Messages kept in the active view")
    max_topics: int = Field(10, ge=1, description="Topics kept in metadata")
    initial_momentum: int = Field(50, ge=0, le=100)
    momentum_step: int = Field(10, ge=0, le=100, description="Momentum delta per outcome")


class TaskSettings(BaseModel):
    """Task output scoring"""
    model_config = ConfigDict(extra="forbid")

    pass_threshold: int = Field(80, ge=0, le=100)
    layout_penalty: int = Field(10, ge=0)
    token_penalty: int = Field(5, ge=0)
    missing_layout_penalty: int = Field(20, ge=0)


class LoggingSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    level: str = "INFO"
    format: Literal["json", "console"] = "console"


class SmartAgentSettings(BaseSettings):
    """Top-level engine configuration"""

    model_config = SettingsConfigDict(
        env_prefix="SMART_AGENT_",
        env_nested_delimiter="__",
        extra="forbid",
    )

    project_root: Path = Field(Path("."), description="Where rule and history documents live")
    service_name: str = "smart-agent"
    memory: MemorySettings = Field(default_factory=MemorySettings)
    context: ContextSettings = Field(default_factory=ContextSettings)
    conversation: ConversationSettings = Field(default_factory=ConversationSettings)
    task: TaskSettings = Field(default_factory=TaskSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    standards: ProjectStandards = Field(default_factory=ProjectStandards)
