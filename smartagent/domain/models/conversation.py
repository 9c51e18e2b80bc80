from typing import List, Literal, Optional
from pydantic import BaseModel, Field
from datetime import datetime
from enum import Enum


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class ConversationMood(str, Enum):
    """Dialogue modes the tracker moves between"""
    COLLABORATIVE = "collaborative"
    FOCUSED = "focused"
    EXPLORATORY = "exploratory"
    DEBUGGING = "debugging"
    LEARNING = "learning"


class Sentiment(str, Enum):
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


class ConversationMessage(BaseModel):
    role: MessageRole
    content: str
    timestamp: datetime
    tokens: int = 0


class CodeStylePreferences(BaseModel):
    comments_level: Literal["none", "minimal", "detailed"] = "minimal"
    example_preference: Literal["minimal", "comprehensive"] = "comprehensive"


class UserPreferences(BaseModel):
    communication_style: Literal["formal", "casual", "technical"] = "casual"
    explanation_depth: Literal["minimal", "balanced", "detailed"] = "balanced"
    code_style: CodeStylePreferences = Field(default_factory=CodeStylePreferences)
    feedback_style: Literal["direct", "encouraging", "detailed"] = "encouraging"


class ConversationContext(BaseModel):
    """The conversation layer as seen by the context assembler"""
    id: str
    messages: List[ConversationMessage] = Field(default_factory=list, description="Recent window only")
    established_context: List[str] = Field(default_factory=list)
    clarified_concepts: List[str] = Field(default_factory=list)
    user_preferences: UserPreferences = Field(default_factory=UserPreferences)
    mood: ConversationMood = Field(default=ConversationMood.COLLABORATIVE)
    momentum: int = Field(default=50, ge=0, le=100, description="How well the conversation is going")


class ConversationMetadata(BaseModel):
    token_count: int = 0
    turn_count: int = 0
    topics: List[str] = Field(default_factory=list)
    sentiment: Sentiment = Field(default=Sentiment.NEUTRAL)
    user_engagement: int = Field(default=50, ge=0, le=100)


class ConversationState(BaseModel):
    """Current dialogue status, archived when the conversation ends"""
    id: str
    session_id: Optional[str] = None
    start_time: datetime
    end_time: Optional[datetime] = None
    messages: List[ConversationMessage] = Field(default_factory=list, description="Full message log")
    context: ConversationContext
    metadata: ConversationMetadata = Field(default_factory=ConversationMetadata)


class ConversationAnalysis(BaseModel):
    dominant_topic: str
    user_intent: str
    complexity: Literal["simple", "moderate", "complex"]
    suggested_mood: ConversationMood
    context_needed: List[str] = Field(default_factory=list)
