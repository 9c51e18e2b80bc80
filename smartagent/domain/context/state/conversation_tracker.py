from typing import Any, Dict, List, Optional

import structlog

from smartagent.config import ConversationSettings
from smartagent.domain.context.memory.memory_manager import MemoryStore
from smartagent.domain.models.conversation import (
    ConversationAnalysis,
    ConversationContext,
    ConversationMessage,
    ConversationMetadata,
    ConversationState,
    MessageRole,
    UserPreferences,
)
from smartagent.domain.models.memory import MemoryKind
from smartagent.infrastructure.util.clock import Clock, SystemClock
from smartagent.infrastructure.util.ids import IdGenerator, UuidIdGenerator

from . import conversation_analysis as analysis

logger = structlog.get_logger(__name__)

ANALYSIS_WINDOW = 5
CLARIFIED_IMPORTANCE = 70


class ConversationTracker:
    """Tracks the active conversation: messages, topics, sentiment, mood and momentum"""

    def __init__(
        self,
        memory: MemoryStore,
        settings: Optional[ConversationSettings] = None,
        clock: Optional[Clock] = None,
        ids: Optional[IdGenerator] = None,
    ):
        self.memory = memory
        self.settings = settings or ConversationSettings()
        self.clock = clock or SystemClock()
        self.ids = ids or UuidIdGenerator()
        self.active: Optional[ConversationState] = None
        self.history: Dict[str, ConversationState] = {}

    def start_conversation(self, preferences: Optional[Dict[str, Any]] = None) -> ConversationState:
        """Open a conversation and the episodic session that records it"""

        conversation_id = self.ids.new_id("conv")
        session = self.memory.start_session("user", [])

        self.active = ConversationState(
            id=conversation_id,
            session_id=session.id,
            start_time=self.clock.now(),
            context=ConversationContext(
                id=conversation_id,
                user_preferences=UserPreferences.model_validate(preferences or {}),
                momentum=self.settings.initial_momentum,
            ),
        )
        structlog.contextvars.bind_contextvars(conversation_id=conversation_id)
        logger.info("Conversation started", session_id=session.id)
        return self.active

    def _require_active(self) -> ConversationState:
        if self.active is None:
            self.start_conversation()
        return self.active

    def add_message(self, role: MessageRole, content: str, tokens: Optional[int] = None) -> ConversationMessage:
        conversation = self._require_active()
        role = MessageRole(role)
        tokens = tokens if tokens is not None else analysis.estimate_tokens(content)

        message = ConversationMessage(role=role, content=content, timestamp=self.clock.now(), tokens=tokens)
        conversation.messages.append(message)
        conversation.context.messages = conversation.messages[-self.settings.max_message_history:]

        metadata = conversation.metadata
        metadata.token_count += tokens
        if role == MessageRole.USER:
            metadata.turn_count += 1
            self._update_analysis(content)

        self.memory.add_interaction(
            session_id=conversation.session_id,
            input=content if role == MessageRole.USER else "",
            output=content if role == MessageRole.ASSISTANT else "",
            success=True,
            tokens_used=tokens,
        )
        return message

    def _update_analysis(self, content: str):
        metadata = self.active.metadata

        topics = list(metadata.topics)
        for topic in analysis.extract_topics(content):
            if topic not in topics:
                topics.append(topic)
        metadata.topics = topics[-self.settings.max_topics:]
        metadata.sentiment = analysis.analyze_sentiment(content)

        self._update_mood()

    def _update_mood(self):
        conversation = self.active
        previous = conversation.context.mood
        conversation.context.mood = analysis.determine_mood(
            conversation.metadata.sentiment,
            conversation.metadata.user_engagement,
            conversation.context.momentum,
            len(conversation.metadata.topics),
        )
        if conversation.context.mood != previous:
            logger.info("Mood changed", from_mood=previous.value, to_mood=conversation.context.mood.value)

    def get_context(self) -> Optional[ConversationContext]:
        return self.active.context if self.active else None

    def analyze(self) -> Optional[ConversationAnalysis]:
        if self.active is None or not self.active.messages:
            return None

        recent = self.active.messages[-ANALYSIS_WINDOW:]
        user_messages = [m.content for m in recent if m.role == MessageRole.USER]
        last = user_messages[-1] if user_messages else ""

        return ConversationAnalysis(
            dominant_topic=analysis.dominant_topic(user_messages),
            user_intent=analysis.user_intent(last) if user_messages else "unknown",
            complexity=analysis.assess_complexity(last) if user_messages else "simple",
            suggested_mood=self.active.context.mood,
            context_needed=analysis.context_needs(last),
        )

    def update_momentum(self, delta: int):
        """Shift momentum, clamped to 0-100; mood is left until the next user message"""

        if self.active is None:
            return
        context = self.active.context
        context.momentum = max(0, min(100, context.momentum + delta))

    def update_engagement(self, delta: int):
        if self.active is None:
            return
        metadata = self.active.metadata
        metadata.user_engagement = max(0, min(100, metadata.user_engagement + delta))

    def establish_context(self, item: str):
        if self.active is None:
            return
        if item not in self.active.context.established_context:
            self.active.context.established_context.append(item)

    def clarify_concept(self, concept: str):
        if self.active is None:
            return
        if concept in self.active.context.clarified_concepts:
            return

        self.active.context.clarified_concepts.append(concept)
        self.memory.add_to_working_memory(
            content=f"Clarified: {concept}",
            kind=MemoryKind.CONCEPT,
            importance=CLARIFIED_IMPORTANCE,
        )

    def update_preferences(self, updates: Dict[str, Any]):
        if self.active is None:
            return
        current = self.active.context.user_preferences
        self.active.context.user_preferences = UserPreferences.model_validate({**current.model_dump(), **updates})

    def extract_lessons_learned(self) -> List[str]:
        if self.active is None:
            return []

        lessons = []
        established = self.active.context.established_context
        if len(established) > 3:
            lessons.append(f"Complex task requiring multiple context items: {', '.join(established[:3])}")

        clarified = self.active.context.clarified_concepts
        if clarified:
            lessons.append(f"Concepts that needed clarification: {', '.join(clarified)}")
        return lessons

    def duration_minutes(self) -> int:
        if self.active is None:
            return 0
        return round((self.clock.now() - self.active.start_time).total_seconds() / 60)

    def summary(self) -> str:
        if self.active is None:
            return "No active conversation"

        metadata, context = self.active.metadata, self.active.context
        return (
            "Conversation Summary:\n"
            f"- Duration: {self.duration_minutes()} minutes\n"
            f"- Messages: {metadata.turn_count} turns\n"
            f"- Topics: {', '.join(metadata.topics)}\n"
            f"- Mood: {context.mood.value}\n"
            f"- Momentum: {context.momentum}%\n"
            f"- Established: {', '.join(context.established_context)}"
        )

    async def end_conversation(self, satisfaction: float) -> Optional[ConversationState]:
        """Archive the conversation, close its session and persist memory"""

        if self.active is None:
            return None

        conversation = self.active
        conversation.end_time = self.clock.now()
        self.history[conversation.id] = conversation.model_copy(deep=True)

        self.memory.end_session(conversation.session_id, satisfaction, self.extract_lessons_learned())
        await self.memory.save()

        logger.info(
            "Conversation ended",
            turns=conversation.metadata.turn_count,
            satisfaction=satisfaction,
            mood=conversation.context.mood.value,
        )
        structlog.contextvars.unbind_contextvars("conversation_id")
        self.active = None
        return conversation
