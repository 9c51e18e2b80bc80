from typing import Dict, List, Optional
from datetime import datetime, timedelta
import posixpath
import re

from smartagent.domain.models.context import (
    ContextItem,
    ProjectContext,
    SemanticContext,
    SessionContext,
    TemporalContext,
)
from smartagent.domain.models.conversation import ConversationContext, ConversationMessage, MessageRole
from smartagent.domain.models.task_state import TaskKind

# Keywords a convention or past task must mention to count as relevant
TASK_KEYWORDS: Dict[TaskKind, List[str]] = {
    TaskKind.CREATE_COMPONENT: ["component", "typescript", "props", "ui"],
    TaskKind.FIX_BUG: ["error", "validation", "handling"],
    TaskKind.REFACTOR: ["structure", "organization", "pattern"],
    TaskKind.ADD_FEATURE: ["feature", "functionality", "implementation"],
    TaskKind.UPDATE_STYLES: ["style", "design", "token", "theme"],
    TaskKind.MIGRATE_LAYOUT: ["layout", "grid", "flex", "responsive"],
    TaskKind.OPTIMIZE_PERFORMANCE: ["performance", "optimization", "bundle"],
    TaskKind.ADD_TESTS: ["test", "validation", "coverage"],
    TaskKind.UPDATE_DOCUMENTATION: ["documentation", "comment", "readme"],
}

TOPIC_VERBS = ["create", "fix", "update", "add", "implement", "refactor"]

FEATURE_PATTERN = re.compile(r"/features/([^/]+)")


def is_relevant_to_task(text: str, kind: TaskKind) -> bool:
    text = text.lower()
    return any(keyword in text for keyword in TASK_KEYWORDS.get(kind, []))


def _base_name(path: str) -> str:
    name = posixpath.basename(path)
    return re.sub(r"\.[^.]+$", "", name).lower()


def are_files_related(first: str, second: str) -> bool:
    """Same directory, same feature folder, or one base name inside the other"""

    if posixpath.dirname(first) == posixpath.dirname(second):
        return True

    first_feature = FEATURE_PATTERN.search(first)
    second_feature = FEATURE_PATTERN.search(second)
    if first_feature and second_feature and first_feature.group(1) == second_feature.group(1):
        return True

    first_base, second_base = _base_name(first), _base_name(second)
    return first_base in second_base or second_base in first_base


def extract_topic(content: str) -> str:
    """Verb plus the word after it, or the opening words of the message"""

    words = content.split(" ")
    lowered = content.lower()
    for verb in TOPIC_VERBS:
        if verb not in lowered:
            continue
        index = next((i for i, word in enumerate(words) if verb in word.lower()), -1)
        if index != -1 and index < len(words) - 1:
            return f"{words[index]} {words[index + 1]}"
    return " ".join(words[:5]) + "..."


def summarize_conversation(messages: List[ConversationMessage]) -> str:
    topics = [extract_topic(m.content) for m in messages if m.role == MessageRole.USER]
    return f"Recent discussion: {', '.join(t for t in topics if t)}"


class ContextRetriever:
    """Turns each context layer into candidate context items"""

    def __init__(self, recent_change_hours: float = 2):
        self.recent_change_hours = recent_change_hours

    def extract_project_context(self, project: ProjectContext, kind: TaskKind, now: datetime) -> List[ContextItem]:
        items = [
            ContextItem(
                id="project-overview",
                content=f"Project: {project.name} v{project.version} - Phase: {project.current_phase}",
                tokens=50,
                priority=90,
                category="project",
                added_at=now,
            )
        ]

        conventions = [c for c in project.conventions if is_relevant_to_task(c, kind)]
        if conventions:
            items.append(
                ContextItem(
                    id="project-conventions",
                    content="Key Conventions:\n" + "\n".join(conventions),
                    tokens=len(conventions) * 20,
                    priority=85,
                    category="conventions",
                    added_at=now,
                )
            )

        lessons = [lesson for lesson in project.lessons if lesson.severity != "info"][:3]
        if lessons:
            items.append(
                ContextItem(
                    id="lessons-learned",
                    content="Important Lessons:\n" + "\n".join(f"- {l.lesson}" for l in lessons),
                    tokens=len(lessons) * 30,
                    priority=75,
                    category="lessons",
                    added_at=now,
                )
            )

        return items

    def extract_session_context(
        self, session: SessionContext, now: datetime, current_file: Optional[str] = None
    ) -> List[ContextItem]:
        items = [
            ContextItem(
                id="session-context",
                content=f"Working in: {session.working_directory}, Branch: {session.current_branch}",
                tokens=30,
                priority=70,
                category="session",
                added_at=now,
            )
        ]

        if current_file:
            files = [f for f in session.recent_files if are_files_related(f, current_file)]
        else:
            files = session.recent_files[:3]

        if files:
            items.append(
                ContextItem(
                    id="recent-files",
                    content=f"Recently edited: {', '.join(files)}",
                    tokens=len(files) * 10,
                    priority=65,
                    category="session",
                    added_at=now,
                )
            )

        return items

    def extract_conversation_context(self, conversation: ConversationContext, now: datetime) -> List[ContextItem]:
        items = []

        if conversation.established_context:
            items.append(
                ContextItem(
                    id="established-context",
                    content=f"We've established: {', '.join(conversation.established_context)}",
                    tokens=len(conversation.established_context) * 10,
                    priority=80,
                    category="conversation",
                    added_at=now,
                )
            )

        preferences = conversation.user_preferences
        items.append(
            ContextItem(
                id="user-preferences",
                content=(
                    f"Communication style: {preferences.communication_style}, "
                    f"Detail level: {preferences.explanation_depth}"
                ),
                tokens=20,
                priority=60,
                category="preferences",
                added_at=now,
            )
        )

        recent = conversation.messages[-3:]
        if recent:
            items.append(
                ContextItem(
                    id="conversation-summary",
                    content=summarize_conversation(recent),
                    tokens=100,
                    priority=75,
                    category="conversation",
                    added_at=now,
                )
            )

        return items

    def extract_semantic_context(self, semantic: SemanticContext, kind: TaskKind, now: datetime) -> List[ContextItem]:
        items = []

        # Same-kind tasks always count; other successes only when they mention the kind's keywords
        past_tasks = [
            t
            for t in semantic.similar_past_tasks
            if t.kind == kind or (t.outcome == "success" and is_relevant_to_task(t.description, kind))
        ][:2]
        if past_tasks:
            lines = "\n".join(f"- {t.description} ({', '.join(t.patterns)})" for t in past_tasks)
            items.append(
                ContextItem(
                    id="similar-tasks",
                    content=f"Similar successful implementations:\n{lines}",
                    tokens=len(past_tasks) * 40,
                    priority=85,
                    category="semantic",
                    added_at=now,
                )
            )

        patterns = sorted(semantic.suggested_patterns, key=lambda p: p.success_rate, reverse=True)[:3]
        if patterns:
            lines = "\n".join(f"- {p.name}: {p.description}" for p in patterns)
            items.append(
                ContextItem(
                    id="suggested-patterns",
                    content=f"Recommended patterns:\n{lines}",
                    tokens=len(patterns) * 30,
                    priority=80,
                    category="patterns",
                    added_at=now,
                )
            )

        return items

    def extract_temporal_context(self, temporal: TemporalContext, now: datetime) -> List[ContextItem]:
        items = []

        cutoff = now - timedelta(hours=self.recent_change_hours)
        changes = [c for c in temporal.recent_changes if c.timestamp > cutoff][:5]
        if changes:
            lines = "\n".join(f"- {c.type} {c.file}" for c in changes)
            items.append(
                ContextItem(
                    id="recent-changes",
                    content=f"Recent changes:\n{lines}",
                    tokens=len(changes) * 15,
                    priority=70,
                    category="temporal",
                    added_at=now,
                )
            )

        velocity = temporal.velocity
        items.append(
            ContextItem(
                id="velocity",
                content=f"Current pace: {velocity.tasks_completed} tasks completed, trend: {velocity.trend}",
                tokens=20,
                priority=50,
                category="temporal",
                added_at=now,
            )
        )

        return items
