"""Conversational framing around a composed prompt.

The engine wraps the rules-aware prompt in a few short, deterministic
sections: a greeting picked by mood, an introduction from the context
window and project history, recalled memories, established conversation
facts, task tips and a closing note picked by complexity.
"""

from typing import Dict, List, Optional

from smartagent.domain.models.context import ContextWindow
from smartagent.domain.models.conversation import ConversationContext, ConversationMood
from smartagent.domain.models.history import RelevantHistory
from smartagent.domain.models.memory import MemoryItem
from smartagent.domain.models.task_state import TaskKind
from smartagent.domain.prompt.prompt_composer import bullet_list

GREETINGS: Dict[ConversationMood, str] = {
    ConversationMood.COLLABORATIVE: "Hey! I'm excited to work on this with you.",
    ConversationMood.FOCUSED: "I'm ready to help you tackle this task efficiently.",
    ConversationMood.EXPLORATORY: "Let's explore this together and find the best approach.",
    ConversationMood.DEBUGGING: "I see you're dealing with an issue. Let me help you solve it.",
    ConversationMood.LEARNING: "Great question! Let me explain this clearly.",
}

ENCOURAGEMENTS: Dict[str, str] = {
    "simple": "This should be straightforward. Let me know if you need any clarification!",
    "moderate": "This is a good task. We'll work through it step by step.",
    "complex": (
        "This is a comprehensive task, but we've handled similar challenges before. "
        "Let's break it down!"
    ),
}

TASK_TIPS: Dict[TaskKind, List[str]] = {
    TaskKind.CREATE_COMPONENT: [
        "Start with TypeScript interfaces for props",
        "Use our existing UI components as building blocks",
        "Remember to add proper accessibility attributes",
    ],
    TaskKind.FIX_BUG: [
        "Check the browser console for detailed error messages",
        "Look for similar fixes in our git history",
        "Consider edge cases and error boundaries",
    ],
    TaskKind.REFACTOR: [
        "Maintain all existing functionality",
        "Improve code readability and performance",
        "Update tests if needed",
    ],
    TaskKind.ADD_FEATURE: [
        "Plan the implementation approach first",
        "Consider state management needs",
        "Think about edge cases and error handling",
    ],
    TaskKind.UPDATE_STYLES: [
        "Use our design tokens for consistency",
        "Test with all theme variants",
        "Ensure responsive design works",
    ],
    TaskKind.MIGRATE_LAYOUT: [
        "Use GridLayout system components",
        "Remove all hardcoded flex/grid classes",
        "Test at all breakpoints",
    ],
    TaskKind.OPTIMIZE_PERFORMANCE: [
        "Measure before and after",
        "Consider bundle size impact",
        "Use React.memo where appropriate",
    ],
    TaskKind.ADD_TESTS: [
        "Cover happy path and edge cases",
        "Test user interactions",
        "Include accessibility tests",
    ],
    TaskKind.UPDATE_DOCUMENTATION: [
        "Keep it concise but comprehensive",
        "Include code examples",
        "Update related documentation",
    ],
}

# First match wins
KIND_KEYWORDS = [
    (TaskKind.CREATE_COMPONENT, ("create", "build", "new")),
    (TaskKind.FIX_BUG, ("fix", "error", "bug")),
    (TaskKind.REFACTOR, ("refactor", "improve")),
    (TaskKind.UPDATE_STYLES, ("style", "design", "css")),
    (TaskKind.MIGRATE_LAYOUT, ("layout", "grid", "flex")),
    (TaskKind.ADD_TESTS, ("test",)),
]

MEMORY_RECALL_LIMIT = 3
LESSON_LIMIT = 2
PATTERN_LIMIT = 3


def infer_task_kind(text: str, explicit: Optional[TaskKind] = None) -> TaskKind:
    """Guess the task kind from keywords; an explicit kind always wins"""

    if explicit is not None:
        return TaskKind(explicit)

    lowered = text.lower()
    for kind, keywords in KIND_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return kind
    return TaskKind.ADD_FEATURE


def build_greeting(mood: Optional[ConversationMood]) -> str:
    return GREETINGS.get(mood, GREETINGS[ConversationMood.COLLABORATIVE])


def build_introduction(window: ContextWindow, history: RelevantHistory) -> str:
    sentences = []

    if history.similar_phases:
        phase = history.similar_phases[0]
        sentences.append(
            f"I notice this is similar to what we did in {phase.name}. "
            "That implementation worked really well!"
        )

    project = window.find("project")
    if project:
        sentences.append(f"We're currently in {project.content}")

    recent = window.find("temporal")
    if recent:
        sentences.append(f"I see you've been working on: {recent.content}")

    return " ".join(sentences)


def build_memory_recall(memories: List[MemoryItem]) -> str:
    if not memories:
        return ""
    recalled = bullet_list(item.content for item in memories[:MEMORY_RECALL_LIMIT])
    return f"Based on our previous work, I remember:\n{recalled}"


def build_established_context(conversation: Optional[ConversationContext]) -> str:
    if conversation is None or not conversation.established_context:
        return ""
    return f"In our conversation so far, we've established:\n{bullet_list(conversation.established_context)}"


def build_guidance(kind: TaskKind, history: RelevantHistory) -> str:
    lines = []

    if history.relevant_lessons:
        lines.append("💡 Relevant lessons from our project:")
        lines.extend(f"- {l.lesson}: {l.context}" for l in history.relevant_lessons[:LESSON_LIMIT])

    if history.success_patterns:
        lines.append("\n✨ Patterns that have worked well:")
        lines.extend(f"- {pattern}" for pattern in history.success_patterns[:PATTERN_LIMIT])

    tips = TASK_TIPS.get(kind, [])
    if tips:
        lines.append("\n🎯 Tips for this task:")
        lines.extend(f"- {tip}" for tip in tips)

    return "\n".join(lines)


def build_encouragement(complexity: Optional[str]) -> str:
    return ENCOURAGEMENTS.get(complexity or "moderate", ENCOURAGEMENTS["moderate"])
