from typing import List, Optional
from pathlib import Path
import re

import anyio
import structlog

from smartagent.domain.models.context import (
    Goal,
    LessonLearned,
    ProjectContext,
    ProjectMilestone,
    TechnicalDebtItem,
    TechnicalDecision,
)
from smartagent.domain.models.history import Achievement, Phase, ProjectHistory, RelevantHistory
from smartagent.infrastructure.util.clock import Clock, SystemClock
from smartagent.infrastructure.util.ids import IdGenerator, UuidIdGenerator

logger = structlog.get_logger(__name__)

HISTORY_FILE = ".cursor-updates"
PROJECT_NAME = "Task Management Application"
PROJECT_VERSION = "1.0.0"
STATUS_SECTION = "Project Status: PRODUCTION READY ✅"

PHASE_HEADING = re.compile(r"Phase (\d+): (.+)")
BOLD_ITEM = re.compile(r"\*\*(.+?)\*\*:?\s*(.+)")
NUMBERED_LESSON = re.compile(r"^\d+\.\s*\*\*(.+?)\*\*:?\s*(.+)")
NUMBERED_LINE = re.compile(r"^\d+\.\s")
PLANNED_BLOCK = re.compile(r"\(Planned\)(.*?)(?=##|\Z)", re.DOTALL)
PLANNED_ITEM = re.compile(r"- \*\*(.+?)\*\*: (.+)")
DECISION_PATTERNS = [
    re.compile(r"- Zustand with Immer for"),
    re.compile(r"- React Query for"),
    re.compile(r"- Tailwind CSS with"),
    re.compile(r"- Radix UI primitives"),
    re.compile(r"- i18next for"),
]

BASE_TECH_STACK = ["Next.js 14", "TypeScript", "Zustand", "React Query", "Tailwind CSS", "Radix UI", "i18next"]

CONVENTIONS = [
    "Strict TypeScript with explicit return types",
    "Component organization by feature",
    "Zustand with Immer for state management",
    "WCAG AAA accessibility compliance",
    "Norwegian compliance standards",
    "Design token system for styling",
    "GridLayout system for layouts",
]

SUCCESS_PATTERNS = [
    "Component organization by feature",
    "Strict TypeScript with explicit return types",
    "Design token system for consistent styling",
    "GridLayout system for responsive layouts",
    "Zustand with Immer for state management",
    "Comprehensive accessibility implementation",
]

LESSON_CATEGORIES = {
    "Architecture": ["modular", "structure", "organization"],
    "TypeScript": ["typescript", "type", "strict"],
    "Accessibility": ["accessibility", "wcag", "a11y"],
    "Performance": ["performance", "optimization", "bundle"],
    "State Management": ["state", "zustand", "context"],
    "Theme System": ["theme", "design", "color"],
    "Best Practices": ["practice", "standard", "convention"],
}


def categorize_lesson(lesson: str) -> str:
    lowered = lesson.lower()
    for category, keywords in LESSON_CATEGORIES.items():
        if any(keyword in lowered for keyword in keywords):
            return category
    return "General"


def determine_priority(text: str) -> str:
    if "critical" in text or "mandatory" in text or "must" in text:
        return "high"
    if "should" in text or "recommended" in text:
        return "medium"
    return "low"


def determine_severity(text: str) -> str:
    if "critical" in text or "prevented" in text or "error" in text:
        return "critical"
    if "challenge" in text or "difficult" in text:
        return "warning"
    return "info"


class ProjectHistoryLoader:
    """Reads the project changelog and turns it into the project context layer"""

    def __init__(
        self,
        project_root: Path = Path("."),
        clock: Optional[Clock] = None,
        ids: Optional[IdGenerator] = None,
    ):
        self.project_root = Path(project_root)
        self.clock = clock or SystemClock()
        self.ids = ids or UuidIdGenerator()
        self.history_cache: Optional[ProjectHistory] = None

    async def load_project_history(self) -> Optional[ProjectHistory]:
        if self.history_cache is not None:
            return self.history_cache

        path = anyio.Path(self.project_root / HISTORY_FILE)
        try:
            content = await path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not load project history", file=HISTORY_FILE, error=str(e))
            return None

        self.history_cache = self.parse_project_history(content)
        logger.info(
            "Project history loaded",
            phases=len(self.history_cache.phases),
            lessons=len(self.history_cache.lessons),
            decisions=len(self.history_cache.decisions),
        )
        return self.history_cache

    async def get_project_context(self) -> Optional[ProjectContext]:
        history = await self.load_project_history()
        if history is None:
            return None

        now = self.clock.now()
        return ProjectContext(
            name=PROJECT_NAME,
            version=PROJECT_VERSION,
            current_phase=history.current_status.phase,
            tech_stack=self.extract_tech_stack(history),
            conventions=list(CONVENTIONS),
            milestones=[
                ProjectMilestone(
                    phase=phase.name,
                    description=phase.description,
                    completed_at=phase.completed_at,
                    key_achievements=list(phase.key_features),
                )
                for phase in history.phases
            ],
            decisions=list(history.decisions),
            lessons=list(history.lessons),
            active_features=list(history.current_status.active_features),
            technical_debt=list(history.technical_debts),
            upcoming_goals=[g for g in history.goals if g.target_date is None or g.target_date > now],
        )

    def parse_project_history(self, content: str) -> ProjectHistory:
        """Best-effort parse; lines that do not match a known shape are skipped"""

        history = ProjectHistory()
        section = ""
        subsection = ""
        phase: Optional[Phase] = None

        for line in content.split("\n"):
            if line.startswith("## "):
                section = line[3:].strip()
                subsection = ""
                continue

            if line.startswith("### "):
                subsection = line[4:].strip()
                match = PHASE_HEADING.search(line)
                if match:
                    if phase is not None:
                        history.phases.append(phase)
                    phase = Phase(number=int(match.group(1)), name=match.group(2).strip())
                continue

            if section == "Project Overview":
                if not history.overview and line.strip():
                    history.overview = line.strip()

            elif section == "Long-term Goals & Vision":
                if subsection == "Primary Objectives" and line.startswith("- "):
                    goal = self.parse_goal(line[2:])
                    if goal:
                        history.goals.append(goal)

            elif section == "Complete Development History":
                if phase is not None and line.startswith("- "):
                    item = line[2:].strip()
                    if "Components" in subsection:
                        phase.components.append(item)
                    else:
                        phase.key_features.append(item)

            elif section == "Technical Achievements":
                if line.startswith("- "):
                    match = BOLD_ITEM.search(line[2:])
                    if match:
                        history.achievements.append(Achievement(category=match.group(1), description=match.group(2)))

            elif section == "Lessons Learned":
                if NUMBERED_LINE.match(line):
                    lesson = self.parse_lesson(line)
                    if lesson:
                        history.lessons.append(lesson)

            elif section == STATUS_SECTION:
                if line.startswith("- ✅"):
                    history.current_status.active_features.append(line[len("- ✅"):].strip())

        if phase is not None:
            history.phases.append(phase)

        history.current_status.phase = history.phases[-1].name if history.phases else "Unknown"
        history.current_status.completion_percentage = 100
        history.current_status.ready_for_production = True
        history.decisions = self.extract_decisions(content)
        history.technical_debts = self.extract_technical_debts(content)
        return history

    def parse_goal(self, text: str) -> Optional[Goal]:
        match = BOLD_ITEM.search(text)
        if not match:
            return None
        return Goal(id=self.ids.new_id("hist"), title=match.group(1), priority=determine_priority(match.group(2)))

    def parse_lesson(self, text: str) -> Optional[LessonLearned]:
        match = NUMBERED_LESSON.match(text)
        if not match:
            return None
        return LessonLearned(
            id=self.ids.new_id("hist"),
            lesson=match.group(1),
            context=match.group(2),
            category=categorize_lesson(match.group(1)),
            severity=determine_severity(match.group(2)),
        )

    def extract_decisions(self, content: str) -> List[TechnicalDecision]:
        decisions = []
        for line in content.split("\n"):
            for pattern in DECISION_PATTERNS:
                if not pattern.search(line):
                    continue
                text = re.sub(r"^-\s*", "", line)
                parts = text.split(" for ")
                decisions.append(
                    TechnicalDecision(
                        id=self.ids.new_id("hist"),
                        decision=parts[0],
                        rationale=parts[1] if len(parts) > 1 else "",
                        impact="high",
                    )
                )
        return decisions

    def extract_technical_debts(self, content: str) -> List[TechnicalDebtItem]:
        """Planned items count as technical debt"""

        match = PLANNED_BLOCK.search(content)
        if not match:
            return []

        return [
            TechnicalDebtItem(
                id=self.ids.new_id("hist"),
                description=f"{title}: {detail}",
                impact="medium",
                effort="large",
                created_at=self.clock.now(),
            )
            for title, detail in PLANNED_ITEM.findall(match.group(1))
        ]

    def extract_tech_stack(self, history: ProjectHistory) -> List[str]:
        stack = list(BASE_TECH_STACK)
        for decision in history.decisions:
            tech = decision.decision.split(" ")[0]
            if len(tech) > 2 and tech not in stack:
                stack.append(tech)
        return stack

    def extract_success_patterns(self, history: ProjectHistory) -> List[str]:
        patterns = list(SUCCESS_PATTERNS)
        for achievement in history.achievements:
            if achievement.impact == "high" and "implementation" in achievement.description:
                patterns.append(achievement.description)
        return patterns

    async def get_relevant_history(self, task_kind: str, component: Optional[str] = None) -> RelevantHistory:
        """Phases, lessons and components that mention the task kind or component"""

        history = await self.load_project_history()
        if history is None:
            return RelevantHistory()

        kind = str(getattr(task_kind, "value", task_kind)).lower()
        component_key = component.lower() if component else None

        similar_phases = []
        for phase in history.phases:
            components = " ".join(phase.components).lower()
            features = " ".join(phase.key_features).lower()
            if kind in components or kind in features or (component_key and component_key in components):
                similar_phases.append(phase)

        relevant_lessons = [
            lesson
            for lesson in history.lessons
            if kind in f"{lesson.lesson} {lesson.context}".lower()
            or (component_key and component_key in f"{lesson.lesson} {lesson.context}".lower())
        ]

        related_components: List[str] = []
        if component_key:
            for phase in history.phases:
                for name in phase.components:
                    if component_key in name.lower() and name not in related_components:
                        related_components.append(name)

        return RelevantHistory(
            similar_phases=similar_phases,
            relevant_lessons=relevant_lessons,
            related_components=related_components,
            success_patterns=self.extract_success_patterns(history),
        )
