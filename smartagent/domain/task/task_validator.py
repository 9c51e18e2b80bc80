from typing import List, Optional

from smartagent.config import TaskSettings
from smartagent.domain.models.task_state import TaskKind, TaskResult
from smartagent.domain.prompt.standards import ProjectStandards

PARTIAL_COMPLIANCE_WARNING = "Some standards may not be fully met"


class TaskOutputValidator:
    """Scores generated output against the layout and design token rules

    Every occurrence of a forbidden pattern costs points, as does a missing
    layout component outside of bug fixes. The score never drops below zero.
    """

    def __init__(self, standards: Optional[ProjectStandards] = None, settings: Optional[TaskSettings] = None):
        self.standards = standards or ProjectStandards()
        self.settings = settings or TaskSettings()

    def calculate_score(self, kind: TaskKind, output: str) -> int:
        score = 100

        for pattern in self.standards.layout_system.forbidden:
            score -= output.count(pattern) * self.settings.layout_penalty

        for pattern in self.standards.design_tokens.forbidden:
            score -= output.count(pattern) * self.settings.token_penalty

        has_required_layout = any(p in output for p in self.standards.layout_system.required)
        if not has_required_layout and TaskKind(kind) != TaskKind.FIX_BUG:
            score -= self.settings.missing_layout_penalty

        return max(0, min(100, score))

    def validate(self, kind: TaskKind, output: str) -> TaskResult:
        """A scored result; a low score only adds warnings"""

        score = self.calculate_score(kind, output)
        warnings: List[str] = []
        if score < 100:
            warnings.append(PARTIAL_COMPLIANCE_WARNING)
        if score < self.settings.pass_threshold:
            warnings.append(f"Validation score {score} is below the pass threshold of {self.settings.pass_threshold}")

        return TaskResult(
            success=score >= self.settings.pass_threshold,
            message=output,
            validation_score=score,
            warnings=warnings,
        )
