from typing import List, Optional, TypeVar
from datetime import datetime

from smartagent.domain.models.memory import ProceduralMemoryState, Procedure, Shortcut, Skill, Workflow
from .semantic_memory import blend_rate

R = TypeVar("R", Workflow, Procedure, Skill, Shortcut)


def _upsert(records: List[R], record: R) -> R:
    for index, existing in enumerate(records):
        if existing.id == record.id:
            records[index] = record
            return record
    records.append(record)
    return record


class ProceduralMemory:
    """How-to knowledge: workflows, procedures, skills and shortcuts"""

    def __init__(self):
        self.workflows: List[Workflow] = []
        self.procedures: List[Procedure] = []
        self.skills: List[Skill] = []
        self.shortcuts: List[Shortcut] = []

    def add_workflow(self, workflow: Workflow) -> Workflow:
        return _upsert(self.workflows, workflow)

    def add_procedure(self, procedure: Procedure) -> Procedure:
        return _upsert(self.procedures, procedure)

    def add_skill(self, skill: Skill) -> Skill:
        return _upsert(self.skills, skill)

    def add_shortcut(self, shortcut: Shortcut) -> Shortcut:
        return _upsert(self.shortcuts, shortcut)

    def get_procedure(self, procedure_id: str) -> Optional[Procedure]:
        return next((p for p in self.procedures if p.id == procedure_id), None)

    def find_procedures(self, trigger: str) -> List[Procedure]:
        """Procedures whose trigger text appears in ``trigger``"""
        trigger = trigger.lower()
        return [p for p in self.procedures if p.trigger and p.trigger.lower() in trigger]

    def record_usage(self, item_id: str, success: bool, now: datetime) -> bool:
        """Fold one use of a procedure, workflow or skill into its running stats"""

        observed = 100.0 if success else 0.0

        procedure = self.get_procedure(item_id)
        if procedure is not None:
            procedure.last_used = now
            procedure.effectiveness = blend_rate(procedure.effectiveness, observed)
            return True

        workflow = next((w for w in self.workflows if w.id == item_id), None)
        if workflow is not None:
            workflow.success_rate = blend_rate(workflow.success_rate, observed)
            return True

        skill = next((s for s in self.skills if s.id == item_id), None)
        if skill is not None:
            skill.practice_count += 1
            skill.last_practiced = now
            skill.proficiency = blend_rate(skill.proficiency, observed)
            return True

        return False

    def to_state(self) -> ProceduralMemoryState:
        return ProceduralMemoryState(
            workflows=list(self.workflows),
            procedures=list(self.procedures),
            skills=list(self.skills),
            shortcuts=list(self.shortcuts),
        )

    def restore(self, state: ProceduralMemoryState):
        self.workflows = list(state.workflows)
        self.procedures = list(state.procedures)
        self.skills = list(state.skills)
        self.shortcuts = list(state.shortcuts)
