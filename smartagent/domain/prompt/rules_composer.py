from typing import Optional, Union

import structlog

from smartagent.domain.models.rules import CodeValidation, ProjectRules, RulesSource
from .prompt_composer import PromptComposer, PromptContext, bullet_list
from .standards import ProjectStandards, Surface
from .surface_wrappers import wrap_for_surface

logger = structlog.get_logger(__name__)

CRITICAL_SECTIONS = [
    "CRITICAL: Layout System Compliance",
    "CRITICAL: Design Token System Compliance",
    "Core Development Rules",
    "Accessibility Requirements",
    "Norwegian Compliance",
]

CHECKLIST_SECTIONS = [
    "Code Quality Checklist",
    "Code Review Checklist",
    "Validation Checklist",
]

SOURCE_LABELS = {
    RulesSource.CURSORRULES: ".cursorrules file",
    RulesSource.CLAUDE_MD: "CLAUDE.md file",
    RulesSource.MERGED: ".cursorrules and CLAUDE.md files",
}

MISSING_REQUIRED_WARNING = "Component does not use any required patterns (GridLayout, design tokens, etc.)"


class RulesAwareComposer(PromptComposer):
    """Prompt composer that interleaves the project's own rule document"""

    def __init__(self, standards: Optional[ProjectStandards] = None, rules: Optional[ProjectRules] = None):
        super().__init__(standards)
        self.rules = rules

    def set_rules(self, rules: Optional[ProjectRules]):
        self.rules = rules
        if rules is None:
            logger.warning("No project rules found, using default configuration only")
        else:
            logger.info("Project rules attached", source=rules.source.value, sections=len(rules.sections))

    def compose_enhanced(self, user_prompt: str, context: Optional[PromptContext] = None) -> str:
        base_prompt = self.compose(user_prompt, context)
        if self.rules is None:
            return base_prompt

        sections = [
            self.build_project_section(),
            base_prompt,
            self.build_project_rules_section(),
            self.build_checklist_section(),
        ]
        return "\n\n".join(section for section in sections if section)

    def compose_for_surface(
        self,
        user_prompt: str,
        surface: Optional[Union[Surface, str]],
        context: Optional[PromptContext] = None,
    ) -> str:
        return wrap_for_surface(self.compose_enhanced(user_prompt, context), surface)

    def compose_cursor_prompt(self, user_prompt: str, context: Optional[PromptContext] = None) -> str:
        """The raw cursor rules followed by the task, when that is where the rules came from"""

        if self.rules is not None and self.rules.source == RulesSource.CURSORRULES:
            return f"{self.rules.content}\n\n---\n\n## Current Task\n\n{user_prompt}"
        return self.compose_for_surface(user_prompt, Surface.CURSOR, context)

    def build_project_section(self) -> str:
        overview = self.rules.sections.get("Project Overview")
        if not overview:
            return ""
        return f"## Project Context\n\n{overview}\n\nSource: {SOURCE_LABELS[self.rules.source]}"

    def build_project_rules_section(self) -> str:
        sections = []

        for name in CRITICAL_SECTIONS:
            content = self.rules.find_section(name)
            if content:
                sections.append(f"### {name}\n\n{content}")

        if self.rules.forbidden_patterns:
            sections.append(f"### Combined Forbidden Patterns\n\n{bullet_list(self.rules.forbidden_patterns)}")
        if self.rules.required_patterns:
            sections.append(f"### Combined Required Patterns\n\n{bullet_list(self.rules.required_patterns)}")

        return "\n\n".join(sections)

    def build_checklist_section(self) -> str:
        checklist = next(
            (content for content in map(self.rules.find_section, CHECKLIST_SECTIONS) if content),
            None,
        )
        if not checklist:
            return ""
        return (
            "## Final Validation Checklist\n\n"
            f"{checklist}\n\n"
            "CRITICAL: Ensure all items are checked before completing the task."
        )

    def validate_code(self, code: str) -> CodeValidation:
        """Check generated code against the project rules and configured standards"""

        if self.rules is None:
            return CodeValidation(valid=True, warnings=["No project rules loaded for validation"])

        errors = [f"Forbidden pattern found: {p}" for p in self.rules.forbidden_patterns if p in code]
        warnings = []

        if "export" in code and "JSX.Element" in code:
            if not any(p in code for p in self.rules.required_patterns):
                warnings.append(MISSING_REQUIRED_WARNING)

        configured = self.standards.layout_system.forbidden + self.standards.design_tokens.forbidden
        errors.extend(f"Config forbidden pattern found: {p}" for p in configured if p in code)

        return CodeValidation(valid=not errors, errors=errors, warnings=warnings)
