from typing import List, Optional, Union

from pydantic import BaseModel, Field

from smartagent.domain.models.task_state import TaskKind
from .standards import ProjectStandards, Surface
from .surface_wrappers import wrap_for_surface


class PromptContext(BaseModel):
    """Routing hints folded into a composed prompt"""
    task: Optional[TaskKind] = None
    component: Optional[str] = None
    feature: Optional[str] = None
    target_directory: Optional[str] = None
    additional_rules: List[str] = Field(default_factory=list)
    surface: Optional[Surface] = None


def bullet_list(values) -> str:
    return "\n".join(f"- {value}" for value in values)


class PromptComposer:
    """Concatenates the standards sections and the task body in a fixed order"""

    def __init__(self, standards: Optional[ProjectStandards] = None):
        self.standards = standards or ProjectStandards()

    def compose(self, user_prompt: str, context: Optional[PromptContext] = None) -> str:
        context = context or PromptContext()
        sections = [
            self.build_persona_section(),
            self.build_coding_standards_section(),
            self.build_layout_system_section(),
            self.build_design_tokens_section(),
            self.build_accessibility_section(),
            self.build_internationalization_section(),
            self.build_folder_structure_section(context),
            self.build_output_rules_section(),
            self.build_validation_section(),
            self.build_additional_rules_section(context.additional_rules),
            self.build_task_section(user_prompt, context),
        ]
        return "\n\n".join(section for section in sections if section)

    def compose_for_surface(
        self,
        user_prompt: str,
        surface: Optional[Union[Surface, str]],
        context: Optional[PromptContext] = None,
    ) -> str:
        return wrap_for_surface(self.compose(user_prompt, context), surface)

    def build_persona_section(self) -> str:
        s = self.standards
        return (
            f"You are {s.persona} for {s.project_name} v{s.version}.\n"
            "Your role is to ensure all code follows the strict project standards and conventions."
        )

    def build_coding_standards_section(self) -> str:
        return (
            "## MANDATORY Coding Standards\n\n"
            f"{bullet_list(self.standards.coding_standards)}\n\n"
            "CRITICAL: Failure to follow these standards will result in code rejection."
        )

    def build_layout_system_section(self) -> str:
        layout = self.standards.layout_system
        examples = "\n".join(f"- {name}: <{usage}>" for name, usage in layout.components.items())
        return (
            "## CRITICAL: Layout System Compliance\n\n"
            "### ❌ FORBIDDEN Layout Patterns (NEVER USE):\n"
            f"{bullet_list(layout.forbidden)}\n\n"
            "### ✅ REQUIRED Layout Components (ALWAYS USE):\n"
            f"{bullet_list(layout.required)}\n\n"
            "### Component Usage Examples:\n"
            f"{examples}"
        )

    def build_design_tokens_section(self) -> str:
        tokens = self.standards.design_tokens
        standards = "\n".join(f"- {name}: {value}" for name, value in tokens.standards.items())
        return (
            "## CRITICAL: Design Token System Compliance\n\n"
            "### ❌ FORBIDDEN Styling (NEVER USE):\n"
            f"{bullet_list(tokens.forbidden)}\n\n"
            "### ✅ REQUIRED Design Tokens (ALWAYS USE):\n"
            f"{bullet_list(tokens.required)}\n\n"
            "### Professional Standards:\n"
            f"{standards}"
        )

    def build_accessibility_section(self) -> str:
        accessibility = self.standards.accessibility
        return f"## Accessibility Requirements ({accessibility.standard})\n\n{bullet_list(accessibility.requirements)}"

    def build_internationalization_section(self) -> str:
        i18n = self.standards.internationalization
        return (
            "## Internationalization\n\n"
            f"- Primary Language: {i18n.primary_language}\n"
            f"- Supported Languages: {', '.join(i18n.supported_languages)}\n"
            f"- RTL Languages: {', '.join(i18n.rtl_languages)}\n"
            "- ALWAYS use translation keys via t('key')\n"
            "- NEVER hardcode strings"
        )

    def resolve_target_directory(self, context: PromptContext) -> str:
        folders = self.standards.folder_structure
        if context.target_directory:
            return context.target_directory
        if context.component:
            return folders.get("components", "")
        if context.feature:
            return folders.get("features", "")
        return folders.get("pages", "")

    def build_folder_structure_section(self, context: PromptContext) -> str:
        structure = "\n".join(f"- {name}: {path}" for name, path in self.standards.folder_structure.items())
        return (
            "## File Organization\n\n"
            f"Target Directory: {self.resolve_target_directory(context)}\n\n"
            "Full Structure:\n"
            f"{structure}"
        )

    def build_output_rules_section(self) -> str:
        rules = self.standards.output_rules
        return (
            "## Output Requirements\n\n"
            f"- Format: {rules.format}\n"
            f"- Language: {rules.language}\n"
            f"- Comment Style: {rules.comment_style}\n"
            f"- Strict Typing: {'MANDATORY' if rules.strict_typing else 'Optional'}"
        )

    def build_validation_section(self) -> str:
        checks = self.standards.validation
        return (
            "## Validation Requirements\n\n"
            f"Pre-commit checks:\n{bullet_list(checks.pre_commit)}\n\n"
            f"Pre-build checks:\n{bullet_list(checks.pre_build)}\n\n"
            f"Quality checks:\n{bullet_list(checks.quality)}"
        )

    def build_additional_rules_section(self, rules: List[str]) -> str:
        if not rules:
            return ""
        return f"## Additional Context-Specific Rules\n\n{bullet_list(rules)}"

    def build_task_section(self, user_prompt: str, context: PromptContext) -> str:
        task = f"## Task\n\n{user_prompt}"
        if context.task:
            task = f"Task Type: {context.task.value}\n\n{task}"
        if context.component:
            task += f"\n\nComponent: {context.component}"
        if context.feature:
            task += f"\nFeature: {context.feature}"
        return task
