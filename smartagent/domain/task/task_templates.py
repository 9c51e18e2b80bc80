from typing import Dict, List

from smartagent.domain.models.task_state import Task, TaskKind

GENERIC_INSTRUCTIONS = """Complete the task following these steps:
1. Review the affected code and the requirements
2. Implement the change following all coding standards
3. Keep layouts on the GridLayout system and styling on design tokens
4. Verify accessibility and translations are preserved
5. Validate no forbidden patterns remain"""


class TaskTemplateRegistry:
    """Instruction block appended to a task prompt, one per task kind"""

    def __init__(self):
        self.templates: Dict[TaskKind, str] = {}
        self._initialize_default_templates()

    def _initialize_default_templates(self):
        self.register_template(
            TaskKind.CREATE_COMPONENT,
            "Create a new component following these steps:",
            [
                "Define TypeScript interfaces for props (readonly, no any types)",
                "Create the component with explicit JSX.Element return type",
                "Use GridLayout system components for all layouts",
                "Apply design tokens for all styling (no hardcoded values)",
                "Add proper accessibility attributes",
                "Implement internationalization with translation keys",
                "Export from appropriate index file",
                "Add to component documentation if needed",
            ],
        )
        self.register_template(
            TaskKind.MIGRATE_LAYOUT,
            "Migrate layouts to GridLayout system:",
            [
                "Identify all hardcoded div elements with flex/grid classes",
                "Replace with appropriate GridLayout components (FlexLayout, GridLayout, SplitLayout, Container)",
                "Convert Tailwind responsive classes to component props",
                "Ensure proper gap and spacing using design tokens",
                "Test responsive behavior at all breakpoints",
                "Validate no forbidden patterns remain",
            ],
        )
        self.register_template(
            TaskKind.UPDATE_STYLES,
            "Update styling to use design tokens:",
            [
                "Identify all hardcoded color, spacing, and size values",
                "Map to appropriate design tokens",
                "Upgrade to professional sizing standards (h-16+ for inputs/buttons)",
                "Apply consistent border radius (rounded-xl or rounded-2xl)",
                "Use proper shadow tokens (shadow-lg, shadow-xl, shadow-2xl)",
                "Test with all theme variants",
            ],
        )
        self.register_template(
            TaskKind.FIX_BUG,
            "Fix the bug following these steps:",
            [
                "Identify the root cause of the issue",
                "Implement the fix following all coding standards",
                "Ensure no regression in functionality",
                "Add or update tests if applicable",
                "Verify accessibility is maintained",
                "Check all language translations still work",
            ],
        )
        self.register_template(
            TaskKind.REFACTOR,
            "Refactor the code following these guidelines:",
            [
                "Maintain all existing functionality",
                "Improve code organization and readability",
                "Ensure strict TypeScript compliance",
                "Use proper component composition",
                "Apply all project standards",
                "Update imports and exports as needed",
            ],
        )
        self.register_template(
            TaskKind.ADD_FEATURE,
            "Add the new feature following these steps:",
            [
                "Plan the implementation approach",
                "Create necessary types and interfaces",
                "Implement UI components using the design system",
                "Add state management with Zustand if needed",
                "Implement proper error handling",
                "Add accessibility features",
                "Create all necessary translations",
                "Test with all themes and languages",
            ],
        )

    def register_template(self, kind: TaskKind, heading: str, steps: List[str]):
        numbered = "\n".join(f"{index}. {step}" for index, step in enumerate(steps, start=1))
        self.templates[TaskKind(kind)] = f"{heading}\n{numbered}"

    def get_instructions(self, kind: TaskKind) -> str:
        """The kind's template, or the generic checklist"""
        return self.templates.get(TaskKind(kind), GENERIC_INSTRUCTIONS)

    def build_task_prompt(self, task: Task) -> str:
        prompt = f"{task.description}\n\n"

        if task.context.requirements:
            requirements = "\n".join(f"- {r}" for r in task.context.requirements)
            prompt += f"Requirements:\n{requirements}\n\n"

        if task.context.affected_files:
            files = "\n".join(f"- {f}" for f in task.context.affected_files)
            prompt += f"Affected Files:\n{files}\n\n"

        return prompt + self.get_instructions(task.kind)
