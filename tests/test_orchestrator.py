import pytest
import pytest_asyncio

from smartagent.application.agent_service import SmartAgentService
from smartagent.domain.models.memory import MemoryKind
from smartagent.domain.models.rules import RulesSource
from smartagent.domain.models.task_state import TaskKind, TaskStatus
from smartagent.domain.orchestration.core.guidance import build_encouragement, build_greeting, infer_task_kind
from smartagent.domain.prompt.prompt_composer import PromptContext

CURSOR_RULES = """## Project Overview
Task management SaaS template.

## Core Development Rules
- Strict TypeScript

### ❌ FORBIDDEN
- `className="flex`
"""

CHANGELOG = """## Complete Development History
### Phase 1: Foundation
- Project setup
### Components Created
- TaskCard component

## Lessons Learned
1. **Strict types**: Type errors prevented regressions
"""


@pytest_asyncio.fixture
async def service(tmp_path, settings, clock, ids):
    (tmp_path / ".cursorrules").write_text(CURSOR_RULES, encoding="utf-8")
    (tmp_path / ".cursor-updates").write_text(CHANGELOG, encoding="utf-8")
    service = SmartAgentService(settings, clock, ids)
    await service.setup(configure_logging=False)
    return service


def test_infer_task_kind():
    assert infer_task_kind("Create a new card") == TaskKind.CREATE_COMPONENT
    assert infer_task_kind("the save button throws") == TaskKind.ADD_FEATURE
    assert infer_task_kind("fix the login bug") == TaskKind.FIX_BUG
    assert infer_task_kind("switch to grid") == TaskKind.MIGRATE_LAYOUT
    assert infer_task_kind("anything", TaskKind.ADD_TESTS) == TaskKind.ADD_TESTS


def test_greeting_and_encouragement_defaults():
    assert build_greeting(None) == "Hey! I'm excited to work on this with you."
    assert build_encouragement(None) == "This is a good task. We'll work through it step by step."
    assert build_encouragement("complex").startswith("This is a comprehensive task")


@pytest.mark.asyncio
async def test_prompt_wraps_rules_aware_prompt_in_guidance(service):
    prompt = await service.prompt(None, "Create a TaskCard component")

    assert prompt.startswith("Hey! I'm excited to work on this with you.")
    assert "We're currently in Project: Task Management Application v1.0.0 - Phase: Foundation" in prompt
    assert "## Project Context\n\nTask management SaaS template." in prompt
    assert "## Task\n\nCreate a TaskCard component" in prompt
    assert "✨ Patterns that have worked well:" in prompt
    assert "🎯 Tips for this task:\n- Start with TypeScript interfaces for props" in prompt
    assert prompt.endswith("This should be straightforward. Let me know if you need any clarification!")


@pytest.mark.asyncio
async def test_prompt_records_both_turns(service):
    prompt = await service.prompt(None, "Create a TaskCard component")

    messages = service.tracker.active.messages
    assert [m.role.value for m in messages] == ["user", "assistant"]
    assert messages[1].content == prompt
    assert service.metrics.get_metrics_summary()["prompts.generated"] == 1


@pytest.mark.asyncio
async def test_prompt_is_wrapped_for_surface(service):
    prompt = await service.prompt("claude", "Create a TaskCard component")

    assert prompt.startswith("<smart-agent-prompt>\nHey!")
    assert prompt.endswith("Remember to use structured thinking and break down complex tasks into steps.")


@pytest.mark.asyncio
async def test_component_history_is_mentioned(service):
    prompt = await service.prompt(None, "Build the card", PromptContext(component="TaskCard"))

    assert "I notice this is similar to what we did in Foundation." in prompt
    assert "Component: TaskCard" in prompt


@pytest.mark.asyncio
async def test_negative_message_changes_greeting_and_kind(service):
    prompt = await service.prompt(None, "I get an error when saving")

    assert prompt.startswith("I see you're dealing with an issue. Let me help you solve it.")
    assert "- Check the browser console for detailed error messages" in prompt


@pytest.mark.asyncio
async def test_established_context_is_listed(service):
    service.tracker.establish_context("Cards use GridLayout")

    prompt = await service.prompt(None, "Build the card")

    assert "In our conversation so far, we've established:\n- Cards use GridLayout" in prompt


@pytest.mark.asyncio
async def test_successful_outcome_is_remembered(service, storage_path):
    await service.prompt(None, "Create a TaskCard component")
    await service.learn_from_outcome(True, "worked")

    items = service.memory.working.items
    assert items[-1].content == "Successful: Create a TaskCard component"
    assert items[-1].kind == MemoryKind.PATTERN
    assert items[-1].importance == 80
    assert service.tracker.get_context().momentum == 60
    assert (storage_path / "working.json").exists()

    prompt = await service.prompt(None, "Create a TaskCard component")
    assert "Based on our previous work, I remember:\n- Successful: Create a TaskCard component" in prompt


@pytest.mark.asyncio
async def test_failed_outcome_lowers_momentum_only(service):
    await service.prompt(None, "Create a TaskCard component")
    await service.learn_from_outcome(False)

    assert service.tracker.get_context().momentum == 40
    assert service.memory.working.items == []


@pytest.mark.asyncio
async def test_end_session_closes_conversation(service):
    await service.prompt(None, "Create a TaskCard component")
    await service.end_session(85)

    assert service.tracker.active is None
    assert service.memory.episodic.sessions[0].satisfaction == 85
    assert service.memory.episodic.sessions[0].end_time is not None


@pytest.mark.asyncio
async def test_task_commands(service):
    task = service.create_task("create_component", "Card", "Build a card", component="TaskCard")

    async def executor(prompt: str) -> str:
        assert "## Project Context" in prompt
        return '<div className="flex items-center justify-between" />'

    result = await service.execute_task(task.id, executor, "cursor")

    assert service.list_tasks(TaskStatus.COMPLETED) == [task]
    assert result.validation_score <= 70
    assert result.warnings


@pytest.mark.asyncio
async def test_validate_uses_project_rules(service):
    result = service.validate('<div className="flex gap-2">')

    assert result.valid is False
    assert 'Forbidden pattern found: className="flex' in result.errors


@pytest.mark.asyncio
async def test_setup_writes_cursor_files(service, tmp_path):
    assert (tmp_path / ".cursor.routes.json").exists()
    assert (tmp_path / ".cursor.meta").exists()
    assert (tmp_path / ".cursorrules").read_text(encoding="utf-8") == CURSOR_RULES


@pytest.mark.asyncio
async def test_setup_syncs_rules_from_claude_md(tmp_path, settings, clock, ids):
    (tmp_path / "CLAUDE.md").write_text(CURSOR_RULES, encoding="utf-8")
    service = SmartAgentService(settings, clock, ids)

    await service.setup(configure_logging=False)

    assert (tmp_path / ".cursorrules").read_text(encoding="utf-8") == CURSOR_RULES
    assert service.composer.rules.source == RulesSource.CURSORRULES


@pytest.mark.asyncio
async def test_cursor_prompt_uses_raw_cursor_rules(service):
    prompt = await service.cursor_prompt("Add a due date", "src/components/tasks/TaskCard.tsx")

    assert prompt == f"{CURSOR_RULES}\n\n---\n\n## Current Task\n\nAdd a due date"


@pytest.mark.asyncio
async def test_validate_file_reports_unreadable_file(service, tmp_path):
    missing = tmp_path / "nope.tsx"

    result = await service.validate_file(missing)

    assert result.valid is False
    assert result.errors[0].startswith(f"Could not read {missing}")


@pytest.mark.asyncio
async def test_validate_file_adds_path_suggestions(service, tmp_path):
    target = tmp_path / "src" / "components" / "ui" / "Button.tsx"
    target.parent.mkdir(parents=True)
    target.write_text("export const Button = () => null", encoding="utf-8")

    result = await service.validate_file(target)

    assert result.valid is True
    assert result.suggestions == ["UI components should have explicit JSX.Element return type"]


@pytest.mark.asyncio
async def test_failed_task_has_its_own_counter(service):
    task = service.create_task("add_feature", "Export", "Add export")

    async def broken(prompt: str) -> str:
        raise RuntimeError("model unavailable")

    await service.execute_task(task.id, broken)

    summary = service.metrics.get_metrics_summary()
    assert summary["tasks.failed"] == 1
    assert "tasks.below_threshold" not in summary
