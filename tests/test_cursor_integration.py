import json

import pytest

from smartagent.domain.prompt.rules_composer import RulesAwareComposer
from smartagent.domain.prompt.standards import Surface
from smartagent.infrastructure.integrations.cursor_integration import (
    META_FILE,
    ROUTES_FILE,
    CursorIntegration,
    context_from_path,
    path_suggestions,
)


@pytest.fixture
def integration(tmp_path):
    return CursorIntegration(tmp_path, RulesAwareComposer())


def test_context_from_component_path():
    context = context_from_path("src/components/tasks/TaskCard.tsx")

    assert context.surface == Surface.CURSOR
    assert context.target_directory == "src/components/tasks"
    assert context.component == "TaskCard"
    assert context.feature is None


def test_context_from_feature_path():
    context = context_from_path("src/features/billing/Invoice.tsx")

    assert context.feature == "billing"
    assert context.component is None


def test_context_without_path():
    context = context_from_path(None)

    assert context.target_directory is None
    assert context.component is None


def test_path_suggestions():
    assert path_suggestions("src/components/ui/Button.tsx", "export const Button = () => null") == [
        "UI components should have explicit JSX.Element return type"
    ]
    assert path_suggestions("src/pages/home.tsx", "<div>") == [
        "Pages should use UI components instead of raw HTML elements"
    ]
    assert path_suggestions("src/features/a/B.tsx", "interface Props { readonly id: string }") == []


@pytest.mark.asyncio
async def test_setup_writes_routes_and_meta(integration, tmp_path):
    written = await integration.setup()

    assert written == [ROUTES_FILE, META_FILE]
    routes = json.loads((tmp_path / ROUTES_FILE).read_text(encoding="utf-8"))
    assert routes["src/components/layout"] == {
        "type": "component",
        "base": "GridLayout System",
        "must_use_tailwind": True,
    }
    meta = json.loads((tmp_path / META_FILE).read_text(encoding="utf-8"))
    assert meta == {
        "projectName": "Task Management Application",
        "version": "1.0.0",
        "enforceRules": True,
        "smartAgent": {"enabled": True, "autoEnrich": True, "validateOnSave": True},
    }


@pytest.mark.asyncio
async def test_sync_rules_copies_claude_md(integration, tmp_path):
    (tmp_path / "CLAUDE.md").write_text("## Project Overview\nApp", encoding="utf-8")

    assert await integration.sync_rules() is True
    assert (tmp_path / ".cursorrules").read_text(encoding="utf-8") == "## Project Overview\nApp"


@pytest.mark.asyncio
async def test_sync_rules_leaves_existing_cursor_rules(integration, tmp_path):
    (tmp_path / "CLAUDE.md").write_text("claude", encoding="utf-8")
    (tmp_path / ".cursorrules").write_text("cursor", encoding="utf-8")

    assert await integration.sync_rules() is False
    assert (tmp_path / ".cursorrules").read_text(encoding="utf-8") == "cursor"


@pytest.mark.asyncio
async def test_sync_rules_without_claude_md(integration, tmp_path):
    assert await integration.sync_rules() is False
    assert not (tmp_path / ".cursorrules").exists()


@pytest.mark.asyncio
async def test_setup_reports_unwritable_root(tmp_path):
    missing_root = tmp_path / "absent"

    assert await CursorIntegration(missing_root, RulesAwareComposer()).setup() == []


def test_cursor_prompt_carries_path_hints(integration):
    prompt = integration.create_cursor_prompt("Add a due date", "src/components/tasks/TaskCard.tsx")

    assert prompt.startswith("[CURSOR SMART AGENT]")
    assert "Target Directory: src/components/tasks" in prompt
    assert "Component: TaskCard" in prompt


def test_validate_file_adds_path_suggestions(integration):
    result = integration.validate_file("src/components/ui/Button.tsx", "export const Button = () => null")

    assert result.valid is True
    assert result.suggestions == ["UI components should have explicit JSX.Element return type"]
