import pytest

from smartagent.domain.models.rules import RulesSource
from smartagent.errors import RulesNotFoundError
from smartagent.infrastructure.integrations.rules_loader import RulesLoader, parse_rules, parse_sections

CURSOR_RULES = """# Project Rules

## Project Overview
A task management app.

## Core Development Rules
- Strict TypeScript
- Use design tokens

## Layout Rules
### ❌ FORBIDDEN
- `<div className="flex">` wrappers
- Raw <span className="text-red"> markup

### ✅ REQUIRED
- Use `<GridLayout>` or <FlexLayout> components

## Code Quality Checklist
- [ ] Types are explicit
"""

CLAUDE_MD = """## Project Overview
Same app, described for Claude.

## Accessibility Requirements
- WCAG AAA
"""


def test_parse_sections_names_subsections_after_parent():
    sections = parse_sections(CURSOR_RULES)

    assert sections["Project Overview"] == "A task management app."
    assert sections["Core Development Rules"] == "- Strict TypeScript\n- Use design tokens"
    assert "Layout Rules - ❌ FORBIDDEN" in sections
    assert sections["Code Quality Checklist"] == "- [ ] Types are explicit"


def test_parse_rules_extracts_pattern_lists():
    rules = parse_rules(RulesSource.CURSORRULES, CURSOR_RULES)

    assert rules.coding_standards == ["Strict TypeScript", "Use design tokens"]
    assert rules.forbidden_patterns == ['<div className="flex">', '<span className="text-red">']
    assert rules.required_patterns == ["<GridLayout>", "GridLayout", "FlexLayout"]
    assert rules.find_section("Checklist") == "- [ ] Types are explicit"


@pytest.mark.asyncio
async def test_missing_documents_load_as_none(tmp_path):
    loader = RulesLoader(tmp_path)

    assert await loader.load_cursor_rules() is None
    assert await loader.load_combined() is None
    assert await loader.load_all_rules() == {RulesSource.CURSORRULES: None, RulesSource.CLAUDE_MD: None}


@pytest.mark.asyncio
async def test_combined_uses_claude_md_alone(tmp_path):
    (tmp_path / "CLAUDE.md").write_text(CLAUDE_MD, encoding="utf-8")

    rules = await RulesLoader(tmp_path).load_combined()

    assert rules.source == RulesSource.CLAUDE_MD
    assert rules.sections["Project Overview"] == "Same app, described for Claude."


@pytest.mark.asyncio
async def test_rules_are_cached_until_cleared(tmp_path):
    path = tmp_path / ".cursorrules"
    path.write_text(CURSOR_RULES, encoding="utf-8")
    loader = RulesLoader(tmp_path)

    first = await loader.load_cursor_rules()
    path.write_text(CLAUDE_MD, encoding="utf-8")

    assert await loader.load_cursor_rules() is first
    loader.clear_cache()
    assert (await loader.load_cursor_rules()).content == CLAUDE_MD


def test_merge_rules_combines_sources():
    cursor = parse_rules(RulesSource.CURSORRULES, CURSOR_RULES)
    claude = parse_rules(RulesSource.CLAUDE_MD, CLAUDE_MD)

    merged = RulesLoader.merge_rules([cursor, None, claude])

    assert merged.source == RulesSource.MERGED
    assert merged.sections["Project Overview"] == "A task management app.\n\nSame app, described for Claude."
    assert merged.sections["Accessibility Requirements"] == "- WCAG AAA"
    assert merged.coding_standards == ["Strict TypeScript", "Use design tokens"]
    assert merged.content == f"{CURSOR_RULES}\n\n---\n\n{CLAUDE_MD}"


def test_merge_rules_without_sources_raises():
    with pytest.raises(RulesNotFoundError):
        RulesLoader.merge_rules([None, None])


@pytest.mark.asyncio
async def test_combined_merges_both_documents(tmp_path):
    (tmp_path / ".cursorrules").write_text(CURSOR_RULES, encoding="utf-8")
    (tmp_path / "CLAUDE.md").write_text(CLAUDE_MD, encoding="utf-8")

    rules = await RulesLoader(tmp_path).load_combined()

    assert rules.source == RulesSource.MERGED
    assert "Accessibility Requirements" in rules.sections
    assert rules.forbidden_patterns == ['<div className="flex">', '<span className="text-red">']


@pytest.mark.asyncio
async def test_combined_keeps_identical_documents_once(tmp_path):
    (tmp_path / ".cursorrules").write_text(CLAUDE_MD, encoding="utf-8")
    (tmp_path / "CLAUDE.md").write_text(CLAUDE_MD, encoding="utf-8")

    rules = await RulesLoader(tmp_path).load_combined()

    assert rules.source == RulesSource.CURSORRULES
    assert rules.content == CLAUDE_MD


@pytest.mark.asyncio
async def test_undecodable_documents_load_as_none(tmp_path):
    (tmp_path / ".cursorrules").write_bytes(b"## Rules\n\xff\xfe")
    (tmp_path / "CLAUDE.md").write_bytes(b"## Rules\n\xff\xfe")

    assert await RulesLoader(tmp_path).load_combined() is None
