from typing import Dict, List, Literal, Optional
from pathlib import Path
import json
import posixpath

import anyio
import structlog
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from smartagent.domain.models.rules import CodeValidation, RulesSource
from smartagent.domain.prompt.prompt_composer import PromptContext
from smartagent.domain.prompt.rules_composer import RulesAwareComposer
from smartagent.domain.prompt.standards import Surface
from .history_loader import PROJECT_NAME, PROJECT_VERSION
from .rules_loader import RULE_FILES

logger = structlog.get_logger(__name__)

ROUTES_FILE = ".cursor.routes.json"
META_FILE = ".cursor.meta"


class CursorRoute(BaseModel):
    """How Cursor should treat files under one directory"""
    type: Literal["page", "component", "feature"]
    base: Optional[str] = None
    use_ui: Optional[bool] = None
    localized: Optional[bool] = None
    agent: Optional[str] = None
    must_use_tailwind: Optional[bool] = None
    must_use_jsdoc: Optional[bool] = None


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SmartAgentFlags(_CamelModel):
    enabled: bool = True
    auto_enrich: bool = True
    validate_on_save: bool = True


class CursorMetadata(_CamelModel):
    project_name: str
    version: str
    enforce_rules: bool = True
    smart_agent: SmartAgentFlags = Field(default_factory=SmartAgentFlags)


DEFAULT_ROUTES: Dict[str, CursorRoute] = {
    "src/app": CursorRoute(type="page", use_ui=True, localized=True, agent="Task Management Smart Agent"),
    "src/components/ui": CursorRoute(type="component", must_use_tailwind=True, must_use_jsdoc=True),
    "src/components/layout": CursorRoute(type="component", base="GridLayout System", must_use_tailwind=True),
    "src/features": CursorRoute(type="feature", use_ui=True, localized=True),
    "src/packages": CursorRoute(type="component", must_use_jsdoc=True),
}


def path_suggestions(file_path: str, content: str) -> List[str]:
    """Hints that depend on where a file lives in the project"""

    suggestions = []
    if "/components/ui/" in file_path and "JSX.Element" not in content:
        suggestions.append("UI components should have explicit JSX.Element return type")
    if "/pages/" in file_path and "<div" in content:
        suggestions.append("Pages should use UI components instead of raw HTML elements")
    if "/features/" in file_path and "readonly" not in content:
        suggestions.append("Feature component props should use readonly interfaces")
    return suggestions


def context_from_path(file_path: Optional[str]) -> PromptContext:
    """Routing hints derived from the file a task is about"""

    if not file_path:
        return PromptContext(surface=Surface.CURSOR)

    directory = posixpath.dirname(file_path)
    component = None
    if "/components/" in file_path:
        component = posixpath.splitext(posixpath.basename(file_path))[0]
    feature = posixpath.basename(directory) if "/features/" in file_path else None

    return PromptContext(
        surface=Surface.CURSOR,
        target_directory=directory or None,
        component=component,
        feature=feature,
    )


class CursorIntegration:
    """Writes the Cursor project files and serves Cursor-specific prompts and checks"""

    def __init__(
        self,
        project_root: Path,
        composer: RulesAwareComposer,
        project_name: str = PROJECT_NAME,
        version: str = PROJECT_VERSION,
    ):
        self.project_root = Path(project_root)
        self.composer = composer
        self.project_name = project_name
        self.version = version

    async def _write(self, name: str, content: str) -> bool:
        path = anyio.Path(self.project_root / name)
        try:
            await path.write_text(content, encoding="utf-8")
        except OSError as e:
            logger.error("Failed to write integration file", file=name, error=str(e))
            return False
        return True

    async def generate_cursor_routes(self) -> bool:
        routes = {path: route.model_dump(exclude_none=True) for path, route in DEFAULT_ROUTES.items()}
        return await self._write(ROUTES_FILE, json.dumps(routes, indent=2))

    async def generate_cursor_meta(self) -> bool:
        metadata = CursorMetadata(project_name=self.project_name, version=self.version)
        return await self._write(META_FILE, metadata.model_dump_json(by_alias=True, indent=2))

    async def sync_rules(self) -> bool:
        """Create .cursorrules from CLAUDE.md when only the latter exists"""

        cursor_rules = anyio.Path(self.project_root / RULE_FILES[RulesSource.CURSORRULES])
        claude_md = anyio.Path(self.project_root / RULE_FILES[RulesSource.CLAUDE_MD])

        if await cursor_rules.exists() or not await claude_md.exists():
            return False

        try:
            content = await claude_md.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read CLAUDE.md for rules sync", error=str(e))
            return False

        # Both documents share one markdown format, the text is copied as is
        synced = await self._write(RULE_FILES[RulesSource.CURSORRULES], content)
        if synced:
            logger.info("Generated .cursorrules from CLAUDE.md")
        return synced

    async def setup(self) -> List[str]:
        """Write the integration files; returns the names actually written"""

        written = []
        if await self.generate_cursor_routes():
            written.append(ROUTES_FILE)
        if await self.generate_cursor_meta():
            written.append(META_FILE)
        if await self.sync_rules():
            written.append(RULE_FILES[RulesSource.CURSORRULES])

        logger.info("Cursor integration set up", files=written)
        return written

    def create_cursor_prompt(self, task: str, file_path: Optional[str] = None) -> str:
        return self.composer.compose_cursor_prompt(task, context_from_path(file_path))

    def validate_file(self, file_path: str, content: str) -> CodeValidation:
        validation = self.composer.validate_code(content)
        validation.suggestions = path_suggestions(file_path, content)
        return validation
