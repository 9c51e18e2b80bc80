from typing import Dict, List, Optional, Sequence
from pathlib import Path
import re

import anyio
import structlog

from smartagent.domain.models.rules import ProjectRules, RulesSource
from smartagent.errors import RulesNotFoundError

logger = structlog.get_logger(__name__)

RULE_FILES: Dict[RulesSource, str] = {
    RulesSource.CURSORRULES: ".cursorrules",
    RulesSource.CLAUDE_MD: "CLAUDE.md",
}

CODE_SPAN = re.compile(r"`([^`]+)`")
FORBIDDEN_FRAGMENT = re.compile(r'<[^>]+>|className="[^"]+"')
COMPONENT_TAG = re.compile(r"<([A-Z]\w+)")


def _unique(values: List[str]) -> List[str]:
    return list(dict.fromkeys(values))


def parse_sections(content: str) -> Dict[str, str]:
    """``## Name`` opens a section, ``### Child`` a ``Name - Child`` subsection"""

    sections: Dict[str, str] = {}
    parent = ""
    current = ""
    body: List[str] = []

    def flush():
        text = "\n".join(body).strip()
        if current and body:
            sections[current] = text

    for line in content.split("\n"):
        if line.startswith("## "):
            flush()
            parent = current = line[3:].strip()
            body = []
        elif line.startswith("### "):
            flush()
            child = line[4:].strip()
            current = f"{parent} - {child}" if parent else child
            body = []
        else:
            body.append(line)

    flush()
    return sections


def extract_coding_standards(content: str) -> List[str]:
    standards = []
    in_section = False

    for line in content.split("\n"):
        if "Coding Standards" in line or "Core Development Rules" in line:
            in_section = True
            continue
        if in_section and line.startswith("## "):
            in_section = False
            continue
        if in_section and line.strip().startswith("- "):
            standards.append(line.strip()[2:])

    return standards


def extract_forbidden_patterns(content: str) -> List[str]:
    patterns = []
    in_section = False

    for line in content.split("\n"):
        if "FORBIDDEN" in line or "Don't Do" in line or "❌" in line:
            in_section = True
            continue
        if in_section and ("REQUIRED" in line or "✅" in line or line.startswith("## ")):
            in_section = False
            continue
        if in_section:
            patterns.extend(CODE_SPAN.findall(line))
            patterns.extend(FORBIDDEN_FRAGMENT.findall(line))

    return _unique(patterns)


def extract_required_patterns(content: str) -> List[str]:
    patterns = []
    in_section = False

    for line in content.split("\n"):
        if "REQUIRED" in line or "Do Instead" in line or ("✅" in line and "FORBIDDEN" not in line):
            in_section = True
            continue
        if in_section and ("FORBIDDEN" in line or "❌" in line or line.startswith("## ")):
            in_section = False
            continue
        if in_section:
            patterns.extend(CODE_SPAN.findall(line))
            patterns.extend(COMPONENT_TAG.findall(line))

    return _unique(patterns)


def parse_rules(source: RulesSource, content: str) -> ProjectRules:
    return ProjectRules(
        source=source,
        content=content,
        sections=parse_sections(content),
        coding_standards=extract_coding_standards(content),
        forbidden_patterns=extract_forbidden_patterns(content),
        required_patterns=extract_required_patterns(content),
    )


class RulesLoader:
    """Loads the project's rule documents (.cursorrules, CLAUDE.md)"""

    def __init__(self, project_root: Path = Path(".")):
        self.project_root = Path(project_root)
        self.cache: Dict[RulesSource, ProjectRules] = {}

    async def load(self, source: RulesSource) -> Optional[ProjectRules]:
        """Parsed rules, or None when the document is missing or unreadable"""

        source = RulesSource(source)
        cached = self.cache.get(source)
        if cached is not None:
            return cached

        path = anyio.Path(self.project_root / RULE_FILES[source])
        try:
            content = await path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not load rules", file=RULE_FILES[source], error=str(e))
            return None

        rules = parse_rules(source, content)
        self.cache[source] = rules
        logger.info(
            "Rules loaded",
            file=RULE_FILES[source],
            sections=len(rules.sections),
            forbidden=len(rules.forbidden_patterns),
            required=len(rules.required_patterns),
        )
        return rules

    async def load_cursor_rules(self) -> Optional[ProjectRules]:
        return await self.load(RulesSource.CURSORRULES)

    async def load_claude_md(self) -> Optional[ProjectRules]:
        return await self.load(RulesSource.CLAUDE_MD)

    async def load_all_rules(self) -> Dict[RulesSource, Optional[ProjectRules]]:
        return {source: await self.load(source) for source in RULE_FILES}

    async def load_combined(self) -> Optional[ProjectRules]:
        """The single document that exists, or both merged when their contents differ"""

        loaded = [r for r in (await self.load_all_rules()).values() if r is not None]
        if not loaded:
            return None

        distinct = []
        for rules in loaded:
            if all(rules.content != kept.content for kept in distinct):
                distinct.append(rules)
        if len(distinct) == 1:
            return distinct[0]
        return self.merge_rules(distinct)

    def clear_cache(self):
        self.cache.clear()

    @staticmethod
    def merge_rules(rules: Sequence[Optional[ProjectRules]]) -> ProjectRules:
        """Union of several rule documents; sections with the same name are concatenated"""

        valid = [r for r in rules if r is not None]
        if not valid:
            raise RulesNotFoundError("No valid rules found")

        sections: Dict[str, str] = {}
        standards: List[str] = []
        forbidden: List[str] = []
        required: List[str] = []

        for rule in valid:
            for name, body in rule.sections.items():
                sections[name] = f"{sections[name]}\n\n{body}" if name in sections else body
            standards.extend(rule.coding_standards)
            forbidden.extend(rule.forbidden_patterns)
            required.extend(rule.required_patterns)

        return ProjectRules(
            source=RulesSource.MERGED,
            content="\n\n---\n\n".join(r.content for r in valid),
            sections=sections,
            coding_standards=_unique(standards),
            forbidden_patterns=_unique(forbidden),
            required_patterns=_unique(required),
        )
