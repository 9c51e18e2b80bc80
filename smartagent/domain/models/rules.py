from typing import Dict, List, Optional
from pydantic import BaseModel, Field
from enum import Enum


class RulesSource(str, Enum):
    CURSORRULES = "cursorrules"
    CLAUDE_MD = "claude.md"
    MERGED = "merged"


class ProjectRules(BaseModel):
    """Parsed project rule document"""
    source: RulesSource
    content: str
    sections: Dict[str, str] = Field(default_factory=dict, description="Heading -> body, in document order")
    coding_standards: List[str] = Field(default_factory=list)
    forbidden_patterns: List[str] = Field(default_factory=list)
    required_patterns: List[str] = Field(default_factory=list)

    def find_section(self, partial_name: str) -> Optional[str]:
        """Body of the first section whose heading contains ``partial_name``"""
        for name, body in self.sections.items():
            if partial_name in name:
                return body
        return None


class CodeValidation(BaseModel):
    valid: bool
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list, description="Path-specific hints from file validation")
