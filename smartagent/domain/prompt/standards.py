from typing import Dict, List
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Surface(str, Enum):
    """Prompt consumers with a dedicated wrapper"""
    CURSOR = "cursor"
    CLAUDE = "claude"
    WINDSURF = "windsurf"
    REPLIT = "replit"
    VSCODE = "vscode"


class _Closed(BaseModel):
    model_config = ConfigDict(extra="forbid")


class OutputRules(_Closed):
    format: str = "TSX"
    language: str = "TypeScript"
    comment_style: str = "JSDoc"
    strict_typing: bool = True


class LayoutSystem(_Closed):
    forbidden: List[str] = Field(default_factory=lambda: [
        '<div className="flex',
        '<div className="grid',
        '<div className="flex-col',
        'className="space-x-',
        'className="space-y-',
        "flex items-center justify-between",
        "grid grid-cols-",
        "flex-col space-y-",
    ])
    required: List[str] = Field(default_factory=lambda: [
        "FlexLayout",
        "GridLayout",
        "SplitLayout",
        "Container",
    ])
    components: Dict[str, str] = Field(default_factory=lambda: {
        "flex": 'FlexLayout direction="{direction}" align="{align}" justify="{justify}"',
        "grid": 'GridLayout columns={{ mobile: 1, tablet: 2, desktop: 3 }} gap="lg"',
        "split": 'SplitLayout split="50/50" direction="horizontal"',
        "container": 'Container size="lg" centered',
    })


class DesignTokens(_Closed):
    forbidden: List[str] = Field(default_factory=lambda: [
        "p-4", "p-2", "p-6", "mb-6", "mt-4",
        "text-blue-", "bg-gray-", "border-green-",
        "h-12", "w-64", "h-10", "h-8",
        "rounded-md", "rounded-lg",
        "shadow-sm", "shadow-md",
        "style={{ padding:", "style={{ margin:",
    ])
    required: List[str] = Field(default_factory=lambda: [
        "p-8", "mb-12", "mt-8", "space-y-12",
        "text-primary", "bg-muted", "border-border",
        "h-16", "w-80", "h-20",
        "rounded-xl", "rounded-2xl",
        "shadow-lg", "shadow-xl", "shadow-2xl",
    ])
    standards: Dict[str, str] = Field(default_factory=lambda: {
        "buttonHeight": "h-16 (64px) minimum",
        "inputHeight": "h-16 (64px) minimum",
        "cardPadding": "p-8 (32px) minimum",
        "sectionSpacing": "space-y-12 (48px) minimum",
        "borderRadius": "rounded-xl or rounded-2xl only",
        "shadows": "shadow-lg, shadow-xl, shadow-2xl only",
    })


class Accessibility(_Closed):
    standard: str = "WCAG AAA"
    requirements: List[str] = Field(default_factory=lambda: [
        "All interactive elements keyboard accessible",
        "ARIA labels and roles for screen readers",
        "Focus management and trapping in modals",
        "High contrast mode support",
        "Skip links for navigation",
        "Proper heading hierarchy",
        "Color contrast ratios AAA compliant",
        "Alternative text for all images",
        "Form validation accessible",
        "Loading states announced to screen readers",
    ])


class Internationalization(_Closed):
    primary_language: str = "no"
    supported_languages: List[str] = Field(default_factory=lambda: ["no", "en", "fr", "ar"])
    rtl_languages: List[str] = Field(default_factory=lambda: ["ar"])


class ValidationChecks(_Closed):
    pre_commit: List[str] = Field(default_factory=lambda: [
        "type-check",
        "lint",
        "format:check",
        "validate:design-tokens",
        "validate:component-structure",
    ])
    pre_build: List[str] = Field(default_factory=lambda: [
        "validate:build-syntax",
        "validate:all",
    ])
    quality: List[str] = Field(default_factory=lambda: [
        "validate:design-tokens",
        "validate:file-size",
        "validate:component-purity",
        "validate:architecture",
        "validate:component-structure",
        "validate:localization",
    ])


class ProjectStandards(_Closed):
    """The standards profile every composed prompt enforces"""

    persona: str = "Task Management AI Assistant"
    project_name: str = "SaaS Template - Task Management"
    version: str = "1.0.0"
    coding_standards: List[str] = Field(default_factory=lambda: [
        "STRICT TypeScript only - no any types permitted",
        "Explicit return types for all components: JSX.Element",
        "Readonly interfaces for all props",
        "Must use GridLayout system components exclusively",
        "Must use design tokens only - no hardcoded styling",
        "All strings must be localized via i18n",
        "All components extend from appropriate base components",
        "No raw HTML elements in pages - use UI components only",
        "WCAG AAA accessibility compliance mandatory",
        "Norwegian compliance standards for validation",
        "Zustand for state management with Immer",
        "Professional sizing: h-16 minimum for inputs/buttons",
        "Component organization by feature",
        "Pure presentational components in /ui directory",
        "Business logic components in feature directories",
    ])
    folder_structure: Dict[str, str] = Field(default_factory=lambda: {
        "pages": "src/app/",
        "components": "src/components/",
        "uiComponents": "src/components/ui/",
        "layoutComponents": "src/components/layout/",
        "features": "src/features/",
        "packages": "src/packages/",
        "types": "src/packages/types/",
        "store": "src/packages/store/",
        "designTokens": "src/packages/design-tokens/",
        "localization": "src/packages/localization/",
        "hooks": "src/hooks/",
        "utils": "src/utils/",
        "api": "src/api/",
        "styles": "src/styles/",
    })
    output_rules: OutputRules = Field(default_factory=OutputRules)
    layout_system: LayoutSystem = Field(default_factory=LayoutSystem)
    design_tokens: DesignTokens = Field(default_factory=DesignTokens)
    accessibility: Accessibility = Field(default_factory=Accessibility)
    internationalization: Internationalization = Field(default_factory=Internationalization)
    validation: ValidationChecks = Field(default_factory=ValidationChecks)
