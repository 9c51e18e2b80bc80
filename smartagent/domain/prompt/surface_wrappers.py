from typing import Callable, Dict, Optional, Union

from .standards import Surface


def wrap_for_cursor(prompt: str) -> str:
    return (
        "[CURSOR SMART AGENT]\n\n"
        f"{prompt}\n\n"
        "[CURSOR SPECIFIC]\n"
        "- Use @workspace context for file navigation\n"
        "- Leverage Cursor's AI capabilities for code completion\n"
        "- Follow .cursorrules configuration"
    )


def wrap_for_claude(prompt: str) -> str:
    return (
        "<smart-agent-prompt>\n"
        f"{prompt}\n"
        "</smart-agent-prompt>\n\n"
        "Remember to use structured thinking and break down complex tasks into steps."
    )


def wrap_for_windsurf(prompt: str) -> str:
    return (
        "# WINDSURF SMART AGENT\n\n"
        f"{prompt}\n\n"
        "## Windsurf Integration\n"
        "- Check .windsurf.memory for context\n"
        "- Use Windsurf's workflow capabilities\n"
        "- Maintain session state"
    )


def wrap_for_replit(prompt: str) -> str:
    return (
        "<!-- REPLIT SMART AGENT -->\n\n"
        f"{prompt}\n\n"
        "<!-- REPLIT SPECIFIC -->\n"
        "- Consider Replit's collaborative environment\n"
        "- Use Replit's file system API when needed\n"
        "- Maintain compatibility with Replit's runtime"
    )


WRAPPERS: Dict[Surface, Callable[[str], str]] = {
    Surface.CURSOR: wrap_for_cursor,
    Surface.CLAUDE: wrap_for_claude,
    Surface.WINDSURF: wrap_for_windsurf,
    Surface.REPLIT: wrap_for_replit,
}


def wrap_for_surface(prompt: str, surface: Optional[Union[Surface, str]]) -> str:
    """Apply the surface's wrapper; vscode and unknown surfaces get the prompt unchanged"""

    try:
        key = Surface(surface)
    except ValueError:
        return prompt
    wrapper = WRAPPERS.get(key)
    return wrapper(prompt) if wrapper else prompt
