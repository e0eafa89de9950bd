"""Text formatting for trace messages."""

from typing import Any, Iterable


def format_character_set(characters: Iterable[str]) -> str:
    """Format an ordered character group, keeping the caller's order."""
    return "[" + ", ".join(str(c) for c in characters) + "]"


def format_state(state: Any) -> str:
    """Composite states are shown with ``|`` between components."""
    render = getattr(state, "render", None)
    if callable(render):
        return render("|")
    return str(state)
