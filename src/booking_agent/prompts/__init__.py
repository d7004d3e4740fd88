"""Modular system prompts for the agent.

Prompt sections are stored as separate .txt files and composed in order.
Set SYSTEM_PROMPT in env to override with a single custom prompt.
"""

from __future__ import annotations

import datetime as dt
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

# Order of prompt sections (filenames without .txt)
PROMPT_SECTION_ORDER = (
    "base",
    "booking_flow",
    "seating",
)


def _prompts_dir() -> Path:
    """Directory containing prompt .txt files (next to this __init__.py)."""
    return Path(__file__).resolve().parent


def _load_section(name: str) -> str:
    """Load a single prompt section by name (without .txt)."""
    path = _prompts_dir() / f"{name}.txt"
    if not path.exists():
        logger.warning("Prompt section not found: %s", path)
        return ""
    try:
        return path.read_text(encoding="utf-8").strip()
    except OSError as e:
        logger.warning("Failed to read prompt section %s: %s", name, e)
        return ""


def build_system_prompt(
    *,
    today: dt.date | None = None,
    section_order: tuple[str, ...] | None = None,
    separator: str = "\n\n",
) -> str:
    """Build the full system prompt by loading and joining prompt sections in order.

    Args:
        today: Date substituted for {today}; defaults to the current date.
        section_order: Override default order of section names (without .txt).
        separator: String to join sections with.
    """
    order = section_order or PROMPT_SECTION_ORDER
    parts = [content for content in (_load_section(name) for name in order) if content]
    current = today or dt.date.today()
    return separator.join(parts).replace("{today}", current.isoformat())


def get_system_prompt(override: str | None = None, today: dt.date | None = None) -> str:
    """Return the system prompt to use for the agent.

    Args:
        override: If set (e.g. from SYSTEM_PROMPT env), use this instead of modular prompts.
        today: Date substituted into the modular prompt.
    """
    if override and override.strip():
        return override.strip()
    return build_system_prompt(today=today)


__all__ = [
    "PROMPT_SECTION_ORDER",
    "build_system_prompt",
    "get_system_prompt",
]
