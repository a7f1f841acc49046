from __future__ import annotations

import re
from datetime import date
from typing import Dict


FEATURE_DISPLAY_NAMES: Dict[str, str] = {
    "chat_panel_ask_mode": "Chat - Ask Mode",
    "chat_panel_agent_mode": "Chat - Agent Mode",
    "chat_panel_edit_mode": "Chat - Edit Mode",
    "code_completion": "Code Completion",
    "inline_chat": "Inline Chat",
}

IDE_DISPLAY_NAMES: Dict[str, str] = {
    "vscode": "VS Code",
    "intellij": "IntelliJ IDEA",
    "neovim": "Neovim",
    "vim": "Vim",
    "jetbrains": "JetBrains",
}

MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

WORD_START_PATTERN = re.compile(r"\b\w")


def capitalize_first(value: str) -> str:
    """Upper-case the first character only, leaving the rest untouched."""
    return value[:1].upper() + value[1:]


def format_feature_name(feature: str) -> str:
    known = FEATURE_DISPLAY_NAMES.get(feature)
    if known:
        return known
    spaced = feature.replace("_", " ")
    return WORD_START_PATTERN.sub(lambda match: match.group(0).upper(), spaced)


def format_ide_name(ide: str) -> str:
    return IDE_DISPLAY_NAMES.get(ide) or capitalize_first(ide)


def format_language_name(language: str) -> str:
    return capitalize_first(language)


def round_half_up(numerator: int, denominator: int) -> int:
    """Integer division rounded half away from zero for non-negative inputs."""
    return (2 * numerator + denominator) // (2 * denominator)


def acceptance_rate(accepted: int, generated: int) -> int:
    """Accepted over generated as a whole percentage, 0 when nothing was generated."""
    if generated <= 0:
        return 0
    return round_half_up(accepted * 100, generated)


def format_day(day: str) -> str:
    """Short axis label for an ISO day, e.g. ``2024-01-05`` -> ``05 Jan``."""
    try:
        parsed = date.fromisoformat(day)
    except (TypeError, ValueError):
        return day
    return f"{parsed.day:02d} {MONTH_ABBREVIATIONS[parsed.month - 1]}"
