"""Utility functions for the Tradfri bridge CLI.

This module contains helper functions used across the commands:
- similarity_score: Fuzzy name matching for typo suggestions
- find_similar_strings: Rank candidate names by similarity
- find_bulb: Resolve a bulb display name against the bulb table
- mireds_to_kelvin: Convert colour temperature units for display
- format_status: One-line summary of a bulb's hub state
"""

from difflib import SequenceMatcher
from typing import Iterable, Mapping

from models.translator import describe_color
from models.types import HubStatusResponse


def similarity_score(s1: str, s2: str) -> int:
    """Score how closely two names match, ignoring case.

    Exact matches score 100, prefixes 80 and substrings 60. Anything else is
    scored by difflib's matching-block ratio, scaled to 0-50, with weak
    matches (20 or less) dropped to 0.
    """
    a, b = s1.lower(), s2.lower()
    if a == b:
        return 100
    if a.startswith(b) or b.startswith(a):
        return 80
    if a in b or b in a:
        return 60
    score = int(SequenceMatcher(None, a, b).ratio() * 50)
    return score if score > 20 else 0


def find_similar_strings(target: str, candidates: Iterable[str], limit: int = 5) -> list[str]:
    """Return candidates resembling target, best match first."""
    scored = ((similarity_score(target, c), c) for c in candidates)
    ranked = sorted((pair for pair in scored if pair[0] > 0), key=lambda pair: pair[0], reverse=True)
    return [c for _, c in ranked[:limit]]


def find_bulb(bulbs: Mapping[str, str], name: str) -> tuple[str, str] | None:
    """Look up a bulb by display name (case-insensitive).

    Returns:
        (display name, hub id) tuple, or None if no bulb matches exactly
    """
    for display_name, bulb_id in bulbs.items():
        if display_name.lower() == name.lower():
            return display_name, bulb_id
    return None


def mireds_to_kelvin(mireds: int) -> int:
    """Convert mireds to kelvin (rounded)."""
    if mireds <= 0:
        return 0
    return round(1_000_000 / mireds)


def format_status(status: HubStatusResponse) -> str:
    """Summarise a bulb's hub state on one line."""
    control = status.control
    power = 'ON' if control.on else 'OFF'
    colour = describe_color(control.color)
    colour_text = f"{colour} ({control.color})" if colour else (control.color or 'unknown')
    return f"{status.name or 'Unnamed'}: {power}, brightness {control.brightness}, colour {colour_text}"
