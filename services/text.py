"""Helpers for normalising free text coming from clients."""

from typing import Optional


def optional_text(value: Optional[str], max_length: int = 255) -> Optional[str]:
    """Trim ``value``; blank becomes None, long text is cut to ``max_length``"""
    if value is None:
        return None
    trimmed = str(value).strip()
    if not trimmed:
        return None
    return trimmed[:max_length]
