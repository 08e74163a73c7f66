"""Stepping through named meshes in sorted order."""

from __future__ import annotations

from typing import Iterable


def _sorted_names(names: Iterable[str]) -> list[str]:
    return sorted(set(names))


def select_prev_mesh(names: Iterable[str], current: str) -> str:
    """Name before ``current``; the first name if ``current`` is first or unknown.

    Returns an empty string when there are no names.
    """
    ordered = _sorted_names(names)
    if not ordered:
        return ""
    if current in ordered:
        return ordered[max(ordered.index(current) - 1, 0)]
    return ordered[0]


def select_next_mesh(names: Iterable[str], current: str) -> str:
    """Name after ``current``; the last name if ``current`` is last or unknown.

    Returns an empty string when there are no names.
    """
    ordered = _sorted_names(names)
    if not ordered:
        return ""
    if current in ordered:
        return ordered[min(ordered.index(current) + 1, len(ordered) - 1)]
    return ordered[-1]