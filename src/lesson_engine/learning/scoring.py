from __future__ import annotations


def percentage(count: int, total: int) -> int:
    """Return `count / total` as an integer percentage, rounding halves up (0 when total is 0)."""
    if total <= 0:
        return 0
    return (count * 200 + total) // (2 * total)
