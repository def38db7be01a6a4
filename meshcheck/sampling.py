"""Small helpers for checking traffic distributions in tests."""

from __future__ import annotations

__all__ = ["is_within_percentage", "generate_strings"]


def is_within_percentage(count: int, total: int, rate: float, tolerance: float) -> bool:
    """Whether ``count`` out of ``total`` lies within ``rate`` +/- ``tolerance``.

    The bounds are truncated towards zero to whole counts.
    """
    minimum = int((rate - tolerance) * total)
    maximum = int((rate + tolerance) * total)
    return minimum <= count <= maximum


def generate_strings(prefix: str, count: int) -> list[str]:
    """Return ``count`` strings made of ``prefix`` followed by 0, 1, 2, ..."""
    if count < 0:
        raise ValueError(f"count must not be negative: {count}")
    return [f"{prefix}{i}" for i in range(count)]