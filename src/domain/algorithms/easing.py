from __future__ import annotations


def ease_out_cubic(t: float) -> float:
    """Ease-out cubic curve: fast start, gentle landing. `t` is clamped to [0, 1]."""

    t = max(0.0, min(1.0, float(t)))
    return 1.0 - (1.0 - t) ** 3


def lerp(a: float, b: float, fraction: float) -> float:
    return a + (b - a) * fraction
