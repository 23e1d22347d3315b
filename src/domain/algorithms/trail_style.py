from __future__ import annotations

from src.domain.models.tracking import Trail, TrailSegment

MIN_SEGMENT_OPACITY = 0.15
MAX_SEGMENT_OPACITY = 0.8
GLOW_OPACITY = 0.2
GLOW_EXTRA_WEIGHT = 6.0


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def prune_trail(
    trail: Trail, *, now: float, max_points: int, max_age_s: float
) -> int:
    """Drop points from the oldest end until both bounds hold.

    Returns the number of points removed.
    """

    removed = 0
    points = trail.points
    while points and (
        len(points) > max_points or now - points[0].captured_at > max_age_s
    ):
        points.pop(0)
        removed += 1
    return removed


def segment_opacity(*, age_s: float, rank: float, max_age_s: float) -> float:
    age_factor = _clamp(1.0 - age_s / max_age_s, 0.0, 1.0) if max_age_s > 0 else 0.0
    return _clamp(age_factor * rank, MIN_SEGMENT_OPACITY, MAX_SEGMENT_OPACITY)


def segment_weight(rank: float) -> float:
    return 3.0 + 2.0 * rank


def build_segments(
    vehicle_id: str, trail: Trail, *, now: float, max_age_s: float
) -> list[TrailSegment]:
    """Style each consecutive pair of trail points as its own segment.

    Older and lower-ranked segments fade; the newest one gets a wide glow
    stroke on top.
    """

    points = trail.points
    n = len(points)
    out: list[TrailSegment] = []
    for i in range(n - 1):
        rank = (i + 1) / n
        age_s = max(0.0, now - points[i].captured_at)
        weight = segment_weight(rank)
        out.append(
            TrailSegment(
                vehicle_id=vehicle_id,
                start=points[i].position,
                end=points[i + 1].position,
                opacity=segment_opacity(age_s=age_s, rank=rank, max_age_s=max_age_s),
                weight=weight,
            )
        )

    if out:
        newest = out[-1]
        out.append(
            TrailSegment(
                vehicle_id=vehicle_id,
                start=newest.start,
                end=newest.end,
                opacity=GLOW_OPACITY,
                weight=newest.weight + GLOW_EXTRA_WEIGHT,
                glow=True,
            )
        )
    return out
