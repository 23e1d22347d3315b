from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Callable, Iterable, Mapping

from src.domain.algorithms.geo_utils import moved_beyond
from src.domain.algorithms.trail_style import build_segments, prune_trail
from src.domain.models import (
    DisplayedMarker,
    MarkerAnimation,
    RenderFrame,
    Trail,
    TrailPoint,
    TrailSegment,
    VehiclePosition,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SnapshotUpdate:
    added: tuple[str, ...] = ()
    updated: tuple[str, ...] = ()
    removed: tuple[str, ...] = ()
    retained: tuple[str, ...] = ()
    animating: bool = False


@dataclass(slots=True)
class MotionRenderer:
    """Turns sparse position snapshots into smooth marker motion and trails.

    Per vehicle id the state is either absent or tracked:
      - first sighting: marker placed at the reported position, empty trail;
      - later sightings: trail grows when the vehicle really moved, and the
        marker eases from where it is drawn now toward the new position;
      - missing from a snapshot: marker and trail are dropped at once.

    `apply_snapshot` is the poll-driven update pass; `advance` is the
    per-frame callback. Both run on the same event loop and never overlap.
    """

    max_trail_points: int = 8
    max_trail_age_s: float = 300.0
    animation_duration_s: float = 1.5
    min_trail_movement_m: float = 10.0
    movement_epsilon_deg: float = 1e-6
    clock: Callable[[], float] = time.monotonic

    _markers: dict[str, DisplayedMarker] = field(
        default_factory=dict, init=False, repr=False
    )
    _trails: dict[str, Trail] = field(default_factory=dict, init=False, repr=False)

    @property
    def markers(self) -> Mapping[str, DisplayedMarker]:
        return MappingProxyType(self._markers)

    @property
    def trails(self) -> Mapping[str, Trail]:
        return MappingProxyType(self._trails)

    @property
    def tracked_ids(self) -> frozenset[str]:
        return frozenset(self._markers)

    def apply_snapshot(
        self,
        positions: Iterable[VehiclePosition],
        *,
        now: float | None = None,
        retained_ids: Iterable[str] = (),
    ) -> SnapshotUpdate:
        """Run one update pass against a freshly polled snapshot.

        `retained_ids` names vehicles whose record was malformed this cycle;
        tracked ones keep their marker and trail untouched.
        """

        now = self.clock() if now is None else now

        incoming: dict[str, VehiclePosition] = {}
        for p in positions:
            incoming[p.id] = p

        retained = tuple(
            vid for vid in dict.fromkeys(retained_ids)
            if vid in self._markers and vid not in incoming
        )
        removed = tuple(
            vid for vid in self._markers if vid not in incoming and vid not in retained
        )
        for vid in removed:
            del self._markers[vid]
            self._trails.pop(vid, None)

        added: list[str] = []
        updated: list[str] = []
        for vid, position in incoming.items():
            marker = self._markers.get(vid)
            if marker is None:
                self._track(position)
                added.append(vid)
            else:
                self._update(marker, position, now)
                updated.append(vid)

        for trail in self._trails.values():
            prune_trail(
                trail,
                now=now,
                max_points=self.max_trail_points,
                max_age_s=self.max_trail_age_s,
            )

        if added or removed:
            logger.debug(
                "Tracking %d vehicles (+%d, -%d)",
                len(self._markers),
                len(added),
                len(removed),
            )

        return SnapshotUpdate(
            added=tuple(added),
            updated=tuple(updated),
            removed=removed,
            retained=retained,
            animating=any(m.animating for m in self._markers.values()),
        )

    def _track(self, position: VehiclePosition) -> None:
        point = position.point
        self._markers[position.id] = DisplayedMarker(
            vehicle_id=position.id,
            position=point,
            target=point,
            vehicle=position,
            heading_degrees=position.heading_degrees,
        )
        self._trails[position.id] = Trail()

    def _update(
        self, marker: DisplayedMarker, position: VehiclePosition, now: float
    ) -> None:
        target = position.point
        trail = self._trails.setdefault(marker.vehicle_id, Trail())

        last = trail.last
        reference = last.position if last is not None else marker.target
        if moved_beyond(reference, target, self.min_trail_movement_m):
            trail.points.append(TrailPoint(position=target, captured_at=now))

        # Start from wherever the marker is drawn right now.
        current = (
            marker.animation.position_at(now)
            if marker.animation is not None
            else marker.position
        )
        marker.position = current
        marker.target = target
        marker.vehicle = position
        if position.heading_degrees is not None:
            marker.heading_degrees = position.heading_degrees

        if current.displacement_deg(target) > self.movement_epsilon_deg:
            marker.animation = MarkerAnimation(
                start=current,
                target=target,
                started_at=now,
                duration_s=self.animation_duration_s,
            )
        else:
            marker.animation = None
            marker.position = target

    def advance(self, now: float | None = None) -> bool:
        """Move animated markers to their eased position at `now`.

        Returns True while any animation is still running.
        """

        now = self.clock() if now is None else now
        running = False
        for marker in self._markers.values():
            animation = marker.animation
            if animation is None:
                continue
            marker.position = animation.position_at(now)
            if animation.done(now):
                marker.animation = None
            else:
                running = True
        return running

    def render(self, now: float | None = None) -> RenderFrame:
        now = self.clock() if now is None else now
        segments: list[TrailSegment] = []
        for vid, trail in self._trails.items():
            segments.extend(
                build_segments(vid, trail, now=now, max_age_s=self.max_trail_age_s)
            )
        return RenderFrame(
            markers=tuple(replace(m) for m in self._markers.values()),
            segments=tuple(segments),
            rendered_at=now,
        )

    def forget(self) -> None:
        self._markers.clear()
        self._trails.clear()
