from __future__ import annotations

import json
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from src.domain.models import DisplayedMarker, RenderFrame, TrailSegment


def _marker_feature(marker: DisplayedMarker) -> dict[str, Any]:
    v = marker.vehicle
    return {
        "type": "Feature",
        "id": marker.vehicle_id,
        "geometry": {
            "type": "Point",
            "coordinates": list(marker.position.as_lonlat()),
        },
        "properties": {
            "kind": "marker",
            "vehicleId": marker.vehicle_id,
            "rotation": marker.heading_degrees or 0.0,
            "animating": marker.animating,
            "callsign": v.callsign or "Unknown Callsign",
            "aircraftType": v.aircraft_type,
            "registration": v.registration,
            "altitude": v.altitude,
            "speed": v.speed,
            "heading": v.heading_degrees,
            "origin": v.origin,
            "destination": v.destination,
        },
    }


def _segment_feature(segment: TrailSegment) -> dict[str, Any]:
    return {
        "type": "Feature",
        "geometry": {
            "type": "LineString",
            "coordinates": [
                list(segment.start.as_lonlat()),
                list(segment.end.as_lonlat()),
            ],
        },
        "properties": {
            "kind": "trail-glow" if segment.glow else "trail",
            "vehicleId": segment.vehicle_id,
            "opacity": round(segment.opacity, 4),
            "weight": round(segment.weight, 4),
        },
    }


def frame_to_geojson(frame: RenderFrame) -> dict[str, Any]:
    # Trails first so markers draw on top.
    features = [_segment_feature(s) for s in frame.segments]
    features.extend(_marker_feature(m) for m in frame.markers)
    return {"type": "FeatureCollection", "features": features}


@dataclass(slots=True)
class GeoJsonFramePainter:
    """Writes each frame as a GeoJSON FeatureCollection for a Leaflet page.

    The file is replaced atomically so a reader never sees a partial frame.
    """

    path: str | Path

    def __call__(self, frame: RenderFrame) -> None:
        target = Path(self.path)
        target.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(frame_to_geojson(frame), separators=(",", ":"))

        fd, tmp = tempfile.mkstemp(dir=target.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fp:
                fp.write(payload)
            os.replace(tmp, target)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise
