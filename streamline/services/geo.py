"""
Great-circle distance and geofence crossing detection.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Mapping, Protocol

from streamline.core.constants import GEOFENCE_ENTER, GEOFENCE_EXIT

EARTH_RADIUS_METERS = 6_371_000


class Circle(Protocol):
    id: int
    center_latitude: float
    center_longitude: float
    radius_meters: float


@dataclass(frozen=True)
class Crossing:
    geofence_id: int
    event_type: str
    distance_from_center: float


def haversine_meters(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Distance in metres between two WGS84 points."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_METERS * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def distance_to_center(latitude: float, longitude: float, fence: Circle) -> float:
    return haversine_meters(latitude, longitude, fence.center_latitude, fence.center_longitude)


def detect_crossings(
    latitude: float,
    longitude: float,
    fences: Iterable[Circle],
    inside_before: Mapping[int, bool],
) -> list[Crossing]:
    """Compare the new position against each fence's previous inside/outside state.

    A fence with no prior state counts as "outside", so the first ping inside
    a fence yields an ``enter`` and a first ping outside yields nothing.
    """
    crossings = []
    for fence in fences:
        distance = distance_to_center(latitude, longitude, fence)
        inside_now = distance <= fence.radius_meters
        was_inside = inside_before.get(fence.id, False)
        if inside_now and not was_inside:
            crossings.append(Crossing(fence.id, GEOFENCE_ENTER, round(distance, 2)))
        elif was_inside and not inside_now:
            crossings.append(Crossing(fence.id, GEOFENCE_EXIT, round(distance, 2)))
    return crossings
