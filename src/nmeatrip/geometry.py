#!/usr/bin/env python3
"""
Great-circle distance utilities for trip estimation.
"""

from typing import NamedTuple
import math

# Mean Earth radius in kilometers
EARTH_RADIUS_KM = 6371.0


class Position(NamedTuple):
    """Represents a geographic position with latitude and longitude in degrees."""

    latitude: float
    longitude: float


def haversine_distance(pos1: Position, pos2: Position) -> float:
    """
    Calculate the haversine distance between two positions.

    Args:
        pos1: First position
        pos2: Second position

    Returns:
        Distance in kilometers
    """
    lat1, lon1 = math.radians(pos1.latitude), math.radians(pos1.longitude)
    lat2, lon2 = math.radians(pos2.latitude), math.radians(pos2.longitude)

    dlat = lat2 - lat1
    dlon = lon2 - lon1
    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    )
    # Rounding can push a just past 1 for near-antipodal points
    a = min(a, 1.0)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c
