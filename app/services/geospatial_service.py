from geopy.distance import great_circle
import math
from typing import Tuple

from app.services.reference_data import TRAVEL_SPEEDS_KMH, DEFAULT_TRAVEL_SPEED_KMH


EARTH_RADIUS_KM = 6371


class GeospatialService:
    """Distance and travel-time helpers. Pure: no geocoding, no network."""

    def calculate_distance(self, loc1: Tuple[float, float], loc2: Tuple[float, float]) -> float:
        """
        Calculate great-circle distance (in km) between two (lat, lon) tuples,
        on a sphere of radius 6371 km.
        """
        return great_circle(loc1, loc2, radius=EARTH_RADIUS_KM).km

    def estimate_travel_time(self, distance_km: float, mobility) -> int:
        """
        Estimated travel time in whole minutes (rounded half up).
        Unknown mobility modes travel at public-transport speed.
        """
        mode = getattr(mobility, "value", mobility)
        speed = TRAVEL_SPEEDS_KMH.get(mode, DEFAULT_TRAVEL_SPEED_KMH)
        return int(math.floor(distance_km / speed * 60 + 0.5))
