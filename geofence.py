import math
from typing import Optional

EARTH_RADIUS_M = 6371e3


def distance_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in meters (Haversine)."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def is_within_geofence(lat: float, lon: float, location: dict) -> bool:
    # locations without coordinates or radius accept any position
    if location.get("latitude") is None or location.get("longitude") is None or not location.get("geofence_radius"):
        return True
    return distance_m(lat, lon, location["latitude"], location["longitude"]) <= location["geofence_radius"]


def geofence_error(lat: Optional[float], lon: Optional[float], location: dict) -> Optional[str]:
    """Human readable refusal, or None when the position is acceptable."""
    if lat is None or lon is None or is_within_geofence(lat, lon, location):
        return None
    distance = round(distance_m(lat, lon, location["latitude"], location["longitude"]))
    return f"You are {distance}m away from {location['name']}. Please move closer to check in."
