"""
Geofence checks for attendance.

A check-in zone is a circle: a center (latitude, longitude in degrees) and
a radius in meters. Distances use the Haversine great-circle formula on a
spherical Earth of radius 6,371 km. A point on the circle counts as inside.

Zones may be CheckinZone rows or plain dicts with the same keys
(name, latitude, longitude, radius, is_active).
"""
import math
from collections import namedtuple

from hrflow.errors import GeofenceError

EARTH_RADIUS_METERS = 6371000


GeofenceResult = namedtuple('GeofenceResult', ['in_zone', 'zone', 'distance', 'nearest_zone'])


def _zone_value(zone, key, default=None):
    if isinstance(zone, dict):
        return zone.get(key, default)
    return getattr(zone, key, default)


def zone_name(zone):
    if zone is None:
        return None
    return _zone_value(zone, 'name')


def zone_is_active(zone):
    # Rows created without the flag default to active
    return _zone_value(zone, 'is_active', True) is not False


def validate_coordinates(latitude, longitude):
    """Return (latitude, longitude) as floats or raise GeofenceError."""
    try:
        lat = float(latitude)
        lon = float(longitude)
    except (TypeError, ValueError):
        raise GeofenceError('Latitude and longitude must be numbers')

    if math.isnan(lat) or math.isnan(lon):
        raise GeofenceError('Latitude and longitude must be numbers')
    if not -90 <= lat <= 90:
        raise GeofenceError(f'Latitude {lat} is out of range [-90, 90]')
    if not -180 <= lon <= 180:
        raise GeofenceError(f'Longitude {lon} is out of range [-180, 180]')
    return lat, lon


def haversine_distance(lat1, lon1, lat2, lon2):
    """Great-circle distance in meters between two points given in degrees."""
    phi1 = math.radians(float(lat1))
    phi2 = math.radians(float(lat2))
    delta_phi = math.radians(float(lat2) - float(lat1))
    delta_lambda = math.radians(float(lon2) - float(lon1))

    a = (math.sin(delta_phi / 2) ** 2 +
         math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2)
    # Rounding can push a just past 1 for antipodal points
    a = min(1.0, max(0.0, a))
    return 2 * EARTH_RADIUS_METERS * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def equirectangular_distance(lat1, lon1, lat2, lon2):
    """Flat-earth approximation of the distance in meters, good for short hops."""
    phi1 = math.radians(float(lat1))
    phi2 = math.radians(float(lat2))
    x = math.radians(float(lon2) - float(lon1)) * math.cos((phi1 + phi2) / 2)
    y = phi2 - phi1
    return EARTH_RADIUS_METERS * math.sqrt(x * x + y * y)


def distance_to_zone(latitude, longitude, zone):
    return haversine_distance(
        latitude, longitude,
        _zone_value(zone, 'latitude'), _zone_value(zone, 'longitude'),
    )


def is_location_in_zone(latitude, longitude, zone):
    return distance_to_zone(latitude, longitude, zone) <= float(_zone_value(zone, 'radius'))


def check_zones(latitude, longitude, zones):
    """
    Find the zone a device location falls in.

    Only active zones are considered. When several zones contain the point
    the first one in ``zones`` order wins. ``distance`` is measured to the
    matched zone, or to the nearest active zone when there is no match, or
    is None when there are no active zones.
    """
    lat, lon = validate_coordinates(latitude, longitude)

    measured = [(zone, distance_to_zone(lat, lon, zone)) for zone in zones if zone_is_active(zone)]
    if not measured:
        return GeofenceResult(False, None, None, None)

    nearest_zone, nearest_distance = min(measured, key=lambda item: item[1])
    for zone, distance in measured:
        if distance <= float(_zone_value(zone, 'radius')):
            return GeofenceResult(True, zone, distance, nearest_zone)

    return GeofenceResult(False, None, nearest_distance, nearest_zone)


def result_to_dict(result):
    return {
        'in_zone': result.in_zone,
        'zone': zone_name(result.zone),
        'distance': round(result.distance, 1) if result.distance is not None else None,
        'nearest_zone': zone_name(result.nearest_zone),
    }


def format_location(latitude, longitude):
    return f'{float(latitude):.6f}, {float(longitude):.6f}'
