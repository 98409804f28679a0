"""Geospatial helper functions."""

from __future__ import annotations

import math

from ..errors import InvalidInputError
from ..models.domain import BoundingBox, Coordinate

EARTH_RADIUS_KM = 6371.0

_FULL_LONGITUDE = (-180.0, 180.0)

# Angular padding added to every box. distance_km cannot resolve separations below
# roughly 1e-6 degrees (acos near 1), so such points may report 0.0 km; the box
# must still contain them.
BOX_MARGIN_DEGREES = 1e-5


def distance_km(a: Coordinate, b: Coordinate, *, earth_radius_km: float = EARTH_RADIUS_KM) -> float:
    """Great-circle distance between two coordinates using the spherical law of cosines."""

    if a == b:
        return 0.0

    phi1, phi2 = math.radians(a.latitude), math.radians(b.latitude)
    d_lambda = math.radians(abs(b.longitude - a.longitude))

    cosine = math.cos(phi1) * math.cos(phi2) * math.cos(d_lambda) + math.sin(phi1) * math.sin(phi2)
    # Rounding can push the cosine just outside [-1, 1] for near-identical or antipodal points.
    cosine = max(-1.0, min(1.0, cosine))
    return earth_radius_km * math.acos(cosine)


def bounding_box(
    center: Coordinate,
    radius_km: float,
    *,
    earth_radius_km: float = EARTH_RADIUS_KM,
) -> BoundingBox:
    """Return a lat/lng rectangle that contains every point within ``radius_km`` of ``center``.

    The box is always a superset of the search disk. Near the poles and across the
    antimeridian the longitude range widens to the full [-180, 180] span instead of
    producing infinite or wrapped bounds.
    """

    if math.isnan(radius_km) or radius_km < 0:
        raise InvalidInputError(f"Radius must be a non-negative number: {radius_km}")

    angular = radius_km / earth_radius_km
    delta_lat = math.degrees(angular) + BOX_MARGIN_DEGREES
    min_lat = max(-90.0, center.latitude - delta_lat)
    max_lat = min(90.0, center.latitude + delta_lat)

    if center.latitude + delta_lat >= 90.0 or center.latitude - delta_lat <= -90.0:
        # The disk reaches a pole, so it spans every meridian.
        return BoundingBox(min_lat, max_lat, *_FULL_LONGITUDE)

    delta_lng = _longitude_delta(center.latitude, angular)
    if delta_lng is None or delta_lng >= 180.0:
        return BoundingBox(min_lat, max_lat, *_FULL_LONGITUDE)

    min_lng = center.longitude - delta_lng
    max_lng = center.longitude + delta_lng
    if min_lng < -180.0 or max_lng > 180.0:
        # A single BETWEEN range cannot express a box that wraps the antimeridian.
        return BoundingBox(min_lat, max_lat, *_FULL_LONGITUDE)

    return BoundingBox(min_lat, max_lat, min_lng, max_lng)


def _longitude_delta(latitude: float, angular: float) -> float | None:
    """Half-width in degrees of the longitude range, or None when it is unbounded."""

    cos_lat = math.cos(math.radians(latitude))
    if cos_lat <= 0.0:
        return None

    ratio = angular / cos_lat
    margin = BOX_MARGIN_DEGREES / cos_lat
    if not math.isfinite(ratio) or not math.isfinite(margin):
        return None

    # The plain ratio understates the true extent at high latitudes for large radii;
    # the exact tangent-meridian extent is asin(sin(d) / cos(lat)).
    sine = math.sin(angular) / cos_lat
    exact = math.asin(sine) if sine < 1.0 else math.pi
    return math.degrees(max(ratio, exact)) + margin
