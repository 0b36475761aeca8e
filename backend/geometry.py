"""Stay Score Backend — Geometry helpers over GeoJSON boundaries

Coordinates follow GeoJSON order (x=lng, y=lat). Public helpers take
(lat, lng) to match the request parameters.
"""

import logging
from typing import Any, Union

import numpy as np
import shapely
from pyproj import Geod
from shapely.errors import GEOSException
from shapely.geometry import shape
from shapely.geometry.base import BaseGeometry
from shapely.geometry.polygon import orient
from shapely.strtree import STRtree

from config import MIN_AREA_KM2, FALLBACK_AREA_KM2

logger = logging.getLogger("stayscore.geometry")

_GEOD = Geod(ellps="WGS84")

GeoLike = Union[BaseGeometry, dict[str, Any]]


def to_shape(obj: GeoLike) -> BaseGeometry:
    """Build a prepared shapely geometry from a GeoJSON Feature or geometry."""
    if isinstance(obj, BaseGeometry):
        geom = obj
    else:
        if obj.get("type") == "Feature":
            obj = obj.get("geometry") or {}
        geom = shape(obj)
    shapely.prepare(geom)
    return geom


def _polygon_parts(geom: BaseGeometry) -> list:
    if geom.geom_type == "Polygon":
        return [geom]
    if geom.geom_type == "MultiPolygon":
        return list(geom.geoms)
    return []


def compute_area_km2(obj: GeoLike) -> float:
    """Geodesic area in km², never below MIN_AREA_KM2.

    Malformed geometry is logged and scored as FALLBACK_AREA_KM2 so a bad
    boundary can't take down the whole city.
    """
    try:
        geom = to_shape(obj)
        area_m2 = 0.0
        for part in _polygon_parts(geom):
            # exterior CCW / holes CW so pyproj subtracts the holes
            area, _ = _GEOD.geometry_area_perimeter(orient(part, sign=1.0))
            area_m2 += abs(area)
        return max(area_m2 / 1_000_000, MIN_AREA_KM2)
    except Exception as e:
        logger.error(f"Failed to compute area: {e}")
        return FALLBACK_AREA_KM2


def point_in_polygon(lat: float, lng: float, obj: GeoLike) -> bool:
    """True when (lat, lng) lies inside or on the boundary of the polygon.

    Multi-polygons match any part; points inside a hole don't match.
    """
    geom = obj if isinstance(obj, BaseGeometry) else to_shape(obj)
    return bool(shapely.intersects_xy(geom, float(lng), float(lat)))


def centroid(geom: BaseGeometry) -> tuple[float, float]:
    """(lat, lng) of the area-weighted centroid."""
    c = geom.centroid
    return c.y, c.x


def count_points_by_area(geoms: list[BaseGeometry], lats, lngs) -> list[int]:
    """Spatial join: count points per geometry, each point going to the
    first geometry (in list order) that contains it."""
    xs = np.asarray(lngs, dtype=float)
    ys = np.asarray(lats, dtype=float)
    assigned = np.zeros(xs.shape, dtype=bool)
    counts = []
    for geom in geoms:
        if assigned.all():
            counts.append(0)
            continue
        hits = shapely.intersects_xy(geom, xs, ys) & ~assigned
        assigned |= hits
        counts.append(int(hits.sum()))
    return counts


def find_overlaps(geoms: list[BaseGeometry]) -> list[tuple[int, int]]:
    """Index pairs (i < j) whose interiors overlap. Shared edges don't count."""
    if len(geoms) < 2:
        return []
    tree = STRtree(geoms)
    pairs = []
    for i, geom in enumerate(geoms):
        for j in tree.query(geom, predicate="intersects"):
            j = int(j)
            if j <= i:
                continue
            try:
                if geom.intersection(geoms[j]).area > 0:
                    pairs.append((i, j))
            except GEOSException as e:
                logger.warning(f"Overlap check failed for areas {i}/{j}: {e}")
    return pairs
