"""Stay Score Backend — Administrative-area polygons shared by the city adapters

Loading a city's boundary file, resolving a point to its area, and turning
(area, crime count) into map properties or a point score. Each adapter keeps
its own fetch strategy; only this bookkeeping is shared.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional

from shapely.geometry.base import BaseGeometry

from geometry import to_shape, compute_area_km2, point_in_polygon, find_overlaps
from models import ScoreDiagnostics, ScoreResult
from scoring import crime_density, density_to_safety_score, safety_score_100, score_to_grade

logger = logging.getLogger("stayscore.areas")


@dataclass(frozen=True)
class AreaPolygon:
    area_id: Optional[str]
    name: str
    feature: dict
    # None when the boundary could not be parsed; such an area never matches a point
    geometry: Optional[BaseGeometry]
    area_km2: float


def empty_collection() -> dict:
    return {"type": "FeatureCollection", "features": []}


def load_feature_collection(path: Path, label: str) -> dict:
    """Read a GeoJSON file. A lone Feature is wrapped; anything unreadable
    yields an empty collection."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            parsed = json.load(f)
    except FileNotFoundError:
        logger.warning(f"[{label}] boundary file not found: {path}")
        return empty_collection()
    except Exception as e:
        logger.error(f"[{label}] Failed to load geojson: {e}")
        return empty_collection()

    kind = parsed.get("type") if isinstance(parsed, dict) else None
    if kind == "FeatureCollection":
        fc = {"type": "FeatureCollection", "features": list(parsed.get("features") or [])}
    elif kind == "Feature":
        fc = {"type": "FeatureCollection", "features": [parsed]}
    else:
        logger.warning(f"[{label}] Unknown GeoJSON type: {kind}")
        return empty_collection()

    logger.info(f"[{label}] boundaries loaded: {len(fc['features'])} features")
    return fc


def build_areas(
    collection: dict,
    label: str,
    get_id: Callable[[dict], Optional[str]],
    get_name: Callable[[dict], str],
) -> list[AreaPolygon]:
    """Parse every feature once, keeping load order.

    A feature whose geometry can't be parsed is kept with no geometry and the
    fallback area, so it still renders on the map but never matches a point.
    Overlapping areas are kept but logged: point lookups resolve to the
    earlier one.
    """
    areas = []
    for idx, feature in enumerate(collection.get("features", [])):
        props = feature.get("properties") or {}
        try:
            geom = to_shape(feature)
        except Exception as e:
            logger.warning(f"[{label}] feature #{idx} has bad geometry, kept without a shape: {e}")
            geom = None
        area_id = get_id(props)
        areas.append(AreaPolygon(
            area_id=str(area_id) if area_id is not None else None,
            name=get_name(props),
            feature=feature,
            geometry=geom,
            area_km2=compute_area_km2(geom if geom is not None else feature),
        ))

    shaped = [a for a in areas if a.geometry is not None]
    overlaps = find_overlaps([a.geometry for a in shaped])
    if overlaps:
        sample = ", ".join(f"{shaped[i].name}/{shaped[j].name}" for i, j in overlaps[:5])
        logger.warning(
            f"[{label}] {len(overlaps)} overlapping area pairs (e.g. {sample}); "
            "points in an overlap resolve to the first-loaded area"
        )
    return areas


def locate(areas: list[AreaPolygon], lat: float, lng: float) -> Optional[AreaPolygon]:
    """First area, in load order, containing the point."""
    for area in areas:
        if area.geometry is not None and point_in_polygon(lat, lng, area.geometry):
            return area
    return None


def annotate(area: AreaPolygon, city: str, crime_count: int, **extra: Any) -> dict:
    """Copy of the area's feature with the safety properties attached."""
    density = crime_density(crime_count, area.area_km2)
    return {
        **area.feature,
        "properties": {
            **(area.feature.get("properties") or {}),
            "city": city,
            "area_name": area.name,
            **extra,
            "area_km2": area.area_km2,
            "crime_count": crime_count,
            "crime_density_per_km2": density,
            "safety_score": density_to_safety_score(density),
        },
    }


def score_area(
    area: AreaPolygon, city: str, crime_count: int, community_area: Optional[str] = None
) -> ScoreResult:
    density = crime_density(crime_count, area.area_km2)
    score10 = density_to_safety_score(density)
    score100 = safety_score_100(score10)
    return ScoreResult(
        score=score100,
        grade=score_to_grade(score100),
        city=city,
        areaName=area.name,
        raw=ScoreDiagnostics(
            areaKm2=area.area_km2,
            crimeCount=crime_count,
            crimeDensityPerKm2=density,
            safetyScore10=score10,
            communityArea=community_area,
        ),
    )
