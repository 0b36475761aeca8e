"""Toronto neighbourhood safety scores.

TPS publishes incidents, not aggregates: every refresh pages through all
Major Crime Indicator records since TORONTO_MIN_OCC_YEAR and spatially joins
them onto the neighbourhood polygons. It's the most expensive refresh of the
three cities and runs at most once per TTL window.
"""

import logging
import time
from pathlib import Path

from areas import annotate, build_areas, empty_collection, load_feature_collection, locate, score_area
from cache import SnapshotCache
from config import TORONTO_AREAS_PATH, TORONTO_CACHE_TTL
from data_fetchers import fetch_toronto_crime_points
from geometry import count_points_by_area
from models import ScoreResult

logger = logging.getLogger("stayscore.toronto")


def _neighbourhood_name(props: dict) -> str:
    return props.get("name") or props.get("NAME") or props.get("NEIGHBOURHOOD") or props.get("AREA_NAME") or "Unknown"


class TorontoSafety:
    city_code = "toronto"
    display_name = "Toronto"
    fallback_score = 70
    fallback_grade = "B"

    def __init__(self, path: Path = TORONTO_AREAS_PATH, ttl: float = TORONTO_CACHE_TTL, timer=time.time):
        collection = load_feature_collection(path, self.display_name)
        self.areas = build_areas(collection, self.display_name, _neighbourhood_name, _neighbourhood_name)
        self.cache = SnapshotCache(self.display_name, ttl, timer)

    def _zeroed(self) -> dict[str, int]:
        return {a.name: 0 for a in self.areas}

    async def _compute_crime_stats(self) -> dict[str, int]:
        points = await fetch_toronto_crime_points()
        lats = [p[0] for p in points]
        lngs = [p[1] for p in points]
        shaped = [a for a in self.areas if a.geometry is not None]
        counts = count_points_by_area([a.geometry for a in shaped], lats, lngs)

        stats = self._zeroed()
        for area, count in zip(shaped, counts):
            stats[area.name] += count
        logger.info(f"[Toronto] Crime counts computed from {len(points)} TPS incidents")
        return stats

    async def crime_stats(self) -> dict[str, int]:
        return await self.cache.get(self._compute_crime_stats, self._zeroed)

    def _default(self) -> ScoreResult:
        return ScoreResult(
            score=self.fallback_score,
            grade=self.fallback_grade,
            city=self.display_name,
            areaName=None,
        )

    async def get_area_features(self) -> dict:
        try:
            stats = await self.crime_stats()
            features = [annotate(a, self.display_name, stats.get(a.name, 0)) for a in self.areas]
            return {"type": "FeatureCollection", "features": features}
        except Exception as e:
            logger.error(f"[Toronto] getAreaFeatures error: {e}")
            return empty_collection()

    async def get_point_score(self, lat: float, lng: float) -> ScoreResult:
        # Toronto answers its default rather than erroring on internal failures
        try:
            area = locate(self.areas, lat, lng)
            if area is None:
                return self._default()

            stats = await self.crime_stats()
            return score_area(area, self.display_name, stats.get(area.name, 0))
        except Exception as e:
            logger.error(f"[Toronto] getPointScore error: {e}")
            return self._default()
