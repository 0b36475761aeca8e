"""London borough safety scores.

police.uk has no per-borough aggregate, so each refresh samples every borough
with one street-crime radius query at its centroid. That is one upstream call
per borough, hence the long TTL.
"""

import logging
import time
from pathlib import Path

from areas import annotate, build_areas, empty_collection, load_feature_collection, locate, score_area
from cache import SnapshotCache
from config import LONDON_AREAS_PATH, LONDON_CACHE_TTL
from data_fetchers import fetch_street_crime_counts
from geometry import centroid
from models import ScoreResult

logger = logging.getLogger("stayscore.london")

_NAME_KEYS = ("area_name", "name", "NAME", "BOROUGH", "borough", "LAD13NM", "LAD16NM")


def _borough_name(props: dict) -> str:
    for key in _NAME_KEYS:
        if props.get(key):
            return props[key]
    return "Unknown"


class LondonSafety:
    city_code = "london"
    display_name = "London"
    fallback_score = 70
    fallback_grade = "B"

    def __init__(self, path: Path = LONDON_AREAS_PATH, ttl: float = LONDON_CACHE_TTL, timer=time.time):
        collection = load_feature_collection(path, self.display_name)
        self.areas = build_areas(collection, self.display_name, _borough_name, _borough_name)
        self.cache = SnapshotCache(self.display_name, ttl, timer)

    async def _fetch_borough_stats(self) -> dict[str, int]:
        # unshaped boroughs aren't sampled and read as zero crimes
        points = {a.name: centroid(a.geometry) for a in self.areas if a.geometry is not None}
        return await fetch_street_crime_counts(points)

    async def crime_stats(self) -> dict[str, int]:
        return await self.cache.get(self._fetch_borough_stats)

    async def get_area_features(self) -> dict:
        try:
            stats = await self.crime_stats()
            features = [annotate(a, self.display_name, stats.get(a.name, 0)) for a in self.areas]
            return {"type": "FeatureCollection", "features": features}
        except Exception as e:
            logger.error(f"[London] getAreaFeatures error: {e}")
            return empty_collection()

    async def get_point_score(self, lat: float, lng: float) -> ScoreResult:
        area = locate(self.areas, lat, lng)
        if area is None:
            return ScoreResult(
                score=self.fallback_score,
                grade=self.fallback_grade,
                city=self.display_name,
                areaName=None,
            )

        stats = await self.crime_stats()
        return score_area(area, self.display_name, stats.get(area.name, 0))
