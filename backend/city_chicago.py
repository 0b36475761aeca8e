"""Chicago community-area safety scores.

Crime counts come pre-aggregated from the city's Socrata portal (one grouped
query per refresh), keyed by community-area number.
"""

import logging
import time
from pathlib import Path
from typing import Optional

from areas import annotate, build_areas, empty_collection, load_feature_collection, locate, score_area
from cache import SnapshotCache
from config import CHICAGO_AREAS_PATH, CHICAGO_CACHE_TTL
from data_fetchers import fetch_chicago_crime_counts
from models import ScoreResult

logger = logging.getLogger("stayscore.chicago")


def _area_number(props: dict) -> Optional[str]:
    for key in ("area_numbe", "area_number", "area_num", "community_area"):
        if props.get(key):
            return str(props[key])
    return None


def _area_name(props: dict) -> str:
    return (
        props.get("community")
        or props.get("community_name")
        or props.get("name")
        or f"Area {_area_number(props) or 'Unknown'}"
    )


class ChicagoSafety:
    city_code = "chicago"
    display_name = "Chicago"
    fallback_score = 60
    fallback_grade = "C"

    def __init__(self, path: Path = CHICAGO_AREAS_PATH, ttl: float = CHICAGO_CACHE_TTL, timer=time.time):
        collection = load_feature_collection(path, self.display_name)
        self.areas = build_areas(collection, self.display_name, _area_number, _area_name)
        self.cache = SnapshotCache(self.display_name, ttl, timer)

    async def crime_stats(self) -> dict[str, int]:
        return await self.cache.get(fetch_chicago_crime_counts)

    def _count(self, stats: dict[str, int], area_id: Optional[str]) -> int:
        if area_id is None:
            return 0
        return stats.get(area_id, 0)

    async def get_area_features(self) -> dict:
        try:
            stats = await self.crime_stats()
            features = [
                annotate(a, self.display_name, self._count(stats, a.area_id), community_area=a.area_id)
                for a in self.areas
            ]
            return {"type": "FeatureCollection", "features": features}
        except Exception as e:
            logger.error(f"[Chicago] getAreaFeatures error: {e}")
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
        return score_area(
            area, self.display_name, self._count(stats, area.area_id), community_area=area.area_id
        )
