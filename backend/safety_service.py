"""Stay Score Backend — City registry and safety dispatch"""

import logging
from typing import Iterable, Optional, Protocol

from areas import AreaPolygon, empty_collection
from cache import SnapshotCache
from city_chicago import ChicagoSafety
from city_london import LondonSafety
from city_toronto import TorontoSafety
from models import CityInfo, CityStatus, ScoreResult

logger = logging.getLogger("stayscore.safety")


class AreaProvider(Protocol):
    """What every city adapter offers. Fetch strategy is the adapter's business."""

    city_code: str
    display_name: str
    areas: list[AreaPolygon]
    cache: SnapshotCache

    async def get_area_features(self) -> dict: ...

    async def get_point_score(self, lat: float, lng: float) -> ScoreResult: ...


class SafetyService:
    """Resolves a city key to its adapter and applies the per-operation failure
    policy: area maps always render (empty on failure), point scores surface
    unexpected failures to the caller."""

    def __init__(self, providers: Iterable[AreaProvider]):
        self._providers: dict[str, AreaProvider] = {p.city_code.lower(): p for p in providers}

    def resolve(self, city_key: Optional[str]) -> Optional[AreaProvider]:
        if not city_key:
            return None
        return self._providers.get(city_key.strip().lower())

    def cities(self) -> list[CityInfo]:
        return [
            CityInfo(cityCode=p.city_code, displayName=p.display_name)
            for p in self._providers.values()
        ]

    def status(self) -> list[CityStatus]:
        """Boundary and crime-stats cache state per city, without refreshing."""
        return [
            CityStatus(
                cityCode=p.city_code,
                areaCount=len(p.areas),
                statsFresh=p.cache.peek() is not None,
                statsFetchedAt=p.cache.fetched_at,
            )
            for p in self._providers.values()
        ]

    async def get_areas(self, city_key: Optional[str]) -> Optional[dict]:
        """FeatureCollection for the city, or None if it isn't supported."""
        provider = self.resolve(city_key)
        if provider is None:
            return None
        try:
            return await provider.get_area_features()
        except Exception as e:
            logger.error(f"[{provider.city_code}] areas error: {e}")
            return empty_collection()

    async def get_point_score(self, city_key: Optional[str], lat: float, lng: float) -> Optional[ScoreResult]:
        """Score for a point, or None if the city isn't supported."""
        provider = self.resolve(city_key)
        if provider is None:
            return None
        return await provider.get_point_score(lat, lng)


def build_default_service() -> SafetyService:
    return SafetyService([ChicagoSafety(), LondonSafety(), TorontoSafety()])
