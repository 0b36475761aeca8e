"""Tests for safety_service.py: registry lookup and per-operation failure policy."""

import asyncio

import pytest

from cache import SnapshotCache
from models import ScoreResult
from safety_service import SafetyService, build_default_service


class StubCity:
    def __init__(self, code="springfield", name="Springfield", fail=False):
        self.city_code = code
        self.display_name = name
        self.fail = fail
        self.point_calls = []
        self.areas = []
        self.cache = SnapshotCache(name, ttl=60)

    async def get_area_features(self):
        if self.fail:
            raise RuntimeError("areas exploded")
        return {"type": "FeatureCollection", "features": [{"type": "Feature", "properties": {}}]}

    async def get_point_score(self, lat, lng):
        self.point_calls.append((lat, lng))
        if self.fail:
            raise RuntimeError("point exploded")
        return ScoreResult(score=90, grade="A", city=self.display_name, areaName="Downtown")


class TestResolve:
    def test_case_insensitive(self):
        city = StubCity()
        service = SafetyService([city])
        assert service.resolve("springfield") is city
        assert service.resolve("SpringField") is city
        assert service.resolve(" SPRINGFIELD ") is city

    @pytest.mark.parametrize("key", [None, "", "shelbyville"])
    def test_unknown_is_none(self, key):
        assert SafetyService([StubCity()]).resolve(key) is None

    def test_cities_listing(self):
        service = SafetyService([StubCity(), StubCity("ogdenville", "Ogdenville")])
        assert [c.model_dump() for c in service.cities()] == [
            {"cityCode": "springfield", "displayName": "Springfield"},
            {"cityCode": "ogdenville", "displayName": "Ogdenville"},
        ]

    def test_status_reads_cache_without_refreshing(self):
        cold, warm = StubCity(), StubCity("ogdenville", "Ogdenville")
        warm.areas = ["Downtown", "Uptown"]

        async def loader():
            return {"Downtown": 4}

        asyncio.run(warm.cache.get(loader))
        statuses = SafetyService([cold, warm]).status()

        assert statuses[0].model_dump() == {
            "cityCode": "springfield", "areaCount": 0, "statsFresh": False, "statsFetchedAt": None,
        }
        assert (statuses[1].areaCount, statuses[1].statsFresh) == (2, True)
        assert statuses[1].statsFetchedAt == warm.cache.fetched_at
        assert cold.cache.peek() is None


class TestDispatch:
    def test_unsupported_city_is_none_not_an_error(self):
        service = SafetyService([StubCity()])
        assert asyncio.run(service.get_point_score("atlantis", 1.0, 2.0)) is None
        assert asyncio.run(service.get_areas("atlantis")) is None

    def test_point_dispatch(self):
        city = StubCity()
        result = asyncio.run(SafetyService([city]).get_point_score("SPRINGFIELD", 1.5, 2.5))
        assert result.areaName == "Downtown"
        assert city.point_calls == [(1.5, 2.5)]

    def test_area_failure_degrades_to_empty_collection(self):
        service = SafetyService([StubCity(fail=True)])
        assert asyncio.run(service.get_areas("springfield")) == {"type": "FeatureCollection", "features": []}

    def test_point_failure_propagates(self):
        service = SafetyService([StubCity(fail=True)])
        with pytest.raises(RuntimeError, match="point exploded"):
            asyncio.run(service.get_point_score("springfield", 0.0, 0.0))


def test_default_registry_has_three_cities():
    service = build_default_service()
    assert [c.cityCode for c in service.cities()] == ["chicago", "london", "toronto"]
    assert service.resolve("Toronto").display_name == "Toronto"
