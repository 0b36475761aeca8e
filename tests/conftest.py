"""Shared fixtures for the Stay Score test suite.

Writes small boundary files for the three cities into a temp data dir and
points STAYSCORE_DATA_DIR at it before config is imported, so the default
registry built by routes.py loads them instead of the real datasets.
"""

import atexit
import json
import os
import shutil
import tempfile
from pathlib import Path

import pytest


def square_feature(min_lng, min_lat, max_lng, max_lat, **props):
    ring = [
        [min_lng, min_lat],
        [max_lng, min_lat],
        [max_lng, max_lat],
        [min_lng, max_lat],
        [min_lng, min_lat],
    ]
    return {
        "type": "Feature",
        "properties": props,
        "geometry": {"type": "Polygon", "coordinates": [ring]},
    }


def _collection(*features):
    return {"type": "FeatureCollection", "features": list(features)}


CHICAGO_FC = _collection(
    square_feature(-87.68, 42.00, -87.66, 42.02, community="ROGERS PARK", area_numbe="1"),
    square_feature(-87.70, 42.00, -87.68, 42.02, community="WEST RIDGE", area_numbe="2"),
)
LONDON_FC = _collection(
    square_feature(-0.16, 51.53, -0.12, 51.56, name="Camden"),
    square_feature(-0.16, 51.49, -0.12, 51.53, LAD13NM="Westminster"),
)
TORONTO_FC = _collection(
    square_feature(-79.41, 43.66, -79.39, 43.68, AREA_NAME="Annex"),
    square_feature(-79.39, 43.66, -79.38, 43.68, AREA_NAME="Yorkville"),
)

_data_dir = Path(tempfile.mkdtemp(prefix="stayscore-data-"))
atexit.register(lambda: shutil.rmtree(_data_dir, ignore_errors=True))

for rel, fc in (
    ("chicago/community_areas.geojson", CHICAGO_FC),
    ("uk/london_boroughs.geojson", LONDON_FC),
    ("canada/toronto_neighbourhoods.geojson", TORONTO_FC),
):
    target = _data_dir / rel
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(fc))

os.environ["STAYSCORE_DATA_DIR"] = str(_data_dir)
os.environ.pop("CHICAGO_APP_TOKEN", None)
os.environ.pop("SOCRATA_APP_TOKEN", None)


class FakeClock:
    """Manually advanced timer for TTL tests."""

    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def square():
    return square_feature


@pytest.fixture()
def data_dir() -> Path:
    return _data_dir


@pytest.fixture()
def write_geojson(tmp_path):
    """Write a GeoJSON object to a temp file and return its path."""
    def _write(obj, name="areas.geojson"):
        path = tmp_path / name
        path.write_text(json.dumps(obj))
        return path
    return _write
