"""Stay Score Backend — External crime-data fetchers (Socrata, police.uk, ArcGIS)"""

import asyncio
import logging

import httpx

from config import (
    HTTP_TIMEOUT,
    CHICAGO_CRIME_URL, CHICAGO_APP_TOKEN, CHICAGO_CRIME_SINCE,
    POLICE_UK_BASE, LONDON_POLICE_MONTH, LONDON_MAX_CONCURRENCY,
    TORONTO_MCI_URL, TORONTO_MIN_OCC_YEAR, TORONTO_PAGE_SIZE,
)

logger = logging.getLogger("stayscore.fetchers")

# Shared async HTTP client
client = httpx.AsyncClient(timeout=HTTP_TIMEOUT)


class UpstreamError(RuntimeError):
    """A crime-data source answered with a non-200 status."""

    def __init__(self, source: str, status_code: int):
        super().__init__(f"{source} error: HTTP {status_code}")
        self.source = source
        self.status_code = status_code


def _socrata_headers() -> dict:
    return {"X-App-Token": CHICAGO_APP_TOKEN} if CHICAGO_APP_TOKEN else {}


# ─────────────────────────── Chicago Socrata ────────────────────

async def fetch_chicago_crime_counts(since: str = CHICAGO_CRIME_SINCE) -> dict[str, int]:
    """Per-community-area incident counts since `since`, grouped server-side."""
    params = {
        "$select": "community_area, count(*) as crime_count",
        "$group": "community_area",
        "$where": f"date >= '{since}'",
    }
    logger.info(f"[Chicago] Fetching crime stats since {since}")
    r = await client.get(CHICAGO_CRIME_URL, params=params, headers=_socrata_headers())
    if r.status_code != 200:
        raise UpstreamError("Chicago crime API", r.status_code)

    stats: dict[str, int] = {}
    for row in r.json():
        key = row.get("community_area")
        if not key:
            continue
        try:
            count = int(float(row.get("crime_count") or row.get("count") or 0))
        except (TypeError, ValueError):
            count = 0
        stats[str(key)] = count

    logger.info(f"[Chicago] Loaded crime stats for {len(stats)} community areas")
    return stats


async def fetch_chicago_recent_crimes(limit: int = 500) -> list[dict]:
    """Latest raw incidents with coordinates, for the map's point layer."""
    params = {"$limit": limit, "$order": "date DESC"}
    r = await client.get(CHICAGO_CRIME_URL, params=params, headers=_socrata_headers())
    if r.status_code != 200:
        raise UpstreamError("Chicago crime API", r.status_code)

    incidents = []
    for rec in r.json():
        try:
            lat = float(rec["latitude"])
            lng = float(rec["longitude"])
        except (KeyError, TypeError, ValueError):
            continue
        incidents.append({
            "lat": lat,
            "lng": lng,
            "type": rec.get("primary_type"),
            "date": rec.get("date"),
        })
    return incidents


# ─────────────────────────── London police.uk ───────────────────

async def fetch_street_crime_count(lat: float, lng: float, month: str = LONDON_POLICE_MONTH) -> int:
    """Number of street-level crimes police.uk reports within ~1 mile of a point."""
    r = await client.get(
        f"{POLICE_UK_BASE}/crimes-street/all-crime",
        params={"date": month, "lat": lat, "lng": lng},
    )
    if r.status_code != 200:
        raise UpstreamError("Police API", r.status_code)
    crimes = r.json()
    return len(crimes) if isinstance(crimes, list) else 0


async def fetch_street_crime_counts(
    points: dict[str, tuple[float, float]],
    month: str = LONDON_POLICE_MONTH,
) -> dict[str, int]:
    """One radius query per named point. A failed point counts as 0."""
    sem = asyncio.Semaphore(LONDON_MAX_CONCURRENCY)

    async def _one(name: str, lat: float, lng: float) -> int:
        async with sem:
            try:
                return await fetch_street_crime_count(lat, lng, month)
            except (httpx.HTTPError, UpstreamError, ValueError) as e:
                logger.error(f"[London] Police API error for {name}: {e}")
                return 0

    names = list(points)
    counts = await asyncio.gather(*[_one(n, *points[n]) for n in names])
    return dict(zip(names, counts))


# ─────────────────────────── Toronto ArcGIS ─────────────────────

async def fetch_toronto_crime_points(
    min_year: int = TORONTO_MIN_OCC_YEAR,
    page_size: int = TORONTO_PAGE_SIZE,
) -> list[tuple[float, float]]:
    """All MCI incident locations as (lat, lng), paging until a short page."""
    points: list[tuple[float, float]] = []
    offset = 0

    while True:
        params = {
            "f": "geojson",
            "where": f"OCC_YEAR >= {min_year}",
            "outFields": "LAT_WGS84,LONG_WGS84,OCC_YEAR",
            "outSR": "4326",
            "resultOffset": str(offset),
            "resultRecordCount": str(page_size),
        }
        r = await client.get(TORONTO_MCI_URL, params=params)
        if r.status_code != 200:
            raise UpstreamError("TPS API", r.status_code)

        features = r.json().get("features") or []
        for ft in features:
            coords = (ft.get("geometry") or {}).get("coordinates")
            if not isinstance(coords, list) or len(coords) < 2:
                continue
            lng, lat = coords[0], coords[1]
            if isinstance(lat, (int, float)) and isinstance(lng, (int, float)):
                points.append((lat, lng))

        logger.info(f"[Toronto] TPS API chunk fetched: {len(features)} records (offset={offset})")

        if len(features) < page_size:
            break
        offset += len(features)

    logger.info(f"[Toronto] TPS API total crime points fetched: {len(points)}")
    return points
