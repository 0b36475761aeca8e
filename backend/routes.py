"""Stay Score Backend — FastAPI Routes"""

import math
import logging
from typing import Optional

import httpx
from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import ALLOWED_ORIGINS
from data_fetchers import UpstreamError, fetch_chicago_recent_crimes
from models import CityInfo, CrimePoint
from safety_service import build_default_service

logger = logging.getLogger("stayscore")


# ─────────────────────────── App Setup ──────────────────────────

app = FastAPI(title="Stay Score Safety API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Boundary files load here, once per process
safety_service = build_default_service()


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _parse_coord(value: Optional[str]) -> Optional[float]:
    if value is None or value.strip() == "":
        return None
    try:
        parsed = float(value)
    except ValueError:
        return None
    return parsed if math.isfinite(parsed) else None


# ─────────────────────────── Safety ─────────────────────────────

@app.get("/api/safety/cities", response_model=list[CityInfo])
async def list_cities():
    return safety_service.cities()


@app.get("/api/safety/{city}/areas")
async def get_city_areas(city: str):
    fc = await safety_service.get_areas(city)
    if fc is None:
        return _error(404, "Unknown city")
    return fc


@app.get("/api/safety/{city}/point")
async def get_city_point(city: str, lat: Optional[str] = None, lng: Optional[str] = None):
    if safety_service.resolve(city) is None:
        return _error(404, "Unknown city")

    lat_f, lng_f = _parse_coord(lat), _parse_coord(lng)
    if lat_f is None or lng_f is None:
        return _error(400, "lat, lng required")

    try:
        result = await safety_service.get_point_score(city, lat_f, lng_f)
    except Exception as e:
        logger.error(f"[{city}] point error for lat={lat}, lng={lng}: {e}")
        return _error(500, "safety point error")

    # diagnostics and communityArea only when present; areaName is always sent
    body = result.model_dump(exclude_none=True)
    body.setdefault("areaName", None)
    return body


# ─────────────────────────── Raw incidents ──────────────────────

@app.get("/api/crime/chicago", response_model=list[CrimePoint])
async def get_chicago_crimes(limit: int = Query(500, ge=1, le=5000)):
    try:
        return await fetch_chicago_recent_crimes(limit)
    except (httpx.HTTPError, UpstreamError, ValueError) as e:
        logger.error(f"Chicago crime feed error: {e}")
        return _error(500, "Failed to fetch Chicago crime data")


# ─────────────────────────── Utility Endpoints ──────────────────

@app.get("/api/health")
async def health():
    return {
        "status": "ok",
        "cities": [s.model_dump() for s in safety_service.status()],
    }
