"""Stay Score Backend — Pydantic Models"""

from typing import Optional
from pydantic import BaseModel, Field


class ScoreDiagnostics(BaseModel):
    areaKm2: float
    crimeCount: int
    crimeDensityPerKm2: float
    safetyScore10: int = Field(ge=1, le=10)
    communityArea: Optional[str] = None  # Chicago only


class ScoreResult(BaseModel):
    score: int = Field(ge=0, le=100)
    grade: str  # A, B, C, D
    city: str
    areaName: Optional[str] = None
    raw: Optional[ScoreDiagnostics] = None


class CityInfo(BaseModel):
    cityCode: str
    displayName: str


class CityStatus(BaseModel):
    cityCode: str
    areaCount: int
    statsFresh: bool  # a snapshot is cached and within its TTL
    statsFetchedAt: Optional[float] = None  # epoch seconds of the last refresh


class CrimePoint(BaseModel):
    lat: float
    lng: float
    type: Optional[str] = None
    date: Optional[str] = None
