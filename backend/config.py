"""Stay Score Backend — Configuration & Constants"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env from project root (one level up from backend/)
_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(_ROOT / ".env")

# ── Paths ──
DATA_DIR = Path(os.environ.get("STAYSCORE_DATA_DIR", str(_ROOT / "datasets")))

CHICAGO_AREAS_PATH = DATA_DIR / "chicago" / "community_areas.geojson"
LONDON_AREAS_PATH = DATA_DIR / "uk" / "london_boroughs.geojson"
TORONTO_AREAS_PATH = DATA_DIR / "canada" / "toronto_neighbourhoods.geojson"

# ── Server ──
PORT = int(os.environ.get("PORT", "4000"))
HTTP_TIMEOUT = float(os.environ.get("HTTP_TIMEOUT", "15"))

# ── Chicago (Socrata) ──
CHICAGO_CRIME_URL = "https://data.cityofchicago.org/resource/ijzp-q8t2.json"
CHICAGO_APP_TOKEN = os.environ.get("CHICAGO_APP_TOKEN") or os.environ.get("SOCRATA_APP_TOKEN", "")
CHICAGO_CRIME_SINCE = os.environ.get("CHICAGO_CRIME_SINCE", "2024-01-01T00:00:00")
CHICAGO_CACHE_TTL = 60 * 60  # 1 hour

# ── London (data.police.uk) ──
POLICE_UK_BASE = "https://data.police.uk/api"
LONDON_POLICE_MONTH = os.environ.get("LONDON_POLICE_MONTH", "2024-06")
LONDON_CACHE_TTL = 60 * 60 * 6  # 6 hours, one upstream call per borough
LONDON_MAX_CONCURRENCY = 4  # police.uk allows ~15 req/s

# ── Toronto (TPS Major Crime Indicators, ArcGIS) ──
TORONTO_MCI_URL = (
    "https://services.arcgis.com/S9th0jAJ7bqgIRjw/arcgis/rest/services/"
    "Major_Crime_Indicators_Open_Data/FeatureServer/0/query"
)
TORONTO_MIN_OCC_YEAR = int(os.environ.get("TORONTO_MIN_OCC_YEAR", "2023"))
TORONTO_PAGE_SIZE = 2000  # layer's Max Record Count
TORONTO_CACHE_TTL = 60 * 60 * 4  # 4 hours

# ── Geometry ──
MIN_AREA_KM2 = 0.01
FALLBACK_AREA_KM2 = 1.0

# CORS: the dashboard dev servers
ALLOWED_ORIGINS = [
    f"http://localhost:{p}" for p in range(3000, 3010)
] + [
    f"http://127.0.0.1:{p}" for p in range(3000, 3010)
] + [
    f"http://localhost:{p}" for p in range(5173, 5180)
]
