"""
Stay Score Safety Backend — FastAPI
Modular entry point. All logic is split across:
  config.py, models.py, geometry.py, scoring.py, cache.py, data_fetchers.py,
  areas.py, city_*.py, safety_service.py, routes.py
"""

import logging

logging.basicConfig(level=logging.INFO)

# Import the FastAPI app from routes (this also loads the city boundaries)
from routes import app  # noqa: E402, F401
from config import PORT  # noqa: E402


def run():
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=PORT)


if __name__ == "__main__":
    run()
