"""
SETTINGS
--------
Environment driven settings for the API server and the command line tools.

Values come from the process environment, with a .env file next to the
backend (or in the working directory) loaded first.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

ROOT = Path(__file__).resolve().parents[2]

load_dotenv(ROOT / "backend" / ".env")
load_dotenv()

# CRS of incoming GeoJSON and of the map view
DATA_CRS = "EPSG:4326"
VIEW_CRS = "EPSG:3857"


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
    GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash-lite")
    GEMINI_API_BASE_URL = os.getenv("GEMINI_API_BASE_URL", "https://generativelanguage.googleapis.com/v1beta")
    GEMINI_TIMEOUT = float(os.getenv("GEMINI_TIMEOUT", "30"))

    DESCRIPTION_CACHE = _flag("DESCRIPTION_CACHE", "1")
    CACHE_DIR = Path(os.getenv("CACHE_DIR", str(ROOT / "backend" / "cache" / "descriptions")))

    PORT = int(os.getenv("PORT", "3001"))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def as_settings(config_class=Config) -> dict:
    """Plain dict of the upper-case settings, same shape as Flask's app.config."""
    return {k: getattr(config_class, k) for k in dir(config_class) if k.isupper()}
