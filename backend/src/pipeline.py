"""
DESCRIBE PIPELINE
-----------------
Coordinates one viewport description request with on-disk caching and
file locking.

Responsible for:
- Validating the posted extent and GeoJSON
- Reprojecting features and filtering them to the viewport
- Building the prompt and calling the language model only when needed
- Ensuring concurrent identical requests do not call the model twice

Acts as middleman between the Flask endpoints and the geometry / AI modules.
"""

from __future__ import annotations

import hashlib
import json
import logging
import math
import os
from pathlib import Path

from filelock import FileLock

from src.gemini import generate_content
from src.prompt import build_prompt, fmt_box
from src.reproject import extent_to_lonlat, reproject_features
from src.viewport import feature_label, features_in_extent

log = logging.getLogger(__name__)

INVALID_GEOJSON = "Invalid GeoJSON: Missing or malformed features array."
INVALID_EXTENT = "Invalid extent: Expected an array of 4 numbers [minX, minY, maxX, maxY]."


class RequestError(ValueError):
    status_code = 400


def _to_number(v) -> float:
    if isinstance(v, bool) or v is None:
        raise ValueError(v)
    x = float(v)
    if not math.isfinite(x):
        raise ValueError(v)
    return x


def parse_extent(extent) -> list[float]:
    if not isinstance(extent, (list, tuple)) or len(extent) != 4:
        raise RequestError(INVALID_EXTENT)
    try:
        return [_to_number(v) for v in extent]
    except (TypeError, ValueError):
        raise RequestError(INVALID_EXTENT) from None


def normalize_geojson(geojson) -> dict:
    """FeatureCollection as-is, a bare Feature wrapped into one."""
    if not isinstance(geojson, dict):
        raise RequestError(INVALID_GEOJSON)
    if geojson.get("type") == "Feature":
        return {"type": "FeatureCollection", "features": [geojson]}
    if not isinstance(geojson.get("features"), list):
        raise RequestError(INVALID_GEOJSON)
    return geojson


def validate_request(body) -> tuple[list[float], dict]:
    if not isinstance(body, dict):
        raise RequestError(INVALID_GEOJSON)
    geojson = normalize_geojson(body.get("geojson"))
    extent = parse_extent(body.get("extent"))
    return extent, geojson


def _log_first_geometry(features: list) -> None:
    first = features[0] if features else None
    geom = first.get("geometry") if isinstance(first, dict) else None
    if isinstance(geom, dict):
        coords = geom.get("coordinates")
        preview = json.dumps(coords)[:200] + "..." if coords is not None else "No coordinates"
        log.debug("First feature geometry: %s %s", geom.get("type"), preview)
    else:
        log.debug("First feature geometry or coordinates not available for logging.")


def detect_features(extent, geojson: dict) -> list[tuple[dict, tuple]]:
    features = geojson["features"]
    log.info("Incoming extent (Web Mercator): %s, %d feature(s)", fmt_box(extent), len(features))
    _log_first_geometry(features)

    detected = features_in_extent(reproject_features(features), extent)

    for f, bbox in detected:
        log.debug(
            "Detected feature %s: type=%s bbox=%s properties=%s",
            feature_label(f), f["geometry"].get("type"), fmt_box(bbox),
            json.dumps(f.get("properties"), default=str),
        )
    summary = ", ".join(f"{f['geometry'].get('type')} {feature_label(f)}" for f, _ in detected) or "None"
    log.info("Features in extent: %s", summary)
    return detected


def prompt_for(extent, geojson: dict) -> tuple[str, list]:
    detected = detect_features(extent, geojson)
    return build_prompt(extent, detected, extent_to_lonlat(extent)), detected


# cache helpers
def cache_key(model: str, prompt: str) -> str:
    return hashlib.sha256(f"{model}\n{prompt}".encode("utf-8")).hexdigest()


def description_cache_path(cache_dir: Path, key: str) -> Path:
    return Path(cache_dir) / f"{key}.json"


def description_lock_path(cache_dir: Path, key: str) -> Path:
    # one lock per prompt
    d = Path(cache_dir) / "locks"
    d.mkdir(parents=True, exist_ok=True)
    return d / f"{key}.lock"


def _read_cached(path: Path) -> str | None:
    if not path.exists() or path.stat().st_size == 0:
        return None
    try:
        return json.loads(path.read_text(encoding="utf-8"))["description"]
    except (ValueError, KeyError) as e:
        log.warning("Ignoring unreadable cache entry %s: %s", path, e)
        return None


def _write_cached(path: Path, model: str, description: str) -> None:
    tmp = path.with_suffix(".tmp")
    tmp.write_text(json.dumps({"model": model, "description": description}), encoding="utf-8")
    os.replace(tmp, path)


def run_model(prompt: str, settings) -> tuple[str, bool]:
    """Return (description, served_from_cache)."""
    model = settings["GEMINI_MODEL"]

    def call():
        return generate_content(
            prompt,
            api_key=settings["GEMINI_API_KEY"],
            model=model,
            base_url=settings["GEMINI_API_BASE_URL"],
            timeout=settings["GEMINI_TIMEOUT"],
        )

    if not settings.get("DESCRIPTION_CACHE"):
        return call(), False

    cache_dir = Path(settings["CACHE_DIR"])
    cache_dir.mkdir(parents=True, exist_ok=True)
    key = cache_key(model, prompt)
    out = description_cache_path(cache_dir, key)

    with FileLock(str(description_lock_path(cache_dir, key))):
        # fast path: another request already asked the model
        cached = _read_cached(out)
        if cached is not None:
            log.info("Description cache hit %s", key[:12])
            return cached, True

        text = call()
        _write_cached(out, model, text)
        return text, False


def describe_extent(extent, geojson: dict, settings) -> dict:
    prompt, _ = prompt_for(extent, geojson)
    text, cached = run_model(prompt, settings)
    return {"description": text, "cached": cached}
