"""
DESCRIBE A GEOJSON FILE
-----------------------
Runs the /describe-extent pipeline from the command line.

Takes a GeoJSON file and a viewport, given either as a Web Mercator
extent or as a lon/lat bbox, prints the detected features and then
either the prompt (--dry-run) or the model's description.
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path

from src.config import DATA_CRS, VIEW_CRS, as_settings
from src.gemini import GeminiError
from src.pipeline import RequestError, normalize_geojson, parse_extent, prompt_for, run_model
from src.prompt import fmt_box
from src.reproject import get_transformer
from src.viewport import feature_label


def bbox_to_extent(west: float, south: float, east: float, north: float) -> list[float]:
    tfm = get_transformer(DATA_CRS, VIEW_CRS)
    return list(tfm.transform_bounds(west, south, east, north))


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Describe the features of a GeoJSON file inside a map viewport.")
    ap.add_argument("path", type=str, help="GeoJSON Feature or FeatureCollection (EPSG:4326)")
    view = ap.add_mutually_exclusive_group(required=True)
    view.add_argument("--extent", type=float, nargs=4, metavar=("MINX", "MINY", "MAXX", "MAXY"),
                      help="Viewport in EPSG:3857 metres")
    view.add_argument("--bbox", type=float, nargs=4, metavar=("WEST", "SOUTH", "EAST", "NORTH"),
                      help="Viewport in lon/lat degrees")
    ap.add_argument("--dry-run", action="store_true", help="Print the prompt instead of calling the model")
    args = ap.parse_args(argv)

    path = Path(args.path).expanduser().resolve()
    if not path.exists():
        raise FileNotFoundError(f"GeoJSON not found: {path}")

    try:
        geojson = normalize_geojson(json.loads(path.read_text(encoding="utf-8")))
        extent = parse_extent(args.extent if args.extent else bbox_to_extent(*args.bbox))
    except RequestError as e:
        print(f"ERROR: {e}")
        return 2

    prompt, detected = prompt_for(extent, geojson)

    print(f"\n--- VIEWPORT {fmt_box(extent)} ---")
    print(f"Features in file:   {len(geojson['features']):,}")
    print(f"Features in extent: {len(detected):,}")
    for f, bbox in detected:
        print(f"  {feature_label(f)} ({f['geometry'].get('type')}) bbox={fmt_box(bbox)}")

    if args.dry_run:
        print("\n--- PROMPT ---")
        print(prompt)
        return 0

    settings = as_settings()
    if not settings["GEMINI_API_KEY"]:
        print("ERROR: GEMINI_API_KEY is not set (use --dry-run to only print the prompt)")
        return 2

    try:
        text, cached = run_model(prompt, settings)
    except GeminiError as e:
        print(f"ERROR: {e} {e.details or ''}".rstrip())
        return 1

    print(f"\n--- DESCRIPTION{' (cached)' if cached else ''} ---")
    print(text)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
