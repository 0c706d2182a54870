"""
GEOJSON INSPECTION & REPROJECTION CHECK
--------------------------------------
Utility script for inspecting a vector file before pasting it into the
map viewer.

Prints a spatial summary, confirms reprojection to the view CRS
(EPSG:3857) and, given an extent, compares the bbox filter used by the
API with an exact shapely intersection.

Used for sanity checks during development, not by the web app.
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path

import geopandas as gpd
from shapely.geometry import box

from src.config import DATA_CRS, VIEW_CRS
from src.reproject import reproject_features
from src.viewport import features_in_extent


def print_summary(gdf: gpd.GeoDataFrame, label: str) -> None:
    crs = gdf.crs
    print(f"\n--- {label} ---")
    print(f"Features: {len(gdf):,}")
    print(f"CRS: {crs}")
    if len(gdf) and not gdf.geometry.is_empty.all():
        bounds = gdf.total_bounds  # [minx, miny, maxx, maxy]
        print(f"Bounds: minx={bounds[0]:.6f}, miny={bounds[1]:.6f}, maxx={bounds[2]:.6f}, maxy={bounds[3]:.6f}")
    types = gdf.geometry.geom_type.value_counts(dropna=False)
    print("Geometry types: " + ", ".join(f"{t}={n}" for t, n in types.items()))


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Summarise a vector file and check which features fall in an extent.")
    ap.add_argument("path", type=str, help="GeoJSON (or any file geopandas can read)")
    ap.add_argument("--extent", type=float, nargs=4, metavar=("MINX", "MINY", "MAXX", "MAXY"),
                    help="Viewport extent in EPSG:3857 metres")
    args = ap.parse_args(argv)

    path = Path(args.path).expanduser().resolve()
    if not path.exists():
        print(f"ERROR: file not found: {path}")
        return 2

    gdf = gpd.read_file(path)
    if gdf.crs is None:
        gdf = gdf.set_crs(DATA_CRS)

    print_summary(gdf, "INPUT (before reprojection)")
    gdf_view = gdf.to_crs(VIEW_CRS)
    print_summary(gdf_view, f"INPUT (after reprojection to {VIEW_CRS})")
    print("\nReprojection: OK (units should now be meters)")

    if not args.extent:
        return 0

    # bbox filter, exactly as the API runs it
    fc = json.loads(gdf.to_crs(DATA_CRS).to_json())
    n_bbox = len(features_in_extent(reproject_features(fc["features"]), args.extent))

    # exact geometry test for comparison
    view = box(*args.extent)
    n_exact = int(gdf_view.geometry.intersects(view).sum())

    print(f"\n--- EXTENT {args.extent} ---")
    print(f"Features with bbox in extent:     {n_bbox:,}")
    print(f"Features with geometry in extent: {n_exact:,}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
