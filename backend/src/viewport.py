"""
VIEWPORT FILTERING
------------------
Bounding box helpers used to decide which features are visible in the
current map view.

All boxes are (minx, miny, maxx, maxy) in the same CRS as the extent
(Web Mercator once features have been reprojected).
"""

from __future__ import annotations

import numpy as np

from src.reproject import COORD_DEPTH, is_position


def _flatten(coords, depth: int, out: list) -> None:
    if depth == 0:
        out.append(coords)
        return
    if not isinstance(coords, list):
        return
    for c in coords:
        _flatten(c, depth - 1, out)


def extract_coordinates(geometry: dict | None) -> list:
    """Every position of a geometry as one flat list."""
    coords: list = []
    if not isinstance(geometry, dict):
        return coords

    gtype = geometry.get("type")
    if gtype == "GeometryCollection":
        members = geometry.get("geometries")
        if not isinstance(members, list):
            return coords
        for g in members:
            coords.extend(extract_coordinates(g))
        return coords

    if geometry.get("coordinates") is None or gtype not in COORD_DEPTH:
        return coords

    _flatten(geometry["coordinates"], COORD_DEPTH[gtype], coords)
    return coords


def feature_bbox(feature: dict | None) -> tuple[float, float, float, float] | None:
    if not isinstance(feature, dict) or not feature.get("geometry"):
        return None

    xy = [p[:2] for p in extract_coordinates(feature["geometry"]) if is_position(p)]
    if not xy:
        return None

    arr = np.asarray(xy, dtype=np.float64)
    # only finite rows count
    arr = arr[np.isfinite(arr).all(axis=1)]
    if arr.size == 0:
        return None

    minx, miny = arr.min(axis=0)
    maxx, maxy = arr.max(axis=0)
    return float(minx), float(miny), float(maxx), float(maxy)


def bboxes_intersect(a, b) -> bool:
    # touching edges count as intersecting
    if a is None or b is None:
        return False
    return not (b[0] > a[2] or b[2] < a[0] or b[1] > a[3] or b[3] < a[1])


def features_in_extent(features: list, extent) -> list[tuple[dict, tuple]]:
    """(feature, bbox) pairs for the features whose bbox touches the extent, in input order."""
    hits = []
    for f in features:
        bbox = feature_bbox(f)
        if bbox is not None and bboxes_intersect(extent, bbox):
            hits.append((f, bbox))
    return hits


def feature_label(feature: dict) -> str:
    for key in ("_id", "id"):
        val = feature.get(key)
        if val is not None and val != "":
            return str(val)
    return "Unnamed Feature"
