"""
GEOJSON REPROJECTION
--------------------
Reprojects GeoJSON geometries between coordinate systems with pyproj.

Incoming GeoJSON is geographic (EPSG:4326, lon/lat degrees) while the map
view reports its extent in Web Mercator (EPSG:3857, metres), so features
are moved into the view CRS before any bbox comparison.

Geometries are walked by nesting depth; every list of positions is sent
through the transformer as one numpy batch.
"""

from __future__ import annotations

from functools import lru_cache
from numbers import Real

import numpy as np
from pyproj import Transformer

from src.config import DATA_CRS, VIEW_CRS

# list nesting between "coordinates" and a single position
COORD_DEPTH = {
    "Point": 0,
    "MultiPoint": 1,
    "LineString": 1,
    "Polygon": 2,
    "MultiLineString": 2,
    "MultiPolygon": 3,
}


@lru_cache(maxsize=16)
def get_transformer(src_crs: str, dst_crs: str) -> Transformer:
    # always_xy so positions stay GeoJSON ordered (x/lon first)
    return Transformer.from_crs(src_crs, dst_crs, always_xy=True)


def is_position(pos) -> bool:
    """True for a GeoJSON position: a list with at least two real numbers up front."""
    if not isinstance(pos, (list, tuple)) or len(pos) < 2:
        return False
    return all(isinstance(v, Real) and not isinstance(v, bool) for v in pos[:2])


def transform_positions(positions: list, tfm: Transformer) -> list:
    """Transform a flat list of positions in one batch.

    Extra ordinates (z, m) are carried over untouched and anything that is
    not a valid position is passed through as-is. Positions outside the
    target CRS domain (non-finite result) become None.
    """
    idx = [i for i, p in enumerate(positions) if is_position(p)]
    out = list(positions)
    if not idx:
        return out

    xs = np.array([positions[i][0] for i in idx], dtype=np.float64)
    ys = np.array([positions[i][1] for i in idx], dtype=np.float64)
    tx, ty = tfm.transform(xs, ys)

    finite = np.isfinite(tx) & np.isfinite(ty)
    for j, i in enumerate(idx):
        out[i] = [float(tx[j]), float(ty[j]), *positions[i][2:]] if finite[j] else None
    return out


def _map_coords(coords, depth: int, tfm: Transformer):
    if depth == 0:
        return transform_positions([coords], tfm)[0]
    if not isinstance(coords, list):
        return coords
    if depth == 1:
        return transform_positions(coords, tfm)
    return [_map_coords(c, depth - 1, tfm) for c in coords]


def reproject_geometry(geometry: dict | None, src_crs: str = DATA_CRS, dst_crs: str = VIEW_CRS):
    """Return a reprojected copy of a GeoJSON geometry.

    Geometries without coordinates (and unknown types) come back unchanged;
    GeometryCollection members are reprojected one by one.
    """
    if not isinstance(geometry, dict):
        return geometry

    gtype = geometry.get("type")
    if gtype == "GeometryCollection":
        members = geometry.get("geometries")
        if not isinstance(members, list):
            return geometry
        out = dict(geometry)
        out["geometries"] = [reproject_geometry(g, src_crs, dst_crs) for g in members]
        return out

    coords = geometry.get("coordinates")
    if coords is None or gtype not in COORD_DEPTH:
        return geometry

    out = dict(geometry)
    out["coordinates"] = _map_coords(coords, COORD_DEPTH[gtype], get_transformer(src_crs, dst_crs))
    return out


def reproject_features(features: list, src_crs: str = DATA_CRS, dst_crs: str = VIEW_CRS) -> list:
    out = []
    for f in features:
        if isinstance(f, dict) and f.get("geometry"):
            f = {**f, "geometry": reproject_geometry(f["geometry"], src_crs, dst_crs)}
        out.append(f)
    return out


def extent_to_lonlat(extent) -> dict:
    """Web Mercator extent -> {west, south, east, north} in degrees."""
    tfm = get_transformer(VIEW_CRS, DATA_CRS)
    west, south = tfm.transform(extent[0], extent[1])
    east, north = tfm.transform(extent[2], extent[3])
    return {"west": float(west), "south": float(south), "east": float(east), "north": float(north)}
