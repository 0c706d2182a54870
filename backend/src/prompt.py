"""
PROMPT BUILDER
--------------
Turns the detected features of a viewport into the text prompt sent to
the language model.
"""

from __future__ import annotations

import json
import math

from src.viewport import feature_label

NO_FEATURES = "No GeoJSON features found in this area."

INSTRUCTIONS = (
    "Return a clear, human-readable summary of what's in the viewport. "
    "Begin by describing the geographic area of the viewport given, such as any major landforms, cities, "
    "mountain ranges or other geographic features that you know of within this extent. "
    "Focus only on the specific features inside the viewport and nothing else. "
    "You do not need to describe the surrounding environment, the climate or the vegetation, "
    "only actual features such as mountains, cities, towns and rivers, and only when they are in the viewport. "
    "Double check your bounds against a map before responding; the description of what is inside the "
    "viewport must be accurate. "
    "Then, if you were given GeoJSON features, focus on the types of geographic features, their key "
    "properties, and their spatial relationships within the given extent. Before explaining these features, "
    "note that they are visible in the provided GeoJSON. "
    f"If above it says exactly '{NO_FEATURES[:-1]}', just reply that no features were provided. "
    "Be concise but informative."
)


def fmt_num(v: float) -> str:
    # whole numbers without a trailing .0
    if math.isfinite(v) and float(v).is_integer() and abs(v) < 1e15:
        return str(int(v))
    return repr(float(v))


def fmt_box(box) -> str:
    return "[" + ", ".join(fmt_num(v) for v in box) + "]"


def describe_feature(feature: dict, bbox) -> str:
    props = feature.get("properties") or {}
    return (
        f"Feature ID: {feature_label(feature)}\n"
        f"  Type: {feature['geometry'].get('type')}\n"
        f"  Reprojected BBox (Web Mercator): {fmt_box(bbox)}\n"
        f"  Properties: {json.dumps(props, separators=(',', ':'), ensure_ascii=False, default=str)}"
    )


def build_prompt(extent, detected: list, lonlat: dict | None = None) -> str:
    blocks = "\n\n".join(describe_feature(f, bbox) for f, bbox in detected)

    lines = [
        "You are an AI geospatial assistant. Describe the features visible in the map extent:",
        f"Map Extent Viewport (Web Mercator): {fmt_box(extent)}",
    ]
    if lonlat:
        lines.append(
            "Map Extent Viewport (WGS84 degrees): "
            f"west={lonlat['west']:.6f}, south={lonlat['south']:.6f}, "
            f"east={lonlat['east']:.6f}, north={lonlat['north']:.6f}"
        )
    lines += [
        "",
        "Detailed GeoJSON Features found within the extent:",
        blocks or NO_FEATURES,
        "",
        INSTRUCTIONS,
    ]
    return "\n".join(lines)
