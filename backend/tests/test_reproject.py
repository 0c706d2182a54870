import pytest

from src.reproject import extent_to_lonlat, reproject_features, reproject_geometry

HALF_WORLD = 20037508.342789244


def test_point_to_web_mercator():
    g = reproject_geometry({"type": "Point", "coordinates": [180.0, 0.0]})
    assert g["type"] == "Point"
    assert g["coordinates"][0] == pytest.approx(HALF_WORLD)
    assert g["coordinates"][1] == pytest.approx(0.0, abs=1e-6)


def test_input_is_not_mutated():
    src = {"type": "LineString", "coordinates": [[0, 0], [10, 10]]}
    reproject_geometry(src)
    assert src["coordinates"] == [[0, 0], [10, 10]]


def test_polygon_rings_keep_shape():
    ring = [[0, 0], [10, 0], [10, 10], [0, 10], [0, 0]]
    g = reproject_geometry({"type": "Polygon", "coordinates": [ring]})
    out = g["coordinates"][0]
    assert len(out) == 5
    assert out[1][0] == pytest.approx(1113194.9079327357)
    assert out[2][1] == pytest.approx(1118889.9748579594)


def test_multipolygon_depth():
    g = reproject_geometry({
        "type": "MultiPolygon",
        "coordinates": [[[[0, 0], [1, 0], [1, 1], [0, 0]]], [[[5, 5], [6, 5], [6, 6], [5, 5]]]],
    })
    assert len(g["coordinates"]) == 2
    assert g["coordinates"][1][0][0][0] == pytest.approx(556597.4539663679)


def test_z_ordinate_kept():
    g = reproject_geometry({"type": "Point", "coordinates": [0, 0, 123.5]})
    assert g["coordinates"][2] == 123.5


def test_geometry_collection_members_reprojected():
    g = reproject_geometry({
        "type": "GeometryCollection",
        "geometries": [
            {"type": "Point", "coordinates": [180, 0]},
            {"type": "LineString", "coordinates": [[0, 0], [180, 0]]},
        ],
    })
    assert g["geometries"][0]["coordinates"][0] == pytest.approx(HALF_WORLD)
    assert g["geometries"][1]["coordinates"][1][0] == pytest.approx(HALF_WORLD)


def test_missing_coordinates_passthrough():
    g = {"type": "Point"}
    assert reproject_geometry(g) is g
    assert reproject_geometry(None) is None


def test_malformed_positions_passthrough():
    g = reproject_geometry({"type": "LineString", "coordinates": [["a", "b"], [0, 0]]})
    assert g["coordinates"][0] == ["a", "b"]
    assert g["coordinates"][1] == pytest.approx([0, 0], abs=1e-6)


def test_reproject_features_keeps_other_members():
    features = [
        {"type": "Feature", "id": 7, "properties": {"name": "x"}, "geometry": {"type": "Point", "coordinates": [180, 0]}},
        {"type": "Feature", "properties": {}, "geometry": None},
    ]
    out = reproject_features(features)
    assert out[0]["id"] == 7
    assert out[0]["properties"] == {"name": "x"}
    assert out[0]["geometry"]["coordinates"][0] == pytest.approx(HALF_WORLD)
    assert out[1] is features[1]
    assert features[0]["geometry"]["coordinates"] == [180, 0]


def test_extent_to_lonlat():
    bbox = extent_to_lonlat([-HALF_WORLD, 0, HALF_WORLD, 1118889.9748579594])
    assert bbox["west"] == pytest.approx(-180)
    assert bbox["east"] == pytest.approx(180)
    assert bbox["south"] == pytest.approx(0, abs=1e-9)
    assert bbox["north"] == pytest.approx(10)


def test_out_of_range_latitude_becomes_none():
    g = reproject_geometry({"type": "LineString", "coordinates": [[0, 0], [0, 100]]})
    assert g["coordinates"][0] == pytest.approx([0, 0], abs=1e-6)
    assert g["coordinates"][1] is None


def test_pole_stays_finite():
    g = reproject_geometry({"type": "Point", "coordinates": [0, 90]})
    assert g["coordinates"] is not None
    assert g["coordinates"][1] > 2e8
