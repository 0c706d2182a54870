import json

import pytest

from conftest import EXTENT
from src import describe_file, inspect_geojson


@pytest.fixture
def geojson_file(tmp_path, collection):
    # null geometry case is covered in test_pipeline
    fc = {"type": "FeatureCollection", "features": collection["features"][:2]}
    p = tmp_path / "features.geojson"
    p.write_text(json.dumps(fc), encoding="utf-8")
    return p


def test_describe_file_dry_run(geojson_file, capsys):
    rc = describe_file.main([str(geojson_file), "--extent", *map(str, EXTENT), "--dry-run"])
    out = capsys.readouterr().out
    assert rc == 0
    assert "Features in extent: 1" in out
    assert "--- PROMPT ---" in out
    assert "Feature ID: inside" in out


def test_describe_file_bbox(geojson_file, capsys):
    rc = describe_file.main([str(geojson_file), "--bbox", "100", "30", "130", "50", "--dry-run"])
    out = capsys.readouterr().out
    assert rc == 0
    assert "far (Point)" in out


def test_describe_file_calls_model(geojson_file, fake_gemini, settings, monkeypatch, capsys):
    monkeypatch.setattr(describe_file, "as_settings", lambda: settings)
    rc = describe_file.main([str(geojson_file), "--extent", *map(str, EXTENT)])
    assert rc == 0
    assert "A quiet patch of ocean." in capsys.readouterr().out


def test_describe_file_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        describe_file.main([str(tmp_path / "nope.geojson"), "--extent", "0", "0", "1", "1", "--dry-run"])


def test_inspect_geojson(geojson_file, capsys):
    rc = inspect_geojson.main([str(geojson_file), "--extent", *map(str, EXTENT)])
    out = capsys.readouterr().out
    assert rc == 0
    assert "Features: 2" in out
    assert "Features with bbox in extent:     1" in out
    assert "Features with geometry in extent: 1" in out
