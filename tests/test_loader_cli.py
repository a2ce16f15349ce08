"""Tests for point-file loading and the geo-buckets CLI."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from geo_buckets.cli import cli
from geo_buckets.loader import Point, load_points, parse_csv, parse_json

POINTS_CSV = (
    "lat,lon,payload\n"
    "35.73,-78.85,Austin\n"
    "35.7,-78.8,Test\n"
    "42.1,97.6,Far\n"
)

PIVOT_ARGS = ["--lat", "35.73265", "--lon", "-78.85029", "--min-distance", "50"]


@pytest.fixture
def points_file(tmp_path):
    path = tmp_path / "points.csv"
    path.write_text(POINTS_CSV, encoding="utf-8")
    return path


# ── Loader tests ─────────────────────────────────────────────────────────


class TestParseCSV:
    def test_parse(self):
        result = parse_csv(POINTS_CSV)
        assert result.skipped == 0
        assert result.points[0] == Point(35.73, -78.85, "Austin")
        assert len(result.points) == 3

    def test_long_column_names_and_no_payload(self):
        result = parse_csv("Latitude,Longitude\n0,0\n1.5,-2\n")
        assert result.points == [Point(0.0, 0.0), Point(1.5, -2.0)]

    def test_malformed_rows_skipped(self):
        result = parse_csv("lat,lon,payload\nabc,1,x\n,2,y\n3,4,z\n")
        assert result.skipped == 2
        assert result.points == [Point(3.0, 4.0, "z")]

    def test_header_only(self):
        assert parse_csv("lat,lon\n").points == []


class TestParseJSON:
    def test_parse(self):
        result = parse_json('[{"lat": 1, "lon": 2, "payload": {"id": 9}}, {"latitude": 3, "lng": 4}]')
        assert result.points == [Point(1.0, 2.0, {"id": 9}), Point(3.0, 4.0)]

    def test_bad_items_skipped(self):
        result = parse_json('[1, {"lat": 1}, {"lat": "x", "lon": 1}, {"lat": 5, "lon": 6}]')
        assert result.skipped == 3
        assert result.points == [Point(5.0, 6.0)]

    def test_boolean_coordinates_skipped(self):
        result = parse_json('[{"lat": true, "lon": 2}, {"lat": 1, "lon": false}, {"lat": 1, "lon": 2}]')
        assert result.skipped == 2
        assert result.points == [Point(1.0, 2.0)]

    def test_not_an_array(self):
        with pytest.raises(ValueError):
            parse_json('{"lat": 1, "lon": 2}')


def test_load_points_by_suffix(tmp_path):
    json_path = tmp_path / "points.json"
    json_path.write_text('[{"lat": 1, "lon": 2}]', encoding="utf-8")
    csv_path = tmp_path / "points.txt"
    csv_path.write_text("lat,lon\n1,2\n", encoding="utf-8")

    assert load_points(json_path).points == [Point(1.0, 2.0)]
    assert load_points(csv_path).points == [Point(1.0, 2.0)]


# ── CLI tests ────────────────────────────────────────────────────────────


class TestBucketsCommand:
    def test_json_output(self, points_file):
        result = CliRunner().invoke(cli, ["buckets", str(points_file), *PIVOT_ARGS, "--json"])
        assert result.exit_code == 0, result.output

        buckets = json.loads(result.output)
        assert len(buckets) == 2
        assert [r["payload"] for r in buckets[0]["records"]] == ["Austin", "Test"]
        assert buckets[1]["records"][0]["payload"] == "Far"
        assert buckets[0]["distance"] < buckets[1]["distance"]

    def test_table_output(self, points_file):
        result = CliRunner().invoke(cli, ["buckets", str(points_file), *PIVOT_ARGS])
        assert result.exit_code == 0, result.output
        assert "Austin" in result.output
        assert "Far" in result.output

    def test_reports_skipped_rows(self, tmp_path):
        path = tmp_path / "points.csv"
        path.write_text(POINTS_CSV + "oops,1,bad\n", encoding="utf-8")
        result = CliRunner().invoke(cli, ["buckets", str(path), *PIVOT_ARGS])
        assert result.exit_code == 0
        assert "Skipped 1" in result.output

    def test_env_config(self, points_file, monkeypatch):
        monkeypatch.setenv("GEO_BUCKETS_PIVOT_LAT", "35.73265")
        monkeypatch.setenv("GEO_BUCKETS_PIVOT_LON", "-78.85029")
        monkeypatch.setenv("GEO_BUCKETS_MIN_DISTANCE", "50")
        result = CliRunner().invoke(cli, ["buckets", str(points_file), "--json"])
        assert result.exit_code == 0, result.output
        assert len(json.loads(result.output)) == 2

    def test_invalid_env_is_usage_error(self, points_file, monkeypatch):
        monkeypatch.setenv("GEO_BUCKETS_MIN_DISTANCE", "wide")
        result = CliRunner().invoke(cli, ["buckets", str(points_file)])
        assert result.exit_code == 2

    def test_negative_min_distance_is_usage_error(self, points_file):
        result = CliRunner().invoke(cli, ["buckets", str(points_file), "--min-distance", "-5"])
        assert result.exit_code == 2

    def test_unreadable_json(self, tmp_path):
        path = tmp_path / "points.json"
        path.write_text("not json", encoding="utf-8")
        result = CliRunner().invoke(cli, ["buckets", str(path)])
        assert result.exit_code == 1
        assert "Cannot read" in result.output


class TestClosestCommand:
    def test_in_range(self, points_file):
        result = CliRunner().invoke(
            cli, ["closest", str(points_file), *PIVOT_ARGS, "--", "35.7", "-78.8"],
        )
        assert result.exit_code == 0, result.output
        assert "Austin" in result.output
        assert "Far" not in result.output

    def test_out_of_range(self, points_file):
        result = CliRunner().invoke(cli, ["closest", str(points_file), "23.2", "70.4", *PIVOT_ARGS])
        assert result.exit_code == 0, result.output
        assert "No bucket within 50" in result.output

    def test_ignore_min(self, points_file):
        result = CliRunner().invoke(
            cli, ["closest", str(points_file), "23.2", "70.4", *PIVOT_ARGS, "--ignore-min"],
        )
        assert result.exit_code == 0, result.output
        assert "No bucket" not in result.output
