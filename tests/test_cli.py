"""Tests for the herdbook CLI."""

import json
from argparse import Namespace

import pytest

from herdbook import cli
from herdbook.config.loader import load_config_or_defaults
from herdbook.query import QueryDescriptor, RangeFilter

BOVINES_CSV = """id,ear_tag,name,type,breed,gender,birth_date,weight,health_status
B1,BOV001,Luna,dairy_cow,Holstein,female,2021-03-10,520,healthy
B2,BOV002,Rosa,beef_cow,Angus,female,2020-07-01,480,sick
B3,BOV003,Bella,dairy_cow,Holstein,female,2022-01-20,450,healthy
"""


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Run commands from a temp dir whose config points at a temp database."""
    monkeypatch.chdir(tmp_path)
    (tmp_path / "herdbook.config.yaml").write_text(
        f"storage:\n  sqlite_path: {tmp_path / 'herd.db'}\nquery:\n  max_page_size: 50\n",
        encoding="utf-8",
    )
    (tmp_path / "bovines.csv").write_text(BOVINES_CSV, encoding="utf-8")
    return tmp_path


def _query_args(**overrides):
    values = {
        "kind": "bovines",
        "search": None,
        "filter": None,
        "range": None,
        "sort": None,
        "desc": False,
        "page": None,
        "page_size": None,
        "preset": None,
        "query_file": None,
    }
    values.update(overrides)
    return Namespace(**values)


def test_parse_filters_and_ranges():
    assert cli._parse_filters(["breed=Holstein", "is_active=true", "gender="]) == {
        "breed": "Holstein",
        "is_active": True,
        "gender": "",
    }
    assert cli._parse_ranges(["weight=400:600", "birth_date=2021-01-01:", "age_years=:2.5"]) == {
        "weight": RangeFilter(minimum=400, maximum=600),
        "birth_date": RangeFilter(minimum="2021-01-01"),
        "age_years": RangeFilter(maximum=2.5),
    }


def test_parse_filters_rejects_malformed_pairs():
    with pytest.raises(ValueError, match="expected FIELD=VALUE"):
        cli._parse_filters(["breed"])
    with pytest.raises(ValueError, match="expected FIELD=MIN:MAX"):
        cli._parse_ranges(["weight=400"])


def test_build_descriptor_caps_page_size_and_applies_preset():
    config = load_config_or_defaults()
    args = _query_args(search="hol", sort="name", desc=True, page=3, page_size=500, preset="quarantine")

    descriptor = cli.build_descriptor(args, config)

    assert descriptor.search_term == "hol"
    assert descriptor.sort_field == "name"
    assert descriptor.descending is True
    assert descriptor.page_size == 100
    assert descriptor.page == 1
    assert descriptor.equality_filters == {"health_status": "quarantine"}


def test_build_descriptor_presets_only_for_bovines():
    with pytest.raises(ValueError, match="only available for bovines"):
        cli.build_descriptor(_query_args(kind="events", preset="quarantine"), load_config_or_defaults())


def test_build_descriptor_starts_from_query_file(tmp_path):
    query_file = tmp_path / "query.json"
    query_file.write_text(
        QueryDescriptor(search_term="angus", page_size=20, equality_filters={"gender": "female"}).model_dump_json(),
        encoding="utf-8",
    )
    args = _query_args(query_file=query_file, filter=["health_status=sick"])

    descriptor = cli.build_descriptor(args, load_config_or_defaults())

    assert descriptor.search_term == "angus"
    assert descriptor.page_size == 20
    assert descriptor.equality_filters == {"gender": "female", "health_status": "sick"}


def test_ingest_then_list_json(workdir, capsys):
    cli.main(["ingest", "--bovines", "bovines.csv"])
    assert "bovines" in capsys.readouterr().out

    cli.main(["list", "bovines", "--filter", "breed=Holstein", "--sort", "name", "--format", "json"])
    result = json.loads(capsys.readouterr().out)

    assert result["total_matched"] == 2
    assert [item["name"] for item in result["items"]] == ["Bella", "Luna"]


def test_list_table_output(workdir, capsys):
    cli.main(["ingest", "--bovines", "bovines.csv"])
    capsys.readouterr()

    cli.main(["list", "bovines", "--search", "ros", "--page-size", "5"])
    out = capsys.readouterr().out

    assert "BOV002" in out
    assert "BOV001" not in out
    assert "Page 1 of 1 (1 shown, 1 matched)" in out


def test_list_reports_no_matches(workdir, capsys):
    cli.main(["list", "events", "--search", "nothing"])

    assert "No events match" in capsys.readouterr().out


def test_export_csv_to_file(workdir, capsys):
    cli.main(["ingest", "--bovines", "bovines.csv"])
    out = workdir / "sick.csv"

    cli.main(["export", "bovines", "--filter", "health_status=sick", "--format", "csv", "--out", str(out)])

    assert f"Exported to {out}" in capsys.readouterr().out
    assert "BOV002" in out.read_text(encoding="utf-8")


def test_stats_json(workdir, capsys):
    cli.main(["ingest", "--bovines", "bovines.csv"])
    capsys.readouterr()

    cli.main(["stats", "--format", "json"])
    summary = json.loads(capsys.readouterr().out)

    assert summary["total_animals"] == 3
    assert summary["health"]["sick"] == 1


def test_explicit_missing_config_exits(workdir):
    with pytest.raises(SystemExit) as exc:
        cli.main(["--config", str(workdir / "absent.yaml"), "stats"])

    assert exc.value.code == 1


def test_bad_filter_is_logged_and_raised(workdir):
    with pytest.raises(ValueError):
        cli.main(["list", "bovines", "--filter", "breed"])


LOCATED_CSV = """id,ear_tag,name,type,breed,gender,birth_date,weight,health_status,latitude,longitude
B1,BOV001,Luna,dairy_cow,Holstein,female,2021-03-10,520,healthy,4.60,-74.10
B2,BOV002,Rosa,beef_cow,Angus,female,2020-07-01,480,healthy,4.61,-74.10
B3,BOV003,Bella,dairy_cow,Holstein,female,2022-01-20,450,healthy,4.70,-74.10
B4,BOV004,Toro,bull,Brahman,male,2019-01-15,900,healthy,,
"""


def test_parse_point():
    assert cli.parse_point(None, "events") is None
    assert cli.parse_point("4.6,-74.1", "bovines") == (4.6, -74.1)
    with pytest.raises(ValueError, match="expected LAT,LON"):
        cli.parse_point("4.6", "bovines")
    with pytest.raises(ValueError, match="out of range"):
        cli.parse_point("95,0", "bovines")
    with pytest.raises(ValueError, match="only available for bovines"):
        cli.parse_point("4.6,-74.1", "events")


def test_list_within_radius_of_a_point(workdir, capsys):
    (workdir / "located.csv").write_text(LOCATED_CSV, encoding="utf-8")
    cli.main(["ingest", "--bovines", "located.csv"])
    capsys.readouterr()

    cli.main([
        "list", "bovines",
        "--near", "4.6,-74.1",
        "--range", "distance_m=:5000",
        "--sort", "distance_m",
        "--desc",
        "--format", "json",
    ])
    result = json.loads(capsys.readouterr().out)

    assert [item["name"] for item in result["items"]] == ["Rosa", "Luna"]


def test_export_error_is_logged_once(workdir, monkeypatch, caplog):
    def _fail(*args, **kwargs):
        raise RuntimeError("disk full")

    monkeypatch.setattr(cli, "export_records", _fail)

    with pytest.raises(RuntimeError):
        cli.main(["export", "bovines"])

    errors = [record for record in caplog.records if record.levelname == "ERROR"]
    assert len(errors) == 1
