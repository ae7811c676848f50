"""Tests for the bovine field registry, derived fields and presets."""

import pytest

from herdbook.query import QueryDescriptor, RangeFilter, query
from herdbook.records import BOVINE_PRESETS, apply_preset, bovine_field_config, get_field_config
from herdbook.records.bovines import last_vaccination_date, needs_vaccination, next_due_date, vaccination_status


def _cow(id, name, birth_date, health_status="healthy", vaccinations=None, **extra):
    record = {
        "id": id,
        "ear_tag": f"BOV{id:0>3}",
        "name": name,
        "breed": "Holstein",
        "type": "dairy_cow",
        "gender": "female",
        "birth_date": birth_date,
        "health_status": health_status,
        "vaccinations": vaccinations or [],
    }
    record.update(extra)
    return record


def _dose(application_date, next_due_date=None, vaccine_name="Brucellosis"):
    return {"vaccine_name": vaccine_name, "application_date": application_date, "next_due_date": next_due_date}


def test_vaccination_status_levels(today):
    assert vaccination_status({"vaccinations": []}, today) == "never-vaccinated"
    assert vaccination_status({"vaccinations": [_dose("2025-01-01", "2025-06-01")]}, today) == "overdue"
    assert vaccination_status({"vaccinations": [_dose("2025-01-01", "2025-07-01")]}, today) == "due-soon"
    assert vaccination_status({"vaccinations": [_dose("2025-01-01", "2025-12-01")]}, today) == "up-to-date"
    assert vaccination_status({"vaccinations": [_dose("2025-01-01")]}, today) == "up-to-date"


def test_vaccination_status_overdue_wins_over_due_soon(today):
    record = {"vaccinations": [_dose("2025-01-01", "2025-07-01"), _dose("2024-06-01", "2025-05-01")]}

    assert vaccination_status(record, today) == "overdue"


def test_due_soon_window_is_configurable(today):
    record = {"vaccinations": [_dose("2025-01-01", "2025-07-01")]}

    assert vaccination_status(record, today, due_soon_days=7) == "up-to-date"
    assert vaccination_status(record, today, due_soon_days=16) == "due-soon"


def test_next_due_and_last_vaccination_dates(today):
    record = {
        "vaccinations": [
            _dose("2024-06-01", "2025-05-01"),
            _dose("2025-02-01", "2025-08-01"),
            _dose("2025-03-01", "2025-07-10"),
        ]
    }

    assert next_due_date(record, today).isoformat() == "2025-07-10"
    assert last_vaccination_date(record).isoformat() == "2025-03-01"
    assert next_due_date({"vaccinations": []}, today) is None
    assert last_vaccination_date({}) is None


def test_derived_age_fields_filter_and_sort(today):
    herd = [
        _cow("1", "Luna", "2020-03-01"),
        _cow("2", "Rosa", "2025-02-01", type="calf"),
        _cow("3", "Bella", "2018-06-20"),
        _cow("4", "Nube", None),
    ]
    config = bovine_field_config(today=today)

    adults = query(herd, QueryDescriptor(range_filters={"age_years": RangeFilter(minimum=2)}), config)
    by_age = query(herd, QueryDescriptor(sort_field="age_months", sort_direction="desc"), config)

    assert [r["name"] for r in adults.items] == ["Luna", "Bella"]
    assert [r["name"] for r in by_age.items] == ["Bella", "Luna", "Rosa", "Nube"]


def test_sort_by_next_due_date_puts_animals_without_due_date_last(today):
    herd = [
        _cow("1", "Luna", "2020-03-01", vaccinations=[_dose("2025-01-01", "2025-09-01")]),
        _cow("2", "Rosa", "2020-03-01"),
        _cow("3", "Bella", "2020-03-01", vaccinations=[_dose("2025-01-01", "2025-07-01")]),
    ]
    config = bovine_field_config(today=today)

    ascending = query(herd, QueryDescriptor(sort_field="next_due_date"), config)
    descending = query(herd, QueryDescriptor(sort_field="next_due_date", sort_direction="desc"), config)

    assert [r["name"] for r in ascending.items] == ["Bella", "Luna", "Rosa"]
    assert [r["name"] for r in descending.items] == ["Luna", "Bella", "Rosa"]


def test_filter_and_sort_by_vaccination_status(today):
    herd = [
        _cow("1", "Luna", "2020-03-01", vaccinations=[_dose("2025-01-01", "2025-12-01")]),
        _cow("2", "Rosa", "2020-03-01", vaccinations=[_dose("2024-01-01", "2025-01-01")]),
        _cow("3", "Bella", "2020-03-01"),
        _cow("4", "Nube", "2020-03-01", vaccinations=[_dose("2025-01-01", "2025-06-20")]),
    ]
    config = bovine_field_config(today=today)

    overdue = query(herd, QueryDescriptor(equality_filters={"vaccination_status": "overdue"}), config)
    urgency = query(herd, QueryDescriptor(sort_field="vaccination_status"), config)

    assert [r["name"] for r in overdue.items] == ["Rosa"]
    assert [r["name"] for r in urgency.items] == ["Rosa", "Nube", "Bella", "Luna"]


def test_search_covers_ear_tag_name_and_breed(today):
    herd = [_cow("1", "Luna", "2020-03-01"), _cow("2", "Rosa", "2020-03-01", breed="Angus")]
    config = bovine_field_config(today=today)

    assert query(herd, QueryDescriptor(search_term="bov002"), config).total_matched == 1
    assert query(herd, QueryDescriptor(search_term="ANG"), config).total_matched == 1
    assert query(herd, QueryDescriptor(search_term="female"), config).total_matched == 0


def test_all_dropdown_value_disables_filter(today):
    herd = [_cow("1", "Luna", "2020-03-01"), _cow("2", "Rosa", "2020-03-01", health_status="sick")]
    config = bovine_field_config(today=today)

    result = query(herd, QueryDescriptor(equality_filters={"health_status": "all"}), config)

    assert result.total_matched == 2


def test_apply_preset_merges_filters_and_resets_page():
    descriptor = QueryDescriptor(search_term="hol", equality_filters={"breed": "Holstein"}, page=4)

    result = apply_preset(descriptor, "breeding-females")

    assert result.page == 1
    assert result.search_term == "hol"
    assert result.equality_filters == {"breed": "Holstein", "gender": "female", "health_status": "healthy"}
    assert result.range_filters["age_years"] == RangeFilter(minimum=2, maximum=12)


def test_apply_unknown_preset_raises():
    with pytest.raises(KeyError):
        apply_preset(QueryDescriptor(), "no-such-preset")


def test_need_vaccination_preset_selects_stale_animals(today):
    herd = [
        _cow("1", "Luna", "2020-03-01", vaccinations=[_dose("2025-05-01")]),
        _cow("2", "Rosa", "2020-03-01", vaccinations=[_dose("2024-10-01")]),
        _cow("3", "Bella", "2020-03-01"),
    ]
    config = bovine_field_config(today=today)

    result = query(herd, apply_preset(QueryDescriptor(), "need-vaccination"), config)

    assert [r["name"] for r in result.items] == ["Rosa", "Bella"]


def test_need_vaccination_counts_never_vaccinated_and_excludes_the_90th_day(today):
    herd = [
        _cow("1", "Luna", "2020-03-01"),
        _cow("2", "Rosa", "2020-03-01", vaccinations=[_dose("2025-03-17")]),
        _cow("3", "Bella", "2020-03-01", vaccinations=[_dose("2025-03-16")]),
        _cow("4", "Nube", "2020-03-01", health_status="sick"),
    ]
    config = bovine_field_config(today=today)

    result = query(herd, apply_preset(QueryDescriptor(), "need-vaccination"), config)

    assert [r["id"] for r in result.items] == ["1", "3"]


def test_needs_vaccination(today):
    assert needs_vaccination({"vaccinations": []}, today) is True
    assert needs_vaccination({"vaccinations": [_dose(None)]}, today) is True
    assert needs_vaccination({"vaccinations": [_dose("2025-03-17")]}, today) is False
    assert needs_vaccination({"vaccinations": [_dose("2025-03-16")]}, today) is True
    assert needs_vaccination({"vaccinations": [_dose("2025-06-01")]}, today, interval_days=10) is True


def test_distance_field_selects_animals_within_a_radius(today):
    herd = [
        _cow("1", "Luna", "2020-03-01", latitude=4.60, longitude=-74.10),
        _cow("2", "Rosa", "2020-03-01", latitude=4.70, longitude=-74.10),
        _cow("3", "Bella", "2020-03-01", latitude=4.61, longitude=-74.10),
        _cow("4", "Nube", "2020-03-01"),
    ]
    config = bovine_field_config(today=today, near=(4.60, -74.10))
    descriptor = QueryDescriptor(range_filters={"distance_m": RangeFilter(maximum=5000)}, sort_field="distance_m")

    nearby = query(herd, descriptor, config)
    by_distance = query(herd, QueryDescriptor(sort_field="distance_m", sort_direction="desc"), config)

    assert [r["name"] for r in nearby.items] == ["Luna", "Bella"]
    assert [r["name"] for r in by_distance.items] == ["Rosa", "Bella", "Luna", "Nube"]
    assert "distance_m" not in bovine_field_config(today=today).derived_fields


def test_every_preset_runs(today):
    herd = [_cow("1", "Luna", "2020-03-01")]
    config = bovine_field_config(today=today)

    for preset_id in BOVINE_PRESETS:
        query(herd, apply_preset(QueryDescriptor(), preset_id), config)


def test_get_field_config_rejects_unknown_kind():
    assert get_field_config("bovines").id_field == "id"
    with pytest.raises(ValueError, match="Unknown record kind"):
        get_field_config("sheep")
