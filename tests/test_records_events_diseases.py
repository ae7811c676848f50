"""Tests for event and disease case registries."""

from herdbook.query import MISSING, QueryDescriptor, RangeFilter, query
from herdbook.records import disease_field_config, event_field_config, get_field_config
from herdbook.records.diseases import severity_level
from herdbook.records.events import priority_level


def _events():
    return [
        {
            "id": "EV1",
            "title": "Brucellosis booster",
            "description": "Second dose for heifers",
            "event_type": "vaccination",
            "status": "scheduled",
            "priority": "medium",
            "scheduled_date": "2025-06-20",
            "bovine_tag": "BOV001",
            "tags": ["vaccine", "heifers"],
        },
        {
            "id": "EV2",
            "title": "Hoof check",
            "description": None,
            "event_type": "health",
            "status": "completed",
            "priority": "emergency",
            "scheduled_date": "2025-06-01T09:30:00Z",
            "bovine_tag": "BOV002",
            "tags": [],
        },
        {
            "id": "EV3",
            "title": "Feed delivery",
            "description": "Silage",
            "event_type": "feeding",
            "status": "scheduled",
            "priority": "low",
            "scheduled_date": "2025-07-15",
            "tags": ["feed"],
        },
    ]


def _cases():
    return [
        {
            "id": "DC1",
            "animal_tag": "BOV001",
            "animal_name": "Luna",
            "disease_name": "Mastitis",
            "severity": "high",
            "status": "treating",
            "diagnosis_date": "2025-06-01",
            "recovery_date": None,
        },
        {
            "id": "DC2",
            "animal_tag": "BOV002",
            "animal_name": "Rosa",
            "disease_name": "Foot rot",
            "severity": "low",
            "status": "recovered",
            "diagnosis_date": "2025-04-01",
            "recovery_date": "2025-04-11",
        },
        {
            "id": "DC3",
            "animal_tag": "BOV003",
            "animal_name": "Bella",
            "disease_name": "Pneumonia",
            "severity": "critical",
            "status": "active",
            "diagnosis_date": "2025-06-10",
            "recovery_date": None,
        },
    ]


def test_priority_level_and_unknown_priority():
    assert priority_level({"priority": "emergency"}) == 5
    assert priority_level({"priority": "low"}) == 1
    assert priority_level({"priority": "whenever"}) is MISSING


def test_event_search_reaches_tags_and_description(today):
    config = event_field_config(today=today)

    assert [r["id"] for r in query(_events(), QueryDescriptor(search_term="HEIFER"), config).items] == ["EV1"]
    assert [r["id"] for r in query(_events(), QueryDescriptor(search_term="silage"), config).items] == ["EV3"]
    assert [r["id"] for r in query(_events(), QueryDescriptor(search_term="feed"), config).items] == ["EV3"]


def test_events_sort_by_priority_rank(today):
    config = event_field_config(today=today)

    result = query(_events(), QueryDescriptor(sort_field="priority", sort_direction="desc"), config)

    assert [r["id"] for r in result.items] == ["EV2", "EV1", "EV3"]


def test_events_sort_by_mixed_date_formats(today):
    config = event_field_config(today=today)

    result = query(_events(), QueryDescriptor(sort_field="scheduled_date"), config)

    assert [r["id"] for r in result.items] == ["EV2", "EV1", "EV3"]


def test_events_derived_fields_filter(today):
    config = event_field_config(today=today)

    high = query(_events(), QueryDescriptor(equality_filters={"is_high_priority": True}), config)
    next_week = query(_events(), QueryDescriptor(range_filters={"days_until": RangeFilter(minimum=0, maximum=7)}), config)

    assert [r["id"] for r in high.items] == ["EV2"]
    assert [r["id"] for r in next_week.items] == ["EV1"]


def test_events_status_filter_and_all_wildcard(today):
    config = get_field_config("events", today=today)

    scheduled = query(_events(), QueryDescriptor(equality_filters={"status": "scheduled"}), config)
    everything = query(_events(), QueryDescriptor(equality_filters={"status": "all", "event_type": "ALL"}), config)

    assert [r["id"] for r in scheduled.items] == ["EV1", "EV3"]
    assert everything.total_matched == 3


def test_severity_level():
    assert severity_level({"severity": "low"}) == 1
    assert severity_level({"severity": "critical"}) == 4
    assert severity_level({}) is MISSING


def test_disease_cases_sort_by_severity(today):
    config = disease_field_config(today=today)

    result = query(_cases(), QueryDescriptor(sort_field="severity", sort_direction="desc"), config)

    assert [r["id"] for r in result.items] == ["DC3", "DC1", "DC2"]


def test_disease_days_sick_counts_open_cases_to_today(today):
    config = disease_field_config(today=today)

    longest = query(_cases(), QueryDescriptor(sort_field="days_sick", sort_direction="desc"), config)

    # DC1: 14 days open, DC2: 10 days to recovery, DC3: 5 days open
    assert [r["id"] for r in longest.items] == ["DC1", "DC2", "DC3"]


def test_disease_active_filter_and_search(today):
    config = disease_field_config(today=today)

    active = query(_cases(), QueryDescriptor(equality_filters={"is_active": True}), config)
    by_name = query(_cases(), QueryDescriptor(search_term="rot"), config)
    by_tag = query(_cases(), QueryDescriptor(search_term="bov003"), config)

    assert [r["id"] for r in active.items] == ["DC1", "DC3"]
    assert [r["id"] for r in by_name.items] == ["DC2"]
    assert [r["id"] for r in by_tag.items] == ["DC3"]


def test_disease_diagnosis_date_range(today):
    config = disease_field_config(today=today)
    descriptor = QueryDescriptor(range_filters={"diagnosis_date": RangeFilter(minimum="2025-06-01", maximum="2025-06-30")})

    result = query(_cases(), descriptor, config)

    assert [r["id"] for r in result.items] == ["DC1", "DC3"]
