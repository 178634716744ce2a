from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from meetmatch.core.errors import MalformedInput
from meetmatch.core.time_utils import (
    add_minutes,
    format_window,
    from_minutes,
    group_by_date,
    is_past,
    overlaps,
    parse_date,
    sort_slots,
    times_for_period,
    to_minutes,
    window_end,
)


@pytest.mark.parametrize("value,expected", [("00:00", 0), ("09:05", 545), ("23:59", 1439)])
def test_to_minutes(value, expected):
    assert to_minutes(value) == expected


@pytest.mark.parametrize("value", ["9:00", "24:00", "12:60", "noon", "", None, 900])
def test_to_minutes_rejects_malformed(value):
    with pytest.raises(MalformedInput):
        to_minutes(value)


def test_from_minutes_formats_and_allows_end_of_day():
    assert from_minutes(0) == "00:00"
    assert from_minutes(605) == "10:05"
    assert from_minutes(1440) == "24:00"


@pytest.mark.parametrize("value", [-1, 1441, 1.5, True])
def test_from_minutes_rejects_out_of_range(value):
    with pytest.raises(MalformedInput):
        from_minutes(value)


def test_add_minutes_and_window_end():
    assert add_minutes("09:50", 15) == "10:05"
    assert window_end("23:15", 45) == "24:00"
    with pytest.raises(MalformedInput):
        add_minutes("23:50", 15)


def test_overlap_is_half_open():
    assert overlaps("09:00", 15, "09:05", 5)
    assert overlaps("09:05", 5, "09:00", 15)
    assert not overlaps("09:00", 15, "09:15", 15)
    assert not overlaps("09:15", 15, "09:00", 15)
    assert overlaps("10:00", 45, "10:00", 5)


def test_is_past_compares_wall_clock():
    now = datetime(2030, 3, 4, 10, 0, tzinfo=ZoneInfo("UTC"))
    assert is_past("2030-03-04", "09:59", now)
    assert not is_past("2030-03-04", "10:00", now)
    assert not is_past("2030-03-05", "00:00", now)
    assert is_past("2030-03-03", "23:59", now)


def test_format_window():
    assert format_window("2025-06-01", "10:00", 15) == "2025-06-01 (Sun) 10:00-10:15"


def test_times_for_period():
    assert times_for_period("evening") == ("19:00", "20:00", "21:00", "22:00")
    with pytest.raises(MalformedInput):
        times_for_period("midnight")


def test_sort_and_group_by_date():
    slots = [
        {"slot_date": "2030-03-05", "time_of_day": "09:00"},
        {"slot_date": "2030-03-04", "time_of_day": "13:00"},
        {"slot_date": "2030-03-04", "time_of_day": "09:00"},
    ]
    ordered = sort_slots(slots)
    assert [(s["slot_date"], s["time_of_day"]) for s in ordered] == [
        ("2030-03-04", "09:00"),
        ("2030-03-04", "13:00"),
        ("2030-03-05", "09:00"),
    ]
    groups = group_by_date(slots)
    assert list(groups) == ["2030-03-04", "2030-03-05"]
    assert len(groups["2030-03-04"]) == 2


@pytest.mark.parametrize("value", ["20300304", "2030-W10-1", "2030-063", "٢٠٣٠-٠٣-٠٤"])
def test_parse_date_accepts_only_extended_calendar_form(value):
    with pytest.raises(MalformedInput):
        parse_date(value)


def test_to_minutes_rejects_non_ascii_digits():
    with pytest.raises(MalformedInput):
        to_minutes("١٠:٠٠")


def test_is_past_converts_aware_now_to_calendar_timezone():
    # 10:00 in New York is 15:00 on the UTC calendar
    now = datetime(2030, 3, 4, 10, 0, tzinfo=ZoneInfo("America/New_York"))
    assert is_past("2030-03-04", "12:00", now)
    assert not is_past("2030-03-04", "15:00", now)
