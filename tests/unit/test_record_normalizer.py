from datetime import timedelta

import pytest

from olympics_schedule.common.code_mappers import CodeMapper
from olympics_schedule.data_collection.pattern_extractor import extract_raw_records
from olympics_schedule.data_collection.record_normalizer import RecordNormalizer, derive_status, to_raw_records
from olympics_schedule.domain.contracts import RawRecord
from tests.conftest import rome

START = "2026-02-10T14:00:00+01:00"
END = "2026-02-10T15:00:00+01:00"


def raw(event="Men's 10km Sprint", discipline="Biathlon", venue="ANS", start=START, **kw):
    return RawRecord(discipline_name=discipline, event_unit_name=event, venue_code=venue, start_timestamp=start, **kw)


@pytest.mark.parametrize(
    "now,expected",
    [
        (rome(2026, 2, 10, 13, 55), "SCHEDULED"),
        (rome(2026, 2, 10, 14, 30), "IN PROGRESS"),
        (rome(2026, 2, 10, 15, 0), "IN PROGRESS"),
        (rome(2026, 2, 10, 15, 1), "FINISHED"),
    ],
)
def test_status_derived_from_window(now, expected):
    assert derive_status("SCHEDULED", START, END, now) == expected


def test_status_without_end_finishes_after_start():
    assert derive_status("SCHEDULED", START, None, rome(2026, 2, 10, 14, 1)) == "FINISHED"
    assert derive_status("SCHEDULED", START, None, rome(2026, 2, 10, 13, 59)) == "SCHEDULED"


def test_progress_token_wins_and_other_statuses_are_kept():
    late = rome(2026, 2, 11, 9, 0)
    assert derive_status("INPROGRESS", START, END, late) == "IN PROGRESS"
    assert derive_status("POSTPONED", START, END, late) == "POSTPONED"
    assert derive_status(None, START, END, late) == "FINISHED"


def test_malformed_timestamp_leaves_status_unchanged():
    assert derive_status("SCHEDULED", "not-a-date", END, rome(2026, 2, 11, 9, 0)) == "SCHEDULED"


def test_normalize_groups_sorts_and_resolves(sample_markup, clock):
    schedules = RecordNormalizer(clock=clock).normalize(extract_raw_records(sample_markup))
    assert [d.date for d in schedules] == ["February 5, 2026", "February 6, 2026"]

    feb5 = schedules[0].events
    assert [e.time for e in feb5] == ["10:30", "19:05"]
    downhill, curling = feb5
    assert downhill.venue == "Cortina"
    assert downhill.status == "FINISHED"
    assert downhill.athletes == "Kalle Lehto"
    assert downhill.teams == ""
    assert curling.event == "Mixed Doubles Round Robin Session 3 - Sheet B"
    assert curling.teams == "Finland vs Sweden vs Norway vs Canada"
    assert curling.venue == "Milano"
    assert curling.status == "SCHEDULED"
    assert curling.athletes is None

    hockey = schedules[1].events[0]
    assert hockey.teams == "Finland vs United States"


def test_duplicates_collapse_to_first_occurrence(clock):
    records = [raw(status_token="POSTPONED"), raw(), raw(event="Women's 7.5km Sprint")]
    (day,) = RecordNormalizer(clock=clock).normalize(records)
    assert len(day.events) == 2
    assert day.events[0].status == "POSTPONED"


def test_records_without_time_are_dropped(clock):
    records = [raw(start="2026-02-10"), raw(start="TBD"), raw()]
    (day,) = RecordNormalizer(clock=clock).normalize(records)
    assert len(day.events) == 1


def test_sheet_suffix_only_for_curling(clock):
    records = [
        raw(discipline="Curling", event="Women's Round Robin", venue="CCU", location_description="Sheet D"),
        raw(discipline="Ice Hockey", event="Men's Playoff", venue="IHM", location_description="Rink Sheet A"),
        raw(discipline="Curling", event="Men's Round Robin", venue="CCU", location_description="Main hall"),
    ]
    events = {e.sport + e.event: e for e in RecordNormalizer(clock=clock).normalize(records)[0].events}
    assert "CurlingWomen's Round Robin - Sheet D" in events
    assert "Ice HockeyMen's Playoff" in events
    assert "CurlingMen's Round Robin" in events


def test_unknown_codes_pass_through(clock):
    mapper = CodeMapper.from_mapping({"XYZ": "Somewhere"})
    normalizer = RecordNormalizer(mapper, CodeMapper.from_mapping({}), clock=clock)
    (day,) = normalizer.normalize([raw(venue="QQQ", participant_codes=("AAA", "BBB"))])
    assert day.events[0].venue == "QQQ"
    assert day.events[0].teams == "AAA vs BBB"


def test_normalize_is_idempotent(sample_markup, clock):
    normalizer = RecordNormalizer(clock=clock)
    first = normalizer.normalize(extract_raw_records(sample_markup))
    second = normalizer.normalize(to_raw_records(first))
    assert [d.to_dict() for d in second] == [d.to_dict() for d in first]


def test_normalize_is_idempotent_for_utc_timestamps(clock):
    # 11:30Z is 12:30 in Milan, still ahead of the 12:00 clock
    luge = raw(event="Women's Singles Run 1", discipline="Luge", venue="CSL", start="2026-02-05T11:30:00Z")
    normalizer = RecordNormalizer(clock=clock)
    first = normalizer.normalize([luge])
    second = normalizer.normalize(to_raw_records(first))
    assert first[0].events[0].status == "SCHEDULED"
    assert second == first
    assert second[0].events[0].status == "SCHEDULED"


def test_source_timestamps_stay_out_of_artifacts(clock):
    (day,) = RecordNormalizer(clock=clock).normalize([raw(end_timestamp=END)])
    event = day.events[0]
    assert event.start_timestamp == START
    assert "start_timestamp" not in event.to_dict()
    assert "end_timestamp" not in event.to_dict()


def test_events_sorted_by_time_within_day(clock):
    base = "2026-02-12T{}:00+01:00"
    records = [raw(event=f"Heat {t}", start=base.format(t)) for t in ("18:30", "09:05", "13:45", "09:00")]
    (day,) = RecordNormalizer(clock=clock).normalize(records)
    assert [e.time for e in day.events] == ["09:00", "09:05", "13:45", "18:30"]


def test_naive_timestamps_use_source_zone(clock, fixed_now):
    start = (fixed_now - timedelta(hours=2)).strftime("%Y-%m-%dT%H:%M:%S")
    end = (fixed_now - timedelta(hours=1)).strftime("%Y-%m-%dT%H:%M:%S")
    (day,) = RecordNormalizer(clock=clock).normalize([raw(start=start, end_timestamp=end)])
    assert day.events[0].status == "FINISHED"
