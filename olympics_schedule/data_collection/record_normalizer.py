"""
Record Normalizer

Turns RawRecords into DaySchedules:
- HH:MM time and display date taken from the start timestamp (records without
  either are dropped),
- venue / participant codes resolved through injected CodeMappers,
- curling sheet disambiguation ("... - Sheet B"),
- status derived from the start/end window when the page still says SCHEDULED,
- grouping per day, dedup on (time, event, sport, venue), sort by time.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Callable, Iterable, Optional

from olympics_schedule.common.code_mappers import CodeMapper
from olympics_schedule.common.constants import EventStatus
from olympics_schedule.common.parsing import (
    format_display_date,
    now_in,
    parse_display_date,
    parse_instant,
    parse_time,
)
from olympics_schedule.domain.contracts import DaySchedule, RawRecord, ScheduleEvent

logger = logging.getLogger("extraction.normalizer")

_SHEET_RE = re.compile(r"Sheet\s+([A-D])")
_IN_PROGRESS_MARKERS = ("PROGRESS",)

Clock = Callable[[], datetime]


def derive_status(
    raw_status: Optional[str],
    start: str,
    end: Optional[str],
    now: datetime,
    tz_name: str = "Europe/Rome",
) -> str:
    """Resolve the published status of one event.

    A raw status that already signals "in progress" wins. A concrete status other
    than SCHEDULED is kept verbatim. Otherwise the start/end window decides:
    inside [start, end] -> IN PROGRESS, after end (or after start when there is
    no end) -> FINISHED. Malformed timestamps leave the status unchanged.
    """
    status = raw_status or EventStatus.SCHEDULED.value
    if any(marker in status.upper() for marker in _IN_PROGRESS_MARKERS):
        return EventStatus.IN_PROGRESS.value
    if status != EventStatus.SCHEDULED.value:
        return status
    try:
        start_at = parse_instant(start, tz_name)
        end_at = parse_instant(end, tz_name) if end else None
    except ValueError:
        return status
    if end_at is not None:
        if start_at <= now <= end_at:
            return EventStatus.IN_PROGRESS.value
        if end_at < now:
            return EventStatus.FINISHED.value
    elif start_at < now:
        return EventStatus.FINISHED.value
    return status


class RecordNormalizer:
    """Normalise RawRecords into sorted, de-duplicated DaySchedules."""

    def __init__(
        self,
        venue_mapper: CodeMapper | None = None,
        country_mapper: CodeMapper | None = None,
        *,
        tz_name: str = "Europe/Rome",
        clock: Clock | None = None,
    ):
        self.venue_mapper = venue_mapper or CodeMapper.default_venue_mapper()
        self.country_mapper = country_mapper or CodeMapper.default_country_mapper()
        self.tz_name = tz_name
        self.clock = clock or (lambda: now_in(tz_name))

    def normalize(self, records: Iterable[RawRecord]) -> list[DaySchedule]:
        now = self.clock()
        days: dict[str, DaySchedule] = {}
        for raw in records:
            event = self.normalize_record(raw, now)
            if event is None:
                continue
            date_str = format_display_date(raw.start_timestamp)
            days.setdefault(date_str, DaySchedule(date=date_str)).events.append(event)

        schedules = [self._dedupe_and_sort(day) for day in days.values()]
        schedules.sort(key=lambda d: parse_display_date(d.date) or datetime.max.date())
        logger.info(
            f"Extracted {len(schedules)} days with {sum(len(d.events) for d in schedules)} unique events"
        )
        return schedules

    def normalize_record(self, raw: RawRecord, now: datetime) -> Optional[ScheduleEvent]:
        time = parse_time(raw.start_timestamp)
        date_str = format_display_date(raw.start_timestamp)
        if not time or not date_str:
            return None

        event_name = raw.event_unit_name
        if raw.location_description and raw.discipline_name == "Curling":
            m = _SHEET_RE.search(raw.location_description)
            if m:
                event_name = f"{raw.event_unit_name} - Sheet {m.group(1)}"

        return ScheduleEvent(
            time=time,
            event=event_name,
            sport=raw.discipline_name,
            venue=self.venue_mapper.resolve(raw.venue_code),
            teams=self.country_mapper.resolve_joined(raw.participant_codes),
            status=derive_status(raw.status_token, raw.start_timestamp, raw.end_timestamp, now, self.tz_name),
            athletes=", ".join(raw.raw_athlete_names) or None,
            start_timestamp=raw.start_timestamp,
            end_timestamp=raw.end_timestamp,
        )

    @staticmethod
    def _dedupe_and_sort(day: DaySchedule) -> DaySchedule:
        seen: set[tuple[str, str, str, str]] = set()
        unique: list[ScheduleEvent] = []
        for ev in day.events:
            if ev.dedup_key in seen:
                continue
            seen.add(ev.dedup_key)
            unique.append(ev)
        # zero-padded 24h HH:MM sorts correctly as text; sort is stable
        unique.sort(key=lambda e: e.time)
        return DaySchedule(date=day.date, events=unique)


def to_raw_records(schedules: Iterable[DaySchedule]) -> list[RawRecord]:
    """Re-serialize normalized schedules into RawRecord shape.

    Feeding the result back through RecordNormalizer.normalize() with the same
    clock reproduces the input schedules. Events that still carry their source
    timestamps keep them; events loaded from an artifact fall back to a naive
    source-zone timestamp built from date and time.
    """
    records: list[RawRecord] = []
    for day in schedules:
        day_date = parse_display_date(day.date)
        if day_date is None:
            continue
        for ev in day.events:
            records.append(
                RawRecord(
                    discipline_name=ev.sport,
                    event_unit_name=ev.event,
                    venue_code=ev.venue,
                    start_timestamp=ev.start_timestamp or f"{day_date.isoformat()}T{ev.time}:00",
                    end_timestamp=ev.end_timestamp,
                    participant_codes=tuple(t.strip() for t in ev.teams.split(" vs ") if t.strip()),
                    raw_athlete_names=tuple(a.strip() for a in (ev.athletes or "").split(", ") if a.strip()),
                    status_token=ev.status,
                )
            )
    return records


__all__ = ["RecordNormalizer", "derive_status", "to_raw_records"]
