"""
Capture Aggregator

Merges the sightings of all capture sources into the "athletes of interest"
feed: nationality filtering, name normalisation, date/time resolution,
cross-referencing against the extracted schedule, noise filtering and per-day
de-duplication.

If the merge fails unexpectedly, `aggregate_or_degrade` returns a flat list of
matching athlete names instead (degraded mode, not an error).
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date
from typing import Callable, Iterable, Optional, Sequence

from olympics_schedule.common.parsing import (
    display_date,
    format_display_date,
    iso_date_from,
    now_in,
    parse_display_date,
    parse_time,
)
from olympics_schedule.domain.contracts import (
    AggregationError,
    AthleteAppearance,
    AthleteDay,
    AthleteFeed,
    CapturedSighting,
    DaySchedule,
    DegradedAppearance,
)

logger = logging.getLogger("capture.aggregator")

# Two or more consecutive capitals mark a FAMILY-name-first rendering
_UPPER_RUN_RE = re.compile(r"[A-ZÄÖÅ]{2,}")


def normalize_name(name: str) -> str:
    """'LEHTO Kalle' -> 'Kalle Lehto'; 'kalle lehto' -> 'Kalle Lehto'."""
    parts = (name or "").split()
    if not parts:
        return ""
    head = parts[0]
    if len(parts) >= 2 and head == head.upper() and _UPPER_RUN_RE.search(head):
        parts = parts[1:] + [head]
    return " ".join(p[:1].upper() + p[1:].lower() for p in parts)


@dataclass(frozen=True)
class NationalityFilter:
    """Target affiliation: NOC-style code token plus the nationality word."""

    token: str
    word: str

    def is_noise(self, name: str) -> bool:
        return name.strip().lower() == self.word.lower()

    def matches(self, sighting: CapturedSighting) -> bool:
        if self.token and self.token.upper() in (sighting.nationality_code or "").upper():
            return True
        return bool(self.word) and self.word.lower() in (sighting.name or "").lower()


class CaptureAggregator:
    def __init__(
        self,
        nationality: NationalityFilter,
        *,
        tz_name: str = "Europe/Rome",
        today: Callable[[], date] | None = None,
    ):
        self.nationality = nationality
        self.tz_name = tz_name
        self.today = today or (lambda: now_in(tz_name).date())

    # ---------------------------- Full aggregation ----------------------------
    def aggregate(
        self, sightings: Iterable[CapturedSighting], schedules: Sequence[DaySchedule]
    ) -> list[AthleteDay]:
        today = self.today()
        grouped: dict[str, AthleteDay] = {}
        seen: dict[str, set[tuple[str, str, str]]] = {}
        dropped = 0

        for sighting in sightings:
            try:
                appearance = self.appearance_for(sighting, schedules, today)
            except Exception as e:
                raise AggregationError(f"Could not resolve sighting {sighting!r}: {e}") from e
            if appearance is None:
                dropped += 1
                continue
            date_str = format_display_date(appearance.event_iso) or display_date(today)
            day = grouped.setdefault(date_str, AthleteDay(date=date_str))
            keys = seen.setdefault(date_str, set())
            if appearance.dedup_key in keys:
                continue
            keys.add(appearance.dedup_key)
            day.athletes.append(appearance)

        days = sorted(grouped.values(), key=lambda d: parse_display_date(d.date) or today)
        logger.info(
            f"Aggregated {sum(len(d.athletes) for d in days)} appearances over {len(days)} days "
            f"({dropped} sightings rejected)"
        )
        return days

    def appearance_for(
        self,
        sighting: CapturedSighting,
        schedules: Sequence[DaySchedule],
        today: date,
    ) -> Optional[AthleteAppearance]:
        raw_name = (sighting.name or "").strip()
        if not raw_name or self.nationality.is_noise(raw_name):
            return None
        if not self.nationality.matches(sighting):
            return None

        timestamp = sighting.time_or_timestamp or ""
        sport, event = sighting.sport, sighting.event
        if not sport or not event:
            sport, event = self._cross_reference(raw_name, schedules, sport, event)

        appearance = AthleteAppearance(
            time=parse_time(timestamp),
            sport=sport or "",
            athlete=normalize_name(raw_name),
            event=event or "",
            date_iso=iso_date_from(timestamp) or today.isoformat(),
            event_iso=timestamp,
        )
        return None if appearance.is_noise else appearance

    @staticmethod
    def _cross_reference(
        raw_name: str, schedules: Sequence[DaySchedule], sport: str, event: str
    ) -> tuple[str, str]:
        """Fill missing sport/event from the first schedule event naming the athlete."""
        name_l = raw_name.lower()
        first_token = name_l.split()[0]
        for day in schedules:
            for ev in day.events:
                listed = bool(ev.athletes) and name_l in ev.athletes.lower()
                in_title = not event and first_token in (ev.event or "").lower()
                if listed or in_title:
                    return sport or ev.sport or "", event or ev.event or ""
        return sport, event

    # ---------------------------- Degraded mode ----------------------------
    def degraded(self, sightings: Iterable[CapturedSighting]) -> list[DegradedAppearance]:
        by_name: dict[str, DegradedAppearance] = {}
        for s in sightings:
            if not s.name or not self.nationality.matches(s):
                continue
            # later sightings of the same name replace earlier ones
            by_name[s.name] = DegradedAppearance(athlete=s.name, noc=s.nationality_code, url=s.url)
        return list(by_name.values())

    def aggregate_or_degrade(
        self, sightings: Sequence[CapturedSighting], schedules: Sequence[DaySchedule]
    ) -> AthleteFeed:
        try:
            return self.aggregate(sightings, schedules)
        except Exception as e:
            logger.warning(f"Athlete aggregation failed, using degraded list: {e}", exc_info=True)
            return self.degraded(sightings)


__all__ = ["CaptureAggregator", "NationalityFilter", "normalize_name"]
