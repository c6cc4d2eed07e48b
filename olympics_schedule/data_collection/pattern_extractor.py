"""
Pattern Extractor für eingebettete Wettkampf-Datensätze

Scans rendered page markup for the serialized schedule records the page embeds
(`"disciplineName":"..."` followed by event, venue and timing fields) and
recovers one RawRecord per anchor occurrence.

Every field is described by an ordered list of key signatures; the first key
found inside the window wins. Window size and key order live in
ExtractionConfig so they can be tested without live markup.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Iterator, Mapping, Optional, Sequence

from olympics_schedule.common.constants import EventStatus
from olympics_schedule.domain.contracts import ExtractionError, RawRecord

logger = logging.getLogger("extraction.patterns")


@dataclass(frozen=True)
class FieldRule:
    """One key signature: `"key":"value"` inside the serialized payload."""

    key: str
    allow_empty: bool = False

    @property
    def pattern(self) -> re.Pattern[str]:
        value = r'([^"]*)' if self.allow_empty else r'([^"]+)'
        return re.compile(rf'"{re.escape(self.key)}":"{value}"')

    def search(self, window: str) -> Optional[str]:
        m = self.pattern.search(window)
        return m.group(1) if m else None

    def find_all(self, window: str) -> list[str]:
        return [m.group(1) for m in self.pattern.finditer(window)]


def _rules(*keys: str, allow_empty: bool = False) -> tuple[FieldRule, ...]:
    return tuple(FieldRule(k, allow_empty=allow_empty) for k in keys)


# field -> ordered fallback chain
DEFAULT_FIELD_RULES: Mapping[str, tuple[FieldRule, ...]] = {
    "event_unit_name": _rules("eventUnitName"),
    "venue_code": _rules("venue"),
    "start_timestamp": _rules("startDate"),
    "end_timestamp": _rules("endDate"),
    "location_description": _rules("locationDescription", allow_empty=True),
    "status_token": _rules(
        "eventStatus",
        "status",
        "eventUnitStatus",
        "scheduleStatus",
        "eventUnitScheduleStatus",
        "competitionStatus",
    ),
}

REQUIRED_FIELDS: tuple[str, ...] = ("event_unit_name", "venue_code", "start_timestamp")

TEAM_SPORTS: tuple[str, ...] = ("Curling", "Ice Hockey")
RELAY_SPORTS: tuple[str, ...] = (
    "Short Track",
    "Speed Skating",
    "Biathlon",
    "Cross-Country",
    "Ski Jumping",
    "Nordic Combined",
)


@dataclass(frozen=True)
class ExtractionConfig:
    anchor: FieldRule = FieldRule("disciplineName")
    window_size: int = 1500
    field_rules: Mapping[str, tuple[FieldRule, ...]] = field(default_factory=lambda: dict(DEFAULT_FIELD_RULES))
    required_fields: tuple[str, ...] = REQUIRED_FIELDS
    participant_rule: FieldRule = FieldRule("noc")
    athlete_name_rules: tuple[FieldRule, ...] = _rules("athleteName", "athlete", "competitorName", "name")
    team_sports: tuple[str, ...] = TEAM_SPORTS
    relay_sports: tuple[str, ...] = RELAY_SPORTS
    relay_marker: str = r"Relay|relay|Final|final"
    # More distinct codes than this is a medal-table style listing, not a head-to-head
    team_participant_limit: int = 8
    default_status: str = EventStatus.SCHEDULED.value


class PatternExtractor:
    """Recover RawRecords from raw markup via windowed key-signature search."""

    def __init__(self, config: ExtractionConfig | None = None):
        self.config = config or ExtractionConfig()
        self._relay_marker = re.compile(self.config.relay_marker)

    @classmethod
    def from_settings(cls, settings) -> "PatternExtractor":
        return cls(
            ExtractionConfig(
                window_size=settings.extraction_window_size,
                team_participant_limit=settings.team_participant_limit,
            )
        )

    def iter_windows(self, markup: str) -> Iterator[tuple[str, str]]:
        """Yield (discipline, window) for every anchor occurrence, in scan order."""
        for m in self.config.anchor.pattern.finditer(markup or ""):
            start = m.start()
            yield m.group(1), markup[start : start + self.config.window_size]

    def extract(self, markup: str) -> list[RawRecord]:
        if not isinstance(markup, str):
            raise ExtractionError(f"Expected page markup as text, got {type(markup).__name__}")
        records: list[RawRecord] = []
        for discipline, window in self.iter_windows(markup):
            record = self.record_from_window(discipline, window)
            if record is not None:
                records.append(record)
        logger.info(f"Found {len(records)} raw event entries")
        return records

    def record_from_window(self, discipline: str, window: str) -> Optional[RawRecord]:
        values = {name: self._first_match(rules, window) for name, rules in self.config.field_rules.items()}
        if any(not values.get(name) for name in self.config.required_fields):
            return None

        event_name = values["event_unit_name"]
        status = values.get("status_token") or self.config.default_status
        if status != self.config.default_status:
            logger.debug(f'"{event_name}" - status: "{status}"')

        return RawRecord(
            discipline_name=discipline,
            event_unit_name=event_name,
            venue_code=values["venue_code"],
            start_timestamp=values["start_timestamp"],
            end_timestamp=values.get("end_timestamp") or None,
            location_description=values.get("location_description") or None,
            participant_codes=self._team_codes(discipline, event_name, window),
            raw_athlete_names=self._athlete_names(window),
            status_token=status,
        )

    @staticmethod
    def _first_match(rules: Sequence[FieldRule], window: str) -> Optional[str]:
        for rule in rules:
            value = rule.search(window)
            if value is not None:
                return value
        return None

    def is_team_or_relay(self, discipline: str, event_name: str) -> bool:
        if discipline in self.config.team_sports:
            return True
        if any(s in discipline for s in self.config.relay_sports):
            return True
        return bool(self._relay_marker.search(event_name))

    def _team_codes(self, discipline: str, event_name: str, window: str) -> tuple[str, ...]:
        if not self.is_team_or_relay(discipline, event_name):
            return ()
        codes = _unique(self.config.participant_rule.find_all(window))
        if not codes or len(codes) > self.config.team_participant_limit:
            return ()
        return tuple(codes)

    def _athlete_names(self, window: str) -> tuple[str, ...]:
        names: list[str] = []
        for rule in self.config.athlete_name_rules:
            names.extend(n.strip() for n in rule.find_all(window))
        return tuple(_unique(n for n in names if n))


def _unique(values) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for v in values:
        if v in seen:
            continue
        seen.add(v)
        out.append(v)
    return out


def extract_raw_records(markup: str, config: ExtractionConfig | None = None) -> list[RawRecord]:
    """Module-level convenience wrapper around PatternExtractor.extract()."""
    return PatternExtractor(config).extract(markup)


__all__ = [
    "FieldRule",
    "ExtractionConfig",
    "PatternExtractor",
    "extract_raw_records",
    "DEFAULT_FIELD_RULES",
]
