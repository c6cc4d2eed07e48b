from __future__ import annotations

from collections.abc import Sequence
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Union

from olympics_schedule.common.constants import EventStatus, SightingSource

# Typed data transfer objects shared across layers


class ScheduleError(Exception):
    """Base class for pipeline errors."""


class ExtractionError(ScheduleError):
    pass


class AggregationError(ScheduleError):
    pass


@dataclass(frozen=True)
class RawRecord:
    """One embedded-record occurrence recovered from page markup."""

    discipline_name: str
    event_unit_name: str
    venue_code: str
    start_timestamp: str
    end_timestamp: Optional[str] = None
    location_description: Optional[str] = None
    # Only populated for team/relay records with a head-to-head sized field
    participant_codes: tuple[str, ...] = ()
    raw_athlete_names: tuple[str, ...] = ()
    status_token: str = EventStatus.SCHEDULED.value


@dataclass
class ScheduleEvent:
    time: str
    event: str
    sport: str
    venue: str
    teams: str = ""
    status: str = EventStatus.SCHEDULED.value
    athletes: Optional[str] = None
    # source instants, kept for status re-derivation; never serialized
    start_timestamp: Optional[str] = field(default=None, compare=False, repr=False)
    end_timestamp: Optional[str] = field(default=None, compare=False, repr=False)

    @property
    def dedup_key(self) -> tuple[str, str, str, str]:
        return (self.time, self.event, self.sport, self.venue)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data.pop("start_timestamp")
        data.pop("end_timestamp")
        if self.athletes is None:
            data.pop("athletes")
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScheduleEvent":
        return cls(
            time=str(data.get("time") or ""),
            event=str(data.get("event") or ""),
            sport=str(data.get("sport") or ""),
            venue=str(data.get("venue") or ""),
            teams=str(data.get("teams") or ""),
            status=str(data.get("status") or EventStatus.SCHEDULED.value),
            athletes=data.get("athletes") or None,
        )


@dataclass
class DaySchedule:
    date: str
    events: List[ScheduleEvent] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"date": self.date, "events": [e.to_dict() for e in self.events]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DaySchedule":
        return cls(
            date=str(data.get("date") or ""),
            events=[ScheduleEvent.from_dict(e) for e in data.get("events") or [] if isinstance(e, dict)],
        )


@dataclass(frozen=True)
class CapturedSighting:
    """Unverified athlete candidate reported by one of the capture sources."""

    name: str
    source: SightingSource
    nationality_code: str = ""
    sport: str = ""
    event: str = ""
    time_or_timestamp: str = ""
    url: str = ""


@dataclass
class AthleteAppearance:
    time: str
    sport: str
    athlete: str
    event: str
    date_iso: str
    event_iso: str = ""

    @property
    def dedup_key(self) -> tuple[str, str, str]:
        return (self.athlete, self.event, self.time)

    @property
    def is_noise(self) -> bool:
        """True when the appearance carries no schedulable information at all."""
        return not (self.time.strip() or self.sport.strip() or self.event_iso.strip())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "time": self.time,
            "sport": self.sport,
            "athlete": self.athlete,
            "event": self.event,
            "dateIso": self.date_iso,
            "eventIso": self.event_iso,
        }


@dataclass
class AthleteDay:
    date: str
    athletes: List[AthleteAppearance] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"date": self.date, "athletes": [a.to_dict() for a in self.athletes]}


@dataclass
class DegradedAppearance:
    """Shape used when aggregation fails: matched sightings, one per athlete name."""

    athlete: str
    noc: str = ""
    url: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


AthleteFeed = Union[List[AthleteDay], List[DegradedAppearance]]


def serialize_item(
    item: Union[Dict[str, Any], DaySchedule, ScheduleEvent, AthleteDay, AthleteAppearance, DegradedAppearance],
) -> Dict[str, Any]:
    """Convert a DTO or plain dict to a JSON-ready dict."""
    if hasattr(item, "to_dict"):
        return item.to_dict()  # type: ignore[union-attr]
    if isinstance(item, dict):
        return item
    return {"value": str(item)}


def serialize_items(items: Sequence[Any]) -> List[Dict[str, Any]]:
    return [serialize_item(it) for it in items]


def schedules_from_json(data: Any) -> List[DaySchedule]:
    """Rebuild DaySchedule objects from a persisted artifact (list of dicts)."""
    if not isinstance(data, list):
        raise ExtractionError("schedule artifact must be a JSON list")
    return [DaySchedule.from_dict(d) for d in data if isinstance(d, dict)]
