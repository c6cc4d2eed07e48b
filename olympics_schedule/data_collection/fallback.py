"""Fixed minimal schedule published when extraction yields nothing or fails."""

from __future__ import annotations

import copy

from olympics_schedule.domain.contracts import DaySchedule, ScheduleEvent

FALLBACK_SCHEDULE: tuple[DaySchedule, ...] = (
    DaySchedule(
        date="February 4, 2026",
        events=[
            ScheduleEvent(
                time="10:30",
                event="Men's Downhill 1st Official Training",
                sport="Alpine Skiing",
                venue="Cortina",
            ),
            ScheduleEvent(
                time="18:05",
                event="Mixed Doubles Round Robin Session 1",
                sport="Curling",
                venue="Milano",
            ),
        ],
    ),
    DaySchedule(
        date="February 6, 2026",
        events=[ScheduleEvent(time="13:00", event="Opening Ceremony", sport="Opening Ceremony", venue="Milano")],
    ),
    DaySchedule(
        date="February 22, 2026",
        events=[ScheduleEvent(time="13:00", event="Closing Ceremony", sport="Closing Ceremony", venue="Milano")],
    ),
)


def fallback_schedule() -> list[DaySchedule]:
    """Return a fresh copy of the fallback schedule; callers may mutate it."""
    return copy.deepcopy(list(FALLBACK_SCHEDULE))
