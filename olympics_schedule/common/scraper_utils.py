"""Shared pure helpers for walking captured JSON payloads.

These utilities back every JSON-based sighting source (day API, intercepted
network responses):
- recursive discovery of arrays and event-like objects
- athlete-like item detection
- name / nationality / event field fallbacks

All functions are side-effect free to ease testing.
"""
from __future__ import annotations

from typing import Any, Iterator

# Keywords used to heuristically detect participant related JSON endpoints
ATHLETE_URL_KEYWORDS: tuple[str, ...] = ("event", "competitor", "participant", "entry", "athlete")

EVENT_KEYS: tuple[str, ...] = ("eventUnitName", "disciplineName", "startDate", "eventName")
ATHLETE_NAME_KEYS: tuple[str, ...] = ("athleteName", "name", "competitorName", "displayName")


def looks_like_athlete_json_url(url: str) -> bool:
    """Return True if url likely points to participant JSON (heuristic)."""
    u = (url or "").lower()
    return any(k in u for k in ATHLETE_URL_KEYWORDS)


def first(*vals: Any) -> Any:
    """First truthy value, or '' when none."""
    for v in vals:
        if v:
            return v
    return ""


def iter_arrays(node: Any) -> Iterator[list]:
    """Yield every list reachable from *node*, outer lists before nested ones."""
    if isinstance(node, list):
        yield node
        for item in node:
            yield from iter_arrays(item)
    elif isinstance(node, dict):
        for v in node.values():
            yield from iter_arrays(v)


def find_event_objects(node: Any) -> list[dict]:
    """All dicts (at any depth) carrying at least one event-identifying key."""
    found: list[dict] = []
    if isinstance(node, list):
        for item in node:
            found.extend(find_event_objects(item))
    elif isinstance(node, dict):
        if any(k in node for k in EVENT_KEYS):
            found.append(node)
        for v in node.values():
            found.extend(find_event_objects(v))
    return found


def is_athlete_like(item: Any) -> bool:
    return isinstance(item, dict) and any(item.get(k) for k in ATHLETE_NAME_KEYS)


def athlete_arrays(node: Any) -> Iterator[list]:
    """Arrays that contain at least one athlete-like item."""
    for arr in iter_arrays(node):
        if any(is_athlete_like(x) for x in arr):
            yield arr


def athlete_name(item: dict) -> str:
    return str(first(*(item.get(k) for k in ATHLETE_NAME_KEYS)))


def nationality_code(item: dict) -> str:
    nation = item.get("nation")
    nation_code = nation.get("code") if isinstance(nation, dict) else None
    return str(first(item.get("noc"), item.get("countryCode"), nation_code))


def event_fields(ev: dict) -> tuple[str, str, str]:
    """(sport, event name, start timestamp) of an event-like object."""
    sport = first(ev.get("disciplineName"), ev.get("discipline"), ev.get("sport"))
    name = first(ev.get("eventUnitName"), ev.get("eventName"), ev.get("competitionName"), ev.get("name"))
    start = first(ev.get("startDate"), ev.get("date"))
    return str(sport), str(name), str(start)


__all__ = [
    "looks_like_athlete_json_url",
    "iter_arrays",
    "find_event_objects",
    "is_athlete_like",
    "athlete_arrays",
    "athlete_name",
    "nationality_code",
    "event_fields",
]
