"""
Sighting producers

Each function turns one kind of captured material into CapturedSightings:
- day API payload (fetched inside the page so cookies apply)
- intercepted network JSON responses
- dialog / page markup read after a UI interaction

Producers do not filter by nationality; that is the aggregator's job.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Iterable, Sequence

from olympics_schedule.common.constants import SightingSource
from olympics_schedule.common.parsing import text_from_html
from olympics_schedule.common.scraper_utils import (
    athlete_arrays,
    athlete_name,
    event_fields,
    find_event_objects,
    is_athlete_like,
    nationality_code,
)
from olympics_schedule.domain.contracts import CapturedSighting

logger = logging.getLogger("capture.sightings")

# Capitalised multi-word names ("Kalle Lehto"), Nordic letters included
_DOM_NAME_RE = re.compile(r"\b[A-ZÄÖÅ][a-zäöå]+(?:[ \t]+[A-ZÄÖÅ][a-zäöå]+)+\b")


def _participants(arr: list) -> Iterable[dict]:
    return (p for p in arr if is_athlete_like(p))


def sightings_from_day_api(payload: Any, url: str = "") -> list[CapturedSighting]:
    """Participants of every event-like object in the day API payload.

    When no event carries participants, athlete arrays anywhere in the payload
    are used without event context.
    """
    if not payload or (isinstance(payload, dict) and payload.get("__fetch_error")):
        return []

    out: list[CapturedSighting] = []
    for ev in find_event_objects(payload):
        sport, event_name, start = event_fields(ev)
        for arr in athlete_arrays(ev):
            for p in _participants(arr):
                out.append(
                    CapturedSighting(
                        name=athlete_name(p),
                        nationality_code=nationality_code(p),
                        sport=sport,
                        event=event_name,
                        time_or_timestamp=start,
                        source=SightingSource.DAY_API,
                        url=url,
                    )
                )

    if not out:
        for arr in athlete_arrays(payload):
            for p in _participants(arr):
                out.append(
                    CapturedSighting(
                        name=athlete_name(p),
                        nationality_code=nationality_code(p),
                        source=SightingSource.DAY_API,
                        url=url,
                    )
                )
    logger.debug(f"day-api: {len(out)} sightings from {url or 'payload'}")
    return out


def sightings_from_network_json(payload: Any, url: str = "") -> list[CapturedSighting]:
    """Athlete-like arrays in one intercepted JSON response."""
    out: list[CapturedSighting] = []
    for arr in athlete_arrays(payload):
        for p in _participants(arr):
            out.append(
                CapturedSighting(
                    name=athlete_name(p),
                    nationality_code=nationality_code(p),
                    source=SightingSource.NETWORK,
                    url=url,
                )
            )
    return out


def names_from_text(text: str) -> list[str]:
    seen: set[str] = set()
    names: list[str] = []
    for m in _DOM_NAME_RE.finditer(text or ""):
        if m.group(0) not in seen:
            seen.add(m.group(0))
            names.append(m.group(0))
    return names


def sightings_from_dom(markup: str | None, hint_tokens: Sequence[str], url: str = "") -> list[CapturedSighting]:
    """Names in an opened panel, only when its text mentions one of *hint_tokens*."""
    text = text_from_html(markup)
    if not text:
        return []
    lowered = text.lower()
    if not any(tok.lower() in lowered for tok in hint_tokens if tok):
        return []
    return [
        CapturedSighting(name=name, source=SightingSource.DOM, url=url)
        for name in names_from_text(text)
    ]


__all__ = [
    "sightings_from_day_api",
    "sightings_from_network_json",
    "sightings_from_dom",
    "names_from_text",
]
