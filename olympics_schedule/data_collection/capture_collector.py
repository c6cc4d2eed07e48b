"""
Sighting collection

Drives the rendered page to gather raw athlete sightings for today's events:

1. Day API fetched from inside the page (same-origin cookies apply)
2. Network response listener, registered for the whole interaction loop
3. Per event: click it, scan the opened dialog, close it again

The loop is strictly sequential; the fixed settle intervals after each
interaction are the only ordering guarantee towards late network responses.
"""

from __future__ import annotations

import logging
from collections import Counter
from datetime import date
from typing import Any, Optional, Sequence

from olympics_schedule.common.parsing import display_date
from olympics_schedule.common.playwright_utils import RenderingCapability, fetch_json_in_page
from olympics_schedule.common.scraper_utils import looks_like_athlete_json_url
from olympics_schedule.data_collection.sightings import (
    sightings_from_day_api,
    sightings_from_dom,
    sightings_from_network_json,
)
from olympics_schedule.domain.contracts import CapturedSighting, DaySchedule

logger = logging.getLogger("capture.collector")

DIALOG_SELECTOR = '[role="dialog"]'


async def apply_nationality_filter(renderer: RenderingCapability, settings) -> bool:
    """Open the nationality filter panel and select the target nation.

    Each opener selector is tried in order; after opening, the nationality word
    is clicked inside the open dialog (or anywhere on the page). Returns True
    when the filter was applied. Never raises.
    """
    word = settings.nationality_word
    for selector in settings.filter_opener_selectors:
        try:
            if not await renderer.interact(selector, by="selector"):
                continue
            await renderer.settle(settings.filter_settle_ms)
            if await renderer.interact(word, by="text", scope=DIALOG_SELECTOR):
                await renderer.settle(settings.filter_settle_ms)
                logger.info(f"Nationality filter '{word}' applied via {selector}")
                return True
            await renderer.press("Escape")
            await renderer.settle(settings.dismiss_settle_ms)
        except Exception as e:
            logger.debug(f"Filter opener {selector} failed: {e}")
    logger.warning(f"Nationality filter '{word}' could not be applied")
    return False


def events_for_day(schedules: Sequence[DaySchedule], day: date) -> Optional[DaySchedule]:
    label = display_date(day)
    return next((d for d in schedules if d.date == label), None)


class SightingCollector:
    """Accumulates sightings from all three sources for one rendering run."""

    def __init__(self, renderer: RenderingCapability, settings):
        self.renderer = renderer
        self.settings = settings
        self.sightings: list[CapturedSighting] = []

    def _on_response(self, url: str, payload: Any) -> None:
        if not looks_like_athlete_json_url(url):
            return
        found = sightings_from_network_json(payload, url)
        if found:
            logger.debug(f"network: {len(found)} sightings from {url}")
        self.sightings.extend(found)

    async def fetch_day_api(self, day: date) -> None:
        url = self.settings.day_api_url_template.format(date=day.isoformat())
        payload = await fetch_json_in_page(self.renderer, url)
        if isinstance(payload, dict) and payload.get("__fetch_error"):
            logger.warning(f"Day API fetch failed ({payload['__fetch_error']}) for {url}")
            return
        self.sightings.extend(sightings_from_day_api(payload, url))

    async def inspect_event(self, event_name: str) -> None:
        search = event_name.replace('"', "").strip()
        if not search:
            return
        if not await self.renderer.interact(search, by="text"):
            logger.debug(f"No clickable element for event '{search}'")
            return
        await self.renderer.settle(self.settings.interaction_settle_ms)
        markup = await self.renderer.query_markup(DIALOG_SELECTOR)
        if markup is None:
            markup = await self.renderer.query_markup("body")
        self.sightings.extend(sightings_from_dom(markup, self.settings.dom_hint_tokens, self.renderer.url))
        await self.renderer.press("Escape")
        await self.renderer.settle(self.settings.dismiss_settle_ms)

    async def collect(self, schedules: Sequence[DaySchedule], today: date) -> list[CapturedSighting]:
        today_schedule = events_for_day(schedules, today)
        if today_schedule is None or not today_schedule.events:
            logger.info(f"No events scheduled for {display_date(today)}; skipping athlete capture")
            return []

        await self.fetch_day_api(today)

        self.renderer.on_network_response(self._on_response)
        try:
            for ev in today_schedule.events:
                try:
                    await self.inspect_event(ev.event)
                except Exception as e:
                    logger.warning(f"Inspecting event '{ev.event}' failed, skipping it: {e}")
            # late responses still count
            await self.renderer.settle(self.settings.network_settle_ms)
        finally:
            self.renderer.remove_listener(self._on_response)

        counts = Counter(s.source.value for s in self.sightings)
        logger.info(f"Collected {len(self.sightings)} sightings ({dict(counts)})")
        return list(self.sightings)


async def collect_sightings(
    renderer: RenderingCapability, schedules: Sequence[DaySchedule], settings, today: date
) -> list[CapturedSighting]:
    return await SightingCollector(renderer, settings).collect(schedules, today)


__all__ = ["SightingCollector", "apply_nationality_filter", "collect_sightings", "events_for_day"]
