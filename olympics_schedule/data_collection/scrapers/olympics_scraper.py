"""
Olympics Schedule Scraper

Rendert die offizielle Schedule-Seite, extrahiert die eingebetteten Records und
sammelt optional die "athletes of interest" für heute.

Ablauf:
1. Navigation + Consent
2. Nationalitätsfilter (nur wenn target_noc gesetzt ist)
3. Markup lesen -> PatternExtractor -> RecordNormalizer
4. Sightings sammeln -> CaptureAggregator

Leere Extraktion, Timeout oder Renderer-Fehler liefern den Fallback-Schedule.
Fehler beim Athleten-Capture behalten den extrahierten Schedule (leerer Feed).
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from olympics_schedule.common.code_mappers import CodeMapper
from olympics_schedule.common.parsing import now_in
from olympics_schedule.common.playwright_utils import SILENCE_CONSOLE_JS, RenderingCapability
from olympics_schedule.core.config import Settings
from olympics_schedule.core.config import settings as default_settings
from olympics_schedule.data_collection.capture_aggregator import CaptureAggregator, NationalityFilter
from olympics_schedule.data_collection.capture_collector import apply_nationality_filter, collect_sightings
from olympics_schedule.data_collection.fallback import fallback_schedule
from olympics_schedule.data_collection.pattern_extractor import PatternExtractor
from olympics_schedule.data_collection.record_normalizer import RecordNormalizer
from olympics_schedule.data_collection.scrapers.base import BaseScraper, RendererFactory, ScrapingConfig
from olympics_schedule.domain.contracts import AthleteFeed, DaySchedule


@dataclass
class ScrapeResult:
    schedule: list[DaySchedule]
    # None when no nationality filter is configured
    athletes: Optional[AthleteFeed] = None
    used_fallback: bool = False

    @property
    def event_count(self) -> int:
        return sum(len(d.events) for d in self.schedule)


class OlympicsScheduleScraper(BaseScraper):
    """Scraper für den Milano-Cortina-2026 Schedule"""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        renderer_factory: RendererFactory | None = None,
        extractor: PatternExtractor | None = None,
        normalizer: RecordNormalizer | None = None,
        aggregator: CaptureAggregator | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.settings = settings or default_settings
        super().__init__(ScrapingConfig.from_settings(self.settings), "olympics", renderer_factory)
        tz = self.settings.source_timezone
        self.clock = clock or (lambda: now_in(tz))
        self.extractor = extractor or PatternExtractor.from_settings(self.settings)
        self.normalizer = normalizer or RecordNormalizer(
            CodeMapper.default_venue_mapper(),
            CodeMapper.default_country_mapper(),
            tz_name=tz,
            clock=self.clock,
        )
        self.aggregator = aggregator or CaptureAggregator(
            NationalityFilter(self.settings.target_noc or "", self.settings.nationality_word),
            tz_name=tz,
            today=lambda: self.clock().date(),
        )

    @property
    def nationality_enabled(self) -> bool:
        return self.settings.nationality_enabled

    def fallback_result(self) -> ScrapeResult:
        return ScrapeResult(
            schedule=fallback_schedule(),
            athletes=[] if self.nationality_enabled else None,
            used_fallback=True,
        )

    async def scrape(self) -> ScrapeResult:
        """Kompletter Lauf, begrenzt durch overall_timeout_seconds; wirft nie."""
        try:
            return await asyncio.wait_for(self.run(), timeout=self.config.overall_timeout_seconds)
        except asyncio.TimeoutError:
            self.logger.warning(
                f"Scrape exceeded {self.config.overall_timeout_seconds}s, publishing fallback schedule"
            )
        except Exception as e:
            self.logger.error(f"Scrape failed, publishing fallback schedule: {e}", exc_info=True)
        return self.fallback_result()

    async def scrape_data(self, renderer: RenderingCapability) -> ScrapeResult:
        await self.open_page(renderer)

        if self.nationality_enabled:
            await apply_nationality_filter(renderer, self.settings)

        await renderer.evaluate(SILENCE_CONSOLE_JS)
        markup = await renderer.get_markup()
        records = self.extractor.extract(markup)
        self.logger.info(f"Recovered {len(records)} raw records from {len(markup)} chars of markup")
        schedule = self.normalizer.normalize(records)

        if not schedule:
            self.logger.warning("No events extracted, publishing fallback schedule")
            return self.fallback_result()

        athletes: Optional[AthleteFeed] = None
        if self.nationality_enabled:
            self.warn_if_unfiltered(schedule)
            athletes = await self.capture_athletes(renderer, schedule)

        return ScrapeResult(schedule=schedule, athletes=athletes)

    async def capture_athletes(self, renderer: RenderingCapability, schedule: list[DaySchedule]) -> AthleteFeed:
        """Athletes feed for today; failures keep the schedule and yield an empty feed."""
        try:
            sightings = await collect_sightings(renderer, schedule, self.settings, self.clock().date())
            return self.aggregator.aggregate_or_degrade(sightings, schedule)
        except Exception as e:
            self.logger.error(f"Athlete capture failed, keeping extracted schedule: {e}", exc_info=True)
            return []

    def warn_if_unfiltered(self, schedule: list[DaySchedule]) -> bool:
        """Warn when no event's teams mention the target nation; returns True if warned."""
        word = self.settings.nationality_word.lower()
        if any(word in (ev.teams or "").lower() for day in schedule for ev in day.events):
            return False
        self.logger.warning(
            f"No extracted event mentions '{self.settings.nationality_word}'; "
            "the nationality filter was probably not applied"
        )
        return True


__all__ = ["OlympicsScheduleScraper", "ScrapeResult"]
