"""
Schedule Pipeline für die Olympics Schedule Pipeline

Koordiniert Cache Gate, Scraper und Persistenz für einen Lauf.
"""

import logging
from datetime import datetime
from typing import Any, Optional

from olympics_schedule.common.constants import CacheDecision
from olympics_schedule.core.config import Settings
from olympics_schedule.core.config import settings as default_settings
from olympics_schedule.data_collection.artifacts import ArtifactWriter, athletes_file, schedule_file
from olympics_schedule.data_collection.cache_gate import CacheGate
from olympics_schedule.data_collection.scrapers.olympics_scraper import OlympicsScheduleScraper, ScrapeResult


class SchedulePipeline:
    """Orchestriert einen kompletten Schedule-Lauf"""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        scraper: Optional[OlympicsScheduleScraper] = None,
        cache_gate: Optional[CacheGate] = None,
        writer: Optional[ArtifactWriter] = None,
    ):
        self.settings = settings or default_settings
        self.scraper = scraper or OlympicsScheduleScraper(self.settings)
        self.cache_gate = cache_gate or CacheGate(self.settings.cache_ttl_seconds)
        self.writer = writer or ArtifactWriter.from_settings(self.settings)
        self.logger = logging.getLogger("schedule_pipeline")

    @property
    def noc(self) -> Optional[str]:
        return self.settings.target_noc

    def artifact_names(self) -> list[str]:
        """Dateinamen, die ein Lauf mit der aktuellen Konfiguration erzeugt"""
        names = [schedule_file(self.noc)]
        if self.noc:
            names.append(athletes_file(self.noc))
        return names

    def cache_status(self) -> dict[str, CacheDecision]:
        return {name: self.cache_gate.check(self.writer.cached_path(name)) for name in self.artifact_names()}

    def use_cache(self) -> bool:
        """Bei frischem Cache: Artefakte nach data_dir spiegeln und True liefern

        Fehlt das public Artefakt, zählt die Kopie in data_dir.
        """
        primary = schedule_file(self.noc)
        if self.cache_gate.check(self.writer.cached_path(primary)) is not CacheDecision.FRESH:
            return False
        try:
            # unreadable cached artifact -> scrape again
            self.writer.read_schedule(primary)
        except Exception as e:
            self.logger.warning(f"Cached {primary} is unreadable, scraping again: {e}")
            return False
        for name in self.artifact_names():
            if not self.writer.public_path(name).exists() and self.writer.data_path(name).exists():
                restored = self.writer.restore(name)
                if restored:
                    self.logger.info(f"Restored cached {name} from {self.writer.data_dir}")
                continue
            if self.writer.public_path(name).exists():
                mirrored = self.writer.mirror(name)
                if mirrored:
                    self.logger.info(f"Copied cached {name} to {mirrored}")
        return True

    def persist(self, result: ScrapeResult) -> list[str]:
        """Schreibt alle Artefakte; Fehler beim Schedule-Schreiben propagieren"""
        written = [str(self.writer.write_schedule(result.schedule, self.noc))]
        if self.noc and result.athletes is not None:
            written.append(str(self.writer.write_athletes(result.athletes, self.noc)))
        last = self.writer.write_last_updated()
        if last:
            written.append(str(last))
        return written

    async def run(self) -> dict[str, Any]:
        """Führt den Pipeline-Lauf aus"""
        start_time = datetime.now()
        if self.use_cache():
            return {
                "status": "cached",
                "written": [],
                "duration_seconds": (datetime.now() - start_time).total_seconds(),
            }

        self.logger.info("Scraping Olympics schedule...")
        result = await self.scraper.scrape()
        written = self.persist(result)

        summary = {
            "status": "fallback" if result.used_fallback else "success",
            "days": len(result.schedule),
            "events": result.event_count,
            "athletes": len(result.athletes) if result.athletes is not None else None,
            "written": written,
            "duration_seconds": (datetime.now() - start_time).total_seconds(),
        }
        self.logger.info(
            f"Pipeline finished ({summary['status']}): {summary['days']} days, {summary['events']} events"
        )
        return summary


__all__ = ["SchedulePipeline"]
