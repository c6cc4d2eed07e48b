"""
Base classes and utilities for browser-driven scraping.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncContextManager, AsyncIterator, Callable, Optional

from olympics_schedule.common.playwright_utils import PlaywrightRenderer, RenderingCapability, browser_page

# =============================================================================
# 1. SCRAPING CONFIGURATION
# =============================================================================


@dataclass
class ScrapingConfig:
    """Konfiguration für Browser Scraping"""

    base_url: str
    navigation_timeout_ms: int = 60000
    overall_timeout_seconds: int = 240
    wait_until: str = "networkidle"
    headless: bool = True
    user_agent: Optional[str] = None
    locale: Optional[str] = None
    viewport: dict[str, int] = field(default_factory=lambda: {"width": 1280, "height": 900})

    @classmethod
    def from_settings(cls, settings) -> "ScrapingConfig":
        return cls(
            base_url=settings.schedule_url,
            navigation_timeout_ms=settings.navigation_timeout_ms,
            overall_timeout_seconds=settings.overall_timeout_seconds,
            wait_until=settings.wait_until,
            headless=settings.headless,
            user_agent=settings.user_agent,
            locale=settings.locale,
            viewport=settings.viewport,
        )


RendererFactory = Callable[[ScrapingConfig], AsyncContextManager[RenderingCapability]]


@asynccontextmanager
async def playwright_renderer(config: ScrapingConfig) -> AsyncIterator[RenderingCapability]:
    """Startet Chromium und liefert einen PlaywrightRenderer"""
    async with browser_page(
        headless=config.headless,
        user_agent=config.user_agent,
        locale=config.locale,
        viewport=config.viewport,
    ) as page:
        yield PlaywrightRenderer(page)


# =============================================================================
# 2. BASE SCRAPER CLASSES
# =============================================================================


class BaseScraper(ABC):
    """Abstrakte Basisklasse für alle Scraper"""

    def __init__(self, config: ScrapingConfig, name: str, renderer_factory: Optional[RendererFactory] = None):
        self.config = config
        self.name = name
        self.logger = logging.getLogger(f"scraper.{name}")
        self.renderer_factory = renderer_factory or playwright_renderer

    @abstractmethod
    async def scrape_data(self, renderer: RenderingCapability) -> Any:
        """Hauptmethode zum Scrapen von Daten"""
        pass

    async def open_page(self, renderer: RenderingCapability, url: Optional[str] = None) -> None:
        """Navigiert zur Seite und bestätigt Consent-Banner"""
        target = url or self.config.base_url
        self.logger.info(f"Navigating to {target}")
        await renderer.navigate(target, timeout_ms=self.config.navigation_timeout_ms, wait_until=self.config.wait_until)
        if await renderer.accept_consent():
            self.logger.debug("Consent banner accepted")

    async def run(self) -> Any:
        """Öffnet einen Renderer und führt scrape_data aus"""
        async with self.renderer_factory(self.config) as renderer:
            return await self.scrape_data(renderer)