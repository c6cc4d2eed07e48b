import asyncio

import pytest

from olympics_schedule.data_collection.scrapers.olympics_scraper import OlympicsScheduleScraper
from olympics_schedule.domain.contracts import AthleteDay
from tests.conftest import FakeRenderer, FakeRendererFactory, page_markup, record_json

DAY_API = {
    "units": [
        {
            "disciplineName": "Alpine Skiing",
            "eventUnitName": "Men's Downhill Training",
            "startDate": "2026-02-05T10:30:00+01:00",
            "competitors": [{"name": "LEHTO Kalle", "noc": "FIN"}, {"name": "BERG Erik", "noc": "SWE"}],
        }
    ]
}


def scraper_for(renderer, settings, clock):
    return OlympicsScheduleScraper(settings, renderer_factory=FakeRendererFactory(renderer), clock=clock)


@pytest.mark.asyncio
async def test_full_run_with_athletes(sample_markup, test_settings, clock):
    renderer = FakeRenderer(markup=sample_markup, day_api=DAY_API)
    result = await scraper_for(renderer, test_settings, clock).scrape()

    assert not result.used_fallback
    assert [d.date for d in result.schedule] == ["February 5, 2026", "February 6, 2026"]
    assert result.event_count == 3
    (day,) = result.athletes
    assert isinstance(day, AthleteDay)
    assert [a.athlete for a in day.athletes] == ["Kalle Lehto"]
    assert renderer.calls[0] == ("navigate", test_settings.schedule_url)
    assert ("consent",) in renderer.calls


@pytest.mark.asyncio
async def test_unfiltered_run_skips_athletes(sample_markup, unfiltered_settings, clock):
    renderer = FakeRenderer(markup=sample_markup, day_api=DAY_API)
    result = await scraper_for(renderer, unfiltered_settings, clock).scrape()
    assert result.athletes is None
    assert renderer.fetched_urls == []
    assert not any(c[0] == "interact" for c in renderer.calls)


@pytest.mark.asyncio
async def test_empty_markup_uses_fallback(test_settings, clock):
    result = await scraper_for(FakeRenderer(markup="<html></html>"), test_settings, clock).scrape()
    assert result.used_fallback
    assert [d.date for d in result.schedule] == ["February 4, 2026", "February 6, 2026", "February 22, 2026"]
    assert result.athletes == []


@pytest.mark.asyncio
async def test_navigation_failure_uses_fallback(test_settings, clock):
    result = await scraper_for(FakeRenderer(fail_navigation=True), test_settings, clock).scrape()
    assert result.used_fallback
    assert result.event_count == 4


@pytest.mark.asyncio
async def test_timeout_uses_fallback(test_settings, clock, monkeypatch):
    scraper = scraper_for(FakeRenderer(), test_settings.model_copy(update={"overall_timeout_seconds": 0.01}), clock)

    async def hang(_renderer):
        await asyncio.sleep(5)

    monkeypatch.setattr(scraper, "scrape_data", hang)
    result = await scraper.scrape()
    assert result.used_fallback


def test_unfiltered_warning(test_settings, clock, caplog):
    scraper = scraper_for(FakeRenderer(), test_settings, clock)
    from olympics_schedule.data_collection.fallback import fallback_schedule

    with caplog.at_level("WARNING"):
        assert scraper.warn_if_unfiltered(fallback_schedule()) is True
    assert "filter was probably not applied" in caplog.text


@pytest.mark.asyncio
async def test_filtered_page_without_nation_logs_warning(test_settings, clock, caplog):
    markup = page_markup(record_json("Ice Hockey", "Men's Semifinal", "IHM", "2026-02-20T16:40:00+01:00", nocs=("CAN", "USA")))
    with caplog.at_level("WARNING"):
        result = await scraper_for(FakeRenderer(markup=markup), test_settings, clock).scrape()
    assert not result.used_fallback
    assert "probably not applied" in caplog.text


class ListenerFailingRenderer(FakeRenderer):
    def on_network_response(self, callback):
        raise RuntimeError("page closed")


@pytest.mark.asyncio
async def test_athlete_capture_failure_keeps_extracted_schedule(sample_markup, test_settings, clock, caplog):
    renderer = ListenerFailingRenderer(markup=sample_markup, day_api=DAY_API)
    with caplog.at_level("ERROR"):
        result = await scraper_for(renderer, test_settings, clock).scrape()

    assert not result.used_fallback
    assert [d.date for d in result.schedule] == ["February 5, 2026", "February 6, 2026"]
    assert result.event_count == 3
    assert result.athletes == []
    assert "Athlete capture failed" in caplog.text


class DetachingRenderer(FakeRenderer):
    async def interact(self, target, *, by="text", scope=None):
        if by == "text":
            raise RuntimeError("detached element")
        return await super().interact(target, by=by, scope=scope)


@pytest.mark.asyncio
async def test_event_click_failures_keep_schedule_and_day_api_athletes(sample_markup, test_settings, clock):
    renderer = DetachingRenderer(markup=sample_markup, day_api=DAY_API)
    result = await scraper_for(renderer, test_settings, clock).scrape()

    assert not result.used_fallback
    assert result.event_count == 3
    (day,) = result.athletes
    assert [a.athlete for a in day.athletes] == ["Kalle Lehto"]
