"""Global pytest fixtures for the test suite.

Centralizes:
 - Project root path insertion (so individual tests don't repeat sys.path hacks)
 - Builders for page markup with embedded schedule records
 - A deterministic in-memory rendering capability
 - Fixed clocks in the source timezone
"""

import json
import sys
from datetime import datetime
from pathlib import Path

import pytest
import pytz

# Ensure project root (containing olympics_schedule/) is on sys.path once
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from olympics_schedule.common.playwright_utils import PlaywrightFetchError  # noqa: E402
from olympics_schedule.core.config import Settings  # noqa: E402

ROME = pytz.timezone("Europe/Rome")
SCHEDULE_URL = "https://www.olympics.com/en/milano-cortina-2026/schedule"

# Keeps neighbouring records out of each other's extraction window
FILLER = "<div class='spacer'>" + "x" * 1600 + "</div>"


def rome(*args) -> datetime:
    return ROME.localize(datetime(*args))


def record_json(
    discipline: str,
    event: str,
    venue: str,
    start: str,
    *,
    end: str | None = None,
    location: str | None = None,
    status: str | None = None,
    status_key: str = "eventStatus",
    nocs: tuple[str, ...] = (),
    athletes: tuple[str, ...] = (),
) -> str:
    """Serialized record the way the page embeds it (compact JSON)."""
    data = {"disciplineName": discipline, "eventUnitName": event, "venue": venue, "startDate": start}
    if end:
        data["endDate"] = end
    if location is not None:
        data["locationDescription"] = location
    if status:
        data[status_key] = status
    if nocs:
        data["competitors"] = [{"noc": code} for code in nocs]
    if athletes:
        data["athletes"] = [{"athleteName": name} for name in athletes]
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)


def page_markup(*records: str) -> str:
    body = FILLER.join(f"<script type='application/json'>{r}</script>" for r in records)
    return f"<html><head><title>Schedule</title></head><body>{FILLER}{body}{FILLER}</body></html>"


class FakeRenderer:
    """In-memory rendering capability.

    Clicking a target opens its configured dialog markup and delivers its
    configured network responses to every registered listener.
    """

    def __init__(
        self,
        *,
        markup: str = "",
        day_api=None,
        dialogs: dict | None = None,
        responses: dict | None = None,
        clickable=None,
        fail_navigation: bool = False,
        url: str = SCHEDULE_URL,
    ):
        self.markup = markup
        self.day_api = day_api
        self.dialogs = dialogs or {}
        self.responses = responses or {}
        self.clickable = set(clickable) if clickable is not None else set(self.dialogs) | set(self.responses)
        self.fail_navigation = fail_navigation
        self._url = url
        self.calls: list[tuple] = []
        self.listeners: list = []
        self.fetched_urls: list[str] = []
        self._open_dialog = None

    @property
    def url(self) -> str:
        return self._url

    async def navigate(self, url, *, timeout_ms, wait_until="networkidle"):
        self.calls.append(("navigate", url))
        if self.fail_navigation:
            raise PlaywrightFetchError(f"Navigation to {url} failed: timeout")

    async def accept_consent(self):
        self.calls.append(("consent",))
        return False

    async def get_markup(self):
        return self.markup

    async def evaluate(self, script, arg=None):
        self.calls.append(("evaluate", arg))
        if arg is None:
            return None
        self.fetched_urls.append(arg)
        return self.day_api if self.day_api is not None else {"__fetch_error": 404}

    def on_network_response(self, callback):
        self.listeners.append(callback)

    def remove_listener(self, callback):
        if callback in self.listeners:
            self.listeners.remove(callback)

    async def interact(self, target, *, by="text", scope=None):
        self.calls.append(("interact", target, by))
        if target not in self.clickable:
            return False
        self._open_dialog = self.dialogs.get(target)
        for url, payload in self.responses.get(target, []):
            for cb in list(self.listeners):
                cb(url, payload)
        return True

    async def query_markup(self, selector):
        if selector == '[role="dialog"]':
            return self._open_dialog
        return None

    async def press(self, key):
        self.calls.append(("press", key))
        if key == "Escape":
            self._open_dialog = None

    async def settle(self, ms):
        self.calls.append(("settle", ms))


class FakeRendererFactory:
    """Renderer factory for BaseScraper; remembers the renderer it handed out."""

    def __init__(self, renderer: FakeRenderer):
        self.renderer = renderer
        self.configs = []

    def __call__(self, config):
        self.configs.append(config)
        renderer = self.renderer

        class _Ctx:
            async def __aenter__(self_inner):
                return renderer

            async def __aexit__(self_inner, exc_type, exc, tb):  # noqa: ARG002
                return False

        return _Ctx()


# -------------------- Clock Fixtures -------------------- #

@pytest.fixture
def fixed_now():
    """Thursday 5 February 2026, 12:00 in Milan."""
    return rome(2026, 2, 5, 12, 0)


@pytest.fixture
def clock(fixed_now):
    return lambda: fixed_now


# -------------------- Settings Fixtures -------------------- #

@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        public_dir=str(tmp_path / "public"),
        data_dir=str(tmp_path / "data"),
        target_noc="FIN",
        cache_ttl_seconds=0,
        interaction_settle_ms=0,
        dismiss_settle_ms=0,
        network_settle_ms=0,
        filter_settle_ms=0,
        overall_timeout_seconds=5,
    )


@pytest.fixture
def unfiltered_settings(test_settings):
    return test_settings.model_copy(update={"target_noc": None})


# -------------------- Markup Fixtures -------------------- #

@pytest.fixture
def sample_records():
    return [
        record_json(
            "Curling",
            "Mixed Doubles Round Robin Session 3",
            "CCU",
            "2026-02-05T19:05:00+01:00",
            end="2026-02-05T21:00:00+01:00",
            location="Cortina Curling Olympic Stadium - Sheet B",
            nocs=("FIN", "SWE", "NOR", "CAN"),
        ),
        record_json(
            "Alpine Skiing",
            "Men's Downhill Training",
            "SSC",
            "2026-02-05T10:30:00+01:00",
            end="2026-02-05T11:45:00+01:00",
            athletes=("Kalle Lehto",),
        ),
        record_json(
            "Ice Hockey",
            "Women's Preliminary Round - Group A",
            "IHM",
            "2026-02-06T16:40:00+01:00",
            nocs=("FIN", "USA"),
        ),
    ]


@pytest.fixture
def sample_markup(sample_records):
    return page_markup(*sample_records)
