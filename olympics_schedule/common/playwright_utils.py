from __future__ import annotations

# Shared async Playwright helpers: browser lifecycle, consent handling and the
# rendering capability the schedule scraper drives.

import asyncio
import contextlib
import logging
import random
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Callable, Optional, Protocol, Sequence

from playwright.async_api import Page, async_playwright

from olympics_schedule.common.scraper_utils import looks_like_athlete_json_url

logger = logging.getLogger("playwright_utils")

ResponseCallback = Callable[[str, Any], None]

BROWSER_ARGS = ["--no-sandbox", "--disable-setuid-sandbox", "--disable-dev-shm-usage"]

# Runs inside the page so same-origin cookies/tokens are attached
FETCH_JSON_JS = """async (url) => {
    try {
        const resp = await fetch(url, { credentials: 'same-origin', method: 'GET' });
        if (!resp.ok) return { __fetch_error: resp.status };
        try { return await resp.json(); } catch (e) { return { __fetch_error: String(e) }; }
    } catch (e) {
        return { __fetch_error: String(e) };
    }
}"""

SILENCE_CONSOLE_JS = "() => { if (window.console) { window.console.log = () => {}; } }"


class PlaywrightFetchError(RuntimeError):
    pass


@dataclass
class FetchOptions:
    url: str
    wait_until: str = "domcontentloaded"
    wait_selectors: Sequence[str] | None = None
    timeout_ms: int = 45000
    retries: int = 3
    backoff_base: float = 1.0
    headless: bool = True
    user_agent: str | None = None
    locale: str | None = None
    viewport: dict[str, int] | None = None
    consent: bool = True


class RenderingCapability(Protocol):
    """What the schedule pipeline needs from a rendered page.

    Everything except navigate() is best effort: failures are logged and turned
    into empty / False results so callers continue with partial data.
    """

    async def navigate(self, url: str, *, timeout_ms: int, wait_until: str = "networkidle") -> None: ...

    async def accept_consent(self) -> bool: ...

    async def get_markup(self) -> str: ...

    async def evaluate(self, script: str, arg: Any = None) -> Any: ...

    def on_network_response(self, callback: ResponseCallback) -> None: ...

    def remove_listener(self, callback: ResponseCallback) -> None: ...

    async def interact(self, target: str, *, by: str = "text", scope: str | None = None) -> bool: ...

    async def query_markup(self, selector: str) -> Optional[str]: ...

    async def press(self, key: str) -> None: ...

    async def settle(self, ms: int) -> None: ...

    @property
    def url(self) -> str: ...


class PlaywrightRenderer:
    """RenderingCapability backed by a Playwright async Page."""

    # Candidate groups for text clicks: links/buttons before generic containers
    TEXT_CANDIDATES = ("a, button", "li, label, div, span")

    def __init__(self, page: Page, *, click_timeout_ms: int = 3000):
        self.page = page
        self.click_timeout_ms = click_timeout_ms
        self._handlers: dict[ResponseCallback, Callable[[Any], Any]] = {}

    @property
    def url(self) -> str:
        try:
            return self.page.url
        except Exception:
            return ""

    async def navigate(self, url: str, *, timeout_ms: int, wait_until: str = "networkidle") -> None:
        try:
            await self.page.goto(url, wait_until=wait_until, timeout=timeout_ms)
        except Exception as e:
            raise PlaywrightFetchError(f"Navigation to {url} failed: {e}") from e

    async def accept_consent(self) -> bool:
        try:
            return await accept_consent(self.page)
        except Exception as e:
            logger.debug(f"Consent handling failed: {e}")
            return False

    async def get_markup(self) -> str:
        try:
            return await self.page.content()
        except Exception as e:
            logger.warning(f"Could not read page markup: {e}")
            return ""

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        try:
            if arg is None:
                return await self.page.evaluate(script)
            return await self.page.evaluate(script, arg)
        except Exception as e:
            logger.warning(f"In-page evaluation failed: {e}")
            return None

    def on_network_response(self, callback: ResponseCallback) -> None:
        async def _handler(resp):
            try:
                ctype = (resp.headers.get("content-type") or "").lower()
                if "json" not in ctype and not looks_like_athlete_json_url(resp.url):
                    return
                data = await resp.json()
            except Exception as e:
                logger.debug(f"Skipping non-JSON response {getattr(resp, 'url', '?')}: {e}")
                return
            try:
                callback(resp.url, data)
            except Exception as e:
                logger.warning(f"Response callback failed for {resp.url}: {e}")

        self._handlers[callback] = _handler
        self.page.on("response", _handler)

    def remove_listener(self, callback: ResponseCallback) -> None:
        handler = self._handlers.pop(callback, None)
        if handler is None:
            return
        try:
            self.page.remove_listener("response", handler)
        except Exception as e:
            logger.debug(f"Could not remove response listener: {e}")

    async def _scope(self, scope: str | None):
        if scope:
            loc = self.page.locator(scope).first
            try:
                if await loc.count() > 0:
                    return loc
            except Exception:
                pass
        return self.page

    async def _click(self, loc) -> bool:
        with contextlib.suppress(Exception):
            await loc.scroll_into_view_if_needed(timeout=self.click_timeout_ms)
        try:
            await loc.click(timeout=self.click_timeout_ms, delay=30)
            return True
        except Exception as e:
            logger.debug(f"Native click failed ({e}); dispatching click event")
        try:
            await loc.dispatch_event("click")
            return True
        except Exception as e:
            logger.debug(f"Click dispatch failed: {e}")
            return False

    async def interact(self, target: str, *, by: str = "text", scope: str | None = None) -> bool:
        """Best-effort click on the first element matching *target*.

        by="text": case-insensitive substring of the element text.
        by="selector": CSS selector.
        """
        if not target:
            return False
        root = await self._scope(scope)
        try:
            if by == "selector":
                loc = root.locator(target).first
                if await loc.count() == 0:
                    return False
                return await self._click(loc)
            for candidates in self.TEXT_CANDIDATES:
                loc = root.locator(candidates, has_text=target).first
                if await loc.count() > 0:
                    return await self._click(loc)
        except Exception as e:
            logger.debug(f"Interaction with {target!r} failed: {e}")
        return False

    async def query_markup(self, selector: str) -> Optional[str]:
        try:
            loc = self.page.locator(selector).first
            if await loc.count() == 0:
                return None
            return await loc.evaluate("el => el.outerHTML")
        except Exception as e:
            logger.debug(f"Could not read markup of {selector}: {e}")
            return None

    async def press(self, key: str) -> None:
        with contextlib.suppress(Exception):
            await self.page.keyboard.press(key)

    async def settle(self, ms: int) -> None:
        try:
            await self.page.wait_for_timeout(ms)
        except Exception:
            await asyncio.sleep(ms / 1000)


async def fetch_json_in_page(renderer: RenderingCapability, url: str) -> Any:
    """GET *url* from inside the page; returns parsed JSON or {'__fetch_error': ...}."""
    result = await renderer.evaluate(FETCH_JSON_JS, url)
    if result is None:
        return {"__fetch_error": "evaluation failed"}
    return result


@asynccontextmanager
async def browser_page(*, headless: bool = True, user_agent: str | None = None, locale: str | None = None,
                       viewport: dict[str, int] | None = None) -> AsyncIterator[Page]:
    """Async context manager yielding a Playwright Page with standard teardown."""
    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=headless, args=BROWSER_ARGS)
        context_args: dict[str, Any] = {}
        if user_agent:
            context_args["user_agent"] = user_agent
        if locale:
            context_args["locale"] = locale
        if viewport:
            context_args["viewport"] = viewport
        context = await browser.new_context(**context_args)
        page = await context.new_page()
        try:
            yield page
        finally:
            with contextlib.suppress(Exception):
                await context.close()
            with contextlib.suppress(Exception):
                await browser.close()


async def accept_consent(page: Page) -> bool:
    """Attempt to accept cookie/consent banners on the given page or its frames.
    Returns True if any consent element was clicked.
    """
    candidates = [
        "#onetrust-accept-btn-handler",
        "button:has-text('Accept All')",
        "button:has-text('Accept')",
        "button[aria-label*='Accept']",
        "[id*='consent'] button",
        "button:has-text('I Accept')",
        "button:has-text('Agree')",
    ]
    frames = [page] + list(page.frames)
    for frame in frames:
        for sel in candidates:
            try:
                el = await frame.query_selector(sel)
                if el:
                    await el.click()
                    await page.wait_for_timeout(500)
                    return True
            except Exception:
                continue
    return False


async def fetch_page(opts: FetchOptions) -> str:
    """Render a page with retries and consent handling; returns final HTML.

    Raises PlaywrightFetchError after exhausting retries.
    """
    last_err: Exception | None = None
    backoff = opts.backoff_base
    for attempt in range(1, opts.retries + 1):
        try:
            async with browser_page(headless=opts.headless, user_agent=opts.user_agent, locale=opts.locale,
                                    viewport=opts.viewport) as page:
                await page.goto(opts.url, wait_until=opts.wait_until, timeout=opts.timeout_ms)
                if opts.consent:
                    with contextlib.suppress(Exception):
                        await accept_consent(page)
                for sel in opts.wait_selectors or ():
                    try:
                        await page.wait_for_selector(sel, timeout=3000)
                    except Exception:
                        continue
                html = await page.content()
                if html:
                    return html
        except Exception as e:  # pragma: no cover - network/env variability
            last_err = e
            logger.warning(f"Attempt {attempt} failed for {opts.url}: {e}")
        if attempt < opts.retries:
            jitter = random.uniform(0, 0.5)
            await asyncio.sleep(backoff + jitter)
            backoff = min(backoff * 2, 8.0)
    raise PlaywrightFetchError(f"Failed to fetch {opts.url} after {opts.retries} attempts: {last_err}")
