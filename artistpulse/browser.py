"""Playwright session driver owning one browser, one context and one page.

The driver is the single document context the rest of the engine talks
to: it navigates, evaluates functions in page context, resolves opaque
locators to element handles and reads their values. The page is reused
for every target of a batch, so nothing here is safe to call
concurrently.

Lifecycle:
    ``SessionDriver.create()`` is an async context manager that opens the
    session on entry and always closes it on exit, including on fatal
    errors and task cancellation. ``close()`` is idempotent.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Self

from playwright.async_api import (
    Browser,
    BrowserContext,
    ElementHandle,
    Error as PlaywrightError,
    Page,
    Playwright,
    TimeoutError as PlaywrightTimeoutError,
    async_playwright,
)

from config.settings import GlobalConfig, get_config
from artistpulse.exceptions import NavigationError, SessionError
from artistpulse.locators import Locator
from artistpulse.logger import get_logger

log = get_logger(__name__)

_CLICK_JS = "node => node.click()"


class SessionDriver:
    """Owns the browser process and the page every target is scraped on.

    Attributes:
        config: GlobalConfig instance for runtime configuration.
        _playwright: Playwright instance (set by ``open``).
        _browser: Chromium browser process.
        _context: Browser context carrying the fixed identity.
        _page: The single page shared across targets.

    Example:
        async with SessionDriver.create() as session:
            await session.navigate("https://open.spotify.com/artist/abc")
            title = await session.evaluate("() => document.title")
    """

    def __init__(self, config: GlobalConfig) -> None:
        self.config = config
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self._page: Page | None = None

    @classmethod
    @asynccontextmanager
    async def create(
        cls, config: GlobalConfig | None = None
    ) -> AsyncGenerator[Self, None]:
        """Open a session for the duration of the ``async with`` block.

        Raises:
            SessionError: If the browser cannot be started.
        """
        if config is None:
            config = get_config()

        instance = cls(config)
        try:
            await instance.open()
            yield instance
        finally:
            await instance.close()

    async def open(self) -> None:
        """Launch the browser and open the shared page.

        Raises:
            SessionError: If any step fails; partial resources are released.
        """
        if self._page is not None:
            return

        log.info(
            "Opening browser session",
            headless=self.config.headless,
            viewport=f"{self.config.viewport_width}x{self.config.viewport_height}",
        )

        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self.config.headless,
                args=["--no-sandbox", "--disable-setuid-sandbox"],
            )
            self._context = await self._browser.new_context(
                user_agent=self.config.user_agent,
                viewport={
                    "width": self.config.viewport_width,
                    "height": self.config.viewport_height,
                },
                locale="en-US",
            )
            self._page = await self._context.new_page()
            self._page.set_default_timeout(self.config.navigation_timeout_ms)
            self._page.set_default_navigation_timeout(self.config.navigation_timeout_ms)

        except Exception as exc:
            await self.close()
            raise SessionError(reason=str(exc), browser_type="chromium") from exc

        log.info("Browser session opened", user_agent=self.config.user_agent[:50] + "...")

    def _require_page(self) -> Page:
        if self._page is None:
            raise SessionError(reason="session is not open")
        return self._page

    async def navigate(self, url: str) -> None:
        """Load ``url``, wait for network idle, then wait the settle delay.

        Raises:
            NavigationError: On timeout, network failure or HTTP error status.
        """
        page = self._require_page()
        timeout_ms = self.config.navigation_timeout_ms

        log.debug("Navigating to URL", url=url, wait_until=self.config.navigation_wait_until)

        try:
            response = await page.goto(
                url,
                wait_until=self.config.navigation_wait_until,
                timeout=timeout_ms,
            )
        except PlaywrightTimeoutError as exc:
            raise NavigationError(
                url=url,
                reason=f"Navigation timeout after {timeout_ms}ms",
            ) from exc
        except PlaywrightError as exc:
            raise NavigationError(url=url, reason=str(exc)) from exc

        status_code = response.status if response is not None else None
        if status_code is not None and status_code >= 400:
            raise NavigationError(
                url=url,
                reason=f"HTTP {status_code}",
                status_code=status_code,
            )

        log.info("Navigation successful", url=url, status_code=status_code)

        await self.pause(self.config.settle_delay_ms)

    async def evaluate(self, expression: str, arg: Any = None) -> Any:
        """Run ``expression`` in page context and return its result."""
        page = self._require_page()
        return await page.evaluate(expression, arg)

    async def query(self, locator: Locator) -> ElementHandle | None:
        """Return the first element matching ``locator`` on the current page."""
        page = self._require_page()
        return await page.query_selector(locator.selector)

    async def activate(self, handle: ElementHandle) -> None:
        """Dispatch a DOM click on ``handle`` without actionability checks."""
        await handle.evaluate(_CLICK_JS)

    async def read(self, handle: ElementHandle, attribute: str | None = None) -> str | None:
        """Return the node's text content, or the named attribute's value."""
        if attribute is not None:
            return await handle.get_attribute(attribute)
        return await handle.text_content()

    async def pause(self, delay_ms: int) -> None:
        """Suspend for a configured delay."""
        if delay_ms > 0:
            await asyncio.sleep(delay_ms / 1000)

    async def close(self) -> None:
        """Release page, context, browser and Playwright in reverse order.

        Safe to call any number of times; close errors are logged and the
        remaining resources are still released.
        """
        if self._browser is None and self._playwright is None and self._context is None:
            return

        self._page = None

        if self._context is not None:
            try:
                await self._context.close()
            except Exception as exc:
                log.warning("Error closing context", error=str(exc))
            self._context = None

        if self._browser is not None:
            try:
                await self._browser.close()
            except Exception as exc:
                log.warning("Error closing browser", error=str(exc))
            self._browser = None

        if self._playwright is not None:
            try:
                await self._playwright.stop()
            except Exception as exc:
                log.warning("Error stopping playwright", error=str(exc))
            self._playwright = None

        log.info("Browser session closed")

    @property
    def is_open(self) -> bool:
        """True while the shared page is available."""
        return self._page is not None

    @property
    def is_connected(self) -> bool:
        """True while the browser process is alive."""
        return self._browser is not None and self._browser.is_connected()
