"""Browser session owning the Playwright resources of one signing run."""

from typing import Optional

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ew_signer.browser.locator import UILocator
from ew_signer.config import RunConfig
from ew_signer.core.errors import LocatorTimeout
from ew_signer.utils.logging import get_logger

logger = get_logger(__name__)


class BrowserSession:
    """
    One Chromium context used by a single run and closed when it ends.

    The session is never shared: a run creates it on start and closes it in
    its teardown, whatever state it stopped in.
    """

    def __init__(
        self,
        headless: bool = False,
        timeout_ms: int = 60000,
        slow_mo: int = 10
    ):
        """
        Initialize the browser session.

        Args:
            headless: Run browser in headless mode
            timeout_ms: Default timeout of every page operation
            slow_mo: Delay applied to every browser operation in ms
        """
        self.headless = headless
        self.timeout_ms = timeout_ms
        self.slow_mo = slow_mo
        self.logger = logger.bind(component="browser_session")

        self.playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None
        self._locator: Optional[UILocator] = None
        self.is_closed = False

    @classmethod
    def from_config(cls, config: RunConfig) -> "BrowserSession":
        return cls(headless=config.headless, timeout_ms=config.timeout_ms, slow_mo=config.slow_mo)

    @property
    def locator(self) -> UILocator:
        """Locator bound to the session page."""
        if self._locator is None:
            raise RuntimeError("Browser session has not been started")
        return self._locator

    async def start(self) -> None:
        """Launch Chromium and open the page of the run."""
        self.playwright = await async_playwright().start()
        self.browser = await self.playwright.chromium.launch(
            headless=self.headless,
            slow_mo=self.slow_mo
        )
        self.context = await self.browser.new_context()
        self.context.set_default_timeout(self.timeout_ms)
        self.page = await self.context.new_page()
        self._locator = UILocator(self.page, self.timeout_ms)

        self.logger.info(
            "Browser session started",
            headless=self.headless,
            timeout_ms=self.timeout_ms,
            slow_mo=self.slow_mo
        )

    async def goto(self, url: str) -> None:
        """
        Navigate and wait until the page's own requests have settled.

        Raises:
            LocatorTimeout: If the page did not reach network idle in time
        """
        self.logger.info("Opening page", url=url)
        try:
            await self.page.goto(url, wait_until="networkidle", timeout=self.timeout_ms)
        except PlaywrightTimeoutError as e:
            raise LocatorTimeout("signing page", self.timeout_ms) from e

    async def close(self) -> None:
        """Close the browser and cleanup resources."""
        if self.is_closed:
            return
        self.is_closed = True

        try:
            if self.context:
                await self.context.close()

            if self.browser:
                await self.browser.close()

            if self.playwright:
                await self.playwright.stop()

            self.logger.info("Browser session closed")

        except PlaywrightError as e:
            self.logger.error(
                "Error closing browser session",
                error=str(e)
            )
        finally:
            self.page = None
            self.context = None
            self.browser = None
            self.playwright = None
            self._locator = None
