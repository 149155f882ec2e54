"""Tests for the browser session lifecycle."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ew_signer.browser.session import BrowserSession
from ew_signer.config import RunConfig
from ew_signer.core.errors import LocatorTimeout


@pytest.fixture
def started_session():
    """A session whose Playwright objects are mocks."""
    session = BrowserSession(headless=True, timeout_ms=2000)
    session.playwright = AsyncMock()
    session.browser = AsyncMock()
    session.context = AsyncMock()
    session.page = MagicMock()
    session.page.goto = AsyncMock()
    return session


class TestBrowserSession:
    """Test cases for BrowserSession."""

    def test_from_config(self, tmp_path):
        config = RunConfig(source_dir=tmp_path, headless=True, timeout_ms=1234, slow_mo=0)

        session = BrowserSession.from_config(config)

        assert session.headless is True
        assert session.timeout_ms == 1234
        assert session.slow_mo == 0
        assert not session.is_closed

    def test_locator_requires_start(self):
        with pytest.raises(RuntimeError):
            BrowserSession().locator

    @pytest.mark.asyncio
    async def test_goto_waits_for_network_idle(self, started_session):
        await started_session.goto("https://extensions.sketchup.com/extension/sign")

        started_session.page.goto.assert_awaited_once_with(
            "https://extensions.sketchup.com/extension/sign",
            wait_until="networkidle",
            timeout=2000
        )

    @pytest.mark.asyncio
    async def test_goto_timeout_becomes_locator_timeout(self, started_session):
        started_session.page.goto.side_effect = PlaywrightTimeoutError("Timeout 2000ms exceeded")

        with pytest.raises(LocatorTimeout) as exc_info:
            await started_session.goto("https://extensions.sketchup.com/extension/sign")

        assert exc_info.value.label == "signing page"

    @pytest.mark.asyncio
    async def test_close_releases_everything_once(self, started_session):
        context = started_session.context
        browser = started_session.browser
        playwright = started_session.playwright

        await started_session.close()
        await started_session.close()

        context.close.assert_awaited_once()
        browser.close.assert_awaited_once()
        playwright.stop.assert_awaited_once()
        assert started_session.is_closed
        assert started_session.page is None

    @pytest.mark.asyncio
    async def test_close_swallows_browser_errors(self, started_session):
        started_session.browser.close.side_effect = PlaywrightError("Target closed")

        await started_session.close()

        assert started_session.is_closed
        assert started_session.browser is None

    @pytest.mark.asyncio
    async def test_close_without_start(self):
        session = BrowserSession()

        await session.close()

        assert session.is_closed
