"""Resolution of logical UI steps to visible page elements."""

import asyncio
from typing import Any, Optional

from playwright.async_api import ElementHandle, Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ew_signer.core.errors import LocatorTimeout
from ew_signer.core.models import Step, StepAction
from ew_signer.utils.logging import get_logger

logger = get_logger(__name__)


class UILocator:
    """
    Finds interactive elements on the current page and acts on them.

    Every wait goes through :meth:`find`, which is the single place where a
    missing element turns into a :class:`LocatorTimeout`. Nothing is retried.
    """

    def __init__(self, page: Page, default_timeout_ms: int):
        """
        Initialize the locator.

        Args:
            page: Page of the owning browser session
            default_timeout_ms: Timeout used when a step does not override it
        """
        self.page = page
        self.default_timeout_ms = default_timeout_ms
        self.logger = logger.bind(component="ui_locator")

    async def find(
        self,
        label: str,
        selector: str,
        timeout_ms: Optional[int] = None
    ) -> ElementHandle:
        """
        Wait for an element to be attached and visible.

        Args:
            label: Logical name of the element, used for diagnostics
            selector: CSS selector of the element
            timeout_ms: Explicit timeout, defaults to the session timeout

        Returns:
            Handle of the first matching element

        Raises:
            LocatorTimeout: If the element did not appear in time
        """
        timeout_ms = timeout_ms or self.default_timeout_ms
        self.logger.info(f"Searching {label}...", selector=selector, timeout_ms=timeout_ms)

        try:
            handle = await self.page.wait_for_selector(
                selector,
                state="visible",
                timeout=timeout_ms
            )
        except PlaywrightTimeoutError as e:
            self.logger.error(f"Cannot find {label}", selector=selector, error=str(e))
            raise LocatorTimeout(label, timeout_ms) from e

        if handle is None:
            raise LocatorTimeout(label, timeout_ms)

        return handle

    async def perform(self, step: Step, value: Optional[str] = None) -> Any:
        """
        Locate a step's element and perform its action.

        Args:
            step: Step to perform
            value: Text to type or path of the file to select

        Returns:
            The property value for READ_ATTRIBUTE steps, None otherwise
        """
        if step.pre_delay:
            self.logger.debug("Waiting for the page to settle", label=step.label, delay=step.pre_delay)
            await asyncio.sleep(step.pre_delay)

        handle = await self.find(step.label, step.selector, step.timeout_ms)

        if step.action is StepAction.CLICK:
            await handle.click()
        elif step.action is StepAction.TYPE:
            await handle.type(value or "")
        elif step.action is StepAction.SELECT_FILE:
            await self._select_file(handle, step, value)
        elif step.action is StepAction.READ_ATTRIBUTE:
            return await handle.evaluate("(element, name) => element[name]", step.attribute)

        return None

    async def _select_file(self, handle: ElementHandle, step: Step, path: Optional[str]) -> None:
        """Click the trigger and feed the file chooser it opens."""
        if not path:
            raise ValueError(f"{step.label} needs a file path")

        timeout_ms = step.timeout_ms or self.default_timeout_ms
        try:
            # The chooser only exists for a moment after the click, so the
            # listener must be in place before clicking.
            async with self.page.expect_file_chooser(timeout=timeout_ms) as chooser_info:
                await handle.click()
            chooser = await chooser_info.value
        except PlaywrightTimeoutError as e:
            raise LocatorTimeout(f"file chooser of {step.label}", timeout_ms) from e

        await chooser.set_files(path)
        self.logger.info("File selected", label=step.label, path=path)
