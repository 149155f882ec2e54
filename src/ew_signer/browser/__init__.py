"""Browser automation components for the Extension Warehouse portal."""

from ew_signer.browser.locator import UILocator
from ew_signer.browser.session import BrowserSession
from ew_signer.browser.steps import PortalSteps

__all__ = ["UILocator", "BrowserSession", "PortalSteps"]
