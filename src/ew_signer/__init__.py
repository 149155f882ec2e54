"""
EW Signer: signs SketchUp extensions through the Extension Warehouse website.

The portal has no API, so this package drives its web interface with
Playwright: it zips an extension folder, signs in, uploads the archive, waits
for the signature and downloads the signed ``.rbz``.
"""

__version__ = "0.1.0"

from ew_signer.config import RunConfig, Settings
from ew_signer.core.machine import SubmissionStateMachine
from ew_signer.core.models import Credentials, SubmissionRun, SubmissionState

__all__ = [
    "RunConfig",
    "Settings",
    "SubmissionStateMachine",
    "Credentials",
    "SubmissionRun",
    "SubmissionState",
]
