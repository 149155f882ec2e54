"""Submission state machine driving one signing run through the portal."""

from pathlib import Path
from typing import Awaitable, Callable, Optional, Sequence

from playwright.async_api import Error as PlaywrightError

from ew_signer.browser.session import BrowserSession
from ew_signer.browser.steps import PortalSteps
from ew_signer.config import RunConfig
from ew_signer.core.errors import FetchFailed, SignerError
from ew_signer.core.models import Credentials, SubmissionRun, SubmissionState
from ew_signer.transfer.fetcher import ResultFetcher, derive_output_path
from ew_signer.utils.logging import get_logger

logger = get_logger(__name__)

SessionFactory = Callable[[], BrowserSession]
Observer = Callable[[SubmissionRun], None]
Transition = Callable[[SubmissionRun, BrowserSession], Awaitable[SubmissionRun]]


class SubmissionStateMachine:
    """
    Signs one archive by walking the portal's upload wizard.

    Each transition is a coroutine taking the current run and the session
    and returning the run advanced by one state. The work of a transition is
    done while the run is still in its source state, so a failure records the
    state that could not be left. The session is created when :meth:`run`
    starts and closed exactly once when it ends.
    """

    def __init__(
        self,
        config: RunConfig,
        session_factory: Optional[SessionFactory] = None,
        fetcher: Optional[ResultFetcher] = None,
        observer: Optional[Observer] = None
    ):
        """
        Initialize the state machine.

        Args:
            config: Immutable configuration of the run
            session_factory: Creates the browser session, Chromium by default
            fetcher: Downloads the signed archive
            observer: Called with the run after every state change
        """
        self.config = config
        self.steps = PortalSteps.for_config(config)
        self.session_factory = session_factory or (lambda: BrowserSession.from_config(config))
        self.fetcher = fetcher or ResultFetcher(timeout=config.timeout_ms / 1000)
        self.observer = observer
        self.logger = logger.bind(component="submission_state_machine")

    @property
    def transitions(self) -> Sequence[Transition]:
        return (
            self.begin,
            self.authenticate,
            self.upload,
            self.confirm_upload,
            self.await_result,
            self.download,
        )

    def new_run(self, archive_path: Path, credentials: Credentials) -> SubmissionRun:
        return SubmissionRun(
            archive_path=Path(archive_path),
            credentials=credentials,
            output_path=derive_output_path(archive_path, self.config.output),
        )

    async def run(self, archive_path: Path, credentials: Credentials) -> SubmissionRun:
        """
        Drive a full signing run.

        Returns:
            The run in state COMPLETE or FAILED
        """
        run = self.new_run(archive_path, credentials)
        self.logger.info("Starting the signing process...", archive=str(run.archive_path))

        session = self.session_factory()
        try:
            await session.start()
            for transition in self.transitions:
                run = await transition(run, session)
        except (SignerError, PlaywrightError, OSError) as e:
            self.logger.error(
                "Signing run failed",
                state=run.state.value,
                error=str(e),
                error_type=type(e).__name__
            )
            run = run.fail(e)
            self._report(run)
        finally:
            await session.close()

        return run

    async def begin(self, run: SubmissionRun, session: BrowserSession) -> SubmissionRun:
        """Idle -> Authenticating: open the signing page."""
        await session.goto(self.config.portal_url)
        return self._advance(run, SubmissionState.AUTHENTICATING)

    async def authenticate(self, run: SubmissionRun, session: BrowserSession) -> SubmissionRun:
        """Authenticating -> Initiating: sign in and open the submission wizard."""
        locator = session.locator
        await locator.perform(self.steps.sign_in)
        await locator.perform(self.steps.email, run.credentials.username)
        await locator.perform(self.steps.next)
        await locator.perform(self.steps.password, run.credentials.password.get_secret_value())
        await locator.perform(self.steps.submit)

        await locator.perform(self.steps.begin_submission)
        return self._advance(run, SubmissionState.INITIATING)

    async def upload(self, run: SubmissionRun, session: BrowserSession) -> SubmissionRun:
        """Initiating -> Uploading: hand the archive to the file chooser."""
        await session.locator.perform(self.steps.browse, str(run.archive_path))
        return self._advance(run, SubmissionState.UPLOADING)

    async def confirm_upload(self, run: SubmissionRun, session: BrowserSession) -> SubmissionRun:
        """Uploading -> AwaitingProcessing: confirm both acknowledgment modals in order."""
        await session.locator.perform(self.steps.first_modal)
        await session.locator.perform(self.steps.second_modal)
        return self._advance(run, SubmissionState.AWAITING_PROCESSING)

    async def await_result(self, run: SubmissionRun, session: BrowserSession) -> SubmissionRun:
        """AwaitingProcessing -> Downloading: wait for the download link and read it."""
        download_url = await session.locator.perform(self.steps.download_link)
        if not download_url:
            raise SignerError(f"{self.steps.download_link.label} has no target")
        return self._advance(run, SubmissionState.DOWNLOADING, download_url=str(download_url))

    async def download(self, run: SubmissionRun, session: BrowserSession) -> SubmissionRun:
        """Downloading -> Complete: fetch the signed archive, a failure is only a warning."""
        try:
            await self.fetcher.fetch(run.download_url, run.output_path)
        except FetchFailed as e:
            self.logger.warning("Download failed!", url=e.url, reason=e.reason)
            run = run.warn(str(e))
        return self._advance(run, SubmissionState.COMPLETE)

    def _advance(self, run: SubmissionRun, target: SubmissionState, **changes) -> SubmissionRun:
        advanced = run.advance(target, **changes)
        self.logger.info("State transition", from_state=run.state.value, to_state=target.value)
        self._report(advanced)
        return advanced

    def _report(self, run: SubmissionRun) -> None:
        if self.observer is not None:
            self.observer(run)
