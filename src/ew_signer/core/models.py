"""Core data models for EW Signer."""

from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, SecretStr

from ew_signer.core.errors import InvalidTransition


class SubmissionState(str, Enum):
    """States of a signing run, in the order they are visited."""
    IDLE = "idle"
    AUTHENTICATING = "authenticating"
    INITIATING = "initiating"
    UPLOADING = "uploading"
    AWAITING_PROCESSING = "awaiting_processing"
    DOWNLOADING = "downloading"
    COMPLETE = "complete"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (SubmissionState.COMPLETE, SubmissionState.FAILED)


STATE_ORDER: Tuple[SubmissionState, ...] = (
    SubmissionState.IDLE,
    SubmissionState.AUTHENTICATING,
    SubmissionState.INITIATING,
    SubmissionState.UPLOADING,
    SubmissionState.AWAITING_PROCESSING,
    SubmissionState.DOWNLOADING,
    SubmissionState.COMPLETE,
)


class StepAction(str, Enum):
    """Interaction performed once a step's element is located."""
    CLICK = "click"
    TYPE = "type"
    SELECT_FILE = "select_file"
    READ_ATTRIBUTE = "read_attribute"


class Step(BaseModel):
    """A named unit of interaction with the portal."""

    model_config = ConfigDict(frozen=True)

    label: str = Field(..., description="Human readable name used in diagnostics")
    selector: str = Field(..., description="CSS selector of the target element")
    action: StepAction = Field(StepAction.CLICK, description="Interaction to perform")
    attribute: Optional[str] = Field(None, description="DOM property read by READ_ATTRIBUTE")
    pre_delay: float = Field(0.0, ge=0, description="Fixed settle delay in seconds")
    timeout_ms: Optional[int] = Field(None, gt=0, description="Overrides the session timeout")


class Credentials(BaseModel):
    """Extension Warehouse identity and secret."""

    model_config = ConfigDict(frozen=True)

    username: str = Field(..., repr=False)
    password: SecretStr = Field(..., repr=False)


class SubmissionRun(BaseModel):
    """Value describing the progress of one signing run.

    Transitions never mutate a run; they return an updated copy.
    """

    model_config = ConfigDict(frozen=True)

    archive_path: Path
    credentials: Credentials
    output_path: Path
    state: SubmissionState = SubmissionState.IDLE
    history: Tuple[SubmissionState, ...] = (SubmissionState.IDLE,)
    download_url: Optional[str] = None
    failed_state: Optional[SubmissionState] = None
    error: Optional[str] = None
    warnings: Tuple[str, ...] = ()

    def advance(self, target: SubmissionState, **changes) -> "SubmissionRun":
        """Move to the state directly following the current one."""
        if self.state.is_terminal:
            raise InvalidTransition(f"Run already finished in state {self.state.value}")

        expected = STATE_ORDER[STATE_ORDER.index(self.state) + 1]
        if target is not expected:
            raise InvalidTransition(
                f"Cannot move from {self.state.value} to {target.value}, expected {expected.value}"
            )

        return self.model_copy(
            update={"state": target, "history": self.history + (target,), **changes}
        )

    def fail(self, error: BaseException) -> "SubmissionRun":
        """Abort the run, recording where and why it stopped."""
        if self.state.is_terminal:
            raise InvalidTransition(f"Run already finished in state {self.state.value}")

        return self.model_copy(
            update={
                "state": SubmissionState.FAILED,
                "history": self.history + (SubmissionState.FAILED,),
                "failed_state": self.state,
                "error": str(error) or type(error).__name__,
            }
        )

    def warn(self, message: str) -> "SubmissionRun":
        return self.model_copy(update={"warnings": self.warnings + (message,)})

    @property
    def succeeded(self) -> bool:
        return self.state is SubmissionState.COMPLETE

    def summary(self) -> List[str]:
        """Human readable lines describing the outcome."""
        lines = [f"State: {self.state.value}"]
        if self.failed_state:
            lines.append(f"Failed while {self.failed_state.value}: {self.error}")
        if self.download_url:
            lines.append(f"Download link: {self.download_url}")
        lines.extend(f"Warning: {warning}" for warning in self.warnings)
        return lines
