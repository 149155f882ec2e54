"""Catalogue of the Extension Warehouse UI steps."""

from dataclasses import dataclass

from ew_signer.config import RunConfig
from ew_signer.core.models import Step, StepAction


@dataclass(frozen=True)
class PortalSteps:
    """Every located step of a signing run, grouped in visiting order."""

    sign_in: Step
    email: Step
    next: Step
    password: Step
    submit: Step
    begin_submission: Step
    browse: Step
    first_modal: Step
    second_modal: Step
    download_link: Step

    @classmethod
    def for_config(cls, config: RunConfig) -> "PortalSteps":
        """Build the catalogue, applying the run's delays and timeouts."""
        return cls(
            sign_in=Step(label="sign in button", selector=".intro-section button"),
            email=Step(label="e-mail input", selector="input[id=email]", action=StepAction.TYPE),
            next=Step(label="next button", selector="input[id=next]"),
            password=Step(label="password input", selector="input[id=password]", action=StepAction.TYPE),
            submit=Step(label="submit button", selector="input[id=submit]"),
            # Same selector as sign_in: only one intro section exists per page.
            begin_submission=Step(label="sign button", selector=".intro-section button"),
            browse=Step(
                label="browse button",
                selector="label[for=file]",
                action=StepAction.SELECT_FILE,
                pre_delay=config.settle_delay,
            ),
            first_modal=Step(label="next button 1", selector=".md-modal:nth-child(1) button.primary"),
            second_modal=Step(label="next button 2", selector=".md-modal:nth-child(2) button.primary"),
            download_link=Step(
                label="download link",
                selector="a.link-button",
                action=StepAction.READ_ATTRIBUTE,
                attribute="href",
                timeout_ms=config.effective_processing_timeout_ms,
            ),
        )
