"""Error taxonomy for the signing workflow."""

from typing import Optional


class SignerError(Exception):
    """Base class for every expected failure of a signing run."""


class InvalidInput(SignerError):
    """The source path is missing or is not a directory."""

    def __init__(self, path: str, reason: str = "is not a directory"):
        self.path = path
        self.reason = reason
        super().__init__(f'The target path "{path}" {reason}')


class InvalidSetting(SignerError):
    """A timeout, delay or other run option is out of range."""

    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason
        super().__init__(f"Invalid value for {name}: {reason}")


class CredentialMissing(SignerError):
    """No usable username or password could be resolved."""

    def __init__(self, field: str, detail: Optional[str] = None):
        self.field = field
        message = f"Missing Extension Warehouse {field}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class PackagingFailed(SignerError):
    """The extension folder could not be written to an archive."""


class LocatorTimeout(SignerError):
    """An expected interactive element never became visible."""

    def __init__(self, label: str, timeout_ms: int):
        self.label = label
        self.timeout_ms = timeout_ms
        super().__init__(f"Cannot find {label} within {timeout_ms} ms")


class FetchFailed(SignerError):
    """The signed archive could not be downloaded."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Download of {url} failed: {reason}")


class InvalidTransition(RuntimeError):
    """
    A run was asked to move backwards, skip a state or leave a terminal state.

    Not a SignerError: it marks a sequencing bug, so it is never recorded as
    a failed run.
    """
