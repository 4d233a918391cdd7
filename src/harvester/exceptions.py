"""Exception types raised by the harvester."""

from typing import Optional


class HarvesterError(Exception):
    """Base class for all harvester errors."""


class FetchExhaustedError(HarvesterError):
    """Raised when a detail page could not be opened within the retry budget."""

    def __init__(self, url: str, attempts: int, last_error: Optional[BaseException] = None):
        self.url = url
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"gave up on {url} after {attempts} attempt(s): {describe_error(last_error)}"
        )


class ListingNotReadyError(HarvesterError):
    """Raised when the listing never renders an item link within the timeout."""

    def __init__(self, url: str, cause: Optional[BaseException] = None):
        self.url = url
        self.cause = cause
        super().__init__(f"listing not ready at {url}: {describe_error(cause)}")


class ListingNavigationError(HarvesterError):
    """Raised when the initial navigation to the listing keeps failing."""

    def __init__(self, url: str, cause: Optional[BaseException] = None):
        self.url = url
        self.cause = cause
        super().__init__(f"could not open listing {url}: {describe_error(cause)}")


class JournalError(HarvesterError):
    """Raised when an existing journal cannot be read at startup."""

    def __init__(self, path: str, cause: Optional[BaseException] = None):
        self.path = path
        self.cause = cause
        super().__init__(f"cannot read journal {path}: {describe_error(cause)}")


class BrowserLaunchError(HarvesterError):
    """Raised when the rendering substrate cannot be started."""

    def __init__(self, browser_type: str, cause: Optional[BaseException] = None):
        self.browser_type = browser_type
        self.cause = cause
        super().__init__(f"failed to launch {browser_type}: {describe_error(cause)}")


def describe_error(error: Optional[BaseException]) -> str:
    """Short single-line description of an exception for logs and journals."""
    if error is None:
        return "unknown error"
    text = str(error).strip()
    message = text.splitlines()[0] if text else ""
    return message or type(error).__name__
