"""
Error Taxonomy

Every failure the page pipeline can see is one of these types. The retry
controller classifies on type alone: quota errors wait without spending the
page's attempt budget, everything else in the per-page family is counted.
"""

from typing import Optional


class TexOCRError(Exception):
    """Base class for all pipeline errors."""


class ConfigurationError(TexOCRError):
    """A required setting or credential is missing. Never retried."""


class RenderUnavailable(TexOCRError):
    """A page could not be rendered because it lies outside the document.

    Expected for neighbours at the document boundaries; the window builder
    treats it as an absent slot rather than a failure.
    """

    def __init__(self, page_index: int, total_pages: int):
        self.page_index = page_index
        self.total_pages = total_pages
        super().__init__(f"Page {page_index} is outside 1-{total_pages}")


class CurrentPageRenderMissing(TexOCRError):
    """The target page of a context window produced no image."""

    def __init__(self, page_index: int):
        self.page_index = page_index
        super().__init__(f"Page {page_index} could not be rendered to an image")


class ServiceQuotaExhausted(TexOCRError):
    """The recognition service is rate limited; retry after a delay."""

    def __init__(self, message: str, retry_after: Optional[float] = None):
        self.retry_after = retry_after
        super().__init__(message)


class ServiceFault(TexOCRError):
    """The request failed or the service returned an error."""


class ResponseParseError(TexOCRError):
    """The service answered, but not with the expected ``content`` field."""

    def __init__(self, message: str, raw_response: str = ""):
        self.raw_response = raw_response
        super().__init__(message)


class PageExhausted(TexOCRError):
    """A page failed on every counted attempt. Halts the run."""

    def __init__(
        self,
        page_index: int,
        attempts: int,
        last_error: Optional[BaseException] = None,
        outcome=None,
    ):
        self.page_index = page_index
        self.attempts = attempts
        self.last_error = last_error
        self.outcome = outcome
        super().__init__(
            f"Page {page_index} could not be processed after {attempts} attempts: {last_error}"
        )


class RunAborted(TexOCRError):
    """The operator cancelled the run."""
