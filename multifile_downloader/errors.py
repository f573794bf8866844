"""
Exception hierarchy for the downloader.

Only configuration-level errors are fatal.  Every per-page and per-file
error is caught by the orchestrator at its own loop boundary and turned
into a ``RunSummary.failures`` entry.
"""


class DownloaderError(Exception):
    """Base class for all downloader errors."""


class ValidationError(DownloaderError):
    """Malformed input (bad URL, empty credential field).  Rejected before
    anything enters the pipeline."""


class ConfigurationError(DownloaderError):
    """Unusable run configuration, e.g. an unwritable output directory."""


class FetchError(DownloaderError):
    """Network / transport failure while fetching a page or login endpoint."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"{reason} ({url})")
        self.url = url
        self.reason = reason


class EmptyResponseError(FetchError):
    """The page body was zero bytes.  Handled exactly like ``FetchError``."""

    def __init__(self, url: str) -> None:
        super().__init__(url, "empty response")


class NoLinksFoundError(DownloaderError):
    """A page contained no recognised links.

    Not raised by the orchestrator, which reports the condition as a normal
    zero-file result; available to callers that prefer an exception.
    """


class DownloadFailure(DownloaderError):
    """A single file could not be resolved or transferred.  Raised per file
    and caught by the orchestrator's file loop."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"{reason} ({url})")
        self.url = url
        self.reason = reason
