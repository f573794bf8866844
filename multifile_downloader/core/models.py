"""Value types passed between the orchestrator and its callers."""

from dataclasses import dataclass, field
from pathlib import Path

from multifile_downloader.auth.credentials import validate_credentials
from multifile_downloader.extraction.analyzer import AnalysisResult
from multifile_downloader.utils.url import require_valid_url


@dataclass(frozen=True)
class PageTarget:
    """One page to process.  The URL is validated on construction, and so
    are the credentials when either field is given."""

    url: str
    username: str | None = None
    password: str | None = None

    def __post_init__(self) -> None:
        require_valid_url(self.url)
        if self.username is not None or self.password is not None:
            validate_credentials(self.username or "", self.password or "")

    @property
    def has_credentials(self) -> bool:
        return bool(self.username and self.password)


@dataclass(frozen=True)
class ResolvedDownload:
    absolute_url: str
    suggested_filename: str
    page_index: int
    file_index: int = 0


@dataclass
class PageReport:
    """Outcome of fetching and analysing one page (no downloads)."""

    index: int
    url: str
    analysis: AnalysisResult | None = None
    error: str = ""

    @property
    def available_extensions(self) -> list[str]:
        if self.analysis is None:
            return []
        return sorted(self.analysis.per_extension_counts)


@dataclass
class RunSummary:
    pages_processed: int = 0
    files_found: int = 0
    files_downloaded: int = 0
    failures: list[tuple[str, str]] = field(default_factory=list)
    collisions: list[str] = field(default_factory=list)
    saved_files: list[Path] = field(default_factory=list)

    def add_failure(self, url: str, reason: str) -> None:
        self.failures.append((url, reason))
