"""Core download logic – run context, orchestrator and file naming."""

from multifile_downloader.core.context import COLLISION_POLICIES, RunContext
from multifile_downloader.core.models import (
    PageReport,
    PageTarget,
    ResolvedDownload,
    RunSummary,
)
from multifile_downloader.core.orchestrator import DownloadOrchestrator, check_page_content
from multifile_downloader.core.storage import (
    finalize_filenames,
    run_filename,
    save_page_html,
    strip_page_prefix,
    suggest_filename,
    unique_path,
)

__all__ = [
    "COLLISION_POLICIES",
    "RunContext",
    "PageReport",
    "PageTarget",
    "ResolvedDownload",
    "RunSummary",
    "DownloadOrchestrator",
    "check_page_content",
    "finalize_filenames",
    "run_filename",
    "save_page_html",
    "strip_page_prefix",
    "suggest_filename",
    "unique_path",
]
