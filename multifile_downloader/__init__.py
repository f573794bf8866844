"""
multifile_downloader
====================
Fetch a list of web pages (optionally behind a forum-style login), find
every link to a recognised file type and download the files one by one.

Package structure
-----------------
multifile_downloader/
├── __init__.py       – package init and public API
├── __main__.py       – ``python -m multifile_downloader``
├── cli.py            – argparse CLI
├── config.py         – configuration constants
├── errors.py         – exception hierarchy
├── session.py        – requests.Session factory and HttpClient
├── auth/             – credential store / resolver and the login flow
├── extraction/       – extension catalog, link extractors, analyzer
├── core/             – RunContext, DownloadOrchestrator, file naming
└── utils/            – URL helpers and logging setup

Quick start
-----------
    from multifile_downloader import DownloadOrchestrator, PageTarget, RunContext

    ctx = RunContext(output_dir="downloads", selection=("mp4", "jpg"))
    summary = DownloadOrchestrator(ctx).run(
        [PageTarget("https://example.com/forum/showthread.php?t=1")]
    )
    print(summary.files_downloaded, summary.failures)
"""

from .core import DownloadOrchestrator, PageReport, PageTarget, RunContext, RunSummary
from .auth import AuthMode, AuthSession, CredentialResolver, CredentialStore
from .extraction import EXTENSION_CATALOG, FileTypeAnalyzer, get_extractor
from .session import HttpClient
from .utils import resolve_url

__all__ = [
    "DownloadOrchestrator",
    "PageReport",
    "PageTarget",
    "RunContext",
    "RunSummary",
    "AuthMode",
    "AuthSession",
    "CredentialResolver",
    "CredentialStore",
    "EXTENSION_CATALOG",
    "FileTypeAnalyzer",
    "get_extractor",
    "HttpClient",
    "resolve_url",
]
