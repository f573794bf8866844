"""
Batch driver: fetch pages, find file links, download them.

Pages are processed strictly one after another and files within a page in
discovery order.  No per-page or per-file error ends the run; each one is
caught at its own loop boundary and recorded in the ``RunSummary``.  Only
configuration problems (``ConfigurationError``) abort, and they do so
before the first page is touched.
"""

from pathlib import Path
from typing import Iterable

from multifile_downloader.auth.credentials import (
    AuthMode,
    CredentialResolver,
    CredentialStore,
)
from multifile_downloader.auth.login import AuthSession, SessionAuthState
from multifile_downloader.config import (
    AUTH_PAGE_HEADERS,
    DEFAULT_CREDENTIALS_FILE,
    PAGE_HEADERS,
)
from multifile_downloader.core.context import RunContext
from multifile_downloader.core.models import (
    PageReport,
    PageTarget,
    ResolvedDownload,
    RunSummary,
)
from multifile_downloader.core.storage import (
    finalize_filenames,
    run_filename,
    save_page_html,
    suggest_filename,
)
from multifile_downloader.errors import (
    DownloadFailure,
    EmptyResponseError,
    FetchError,
    ValidationError,
)
from multifile_downloader.extraction.analyzer import AnalysisResult, FileTypeAnalyzer
from multifile_downloader.session import HttpClient
from multifile_downloader.utils.log import log
from multifile_downloader.utils.url import (
    UrlKind,
    classify_url,
    extract_domain,
    resolve_url,
)


def check_page_content(html: str, markers: Iterable[tuple[str, ...]]) -> list[tuple[str, ...]]:
    """Return the marker groups with no member present in *html*."""
    return [group for group in markers if not any(m in html for m in group)]


class DownloadOrchestrator:
    """Drive fetch → analyse → resolve → download for a list of pages."""

    def __init__(
        self,
        ctx: RunContext,
        client: HttpClient | None = None,
        analyzer: FileTypeAnalyzer | None = None,
        credentials: CredentialResolver | None = None,
        auth: AuthSession | None = None,
    ) -> None:
        self.ctx = ctx
        self.client = client or HttpClient()
        self.analyzer = analyzer or FileTypeAnalyzer()
        if credentials is None and ctx.auth_mode is not AuthMode.NONE:
            credentials = CredentialResolver(
                CredentialStore(DEFAULT_CREDENTIALS_FILE),
                mode=ctx.auth_mode,
                cache=ctx.credential_cache,
            )
        self.credentials = credentials
        self.auth = auth or AuthSession(self.client)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def run(
        self,
        targets: list[PageTarget],
        selection: str | Iterable[str] | None = None,
    ) -> RunSummary:
        """Process every target in order and return the run summary."""
        if selection is None:
            selection = self.ctx.selection
        self._preflight()
        summary = RunSummary()
        saved: list[Path] = []

        log.info("Starting download process – pages to process: %d", len(targets))
        log.info("Output directory : %s", self.ctx.output_dir.resolve())
        try:
            for index, target in enumerate(targets, 1):
                summary.pages_processed += 1
                log.info("[PAGE] [%d/%d] %s", index, len(targets), target.url)
                try:
                    html, state = self._fetch_page(index, target)
                except (FetchError, ValidationError) as exc:
                    self._page_failed(summary, target.url, exc)
                    continue
                self._process_page(index, target.url, html, selection, summary,
                                   saved, state)
            summary.saved_files, summary.collisions = finalize_filenames(
                saved, self.ctx.collision_policy
            )
        finally:
            self.ctx.end_run()

        self._log_summary(summary)
        return summary

    def analyze(self, targets: list[PageTarget]) -> list[PageReport]:
        """Fetch and analyse every target without downloading anything."""
        self._preflight()
        reports: list[PageReport] = []
        try:
            for index, target in enumerate(targets, 1):
                log.info("[PAGE] [%d/%d] Analysing %s", index, len(targets), target.url)
                try:
                    html, _ = self._fetch_page(index, target)
                except (FetchError, ValidationError) as exc:
                    log.error("[ERR] %s – %s", target.url, _reason(exc))
                    reports.append(PageReport(index, target.url, error=_reason(exc)))
                    continue
                analysis = self.analyzer.analyze(html)
                self._log_analysis(target.url, analysis)
                reports.append(PageReport(index, target.url, analysis=analysis))
        finally:
            self.ctx.end_run()
        return reports

    def run_local(
        self,
        paths: list[Path],
        selection: str | Iterable[str] | None = None,
        base_url: str | None = None,
    ) -> RunSummary:
        """
        Download from HTML files already on disk.  Relative links are
        resolved against *base_url*; without one they are recorded as
        failures.
        """
        if selection is None:
            selection = self.ctx.selection
        self._preflight()
        summary = RunSummary()
        saved: list[Path] = []
        try:
            for index, path in enumerate(paths, 1):
                summary.pages_processed += 1
                log.info("[PAGE] [%d/%d] %s", index, len(paths), path)
                try:
                    html = Path(path).read_text(encoding="utf-8", errors="replace")
                except OSError as exc:
                    log.error("[ERR] Cannot read %s – %s", path, exc)
                    summary.add_failure(str(path), str(exc))
                    continue
                self._process_page(index, base_url, html, selection, summary, saved)
            summary.saved_files, summary.collisions = finalize_filenames(
                saved, self.ctx.collision_policy
            )
        finally:
            self.ctx.end_run()

        self._log_summary(summary)
        return summary

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _preflight(self) -> None:
        self.ctx.prepare()
        if self.ctx.auth_mode is AuthMode.SAVED and self.credentials is not None:
            self.credentials.store.check_readable()

    def _session_for(self, domain: str, target: PageTarget) -> SessionAuthState | None:
        """Log in once per domain per run; ``None`` when no auth is needed."""
        if not target.has_credentials and self.ctx.auth_mode is AuthMode.NONE:
            return None
        if domain in self.ctx.sessions:
            return self.ctx.sessions[domain]

        if target.has_credentials:
            username, password = target.username, target.password
        elif self.credentials is not None:
            username, password = self.credentials.resolve(domain)
        else:
            raise ValidationError(f"No credentials available for {domain}")

        state = self.auth.authenticate(domain, username, password)
        self.ctx.sessions[domain] = state
        return state

    def _fetch_page(self, index: int, target: PageTarget) -> tuple[str, SessionAuthState | None]:
        domain = extract_domain(target.url)
        state = self._session_for(domain, target)

        headers = dict(PAGE_HEADERS)
        cookies = None
        if state is not None:
            headers.update(AUTH_PAGE_HEADERS)
            headers["Referer"] = f"https://{domain}/"
            cookies = state.cookies

        resp = self.client.fetch(target.url, headers=headers, cookies=cookies)
        log.info("  HTTP %s, %d bytes, %.2fs", resp.status_code, len(resp.body), resp.elapsed)
        if not resp.body:
            raise EmptyResponseError(target.url)
        if not resp.ok:
            log.warning("  HTTP %s for %s – scanning the body anyway",
                        resp.status_code, target.url)

        try:
            self.ctx.page_files.append(save_page_html(self.ctx.output_dir, index, resp.body))
        except OSError as exc:
            log.error("  [ERR] Could not save page%d.html – %s; continuing from memory",
                      index, exc)

        html = resp.text
        if state is not None:
            state.cookies.update(resp.cookies)
            self._validate_content(html)
        return html, state

    def _validate_content(self, html: str) -> None:
        missing = check_page_content(html, self.ctx.content_markers)
        for group in self.ctx.content_markers:
            label = " / ".join(group)
            if group in missing:
                log.warning("  [CHECK] Missing '%s' – page may be access restricted", label)
            else:
                log.info("  [CHECK] Contains '%s'", label)

    def _process_page(
        self,
        index: int,
        page_url: str | None,
        html: str,
        selection: str | Iterable[str],
        summary: RunSummary,
        saved: list[Path],
        state: SessionAuthState | None = None,
    ) -> None:
        analysis = self.analyzer.analyze(html)
        self._log_analysis(page_url or f"page {index}", analysis)

        links = self.analyzer.links_for(html, selection)
        if not links:
            log.info("[PAGE] %d done: no matching files", index)
            return
        summary.files_found += len(links)

        taken = {p.name for p in saved}
        ok = failed = 0
        for file_index, raw in enumerate(links, 1):
            try:
                download = self._resolve(index, file_index, page_url, raw)
                dest = self._download(download, len(links), taken, state)
            except DownloadFailure as exc:
                failed += 1
                summary.add_failure(exc.url, exc.reason)
                continue
            ok += 1
            summary.files_downloaded += 1
            saved.append(dest)
            taken.add(dest.name)

        log.info("[PAGE] %d done: found=%d downloaded=%d failed=%d",
                 index, len(links), ok, failed)

    def _download(
        self,
        download: ResolvedDownload,
        total: int,
        taken: set[str],
        state: SessionAuthState | None,
    ) -> Path:
        """Fetch one file to a name unused in this run; raise ``DownloadFailure``."""
        name = run_filename(download.suggested_filename, download.page_index,
                            download.file_index, taken)
        dest = self.ctx.output_dir / name
        log.info("[FILE] [%d/%d] %s ← %s", download.file_index, total,
                 name, download.absolute_url)
        result = self.client.download(
            download.absolute_url, dest,
            cookies=state.cookies if state is not None else None,
        )
        if not result.success:
            log.error("  [ERR] Failed to download %s – %s",
                      download.absolute_url, result.error)
            raise DownloadFailure(download.absolute_url, result.error or "download failed")
        log.info("  [SAVE] %s (%d bytes)", dest.name, result.bytes_written)
        return dest

    @staticmethod
    def _resolve(
        page_index: int,
        file_index: int,
        page_url: str | None,
        raw: str,
    ) -> ResolvedDownload:
        if page_url is None:
            if classify_url(raw) is not UrlKind.ABSOLUTE:
                log.warning("  [SKIP] %s – relative link and no base URL", raw)
                raise DownloadFailure(raw, "relative link without a base URL")
            absolute = raw
        else:
            try:
                absolute = resolve_url(page_url, raw)
            except ValidationError as exc:
                log.warning("  [SKIP] %s – %s", raw, exc)
                raise DownloadFailure(raw, str(exc)) from exc
        return ResolvedDownload(
            absolute_url=absolute,
            suggested_filename=suggest_filename(absolute, page_index, file_index),
            page_index=page_index,
            file_index=file_index,
        )

    def _page_failed(self, summary: RunSummary, url: str, exc: Exception) -> None:
        reason = _reason(exc)
        log.error("[ERR] Skipping page %s – %s", url, reason)
        summary.add_failure(url, reason)

    @staticmethod
    def _log_analysis(label: str, analysis: AnalysisResult) -> None:
        if analysis.nothing_found:
            log.info("  No downloadable files found on %s", label)
            return
        for category, counts in analysis.breakdown.items():
            log.info("  %s files:", category)
            for ext, count in counts.items():
                log.info("    .%s: %d files", ext, count)
        log.info("  Total downloadable files found: %d", analysis.grand_total)

    @staticmethod
    def _log_summary(summary: RunSummary) -> None:
        log.info(
            "Run complete. pages=%d  found=%d  downloaded=%d  failed=%d  collisions=%d",
            summary.pages_processed,
            summary.files_found,
            summary.files_downloaded,
            len(summary.failures),
            len(summary.collisions),
        )
        for url, reason in summary.failures:
            log.debug("  failure: %s – %s", url, reason)


def _reason(exc: Exception) -> str:
    return getattr(exc, "reason", None) or str(exc)
