"""
Command-line interface for the multi-file page downloader.
"""

import argparse
import getpass
import logging
import sys
import time
from pathlib import Path

import urllib3

from multifile_downloader.auth.credentials import (
    AuthMode,
    CredentialResolver,
    CredentialStore,
    terminal_confirm,
    terminal_prompt,
)
from multifile_downloader.auth.login import AuthSession, marker_predicate
from multifile_downloader.config import (
    DEFAULT_CREDENTIALS_FILE,
    DEFAULT_OUTPUT,
    DEFAULT_SELECTION,
    LOGIN_SUCCESS_MARKER,
)
from multifile_downloader.core.context import COLLISION_POLICIES, RunContext
from multifile_downloader.core.models import PageTarget, RunSummary
from multifile_downloader.core.orchestrator import DownloadOrchestrator
from multifile_downloader.errors import ConfigurationError, ValidationError
from multifile_downloader.extraction.analyzer import ALL, FileTypeAnalyzer
from multifile_downloader.extraction.catalog import normalise_extensions
from multifile_downloader.extraction.links import get_extractor
from multifile_downloader.session import HttpClient
from multifile_downloader.utils.log import log, setup_logging
from multifile_downloader.utils.url import require_valid_url

EXIT_USAGE = 2


def _add_fetch_options(p: argparse.ArgumentParser) -> None:
    """Options shared by the commands that fetch pages over HTTP."""
    p.add_argument(
        "urls", nargs="+", metavar="URL",
        help="Page URL(s) to process, in order (http:// or https://)",
    )
    p.add_argument(
        "--auth", choices=[m.value for m in AuthMode], default=AuthMode.NONE.value,
        help="none: no login; manual: prompt for credentials per domain; "
             "saved: use the credentials file, prompting when a domain is "
             "missing (default: none)",
    )
    p.add_argument("--username", help="Username used for every page")
    p.add_argument(
        "--password",
        help="Password used for every page (prompted when --username is "
             "given without it)",
    )
    p.add_argument(
        "--credentials-file", default=DEFAULT_CREDENTIALS_FILE,
        help=f"Credentials file (default: {DEFAULT_CREDENTIALS_FILE})",
    )
    p.add_argument(
        "--login-marker", default=LOGIN_SUCCESS_MARKER,
        help=f"Text that marks a successful login (default: {LOGIN_SUCCESS_MARKER!r})",
    )
    p.add_argument(
        "--no-verify-ssl", dest="verify_ssl", action="store_false", default=True,
        help="Disable TLS certificate verification",
    )


def _add_download_options(p: argparse.ArgumentParser) -> None:
    """Options shared by the commands that save files."""
    p.add_argument(
        "--output", default=DEFAULT_OUTPUT,
        help=f"Output directory (default: {DEFAULT_OUTPUT})",
    )
    p.add_argument(
        "--ext", default=DEFAULT_SELECTION, metavar="EXTS",
        help="'all' for every recognised file type, or a comma/space "
             "separated list such as 'mp4,jpg' (default: all)",
    )
    p.add_argument(
        "--parser", choices=("regex", "soup"), default="regex",
        help="Link extractor: attribute scanner (regex) or BeautifulSoup "
             "(soup) (default: regex)",
    )
    p.add_argument(
        "--collisions", choices=COLLISION_POLICIES, default="overwrite",
        help="What to do when two files end up with the same name: "
             "overwrite (default) or suffix",
    )
    p.add_argument(
        "--no-progress", dest="progress", action="store_false", default=True,
        help="Hide the per-file progress bar",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="multifile-downloader",
        description="Download every linked file of a chosen type from one or "
                    "more web pages, logging in to forum-style sites if needed.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  multifile-downloader download https://example.com/page.html\n"
            "  multifile-downloader download URL1 URL2 --ext mp4,jpg --auth saved\n"
            "  multifile-downloader analyze https://example.com/page.html\n"
            "  multifile-downloader local page1.html --base-url https://example.com/\n"
            "  multifile-downloader credentials save --domain example.com --username me\n"
        ),
    )
    parser.add_argument(
        "--debug", action="store_true",
        help="Enable verbose debug logging",
    )
    parser.add_argument(
        "--log-file",
        help="Write detailed logs to this file (always at DEBUG level)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("download", help="Fetch pages and download their files")
    _add_fetch_options(p)
    _add_download_options(p)
    p.add_argument(
        "--keep-html", action="store_true", default=False,
        help="Keep the fetched pages as page<N>.html in the output directory",
    )

    p = sub.add_parser("analyze", help="List the file types found on pages")
    _add_fetch_options(p)
    p.add_argument(
        "--output", default=DEFAULT_OUTPUT,
        help=f"Working directory for fetched pages (default: {DEFAULT_OUTPUT})",
    )

    p = sub.add_parser("local", help="Download files linked from saved HTML files")
    p.add_argument("files", nargs="+", metavar="HTML_FILE", help="HTML file(s) on disk")
    p.add_argument(
        "--base-url",
        help="URL the files were saved from, used for relative links",
    )
    _add_download_options(p)

    p = sub.add_parser("credentials", help="Manage the credentials file")
    p.add_argument("action", choices=("list", "save"))
    p.add_argument(
        "--credentials-file", default=DEFAULT_CREDENTIALS_FILE,
        help=f"Credentials file (default: {DEFAULT_CREDENTIALS_FILE})",
    )
    p.add_argument("--domain", help="Domain the credentials belong to (save)")
    p.add_argument("--username", help="Username (save)")
    p.add_argument("--password", help="Password (save; prompted when omitted)")
    p.add_argument("--description", default="", help="Free-text description (save)")
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


# ── Command helpers ────────────────────────────────────────────────

def _selection(raw: str) -> str | tuple[str, ...]:
    if raw.strip().lower() in (ALL, ""):
        log.info("File types: ALL recognised extensions")
        return ALL
    exts = tuple(normalise_extensions(raw))
    if not exts:
        raise ValidationError(f"No extensions given in {raw!r}")
    log.info("File types: %s", ", ".join(exts))
    return exts


def _targets(args: argparse.Namespace) -> list[PageTarget]:
    """Validate every URL up front; nothing is fetched if one is invalid."""
    password = args.password
    if args.username and not password:
        password = getpass.getpass(f"Password for {args.username}: ")
    return [
        PageTarget(url.strip(), args.username, password)
        for url in args.urls
    ]


def _client(args: argparse.Namespace) -> HttpClient:
    verify_ssl = getattr(args, "verify_ssl", True)
    if not verify_ssl:
        urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
        log.warning("TLS certificate verification is DISABLED (--no-verify-ssl)")
    return HttpClient(verify_ssl=verify_ssl, progress=getattr(args, "progress", True))


def _orchestrator(args: argparse.Namespace, ctx: RunContext) -> DownloadOrchestrator:
    client = _client(args)
    credentials = None
    if ctx.auth_mode is not AuthMode.NONE:
        credentials = CredentialResolver(
            CredentialStore(args.credentials_file),
            mode=ctx.auth_mode,
            prompt=terminal_prompt,
            confirm_save=terminal_confirm if ctx.auth_mode is AuthMode.MANUAL else None,
            cache=ctx.credential_cache,
        )
    auth = None
    if hasattr(args, "login_marker"):
        auth = AuthSession(client, success_predicate=marker_predicate(args.login_marker))
    parser_name = getattr(args, "parser", "regex")
    return DownloadOrchestrator(
        ctx,
        client=client,
        analyzer=FileTypeAnalyzer(get_extractor(parser_name)),
        credentials=credentials,
        auth=auth,
    )


def _report(summary: RunSummary, output_dir: Path) -> None:
    log.info("=" * 60)
    log.info("Pages processed  : %d", summary.pages_processed)
    log.info("Files found      : %d", summary.files_found)
    log.info("Files downloaded : %d", summary.files_downloaded)
    log.info("Failures         : %d", len(summary.failures))
    for url, reason in summary.failures:
        log.info("  [ERR] %s – %s", url, reason)
    if summary.collisions:
        log.info("Name collisions  : %s", ", ".join(summary.collisions))
    log.info("Output directory : %s", output_dir.resolve())
    log.info("=" * 60)


# ── Commands ───────────────────────────────────────────────────────

def cmd_download(args: argparse.Namespace) -> int:
    targets = _targets(args)
    ctx = RunContext(
        output_dir=Path(args.output),
        selection=_selection(args.ext),
        auth_mode=AuthMode(args.auth),
        collision_policy=args.collisions,
        keep_html=args.keep_html,
    )
    orchestrator = _orchestrator(args, ctx)
    try:
        summary = orchestrator.run(targets)
    finally:
        orchestrator.client.close()
    _report(summary, ctx.output_dir)
    return 0


def cmd_analyze(args: argparse.Namespace) -> int:
    targets = _targets(args)
    ctx = RunContext(output_dir=Path(args.output), auth_mode=AuthMode(args.auth))
    orchestrator = _orchestrator(args, ctx)
    try:
        reports = orchestrator.analyze(targets)
    finally:
        orchestrator.client.close()

    available: set[str] = set()
    for report in reports:
        if report.error:
            log.info("Page %d: %s – failed (%s)", report.index, report.url, report.error)
            continue
        exts = report.available_extensions
        available.update(exts)
        log.info("Page %d: %s – %s", report.index, report.url,
                 ", ".join(exts) if exts else "no downloadable files")
    if available:
        log.info("Available extensions: %s", " ".join(sorted(available)))
    return 0


def cmd_local(args: argparse.Namespace) -> int:
    if args.base_url:
        require_valid_url(args.base_url)
    paths = [Path(f) for f in args.files]
    missing = [str(p) for p in paths if not p.is_file()]
    if missing:
        raise ValidationError(f"HTML file(s) not found: {', '.join(missing)}")
    ctx = RunContext(
        output_dir=Path(args.output),
        selection=_selection(args.ext),
        collision_policy=args.collisions,
    )
    orchestrator = _orchestrator(args, ctx)
    try:
        summary = orchestrator.run_local(paths, base_url=args.base_url)
    finally:
        orchestrator.client.close()
    _report(summary, ctx.output_dir)
    return 0


def cmd_credentials(args: argparse.Namespace) -> int:
    store = CredentialStore(args.credentials_file)
    if args.action == "list":
        store.check_readable()
        records = store.records()
        if not records:
            log.info("No saved credentials in %s", store.path)
        for rec in records:
            log.info("%-30s %-20s %s", rec.domain, rec.username, rec.description)
        return 0

    if not args.domain or not args.username:
        raise ValidationError("credentials save needs --domain and --username")
    password = args.password or getpass.getpass(f"Password for {args.domain}: ")
    store.save(args.domain, args.username, password, args.description)
    return 0


_COMMANDS = {
    "download": cmd_download,
    "analyze": cmd_analyze,
    "local": cmd_local,
    "credentials": cmd_credentials,
}


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    setup_logging(debug=args.debug, log_file=args.log_file)

    if args.debug:
        logging.getLogger("urllib3").setLevel(logging.DEBUG)

    t0 = time.monotonic()
    try:
        status = _COMMANDS[args.command](args)
    except (ValidationError, ConfigurationError) as exc:
        log.error("%s", exc)
        return EXIT_USAGE
    log.info("Total elapsed time: %.1f s", time.monotonic() - t0)
    return status


if __name__ == "__main__":
    sys.exit(main())
