"""
Per-run state.

Everything a run needs to share between components lives on a
``RunContext`` that is passed around explicitly: output directory,
selection, authentication mode, the run-scoped credential cache and the
per-domain session cookies.  ``end_run`` wipes the transient parts and is
safe to call more than once.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from multifile_downloader.auth.credentials import AuthMode
from multifile_downloader.auth.login import SessionAuthState
from multifile_downloader.config import CONTENT_MARKERS
from multifile_downloader.errors import ConfigurationError
from multifile_downloader.extraction.analyzer import ALL
from multifile_downloader.utils.log import log

COLLISION_POLICIES = ("overwrite", "suffix")


@dataclass
class RunContext:
    output_dir: Path
    selection: str | tuple[str, ...] = ALL
    auth_mode: AuthMode = AuthMode.NONE
    collision_policy: str = "overwrite"
    keep_html: bool = False
    content_markers: tuple[tuple[str, ...], ...] = CONTENT_MARKERS

    credential_cache: dict[str, tuple[str, str]] = field(default_factory=dict)
    sessions: dict[str, SessionAuthState] = field(default_factory=dict)
    page_files: list[Path] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.output_dir = Path(self.output_dir).expanduser()
        if self.collision_policy not in COLLISION_POLICIES:
            raise ConfigurationError(
                f"Unknown collision policy {self.collision_policy!r} "
                f"(expected one of {', '.join(COLLISION_POLICIES)})"
            )

    def prepare(self) -> None:
        """Create the output directory; raise ``ConfigurationError`` if unusable."""
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ConfigurationError(
                f"Cannot create output directory {self.output_dir}: {exc}"
            ) from exc
        if not os.access(self.output_dir, os.W_OK):
            raise ConfigurationError(f"Output directory is not writable: {self.output_dir}")

    def end_run(self) -> None:
        """Drop cookies, cached credentials and temporary page files."""
        for state in self.sessions.values():
            state.clear()
        self.sessions.clear()
        self.credential_cache.clear()
        if not self.keep_html:
            for path in self.page_files:
                path.unlink(missing_ok=True)
                log.debug("Deleted temporary page file %s", path.name)
        self.page_files.clear()

    def __enter__(self) -> "RunContext":
        self.prepare()
        return self

    def __exit__(self, *exc_info) -> None:
        self.end_run()
