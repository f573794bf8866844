"""
Filename helpers for downloaded files.

During a run every file is saved as ``page<N>_<name>`` so that pages cannot
clobber each other mid-run; ``finalize_filenames`` then strips the prefix.
A second file of the same page with the same name is saved as
``page<N>-<M>_<name>`` and strips to the same final name.
"""

import os
import re
from pathlib import Path
from typing import Collection

from multifile_downloader.utils.log import log
from multifile_downloader.utils.url import filename_from_url

_PAGE_PREFIX_RE = re.compile(r"^page\d+(?:-\d+)?_")


def suggest_filename(absolute_url: str, page_index: int, file_index: int) -> str:
    """
    ``page<N>_<basename>`` for URLs with a usable basename, otherwise the
    synthesised ``page<N>_file_<M>``.  A basename is usable when it has both
    a stem and an extension.
    """
    name = filename_from_url(absolute_url)
    stem, dot, ext = name.rpartition(".")
    if not name or not dot or not stem.strip(".") or not ext:
        return f"page{page_index}_file_{file_index}"
    return f"page{page_index}_{name}"


def run_filename(suggested: str, page_index: int, file_index: int,
                 taken: Collection[str]) -> str:
    """*suggested*, or ``page<N>-<M>_<name>`` when *suggested* is already in *taken*."""
    if suggested not in taken:
        return suggested
    return f"page{page_index}-{file_index}_{strip_page_prefix(suggested)}"


def strip_page_prefix(name: str) -> str:
    return _PAGE_PREFIX_RE.sub("", name, count=1)


def unique_path(path: Path) -> Path:
    """First of ``path``, ``name (1).ext``, ``name (2).ext`` … that does not exist."""
    if not path.exists():
        return path
    n = 1
    while True:
        candidate = path.with_name(f"{path.stem} ({n}){path.suffix}")
        if not candidate.exists():
            return candidate
        n += 1


def save_page_html(output_dir: Path, page_index: int, body: bytes) -> Path:
    """Write a fetched page as ``page<N>.html`` and return its path."""
    path = output_dir / f"page{page_index}.html"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(body)
    log.debug("Saved page → %s (%d bytes)", path, len(body))
    return path


def finalize_filenames(
    paths: list[Path],
    policy: str = "overwrite",
) -> tuple[list[Path], list[str]]:
    """
    Strip the ``page<N>_`` prefix from every path in *paths*.

    When the stripped name is already taken the *policy* decides:
    ``overwrite`` replaces the existing file, ``suffix`` picks a free
    ``name (n).ext``.  Either way the collision is logged and returned.
    Paths that no longer exist are dropped, and an overwritten file is
    listed once.

    Returns ``(final_paths, collisions)``.
    """
    final: list[Path] = []
    collisions: list[str] = []
    for path in paths:
        if not path.exists():
            log.warning("[RENAME] %s is missing – not listed", path.name)
            continue
        new_name = strip_page_prefix(path.name)
        if new_name == path.name:
            final.append(path)
            continue
        target = path.with_name(new_name)
        if target.exists():
            collisions.append(new_name)
            if policy == "suffix":
                target = unique_path(target)
                log.warning("[COLLISION] %s already exists – saving as %s",
                            new_name, target.name)
            else:
                log.warning("[COLLISION] %s already exists – overwriting", new_name)
        try:
            os.replace(path, target)
        except OSError as exc:
            log.error("[RENAME] Failed to rename %s: %s", path.name, exc)
            final.append(path)
            continue
        log.info("[RENAME] %s → %s", path.name, target.name)
        if target in final:
            final.remove(target)
        final.append(target)
    return final, collisions
