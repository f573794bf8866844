"""
Per-page file-type analysis across the whole extension catalog.
"""

from dataclasses import dataclass, field
from typing import Iterable, Mapping

from multifile_downloader.extraction.catalog import EXTENSION_CATALOG
from multifile_downloader.extraction.links import LinkExtractor, RegexLinkExtractor

ALL = "all"


@dataclass
class AnalysisResult:
    """Counts of distinct links per extension and per category.

    Only extensions (and categories) with at least one link appear.
    """

    per_extension_counts: dict[str, int] = field(default_factory=dict)
    per_category_totals: dict[str, int] = field(default_factory=dict)
    grand_total: int = 0
    links: dict[str, list[str]] = field(default_factory=dict)
    breakdown: dict[str, dict[str, int]] = field(default_factory=dict)

    @property
    def nothing_found(self) -> bool:
        return self.grand_total == 0


class FileTypeAnalyzer:
    """Run a :class:`LinkExtractor` for every catalog extension."""

    def __init__(
        self,
        extractor: LinkExtractor | None = None,
        catalog: Mapping[str, Iterable[str]] = EXTENSION_CATALOG,
    ) -> None:
        self.extractor = extractor or RegexLinkExtractor()
        self.catalog = {name: sorted(set(exts)) for name, exts in catalog.items()}

    def extensions(self) -> list[str]:
        found: set[str] = set()
        for exts in self.catalog.values():
            found.update(exts)
        return sorted(found)

    def analyze(self, html: str) -> AnalysisResult:
        """
        Count links for every extension.  ``grand_total`` is the sum of the
        per-extension counts; an extension listed under several categories
        adds to each of those category totals.  A zero total is a normal
        result, not an error.
        """
        result = AnalysisResult()
        for ext in self.extensions():
            links = self.extractor.extract(html, ext)
            if links:
                result.per_extension_counts[ext] = len(links)
                result.links[ext] = links

        for category, exts in self.catalog.items():
            counts = {
                ext: result.per_extension_counts[ext]
                for ext in exts
                if ext in result.per_extension_counts
            }
            if counts:
                result.breakdown[category] = counts
                result.per_category_totals[category] = sum(counts.values())

        result.grand_total = sum(result.per_extension_counts.values())
        return result

    def available_extensions(self, html: str) -> list[str]:
        """Catalog extensions with at least one link in *html*, sorted."""
        return sorted(self.analyze(html).per_extension_counts)

    def links_for(self, html: str, selection: str | Iterable[str]) -> list[str]:
        """
        Distinct raw links matching *selection*: ``"all"`` for every catalog
        extension, or an iterable of extensions (which need not be in the
        catalog).
        """
        if selection == ALL:
            exts: Iterable[str] = self.extensions()
        else:
            exts = list(selection)
        return self.extractor.extract_many(html, exts)
