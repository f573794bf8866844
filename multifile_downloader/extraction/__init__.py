"""Link extraction from HTML and per-page file-type analysis."""

from multifile_downloader.extraction.analyzer import ALL, AnalysisResult, FileTypeAnalyzer
from multifile_downloader.extraction.catalog import (
    EXTENSION_CATALOG,
    all_extensions,
    categories_for,
    normalise_extensions,
)
from multifile_downloader.extraction.links import (
    ExtractedLink,
    LinkExtractor,
    RegexLinkExtractor,
    SourceAttribute,
    get_extractor,
)

__all__ = [
    "ALL",
    "AnalysisResult",
    "FileTypeAnalyzer",
    "EXTENSION_CATALOG",
    "all_extensions",
    "categories_for",
    "normalise_extensions",
    "ExtractedLink",
    "LinkExtractor",
    "RegexLinkExtractor",
    "SourceAttribute",
    "get_extractor",
]
