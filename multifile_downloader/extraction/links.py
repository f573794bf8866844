"""
Link extraction by file extension.

The default extractor is a lightweight attribute-value scanner, not an HTML
parser: it looks for ``href``, ``src`` and ``data-src`` values (single or
double quoted) that contain ``.<ext>``, plus bare ``http(s)://`` URLs that
contain it anywhere in the text.  Malformed markup never raises; no match
is simply an empty result.

Callers depend only on the ``LinkExtractor`` interface, so the scanner can
be swapped for the BeautifulSoup implementation in ``html_parser``.
"""

import enum
import functools
import html as html_lib
import re
from dataclasses import dataclass, replace
from typing import Iterable, Iterator


class SourceAttribute(enum.Enum):
    HREF = "href"
    SRC = "src"
    DATA_SRC = "data-src"
    BARE = "bare"          # absolute URL found outside any attribute


@dataclass(frozen=True)
class ExtractedLink:
    raw: str
    source_attribute: SourceAttribute
    extension: str


class LinkExtractor:
    """Interface shared by every extractor implementation.

    Subclasses implement :meth:`scan`; the public methods take care of
    trimming, the ``.<ext>`` filter, de-duplication and ordering.
    """

    name = "base"

    def scan(self, html: str, extension: str) -> Iterable[ExtractedLink]:
        raise NotImplementedError

    def extract_links(self, html: str, extension: str) -> list[ExtractedLink]:
        """Unique links for *extension*, sorted by raw value.

        When the same value is found through several attributes the first
        one scanned is kept.
        """
        needle = "." + extension
        unique: dict[str, ExtractedLink] = {}
        for link in self.scan(html, extension):
            raw = link.raw.strip()
            if not raw or needle not in raw:
                continue
            if raw not in unique:
                unique[raw] = replace(link, raw=raw)
        return [unique[raw] for raw in sorted(unique)]

    def extract(self, html: str, extension: str) -> list[str]:
        """Unique raw link strings for *extension*, sorted."""
        return [link.raw for link in self.extract_links(html, extension)]

    def extract_many(self, html: str, extensions: Iterable[str]) -> list[str]:
        """Union of :meth:`extract` over *extensions*, sorted."""
        found: set[str] = set()
        for ext in extensions:
            found.update(self.extract(html, ext))
        return sorted(found)


@functools.lru_cache(maxsize=1024)
def _patterns(extension: str) -> tuple[re.Pattern, re.Pattern]:
    needle = re.escape("." + extension)
    attr = re.compile(
        r"(?<![\w-])(?i:(data-src|href|src))\s*=\s*"
        rf"""(?:"([^"]*{needle}[^"]*)"|'([^']*{needle}[^']*)')"""
    )
    bare = re.compile(rf"""https?://[^"'<>\s]*{needle}[^"'<>\s]*""")
    return attr, bare


class RegexLinkExtractor(LinkExtractor):
    """Attribute scanner built on regular expressions."""

    name = "regex"

    def scan(self, html: str, extension: str) -> Iterator[ExtractedLink]:
        if not html or ("." + extension) not in html:
            return
        attr_re, bare_re = _patterns(extension)
        for m in attr_re.finditer(html):
            value = m.group(2) if m.group(2) is not None else m.group(3)
            yield ExtractedLink(
                raw=html_lib.unescape(value),
                source_attribute=SourceAttribute(m.group(1).lower()),
                extension=extension,
            )
        for m in bare_re.finditer(html):
            yield ExtractedLink(
                raw=html_lib.unescape(m.group(0)),
                source_attribute=SourceAttribute.BARE,
                extension=extension,
            )


def get_extractor(name: str = "regex") -> LinkExtractor:
    """Return the extractor registered under *name* (``regex`` or ``soup``)."""
    if name == "regex":
        return RegexLinkExtractor()
    if name == "soup":
        from multifile_downloader.extraction.html_parser import SoupLinkExtractor
        return SoupLinkExtractor()
    raise ValueError(f"Unknown extractor: {name!r}")
