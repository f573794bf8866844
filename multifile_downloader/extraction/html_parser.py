"""
HTML attribute extraction via BeautifulSoup.

Drop-in replacement for the regex scanner: same ``LinkExtractor``
interface, but attribute values come from a real parse tree (entities
decoded, attribute quoting irrelevant).  Bare URLs in text nodes are still
picked up with the regex fallback so both extractors agree on markup that
hides links outside attributes.
"""

from typing import Iterator

from bs4 import BeautifulSoup

from multifile_downloader.extraction.links import (
    ExtractedLink,
    LinkExtractor,
    SourceAttribute,
    _patterns,
)
from multifile_downloader.utils.log import log

_BS4_PARSER = "lxml"

_ATTRS = (
    ("href", SourceAttribute.HREF),
    ("src", SourceAttribute.SRC),
    ("data-src", SourceAttribute.DATA_SRC),
)


class SoupLinkExtractor(LinkExtractor):
    """Extractor backed by ``BeautifulSoup`` with the ``lxml`` parser.

    The analyzer calls :meth:`scan` once per catalog extension on the same
    document, so the attribute values of the last parsed document are kept.
    """

    name = "soup"

    def __init__(self) -> None:
        self._cached_html: str | None = None
        self._cached_values: list[tuple[str, SourceAttribute]] = []

    def _attribute_values(self, html: str) -> list[tuple[str, SourceAttribute]]:
        if html is self._cached_html:
            return self._cached_values
        values: list[tuple[str, SourceAttribute]] = []
        try:
            soup = BeautifulSoup(html, _BS4_PARSER)
        except Exception as exc:
            log.debug("HTML parse failed, falling back to bare URLs: %s", exc)
            soup = None
        if soup is not None:
            for el in soup.find_all(True):
                for attr, source in _ATTRS:
                    val = el.get(attr)
                    if isinstance(val, list):      # multi-valued attributes
                        val = " ".join(val)
                    if val:
                        values.append((val, source))
        self._cached_html = html
        self._cached_values = values
        return values

    def scan(self, html: str, extension: str) -> Iterator[ExtractedLink]:
        if not html or ("." + extension) not in html:
            return
        needle = "." + extension
        for value, source in self._attribute_values(html):
            if needle in value:
                yield ExtractedLink(raw=value, source_attribute=source,
                                    extension=extension)
        _, bare_re = _patterns(extension)
        for m in bare_re.finditer(html):
            yield ExtractedLink(raw=m.group(0),
                                source_attribute=SourceAttribute.BARE,
                                extension=extension)
