"""
Tests for link extraction – regex scanner, BeautifulSoup extractor, catalog.
"""

import unittest

from multifile_downloader.extraction.catalog import (
    EXTENSION_CATALOG,
    all_extensions,
    categories_for,
    normalise_extensions,
)
from multifile_downloader.extraction.html_parser import SoupLinkExtractor
from multifile_downloader.extraction.links import (
    RegexLinkExtractor,
    SourceAttribute,
    get_extractor,
)


class _ExtractorCases:
    """Behaviour every ``LinkExtractor`` must share."""

    def make(self):
        raise NotImplementedError

    def setUp(self):
        self.ex = self.make()

    def test_both_quote_styles_deduplicated(self):
        html = "<a href='video.mp4'>one</a> <a href=\"video.mp4\">two</a>"
        self.assertEqual(self.ex.extract(html, "mp4"), ["video.mp4"])

    def test_src_and_data_src(self):
        html = '<video src="a.mp4"></video><img data-src="lazy.mp4">'
        links = self.ex.extract_links(html, "mp4")
        by_raw = {link.raw: link.source_attribute for link in links}
        self.assertEqual(by_raw["a.mp4"], SourceAttribute.SRC)
        self.assertEqual(by_raw["lazy.mp4"], SourceAttribute.DATA_SRC)

    def test_query_after_extension_tolerated(self):
        html = '<a href="/media/file.mp4?token=1">x</a>'
        self.assertEqual(self.ex.extract(html, "mp4"), ["/media/file.mp4?token=1"])

    def test_extension_match_is_case_sensitive(self):
        html = '<a href="VIDEO.MP4">x</a>'
        self.assertEqual(self.ex.extract(html, "mp4"), [])

    def test_bare_url_outside_attributes(self):
        html = "<p>Mirror: https://cdn.example.net/v/clip.mp4 (fast)</p>"
        links = self.ex.extract_links(html, "mp4")
        self.assertEqual([link.raw for link in links],
                         ["https://cdn.example.net/v/clip.mp4"])
        self.assertEqual(links[0].source_attribute, SourceAttribute.BARE)

    def test_absolute_attribute_reported_once(self):
        html = '<a href="https://cdn.example.net/clip.mp4">x</a>'
        links = self.ex.extract_links(html, "mp4")
        self.assertEqual(len(links), 1)
        self.assertEqual(links[0].source_attribute, SourceAttribute.HREF)

    def test_entities_decoded(self):
        html = '<a href="get.mp4?a=1&amp;b=2">x</a>'
        self.assertEqual(self.ex.extract(html, "mp4"), ["get.mp4?a=1&b=2"])

    def test_results_sorted(self):
        html = '<a href="c.jpg"></a><a href="a.jpg"></a><a href="b.jpg"></a>'
        self.assertEqual(self.ex.extract(html, "jpg"), ["a.jpg", "b.jpg", "c.jpg"])

    def test_no_matches_is_empty(self):
        self.assertEqual(self.ex.extract("<p>nothing</p>", "mp4"), [])
        self.assertEqual(self.ex.extract("", "mp4"), [])

    def test_malformed_markup_does_not_raise(self):
        html = '<div><p><a href="ok.jpg">x</div></table><img src=>'
        self.assertEqual(self.ex.extract(html, "jpg"), ["ok.jpg"])

    def test_other_extension_not_returned(self):
        html = '<a href="a.mp4"></a><a href="b.jpg"></a>'
        self.assertEqual(self.ex.extract(html, "jpg"), ["b.jpg"])

    def test_extract_many_union(self):
        html = '<a href="a.mp4"></a><img src="b.jpg"><a href="c.pdf"></a>'
        self.assertEqual(self.ex.extract_many(html, ["mp4", "jpg"]), ["a.mp4", "b.jpg"])


class TestRegexLinkExtractor(_ExtractorCases, unittest.TestCase):
    def make(self):
        return RegexLinkExtractor()

    def test_src_inside_data_src_not_double_counted(self):
        html = '<img data-src="lazy.jpg">'
        links = self.ex.extract_links(html, "jpg")
        self.assertEqual(len(links), 1)
        self.assertEqual(links[0].source_attribute, SourceAttribute.DATA_SRC)

    def test_attribute_name_case_insensitive(self):
        html = '<A HREF="clip.mp4">x</A>'
        self.assertEqual(self.ex.extract(html, "mp4"), ["clip.mp4"])

    def test_whitespace_around_equals(self):
        html = '<a href = "clip.mp4">x</a>'
        self.assertEqual(self.ex.extract(html, "mp4"), ["clip.mp4"])


class TestSoupLinkExtractor(_ExtractorCases, unittest.TestCase):
    def make(self):
        return SoupLinkExtractor()

    def test_reuses_parse_for_same_document(self):
        html = '<a href="a.mp4"></a><img src="b.jpg">'
        self.ex.extract(html, "mp4")
        values = self.ex._cached_values
        self.ex.extract(html, "jpg")
        self.assertIs(self.ex._cached_values, values)


class TestGetExtractor(unittest.TestCase):
    def test_known_names(self):
        self.assertIsInstance(get_extractor("regex"), RegexLinkExtractor)
        self.assertIsInstance(get_extractor("soup"), SoupLinkExtractor)

    def test_unknown_name(self):
        with self.assertRaises(ValueError):
            get_extractor("xpath")


class TestCatalog(unittest.TestCase):
    def test_categories_present(self):
        self.assertEqual(
            list(EXTENSION_CATALOG),
            ["Video", "Audio", "Image", "Document", "Archive", "Executable"],
        )

    def test_common_extensions(self):
        self.assertIn("mp4", EXTENSION_CATALOG["Video"])
        self.assertIn("mp3", EXTENSION_CATALOG["Audio"])
        self.assertIn("jpg", EXTENSION_CATALOG["Image"])
        self.assertIn("pdf", EXTENSION_CATALOG["Document"])
        self.assertIn("zip", EXTENSION_CATALOG["Archive"])
        self.assertIn("exe", EXTENSION_CATALOG["Executable"])

    def test_catalog_is_read_only(self):
        with self.assertRaises(TypeError):
            EXTENSION_CATALOG["Extra"] = frozenset({"xyz"})

    def test_all_extensions_unique_and_sorted(self):
        exts = all_extensions()
        self.assertEqual(exts, sorted(set(exts)))
        self.assertIn("gif", exts)

    def test_extension_in_several_categories(self):
        self.assertEqual(categories_for("gif"), ["Video", "Image"])
        self.assertEqual(categories_for("nope"), [])

    def test_normalise_extensions(self):
        self.assertEqual(normalise_extensions("mp4, .jpg pdf,,mp4"), ["jpg", "mp4", "pdf"])
        self.assertEqual(normalise_extensions(["MP4", ".mp4"]), ["MP4", "mp4"])
        self.assertEqual(normalise_extensions(" , "), [])


if __name__ == "__main__":
    unittest.main()
