import unittest

from src.shared.media_policy import (
    EXTENSION_CATEGORIES,
    MediaCategory,
    category_of,
    effective_limit,
    exceeds_limit,
    extension_of,
    parse_category,
    should_download,
)


class TestExtensionOf(unittest.TestCase):
    def test_extracts_lowercased_extension(self) -> None:
        self.assertEqual(extension_of("https://example.com/image.png"), "png")
        self.assertEqual(extension_of("https://example.com/file.JSON"), "json")
        self.assertEqual(extension_of("https://example.com/path/to.file.tar.gz"), "gz")

    def test_ignores_query_and_fragment(self) -> None:
        self.assertEqual(extension_of("https://example.com/a.css?v=1.2#x.y"), "css")

    def test_missing_extension_is_empty(self) -> None:
        self.assertEqual(extension_of("https://example.com/no-ext"), "")
        self.assertEqual(extension_of("https://example.com/"), "")

    def test_unparsable_url_is_empty(self) -> None:
        self.assertEqual(extension_of("invalid-url"), "")
        self.assertEqual(extension_of("http://[::1/a.png"), "")


class TestCategoryOf(unittest.TestCase):
    def test_documented_table(self) -> None:
        expected = {
            MediaCategory.IMAGES: ["jpg", "jpeg", "png", "gif", "webp", "svg", "bmp", "tiff", "ico"],
            MediaCategory.VIDEO: ["mp4", "webm", "mov", "mkv", "ogg", "ogv"],
            MediaCategory.AUDIO: ["mp3", "wav", "m4a", "aac", "flac"],
            MediaCategory.FONTS: ["woff", "woff2", "ttf", "otf", "eot"],
            MediaCategory.DOCUMENTS: ["pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx"],
            MediaCategory.TEXT: ["css", "js", "map", "json", "xml", "txt", "html", "htm"],
        }
        for category, extensions in expected.items():
            for ext in extensions:
                self.assertEqual(category_of(ext), category, ext)
        self.assertEqual(len(EXTENSION_CATEGORIES), sum(len(v) for v in expected.values()))

    def test_unknown_and_empty_are_other(self) -> None:
        self.assertEqual(category_of("unknown"), MediaCategory.OTHER)
        self.assertEqual(category_of(""), MediaCategory.OTHER)
        self.assertEqual(category_of("zip"), MediaCategory.OTHER)

    def test_parse_category(self) -> None:
        self.assertEqual(parse_category(" Images "), MediaCategory.IMAGES)
        with self.assertRaises(ValueError):
            parse_category("videos")


class TestShouldDownload(unittest.TestCase):
    def test_text_always_downloaded(self) -> None:
        self.assertTrue(should_download(MediaCategory.TEXT, "css", frozenset()))

    def test_extensionless_other_always_downloaded(self) -> None:
        self.assertTrue(should_download(MediaCategory.OTHER, "", frozenset()))

    def test_other_with_extension_needs_configuration(self) -> None:
        self.assertFalse(should_download(MediaCategory.OTHER, "zip", frozenset()))
        self.assertTrue(should_download(MediaCategory.OTHER, "zip", frozenset({MediaCategory.OTHER})))

    def test_configured_categories(self) -> None:
        configured = frozenset({MediaCategory.IMAGES})
        self.assertTrue(should_download(MediaCategory.IMAGES, "png", configured))
        for category in (MediaCategory.VIDEO, MediaCategory.AUDIO, MediaCategory.FONTS, MediaCategory.DOCUMENTS):
            self.assertFalse(should_download(category, "x", configured))


class TestSizeGate(unittest.TestCase):
    def test_effective_limit(self) -> None:
        self.assertEqual(effective_limit(1000, 5000), 1000)
        self.assertEqual(effective_limit(0, 5000), 5000)

    def test_exceeds_limit(self) -> None:
        self.assertFalse(exceeds_limit(None, 10))
        self.assertFalse(exceeds_limit(10, 10))
        self.assertTrue(exceeds_limit(11, 10))


if __name__ == "__main__":
    unittest.main()
