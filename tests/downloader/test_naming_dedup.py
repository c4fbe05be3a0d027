"""
Tests for naming, hashing and deduplication logic.

Acceptance criteria:
1. Slugs keep host + path and only contain [A-Za-z0-9-_.]
2. Hashes are 64 lowercase hex characters and stable for the same bytes
3. The dedup index is built from sibling manifests, skips unreadable ones,
   and keeps the first registered path for a hash
"""

import json
import tempfile
import unittest
from pathlib import Path

from src.backend.fs.naming import (
    generate_media_filename,
    generate_output_dir_name,
    sanitize_filename,
    slugify_url,
)
from src.backend.fs.hashing import (
    HASH_HEX_LENGTH,
    compute_bytes_hash,
    is_valid_hash,
)
from src.backend.fs.storage import LocalStorage
from src.backend.downloader.dedup import DedupIndex


class TestNaming(unittest.TestCase):
    """Tests for output and media naming conventions."""

    def test_slug_joins_host_and_path(self):
        assert slugify_url("https://example.com/path/to/page") == "example.com-path-to-page"

    def test_slug_strips_trailing_slashes(self):
        assert slugify_url("https://example.com/docs///") == "example.com-docs"

    def test_slug_for_root_url_is_host(self):
        assert slugify_url("http://h/") == "h"

    def test_slug_replaces_unsafe_and_collapses_dashes(self):
        slug = slugify_url("https://example.com/a b/%20c?x=1")
        assert slug == "example.com-a-b-20c"

    def test_slug_of_unparsable_url_is_sanitized(self):
        assert slugify_url("not a url") == "not-a-url"

    def test_output_dir_name_slug_timestamp_ignores_name(self):
        name = generate_output_dir_name(
            "https://example.com/page",
            folder_naming="slug-timestamp",
            name="custom",
            now_millis=1700000000000,
        )
        assert name == "example.com-page-1700000000000"

    def test_output_dir_name_uses_name(self):
        name = generate_output_dir_name(
            "https://example.com/page",
            folder_naming="name",
            name="custom",
            now_millis=1,
        )
        assert name == "custom"

    def test_output_dir_name_default_name(self):
        name = generate_output_dir_name(
            "https://example.com/page",
            folder_naming="name",
            now_millis=42,
        )
        assert name == "scrape-42"

    def test_media_filename_uses_index_and_last_segment(self):
        assert generate_media_filename(3, "https://example.com/img/logo.png") == "3-logo.png"

    def test_media_filename_falls_back_for_empty_segment(self):
        assert generate_media_filename(7, "https://example.com/dir/") == "7-file-7"

    def test_sanitize_filename_replaces_reserved_characters(self):
        assert sanitize_filename('a\\b:c*d?e"f<g>h|i') == "a-b-c-d-e-f-g-h-i"


class TestHashing(unittest.TestCase):
    """Tests for content hashing."""

    def test_hash_is_64_lowercase_hex(self):
        for data in (b"", b"hello world", bytes(range(256))):
            digest = compute_bytes_hash(data)
            assert len(digest) == HASH_HEX_LENGTH
            assert digest == digest.lower()
            assert is_valid_hash(digest)

    def test_hash_is_stable(self):
        assert compute_bytes_hash(b"same") == compute_bytes_hash(b"same")
        assert compute_bytes_hash(b"same") != compute_bytes_hash(b"other")

    def test_known_digest_of_empty_input(self):
        assert compute_bytes_hash(b"") == (
            "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
        )

    def test_is_valid_hash_rejects_garbage(self):
        assert not is_valid_hash("xyz")
        assert not is_valid_hash("g" * 64)
        assert not is_valid_hash(None)


def _write_manifest(scrape_dir: Path, files: list) -> None:
    scrape_dir.mkdir(parents=True, exist_ok=True)
    payload = {"source": "https://example.com/", "fetchedAt": "2026-01-01T00:00:00.000Z", "files": files}
    (scrape_dir / "manifest.json").write_text(json.dumps(payload), encoding="utf-8")


class TestDedupIndex(unittest.TestCase):
    """Tests for the cross-scrape dedup index."""

    def test_first_registration_wins(self):
        index = DedupIndex()
        content_hash = "ab" * 32

        index.register(content_hash, Path("/first/file.jpg"))
        index.register(content_hash, Path("/second/file.jpg"))

        assert index.get_existing_file(content_hash) == Path("/first/file.jpg")
        assert len(index) == 1

    def test_lookup_is_case_insensitive(self):
        index = DedupIndex()
        index.register("AB" * 32, Path("/x"))

        assert index.is_known("ab" * 32)
        assert index.get_existing_file("aB" * 32) == Path("/x")

    def test_unknown_hash_returns_none(self):
        assert DedupIndex().get_existing_file("c" * 64) is None

    def test_build_reads_sibling_manifests(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            sha = "d" * 64
            _write_manifest(
                root / "scrape-1",
                [
                    {"path": "media/1-a.png", "url": "u1", "sha256": sha, "size": 1},
                    {"path": None, "url": "u2", "sha256": None, "downloaded": False},
                    {"path": "media/3-b.png", "url": "u3", "sha256": None},
                    {"path": "media/4-c.png", "url": "u4", "sha256": "not-a-digest"},
                ],
            )

            index = DedupIndex.build(root, LocalStorage())

            assert index.known_hashes == frozenset({sha})
            assert index.get_existing_file(sha) == root / "scrape-1" / "media" / "1-a.png"

    def test_build_resolves_paths_pointing_at_other_scrapes(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            sha = "e" * 64
            _write_manifest(
                root / "scrape-2",
                [{"path": "../scrape-1/media/1-a.png", "url": "u", "sha256": sha}],
            )

            index = DedupIndex.build(root, LocalStorage())

            assert index.get_existing_file(sha) == root / "scrape-1" / "media" / "1-a.png"

    def test_build_skips_missing_and_corrupt_manifests(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            (root / "in-progress").mkdir()
            corrupt = root / "corrupt"
            corrupt.mkdir()
            (corrupt / "manifest.json").write_text("{not json", encoding="utf-8")
            foreign = root / "foreign"
            foreign.mkdir()
            (foreign / "manifest.json").write_text("[1, 2, 3]", encoding="utf-8")
            (root / "stray-file.txt").write_text("x", encoding="utf-8")
            sha = "f" * 64
            _write_manifest(root / "good", [{"path": "media/1-a.png", "url": "u", "sha256": sha}])

            index = DedupIndex.build(root, LocalStorage())

            assert index.known_hashes == frozenset({sha})

    def test_build_leaves_out_excluded_directory(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            _write_manifest(root / "current", [{"path": "media/1-a.png", "url": "u", "sha256": "a" * 64}])
            _write_manifest(root / "other", [{"path": "media/1-b.png", "url": "u", "sha256": "b" * 64}])

            index = DedupIndex.build(root, LocalStorage(), exclude=root / "current")

            assert index.known_hashes == frozenset({"b" * 64})

    def test_build_on_missing_root_is_empty(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            index = DedupIndex.build(Path(tmpdir) / "does-not-exist", LocalStorage())
            assert len(index) == 0


class TestLocalStorage(unittest.TestCase):
    """Tests for the filesystem storage adapter."""

    def test_text_and_binary_roundtrip(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            storage = LocalStorage()
            root = Path(tmpdir) / "nested" / "dir"
            storage.ensure_dir(root)

            storage.write_text(root / "a.txt", "hello world")
            storage.write_bytes(root / "b.bin", b"\x01\x02\x03")

            assert storage.read_text(root / "a.txt") == "hello world"
            assert (root / "b.bin").read_bytes() == b"\x01\x02\x03"
            # No temp files left behind
            assert sorted(p.name for p in root.iterdir()) == ["a.txt", "b.bin"]

    def test_delete_and_list_dirs(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            storage = LocalStorage()
            root = Path(tmpdir)
            (root / "b").mkdir()
            (root / "a").mkdir()
            (root / "file.txt").write_text("x", encoding="utf-8")

            assert [p.name for p in storage.list_dirs(root)] == ["a", "b"]

            storage.delete(root / "file.txt")
            assert not (root / "file.txt").exists()
            with self.assertRaises(OSError):
                storage.delete(root / "file.txt")


if __name__ == "__main__":
    unittest.main()
