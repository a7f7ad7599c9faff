"""Tests for uri resolution and document reading."""

from __future__ import annotations

from pathlib import Path

import pytest

from fuzzlsp.ingestion.sources import is_binary, read_document, uri_to_path


class TestUriToPath:
    def test_posix_file_uri(self) -> None:
        assert uri_to_path("file:///home/dev/a.c") == Path("/home/dev/a.c")

    def test_percent_encoded(self) -> None:
        path = uri_to_path("file:///home/dev/my%20src/a.c")
        assert path == Path("/home/dev/my src/a.c")

    def test_windows_drive_letter(self) -> None:
        assert uri_to_path("file:///C:/src/a.c") == Path("C:/src/a.c")

    def test_bare_path(self) -> None:
        assert uri_to_path("/tmp/a.c") == Path("/tmp/a.c")

    def test_unsupported_scheme(self) -> None:
        with pytest.raises(ValueError, match="unsupported uri scheme"):
            uri_to_path("https://example.com/a.c")


class TestReadDocument:
    def test_reads_text(self, tmp_path: Path) -> None:
        f = tmp_path / "a.c"
        f.write_text("int main(){return 0;}\n", encoding="utf-8")
        assert read_document(f.as_uri()) == "int main(){return 0;}\n"

    def test_binary_rejected(self, tmp_path: Path) -> None:
        f = tmp_path / "a.o"
        f.write_bytes(b"\x7fELF\x00\x00")
        assert is_binary(f)
        with pytest.raises(ValueError, match="not a text document"):
            read_document(f.as_uri())

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            read_document((tmp_path / "missing.c").as_uri())
