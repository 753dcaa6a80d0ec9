"""Tests for audio.metadata with mutagen's File() replaced by a stub."""

import threading
from concurrent.futures import wait
from types import SimpleNamespace

import pytest

import audio.metadata as metadata
from audio.metadata import (
    MetadataCache, MutagenMetadataProvider, TrackInfo, find_cover_file, format_duration,
)
from core.errors import MetadataReadError
from conftest import RecordingProvider


def fake_file(length=215.4, tags=None):
    return SimpleNamespace(info=SimpleNamespace(length=length), tags=tags)


@pytest.fixture
def no_embedded_art(monkeypatch):
    monkeypatch.setattr(metadata, "read_album_art", lambda path: None)


class TestRead:

    def test_reads_tags_and_duration(self, monkeypatch, no_embedded_art):
        tags = {"title": ["Battle Theme"], "album": ["Quest Original Sound Track"]}
        monkeypatch.setattr(metadata, "MutagenFile", lambda path, **kw: fake_file(tags=tags))
        info = MutagenMetadataProvider("Original Sound Track").read("/m/01.mp3")
        assert info.title == "Battle Theme"
        assert info.album == "Quest"
        assert info.duration_seconds == pytest.approx(215.4)
        assert info.duration_str == "3:35"
        assert info.picture is None

    def test_title_falls_back_to_file_stem(self, monkeypatch, no_embedded_art):
        monkeypatch.setattr(metadata, "MutagenFile", lambda path, **kw: fake_file(tags=None))
        info = MutagenMetadataProvider().read("/m/track 07.flac")
        assert info.title == "track 07"
        assert info.album == ""

    def test_unrecognised_file_raises(self, monkeypatch):
        monkeypatch.setattr(metadata, "MutagenFile", lambda path, **kw: None)
        with pytest.raises(MetadataReadError):
            MutagenMetadataProvider().read("/m/x.mp3")

    def test_io_error_raises(self, monkeypatch):
        def boom(path, **kw):
            raise OSError("no such file")
        monkeypatch.setattr(metadata, "MutagenFile", boom)
        with pytest.raises(MetadataReadError) as excinfo:
            MutagenMetadataProvider().read("/m/x.mp3")
        assert excinfo.value.path == "/m/x.mp3"

    def test_unexpected_parser_error_raises_read_error(self, monkeypatch):
        def boom(path, **kw):
            raise ValueError("malformed frame")
        monkeypatch.setattr(metadata, "MutagenFile", boom)
        with pytest.raises(MetadataReadError) as excinfo:
            MutagenMetadataProvider().read("/m/bad.mp3")
        assert "malformed frame" in excinfo.value.reason
        assert isinstance(excinfo.value.__cause__, ValueError)

    def test_picture_skipped_when_not_requested(self, monkeypatch):
        monkeypatch.setattr(metadata, "MutagenFile", lambda path, **kw: fake_file())
        monkeypatch.setattr(metadata, "read_picture", lambda path: pytest.fail("read picture"))
        assert MutagenMetadataProvider().read("/m/x.mp3", include_picture=False).picture is None


class TestCover:

    def test_cover_png_preferred(self, tmp_path):
        (tmp_path / "cover.png").write_bytes(b"png")
        (tmp_path / "cover.jpg").write_bytes(b"jpg")
        assert find_cover_file(str(tmp_path / "a.mp3")) == str(tmp_path / "cover.png")

    def test_no_cover(self, tmp_path):
        assert find_cover_file(str(tmp_path / "a.mp3")) is None

    def test_picture_falls_back_to_cover_file(self, tmp_path, no_embedded_art):
        (tmp_path / "cover.jpg").write_bytes(b"jpeg-bytes")
        assert metadata.read_picture(str(tmp_path / "a.mp3")) == b"jpeg-bytes"


@pytest.mark.parametrize("seconds, text", [(0, "0:00"), (59.9, "0:59"), (61, "1:01"), (-3, "0:00")])
def test_format_duration(seconds, text):
    assert format_duration(seconds) == text


class TestMetadataCache:

    @pytest.fixture
    def provider(self):
        return RecordingProvider()

    @pytest.fixture
    def cache(self, provider):
        cache = MetadataCache(provider)
        yield cache
        cache.shutdown()

    def test_seeded_library_is_served_without_reads(self, cache, provider):
        paths = [f"/m/{i:03d}.mp3" for i in range(200)]
        cache.seed({p: TrackInfo(30, p, "") for p in paths})
        assert all(cache.peek(p).title == p for p in paths)
        assert cache.peek("/m/unknown.mp3") is None
        assert provider.reads == []

    def test_prefetch_reads_off_the_calling_thread(self, cache, provider):
        cache.seed({"/m/a.mp3": TrackInfo(30, "seeded", "")})
        loaded = []
        futures = cache.prefetch(["/m/a.mp3", "/m/b.mp3"], loaded.append)
        wait(futures, timeout=5)
        assert sorted(loaded) == ["/m/a.mp3", "/m/b.mp3"]
        assert all(thread is not threading.current_thread() for _, thread in provider.reads)
        assert cache.peek("/m/a.mp3").picture == b"art"

    def test_full_reads_once(self, cache, provider):
        assert cache.full("/m/a.mp3").picture == b"art"
        assert cache.full("/m/a.mp3").picture == b"art"
        wait(cache.prefetch(["/m/a.mp3"], lambda path: None), timeout=5)
        assert len(provider.reads) == 1

    def test_failed_full_read_falls_back_to_seed(self):
        provider = RecordingProvider(fail={"/m/bad.mp3"})
        cache = MetadataCache(provider)
        try:
            cache.seed({"/m/bad.mp3": TrackInfo(30, "seeded", "")})
            assert cache.full("/m/bad.mp3").title == "seeded"
            assert cache.full("/m/bad.mp3").title == "seeded"
            assert cache.peek("/m/bad.mp3").title == "seeded"
            assert len(provider.reads) == 1
        finally:
            cache.shutdown()
