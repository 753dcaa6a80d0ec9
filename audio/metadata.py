"""
audio/metadata.py
Tag and stream-info reading with mutagen: duration, title, album, cover art,
plus the per-path cache the UI reads display metadata from.
"""

from __future__ import annotations

import os
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from mutagen import File as MutagenFile
from mutagen.id3 import APIC
from mutagen.mp4 import MP4

from core.errors import MetadataReadError

logger = logging.getLogger(__name__)

COVER_FILENAMES = ("cover.png", "cover.jpg")


@dataclass(frozen=True)
class TrackInfo:
    duration_seconds: float
    title: str
    album: str
    picture: Optional[bytes] = None

    @property
    def duration_str(self) -> str:
        return format_duration(self.duration_seconds)


def format_duration(seconds: float) -> str:
    """Format *seconds* as m:ss."""
    s = max(0, int(seconds))
    return f"{s // 60}:{s % 60:02d}"


def _first_tag(tags, key: str, fallback: str = "") -> str:
    if not tags:
        return fallback
    values = tags.get(key)
    if not values:
        return fallback
    value = str(values[0]).strip()
    return value or fallback


class MutagenMetadataProvider:
    """
    Reads a file's duration and display tags.

    *album_strip* is removed from album names (soundtrack rips often carry
    a noisy "Original Sound Track" suffix).
    """

    def __init__(self, album_strip: str = "") -> None:
        self._album_strip = album_strip

    def read(self, path: str, include_picture: bool = True) -> TrackInfo:
        """Return a TrackInfo for *path*; raise MetadataReadError on failure."""
        try:
            return self._read(path, include_picture)
        except MetadataReadError:
            raise
        except Exception as e:
            # mutagen's parsers raise plain ValueError/struct.error and the
            # like on damaged files, not only MutagenError
            raise MetadataReadError(path, f"{type(e).__name__}: {e}") from e

    def _read(self, path: str, include_picture: bool) -> TrackInfo:
        meta = MutagenFile(path, easy=True)
        if meta is None:
            raise MetadataReadError(path, "unrecognised audio format")
        if meta.info is None:
            raise MetadataReadError(path, "no stream info")

        stem = os.path.splitext(os.path.basename(path))[0]
        title = _first_tag(meta.tags, "title", stem)
        album = _first_tag(meta.tags, "album")
        if self._album_strip:
            album = album.replace(self._album_strip, "").strip()

        picture = read_picture(path) if include_picture else None
        return TrackInfo(
            duration_seconds=float(meta.info.length or 0.0),
            title=title,
            album=album,
            picture=picture,
        )


# ---------------------------------------------------------------------------
# Cover art
# ---------------------------------------------------------------------------

def read_album_art(path: str) -> Optional[bytes]:
    """Return raw bytes of the embedded album art, or None."""
    try:
        meta = MutagenFile(path)
    except Exception as e:
        logger.debug("No embedded art in %s: %s", path, e)
        return None
    if meta is None:
        return None
    if isinstance(meta, MP4):
        covers = (meta.tags or {}).get("covr", [])
        if covers:
            return bytes(covers[0])
    elif getattr(meta, "tags", None):
        for tag in meta.tags.values():
            if isinstance(tag, APIC):
                return tag.data
    if getattr(meta, "pictures", None):
        return meta.pictures[0].data
    return None


def find_cover_file(path: str) -> Optional[str]:
    """Return a cover.png / cover.jpg lying beside *path*, if any."""
    folder = os.path.dirname(path)
    for name in COVER_FILENAMES:
        candidate = os.path.join(folder, name)
        if os.path.isfile(candidate):
            return candidate
    return None


def read_picture(path: str) -> Optional[bytes]:
    """Embedded art first, then a cover file from the track's folder."""
    data = read_album_art(path)
    if data:
        return data
    cover = find_cover_file(path)
    if cover is None:
        return None
    try:
        with open(cover, "rb") as f:
            return f.read()
    except OSError as e:
        logger.warning("Cannot read cover %s: %s", cover, e)
        return None


# ---------------------------------------------------------------------------
# Cache
# ---------------------------------------------------------------------------

class MetadataCache:
    """
    Display metadata per path.

    Scan results are seeded without pictures and peek() serves them without
    touching the file. Full records (with cover art) are read by prefetch()
    on a small background pool, or by full() for the track being played.
    A failed full read falls back to the seeded record.
    """

    def __init__(self, provider, max_workers: int = 2) -> None:
        self._provider = provider
        self._lock = threading.Lock()
        self._seeded: dict[str, TrackInfo] = {}
        self._full: dict[str, Optional[TrackInfo]] = {}
        self._pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="art")
        self._pending: list[Future] = []

    def seed(self, info: dict[str, TrackInfo]) -> None:
        with self._lock:
            self._seeded.update(info)

    def peek(self, path: str) -> Optional[TrackInfo]:
        with self._lock:
            return self._full.get(path) or self._seeded.get(path)

    def full(self, path: str) -> Optional[TrackInfo]:
        with self._lock:
            if path in self._full:
                return self._full[path] or self._seeded.get(path)
        return self._load(path)

    def prefetch(self, paths: Iterable[str], on_loaded: Callable[[str], None]) -> list[Future]:
        """
        Read full records for *paths* in the background, calling
        *on_loaded(path)* (from a worker thread) for each one that has a
        picture. Prefetches still queued from an earlier call are dropped.
        """
        for fut in self._pending:
            fut.cancel()

        def load(path: str) -> None:
            with self._lock:
                if path in self._full:
                    return
            info = self._load(path)
            if info is not None and info.picture:
                on_loaded(path)

        self._pending = [self._pool.submit(load, p) for p in paths]
        return self._pending

    def shutdown(self) -> None:
        self._pool.shutdown(wait=False, cancel_futures=True)

    def _load(self, path: str) -> Optional[TrackInfo]:
        try:
            info = self._provider.read(path)
        except MetadataReadError as e:
            logger.warning("No metadata for %s: %s", path, e)
            info = None
        with self._lock:
            self._full[path] = info
            return info or self._seeded.get(path)
