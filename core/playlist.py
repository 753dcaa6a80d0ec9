"""
core/playlist.py
Playlist state: ordered tracks and the playback cursor (no UI).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

from core.errors import EmptyPlaylistError


@dataclass(frozen=True)
class Track:
    path: str

    @property
    def filename(self) -> str:
        return os.path.basename(self.path)


class Playlist:
    """Mutable playlist with an optional current index for playback."""

    def __init__(self, tracks: Iterable[Track] = ()) -> None:
        self._tracks: list[Track] = list(tracks)
        self._index: Optional[int] = None

    @property
    def tracks(self) -> list[Track]:
        return list(self._tracks)

    @property
    def current_index(self) -> Optional[int]:
        return self._index

    def replace(self, tracks: Iterable[Track]) -> None:
        self._tracks = list(tracks)
        self._index = None

    def append(self, tracks: Iterable[Track]) -> None:
        self._tracks.extend(tracks)

    def set_current(self, index: int) -> None:
        if not 0 <= index < len(self._tracks):
            raise IndexError(f"track index {index} out of range for {len(self._tracks)} tracks")
        self._index = index

    def next(self) -> int:
        """Move to the next track, wrapping to 0 after the last one."""
        if not self._tracks:
            raise EmptyPlaylistError("playlist is empty")
        current = -1 if self._index is None else self._index
        self._index = (current + 1) % len(self._tracks)
        return self._index

    def current_track(self) -> Optional[Track]:
        if self._index is None or not self._tracks:
            return None
        return self._tracks[self._index]

    def __getitem__(self, index: int) -> Track:
        return self._tracks[index]

    def __iter__(self) -> Iterator[Track]:
        return iter(list(self._tracks))

    def __len__(self) -> int:
        return len(self._tracks)
