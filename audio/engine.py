"""
audio/engine.py
Playback engine interface and its libvlc implementation.

libvlc raises its events on an internal thread; the listeners given to
set_listeners() are called from there and must only hand the event over to
the control thread.
"""

from __future__ import annotations

import os
import logging
from typing import Callable, Optional

import vlc

from core.errors import EngineFailure

logger = logging.getLogger(__name__)

# called with the token open() returned for the media the event belongs to
Listener = Callable[[int], None]


class PlaybackEngine:
    """Operations the playback controller drives."""

    def set_listeners(self, on_ended: Optional[Listener], on_failed: Optional[Listener]) -> None:
        raise NotImplementedError

    def open(self, path: str) -> int:
        """Load *path*; returns a token that later events for it carry."""
        raise NotImplementedError

    def play(self) -> None:
        raise NotImplementedError

    def pause(self) -> None:
        raise NotImplementedError

    def stop(self) -> None:
        raise NotImplementedError

    def can_resume(self) -> bool:
        raise NotImplementedError

    def position_fraction(self) -> float:
        raise NotImplementedError

    def seek_to(self, fraction: float) -> None:
        raise NotImplementedError

    def set_volume(self, percent: int) -> None:
        raise NotImplementedError

    def time_ms(self) -> int:
        raise NotImplementedError

    def length_ms(self) -> int:
        raise NotImplementedError


class VlcEngine(PlaybackEngine):
    """PlaybackEngine backed by a python-vlc MediaPlayer."""

    def __init__(self, instance: Optional[vlc.Instance] = None) -> None:
        self._vlc = instance or vlc.Instance("--no-video", "--quiet")
        if self._vlc is None:
            raise EngineFailure("libvlc could not be initialised")
        self._player = self._vlc.media_player_new()
        self._on_ended: Optional[Listener] = None
        self._on_failed: Optional[Listener] = None
        self._opened = 0
        self._attach(self._opened)

    def _attach(self, token: int) -> None:
        # re-bound on every open(); an event already raised for the previous
        # media still reports the previous token
        events = self._player.event_manager()
        for event_type, callback in (
            (vlc.EventType.MediaPlayerEndReached, self._vlc_ended),
            (vlc.EventType.MediaPlayerEncounteredError, self._vlc_error),
        ):
            events.event_detach(event_type)
            events.event_attach(event_type, callback, token)

    # ------------------------------------------------------------------
    # libvlc callbacks (libvlc thread)
    # ------------------------------------------------------------------

    def _vlc_ended(self, _event, token: int) -> None:
        if self._on_ended is not None:
            self._on_ended(token)

    def _vlc_error(self, _event, token: int) -> None:
        logger.warning("libvlc reported a playback error")
        if self._on_failed is not None:
            self._on_failed(token)

    # ------------------------------------------------------------------
    # PlaybackEngine
    # ------------------------------------------------------------------

    def set_listeners(self, on_ended: Optional[Listener], on_failed: Optional[Listener]) -> None:
        self._on_ended = on_ended
        self._on_failed = on_failed

    def open(self, path: str) -> int:
        if not os.path.exists(path):
            raise EngineFailure(f"File not found: {path}")
        if not os.access(path, os.R_OK):
            raise EngineFailure(f"Permission denied: {os.path.basename(path)}")
        media = self._vlc.media_new(path)
        if media is None:
            raise EngineFailure(f"VLC could not create media object for {path}")
        self._opened += 1
        self._attach(self._opened)
        self._player.set_media(media)
        return self._opened

    def play(self) -> None:
        if self._player.play() == -1:
            raise EngineFailure("VLC refused to play this file.")

    def pause(self) -> None:
        self._player.set_pause(1)

    def stop(self) -> None:
        self._player.stop()

    def can_resume(self) -> bool:
        return bool(self._player.can_pause())

    def position_fraction(self) -> float:
        pos = self._player.get_position()
        return max(0.0, min(1.0, pos)) if pos >= 0 else 0.0

    def seek_to(self, fraction: float) -> None:
        self._player.set_position(max(0.0, min(1.0, fraction)))

    def set_volume(self, percent: int) -> None:
        self._player.audio_set_volume(int(percent))

    def time_ms(self) -> int:
        return max(0, self._player.get_time())

    def length_ms(self) -> int:
        return max(0, self._player.get_length())
