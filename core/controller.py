"""
core/controller.py
PlaybackController: the playlist cursor and the Stopped/Playing/Paused state
machine, driven by a serial queue of commands and engine events.

post() may be called from any thread; it only enqueues and calls the wakeup
hook. process_events() runs on the control thread and handles messages one
at a time in arrival order.
"""

from __future__ import annotations

import logging
import random
import threading
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from core.errors import EmptyPlaylistError, EngineFailure, PersistenceError
from core.playlist import Playlist, Track
from core.shuffle import Shuffler

logger = logging.getLogger(__name__)


class PlaybackState(Enum):
    STOPPED = "stopped"
    PLAYING = "playing"
    PAUSED = "paused"


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SelectTrack:
    index: int


@dataclass(frozen=True)
class TogglePlayPause:
    pass


@dataclass(frozen=True)
class NextTrack:
    pass


@dataclass(frozen=True)
class SelectRandomTrack:
    pass


@dataclass(frozen=True)
class SkipAndAdvance:
    pass


@dataclass(frozen=True)
class Seek:
    fraction: float


@dataclass(frozen=True)
class SetVolume:
    percent: int


@dataclass(frozen=True)
class TrackEnded:
    generation: Optional[int] = None


@dataclass(frozen=True)
class TrackFailed:
    generation: Optional[int] = None


@dataclass(frozen=True)
class LoadTracks:
    token: int
    tracks: tuple[Track, ...] = field(default_factory=tuple)
    append: bool = False


TRANSPORT = (SelectTrack, TogglePlayPause, NextTrack, SelectRandomTrack,
             SkipAndAdvance, Seek, TrackEnded)


class PlaybackController:
    """Owns the Playlist, the PlaybackState and the ignore set."""

    def __init__(
        self,
        engine,
        ignore_store,
        rng: Optional[random.Random] = None,
        wakeup: Optional[Callable[[], None]] = None,
    ) -> None:
        self._engine = engine
        self._ignore_store = ignore_store
        self._rng = rng or random.Random()
        self._shuffler = Shuffler(self._rng)
        self._wakeup = wakeup

        self._playlist = Playlist()
        self._state = PlaybackState.STOPPED
        self._ignored: set[str] = set(ignore_store.load())

        self._queue: deque = deque()
        self._queue_lock = threading.Lock()
        self._state_lock = threading.RLock()
        self._scan_token = 0
        # token of the media last opened; engine events for older media are dropped
        self._generation: Optional[int] = None
        self._listeners: list[Callable[["PlaybackController"], None]] = []

        self._handlers = {
            SelectTrack:       self._on_select_track,
            TogglePlayPause:   self._on_toggle_play_pause,
            NextTrack:         self._on_next_track,
            SelectRandomTrack: self._on_select_random_track,
            SkipAndAdvance:    self._on_skip_and_advance,
            Seek:              self._on_seek,
            SetVolume:         self._on_set_volume,
            TrackEnded:        self._on_track_ended,
            TrackFailed:       self._on_track_failed,
            LoadTracks:        self._on_load_tracks,
        }

        engine.set_listeners(
            on_ended=lambda token=None: self.post(TrackEnded(token)),
            on_failed=lambda token=None: self.post(TrackFailed(token)),
        )

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def playlist(self) -> Playlist:
        return self._playlist

    @property
    def ignored(self) -> frozenset[str]:
        return frozenset(self._ignored)

    @property
    def current_track(self) -> Optional[Track]:
        return self._playlist.current_track()

    def position_fraction(self) -> float:
        if self._state is PlaybackState.STOPPED:
            return 0.0
        return self._engine.position_fraction()

    def time_ms(self) -> int:
        return 0 if self._state is PlaybackState.STOPPED else self._engine.time_ms()

    def length_ms(self) -> int:
        return 0 if self._state is PlaybackState.STOPPED else self._engine.length_ms()

    def add_listener(self, fn: Callable[["PlaybackController"], None]) -> None:
        self._listeners.append(fn)

    # ------------------------------------------------------------------
    # Queue
    # ------------------------------------------------------------------

    def post(self, message) -> None:
        """Enqueue *message*; safe from any thread."""
        with self._queue_lock:
            self._queue.append(message)
        if self._wakeup is not None:
            self._wakeup()

    def process_events(self) -> int:
        """Handle queued messages in FIFO order. Returns how many were handled."""
        handled = 0
        with self._state_lock:
            while True:
                with self._queue_lock:
                    if not self._queue:
                        break
                    message = self._queue.popleft()
                self._handle(message)
                handled += 1
        if handled:
            for fn in list(self._listeners):
                fn(self)
        return handled

    def dispatch(self, message) -> None:
        self.post(message)
        self.process_events()

    def _handle(self, message) -> None:
        if isinstance(message, TRANSPORT) and not len(self._playlist):
            logger.debug("Ignoring %s on an empty playlist", type(message).__name__)
            return
        handler = self._handlers.get(type(message))
        if handler is None:
            logger.error("Unknown controller message: %r", message)
            return
        try:
            handler(message)
        except IndexError as e:
            logger.warning("Rejected %r: %s", message, e)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def select_track(self, index: int) -> None:
        if not 0 <= index < len(self._playlist):
            raise IndexError(f"track index {index} out of range for {len(self._playlist)} tracks")
        self.dispatch(SelectTrack(index))

    def toggle_play_pause(self) -> None:
        self.dispatch(TogglePlayPause())

    def next_track(self) -> None:
        self.dispatch(NextTrack())

    def select_random_track(self) -> None:
        self.dispatch(SelectRandomTrack())

    def skip_and_advance(self) -> None:
        self.dispatch(SkipAndAdvance())

    def seek(self, fraction: float) -> None:
        self.dispatch(Seek(fraction))

    def set_volume(self, percent: int) -> None:
        self.dispatch(SetVolume(percent))

    def begin_scan(self) -> int:
        """Start a new scan generation; results of older ones are dropped."""
        with self._queue_lock:
            self._scan_token += 1
            return self._scan_token

    def load_tracks(self, token: int, tracks, append: bool = False) -> None:
        self.dispatch(LoadTracks(token, tuple(tracks), append))

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _open_and_play(self, index: int) -> None:
        self._playlist.set_current(index)
        track = self._playlist[index]
        try:
            self._generation = self._engine.open(track.path)
            self._engine.play()
        except EngineFailure as e:
            logger.error("Cannot play %s: %s", track.path, e)
            self._stop()
            return
        self._state = PlaybackState.PLAYING
        logger.info("Playing [%d] %s", index, track.filename)

    def _stop(self) -> None:
        self._engine.stop()
        self._state = PlaybackState.STOPPED

    def _on_select_track(self, msg: SelectTrack) -> None:
        self._open_and_play(msg.index)

    def _on_toggle_play_pause(self, _msg: TogglePlayPause) -> None:
        if self._state is PlaybackState.PLAYING:
            self._engine.pause()
            self._state = PlaybackState.PAUSED
        elif self._state is PlaybackState.PAUSED:
            if self._playlist.current_index is None:
                self._open_and_play(0)
            elif self._engine.can_resume():
                self._engine.play()
                self._state = PlaybackState.PLAYING
            else:
                self._open_and_play(self._playlist.current_index)
        else:
            logger.debug("Play/pause ignored while stopped")

    def _on_next_track(self, _msg: NextTrack) -> None:
        self._advance()

    def _advance(self) -> None:
        try:
            index = self._playlist.next()
        except EmptyPlaylistError:
            return
        self._open_and_play(index)

    def _on_select_random_track(self, _msg: SelectRandomTrack) -> None:
        self._open_and_play(self._rng.randrange(len(self._playlist)))

    def _on_skip_and_advance(self, _msg: SkipAndAdvance) -> None:
        if self._state is PlaybackState.STOPPED:
            return
        track = self._playlist.current_track()
        if track is not None:
            self._ignore(track.filename)
        self._advance()

    def _ignore(self, filename: str) -> None:
        if filename in self._ignored:
            return
        self._ignored.add(filename)
        try:
            self._ignore_store.append(filename)
        except PersistenceError as e:
            logger.error("Ignore list not saved: %s", e)
        else:
            logger.info("Ignoring %s in future scans", filename)

    def _on_seek(self, msg: Seek) -> None:
        if self._state is PlaybackState.STOPPED:
            return
        self._engine.seek_to(max(0.0, min(1.0, msg.fraction)))

    def _on_set_volume(self, msg: SetVolume) -> None:
        self._engine.set_volume(max(0, min(100, int(msg.percent))))

    def _is_stale(self, generation: Optional[int]) -> bool:
        if generation is None or generation == self._generation:
            return False
        logger.debug("Dropping engine event for media %s (now %s)", generation, self._generation)
        return True

    def _on_track_ended(self, msg: TrackEnded) -> None:
        if self._is_stale(msg.generation):
            return
        if self._state is not PlaybackState.PLAYING:
            logger.debug("Track end reported while %s", self._state.value)
            return
        self._advance()

    def _on_track_failed(self, msg: TrackFailed) -> None:
        if self._is_stale(msg.generation):
            return
        track = self._playlist.current_track()
        logger.error("Playback failed: %s", track.path if track else "(no track)")
        self._stop()

    def _on_load_tracks(self, msg: LoadTracks) -> None:
        if msg.token != self._scan_token:
            logger.info("Dropping results of stale scan %d", msg.token)
            return
        tracks = self._shuffler.shuffle(list(msg.tracks))
        if msg.append:
            self._playlist.append(tracks)
        else:
            self._playlist.replace(tracks)
        logger.info(
            "%s %d tracks; playlist now has %d",
            "Appended" if msg.append else "Loaded", len(tracks), len(self._playlist),
        )
