"""Shared fakes for the engine, the metadata provider and the ignore store."""

import os
import random
import threading

import pytest

from audio.metadata import TrackInfo
from core.controller import PlaybackController
from core.errors import EngineFailure, MetadataReadError, PersistenceError
from core.playlist import Track


class FakeEngine:
    """Records every command; can be told to fail on open."""

    def __init__(self):
        self.calls = []
        self.resumable = True
        self.fail_paths = set()
        self.opened = 0
        self.on_ended = None
        self.on_failed = None

    def set_listeners(self, on_ended, on_failed):
        self.on_ended = on_ended
        self.on_failed = on_failed

    def open(self, path):
        self.calls.append(("open", path))
        if path in self.fail_paths:
            raise EngineFailure(f"cannot open {path}")
        self.opened += 1
        return self.opened

    def play(self):
        self.calls.append(("play",))

    def pause(self):
        self.calls.append(("pause",))

    def stop(self):
        self.calls.append(("stop",))

    def can_resume(self):
        return self.resumable

    def position_fraction(self):
        return 0.25

    def seek_to(self, fraction):
        self.calls.append(("seek", fraction))

    def set_volume(self, percent):
        self.calls.append(("volume", percent))

    def time_ms(self):
        return 30_000

    def length_ms(self):
        return 120_000


class FakeIgnoreStore:
    def __init__(self, names=(), fail=False):
        self.names = set(names)
        self.appended = []
        self.fail = fail

    def load(self):
        return set(self.names)

    def append(self, filename):
        if self.fail:
            raise PersistenceError("disk full")
        self.appended.append(filename)


class FakeMetadata:
    """Durations keyed by basename; a value of None makes the read fail."""

    def __init__(self, durations):
        self.durations = durations
        self.reads = []
        self._lock = threading.Lock()

    def read(self, path, include_picture=True):
        name = os.path.basename(path)
        with self._lock:
            self.reads.append(name)
        duration = self.durations.get(name)
        if duration is None:
            raise MetadataReadError(path, "corrupt header")
        return TrackInfo(duration_seconds=duration, title=name, album="")



class RecordingProvider:
    """Full reads return a picture; records the thread of every read."""

    def __init__(self, fail=()):
        self.reads = []
        self.fail = set(fail)
        self._lock = threading.Lock()

    def read(self, path, include_picture=True):
        with self._lock:
            self.reads.append((path, threading.current_thread()))
        if path in self.fail:
            raise MetadataReadError(path, "truncated")
        return TrackInfo(60, "full " + path, "", picture=b"art" if include_picture else None)

@pytest.fixture
def engine():
    return FakeEngine()


@pytest.fixture
def store():
    return FakeIgnoreStore()


@pytest.fixture
def tracks():
    return [Track(f"/music/{name}.mp3") for name in ("A", "B", "C")]


@pytest.fixture
def controller(engine, store):
    return PlaybackController(engine, store, rng=random.Random(1234))


@pytest.fixture
def loaded(controller, tracks, engine):
    """Controller holding [A, B, C] in that order, nothing played yet."""
    controller.playlist.replace(tracks)
    return controller
