"""
core/scanner.py
Folder scanning: find audio files under a root and keep the playable ones.

Each candidate's metadata is read on a worker pool; the scan returns once
every read has finished. Accepted tracks come back in completion order.
submit() supersedes the previous background scan: a queued one is cancelled,
a running one stops reading and returns what it has with superseded=True.
"""

from __future__ import annotations

import os
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Iterable, Optional

from audio.metadata import TrackInfo
from config.settings import normalise_extensions
from core.errors import MetadataReadError
from core.playlist import Track

logger = logging.getLogger(__name__)


@dataclass
class ScanResult:
    tracks: list[Track] = field(default_factory=list)
    errors: list[tuple[str, str]] = field(default_factory=list)
    info: dict[str, TrackInfo] = field(default_factory=dict)
    superseded: bool = False


def list_files(root: str) -> list[str]:
    """Every file below *root*, recursively."""
    paths: list[str] = []
    for dirpath, _, filenames in os.walk(root):
        for fn in filenames:
            paths.append(os.path.join(dirpath, fn))
    return paths


class LibraryScanner:
    """
    Validates candidate files with *metadata* (anything with a
    ``read(path, include_picture=...)`` returning a TrackInfo).

    *max_workers* bounds the validation pool; None lets the executor pick.
    """

    def __init__(self, metadata, max_workers: Optional[int] = None) -> None:
        self._metadata = metadata
        self._max_workers = max_workers
        self._coordinator = ThreadPoolExecutor(max_workers=1, thread_name_prefix="scan")
        self._submit_lock = threading.Lock()
        self._pending: Optional[Future] = None
        self._cancel: Optional[threading.Event] = None

    def scan(
        self,
        root: str,
        extensions: Iterable[str],
        ignored: Iterable[str],
        min_duration: float,
        cancelled: Optional[threading.Event] = None,
    ) -> ScanResult:
        result = ScanResult()
        if not os.path.isdir(root):
            logger.warning("Scan root is not a directory: %s", root)
            result.errors.append((root, "not a directory"))
            return result

        allowed = normalise_extensions(extensions)
        ignored = frozenset(ignored)
        candidates = [
            p for p in list_files(root)
            if os.path.splitext(p)[1].lower() in allowed
        ]
        logger.info("Scanning %s: %d candidate files", root, len(candidates))
        if not candidates:
            return result

        lock = threading.Lock()

        def validate(path: str) -> None:
            if cancelled is not None and cancelled.is_set():
                return
            try:
                info = self._metadata.read(path, include_picture=False)
            except (MetadataReadError, OSError) as e:
                logger.debug("Skipping unreadable file %s: %s", path, e)
                with lock:
                    result.errors.append((path, str(e)))
                return
            if info.duration_seconds < min_duration:
                return
            if os.path.basename(path) in ignored:
                return
            with lock:
                result.tracks.append(Track(os.path.abspath(path)))
                result.info[os.path.abspath(path)] = info

        with ThreadPoolExecutor(max_workers=self._max_workers, thread_name_prefix="meta") as pool:
            futures = [pool.submit(validate, p) for p in candidates]
            wait(futures)
        for fut in futures:
            exc = fut.exception()
            if exc is not None:
                raise exc

        if cancelled is not None and cancelled.is_set():
            logger.info("Scan of %s superseded by a newer one", root)
            result.superseded = True
            return result
        logger.info(
            "Scan of %s done: %d accepted, %d unreadable",
            root, len(result.tracks), len(result.errors),
        )
        return result

    def submit(
        self,
        root: str,
        extensions: Iterable[str],
        ignored: Iterable[str],
        min_duration: float,
    ) -> Future:
        """Run scan() on the background coordinator thread, superseding the last one."""
        with self._submit_lock:
            if self._pending is not None:
                self._cancel.set()
                self._pending.cancel()
            cancelled = threading.Event()
            future = self._coordinator.submit(
                self.scan, root, tuple(extensions), frozenset(ignored), min_duration,
                cancelled,
            )
            self._pending, self._cancel = future, cancelled
        return future

    def shutdown(self) -> None:
        with self._submit_lock:
            if self._cancel is not None:
                self._cancel.set()
        self._coordinator.shutdown(wait=False, cancel_futures=True)
