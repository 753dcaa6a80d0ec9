"""
ui/playlist.py
PlaylistWidget: QListWidget rendering the controller's playlist.

Rows are rebuilt wholesale whenever the playlist is replaced or extended,
from the metadata already in the MetadataCache; cover icons are filled in
as the cache loads them in the background.
"""

from __future__ import annotations

import logging
from typing import Optional

from PyQt6.QtCore    import Qt, QSize, pyqtSignal
from PyQt6.QtGui     import QIcon, QPixmap
from PyQt6.QtWidgets import QListWidget, QListWidgetItem

from audio.metadata import MetadataCache, TrackInfo
from core.playlist  import Track

logger = logging.getLogger(__name__)

ICON_SIZE = 40


class PlaylistWidget(QListWidget):
    # emitted from cache worker threads
    _art_loaded = pyqtSignal(str)

    def __init__(self, cache: MetadataCache, parent=None) -> None:
        super().__init__(parent)
        self._cache = cache
        self._rows: dict[str, QListWidgetItem] = {}
        self.setIconSize(QSize(ICON_SIZE, ICON_SIZE))
        self.setUniformItemSizes(True)
        self.setSelectionMode(QListWidget.SelectionMode.SingleSelection)
        self._art_loaded.connect(self._on_art_loaded, Qt.ConnectionType.QueuedConnection)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def set_tracks(self, tracks: list[Track]) -> None:
        self.clear()
        self._rows.clear()
        for number, track in enumerate(tracks, start=1):
            item = self._make_item(number, track)
            self._rows[track.path] = item
            self.addItem(item)
        self._cache.prefetch([t.path for t in tracks], self._art_loaded.emit)

    def select_row(self, row: Optional[int]) -> None:
        if row is None or not 0 <= row < self.count():
            self.clearSelection()
            return
        item = self.item(row)
        self.setCurrentItem(item)
        self.scrollToItem(item)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _make_item(self, number: int, track: Track) -> QListWidgetItem:
        info = self._cache.peek(track.path)
        if info is None:
            text = f"{number:02d}. {track.filename}\n"
        else:
            text = f"{number:02d}. {info.title}\n{info.album} | {info.duration_str}"
        item = QListWidgetItem(text)
        item.setData(Qt.ItemDataRole.UserRole, track.path)
        item.setIcon(self._icon_for(info))
        return item

    def _on_art_loaded(self, path: str) -> None:
        item = self._rows.get(path)
        if item is not None:
            item.setIcon(self._icon_for(self._cache.peek(path)))

    def _icon_for(self, info: Optional[TrackInfo]) -> QIcon:
        if info is None or not info.picture:
            return QIcon()
        px = QPixmap()
        if not px.loadFromData(info.picture):
            return QIcon()
        return QIcon(px.scaled(
            ICON_SIZE, ICON_SIZE,
            Qt.AspectRatioMode.KeepAspectRatio,
            Qt.TransformationMode.SmoothTransformation,
        ))
