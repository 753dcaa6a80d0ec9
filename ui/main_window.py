"""
ui/main_window.py
MainWindow: wires the folder scanner, the playback controller, the VLC
engine and the playlist view together, plus transport buttons and shortcuts.
"""

from __future__ import annotations

import os
import logging
from concurrent.futures import Future

from PyQt6.QtCore    import Qt, QTimer, pyqtSignal
from PyQt6.QtGui     import QKeySequence, QPixmap, QShortcut
from PyQt6.QtWidgets import (
    QFileDialog, QHBoxLayout, QLabel, QMainWindow, QPushButton,
    QVBoxLayout, QWidget,
)

from audio.engine     import VlcEngine
from audio.metadata   import MetadataCache, MutagenMetadataProvider, format_duration
from config.settings  import DEFAULT_CONFIG, load_config, save_config
from config           import log_config
from core.controller  import PlaybackController, PlaybackState
from core.ignore_store import IgnoreStore
from core.scanner     import LibraryScanner, ScanResult
from ui.playlist      import PlaylistWidget
from ui.style         import build_stylesheet
from ui.widgets       import ClickableSlider

logger = logging.getLogger(__name__)

ART_SIZE = 90
SEEK_STEPS = 1_000


class MainWindow(QMainWindow):
    """Folder player main window."""

    _events_pending = pyqtSignal()
    _scan_finished  = pyqtSignal(int, bool, str, object)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def __init__(self) -> None:
        super().__init__()
        self.setWindowTitle("Folder Player")
        self.setMinimumSize(520, 600)
        self.resize(640, 760)

        self._config    = load_config()
        self._shortcuts: dict[str, QShortcut] = {}
        self._shown_tracks: tuple = ()

        provider = MutagenMetadataProvider(self._config.get("album_strip", ""))
        self._info     = MetadataCache(provider)
        self._scanner  = LibraryScanner(provider, self._config.get("scan_workers"))
        self._engine   = VlcEngine()
        self._controller = PlaybackController(
            self._engine,
            IgnoreStore(self._config["ignore_list_path"]),
            wakeup=self._events_pending.emit,
        )
        self._events_pending.connect(
            self._drain_events, Qt.ConnectionType.QueuedConnection
        )
        self._scan_finished.connect(
            self._on_scan_finished, Qt.ConnectionType.QueuedConnection
        )
        self._controller.add_listener(self._render)

        self._timer_progress = QTimer(self)
        self._timer_progress.setInterval(1_000)
        self._timer_progress.timeout.connect(self._update_progress)

        self._build_ui()
        self.setStyleSheet(build_stylesheet(self._config))
        self._apply_shortcuts()
        self._controller.set_volume(self._config["volume"])

        if log_config.LOG_FILE_PATH:
            self.statusBar().showMessage(f"Log: {log_config.LOG_FILE_PATH}")

    # ------------------------------------------------------------------
    # UI construction
    # ------------------------------------------------------------------

    def _build_ui(self) -> None:
        root = QWidget()
        self.setCentralWidget(root)
        layout = QVBoxLayout(root)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        header = QHBoxLayout()
        self._folder_label = QLabel("No folder")
        self._folder_label.setObjectName("folderLabel")
        header.addWidget(self._folder_label, 1)
        header.addWidget(self._ctrl_btn("Open folder", lambda: self._choose_folder(False)))
        header.addWidget(self._ctrl_btn("Add folder",  lambda: self._choose_folder(True)))
        layout.addLayout(header)

        self._playlist = PlaylistWidget(self._info)
        self._playlist.itemDoubleClicked.connect(
            lambda item: self._controller.select_track(self._playlist.row(item))
        )
        layout.addWidget(self._playlist, 1)

        # ── Now playing bar ─────────────────────────────────────────────
        bar = QWidget()
        bar.setObjectName("nowPlaying")
        bar_layout = QHBoxLayout(bar)
        bar_layout.setContentsMargins(8, 8, 12, 8)
        bar_layout.setSpacing(12)

        self._album_art = QLabel()
        self._album_art.setObjectName("albumArt")
        self._album_art.setFixedSize(ART_SIZE, ART_SIZE)
        self._album_art.setAlignment(Qt.AlignmentFlag.AlignCenter)
        bar_layout.addWidget(self._album_art)

        col = QVBoxLayout()
        col.setSpacing(4)
        bar_layout.addLayout(col, 1)

        self._track_label = QLabel("— No track —")
        self._track_label.setObjectName("trackLabel")
        self._file_label = QLabel("")
        self._file_label.setObjectName("fileLabel")
        col.addWidget(self._track_label)
        col.addWidget(self._file_label)

        prog_row = QHBoxLayout()
        self._progress = ClickableSlider(Qt.Orientation.Horizontal)
        self._progress.setRange(0, SEEK_STEPS)
        self._progress.released.connect(
            lambda v: self._controller.seek(v / SEEK_STEPS)
        )
        self._time_label = QLabel("0:00 / 0:00")
        self._time_label.setObjectName("timeLabel")
        self._time_label.setFixedWidth(90)
        self._time_label.setAlignment(Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter)
        prog_row.addWidget(self._progress)
        prog_row.addWidget(self._time_label)
        col.addLayout(prog_row)

        btn_row = QHBoxLayout()
        self._btn_play = self._ctrl_btn("Play",   self._controller.toggle_play_pause)
        btn_row.addWidget(self._btn_play)
        btn_row.addWidget(self._ctrl_btn("Next",   self._controller.next_track))
        btn_row.addWidget(self._ctrl_btn("Random", self._controller.select_random_track))
        btn_row.addWidget(self._ctrl_btn("Skip",   self._controller.skip_and_advance))
        btn_row.addStretch()

        self._volume = ClickableSlider(Qt.Orientation.Horizontal)
        self._volume.setRange(0, 100)
        self._volume.setValue(self._config["volume"])
        self._volume.setFixedWidth(110)
        self._volume.valueChanged.connect(self._on_volume)
        btn_row.addWidget(QLabel("Vol"))
        btn_row.addWidget(self._volume)
        col.addLayout(btn_row)

        layout.addWidget(bar)
        self._show_no_art()

    def _ctrl_btn(self, label: str, slot) -> QPushButton:
        btn = QPushButton(label)
        btn.setObjectName("controlButton")
        btn.clicked.connect(lambda _checked=False: slot())
        return btn

    def _apply_shortcuts(self) -> None:
        for sc in self._shortcuts.values():
            sc.setEnabled(False)
        self._shortcuts.clear()
        mapping = {
            "play_pause": self._controller.toggle_play_pause,
            "next":       self._controller.next_track,
            "random":     self._controller.select_random_track,
            "skip":       self._controller.skip_and_advance,
        }
        shortcuts = self._config.get("shortcuts", DEFAULT_CONFIG["shortcuts"])
        for key, slot in mapping.items():
            seq = shortcuts.get(key, DEFAULT_CONFIG["shortcuts"][key])
            sc  = QShortcut(QKeySequence(seq), self)
            sc.activated.connect(slot)
            self._shortcuts[key] = sc

    # ------------------------------------------------------------------
    # Scanning
    # ------------------------------------------------------------------

    def _choose_folder(self, append: bool) -> None:
        start = self._config.get("last_folder") or os.path.expanduser("~")
        folder = QFileDialog.getExistingDirectory(self, "Select a folder", start)
        if folder:
            self.open_folder(folder, append=append)

    def open_folder(self, folder: str, append: bool = False) -> None:
        token = self._controller.begin_scan()
        future = self._scanner.submit(
            folder,
            self._config["extensions"],
            self._controller.ignored,
            self._config["min_duration_seconds"],
        )
        future.add_done_callback(
            lambda f: self._scan_finished.emit(token, append, folder, f)
        )
        self._folder_label.setText(os.path.basename(os.path.normpath(folder)))
        self.statusBar().showMessage(f"Scanning {folder}…")
        self._config["last_folder"] = folder

    def _on_scan_finished(self, token: int, append: bool, folder: str, future: Future) -> None:
        if future.cancelled():
            return
        try:
            result: ScanResult = future.result()
        except Exception as e:
            logger.exception("Scan of %s failed", folder)
            self.statusBar().showMessage(f"Scan failed: {e}")
            return
        if result.superseded:
            return
        self._info.seed(result.info)
        self._controller.load_tracks(token, result.tracks, append=append)
        extra = f", {len(result.errors)} unreadable" if result.errors else ""
        self.statusBar().showMessage(
            f"{len(result.tracks)} tracks from {os.path.basename(folder)}{extra}"
        )

    # ------------------------------------------------------------------
    # Controller events
    # ------------------------------------------------------------------

    def _drain_events(self) -> None:
        self._controller.process_events()

    def _render(self, controller: PlaybackController) -> None:
        tracks = tuple(controller.playlist.tracks)
        if tracks != self._shown_tracks:
            self._shown_tracks = tracks
            self._playlist.set_tracks(list(tracks))
        self._playlist.select_row(controller.playlist.current_index)

        playing = controller.state is PlaybackState.PLAYING
        self._btn_play.setText("Pause" if playing else "Play")
        if playing:
            self._timer_progress.start()
        else:
            self._timer_progress.stop()
        if controller.state is PlaybackState.STOPPED:
            self._progress.setValue(0)
            self._time_label.setText("0:00 / 0:00")

        track = controller.current_track
        if track is None:
            self._track_label.setText("— No track —")
            self._file_label.setText("")
            self._show_no_art()
            return
        info = self._info.full(track.path)
        if info is None:
            self._track_label.setText(track.filename)
            self._show_no_art()
        else:
            self._track_label.setText(f"{info.album} - {info.title}" if info.album else info.title)
            self._update_album_art(info.picture)
        self._file_label.setText(track.filename)

    def _update_progress(self) -> None:
        if self._progress.isSliderDown():
            return
        total = self._controller.length_ms()
        if total > 0:
            self._progress.setValue(int(self._controller.position_fraction() * SEEK_STEPS))
            cur = self._controller.time_ms()
            self._time_label.setText(
                f"{format_duration(cur / 1_000)} / {format_duration(total / 1_000)}"
            )

    def _on_volume(self, value: int) -> None:
        self._config["volume"] = value
        self._controller.set_volume(value)

    # ------------------------------------------------------------------
    # Album art
    # ------------------------------------------------------------------

    def _update_album_art(self, data) -> None:
        if data:
            px = QPixmap()
            px.loadFromData(data)
            if not px.isNull():
                px = px.scaled(ART_SIZE, ART_SIZE,
                               Qt.AspectRatioMode.KeepAspectRatio,
                               Qt.TransformationMode.SmoothTransformation)
                self._album_art.setPixmap(px)
                self._album_art.setText("")
                return
        self._show_no_art()

    def _show_no_art(self) -> None:
        self._album_art.setPixmap(QPixmap())
        self._album_art.setText("♪")

    # ------------------------------------------------------------------
    # Close
    # ------------------------------------------------------------------

    def closeEvent(self, event) -> None:
        self._timer_progress.stop()
        self._scanner.shutdown()
        self._info.shutdown()
        self._engine.stop()
        try:
            save_config(self._config)
        except OSError as e:
            logger.warning("Cannot save config: %s", e)
        event.accept()
