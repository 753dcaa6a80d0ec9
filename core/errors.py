"""
core/errors.py
Exceptions raised by the scanner, playlist, controller and their collaborators.
"""


class PlayerError(Exception):
    """Base class for all player errors."""


class MetadataReadError(PlayerError):
    """A file's tags or stream info could not be read."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class EmptyPlaylistError(PlayerError):
    """A playlist operation needs at least one track."""


class EngineFailure(PlayerError):
    """The playback engine cannot open or play a track."""


class PersistenceError(PlayerError):
    """The ignore list could not be written."""
