"""
core/ignore_store.py
Text-file persistence for the ignore list: one filename per line.
"""

from __future__ import annotations

import os
import logging

from core.errors import PersistenceError

logger = logging.getLogger(__name__)


class IgnoreStore:
    """Loads and appends to the ignore list at *path*."""

    def __init__(self, path: str) -> None:
        self.path = path

    def load(self) -> set[str]:
        if not os.path.exists(self.path):
            return set()
        try:
            with open(self.path, encoding="utf-8") as f:
                names = {line.strip() for line in f}
        except OSError as e:
            logger.warning("Cannot read ignore list %s: %s", self.path, e)
            return set()
        names.discard("")
        logger.debug("Loaded %d ignored filenames from %s", len(names), self.path)
        return names

    def append(self, filename: str) -> None:
        try:
            folder = os.path.dirname(self.path)
            if folder:
                os.makedirs(folder, exist_ok=True)
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(filename + "\n")
        except OSError as e:
            raise PersistenceError(f"Cannot write {self.path}: {e}") from e
