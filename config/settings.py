"""
config/settings.py
Handles application configuration: defaults, load, save, color utilities.
"""

import os
import json
import logging

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------

CONFIG_PATH = os.path.expanduser("~/.config/folder_player.json")
IGNORE_LIST_PATH = os.path.expanduser("~/.config/folder_player_ignorelist.txt")

# ---------------------------------------------------------------------------
# Audio
# ---------------------------------------------------------------------------

AUDIO_EXTENSIONS: set[str] = {".mp3", ".flac"}

MIN_DURATION_SECONDS = 20

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_CONFIG: dict = {
    "extensions":           sorted(AUDIO_EXTENSIONS),
    "min_duration_seconds": MIN_DURATION_SECONDS,
    "scan_workers":         None,
    "volume":               80,
    "last_folder":          "",
    "album_strip":          "Original Sound Track",
    "ignore_list_path":     IGNORE_LIST_PATH,
    "primary_color":        "#e94560",
    "accent_color":         "#a8c0ff",
    "background_color":     "#1a1a2e",
    "selection_color":      "#c73652",
    "font_family":          "Segoe UI",
    "font_size":            13,
    "shortcuts": {
        "play_pause": "Space",
        "next":       "Right",
        "random":     "R",
        "skip":       "Delete",
    },
}

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def normalise_extensions(extensions) -> frozenset[str]:
    """Lower-case *extensions* and make sure each starts with a dot."""
    result = set()
    for ext in extensions:
        ext = ext.strip().lower()
        if not ext:
            continue
        result.add(ext if ext.startswith(".") else f".{ext}")
    return frozenset(result)


def derive_color(hex_color: str, delta: int) -> str:
    """Lighten (delta > 0) or darken (delta < 0) a hex color."""
    hex_color = hex_color.lstrip("#")
    r = max(0, min(255, int(hex_color[0:2], 16) + delta))
    g = max(0, min(255, int(hex_color[2:4], 16) + delta))
    b = max(0, min(255, int(hex_color[4:6], 16) + delta))
    return f"#{r:02x}{g:02x}{b:02x}"


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------

def load_config(path: str = CONFIG_PATH) -> dict:
    config = json.loads(json.dumps(DEFAULT_CONFIG))
    if not os.path.exists(path):
        return config
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("Cannot read config %s, using defaults: %s", path, e)
        return config
    if not isinstance(data, dict):
        logger.warning("Ignoring config %s: top level is not an object", path)
        return config
    shortcuts = {**config["shortcuts"], **data.pop("shortcuts", {})}
    config.update(data)
    config["shortcuts"] = shortcuts
    return config


def save_config(config: dict, path: str = CONFIG_PATH) -> None:
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config, f, indent=2)
