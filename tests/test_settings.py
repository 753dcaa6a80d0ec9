"""Tests for config.settings: defaults, merging, extension checks."""

import json

import pytest

from config.settings import (
    DEFAULT_CONFIG, derive_color, load_config,
    normalise_extensions, save_config,
)


class TestLoadConfig:

    def test_missing_file_gives_defaults(self, tmp_path):
        config = load_config(str(tmp_path / "none.json"))
        assert config == DEFAULT_CONFIG
        assert config["extensions"] == [".flac", ".mp3"]
        assert config["min_duration_seconds"] == 20

    def test_defaults_are_not_shared(self, tmp_path):
        config = load_config(str(tmp_path / "none.json"))
        config["shortcuts"]["next"] = "N"
        assert DEFAULT_CONFIG["shortcuts"]["next"] == "Right"

    def test_file_values_override_defaults(self, tmp_path):
        path = tmp_path / "c.json"
        path.write_text(json.dumps({
            "min_duration_seconds": 45,
            "shortcuts": {"skip": "S"},
        }))
        config = load_config(str(path))
        assert config["min_duration_seconds"] == 45
        assert config["shortcuts"]["skip"] == "S"
        assert config["shortcuts"]["play_pause"] == "Space"
        assert config["volume"] == 80

    @pytest.mark.parametrize("content", ["{not json", "[1, 2]"])
    def test_bad_file_gives_defaults(self, tmp_path, content):
        path = tmp_path / "c.json"
        path.write_text(content)
        assert load_config(str(path)) == DEFAULT_CONFIG

    def test_save_then_load(self, tmp_path):
        path = tmp_path / "sub" / "c.json"
        config = load_config(str(path))
        config["last_folder"] = "/music"
        save_config(config, str(path))
        assert load_config(str(path))["last_folder"] == "/music"


class TestExtensions:

    def test_normalise(self):
        assert normalise_extensions(["MP3", ".Flac", " ", "ogg "]) == {".mp3", ".flac", ".ogg"}


def test_derive_color_clamps():
    assert derive_color("#fafafa", 20) == "#ffffff"
    assert derive_color("#101010", -32) == "#000000"
