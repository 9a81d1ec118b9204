# SPDX-License-Identifier: MIT
import json
from pathlib import Path

import pytest

from io_utils.loader import (
    _read_file,
    load_app_config,
    load_params_file,
    load_provenance_file,
)
from utils import CollectingErrorHandler


def test_load_params_json(tmp_path: Path) -> None:
    path = tmp_path / "params.json"
    path.write_text(json.dumps({"numPoints": 300, "token": "fx-flow-A"}))
    assert load_params_file(path) == {"numPoints": 300, "token": "fx-flow-A"}


def test_load_params_yaml(tmp_path: Path) -> None:
    path = tmp_path / "params.yml"
    path.write_text("numPoints: 300\ncolor1: '#ff0000'\nisAnimating: false\n")
    assert load_params_file(path) == {
        "numPoints": 300,
        "color1": "#ff0000",
        "isAnimating": False,
    }


def test_invalid_params_are_reported(tmp_path: Path) -> None:
    path = tmp_path / "params.json"
    path.write_text("[1, 2]")
    handler = CollectingErrorHandler()
    with pytest.raises(RuntimeError):
        load_params_file(path, handler)
    assert len(handler.messages) == 1
    assert "Error reading JSON file" in handler.messages[0]


def test_malformed_yaml(tmp_path: Path) -> None:
    path = tmp_path / "params.yaml"
    path.write_text("a: [unclosed\n")
    with pytest.raises(RuntimeError):
        load_params_file(path)


def test_missing_file(tmp_path: Path) -> None:
    handler = CollectingErrorHandler()
    with pytest.raises(FileNotFoundError):
        _read_file(tmp_path / "missing.json", handler)
    assert handler.messages[0].startswith("File not found")


def test_load_provenance(tmp_path: Path) -> None:
    path = tmp_path / "provenance.json"
    path.write_text(
        json.dumps(
            {
                "creator": "Ada",
                "timestamp": 1700000000,
                "feeling": "calm",
                "artist": "Grace",
                "artworkType": "tree",
            }
        )
    )
    provenance = load_provenance_file(path)
    assert provenance.creator == "Ada"
    assert provenance.location is None


def test_load_app_config_is_cached(tmp_path: Path) -> None:
    (tmp_path / "app.yaml").write_text("log_level: DEBUG\n")
    first = load_app_config(tmp_path, "app.yaml")
    assert first.log_level == "DEBUG"
    assert load_app_config(tmp_path, "app.yaml") is first


def test_empty_collecting_handler_is_used(tmp_path: Path) -> None:
    path = tmp_path / "provenance.yaml"
    path.write_text("creator: [unclosed\n")
    handler = CollectingErrorHandler()
    with pytest.raises(RuntimeError):
        load_provenance_file(path, handler)
    assert handler.messages
