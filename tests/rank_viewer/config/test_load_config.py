from __future__ import annotations

import json

import pytest

from rank_viewer.config.loader import load_dataset_registry, load_global_config
from rank_viewer.core.exceptions import ConfigError


def _write(path, payload):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(payload if isinstance(payload, str) else json.dumps(payload))


@pytest.fixture
def config_root(tmp_path):
    root = tmp_path / "config"
    _write(root / "global.json", {"ui_title": "Runs", "default_dataset": "A", "data_root": "../data"})
    _write(root / "datasets" / "a.json", {"name": "A", "file": "a.json"})
    _write(root / "datasets" / "b.json", {"name": "B", "file": "/abs/b.csv", "description": "second"})
    return root


def test_global_config_fields(config_root, tmp_path):
    cfg = load_global_config(config_root)

    assert cfg.ui_title == "Runs"
    assert cfg.default_dataset == "A"
    assert cfg.data_root == (tmp_path / "data").resolve()
    assert [d.name for d in cfg.datasets] == ["A", "B"]


def test_dataset_paths_resolve_against_data_root(config_root, tmp_path):
    _, registry = load_dataset_registry(config_root)

    assert registry["A"].path == (tmp_path / "data").resolve() / "a.json"
    assert str(registry["B"].path) == "/abs/b.csv"
    assert registry["B"].description == "second"


def test_missing_global_json(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_global_config(tmp_path)


def test_invalid_global_json(tmp_path):
    _write(tmp_path / "global.json", "{broken")

    with pytest.raises(ConfigError):
        load_global_config(tmp_path)


def test_broken_dataset_files_are_skipped(config_root):
    _write(config_root / "datasets" / "c.json", "{broken")
    _write(config_root / "datasets" / "d.json", {"name": "D"})

    _, registry = load_dataset_registry(config_root)

    assert sorted(registry) == ["A", "B"]


def test_duplicate_dataset_names(config_root):
    _write(config_root / "datasets" / "c.json", {"name": "A", "file": "other.json"})

    with pytest.raises(ConfigError, match="Duplicate"):
        load_dataset_registry(config_root)


def test_without_data_root_paths_are_relative_to_config_file(tmp_path):
    _write(tmp_path / "global.json", {})
    _write(tmp_path / "datasets" / "a.json", {"file": "a.json"})

    cfg, registry = load_dataset_registry(tmp_path)

    assert cfg.ui_title == "Ranking Browser"
    assert list(registry) == ["Dataset 0"]
    assert registry["Dataset 0"].path == tmp_path / "datasets" / "a.json"
