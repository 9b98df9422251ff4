import json
import os

import pytest

from wp_starter.foundation.config_io import find_repo_root, load_config


def _project(tmp_path, composer=None):
    composer = composer if composer is not None else {"name": "acme/site"}
    (tmp_path / "composer.json").write_text(json.dumps(composer), encoding="utf-8")
    return tmp_path


def test_load_config_from_composer_extra(tmp_path, monkeypatch):
    monkeypatch.delenv("TEST_WP_STARTER_CONFIG", raising=False)
    root = _project(tmp_path, {"extra": {"wpstarter": {"skip-steps": ["dropins"]}}})

    cfg, meta = load_config(start_dir=root, env_var="TEST_WP_STARTER_CONFIG")

    assert cfg == {"skip-steps": ["dropins"]}
    assert meta["mode"] == "composer"
    assert os.path.basename(meta["paths"][0]) == "composer.json"


def test_load_config_prefers_dedicated_file(tmp_path, monkeypatch):
    monkeypatch.delenv("TEST_WP_STARTER_CONFIG", raising=False)
    root = _project(tmp_path, {"extra": {"wpstarter": {"a": 1}}})
    (root / "wpstarter.json").write_text('{"wp-version": "5.9"}', encoding="utf-8")

    cfg, meta = load_config(start_dir=root, env_var="TEST_WP_STARTER_CONFIG")

    assert cfg == {"wp-version": "5.9"}
    assert meta["mode"] == "file"


def test_load_config_base_plus_local_overlay(tmp_path, monkeypatch):
    monkeypatch.delenv("TEST_WP_STARTER_CONFIG", raising=False)
    root = _project(tmp_path)
    (root / "wpstarter.yaml").write_text("a: 1\nb:\n  c: 2\n", encoding="utf-8")
    (root / "wpstarter.local.yaml").write_text("b:\n  c: 3\n  d: 4\n", encoding="utf-8")

    cfg, meta = load_config(start_dir=root, env_var="TEST_WP_STARTER_CONFIG")

    assert cfg == {"a": 1, "b": {"c": 3, "d": 4}}
    assert meta["mode"] == "file+local"
    assert len(meta["paths"]) == 2


def test_load_config_composer_without_extra(tmp_path, monkeypatch):
    monkeypatch.delenv("TEST_WP_STARTER_CONFIG", raising=False)
    root = _project(tmp_path)

    cfg, meta = load_config(start_dir=root, env_var="TEST_WP_STARTER_CONFIG")

    assert meta["mode"] == "composer"
    assert cfg == {}


def test_load_config_overlay_type_mismatch_raises(tmp_path, monkeypatch):
    monkeypatch.delenv("TEST_WP_STARTER_CONFIG", raising=False)
    root = _project(tmp_path)
    (root / "wpstarter.yaml").write_text("a:\n  b: 1\n", encoding="utf-8")
    (root / "wpstarter.local.yaml").write_text("a: [1, 2]\n", encoding="utf-8")

    with pytest.raises(ValueError, match=r"Invalid config overlay merge at a"):
        load_config(start_dir=root, env_var="TEST_WP_STARTER_CONFIG")


def test_load_config_invalid_overlay_yaml_raises(tmp_path, monkeypatch):
    monkeypatch.delenv("TEST_WP_STARTER_CONFIG", raising=False)
    root = _project(tmp_path)
    (root / "wpstarter.yaml").write_text("a: 1\n", encoding="utf-8")
    (root / "wpstarter.local.yaml").write_text("a: [1, 2\n", encoding="utf-8")

    with pytest.raises(ValueError) as excinfo:
        load_config(start_dir=root, env_var="TEST_WP_STARTER_CONFIG")

    assert "wpstarter.local.yaml" in str(excinfo.value)


def test_load_config_rejects_non_mapping(tmp_path, monkeypatch):
    monkeypatch.delenv("TEST_WP_STARTER_CONFIG", raising=False)
    root = _project(tmp_path)
    (root / "wpstarter.json").write_text("[1, 2]", encoding="utf-8")

    with pytest.raises(ValueError, match=r"Config file must contain a mapping"):
        load_config(start_dir=root, env_var="TEST_WP_STARTER_CONFIG")


def test_load_config_env_override_loads_single_file(tmp_path, monkeypatch):
    base_dir = tmp_path / "base"
    base_dir.mkdir()
    root = _project(base_dir)
    (root / "wpstarter.yaml").write_text("a: 1\n", encoding="utf-8")
    (root / "wpstarter.local.yaml").write_text("a: 2\n", encoding="utf-8")
    env_path = tmp_path / "my_config.yaml"
    env_path.write_text("a: 999\n", encoding="utf-8")

    monkeypatch.setenv("TEST_WP_STARTER_CONFIG", str(env_path))
    cfg, meta = load_config(start_dir=root, env_var="TEST_WP_STARTER_CONFIG")

    assert cfg == {"a": 999}
    assert meta["mode"] == "env"
    assert meta["paths"] == [os.path.abspath(str(env_path))]


def test_load_config_explicit_composer_path(tmp_path, monkeypatch):
    monkeypatch.delenv("TEST_WP_STARTER_CONFIG", raising=False)
    root = _project(tmp_path, {"extra": {"wpstarter": {"dropins": []}}})

    cfg, meta = load_config(
        config_path=str(root / "composer.json"), env_var="TEST_WP_STARTER_CONFIG"
    )

    assert cfg == {"dropins": []}
    assert meta["mode"] == "explicit"


def test_find_repo_root_from_subdir(tmp_path):
    root = _project(tmp_path)
    nested = root / "public" / "wp-content"
    nested.mkdir(parents=True)

    assert os.path.realpath(find_repo_root(nested)) == os.path.realpath(str(root))
