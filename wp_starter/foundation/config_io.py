from __future__ import annotations

import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

CONFIG_ENV_VAR = "WP_STARTER_CONFIG"
CONFIG_FILE_NAMES = ("wpstarter.json", "wpstarter.yaml", "wpstarter.yml")
LOCAL_OVERLAY_NAME = "wpstarter.local.yaml"
COMPOSER_EXTRA_KEY = "wpstarter"


def find_repo_root(start: str | os.PathLike[str] | None = None) -> str:
    start_path = Path(start or os.getcwd()).resolve()
    if start_path.is_file():
        start_path = start_path.parent

    markers = ("composer.json", "pyproject.toml", ".git")
    for candidate in (start_path, *start_path.parents):
        if (candidate / "composer.json").is_file():
            return str(candidate)
        if (candidate / "pyproject.toml").is_file():
            return str(candidate)
        if (candidate / ".git").exists():
            return str(candidate)

    raise FileNotFoundError(
        "Cannot locate project root: searched from "
        f"{start_path} for {', '.join(markers)}"
    )


def _load_mapping(path: str) -> dict[str, Any]:
    is_json = path.lower().endswith(".json")
    try:
        with open(path, "r", encoding="utf-8") as handle:
            payload = json.load(handle) if is_json else yaml.safe_load(handle)
    except FileNotFoundError:
        raise
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc

    if payload is None:
        payload = {}
    if not isinstance(payload, Mapping):
        raise ValueError(f"Config file must contain a mapping: {path}")
    return dict(payload)


def _load_composer_extra(path: str) -> dict[str, Any]:
    composer = _load_mapping(path)
    extra = composer.get("extra")
    if extra is None:
        return {}
    if not isinstance(extra, Mapping):
        raise ValueError(f"composer.json 'extra' must be an object: {path}")

    payload = extra.get(COMPOSER_EXTRA_KEY)
    if payload is None:
        return {}
    if not isinstance(payload, Mapping):
        raise ValueError(f"composer.json 'extra.{COMPOSER_EXTRA_KEY}' must be an object: {path}")
    return dict(payload)


def _deep_merge(base: Any, overlay: Any, *, path: str) -> Any:
    if overlay is None:
        return None

    if base is None:
        return overlay

    if isinstance(base, Mapping):
        if not isinstance(overlay, Mapping):
            raise ValueError(
                f"Invalid config overlay merge at {path}: base is mapping but overlay is {type(overlay).__name__}"
            )
        merged: dict[str, Any] = dict(base)
        for key, overlay_value in overlay.items():
            next_path = f"{path}.{key}" if path else str(key)
            if key in base:
                merged[key] = _deep_merge(base[key], overlay_value, path=next_path)
            else:
                merged[key] = overlay_value
        return merged

    if isinstance(base, (list, tuple)):
        if not isinstance(overlay, (list, tuple)):
            raise ValueError(
                f"Invalid config overlay merge at {path}: base is list but overlay is {type(overlay).__name__}"
            )
        return list(overlay)

    if isinstance(overlay, (Mapping, list, tuple)):
        raise ValueError(
            f"Invalid config overlay merge at {path}: base is {type(base).__name__} but overlay is {type(overlay).__name__}"
        )

    return overlay


def load_config(
    *,
    config_path: str | None = None,
    start_dir: str | os.PathLike[str] | None = None,
    env_var: str | None = CONFIG_ENV_VAR,
) -> tuple[dict[str, Any], dict[str, Any]]:
    """
    Load the raw WP Starter settings.

    Lookup order:
      - explicit `config_path` or the `env_var` environment variable (single file, no overlay);
      - `wpstarter.json` / `wpstarter.yaml` / `wpstarter.yml` in the project root;
      - the `extra.wpstarter` object of the project's `composer.json`.

    A `wpstarter.local.yaml` file next to the project root is merged on top of the
    base settings when present.
    """

    explicit_path = None
    if config_path is not None:
        explicit_path = str(config_path).strip() or None
    elif env_var:
        raw_env = os.environ.get(str(env_var), "")
        explicit_path = raw_env.strip() or None

    if explicit_path:
        expanded = os.path.abspath(os.path.expandvars(os.path.expanduser(explicit_path)))
        if os.path.basename(expanded) == "composer.json":
            cfg = _load_composer_extra(expanded)
        else:
            cfg = _load_mapping(expanded)
        meta = {
            "mode": "env" if config_path is None else "explicit",
            "paths": [expanded],
            "env_var": env_var,
            "repo_root": None,
        }
        return cfg, meta

    repo_root = find_repo_root(start_dir)

    cfg: dict[str, Any] = {}
    loaded_paths: list[str] = []
    mode = "none"
    for name in CONFIG_FILE_NAMES:
        candidate = os.path.join(repo_root, name)
        if os.path.isfile(candidate):
            cfg = _load_mapping(candidate)
            loaded_paths.append(os.path.abspath(candidate))
            mode = "file"
            break
    else:
        composer_path = os.path.join(repo_root, "composer.json")
        if os.path.isfile(composer_path):
            cfg = _load_composer_extra(composer_path)
            loaded_paths.append(os.path.abspath(composer_path))
            mode = "composer"

    local_overlay_path = os.path.join(repo_root, LOCAL_OVERLAY_NAME)
    if os.path.exists(local_overlay_path):
        overlay = _load_mapping(local_overlay_path)
        cfg = _deep_merge(cfg, overlay, path="")
        loaded_paths.append(os.path.abspath(local_overlay_path))
        mode = f"{mode}+local"

    meta = {"mode": mode, "paths": loaded_paths, "env_var": env_var, "repo_root": repo_root}
    return cfg, meta
