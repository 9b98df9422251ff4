from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any, Callable, Iterator

from stepkit.result import Result
from wp_starter.config.validator import Validator
from wp_starter.foundation.config_io import load_config
from wp_starter.foundation.paths import Paths

CONTENT_DEV_DIR = "content-dev-dir"
CONTENT_DEV_OPERATION = "content-dev-op"
COMMAND_STEPS = "command-steps"
CUSTOM_STEPS = "custom-steps"
DROPINS = "dropins"
ENV_EXAMPLE = "env-example"
PREVENT_OVERWRITE = "prevent-overwrite"
SCRIPTS = "scripts"
SKIP_STEPS = "skip-steps"
WP_CLI_COMMANDS = "wp-cli-commands"
WP_CLI_FILES = "wp-cli-files"
WP_VERSION = "wp-version"

_VALIDATORS: dict[str, str] = {
    CONTENT_DEV_DIR: "validate_dir_name",
    CONTENT_DEV_OPERATION: "validate_content_dev_operation",
    COMMAND_STEPS: "validate_steps",
    CUSTOM_STEPS: "validate_steps",
    DROPINS: "validate_dropins",
    ENV_EXAMPLE: "validate_bool_or_ask_or_url_or_path",
    PREVENT_OVERWRITE: "validate_overwrite",
    SCRIPTS: "validate_scripts",
    SKIP_STEPS: "validate_array",
    WP_CLI_COMMANDS: "validate_wp_cli_commands",
    WP_CLI_FILES: "validate_wp_cli_files",
    WP_VERSION: "validate_wp_version",
}

DEFAULTS: dict[str, Any] = {
    CONTENT_DEV_DIR: "content-dev",
    CONTENT_DEV_OPERATION: "symlink",
    ENV_EXAMPLE: True,
    PREVENT_OVERWRITE: ["wp-config.php", "index.php"],
}


class Config(Mapping[str, Result]):
    """Raw settings plus their lazily validated, cached form.

    `config[key]` validates the raw value on first access and returns the same
    `Result` afterwards. Missing or null values give `Result.none()` without calling
    the validator; keys with no registered validator are wrapped as they are.
    """

    def __init__(
        self,
        raw: Mapping[str, Any],
        validator: Validator,
        *,
        defaults: Mapping[str, Any] | None = None,
    ) -> None:
        if not isinstance(raw, Mapping):
            raise TypeError(f"Config raw values must be a mapping (type={type(raw).__name__})")
        merged = dict(DEFAULTS if defaults is None else defaults)
        merged.update(raw)
        self._raw = merged
        self._validator = validator
        self._validated: dict[str, Result] = {}

    @classmethod
    def from_file(
        cls,
        *,
        config_path: str | None = None,
        root: str | os.PathLike[str] | None = None,
    ) -> tuple["Config", Paths, dict[str, Any]]:
        raw, meta = load_config(config_path=config_path, start_dir=root)
        paths = Paths(root or meta.get("repo_root") or os.getcwd())
        return cls(raw, Validator(paths)), paths, meta

    def validator_for(self, key: str) -> Callable[[Any], Result] | None:
        method = _VALIDATORS.get(key)
        return getattr(self._validator, method) if method else None

    def raw(self, key: str) -> Any:
        return self._raw.get(key)

    def known_keys(self) -> tuple[str, ...]:
        return tuple(sorted(set(_VALIDATORS) | set(self._raw)))

    def __getitem__(self, key: str) -> Result:
        if not isinstance(key, str) or not key.strip():
            raise TypeError("Config key must be a non-empty string")
        key = key.strip()

        cached = self._validated.get(key)
        if cached is not None:
            return cached

        value = self._raw.get(key)
        if value is None:
            result = Result.none()
        else:
            validate = self.validator_for(key)
            result = validate(value) if validate is not None else Result.ok(value)

        self._validated[key] = result
        return result

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self._raw.get(key) is not None

    def __iter__(self) -> Iterator[str]:
        return iter(self._raw)

    def __len__(self) -> int:
        return len(self._raw)
