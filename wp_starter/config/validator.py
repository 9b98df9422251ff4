"""Validation of raw WP Starter settings.

Raw values come from a JSON (or YAML) document, so there is no type safety: every
method accepts anything and returns a `Result`. Methods never raise.

- `Result.none()` means "no value given" (null, empty string, empty list...);
- `Result.errored(...)` means a value was given but it is not acceptable;
- `Result.ok(...)` wraps the validated (and possibly normalized) value.
"""

from __future__ import annotations

import json
import logging
import math
import os
import re
import runpy
import shlex
import subprocess
from collections.abc import Mapping
from typing import Any
from urllib.parse import urlsplit

import yaml

from stepkit.result import Result
from wp_starter.config.wp_cli_file_data import FILE, WpCliFileData
from wp_starter.foundation import wp_version
from wp_starter.foundation.paths import Paths, is_absolute_path, normalize_path

logger = logging.getLogger(__name__)

ASK = "ask"
OVERWRITE_HARD = "hard"

OP_SYMLINK = "symlink"
OP_COPY = "copy"
OP_NONE = "none"
CONTENT_DEV_OPERATIONS = (OP_SYMLINK, OP_COPY, OP_NONE)

PY_COMMANDS_VAR = "COMMANDS"

_TRUE_STRINGS = frozenset({"1", "true", "on", "yes"})
_FALSE_STRINGS = frozenset({"0", "false", "off", "no"})

_ENTITY_RE = re.compile(r"[A-Za-z_\u007f-\U0010ffff][A-Za-z0-9_\u007f-\U0010ffff]*")
_STATIC_CALLBACK_RE = re.compile(r"^([^:]+)::([^:]+)$")
_SCRIPT_NAME_RE = re.compile(r"^(?:pre|post)-.+$", re.DOTALL)
_INVALID_FILE_CHARS_RE = re.compile(r"[$+!*(),{}|^\[\]`\"<>#;?:&']")
_HARMLESS_FILE_CHARS = (" ", ".", "~", "%", "@", "=")
_REL_START_RE = re.compile(r"^\.{1,2}/(.*)$", re.DOTALL)
_DRIVE_START_RE = re.compile(
    r"^(?:[0-9a-z]{2,}:(?://(?:[a-z]:)?)?|[a-z]:)/?(.+)$", re.IGNORECASE | re.DOTALL
)
_WP_CLI_PATH_RE = re.compile(r"^(.+)(--path=[^ ]+)(.+)?$", re.DOTALL)
_NUMERIC_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")
_URL_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.\-]*$", re.IGNORECASE)

_PATH_ERROR = "Given value must be the path to an existing file or folder."
_WP_CLI_COMMANDS_ERROR = (
    "WP CLI commands must be either provided as array of commands, or path to a PHP "
    "file returning the array, or path to a JSON file containing the array."
)
_WP_CLI_FILE_LIST_ERROR = (
    "WP CLI commands must be either provided as path to a PHP file returning an array "
    "of commands or as path to a JSON file containing the array."
)
_PHP_DUMP_CODE = "echo json_encode(include $argv[1]);"


def is_blank(value: Any) -> bool:
    """True for the values a JSON document uses to say "nothing here"."""

    if value is None or value is False:
        return True
    if isinstance(value, str):
        return value == "" or value == "0"
    if isinstance(value, (int, float)):
        return value == 0
    if isinstance(value, (list, tuple, Mapping)):
        return len(value) == 0
    return False


def _items(value: Any) -> list[tuple[Any, Any]]:
    if isinstance(value, Mapping):
        return list(value.items())
    return list(enumerate(value))


class Validator:
    def __init__(self, paths: Paths) -> None:
        self._paths = paths

    def validate_overwrite(self, value: Any) -> Result:
        """
        Validate the "prevent overwrite" setting.

        Accepts:
          - "hard": never overwrite anything;
          - "ask": ask the user in case of existing file;
          - a boolean(-like), enabling or disabling the protection;
          - an array of glob paths that must not be overwritten.
        """

        if value is None:
            return Result.none()
        if isinstance(value, (list, tuple)):
            return self.validate_glob_path_array(value)
        if isinstance(value, str) and value.strip().lower() == OVERWRITE_HARD:
            return Result.ok(OVERWRITE_HARD)

        return self.validate_bool_or_ask(value)

    def validate_steps(self, value: Any) -> Result:
        """
        Validate a map of step name to step class path.

        A single class path (or a list of them) is accepted: in that case the step name
        is the last segment of the class path. Invalid entries are discarded.
        """

        if is_blank(value):
            return Result.none()

        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple, Mapping)):
            return Result.errored("Steps config must be an array.")

        steps: dict[str, str] = {}
        for name, step in _items(value):
            if not isinstance(step, str) or not self._is_valid_entity_name(step.strip()):
                continue

            class_path = step.strip().lstrip("\\").replace("\\", ".")
            if not isinstance(name, str):
                name = class_path.rsplit(".", 1)[-1]
            name = name.strip()
            if name:
                steps[name] = class_path

        if not steps:
            return Result.errored("No valid step classes provided.")

        return Result.ok(steps)

    def validate_scripts(self, value: Any) -> Result:
        """
        Validate callbacks executed before or after steps.

        Keys must be "pre-<step name>" or "post-<step name>", values either a callback
        or a list of callbacks. A callback is a function name, a "Class::method" string
        or a two items [class, method] list.
        """

        if is_blank(value):
            return Result.none()

        if not isinstance(value, Mapping):
            return Result.errored("Scripts config must be either a string or an array.")

        all_scripts: dict[str, list[Any]] = {}
        for name, scripts in value.items():
            if not isinstance(name, str):
                continue
            if isinstance(scripts, str):
                scripts = [scripts]
            if not isinstance(scripts, (list, tuple)):
                continue

            name = name.strip().lower()
            if not _SCRIPT_NAME_RE.match(name):
                continue

            valid = [script for script in scripts if self._is_callback(script)]
            if valid:
                all_scripts[name] = valid

        if not all_scripts:
            return Result.errored("No valid scripts provided.")

        return Result.ok(all_scripts)

    def validate_dropins(self, value: Any) -> Result:
        """Validate dropins to process: paths or URLs, even mixed."""

        if is_blank(value):
            return Result.none()

        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple, Mapping)):
            return Result.errored("Dropins config must be an array.")

        dropins: dict[str, str] = {}
        for name, dropin in _items(value):
            check = self.validate_url_or_path(dropin)
            if check.not_empty():
                validated = check.unwrap()
                dropins[name if isinstance(name, str) else validated] = validated

        if not dropins:
            return Result.errored("No valid dropins provided.")

        return Result.ok(dropins)

    def validate_content_dev_operation(self, value: Any) -> Result:
        """
        Validate the operation used to publish "content dev" folders.

        Accepts "ask", "symlink", "copy", "none", `True` (same as "symlink") and
        `False` (same as "none").
        """

        if value is None:
            return Result.none()

        if value == ASK:
            return Result.ok(ASK)

        if isinstance(value, str):
            value = value.strip().lower()
            if value in CONTENT_DEV_OPERATIONS:
                return Result.ok(value)

        as_bool = self.validate_bool(value)
        if not as_bool.either(True, False):
            return Result.errored(
                "'Dev Content' operation must be either: 'ask', 'symlink', 'copy', true or false."
            )

        return Result.ok(OP_SYMLINK) if as_bool.is_(True) else Result.ok(OP_NONE)

    def validate_wp_cli_commands(self, value: Any) -> Result:
        """
        Validate the WP CLI commands to execute.

        Accepts a list of commands as they would be typed in the terminal, or the path
        of a file providing that list (see `validate_wp_cli_commands_file_list`).
        Invalid commands are discarded as long as one valid command remains.
        """

        if is_blank(value):
            return Result.none()

        if isinstance(value, str):
            path = self.validate_path(value).unwrap_or_fallback()
            if not path:
                return Result.errored(_WP_CLI_COMMANDS_ERROR)
            return self.validate_wp_cli_commands_file_list(path)

        if isinstance(value, Mapping):
            value = list(value.values())
        if not isinstance(value, (list, tuple)):
            return Result.errored(_WP_CLI_COMMANDS_ERROR)

        commands: list[str] = []
        for raw in value:
            command = self.validate_wp_cli_command(raw)
            if command.not_empty():
                commands.append(command.unwrap())

        if not commands:
            return Result.errored(_WP_CLI_COMMANDS_ERROR)

        return Result.ok(commands)

    def validate_wp_cli_command(self, value: Any) -> Result:
        """Validate a single "wp ..." command; the result has no "wp " prefix."""

        if is_blank(value):
            return Result.none()

        if not isinstance(value, str):
            return Result.errored("A WP CLI command must be a string.")

        if not value.startswith("wp "):
            return Result.errored('A WP CLI command must start with "wp ".')

        value = value[3:]
        match = _WP_CLI_PATH_RE.match(value)
        if match:
            value = (match.group(1) + (match.group(3) or "")).strip()

        try:
            tokens = shlex.split(value)
        except ValueError as exc:
            return Result.errored(f"Invalid WP CLI command 'wp {value}': {exc}.")

        if not tokens:
            return Result.errored('A WP CLI command must contain a command after "wp ".')

        return Result.ok(shlex.join(tokens))

    def validate_wp_cli_files(self, value: Any) -> Result:
        """
        Validate files to be evaluated by WP CLI via `eval-file`.

        Each item is either a path or a mapping with "file", "args" and
        "skip-wordpress" keys. A single path or a single mapping is accepted.
        """

        if is_blank(value):
            return Result.none()

        if isinstance(value, str) or (isinstance(value, Mapping) and FILE in value):
            value = [value]
        if isinstance(value, Mapping):
            value = list(value.values())
        if not isinstance(value, (list, tuple)):
            return Result.errored("Files to be evaluated by WP CLI must be provided as array.")

        valid: list[WpCliFileData] = []
        for item in value:
            if isinstance(item, Mapping):
                data = WpCliFileData.from_mapping(item)
            elif isinstance(item, str):
                data = WpCliFileData.from_path(item)
            else:
                continue
            if data.valid():
                valid.append(data)

        if not valid:
            return Result.errored("No valid file has been provided to be evaluated by WP CLI.")

        return Result.ok(valid)

    def validate_wp_cli_commands_file_list(self, value: Any) -> Result:
        """
        Validate the path of a file providing WP CLI commands.

        JSON and YAML files are parsed right away and must contain a list. Python
        files (defining a module-level `COMMANDS` list) and PHP files (returning an
        array) are only executed when the returned result is first consulted.
        """

        if value is None:
            return Result.none()

        valid_path = self.validate_path(value)
        if not valid_path.not_empty():
            return Result.errored(_WP_CLI_FILE_LIST_ERROR)

        fullpath = valid_path.unwrap()
        if not os.path.isfile(fullpath) or not os.access(fullpath, os.R_OK):
            return Result.errored(f"{_WP_CLI_FILE_LIST_ERROR} {fullpath} is not a file or is not readable.")

        extension = os.path.splitext(fullpath)[1].lower().lstrip(".")

        if extension in ("json", "yaml", "yml"):
            try:
                with open(fullpath, "r", encoding="utf-8") as handle:
                    data = json.load(handle) if extension == "json" else yaml.safe_load(handle)
            except (OSError, ValueError, yaml.YAMLError) as exc:
                logger.debug("Cannot parse WP CLI commands file %s: %s", fullpath, exc)
                return Result.errored(_WP_CLI_FILE_LIST_ERROR)
            return self._commands_from_data(data)

        if extension == "py":
            return Result.promise(lambda: self._commands_from_python_file(fullpath))

        if extension == "php":
            return Result.promise(lambda: self._commands_from_php_file(fullpath))

        return Result.errored(_WP_CLI_FILE_LIST_ERROR)

    def validate_wp_version(self, value: Any) -> Result:
        """
        Validate a WordPress version.

        Only checks that the value looks like a version, e.g. "4.9.8" or "5.0-alpha".
        The wrapped value is normalized in the form "x.y.z".
        """

        if value is None:
            return Result.none()

        if isinstance(value, bool) or not isinstance(value, (str, int)):
            return Result.errored("WP version is expected to be a string or an integer.")

        normalized = wp_version.normalize(str(value))
        if not normalized:
            return Result.errored(f"{value} does not represent a valid WP version.")

        return Result.ok(normalized)

    def validate_bool_or_ask_or_url_or_path(self, value: Any) -> Result:
        bool_or_ask_or_url = self.validate_bool_or_ask_or_url(value)
        if bool_or_ask_or_url.not_empty():
            return bool_or_ask_or_url

        if not isinstance(value, str):
            return Result.errored(
                'Given value must be either a valid URL, a valid path, or a boolean, or "ask".'
            )

        return self.validate_path(value)

    def validate_bool_or_ask_or_url(self, value: Any) -> Result:
        bool_or_ask = self.validate_bool_or_ask(value)
        if bool_or_ask.not_empty():
            return bool_or_ask

        if isinstance(value, str):
            return self.validate_url(value.strip().lower())

        return Result.errored('Given value must be either a valid URL, a boolean or "ask".')

    def validate_bool_or_ask(self, value: Any) -> Result:
        if value == ASK:
            return Result.ok(ASK)

        return self.validate_bool(value)

    def validate_url_or_path(self, value: Any) -> Result:
        url = self.validate_url(value)
        if url.not_empty():
            return url

        return self.validate_path(value)

    def validate_path(self, value: Any) -> Result:
        """Validate an existing file or folder, as given or relative to the project root."""

        path = self.validate_dir_name(value).unwrap_or_fallback()
        if not path:
            return Result.errored(_PATH_ERROR)

        if os.path.isfile(path) or os.path.isdir(path):
            if not is_absolute_path(path):
                path = normalize_path(os.path.abspath(path))
            return Result.ok(path)

        fullpath = self._paths.root(path)
        if os.path.isfile(fullpath) or os.path.isdir(fullpath):
            return Result.ok(fullpath)

        return Result.errored(_PATH_ERROR)

    def validate_file_name(self, value: Any) -> Result:
        """
        Validate a file name.

        There is no reliable way to tell whether a string is a valid file name on every
        filesystem, so this rejects clearly wrong names: names with separators or
        special characters, names made only of dots/spaces/symbols, and names with "..".
        """

        if not isinstance(value, str):
            return Result.errored("A file name must be in a string.")

        normalized = normalize_path(value)
        if not normalized:
            return Result.errored(f"{value} is not a valid file name.")

        # "prefix" keeps basename() meaningful for names made only of non-ASCII chars.
        if os.path.basename(f"prefix{normalized}") != f"prefix{normalized}":
            return Result.errored(f"{value} is not a valid file name.")

        stripped = normalized
        for char in _HARMLESS_FILE_CHARS:
            stripped = stripped.replace(char, "")

        if _INVALID_FILE_CHARS_RE.search(normalized) or not stripped or ".." in normalized:
            return Result.errored(f"{value} is not a valid file name.")

        return Result.ok(normalized)

    def validate_dir_name(self, value: Any) -> Result:
        """
        Validate a folder name. No check is done on the folder existence.

        Every segment is checked with `validate_file_name`, after stripping a leading
        slash, leading relative segments and a drive/protocol prefix. The returned
        value is the whole normalized path.
        """

        if not isinstance(value, str):
            return Result.errored("Folder name must be in a string.")

        if value in (".", "./", "/"):
            return Result.ok(value)

        normalized = normalize_path(value)
        if not normalized:
            return Result.errored(f"{value} is not a valid folder name.")

        trimmed = normalized
        start_with_slash = trimmed.startswith("/")
        if start_with_slash:
            trimmed = trimmed[1:]

        while not start_with_slash:
            rel_start = _REL_START_RE.match(trimmed)
            if not rel_start:
                break
            trimmed = rel_start.group(1)

        if "/" not in trimmed:
            if not self.validate_file_name(trimmed).not_empty():
                return Result.errored(f"{value} is not a valid folder name.")
            return Result.ok(normalized)

        if trimmed == normalized:
            drive_start = _DRIVE_START_RE.match(trimmed)
            if drive_start:
                trimmed = drive_start.group(1)

        for part in trimmed.split("/"):
            if not self.validate_file_name(part).not_empty():
                return Result.errored(f"{value} is not a valid folder name.")

        return Result.ok(normalized)

    def validate_glob_path(self, value: Any) -> Result:
        """
        Validate a path to be used as a glob pattern.

        Glob characters are replaced with plain ones in two different ways and both
        resulting paths must be valid file or folder names.
        """

        if not isinstance(value, str) or not value:
            return Result.errored("Glob path must be in a non-empty string.")

        only_glob_chars = not value.replace("*", "").replace(".", "").replace("/", "").replace("?", "")
        if only_glob_chars and ".." not in value and "//" not in value:
            return Result.ok(value)

        probe1 = value.replace("*", "aa").replace("?", "a").replace("[", "").replace("]", "")
        probe2 = value.replace("*", "").replace("?", "a").replace("[", "").replace("]", "")

        valid1 = self._validate_dir_or_file_name(probe1)
        valid2 = self._validate_dir_or_file_name(probe2)

        if valid1.not_empty() and valid2.not_empty():
            return Result.ok(value)

        return Result.errored(f"{value} is not a valid glob path.")

    def validate_glob_path_array(self, value: Any) -> Result:
        if is_blank(value):
            return Result.none()

        if not isinstance(value, (list, tuple)):
            return Result.errored("Expected an array of glob paths, given value is not an array.")

        validated: list[str] = []
        for maybe_path in value:
            validated_path = self.validate_glob_path(maybe_path)
            if validated_path.not_empty():
                validated.append(validated_path.unwrap())

        if not validated:
            return Result.errored("None of the items of provided array represent a valid glob path.")

        return Result.ok(validated)

    def validate_url(self, value: Any) -> Result:
        if is_blank(value):
            return Result.none()

        if not isinstance(value, str):
            return Result.errored("URL must be in a string.")

        if not self._looks_like_url(value):
            return Result.errored(f"{value} is not a valid URL.")

        return Result.ok(value)

    def validate_bool(self, value: Any) -> Result:
        """
        Validate a boolean-like value.

        Besides actual booleans: "true"/"false", "yes"/"no", "on"/"off", "1"/"0"
        (case-insensitive) and the numbers 1/0. Null and empty strings are rejected.
        """

        error = "Given value does not represent a boolean."

        if isinstance(value, bool):
            return Result.ok(value)
        if isinstance(value, (int, float)):
            if value in (0, 1):
                return Result.ok(bool(value))
            return Result.errored(error)
        if isinstance(value, str):
            normalized = value.strip().lower()
            if normalized in _TRUE_STRINGS:
                return Result.ok(True)
            if normalized in _FALSE_STRINGS:
                return Result.ok(False)

        return Result.errored(error)

    def validate_int(self, value: Any) -> Result:
        """Validate an int, a float or a numeric string; the wrapped value is an int."""

        error = "Given value does not represent an integer."

        if isinstance(value, bool):
            return Result.errored(error)
        if isinstance(value, int):
            return Result.ok(value)
        if isinstance(value, str) and _NUMERIC_RE.match(value.strip()):
            value = float(value.strip())
        if isinstance(value, float):
            if math.isnan(value) or math.isinf(value):
                return Result.errored(error)
            return Result.ok(int(value))

        return Result.errored(error)

    def validate_array(self, value: Any) -> Result:
        if isinstance(value, Mapping):
            return Result.ok(dict(value))
        if isinstance(value, (list, tuple)):
            return Result.ok(list(value))

        return Result.errored("Given value is not, nor can be converted to, an array.")

    def validate_string(self, value: Any) -> Result:
        if value is None:
            return Result.none()
        if not isinstance(value, str):
            return Result.errored("Given value is not a string.")

        value = value.strip()
        return Result.ok(value) if value else Result.none()

    def _validate_dir_or_file_name(self, value: str) -> Result:
        if "/" in value or "\\" in value:
            return self.validate_dir_name(value)
        return self.validate_file_name(value)

    def _commands_from_data(self, data: Any) -> Result:
        if not isinstance(data, (list, tuple, Mapping)):
            return Result.errored(_WP_CLI_FILE_LIST_ERROR)
        return self.validate_wp_cli_commands(data)

    def _commands_from_python_file(self, fullpath: str) -> Result:
        try:
            namespace = runpy.run_path(fullpath, run_name="__wp_cli_commands__")
        except (Exception, SystemExit) as exc:  # noqa: BLE001
            logger.debug("Cannot run WP CLI commands file %s: %s", fullpath, exc)
            return Result.errored(_WP_CLI_FILE_LIST_ERROR)

        return self._commands_from_data(namespace.get(PY_COMMANDS_VAR))

    def _commands_from_php_file(self, fullpath: str) -> Result:
        try:
            completed = subprocess.run(
                ["php", "-r", _PHP_DUMP_CODE, "--", fullpath],
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as exc:
            logger.debug("Cannot run php for %s: %s", fullpath, exc)
            return Result.errored(_WP_CLI_FILE_LIST_ERROR)

        if completed.returncode != 0:
            logger.debug("php exited with %d for %s: %s", completed.returncode, fullpath, completed.stderr)
            return Result.errored(_WP_CLI_FILE_LIST_ERROR)

        try:
            data = json.loads(completed.stdout or "null")
        except ValueError:
            return Result.errored(_WP_CLI_FILE_LIST_ERROR)

        return self._commands_from_data(data)

    def _looks_like_url(self, value: str) -> bool:
        if not value or any(char.isspace() for char in value):
            return False
        try:
            parts = urlsplit(value)
            valid_port = parts.port is None or parts.port > 0
        except ValueError:
            return False

        return bool(valid_port and _URL_SCHEME_RE.match(parts.scheme or "") and parts.hostname)

    def _is_callback(self, script: Any) -> bool:
        if isinstance(script, (list, tuple)):
            return (
                len(script) == 2
                and isinstance(script[0], str)
                and isinstance(script[1], str)
                and bool(script[0])
                and bool(script[1])
                and self._is_valid_entity_name(script[0])
                and self._is_valid_entity_name(script[1], namespace=False)
            )

        if not isinstance(script, str) or not script:
            return False

        static = _STATIC_CALLBACK_RE.match(script)
        if static:
            return self._is_valid_entity_name(static.group(1)) and self._is_valid_entity_name(
                static.group(2), namespace=False
            )

        return self._is_valid_entity_name(script)

    def _is_valid_entity_name(self, value: str, *, namespace: bool = True) -> bool:
        if namespace:
            parts = re.split(r"[\\.]", value.lstrip("\\"))
        else:
            parts = [value]

        return all(_ENTITY_RE.fullmatch(part) for part in parts)
