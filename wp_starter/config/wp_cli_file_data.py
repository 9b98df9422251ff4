from __future__ import annotations

import shlex
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

FILE = "file"
ARGS = "args"
SKIP_WORDPRESS = "skip-wordpress"


@dataclass(frozen=True)
class WpCliFileData:
    """A file to be evaluated by WP CLI through `eval-file`."""

    file: str
    args: tuple[str, ...] = ()
    skip_wordpress: bool = False

    @classmethod
    def from_path(cls, path: str) -> "WpCliFileData":
        return cls(file=path.strip() if isinstance(path, str) else "")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "WpCliFileData":
        raw_file = data.get(FILE)
        raw_args = data.get(ARGS) or ()
        raw_skip = data.get(SKIP_WORDPRESS, False)

        file = raw_file.strip() if isinstance(raw_file, str) else ""
        if isinstance(raw_args, str):
            raw_args = (raw_args,)
        if not isinstance(raw_args, (list, tuple)) or not all(isinstance(arg, str) for arg in raw_args):
            file = ""
            raw_args = ()
        if not isinstance(raw_skip, bool):
            file = ""
            raw_skip = False

        return cls(file=file, args=tuple(raw_args), skip_wordpress=raw_skip)

    def valid(self) -> bool:
        return bool(self.file)

    def as_command(self) -> str:
        tokens = ["eval-file", self.file, *self.args]
        if self.skip_wordpress:
            tokens.append("--skip-wordpress")
        return shlex.join(tokens)
