from __future__ import annotations

import os

from wp_starter.config import config as cfg
from wp_starter.config.validator import ASK, OP_NONE, OVERWRITE_HARD
from wp_starter.steps.base import BaseStep


class CheckPathsStep(BaseStep):
    NAME = "checkpaths"


class _ProtectedFileStep(BaseStep):
    TARGET_FILE = ""

    def allowed(self) -> bool:
        if not self.config[cfg.PREVENT_OVERWRITE].is_(OVERWRITE_HARD):
            return True
        return not os.path.exists(self.locator.paths.root(self.TARGET_FILE))


class WpConfigStep(_ProtectedFileStep):
    NAME = "wpconfig"
    TARGET_FILE = "wp-config.php"


class IndexStep(_ProtectedFileStep):
    NAME = "index"
    TARGET_FILE = "index.php"


class MuLoaderStep(BaseStep):
    NAME = "muloader"


class EnvExampleStep(BaseStep):
    NAME = "envexample"

    def allowed(self) -> bool:
        return not self.config[cfg.ENV_EXAMPLE].is_(False)


class DropinsStep(BaseStep):
    NAME = "dropins"

    def allowed(self) -> bool:
        return self.config[cfg.DROPINS].not_empty()


class ContentDevStep(BaseStep):
    NAME = "publishcontentdev"

    def allowed(self) -> bool:
        operation = self.config[cfg.CONTENT_DEV_OPERATION]
        if operation.is_(OP_NONE) or operation.is_empty():
            return False
        if operation.is_(ASK):
            return True

        folder = self.config[cfg.CONTENT_DEV_DIR].unwrap_or_fallback()
        return bool(folder) and os.path.isdir(self.locator.paths.root(folder))


class VcsIgnoreCheckStep(BaseStep):
    NAME = "vcsignorecheck"
