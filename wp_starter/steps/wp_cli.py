from __future__ import annotations

from wp_starter.config import config as cfg
from wp_starter.steps.base import BaseStep


class WpCliCommandsStep(BaseStep):
    """Runs the configured WP CLI commands and file evaluations, after every other step."""

    NAME = "wpcli"
    RUNS_LAST = True

    def commands(self) -> list[str]:
        commands = list(self.config[cfg.WP_CLI_COMMANDS].unwrap_or_fallback([]))
        for file_data in self.config[cfg.WP_CLI_FILES].unwrap_or_fallback([]):
            commands.append(file_data.as_command())
        return commands

    def allowed(self) -> bool:
        return bool(self.commands())
