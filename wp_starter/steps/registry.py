from __future__ import annotations

from functools import lru_cache

from stepkit.step_registry import StepRegistry
from stepkit.step_types import StepRef
from wp_starter.steps import core
from wp_starter.steps.wp_cli import WpCliCommandsStep


@lru_cache(maxsize=1)
def default_steps() -> StepRegistry:
    return StepRegistry.from_refs(
        (
            StepRef(core.CheckPathsStep.NAME, core.CheckPathsStep, doc="Check required paths."),
            StepRef(core.WpConfigStep.NAME, core.WpConfigStep, doc="Build wp-config.php."),
            StepRef(core.IndexStep.NAME, core.IndexStep, doc="Build the root index.php."),
            StepRef(core.MuLoaderStep.NAME, core.MuLoaderStep, doc="Build the MU plugins loader."),
            StepRef(core.EnvExampleStep.NAME, core.EnvExampleStep, doc="Copy the .env example."),
            StepRef(core.DropinsStep.NAME, core.DropinsStep, doc="Install configured dropins."),
            StepRef(core.ContentDevStep.NAME, core.ContentDevStep, doc="Publish content-dev folders."),
            StepRef(core.VcsIgnoreCheckStep.NAME, core.VcsIgnoreCheckStep, doc="Check VCS ignore rules."),
            StepRef(
                WpCliCommandsStep.NAME,
                WpCliCommandsStep,
                runs_last=True,
                doc="Run configured WP CLI commands.",
            ),
        )
    )
