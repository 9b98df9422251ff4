from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from stepkit.step_registry import StepRegistry
from stepkit.step_types import Step
from wp_starter.config import config as cfg
from wp_starter.framework.locator import Locator
from wp_starter.steps.registry import default_steps
from wp_starter.steps.wp_cli import WpCliCommandsStep

logger = logging.getLogger(__name__)


@dataclass
class SelectionRun:
    """Diagnostics and working state of a single `select_and_factory` call."""

    command_step_names: list[str]
    input_errors: int = 0
    config_errors: int = 0
    empty_opt_out_input: bool = False
    maybe_want_ignore_config: int = 0
    skipped: list[str] = field(default_factory=list)


class SelectedStepsFactory:
    """Turn default, custom and command steps into the ordered list of steps to run.

    Flags:
      - MODE_COMMAND: selection is driven by step names given on the command line;
      - MODE_OPT_OUT: given names are steps to skip instead of steps to run;
      - SKIP_CUSTOM_STEPS: ignore "custom-steps" configuration;
      - IGNORE_SKIP_STEPS_CONFIG: ignore "skip-steps" configuration.

    All flags but MODE_COMMAND only apply in command mode. Invalid names and settings
    never abort the selection: they are counted and reported by `last_error()` and
    `last_fatal_error()`.
    """

    MODE_COMMAND = 16
    MODE_OPT_OUT = 1
    SKIP_CUSTOM_STEPS = 2
    IGNORE_SKIP_STEPS_CONFIG = 4

    @classmethod
    def autorun(cls) -> "SelectedStepsFactory":
        return cls()

    def __init__(self, flags: int = 0, *step_names: str, registry: StepRegistry | None = None) -> None:
        if isinstance(flags, bool) or not isinstance(flags, int):
            raise TypeError(f"flags must be an int (type={type(flags).__name__})")
        for idx, name in enumerate(step_names):
            if not isinstance(name, str):
                raise TypeError(f"step_names[{idx}] must be a string (type={type(name).__name__})")

        self.command_mode = self._check_flag(flags, self.MODE_COMMAND)
        self.command_step_names: tuple[str, ...] = tuple(step_names) if self.command_mode else ()
        self.opt_out_mode = self.command_mode and self._check_flag(flags, self.MODE_OPT_OUT)
        self.skip_custom_steps = self.command_mode and self._check_flag(flags, self.SKIP_CUSTOM_STEPS)
        self.ignore_skip_config = self.command_mode and self._check_flag(
            flags, self.IGNORE_SKIP_STEPS_CONFIG
        )
        self._registry = registry
        self._last_run = SelectionRun(command_step_names=list(self.command_step_names))

    @staticmethod
    def _check_flag(flags: int, flag: int) -> bool:
        return (flags & flag) == flag

    def is_selected_command_mode(self) -> bool:
        return bool(self.command_step_names) and not self.opt_out_mode

    @property
    def last_run(self) -> SelectionRun:
        return self._last_run

    def select_and_factory(self, locator: Locator, composer: Any = None) -> list[Step]:
        run = SelectionRun(command_step_names=list(self.command_step_names))
        self._last_run = run

        available = self._available_steps(locator, run)
        if not available:
            return []

        to_factory = available
        if self.is_selected_command_mode():
            to_factory = self._selected_steps(available, run)

        return self._factory(to_factory, locator, composer, run)

    def last_error(self) -> str:
        return self._last_error_message(fatal=False)

    def last_fatal_error(self) -> str:
        return self._last_error_message(fatal=True)

    def _available_steps(self, locator: Locator, run: SelectionRun) -> StepRegistry:
        config = locator.config
        universe = self._registry if self._registry is not None else default_steps()

        custom_steps = config[cfg.CUSTOM_STEPS].unwrap_or_fallback({})
        if custom_steps and not self.skip_custom_steps:
            universe = universe.merged(custom_steps)

        command_steps = config[cfg.COMMAND_STEPS].unwrap_or_fallback({})
        if command_steps and self.command_mode:
            universe = universe.merged(command_steps)

        if not config[cfg.WP_CLI_FILES].not_empty() and not config[cfg.WP_CLI_COMMANDS].not_empty():
            universe = universe.without(WpCliCommandsStep.NAME)

        universe = self._filter_out_skipped_steps(universe, locator, run)
        return self._filter_out_invalid_steps(universe, run)

    def _filter_out_invalid_steps(self, universe: StepRegistry, run: SelectionRun) -> StepRegistry:
        valid: list[str] = []
        for ref in universe.refs():
            if ref.resolve() is None:
                logger.debug("Step '%s' does not resolve to a step class: %r", ref.name, ref.target)
                run.config_errors += 1
                continue
            valid.append(ref.name)

        return universe.filtered(valid)

    def _filter_out_skipped_steps(
        self,
        universe: StepRegistry,
        locator: Locator,
        run: SelectionRun,
    ) -> StepRegistry:
        if self.opt_out_mode and not run.command_step_names:
            run.empty_opt_out_input = True
            return StepRegistry.empty()

        skip_by_input = list(run.command_step_names) if self.opt_out_mode else []
        skip_by_config: list[Any] = []
        if not self.ignore_skip_config:
            raw_skip = locator.config[cfg.SKIP_STEPS].unwrap_or_fallback([])
            skip_by_config = list(raw_skip.values()) if isinstance(raw_skip, Mapping) else list(raw_skip)

        if not skip_by_input and not skip_by_config:
            return universe

        kept: list[str] = []
        skipped_by_input = 0
        skipped_by_config = 0
        command_step_names = list(run.command_step_names)
        for name in universe:
            skipped = False
            if name in skip_by_input:
                skipped_by_input += 1
                skipped = True

            if name in skip_by_config:
                skipped_by_config += 1
                skipped = True
                if not self.command_mode:
                    locator.logger.debug("- Step '%s' will be skipped: disabled in config.", name)
                # A step explicitly requested but disabled in config must not be built.
                command_step_names = [given for given in command_step_names if given != name]

            if skipped:
                run.skipped.append(name)
                continue
            kept.append(name)

        run.input_errors += len(skip_by_input) - skipped_by_input
        run.config_errors += len(skip_by_config) - skipped_by_config

        dropped = len(run.command_step_names) - len(command_step_names)
        if dropped:
            run.command_step_names = command_step_names
            run.maybe_want_ignore_config = dropped

        return universe.filtered(kept)

    def _selected_steps(self, universe: StepRegistry, run: SelectionRun) -> StepRegistry:
        selected: dict[str, Any] = {}
        for name in run.command_step_names:
            ref = universe.get(name)
            if ref is None:
                run.input_errors += 1
                continue
            selected[name] = ref

        return StepRegistry(_by_name=selected)

    def _factory(
        self,
        to_factory: StepRegistry,
        locator: Locator,
        composer: Any,
        run: SelectionRun,
    ) -> list[Step]:
        runs_last: list[Step] = []
        built: list[Step] = []

        for ref in to_factory.refs():
            step_class = ref.resolve()
            if step_class is None:
                run.config_errors += 1
                continue

            try:
                step = step_class(locator, composer)
                step_name = step.name()
            except Exception as exc:  # noqa: BLE001
                logger.debug("Step '%s' could not be built: %s", ref.name, exc, exc_info=True)
                run.config_errors += 1
                continue

            if step_name != ref.name:
                logger.debug("Step '%s' reports a different name: %r", ref.name, step_name)
                run.config_errors += 1
                continue

            if to_factory.runs_last(ref.name, step_class):
                runs_last.append(step)
                continue

            built.append(step)

        return built + runs_last

    def _last_error_message(self, *, fatal: bool) -> str:
        run = self._last_run

        if run.maybe_want_ignore_config:
            error = (
                f"{run.maybe_want_ignore_config} of the given step names have been ignored"
                if run.maybe_want_ignore_config > 1
                else "One given step name has been ignored"
            )
            error += " because ignored via configuration in JSON file"
            return f"{error}. You might want to use '--ignore-skip-config' flag to avoid that."

        if not run.input_errors and not run.config_errors and not run.empty_opt_out_input:
            return ""

        message = "No valid step to run found." if fatal else ""

        if run.input_errors:
            error = (
                f"Command input contains {run.input_errors} invalid steps names"
                if run.input_errors > 1
                else "Command input contains one invalid step name"
            )
            if not fatal:
                error += ", they will be ignored." if run.input_errors > 1 else " and it will be ignored."
            message += f"\n{error}." if fatal else error

        if run.empty_opt_out_input:
            return f"{message}\nCommand input was expecting one or more step names.".strip()

        if run.config_errors:
            also = "also " if run.input_errors else ""
            error = (
                f"Configuration {also}contains {run.config_errors} invalid steps settings"
                if run.config_errors > 1
                else f"Configuration {also}contains one invalid step setting"
            )
            if not fatal:
                error += ", they will be ignored" if run.config_errors > 1 else " and it will be ignored"
                error += " as well." if also else "."
            message += f"\n{error}." if fatal else f"\n{error}"

        return message.strip()
