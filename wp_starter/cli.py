from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence

from wp_starter.config.config import Config
from wp_starter.foundation.logging_utils import setup_logger
from wp_starter.framework.locator import Locator
from wp_starter.framework.selected_steps_factory import SelectedStepsFactory


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="wp-starter-steps", add_help=True)
    sub = parser.add_subparsers(dest="command", required=True)

    steps = sub.add_parser("steps", help="Resolve the steps to run")
    steps.add_argument("names", nargs="*", help="Step names to run (or to skip, with --skip)")
    steps.add_argument("--skip", action="store_true", help="Run every step except the given ones")
    steps.add_argument("--skip-custom", action="store_true", help="Ignore custom steps from config")
    steps.add_argument(
        "--ignore-skip-config",
        action="store_true",
        help="Do not honor the 'skip-steps' config setting",
    )
    _add_config_arguments(steps)

    sub.add_parser("list-steps", help="List default steps")

    validate = sub.add_parser("validate", help="Validate every known config setting")
    _add_config_arguments(validate)

    return parser


def _add_config_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", dest="config_path", default=None, help="Config file path")
    parser.add_argument("--root", default=None, help="Project root folder")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")


def _flags(args: argparse.Namespace) -> int:
    flags = 0
    if args.names or args.skip or args.skip_custom or args.ignore_skip_config:
        flags |= SelectedStepsFactory.MODE_COMMAND
    if args.skip:
        flags |= SelectedStepsFactory.MODE_OPT_OUT
    if args.skip_custom:
        flags |= SelectedStepsFactory.SKIP_CUSTOM_STEPS
    if args.ignore_skip_config:
        flags |= SelectedStepsFactory.IGNORE_SKIP_STEPS_CONFIG
    return flags


def run_steps(args: argparse.Namespace) -> int:
    logger = setup_logger(verbose=args.verbose)
    config, paths, meta = Config.from_file(config_path=args.config_path, root=args.root)
    logger.debug("Config loaded (mode=%s): %s", meta["mode"], ", ".join(meta["paths"]) or "<none>")

    factory = SelectedStepsFactory(_flags(args), *args.names)
    steps = factory.select_and_factory(Locator(config=config, paths=paths, logger=logger))

    if not steps:
        print(factory.last_fatal_error() or "No valid step to run found.", file=sys.stderr)
        return 1

    for step in steps:
        marker = "" if step.allowed() else " (not allowed)"
        print(f"{step.name()}{marker}")

    message = factory.last_error()
    if message:
        print(message, file=sys.stderr)
    return 0


def run_validate(args: argparse.Namespace) -> int:
    setup_logger(verbose=args.verbose)
    config, _paths, _meta = Config.from_file(config_path=args.config_path, root=args.root)

    failed = False
    for key in config.known_keys():
        result = config[key]
        if result.is_error():
            failed = True
            print(f"{key}: error {result.error_message()}")
        elif result.not_empty():
            print(f"{key}: ok")
        else:
            print(f"{key}: none")

    return 1 if failed else 0


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(list(argv) if argv is not None else None)

    if args.command == "steps":
        return run_steps(args)

    if args.command == "list-steps":
        from .steps.registry import default_steps

        for row in default_steps().describe():
            suffix = " (runs last)" if row["runs_last"] else ""
            print(f"{row['name']}: {row['doc']}{suffix}")
        return 0

    if args.command == "validate":
        return run_validate(args)

    raise AssertionError(f"Unhandled command: {args.command}")


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main(sys.argv[1:]))
