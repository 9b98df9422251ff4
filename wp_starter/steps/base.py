from __future__ import annotations

from typing import Any, ClassVar

from wp_starter.framework.locator import Locator


class BaseStep:
    """Common constructor and name accessor for WP Starter steps.

    Subclasses set `NAME`; `RUNS_LAST = True` marks steps that must be placed after
    every other selected step.
    """

    NAME: ClassVar[str] = ""
    RUNS_LAST: ClassVar[bool] = False

    def __init__(self, locator: Locator, composer: Any = None) -> None:
        if not isinstance(locator, Locator):
            raise TypeError(f"Step locator must be a Locator (type={type(locator).__name__})")
        self.locator = locator
        self.composer = composer

    @property
    def config(self):
        return self.locator.config

    def name(self) -> str:
        return self.NAME

    def allowed(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name()!r})"
