from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class Step(Protocol):
    def name(self) -> str:
        ...

    def allowed(self) -> bool:
        ...


def is_step_class(target: Any) -> bool:
    if not isinstance(target, type):
        return False
    try:
        return issubclass(target, Step)
    except TypeError:
        return False


def resolve_step_class(target: Any) -> type | None:
    """Return the step class for a class object or a dotted class path, or None."""

    if isinstance(target, type):
        return target if is_step_class(target) else None
    if not isinstance(target, str) or not target.strip():
        return None

    path = target.strip().lstrip("\\").replace("\\", ".")
    module_name, _, class_name = path.rpartition(".")
    if not module_name or not class_name:
        return None
    try:
        module = importlib.import_module(module_name)
    except Exception as exc:  # noqa: BLE001
        logger.debug("Cannot import step module %s: %s", module_name, exc)
        return None

    cls = getattr(module, class_name, None)
    return cls if is_step_class(cls) else None


@dataclass(frozen=True)
class StepRef:
    name: str
    target: Any
    runs_last: bool = False
    doc: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise TypeError("StepRef.name must be a non-empty string")
        object.__setattr__(self, "name", self.name.strip())

        if self.doc is not None and (not isinstance(self.doc, str) or not self.doc.strip()):
            raise TypeError("StepRef.doc must be a non-empty string or None")

    def resolve(self) -> type | None:
        return resolve_step_class(self.target)
