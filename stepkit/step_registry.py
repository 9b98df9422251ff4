from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Mapping

from stepkit.step_types import StepRef


@dataclass(frozen=True)
class StepRegistry:
    """Ordered name -> step mapping.

    Iteration follows first-insertion order. Merging an entry whose name already
    exists replaces the target but keeps the original position.
    """

    _by_name: dict[str, StepRef]

    @classmethod
    def from_refs(cls, refs: Iterable[StepRef]) -> "StepRegistry":
        entries: dict[str, StepRef] = {}
        for ref in refs:
            if ref.name in entries:
                raise ValueError(f"Duplicate step name: {ref.name}")
            entries[ref.name] = ref
        return cls(_by_name=entries)

    @classmethod
    def empty(cls) -> "StepRegistry":
        return cls(_by_name={})

    def merged(self, targets: Mapping[str, Any]) -> "StepRegistry":
        entries = dict(self._by_name)
        for name, target in targets.items():
            current = entries.get(name)
            runs_last = current.runs_last if current is not None else False
            entries[name] = StepRef(name=name, target=target, runs_last=runs_last)
        return StepRegistry(_by_name=entries)

    def without(self, name: str) -> "StepRegistry":
        if name not in self._by_name:
            return self
        return StepRegistry(_by_name={k: v for k, v in self._by_name.items() if k != name})

    def filtered(self, names: Iterable[str]) -> "StepRegistry":
        keep = set(names)
        return StepRegistry(_by_name={k: v for k, v in self._by_name.items() if k in keep})

    def names(self) -> tuple[str, ...]:
        return tuple(self._by_name.keys())

    def refs(self) -> tuple[StepRef, ...]:
        return tuple(self._by_name.values())

    def get(self, name: str) -> StepRef | None:
        return self._by_name.get(name)

    def runs_last(self, name: str, cls: type | None = None) -> bool:
        ref = self._by_name.get(name)
        if ref is not None and ref.runs_last:
            return True
        return bool(cls is not None and getattr(cls, "RUNS_LAST", False))

    def describe(self) -> tuple[dict[str, Any], ...]:
        rows: list[dict[str, Any]] = []
        for ref in self._by_name.values():
            target = ref.target
            rows.append(
                {
                    "name": ref.name,
                    "target": f"{target.__module__}.{target.__qualname__}" if isinstance(target, type) else str(target),
                    "runs_last": ref.runs_last,
                    "doc": ref.doc,
                }
            )
        return tuple(rows)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[str]:
        return iter(self._by_name)

    def __len__(self) -> int:
        return len(self._by_name)
