"""Outcome value used across validation and step selection.

A `Result` is always in exactly one state: none (absent input, not an error), ok
(wraps a value), error (wraps a message) or deferred (wraps a producer that is run
at most once, the first time the result is observed).
"""

from __future__ import annotations

import enum
from typing import Any, Callable, Generic, TypeVar

T = TypeVar("T")


class ResultState(enum.Enum):
    NONE = "none"
    OK = "ok"
    ERROR = "error"
    DEFERRED = "deferred"


class Result(Generic[T]):
    __slots__ = ("_state", "_value", "_message", "_producer", "_forcing")

    def __init__(
        self,
        state: ResultState,
        *,
        value: Any = None,
        message: str = "",
        producer: Callable[[], "Result[T]"] | None = None,
    ) -> None:
        if state is ResultState.DEFERRED and producer is None:
            raise TypeError("Deferred result requires a producer")
        self._state = state
        self._value = value
        self._message = message
        self._producer = producer
        self._forcing = False

    @classmethod
    def none(cls) -> "Result[Any]":
        return cls(ResultState.NONE)

    @classmethod
    def ok(cls, value: T) -> "Result[T]":
        if value is None:
            return cls(ResultState.NONE)
        return cls(ResultState.OK, value=value)

    @classmethod
    def errored(cls, message: str) -> "Result[Any]":
        return cls(ResultState.ERROR, message=str(message))

    @classmethod
    def promise(cls, producer: Callable[[], "Result[T]"]) -> "Result[T]":
        if not callable(producer):
            raise TypeError(f"Result producer must be callable (type={type(producer).__name__})")
        return cls(ResultState.DEFERRED, producer=producer)

    def force(self) -> "Result[T]":
        """Collapse a deferred result in place; no-op for the other states."""

        if self._state is not ResultState.DEFERRED:
            return self
        if self._forcing:
            raise RuntimeError("Deferred result forced while its producer is running")

        producer = self._producer
        assert producer is not None
        self._forcing = True
        try:
            produced = producer()
        finally:
            self._forcing = False

        if not isinstance(produced, Result):
            produced = Result.errored(
                f"Result producer returned non-Result (type={type(produced).__name__})"
            )
        produced = produced.force()

        self._state = produced._state
        self._value = produced._value
        self._message = produced._message
        self._producer = None
        return self

    @property
    def state(self) -> ResultState:
        return self.force()._state

    def is_empty(self) -> bool:
        return self.state is not ResultState.OK

    def not_empty(self) -> bool:
        return self.state is ResultState.OK

    def is_error(self) -> bool:
        return self.state is ResultState.ERROR

    def error_message(self) -> str:
        return self._message if self.is_error() else ""

    def unwrap(self) -> T:
        state = self.state
        if state is ResultState.ERROR:
            raise ValueError(self._message)
        if state is ResultState.NONE:
            raise ValueError("Cannot unwrap an empty result")
        return self._value

    def unwrap_or_fallback(self, default: Any = None) -> Any:
        if self.state is ResultState.OK:
            return self._value
        return default

    def is_(self, value: Any) -> bool:
        if self.state is not ResultState.OK:
            return False
        current = self._value
        if type(current) is not type(value):
            return False
        try:
            return bool(current == value)
        except Exception:  # noqa: BLE001
            return False

    def either(self, *values: Any) -> bool:
        return any(self.is_(value) for value in values)

    def __repr__(self) -> str:
        state = self._state
        if state is ResultState.OK:
            return f"Result.ok({self._value!r})"
        if state is ResultState.ERROR:
            return f"Result.errored({self._message!r})"
        if state is ResultState.DEFERRED:
            return "Result.promise(<pending>)"
        return "Result.none()"


__all__ = ["Result", "ResultState"]
