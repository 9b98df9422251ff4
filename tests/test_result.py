import pytest

from stepkit.result import Result, ResultState


def test_none_ok_and_error_states_are_distinct():
    none = Result.none()
    ok = Result.ok("value")
    err = Result.errored("boom")

    assert none.state is ResultState.NONE
    assert ok.state is ResultState.OK
    assert err.state is ResultState.ERROR

    assert none.is_empty() and err.is_empty()
    assert ok.not_empty()
    assert not none.is_error()
    assert err.is_error()
    assert err.error_message() == "boom"
    assert none.error_message() == ""


def test_ok_with_none_value_is_none():
    assert Result.ok(None).state is ResultState.NONE


def test_unwrap_raises_on_error_and_none():
    assert Result.ok(3).unwrap() == 3

    with pytest.raises(ValueError, match=r"boom"):
        Result.errored("boom").unwrap()
    with pytest.raises(ValueError, match=r"empty result"):
        Result.none().unwrap()


def test_unwrap_or_fallback_never_raises():
    assert Result.errored("boom").unwrap_or_fallback("x") == "x"
    assert Result.none().unwrap_or_fallback() is None
    assert Result.ok(False).unwrap_or_fallback(True) is False


def test_is_and_either_are_type_strict():
    assert Result.ok(True).is_(True)
    assert not Result.ok(1).is_(True)
    assert not Result.ok(True).is_(1)
    assert Result.ok("copy").either("symlink", "copy")
    assert not Result.errored("x").either("x", None)
    assert not Result.none().is_(None)


def test_promise_runs_producer_once_and_memoizes():
    calls = []

    def producer():
        calls.append(1)
        return Result.ok(["a"])

    deferred = Result.promise(producer)
    assert calls == []

    assert deferred.unwrap() == ["a"]
    assert deferred.not_empty()
    assert deferred.unwrap() == ["a"]
    assert calls == [1]


def test_promise_collapses_to_error_and_stays_there():
    calls = []

    def producer():
        calls.append(1)
        return Result.errored("bad file")

    deferred = Result.promise(producer)
    assert deferred.is_error()
    assert deferred.error_message() == "bad file"
    assert deferred.is_empty()
    assert len(calls) == 1


def test_promise_producing_non_result_is_an_error():
    deferred = Result.promise(lambda: ["not", "a", "result"])
    assert deferred.is_error()
    assert "non-Result" in deferred.error_message()


def test_promise_reentrant_force_fails_loudly():
    holder = {}

    def producer():
        return holder["deferred"].force()

    holder["deferred"] = Result.promise(producer)
    with pytest.raises(RuntimeError, match=r"forced while its producer is running"):
        holder["deferred"].force()


def test_promise_requires_callable():
    with pytest.raises(TypeError, match=r"must be callable"):
        Result.promise("nope")
