import pytest

from stepkit.step_registry import StepRegistry
from stepkit.step_types import Step, StepRef, is_step_class, resolve_step_class
from wp_starter.steps import default_steps
from wp_starter.steps.core import DropinsStep, MuLoaderStep
from wp_starter.steps.wp_cli import WpCliCommandsStep


class PlainStep:
    def name(self):
        return "plain"

    def allowed(self):
        return True


class NotAStep:
    def name(self):
        return "nope"


def test_step_capability_is_structural():
    assert is_step_class(PlainStep)
    assert is_step_class(MuLoaderStep)
    assert not is_step_class(NotAStep)
    assert not is_step_class(PlainStep())
    assert isinstance(PlainStep(), Step)


@pytest.mark.parametrize(
    "target",
    [
        "wp_starter.steps.core.DropinsStep",
        "wp_starter\\steps\\core\\DropinsStep",
        "\\wp_starter\\steps\\core\\DropinsStep",
        DropinsStep,
    ],
)
def test_resolve_step_class(target):
    assert resolve_step_class(target) is DropinsStep


@pytest.mark.parametrize(
    "target",
    ["acme.missing.Step", "wp_starter.steps.core.Missing", "collections.OrderedDict", "Dropins", "", 3, NotAStep],
)
def test_resolve_step_class_returns_none_for_non_steps(target):
    assert resolve_step_class(target) is None


def test_step_ref_validates_name():
    assert StepRef(" a ", PlainStep).name == "a"
    with pytest.raises(TypeError, match=r"non-empty string"):
        StepRef("  ", PlainStep)
    with pytest.raises(TypeError, match=r"doc"):
        StepRef("a", PlainStep, doc="")


def test_registry_rejects_duplicate_names():
    with pytest.raises(ValueError, match=r"Duplicate step name: a"):
        StepRegistry.from_refs([StepRef("a", PlainStep), StepRef("a", MuLoaderStep)])


def test_merge_keeps_first_position_and_runs_last_flag():
    registry = StepRegistry.from_refs(
        [StepRef("a", PlainStep), StepRef("last", PlainStep, runs_last=True), StepRef("b", PlainStep)]
    )

    merged = registry.merged({"last": "acme.Replacement", "c": "acme.New", "a": MuLoaderStep})

    assert merged.names() == ("a", "last", "b", "c")
    assert merged.get("a").target is MuLoaderStep
    assert merged.get(" a ") is None
    assert merged.get("last").target == "acme.Replacement"
    assert merged.runs_last("last")
    assert not merged.runs_last("c")
    assert registry.names() == ("a", "last", "b")


def test_without_and_filtered_keep_order():
    registry = StepRegistry.from_refs([StepRef(name, PlainStep) for name in ("a", "b", "c", "d")])

    assert registry.without("b").names() == ("a", "c", "d")
    assert registry.without("zzz") is registry
    assert registry.filtered(["d", "a"]).names() == ("a", "d")
    assert list(registry) == ["a", "b", "c", "d"]
    assert len(StepRegistry.empty()) == 0


def test_runs_last_from_class_attribute():
    registry = StepRegistry.from_refs([StepRef("wpcli", "some.path")])

    assert registry.runs_last("wpcli", WpCliCommandsStep)
    assert not registry.runs_last("wpcli", PlainStep)
    assert not registry.runs_last("wpcli")


def test_default_steps_order_and_description():
    registry = default_steps()

    assert registry.names() == (
        "checkpaths",
        "wpconfig",
        "index",
        "muloader",
        "envexample",
        "dropins",
        "publishcontentdev",
        "vcsignorecheck",
        "wpcli",
    )
    rows = registry.describe()
    assert rows[-1]["runs_last"] is True
    assert rows[0]["target"] == "wp_starter.steps.core.CheckPathsStep"
    assert all(row["doc"] for row in rows)
    assert all(ref.resolve() is not None for ref in registry.refs())
