"""Tests for the workflow value objects."""

import pytest

from fieldops_kernel.domain.workflow import Transition, Workflow


def _workflow(**overrides):
    values = dict(
        name="w",
        description="",
        initial_state="a",
        states=("a", "b"),
        transitions=(Transition("a", "b", "go"), Transition("b", "a", "back")),
    )
    values.update(overrides)
    return Workflow(**values)


class TestWorkflow:

    def test_find(self):
        workflow = _workflow()
        assert workflow.find("a", "go").to_state == "b"
        assert workflow.find("b", "go") is None

    def test_sources_for(self):
        assert _workflow().sources_for("back") == ("b",)

    def test_unknown_initial_state(self):
        with pytest.raises(ValueError):
            _workflow(initial_state="z")

    def test_transition_to_unknown_state(self):
        with pytest.raises(ValueError):
            _workflow(transitions=(Transition("a", "z", "go"),))
