"""Tests for verdicts, gate results and the validation run state machine."""

import pytest

from fervent.errors import InvalidStateTransition, SaveCancelled, ValidationFailed
from fervent.models import (
    GateResult,
    LifecyclePhase,
    RuleSet,
    ValidationRun,
    ValidationState,
    ValidationVerdict,
)


class TestValidationVerdict:
    """Test ValidationVerdict invariants and helpers."""

    def test_passed_has_no_errors(self):
        verdict = ValidationVerdict.passed()
        assert verdict.valid is True
        assert dict(verdict.errors) == {}
        assert verdict.count() == 0

    def test_from_errors_sets_validity(self):
        assert ValidationVerdict.from_errors({}).valid is True
        assert ValidationVerdict.from_errors({"email": ["required"]}).valid is False

    def test_valid_verdict_cannot_carry_errors(self):
        with pytest.raises(ValueError):
            ValidationVerdict(valid=True, errors={"email": ["required"]})

    def test_invalid_verdict_needs_errors(self):
        with pytest.raises(ValueError):
            ValidationVerdict(valid=False)

    def test_empty_message_list_rejected(self):
        with pytest.raises(ValueError):
            ValidationVerdict(valid=False, errors={"email": []})

    def test_verdict_is_immutable(self):
        verdict = ValidationVerdict.from_errors({"email": ["required"]})

        with pytest.raises(AttributeError):
            verdict.valid = True
        with pytest.raises(TypeError):
            verdict.errors["age"] = ("range:0-150",)
        assert verdict.errors["email"] == ("required",)

    def test_source_mapping_changes_do_not_leak(self):
        errors = {"email": ["required"]}
        verdict = ValidationVerdict.from_errors(errors)

        errors["email"].append("format:email")
        errors["age"] = ["range:0-150"]

        assert verdict.errors["email"] == ("required",)
        assert "age" not in verdict.errors

    def test_message_bag_helpers(self):
        verdict = ValidationVerdict.from_errors({
            "email": ["required"],
            "age": ["range:0-150", "integer"],
        })

        assert verdict.has("email")
        assert not verdict.has("name")
        assert verdict.first("age") == "range:0-150"
        assert verdict.first("name") is None
        assert verdict.get("name") == ()
        assert verdict.all() == ["required", "range:0-150", "integer"]
        assert verdict.count() == 3

    def test_verdict_is_hashable(self):
        first = ValidationVerdict.from_errors({"email": ["required"]})
        second = ValidationVerdict.from_errors({"email": ("required",)})

        assert hash(first) == hash(second)
        assert len({first, second, ValidationVerdict.passed()}) == 2

    def test_to_dict(self):
        verdict = ValidationVerdict.from_errors({"email": ["required"]})
        assert verdict.to_dict() == {"valid": False, "errors": {"email": ["required"]}}

    def test_raise_if_invalid(self):
        verdict = ValidationVerdict.from_errors({"email": ["required"]})

        with pytest.raises(ValidationFailed) as exc_info:
            verdict.raise_if_invalid()

        assert exc_info.value.verdict is verdict
        assert exc_info.value.errors["email"] == ("required",)
        assert ValidationVerdict.passed().raise_if_invalid().valid


class TestGateResult:
    """Test GateResult outcomes."""

    def test_blocked_result(self):
        verdict = ValidationVerdict.from_errors({"email": ["required"]})
        result = GateResult(verdict=verdict)

        assert not result.ok
        assert not result.ran
        with pytest.raises(ValidationFailed):
            result.unwrap()

    def test_successful_result(self):
        result = GateResult(verdict=ValidationVerdict.passed(), value=5, ran=True)
        assert result.ok
        assert result.unwrap() == 5

    def test_forced_invalid_result_is_not_ok_but_unwraps(self):
        verdict = ValidationVerdict.from_errors({"email": ["required"]})
        result = GateResult(verdict=verdict, value="saved", ran=True, forced=True)

        assert not result.ok
        assert result.unwrap() == "saved"

    def test_cancelled_result(self):
        result = GateResult(verdict=ValidationVerdict.passed(), cancelled=True)
        with pytest.raises(SaveCancelled):
            result.unwrap()


class TestRuleSet:
    """Test RuleSet overlay selection."""

    def test_overlay_for_phase(self):
        rule_set = RuleSet(
            rules={"name": ["required"]},
            rules_for_create={"password": ["required"]},
            rules_for_update={"name": ["length:1-10"]},
        )

        assert rule_set.overlay_for(LifecyclePhase.CREATING) == {"password": ["required"]}
        assert rule_set.overlay_for(LifecyclePhase.UPDATING) == {"name": ["length:1-10"]}

    def test_resolve_uses_phase_overlay(self):
        rule_set = RuleSet(
            rules={"name": ["required"]},
            rules_for_update={"name": ["length:1-10"]},
        )

        assert rule_set.resolve().literals() == {"name": ["required"]}
        assert rule_set.resolve(LifecyclePhase.UPDATING).literals() == {"name": ["length:1-10"]}


class TestValidationRun:
    """Test the per-call state machine."""

    def test_happy_path_to_passed(self):
        run = ValidationRun(LifecyclePhase.CREATING)
        assert run.state == ValidationState.IDLE

        run.advance(ValidationState.RESOLVING)
        run.advance(ValidationState.EXECUTING)
        verdict = run.finish(ValidationVerdict.passed())

        assert verdict.valid
        assert run.state == ValidationState.PASSED
        assert run.terminal
        assert run.history == [
            ValidationState.IDLE,
            ValidationState.RESOLVING,
            ValidationState.EXECUTING,
        ]

    def test_failed_verdict_ends_in_failed(self):
        run = ValidationRun(LifecyclePhase.UPDATING)
        run.advance(ValidationState.RESOLVING)
        run.advance(ValidationState.EXECUTING)
        run.finish(ValidationVerdict.from_errors({"email": ["required"]}))

        assert run.state == ValidationState.FAILED

    def test_cannot_skip_resolving(self):
        run = ValidationRun(LifecyclePhase.CREATING)
        with pytest.raises(InvalidStateTransition):
            run.advance(ValidationState.EXECUTING)

    def test_terminal_states_reject_transitions(self):
        run = ValidationRun(LifecyclePhase.CREATING)
        run.advance(ValidationState.RESOLVING)
        run.advance(ValidationState.EXECUTING)
        run.finish(ValidationVerdict.passed())

        with pytest.raises(InvalidStateTransition):
            run.advance(ValidationState.RESOLVING)
