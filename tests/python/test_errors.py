# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Tests for lwgraph Error Handling

Validates:
- Error hierarchy
- Error message formatting
- Suggestions and context in error messages
- Status and Result wrappers
"""

import pytest

from lwgraph.core.types import Result, Status, StatusCode
from lwgraph.errors import (
    ConfigurationError,
    EvaluationError,
    LwGraphError,
    format_width_mismatch,
)


class TestLwGraphError:
    """Tests for LwGraphError base class."""

    def test_basic_error(self):
        error = LwGraphError("Test error")
        assert "Test error" in str(error)

    def test_error_with_suggestions(self):
        """Test error with suggestions."""
        error = LwGraphError("Test error", suggestions=["Fix A", "Fix B"])
        msg = str(error)
        assert "Suggestions:" in msg
        assert "1. Fix A" in msg
        assert "2. Fix B" in msg

    def test_error_with_context(self):
        error = LwGraphError("Test error", context={"key1": "value1"})
        msg = str(error)
        assert "Context:" in msg
        assert "key1: value1" in msg

    def test_error_attributes(self):
        error = LwGraphError("Test error", suggestions=["Fix A"], context={"k": 1})
        assert error.message == "Test error"
        assert error.suggestions == ["Fix A"]
        assert error.context == {"k": 1}


class TestConfigurationError:
    """Tests for ConfigurationError."""

    def test_prefix(self):
        error = ConfigurationError("bad stack")
        assert "Configuration error:" in str(error)
        assert "bad stack" in str(error)

    def test_indices_in_context(self):
        error = ConfigurationError("bad stack", node_index=3, layer_index=1)
        assert error.node_index == 3
        assert error.layer_index == 1
        assert error.context == {"node_index": 3, "layer_index": 1}

    def test_default_suggestions(self):
        error = ConfigurationError("bad stack")
        assert len(error.suggestions) > 0

    def test_custom_suggestions_replace_defaults(self):
        error = ConfigurationError("bad stack", suggestions=["Only this"])
        assert error.suggestions == ["Only this"]

    def test_inheritance(self):
        with pytest.raises(LwGraphError):
            raise ConfigurationError("bad")


class TestEvaluationError:
    """Tests for EvaluationError."""

    def test_prefix_and_name(self):
        error = EvaluationError("no output", name="scores")
        assert "Evaluation failed:" in str(error)
        assert error.context["name"] == "scores"

    def test_no_context_without_details(self):
        assert EvaluationError("x").context == {}

    def test_width_mismatch_helper(self):
        error = format_width_mismatch(3, 2, "input vector", node_index=0)
        assert isinstance(error, EvaluationError)
        assert "expected 3, got 2" in str(error)
        assert error.node_index == 0


class TestResult:
    """Tests for Status and Result."""

    def test_status_ok(self):
        assert Status.Ok().ok()
        assert bool(Status.Ok())

    def test_status_from_error(self):
        status = Status.from_error(ConfigurationError("bad"))
        assert status.code == StatusCode.ConfigurationError
        assert not status
        status = Status.from_error(EvaluationError("bad"))
        assert status.code == StatusCode.EvaluationError

    def test_success(self):
        result = Result.success(42)
        assert result.ok()
        assert result.unwrap() == 42

    def test_failure_reraises_original(self):
        error = EvaluationError("missing input")
        result = Result.failure(error)
        assert not result
        assert result.value is None
        assert result.status.message == error.message
        with pytest.raises(EvaluationError) as info:
            result.unwrap()
        assert info.value is error
