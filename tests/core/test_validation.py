"""
Tests for input validation utilities.

Validates every function in core/validation.py:
    - check_array: conversion, dtype coercion, object rejection
    - check_finite: NaN/Inf detection
    - check_consistent_length: multi-array length matching
    - check_conf_level: open unit interval
    - check_positive_int: integer >= 1
"""

import numpy as np
import pytest

from pyduration.core.exceptions import DimensionError, ValidationError
from pyduration.core.validation import (
    check_array,
    check_conf_level,
    check_consistent_length,
    check_finite,
    check_positive_int,
)


# ═══════════════════════════════════════════════════════════════════════
# check_array / check_finite
# ═══════════════════════════════════════════════════════════════════════


class TestCheckArray:
    """check_array converts to a float ndarray and rejects non-numeric data."""

    def test_ints_promoted_to_float(self):
        result = check_array([1, 2, 3], "time")
        assert result.dtype == np.float64

    def test_bools_promoted_to_float(self):
        result = check_array([True, False], "event")
        assert result.dtype == np.float64
        np.testing.assert_array_equal(result, [1.0, 0.0])

    def test_float32_preserved(self):
        result = check_array(np.ones(3, dtype=np.float32), "X")
        assert result.dtype == np.float32

    def test_rejects_mixed_types(self):
        with pytest.raises(ValidationError, match="newdata"):
            check_array([1, "a", None], "newdata")

    def test_rejects_strings(self):
        with pytest.raises(ValidationError, match="non-numeric"):
            check_array(["a", "b"], "X")


class TestCheckFinite:

    def test_finite_passes(self):
        check_finite(np.array([1.0, 2.0]), "X")

    def test_nan_and_inf_counted(self):
        with pytest.raises(ValidationError, match=r"1 NaN, 2 Inf"):
            check_finite(np.array([np.nan, np.inf, -np.inf, 1.0]), "X")


# ═══════════════════════════════════════════════════════════════════════
# Shapes
# ═══════════════════════════════════════════════════════════════════════


class TestCheckConsistentLength:

    def test_same_length_passes(self):
        check_consistent_length(np.ones(4), np.ones((4, 2)), names=("time", "X"))

    def test_different_length_reports_all(self):
        with pytest.raises(DimensionError, match="time=4, event=3"):
            check_consistent_length(np.ones(4), np.ones(3), names=("time", "event"))

    def test_wrong_number_of_names(self):
        with pytest.raises(ValueError):
            check_consistent_length(np.ones(2), np.ones(2), names=("a",))


# ═══════════════════════════════════════════════════════════════════════
# Options
# ═══════════════════════════════════════════════════════════════════════


class TestCheckConfLevel:

    @pytest.mark.parametrize("level", [0.5, 0.9, 0.95, 0.999])
    def test_valid(self, level):
        check_conf_level(level)

    @pytest.mark.parametrize("level", [0.0, 1.0, -0.1, 95])
    def test_invalid(self, level):
        with pytest.raises(ValidationError, match="level"):
            check_conf_level(level)

    def test_custom_name(self):
        with pytest.raises(ValidationError, match="conf"):
            check_conf_level(2.0, name="conf")


class TestCheckPositiveInt:

    def test_valid(self):
        check_positive_int(1, "B")
        check_positive_int(np.int64(200), "B")

    @pytest.mark.parametrize("value", [0, -3])
    def test_non_positive(self, value):
        with pytest.raises(ValidationError, match=">= 1"):
            check_positive_int(value, "B")

    @pytest.mark.parametrize("value", [2.5, "10", True])
    def test_non_integer(self, value):
        with pytest.raises(ValidationError, match="integer"):
            check_positive_int(value, "B")
