"""
Unit tests for domain validators.
"""

import pytest

from domain.exceptions import DiveLogBaseException, ValidationError
from domain.validators import (
    validate_gradient_factors,
    validate_log_level,
    validate_percentage,
    validate_positive_int,
)


# ==================== validate_log_level ====================


def test_validate_log_level_normalizes_case():
    assert validate_log_level("debug") == "DEBUG"
    assert validate_log_level(" Warning ") == "WARNING"


def test_validate_log_level_rejects_unknown():
    with pytest.raises(ValidationError) as exc_info:
        validate_log_level("LOUD")
    assert "allowed" in exc_info.value.details


def test_validate_log_level_rejects_empty():
    with pytest.raises(ValidationError):
        validate_log_level("")


# ==================== validate_percentage ====================


def test_validate_percentage_accepts_strings():
    assert validate_percentage("30", "gf_low") == 30


@pytest.mark.parametrize("value", [0, 101, "abc", None])
def test_validate_percentage_rejects(value):
    with pytest.raises(ValidationError):
        validate_percentage(value, "gf_low")


# ==================== validate_gradient_factors ====================


def test_validate_gradient_factors_ok():
    assert validate_gradient_factors(30, 75) == (30, 75)
    assert validate_gradient_factors("50", "50") == (50, 50)


def test_validate_gradient_factors_low_above_high():
    with pytest.raises(ValidationError) as exc_info:
        validate_gradient_factors(80, 70)
    assert exc_info.value.details == {"gf_low": 80, "gf_high": 70}


# ==================== validate_positive_int ====================


def test_validate_positive_int():
    assert validate_positive_int("17000", "deco_sac") == 17000

    with pytest.raises(ValidationError):
        validate_positive_int(0, "deco_sac")
    with pytest.raises(ValidationError):
        validate_positive_int("fast", "deco_sac")


def test_validation_error_string_includes_details():
    err = ValidationError("bad value", details={"gf_low": 0})

    assert isinstance(err, DiveLogBaseException)
    assert str(err) == "bad value (gf_low=0)"
