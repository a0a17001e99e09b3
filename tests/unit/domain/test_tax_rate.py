"""Unit tests for the TaxRate value object."""

from decimal import Decimal

import pytest

from itp_bot.domain.value_objects.tax_rate import TaxRate


def test_apply_to_rounds_to_cents():
    """Test that tax is rounded half-up at cent precision."""
    rate = TaxRate(Decimal("0.04"))

    assert rate.apply_to(Decimal("18000")) == Decimal("720.00")
    assert rate.apply_to(Decimal("12.5")) == Decimal("0.50")
    # 0.055 * 0.1 = 0.0055 -> 0.01
    assert TaxRate(Decimal("0.055")).apply_to(Decimal("0.1")) == Decimal("0.01")


def test_apply_to_accepts_int_and_float_without_float_artefacts():
    """Test that non-Decimal amounts are converted exactly."""
    rate = TaxRate(Decimal("0.03"))

    assert rate.apply_to(21000) == Decimal("630.00")
    assert rate.apply_to(0.1) == Decimal("0.00")


def test_halved_rate():
    """Test resident discount halving."""
    assert TaxRate(Decimal("0.04")).halved() == TaxRate(Decimal("0.02"))
    assert TaxRate(Decimal("0.08")).halved().fraction == Decimal("0.04")


@pytest.mark.parametrize(
    "fraction,expected",
    [
        ("0.04", "4%"),
        ("0.055", "5.5%"),
        ("0.02", "2%"),
        ("0.08", "8%"),
        ("0.0275", "2.8%"),
    ],
)
def test_as_percentage(fraction, expected):
    """Test percentage formatting drops a trailing zero decimal."""
    assert TaxRate(Decimal(fraction)).as_percentage() == expected
    assert str(TaxRate(Decimal(fraction))) == expected


def test_rate_outside_unit_interval_is_rejected():
    """Test that rates must be between 0 and 1."""
    with pytest.raises(ValueError):
        TaxRate(Decimal("-0.01"))
    with pytest.raises(ValueError):
        TaxRate(Decimal("1.5"))


def test_rates_are_ordered_by_fraction():
    """Test ordering used to sort the rates table."""
    assert TaxRate(Decimal("0.03")) < TaxRate(Decimal("0.04"))
    assert not TaxRate(Decimal("0.08")) < TaxRate(Decimal("0.055"))
