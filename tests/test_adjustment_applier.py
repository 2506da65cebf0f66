import os
import sys

import pytest

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from travel_pricing.engine.adjustment_applier import AdjustmentApplier, round_half_up
from travel_pricing.engine.errors import PricingError
from travel_pricing.engine.models import PricingAdjustment


@pytest.fixture
def applier():
    return AdjustmentApplier()


def test_percentage_surcharge_and_discount(applier):
    assert applier.apply(100.0, PricingAdjustment("percentage", 25)) == 125.0
    assert applier.apply(125.0, PricingAdjustment("percentage", -10)) == pytest.approx(112.5)


def test_fixed_amount(applier):
    assert applier.apply(100.0, PricingAdjustment("fixed_amount", 15)) == 115.0
    assert applier.apply(100.0, PricingAdjustment("fixed_amount", -40)) == 60.0


def test_replace_discards_prior_price(applier):
    assert applier.apply(999.0, PricingAdjustment("replace", 250)) == 250.0


@pytest.mark.parametrize("rule, expected", [
    ("none", 112.5),
    ("round", 113.0),
    ("floor", 112.0),
    ("ceil", 113.0),
])
def test_rounding_rules(applier, rule, expected):
    adjustment = PricingAdjustment("fixed_amount", 12.5, rounding_rule=rule)
    assert applier.apply(100.0, adjustment) == expected


def test_rounding_defaults_to_none(applier):
    assert applier.apply(10.0, PricingAdjustment("fixed_amount", 0.25)) == 10.25


def test_price_never_goes_negative(applier):
    assert applier.apply(50.0, PricingAdjustment("fixed_amount", -80)) == 0.0
    assert applier.apply(50.0, PricingAdjustment("percentage", -150)) == 0.0


def test_unknown_adjustment_type_raises(applier):
    with pytest.raises(PricingError):
        applier.apply(100.0, PricingAdjustment("multiply", 2))


def test_unknown_rounding_rule_raises(applier):
    with pytest.raises(PricingError):
        applier.apply(100.0, PricingAdjustment("percentage", 5, rounding_rule="banker"))


def test_round_half_up():
    assert round_half_up(2.5) == 3.0
    assert round_half_up(3.5) == 4.0
    assert round_half_up(2.49) == 2.0
    assert round_half_up(-2.5) == -3.0


def test_round_half_up_is_exact_below_half():
    assert round_half_up(0.49999999999999994) == 0.0
    assert round_half_up(123.75000000000001) == 124.0
