"""
Adjustment Applier - Applies one pricing adjustment to a running price.
"""
import math
from decimal import ROUND_HALF_UP, Decimal

from .errors import PricingError
from .models import AdjustmentType, PricingAdjustment, RoundingRule


def round_half_up(value: float) -> float:
    """Round to the nearest integer, halves away from zero (2.5 → 3, -2.5 → -3)."""
    return float(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class AdjustmentApplier:
    """
    Applies percentage, fixed amount and replace adjustments.

    The adjustment's rounding rule applies to the result of this adjustment
    only; with `none` fractional prices carry into the next rule.
    """

    def apply(self, price: float, adjustment: PricingAdjustment) -> float:
        """Return the new price after the adjustment and its rounding."""
        try:
            adjustment_type = AdjustmentType(adjustment.type)
        except ValueError:
            raise PricingError(f"Unknown adjustment type '{adjustment.type}'")

        value = float(adjustment.value)

        if adjustment_type == AdjustmentType.PERCENTAGE:
            new_price = price * (1 + value / 100.0)
        elif adjustment_type == AdjustmentType.FIXED_AMOUNT:
            new_price = price + value
        else:
            new_price = value

        new_price = self.apply_rounding(new_price, adjustment.rounding_rule)
        return max(0.0, new_price)

    @staticmethod
    def apply_rounding(price: float, rounding_rule) -> float:
        try:
            rule = RoundingRule(rounding_rule or RoundingRule.NONE)
        except ValueError:
            raise PricingError(f"Unknown rounding rule '{rounding_rule}'")

        if rule == RoundingRule.ROUND:
            return round_half_up(price)
        elif rule == RoundingRule.FLOOR:
            return float(math.floor(price))
        elif rule == RoundingRule.CEIL:
            return float(math.ceil(price))
        return price
