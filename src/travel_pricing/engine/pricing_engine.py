"""
Pricing Engine - Core dynamic pricing resolution with traceability.

Resolution order:
1. Keep rules for the context's service type that are active and valid
   on the booking date
2. Sort by priority (lower first, ties keep input order)
3. For each rule whose condition holds, apply its adjustment to the
   running price and record the discount or surcharge
4. Add the flat tax and round the final price half-up
5. On any failure, fall back to the base price with no adjustments
"""
import logging
from datetime import datetime, timedelta
from typing import Callable, Optional, Sequence, Union

from ..config.settings import Settings, get_settings
from .adjustment_applier import AdjustmentApplier, round_half_up
from .condition_evaluator import ConditionEvaluator
from .errors import PricingError
from .models import AppliedRule, PriceBreakdown, PricingContext, PricingResult, PricingRule
from .rule_repository import RuleRepository
from .seasonal_calendar import utc_now

logger = logging.getLogger(__name__)


class PricingEngine:
    """
    Stateless pricing engine: evaluates a given rule set against a context.

    Collaborators are injected so tests can pin the clock or swap in a
    failing evaluator. Nothing is mutated between calls, so one engine can
    serve concurrent requests.
    """

    def __init__(
        self,
        repository: Optional[RuleRepository] = None,
        evaluator: Optional[ConditionEvaluator] = None,
        applier: Optional[AdjustmentApplier] = None,
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.settings = settings or get_settings()
        self.repository = repository
        self.evaluator = evaluator or ConditionEvaluator()
        self.applier = applier or AdjustmentApplier()
        self.clock = clock or utc_now

    def price(self, context: PricingContext) -> PricingResult:
        """
        Fetch the active rules from the repository and calculate.

        A failed fetch yields the fallback result, like any other failure.
        """
        if self.repository is None:
            raise PricingError("PricingEngine.price() needs a rule repository")

        try:
            rules = self.repository.get_active_rules(context.service_type, context.booking_date)
        except Exception as e:
            logger.exception("Rule fetch failed for service %s", context.service_id)
            return self.fallback_result(context, f"Rule fetch failed: {e}")

        return self.calculate(context, rules)

    def calculate(
        self,
        context: PricingContext,
        rules: Union[Sequence[PricingRule], BaseException]
    ) -> PricingResult:
        """
        Calculate the dynamic price with a full trace.

        Args:
            context: booking being priced
            rules: candidate rules, or the exception from a failed fetch

        Returns:
            PricingResult; never raises
        """
        try:
            if isinstance(rules, BaseException):
                raise PricingError(f"Rule set unavailable: {rules}") from rules
            return self._calculate(context, rules)
        except Exception as e:
            logger.exception(
                "Failed to calculate dynamic price for service %s",
                getattr(context, 'service_id', '?'),
            )
            return self.fallback_result(context, str(e))

    def _calculate(self, context: PricingContext, rules: Sequence[PricingRule]) -> PricingResult:
        base_price = float(context.base_price)
        logger.info("Calculating dynamic price for service %s", context.service_id)

        result = PricingResult(
            original_price=base_price,
            final_price=0.0,
            currency=context.currency,
            applied_rules=[],
            breakdown=PriceBreakdown(base_price=base_price),
        )
        result.add_trace("Base Price", f"Service {context.service_id}", f"{base_price:.2f} {context.currency}")

        eligible = [
            rule for rule in rules
            if rule.applies_to(context.service_type)
            and rule.is_active
            and rule.is_valid_on(context.booking_date)
        ]
        # list.sort is stable, equal priorities keep input order
        eligible.sort(key=lambda r: r.priority)
        result.add_trace("Rule Filter", f"{len(eligible)} of {len(rules)} rules eligible")

        current_price = base_price
        discounts = 0.0
        surcharges = 0.0

        for rule in eligible:
            if not self.evaluator.evaluate(rule.condition, context):
                continue

            new_price = self.applier.apply(current_price, rule.adjustment)
            delta = new_price - current_price
            if delta < 0:
                discounts += abs(delta)
            else:
                surcharges += delta

            result.applied_rules.append(AppliedRule(
                rule_id=rule.id,
                rule_name=rule.name,
                adjustment=rule.adjustment,
                price_after_rule=new_price,
            ))
            result.add_trace("Rule Applied", f"{rule.name} ({rule.id})", f"{current_price:.2f} → {new_price:.2f}")
            logger.debug("Applied rule %s: %s -> %s", rule.name, current_price, new_price)
            current_price = new_price

        if not result.applied_rules:
            result.add_trace("Rules", "No rules matched, using base price")

        taxes = current_price * self.settings.tax_rate
        final_price = round_half_up(current_price + taxes)
        result.add_trace("Tax", f"{self.settings.tax_rate:.0%} of {current_price:.2f}", f"{taxes:.2f}")
        result.add_trace("Rounding", f"{current_price + taxes:.2f} rounded half-up", f"{final_price:.2f}")

        result.final_price = final_price
        result.breakdown.discounts = discounts
        result.breakdown.surcharges = surcharges
        result.breakdown.taxes = taxes
        result.breakdown.total = final_price
        result.valid_until = self.clock() + timedelta(hours=self.settings.quote_ttl_hours)
        return result

    def fallback_result(self, context: PricingContext, reason: str = "") -> PricingResult:
        """Base price, no adjustments, no tax."""
        base_price = getattr(context, 'base_price', 0.0)
        result = PricingResult(
            original_price=base_price,
            final_price=base_price,
            currency=getattr(context, 'currency', ''),
            applied_rules=[],
            breakdown=PriceBreakdown(
                base_price=base_price,
                discounts=0.0,
                surcharges=0.0,
                taxes=0.0,
                total=base_price,
            ),
            fallback=True,
        )
        result.add_trace("Fallback", "Pricing failed, using base price", str(base_price))
        if reason:
            result.add_warning(reason)
        return result
