"""
Condition Evaluator - Decides whether a rule's condition holds for a context.

Evaluation is fail-closed: an unknown condition type, an operator the type
does not support, a missing context field or a malformed value all evaluate
to False, so the rule is skipped rather than charging or discounting a
customer by accident.
"""
import logging
from datetime import datetime, time
from typing import Callable, Optional

from .models import (
    ConditionType,
    DateLike,
    DemandMetric,
    Operator,
    PricingCondition,
    PricingContext,
    as_date,
)
from .seasonal_calendar import SeasonalCalendar

logger = logging.getLogger(__name__)

WEEKDAY_NAMES = (
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
)

NUMERIC_OPERATORS = {Operator.EQUALS, Operator.GREATER_THAN, Operator.LESS_THAN, Operator.BETWEEN}
MEMBERSHIP_OPERATORS = {Operator.EQUALS, Operator.IN, Operator.NOT_IN}

# Malformed payloads surface as one of these while comparing
_MALFORMED = (TypeError, ValueError, KeyError, IndexError, AttributeError)


def days_between(start: DateLike, end: DateLike) -> int:
    """Whole days from start to end, floored (negative if end is earlier)."""
    if isinstance(start, datetime) or isinstance(end, datetime):
        return (_at_midnight(end, start) - _at_midnight(start, end)).days
    return (as_date(end) - as_date(start)).days


def _at_midnight(value: DateLike, other: DateLike) -> datetime:
    if isinstance(value, datetime):
        return value
    tzinfo = other.tzinfo if isinstance(other, datetime) else None
    return datetime.combine(value, time.min, tzinfo=tzinfo)


def weekday_name(when: DateLike) -> str:
    return WEEKDAY_NAMES[as_date(when).weekday()]


class ConditionEvaluator:
    """
    Evaluates a single PricingCondition against a PricingContext.

    Each ConditionType has exactly one handler in the dispatch table.
    """

    def __init__(self, calendar: Optional[SeasonalCalendar] = None):
        self.calendar = calendar or SeasonalCalendar()
        self._handlers: dict[ConditionType, Callable[[PricingCondition, PricingContext, Operator], bool]] = {
            ConditionType.SEASONAL: self._evaluate_seasonal,
            ConditionType.ADVANCE_BOOKING: self._evaluate_advance_booking,
            ConditionType.GROUP_SIZE: self._evaluate_group_size,
            ConditionType.DAY_OF_WEEK: self._evaluate_day_of_week,
            ConditionType.DEMAND: self._evaluate_demand,
            ConditionType.DURATION: self._evaluate_duration,
            ConditionType.LOCATION: self._evaluate_location,
        }

    def evaluate(self, condition: PricingCondition, context: PricingContext) -> bool:
        """Return True only when the condition clearly holds."""
        try:
            condition_type = ConditionType(condition.type)
            operator = Operator(condition.operator)
        except (ValueError, TypeError):
            logger.debug(
                "Unrecognized condition %s/%s, treating as no match",
                condition.type, condition.operator,
            )
            return False

        handler = self._handlers.get(condition_type)
        if handler is None:
            return False

        try:
            return bool(handler(condition, context, operator))
        except _MALFORMED as e:
            logger.debug("Malformed %s condition (%s), treating as no match", condition_type.value, e)
            return False

    # ------------------------------------------------------------------
    # Per-type handlers
    # ------------------------------------------------------------------

    def _evaluate_seasonal(self, condition, context, operator) -> bool:
        season = self.calendar.season_of(context.service_date)
        return self.compare_membership(operator, season, condition.value)

    def _evaluate_advance_booking(self, condition, context, operator) -> bool:
        days = days_between(context.booking_date, context.service_date)
        return self.compare_numeric(operator, days, condition.value)

    def _evaluate_group_size(self, condition, context, operator) -> bool:
        if not context.group_size:
            return False
        return self.compare_numeric(operator, context.group_size, condition.value)

    def _evaluate_day_of_week(self, condition, context, operator) -> bool:
        return self.compare_membership(operator, weekday_name(context.service_date), condition.value)

    def _evaluate_demand(self, condition, context, operator) -> bool:
        factors = context.demand_factors
        if factors is None:
            return False

        metric = (condition.metadata or {}).get('metric') or DemandMetric.OCCUPANCY_RATE
        try:
            metric = DemandMetric(metric)
        except ValueError:
            return False

        if metric == DemandMetric.OCCUPANCY_RATE:
            demand_value = factors.current_bookings / (factors.available_slots or 1)
        else:
            demand_value = factors.popularity_score

        return self.compare_numeric(operator, demand_value, condition.value)

    def _evaluate_duration(self, condition, context, operator) -> bool:
        if not context.duration:
            return False
        return self.compare_numeric(operator, context.duration, condition.value)

    def _evaluate_location(self, condition, context, operator) -> bool:
        if not context.location:
            return False
        return self.compare_membership(operator, context.location, condition.value)

    # ------------------------------------------------------------------
    # Operators
    # ------------------------------------------------------------------

    @staticmethod
    def compare_numeric(operator: Operator, actual: float, expected) -> bool:
        """equals / greater_than / less_than / between (inclusive)."""
        if operator not in NUMERIC_OPERATORS or isinstance(expected, (str, bool)):
            return False

        if operator == Operator.BETWEEN:
            low, high = expected
            if isinstance(low, (str, bool)) or isinstance(high, (str, bool)):
                return False
            return low <= actual <= high

        if operator == Operator.EQUALS:
            return actual == expected
        if operator == Operator.GREATER_THAN:
            return actual > expected
        return actual < expected

    @staticmethod
    def compare_membership(operator: Operator, actual: str, expected) -> bool:
        """equals (string match) / in / not_in (list membership)."""
        if operator not in MEMBERSHIP_OPERATORS:
            return False

        if operator == Operator.EQUALS:
            return actual == expected

        # A bare string would turn membership into a substring test
        if isinstance(expected, str) or not hasattr(expected, '__iter__'):
            return False
        values = list(expected)
        if operator == Operator.IN:
            return actual in values
        return actual not in values
