"""
Rule Repository - Supplies the active pricing rules for a service type.

The engine never decides which rules exist; it asks a repository for the
rules active on a date. Two implementations are provided:
- InMemoryRuleRepository, seeded with the default rule set
- JsonRuleRepository, reading compiled_rules.json written by compile_rules
"""
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, Optional, Union

from .errors import RuleLoadError
from .models import (
    AdjustmentType,
    ConditionType,
    DateLike,
    DemandMetric,
    Operator,
    PricingAdjustment,
    PricingCondition,
    PricingRule,
    ServiceType,
)

logger = logging.getLogger(__name__)


def default_rules() -> list[PricingRule]:
    """The stock rule set used until a compiled rule file is provided."""
    return [
        # Seasonal pricing
        PricingRule(
            id='seasonal_peak',
            name='Peak Season Surcharge',
            service_type=ServiceType.TOUR,
            condition=PricingCondition(
                type=ConditionType.SEASONAL,
                operator=Operator.IN,
                value=('summer', 'new_year', 'tet_holiday'),
            ),
            adjustment=PricingAdjustment(type=AdjustmentType.PERCENTAGE, value=25),
            priority=1,
        ),
        # Early bird discount, booked more than 30 days ahead
        PricingRule(
            id='early_bird',
            name='Early Bird Discount',
            service_type=ServiceType.TOUR,
            condition=PricingCondition(
                type=ConditionType.ADVANCE_BOOKING,
                operator=Operator.GREATER_THAN,
                value=30,
            ),
            adjustment=PricingAdjustment(type=AdjustmentType.PERCENTAGE, value=-15),
            priority=2,
        ),
        PricingRule(
            id='group_discount',
            name='Group Discount',
            service_type=ServiceType.TOUR,
            condition=PricingCondition(
                type=ConditionType.GROUP_SIZE,
                operator=Operator.GREATER_THAN,
                value=5,
            ),
            adjustment=PricingAdjustment(type=AdjustmentType.PERCENTAGE, value=-10),
            priority=3,
        ),
        PricingRule(
            id='weekend_vehicle',
            name='Weekend Vehicle Surcharge',
            service_type=ServiceType.VEHICLE,
            condition=PricingCondition(
                type=ConditionType.DAY_OF_WEEK,
                operator=Operator.IN,
                value=('friday', 'saturday', 'sunday'),
            ),
            adjustment=PricingAdjustment(type=AdjustmentType.PERCENTAGE, value=20),
            priority=1,
        ),
        # 80% occupancy
        PricingRule(
            id='high_demand',
            name='High Demand Surcharge',
            service_type=ServiceType.HOTEL,
            condition=PricingCondition(
                type=ConditionType.DEMAND,
                operator=Operator.GREATER_THAN,
                value=0.8,
                metadata={'metric': DemandMetric.OCCUPANCY_RATE.value},
            ),
            adjustment=PricingAdjustment(type=AdjustmentType.PERCENTAGE, value=30),
            priority=1,
        ),
        # More than 7 nights
        PricingRule(
            id='long_stay_hotel',
            name='Long Stay Discount',
            service_type=ServiceType.HOTEL,
            condition=PricingCondition(
                type=ConditionType.DURATION,
                operator=Operator.GREATER_THAN,
                value=7,
            ),
            adjustment=PricingAdjustment(type=AdjustmentType.PERCENTAGE, value=-12),
            priority=2,
        ),
    ]


class RuleRepository(ABC):
    """Source of pricing rules consumed by PricingEngine.price()."""

    @abstractmethod
    def all_rules(self) -> list[PricingRule]:
        ...

    def get_active_rules(
        self,
        service_type: Union[ServiceType, str],
        as_of: DateLike
    ) -> list[PricingRule]:
        """Rules for the service type that are active and valid on `as_of`."""
        return [
            rule for rule in self.all_rules()
            if rule.applies_to(service_type) and rule.is_active and rule.is_valid_on(as_of)
        ]


class InMemoryRuleRepository(RuleRepository):
    """Rules held in memory; defaults to the stock rule set."""

    def __init__(self, rules: Optional[Iterable[PricingRule]] = None):
        self.rules = list(rules) if rules is not None else default_rules()

    def all_rules(self) -> list[PricingRule]:
        return list(self.rules)


class JsonRuleRepository(RuleRepository):
    """
    Rules loaded from compiled_rules.json.

    A missing file leaves the repository empty with `loaded = False`;
    a file that exists but cannot be parsed raises RuleLoadError.
    """

    def __init__(self, compiled_rules_path: Optional[Path] = None):
        self.path = compiled_rules_path
        self.rules: list[PricingRule] = []
        self.loaded = False

        if compiled_rules_path and compiled_rules_path.exists():
            self._load_rules(compiled_rules_path)
        else:
            logger.warning("Compiled rules not found at %s, no rules loaded", compiled_rules_path)

    def _load_rules(self, path: Path):
        """Load rules from JSON file."""
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            self.rules = [PricingRule.from_dict(r) for r in data.get('rules', [])]
        except (OSError, ValueError, TypeError, AttributeError) as e:
            raise RuleLoadError(f"Cannot load rules from {path}: {e}") from e

        self.loaded = True
        logger.info("Loaded %d rules from %s", len(self.rules), path)

    def all_rules(self) -> list[PricingRule]:
        return list(self.rules)
