"""
Data models for the pricing engine.

Uses dataclasses for structured, type-safe data representation.
Rules and contexts are created fresh for each calculation and never
mutated by the engine.
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional, Union


DateLike = Union[date, datetime]


class ServiceType(str, Enum):
    """Catalog service categories sold by the booking platform."""
    BUS = "BUS"
    COMBO = "COMBO"
    FAST_TRACK = "FAST_TRACK"
    FLIGHT = "FLIGHT"
    HOTEL = "HOTEL"
    INSURANCE = "INSURANCE"
    TOUR = "TOUR"
    TRANSFER = "TRANSFER"
    VEHICLE = "VEHICLE"
    VISA = "VISA"
    VEHICLE_RENTAL = "VEHICLE_RENTAL"
    VEHICLE_TICKET = "VEHICLE_TICKET"


class ConditionType(str, Enum):
    SEASONAL = "seasonal"
    DEMAND = "demand"
    DURATION = "duration"
    ADVANCE_BOOKING = "advance_booking"
    GROUP_SIZE = "group_size"
    DAY_OF_WEEK = "day_of_week"
    LOCATION = "location"


class Operator(str, Enum):
    EQUALS = "equals"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    BETWEEN = "between"
    IN = "in"
    NOT_IN = "not_in"


class AdjustmentType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed_amount"
    REPLACE = "replace"


class RoundingRule(str, Enum):
    NONE = "none"
    ROUND = "round"
    FLOOR = "floor"
    CEIL = "ceil"


class DemandMetric(str, Enum):
    OCCUPANCY_RATE = "occupancy_rate"
    POPULARITY_SCORE = "popularity_score"


def as_date(value: DateLike) -> date:
    """Reduce a date or datetime to its calendar date."""
    if isinstance(value, datetime):
        return value.date()
    return value


def parse_date(value: Any) -> Optional[DateLike]:
    """Parse an ISO date/datetime string; pass dates through, empty → None."""
    if value is None or value == "":
        return None
    if isinstance(value, (date, datetime)):
        return value
    text = str(value).strip()
    if "T" in text or " " in text:
        return datetime.fromisoformat(text)
    return date.fromisoformat(text)


def _enum_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


@dataclass(frozen=True)
class TraceStep:
    """A single step in the pricing calculation trace."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass(frozen=True)
class PricingCondition:
    """
    Predicate gating a rule.

    `type` and `operator` are kept as supplied (enum member or raw string)
    so that malformed rules reach the evaluator and simply fail to match.
    """
    type: Union[ConditionType, str]
    operator: Union[Operator, str]
    value: Any
    metadata: Optional[dict] = None

    @classmethod
    def from_dict(cls, data: dict) -> 'PricingCondition':
        return cls(
            type=data.get('type', ''),
            operator=data.get('operator', ''),
            value=data.get('value'),
            metadata=data.get('metadata'),
        )

    def to_dict(self) -> dict:
        out = {
            "type": _enum_value(self.type),
            "operator": _enum_value(self.operator),
            "value": list(self.value) if isinstance(self.value, tuple) else self.value,
        }
        if self.metadata:
            out["metadata"] = dict(self.metadata)
        return out


@dataclass(frozen=True)
class PricingAdjustment:
    """Transformation applied to the running price when a rule matches."""
    type: Union[AdjustmentType, str]
    value: float
    currency: Optional[str] = None
    rounding_rule: Union[RoundingRule, str] = RoundingRule.NONE

    @classmethod
    def from_dict(cls, data: dict) -> 'PricingAdjustment':
        return cls(
            type=data.get('type', ''),
            value=float(data.get('value', 0)),
            currency=data.get('currency'),
            rounding_rule=data.get('roundingRule') or data.get('rounding_rule') or RoundingRule.NONE,
        )

    def to_dict(self) -> dict:
        out = {
            "type": _enum_value(self.type),
            "value": self.value,
            "roundingRule": _enum_value(self.rounding_rule),
        }
        if self.currency:
            out["currency"] = self.currency
        return out


@dataclass(frozen=True)
class PricingRule:
    """A named, prioritized, time-bounded condition → adjustment pair."""
    id: str
    name: str
    service_type: Union[ServiceType, str]
    condition: PricingCondition
    adjustment: PricingAdjustment
    priority: int = 50  # lower = evaluated earlier
    is_active: bool = True
    valid_from: Optional[DateLike] = None
    valid_to: Optional[DateLike] = None

    def is_valid_on(self, when: DateLike) -> bool:
        """Check the inclusive validity window; a missing bound is open."""
        day = as_date(when)
        if self.valid_from is not None and day < as_date(self.valid_from):
            return False
        if self.valid_to is not None and day > as_date(self.valid_to):
            return False
        return True

    def applies_to(self, service_type: Union[ServiceType, str]) -> bool:
        return _enum_value(self.service_type) == _enum_value(service_type)

    @classmethod
    def from_dict(cls, data: dict) -> 'PricingRule':
        """Create a rule from its compiled JSON form."""
        rule_id = data.get('id') or data.get('rule_id')
        return cls(
            id=rule_id,
            name=data.get('name') or rule_id,
            service_type=data.get('serviceType') or data.get('service_type'),
            condition=PricingCondition.from_dict(data.get('condition', {})),
            adjustment=PricingAdjustment.from_dict(data.get('adjustment', {})),
            priority=int(data.get('priority', 50)),
            is_active=bool(data.get('isActive', data.get('active', True))),
            valid_from=parse_date(data.get('validFrom') or data.get('valid_from')),
            valid_to=parse_date(data.get('validTo') or data.get('valid_to')),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "serviceType": _enum_value(self.service_type),
            "condition": self.condition.to_dict(),
            "adjustment": self.adjustment.to_dict(),
            "priority": self.priority,
            "isActive": self.is_active,
            "validFrom": self.valid_from.isoformat() if self.valid_from else None,
            "validTo": self.valid_to.isoformat() if self.valid_to else None,
        }


@dataclass(frozen=True)
class DemandFactors:
    current_bookings: float
    available_slots: float
    popularity_score: float = 0.0


@dataclass(frozen=True)
class SeasonalFactors:
    # Informational only; no condition type reads these flags.
    is_holiday: bool = False
    is_peak_season: bool = False
    is_weekend: bool = False


@dataclass(frozen=True)
class PricingContext:
    """Read-only input describing the booking being priced."""
    service_id: str
    service_type: Union[ServiceType, str]
    base_price: float
    currency: str
    booking_date: DateLike
    service_date: DateLike
    duration: Optional[float] = None
    group_size: Optional[int] = None
    location: Optional[str] = None
    seasonal_factors: Optional[SeasonalFactors] = None
    demand_factors: Optional[DemandFactors] = None

    @classmethod
    def from_dict(cls, data: dict) -> 'PricingContext':
        demand = data.get('demandFactors') or data.get('demand_factors')
        seasonal = data.get('seasonalFactors') or data.get('seasonal_factors')
        return cls(
            service_id=str(data.get('serviceId') or data.get('service_id') or ''),
            service_type=data.get('serviceType') or data.get('service_type'),
            base_price=float(data.get('basePrice', data.get('base_price', 0))),
            currency=data.get('currency', 'VND'),
            booking_date=parse_date(data.get('bookingDate') or data.get('booking_date')),
            service_date=parse_date(data.get('serviceDate') or data.get('service_date')),
            duration=data.get('duration'),
            group_size=data.get('groupSize', data.get('group_size')),
            location=data.get('location'),
            seasonal_factors=SeasonalFactors(
                is_holiday=bool(seasonal.get('isHoliday', False)),
                is_peak_season=bool(seasonal.get('isPeakSeason', False)),
                is_weekend=bool(seasonal.get('isWeekend', False)),
            ) if seasonal else None,
            demand_factors=DemandFactors(
                current_bookings=float(demand.get('currentBookings', 0)),
                available_slots=float(demand.get('availableSlots', 0)),
                popularity_score=float(demand.get('popularityScore', 0)),
            ) if demand else None,
        )


@dataclass(frozen=True)
class AppliedRule:
    """A rule whose condition held, with the price right after it."""
    rule_id: str
    rule_name: str
    adjustment: PricingAdjustment
    price_after_rule: float


@dataclass
class PriceBreakdown:
    base_price: float
    discounts: float = 0.0
    surcharges: float = 0.0
    taxes: float = 0.0
    total: float = 0.0


@dataclass
class PricingResult:
    """Complete, auditable result of a pricing calculation."""
    original_price: float
    final_price: float
    currency: str
    applied_rules: list[AppliedRule]
    breakdown: PriceBreakdown
    valid_until: Optional[datetime] = None
    trace: list[TraceStep] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    fallback: bool = False

    def add_trace(self, step: str, description: str, value: str = None):
        """Add a step to the result-level trace."""
        self.trace.append(TraceStep(step=step, description=description, value=value))

    def add_warning(self, warning: str):
        """Add a result-level warning."""
        self.warnings.append(warning)

    def get_trace_text(self) -> str:
        """Get human-readable result trace as formatted text."""
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"• {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"• {t.step}: {t.description}")
        return "\n".join(lines)

    def to_dict(self) -> dict:
        """Convert to the camelCase boundary format used by API consumers."""
        return {
            "originalPrice": self.original_price,
            "finalPrice": self.final_price,
            "currency": self.currency,
            "appliedRules": [
                {
                    "ruleId": r.rule_id,
                    "ruleName": r.rule_name,
                    "adjustment": r.adjustment.to_dict(),
                    "priceAfterRule": r.price_after_rule,
                }
                for r in self.applied_rules
            ],
            "breakdown": {
                "basePrice": self.breakdown.base_price,
                "discounts": self.breakdown.discounts,
                "surcharges": self.breakdown.surcharges,
                "taxes": self.breakdown.taxes,
                "total": self.breakdown.total,
            },
            "validUntil": self.valid_until.isoformat() if self.valid_until else None,
            "fallback": self.fallback,
            "warnings": list(self.warnings),
            "trace": [
                {"step": t.step, "description": t.description, "value": t.value}
                for t in self.trace
            ],
        }
