"""Engine subpackage - rule evaluation and price resolution."""
from .pricing_engine import PricingEngine
from .models import PricingContext, PricingRule, PricingResult
from .rule_repository import InMemoryRuleRepository, JsonRuleRepository, RuleRepository

__all__ = [
    'PricingEngine',
    'PricingContext',
    'PricingRule',
    'PricingResult',
    'RuleRepository',
    'InMemoryRuleRepository',
    'JsonRuleRepository',
]
