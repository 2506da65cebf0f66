"""
Shared engine instance for the API routers.
"""
import logging

from ..config.settings import Settings, get_settings
from ..engine import InMemoryRuleRepository, JsonRuleRepository, PricingEngine, RuleRepository

logger = logging.getLogger(__name__)


def build_repository(settings: Settings) -> RuleRepository:
    """Compiled rules when present, otherwise the default rule set."""
    if settings.compiled_rules and settings.compiled_rules.exists():
        return JsonRuleRepository(settings.compiled_rules)
    logger.info("No compiled rules found, serving default rule set")
    return InMemoryRuleRepository()


settings = get_settings()
engine = PricingEngine(repository=build_repository(settings), settings=settings)
