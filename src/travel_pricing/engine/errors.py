"""Exceptions raised inside the pricing engine package."""


class PricingError(Exception):
    """Raised when a price cannot be computed from the given input."""


class RuleLoadError(PricingError):
    """Raised when a rule set cannot be read or parsed."""
