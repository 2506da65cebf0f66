"""
Travel Pricing Package

Dynamic pricing rule engine for the travel booking back office.
Resolves a quoted price using Rules → Adjustments → Tax with base price fallback.
"""

__version__ = "1.0.0"
