"""
Print the full pricing trace for a sample booking.

Usage:
    python scripts/debug_pricing.py [SERVICE_TYPE] [BASE_PRICE] [BOOKING_DATE] [SERVICE_DATE]
"""
import sys
from datetime import date
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from travel_pricing.engine import InMemoryRuleRepository, PricingEngine
from travel_pricing.engine.models import PricingContext
from travel_pricing.engine.seasonal_calendar import SeasonalCalendar
from travel_pricing.logging_config import configure_logging


def debug():
    configure_logging("DEBUG")
    args = sys.argv[1:]
    service_type = args[0] if len(args) > 0 else "TOUR"
    base_price = float(args[1]) if len(args) > 1 else 1000.0
    booking_date = date.fromisoformat(args[2]) if len(args) > 2 else date(2026, 5, 1)
    service_date = date.fromisoformat(args[3]) if len(args) > 3 else date(2026, 7, 15)

    repository = InMemoryRuleRepository()
    engine = PricingEngine(repository=repository)

    print("Loaded Rules:")
    for rule in repository.get_active_rules(service_type, booking_date):
        print(f"  [{rule.priority}] {rule.id}: {rule.condition.to_dict()} -> {rule.adjustment.to_dict()}")

    print(f"\nService date {service_date} falls in season: {SeasonalCalendar().season_of(service_date)}")

    context = PricingContext(
        service_id="debug",
        service_type=service_type,
        base_price=base_price,
        currency="VND",
        booking_date=booking_date,
        service_date=service_date,
        group_size=8,
    )
    result = engine.price(context)

    print("\nTrace:")
    print(result.get_trace_text())
    print(f"\nFinal Price: {result.final_price:.2f} {result.currency}")
    if result.warnings:
        print(f"Warnings: {result.warnings}")


if __name__ == "__main__":
    debug()
