"""
Generate golden test cases by running the current pricing engine on sample bookings.
This captures current behavior as a regression baseline.

Each case pins a season boundary, holiday or rule threshold of the default
rule set.
"""
import os
import sys
from datetime import date

import pandas as pd

# Add src to path for internal imports
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src'))

from travel_pricing.engine import InMemoryRuleRepository, PricingEngine
from travel_pricing.engine.models import DemandFactors, PricingContext

# case_id, service_type, base_price, booking_date, service_date,
# group_size, duration, current_bookings, available_slots
SAMPLE_BOOKINGS = [
    ('tour_summer_early_group', 'TOUR', 1000, date(2026, 5, 1), date(2026, 7, 15), 8, None, None, None),
    ('tour_spring_late_solo', 'TOUR', 1000, date(2026, 4, 1), date(2026, 4, 10), 2, None, None, None),
    ('tour_spring_early', 'TOUR', 1000, date(2026, 2, 20), date(2026, 4, 15), 3, None, None, None),
    ('tour_spring_group_of_five', 'TOUR', 1000, date(2026, 4, 1), date(2026, 4, 11), 5, None, None, None),
    ('tour_tet_late', 'TOUR', 2000000, date(2026, 1, 25), date(2026, 2, 1), 1, None, None, None),
    ('tour_new_year_early', 'TOUR', 500, date(2026, 11, 1), date(2026, 12, 28), 2, None, None, None),
    ('tour_autumn_last_day', 'TOUR', 1000, date(2026, 12, 1), date(2026, 12, 19), 2, None, None, None),
    ('vehicle_saturday', 'VEHICLE', 800000, date(2026, 10, 10), date(2026, 10, 17), None, None, None, None),
    ('vehicle_wednesday', 'VEHICLE', 800000, date(2026, 10, 10), date(2026, 10, 14), None, None, None, None),
    ('hotel_busy_long_stay', 'HOTEL', 1000, date(2026, 3, 1), date(2026, 3, 10), None, 10, 90, 100),
    ('hotel_quiet_short_stay', 'HOTEL', 1000, date(2026, 3, 1), date(2026, 3, 10), None, 3, 10, 100),
    ('hotel_long_stay_no_demand_data', 'HOTEL', 1000, date(2026, 3, 1), date(2026, 3, 10), None, 8, None, None),
]


def format_number(value) -> str:
    """Whole numbers without a trailing .0, empty for missing values."""
    if value is None:
        return ''
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def sample_contexts():
    for (case_id, service_type, base_price, booking_date, service_date,
         group_size, duration, bookings, slots) in SAMPLE_BOOKINGS:
        demand = None
        if bookings is not None:
            demand = DemandFactors(current_bookings=bookings, available_slots=slots)
        yield PricingContext(
            service_id=case_id,
            service_type=service_type,
            base_price=float(base_price),
            currency="VND",
            booking_date=booking_date,
            service_date=service_date,
            group_size=group_size,
            duration=duration,
            demand_factors=demand,
        )


def build_cases(engine: PricingEngine) -> list[dict]:
    """One CSV row per sample booking, every value already formatted as text."""
    cases = []
    for context in sample_contexts():
        result = engine.price(context)
        demand = context.demand_factors
        cases.append({
            'case_id': context.service_id,
            'service_type': context.service_type,
            'base_price': format_number(context.base_price),
            'booking_date': context.booking_date.isoformat(),
            'service_date': context.service_date.isoformat(),
            'group_size': format_number(context.group_size),
            'duration': format_number(context.duration),
            'current_bookings': format_number(demand.current_bookings if demand else None),
            'available_slots': format_number(demand.available_slots if demand else None),
            'expected_rules': '|'.join(r.rule_id for r in result.applied_rules),
            'expected_final_price': format_number(result.final_price),
        })
    return cases


def generate_golden_cases():
    cases = build_cases(PricingEngine(repository=InMemoryRuleRepository()))

    df = pd.DataFrame(cases)
    output_path = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'golden_cases.csv')
    df.to_csv(output_path, index=False)
    print(f"Generated {len(cases)} golden test cases")
    print(f"Output: {output_path}")
    print()
    print("Sample cases:")
    print(df.head(10).to_string(index=False))


if __name__ == "__main__":
    generate_golden_cases()
