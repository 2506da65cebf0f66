"""
Golden test cases for pricing engine regression testing.
These tests capture the expected behavior of the default rule set and
should fail if pricing logic changes unexpectedly.
"""
import csv
import os
import sys
from datetime import date, datetime, timezone
from pathlib import Path

import pytest

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from travel_pricing.config.settings import Settings
from travel_pricing.engine import InMemoryRuleRepository, PricingEngine
from travel_pricing.engine.models import DemandFactors, PricingContext


@pytest.fixture(scope="module")
def engine():
    """Create a single engine instance for all tests."""
    return PricingEngine(
        repository=InMemoryRuleRepository(),
        settings=Settings(project_root=Path('.')),
        clock=lambda: datetime(2026, 1, 1, tzinfo=timezone.utc),
    )


def load_golden_cases():
    """Load golden test cases from CSV."""
    cases_path = os.path.join(os.path.dirname(__file__), 'golden_cases.csv')

    if not os.path.exists(cases_path):
        pytest.skip(f"Golden cases file not found: {cases_path}. Run generate_golden_cases.py first.")

    with open(cases_path, 'r', newline='', encoding='utf-8') as f:
        return list(csv.DictReader(f))


def build_context(case: dict) -> PricingContext:
    demand = None
    if case['current_bookings']:
        demand = DemandFactors(
            current_bookings=float(case['current_bookings']),
            available_slots=float(case['available_slots'] or 0),
        )
    return PricingContext(
        service_id=case['case_id'],
        service_type=case['service_type'],
        base_price=float(case['base_price']),
        currency="VND",
        booking_date=date.fromisoformat(case['booking_date']),
        service_date=date.fromisoformat(case['service_date']),
        group_size=int(float(case['group_size'])) if case['group_size'] else None,
        duration=float(case['duration']) if case['duration'] else None,
        demand_factors=demand,
    )


@pytest.mark.parametrize("case", load_golden_cases(), ids=lambda c: c['case_id'])
def test_golden_case(engine, case):
    """Test that pricing matches expected golden case."""
    result = engine.price(build_context(case))

    expected_rules = [r for r in case['expected_rules'].split('|') if r]
    applied = [r.rule_id for r in result.applied_rules]

    assert not result.fallback, f"Unexpected fallback: {result.warnings}"
    assert applied == expected_rules, \
        f"Rule mismatch for {case['case_id']}: expected {expected_rules}, got {applied}"
    assert result.final_price == float(case['expected_final_price']), \
        f"Price mismatch for {case['case_id']}: expected {case['expected_final_price']}, got {result.final_price}"
    assert result.breakdown.total == result.final_price


def test_generator_reproduces_committed_cases(engine):
    """The CSV is generator output; regenerating must not change it."""
    from generate_golden_cases import build_cases

    assert build_cases(engine) == load_golden_cases()
