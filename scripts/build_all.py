#!/usr/bin/env python
"""
Build pipeline - compiles pricing rules and runs the golden tests.

Usage:
    python scripts/build_all.py
"""
import subprocess
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from travel_pricing.config.settings import get_settings
from travel_pricing.logging_config import configure_logging
from travel_pricing.rules.compile_rules import compile_rules


def main():
    settings = get_settings()
    configure_logging(settings.log_level)

    print("=" * 60)
    print("TRAVEL PRICING BUILD PIPELINE")
    print("=" * 60)
    print()

    print("[1/2] Compiling pricing rules...")
    success, rules, errors = compile_rules(settings.rules_csv, settings.compiled_rules)

    if not success:
        print("\n❌ BUILD FAILED")
        for error in errors:
            print(f"  ERROR: {error}")
        sys.exit(1)

    print()
    print("[2/2] Running golden tests...")
    test_result = subprocess.run(
        [sys.executable, '-m', 'pytest', 'tests/test_golden_cases.py', '-v', '--tb=short'],
        cwd=Path(__file__).parent.parent
    )

    if test_result.returncode != 0:
        print("\n❌ TESTS FAILED")
        sys.exit(1)

    print()
    print("=" * 60)
    print("✅ BUILD COMPLETE")
    print("=" * 60)
    print()
    print("Rules by service type:")
    by_type = {}
    for rule in rules:
        key = getattr(rule.service_type, 'value', rule.service_type)
        by_type[key] = by_type.get(key, 0) + 1
    for service_type, count in sorted(by_type.items()):
        print(f"  {service_type}: {count}")


if __name__ == "__main__":
    main()
