"""
Rule Compiler - Validates and compiles pricing rules from CSV to JSON.

Reads rules.csv, validates every row, and outputs compiled_rules.json
for JsonRuleRepository.

CSV value column by operator:
    between        low|high          (numbers)
    in / not_in    a|b|c             (labels)
    others         single value      (number for numeric condition types)
"""
import json
import logging
import sys
import time
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import pandas as pd

from ..engine.models import (
    AdjustmentType,
    ConditionType,
    Operator,
    PricingAdjustment,
    PricingCondition,
    PricingRule,
    RoundingRule,
    ServiceType,
    as_date,
    parse_date,
)

logger = logging.getLogger(__name__)

CSV_COLUMNS = [
    'rule_id', 'name', 'service_type', 'active', 'priority',
    'condition_type', 'operator', 'value', 'metric',
    'adjustment_type', 'adjustment_value', 'currency', 'rounding_rule',
    'valid_from', 'valid_to', 'notes',
]

NUMERIC_CONDITIONS = {
    ConditionType.ADVANCE_BOOKING,
    ConditionType.GROUP_SIZE,
    ConditionType.DURATION,
    ConditionType.DEMAND,
}

SUPPORTED_OPERATORS = {
    ConditionType.SEASONAL: {Operator.EQUALS, Operator.IN, Operator.NOT_IN},
    ConditionType.DAY_OF_WEEK: {Operator.EQUALS, Operator.IN, Operator.NOT_IN},
    ConditionType.LOCATION: {Operator.EQUALS, Operator.IN, Operator.NOT_IN},
    ConditionType.ADVANCE_BOOKING: {Operator.EQUALS, Operator.GREATER_THAN, Operator.LESS_THAN, Operator.BETWEEN},
    ConditionType.GROUP_SIZE: {Operator.EQUALS, Operator.GREATER_THAN, Operator.LESS_THAN, Operator.BETWEEN},
    ConditionType.DURATION: {Operator.EQUALS, Operator.GREATER_THAN, Operator.LESS_THAN, Operator.BETWEEN},
    ConditionType.DEMAND: {Operator.EQUALS, Operator.GREATER_THAN, Operator.LESS_THAN, Operator.BETWEEN},
}

LIST_SEPARATOR = '|'


def parse_bool(value: str) -> bool:
    """Parse a boolean from CSV string."""
    return value.lower() in ('true', '1', 'yes', 'on')


def parse_optional_str(value: Any) -> Optional[str]:
    """Parse optional string (empty = None)."""
    if value is None or str(value).strip() == '':
        return None
    return str(value).strip()


def generate_rule_id() -> str:
    """Generate a rule id of the form rule_<millis>_<suffix>."""
    return f"rule_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def parse_condition_value(condition_type: ConditionType, operator: Operator, raw: str) -> Any:
    """Parse the CSV value column into the payload shape the operator expects."""
    if operator == Operator.BETWEEN:
        parts = [p.strip() for p in raw.split(LIST_SEPARATOR)]
        if len(parts) != 2:
            raise ValueError("between needs two values separated by '|'")
        return [float(parts[0]), float(parts[1])]

    if operator in (Operator.IN, Operator.NOT_IN):
        return [p.strip() for p in raw.split(LIST_SEPARATOR) if p.strip()]

    if condition_type in NUMERIC_CONDITIONS:
        return float(raw)
    return raw


def validate_rule(row: dict, line_num: int) -> tuple[Optional[PricingRule], list[str]]:
    """
    Validate and parse a rule from a CSV row.

    Returns (rule, errors) - rule is None if validation failed.
    """
    errors = []

    rule_id = parse_optional_str(row.get('rule_id')) or generate_rule_id()
    name = parse_optional_str(row.get('name')) or rule_id
    active = parse_bool(row.get('active') or 'false')

    try:
        priority = int(row.get('priority') or '50')
    except ValueError:
        errors.append(f"Line {line_num}: priority must be an integer")
        return None, errors

    try:
        service_type = ServiceType(parse_optional_str(row.get('service_type')) or '')
    except ValueError:
        errors.append(f"Line {line_num}: invalid service_type '{row.get('service_type')}'")
        return None, errors

    # Condition
    try:
        condition_type = ConditionType(parse_optional_str(row.get('condition_type')) or '')
    except ValueError:
        errors.append(
            f"Line {line_num}: invalid condition_type '{row.get('condition_type')}', "
            f"must be one of: {[c.value for c in ConditionType]}"
        )
        return None, errors

    try:
        operator = Operator(parse_optional_str(row.get('operator')) or '')
    except ValueError:
        errors.append(f"Line {line_num}: invalid operator '{row.get('operator')}'")
        return None, errors

    if operator not in SUPPORTED_OPERATORS[condition_type]:
        errors.append(f"Line {line_num}: operator '{operator.value}' not supported for {condition_type.value}")
        return None, errors

    raw_value = parse_optional_str(row.get('value'))
    if raw_value is None:
        errors.append(f"Line {line_num}: value is required")
        return None, errors

    try:
        value = parse_condition_value(condition_type, operator, raw_value)
    except ValueError as e:
        errors.append(f"Line {line_num}: bad value '{raw_value}' for {condition_type.value}: {e}")
        return None, errors

    metadata = None
    metric = parse_optional_str(row.get('metric'))
    if metric:
        if condition_type != ConditionType.DEMAND:
            errors.append(f"Line {line_num}: metric only applies to demand conditions")
        metadata = {'metric': metric}

    # Adjustment
    try:
        adjustment_type = AdjustmentType(parse_optional_str(row.get('adjustment_type')) or '')
    except ValueError:
        errors.append(f"Line {line_num}: invalid adjustment_type '{row.get('adjustment_type')}'")
        return None, errors

    try:
        adjustment_value = float(parse_optional_str(row.get('adjustment_value')) or '')
    except ValueError:
        errors.append(f"Line {line_num}: adjustment_value must be numeric")
        return None, errors

    try:
        rounding_rule = RoundingRule(parse_optional_str(row.get('rounding_rule')) or 'none')
    except ValueError:
        errors.append(f"Line {line_num}: invalid rounding_rule '{row.get('rounding_rule')}'")
        return None, errors

    # Validity window
    bounds = {}
    for date_field in ('valid_from', 'valid_to'):
        try:
            bounds[date_field] = parse_date(parse_optional_str(row.get(date_field)))
        except ValueError:
            errors.append(f"Line {line_num}: {date_field} must be YYYY-MM-DD format")

    if not errors and bounds['valid_from'] and bounds['valid_to']:
        if as_date(bounds['valid_from']) > as_date(bounds['valid_to']):
            errors.append(f"Line {line_num}: valid_from must not be after valid_to")

    if errors:
        return None, errors

    return PricingRule(
        id=rule_id,
        name=name,
        service_type=service_type,
        condition=PricingCondition(
            type=condition_type,
            operator=operator,
            value=value,
            metadata=metadata,
        ),
        adjustment=PricingAdjustment(
            type=adjustment_type,
            value=adjustment_value,
            currency=parse_optional_str(row.get('currency')),
            rounding_rule=rounding_rule,
        ),
        priority=priority,
        is_active=active,
        valid_from=bounds['valid_from'],
        valid_to=bounds['valid_to'],
    ), []


def compile_rules(rules_csv: Path, output_json: Path) -> tuple[bool, list[PricingRule], list[str]]:
    """
    Compile rules from CSV to JSON.

    Returns (success, rules, errors).
    """
    all_errors = []
    rules = []

    if not rules_csv.exists():
        all_errors.append(f"Rules file not found: {rules_csv}")
        return False, [], all_errors

    df = pd.read_csv(rules_csv, dtype=str).fillna('')
    df.columns = [c.strip() for c in df.columns]

    missing = [c for c in ('service_type', 'condition_type', 'operator', 'value', 'adjustment_type')
               if c not in df.columns]
    if missing:
        all_errors.append(f"Rules file is missing columns: {missing}")
        return False, [], all_errors

    for line_num, row in enumerate(df.to_dict(orient='records'), start=2):  # header is line 1
        rule, errors = validate_rule(row, line_num)
        if errors:
            all_errors.extend(errors)
        elif rule:
            rules.append(rule)

    if all_errors:
        for err in all_errors:
            logger.error("Validation error: %s", err)
        return False, rules, all_errors

    seen = set()
    for rule in rules:
        if rule.id in seen:
            all_errors.append(f"Duplicate rule_id '{rule.id}'")
        seen.add(rule.id)
    if all_errors:
        return False, rules, all_errors

    # Sort by priority (lower = evaluated first)
    rules.sort(key=lambda r: r.priority)

    output_data = {
        "compiled_at": datetime.now().isoformat(),
        "source_file": str(rules_csv),
        "total_rules": len(rules),
        "active_rules": sum(1 for r in rules if r.is_active),
        "rules": [r.to_dict() for r in rules],
    }

    output_json.parent.mkdir(parents=True, exist_ok=True)
    with open(output_json, 'w', encoding='utf-8') as f:
        json.dump(output_data, f, indent=2)

    logger.info("Compiled %d rules (%d active) to %s", len(rules), output_data['active_rules'], output_json)
    return True, rules, []


def main():
    """CLI entry point."""
    from ..config.settings import get_settings
    from ..logging_config import configure_logging

    settings = get_settings()
    configure_logging(settings.log_level)

    logger.info("Compiling pricing rules from %s", settings.rules_csv)
    success, rules, errors = compile_rules(settings.rules_csv, settings.compiled_rules)

    if not success:
        logger.error("Compilation failed with %d errors", len(errors))
        sys.exit(1)


if __name__ == "__main__":
    main()
