import json
import os
import sys
from datetime import date, datetime
from pathlib import Path

import pytest

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from travel_pricing.engine import JsonRuleRepository
from travel_pricing.engine.models import ConditionType, Operator
from travel_pricing.engine.rule_repository import default_rules
from travel_pricing.rules.compile_rules import CSV_COLUMNS, compile_rules, validate_rule

RULES_CSV = Path(src_path) / 'travel_pricing' / 'rules' / 'rules.csv'


def make_row(**overrides) -> dict:
    row = {c: '' for c in CSV_COLUMNS}
    row.update({
        'rule_id': 'r1',
        'name': 'Rule One',
        'service_type': 'TOUR',
        'active': 'true',
        'priority': '10',
        'condition_type': 'group_size',
        'operator': 'greater_than',
        'value': '5',
        'adjustment_type': 'percentage',
        'adjustment_value': '-10',
    })
    row.update(overrides)
    return row


def test_shipped_rules_csv_matches_default_rules(tmp_path):
    output = tmp_path / 'compiled_rules.json'
    success, rules, errors = compile_rules(RULES_CSV, output)

    assert success, errors
    data = json.loads(output.read_text(encoding='utf-8'))
    assert data['total_rules'] == 6
    assert data['active_rules'] == 6

    compiled = {r.id: r for r in JsonRuleRepository(output).all_rules()}
    for rule in default_rules():
        assert compiled[rule.id].priority == rule.priority
        assert compiled[rule.id].adjustment.value == rule.adjustment.value
        assert compiled[rule.id].condition.type == rule.condition.type.value


def test_compiled_rules_sorted_by_priority(tmp_path):
    success, rules, _ = compile_rules(RULES_CSV, tmp_path / 'out.json')

    assert success
    assert [r.priority for r in rules] == sorted(r.priority for r in rules)


def test_validate_between_and_list_values():
    between, errors = validate_rule(make_row(condition_type='duration', operator='between', value='3|6'), 2)
    assert not errors
    assert between.condition.value == [3.0, 6.0]

    listed, errors = validate_rule(
        make_row(condition_type='location', operator='not_in', value='hanoi | hue'), 3
    )
    assert not errors
    assert listed.condition.operator == Operator.NOT_IN
    assert listed.condition.value == ['hanoi', 'hue']


def test_validate_parses_window_and_metric():
    rule, errors = validate_rule(make_row(
        condition_type='demand', value='0.75', metric='occupancy_rate',
        valid_from='2026-06-01', valid_to='2026-08-31', rounding_rule='round',
    ), 2)

    assert not errors
    assert rule.condition.type == ConditionType.DEMAND
    assert rule.condition.metadata == {'metric': 'occupancy_rate'}
    assert rule.valid_from == date(2026, 6, 1)
    assert rule.adjustment.rounding_rule.value == 'round'


def test_missing_rule_id_is_generated():
    rule, errors = validate_rule(make_row(rule_id=''), 2)

    assert not errors
    assert rule.id.startswith('rule_')


@pytest.mark.parametrize("overrides, message", [
    ({'service_type': 'SPACESHIP'}, "service_type"),
    ({'condition_type': 'weather'}, "condition_type"),
    ({'operator': 'roughly'}, "operator"),
    ({'operator': 'in'}, "not supported"),
    ({'value': ''}, "value is required"),
    ({'value': 'five'}, "bad value"),
    ({'operator': 'between', 'value': '3'}, "bad value"),
    ({'adjustment_type': 'multiply'}, "adjustment_type"),
    ({'adjustment_value': 'ten'}, "numeric"),
    ({'rounding_rule': 'banker'}, "rounding_rule"),
    ({'priority': 'high'}, "priority"),
    ({'valid_from': '01/06/2026'}, "YYYY-MM-DD"),
    ({'valid_from': '2026-09-01', 'valid_to': '2026-06-01'}, "valid_from"),
    ({'metric': 'occupancy_rate'}, "metric"),
])
def test_validate_rejects_bad_rows(overrides, message):
    rule, errors = validate_rule(make_row(**overrides), 7)

    assert rule is None
    assert errors and errors[0].startswith("Line 7")
    assert message in errors[0]


def test_compile_fails_on_bad_row(tmp_path):
    csv_path = tmp_path / 'rules.csv'
    csv_path.write_text(
        ",".join(CSV_COLUMNS) + "\n"
        "ok,OK,TOUR,true,1,group_size,greater_than,5,,percentage,-10,,none,,,\n"
        "bad,Bad,TOUR,true,2,group_size,greater_than,5,,percentage,lots,,none,,,\n",
        encoding='utf-8',
    )
    output = tmp_path / 'compiled_rules.json'

    success, rules, errors = compile_rules(csv_path, output)

    assert not success
    assert [r.id for r in rules] == ['ok']
    assert "Line 3" in errors[0]
    assert not output.exists()


def test_compile_rejects_duplicate_ids(tmp_path):
    csv_path = tmp_path / 'rules.csv'
    line = "dup,Dup,TOUR,true,1,group_size,greater_than,5,,percentage,-10,,none,,,\n"
    csv_path.write_text(",".join(CSV_COLUMNS) + "\n" + line + line, encoding='utf-8')

    success, _, errors = compile_rules(csv_path, tmp_path / 'out.json')

    assert not success
    assert "Duplicate" in errors[0]


def test_compile_missing_file(tmp_path):
    success, rules, errors = compile_rules(tmp_path / 'missing.csv', tmp_path / 'out.json')

    assert not success
    assert rules == []
    assert "not found" in errors[0]


def test_validate_mixed_date_and_datetime_window():
    rule, errors = validate_rule(make_row(valid_from='2026-01-01', valid_to='2026-12-31 23:59'), 2)

    assert not errors
    assert rule.valid_from == date(2026, 1, 1)
    assert rule.valid_to == datetime(2026, 12, 31, 23, 59)

    rule, errors = validate_rule(make_row(valid_from='2026-12-31 08:00', valid_to='2026-06-01'), 3)

    assert rule is None
    assert errors == ["Line 3: valid_from must not be after valid_to"]
