"""Tests for the rule matcher."""

from datetime import datetime, timedelta, timezone

import pytest

from assignment_engine.domain.entities.assignment_rule import AssignmentRule
from assignment_engine.domain.errors import ValidationFailed
from assignment_engine.domain.policies.rule_matching import (
    find_best_match,
    iter_matching_rules,
    order_rules,
    rule_matches,
    validate_rule_conditions,
)
from assignment_engine.domain.value_objects.match_input import WorkOrderMatchInput

T0 = datetime(2026, 3, 1, tzinfo=timezone.utc)


def _rule(
    rid: int,
    priority: int = 0,
    *,
    minutes: int = 0,
    active: bool = True,
    asset_types=(),
    categories=(),
    locations=(),
    priorities=(),
    assign_to: str = "tech-1",
) -> AssignmentRule:
    return AssignmentRule(
        id=rid,
        name=f"R{rid}",
        assign_to_id=assign_to,
        priority=priority,
        is_active=active,
        asset_types=frozenset(asset_types),
        categories=frozenset(categories),
        locations=frozenset(locations),
        priorities=frozenset(priorities),
        created_at=T0 + timedelta(minutes=minutes),
    )


ELECTRICAL_SHOP_A = WorkOrderMatchInput(category="Electrical", priority="HIGH", location="ShopA")


def test_example_scenario_picks_highest_priority_rule():
    rules = [
        _rule(1, 10, categories=["Electrical"], locations=["ShopA"], assign_to="tech-1"),
        _rule(2, 5, categories=["Mechanical"], assign_to="tech-2"),
    ]
    match = find_best_match(ELECTRICAL_SHOP_A, rules)
    assert match is not None
    assert match.id == 1
    assert match.assign_to_id == "tech-1"


def test_example_scenario_without_match_returns_none():
    rules = [
        _rule(1, 10, categories=["Electrical"], locations=["ShopA"]),
        _rule(2, 5, categories=["Mechanical"]),
    ]
    assert find_best_match(WorkOrderMatchInput(category="Cleaning", priority="LOW"), rules) is None


def test_empty_rule_list_returns_none():
    assert find_best_match(ELECTRICAL_SHOP_A, []) is None


def test_catch_all_matches_any_input():
    catch_all = _rule(1)
    inputs = [
        ELECTRICAL_SHOP_A,
        WorkOrderMatchInput(category="Cleaning", priority="LOW"),
        WorkOrderMatchInput(category="HVAC", priority="URGENT", asset_type="Chiller"),
    ]
    for data in inputs:
        assert rule_matches(catch_all, data)


def test_location_filter_never_matches_missing_location():
    rule = _rule(1, locations=["ShopA"])
    assert not rule_matches(rule, WorkOrderMatchInput(category="Electrical", priority="HIGH"))


def test_asset_type_filter_never_matches_missing_asset_type():
    rule = _rule(1, asset_types=["Pump"])
    assert not rule_matches(rule, WorkOrderMatchInput(category="Electrical", priority="HIGH"))


def test_membership_is_exact_not_substring():
    rule = _rule(1, locations=["Shop"])
    assert not rule_matches(rule, ELECTRICAL_SHOP_A)


def test_every_non_empty_filter_must_accept():
    rule = _rule(1, categories=["Electrical"], priorities=["LOW"])
    assert not rule_matches(rule, ELECTRICAL_SHOP_A)


def test_inactive_rule_never_matches_even_with_top_priority():
    rules = [
        _rule(1, 100, active=False),
        _rule(2, 1, categories=["Electrical"], assign_to="tech-2"),
    ]
    assert find_best_match(ELECTRICAL_SHOP_A, rules).id == 2


def test_only_inactive_rules_returns_none():
    assert find_best_match(ELECTRICAL_SHOP_A, [_rule(1, active=False)]) is None


def test_equal_priority_earliest_created_wins_regardless_of_input_order():
    older = _rule(7, 5, minutes=0, assign_to="tech-old")
    newer = _rule(3, 5, minutes=10, assign_to="tech-new")
    assert find_best_match(ELECTRICAL_SHOP_A, [newer, older]).id == 7
    assert find_best_match(ELECTRICAL_SHOP_A, [older, newer]).id == 7


def test_creation_order_compares_instants_across_offsets():
    a = _rule(1, 5)
    a.created_at = datetime(2026, 3, 1, 10, 0, tzinfo=timezone(timedelta(hours=2)))
    b = _rule(2, 5)
    b.created_at = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)
    assert find_best_match(ELECTRICAL_SHOP_A, [b, a]).id == 1


def test_unsaved_rule_sorts_after_saved_peers():
    saved = _rule(9, 5)
    unsaved = _rule(1, 5)
    unsaved.created_at = None
    assert [r.id for r in order_rules([unsaved, saved])] == [9, 1]


def test_equal_priority_and_timestamp_falls_back_to_id():
    a = _rule(2, 5)
    b = _rule(1, 5)
    assert find_best_match(ELECTRICAL_SHOP_A, [a, b]).id == 1


def test_specificity_is_not_a_tie_break():
    broad = _rule(1, 5, minutes=0)
    specific = _rule(2, 5, minutes=1, categories=["Electrical"], locations=["ShopA"])
    assert find_best_match(ELECTRICAL_SHOP_A, [specific, broad]).id == 1


def test_matching_is_deterministic():
    rules = [_rule(i, priority=i % 3, minutes=10 - i) for i in range(1, 10)]
    first = find_best_match(ELECTRICAL_SHOP_A, rules)
    for _ in range(20):
        assert find_best_match(ELECTRICAL_SHOP_A, list(reversed(rules))) is first


def test_order_rules_drops_inactive_and_sorts():
    rules = [_rule(1, 1), _rule(2, 9, active=False), _rule(3, 5), _rule(4, 5, minutes=-1)]
    assert [r.id for r in order_rules(rules)] == [4, 3, 1]


def test_iter_matching_rules_yields_in_evaluation_order():
    rules = [
        _rule(1, 1),
        _rule(2, 5, categories=["Electrical"]),
        _rule(3, 3, categories=["Mechanical"]),
    ]
    assert [r.id for r in iter_matching_rules(ELECTRICAL_SHOP_A, rules)] == [2, 1]


def test_match_input_requires_category_and_priority():
    with pytest.raises(ValidationFailed, match="category"):
        WorkOrderMatchInput(category="", priority="HIGH")
    with pytest.raises(ValidationFailed, match="priority"):
        WorkOrderMatchInput(category="Electrical", priority=" ")


def test_validate_rule_conditions_accepts_catch_all():
    assert validate_rule_conditions(name="Default", priority=0, priorities=[]) == []


def test_validate_rule_conditions_reports_problems():
    errors = validate_rule_conditions(name=" ", priority=101, priorities=["HIGH", "CRITICAL"])
    assert "Name is required" in errors
    assert any("between 0 and 100" in e for e in errors)
    assert "Invalid priority value: CRITICAL" in errors
