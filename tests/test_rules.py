import pytest

from schema_normalizer.config import build_config
from schema_normalizer.engine import build_rule_table
from schema_normalizer.errors import ConfigurationError
from schema_normalizer.rules import contains_collapse, exact_rewrite, fill_empty, reformat_date


def test_contains_collapse():
    assert contains_collapse("passed,system-import", "passed", "passed") == "passed"
    assert contains_collapse("house-system-import-v2", "system-import", "system-import") == "system-import"
    assert contains_collapse("failed", "passed", "passed") == "failed"


def test_exact_rewrite():
    assert exact_rewrite("passed", "passed", "completed") == "completed"
    assert exact_rewrite("passed ", "passed", "completed") == "passed "
    assert exact_rewrite("completed", "passed", "completed") == "completed"


def test_fill_empty():
    assert fill_empty("", "", "system-import") == "system-import"
    assert fill_empty("manual", "", "system-import") == "manual"


@pytest.mark.parametrize(
    "value, expected",
    [
        ("05-03-2025", "05-Mar-2025"),
        ("5/3/25", "05-Mar-2025"),
        ("2025-03-05", "05-Mar-2025"),
        ("05-Mar-2025", "05-Mar-2025"),
        ("31-13-2025", "31-13-2025"),
        ("", ""),
        ("soon", "soon"),
    ],
)
def test_reformat_date(value, expected):
    assert reformat_date(value, "", "") == expected


@pytest.mark.parametrize(
    "func, value, match, replace",
    [
        (contains_collapse, "passed,system-import", "passed", "passed"),
        (exact_rewrite, "passed", "passed", "completed"),
        (fill_empty, "", "", "passed"),
        (reformat_date, "5-3-25", "", ""),
    ],
)
def test_rules_are_idempotent(func, value, match, replace):
    once = func(value, match, replace)
    assert func(once, match, replace) == once


def test_rule_table_resolves_label_at_load_time(header):
    config = build_config({
        "rules": [{"name": "visit-status", "column": "حالة الزيارة", "kind": "exact-rewrite", "match": "passed", "replace": "completed"}],
    })
    table = build_rule_table(header, config)

    assert table.width == 26
    assert table.rules[0].index == 23


def test_rule_table_apply_reports_changed_rules():
    config = build_config({
        "rules": [
            {"name": "first", "column": 0, "kind": "contains-collapse", "match": "passed"},
            {"name": "second", "column": 1, "kind": "fill-empty", "replace": "x"},
        ],
    })
    table = build_rule_table("a,b", config)

    row, changed = table.apply(["passed,extra", "y"])
    assert row == ["passed", "y"]
    assert changed == ["first"]


def test_rules_apply_in_declaration_order():
    config = build_config({
        "rules": [
            {"name": "collapse", "column": 0, "kind": "contains-collapse", "match": "passed"},
            {"name": "rewrite", "column": 0, "kind": "exact-rewrite", "match": "passed", "replace": "completed"},
        ],
    })
    table = build_rule_table("status", config)

    row, changed = table.apply(["passed;late"])
    assert row == ["completed"]
    assert changed == ["collapse", "rewrite"]


def test_missing_label_is_a_configuration_error(header):
    config = build_config({
        "rules": [{"name": "gone", "column": "عمود مفقود", "kind": "exact-rewrite", "match": "passed", "replace": "completed"}],
    })
    with pytest.raises(ConfigurationError) as excinfo:
        build_rule_table(header, config)

    assert excinfo.value.rule == "rule gone"
    assert excinfo.value.column == "عمود مفقود"


def test_label_match_is_exact_not_prefix():
    # "حالة الزيارة*" must not satisfy a lookup for "حالة الزيارة"
    config = build_config({
        "rules": [{"column": "حالة الزيارة", "kind": "exact-rewrite", "match": "passed", "replace": "completed"}],
    })
    with pytest.raises(ConfigurationError):
        build_rule_table("حالة الزيارة*,ملاحظات", config)


def test_ambiguous_label_is_a_configuration_error():
    config = build_config({
        "rules": [{"column": "status", "kind": "exact-rewrite", "match": "passed", "replace": "completed"}],
    })
    with pytest.raises(ConfigurationError):
        build_rule_table("status,status", config)


def test_index_outside_width_is_a_configuration_error():
    config = build_config({
        "schema_width": 2,
        "rules": [{"column": 5, "kind": "contains-collapse", "match": "passed"}],
    })
    with pytest.raises(ConfigurationError):
        build_rule_table("a,b,c,d,e,f", config)


def test_label_beyond_configured_width_is_a_configuration_error():
    config = build_config({
        "schema_width": 2,
        "rules": [{"column": "c", "kind": "contains-collapse", "match": "passed"}],
    })
    with pytest.raises(ConfigurationError):
        build_rule_table("a,b,c", config)


def test_missing_grouping_column_is_a_configuration_error():
    config = build_config({"grouping_column": "branch"})
    with pytest.raises(ConfigurationError):
        build_rule_table("a,b", config)


def test_duplicate_rule_names_are_rejected():
    config = build_config({
        "rules": [
            {"name": "dup", "column": 0, "kind": "contains-collapse", "match": "a"},
            {"name": "dup", "column": 1, "kind": "contains-collapse", "match": "b"},
        ],
    })
    with pytest.raises(ConfigurationError):
        build_rule_table("x,y", config)
