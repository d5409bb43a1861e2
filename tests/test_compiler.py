"""Tests for rule set parsing, validation and hashing."""

import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from pydantic import ValidationError
from factrules import (
    Engine, ParseError, RuleSet, Composite, Rule,
    parse_rule_set, load_rule_set, validate_rule_set, compute_rule_set_hash,
)


# ============== FIXTURES ==============

@pytest.fixture
def sample_document():
    return {
        "composites": [
            {
                "operator": "and",
                "rules": [{"comparator": "eq", "path": "user.name", "value": "Trevor"}],
                "composites": [
                    {"operator": "or", "rules": [{"comparator": "gt", "path": "user.age", "value": 20}]}
                ],
            }
        ]
    }


def _write(tmp_path, data, name="rules.json"):
    path = tmp_path / name
    path.write_text(json.dumps(data) if not isinstance(data, str) else data)
    return path


# ============== TESTS ==============

class TestParseRuleSet:

    def test_parses_nested(self, sample_document):
        rule_set = parse_rule_set(json.dumps(sample_document))
        top = rule_set.composites[0]

        assert top.operator == "and"
        assert top.rules[0] == Rule(comparator="eq", path="user.name", value="Trevor")
        assert top.composites[0].rules[0].value == 20

    def test_missing_arrays_are_empty(self):
        rule_set = parse_rule_set(b'{"composites": [{"operator": "or"}]}')
        assert rule_set.composites[0].rules == []
        assert rule_set.composites[0].composites == []

    def test_null_arrays_are_empty(self):
        rule_set = parse_rule_set(b'{"composites": [{"operator": "and", "rules": null, "composites": null}]}')
        assert rule_set.composites[0].rules == []
        assert parse_rule_set(b'{"composites": null}').composites == []

    def test_empty_object(self):
        assert parse_rule_set(b"{}").composites == []

    def test_unknown_keys_ignored(self):
        rule_set = parse_rule_set(b'{"version": 2, "composites": [{"operator": "and", "name": "x"}]}')
        assert len(rule_set.composites) == 1

    def test_unknown_operator_still_parses(self):
        rule_set = parse_rule_set(b'{"composites": [{"operator": "xor"}]}')
        assert rule_set.composites[0].operator == "xor"

    def test_value_defaults_to_null(self):
        rule_set = parse_rule_set(b'{"composites": [{"operator": "and", "rules": [{"comparator": "eq", "path": "a"}]}]}')
        assert rule_set.composites[0].rules[0].value is None

    def test_rules_are_frozen(self, sample_document):
        rule = parse_rule_set(json.dumps(sample_document)).composites[0].rules[0]
        with pytest.raises(ValidationError):
            rule.path = "other"


class TestParseErrors:
    """Malformed documents fail at construction time with ParseError."""

    def test_malformed_json(self):
        with pytest.raises(ParseError) as exc_info:
            parse_rule_set(b"{not json")
        assert exc_info.value.errors

    def test_wrong_root_type(self):
        with pytest.raises(ParseError):
            parse_rule_set(b"[]")

    def test_missing_operator(self):
        with pytest.raises(ParseError) as exc_info:
            parse_rule_set(b'{"composites": [{"rules": []}]}')
        assert any("operator" in err for err in exc_info.value.errors)

    def test_rule_missing_path(self):
        with pytest.raises(ParseError) as exc_info:
            parse_rule_set(b'{"composites": [{"operator": "and", "rules": [{"comparator": "eq"}]}]}')
        assert any("path" in err for err in exc_info.value.errors)

    def test_rules_not_a_list(self):
        with pytest.raises(ParseError):
            parse_rule_set(b'{"composites": [{"operator": "and", "rules": "eq"}]}')

    def test_parse_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_rule_set(b"")

    def test_parse_error_details(self):
        err = ParseError("Invalid rule set document", errors=["composites.0.operator: Field required"])
        assert str(err) == "[PARSE_ERROR] Invalid rule set document"
        assert err.to_dict() == {
            "error_type": "ParseError",
            "message": "Invalid rule set document",
            "error_code": "PARSE_ERROR",
            "errors": ["composites.0.operator: Field required"],
        }


class TestLoadRuleSet:

    def test_load(self, tmp_path, sample_document):
        rule_set = load_rule_set(_write(tmp_path, sample_document))
        assert len(rule_set.composites) == 1

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_rule_set(tmp_path / "missing.json")


class TestValidateRuleSet:

    def test_valid(self, tmp_path, sample_document):
        assert validate_rule_set(_write(tmp_path, sample_document)) == (True, "Valid")

    def test_missing_file(self, tmp_path):
        is_valid, message = validate_rule_set(tmp_path / "missing.json")
        assert is_valid is False
        assert "File not found" in message

    def test_invalid_json(self, tmp_path):
        is_valid, message = validate_rule_set(_write(tmp_path, "{oops"))
        assert is_valid is False
        assert "Invalid rule set document" in message

    def test_unknown_operator_reported(self, tmp_path):
        is_valid, message = validate_rule_set(_write(tmp_path, {"composites": [{"operator": "xor"}]}))
        assert is_valid is False
        assert "unknown operator 'xor'" in message

    def test_unknown_comparator_reported(self, tmp_path, sample_document):
        nested = sample_document["composites"][0]["composites"][0]
        nested["rules"][0]["comparator"] = "magic_compare"

        is_valid, message = validate_rule_set(_write(tmp_path, sample_document))
        assert is_valid is False
        assert "composites.0.composites.0.rules.0" in message
        assert "magic_compare" in message


class TestRuleSetHash:

    def test_hash_deterministic(self, sample_document):
        rule_set = parse_rule_set(json.dumps(sample_document))
        hash1 = compute_rule_set_hash(rule_set)
        hash2 = compute_rule_set_hash(rule_set)

        assert hash1 == hash2
        assert len(hash1) == 64  # SHA256 hex

    def test_hash_ignores_key_order(self, sample_document):
        reordered = json.dumps(sample_document, sort_keys=True)
        assert compute_rule_set_hash(parse_rule_set(reordered)) == \
            compute_rule_set_hash(parse_rule_set(json.dumps(sample_document)))

    def test_hash_changes_with_content(self):
        a = RuleSet(composites=[Composite(operator="and", rules=[Rule(comparator="eq", path="a", value=1)])])
        b = RuleSet(composites=[Composite(operator="and", rules=[Rule(comparator="eq", path="a", value=2)])])
        assert compute_rule_set_hash(a) != compute_rule_set_hash(b)


def _nested_document(depth):
    """Chain of AND composites `depth` levels deep around one rule on "a"."""
    composite = {"operator": "and", "rules": [{"comparator": "eq", "path": "a", "value": 1}]}
    for _ in range(depth - 1):
        composite = {"operator": "and", "composites": [composite]}
    return json.dumps({"composites": [composite]})


class TestDeepNesting:
    """Deeply nested documents parse and evaluate."""

    def test_hundred_levels(self):
        engine = Engine.from_document(_nested_document(100))

        assert engine.evaluate({"a": 1}) is True
        assert engine.evaluate({"a": 2}) is False

    def test_two_hundred_levels(self):
        rule_set = parse_rule_set(_nested_document(200))
        assert len(rule_set.composites) == 1

    def test_invalid_utf8_is_parse_error(self):
        with pytest.raises(ParseError) as exc_info:
            parse_rule_set(b'{"composites": [{"operator": "\xff"}]}')
        assert exc_info.value.errors
