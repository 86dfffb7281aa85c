import pytest

from authzrules.core.errors import ConfigurationError
from authzrules.core.loader import load_rules
from authzrules.core.model import RuleSet
from authzrules.core.predicates import PredicateRegistry


def _rule(**over):
    rule = {"pattern": "info/*", "roles": "*", "methods": "read", "actions": "*"}
    rule.update(over)
    return rule


def test_load_list_and_mapping_forms():
    rs1 = load_rules([_rule()])
    rs2 = load_rules({"rules": [_rule()]})
    rs3 = load_rules({"configs": [_rule()]})
    assert isinstance(rs1, RuleSet)
    assert len(rs1) == len(rs2) == len(rs3) == 1
    assert rs1[0].pattern == "info/*"
    assert rs1[0].methods.values == frozenset({"read"})
    assert rs1[0].roles.wildcard is True


def test_rules_keep_order_and_index():
    rs = load_rules([_rule(id="a"), _rule(pattern="*", id="b"), _rule(pattern="x")])
    assert [r.index for r in rs] == [0, 1, 2]
    assert [r.id for r in rs] == ["a", "b", None]
    assert rs[2].label == "#2"


def test_unknown_predicate_fails_at_load_time():
    with pytest.raises(ConfigurationError) as exc:
        load_rules([_rule(predicate="doesNotExist")], PredicateRegistry())
    assert any("doesNotExist" in p for p in exc.value.problems)


def test_predicate_is_bound_at_load_time():
    reg = PredicateRegistry()
    fn = reg.register("ok", lambda ctx: True)
    rs = load_rules([_rule(predicate="ok")], reg)
    assert rs[0].check is fn
    assert rs[0].predicate == "ok"


def test_later_registry_changes_do_not_affect_loaded_rules():
    reg = PredicateRegistry()
    first = reg.register("p", lambda ctx: True)
    rs = load_rules([_rule(predicate="p")], reg)
    reg.register("p", lambda ctx: False)
    assert rs[0].check is first


@pytest.mark.parametrize("pattern", ["a/*/b", "a*", "**"])
def test_invalid_patterns_rejected(pattern):
    with pytest.raises(ConfigurationError):
        load_rules([_rule(pattern=pattern)])


@pytest.mark.parametrize("missing", ["pattern", "roles", "methods", "actions"])
def test_missing_required_field(missing):
    rule = _rule()
    del rule[missing]
    with pytest.raises(ConfigurationError) as exc:
        load_rules([rule])
    assert any(missing in p for p in exc.value.problems)


def test_empty_roles_rejected_but_empty_methods_allowed():
    with pytest.raises(ConfigurationError):
        load_rules([_rule(roles="")])
    rs = load_rules([_rule(methods="", actions="")])
    assert not rs[0].methods and not rs[0].actions


def test_unknown_keys_and_bad_types_rejected():
    with pytest.raises(ConfigurationError):
        load_rules([_rule(customAuthz="ownDataOnly()")])
    with pytest.raises(ConfigurationError):
        load_rules([_rule(methods=5)])


def test_duplicate_ids_rejected():
    with pytest.raises(ConfigurationError) as exc:
        load_rules([_rule(id="dup"), _rule(id="dup")])
    assert "duplicate id" in exc.value.problems[0]


def test_bad_top_level_shapes():
    for data in ("nope", 3, {"other": []}, {"rules": [], "configs": []}, {"rules": {}}):
        with pytest.raises(ConfigurationError):
            load_rules(data)


def test_all_problems_reported_and_nothing_partially_loaded():
    rules = [_rule(), _rule(pattern="a/*/b"), _rule(predicate="nope"), {"pattern": "x"}]
    with pytest.raises(ConfigurationError) as exc:
        load_rules(rules)
    problems = exc.value.problems
    assert len(problems) >= 3
    assert any(p.startswith("rule #1") for p in problems)
    assert any(p.startswith("rule #2") for p in problems)
    assert any(p.startswith("rule #3") for p in problems)


def test_empty_rule_list_loads_and_denies_everything():
    rs = load_rules([])
    assert len(rs) == 0


def test_wildcard_mixed_with_values_rejected():
    with pytest.raises(ConfigurationError) as exc:
        load_rules([_rule(methods="read,*"), _rule(roles=["*", "admin"])])
    problems = exc.value.problems
    assert problems[0].startswith("rule #0 methods")
    assert problems[1].startswith("rule #1 roles")
    # a malformed roles value is not also reported as empty
    assert len(problems) == 2
