import pytest

from authzrules.core.sets import NOT_APPLICABLE, ValueSet, action_matches, roles_match, value_matches


def test_parse_comma_separated_and_lists():
    assert ValueSet.parse("read,action").values == frozenset({"read", "action"})
    assert ValueSet.parse(" read , update ").values == frozenset({"read", "update"})
    assert ValueSet.parse(["read", "delete"]).values == frozenset({"read", "delete"})
    assert ValueSet.parse("*").wildcard is True
    assert ValueSet.parse(["*"]).wildcard is True


def test_parse_empty_means_nothing_allowed():
    vs = ValueSet.parse("")
    assert not vs
    assert vs.values == frozenset()
    assert vs.wildcard is False


def test_parse_rejects_non_strings():
    with pytest.raises(TypeError):
        ValueSet.parse(42)
    with pytest.raises(TypeError):
        ValueSet.parse(["read", 1])


def test_roles_wildcard_accepts_anyone_including_no_roles():
    assert roles_match(set(), ValueSet.any()) is True
    assert roles_match({"x"}, ValueSet.parse("*")) is True


def test_roles_intersection():
    allowed = ValueSet.parse("openidm-admin,openidm-authorized")
    assert roles_match({"openidm-authorized"}, allowed) is True
    assert roles_match({"other", "openidm-admin"}, allowed) is True
    assert roles_match({"other"}, allowed) is False
    assert roles_match(set(), allowed) is False


def test_value_matches_wildcard_and_membership():
    assert value_matches("delete", ValueSet.any()) is True
    assert value_matches("read", ValueSet.parse("read,action")) is True
    assert value_matches("rea", ValueSet.parse("read")) is False


def test_value_matches_last_element_and_no_phantom_element():
    allowed = ValueSet.parse("read,update,delete")
    assert value_matches("delete", allowed) is True
    assert value_matches("patch", allowed) is False


def test_empty_allowed_denies_concrete_values():
    assert value_matches("read", ValueSet.parse("")) is False


def test_absent_request_value_is_auto_satisfied():
    empty = ValueSet.parse("")
    assert value_matches(NOT_APPLICABLE, empty) is True
    assert action_matches("", empty) is True
    assert action_matches("", ValueSet.parse("reauthenticate")) is True


def test_empty_method_is_a_value_not_an_absence():
    assert value_matches("", ValueSet.parse("read")) is False
    assert value_matches("", ValueSet.parse("")) is False
    assert value_matches("", ValueSet.any()) is True


def test_action_membership():
    assert action_matches("reauthenticate", ValueSet.parse("reauthenticate")) is True
    assert action_matches("logout", ValueSet.parse("reauthenticate")) is False
    assert action_matches("logout", ValueSet.any()) is True


@pytest.mark.parametrize("raw", ["read,*", ["*", "read"], " * , update"])
def test_parse_rejects_wildcard_mixed_with_values(raw):
    with pytest.raises(ValueError):
        ValueSet.parse(raw)


def test_parse_repeated_wildcard_is_still_wildcard():
    assert ValueSet.parse("*,*").wildcard is True
    assert ValueSet.parse(" * ").wildcard is True


def test_issuperset_and_to_config():
    assert ValueSet.any().issuperset(ValueSet.parse("a"))
    assert not ValueSet.parse("a").issuperset(ValueSet.any())
    assert ValueSet.parse("a,b").issuperset(ValueSet.parse("b"))
    assert ValueSet.parse("b,a").to_config() == "a,b"
    assert ValueSet.any().to_config() == "*"
