from authzrules.core.roles import StaticRoleResolver


def test_expand_roles_with_inheritance_and_duplicates():
    r = StaticRoleResolver({"openidm-admin": ["openidm-authorized"], "openidm-authorized": ["user"]})
    out = r.expand(["openidm-admin", "openidm-admin"])
    assert out == ["openidm-admin", "openidm-authorized", "user"]


def test_expand_with_none_or_empty():
    r = StaticRoleResolver()
    assert r.expand([]) == []
    assert r.expand(None) == []


def test_expand_tolerates_cycles():
    r = StaticRoleResolver({"a": ["b"], "b": ["a"]})
    assert r.expand(["a"]) == ["a", "b"]
