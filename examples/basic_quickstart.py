from authzrules import AccessRequest, Guard, ParentRequest, SecurityContext
from authzrules.defaults import AUTHORIZED, DEFAULT_RULES
from authzrules.predicates import default_registry
from authzrules.readers import MemoryDataReader


def main() -> None:
    reader = MemoryDataReader({"config/ui/configuration": {"configuration": {"selfRegistration": False}}})
    g = Guard(DEFAULT_RULES, default_registry(reader))

    alice = SecurityContext(username="alice", user_id="u1", roles=(AUTHORIZED,))
    own = AccessRequest(id="managed/user/u1", method="read", parent=ParentRequest(type="http", security=alice))
    other = AccessRequest(id="managed/user/u2", method="read", parent=ParentRequest(type="http", security=alice))

    d = g.authorize(own)
    print(d.allowed, d.reason, d.rule_id)  # True matched user-own-data
    d = g.authorize(other)
    print(d.allowed, d.reason)  # False predicate_denied


if __name__ == "__main__":
    main()
