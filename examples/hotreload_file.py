import json
import os
import tempfile

from authzrules import AccessRequest, FilePolicySource, Guard, HotReloader, ParentRequest, SecurityContext


def _write_json(path: str, data) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f)
        f.flush()
        os.fsync(f.fileno())


def _request() -> AccessRequest:
    return AccessRequest(
        id="managed/user/1",
        method="read",
        parent=ParentRequest(type="http", security=SecurityContext(roles=("openidm-authorized",))),
    )


def main() -> None:
    fd, path = tempfile.mkstemp(suffix=".json")
    os.close(fd)

    try:
        open_rules = {"configs": [{"id": "r1", "pattern": "managed/*", "roles": "*", "methods": "read", "actions": "*"}]}
        admin_only = {"configs": [{"id": "r2", "pattern": "*", "roles": "openidm-admin", "methods": "*", "actions": "*"}]}
        broken = {"configs": [{"id": "r3", "pattern": "managed/*/x", "roles": "*", "methods": "*", "actions": "*"}]}

        _write_json(path, open_rules)
        src = FilePolicySource(path)
        guard = Guard(src.load())
        mgr = HotReloader(guard, src)

        print("first:", guard.authorize(_request()).effect)  # allow

        _write_json(path, admin_only)
        mgr.check_and_reload()
        print("after:", guard.authorize(_request()).effect)  # deny

        # an invalid file is rejected; the guard keeps the last good rules
        _write_json(path, broken)
        mgr.check_and_reload()
        print("broken:", guard.authorize(_request()).effect, mgr.last_error)
    finally:
        try:
            os.remove(path)
        except PermissionError:
            pass


if __name__ == "__main__":
    main()
