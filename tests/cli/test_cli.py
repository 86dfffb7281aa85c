import io
import json
import sys

import pytest

from authzrules import __version__
from authzrules.cli import EXIT_DENIED, EXIT_INVALID, EXIT_LINT, EXIT_OK, main
from authzrules.defaults import DEFAULT_RULES


def _write(tmp_path, name, data):
    p = tmp_path / name
    p.write_text(json.dumps(data), encoding="utf-8")
    return str(p)


def _out(capsys):
    return json.loads(capsys.readouterr().out)


def test_version(capsys):
    assert main(["--version"]) == EXIT_OK
    assert capsys.readouterr().out.strip() == f"authzrules {__version__}"


def test_missing_command_is_usage_error():
    with pytest.raises(SystemExit) as ei:
        main([])
    assert ei.value.code == 2


def test_validate_ok(tmp_path, capsys):
    path = _write(tmp_path, "access.json", {"configs": DEFAULT_RULES})
    assert main(["validate", path]) == EXIT_OK
    assert _out(capsys) == {"valid": True, "rules": len(DEFAULT_RULES)}


def test_validate_reports_problems(tmp_path, capsys):
    path = _write(
        tmp_path,
        "access.json",
        [{"pattern": "*", "roles": "*", "methods": "*", "actions": "*", "predicate": "nope"}],
    )
    assert main(["validate", path]) == EXIT_INVALID
    out = _out(capsys)
    assert out["valid"] is False
    assert "unknown predicate 'nope'" in out["problems"][0]


def test_validate_from_stdin(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO(json.dumps([{"pattern": "x", "roles": "a", "methods": "*", "actions": "*"}])))
    assert main(["validate", "-"]) == EXIT_OK
    assert _out(capsys)["rules"] == 1


def test_missing_file_is_invalid(tmp_path, capsys):
    assert main(["validate", str(tmp_path / "nope.json")]) == EXIT_INVALID
    assert "authzrules:" in capsys.readouterr().err


def test_lint_strict(tmp_path, capsys):
    rules = [
        {"pattern": "*", "roles": "admin", "methods": "*", "actions": "*"},
        {"pattern": "managed/*", "roles": "admin", "methods": "read", "actions": "*"},
    ]
    path = _write(tmp_path, "access.json", rules)
    assert main(["lint", path]) == EXIT_OK
    assert _out(capsys)[0]["code"] == "UNREACHABLE_RULE"
    assert main(["lint", path, "--strict"]) == EXIT_LINT


def test_lint_strict_ignores_info(tmp_path, capsys):
    path = _write(tmp_path, "access.json", DEFAULT_RULES)
    assert main(["lint", path, "--strict"]) == EXIT_OK


def test_check_allow_and_deny(tmp_path, capsys):
    path = _write(tmp_path, "access.json", DEFAULT_RULES)
    args = ["check", path, "--resource", "managed/user/u1", "--method", "read", "--roles", "openidm-authorized"]

    assert main(args + ["--user-id", "u1"]) == EXIT_OK
    assert _out(capsys)["rule_id"] == "user-own-data"

    assert main(args + ["--user-id", "u2"]) == EXIT_DENIED
    assert _out(capsys)["decision"] == "deny"


def test_check_with_action_params_and_data(tmp_path, capsys):
    path = _write(tmp_path, "access.json", DEFAULT_RULES)
    data = _write(
        tmp_path,
        "data.json",
        {"queries": {"endpoint/getprocessesforuser": {"query-processes-for-user": [{"_id": "p1"}]}}},
    )
    args = [
        "check",
        path,
        "--resource",
        "workflow/processinstance/",
        "--method",
        "action",
        "--action",
        "createProcessInstance",
        "--roles",
        "openidm-authorized",
        "--user-id",
        "u1",
        "--value",
        '{"_processDefinitionId": "p1"}',
        "--data",
        data,
    ]
    assert main(args) == EXIT_OK
    assert _out(capsys)["rule_id"] == "process-start"


def test_check_trusted_channel(tmp_path, capsys):
    path = _write(tmp_path, "access.json", [])
    assert main(["check", path, "--resource", "x", "--method", "delete", "--channel", "scheduler"]) == EXIT_OK
    assert _out(capsys)["reason"] == "bypass"


def test_check_bad_param(tmp_path, capsys):
    path = _write(tmp_path, "access.json", [])
    assert main(["check", path, "--resource", "x", "--param", "novalue"]) == EXIT_INVALID


def test_malformed_yaml_is_invalid(tmp_path, capsys):
    p = tmp_path / "access.yaml"
    p.write_text("rules: [\n  - pattern: x\n", encoding="utf-8")
    assert main(["validate", str(p)]) == EXIT_INVALID
    assert "invalid YAML" in capsys.readouterr().err


def test_yaml_without_pyyaml_installed_is_invalid(tmp_path, capsys, monkeypatch):
    p = tmp_path / "access.yaml"
    p.write_text("rules: []\n", encoding="utf-8")
    monkeypatch.setitem(sys.modules, "yaml", None)
    assert main(["lint", str(p)]) == EXIT_INVALID
    assert "PyYAML" in capsys.readouterr().err
