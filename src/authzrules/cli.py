from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Dict, List, Optional, Sequence

from . import __version__
from .core.engine import Guard
from .core.errors import ConfigurationError
from .core.loader import load_rules
from .core.model import AccessRequest, ParentRequest, SecurityContext
from .core.predicates import PredicateRegistry
from .dsl.lint import analyze_rules
from .predicates import default_registry
from .readers import MemoryDataReader
from .store.policy_loader import load_policy_file, parse_policy_text

EXIT_OK = 0
EXIT_DENIED = 1
EXIT_INVALID = 2
EXIT_LINT = 3


def _read_config(path: str) -> Any:
    if path == "-":
        return parse_policy_text(sys.stdin.read())
    return load_policy_file(path)


def _reader_from(path: Optional[str]) -> MemoryDataReader:
    """``--data`` file: ``{"records": {id: obj}, "queries": {id: {queryId: [...]}}}``."""
    if not path:
        return MemoryDataReader()
    data = load_policy_file(path) or {}
    return MemoryDataReader(records=data.get("records"), queries=data.get("queries"))


def _registry(args: argparse.Namespace) -> PredicateRegistry:
    return default_registry(_reader_from(getattr(args, "data", None)))


def _parse_params(items: Optional[Sequence[str]]) -> Dict[str, str]:
    out: Dict[str, str] = {}
    for item in items or ():
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise ValueError(f"invalid --param {item!r}, expected key=value")
        out[key] = value
    return out


def _split_roles(raw: Optional[str]) -> List[str]:
    return [r.strip() for r in (raw or "").split(",") if r.strip()]


def _print(obj: Any) -> None:
    sys.stdout.write(json.dumps(obj, indent=2, ensure_ascii=False) + "\n")


# ---------------------------------------------------------------- commands --


def cmd_validate(args: argparse.Namespace) -> int:
    try:
        ruleset = load_rules(_read_config(args.config), _registry(args), source=args.config)
    except ConfigurationError as e:
        _print({"valid": False, "problems": e.problems})
        return EXIT_INVALID
    _print({"valid": True, "rules": len(ruleset)})
    return EXIT_OK


def cmd_lint(args: argparse.Namespace) -> int:
    issues = analyze_rules(_read_config(args.config))
    _print(issues)
    if args.strict and any(i["severity"] != "info" for i in issues):
        return EXIT_LINT
    return EXIT_OK


def cmd_check(args: argparse.Namespace) -> int:
    try:
        guard = Guard(_read_config(args.config), _registry(args))
    except ConfigurationError as e:
        _print({"valid": False, "problems": e.problems})
        return EXIT_INVALID

    value = json.loads(args.value) if args.value else None
    params = _parse_params(args.param)
    if args.action:
        params["_action"] = args.action
    request = AccessRequest(
        id=args.resource,
        method=args.method,
        params=params,
        value=value,
        parent=ParentRequest(
            type=args.channel,
            security=SecurityContext(
                username=args.username,
                user_id=args.user_id,
                roles=tuple(_split_roles(args.roles)),
            ),
        ),
    )
    decision = guard.authorize(request)
    _print(decision.to_dict())
    return EXIT_OK if decision.allowed else EXIT_DENIED


# ------------------------------------------------------------------ parser --


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="authzrules", description="Validate, lint and try out access rules.")
    p.add_argument("--version", action="version", version=f"authzrules {__version__}")
    sub = p.add_subparsers(dest="command", required=True)

    v = sub.add_parser("validate", help="check a rule file loads (stock predicates)")
    v.add_argument("config", help="JSON/YAML rule file, or - for stdin")
    v.add_argument("--data", default=None, help="JSON/YAML records and query results for predicates")
    v.set_defaults(func=cmd_validate)

    lint = sub.add_parser("lint", help="report ordering problems")
    lint.add_argument("config")
    lint.add_argument("--strict", action="store_true", help="non-zero exit on warnings and errors")
    lint.set_defaults(func=cmd_lint)

    c = sub.add_parser("check", help="evaluate one request")
    c.add_argument("config")
    c.add_argument("--resource", required=True, help="resource id, e.g. managed/user/42")
    c.add_argument("--method", default=None, help="read, create, update, delete, patch, action, query")
    c.add_argument("--action", default="", help="value of the _action parameter")
    c.add_argument("--roles", default="", help="comma separated caller roles")
    c.add_argument("--username", default=None)
    c.add_argument("--user-id", dest="user_id", default=None)
    c.add_argument("--param", action="append", metavar="KEY=VALUE")
    c.add_argument("--value", default=None, help="request body as JSON")
    c.add_argument("--channel", default="http", help="request channel (non-http is trusted)")
    c.add_argument("--data", default=None, help="JSON/YAML records and query results for predicates")
    c.set_defaults(func=cmd_check)

    return p


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        # --version / --help exit 0; keep argument errors as SystemExit
        if e.code in (0, None):
            return EXIT_OK
        raise
    try:
        return int(args.func(args))
    except (OSError, ValueError, ImportError) as e:
        # ValueError covers malformed JSON/YAML; ImportError a missing PyYAML
        sys.stderr.write(f"authzrules: {e}\n")
        return EXIT_INVALID


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
