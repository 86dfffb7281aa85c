from __future__ import annotations

import json
import os
from typing import Any, Literal, Optional

Format = Literal["json", "yaml"]

_YAML_EXT = (".yaml", ".yml")
_YAML_TYPES = ("application/yaml", "application/x-yaml", "text/yaml", "text/x-yaml")


def detect_format(
    text: str, *, filename: Optional[str] = None, content_type: Optional[str] = None
) -> Format:
    """Guess the format of rule configuration text.

    Content-Type wins, then the file extension, then the content itself
    (JSON documents start with ``{`` or ``[``).
    """
    if content_type:
        ct = content_type.split(";", 1)[0].strip().lower()
        if ct in _YAML_TYPES:
            return "yaml"
        if ct == "application/json" or ct.endswith("+json"):
            return "json"
    if filename:
        ext = os.path.splitext(filename)[1].lower()
        if ext in _YAML_EXT:
            return "yaml"
        if ext == ".json":
            return "json"
    stripped = text.lstrip()
    if stripped.startswith(("{", "[")):
        return "json"
    return "yaml"


def _load_yaml(text: str) -> Any:
    try:
        import yaml
    except ImportError as e:
        raise ImportError(
            "YAML rule files require PyYAML. Install with: pip install authzrules[yaml]"
        ) from e
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ValueError(f"invalid YAML: {e}") from e


def parse_policy_text(
    text: str, *, filename: Optional[str] = None, content_type: Optional[str] = None
) -> Any:
    fmt = detect_format(text, filename=filename, content_type=content_type)
    if fmt == "yaml":
        return _load_yaml(text)
    return json.loads(text)


def load_policy_file(path: str) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return parse_policy_text(f.read(), filename=path)


__all__ = ["detect_format", "parse_policy_text", "load_policy_file"]
