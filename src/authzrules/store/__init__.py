from __future__ import annotations

from .policy_loader import detect_format, load_policy_file, parse_policy_text

__all__ = ["detect_format", "load_policy_file", "parse_policy_text"]
