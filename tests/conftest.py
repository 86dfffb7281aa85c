import importlib.util

import pytest


def _has_module(modname: str) -> bool:
    """Return True if the given module can be imported (present on sys.path)."""
    return importlib.util.find_spec(modname) is not None


def pytest_collection_modifyitems(config, items):
    """Skip YAML-driven tests when PyYAML (import name: 'yaml') is not installed.

    These tests have 'yaml' in their nodeid.
    """
    if _has_module("yaml"):
        return

    skip_yaml = pytest.mark.skip(reason="optional dependency 'PyYAML' not installed; skipping YAML-related tests")
    for item in items:
        if "yaml" in item.nodeid.lower():
            item.add_marker(skip_yaml)
