from .lint import analyze_rules
from .validate import schema_errors, validate_rules

__all__ = ["analyze_rules", "schema_errors", "validate_rules"]
