"""Transport adapters. Import the framework module you need:

    from authzrules.adapters.starlette import require_access
    from authzrules.adapters.litestar import AuthzMiddleware
"""

from ._common import SECURITY_SCOPE_KEY, operation_for, request_from_scope

__all__ = ["SECURITY_SCOPE_KEY", "operation_for", "request_from_scope"]
