from .builtin import (
    can_update_task,
    default_registry,
    disallow_query_expression,
    is_allowed_to_start_process,
    is_my_task,
    is_one_of_my_workflows,
    is_query_one_of,
    own_data_only,
    ui_enabled,
)

__all__ = [
    "can_update_task",
    "default_registry",
    "disallow_query_expression",
    "is_allowed_to_start_process",
    "is_my_task",
    "is_one_of_my_workflows",
    "is_query_one_of",
    "own_data_only",
    "ui_enabled",
]
