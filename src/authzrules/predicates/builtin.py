"""Stock predicates for managed-user / workflow deployments.

Predicates that need to look things up take a :class:`DataReader`; the
factories below close over it. Every predicate answers a yes/no question and
never writes through the reader.
"""

from __future__ import annotations

import re
from typing import Any, Iterable, Mapping, Optional, Sequence

from ..core.model import EvaluationContext, Predicate
from ..core.ports import DataReader
from ..core.predicates import PredicateRegistry, any_of

UI_CONFIG_ID = "config/ui/configuration"
TASKS_ID = "workflow/taskinstance"
USER_PROCESSES_ID = "endpoint/getprocessesforuser"

_MANAGED_USER_RE = re.compile(r"managed/user/(.*)", re.IGNORECASE)


def _segment(resource_id: str, index: int) -> Optional[str]:
    parts = resource_id.split("/")
    if index < len(parts) and parts[index]:
        return parts[index]
    return None


def _ids(records: Iterable[Mapping[str, Any]]) -> set:
    return {r.get("_id") for r in records if isinstance(r, Mapping)}


# ------------------------------------------------------------ request-only --


def own_data_only(ctx: EvaluationContext) -> bool:
    """Allow only when every user id named by the request is the caller's.

    The target user may appear in the resource id (``managed/user/<id>``), in
    the ``userId`` parameter and in the ``userId`` field of the body. If these
    disagree the request is refused outright.
    """
    candidates = []
    m = _MANAGED_USER_RE.search(ctx.resource_id)
    if m and m.group(1):
        candidates.append(m.group(1))
    param_id = ctx.params.get("userId")
    if param_id:
        candidates.append(param_id)
    value = ctx.value
    if isinstance(value, Mapping) and value.get("userId"):
        candidates.append(value["userId"])

    if not candidates or len(set(candidates)) > 1:
        return False
    return ctx.user_id is not None and candidates[0] == ctx.user_id


def disallow_query_expression(ctx: EvaluationContext) -> bool:
    """Refuse free-form query expressions; parameterised queries pass."""
    return "_queryExpression" not in ctx.params


def is_query_one_of(allowed: Mapping[str, Sequence[str]]) -> Predicate:
    """Allow ``query`` requests whose ``_queryId`` is listed for the resource."""
    allowed = {k: tuple(v) for k, v in allowed.items()}

    def _check(ctx: EvaluationContext) -> bool:
        if ctx.method != "query":
            return False
        query_ids = allowed.get(ctx.resource_id)
        return query_ids is not None and ctx.params.get("_queryId") in query_ids

    return _check


# ------------------------------------------------------------ reader-based --


def ui_enabled(reader: DataReader, flag: str) -> Predicate:
    """Allow when the UI configuration has *flag* switched on."""

    def _check(ctx: EvaluationContext) -> bool:
        config = reader.read(UI_CONFIG_ID) or {}
        return bool((config.get("configuration") or {}).get(flag))

    return _check


def is_my_task(reader: DataReader) -> Predicate:
    """``workflow/taskinstance/<id>``: the caller is the task's assignee."""

    def _check(ctx: EvaluationContext) -> bool:
        task_id = _segment(ctx.resource_id, 2)
        if task_id is None or ctx.username is None:
            return False
        task = reader.read(f"{TASKS_ID}/{task_id}")
        return task is not None and task.get("assignee") == ctx.username

    return _check


def can_update_task(reader: DataReader) -> Predicate:
    """The caller, or one of the caller's roles, is a candidate for the task."""

    def _check(ctx: EvaluationContext) -> bool:
        task_id = _segment(ctx.resource_id, 2)
        if task_id is None:
            return False
        if ctx.username is not None:
            by_user = reader.query(
                TASKS_ID, {"_queryId": "filtered-query", "taskCandidateUser": ctx.username}
            )
            if task_id in _ids(by_user):
                return True
        if ctx.roles:
            by_group = reader.query(
                TASKS_ID,
                {"_queryId": "filtered-query", "taskCandidateGroup": ",".join(sorted(ctx.roles))},
            )
            if task_id in _ids(by_group):
                return True
        return False

    return _check


def _process_allowed(reader: DataReader, ctx: EvaluationContext, definition_id: Optional[str]) -> bool:
    if not definition_id or ctx.user_id is None:
        return False
    processes = reader.query(
        USER_PROCESSES_ID, {"_queryId": "query-processes-for-user", "userId": ctx.user_id}
    )
    return definition_id in _ids(processes)


def is_allowed_to_start_process(reader: DataReader) -> Predicate:
    """The body's ``_processDefinitionId`` is one the caller may start."""

    def _check(ctx: EvaluationContext) -> bool:
        value = ctx.value if isinstance(ctx.value, Mapping) else {}
        return _process_allowed(reader, ctx, value.get("_processDefinitionId"))

    return _check


def is_one_of_my_workflows(reader: DataReader) -> Predicate:
    def _check(ctx: EvaluationContext) -> bool:
        return _process_allowed(reader, ctx, _segment(ctx.resource_id, 2))

    return _check


# ---------------------------------------------------------------- registry --


def default_registry(reader: DataReader, registry: Optional[PredicateRegistry] = None) -> PredicateRegistry:
    """Register the stock predicates under the names used by ``DEFAULT_RULES``."""
    registry = registry if registry is not None else PredicateRegistry()
    self_registration = ui_enabled(reader, "selfRegistration")
    security_questions = ui_enabled(reader, "securityQuestions")

    registry.register("ownDataOnly", own_data_only)
    registry.register("disallowQueryExpression", disallow_query_expression)
    registry.register("selfRegistrationEnabled", self_registration)
    registry.register("securityQuestionsEnabled", security_questions)
    registry.register("siteIdentificationEnabled", ui_enabled(reader, "siteIdentification"))
    registry.register("selfRegistrationOrSecurityQuestions", any_of(self_registration, security_questions))
    registry.register(
        "ownDataOrWorkflowQuery",
        any_of(own_data_only, is_query_one_of({"managed/user/": ["query-all"]})),
    )
    registry.register("isMyTask", is_my_task(reader))
    registry.register("canUpdateTask", can_update_task(reader))
    registry.register("isAllowedToStartProcess", is_allowed_to_start_process(reader))
    registry.register("isOneOfMyWorkflows", is_one_of_my_workflows(reader))
    return registry


__all__ = [
    "own_data_only",
    "disallow_query_expression",
    "is_query_one_of",
    "ui_enabled",
    "is_my_task",
    "can_update_task",
    "is_allowed_to_start_process",
    "is_one_of_my_workflows",
    "default_registry",
]
