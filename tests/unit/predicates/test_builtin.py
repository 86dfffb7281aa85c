import pytest

from authzrules.core.model import EvaluationContext
from authzrules.predicates import (
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
from authzrules.readers import MemoryDataReader


def _ctx(resource_id, method="read", params=None, value=None, user_id="u1", username="alice", roles=()):
    return EvaluationContext(
        resource_id=resource_id,
        roles=frozenset(roles),
        method=method,
        action=(params or {}).get("_action", ""),
        extra={"params": params or {}, "value": value, "user_id": user_id, "username": username},
    )


# ------------------------------------------------------------ ownDataOnly --


@pytest.mark.parametrize(
    "resource_id,params,value,expected",
    [
        ("managed/user/u1", None, None, True),
        ("managed/user/u2", None, None, False),
        ("MANAGED/USER/u1", None, None, True),
        ("endpoint/x", {"userId": "u1"}, None, True),
        ("endpoint/x", None, {"userId": "u1"}, True),
        ("managed/user/u1", {"userId": "u2"}, None, False),
        ("managed/user/u1", None, {"userId": "u2"}, False),
        ("endpoint/x", {"userId": "u1"}, {"userId": "u2"}, False),
        ("endpoint/x", None, None, False),
        ("managed/user/", None, None, False),
    ],
)
def test_own_data_only(resource_id, params, value, expected):
    assert own_data_only(_ctx(resource_id, params=params, value=value)) is expected


def test_own_data_only_without_caller_id():
    assert own_data_only(_ctx("managed/user/u1", user_id=None)) is False


def test_disallow_query_expression():
    assert disallow_query_expression(_ctx("managed/user", "query", {"_queryId": "query-all"})) is True
    assert disallow_query_expression(_ctx("managed/user", "query", {"_queryExpression": "select"})) is False


def test_is_query_one_of():
    check = is_query_one_of({"managed/user/": ["query-all"]})
    assert check(_ctx("managed/user/", "query", {"_queryId": "query-all"})) is True
    assert check(_ctx("managed/user/", "query", {"_queryId": "other"})) is False
    assert check(_ctx("managed/user/", "read", {"_queryId": "query-all"})) is False
    assert check(_ctx("managed/role/", "query", {"_queryId": "query-all"})) is False


# ------------------------------------------------------------ reader-based --


def test_ui_enabled_reads_configuration():
    reader = MemoryDataReader({"config/ui/configuration": {"configuration": {"selfRegistration": True}}})
    assert ui_enabled(reader, "selfRegistration")(_ctx("x")) is True
    assert ui_enabled(reader, "securityQuestions")(_ctx("x")) is False
    assert ui_enabled(MemoryDataReader(), "selfRegistration")(_ctx("x")) is False


def test_is_my_task():
    reader = MemoryDataReader({"workflow/taskinstance/42": {"assignee": "alice"}})
    check = is_my_task(reader)
    assert check(_ctx("workflow/taskinstance/42", "action")) is True
    assert check(_ctx("workflow/taskinstance/42", "action", username="bob")) is False
    assert check(_ctx("workflow/taskinstance/43", "action")) is False
    assert check(_ctx("workflow/taskinstance", "action")) is False


def test_can_update_task_by_user_then_group():
    seen = []

    def tasks(params):
        seen.append(dict(params))
        if params.get("taskCandidateUser") == "alice":
            return [{"_id": "1"}]
        if params.get("taskCandidateGroup") == "managers,openidm-authorized":
            return [{"_id": "2"}]
        return []

    check = can_update_task(MemoryDataReader(queries={"workflow/taskinstance": tasks}))
    roles = ("openidm-authorized", "managers")
    assert check(_ctx("workflow/taskinstance/1", roles=roles)) is True
    assert seen == [{"_queryId": "filtered-query", "taskCandidateUser": "alice"}]
    assert check(_ctx("workflow/taskinstance/2", roles=roles)) is True
    assert seen[-1] == {"_queryId": "filtered-query", "taskCandidateGroup": "managers,openidm-authorized"}
    assert check(_ctx("workflow/taskinstance/3", roles=roles)) is False


def test_process_predicates():
    reader = MemoryDataReader(
        queries={"endpoint/getprocessesforuser": {"query-processes-for-user": [{"_id": "p1"}]}}
    )
    start = is_allowed_to_start_process(reader)
    assert start(_ctx("workflow/processinstance/", "action", value={"_processDefinitionId": "p1"})) is True
    assert start(_ctx("workflow/processinstance/", "action", value={"_processDefinitionId": "p2"})) is False
    assert start(_ctx("workflow/processinstance/", "action", value=None)) is False

    mine = is_one_of_my_workflows(reader)
    assert mine(_ctx("workflow/processdefinition/p1")) is True
    assert mine(_ctx("workflow/processdefinition/p9")) is False


def test_missing_query_handler_raises():
    check = is_one_of_my_workflows(MemoryDataReader())
    with pytest.raises(LookupError):
        check(_ctx("workflow/processdefinition/p1"))


def test_default_registry_names():
    reg = default_registry(MemoryDataReader())
    assert reg.names() == sorted(
        [
            "ownDataOnly",
            "disallowQueryExpression",
            "selfRegistrationEnabled",
            "securityQuestionsEnabled",
            "siteIdentificationEnabled",
            "selfRegistrationOrSecurityQuestions",
            "ownDataOrWorkflowQuery",
            "isMyTask",
            "canUpdateTask",
            "isAllowedToStartProcess",
            "isOneOfMyWorkflows",
        ]
    )
