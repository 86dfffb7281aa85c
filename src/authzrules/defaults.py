"""Canonical access configuration for a managed-user deployment.

Order matters: evaluation is first-match-wins, so the admin grant and the
narrow anonymous rules come before the broad authorized-user catch-all.
Predicate names refer to :func:`authzrules.predicates.default_registry`.
"""

from __future__ import annotations

from typing import Any, Dict, List

ANONYMOUS = "openidm-reg"
AUTHORIZED = "openidm-authorized"
ADMIN = "openidm-admin"
CERT = "openidm-cert"

DEFAULT_RULES: List[Dict[str, Any]] = [
    # anyone can read these
    {"id": "info", "pattern": "info/*", "roles": f"{ANONYMOUS},{AUTHORIZED}", "methods": "read", "actions": "*"},
    {
        "id": "ui-configuration",
        "pattern": "config/ui/configuration",
        "roles": f"{ANONYMOUS},{AUTHORIZED}",
        "methods": "read",
        "actions": "*",
    },
    # anonymous self-service, only when switched on in the UI configuration
    {
        "id": "anon-ui-config",
        "pattern": "config/ui/*",
        "roles": ANONYMOUS,
        "methods": "read",
        "actions": "*",
        "predicate": "selfRegistrationEnabled",
    },
    {
        "id": "anon-register",
        "pattern": "managed/user/*",
        "roles": ANONYMOUS,
        "methods": "create",
        "actions": "*",
        "predicate": "selfRegistrationEnabled",
    },
    {
        "id": "anon-site-identification",
        "pattern": "endpoint/siteIdentification",
        "roles": ANONYMOUS,
        "methods": "*",
        "actions": "*",
        "predicate": "siteIdentificationEnabled",
    },
    {
        "id": "anon-security-qa",
        "pattern": "endpoint/securityQA",
        "roles": ANONYMOUS,
        "methods": "*",
        "actions": "*",
        "predicate": "securityQuestionsEnabled",
    },
    {
        "id": "anon-user-policy",
        "pattern": "policy/managed/user/*",
        "roles": ANONYMOUS,
        "methods": "read,action",
        "actions": "*",
        "predicate": "selfRegistrationOrSecurityQuestions",
    },
    # admins can do anything except free-form query expressions
    {
        "id": "admin",
        "pattern": "*",
        "roles": ADMIN,
        "methods": "*",
        "actions": "*",
        "predicate": "disallowQueryExpression",
    },
    # authenticated users
    {"id": "user-policy", "pattern": "policy/*", "roles": AUTHORIZED, "methods": "read,action", "actions": "*"},
    {"id": "user-ui-config", "pattern": "config/ui/*", "roles": AUTHORIZED, "methods": "read", "actions": "*"},
    {
        "id": "user-reauthenticate",
        "pattern": "authentication",
        "roles": AUTHORIZED,
        "methods": "action",
        "actions": "reauthenticate",
    },
    {
        "id": "user-own-data",
        "pattern": "*",
        "roles": AUTHORIZED,
        "methods": "*",
        "actions": "*",
        "predicate": "ownDataOrWorkflowQuery",
    },
    # which notifications may be read or deleted is enforced by the endpoint itself
    {
        "id": "user-notifications",
        "pattern": "endpoint/usernotifications",
        "roles": AUTHORIZED,
        "methods": "read,delete",
        "actions": "*",
    },
    # workflow
    {
        "id": "task-complete",
        "pattern": "workflow/taskinstance/*",
        "roles": AUTHORIZED,
        "methods": "action",
        "actions": "complete",
        "predicate": "isMyTask",
    },
    {
        "id": "task-update",
        "pattern": "workflow/taskinstance/*",
        "roles": AUTHORIZED,
        "methods": "read,update",
        "actions": "*",
        "predicate": "canUpdateTask",
    },
    {
        "id": "process-start",
        "pattern": "workflow/processinstance/",
        "roles": AUTHORIZED,
        "methods": "action",
        "actions": "createProcessInstance",
        "predicate": "isAllowedToStartProcess",
    },
    {
        "id": "process-definition",
        "pattern": "workflow/processdefinition/*",
        "roles": AUTHORIZED,
        "methods": "*",
        "actions": "read",
        "predicate": "isOneOfMyWorkflows",
    },
    # TLS client-certificate callers get nothing by default
    {"id": "cert-clients", "pattern": "*", "roles": CERT, "methods": "", "actions": ""},
]

__all__ = ["ANONYMOUS", "AUTHORIZED", "ADMIN", "CERT", "DEFAULT_RULES"]
