# BRM dashboard — business-info form flow and workspace routing
from .business_info import (
    SUBMISSION_SCHEMA,
    SubmissionOutcome,
    build_payload,
    build_submission,
    submit_business_info,
    validate_submission,
)
from .roles import PENDING_APPROVAL_ROUTE, handle_role_redirect, resolve_role_redirect
from .store import DataStore, DataStoreError, LocalDataStore

__all__ = [
    "SUBMISSION_SCHEMA",
    "SubmissionOutcome",
    "build_payload",
    "build_submission",
    "submit_business_info",
    "validate_submission",
    "PENDING_APPROVAL_ROUTE",
    "handle_role_redirect",
    "resolve_role_redirect",
    "DataStore",
    "DataStoreError",
    "LocalDataStore",
]
