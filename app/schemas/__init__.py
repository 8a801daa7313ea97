"""
Pydantic schemas for API request/response validation
"""
from .base import (
    MAX_TABLES, MAX_FIELDS_PER_TABLE, MAX_SAMPLE_RECORDS,
    CreateBaseRequest, FieldSpec, TableSpec, GeneratedSchema,
    TableStatus, TableResult, ProvisioningSummary, ProvisioningReport,
    CreateBaseResponse,
)
from .common import ErrorResponse

__all__ = [
    # Limits
    "MAX_TABLES",
    "MAX_FIELDS_PER_TABLE",
    "MAX_SAMPLE_RECORDS",
    # Request / AI output
    "CreateBaseRequest",
    "FieldSpec",
    "TableSpec",
    "GeneratedSchema",
    # Provisioning
    "TableStatus",
    "TableResult",
    "ProvisioningSummary",
    "ProvisioningReport",
    "CreateBaseResponse",
    # Common
    "ErrorResponse",
]
