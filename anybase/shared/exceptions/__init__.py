"""
Shared Exceptions

Fatal exceptions and the recoverable CrudError.
"""

from anybase.shared.exceptions.errors import (
    AnyBaseError,
    UnsupportedMappingError,
    FieldAssignmentError,
    TemplateCatalogError,
    AdapterError,
    ConnectionError,
    QueryError,
    ErrorCategory,
    CrudError,
    classify_message,
)

__all__ = [
    "AnyBaseError",
    "UnsupportedMappingError",
    "FieldAssignmentError",
    "TemplateCatalogError",
    "AdapterError",
    "ConnectionError",
    "QueryError",
    "ErrorCategory",
    "CrudError",
    "classify_message",
]
