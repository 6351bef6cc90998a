"""
AnyBase - Structured Error Handling

Two families of errors live here:

FATAL ERRORS (raised):
----------------------
Programming and configuration mistakes that must surface loudly.

    UnsupportedMappingError  - no SQL type or converter for a (provider, type) pair
    FieldAssignmentError     - a row cannot be written back into a record instance
    TemplateCatalogError     - templates.yaml has the wrong shape
    AdapterError             - driver missing, connection refused, commit failed

RECOVERABLE ERRORS (returned):
------------------------------
CrudError is never raised. One instance is produced per failed batch chunk or
failed scalar attempt and carried in the ``errors`` list of every query result.

    result = crud.insert(records)
    for error in result.errors:
        print(error.concatenated)

Categories are matched against known substrings of the driver messages of
sqlite3, mysql.connector, pymssql and pyodbc.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

logger = logging.getLogger(__name__)


# =============================================================================
# FATAL ERRORS
# =============================================================================

class AnyBaseError(Exception):
    """Root of every exception raised by AnyBase."""
    pass


class UnsupportedMappingError(AnyBaseError):
    """A provider or core type is missing from the type catalog."""

    def __init__(self, message: str, provider: Optional[str] = None, type_name: Optional[str] = None):
        super().__init__(message)
        self.provider = provider
        self.type_name = type_name


class FieldAssignmentError(AnyBaseError):
    """A retrieved value cannot be assigned to a member of the record type."""

    def __init__(self, message: str, record_type: Optional[type] = None, member: Optional[str] = None):
        super().__init__(message)
        self.record_type = record_type
        self.member = member


class TemplateCatalogError(AnyBaseError):
    """The table template catalog could not be loaded."""
    pass


class AdapterError(AnyBaseError):
    """Base exception for adapter errors."""

    def __init__(self, message: str, engine: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.engine = engine
        self.original_error = original_error


class ConnectionError(AdapterError):
    """Failed to connect to database."""
    pass


class QueryError(AdapterError):
    """Statement execution failed outside the per-chunk error capture."""
    pass


# =============================================================================
# ERROR CATEGORIES
# =============================================================================

class ErrorCategory(str, Enum):
    """Categories a provider failure is classified into."""

    CONSTRAINT_VIOLATION = "ERR_1001"
    MISSING_TABLE = "ERR_1002"
    PARAMETER_LIMIT = "ERR_1003"
    COLUMN_EXISTS = "ERR_1004"
    UNCATEGORISED = "ERR_9001"


CATEGORY_TEXT = {
    ErrorCategory.CONSTRAINT_VIOLATION: (
        "Constraint broken when inserting",
        "Unique constraint failed when trying to insert the record.",
    ),
    ErrorCategory.MISSING_TABLE: (
        "Table does not exist",
        "The table must be created before records can be read or written.",
    ),
    ErrorCategory.PARAMETER_LIMIT: (
        "Parameter limit exceeded",
        "Too many parameters for one statement. Reduce the batch size.",
    ),
    ErrorCategory.COLUMN_EXISTS: (
        "Column already exists",
        "The column could not be added because the table already has it.",
    ),
    ErrorCategory.UNCATEGORISED: ("", ""),
}

# Lower-cased fragments, checked in order
_KNOWN_MESSAGES: Tuple[Tuple[ErrorCategory, Tuple[str, ...]], ...] = (
    (ErrorCategory.CONSTRAINT_VIOLATION, (
        "constraint failed",
        "duplicate entry",
        "violation of primary key constraint",
        "violation of unique key constraint",
        "cannot insert duplicate key",
        "integrityerror",
    )),
    (ErrorCategory.MISSING_TABLE, (
        "no such table",
        "doesn't exist",
        "invalid object name",
    )),
    (ErrorCategory.PARAMETER_LIMIT, (
        "too many sql variables",
        "too many parameters",
        "too many placeholders",
    )),
    (ErrorCategory.COLUMN_EXISTS, (
        "duplicate column name",
        "column names in each table must be unique",
    )),
)


def classify_message(text: str) -> ErrorCategory:
    """Match a driver message against the known failure fragments."""
    lowered = (text or "").lower()
    for category, fragments in _KNOWN_MESSAGES:
        if any(fragment in lowered for fragment in fragments):
            return category
    return ErrorCategory.UNCATEGORISED


# =============================================================================
# CRUD ERROR
# =============================================================================

@dataclass(frozen=True)
class CrudError:
    """
    A provider failure captured during execution.

    Attributes:
        category: What kind of failure this is
        message: Human-readable explanation (empty when uncategorised)
        underlying_cause: The exception raised by the driver
    """
    category: ErrorCategory
    message: str
    underlying_cause: Optional[BaseException] = None

    @classmethod
    def from_exception(cls, error: BaseException) -> "CrudError":
        """Classify a raised exception into a CrudError."""
        text = f"{type(error).__name__}: {error}"
        category = classify_message(text)
        _, message = CATEGORY_TEXT[category]
        return cls(category=category, message=message, underlying_cause=error)

    @property
    def category_text(self) -> str:
        return CATEGORY_TEXT[self.category][0]

    @property
    def cause_text(self) -> str:
        if self.underlying_cause is None:
            return ""
        return str(self.underlying_cause)

    @property
    def concatenated(self) -> str:
        """Category, message and cause as one line."""
        return " ".join(
            part for part in (self.category_text, self.message, self.cause_text) if part
        )

    def log(self, level: str = "warning"):
        """Log the error with its code."""
        getattr(logger, level)(f"[{self.category.value}] {self.concatenated}")

    def __str__(self) -> str:
        return self.concatenated
