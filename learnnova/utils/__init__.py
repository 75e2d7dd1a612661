"""
Utility modules for the quiz engine.

This module contains utility functions:
- validation: JSON Schema validation with auto-repair
- persistence: Quiz result hand-off and JSON-file result store
- export: CSV / JSON / text export of scored sessions
"""

from .validation import (
    SchemaValidator,
    QuestionValidator,
    ResultValidator,
    ValidationResult,
    validate_question,
)
from .persistence import (
    JsonFileResultStore,
    PersistResult,
    ResultStore,
    SessionPersister,
)
from .export import (
    export_filename,
    export_result,
    write_export,
)

__all__ = [
    # Validation
    "SchemaValidator",
    "QuestionValidator",
    "ResultValidator",
    "ValidationResult",
    "validate_question",
    # Persistence
    "JsonFileResultStore",
    "PersistResult",
    "ResultStore",
    "SessionPersister",
    # Export
    "export_filename",
    "export_result",
    "write_export",
]
