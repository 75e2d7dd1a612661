"""
Schema validation utilities for the LearnNova quiz engine.

Provides JSON Schema validation with clear error messages and automatic
repair of the common defects found in generator output.

Features:
- Draft 7 validation with format checking (date-time)
- Deep copy to prevent mutations of caller data
- Field alias normalization (question/prompt, correctAnswer/correct_answer)
- Type coercion (booleans and numbers to strings)
- Transparent repair tracking
"""

from __future__ import annotations

import json
from copy import deepcopy
from pathlib import Path
from typing import Any, Mapping, Optional

from jsonschema import Draft7Validator, FormatChecker, ValidationError

from ..config import config


# Raw keys accepted for each normalized field, in priority order
FIELD_ALIASES = {
    "prompt": ("prompt", "question", "question_text", "text"),
    "type": ("type", "question_type"),
    "options": ("options", "choices"),
    "correct_answer": ("correct_answer", "correctAnswer", "answer"),
    "explanation": ("explanation", "rationale"),
}


class ValidationResult:
    """
    Result of a validation attempt.

    Attributes:
        valid: Whether data passed validation
        errors: List of error messages
        data: The validated data (may be modified if repair was attempted)
        repairs: List of repairs applied (for transparency)
    """

    def __init__(
        self,
        valid: bool,
        errors: list[str],
        data: Any = None,
        repairs: Optional[list[str]] = None,
    ):
        self.valid = valid
        self.errors = errors
        self.data = data
        self.repairs = repairs or []

    def __bool__(self) -> bool:
        """Allow using result in boolean context."""
        return self.valid

    def __str__(self) -> str:
        """Human-readable representation."""
        if self.valid:
            msg = "✓ Validation passed"
            if self.repairs:
                msg += f" (with {len(self.repairs)} repair(s))"
            return msg
        return f"✗ Validation failed with {len(self.errors)} error(s):\n" + "\n".join(
            f"  - {error}" for error in self.errors
        )


class SchemaValidator:
    """
    JSON Schema validator with auto-repair capabilities.

    Usage:
        validator = SchemaValidator("path/to/schema.json")
        result = validator.validate(data)
        if result:
            print("Valid!")
        else:
            print(result.errors)
    """

    def __init__(self, schema_path: Path | str):
        """
        Initialize validator with a schema file.

        Args:
            schema_path: Path to JSON Schema file
        """
        self.schema_path = Path(schema_path)
        with open(self.schema_path, "r", encoding="utf-8") as f:
            self.schema = json.load(f)
        self.validator = Draft7Validator(self.schema, format_checker=FormatChecker())

    def validate(self, data: Any, auto_repair: bool = False) -> ValidationResult:
        """
        Validate data against schema.

        Args:
            data: Data to validate
            auto_repair: If True, attempt to fix common validation errors first

        Returns:
            ValidationResult with validation status and any errors
        """
        repairs: list[str] = []
        if auto_repair:
            data, repairs = self._attempt_repair(data)

        errors = [self._format_error(error) for error in self.validator.iter_errors(data)]
        return ValidationResult(valid=not errors, errors=errors, data=data, repairs=repairs)

    def _format_error(self, error: ValidationError) -> str:
        """
        Convert ValidationError to human-readable message with details.

        Args:
            error: jsonschema ValidationError

        Returns:
            Formatted error message with validator and schema path
        """
        path = " -> ".join(str(p) for p in error.path) if error.path else "root"
        validator_name = getattr(error, "validator", "unknown")
        schema_path = "/".join(str(p) for p in error.schema_path)
        return (
            f"At '{path}': {error.message} "
            f"[validator={validator_name}, schema_path=/{schema_path}]"
        )

    def _attempt_repair(self, data: Any) -> tuple[Any, list[str]]:
        """Subclasses override to fix known defects. Default is a deep copy."""
        return deepcopy(data), []


class QuestionValidator(SchemaValidator):
    """
    Validator for raw generator questions.

    Repairs applied before validation:
    - Map field aliases onto the normalized names
    - Coerce boolean/numeric answers and options to strings
    - Strip surrounding whitespace from the prompt and answer
    - Unwrap option objects ({"text": ...}) into plain strings
    """

    def __init__(self, schema_path: Optional[Path | str] = None):
        super().__init__(schema_path or config.paths.question_schema)

    def _attempt_repair(self, data: Any) -> tuple[Any, list[str]]:
        if not isinstance(data, Mapping):
            # Leave non-objects untouched so the schema reports them
            return data, []

        source = deepcopy(dict(data))
        repaired: dict[str, Any] = {}
        repairs: list[str] = []

        for field_name, aliases in FIELD_ALIASES.items():
            for alias in aliases:
                if source.get(alias) is not None:
                    repaired[field_name] = source[alias]
                    if alias != field_name:
                        repairs.append(f"Mapped '{alias}' to '{field_name}'")
                    break

        for field_name in ("prompt", "correct_answer", "explanation"):
            value = repaired.get(field_name)
            if isinstance(value, (bool, int, float)):
                repaired[field_name] = _stringify(value)
                repairs.append(f"Coerced {field_name}: {value!r} → '{repaired[field_name]}'")
            if isinstance(repaired.get(field_name), str):
                repaired[field_name] = repaired[field_name].strip()

        options = repaired.get("options")
        if isinstance(options, (list, tuple)):
            coerced = []
            for option in options:
                if isinstance(option, Mapping):
                    option = option.get("text", option.get("label"))
                if option is None:
                    continue
                text = _stringify(option).strip()
                if text:
                    coerced.append(text)
            if coerced != list(options):
                repairs.append(f"Normalized {len(options)} option(s) to strings")
            repaired["options"] = coerced

        return repaired, repairs


class ResultValidator(SchemaValidator):
    """Validator for persisted quiz result payloads."""

    def __init__(self, schema_path: Optional[Path | str] = None):
        super().__init__(schema_path or config.paths.result_schema)


def _stringify(value: Any) -> str:
    """Render generator values the way the quiz UI displays them."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


_question_validator: Optional[QuestionValidator] = None


def get_question_validator() -> QuestionValidator:
    """Get or create the shared question validator."""
    global _question_validator
    if _question_validator is None:
        _question_validator = QuestionValidator()
    return _question_validator


def validate_question(data: Any) -> ValidationResult:
    """
    Convenience function to normalize and validate one raw question.

    Args:
        data: Raw question from the generator

    Returns:
        ValidationResult whose ``data`` holds the normalized question
    """
    return get_question_validator().validate(data, auto_repair=True)
