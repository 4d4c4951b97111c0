"""Validate configuration documents against JSON Schema.

Validation never raises for a bad document: malformed JSON, an invalid
schema and schema violations all come back as a failed
:class:`ValidationResult`.  Only infrastructure problems (a schema resource
that cannot be read) raise, via :func:`load_schema`.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Any, Optional

import jsonschema
from jsonschema.exceptions import SchemaError
from loguru import logger
from referencing.exceptions import Unresolvable

from .errors import SchemaNotFoundError
from .io_utils import read_text


@dataclass(frozen=True)
class ValidationIssue:
    """One schema violation (or a synthetic parse failure)."""
    message: str
    path: str = "$"
    line: Optional[int] = None
    column: Optional[int] = None

    def describe(self) -> str:
        return f"Message: {self.message}, Path: {self.path}, Line: {self.line}, Pos: {self.column}"


@dataclass
class ValidationResult:
    ok: bool
    errors: list[ValidationIssue] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.ok


def format_path(parts: Any) -> str:
    """Render a jsonschema path deque as ``$.teamAssignments[0].teamId``."""
    rendered = "$"
    for part in parts:
        if isinstance(part, int):
            rendered += f"[{part}]"
        else:
            rendered += f".{part}"
    return rendered


def _decode(value: Any, label: str) -> tuple[Any, Optional[ValidationIssue]]:
    if not isinstance(value, (str, bytes)):
        return value, None
    try:
        return json.loads(value), None
    except json.JSONDecodeError as exc:
        return None, ValidationIssue(
            message=f"Malformed JSON in {label}: {exc.msg}",
            path="$",
            line=exc.lineno,
            column=exc.colno,
        )
    except UnicodeDecodeError as exc:
        return None, ValidationIssue(message=f"Malformed JSON in {label}: {exc}")


class SchemaValidator:
    """Validates documents with the ``jsonschema`` library.

    Both the document and the schema may be passed as JSON text or as
    already-parsed Python objects.  Neither is modified.
    """

    def validate(self, document: Any, schema: Any, log=None) -> ValidationResult:
        log = log or logger
        result = self._validate(document, schema)
        if not result.ok:
            log.error("JSON configuration is not valid against the schema:")
            for issue in result.errors:
                log.error("  - {}", issue.describe())
        return result

    def _validate(self, document: Any, schema: Any) -> ValidationResult:
        schema_obj, issue = _decode(schema, "schema")
        if issue:
            return ValidationResult(ok=False, errors=[issue])
        data, issue = _decode(document, "document")
        if issue:
            return ValidationResult(ok=False, errors=[issue])

        if not isinstance(schema_obj, (dict, bool)):
            return ValidationResult(
                ok=False,
                errors=[ValidationIssue(message=f"Invalid schema: expected object, got {type(schema_obj).__name__}")],
            )
        try:
            validator_cls = jsonschema.validators.validator_for(schema_obj, default=jsonschema.Draft7Validator)
            validator_cls.check_schema(schema_obj)
        except SchemaError as exc:
            return ValidationResult(
                ok=False,
                errors=[ValidationIssue(message=f"Invalid schema: {exc.message}", path=format_path(exc.path))],
            )

        validator = validator_cls(schema_obj, format_checker=validator_cls.FORMAT_CHECKER)
        try:
            violations = sorted(
                validator.iter_errors(data), key=lambda e: (list(map(str, e.absolute_path)), e.message)
            )
        except SchemaError as exc:
            return ValidationResult(
                ok=False,
                errors=[ValidationIssue(message=f"Invalid schema: {exc.message}", path=format_path(exc.path))],
            )
        except Unresolvable as exc:
            return ValidationResult(ok=False, errors=[ValidationIssue(message=f"Invalid schema: {exc}")])
        errors = [
            ValidationIssue(message=err.message, path=format_path(err.absolute_path))
            for err in violations
        ]
        return ValidationResult(ok=not errors, errors=errors)


def load_schema(name: str, schema_dir: Optional[Path] = None) -> str:
    """Read a schema resource, from *schema_dir* or the packaged ``schemas/``."""
    if schema_dir is not None:
        source: Any = Path(schema_dir) / name
    else:
        source = resources.files("team_sync_runner") / "schemas" / name
    if not source.is_file():
        raise SchemaNotFoundError(f"Schema file not found: {source}", str(source))
    try:
        return source.read_text(encoding="utf-8")
    except OSError as exc:
        raise SchemaNotFoundError(f"Schema file could not be read: {source}: {exc}", str(source)) from exc


def validate_file(document_path: Path, schema_path: Path, validator: Optional[SchemaValidator] = None) -> ValidationResult:
    """Validate a document file against a schema file."""
    document = read_text(document_path)
    try:
        schema = read_text(schema_path, kind="schema")
    except FileNotFoundError as exc:
        raise SchemaNotFoundError(str(exc), str(schema_path)) from exc
    return (validator or SchemaValidator()).validate(document, schema)
