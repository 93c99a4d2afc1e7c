#!/usr/bin/env python3
"""
Exception classes for the note hierarchy.

Validation itself reports through ValidationResult values; these exceptions
cover misuse and the mutation flows that refuse a structural violation.
"""

from typing import Any, Dict, List, Optional


class HierarchyError(Exception):
    """Base exception for all hierarchy errors."""

    def __init__(self, message: str, operation: Optional[str] = None,
                 note_id: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.note_id = note_id
        self.context = context or {}

    def __str__(self) -> str:
        parts = []
        if self.operation:
            parts.append(f"Operation: {self.operation}")
        if self.note_id:
            parts.append(f"Note: {self.note_id}")
        parts.append(f"Error: {self.message}")
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            parts.append(f"Context: {context_str}")
        return " | ".join(parts)


class HierarchyConfigError(HierarchyError):
    """Raised when a configuration value is out of range."""

    def __init__(self, field_name: str, value: Any, constraint: str):
        message = f"Invalid value {value!r} for '{field_name}': {constraint}"
        super().__init__(message, "configure", context={"field": field_name})
        self.field_name = field_name
        self.value = value


class NoteNotFoundError(HierarchyError):
    """Raised when a referenced note doesn't exist."""

    def __init__(self, note_id: str, operation: str = "access"):
        super().__init__(f"Note '{note_id}' does not exist", operation, note_id)


class NoteExistsError(HierarchyError):
    """Raised when adding a note whose id is already taken."""

    def __init__(self, note_id: str, operation: str = "create"):
        super().__init__(f"Note '{note_id}' already exists", operation, note_id)


class HierarchyViolationError(HierarchyError):
    """Raised by mutation flows when validation reports a hard violation."""

    def __init__(self, result: Any, operation: str, note_id: Optional[str] = None):
        reason = getattr(result, "reason", None) or "Hierarchy constraint violated"
        super().__init__(reason, operation, note_id)
        self.result = result

    @property
    def errors(self) -> List[str]:
        return list(getattr(self.result, "errors", []))


class SnapshotLoadError(HierarchyError):
    """Raised when a note snapshot file cannot be parsed."""

    def __init__(self, file_path: str, details: str):
        super().__init__(f"Cannot load note snapshot: {details}", "load")
        self.file_path = file_path
        self.details = details

    def __str__(self) -> str:
        return f"Operation: {self.operation} | File: {self.file_path} | Error: {self.message}"
