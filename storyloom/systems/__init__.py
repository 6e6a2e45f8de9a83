"""Static analysis over authored projects."""

from .validation import ProjectValidator, Severity, ValidationIssue

__all__ = ["ProjectValidator", "Severity", "ValidationIssue"]
