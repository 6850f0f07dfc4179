"""Exceptions raised by the audit engine."""


class AuditError(Exception):
    """Base class for audit engine errors."""


class DuplicateRuleError(AuditError):
    """Raised when a rule with the same criterion and variant is registered twice."""

    def __init__(self, criterion_id: str, variant: str):
        self.criterion_id = criterion_id
        self.variant = variant
        super().__init__(f"Rule {criterion_id}/{variant} is already registered")


class SnapshotError(AuditError):
    """Raised when a snapshot payload cannot be turned into a Snapshot."""
