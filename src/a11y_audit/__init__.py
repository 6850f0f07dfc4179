"""WCAG 2.1 A/AA audit engine over captured DOM snapshots."""

from .aggregator import audit_page, run_audit, run_audit_concurrently
from .exceptions import AuditError, DuplicateRuleError, SnapshotError
from .models import ElementRef, Finding, Level, Report, Severity
from .registry import Detection, Rule, RuleRegistry
from .rules import default_registry
from .snapshot import ABSENT, Snapshot, build_snapshots
from .utils import setup_logging

__all__ = [
    "ABSENT",
    "AuditError",
    "Detection",
    "DuplicateRuleError",
    "ElementRef",
    "Finding",
    "Level",
    "Report",
    "Rule",
    "RuleRegistry",
    "Severity",
    "Snapshot",
    "SnapshotError",
    "audit_page",
    "build_snapshots",
    "default_registry",
    "run_audit",
    "run_audit_concurrently",
    "setup_logging",
]
