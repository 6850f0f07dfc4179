"""Data models for the audit engine."""

import json
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterable, Mapping


class Severity(Enum):
    """Severity of a finding."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Level(Enum):
    """WCAG conformance level."""

    A = "A"
    AA = "AA"


ERROR_KIND = "evaluator-error"
PAGE_LEVEL = "page-level"


@dataclass(frozen=True)
class Viewport:
    """Viewport used when a snapshot or layout probe was captured."""

    width: int
    height: int


@dataclass(frozen=True)
class BoundingBox:
    """Element position and size in viewport coordinates."""

    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)

    @property
    def area(self) -> float:
        return self.width * self.height


@dataclass(frozen=True)
class ComputedStyle:
    """Subset of computed CSS needed by contrast and geometry rules."""

    color: str | None = None
    background_color: str | None = None
    font_size: float | None = None  # px
    font_weight: int | None = None
    outline_style: str | None = None
    outline_width: float | None = None  # px
    outline_color: str | None = None
    box_shadow: str | None = None
    border_color: str | None = None
    border_width: float | None = None  # px
    display: str | None = None
    visibility: str | None = None
    overflow: str | None = None


@dataclass(frozen=True)
class ElementNode:
    """One DOM element as captured by the driver.

    Relations to other elements are indices into the owning snapshot; use the
    snapshot's traversal helpers to walk them.
    """

    index: int
    tag: str
    attributes: Mapping[str, str] = field(default_factory=dict)
    text: str = ""
    own_text: str | None = None
    style: ComputedStyle = field(default_factory=ComputedStyle)
    focus_style: ComputedStyle | None = None
    bounding_box: BoundingBox | None = None
    parent: int | None = None
    scroll_width: int | None = None
    client_width: int | None = None

    def __post_init__(self):
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))

    def attr(self, name: str) -> str | None:
        return self.attributes.get(name)

    def has_attr(self, name: str) -> bool:
        return name in self.attributes

    @property
    def role(self) -> str | None:
        role = self.attributes.get("role")
        if role is None:
            return None
        role = role.strip().lower()
        return role or None

    @property
    def element_id(self) -> str | None:
        return self.attributes.get("id") or None

    @property
    def tabindex(self) -> int | None:
        """Parsed tabindex, or None when absent or not an integer."""
        raw = self.attributes.get("tabindex")
        if raw is None:
            return None
        try:
            return int(raw.strip())
        except ValueError:
            return None


@dataclass(frozen=True)
class Layout:
    """Document and element widths measured at one viewport."""

    viewport: Viewport
    scroll_width: int
    client_width: int
    element_widths: Mapping[int, tuple[int, int]] = field(default_factory=dict)


@dataclass(frozen=True)
class ElementRef:
    """Pointer back to an element of a captured snapshot."""

    url: str
    index: int
    selector: str

    def to_dict(self) -> dict:
        return {"url": self.url, "index": self.index, "selector": self.selector}


@dataclass(frozen=True)
class Finding:
    """One detected violation of a WCAG success criterion."""

    criterion_id: str
    severity: Severity
    element_ref: ElementRef | None
    message: str
    remediation: str
    kind: str
    url: str | None = None

    @property
    def is_page_level(self) -> bool:
        return self.element_ref is None

    @property
    def is_error(self) -> bool:
        return self.kind == ERROR_KIND

    @property
    def selector(self) -> str:
        return self.element_ref.selector if self.element_ref else PAGE_LEVEL

    def to_dict(self) -> dict:
        return {
            "criterion_id": self.criterion_id,
            "severity": self.severity.value,
            "kind": self.kind,
            "url": self.url,
            "element": self.element_ref.to_dict() if self.element_ref else PAGE_LEVEL,
            "message": self.message,
            "remediation": self.remediation,
        }


@dataclass(frozen=True)
class Report:
    """All findings of one audit run across one or more pages."""

    pages: tuple[str, ...] = ()
    findings: tuple[Finding, ...] = ()

    @property
    def counts_by_criterion(self) -> dict[str, int]:
        return dict(Counter(f.criterion_id for f in self.findings))

    @property
    def counts_by_severity(self) -> dict[str, int]:
        counts = {severity.value: 0 for severity in Severity}
        for finding in self.findings:
            counts[finding.severity.value] += 1
        return counts

    @property
    def errors(self) -> list[Finding]:
        """Findings that record a rule failing to evaluate."""
        return [f for f in self.findings if f.is_error]

    @property
    def passed(self) -> bool:
        return not self.findings

    def for_criterion(self, criterion_id: str) -> list[Finding]:
        return [f for f in self.findings if f.criterion_id == criterion_id]

    @classmethod
    def merge(cls, reports: Iterable["Report"], extra: Iterable[Finding] = ()) -> "Report":
        """Concatenate reports in the order given, then append extra findings."""
        pages: list[str] = []
        findings: list[Finding] = []
        for report in reports:
            pages.extend(report.pages)
            findings.extend(report.findings)
        findings.extend(extra)
        return cls(pages=tuple(pages), findings=tuple(findings))

    def to_dict(self) -> dict[str, Any]:
        return {
            "pages": list(self.pages),
            "summary": {
                "total": len(self.findings),
                "errors": len(self.errors),
                "by_severity": self.counts_by_severity,
                "by_criterion": self.counts_by_criterion,
            },
            "findings": [f.to_dict() for f in self.findings],
        }

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def format_text(self) -> str:
        """Render findings as a human-readable failure listing."""
        if not self.findings:
            return f"No WCAG violations found across {len(self.pages)} page(s)."

        blocks = []
        for finding in self.findings:
            blocks.append(
                f"FAILURE [{finding.criterion_id}] ({finding.severity.value}) in {finding.url or 'cross-page'}\n"
                f"   Element: {finding.selector}\n"
                f"   Reason: {finding.message}\n"
                f"   Fix: {finding.remediation}"
            )

        header = (
            f"{len(self.findings)} finding(s) across {len(self.pages)} page(s)"
            f" ({len(self.errors)} evaluator error(s))"
        )
        return header + "\n\n" + "\n\n".join(blocks)
