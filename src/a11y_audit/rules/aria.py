"""ARIA validity, duplicate ids and status message rules."""

from typing import Iterator

from ..models import ElementNode, Level, Severity
from ..registry import Detection, Rule
from ..snapshot import Snapshot
from .base import describe, is_live_region
from .denylists import (
    ARIA_LIVE_VALUES,
    STATE_ATTRIBUTE_VALUES,
    STATUS_CLASS_HINTS,
    VALID_ARIA_ATTRIBUTES,
    VALID_ROLES,
)


def check_aria_validity(snapshot: Snapshot) -> Iterator[Detection]:
    for element in snapshot.elements:
        raw_role = element.attr("role")
        if raw_role is not None:
            invalid = [token for token in raw_role.lower().split() if token not in VALID_ROLES]
            if invalid:
                yield Detection(
                    element,
                    f'{describe(snapshot, element)} has invalid role "{" ".join(invalid)}"',
                    remediation="Use a role defined by WAI-ARIA or remove the role attribute",
                    kind="invalid-role",
                )

        for name, value in element.attributes.items():
            if not name.startswith("aria-"):
                continue
            if name not in VALID_ARIA_ATTRIBUTES:
                yield Detection(
                    element,
                    f'{describe(snapshot, element)} uses unknown attribute "{name}"',
                    remediation="Check the attribute name for typos against the WAI-ARIA attribute list",
                    kind="unknown-attribute",
                )
                continue
            allowed = STATE_ATTRIBUTE_VALUES.get(name)
            if allowed is not None and value not in allowed:
                yield Detection(
                    element,
                    f'{describe(snapshot, element)} has {name}="{value}"; '
                    f"expected one of: {', '.join(sorted(allowed))}",
                    kind="invalid-state",
                )


def check_duplicate_ids(snapshot: Snapshot) -> Iterator[Detection]:
    for element_id, elements in snapshot.elements_by_id().items():
        if len(elements) > 1:
            yield Detection(
                elements[0],
                f'Duplicate id "{element_id}" found on {len(elements)} elements',
                remediation="Give every element a unique id",
                kind="duplicate-id",
            )


def check_clickable_role(snapshot: Snapshot) -> Iterator[Detection]:
    for element in snapshot.by_tag("div", "span"):
        if element.role is not None:
            continue
        if element.has_attr("onclick") or element.has_attr("tabindex"):
            yield Detection(
                element,
                f"Interactive {describe(snapshot, element)} has no role",
                remediation='Add role="button" (or another suitable role) or use a native element',
                kind="missing-role",
            )


def _looks_like_status(element: ElementNode) -> bool:
    classes = (element.attr("class") or "").lower()
    return any(hint in classes for hint in STATUS_CLASS_HINTS)


def check_status_messages(snapshot: Snapshot) -> Iterator[Detection]:
    for element in snapshot.elements:
        live = element.attr("aria-live")
        if live is not None and live.strip().lower() not in ARIA_LIVE_VALUES:
            yield Detection(
                element,
                f'{describe(snapshot, element)} has invalid aria-live="{live}"',
                remediation='Use aria-live="polite" or aria-live="assertive"',
                kind="invalid-live-value",
            )
            continue

        if not _looks_like_status(element) or snapshot.is_interactive(element):
            continue
        if is_live_region(element):
            continue
        if snapshot.has_ancestor(element, lambda a: is_live_region(a) or _looks_like_status(a)):
            continue
        yield Detection(
            element,
            f"Status container {describe(snapshot, element)} is not a live region",
            kind="missing-live-region",
        )


RULES = [
    Rule(
        criterion_id="4.1.2",
        variant="aria-validity",
        level=Level.A,
        severity=Severity.HIGH,
        description="ARIA roles, attributes and states are valid",
        remediation="Fix the ARIA markup so assistive technology can interpret it",
        check=check_aria_validity,
    ),
    Rule(
        criterion_id="4.1.2",
        variant="duplicate-id",
        level=Level.A,
        severity=Severity.MEDIUM,
        description="Element ids are unique within a page",
        remediation="Give every element a unique id",
        check=check_duplicate_ids,
    ),
    Rule(
        criterion_id="4.1.2",
        variant="clickable-role",
        level=Level.A,
        severity=Severity.MEDIUM,
        description="Generic elements made interactive expose a role",
        remediation='Add role="button" or use a <button> element',
        check=check_clickable_role,
    ),
    Rule(
        criterion_id="4.1.3",
        variant="status-messages",
        level=Level.AA,
        severity=Severity.LOW,
        description="Status messages are announced without receiving focus",
        remediation='Add role="status" or aria-live="polite" to the message container',
        check=check_status_messages,
    ),
]
