"""Form behaviour rules: input purpose, context changes, error messages and labels."""

import re
from typing import Iterator

from ..models import ElementNode, Level, Severity
from ..registry import Detection, Rule
from ..snapshot import ABSENT, Snapshot
from .base import describe, is_form_control, is_live_region
from .denylists import (
    AUTOCOMPLETE_BY_NAME,
    AUTOCOMPLETE_BY_TYPE,
    CONTEXT_CHANGE_PATTERN,
    ERROR_CLASS_HINTS,
)

_WORD_SPLIT = re.compile(r"[\W_]+")

# Values that leave the field's purpose undeclared
_UNUSABLE_AUTOCOMPLETE = frozenset({"", "on", "off"})


def expected_autocomplete(element: ElementNode) -> tuple[str, ...] | None:
    """Autocomplete tokens an input should carry, or None if its purpose is unknown."""
    if element.tag != "input":
        return None
    input_type = (element.attr("type") or "text").strip().lower()
    if input_type in AUTOCOMPLETE_BY_TYPE:
        return AUTOCOMPLETE_BY_TYPE[input_type]
    if input_type != "text":
        return None

    for source in (element.attr("name"), element.element_id):
        for word in _WORD_SPLIT.split((source or "").lower()):
            if word in AUTOCOMPLETE_BY_NAME:
                return AUTOCOMPLETE_BY_NAME[word]
    return None


def check_input_purpose(snapshot: Snapshot) -> Iterator[Detection]:
    for element in snapshot.by_tag("input"):
        if element.has_attr("disabled"):
            continue
        expected = expected_autocomplete(element)
        if expected is None:
            continue
        value = (element.attr("autocomplete") or "").strip().lower()
        if value in _UNUSABLE_AUTOCOMPLETE:
            yield Detection(
                element,
                f"{describe(snapshot, element)} collects personal data but has no autocomplete "
                f"purpose (expected {expected[0]})",
                remediation=f'Add autocomplete="{expected[0]}"',
                kind="missing-autocomplete",
            )


def _context_changes(snapshot: Snapshot, handler: str, kind: str) -> Iterator[Detection]:
    for element in snapshot.elements_matching(lambda e: e.has_attr(handler)):
        if CONTEXT_CHANGE_PATTERN.search(element.attr(handler)):
            yield Detection(
                element,
                f"{describe(snapshot, element)} changes context from its {handler} handler",
                kind=kind,
            )


def check_on_focus(snapshot: Snapshot) -> Iterator[Detection]:
    yield from _context_changes(snapshot, "onfocus", "focus-context-change")


def check_on_input(snapshot: Snapshot) -> Iterator[Detection]:
    yield from _context_changes(snapshot, "onchange", "input-context-change")


def _is_error_container(element: ElementNode) -> bool:
    if element.role == "alert":
        return True
    classes = (element.attr("class") or "").lower()
    return any(hint in classes for hint in ERROR_CLASS_HINTS)


def check_error_identification(snapshot: Snapshot) -> Iterator[Detection]:
    """Error message containers must be exposed to assistive technology."""
    for element in snapshot.elements_matching(_is_error_container):
        if snapshot.is_interactive(element) or is_form_control(element):
            continue
        if element.role is not None or element.has_attr("aria-live"):
            continue
        if snapshot.has_ancestor(element, is_live_region):
            continue
        yield Detection(
            element,
            f'Error message {describe(snapshot, element)} lacks role="alert" or aria-live',
            kind="unannounced-error",
        )


def check_placeholder_label(snapshot: Snapshot) -> Iterator[Detection]:
    for element in snapshot.elements_matching(is_form_control):
        placeholder = (element.attr("placeholder") or "").strip()
        if placeholder and snapshot.resolve_accessible_name(element) is ABSENT:
            yield Detection(
                element,
                f'{describe(snapshot, element)} is identified only by its placeholder "{placeholder}"',
                kind="placeholder-only",
            )


RULES = [
    Rule(
        criterion_id="1.3.5",
        variant="input-purpose",
        level=Level.AA,
        severity=Severity.LOW,
        description="The purpose of inputs collecting user data can be determined",
        remediation="Add an autocomplete attribute naming the field purpose",
        check=check_input_purpose,
    ),
    Rule(
        criterion_id="3.2.1",
        variant="on-focus",
        level=Level.A,
        severity=Severity.MEDIUM,
        description="Receiving focus does not change context",
        remediation="Do not navigate or submit forms from focus handlers",
        check=check_on_focus,
    ),
    Rule(
        criterion_id="3.2.2",
        variant="on-input",
        level=Level.A,
        severity=Severity.MEDIUM,
        description="Changing a setting does not change context unexpectedly",
        remediation="Use an explicit submit button instead of navigating on change",
        check=check_on_input,
    ),
    Rule(
        criterion_id="3.3.1",
        variant="error-identification",
        level=Level.A,
        severity=Severity.MEDIUM,
        description="Input errors are identified and described to the user",
        remediation='Add role="alert" or aria-live="polite" to the error message container',
        check=check_error_identification,
    ),
    Rule(
        criterion_id="3.3.2",
        variant="placeholder-label",
        level=Level.A,
        severity=Severity.MEDIUM,
        description="Inputs have labels rather than placeholder text only",
        remediation="Add a visible <label> associated with the input",
        check=check_placeholder_label,
    ),
]
