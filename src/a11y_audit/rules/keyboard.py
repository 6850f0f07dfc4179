"""Keyboard reachability, keyboard trap and focus order rules.

All three read Snapshot.focus_sequence: the element index focused after
each simulated Tab press, with None when focus sat on the document body.
"""

from dataclasses import dataclass
from typing import Iterator

from ..config import settings
from ..models import Level, Severity
from ..registry import Detection, Rule
from ..snapshot import Snapshot
from .base import describe


@dataclass(frozen=True)
class FocusCycle:
    """One pass of Tab through the page."""

    stops: tuple[int, ...]
    # True when focus came back to the body or to an earlier stop
    complete: bool


def first_cycle(sequence: tuple[int | None, ...]) -> FocusCycle:
    stops: list[int] = []
    seen: set[int] = set()
    for index in sequence:
        if index is None:
            if stops:
                return FocusCycle(tuple(stops), True)
            continue
        if stops and index == stops[-1]:
            continue
        if index in seen:
            return FocusCycle(tuple(stops), True)
        seen.add(index)
        stops.append(index)
    return FocusCycle(tuple(stops), False)


def has_focus_sequence(snapshot: Snapshot) -> bool:
    return any(index is not None for index in snapshot.focus_sequence)


def check_keyboard_access(snapshot: Snapshot) -> Iterator[Detection]:
    cycle = first_cycle(snapshot.focus_sequence)
    visited = set(cycle.stops)

    for element in snapshot.elements:
        if not snapshot.is_visible(element):
            continue

        tabindex = element.tabindex
        if tabindex is not None and tabindex < 0 and snapshot.is_interactive(element):
            yield Detection(
                element,
                f'{describe(snapshot, element)} has tabindex="{tabindex}" which removes it '
                "from keyboard navigation",
                remediation="Remove the negative tabindex or provide a keyboard-accessible alternative",
                kind="negative-tabindex",
            )
            continue

        if (
            element.tag in ("div", "span")
            and element.has_attr("onclick")
            and element.role is None
            and tabindex is None
        ):
            yield Detection(
                element,
                f"{describe(snapshot, element)} handles clicks but cannot receive keyboard focus",
                remediation='Use <button> or <a> instead, or add role="button" and tabindex="0"',
                kind="mouse-only",
            )
            continue

        if cycle.complete and snapshot.is_focusable(element) and element.index not in visited:
            yield Detection(
                element,
                f"{describe(snapshot, element)} was never reached while tabbing through the page",
                kind="unreachable",
            )


def check_keyboard_trap(snapshot: Snapshot) -> Iterator[Detection]:
    limit = settings.keyboard_trap_repeats
    reported: set[int] = set()
    previous = None
    run = 0
    for press, index in enumerate(snapshot.focus_sequence, start=1):
        run = run + 1 if index is not None and index == previous else 1
        previous = index
        if index is None or index in reported:
            continue
        if run > limit:
            reported.add(index)
            element = snapshot[index]
            yield Detection(
                element,
                f"Keyboard focus stayed on {describe(snapshot, element)} for {run} "
                f"consecutive Tab presses (press {press})",
                kind="keyboard-trap",
            )


def check_focus_order(snapshot: Snapshot) -> Iterator[Detection]:
    for element in snapshot.elements:
        tabindex = element.tabindex
        if tabindex is not None and tabindex > 0:
            yield Detection(
                element,
                f'Positive tabindex="{tabindex}" on {describe(snapshot, element)} '
                "overrides the natural focus order",
                remediation="Remove positive tabindex and rely on DOM order for focus sequence",
                kind="positive-tabindex",
            )

    tolerance = settings.focus_order_tolerance
    previous = None
    for stop in first_cycle(snapshot.focus_sequence).stops:
        current = snapshot[stop]
        if current.bounding_box is None:
            continue
        if previous is not None and current.bounding_box.y < previous.bounding_box.y - tolerance:
            yield Detection(
                current,
                f"Focus jumped backwards from {describe(snapshot, previous)} "
                f"(top: {round(previous.bounding_box.y)}) to {describe(snapshot, current)} "
                f"(top: {round(current.bounding_box.y)})",
                kind="backwards-jump",
            )
        previous = current


RULES = [
    Rule(
        criterion_id="2.1.1",
        variant="keyboard",
        level=Level.A,
        severity=Severity.HIGH,
        description="All functionality is available from a keyboard",
        remediation="Make every interactive element reachable with Tab",
        check=check_keyboard_access,
    ),
    Rule(
        criterion_id="2.1.2",
        variant="no-keyboard-trap",
        level=Level.A,
        severity=Severity.HIGH,
        description="Keyboard focus is never trapped",
        remediation="Ensure Tab can move focus away from every component; check modals and custom widgets",
        check=check_keyboard_trap,
        applies_to=has_focus_sequence,
    ),
    Rule(
        criterion_id="2.4.3",
        variant="focus-order",
        level=Level.A,
        severity=Severity.MEDIUM,
        description="Focus order follows the visual layout",
        remediation="Review the source order of elements so it matches the visual layout",
        check=check_focus_order,
    ),
]
