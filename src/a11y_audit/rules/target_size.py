"""Minimum target size (WCAG 2.5.8)."""

import math
from typing import Iterator

from ..config import settings
from ..models import BoundingBox, ElementNode, Level, Severity
from ..registry import Detection, Rule
from ..snapshot import Snapshot
from .base import describe

# Extra characters the parent must carry beyond the link text for the link to count as inline
INLINE_TEXT_MARGIN = 10


def is_undersized(box: BoundingBox, minimum: float) -> bool:
    return box.width < minimum or box.height < minimum


def is_inline_link(snapshot: Snapshot, element: ElementNode) -> bool:
    """A link sitting in a sentence, i.e. its parent carries surrounding text."""
    if element.tag != "a":
        return False
    parent = snapshot.parent_of(element)
    if parent is None:
        return False
    return len(parent.text.strip()) > len(element.text.strip()) + INLINE_TEXT_MARGIN


def _distance_to_box(x: float, y: float, box: BoundingBox) -> float:
    dx = max(box.x - x, 0.0, x - box.right)
    dy = max(box.y - y, 0.0, y - box.bottom)
    return math.hypot(dx, dy)


def has_spacing_exemption(
    target: ElementNode, others: list[ElementNode], minimum: float
) -> bool:
    """A circle of the minimum diameter centred on the target touches no other target.

    Undersized neighbours are represented by their own circle; the rest by
    their bounding box.
    """
    radius = minimum / 2
    cx, cy = target.bounding_box.center
    for other in others:
        box = other.bounding_box
        if is_undersized(box, minimum):
            ox, oy = box.center
            if math.hypot(cx - ox, cy - oy) < minimum:
                return False
        elif _distance_to_box(cx, cy, box) < radius:
            return False
    return True


def _targets(snapshot: Snapshot) -> list[ElementNode]:
    return [
        element
        for element in snapshot.elements
        if snapshot.is_interactive(element) and snapshot.is_visible(element)
    ]


def _related(snapshot: Snapshot, a: ElementNode, b: ElementNode) -> bool:
    return a.index == b.index or any(x.index == b.index for x in snapshot.ancestors_of(a)) or any(
        x.index == a.index for x in snapshot.ancestors_of(b)
    )


def check_target_size(snapshot: Snapshot) -> Iterator[Detection]:
    minimum = settings.min_target_size
    targets = _targets(snapshot)
    for target in targets:
        box = target.bounding_box
        if not is_undersized(box, minimum):
            continue
        if is_inline_link(snapshot, target):
            continue
        others = [o for o in targets if not _related(snapshot, target, o)]
        if has_spacing_exemption(target, others, minimum):
            continue
        yield Detection(
            target,
            f"Target {describe(snapshot, target)} is {round(box.width)}x{round(box.height)}px, "
            f"smaller than {minimum}x{minimum}px and too close to neighbouring targets",
            kind="small-target",
        )


RULES = [
    Rule(
        criterion_id="2.5.8",
        variant="target-size",
        level=Level.AA,
        severity=Severity.LOW,
        description="Pointer targets are at least 24 by 24 CSS pixels",
        remediation="Increase the target to at least 24x24px, e.g. with padding, or space it from other targets",
        check=check_target_size,
    ),
]
