"""Resize-text and reflow rules, evaluated on reduced-viewport layout probes."""

from typing import Iterator

from ..config import settings
from ..models import Layout, Level, Severity
from ..registry import Detection, Rule
from ..snapshot import Snapshot
from .base import describe


def zoom_layout(snapshot: Snapshot) -> Layout | None:
    """Layout at half the capture width, the stand-in for 200% zoom."""
    return snapshot.layout_at(snapshot.viewport.width // 2)


def reflow_layout(snapshot: Snapshot) -> Layout | None:
    layout = snapshot.layout_at(settings.reflow_width)
    if layout is None and snapshot.layout is not None and snapshot.viewport.width <= settings.reflow_width:
        layout = snapshot.layout
    return layout


def _overflow(snapshot: Snapshot, layout: Layout, context: str) -> Iterator[Detection]:
    width = layout.viewport.width
    if layout.scroll_width > layout.client_width + settings.reflow_tolerance:
        yield Detection(
            None,
            f"Content overflows {context} at {width}px width "
            f"(scrollWidth: {layout.scroll_width}px > clientWidth: {layout.client_width}px)",
            kind="horizontal-scroll",
        )

    for element in snapshot.elements:
        if "hidden" not in (element.style.overflow or "").split():
            continue
        if snapshot.overflows_container(element, layout):
            yield Detection(
                element,
                f"{describe(snapshot, element)} clips its content (overflow: hidden) at {width}px width",
                remediation="Let the container grow or wrap instead of hiding overflowing content",
                kind="clipped-content",
            )


def check_resize_text(snapshot: Snapshot) -> Iterator[Detection]:
    layout = zoom_layout(snapshot)
    if layout is not None:
        yield from _overflow(snapshot, layout, "at 200% zoom")


def check_reflow(snapshot: Snapshot) -> Iterator[Detection]:
    layout = reflow_layout(snapshot)
    if layout is not None:
        yield from _overflow(snapshot, layout, "when reflowed")


RULES = [
    Rule(
        criterion_id="1.4.4",
        variant="resize-text",
        level=Level.AA,
        severity=Severity.MEDIUM,
        description="Text can be resized to 200% without loss of content",
        remediation="Use responsive CSS units (%, vw, rem) instead of fixed pixel widths",
        check=check_resize_text,
        applies_to=lambda snapshot: len(snapshot) > 0 and zoom_layout(snapshot) is not None,
    ),
    Rule(
        criterion_id="1.4.10",
        variant="reflow",
        level=Level.AA,
        severity=Severity.MEDIUM,
        description="Content reflows without horizontal scrolling at 320px",
        remediation="Apply responsive CSS so content reflows at narrow viewports, e.g. max-width: 100%",
        check=check_reflow,
        applies_to=lambda snapshot: len(snapshot) > 0 and reflow_layout(snapshot) is not None,
    ),
]
