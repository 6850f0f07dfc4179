"""Use of colour, text and non-text contrast, and focus visibility rules."""

from itertools import chain
from typing import Iterator

from ..colors import WHITE, Color, contrast_ratio, is_large_text, meets_minimum, parse_color
from ..config import settings
from ..models import ElementNode, Level, Severity
from ..registry import Detection, Rule
from ..snapshot import Snapshot
from .base import describe, is_form_control
from .denylists import BADGE_CLASS_HINTS


def resolve_background(snapshot: Snapshot, element: ElementNode | None) -> Color:
    """Composite background behind an element, walking up through transparent ancestors."""
    if element is None:
        return WHITE

    layers = []
    for node in chain([element], snapshot.ancestors_of(element)):
        color = parse_color(node.style.background_color)
        if color is None or color.is_transparent:
            continue
        layers.append(color)
        if color.is_opaque:
            break

    result = WHITE
    for color in reversed(layers):
        result = color.over(result)
    return result


def _is_disabled(element: ElementNode) -> bool:
    return element.has_attr("disabled") or (element.attr("aria-disabled") or "").lower() == "true"


def check_text_contrast(snapshot: Snapshot) -> Iterator[Detection]:
    for element in snapshot.elements:
        if not snapshot.text_bearing(element) or _is_disabled(element):
            continue
        if not snapshot.is_visible(element):
            continue
        foreground = parse_color(element.style.color)
        if foreground is None:
            continue

        background = resolve_background(snapshot, element)
        ratio = contrast_ratio(foreground, background)
        large = is_large_text(element.style.font_size, element.style.font_weight)
        minimum = settings.large_text_contrast_minimum if large else settings.text_contrast_minimum

        if not meets_minimum(ratio, minimum):
            yield Detection(
                element,
                f"Text {describe(snapshot, element)} has contrast {ratio:.2f}:1 "
                f"({foreground.over(background).hex()} on {background.hex()}); "
                f"{minimum}:1 required for {'large' if large else 'normal'} text",
                kind="low-contrast",
            )


def _control_is_identifiable(snapshot: Snapshot, element: ElementNode) -> bool | None:
    """Whether a control's boundary stands out; None when styles are insufficient to tell."""
    surrounding = resolve_background(snapshot, snapshot.parent_of(element))
    verdicts = []

    border = parse_color(element.style.border_color)
    if border is not None and (element.style.border_width or 0) > 0:
        verdicts.append(
            meets_minimum(contrast_ratio(border, surrounding), settings.non_text_contrast_minimum)
        )

    own_background = parse_color(element.style.background_color)
    if own_background is not None and not own_background.is_transparent:
        verdicts.append(
            meets_minimum(
                contrast_ratio(own_background, surrounding), settings.non_text_contrast_minimum
            )
        )

    if not verdicts:
        return None
    return any(verdicts)


def _has_outline(style) -> bool:
    return (
        style is not None
        and (style.outline_style or "none") != "none"
        and (style.outline_width or 0) > 0
    )


def check_non_text_contrast(snapshot: Snapshot) -> Iterator[Detection]:
    for element in snapshot.elements:
        if _is_disabled(element) or not snapshot.is_visible(element):
            continue

        if is_form_control(element) and element.tag != "select":
            if _control_is_identifiable(snapshot, element) is False:
                yield Detection(
                    element,
                    f"Boundary of {describe(snapshot, element)} has less than "
                    f"{settings.non_text_contrast_minimum}:1 contrast with its surroundings",
                    kind="component-contrast",
                )

        focus = element.focus_style
        if _has_outline(focus) and focus.outline_color:
            outline = parse_color(focus.outline_color)
            if outline is None:
                continue
            surrounding = resolve_background(snapshot, snapshot.parent_of(element))
            ratio = contrast_ratio(outline, surrounding)
            if not meets_minimum(ratio, settings.non_text_contrast_minimum):
                yield Detection(
                    element,
                    f"Focus outline of {describe(snapshot, element)} has contrast {ratio:.2f}:1 "
                    f"against {surrounding.hex()}",
                    remediation="Use a focus outline color with at least 3:1 contrast against the page",
                    kind="focus-indicator-contrast",
                )


def check_focus_visible(snapshot: Snapshot) -> Iterator[Detection]:
    """Focused elements must show an outline or a box shadow."""
    reported = set()
    for index in snapshot.focus_sequence:
        if index is None or index in reported:
            continue
        element = snapshot[index]
        style = element.focus_style
        if style is None:
            continue
        has_shadow = (style.box_shadow or "none") != "none"
        if not _has_outline(style) and not has_shadow:
            reported.add(index)
            yield Detection(
                element,
                f"No visible focus indicator on {describe(snapshot, element)} "
                f"(outline: {style.outline_style or 'none'})",
                kind="no-focus-indicator",
            )


def _has_text_alternative(element: ElementNode) -> bool:
    return any(
        (value or "").strip()
        for value in (element.text, element.attr("aria-label"), element.attr("aria-labelledby"))
    )


def _is_badge(element: ElementNode) -> bool:
    classes = (element.attr("class") or "").lower()
    return any(hint in classes for hint in BADGE_CLASS_HINTS)


def check_use_of_color(snapshot: Snapshot) -> Iterator[Detection]:
    for element in snapshot.elements:
        if _has_text_alternative(element):
            continue
        if element.tag == "button" or element.role == "button":
            yield Detection(
                element,
                f"{describe(snapshot, element)} has no text or aria-label; its purpose may rely on colour alone",
                remediation="Add visible text or an aria-label that states the button's purpose or state",
                kind="colour-only-button",
            )
        elif _is_badge(element):
            yield Detection(
                element,
                f"Badge {describe(snapshot, element)} has no text; its meaning may rely on colour alone",
                remediation="Add text content to the badge alongside its colour",
                kind="colour-only-badge",
            )


def has_focus_styles(snapshot: Snapshot) -> bool:
    return any(
        index is not None and snapshot[index].focus_style is not None
        for index in snapshot.focus_sequence
    )


RULES = [
    Rule(
        criterion_id="1.4.1",
        variant="use-of-color",
        level=Level.A,
        severity=Severity.MEDIUM,
        description="Colour is not the only means of conveying information",
        remediation="Pair colour cues with text, an icon label or a pattern",
        check=check_use_of_color,
    ),
    Rule(
        criterion_id="1.4.3",
        variant="text-contrast",
        level=Level.AA,
        severity=Severity.HIGH,
        description="Text has a contrast ratio of at least 4.5:1 (3:1 for large text)",
        remediation="Darken the text or lighten the background until the ratio is met",
        check=check_text_contrast,
    ),
    Rule(
        criterion_id="1.4.11",
        variant="non-text-contrast",
        level=Level.AA,
        severity=Severity.MEDIUM,
        description="UI component boundaries and focus indicators have 3:1 contrast",
        remediation="Give the control a border or background with at least 3:1 contrast",
        check=check_non_text_contrast,
    ),
    Rule(
        criterion_id="2.4.7",
        variant="focus-visible",
        level=Level.AA,
        severity=Severity.MEDIUM,
        description="Keyboard focus is visible",
        remediation="Add a focus style, e.g. :focus-visible { outline: 2px solid #4A90D9; }",
        check=check_focus_visible,
        applies_to=has_focus_styles,
    ),
]
