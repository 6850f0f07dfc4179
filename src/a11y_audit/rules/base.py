"""Shared predicates for rule checkers."""

from ..models import ElementNode
from ..snapshot import Snapshot
from .denylists import ARIA_LIVE_VALUES, LIVE_REGION_ROLES

HEADING_TAGS = {"h1": 1, "h2": 2, "h3": 3, "h4": 4, "h5": 5, "h6": 6}

LANDMARK_TAGS = {
    "navigation": "nav",
    "main": "main",
    "banner": "header",
    "contentinfo": "footer",
    "complementary": "aside",
}

NON_LABELLED_INPUT_TYPES = frozenset({"hidden", "submit", "button", "reset", "image"})


def is_landmark(element: ElementNode, landmark: str) -> bool:
    """Element is the given landmark by tag or by explicit role."""
    return element.role == landmark or element.tag == LANDMARK_TAGS.get(landmark)


def heading_level(element: ElementNode) -> int | None:
    """Heading level from the tag, or from role="heading" and aria-level."""
    if element.tag in HEADING_TAGS:
        return HEADING_TAGS[element.tag]
    if element.role == "heading":
        try:
            return max(1, int((element.attr("aria-level") or "2").strip()))
        except ValueError:
            return 2
    return None


def is_form_control(element: ElementNode) -> bool:
    if element.tag in ("select", "textarea"):
        return True
    if element.tag == "input":
        return (element.attr("type") or "text").lower() not in NON_LABELLED_INPUT_TYPES
    return element.role in ("textbox", "combobox", "listbox", "searchbox", "spinbutton", "slider")


def describe(snapshot: Snapshot, element: ElementNode) -> str:
    """Short human label for messages: selector plus a text excerpt."""
    text = element.text[:50]
    selector = snapshot.selector_for(element)
    return f'{selector} ("{text}")' if text else selector


def first_index(snapshot: Snapshot, landmark: str) -> int | None:
    element = snapshot.elements_matching(lambda e: is_landmark(e, landmark)).first()
    return element.index if element is not None else None


def is_live_region(element: ElementNode) -> bool:
    """Element announces changes: a live role or a non-off aria-live."""
    if element.role in LIVE_REGION_ROLES:
        return True
    live = (element.attr("aria-live") or "").strip().lower()
    return live in ARIA_LIVE_VALUES and live != "off"
