"""Cross-page consistency rules.

These rules take the ordered list of snapshots of one run. The first
snapshot is the reference page every other page is compared against.
"""

import re
from typing import Iterator, Sequence

from ..models import ElementNode, Level, Severity
from ..registry import Detection, Rule
from ..snapshot import Snapshot, is_link
from .base import is_landmark
from .denylists import PRICE_PATTERN, PRICE_PLACEHOLDER

_WHITESPACE = re.compile(r"\s+")

# href fragments identifying components that must be named the same everywhere
SAME_FUNCTION_HREFS = ("cart",)


def _name(snapshot: Snapshot, element: ElementNode) -> str:
    name = snapshot.resolve_accessible_name(element)
    return _WHITESPACE.sub(" ", name or element.text).strip()


def nav_links(snapshot: Snapshot) -> list[tuple[str, str | None, ElementNode]]:
    """(text, href, element) for links inside navigation landmarks, first occurrence per text and href."""
    links = []
    seen: set[tuple[str, str | None]] = set()
    for nav in snapshot.elements_matching(lambda e: is_landmark(e, "navigation")):
        for element in snapshot.descendants_of(nav):
            if not is_link(element):
                continue
            key = (_name(snapshot, element), element.attr("href"))
            if not key[0] or key in seen:
                continue
            seen.add(key)
            links.append((*key, element))
    return links


def check_consistent_navigation(snapshots: Sequence[Snapshot]) -> Iterator[Detection]:
    reference = snapshots[0]
    reference_order = [(text, href) for text, href, _ in nav_links(reference)]

    for page in snapshots[1:]:
        links = nav_links(page)
        common = set(reference_order) & {(text, href) for text, href, _ in links}
        expected = [key for key in reference_order if key in common]
        actual = [((text, href), element) for text, href, element in links if (text, href) in common]
        if expected == [key for key, _ in actual]:
            continue

        first_moved = next(
            element for (key, element), wanted in zip(actual, expected) if key != wanted
        )
        yield Detection(
            first_moved,
            f"Navigation order differs from {reference.url}: "
            f"expected {[text for text, _ in expected]}, found {[text for (text, _), _ in actual]}",
            remediation="Keep repeated navigation links in the same relative order on every page",
            kind="nav-order",
            snapshot=page,
        )


def _normalize_label(label: str) -> str:
    return _WHITESPACE.sub(" ", PRICE_PATTERN.sub(PRICE_PLACEHOLDER, label)).strip().lower()


def _component_key(element: ElementNode) -> tuple[str, str] | None:
    if not is_link(element):
        return None
    href = (element.attr("href") or "").strip().rstrip("/").lower()
    if not any(fragment in href for fragment in SAME_FUNCTION_HREFS):
        return None
    return (element.role or "link", href)


def check_consistent_identification(snapshots: Sequence[Snapshot]) -> Iterator[Detection]:
    # key -> [(normalized label, raw label, snapshot, element)], one entry per page
    components: dict[tuple[str, str], list[tuple[str, str, Snapshot, ElementNode]]] = {}
    for page in snapshots:
        seen_on_page: set[tuple[str, str]] = set()
        for element in page.elements:
            key = _component_key(element)
            if key is None or key in seen_on_page:
                continue
            seen_on_page.add(key)
            label = _name(page, element)
            components.setdefault(key, []).append((_normalize_label(label), label, page, element))

    for (_, href), entries in components.items():
        labels = list(dict.fromkeys(normalized for normalized, _, _, _ in entries))
        if len(labels) < 2:
            continue
        _, raw, page, element = next(e for e in entries if e[0] != labels[0])
        yield Detection(
            element,
            f'Component linking to "{href}" is labelled inconsistently across pages: '
            f"{labels}; \"{raw}\" on {page.url}",
            kind="inconsistent-label",
            snapshot=page,
        )


RULES = [
    Rule(
        criterion_id="3.2.3",
        variant="consistent-navigation",
        level=Level.AA,
        severity=Severity.MEDIUM,
        description="Repeated navigation appears in the same relative order",
        remediation="Keep repeated navigation links in the same relative order on every page",
        check=check_consistent_navigation,
        cross_page=True,
    ),
    Rule(
        criterion_id="3.2.4",
        variant="consistent-identification",
        level=Level.AA,
        severity=Severity.MEDIUM,
        description="Components with the same function are identified consistently",
        remediation="Use the same accessible name for components with the same function on every page",
        check=check_consistent_identification,
        cross_page=True,
    ),
]
