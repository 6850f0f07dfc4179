"""Document structure rules: headings, landmarks, titles and navigation aids."""

import re
from typing import Iterator

from ..models import Level, Severity
from ..registry import Detection, Rule
from ..snapshot import Snapshot
from .base import first_index, heading_level, is_landmark
from .denylists import GENERIC_TITLES, SKIP_LINK_TARGETS

_SITEMAP_TEXT = re.compile(r"site ?map", re.I)


def has_content(snapshot: Snapshot) -> bool:
    return len(snapshot) > 0


def check_heading_hierarchy(snapshot: Snapshot) -> Iterator[Detection]:
    headings = []
    for element in snapshot.elements:
        level = heading_level(element)
        if level is not None:
            headings.append((element, level))

    if not headings:
        yield Detection(None, "Page has no headings", kind="no-headings")
        return

    if not any(level == 1 for _, level in headings):
        yield Detection(
            None,
            "Page has no level-one heading",
            remediation="Add a single <h1> describing the page content",
            kind="no-h1",
        )

    previous = None
    for element, level in headings:
        if not element.text.strip():
            yield Detection(
                element,
                f"Heading level {level} has no text",
                remediation="Add descriptive text to the heading or remove the empty element",
                kind="empty-heading",
            )
        if previous is not None and level > previous + 1:
            yield Detection(
                element,
                f"Heading level {level} follows heading level {previous}, skipping levels",
                kind="skipped-level",
            )
        previous = level


def check_landmarks(snapshot: Snapshot) -> Iterator[Detection]:
    if first_index(snapshot, "navigation") is None:
        yield Detection(
            None,
            "Page has no navigation landmark",
            remediation='Wrap the primary navigation in <nav> or add role="navigation"',
            kind="missing-navigation",
        )
    if first_index(snapshot, "main") is None:
        yield Detection(
            None,
            "Page has no main landmark",
            remediation='Wrap the primary content in <main> or add role="main"',
            kind="missing-main",
        )


def check_meaningful_sequence(snapshot: Snapshot) -> Iterator[Detection]:
    nav_index = first_index(snapshot, "navigation")
    main_index = first_index(snapshot, "main")
    if nav_index is not None and main_index is not None and nav_index > main_index:
        yield Detection(
            snapshot[nav_index],
            "Navigation appears after main content in DOM order",
            kind="nav-after-main",
        )


def _is_skip_link(element) -> bool:
    if element.tag != "a":
        return False
    if (element.attr("href") or "") in SKIP_LINK_TARGETS:
        return True
    return "skip" in element.text.lower()


def check_bypass_blocks(snapshot: Snapshot) -> Iterator[Detection]:
    if snapshot.elements_matching(_is_skip_link).first() is not None:
        return
    has_landmarks = (
        first_index(snapshot, "main") is not None and first_index(snapshot, "navigation") is not None
    )
    if not has_landmarks:
        yield Detection(
            None,
            "No skip navigation link found and no landmark regions to serve as alternative",
            kind="no-bypass",
        )


def check_page_titled(snapshot: Snapshot) -> Iterator[Detection]:
    title = (snapshot.title or "").strip()
    if title.lower() in GENERIC_TITLES:
        yield Detection(
            None,
            f'Page title "{title}" is too generic' if title else "Page title is missing",
            kind="missing-title" if not title else "generic-title",
        )


def _is_breadcrumb(element) -> bool:
    if (element.attr("aria-label") or "").strip().lower() == "breadcrumb":
        return True
    return "breadcrumb" in (element.attr("class") or "").lower()


def count_navigation_mechanisms(snapshot: Snapshot) -> int:
    count = 0
    navs = list(snapshot.elements_matching(lambda e: is_landmark(e, "navigation")))
    if navs:
        count += 1

    has_search = snapshot.elements_matching(
        lambda e: e.role == "search" or (e.tag == "input" and (e.attr("type") or "").lower() == "search")
    ).first()
    if has_search is not None:
        count += 1

    has_sitemap = snapshot.elements_matching(
        lambda e: e.tag == "a" and ("sitemap" in (e.attr("href") or "") or bool(_SITEMAP_TEXT.search(e.text)))
    ).first()
    if has_sitemap is not None:
        count += 1

    if snapshot.elements_matching(_is_breadcrumb).first() is not None:
        count += 1

    nav_links = {
        d.index
        for nav in navs
        for d in snapshot.descendants_of(nav)
        if d.tag == "a" and d.has_attr("href")
    }
    if len(nav_links) >= 2:
        count += 1
    return count


def check_multiple_ways(snapshot: Snapshot) -> Iterator[Detection]:
    found = count_navigation_mechanisms(snapshot)
    if found < 2:
        yield Detection(
            None,
            f"Only {found} navigation method(s) found; at least 2 are required",
            kind="single-way",
        )


def check_empty_labels(snapshot: Snapshot) -> Iterator[Detection]:
    for label in snapshot.by_tag("label"):
        if not label.text.strip():
            target = label.attr("for")
            yield Detection(
                label,
                f'Label for "{target}" has no text' if target else "Label element has no text",
                kind="empty-label",
            )


RULES = [
    Rule(
        criterion_id="1.3.1",
        variant="heading-hierarchy",
        level=Level.A,
        severity=Severity.MEDIUM,
        description="Headings form a hierarchy without skipped levels",
        remediation="Ensure heading levels increase by only one level at a time",
        check=check_heading_hierarchy,
        applies_to=has_content,
    ),
    Rule(
        criterion_id="1.3.1",
        variant="landmarks",
        level=Level.A,
        severity=Severity.MEDIUM,
        description="Navigation and main landmarks are present",
        remediation="Use <nav> and <main> (or the equivalent roles) to mark page regions",
        check=check_landmarks,
        applies_to=has_content,
    ),
    Rule(
        criterion_id="1.3.2",
        variant="meaningful-sequence",
        level=Level.A,
        severity=Severity.MEDIUM,
        description="Navigation precedes main content in DOM order",
        remediation="Move <nav> before <main> in the HTML structure",
        check=check_meaningful_sequence,
    ),
    Rule(
        criterion_id="2.4.1",
        variant="bypass-blocks",
        level=Level.A,
        severity=Severity.MEDIUM,
        description="A mechanism exists to bypass repeated blocks",
        remediation='Add <a href="#main-content">Skip to main content</a> as the first focusable element',
        check=check_bypass_blocks,
        applies_to=has_content,
    ),
    Rule(
        criterion_id="2.4.2",
        variant="page-titled",
        level=Level.A,
        severity=Severity.MEDIUM,
        description="Pages have a descriptive title",
        remediation='Add a <title> that identifies the page, e.g. "Pizza Palace - Cart"',
        check=check_page_titled,
    ),
    Rule(
        criterion_id="2.4.5",
        variant="multiple-ways",
        level=Level.AA,
        severity=Severity.LOW,
        description="More than one way exists to locate pages",
        remediation="Add a search field, sitemap, breadcrumbs or a navigation menu",
        check=check_multiple_ways,
        applies_to=has_content,
    ),
    Rule(
        criterion_id="2.4.6",
        variant="headings-and-labels",
        level=Level.AA,
        severity=Severity.LOW,
        description="Labels describe the purpose of their controls",
        remediation="Add descriptive text to the label that identifies the associated input",
        check=check_empty_labels,
    ),
]
