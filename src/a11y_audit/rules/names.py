"""Rules built on accessible-name resolution.

Every rule here calls Snapshot.resolve_accessible_name so that images,
buttons, links and form controls agree on what counts as a name.
"""

from typing import Iterator

from ..models import ElementNode, Level, Severity
from ..registry import Detection, Rule
from ..snapshot import ABSENT, Snapshot, is_button, is_link
from .base import describe, is_form_control
from .denylists import GENERIC_LINK_TEXT, REDUNDANT_ALT_WORDS


def _is_image(element: ElementNode) -> bool:
    if element.tag == "img" or element.role == "img":
        return True
    return element.tag == "input" and (element.attr("type") or "").lower() == "image"


def check_image_alt(snapshot: Snapshot) -> Iterator[Detection]:
    for image in snapshot.elements_matching(_is_image):
        if image.tag == "img" and image.role in ("presentation", "none"):
            continue
        if snapshot.resolve_accessible_name(image) is ABSENT:
            src = image.attr("src") or snapshot.selector_for(image)
            yield Detection(
                image,
                f"Image {src} has no text alternative (alt attribute missing)",
                kind="missing-alt",
            )


def check_redundant_alt(snapshot: Snapshot) -> Iterator[Detection]:
    for image in snapshot.by_tag("img"):
        alt = (image.attr("alt") or "").lower()
        for word in REDUNDANT_ALT_WORDS:
            if word in alt:
                yield Detection(
                    image,
                    f'Alt text "{image.attr("alt")}" contains the redundant word "{word}"',
                    kind="redundant-alt",
                )
                break


def check_link_name(snapshot: Snapshot) -> Iterator[Detection]:
    for link in snapshot.elements_matching(is_link):
        if not snapshot.resolve_accessible_name(link):
            href = link.attr("href")
            yield Detection(
                link,
                f'Link to "{href}" has no accessible name' if href else "Link has no accessible name",
                kind="missing-name",
            )


def check_generic_link_text(snapshot: Snapshot) -> Iterator[Detection]:
    for link in snapshot.elements_matching(is_link):
        name = snapshot.resolve_accessible_name(link)
        if name and name.strip().lower() in GENERIC_LINK_TEXT:
            yield Detection(
                link,
                f'Link text "{name}" is ambiguous and does not describe the link purpose',
                kind="generic-text",
            )


def check_button_name(snapshot: Snapshot) -> Iterator[Detection]:
    for button in snapshot.elements_matching(is_button):
        if not snapshot.resolve_accessible_name(button):
            yield Detection(
                button,
                f"Button {snapshot.selector_for(button)} has no accessible name",
                kind="missing-name",
            )


def check_form_labels(snapshot: Snapshot) -> Iterator[Detection]:
    for control in snapshot.elements_matching(is_form_control):
        if snapshot.resolve_accessible_name(control) is ABSENT:
            kind = control.attr("type") or control.tag
            yield Detection(
                control,
                f"Form control ({kind}) {snapshot.selector_for(control)} has no programmatic label",
                kind="missing-label",
            )


def check_label_in_name(snapshot: Snapshot) -> Iterator[Detection]:
    for element in snapshot.elements_matching(lambda e: e.has_attr("aria-label")):
        if not snapshot.is_interactive(element):
            continue
        label = (element.attr("aria-label") or "").strip().lower()
        visible = element.text.strip().lower()
        if len(visible) > 1 and visible not in label:
            yield Detection(
                element,
                f'Accessible name "{label}" of {describe(snapshot, element)} '
                f'does not include its visible text "{visible}"',
                kind="label-not-in-name",
            )


RULES = [
    Rule(
        criterion_id="1.1.1",
        variant="image-alt",
        level=Level.A,
        severity=Severity.HIGH,
        description="Images have a text alternative",
        remediation='Add an alt attribute describing the image, or alt="" if it is decorative',
        check=check_image_alt,
    ),
    Rule(
        criterion_id="1.1.1",
        variant="redundant-alt",
        level=Level.A,
        severity=Severity.LOW,
        description="Alt text does not announce that it is an image",
        remediation='Describe the content of the image without words like "image" or "picture"',
        check=check_redundant_alt,
    ),
    Rule(
        criterion_id="1.3.1",
        variant="form-labels",
        level=Level.A,
        severity=Severity.HIGH,
        description="Form controls are programmatically labelled",
        remediation="Associate a <label for> with the control, wrap it in a <label>, or add aria-label",
        check=check_form_labels,
    ),
    Rule(
        criterion_id="2.4.4",
        variant="link-name",
        level=Level.A,
        severity=Severity.HIGH,
        description="Links have an accessible name",
        remediation="Add link text, an aria-label, or alt text on the image inside the link",
        check=check_link_name,
    ),
    Rule(
        criterion_id="2.4.4",
        variant="generic-link-text",
        level=Level.A,
        severity=Severity.MEDIUM,
        description="Link text describes the link purpose",
        remediation='Describe the destination, e.g. "View our pizza menu" instead of "click here"',
        check=check_generic_link_text,
    ),
    Rule(
        criterion_id="2.5.3",
        variant="label-in-name",
        level=Level.A,
        severity=Severity.MEDIUM,
        description="Accessible names contain the visible label text",
        remediation="Start the aria-label with the visible text of the control",
        check=check_label_in_name,
    ),
    Rule(
        criterion_id="4.1.2",
        variant="button-name",
        level=Level.A,
        severity=Severity.HIGH,
        description="Buttons have an accessible name",
        remediation="Give the button visible text, an aria-label, or a title",
        check=check_button_name,
    ),
]
