"""Language of page and language of parts."""

from typing import Iterator

from ..models import Level, Severity
from ..registry import Detection, Rule
from ..snapshot import Snapshot
from .base import describe
from .denylists import LANG_PATTERN


def is_valid_lang(value: str) -> bool:
    return bool(LANG_PATTERN.fullmatch(value))


def check_page_language(snapshot: Snapshot) -> Iterator[Detection]:
    root = snapshot.root
    lang = root.attr("lang")
    if lang is None:
        yield Detection(
            root,
            f"<{root.tag}> element has no lang attribute",
            kind="missing-lang",
        )
    elif not lang.strip():
        yield Detection(root, f"<{root.tag}> element has an empty lang attribute", kind="empty-lang")
    elif not is_valid_lang(lang):
        yield Detection(
            root,
            f'lang="{lang}" on <{root.tag}> is not a valid language tag',
            remediation='Use a BCP 47 language tag such as "en" or "en-US"',
            kind="invalid-lang",
        )


def check_parts_language(snapshot: Snapshot) -> Iterator[Detection]:
    root = snapshot.root
    for element in snapshot.elements:
        if element.index == root.index:
            continue
        lang = element.attr("lang")
        if lang is not None and not is_valid_lang(lang):
            yield Detection(
                element,
                f'{describe(snapshot, element)} has invalid lang="{lang}"',
                kind="invalid-lang",
            )


RULES = [
    Rule(
        criterion_id="3.1.1",
        variant="language-of-page",
        level=Level.A,
        severity=Severity.HIGH,
        description="The default language of the page is declared",
        remediation='Add a lang attribute to the root element, e.g. <html lang="en">',
        check=check_page_language,
        applies_to=lambda snapshot: snapshot.root is not None,
    ),
    Rule(
        criterion_id="3.1.2",
        variant="language-of-parts",
        level=Level.AA,
        severity=Severity.MEDIUM,
        description="Language changes within the page are declared with valid tags",
        remediation='Use a BCP 47 language tag such as "fr" or "pt-BR"',
        check=check_parts_language,
        applies_to=lambda snapshot: snapshot.root is not None,
    ),
]
