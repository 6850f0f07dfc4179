"""Shared fixtures: build snapshots from literal element specs."""

import pytest

from a11y_audit.models import BoundingBox, ComputedStyle, ElementNode, Layout, Viewport
from a11y_audit.snapshot import Snapshot

DEFAULT_BOX = BoundingBox(x=0, y=0, width=100, height=30)

_ELEMENT_FIELDS = {"text", "own_text", "style", "focus_style", "box", "parent", "scroll_width", "client_width"}


def _attribute_name(name: str) -> str:
    # aria_label -> aria-label, for_ -> for, class_ -> class
    return name.rstrip("_").replace("_", "-")


def _style(value):
    if value is None or isinstance(value, ComputedStyle):
        return value
    return ComputedStyle(**value)


def element_spec(tag: str, **kwargs) -> dict:
    """Describe one element; unknown keyword arguments become attributes."""
    spec = {"tag": tag, "attributes": {}}
    for key, value in kwargs.items():
        if key in _ELEMENT_FIELDS:
            spec[key] = value
        elif key == "attrs":
            spec["attributes"].update(value)
        else:
            spec["attributes"][_attribute_name(key)] = value
    return spec


def build_snapshot(*specs: dict, url: str = "https://example.com/", **kwargs) -> Snapshot:
    """Snapshot whose elements are the given element specs in order; `parent` is a position."""
    elements = []
    for index, spec in enumerate(specs):
        elements.append(
            ElementNode(
                index=index,
                tag=spec["tag"],
                attributes=dict(spec["attributes"]),
                text=spec.get("text", ""),
                own_text=spec.get("own_text"),
                style=_style(spec.get("style")) or ComputedStyle(),
                focus_style=_style(spec.get("focus_style")),
                bounding_box=spec.get("box", DEFAULT_BOX),
                parent=spec.get("parent"),
                scroll_width=spec.get("scroll_width"),
                client_width=spec.get("client_width"),
            )
        )
    return Snapshot(url=url, elements=tuple(elements), **kwargs)


def layout(width: int, scroll_width: int | None = None, element_widths=None, height: int = 720) -> Layout:
    return Layout(
        viewport=Viewport(width=width, height=height),
        scroll_width=scroll_width if scroll_width is not None else width,
        client_width=width,
        element_widths=element_widths or {},
    )


@pytest.fixture
def el():
    return element_spec


@pytest.fixture
def page():
    return build_snapshot


@pytest.fixture
def make_layout():
    return layout


@pytest.fixture
def document(el):
    """Skeleton of a well-formed page: html > body > nav + main."""
    return [
        el("html", lang="en"),
        el("body", parent=0),
        el("nav", parent=1),
        el("main", parent=1),
    ]
