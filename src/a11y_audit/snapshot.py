"""Immutable, queryable view of one captured page."""

from dataclasses import dataclass, field
from functools import cached_property
from typing import Any, Callable, Iterable, Iterator, Mapping, Sequence

import structlog

from .exceptions import SnapshotError
from .models import (
    BoundingBox,
    ComputedStyle,
    ElementNode,
    ElementRef,
    Layout,
    Viewport,
)

logger = structlog.get_logger()

DEFAULT_VIEWPORT = Viewport(width=1280, height=720)

# Elements that can be associated with a <label>
LABELABLE_TAGS = frozenset({"input", "select", "textarea", "meter", "output", "progress", "button"})

INTERACTIVE_ROLES = frozenset({
    "button", "checkbox", "combobox", "link", "listbox", "menuitem", "menuitemcheckbox",
    "menuitemradio", "option", "radio", "scrollbar", "searchbox", "slider", "spinbutton",
    "switch", "tab", "textbox", "treeitem",
})

# Roles whose accessible name may come from their content
NAME_FROM_CONTENT_ROLES = frozenset({"button", "link", "menuitem", "tab"})

BUTTON_INPUT_TYPES = frozenset({"button", "submit", "reset"})


class _Absent:
    """Marker for "no accessible name source applies"."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT = _Absent()


class ElementView:
    """Restartable, lazily filtered sequence of a snapshot's elements."""

    def __init__(self, elements: Sequence[ElementNode], predicate: Callable[[ElementNode], bool]):
        self._elements = elements
        self._predicate = predicate

    def __iter__(self) -> Iterator[ElementNode]:
        return (element for element in self._elements if self._predicate(element))

    def first(self) -> ElementNode | None:
        return next(iter(self), None)

    def count(self) -> int:
        return sum(1 for _ in self)


def is_button(element: ElementNode) -> bool:
    if element.tag == "button" or element.role == "button":
        return True
    return element.tag == "input" and (element.attr("type") or "").lower() in BUTTON_INPUT_TYPES


def is_link(element: ElementNode) -> bool:
    return (element.tag == "a" and element.has_attr("href")) or element.role == "link"


@dataclass(frozen=True)
class Snapshot:
    """One page's accessibility-relevant state at a point in time."""

    url: str
    elements: tuple[ElementNode, ...]
    focus_sequence: tuple[int | None, ...] = ()
    viewport: Viewport = DEFAULT_VIEWPORT
    title: str | None = None
    layout: Layout | None = None
    probes: tuple[Layout, ...] = field(default=())

    def __post_init__(self) -> None:
        for position, element in enumerate(self.elements):
            if element.index != position:
                raise SnapshotError(
                    f"Element at position {position} carries index {element.index}"
                )

    # Indexes -----------------------------------------------------------

    @cached_property
    def _children(self) -> dict[int, list[int]]:
        children: dict[int, list[int]] = {}
        for element in self.elements:
            if element.parent is not None:
                children.setdefault(element.parent, []).append(element.index)
        return children

    @cached_property
    def _ids(self) -> dict[str, list[int]]:
        ids: dict[str, list[int]] = {}
        for element in self.elements:
            if element.element_id:
                ids.setdefault(element.element_id, []).append(element.index)
        return ids

    @cached_property
    def _label_targets(self) -> dict[str, list[int]]:
        targets: dict[str, list[int]] = {}
        for element in self.elements:
            if element.tag == "label" and element.attr("for"):
                targets.setdefault(element.attr("for"), []).append(element.index)
        return targets

    # Queries -----------------------------------------------------------

    def __getitem__(self, index: int) -> ElementNode:
        return self.elements[index]

    def __len__(self) -> int:
        return len(self.elements)

    def elements_matching(self, predicate: Callable[[ElementNode], bool]) -> ElementView:
        """Elements satisfying the predicate, in document order."""
        return ElementView(self.elements, predicate)

    def by_tag(self, *tags: str) -> ElementView:
        wanted = frozenset(tags)
        return self.elements_matching(lambda e: e.tag in wanted)

    def element_by_id(self, element_id: str) -> ElementNode | None:
        matches = self._ids.get(element_id)
        return self.elements[matches[0]] if matches else None

    def elements_by_id(self) -> dict[str, list[ElementNode]]:
        return {key: [self.elements[i] for i in indices] for key, indices in self._ids.items()}

    @property
    def root(self) -> ElementNode | None:
        html = self.by_tag("html").first()
        if html is not None:
            return html
        return self.elements[0] if self.elements else None

    # Traversal ---------------------------------------------------------

    def parent_of(self, element: ElementNode) -> ElementNode | None:
        if element.parent is None or not 0 <= element.parent < len(self.elements):
            return None
        return self.elements[element.parent]

    def children_of(self, element: ElementNode) -> list[ElementNode]:
        return [self.elements[i] for i in self._children.get(element.index, [])]

    def ancestors_of(self, element: ElementNode) -> Iterator[ElementNode]:
        """Ancestors from the parent up to the root."""
        seen = {element.index}
        current = self.parent_of(element)
        while current is not None and current.index not in seen:
            seen.add(current.index)
            yield current
            current = self.parent_of(current)

    def descendants_of(self, element: ElementNode) -> Iterator[ElementNode]:
        """Descendants in document order."""
        stack = list(reversed(self._children.get(element.index, [])))
        seen = {element.index}
        while stack:
            index = stack.pop()
            if index in seen:
                continue
            seen.add(index)
            yield self.elements[index]
            stack.extend(reversed(self._children.get(index, [])))

    def has_ancestor(self, element: ElementNode, predicate: Callable[[ElementNode], bool]) -> bool:
        return any(predicate(a) for a in self.ancestors_of(element))

    # Element classification ---------------------------------------------

    def is_visible(self, element: ElementNode) -> bool:
        box = element.bounding_box
        if box is None or (box.width <= 0 and box.height <= 0):
            return False
        if element.style.display == "none" or element.style.visibility in ("hidden", "collapse"):
            return False
        return not any(a.style.display == "none" for a in self.ancestors_of(element))

    def is_interactive(self, element: ElementNode) -> bool:
        """Interactive by semantics alone; tabindex does not count here."""
        tag = element.tag
        if tag in ("a", "area") and element.has_attr("href"):
            return True
        if tag in ("button", "select", "textarea", "summary"):
            return True
        if tag == "input":
            return (element.attr("type") or "text").lower() != "hidden"
        if element.role in INTERACTIVE_ROLES:
            return True
        editable = element.attr("contenteditable")
        return editable is not None and editable.lower() in ("", "true")

    def is_focusable(self, element: ElementNode) -> bool:
        """Reachable with Tab: interactive or explicitly tabbable, not disabled."""
        if element.has_attr("disabled"):
            return False
        tabindex = element.tabindex
        if tabindex is not None:
            return tabindex >= 0
        return self.is_interactive(element)

    def text_bearing(self, element: ElementNode) -> str:
        """Text painted by this element itself rather than by its children."""
        if element.own_text is not None:
            return element.own_text.strip()
        if self._children.get(element.index):
            return ""
        return element.text.strip()

    # Accessible names --------------------------------------------------

    def _labelledby_name(self, element: ElementNode) -> str | None:
        raw = element.attr("aria-labelledby")
        if not raw:
            return None
        parts = []
        for ref in raw.split():
            target = self.element_by_id(ref)
            if target is None:
                continue
            text = (target.attr("aria-label") or target.text).strip()
            if text:
                parts.append(text)
        return " ".join(parts) or None

    def _native_label(self, element: ElementNode) -> str | None:
        if element.tag not in LABELABLE_TAGS:
            return None
        if element.element_id:
            texts = [
                self.elements[i].text.strip()
                for i in self._label_targets.get(element.element_id, [])
            ]
            text = " ".join(t for t in texts if t)
            if text:
                return text
        for ancestor in self.ancestors_of(element):
            if ancestor.tag == "label":
                return ancestor.text.strip() or None
        return None

    def _content_name(self, element: ElementNode) -> str | None:
        if element.tag == "input":
            return (element.attr("value") or "").strip() or None
        text = element.text.strip()
        if text:
            return text
        alts = [
            d.attr("alt").strip()
            for d in self.descendants_of(element)
            if d.tag == "img" and d.attr("alt") and d.attr("alt").strip()
        ]
        return " ".join(alts) or None

    def resolve_accessible_name(self, element: ElementNode) -> "str | _Absent":
        """Best-effort accessible name, or ABSENT when no source applies.

        Sources are tried in order: aria-labelledby, aria-label, native
        label association, title, img alt (an empty alt is a present, empty
        name), and for buttons and links their visible content.
        """
        name = self._labelledby_name(element)
        if name:
            return name

        label = (element.attr("aria-label") or "").strip()
        if label:
            return label

        name = self._native_label(element)
        if name:
            return name

        title = (element.attr("title") or "").strip()
        if title:
            return title

        if element.tag == "img" and element.has_attr("alt"):
            return element.attr("alt").strip()
        if element.tag == "input" and (element.attr("type") or "").lower() == "image":
            alt = (element.attr("alt") or "").strip()
            if alt:
                return alt

        if is_button(element) or is_link(element) or element.role in NAME_FROM_CONTENT_ROLES:
            name = self._content_name(element)
            if name:
                return name

        return ABSENT

    # Geometry ----------------------------------------------------------

    def is_within_viewport(self, element: ElementNode, viewport: Viewport | None = None) -> bool:
        """Horizontal containment of the element's box in the viewport."""
        box = element.bounding_box
        if box is None:
            return False
        viewport = viewport or self.viewport
        return box.x >= 0 and box.right <= viewport.width

    def overflows_container(self, element: ElementNode, layout: Layout | None = None) -> bool:
        """Content wider than the element's box, measured in the given layout."""
        widths = layout.element_widths.get(element.index) if layout else None
        if widths is None:
            if layout is not None and layout is not self.layout:
                return False
            # Element fields were measured at the base viewport
            widths = (element.scroll_width, element.client_width)
        scroll_width, client_width = widths
        if scroll_width is None or client_width is None:
            return False
        return scroll_width > client_width

    def bounding_box_area(self, element: ElementNode) -> float | None:
        return element.bounding_box.area if element.bounding_box else None

    def layout_at(self, width: int) -> Layout | None:
        """Layout measured at the given viewport width, if one was captured."""
        if self.layout is not None and self.layout.viewport.width == width:
            return self.layout
        for probe in self.probes:
            if probe.viewport.width == width:
                return probe
        return None

    # References --------------------------------------------------------

    def selector_for(self, element: ElementNode) -> str:
        """CSS selector path: stops at the nearest ancestor carrying an id."""
        path = []
        current: ElementNode | None = element
        while current is not None:
            selector = current.tag
            if current.element_id:
                path.append(f"{selector}#{current.element_id}")
                break
            parent = self.parent_of(current)
            if parent is not None:
                same_tag = [c for c in self.children_of(parent) if c.tag == current.tag]
                nth = next(
                    (i for i, c in enumerate(same_tag, start=1) if c.index == current.index), 1
                )
                if nth != 1:
                    selector += f":nth-of-type({nth})"
            path.append(selector)
            current = parent
        return " > ".join(reversed(path))

    def ref(self, element: ElementNode) -> ElementRef:
        return ElementRef(url=self.url, index=element.index, selector=self.selector_for(element))

    # Serialization -----------------------------------------------------

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Snapshot":
        """Build a snapshot from the JSON payload produced by the capture script."""
        if not isinstance(payload, Mapping):
            raise SnapshotError("Snapshot payload must be a mapping")

        raw_elements = payload.get("elements")
        if not isinstance(raw_elements, list):
            raise SnapshotError("Snapshot payload is missing an 'elements' list")

        count = len(raw_elements)
        elements = []
        for index, raw in enumerate(raw_elements):
            if not isinstance(raw, Mapping) or not isinstance(raw.get("tag"), str):
                raise SnapshotError(f"Element {index} has no tag")
            elements.append(_element_from_dict(index, raw, count))

        focus_sequence = tuple(
            item if isinstance(item, int) and 0 <= item < count else None
            for item in payload.get("focusSequence") or ()
        )

        layout = _layout_from_dict(payload.get("layout"))
        probes = tuple(
            probe
            for probe in (_layout_from_dict(p) for p in payload.get("probes") or ())
            if probe is not None
        )

        snapshot = cls(
            url=str(payload.get("url", "")),
            elements=tuple(elements),
            focus_sequence=focus_sequence,
            viewport=_viewport_from_dict(payload.get("viewport")) or DEFAULT_VIEWPORT,
            title=payload.get("title"),
            layout=layout,
            probes=probes,
        )
        logger.debug("Snapshot loaded", url=snapshot.url, elements=count, probes=len(probes))
        return snapshot

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "title": self.title,
            "viewport": _viewport_to_dict(self.viewport),
            "elements": [_element_to_dict(e) for e in self.elements],
            "focusSequence": list(self.focus_sequence),
            "layout": _layout_to_dict(self.layout) if self.layout else None,
            "probes": [_layout_to_dict(p) for p in self.probes],
        }


# Payload helpers ---------------------------------------------------------

_STYLE_KEYS = {
    "color": "color",
    "backgroundColor": "background_color",
    "fontSize": "font_size",
    "fontWeight": "font_weight",
    "outlineStyle": "outline_style",
    "outlineWidth": "outline_width",
    "outlineColor": "outline_color",
    "boxShadow": "box_shadow",
    "borderColor": "border_color",
    "borderWidth": "border_width",
    "display": "display",
    "visibility": "visibility",
    "overflow": "overflow",
}
_PX_FIELDS = {"font_size", "outline_width", "border_width"}


def _px(value: Any) -> float | None:
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        text = value.strip().lower().removesuffix("px")
        try:
            return float(text)
        except ValueError:
            return None
    return None


def _weight(value: Any) -> int | None:
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text == "bold":
            return 700
        if text == "normal":
            return 400
        try:
            return int(float(text))
        except ValueError:
            return None
    return None


def _int_or_none(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    return None


def _style_from_dict(raw: Any) -> ComputedStyle | None:
    if not isinstance(raw, Mapping):
        return None
    values: dict[str, Any] = {}
    for key, name in _STYLE_KEYS.items():
        if key not in raw or raw[key] is None:
            continue
        if name in _PX_FIELDS:
            values[name] = _px(raw[key])
        elif name == "font_weight":
            values[name] = _weight(raw[key])
        else:
            values[name] = str(raw[key])
    return ComputedStyle(**values)


def _style_to_dict(style: ComputedStyle) -> dict[str, Any]:
    return {
        key: getattr(style, name)
        for key, name in _STYLE_KEYS.items()
        if getattr(style, name) is not None
    }


def _box_from_dict(raw: Any) -> BoundingBox | None:
    if not isinstance(raw, Mapping):
        return None
    try:
        return BoundingBox(
            x=float(raw["x"]),
            y=float(raw["y"]),
            width=float(raw["width"]),
            height=float(raw["height"]),
        )
    except (KeyError, TypeError, ValueError):
        return None


def _viewport_from_dict(raw: Any) -> Viewport | None:
    if not isinstance(raw, Mapping):
        return None
    width, height = _int_or_none(raw.get("width")), _int_or_none(raw.get("height"))
    if width is None or height is None:
        return None
    return Viewport(width=width, height=height)


def _viewport_to_dict(viewport: Viewport) -> dict[str, int]:
    return {"width": viewport.width, "height": viewport.height}


def _layout_from_dict(raw: Any) -> Layout | None:
    if not isinstance(raw, Mapping):
        return None
    viewport = _viewport_from_dict(raw.get("viewport"))
    scroll_width = _int_or_none(raw.get("scrollWidth"))
    client_width = _int_or_none(raw.get("clientWidth"))
    if viewport is None or scroll_width is None or client_width is None:
        return None

    widths: dict[int, tuple[int, int]] = {}
    for key, pair in (raw.get("elementWidths") or {}).items():
        try:
            widths[int(key)] = (int(pair[0]), int(pair[1]))
        except (TypeError, ValueError, IndexError):
            continue
    return Layout(
        viewport=viewport,
        scroll_width=scroll_width,
        client_width=client_width,
        element_widths=widths,
    )


def _layout_to_dict(layout: Layout) -> dict[str, Any]:
    return {
        "viewport": _viewport_to_dict(layout.viewport),
        "scrollWidth": layout.scroll_width,
        "clientWidth": layout.client_width,
        "elementWidths": {str(k): list(v) for k, v in layout.element_widths.items()},
    }


def _element_from_dict(index: int, raw: Mapping[str, Any], count: int) -> ElementNode:
    attributes = raw.get("attributes") or {}
    if not isinstance(attributes, Mapping):
        attributes = {}

    parent = raw.get("parent")
    if not isinstance(parent, int) or isinstance(parent, bool) or not 0 <= parent < count:
        parent = None

    own_text = raw.get("ownText")
    return ElementNode(
        index=index,
        tag=raw["tag"].lower(),
        attributes={str(k).lower(): "" if v is None else str(v) for k, v in attributes.items()},
        text=str(raw.get("text") or "").strip(),
        own_text=str(own_text) if own_text is not None else None,
        style=_style_from_dict(raw.get("style")) or ComputedStyle(),
        focus_style=_style_from_dict(raw.get("focusStyle")),
        bounding_box=_box_from_dict(raw.get("boundingBox")),
        parent=parent,
        scroll_width=_int_or_none(raw.get("scrollWidth")),
        client_width=_int_or_none(raw.get("clientWidth")),
    )


def _element_to_dict(element: ElementNode) -> dict[str, Any]:
    box = element.bounding_box
    return {
        "tag": element.tag,
        "attributes": dict(element.attributes),
        "text": element.text,
        "ownText": element.own_text,
        "style": _style_to_dict(element.style),
        "focusStyle": _style_to_dict(element.focus_style) if element.focus_style else None,
        "boundingBox": (
            {"x": box.x, "y": box.y, "width": box.width, "height": box.height} if box else None
        ),
        "parent": element.parent,
        "scrollWidth": element.scroll_width,
        "clientWidth": element.client_width,
    }


def build_snapshots(payloads: Iterable[Mapping[str, Any]]) -> list[Snapshot]:
    """Load several payloads, preserving their (visitation) order."""
    return [Snapshot.from_dict(p) for p in payloads]
