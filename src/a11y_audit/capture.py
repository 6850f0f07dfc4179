"""Snapshot capture from a live Playwright page.

The caller owns the browser and the page. Layout probes resize the viewport
and the capture tags elements with an index attribute; both are undone before
returning.
"""

from typing import Any

import structlog
from playwright.async_api import Error as PlaywrightError, Page

from .config import settings
from .exceptions import SnapshotError
from .models import Viewport
from .snapshot import Snapshot

logger = structlog.get_logger()

INDEX_ATTRIBUTE = "data-a11y-index"

# Serializes the DOM into the payload understood by Snapshot.from_dict
CAPTURE_SCRIPT = """
(indexAttribute) => {
    const all = Array.from(document.querySelectorAll('*'));
    const position = new Map(all.map((el, i) => [el, i]));
    const px = (value) => {
        const n = parseFloat(value);
        return Number.isNaN(n) ? null : n;
    };

    const elements = all.map((el, i) => {
        el.setAttribute(indexAttribute, String(i));
        const attributes = {};
        for (const attr of el.attributes) {
            if (attr.name !== indexAttribute) attributes[attr.name] = attr.value;
        }
        const own = Array.from(el.childNodes)
            .filter((n) => n.nodeType === Node.TEXT_NODE)
            .map((n) => n.textContent)
            .join('')
            .trim();
        const cs = window.getComputedStyle(el);
        const rect = el.getBoundingClientRect();
        const parent = el.parentElement ? position.get(el.parentElement) : null;
        return {
            tag: el.tagName.toLowerCase(),
            attributes,
            text: ((el.innerText ?? el.textContent) || '').trim().slice(0, 500),
            ownText: own,
            style: {
                color: cs.color,
                backgroundColor: cs.backgroundColor,
                fontSize: px(cs.fontSize),
                fontWeight: cs.fontWeight,
                outlineStyle: cs.outlineStyle,
                outlineWidth: px(cs.outlineWidth),
                outlineColor: cs.outlineColor,
                boxShadow: cs.boxShadow,
                borderColor: cs.borderTopColor,
                borderWidth: px(cs.borderTopWidth),
                display: cs.display,
                visibility: cs.visibility,
                overflow: cs.overflowX,
            },
            boundingBox: {x: rect.x, y: rect.y, width: rect.width, height: rect.height},
            parent: parent === undefined ? null : parent,
            scrollWidth: el.scrollWidth,
            clientWidth: el.clientWidth,
        };
    });

    return {
        url: window.location.href,
        title: document.title,
        viewport: {width: window.innerWidth, height: window.innerHeight},
        elements,
    };
}
"""

LAYOUT_SCRIPT = """
(indexAttribute) => {
    const root = document.documentElement;
    const elementWidths = {};
    for (const el of document.querySelectorAll(`[${indexAttribute}]`)) {
        if (window.getComputedStyle(el).overflowX === 'hidden') {
            elementWidths[el.getAttribute(indexAttribute)] = [el.scrollWidth, el.clientWidth];
        }
    }
    return {
        viewport: {width: window.innerWidth, height: window.innerHeight},
        scrollWidth: root.scrollWidth,
        clientWidth: root.clientWidth,
        elementWidths,
    };
}
"""

ACTIVE_ELEMENT_SCRIPT = """
(indexAttribute) => {
    const el = document.activeElement;
    if (!el || el === document.body || el === document.documentElement) return null;
    const index = el.getAttribute(indexAttribute);
    if (index === null) return null;
    const cs = window.getComputedStyle(el);
    return {
        index: Number(index),
        style: {
            outlineStyle: cs.outlineStyle,
            outlineWidth: parseFloat(cs.outlineWidth) || 0,
            outlineColor: cs.outlineColor,
            boxShadow: cs.boxShadow,
        },
    };
}
"""


CLEANUP_SCRIPT = """
(indexAttribute) => {
    for (const el of document.querySelectorAll(`[${indexAttribute}]`)) {
        el.removeAttribute(indexAttribute);
    }
}
"""


async def _focus_sequence(page: Page, max_presses: int) -> tuple[list[int | None], dict[int, dict]]:
    """Press Tab until focus cycles back, recording the focused element index."""
    sequence: list[int | None] = []
    focus_styles: dict[int, dict] = {}

    await page.evaluate("() => { if (document.activeElement) document.activeElement.blur(); }")
    for _ in range(max_presses):
        await page.keyboard.press("Tab")
        active = await page.evaluate(ACTIVE_ELEMENT_SCRIPT, INDEX_ATTRIBUTE)
        index = active["index"] if active else None
        sequence.append(index)
        if index is None:
            if any(i is not None for i in sequence[:-1]):
                break
            continue
        focus_styles.setdefault(index, active["style"])

        stops = [i for i in sequence[:-1] if i is not None]
        if stops and index == stops[0] and sequence[-2] != index:
            break

    return sequence, focus_styles


async def _layout_probe(page: Page, width: int, height: int) -> dict[str, Any]:
    await page.set_viewport_size({"width": width, "height": height})
    await page.wait_for_timeout(100)
    return await page.evaluate(LAYOUT_SCRIPT, INDEX_ATTRIBUTE)


async def _restore_page(page: Page, viewport: dict[str, int] | None) -> None:
    """Put the caller's viewport back and drop the index attributes."""
    try:
        if viewport is not None:
            await page.set_viewport_size(viewport)
        await page.evaluate(CLEANUP_SCRIPT, INDEX_ATTRIBUTE)
    except PlaywrightError as e:
        logger.warning("Could not restore page after capture", url=page.url, error=str(e))


async def capture_snapshot(
    page: Page,
    viewport: Viewport | None = None,
    max_tab_presses: int | None = None,
) -> Snapshot:
    """Capture the current state of an already loaded page.

    Args:
        page: Playwright page, navigated and settled by the caller.
        viewport: Resize to this viewport before capturing.
        max_tab_presses: Upper bound on simulated Tab presses.

    Returns:
        Snapshot with focus sequence, base layout, and probes at the reflow
        width and at half the capture width.
    """
    max_presses = max_tab_presses or settings.max_tab_presses
    if viewport is not None:
        await page.set_viewport_size({"width": viewport.width, "height": viewport.height})

    base = None
    resized = False
    probes = []
    try:
        payload = await page.evaluate(CAPTURE_SCRIPT, INDEX_ATTRIBUTE)
        payload["layout"] = await page.evaluate(LAYOUT_SCRIPT, INDEX_ATTRIBUTE)

        sequence, focus_styles = await _focus_sequence(page, max_presses)
        payload["focusSequence"] = sequence
        for index, style in focus_styles.items():
            if 0 <= index < len(payload["elements"]):
                payload["elements"][index]["focusStyle"] = style

        base = payload["viewport"]
        sizes = [
            (settings.reflow_width, settings.reflow_height),
            (base["width"] // 2, base["height"] // 2),
        ]
        for width, height in sizes:
            if width < base["width"] and all(p["viewport"]["width"] != width for p in probes):
                resized = True
                probes.append(await _layout_probe(page, width, height))
        payload["probes"] = probes
    except PlaywrightError as e:
        logger.error("Snapshot capture failed", url=page.url, error=str(e))
        raise SnapshotError(f"Could not capture {page.url}: {e}") from e
    finally:
        await _restore_page(page, base if resized else None)

    snapshot = Snapshot.from_dict(payload)
    logger.info(
        "Snapshot captured",
        url=snapshot.url,
        elements=len(snapshot),
        tab_presses=len(sequence),
        probes=len(probes),
    )
    return snapshot
