"""Tests for snapshot capture against a scripted page double."""

import asyncio
import copy

import pytest
from playwright.async_api import Error as PlaywrightError

from a11y_audit.capture import (
    ACTIVE_ELEMENT_SCRIPT,
    CAPTURE_SCRIPT,
    CLEANUP_SCRIPT,
    LAYOUT_SCRIPT,
    capture_snapshot,
)
from a11y_audit.exceptions import SnapshotError
from a11y_audit.models import Viewport

PAYLOAD = {
    "url": "https://example.com/",
    "title": "Pizza Palace",
    "viewport": {"width": 1280, "height": 720},
    "elements": [
        {"tag": "html", "attributes": {"lang": "en"}},
        {"tag": "a", "attributes": {"href": "/"}, "text": "Home", "parent": 0},
        {"tag": "button", "attributes": {}, "text": "Order", "parent": 0},
    ],
}

FOCUS_STYLE = {"outlineStyle": "solid", "outlineWidth": 2, "outlineColor": "rgb(0, 0, 255)", "boxShadow": "none"}


class FakeKeyboard:
    def __init__(self):
        self.presses = []

    async def press(self, key):
        self.presses.append(key)


class FakePage:
    """Answers the capture scripts from canned data."""

    def __init__(self, focus_stops, fail=False, fail_probe=False):
        self.url = PAYLOAD["url"]
        self.keyboard = FakeKeyboard()
        self.viewport = dict(PAYLOAD["viewport"])
        self.viewport_changes = []
        self._focus_stops = list(focus_stops)
        self._fail = fail
        self._fail_probe = fail_probe
        self.cleaned = False

    async def evaluate(self, script, arg=None):
        if self._fail:
            raise PlaywrightError("Execution context was destroyed")
        if script == CAPTURE_SCRIPT:
            payload = copy.deepcopy(PAYLOAD)
            payload["viewport"] = dict(self.viewport)
            return payload
        if script == CLEANUP_SCRIPT:
            self.cleaned = True
            return None
        if script == LAYOUT_SCRIPT:
            width = self.viewport["width"]
            if self._fail_probe and width < PAYLOAD["viewport"]["width"]:
                raise PlaywrightError("Target page, context or browser has been closed")
            return {
                "viewport": dict(self.viewport),
                "scrollWidth": max(width, 400),
                "clientWidth": width,
                "elementWidths": {},
            }
        if script == ACTIVE_ELEMENT_SCRIPT:
            index = self._focus_stops.pop(0) if self._focus_stops else None
            return None if index is None else {"index": index, "style": FOCUS_STYLE}
        return None

    async def set_viewport_size(self, size):
        self.viewport = dict(size)
        self.viewport_changes.append(dict(size))

    async def wait_for_timeout(self, timeout):
        return None


class TestCaptureSnapshot:
    """Test cases for capture_snapshot."""

    def test_capture(self):
        """Test elements, focus sequence and layout probes are captured."""
        page = FakePage([1, 2, None])

        snapshot = asyncio.run(capture_snapshot(page))

        assert len(snapshot) == 3
        assert snapshot.title == "Pizza Palace"
        assert snapshot.focus_sequence == (1, 2, None)
        assert page.keyboard.presses == ["Tab", "Tab", "Tab"]
        assert snapshot[1].focus_style.outline_style == "solid"
        assert snapshot[0].focus_style is None
        assert snapshot.layout.scroll_width == 1280
        assert snapshot.layout_at(320).scroll_width == 400
        assert snapshot.layout_at(640) is not None
        assert page.viewport == {"width": 1280, "height": 720}
        assert page.cleaned is True

    def test_stops_when_focus_cycles(self):
        """Test tabbing stops once the first stop is focused again."""
        page = FakePage([1, 2, 1, 2, 1])

        snapshot = asyncio.run(capture_snapshot(page))

        assert snapshot.focus_sequence == (1, 2, 1)

    def test_press_limit(self):
        """Test a trapped focus stops at the press limit."""
        page = FakePage([2] * 20)

        snapshot = asyncio.run(capture_snapshot(page, max_tab_presses=6))

        assert snapshot.focus_sequence == (2,) * 6

    def test_requested_viewport(self):
        """Test the page is resized before capturing."""
        page = FakePage([None])

        snapshot = asyncio.run(capture_snapshot(page, viewport=Viewport(800, 600)))

        assert page.viewport_changes[0] == {"width": 800, "height": 600}
        assert snapshot.viewport == Viewport(800, 600)
        assert snapshot.layout_at(400) is not None

    def test_browser_error(self):
        """Test Playwright failures surface as SnapshotError."""
        page = FakePage([], fail=True)

        with pytest.raises(SnapshotError):
            asyncio.run(capture_snapshot(page))

    def test_failed_probe_restores_page(self):
        """Test the viewport and index attributes are restored when a probe fails."""
        page = FakePage([1, None], fail_probe=True)

        with pytest.raises(SnapshotError):
            asyncio.run(capture_snapshot(page))

        assert page.viewport == {"width": 1280, "height": 720}
        assert page.cleaned is True
