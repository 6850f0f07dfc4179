"""Tests for keyboard access, keyboard trap and focus order rules."""

from a11y_audit.models import BoundingBox
from a11y_audit.rules.keyboard import (
    check_focus_order,
    check_keyboard_access,
    check_keyboard_trap,
    first_cycle,
)


def at(y):
    return BoundingBox(x=0, y=y, width=100, height=30)


class TestFirstCycle:
    """Test cases for focus cycle extraction."""

    def test_ends_at_body(self):
        """Test the cycle ends when focus returns to the body."""
        cycle = first_cycle((None, 3, 4, None, 3))

        assert cycle.stops == (3, 4)
        assert cycle.complete is True

    def test_ends_at_repeat(self):
        """Test the cycle ends when an earlier stop is focused again."""
        cycle = first_cycle((3, 4, 5, 3, 4))

        assert cycle.stops == (3, 4, 5)
        assert cycle.complete is True

    def test_consecutive_repeats_collapse(self):
        """Test staying on one element is a single stop."""
        cycle = first_cycle((3, 3, 4))

        assert cycle.stops == (3, 4)
        assert cycle.complete is False


class TestKeyboardAccess:
    """Test cases for 2.1.1 keyboard."""

    def test_negative_tabindex(self, el, page):
        """Test interactive elements removed from the tab order."""
        snap = page(
            el("button", tabindex="-1", text="Add"),
            el("div", tabindex="-1", id="main-content"),
        )

        detections = list(check_keyboard_access(snap))

        assert [(d.element.index, d.kind) for d in detections] == [(0, "negative-tabindex")]

    def test_mouse_only_div(self, el, page):
        """Test clickable generic elements without keyboard support."""
        snap = page(
            el("div", onclick="openMenu()", text="Menu"),
            el("div", onclick="openMenu()", role="button", tabindex="0", text="Menu"),
        )

        assert [d.kind for d in check_keyboard_access(snap)] == ["mouse-only"]

    def test_unreached_element(self, el, page):
        """Test focusable elements skipped by a completed tab cycle."""
        snap = page(
            el("a", href="/", text="Home"),
            el("button", text="Order"),
            el("a", href="/cart", text="Cart"),
            el("button", text="Hidden", box=None),
            focus_sequence=(0, 2, None),
        )

        detections = list(check_keyboard_access(snap))

        assert [(d.element.index, d.kind) for d in detections] == [(1, "unreachable")]

    def test_incomplete_cycle_not_judged(self, el, page):
        """Test nothing is called unreachable before focus cycles back."""
        snap = page(
            el("a", href="/", text="Home"),
            el("button", text="Order"),
            focus_sequence=(0,),
        )

        assert list(check_keyboard_access(snap)) == []


class TestKeyboardTrap:
    """Test cases for 2.1.2 no keyboard trap."""

    def test_trap(self, el, page):
        """Test focus stuck on one element for more than three presses."""
        snap = page(
            el("a", href="/", text="Home"),
            el("iframe"),
            focus_sequence=(0, 1, 1, 1, 1, 1),
        )

        detections = list(check_keyboard_trap(snap))

        assert len(detections) == 1
        assert detections[0].element.index == 1
        assert detections[0].kind == "keyboard-trap"

    def test_short_repeat_is_not_a_trap(self, el, page):
        """Test three consecutive presses on one element are tolerated."""
        snap = page(el("a", href="/"), el("iframe"), focus_sequence=(0, 1, 1, 1, None))

        assert list(check_keyboard_trap(snap)) == []

    def test_body_is_never_a_trap(self, el, page):
        """Test repeated presses that leave focus on the body."""
        snap = page(el("p"), focus_sequence=(None, None, None, None, None))

        assert list(check_keyboard_trap(snap)) == []


class TestFocusOrder:
    """Test cases for 2.4.3 focus order."""

    def test_backwards_jump(self, el, page):
        """Test a jump far up the page between consecutive stops."""
        snap = page(
            el("a", href="/a", box=at(0)),
            el("a", href="/b", box=at(500)),
            el("a", href="/c", box=at(100)),
            el("a", href="/d", box=at(300)),
            el("a", href="/e", box=at(250)),
            focus_sequence=(0, 1, 2, 3, 4, None),
        )

        detections = list(check_focus_order(snap))

        assert [(d.element.index, d.kind) for d in detections] == [(2, "backwards-jump")]

    def test_wrap_around_is_not_a_jump(self, el, page):
        """Test returning to the top after the body resets the comparison."""
        snap = page(
            el("a", href="/a", box=at(0)),
            el("a", href="/b", box=at(900)),
            focus_sequence=(0, 1, None, 0, 1),
        )

        assert list(check_focus_order(snap)) == []

    def test_positive_tabindex_always_flagged(self, el, page):
        """Test tabindex="5" is reported without any focus sequence."""
        snap = page(el("input", tabindex="5"), el("button", tabindex="0"))

        detections = list(check_focus_order(snap))

        assert [(d.element.index, d.kind) for d in detections] == [(0, "positive-tabindex")]
        assert 'tabindex="5"' in detections[0].message
