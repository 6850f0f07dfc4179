"""Tests for ARIA, duplicate id and status message rules."""

from a11y_audit.rules.aria import (
    check_aria_validity,
    check_clickable_role,
    check_duplicate_ids,
    check_status_messages,
)


def kinds(detections):
    return [d.kind for d in detections]


class TestAriaValidity:
    """Test cases for ARIA roles and attributes."""

    def test_invalid_role(self, el, page):
        """Test a misspelled role token."""
        snap = page(el("div", role="buton"), el("div", role="button"), el("nav", role="navigation"))

        detections = list(check_aria_validity(snap))

        assert kinds(detections) == ["invalid-role"]
        assert '"buton"' in detections[0].message

    def test_fallback_role_list(self, el, page):
        """Test each token of a role list is checked."""
        snap = page(el("div", role="switch checkbox"), el("div", role="switch toggle"))

        assert [d.element.index for d in check_aria_validity(snap)] == [1]

    def test_unknown_aria_attribute(self, el, page):
        """Test an aria-* attribute that does not exist."""
        snap = page(el("button", aria_labeledby="x", text="Go"))

        detections = list(check_aria_validity(snap))

        assert kinds(detections) == ["unknown-attribute"]
        assert "aria-labeledby" in detections[0].message

    def test_state_values(self, el, page):
        """Test boolean and tristate values."""
        snap = page(
            el("button", aria_pressed="mixed", text="Bold"),
            el("button", aria_expanded="yes", text="Menu"),
            el("div", role="checkbox", aria_checked="true"),
            el("div", role="option", aria_selected="mixed"),
        )

        detections = list(check_aria_validity(snap))

        assert [(d.element.index, d.kind) for d in detections] == [(1, "invalid-state"), (3, "invalid-state")]

    def test_state_values_are_case_sensitive(self, el, page):
        """Test state tokens must be lowercase exactly as defined."""
        snap = page(
            el("button", aria_expanded="TRUE", text="Menu"),
            el("div", role="checkbox", aria_checked="Mixed"),
            el("button", aria_pressed=" true", text="Bold"),
        )

        detections = list(check_aria_validity(snap))

        assert [d.element.index for d in detections] == [0, 1, 2]
        assert 'aria-expanded="TRUE"' in detections[0].message


class TestDuplicateIds:
    """Test cases for duplicate ids."""

    def test_one_finding_per_id(self, el, page):
        """Test three elements sharing an id give one finding with count 3."""
        snap = page(
            el("nav", id="nav-1"),
            el("div", id="unique"),
            el("nav", id="nav-1"),
            el("ul", id="nav-1"),
            el("p", id="other"),
        )

        detections = list(check_duplicate_ids(snap))

        assert len(detections) == 1
        assert detections[0].element.index == 0
        assert '"nav-1"' in detections[0].message
        assert "3 elements" in detections[0].message

    def test_unique_ids(self, el, page):
        """Test unique ids are fine."""
        snap = page(el("div", id="a"), el("div", id="b"))

        assert list(check_duplicate_ids(snap)) == []


class TestClickableRole:
    """Test cases for generic elements made interactive."""

    def test_missing_role(self, el, page):
        """Test div/span with onclick or tabindex but no role."""
        snap = page(
            el("div", onclick="go()"),
            el("span", tabindex="0"),
            el("div", onclick="go()", role="button"),
            el("p", onclick="go()"),
        )

        assert [d.element.index for d in check_clickable_role(snap)] == [0, 1]


class TestStatusMessages:
    """Test cases for 4.1.3 status messages."""

    def test_status_container_without_live_region(self, el, page):
        """Test a toast container that is not announced."""
        snap = page(
            el("div", class_="toast toast-success", text="Added to cart"),
            el("div", class_="toast", role="status", text="Added"),
            el("div", class_="alert", aria_live="polite", text="Saved"),
        )

        detections = list(check_status_messages(snap))

        assert [(d.element.index, d.kind) for d in detections] == [(0, "missing-live-region")]

    def test_nested_status_reported_once(self, el, page):
        """Test only the outermost status container is reported."""
        snap = page(
            el("div", class_="notification"),
            el("p", parent=0, class_="notification-message", text="Order placed"),
        )

        assert [d.element.index for d in check_status_messages(snap)] == [0]

    def test_inside_live_region(self, el, page):
        """Test containers inside a live region are announced already."""
        snap = page(
            el("section", role="alert"),
            el("p", parent=0, class_="error-message", text="Card declined"),
        )

        assert list(check_status_messages(snap)) == []

    def test_invalid_live_value(self, el, page):
        """Test aria-live must be off, polite or assertive."""
        snap = page(el("div", aria_live="loud"))

        assert kinds(check_status_messages(snap)) == ["invalid-live-value"]
