"""Tests for the accessible-name rules."""

from a11y_audit.rules.names import (
    check_button_name,
    check_form_labels,
    check_generic_link_text,
    check_image_alt,
    check_label_in_name,
    check_link_name,
    check_redundant_alt,
)


class TestImageAlt:
    """Test cases for 1.1.1 image alternatives."""

    def test_missing_alt(self, el, page):
        """Test an image without alt is flagged."""
        snap = page(el("img", src="logo.png"), el("img", src="hero.jpg", alt="Fresh pizza"))

        detections = list(check_image_alt(snap))

        assert len(detections) == 1
        assert detections[0].element.index == 0
        assert "logo.png" in detections[0].message

    def test_decorative_image_passes(self, el, page):
        """Test alt="" and presentational images are not flagged."""
        snap = page(
            el("img", src="divider.png", alt=""),
            el("img", src="spacer.gif", role="presentation"),
        )

        assert list(check_image_alt(snap)) == []

    def test_role_img_needs_a_name(self, el, page):
        """Test role="img" containers need aria-label."""
        snap = page(el("div", role="img"), el("span", role="img", aria_label="Five stars"))

        assert [d.element.index for d in check_image_alt(snap)] == [0]

    def test_redundant_alt(self, el, page):
        """Test alt text announcing itself as an image."""
        snap = page(el("img", alt="Image of a margherita"), el("img", alt="Margherita"))

        detections = list(check_redundant_alt(snap))

        assert [d.element.index for d in detections] == [0]
        assert '"image"' in detections[0].message


class TestLinks:
    """Test cases for 2.4.4 link purpose."""

    def test_empty_link(self, el, page):
        """Test an icon link with no name."""
        snap = page(el("a", href="/cart"), el("i", parent=0, class_="icon-cart"))

        detections = list(check_link_name(snap))

        assert len(detections) == 1
        assert "/cart" in detections[0].message

    def test_named_links_pass(self, el, page):
        """Test text, aria-label and image alt all name a link."""
        snap = page(
            el("a", href="/menu", text="Menu"),
            el("a", href="/cart", aria_label="Cart"),
            el("a", href="/"),
            el("img", parent=2, alt="Home"),
        )

        assert list(check_link_name(snap)) == []

    def test_anchor_without_href_is_not_a_link(self, el, page):
        """Test placeholder anchors are ignored."""
        snap = page(el("a", name="top"))

        assert list(check_link_name(snap)) == []

    def test_generic_text(self, el, page):
        """Test vague link text is flagged case-insensitively."""
        snap = page(
            el("a", href="/a", text="Click Here"),
            el("a", href="/b", text=" read more "),
            el("a", href="/c", text="Read more about our dough"),
        )

        assert [d.element.index for d in check_generic_link_text(snap)] == [0, 1]


class TestButtons:
    """Test cases for 4.1.2 button names."""

    def test_onclick_only_button(self, el, page):
        """Test a button with only an onclick handler has no name."""
        snap = page(el("button", onclick="addToCart()"))

        detections = list(check_button_name(snap))

        assert len(detections) == 1
        assert detections[0].kind == "missing-name"

    def test_named_buttons(self, el, page):
        """Test the usual naming techniques."""
        snap = page(
            el("button", text="Order"),
            el("button", aria_label="Close"),
            el("button", title="Search"),
            el("input", type="submit", value="Send"),
            el("div", role="button", text="Toggle"),
        )

        assert list(check_button_name(snap)) == []

    def test_blank_value_input(self, el, page):
        """Test an input button with a blank value is unnamed."""
        snap = page(el("input", type="button", value="  "))

        assert len(list(check_button_name(snap))) == 1


class TestFormLabels:
    """Test cases for 1.3.1 form labels."""

    def test_unlabelled_controls(self, el, page):
        """Test controls without any label source."""
        snap = page(
            el("input", type="text", placeholder="Your name"),
            el("select"),
            el("textarea", aria_label="Comments"),
            el("input", type="hidden"),
            el("input", type="submit"),
        )

        assert [d.element.index for d in check_form_labels(snap)] == [0, 1]

    def test_labelled_control(self, el, page):
        """Test label[for] satisfies the rule."""
        snap = page(el("label", for_="q", text="Search"), el("input", id="q", type="search"))

        assert list(check_form_labels(snap)) == []


class TestLabelInName:
    """Test cases for 2.5.3 label in name."""

    def test_mismatch(self, el, page):
        """Test an aria-label that drops the visible text."""
        snap = page(
            el("button", text="Send", aria_label="Submit form"),
            el("button", text="Send", aria_label="Send message"),
        )

        assert [d.element.index for d in check_label_in_name(snap)] == [0]

    def test_non_interactive_ignored(self, el, page):
        """Test labelled landmarks are not checked."""
        snap = page(el("nav", text="Home Menu", aria_label="Primary"))

        assert list(check_label_in_name(snap)) == []
