"""Tests for rules and the rule registry."""

import pytest

from a11y_audit.exceptions import AuditError, DuplicateRuleError
from a11y_audit.models import Level, Severity
from a11y_audit.registry import Detection, Rule, RuleRegistry
from a11y_audit.rules import ALL_RULES, default_registry


def make_rule(criterion_id="1.1.1", variant="test", level=Level.A, check=None, severity=Severity.MEDIUM, **kwargs):
    return Rule(
        criterion_id=criterion_id,
        variant=variant,
        level=level,
        severity=severity,
        description="Test rule",
        remediation="Fix it",
        check=check or (lambda snapshot: []),
        **kwargs,
    )


class TestRule:
    """Test cases for Rule."""

    def test_principle_and_tags(self):
        """Test derived principle and conformance tags."""
        rule = make_rule("2.4.7", level=Level.AA, tags=frozenset({"focus"}))

        assert rule.key == ("2.4.7", "test")
        assert rule.principle == "operable"
        assert rule.all_tags == {"focus", "operable", "wcag2aa"}

    def test_evaluate_stamps_findings(self, el, page):
        """Test detections become findings with the rule's severity."""
        snap = page(el("img", src="logo.png"))
        rule = make_rule(
            severity=Severity.HIGH,
            check=lambda s: [Detection(s[0], "No alt"), Detection(None, "Page issue", kind="page")],
        )

        findings = rule.evaluate(snap)

        assert [f.severity for f in findings] == [Severity.HIGH, Severity.HIGH]
        assert findings[0].element_ref.index == 0
        assert findings[0].kind == "test"
        assert findings[0].remediation == "Fix it"
        assert findings[0].url == "https://example.com/"
        assert findings[1].is_page_level is True
        assert findings[1].kind == "page"

    def test_cross_page_needs_two_snapshots(self, el, page):
        """Test cross-page rules do not apply to a single page."""
        rule = make_rule(cross_page=True)
        snap = page(el("html"))

        assert rule.is_applicable([snap]) is False
        assert rule.is_applicable([snap, snap]) is True

    def test_applies_to(self, el, page):
        """Test the applicability predicate gates evaluation."""
        rule = make_rule(applies_to=lambda s: len(s) > 1)

        assert rule.is_applicable(page(el("html"))) is False
        assert rule.is_applicable(page(el("html"), el("body", parent=0))) is True


class TestRuleRegistry:
    """Test cases for RuleRegistry."""

    def test_duplicate_registration(self):
        """Test the same criterion and variant cannot be registered twice."""
        registry = RuleRegistry([make_rule()])

        with pytest.raises(DuplicateRuleError) as exc_info:
            registry.register(make_rule())

        assert isinstance(exc_info.value, AuditError)
        assert "1.1.1/test" in str(exc_info.value)
        assert len(registry) == 1

    def test_variants_share_a_criterion(self):
        """Test distinct variants of one criterion coexist."""
        registry = RuleRegistry([make_rule(variant="a"), make_rule(variant="b")])

        assert ("1.1.1", "a") in registry
        assert registry.get("1.1.1", "b").variant == "b"
        assert registry.get("1.1.1", "c") is None

    def test_rules_for_level(self):
        """Test level filtering keeps registration order."""
        registry = RuleRegistry([
            make_rule("1.1.1", "a", Level.A),
            make_rule("1.4.3", "b", Level.AA),
            make_rule("2.1.1", "c", Level.A),
        ])

        assert [r.variant for r in registry.rules_for("A")] == ["a", "c"]
        assert [r.variant for r in registry.rules_for(Level.AA)] == ["b"]
        assert [r.variant for r in registry.rules_for(["a", "aa"])] == ["a", "b", "c"]
        assert [r.variant for r in registry.rules_for("both")] == ["a", "b", "c"]
        assert [r.variant for r in registry.rules_for()] == ["a", "b", "c"]

    def test_rules_for_tags_and_criteria(self):
        """Test tag and criterion filters combine."""
        registry = RuleRegistry([
            make_rule("1.1.1", "a"),
            make_rule("2.1.1", "b"),
            make_rule("4.1.2", "c", tags=frozenset({"aria"})),
        ])

        assert [r.variant for r in registry.rules_for(tags=["Perceivable", "aria"])] == ["a", "c"]
        assert [r.variant for r in registry.rules_for(criteria=["2.1.1"])] == ["b"]
        assert registry.rules_for(tags=["robust"], criteria=["1.1.1"]) == []


class TestBuiltinRules:
    """Test cases for the built-in rule set."""

    def test_default_registry_is_fresh(self):
        """Test each call builds an independent registry."""
        first = default_registry()
        second = default_registry()

        first.register(make_rule("9.9.9"))

        assert len(first) == len(second) + 1

    def test_keys_are_unique(self):
        """Test no built-in rule repeats a key."""
        keys = [rule.key for rule in ALL_RULES]

        assert len(keys) == len(set(keys))

    def test_registered_by_criterion(self):
        """Test built-in rules are ordered by criterion id."""
        order = [tuple(int(p) for p in r.criterion_id.split(".")) for r in ALL_RULES]

        assert order == sorted(order)

    def test_covers_all_criteria(self):
        """Test every audited success criterion has a rule."""
        criteria = {rule.criterion_id for rule in ALL_RULES}

        assert criteria == {
            "1.1.1", "1.3.1", "1.3.2", "1.3.5", "1.4.1", "1.4.3", "1.4.4", "1.4.10", "1.4.11",
            "2.1.1", "2.1.2", "2.4.1", "2.4.2", "2.4.3", "2.4.4", "2.4.5", "2.4.6", "2.4.7",
            "2.5.3", "2.5.8", "3.1.1", "3.1.2", "3.2.1", "3.2.2", "3.2.3", "3.2.4", "3.3.1", "3.3.2",
            "4.1.2", "4.1.3",
        }

    def test_cross_page_rules(self):
        """Test only the consistency rules need several pages."""
        cross = {rule.criterion_id for rule in ALL_RULES if rule.cross_page}

        assert cross == {"3.2.3", "3.2.4"}
