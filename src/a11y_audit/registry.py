"""Rule definitions and the registry that selects them."""

from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Iterator, Sequence

import structlog

from .exceptions import DuplicateRuleError
from .models import ElementNode, Finding, Level, Severity
from .snapshot import Snapshot

logger = structlog.get_logger()

PRINCIPLES = {
    "1": "perceivable",
    "2": "operable",
    "3": "understandable",
    "4": "robust",
}


@dataclass(frozen=True)
class Detection:
    """A violation spotted by a checker, before the rule stamps it into a Finding."""

    element: ElementNode | None
    message: str
    remediation: str | None = None
    kind: str | None = None
    # Page the element belongs to; required for cross-page rules
    snapshot: Snapshot | None = None


@dataclass(frozen=True)
class Rule:
    """Declarative unit of audit logic for one WCAG success criterion."""

    criterion_id: str
    variant: str
    level: Level
    severity: Severity
    description: str
    remediation: str
    check: Callable[[Any], Iterable[Detection]]
    applies_to: Callable[[Any], bool] | None = None
    cross_page: bool = False
    tags: frozenset[str] = field(default_factory=frozenset)

    @property
    def key(self) -> tuple[str, str]:
        return (self.criterion_id, self.variant)

    @property
    def principle(self) -> str | None:
        return PRINCIPLES.get(self.criterion_id.split(".", 1)[0])

    @property
    def all_tags(self) -> frozenset[str]:
        tags = set(self.tags)
        if self.principle:
            tags.add(self.principle)
        tags.add(f"wcag2{self.level.value.lower()}")
        return frozenset(tags)

    def is_applicable(self, target: Snapshot | Sequence[Snapshot]) -> bool:
        if self.cross_page and len(target) < 2:
            return False
        return self.applies_to is None or bool(self.applies_to(target))

    def evaluate(self, target: Snapshot | Sequence[Snapshot]) -> list[Finding]:
        """Run the checker and turn each detection into a Finding."""
        findings = []
        for detection in self.check(target):
            snapshot = detection.snapshot
            if snapshot is None and not self.cross_page:
                snapshot = target

            element_ref = None
            if detection.element is not None and snapshot is not None:
                element_ref = snapshot.ref(detection.element)

            findings.append(
                Finding(
                    criterion_id=self.criterion_id,
                    severity=self.severity,
                    element_ref=element_ref,
                    message=detection.message,
                    remediation=detection.remediation or self.remediation,
                    kind=detection.kind or self.variant,
                    url=snapshot.url if snapshot is not None else None,
                )
            )
        return findings


def _normalize_levels(level: Any) -> set[Level] | None:
    if level is None:
        return None
    if isinstance(level, Level):
        return {level}
    if isinstance(level, str):
        text = level.strip().upper()
        if text in ("", "BOTH", "ALL"):
            return None
        return {Level(text)}
    return {lvl if isinstance(lvl, Level) else Level(str(lvl).strip().upper()) for lvl in level}


class RuleRegistry:
    """Append-only rule registry iterating in registration order."""

    def __init__(self, rules: Iterable[Rule] = ()):
        self._rules: list[Rule] = []
        self._keys: set[tuple[str, str]] = set()
        for rule in rules:
            self.register(rule)

    def register(self, rule: Rule) -> Rule:
        if rule.key in self._keys:
            raise DuplicateRuleError(rule.criterion_id, rule.variant)
        self._keys.add(rule.key)
        self._rules.append(rule)
        logger.debug("Rule registered", criterion=rule.criterion_id, variant=rule.variant)
        return rule

    def get(self, criterion_id: str, variant: str) -> Rule | None:
        return next((r for r in self._rules if r.key == (criterion_id, variant)), None)

    def rules_for(
        self,
        level: Any = None,
        tags: Iterable[str] | None = None,
        criteria: Iterable[str] | None = None,
    ) -> list[Rule]:
        """Registered rules matching every filter given, in registration order.

        Args:
            level: "A", "AA", a Level, an iterable of those, or None for both.
            tags: Principle names or explicit tags; a rule matches if it has any.
            criteria: Criterion ids such as "1.1.1".
        """
        levels = _normalize_levels(level)
        wanted_tags = {t.lower() for t in tags} if tags else None
        wanted_criteria = set(criteria) if criteria else None

        selected = []
        for rule in self._rules:
            if levels is not None and rule.level not in levels:
                continue
            if wanted_tags is not None and not (rule.all_tags & wanted_tags):
                continue
            if wanted_criteria is not None and rule.criterion_id not in wanted_criteria:
                continue
            selected.append(rule)
        return selected

    def __iter__(self) -> Iterator[Rule]:
        return iter(list(self._rules))

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, key: object) -> bool:
        return key in self._keys
