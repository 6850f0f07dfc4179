"""Built-in WCAG 2.1 A/AA rules."""

from ..registry import Rule, RuleRegistry
from . import aria, consistency, contrast, forms, keyboard, language, names, reflow, structure, target_size


def _criterion_order(rule: Rule) -> tuple[int, ...]:
    return tuple(int(part) for part in rule.criterion_id.split("."))


# Registration order: by criterion, then by the order variants are declared
ALL_RULES: list[Rule] = sorted(
    [
        *structure.RULES,
        *names.RULES,
        *contrast.RULES,
        *reflow.RULES,
        *keyboard.RULES,
        *target_size.RULES,
        *language.RULES,
        *forms.RULES,
        *aria.RULES,
        *consistency.RULES,
    ],
    key=_criterion_order,
)


def default_registry() -> RuleRegistry:
    """A fresh registry holding every built-in rule."""
    return RuleRegistry(ALL_RULES)


__all__ = ["ALL_RULES", "default_registry"]
