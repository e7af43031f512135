"""
Rule Matcher - Matches and applies pricing rules to a selection.

Used by the pricing engine to fold discounts and surcharges onto the
subtotal. Matches keep catalog declaration order; nothing is re-sorted
by type or magnitude.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from .models import AdjustmentType, PricingRule, Selection


@dataclass
class MatchedRule:
    """A rule that matched with context."""
    rule: PricingRule
    match_reason: str

    @property
    def rule_id(self) -> str:
        return self.rule.id

    @property
    def name(self) -> str:
        return self.rule.name


class RuleMatcher:
    """
    Matches pricing rules against a selection.

    Each rule's condition is evaluated on its own; every rule that
    holds is returned, in the order the catalog declares them.
    """

    def __init__(self, pricing_rules: Iterable[PricingRule]):
        self.rules = list(pricing_rules)

    @property
    def loaded(self) -> bool:
        return bool(self.rules)

    def find_matching_rules(self, selection: Selection) -> list[MatchedRule]:
        """Find all rules whose condition the selection meets."""
        matched = []
        for rule in self.rules:
            if not rule.condition.is_met(selection):
                continue
            matched.append(MatchedRule(rule=rule, match_reason=self.describe_match(rule, selection)))
        return matched

    def describe_match(self, rule: PricingRule, selection: Selection) -> str:
        """Short explanation of why a condition holds."""
        condition = rule.condition
        mode = "all of" if condition.requires_all else "any of"
        reasons = []

        if condition.component_ids:
            hits = sorted(condition.component_ids & selection.component_ids)
            reasons.append(f"components {mode} [{', '.join(sorted(condition.component_ids))}] (have {', '.join(hits)})")
        elif condition.categories:
            wanted = sorted(c.value for c in condition.categories)
            reasons.append(f"categories {mode} [{', '.join(wanted)}]")

        if condition.minimum_quantity is not None:
            reasons.append(f"count {len(selection)}>={condition.minimum_quantity}")

        return ", ".join(reasons) if reasons else "default"

    def apply_rule_to_price(self, matched: MatchedRule, price: Decimal) -> tuple[Decimal, list[str]]:
        """
        Apply a single rule's adjustment to a running price.

        Returns (new_price, trace_messages).
        """
        adjustment = matched.rule.adjustment
        new_price = adjustment.apply(price)

        if adjustment.type == AdjustmentType.PERCENTAGE:
            message = f"Rule {matched.rule_id} applied {adjustment.value}%: ${price} → ${new_price}"
        else:
            message = f"Rule {matched.rule_id} applied ${adjustment.value:+}: ${price} → ${new_price}"

        return new_price, [message]
