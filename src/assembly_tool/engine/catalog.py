"""
Catalog - Immutable store of components, compatibility rules and pricing rules.

Lookups are total: unknown ids and empty categories give None / empty lists.
"""
from typing import Iterable, Optional

from .models import Category, Component, CompatibilityRule, PricingRule


class Catalog:
    """Read-only view over the three catalog collections."""

    def __init__(
        self,
        components: Iterable[Component] = (),
        compatibility_rules: Iterable[CompatibilityRule] = (),
        pricing_rules: Iterable[PricingRule] = (),
    ):
        self._components = tuple(components)
        self._compatibility_rules = tuple(compatibility_rules)
        self._pricing_rules = tuple(pricing_rules)
        self._by_id = {c.id: c for c in self._components}

    @property
    def components(self) -> tuple[Component, ...]:
        return self._components

    @property
    def compatibility_rules(self) -> tuple[CompatibilityRule, ...]:
        return self._compatibility_rules

    @property
    def pricing_rules(self) -> tuple[PricingRule, ...]:
        """Pricing rules in declaration order."""
        return self._pricing_rules

    def get_component(self, component_id: str) -> Optional[Component]:
        return self._by_id.get(component_id)

    def components_in(self, category: Category) -> list[Component]:
        """Components of one category, in catalog order."""
        return [c for c in self._components if c.category == category]

    def rules_for(self, source_component_id: str, target_category: Category) -> list[CompatibilityRule]:
        """Compatibility rules a source component imposes on a category."""
        return [
            r for r in self._compatibility_rules
            if r.source_component_id == source_component_id and r.target_category == target_category
        ]

    def categories(self) -> list[Category]:
        """Categories that have at least one component, in step order."""
        present = {c.category for c in self._components}
        return [c for c in Category.ordered() if c in present]

    def __len__(self) -> int:
        return len(self._components)

    def __repr__(self) -> str:
        return (
            f"Catalog(components={len(self._components)}, "
            f"compatibility_rules={len(self._compatibility_rules)}, "
            f"pricing_rules={len(self._pricing_rules)})"
        )
