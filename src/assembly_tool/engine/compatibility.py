"""
Compatibility Resolver - Filters selectable components and validates selections.

Resolution order for a target category:
1. Empty selection: only Base may be chosen (design gate, not a rule)
2. Each selected component contributes the components matching any of its
   rules for the category, or every component when it has no such rule or
   its rules match nothing
3. The contributions are intersected and sorted by display name

Absence of rules is permissive. Unconfigured combinations are allowed
rather than rejected.
"""
from .catalog import Catalog
from .models import Category, Component, Selection


class CompatibilityResolver:
    """Constraint intersection over the catalog's compatibility rules."""

    def __init__(self, catalog: Catalog):
        self.catalog = catalog

    def compatible_for(self, source: Component, target_category: Category) -> list[Component]:
        """
        Components in target_category that a single source component permits.

        Returns every component of the category when the source has no rule
        for it; otherwise those satisfying at least one of its rules.
        """
        candidates = self.catalog.components_in(target_category)
        rules = self.catalog.rules_for(source.id, target_category)
        if not rules:
            return candidates
        return [c for c in candidates if any(rule.is_compatible(c) for rule in rules)]

    def compatible_components(self, selection: Selection, target_category: Category) -> list[Component]:
        """Components selectable in target_category given everything already selected."""
        candidates = self.catalog.components_in(target_category)

        if selection.is_empty:
            return candidates_sorted(candidates) if target_category == Category.BASE else []

        allowed = {c.id for c in candidates}
        for selected in selection.components:
            # A source whose rules match nothing constrains nothing
            permitted = self.compatible_for(selected, target_category) or candidates
            allowed &= {c.id for c in permitted}
            if not allowed:
                break

        return candidates_sorted([c for c in candidates if c.id in allowed])

    def find_conflicts(self, selection: Selection) -> list[tuple[Component, Component]]:
        """
        Ordered pairs (A, B) where A constrains B's category and excludes B.

        An empty single-source result counts as no constraint.
        """
        conflicts = []
        selected = selection.components
        for source in selected:
            for target in selected:
                if source.id == target.id:
                    continue
                permitted = self.compatible_for(source, target.category)
                if permitted and target.id not in {c.id for c in permitted}:
                    conflicts.append((source, target))
        return conflicts

    def is_selection_valid(self, selection: Selection) -> bool:
        """Base present and every selected pair mutually compatible."""
        if not selection.is_complete():
            return False
        return not self.find_conflicts(selection)


def candidates_sorted(components: list[Component]) -> list[Component]:
    return sorted(components, key=lambda c: (c.name, c.id))
