"""
Configurator Service - Session-level operations over the engine and stores.

Re-invokes the core after every mutation; the engine itself keeps no state
between calls.
"""
import logging
from typing import Optional

from ..config.settings import Settings, get_settings
from ..engine.catalog import Catalog
from ..engine.compatibility import CompatibilityResolver
from ..engine.models import BillOfMaterials, Category, Component, Quote, QuoteStatus, Selection
from ..engine.pricing_engine import PricingEngine
from ..engine.quote_factory import QuoteFactory
from .quote_store import QuoteStore
from .selection_store import SelectionStore

logger = logging.getLogger(__name__)


class ConfiguratorService:
    """Service for building, validating, pricing and quoting selections."""

    def __init__(
        self,
        catalog: Catalog,
        selection_store: SelectionStore,
        quote_store: QuoteStore,
        quote_valid_days: int = 30,
    ):
        self.catalog = catalog
        self.selection_store = selection_store
        self.quote_store = quote_store
        self.resolver = CompatibilityResolver(catalog)
        self.pricing_engine = PricingEngine(catalog)
        self.quote_factory = QuoteFactory(self.pricing_engine, default_valid_days=quote_valid_days)

    @classmethod
    def from_settings(cls, catalog: Catalog, settings: Optional[Settings] = None) -> 'ConfiguratorService':
        settings = settings or get_settings()
        return cls(
            catalog=catalog,
            selection_store=SelectionStore(settings.saved_selections, catalog),
            quote_store=QuoteStore(settings.saved_quotes),
            quote_valid_days=settings.quote_valid_days,
        )

    # Selections

    def new_selection(self, name: Optional[str] = None) -> Selection:
        """Create and save an empty selection."""
        if not name:
            name = f"New Configuration {len(self.selection_store.list_selections()) + 1}"
        return self.selection_store.save_selection(Selection(name=name))

    def list_selections(self) -> list[Selection]:
        return self.selection_store.list_selections()

    def get_selection(self, selection_id: str) -> Selection:
        selection = self.selection_store.get_selection(selection_id)
        if selection is None:
            raise ValueError(f"Selection with ID '{selection_id}' not found")
        return selection

    def save_selection(self, selection: Selection) -> Selection:
        return self.selection_store.save_selection(selection)

    def delete_selection(self, selection_id: str) -> bool:
        return self.selection_store.delete_selection(selection_id)

    def rename_selection(self, selection_id: str, name: str) -> Selection:
        selection = self.get_selection(selection_id)
        selection.name = name
        return self.selection_store.save_selection(selection)

    def select_component(self, selection_id: str, component_id: str, force: bool = False) -> Selection:
        """
        Put a catalog component into its category slot.

        The component must be selectable given the rest of the selection
        (the current occupant of its slot is ignored, since it is being
        replaced). force=True skips the check.
        """
        selection = self.get_selection(selection_id)
        component = self._get_component(component_id)

        if not force and not self._is_selectable(selection, component):
            logger.debug("Rejected %s for selection %s", component_id, selection_id)
            raise ValueError(
                f"Component '{component_id}' is not compatible with the current selection"
            )

        selection.select_component(component)
        return self.selection_store.save_selection(selection)

    def remove_component(self, selection_id: str, category: Category) -> Selection:
        selection = self.get_selection(selection_id)
        selection.remove_component(category)
        return self.selection_store.save_selection(selection)

    def compatible_components(self, selection_id: str, category: Category) -> list[Component]:
        return self.resolver.compatible_components(self.get_selection(selection_id), category)

    def next_category(self, selection_id: str) -> Optional[Category]:
        """First category in assembly order that has nothing selected."""
        return next_open_category(self.get_selection(selection_id))

    def validate(self, selection_id: str) -> dict:
        """Validity plus the conflicting pairs that break it."""
        selection = self.get_selection(selection_id)
        conflicts = self.resolver.find_conflicts(selection)
        return {
            "valid": selection.is_complete() and not conflicts,
            "complete": selection.is_complete(),
            "conflicts": [
                {"source": source.id, "target": target.id, "category": target.category.value}
                for source, target in conflicts
            ],
        }

    def generate_bill(self, selection_id: str) -> BillOfMaterials:
        return self.pricing_engine.generate_bill(self.get_selection(selection_id))

    # Quotes

    def create_quote(
        self,
        selection_id: str,
        user_id: str,
        valid_days: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> Quote:
        """Price, snapshot and save a quote. Requires a Base component."""
        selection = self.get_selection(selection_id)
        if not selection.is_complete():
            raise ValueError("Selection needs a Base component before it can be quoted")

        quote = self.quote_factory.create_quote(selection, user_id, valid_days=valid_days, notes=notes)
        logger.info("Quote %s for selection %s: total %s, valid until %s",
                    quote.id, selection.id, quote.bill_of_materials.total, quote.valid_until.date())
        return self.quote_store.save_quote(quote)

    def list_quotes(self, user_id: Optional[str] = None) -> list[Quote]:
        return self.quote_store.list_quotes(user_id)

    def get_quote(self, quote_id: str) -> Quote:
        quote = self.quote_store.get_quote(quote_id)
        if quote is None:
            raise ValueError(f"Quote with ID '{quote_id}' not found")
        return quote

    def delete_quote(self, quote_id: str) -> bool:
        return self.quote_store.delete_quote(quote_id)

    def update_quote_status(self, quote_id: str, status: QuoteStatus) -> Quote:
        return self.quote_store.update_status(quote_id, status)

    # Helpers

    def _get_component(self, component_id: str) -> Component:
        component = self.catalog.get_component(component_id)
        if component is None:
            raise ValueError(f"Component with ID '{component_id}' not found")
        return component

    def _is_selectable(self, selection: Selection, component: Component) -> bool:
        context = selection.without(component.category)
        allowed = self.resolver.compatible_components(context, component.category)
        return component.id in {c.id for c in allowed}


def next_open_category(selection: Selection) -> Optional[Category]:
    for category in Category.ordered():
        if category not in selection:
            return category
    return None
