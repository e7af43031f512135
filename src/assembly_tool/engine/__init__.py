"""Engine subpackage - catalog, compatibility resolution, pricing and quotes."""
from .catalog import Catalog
from .compatibility import CompatibilityResolver
from .models import (
    AdjustmentType,
    BillOfMaterials,
    Category,
    Component,
    CompatibilityRule,
    PriceAdjustment,
    PricingCondition,
    PricingRule,
    PricingRuleType,
    Quote,
    QuoteStatus,
    Selection,
)
from .pricing_engine import PricingEngine
from .quote_factory import QuoteFactory, effective_status

__all__ = [
    'Catalog', 'CompatibilityResolver', 'PricingEngine', 'QuoteFactory', 'effective_status',
    'AdjustmentType', 'BillOfMaterials', 'Category', 'Component', 'CompatibilityRule',
    'PriceAdjustment', 'PricingCondition', 'PricingRule', 'PricingRuleType',
    'Quote', 'QuoteStatus', 'Selection',
]
