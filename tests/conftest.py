import os
import sys
from decimal import Decimal

import pytest

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from assembly_tool.config.settings import Settings
from assembly_tool.data.build_catalog import load_catalog
from assembly_tool.engine import (
    AdjustmentType,
    CompatibilityResolver,
    Component,
    PriceAdjustment,
    PricingCondition,
    PricingEngine,
    PricingRule,
    PricingRuleType,
    Selection,
)
from assembly_tool.services.configurator_service import ConfiguratorService


@pytest.fixture
def settings(tmp_path, monkeypatch):
    """Settings using the packaged seed catalog and a throwaway storage dir."""
    for var in ('ASSEMBLY_TOOL_DATA_DIR', 'ASSEMBLY_TOOL_STORAGE_DIR', 'ASSEMBLY_TOOL_QUOTE_VALID_DAYS'):
        monkeypatch.delenv(var, raising=False)
    return Settings.load(project_root=tmp_path)


@pytest.fixture(scope="session")
def catalog():
    return load_catalog(Settings.load())


@pytest.fixture
def resolver(catalog):
    return CompatibilityResolver(catalog)


@pytest.fixture
def engine(catalog):
    return PricingEngine(catalog)


@pytest.fixture
def service(catalog, settings):
    return ConfiguratorService.from_settings(catalog, settings)


@pytest.fixture
def make_selection(catalog):
    """Build a selection from seed component ids."""
    def _make(*component_ids, name="Test"):
        selection = Selection(name=name)
        for component_id in component_ids:
            selection.select_component(catalog.get_component(component_id))
        return selection
    return _make


def component(component_id, category, price, name=None, tags=()):
    """Stand-alone component for hand-built catalogs."""
    return Component(
        id=component_id,
        name=name or component_id,
        category=category,
        description="Test",
        base_price=Decimal(price),
        compatibility_tags=frozenset(tags),
    )


def pricing_rule(rule_id, adjustment_type, value, condition=None):
    return PricingRule(
        id=rule_id,
        name=rule_id,
        type=PricingRuleType.DISCOUNT,
        condition=condition or PricingCondition(),
        adjustment=PriceAdjustment(AdjustmentType(adjustment_type), Decimal(value)),
    )
