"""
Pricing engine: line items, rule matching and adjustment fold order.
"""
from decimal import Decimal

import pytest

from assembly_tool.engine import Catalog, Category, PricingCondition, PricingEngine, Selection
from assembly_tool.engine.models import BOMLineItem

from conftest import component, pricing_rule


def test_base_and_mount_without_rules(engine, make_selection):
    bill = engine.generate_bill(make_selection("base-001", "mount-001"))
    assert bill.subtotal == Decimal("1570.00")
    assert bill.total == Decimal("1570.00")
    assert bill.adjustments == ()
    assert bill.warnings == ()


def test_climate_housing_surcharge(engine, make_selection):
    selection = make_selection("base-003", "house-003")
    bill = engine.generate_bill(selection)
    assert bill.subtotal == Decimal("3990.00")
    assert bill.total == bill.subtotal + Decimal("500.00")
    assert [a.rule.id for a in bill.adjustments] == ["price-003"]


def test_line_items_ordered_by_step(engine, make_selection):
    # Inserted out of order on purpose
    bill = engine.generate_bill(make_selection("house-002", "power-002", "base-002", "mount-002"))
    assert [i.component.id for i in bill.line_items] == ["base-002", "mount-002", "power-002", "house-002"]
    assert all(i.quantity == 1 for i in bill.line_items)
    assert all(i.total_price == i.unit_price for i in bill.line_items)


def test_precision_bundle_discount(engine, make_selection):
    bill = engine.generate_bill(make_selection("base-003", "mount-003", "power-003", "ctrl-003"))
    assert bill.subtotal == Decimal("4950.00")
    assert bill.total == Decimal("4455.00")
    assert [a.rule.id for a in bill.adjustments] == ["price-001"]


def test_bundle_needs_every_category(engine, make_selection):
    """requires_all over categories: three of four is not enough."""
    bill = engine.generate_bill(make_selection("base-003", "mount-003", "power-003", "sensor-001"))
    assert bill.adjustments == ()


def test_full_system_folds_in_catalog_order(engine, make_selection):
    selection = make_selection(
        "base-003", "mount-003", "power-003", "ctrl-003",
        "sensor-001", "act-002", "intf-003", "house-003",
    )
    bill = engine.generate_bill(selection)
    assert bill.subtotal == Decimal("10380.00")
    assert [a.rule.id for a in bill.adjustments] == ["price-001", "price-002", "price-003", "price-004"]
    # 10380 * 0.9 * 0.85 + 500 + 350
    assert bill.total == Decimal("8790.70")
    assert bill.adjustments[0].price_before == bill.subtotal
    assert bill.adjustments[-1].price_after == bill.total


def test_generate_bill_is_idempotent(engine, make_selection):
    selection = make_selection("base-003", "mount-003", "intf-003")
    first = engine.generate_bill(selection)
    second = engine.generate_bill(selection)
    assert first.subtotal == second.subtotal
    assert first.total == second.total
    assert [i.component.id for i in first.line_items] == [i.component.id for i in second.line_items]
    assert [i.total_price for i in first.line_items] == [i.total_price for i in second.line_items]


def test_projections_agree_with_bill(engine, make_selection):
    selection = make_selection("base-001", "mount-001", "house-003")
    bill = engine.generate_bill(selection)
    assert engine.calculate_subtotal(selection) == bill.subtotal
    assert engine.calculate_total(selection) == bill.total


def test_projections_follow_mutation(engine, make_selection, catalog):
    selection = make_selection("base-001")
    assert engine.calculate_total(selection) == Decimal("1250.00")
    selection.select_component(catalog.get_component("house-003"))
    assert engine.calculate_total(selection) == Decimal("3890.00")


@pytest.mark.parametrize("order,expected", [
    (("fixed", "pct"), Decimal("1350")),   # (1000 + 500) * 0.9
    (("pct", "fixed"), Decimal("1400")),   # 1000 * 0.9 + 500
])
def test_adjustment_order_matters(order, expected):
    rules = {
        "fixed": pricing_rule("fixed", "fixedAmount", "500"),
        "pct": pricing_rule("pct", "percentage", "-10"),
    }
    base = component("b", Category.BASE, "1000.00")
    engine = PricingEngine(Catalog([base], [], [rules[key] for key in order]))
    selection = Selection()
    selection.select_component(base)
    assert engine.calculate_total(selection) == expected


def test_percentage_is_exact_decimal():
    """Chained percentages stay exact; no binary float drift."""
    base = component("b", Category.BASE, "0.10")
    rules = [pricing_rule(f"r{i}", "percentage", "10") for i in range(3)]
    engine = PricingEngine(Catalog([base], [], rules))
    selection = Selection()
    selection.select_component(base)
    assert engine.calculate_total(selection) == Decimal("0.1331")


def test_component_condition_any_vs_all():
    base = component("b", Category.BASE, "100")
    mount = component("m", Category.MOUNTING, "100")
    any_rule = pricing_rule("any", "fixedAmount", "-10",
                            PricingCondition(component_ids=frozenset({"b", "x"})))
    all_rule = pricing_rule("all", "fixedAmount", "-20",
                            PricingCondition(component_ids=frozenset({"b", "m"}), requires_all=True))
    engine = PricingEngine(Catalog([base, mount], [], [any_rule, all_rule]))

    selection = Selection()
    selection.select_component(base)
    assert [a.rule.id for a in engine.generate_bill(selection).adjustments] == ["any"]

    selection.select_component(mount)
    assert [a.rule.id for a in engine.generate_bill(selection).adjustments] == ["any", "all"]


def test_component_ids_take_priority_over_categories():
    """When both are set only component_ids is evaluated."""
    base = component("b", Category.BASE, "100")
    rule = pricing_rule("r", "fixedAmount", "1", PricingCondition(
        component_ids=frozenset({"other"}),
        categories=frozenset({Category.BASE}),
    ))
    engine = PricingEngine(Catalog([base], [], [rule]))
    selection = Selection()
    selection.select_component(base)
    assert engine.generate_bill(selection).adjustments == ()


def test_minimum_quantity_applies_to_vacuous_condition():
    base = component("b", Category.BASE, "100")
    mount = component("m", Category.MOUNTING, "100")
    rule = pricing_rule("volume", "percentage", "-50", PricingCondition(minimum_quantity=2))
    engine = PricingEngine(Catalog([base, mount], [], [rule]))

    selection = Selection()
    selection.select_component(base)
    assert engine.calculate_total(selection) == Decimal("100")
    selection.select_component(mount)
    assert engine.calculate_total(selection) == Decimal("100.0")


def test_missing_base_is_a_warning_not_an_error(engine, make_selection):
    bill = engine.generate_bill(make_selection("mount-002"))
    assert bill.subtotal == Decimal("180.00")
    assert bill.warnings == ("Selection has no Base component",)


def test_empty_selection_prices_to_zero(engine):
    bill = engine.generate_bill(Selection())
    assert bill.line_items == ()
    assert bill.subtotal == Decimal("0")
    assert bill.total == Decimal("0")


def test_trace_records_rule_application(engine, make_selection):
    bill = engine.generate_bill(make_selection("base-003", "house-003"))
    text = bill.get_trace_text()
    assert "Rule price-003" in text
    assert text.splitlines()[-1] == "• Total: Subtotal with adjustments = $4490.00"


@pytest.mark.parametrize("quantity", [0, -1])
def test_line_item_rejects_bad_quantity(catalog, quantity):
    with pytest.raises(ValueError):
        BOMLineItem.for_component(catalog.get_component("base-001"), quantity=quantity)


def test_credit_component_prices_without_error():
    """Only quantity is a line precondition; a negative price is a credit."""
    base = component("b", Category.BASE, "100")
    credit = component("trade-in", Category.MOUNTING, "-25")
    engine = PricingEngine(Catalog([base, credit]))
    selection = Selection()
    selection.select_component(base)
    selection.select_component(credit)

    bill = engine.generate_bill(selection)
    assert bill.line_items[1].total_price == Decimal("-25")
    assert bill.subtotal == Decimal("75")
    assert bill.total == Decimal("75")


def test_bill_round_trip_shape(engine, make_selection):
    data = engine.generate_bill(make_selection("base-001", "mount-001")).to_dict()
    assert data["subtotal"] == "1570.00"
    assert [item["componentId"] for item in data["lineItems"]] == ["base-001", "mount-001"]
