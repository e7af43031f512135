"""
Pricing Engine - Bill of materials generation with traceability.

Produces:
- One line item per selected component, ordered by assembly step
- Matched pricing rules in catalog order
- Subtotal and a total folded left-to-right over the matched adjustments
- An execution trace and warnings for incomplete selections
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional

from .catalog import Catalog
from .models import BillOfMaterials, BOMLineItem, AdjustmentDetail, Selection, TraceStep, new_id, utc_now
from .rule_matcher import RuleMatcher


class PricingEngine:
    """
    Core pricing engine.

    Resolution order:
    1. Build a line item for every selected component (quantity 1)
    2. Sum line totals into the subtotal
    3. Evaluate every pricing rule against the selection
    4. Apply matched adjustments in declaration order, starting at the subtotal
    """

    def __init__(self, catalog: Catalog):
        self.catalog = catalog
        self.rule_matcher = RuleMatcher(catalog.pricing_rules)

    def generate_bill(self, selection: Selection, now: Optional[datetime] = None) -> BillOfMaterials:
        """
        Price a selection.

        Never raises for incomplete selections; a missing Base component
        is reported as a warning on the bill.
        """
        trace = []
        warnings = []

        if not selection.is_complete():
            warnings.append("Selection has no Base component")

        line_items = [BOMLineItem.for_component(c) for c in selection.components]
        for item in line_items:
            trace.append(TraceStep(
                "Line Item",
                f"{item.component.name} ({item.component.id}) × {item.quantity}",
                f"${item.total_price}",
            ))

        subtotal = sum((item.total_price for item in line_items), Decimal("0"))
        trace.append(TraceStep("Subtotal", f"{len(line_items)} line item(s)", f"${subtotal}"))

        adjustments = []
        running = subtotal
        for matched in self.rule_matcher.find_matching_rules(selection):
            new_price, messages = self.rule_matcher.apply_rule_to_price(matched, running)
            adjustments.append(AdjustmentDetail(
                id=new_id(),
                rule=matched.rule,
                adjustment=matched.rule.adjustment,
                description=matched.rule.name,
                match_reason=matched.match_reason,
                price_before=running,
                price_after=new_price,
            ))
            for message in messages:
                trace.append(TraceStep("Rule Applied", message, f"${new_price}"))
            running = new_price

        if not adjustments:
            trace.append(TraceStep("Rules", "No pricing rules matched"))
        trace.append(TraceStep("Total", "Subtotal with adjustments", f"${running}"))

        return BillOfMaterials(
            id=new_id(),
            selection_id=selection.id,
            line_items=tuple(line_items),
            adjustments=tuple(adjustments),
            subtotal=subtotal,
            total=running,
            generated_at=now or utc_now(),
            warnings=tuple(warnings),
            trace=tuple(trace),
        )

    def calculate_subtotal(self, selection: Selection) -> Decimal:
        return self.generate_bill(selection).subtotal

    def calculate_total(self, selection: Selection) -> Decimal:
        return self.generate_bill(selection).total
