"""
Rule Compiler - Validates catalog CSV rows and compiles them into engine models.

Each parse function returns (obj, errors); obj is None when the row is
rejected. Line numbers in messages are 1-indexed file lines.
"""
from decimal import Decimal, InvalidOperation
from typing import Optional

from ..engine.catalog import Catalog
from ..engine.models import (
    AdjustmentType,
    Category,
    CompatibilityRule,
    Component,
    PriceAdjustment,
    PricingCondition,
    PricingRule,
    PricingRuleType,
)

LIST_SEPARATOR = '|'
SPEC_SEPARATOR = '='

VALID_ADJUSTMENT_TYPES = {t.value for t in AdjustmentType}
VALID_RULE_TYPES = {t.value for t in PricingRuleType}


def parse_bool(value: str) -> bool:
    """Parse a boolean from CSV string."""
    return str(value).strip().lower() in ('true', '1', 'yes', 'on')


def parse_optional_int(value: str) -> Optional[int]:
    """Parse optional integer."""
    if not value or str(value).strip() == '':
        return None
    return int(value)


def parse_optional_str(value: str) -> Optional[str]:
    """Parse optional string (empty = None)."""
    if not value or str(value).strip() == '':
        return None
    return str(value).strip()


def parse_decimal(value: str) -> Decimal:
    """Parse an exact decimal; raises ValueError on junk."""
    try:
        result = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValueError(f"'{value}' is not a decimal number")
    if not result.is_finite():
        raise ValueError(f"'{value}' is not a finite number")
    return result


def parse_tags(value: str) -> frozenset[str]:
    """Parse a `a|b|c` cell into a tag set."""
    if not value:
        return frozenset()
    return frozenset(t.strip() for t in str(value).split(LIST_SEPARATOR) if t.strip())


def parse_specifications(value: str) -> dict[str, str]:
    """Parse a `Key=Value|Key=Value` cell."""
    specs = {}
    if not value:
        return specs
    for pair in str(value).split(LIST_SEPARATOR):
        if not pair.strip():
            continue
        key, sep, val = pair.partition(SPEC_SEPARATOR)
        if not sep:
            raise ValueError(f"specification '{pair}' must be Key{SPEC_SEPARATOR}Value")
        specs[key.strip()] = val.strip()
    return specs


def parse_component_row(row: dict, line_num: int) -> tuple[Optional[Component], list[str]]:
    """Validate and parse a component from a CSV row."""
    errors = []

    component_id = parse_optional_str(row.get('component_id', ''))
    if not component_id:
        return None, [f"Line {line_num}: component_id is required"]

    name = parse_optional_str(row.get('name', ''))
    if not name:
        errors.append(f"Line {line_num}: name is required for {component_id}")

    try:
        category = Category.parse(row.get('category', ''))
    except ValueError as e:
        errors.append(f"Line {line_num}: {e}")
        category = None

    try:
        base_price = parse_decimal(row.get('base_price', ''))
        if base_price < 0:
            errors.append(f"Line {line_num}: base_price must not be negative")
    except ValueError as e:
        errors.append(f"Line {line_num}: base_price {e}")
        base_price = None

    try:
        specifications = parse_specifications(row.get('specifications', ''))
    except ValueError as e:
        errors.append(f"Line {line_num}: {e}")
        specifications = {}

    if errors:
        return None, errors

    return Component(
        id=component_id,
        name=name,
        category=category,
        description=parse_optional_str(row.get('description', '')) or "",
        base_price=base_price,
        specifications=specifications,
        compatibility_tags=parse_tags(row.get('compatibility_tags', '')),
        required_tags=parse_tags(row.get('required_tags', '')),
        model_file_name=parse_optional_str(row.get('model_file_name', '')),
        thumbnail_name=parse_optional_str(row.get('thumbnail_name', '')),
    ), []


def parse_compatibility_rule_row(row: dict, line_num: int) -> tuple[Optional[CompatibilityRule], list[str]]:
    """Validate and parse a compatibility rule from a CSV row."""
    rule_id = parse_optional_str(row.get('rule_id', ''))
    if not rule_id:
        return None, [f"Line {line_num}: rule_id is required"]

    source = parse_optional_str(row.get('source_component_id', ''))
    if not source:
        return None, [f"Line {line_num}: source_component_id is required for {rule_id}"]

    try:
        target = Category.parse(row.get('target_category', ''))
    except ValueError as e:
        return None, [f"Line {line_num}: {e}"]

    return CompatibilityRule(
        id=rule_id,
        source_component_id=source,
        target_category=target,
        required_tags=parse_tags(row.get('required_tags', '')),
        excluded_tags=parse_tags(row.get('excluded_tags', '')),
        custom_validation=parse_optional_str(row.get('custom_validation', '')),
    ), []


def parse_pricing_rule_row(row: dict, line_num: int) -> tuple[Optional[PricingRule], list[str]]:
    """
    Validate and parse a pricing rule from a CSV row.

    Returns (rule, errors) - rule is None if validation failed.
    """
    errors = []

    rule_id = parse_optional_str(row.get('rule_id', ''))
    if not rule_id:
        return None, [f"Line {line_num}: rule_id is required"]

    name = parse_optional_str(row.get('name', '')) or rule_id

    rule_type = parse_optional_str(row.get('rule_type', ''))
    if rule_type not in VALID_RULE_TYPES:
        errors.append(f"Line {line_num}: invalid rule_type '{rule_type}', must be one of: {sorted(VALID_RULE_TYPES)}")

    categories = set()
    for raw in parse_tags(row.get('categories', '')):
        try:
            categories.add(Category.parse(raw))
        except ValueError as e:
            errors.append(f"Line {line_num}: {e}")

    try:
        minimum_quantity = parse_optional_int(row.get('minimum_quantity', ''))
        if minimum_quantity is not None and minimum_quantity < 0:
            errors.append(f"Line {line_num}: minimum_quantity must not be negative")
    except ValueError:
        errors.append(f"Line {line_num}: minimum_quantity must be an integer")
        minimum_quantity = None

    adjustment_type = parse_optional_str(row.get('adjustment_type', ''))
    if adjustment_type not in VALID_ADJUSTMENT_TYPES:
        errors.append(
            f"Line {line_num}: invalid adjustment_type '{adjustment_type}', "
            f"must be one of: {sorted(VALID_ADJUSTMENT_TYPES)}"
        )

    try:
        adjustment_value = parse_decimal(row.get('adjustment_value', ''))
    except ValueError as e:
        errors.append(f"Line {line_num}: adjustment_value {e}")
        adjustment_value = None

    if errors:
        return None, errors

    condition = PricingCondition(
        component_ids=parse_tags(row.get('component_ids', '')),
        categories=frozenset(categories),
        minimum_quantity=minimum_quantity,
        requires_all=parse_bool(row.get('requires_all', 'false')),
    )

    return PricingRule(
        id=rule_id,
        name=name,
        type=PricingRuleType(rule_type),
        condition=condition,
        adjustment=PriceAdjustment(AdjustmentType(adjustment_type), adjustment_value),
    ), []


def check_references(catalog: Catalog) -> list[str]:
    """
    Warn about rules that point at components the catalog does not have.

    Such rules never fire (pricing) or silently constrain nothing
    (compatibility), so they are almost always authoring mistakes.
    """
    warnings = []
    known = {c.id for c in catalog.components}

    for rule in catalog.compatibility_rules:
        if rule.source_component_id not in known:
            warnings.append(
                f"Compatibility rule '{rule.id}' references unknown source component '{rule.source_component_id}'"
            )
        if not catalog.components_in(rule.target_category):
            warnings.append(f"Compatibility rule '{rule.id}' targets empty category '{rule.target_category.value}'")

    for rule in catalog.pricing_rules:
        for component_id in sorted(rule.condition.component_ids - known):
            warnings.append(f"Pricing rule '{rule.id}' references unknown component '{component_id}'")

    return warnings
