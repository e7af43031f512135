"""
Catalog CSV loading, row validation and the build report.
"""
import json
import shutil
from decimal import Decimal

import pytest

from assembly_tool.config.settings import PACKAGE_DATA_DIR, Settings
from assembly_tool.data.build_catalog import CatalogBuildError, build_catalog_report, load_catalog
from assembly_tool.engine import AdjustmentType, Category, PricingRuleType
from assembly_tool.rules.compile_rules import (
    check_references,
    parse_component_row,
    parse_decimal,
    parse_pricing_rule_row,
    parse_specifications,
    parse_tags,
)

COMPONENT_HEADER = ("component_id,name,category,description,base_price,specifications,"
                    "compatibility_tags,required_tags,model_file_name,thumbnail_name\n")


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    """A writable copy of the seed catalog."""
    target = tmp_path / "data"
    target.mkdir()
    for name in ("components.csv", "compatibility_rules.csv", "pricing_rules.csv"):
        shutil.copy(PACKAGE_DATA_DIR / name, target / name)
    monkeypatch.setenv("ASSEMBLY_TOOL_DATA_DIR", str(target))
    monkeypatch.setenv("ASSEMBLY_TOOL_STORAGE_DIR", str(tmp_path / "storage"))
    return target


def custom_settings(tmp_path):
    return Settings.load(project_root=tmp_path)


def test_seed_catalog_counts(catalog):
    assert len(catalog) == 24
    assert len(catalog.compatibility_rules) == 8
    assert [r.id for r in catalog.pricing_rules] == ["price-001", "price-002", "price-003", "price-004"]
    for category in Category.ordered():
        assert len(catalog.components_in(category)) == 3


def test_seed_prices_are_exact(catalog):
    assert catalog.get_component("sensor-001").base_price == Decimal("890.00")
    assert isinstance(catalog.get_component("base-001").base_price, Decimal)


def test_specifications_with_commas(catalog):
    specs = catalog.get_component("ctrl-001").specifications
    assert specs["Protocols"] == "Modbus, EtherNet/IP"
    assert list(specs) == ["I/O Points", "Memory", "Protocols"]


def test_tags_and_rule_fields(catalog):
    base = catalog.get_component("base-001")
    assert base.compatibility_tags == frozenset({"heavy-duty", "large", "aluminum"})
    assert base.model_file_name == "base_xl"
    assert base.thumbnail_name is None

    rule = catalog.rules_for("power-001", Category.CONTROL)[0]
    assert rule.required_tags == frozenset({"advanced-control"})
    assert rule.excluded_tags == frozenset({"basic-control"})


def test_pricing_rule_fields(catalog):
    bundle, volume, climate, _ = catalog.pricing_rules
    assert bundle.type == PricingRuleType.BUNDLE_DISCOUNT
    assert bundle.condition.requires_all
    assert bundle.condition.minimum_quantity == 4
    assert bundle.adjustment.type == AdjustmentType.PERCENTAGE
    assert bundle.adjustment.value == Decimal("-10")
    assert len(volume.condition.categories) == 8
    assert climate.condition.component_ids == frozenset({"house-003"})
    assert climate.adjustment.type == AdjustmentType.FIXED_AMOUNT


def test_load_from_overridden_dir(data_dir, tmp_path):
    with open(data_dir / "components.csv", "a", encoding="utf-8") as f:
        f.write("base-004,Extra Base,Base Component,Label category,99.50,,,,,\n")
    catalog = load_catalog(custom_settings(tmp_path))
    assert len(catalog) == 25
    assert catalog.get_component("base-004").category == Category.BASE


def test_bad_rows_collected_with_line_numbers(data_dir, tmp_path):
    (data_dir / "components.csv").write_text(
        COMPONENT_HEADER
        + "base-001,Good,base,,10,,,,,\n"
        + "bad-002,Bad price,base,,ten,,,,,\n"
        + "bad-003,Bad category,gizmo,,10,,,,,\n",
        encoding="utf-8",
    )
    with pytest.raises(CatalogBuildError) as exc:
        load_catalog(custom_settings(tmp_path))
    errors = exc.value.errors
    assert len(errors) == 2
    assert errors[0].startswith("Line 3:")
    assert errors[1].startswith("Line 4:")


def test_duplicate_ids_rejected(data_dir, tmp_path):
    with open(data_dir / "components.csv", "a", encoding="utf-8") as f:
        f.write("base-001,Duplicate,base,,10,,,,,\n")
    with pytest.raises(CatalogBuildError, match="Duplicate component id 'base-001'"):
        load_catalog(custom_settings(tmp_path))


def test_missing_file(data_dir, tmp_path):
    (data_dir / "pricing_rules.csv").unlink()
    with pytest.raises(FileNotFoundError):
        load_catalog(custom_settings(tmp_path))


def test_parse_component_row_requires_id():
    obj, errors = parse_component_row({"name": "x"}, 7)
    assert obj is None
    assert errors == ["Line 7: component_id is required"]


def test_negative_price_rejected():
    obj, errors = parse_component_row(
        {"component_id": "c", "name": "C", "category": "base", "base_price": "-5"}, 2
    )
    assert obj is None
    assert "must not be negative" in errors[0]


def test_pricing_row_validation():
    obj, errors = parse_pricing_rule_row({
        "rule_id": "p", "rule_type": "markup", "adjustment_type": "percentage", "adjustment_value": "5",
    }, 2)
    assert obj is None
    assert "invalid rule_type 'markup'" in errors[0]

    obj, errors = parse_pricing_rule_row({
        "rule_id": "p", "rule_type": "discount", "adjustment_type": "fixedAmount",
        "adjustment_value": "-2.50", "categories": "Sensor|actuator",
    }, 2)
    assert errors == []
    assert obj.name == "p"
    assert obj.condition.categories == frozenset({Category.SENSOR, Category.ACTUATOR})
    assert obj.adjustment.value == Decimal("-2.50")


@pytest.mark.parametrize("raw", ["abc", "NaN", "Infinity", ""])
def test_parse_decimal_rejects_junk(raw):
    with pytest.raises(ValueError):
        parse_decimal(raw)


def test_parse_helpers():
    assert parse_tags(" a | b ||c") == frozenset({"a", "b", "c"})
    assert parse_tags("") == frozenset()
    assert parse_specifications("Range=50mm|Note=a=b") == {"Range": "50mm", "Note": "a=b"}
    with pytest.raises(ValueError):
        parse_specifications("no separator")


def test_seed_references_are_clean(catalog):
    assert check_references(catalog) == []


def test_dangling_references_reported(data_dir, tmp_path):
    with open(data_dir / "compatibility_rules.csv", "a", encoding="utf-8") as f:
        f.write("rule-999,ghost-001,sensor,precision,,,\n")
    with open(data_dir / "pricing_rules.csv", "a", encoding="utf-8") as f:
        f.write("price-999,Ghost fee,surcharge,ghost-002,,,false,fixedAmount,10\n")
    warnings = check_references(load_catalog(custom_settings(tmp_path)))
    assert any("ghost-001" in w for w in warnings)
    assert any("ghost-002" in w for w in warnings)


def test_build_report_success(data_dir, tmp_path):
    settings = custom_settings(tmp_path)
    report = build_catalog_report(settings, verbose=False)
    assert report["status"] == "success"
    assert report["metrics"]["component_count"] == 24
    assert report["metrics"]["components_by_category"]["housing"] == 3
    assert len(report["input_files"]["components"]["hash"]) == 12

    written = json.loads(settings.build_report.read_text(encoding="utf-8"))
    assert written["status"] == "success"


def test_build_report_failure(data_dir, tmp_path):
    (data_dir / "components.csv").write_text(COMPONENT_HEADER + " ,Nameless,base,,10,,,,,\n", encoding="utf-8")
    report = build_catalog_report(custom_settings(tmp_path), verbose=False)
    assert report["status"] == "failed"
    assert report["errors"] == ["Line 2: component_id is required"]
