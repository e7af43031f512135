"""
Catalog Builder - Loads components and rules from CSV into an immutable Catalog.

Adds:
- Configuration-driven paths
- Row-level validation with line numbers
- Build report generation with input hashes and metrics
"""
import hashlib
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

import pandas as pd

from ..config.settings import get_settings, Settings
from ..engine.catalog import Catalog
from ..engine.models import Category
from ..rules.compile_rules import (
    check_references,
    parse_compatibility_rule_row,
    parse_component_row,
    parse_pricing_rule_row,
)

logger = logging.getLogger(__name__)


class CatalogBuildError(ValueError):
    """Raised when catalog files contain invalid rows."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Catalog has {len(errors)} error(s): " + "; ".join(errors[:5]))


def get_file_hash(path: Path) -> str:
    """Get SHA256 hash of a file."""
    if not path.exists():
        return ""
    with open(path, 'rb') as f:
        return hashlib.sha256(f.read()).hexdigest()[:12]


def read_rows(path: Path) -> list[dict]:
    """Read a CSV as a list of string-valued rows (empty cells stay '')."""
    if not path.exists():
        raise FileNotFoundError(f"Catalog file not found at {path}")
    df = pd.read_csv(path, dtype=str, keep_default_na=False, encoding='utf-8')
    df.columns = [c.strip() for c in df.columns]
    for col in df.columns:
        df[col] = df[col].astype(str).str.strip()
    return df.to_dict(orient='records')


def _parse_rows(rows: list[dict], parser: Callable, errors: list[str]) -> list:
    parsed = []
    for line_num, row in enumerate(rows, start=2):  # +2 for 1-indexed header row
        obj, row_errors = parser(row, line_num)
        if row_errors:
            errors.extend(row_errors)
        elif obj is not None:
            parsed.append(obj)
    return parsed


def load_catalog(settings: Optional[Settings] = None) -> Catalog:
    """
    Load the catalog from the configured CSV files.

    Raises:
        FileNotFoundError: a catalog file is missing
        CatalogBuildError: one or more rows failed validation
    """
    settings = settings or get_settings()
    errors: list[str] = []

    components = _parse_rows(read_rows(settings.components_csv), parse_component_row, errors)
    compatibility_rules = _parse_rows(
        read_rows(settings.compatibility_rules_csv), parse_compatibility_rule_row, errors
    )
    pricing_rules = _parse_rows(read_rows(settings.pricing_rules_csv), parse_pricing_rule_row, errors)

    for label, items in (
        ("component", components),
        ("compatibility rule", compatibility_rules),
        ("pricing rule", pricing_rules),
    ):
        seen = set()
        for item in items:
            if item.id in seen:
                errors.append(f"Duplicate {label} id '{item.id}'")
            seen.add(item.id)

    if errors:
        raise CatalogBuildError(errors)

    catalog = Catalog(components, compatibility_rules, pricing_rules)
    for warning in check_references(catalog):
        logger.warning(warning)

    logger.info("Loaded %r from %s", catalog, settings.data_dir)
    return catalog


def build_catalog_report(settings: Optional[Settings] = None, verbose: bool = True) -> dict:
    """
    Validate the catalog files and write a build report.

    Args:
        settings: Optional settings override
        verbose: Print progress messages

    Returns:
        Build report dictionary
    """
    settings = settings or get_settings()

    report = {
        "timestamp": datetime.now().isoformat(),
        "status": "pending",
        "input_files": {},
        "metrics": {},
        "warnings": [],
        "errors": []
    }

    for key, path in (
        ("components", settings.components_csv),
        ("compatibility_rules", settings.compatibility_rules_csv),
        ("pricing_rules", settings.pricing_rules_csv),
    ):
        report["input_files"][key] = {"path": str(path), "hash": get_file_hash(path)}

    try:
        catalog = load_catalog(settings)
    except (FileNotFoundError, CatalogBuildError) as e:
        report["errors"].extend(getattr(e, "errors", [str(e)]))
        report["status"] = "failed"
        if verbose:
            print(f"ERROR: Failed to load catalog. {e}")
        _write_report(report, settings.build_report)
        return report

    report["warnings"] = check_references(catalog)
    report["metrics"] = {
        "component_count": len(catalog),
        "components_by_category": {
            category.value: len(catalog.components_in(category)) for category in Category.ordered()
        },
        "compatibility_rule_count": len(catalog.compatibility_rules),
        "pricing_rule_count": len(catalog.pricing_rules),
    }
    report["status"] = "success"

    if verbose:
        print(f"Loaded {len(catalog)} components, "
              f"{len(catalog.compatibility_rules)} compatibility rules, "
              f"{len(catalog.pricing_rules)} pricing rules")
        for warning in report["warnings"]:
            print(f"  WARNING: {warning}")

    _write_report(report, settings.build_report)
    return report


def _write_report(report: dict, path: Path):
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(report, f, indent=2)
