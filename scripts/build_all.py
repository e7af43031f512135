#!/usr/bin/env python
"""
Build pipeline - validates the catalog and runs the test suite.

Usage:
    python scripts/build_all.py
"""
import logging
import subprocess
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from assembly_tool.data.build_catalog import build_catalog_report


def main():
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    print("=" * 60)
    print("ASSEMBLY TOOL BUILD PIPELINE")
    print("=" * 60)
    print()
    
    print("[1/2] Validating catalog...")
    report = build_catalog_report(verbose=True)
    
    if report["status"] != "success":
        print("\n❌ BUILD FAILED")
        for error in report["errors"]:
            print(f"  ERROR: {error}")
        sys.exit(1)
    
    print()
    print("[2/2] Running tests...")
    
    test_result = subprocess.run(
        [sys.executable, '-m', 'pytest', 'tests', '-v', '--tb=short'],
        cwd=Path(__file__).parent.parent
    )
    
    if test_result.returncode != 0:
        print("\n❌ TESTS FAILED")
        sys.exit(1)
    
    metrics = report['metrics']
    print()
    print("=" * 60)
    print("✅ BUILD COMPLETE")
    print("=" * 60)
    print()
    print("Summary:")
    print(f"  Components: {metrics['component_count']}")
    print(f"  Compatibility rules: {metrics['compatibility_rule_count']}")
    print(f"  Pricing rules: {metrics['pricing_rule_count']}")
    print(f"  Warnings: {len(report['warnings'])}")
    print()
    print("Components by category:")
    for category, count in metrics['components_by_category'].items():
        print(f"  {category}: {count}")


if __name__ == "__main__":
    main()
