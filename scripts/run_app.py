#!/usr/bin/env python
"""
Run the Streamlit configurator.

Usage:
    python scripts/run_app.py [--storage-dir DIR] [--quote-valid-days N]
"""
import argparse
import os
import subprocess
import sys
from pathlib import Path


def main():
    parser = argparse.ArgumentParser(description="Run the Assembly Configurator UI")
    parser.add_argument('--data-dir', help="Directory holding the catalog CSVs")
    parser.add_argument('--storage-dir', help="Directory for saved selections and quotes")
    parser.add_argument('--quote-valid-days', type=int)
    args = parser.parse_args()

    project_root = Path(__file__).parent.parent
    ui_path = project_root / 'src' / 'assembly_tool' / 'ui' / 'app_streamlit.py'

    env = os.environ.copy()
    for var, value in (
        ('ASSEMBLY_TOOL_DATA_DIR', args.data_dir),
        ('ASSEMBLY_TOOL_STORAGE_DIR', args.storage_dir),
        ('ASSEMBLY_TOOL_QUOTE_VALID_DAYS', args.quote_valid_days),
    ):
        if value is not None:
            env[var] = str(value)

    cmd = [sys.executable, '-m', 'streamlit', 'run', str(ui_path)]
    print(f"Starting Streamlit: {' '.join(cmd)}")

    try:
        subprocess.run(cmd, cwd=str(project_root), env=env)
    except KeyboardInterrupt:
        print("\nApplication stopped.")


if __name__ == "__main__":
    main()
