#!/usr/bin/env python
"""
Serve the configurator API with uvicorn.

Usage:
    python scripts/run_api.py [--port 8000] [--data-dir DIR] [--storage-dir DIR]
"""
import argparse
import os
import subprocess
import sys
from pathlib import Path

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / 'src'))

from assembly_tool.config.settings import Settings
from assembly_tool.data.build_catalog import CatalogBuildError, load_catalog


def main():
    parser = argparse.ArgumentParser(description="Run the Assembly Tool API")
    parser.add_argument('--host', default='0.0.0.0')
    parser.add_argument('--port', type=int, default=8000)
    parser.add_argument('--data-dir', help="Directory holding the catalog CSVs")
    parser.add_argument('--storage-dir', help="Directory for saved selections and quotes")
    parser.add_argument('--no-reload', action='store_true')
    args = parser.parse_args()

    if args.data_dir:
        os.environ['ASSEMBLY_TOOL_DATA_DIR'] = args.data_dir
    if args.storage_dir:
        os.environ['ASSEMBLY_TOOL_STORAGE_DIR'] = args.storage_dir

    env = os.environ.copy()
    src_path = str(project_root / 'src')
    env['PYTHONPATH'] = os.pathsep.join(filter(None, [src_path, env.get('PYTHONPATH')]))

    # Fail before the server starts rather than on the first request
    try:
        catalog = load_catalog(Settings.load(project_root))
    except (FileNotFoundError, CatalogBuildError) as e:
        print(f"ERROR: {e}")
        sys.exit(1)
    print(f"Catalog OK: {catalog!r}")

    cmd = [
        sys.executable, '-m', 'uvicorn', 'assembly_tool.api.main:app',
        '--host', args.host, '--port', str(args.port),
    ]
    if not args.no_reload:
        cmd.append('--reload')

    print(f"Starting API on {args.host}:{args.port}...")
    try:
        subprocess.run(cmd, env=env, cwd=str(project_root))
    except KeyboardInterrupt:
        print("\nAPI stopped.")


if __name__ == "__main__":
    main()
