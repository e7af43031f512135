"""
Centralized settings and path configuration for the assembly tool.
"""
import os
from pathlib import Path
from dataclasses import dataclass
from typing import Optional

PACKAGE_DATA_DIR = Path(__file__).resolve().parent.parent / 'data'


def get_project_root() -> Path:
    """Get the project root directory (where pyproject.toml lives)."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / 'pyproject.toml').exists():
            return parent
    # Fallback to the working directory for installed copies
    return Path.cwd()


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Project paths
    project_root: Path
    data_dir: Path

    # Catalog input files
    components_csv: Path
    compatibility_rules_csv: Path
    pricing_rules_csv: Path

    # Storage (selection and quote collaborators)
    storage_dir: Path
    saved_selections: Path
    saved_quotes: Path

    # Output files
    build_report: Path

    # Quotes
    quote_valid_days: int = 30

    @classmethod
    def load(cls, project_root: Optional[Path] = None) -> 'Settings':
        """Load settings from the project structure and environment."""
        root = project_root or get_project_root()

        data_dir = Path(os.environ.get('ASSEMBLY_TOOL_DATA_DIR') or PACKAGE_DATA_DIR)
        storage_dir = Path(os.environ.get('ASSEMBLY_TOOL_STORAGE_DIR') or root / 'storage')
        valid_days = int(os.environ.get('ASSEMBLY_TOOL_QUOTE_VALID_DAYS') or 30)

        return cls(
            project_root=root,
            data_dir=data_dir,
            components_csv=data_dir / 'components.csv',
            compatibility_rules_csv=data_dir / 'compatibility_rules.csv',
            pricing_rules_csv=data_dir / 'pricing_rules.csv',
            storage_dir=storage_dir,
            saved_selections=storage_dir / 'saved_selections.json',
            saved_quotes=storage_dir / 'saved_quotes.json',
            build_report=storage_dir / 'build_report.json',
            quote_valid_days=valid_days,
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings
