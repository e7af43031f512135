"""
Shared API state - one catalog and service per process.
"""
from typing import Optional

from ..config.settings import get_settings
from ..data.build_catalog import load_catalog
from ..services.configurator_service import ConfiguratorService

_service: Optional[ConfiguratorService] = None


def get_service() -> ConfiguratorService:
    """FastAPI dependency returning the process-wide service."""
    global _service
    if _service is None:
        settings = get_settings()
        _service = ConfiguratorService.from_settings(load_catalog(settings), settings)
    return _service


def reload_service() -> ConfiguratorService:
    """Reload the catalog from disk and rebuild the service."""
    global _service
    _service = None
    return get_service()
