"""
Selection Store - Persists saved selections as a JSON list.

Components are stored by id and rehydrated from the catalog on load.
Unreadable storage is treated as an empty list.
"""
import json
import logging
from pathlib import Path
from typing import Optional

from ..engine.catalog import Catalog
from ..engine.models import Category, Selection, parse_timestamp

logger = logging.getLogger(__name__)


def load_json_list(path: Path) -> list[dict]:
    """Read a JSON list from disk; missing or corrupt files yield []."""
    if not path.exists():
        return []
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Could not read %s, starting empty: %s", path, e)
        return []
    if not isinstance(data, list):
        logger.warning("Expected a list in %s, starting empty", path)
        return []
    return data


def write_json_list(path: Path, records: list[dict]):
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(records, f, indent=2, ensure_ascii=False)


class SelectionStore:
    """CRUD over saved selections."""

    def __init__(self, path: Path, catalog: Catalog):
        self.path = path
        self.catalog = catalog

    def list_selections(self) -> list[Selection]:
        """List all saved selections in save order."""
        selections = []
        for record in load_json_list(self.path):
            selection = self._from_record(record)
            if selection is not None:
                selections.append(selection)
        return selections

    def get_selection(self, selection_id: str) -> Optional[Selection]:
        """Get a single selection by ID."""
        for selection in self.list_selections():
            if selection.id == selection_id:
                return selection
        return None

    def save_selection(self, selection: Selection) -> Selection:
        """Insert or replace a selection."""
        records = load_json_list(self.path)
        record = selection.to_dict()
        for i, existing in enumerate(records):
            if existing.get('id') == selection.id:
                records[i] = record
                break
        else:
            records.append(record)
        write_json_list(self.path, records)
        logger.info("Saved selection %s (%d components)", selection.id, len(selection))
        return selection

    def delete_selection(self, selection_id: str) -> bool:
        """Delete a selection."""
        records = load_json_list(self.path)
        remaining = [r for r in records if r.get('id') != selection_id]
        if len(remaining) == len(records):
            raise ValueError(f"Selection with ID '{selection_id}' not found")
        write_json_list(self.path, remaining)
        return True

    def _from_record(self, record: dict) -> Optional[Selection]:
        try:
            selection = Selection(
                name=record.get('name', 'New Configuration'),
                id=record['id'],
                created_at=parse_timestamp(record['createdAt']),
                updated_at=parse_timestamp(record['updatedAt']),
            )
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping malformed selection record: %s", e)
            return None

        for category_value, component_id in (record.get('selectedComponents') or {}).items():
            component = self.catalog.get_component(component_id)
            if component is None:
                logger.warning("Selection %s: component '%s' no longer in catalog, dropped", selection.id, component_id)
                continue
            try:
                if Category.parse(category_value) != component.category:
                    logger.warning("Selection %s: component '%s' is not a %s, dropped",
                                   selection.id, component_id, category_value)
                    continue
            except ValueError:
                logger.warning("Selection %s: unknown category '%s', dropped", selection.id, category_value)
                continue
            # Restore slots without bumping updated_at
            selection.select_component(component, now=selection.updated_at)

        return selection
