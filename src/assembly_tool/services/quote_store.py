"""
Quote Store - Persists quotes in their serialised shape.
"""
import logging
from pathlib import Path
from typing import Optional

from ..engine.models import Quote, QuoteStatus
from .selection_store import load_json_list, write_json_list

logger = logging.getLogger(__name__)


class QuoteStore:
    """CRUD over saved quotes."""

    def __init__(self, path: Path):
        self.path = path

    def list_quotes(self, user_id: Optional[str] = None) -> list[Quote]:
        """List saved quotes, optionally only those owned by user_id."""
        quotes = []
        for record in load_json_list(self.path):
            try:
                quote = Quote.from_dict(record)
            except (KeyError, TypeError, ValueError, ArithmeticError) as e:
                logger.warning("Skipping malformed quote record: %s", e)
                continue
            if user_id is None or quote.user_id == user_id:
                quotes.append(quote)
        return quotes

    def get_quote(self, quote_id: str) -> Optional[Quote]:
        for quote in self.list_quotes():
            if quote.id == quote_id:
                return quote
        return None

    def save_quote(self, quote: Quote) -> Quote:
        """Insert or replace a quote."""
        records = load_json_list(self.path)
        record = quote.to_dict()
        for i, existing in enumerate(records):
            if existing.get('id') == quote.id:
                records[i] = record
                break
        else:
            records.append(record)
        write_json_list(self.path, records)
        logger.info("Saved quote %s for user %s", quote.id, quote.user_id)
        return quote

    def delete_quote(self, quote_id: str) -> bool:
        records = load_json_list(self.path)
        remaining = [r for r in records if r.get('id') != quote_id]
        if len(remaining) == len(records):
            raise ValueError(f"Quote with ID '{quote_id}' not found")
        write_json_list(self.path, remaining)
        return True

    def update_status(self, quote_id: str, status: QuoteStatus) -> Quote:
        """Store a copy of the quote carrying the new status."""
        quote = self.get_quote(quote_id)
        if quote is None:
            raise ValueError(f"Quote with ID '{quote_id}' not found")
        return self.save_quote(quote.with_status(status))
