"""
Quote Factory - Snapshots a priced selection into an immutable quote.

Pure construction: storing the quote is the caller's job.
"""
from datetime import datetime
from typing import Optional

from .models import Quote, QuoteStatus, Selection, add_days, new_id, utc_now
from .pricing_engine import PricingEngine

DEFAULT_VALID_DAYS = 30


class QuoteFactory:
    """Builds draft quotes from freshly generated bills."""

    def __init__(self, pricing_engine: PricingEngine, default_valid_days: int = DEFAULT_VALID_DAYS):
        self.pricing_engine = pricing_engine
        self.default_valid_days = default_valid_days

    def create_quote(
        self,
        selection: Selection,
        user_id: str,
        valid_days: Optional[int] = None,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Quote:
        """
        Create a draft quote valid for valid_days from now.

        Args:
            selection: Selection to price
            user_id: Opaque owner identifier
            valid_days: Validity window, defaults to the factory's default
            notes: Optional free text
            now: Creation time override (defaults to current UTC time)
        """
        days = self.default_valid_days if valid_days is None else valid_days
        if days < 0:
            raise ValueError(f"valid_days must not be negative, got {days}")

        created_at = now or utc_now()
        bill = self.pricing_engine.generate_bill(selection, now=created_at)

        return Quote(
            id=new_id(),
            configuration_id=selection.id,
            user_id=user_id,
            bill_of_materials=bill.to_quote_bom(),
            valid_until=add_days(created_at, days),
            status=QuoteStatus.DRAFT,
            created_at=created_at,
            notes=notes,
        )


def effective_status(quote: Quote, now: Optional[datetime] = None) -> QuoteStatus:
    """Stored status, unless the validity window has passed."""
    return quote.effective_status(now)
