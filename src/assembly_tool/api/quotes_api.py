"""
Quotes API - FastAPI router for quote management.
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from ..engine.models import Quote, QuoteStatus
from ..services.configurator_service import ConfiguratorService
from .state import get_service

router = APIRouter(prefix="/api/quotes", tags=["quotes"])


class QuoteCreate(BaseModel):
    """Request model for creating a quote."""
    selection_id: str
    user_id: str
    valid_days: Optional[int] = Field(default=None, ge=0)
    notes: Optional[str] = None


class QuoteStatusUpdate(BaseModel):
    """Request model for a status change."""
    status: QuoteStatus


def quote_response(quote: Quote) -> dict:
    """Persisted shape plus the read-time effective status."""
    data = quote.to_dict()
    data["effectiveStatus"] = quote.effective_status().value
    return data


@router.get("")
async def list_quotes(user_id: Optional[str] = None, service: ConfiguratorService = Depends(get_service)):
    """List saved quotes, optionally for one user."""
    return [quote_response(q) for q in service.list_quotes(user_id)]


@router.post("", status_code=201)
async def create_quote(body: QuoteCreate, service: ConfiguratorService = Depends(get_service)):
    """Price a saved selection and store a draft quote."""
    try:
        quote = service.create_quote(
            body.selection_id, body.user_id, valid_days=body.valid_days, notes=body.notes
        )
    except ValueError as e:
        status = 404 if "not found" in str(e) else 400
        raise HTTPException(status_code=status, detail=str(e))
    return quote_response(quote)


@router.get("/{quote_id}")
async def get_quote(quote_id: str, service: ConfiguratorService = Depends(get_service)):
    try:
        return quote_response(service.get_quote(quote_id))
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.put("/{quote_id}/status")
async def update_quote_status(
    quote_id: str, body: QuoteStatusUpdate, service: ConfiguratorService = Depends(get_service)
):
    try:
        return quote_response(service.update_quote_status(quote_id, body.status))
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/{quote_id}")
async def delete_quote(quote_id: str, service: ConfiguratorService = Depends(get_service)):
    try:
        service.delete_quote(quote_id)
        return {"success": True, "message": f"Quote '{quote_id}' deleted"}
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
