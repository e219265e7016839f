"""Tax entry endpoints."""
from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, Query

from gstledger.core.config import settings
from gstledger.models import tax_schemas as schemas
from gstledger.models.tax_models import EntryStatus, GSTReturnType

from .dependencies import GSTServiceDep

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/entries", response_model=schemas.TaxEntryListOut)
def list_entries(
    service: GSTServiceDep,
    search: str | None = Query(None, description="Match invoice number, customer or GSTIN"),
    gst_return: GSTReturnType | None = Query(None, description="Filter by return type"),
    status: EntryStatus | None = Query(None, description="Filter by status"),
    is_inter_state: bool | None = Query(None),
    start_date: date | None = Query(None, description="Inclusive lower date bound"),
    end_date: date | None = Query(None, description="Inclusive upper date bound"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
):
    """List tax entries newest first with filters and pagination."""
    entries, pagination = service.list_entries(
        search=search,
        gst_return=gst_return,
        status=status,
        is_inter_state=is_inter_state,
        start_date=start_date,
        end_date=end_date,
        page=page,
        limit=limit,
    )
    return schemas.TaxEntryListOut(
        data=[schemas.TaxEntryOut.model_validate(e) for e in entries],
        pagination=schemas.PaginationOut(**pagination),
    )


@router.get("/entries/{entry_id}", response_model=schemas.TaxEntryOut)
def get_entry(entry_id: int, service: GSTServiceDep):
    """Get an entry with each item's slab populated."""
    return schemas.TaxEntryOut.model_validate(service.get_entry(entry_id))


@router.post("/entries", response_model=schemas.TaxEntryOut, status_code=201)
def create_entry(data: schemas.TaxEntryCreate, service: GSTServiceDep):
    """Record a taxable transaction; totals are derived from the items."""
    return schemas.TaxEntryOut.model_validate(service.create_entry(data))


@router.post("/entries/preview", response_model=schemas.TaxEntryPreviewOut)
def preview_entry(data: schemas.TaxEntryPreview, service: GSTServiceDep):
    """Price line items and split the tax without recording anything."""
    totals, split = service.preview_entry(data)
    return schemas.TaxEntryPreviewOut(
        taxable_value=totals.taxable_value,
        total_tax=totals.total_tax,
        total_amount=totals.total_amount,
        cgst=split.cgst,
        sgst=split.sgst,
        igst=split.igst,
        lines=[
            schemas.LineComputationOut(
                position=line.position,
                tax_slab_id=line.tax_slab_id,
                rate=line.rate,
                item_value=line.item_value,
                item_tax=line.item_tax,
            )
            for line in totals.lines
        ],
    )


@router.put("/entries/{entry_id}", response_model=schemas.TaxEntryOut)
def update_entry(entry_id: int, data: schemas.TaxEntryUpdate, service: GSTServiceDep):
    """Partial update. Replacing items recomputes the totals."""
    return schemas.TaxEntryOut.model_validate(service.update_entry(entry_id, data))


@router.patch("/entries/{entry_id}/status", response_model=schemas.TaxEntryOut)
def update_entry_status(entry_id: int, data: schemas.TaxEntryStatusUpdate, service: GSTServiceDep):
    return schemas.TaxEntryOut.model_validate(service.update_entry_status(entry_id, data.status))


@router.delete("/entries/{entry_id}", response_model=schemas.MessageOut)
def delete_entry(entry_id: int, service: GSTServiceDep):
    service.delete_entry(entry_id)
    return schemas.MessageOut(message="Tax entry deleted successfully")
