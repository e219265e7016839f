"""
GST Report Routes.

Handles return generation (GSTR-1/2/2A/2B/3B) and the dashboard summary.
Returns are computed on demand and never stored.
"""
from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, Query

from gstledger.models import tax_schemas as schemas

from .dependencies import GSTServiceDep

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/reports/{return_code}", response_model=schemas.GSTReturnOut)
def generate_return(
    return_code: str,
    data: schemas.GSTReturnRequest,
    service: GSTServiceDep,
):
    """
    Generate a return for one calendar month.

    ``return_code`` is one of gstr1, gstr2, gstr2a, gstr2b, gstr3b. Only
    entries filed under that return type and dated inside the month are
    aggregated.
    """
    report = service.generate_return(return_code, data.gstin, data.month, data.year)
    return schemas.GSTReturnOut(
        gstin=report["gstin"],
        return_type=report["return_type"],
        period=report["period"],
        summary=schemas.GSTReturnSummaryOut(**report["summary"]),
        hsn_summary=[schemas.HSNSummaryOut(**row) for row in report["hsn_summary"]],
        invoices=[schemas.TaxEntryOut.model_validate(e) for e in report["invoices"]],
        generated_at=report["generated_at"],
    )


@router.get("/summary", response_model=schemas.TaxSummaryOut)
def get_summary(
    service: GSTServiceDep,
    start_date: date | None = Query(None, description="Inclusive lower date bound"),
    end_date: date | None = Query(None, description="Inclusive upper date bound"),
):
    """Dashboard totals and per-return-type stats."""
    summary = service.summarize(start_date=start_date, end_date=end_date)
    return schemas.TaxSummaryOut(
        total_entries=summary["total_entries"],
        total_tax_amount=summary["total_tax_amount"],
        total_invoice_value=summary["total_invoice_value"],
        avg_tax_rate=summary["avg_tax_rate"],
        return_stats={
            label: schemas.ReturnStatsOut(**stats)
            for label, stats in summary["return_stats"].items()
        },
    )
