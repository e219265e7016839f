"""
GST Service Module.

The GSTService class acts as a facade that composes the slab registry, the
entry ledger, return generation and the dashboard summary behind one API.

Usage:
    from gstledger.services.gst import GSTService, build_gst_service

    service = build_gst_service(db)

    # Slab registry
    slab = service.create_slab({"name": "GST 18%", "rate": 18})
    default = service.get_default_slab()

    # Entries
    entry = service.create_entry(data)
    entries, pagination = service.list_entries(status="pending")

    # Returns and summary
    report = service.generate_return("GSTR-1", gstin, month=3, year=2024)
    summary = service.summarize()
"""
from __future__ import annotations

from datetime import date
from typing import Any, Mapping, Sequence

from sqlalchemy.orm import Session

from gstledger.models.tax_models import EntryStatus, GSTReturnType, SlabStatus, TaxEntry, TaxSlab
from gstledger.models.tax_schemas import (
    TaxEntryCreate,
    TaxEntryPreview,
    TaxEntryUpdate,
    TaxSlabCreate,
    TaxSlabUpdate,
)

from .computations import EntryTotals, TaxSplit
from .entry_service import TaxEntryService
from .return_service import GSTReturnService
from .slab_service import TaxSlabService
from .summary_service import TaxSummaryService


class GSTService:
    """
    Facade for GST operations.

    Composes specialized services to provide a unified API while
    maintaining separation of concerns internally.
    """

    def __init__(self, db: Session):
        """Initialize all sub-services."""
        self._db = db

        self._slabs = TaxSlabService(db)
        self._entries = TaxEntryService(db, slabs=self._slabs)
        self._returns = GSTReturnService(db)
        self._summary = TaxSummaryService(db)

    # ========================================================================
    # Slab Operations (delegated to TaxSlabService)
    # ========================================================================

    def create_slab(self, data: TaxSlabCreate | Mapping[str, Any]) -> TaxSlab:
        return self._slabs.create_slab(data)

    def get_slab(self, slab_id: int) -> TaxSlab:
        return self._slabs.get_slab(slab_id)

    def list_slabs(
        self,
        status: SlabStatus | str | None = None,
        is_default: bool | None = None,
    ) -> Sequence[TaxSlab]:
        return self._slabs.list_slabs(status=status, is_default=is_default)

    def list_active_slabs(self) -> Sequence[TaxSlab]:
        return self._slabs.list_active_slabs()

    def get_default_slab(self) -> TaxSlab:
        return self._slabs.get_default_slab()

    def update_slab(self, slab_id: int, data: TaxSlabUpdate | Mapping[str, Any]) -> TaxSlab:
        return self._slabs.update_slab(slab_id, data)

    def delete_slab(self, slab_id: int) -> TaxSlab:
        return self._slabs.delete_slab(slab_id)

    def toggle_slab_status(self, slab_id: int) -> TaxSlab:
        return self._slabs.toggle_slab_status(slab_id)

    def bulk_create_default_slabs(self) -> list[TaxSlab]:
        return self._slabs.bulk_create_default_slabs()

    # ========================================================================
    # Entry Operations (delegated to TaxEntryService)
    # ========================================================================

    def create_entry(self, data: TaxEntryCreate | Mapping[str, Any]) -> TaxEntry:
        return self._entries.create_entry(data)

    def preview_entry(self, data: TaxEntryPreview | Mapping[str, Any]) -> tuple[EntryTotals, TaxSplit]:
        return self._entries.preview_entry(data)

    def get_entry(self, entry_id: int) -> TaxEntry:
        return self._entries.get_entry(entry_id)

    def list_entries(
        self,
        search: str | None = None,
        gst_return: GSTReturnType | str | None = None,
        status: EntryStatus | str | None = None,
        is_inter_state: bool | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        page: int = 1,
        limit: int | None = None,
    ) -> tuple[Sequence[TaxEntry], dict[str, int]]:
        return self._entries.list_entries(
            search=search,
            gst_return=gst_return,
            status=status,
            is_inter_state=is_inter_state,
            start_date=start_date,
            end_date=end_date,
            page=page,
            limit=limit,
        )

    def update_entry(self, entry_id: int, data: TaxEntryUpdate | Mapping[str, Any]) -> TaxEntry:
        return self._entries.update_entry(entry_id, data)

    def update_entry_status(self, entry_id: int, status: EntryStatus | str) -> TaxEntry:
        return self._entries.update_entry_status(entry_id, status)

    def delete_entry(self, entry_id: int) -> TaxEntry:
        return self._entries.delete_entry(entry_id)

    # ========================================================================
    # Returns and Summary
    # ========================================================================

    def generate_return(self, return_type, gstin: str, month: int, year: int) -> dict[str, Any]:
        """Generate a GSTR-style return for one calendar month."""
        return self._returns.generate_return(return_type, gstin, month, year)

    def summarize(self, start_date: date | None = None, end_date: date | None = None) -> dict[str, Any]:
        """Dashboard totals over an optional date window."""
        return self._summary.summarize(start_date=start_date, end_date=end_date)


def build_gst_service(db: Session) -> GSTService:
    """Factory function to create a GSTService instance."""
    return GSTService(db=db)


__all__ = [
    "GSTService",
    "build_gst_service",
    "TaxSlabService",
    "TaxEntryService",
    "GSTReturnService",
    "TaxSummaryService",
]
