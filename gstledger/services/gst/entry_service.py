"""
Tax Entry Service - records taxable transactions.

Validates entries, resolves each line item's slab rate and freezes the
derived totals (taxable value, total tax, total amount) on the entry. Totals
are recomputed only when the entry's items are replaced; later slab rate
edits never touch existing entries.
"""
from __future__ import annotations

import logging
import math
from datetime import date
from typing import Any, Mapping, Sequence

from sqlalchemy import func, or_, select
from sqlalchemy.orm import selectinload

from gstledger import metrics
from gstledger.core.config import settings
from gstledger.core.exceptions import (
    DuplicateError,
    TaxEntryNotFoundError,
    ValidationError,
)
from gstledger.models.tax_models import EntryStatus, GSTReturnType, TaxEntry, TaxEntryItem
from gstledger.models.tax_schemas import (
    TaxEntryCreate,
    TaxEntryItemIn,
    TaxEntryPreview,
    TaxEntryStatusUpdate,
    TaxEntryUpdate,
)
from gstledger.services.gst.base import BaseGSTService
from gstledger.services.gst.computations import EntryTotals, TaxSplit, compute_entry_totals
from gstledger.services.gst.slab_service import TaxSlabService

logger = logging.getLogger(__name__)


def with_populated_items():
    """Loader option for the items -> slab populate join."""
    return selectinload(TaxEntry.items).selectinload(TaxEntryItem.slab)


class TaxEntryService(BaseGSTService):
    """
    Service for tax entry operations.

    Handles creation with derived totals, partial updates, status changes,
    deletion and filtered listing.
    """

    def __init__(self, db, slabs: TaxSlabService | None = None):
        super().__init__(db)
        self._slabs = slabs or TaxSlabService(db)

    # ------------------------------------------------------------------
    # Computation
    # ------------------------------------------------------------------

    def compute_totals(self, items: Sequence[TaxEntryItemIn]) -> EntryTotals:
        """Resolve slab rates for ``items`` and compute the entry totals."""
        rates = self._slabs.resolve_rates(item.tax_slab_id for item in items)
        return compute_entry_totals(items, rates)

    def preview_entry(self, data: TaxEntryPreview | Mapping[str, Any]) -> tuple[EntryTotals, TaxSplit]:
        """Price line items without recording anything."""
        data = self._parse(TaxEntryPreview, data, "tax entry preview")
        totals = self.compute_totals(data.items)
        return totals, totals.split(data.is_inter_state)

    @staticmethod
    def _build_items(items: Sequence[TaxEntryItemIn]) -> list[TaxEntryItem]:
        return [
            TaxEntryItem(
                position=position,
                name=item.name,
                quantity=item.quantity,
                price=item.price,
                tax_slab_id=item.tax_slab_id,
                hsn=item.hsn,
            )
            for position, item in enumerate(items)
        ]

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_entry(self, entry_id: int) -> TaxEntry:
        """Get an entry with its items and their slabs populated."""
        entry = self._db.scalars(
            select(TaxEntry)
            .options(with_populated_items())
            .where(TaxEntry.id == entry_id)
            .execution_options(populate_existing=True)
        ).first()
        if entry is None:
            raise TaxEntryNotFoundError(entry_id)
        return entry

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
        """
        List entries newest first with filtering and pagination.

        Args:
            search: Case-insensitive substring of invoice_no, customer or gstin
            gst_return: Return type label
            status: Entry status
            is_inter_state: Inter-state flag
            start_date: Inclusive lower date bound
            end_date: Inclusive upper date bound
            page: 1-based page number
            limit: Page size (defaults to settings.DEFAULT_PAGE_SIZE)

        Returns:
            (entries, pagination) where pagination has page, limit, total, pages
        """
        if limit is None:
            limit = settings.DEFAULT_PAGE_SIZE
        if page < 1 or limit < 1 or limit > settings.MAX_PAGE_SIZE:
            raise ValidationError(
                "Invalid pagination",
                errors=[{"field": "page/limit", "message": f"page >= 1 and 1 <= limit <= {settings.MAX_PAGE_SIZE}"}],
            )

        filters = []
        if search:
            pattern = f"%{search}%"
            filters.append(
                or_(
                    TaxEntry.invoice_no.ilike(pattern),
                    TaxEntry.customer.ilike(pattern),
                    TaxEntry.gstin.ilike(pattern),
                )
            )
        if gst_return is not None:
            filters.append(TaxEntry.gst_return == self._choice(GSTReturnType, gst_return, "gst_return").value)
        if status is not None:
            filters.append(TaxEntry.status == self._choice(EntryStatus, status, "status").value)
        if is_inter_state is not None:
            filters.append(TaxEntry.is_inter_state.is_(is_inter_state))
        if start_date is not None:
            filters.append(TaxEntry.date >= start_date)
        if end_date is not None:
            filters.append(TaxEntry.date <= end_date)

        total = self._db.scalar(select(func.count(TaxEntry.id)).where(*filters)) or 0
        entries = self._db.scalars(
            select(TaxEntry)
            .options(with_populated_items())
            .where(*filters)
            .order_by(TaxEntry.date.desc(), TaxEntry.id.desc())
            .limit(limit)
            .offset((page - 1) * limit)
            .execution_options(populate_existing=True)
        ).all()

        pagination = {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": math.ceil(total / limit),
        }
        return entries, pagination

    def _ensure_invoice_available(self, invoice_no: str) -> None:
        if self._db.scalar(select(TaxEntry.id).where(TaxEntry.invoice_no == invoice_no)) is not None:
            raise DuplicateError("tax entry", "invoice_no", invoice_no)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_entry(self, data: TaxEntryCreate | Mapping[str, Any]) -> TaxEntry:
        """Validate, price and record a taxable transaction."""
        data = self._parse(TaxEntryCreate, data, "tax entry")
        self._ensure_invoice_available(data.invoice_no)

        totals = self.compute_totals(data.items)
        entry = TaxEntry(
            invoice_no=data.invoice_no,
            date=data.date,
            customer=data.customer,
            gstin=data.gstin,
            is_inter_state=data.is_inter_state,
            taxable_value=totals.taxable_value,
            total_tax=totals.total_tax,
            total_amount=totals.total_amount,
            gst_return=data.gst_return.value,
            status=data.status.value,
            notes=data.notes,
            items=self._build_items(data.items),
        )
        self._db.add(entry)
        self._commit_unique("tax entry", "invoice_no", data.invoice_no)

        metrics.tax_entry_created(entry.gst_return)
        logger.info(
            "Created tax entry %s (id=%s) taxable=%s tax=%s return=%s",
            entry.invoice_no,
            entry.id,
            totals.taxable_value,
            totals.total_tax,
            entry.gst_return,
        )
        return self.get_entry(entry.id)

    def update_entry(self, entry_id: int, data: TaxEntryUpdate | Mapping[str, Any]) -> TaxEntry:
        """
        Apply a partial update.

        Replacing ``items`` recomputes the frozen totals against current slab
        rates. ``invoice_no`` cannot change after creation.
        """
        data = self._parse(TaxEntryUpdate, data, "tax entry update")
        entry = self.get_entry(entry_id)
        update_data = data.model_dump(exclude_unset=True, exclude={"items", "invoice_no"})

        if data.invoice_no is not None and data.invoice_no != entry.invoice_no:
            raise ValidationError(
                "Invoice number cannot be changed after creation",
                errors=[{"field": "invoice_no", "message": "immutable"}],
            )

        for key, value in update_data.items():
            if key in {"gst_return", "status"}:
                value = value.value
            setattr(entry, key, value)

        if "items" in data.model_fields_set:
            totals = self.compute_totals(data.items)
            entry.items = self._build_items(data.items)
            entry.taxable_value = totals.taxable_value
            entry.total_tax = totals.total_tax
            entry.total_amount = totals.total_amount
            logger.info("Recomputed totals for tax entry %s: taxable=%s tax=%s", entry.id, totals.taxable_value, totals.total_tax)

        self._db.commit()
        logger.info("Updated tax entry %s (id=%s) fields=%s", entry.invoice_no, entry.id, sorted(data.model_fields_set))
        return self.get_entry(entry.id)

    def update_entry_status(self, entry_id: int, status: EntryStatus | str | Mapping[str, Any]) -> TaxEntry:
        """Move an entry to any of the four statuses."""
        payload = status if isinstance(status, Mapping) else {"status": status}
        data = self._parse(TaxEntryStatusUpdate, payload, "entry status")
        entry = self.get_entry(entry_id)
        previous = entry.status
        entry.status = data.status.value
        self._db.commit()
        logger.info("Tax entry %s status %s -> %s", entry.id, previous, entry.status)
        return self.get_entry(entry.id)

    def delete_entry(self, entry_id: int) -> TaxEntry:
        entry = self.get_entry(entry_id)
        self._db.delete(entry)
        self._db.commit()
        logger.info("Deleted tax entry %s (id=%s)", entry.invoice_no, entry_id)
        return entry
