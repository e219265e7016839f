"""
Pydantic schemas for the GST API.

Request schemas double as the validation layer of the services: services parse
raw mappings through them and turn pydantic errors into ``ValidationError``.
"""
from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, field_validator

from gstledger.models.tax_models import (
    EntryStatus,
    GSTReturnType,
    SlabCategory,
    SlabStatus,
    SlabType,
)

# Decimals stay exact internally and are emitted as JSON numbers
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


def _reject_explicit_null(value: Any, field_name: str) -> Any:
    if value is None:
        raise ValueError(f"{field_name} cannot be null")
    return value


def _strip_non_blank(value: str | None, field_name: str) -> str | None:
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError(f"{field_name} cannot be blank")
    return value


# ============================================================================
# Tax Slab Schemas
# ============================================================================

class TaxSlabCreate(BaseModel):
    """Schema for creating a tax slab."""
    name: str = Field(..., min_length=1, max_length=100)
    rate: Decimal = Field(..., ge=0, le=100, decimal_places=3)
    category: SlabCategory
    hsn_code: str | None = Field(None, max_length=20)
    type: SlabType = SlabType.REGULAR
    description: str | None = None
    status: SlabStatus = SlabStatus.ACTIVE
    is_default: bool = False

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        return _strip_non_blank(v, "name")


class TaxSlabUpdate(BaseModel):
    """Partial update; fields left out of the payload are untouched."""
    name: str | None = Field(None, min_length=1, max_length=100)
    rate: Decimal | None = Field(None, ge=0, le=100, decimal_places=3)
    category: SlabCategory | None = None
    hsn_code: str | None = Field(None, max_length=20)
    type: SlabType | None = None
    description: str | None = None
    status: SlabStatus | None = None
    is_default: bool | None = None

    @field_validator("name", "rate", "category", "type", "status", "is_default")
    @classmethod
    def _not_null(cls, v: Any, info) -> Any:
        return _reject_explicit_null(v, info.field_name)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str | None) -> str | None:
        return _strip_non_blank(v, "name")


class TaxSlabOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    rate: Money
    category: str
    hsn_code: str | None = ""
    type: str
    description: str | None = ""
    status: str
    is_default: bool
    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None


class TaxSlabListOut(BaseModel):
    count: int
    data: list[TaxSlabOut]
    cached: bool = False  # reserved for client-side caching, always False today


class MessageOut(BaseModel):
    message: str


class TaxSlabSeedOut(BaseModel):
    message: str
    count: int
    data: list[TaxSlabOut]


# ============================================================================
# Tax Entry Schemas
# ============================================================================

class TaxEntryItemIn(BaseModel):
    name: str | None = Field(None, max_length=200)
    quantity: Decimal = Field(..., ge=0)
    price: Decimal = Field(..., ge=0)
    tax_slab_id: int | None = None
    hsn: str | None = Field(None, max_length=20)


class TaxEntryCreate(BaseModel):
    """Schema for recording a taxable transaction."""
    invoice_no: str = Field(..., min_length=1, max_length=60)
    date: dt.date
    customer: str = Field(..., min_length=1, max_length=200)
    gstin: str | None = Field(None, max_length=20)
    items: list[TaxEntryItemIn] = Field(default_factory=list)
    is_inter_state: bool = False
    gst_return: GSTReturnType
    status: EntryStatus = EntryStatus.DRAFT
    notes: str | None = None

    @field_validator("invoice_no", "customer")
    @classmethod
    def _strip_required(cls, v: str, info) -> str:
        return _strip_non_blank(v, info.field_name)


class TaxEntryUpdate(BaseModel):
    """Partial update. ``invoice_no`` is accepted only if it is unchanged."""
    invoice_no: str | None = None
    date: dt.date | None = None
    customer: str | None = Field(None, min_length=1, max_length=200)
    gstin: str | None = Field(None, max_length=20)
    items: list[TaxEntryItemIn] | None = None
    is_inter_state: bool | None = None
    gst_return: GSTReturnType | None = None
    status: EntryStatus | None = None
    notes: str | None = None

    @field_validator("date", "customer", "items", "is_inter_state", "gst_return", "status")
    @classmethod
    def _not_null(cls, v: Any, info) -> Any:
        return _reject_explicit_null(v, info.field_name)

    @field_validator("invoice_no", "customer")
    @classmethod
    def _strip_required(cls, v: str | None, info) -> str | None:
        return _strip_non_blank(v, info.field_name)


class TaxEntryStatusUpdate(BaseModel):
    status: EntryStatus


class TaxEntryPreview(BaseModel):
    """Line items to price without recording an entry."""
    items: list[TaxEntryItemIn] = Field(default_factory=list)
    is_inter_state: bool = False


class TaxEntryItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    position: int
    name: str | None = None
    quantity: Money
    price: Money
    tax_slab_id: int | None = None
    hsn: str | None = None
    slab: TaxSlabOut | None = None  # populated; None when the slab was deleted


class TaxEntryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    invoice_no: str
    date: dt.date
    customer: str
    gstin: str | None = None
    items: list[TaxEntryItemOut] = []
    is_inter_state: bool
    taxable_value: Money
    total_tax: Money
    total_amount: Money
    gst_return: str
    status: str
    notes: str | None = None
    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None


class PaginationOut(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class TaxEntryListOut(BaseModel):
    data: list[TaxEntryOut]
    pagination: PaginationOut


class LineComputationOut(BaseModel):
    position: int
    tax_slab_id: int | None = None
    rate: Money
    item_value: Money
    item_tax: Money


class TaxEntryPreviewOut(BaseModel):
    taxable_value: Money
    total_tax: Money
    total_amount: Money
    cgst: Money
    sgst: Money
    igst: Money
    lines: list[LineComputationOut]


# ============================================================================
# Return / Summary Schemas
# ============================================================================

class GSTReturnRequest(BaseModel):
    gstin: str = Field(..., min_length=1, max_length=20)
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=2000, le=2100)

    @field_validator("gstin")
    @classmethod
    def _strip_gstin(cls, v: str) -> str:
        return _strip_non_blank(v, "gstin")


class GSTReturnSummaryOut(BaseModel):
    total_invoices: int
    total_taxable_value: Money
    total_tax_amount: Money
    cgst: Money
    sgst: Money
    igst: Money
    cess: Money


class HSNSummaryOut(BaseModel):
    hsn: str
    rate: Money
    quantity: Money
    taxable_value: Money
    cgst: Money
    sgst: Money
    igst: Money


class GSTReturnOut(BaseModel):
    gstin: str
    return_type: str
    period: str
    summary: GSTReturnSummaryOut
    hsn_summary: list[HSNSummaryOut]
    invoices: list[TaxEntryOut]
    generated_at: str


class ReturnStatsOut(BaseModel):
    count: int
    tax: Money
    amount: Money


class TaxSummaryOut(BaseModel):
    total_entries: int
    total_tax_amount: Money
    total_invoice_value: Money
    avg_tax_rate: Money
    return_stats: dict[str, ReturnStatsOut]
