"""
GST models.

- TaxSlab: named rate bracket applied to line items, one of which may be the
  convenience default used to pre-select a rate in billing.
- TaxEntry / TaxEntryItem: a recorded taxable transaction with its line items.
  Derived totals are frozen on the entry when it is created or its items change.

Line items point at their slab through a plain integer column rather than a
foreign key: deleting a slab must not cascade into historical entries, so the
reference is allowed to dangle and ``TaxEntryItem.slab`` then loads as None.
"""
from __future__ import annotations

import datetime as dt
import enum
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    false,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from gstledger.db.base_class import Base


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class SlabCategory(str, enum.Enum):
    """Business category a slab is meant for."""
    ESSENTIAL_GOODS = "Essential Goods"
    STANDARD = "Standard"
    LUXURY = "Luxury"
    SERVICES = "Services"
    SPECIAL = "Special"
    EXEMPTED = "Exempted"


class SlabType(str, enum.Enum):
    REGULAR = "Regular"
    COMPOUNDED = "Compounded"
    EXEMPTED = "Exempted"
    NIL_RATED = "Nil Rated"


class SlabStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class GSTReturnType(str, enum.Enum):
    """Statutory filing buckets entries are tagged with."""
    GSTR_1 = "GSTR-1"
    GSTR_2 = "GSTR-2"
    GSTR_2A = "GSTR-2A"
    GSTR_2B = "GSTR-2B"
    GSTR_3B = "GSTR-3B"

    @property
    def route_code(self) -> str:
        """Path-friendly code, e.g. ``gstr2a``."""
        return self.value.replace("-", "").lower()

    @classmethod
    def from_route_code(cls, code: str) -> GSTReturnType | None:
        for member in cls:
            if member.route_code == code.lower():
                return member
        return None


class EntryStatus(str, enum.Enum):
    DRAFT = "Draft"
    PENDING = "Pending"
    PAID = "Paid"
    CANCELLED = "Cancelled"


class TaxSlab(Base):
    """A named GST rate bracket."""
    __tablename__ = "tax_slab"
    __table_args__ = (
        Index("ix_tax_slab_status_rate", "status", "rate"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    rate: Mapped[Decimal] = mapped_column(Numeric(6, 3), nullable=False)
    category: Mapped[str] = mapped_column(String(40), nullable=False)
    hsn_code: Mapped[str] = mapped_column(String(20), default="", server_default="")
    type: Mapped[str] = mapped_column(String(20), default=SlabType.REGULAR.value, server_default=SlabType.REGULAR.value)
    description: Mapped[str] = mapped_column(Text, default="", server_default="")
    status: Mapped[str] = mapped_column(String(10), default=SlabStatus.ACTIVE.value, server_default=SlabStatus.ACTIVE.value)
    is_default: Mapped[bool] = mapped_column(Boolean, default=False, server_default=false(), index=True)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
    )
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
    )

    @property
    def is_active(self) -> bool:
        return self.status == SlabStatus.ACTIVE.value

    def __repr__(self) -> str:
        return f"<TaxSlab id={self.id} name={self.name!r} rate={self.rate}>"


class TaxEntry(Base):
    """One taxable transaction with frozen derived totals."""
    __tablename__ = "tax_entry"
    __table_args__ = (
        Index("ix_tax_entry_return_date", "gst_return", "date"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    invoice_no: Mapped[str] = mapped_column(String(60), unique=True, index=True, nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    customer: Mapped[str] = mapped_column(String(200), nullable=False)
    gstin: Mapped[str | None] = mapped_column(String(20), nullable=True, index=True)
    is_inter_state: Mapped[bool] = mapped_column(Boolean, default=False, server_default=false())

    # Derived at creation / item change, never recomputed from later slab edits
    taxable_value: Mapped[Decimal] = mapped_column(Numeric, nullable=False)
    total_tax: Mapped[Decimal] = mapped_column(Numeric, nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Numeric, nullable=False)

    gst_return: Mapped[str] = mapped_column(String(10), nullable=False)
    status: Mapped[str] = mapped_column(String(10), default=EntryStatus.DRAFT.value, server_default=EntryStatus.DRAFT.value)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
    )
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
    )

    items: Mapped[list[TaxEntryItem]] = relationship(
        "TaxEntryItem",
        back_populates="entry",
        cascade="all, delete-orphan",
        order_by="TaxEntryItem.position",
    )

    def __repr__(self) -> str:
        return f"<TaxEntry id={self.id} invoice_no={self.invoice_no!r}>"


class TaxEntryItem(Base):
    """Line item of a tax entry."""
    __tablename__ = "tax_entry_item"

    id: Mapped[int] = mapped_column(primary_key=True)
    entry_id: Mapped[int] = mapped_column(ForeignKey("tax_entry.id", ondelete="CASCADE"), nullable=False, index=True)
    position: Mapped[int] = mapped_column(Integer, default=0)
    name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    quantity: Mapped[Decimal] = mapped_column(Numeric, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric, nullable=False)
    # Non-owning lookup key, not a foreign key
    tax_slab_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    hsn: Mapped[str | None] = mapped_column(String(20), nullable=True)

    entry: Mapped[TaxEntry] = relationship("TaxEntry", back_populates="items")
    slab: Mapped[TaxSlab | None] = relationship(
        "TaxSlab",
        primaryjoin="foreign(TaxEntryItem.tax_slab_id) == TaxSlab.id",
        viewonly=True,
    )
