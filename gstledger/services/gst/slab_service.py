"""
Tax Slab Service - the slab registry.

Owns slab CRUD and the single-default invariant. The default flag is kept
unique with a clear-then-set sequence inside one transaction; concurrent
writers may still interleave (last write wins), so ``get_default_slab``
tolerates zero or several flagged slabs.
"""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Iterable, Mapping, Sequence

from sqlalchemy import func, select, update

from gstledger import metrics
from gstledger.core.exceptions import (
    AlreadySeededError,
    DefaultSlabNotFoundError,
    DuplicateError,
    TaxSlabNotFoundError,
    ValidationError,
)
from gstledger.models.tax_models import SlabCategory, SlabStatus, SlabType, TaxSlab
from gstledger.models.tax_schemas import TaxSlabCreate, TaxSlabUpdate
from gstledger.services.gst.base import BaseGSTService

logger = logging.getLogger(__name__)


# Starter set inserted by bulk seeding; 18% is the default
DEFAULT_SLABS: tuple[dict[str, Any], ...] = (
    {
        "name": "No GST",
        "rate": Decimal("0"),
        "category": SlabCategory.EXEMPTED,
        "description": "Zero-rated Goods",
        "type": SlabType.EXEMPTED,
    },
    {
        "name": "GST 5%",
        "rate": Decimal("5"),
        "category": SlabCategory.ESSENTIAL_GOODS,
        "description": "Essential items",
        "type": SlabType.REGULAR,
    },
    {
        "name": "GST 12%",
        "rate": Decimal("12"),
        "category": SlabCategory.STANDARD,
        "description": "Standard goods",
        "type": SlabType.REGULAR,
    },
    {
        "name": "GST 18%",
        "rate": Decimal("18"),
        "category": SlabCategory.STANDARD,
        "description": "General goods",
        "type": SlabType.REGULAR,
        "is_default": True,
    },
    {
        "name": "GST 28%",
        "rate": Decimal("28"),
        "category": SlabCategory.LUXURY,
        "description": "Luxury items",
        "type": SlabType.REGULAR,
    },
)


class TaxSlabService(BaseGSTService):
    """
    Service for tax slab operations.

    Handles CRUD, status toggling, default resolution and bulk seeding.
    """

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_slab(self, slab_id: int) -> TaxSlab:
        """Get a slab by ID or raise TaxSlabNotFoundError."""
        slab = self._db.get(TaxSlab, slab_id)
        if slab is None:
            raise TaxSlabNotFoundError(slab_id)
        return slab

    def list_slabs(
        self,
        status: SlabStatus | str | None = None,
        is_default: bool | None = None,
    ) -> Sequence[TaxSlab]:
        """List slabs ordered by rate, optionally filtered by status and default flag."""
        stmt = select(TaxSlab)
        if status is not None:
            stmt = stmt.where(TaxSlab.status == self._choice(SlabStatus, status, "status").value)
        if is_default is not None:
            stmt = stmt.where(TaxSlab.is_default.is_(is_default))
        return self._db.scalars(stmt.order_by(TaxSlab.rate, TaxSlab.id)).all()

    def list_active_slabs(self) -> Sequence[TaxSlab]:
        """Active slabs only, for billing dropdowns."""
        return self.list_slabs(status=SlabStatus.ACTIVE)

    def count_slabs(self) -> int:
        return self._db.scalar(select(func.count(TaxSlab.id))) or 0

    def get_default_slab(self) -> TaxSlab:
        """
        Resolve the default slab.

        Returns the active slab flagged default (lowest id if several are
        flagged), else the active slab with the lowest rate.

        Raises:
            DefaultSlabNotFoundError: No active slab exists
        """
        slab = self._db.scalars(
            select(TaxSlab)
            .where(TaxSlab.is_default.is_(True), TaxSlab.status == SlabStatus.ACTIVE.value)
            .order_by(TaxSlab.id)
            .limit(1)
        ).first()
        if slab is None:
            slab = self._db.scalars(
                select(TaxSlab)
                .where(TaxSlab.status == SlabStatus.ACTIVE.value)
                .order_by(TaxSlab.rate, TaxSlab.id)
                .limit(1)
            ).first()
            if slab is not None:
                logger.info("No default tax slab flagged; falling back to lowest active rate %s", slab.name)
        if slab is None:
            raise DefaultSlabNotFoundError()
        return slab

    def resolve_rates(self, slab_ids: Iterable[int | None]) -> dict[int, Decimal]:
        """Map slab IDs to their current rate. Unknown IDs are simply absent."""
        ids = {slab_id for slab_id in slab_ids if slab_id is not None}
        if not ids:
            return {}
        rows = self._db.execute(select(TaxSlab.id, TaxSlab.rate).where(TaxSlab.id.in_(ids))).all()
        return {row.id: row.rate for row in rows}

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def _clear_default(self, exclude_id: int | None = None) -> None:
        """Unset is_default on every flagged slab except ``exclude_id``."""
        stmt = update(TaxSlab).where(TaxSlab.is_default.is_(True))
        if exclude_id is not None:
            stmt = stmt.where(TaxSlab.id != exclude_id)
        self._db.execute(stmt.values(is_default=False))

    def _ensure_name_available(self, name: str, exclude_id: int | None = None) -> None:
        stmt = select(TaxSlab.id).where(TaxSlab.name == name)
        if exclude_id is not None:
            stmt = stmt.where(TaxSlab.id != exclude_id)
        if self._db.scalar(stmt) is not None:
            raise DuplicateError("tax slab", "name", name)

    def create_slab(self, data: TaxSlabCreate | Mapping[str, Any]) -> TaxSlab:
        """Create a new tax slab, taking over the default flag if requested."""
        data = self._parse(TaxSlabCreate, data, "tax slab")
        if data.is_default and data.status != SlabStatus.ACTIVE:
            raise ValidationError(
                "A default tax slab must be active",
                errors=[{"field": "status", "message": "must be 'active' when is_default is true"}],
            )
        self._ensure_name_available(data.name)

        if data.is_default:
            self._clear_default()

        slab = TaxSlab(
            name=data.name,
            rate=data.rate,
            category=data.category.value,
            hsn_code=data.hsn_code or "",
            type=data.type.value,
            description=data.description or "",
            status=data.status.value,
            is_default=data.is_default,
        )
        self._db.add(slab)
        self._commit_unique("tax slab", "name", data.name)
        self._db.refresh(slab)

        metrics.tax_slab_created()
        if slab.is_default:
            metrics.default_slab_changed()
        logger.info("Created tax slab: %s (id=%s, rate=%s, default=%s)", slab.name, slab.id, slab.rate, slab.is_default)
        return slab

    def update_slab(self, slab_id: int, data: TaxSlabUpdate | Mapping[str, Any]) -> TaxSlab:
        """Apply a partial update; fields absent from the payload are left untouched."""
        data = self._parse(TaxSlabUpdate, data, "tax slab update")
        slab = self.get_slab(slab_id)
        update_data = data.model_dump(exclude_unset=True)

        new_status = update_data.get("status", slab.status)
        new_status = SlabStatus(new_status).value
        if update_data.get("is_default") and new_status != SlabStatus.ACTIVE.value:
            raise ValidationError(
                "A default tax slab must be active",
                errors=[{"field": "status", "message": "must be 'active' when is_default is true"}],
            )
        if "name" in update_data:
            self._ensure_name_available(update_data["name"], exclude_id=slab.id)

        if update_data.get("is_default"):
            self._clear_default(exclude_id=slab.id)
            metrics.default_slab_changed()

        for key, value in update_data.items():
            if key in {"category", "type", "status"}:
                value = value.value if hasattr(value, "value") else value
            elif key in {"hsn_code", "description"} and value is None:
                value = ""
            setattr(slab, key, value)

        if slab.is_default and new_status != SlabStatus.ACTIVE.value:
            logger.info("Tax slab %s deactivated; clearing its default flag", slab.id)
            slab.is_default = False

        self._commit_unique("tax slab", "name", slab.name)
        self._db.refresh(slab)
        logger.info("Updated tax slab: %s (id=%s) fields=%s", slab.name, slab.id, sorted(update_data))
        return slab

    def delete_slab(self, slab_id: int) -> TaxSlab:
        """Delete a slab. Entries referencing it keep a dangling reference."""
        slab = self.get_slab(slab_id)
        self._db.delete(slab)
        self._db.commit()
        logger.info("Deleted tax slab: %s (id=%s)", slab.name, slab_id)
        return slab

    def toggle_slab_status(self, slab_id: int) -> TaxSlab:
        """Flip active/inactive. Deactivating the default slab also clears its flag."""
        slab = self.get_slab(slab_id)
        if slab.is_active:
            slab.status = SlabStatus.INACTIVE.value
            if slab.is_default:
                logger.info("Tax slab %s deactivated; clearing its default flag", slab.id)
                slab.is_default = False
        else:
            slab.status = SlabStatus.ACTIVE.value
        self._db.commit()
        self._db.refresh(slab)
        logger.info("Tax slab %s (id=%s) is now %s", slab.name, slab.id, slab.status)
        return slab

    def bulk_create_default_slabs(self) -> list[TaxSlab]:
        """
        Seed the starter slab set (0/5/12/18/28%, 18% default).

        Raises:
            AlreadySeededError: Any slab already exists
        """
        existing_count = self.count_slabs()
        if existing_count > 0:
            raise AlreadySeededError(existing_count)

        slabs = [
            TaxSlab(
                name=spec["name"],
                rate=spec["rate"],
                category=spec["category"].value,
                hsn_code="",
                type=spec["type"].value,
                description=spec["description"],
                status=SlabStatus.ACTIVE.value,
                is_default=spec.get("is_default", False),
            )
            for spec in DEFAULT_SLABS
        ]
        self._db.add_all(slabs)
        self._db.commit()
        for slab in slabs:
            self._db.refresh(slab)

        metrics.tax_slab_created(source="seed", count=len(slabs))
        metrics.default_slab_changed()
        logger.info("Seeded %s default tax slabs", len(slabs))
        return slabs
