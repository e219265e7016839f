"""Tax slab endpoints."""
import logging

from fastapi import APIRouter, Query

from gstledger.models import tax_schemas as schemas
from gstledger.models.tax_models import SlabStatus

from .dependencies import GSTServiceDep

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/slabs", response_model=schemas.TaxSlabListOut)
def list_slabs(
    service: GSTServiceDep,
    status: SlabStatus | None = Query(None, description="Filter by status"),
    is_default: bool | None = Query(None, description="Filter by default flag"),
):
    """List tax slabs ordered by rate."""
    slabs = service.list_slabs(status=status, is_default=is_default)
    return schemas.TaxSlabListOut(
        count=len(slabs),
        data=[schemas.TaxSlabOut.model_validate(s) for s in slabs],
    )


@router.get("/slabs/active", response_model=list[schemas.TaxSlabOut])
def list_active_slabs(service: GSTServiceDep):
    """Active slabs only, for billing dropdowns."""
    return [schemas.TaxSlabOut.model_validate(s) for s in service.list_active_slabs()]


@router.get("/slabs/default", response_model=schemas.TaxSlabOut)
def get_default_slab(service: GSTServiceDep):
    """
    Resolve the default slab.

    Falls back to the active slab with the lowest rate when none is flagged.
    404 when no active slab exists.
    """
    return schemas.TaxSlabOut.model_validate(service.get_default_slab())


@router.get("/slabs/{slab_id}", response_model=schemas.TaxSlabOut)
def get_slab(slab_id: int, service: GSTServiceDep):
    return schemas.TaxSlabOut.model_validate(service.get_slab(slab_id))


@router.post("/slabs", response_model=schemas.TaxSlabOut, status_code=201)
def create_slab(data: schemas.TaxSlabCreate, service: GSTServiceDep):
    """Create a tax slab; ``is_default=true`` moves the default flag to it."""
    return schemas.TaxSlabOut.model_validate(service.create_slab(data))


@router.post("/slabs/bulk-create", response_model=schemas.TaxSlabSeedOut, status_code=201)
def bulk_create_default_slabs(service: GSTServiceDep):
    """Seed the starter slab set. Rejected once any slab exists."""
    slabs = service.bulk_create_default_slabs()
    return schemas.TaxSlabSeedOut(
        message=f"{len(slabs)} default tax slabs created successfully",
        count=len(slabs),
        data=[schemas.TaxSlabOut.model_validate(s) for s in slabs],
    )


@router.put("/slabs/{slab_id}", response_model=schemas.TaxSlabOut)
def update_slab(slab_id: int, data: schemas.TaxSlabUpdate, service: GSTServiceDep):
    """Partial update; omitted fields are left unchanged."""
    return schemas.TaxSlabOut.model_validate(service.update_slab(slab_id, data))


@router.delete("/slabs/{slab_id}", response_model=schemas.MessageOut)
def delete_slab(slab_id: int, service: GSTServiceDep):
    """Delete a slab. Entries that reference it keep the dangling id."""
    service.delete_slab(slab_id)
    return schemas.MessageOut(message="Tax slab deleted successfully")


@router.patch("/slabs/{slab_id}/toggle-status", response_model=schemas.TaxSlabOut)
def toggle_slab_status(slab_id: int, service: GSTServiceDep):
    """Flip a slab between active and inactive."""
    slab = service.toggle_slab_status(slab_id)
    logger.debug("Toggled tax slab %s to %s", slab.id, slab.status)
    return schemas.TaxSlabOut.model_validate(slab)
