"""Common dependencies for GST routes."""
from typing import Annotated, TypeAlias

from fastapi import Depends
from sqlalchemy.orm import Session

from gstledger.db.session import get_db
from gstledger.services.gst import GSTService, build_gst_service

DbDep: TypeAlias = Annotated[Session, Depends(get_db)]


def get_gst_service(db: DbDep) -> GSTService:
    """Get a GSTService bound to the request's session."""
    return build_gst_service(db)


GSTServiceDep: TypeAlias = Annotated[GSTService, Depends(get_gst_service)]
