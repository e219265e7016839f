from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import text
from sqlalchemy.orm import Session

from gstledger.db.session import get_db

router = APIRouter(tags=["health"])


def _check_db(db: Session) -> bool:
    db.execute(text("SELECT 1"))
    return True


@router.get("/healthz")
async def healthz(db: Annotated[Session, Depends(get_db)]) -> dict[str, str]:
    """Basic liveness probe (cheap)."""
    try:
        _check_db(db)
    except Exception as exc:  # noqa: BLE001
        raise HTTPException(status_code=503, detail="Database connectivity check failed") from exc
    return {"status": "ok"}


@router.get("/live")
async def live() -> dict[str, str]:
    """Liveness endpoint (no dependencies)."""
    return {"status": "alive"}
