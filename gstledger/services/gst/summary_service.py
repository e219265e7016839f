"""Tax dashboard summary service."""
from __future__ import annotations

import logging
from datetime import date
from typing import Any

from sqlalchemy import select

from gstledger import metrics
from gstledger.models.tax_models import TaxEntry
from gstledger.services.gst.base import BaseGSTService
from gstledger.services.gst.computations import summarize_entries

logger = logging.getLogger(__name__)


class TaxSummaryService(BaseGSTService):

    def summarize(self, start_date: date | None = None, end_date: date | None = None) -> dict[str, Any]:
        """Totals and per-return-type stats over an optional inclusive date window."""
        stmt = select(TaxEntry)
        if start_date is not None:
            stmt = stmt.where(TaxEntry.date >= start_date)
        if end_date is not None:
            stmt = stmt.where(TaxEntry.date <= end_date)

        entries = self._db.scalars(stmt).all()
        summary = summarize_entries(entries)
        metrics.tax_summary_served()
        logger.debug("Tax summary over %s entries (%s..%s)", summary["total_entries"], start_date, end_date)
        return summary
