"""
GST Returns Service.

Handles:
- Loading a filing month's entries for one return type
- Aggregating them into a GSTR-style return (never persisted)
"""
import logging
from typing import Any, Dict

from sqlalchemy import select

from gstledger import metrics
from gstledger.core.exceptions import ValidationError
from gstledger.models.tax_models import GSTReturnType, TaxEntry
from gstledger.models.tax_schemas import GSTReturnRequest
from gstledger.services.gst.base import BaseGSTService
from gstledger.services.gst.computations import calculate_gst_return
from gstledger.services.gst.entry_service import with_populated_items
from gstledger.services.gst.period_utils import calculate_month_range

logger = logging.getLogger(__name__)


def parse_return_type(value) -> GSTReturnType:
    """Accept a label ("GSTR-2A") or a route code ("gstr2a")."""
    if isinstance(value, GSTReturnType):
        return value
    try:
        return GSTReturnType(value)
    except ValueError:
        parsed = GSTReturnType.from_route_code(str(value))
        if parsed is None:
            raise ValidationError(
                f"Unknown GST return type: {value}",
                errors=[{"field": "return_type", "message": f"must be one of {[t.value for t in GSTReturnType]}"}],
            )
        return parsed


class GSTReturnService(BaseGSTService):
    """Generates period-bounded returns from recorded entries."""

    def generate_return(self, return_type, gstin: str, month: int, year: int) -> Dict[str, Any]:
        """
        Generate a return for one calendar month.

        Args:
            return_type: Return label or route code, e.g. "GSTR-1" / "gstr1"
            gstin: Filer's GSTIN
            month: Month (1-12)
            year: Year

        Returns:
            Return dict as produced by ``calculate_gst_return``
        """
        request = self._parse(
            GSTReturnRequest,
            {"gstin": gstin, "month": month, "year": year},
            "return request",
        )
        kind = parse_return_type(return_type)
        start_date, end_date = calculate_month_range(request.year, request.month)

        entries = self._db.scalars(
            select(TaxEntry)
            .options(with_populated_items())
            .where(
                TaxEntry.gst_return == kind.value,
                TaxEntry.date >= start_date,
                TaxEntry.date <= end_date,
            )
            .order_by(TaxEntry.date, TaxEntry.id)
            .execution_options(populate_existing=True)
        ).all()

        report = calculate_gst_return(entries, kind.value, request.gstin, request.month, request.year)
        metrics.gst_return_generated(kind.value, len(entries))
        logger.info(
            "Generated %s for %s period %s: %s invoices",
            kind.value,
            request.gstin,
            report["period"],
            len(entries),
        )
        return report
