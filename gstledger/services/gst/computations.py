"""GST computation functions.

Pure computation logic for entry totals, the CGST/SGST/IGST split, return
aggregation and dashboard summaries. No database access in this module; the
services load records and hand them over.

All arithmetic is done in ``Decimal`` so that totals are exact and repeated
aggregations over the same entries give identical results.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Iterable, Sequence

from gstledger.models.tax_models import GSTReturnType

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
TWO = Decimal("2")
HUNDRED = Decimal("100")

# HSN rollup key for line items recorded without an HSN code
UNKNOWN_HSN = "unknown"


def to_decimal(value: Any) -> Decimal:
    """Coerce a stored or user-supplied number to Decimal; None counts as zero."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


@dataclass(frozen=True)
class TaxSplit:
    cgst: Decimal = ZERO
    sgst: Decimal = ZERO
    igst: Decimal = ZERO


def split_tax(tax: Any, is_inter_state: bool) -> TaxSplit:
    """Attribute ``tax`` to its components.

    Inter-state supplies carry a single IGST component; intra-state supplies
    split the tax exactly in half between CGST and SGST.
    """
    amount = to_decimal(tax)
    if is_inter_state:
        return TaxSplit(igst=amount)
    half = amount / TWO
    return TaxSplit(cgst=half, sgst=half)


@dataclass(frozen=True)
class LineComputation:
    position: int
    tax_slab_id: int | None
    rate: Decimal
    item_value: Decimal
    item_tax: Decimal


@dataclass(frozen=True)
class EntryTotals:
    taxable_value: Decimal
    total_tax: Decimal
    total_amount: Decimal
    lines: tuple[LineComputation, ...] = field(default_factory=tuple)

    def split(self, is_inter_state: bool) -> TaxSplit:
        return split_tax(self.total_tax, is_inter_state)


def compute_line(quantity: Any, price: Any, rate: Any) -> tuple[Decimal, Decimal]:
    """Return (item_value, item_tax) for one line item."""
    item_value = to_decimal(quantity) * to_decimal(price)
    item_tax = item_value * to_decimal(rate) / HUNDRED
    return item_value, item_tax


def compute_entry_totals(
    items: Sequence[Any],
    rates: dict[int, Decimal],
) -> EntryTotals:
    """
    Compute the frozen totals of an entry.

    Args:
        items: Line items exposing ``quantity``, ``price`` and ``tax_slab_id``
        rates: Resolved slab rates by slab id; a missing id is taxed at 0

    Returns:
        EntryTotals with per-line breakdown
    """
    taxable_value = ZERO
    total_tax = ZERO
    lines: list[LineComputation] = []

    for position, item in enumerate(items):
        slab_id = getattr(item, "tax_slab_id", None)
        rate = rates.get(slab_id, ZERO) if slab_id is not None else ZERO
        if slab_id is not None and slab_id not in rates:
            logger.warning("Tax slab %s not found; line %s taxed at 0%%", slab_id, position)
        item_value, item_tax = compute_line(item.quantity, item.price, rate)
        taxable_value += item_value
        total_tax += item_tax
        lines.append(
            LineComputation(
                position=position,
                tax_slab_id=slab_id,
                rate=to_decimal(rate),
                item_value=item_value,
                item_tax=item_tax,
            )
        )

    return EntryTotals(
        taxable_value=taxable_value,
        total_tax=total_tax,
        total_amount=taxable_value + total_tax,
        lines=tuple(lines),
    )


def format_period_label(month: int, year: int) -> str:
    """'MM/YYYY' label used on returns."""
    return f"{int(month):02d}/{year}"


def _resolved_rate(item: Any) -> Decimal:
    slab = getattr(item, "slab", None)
    if slab is None:
        return ZERO
    return to_decimal(getattr(slab, "rate", None))


def calculate_gst_return(
    entries: Sequence[Any],
    return_type: str,
    gstin: str,
    month: int,
    year: int,
    generated_at: datetime | None = None,
) -> dict[str, Any]:
    """
    Aggregate entries into a GSTR-style return.

    The summary uses each entry's frozen totals. The HSN rollup re-resolves
    every line's rate through its populated slab, treating a deleted slab as 0%.

    Args:
        entries: Entries already filtered to the return type and period
        return_type: Return label, e.g. "GSTR-1"
        gstin: Filer's GSTIN
        month: Month (1-12)
        year: Year
        generated_at: Override for the generation timestamp

    Returns:
        Dict with gstin, return_type, period, summary, hsn_summary,
        invoices and generated_at
    """
    summary: dict[str, Any] = {
        "total_invoices": len(entries),
        "total_taxable_value": ZERO,
        "total_tax_amount": ZERO,
        "cgst": ZERO,
        "sgst": ZERO,
        "igst": ZERO,
        "cess": ZERO,
    }

    for entry in entries:
        entry_tax = to_decimal(entry.total_tax)
        summary["total_taxable_value"] += to_decimal(entry.taxable_value)
        summary["total_tax_amount"] += entry_tax

        split = split_tax(entry_tax, bool(entry.is_inter_state))
        summary["cgst"] += split.cgst
        summary["sgst"] += split.sgst
        summary["igst"] += split.igst

    # dicts keep insertion order, so rows come out in first-seen order
    hsn_rows: dict[tuple[str, Decimal], dict[str, Any]] = {}
    for entry in entries:
        for item in entry.items:
            hsn = item.hsn or UNKNOWN_HSN
            rate = _resolved_rate(item)
            key = (hsn, rate)
            row = hsn_rows.get(key)
            if row is None:
                row = hsn_rows[key] = {
                    "hsn": hsn,
                    "rate": rate,
                    "quantity": ZERO,
                    "taxable_value": ZERO,
                    "cgst": ZERO,
                    "sgst": ZERO,
                    "igst": ZERO,
                }

            item_value, item_tax = compute_line(item.quantity, item.price, rate)
            row["quantity"] += to_decimal(item.quantity)
            row["taxable_value"] += item_value

            split = split_tax(item_tax, bool(entry.is_inter_state))
            row["cgst"] += split.cgst
            row["sgst"] += split.sgst
            row["igst"] += split.igst

    stamp = generated_at or datetime.now(timezone.utc)
    return {
        "gstin": gstin,
        "return_type": return_type,
        "period": format_period_label(month, year),
        "summary": summary,
        "hsn_summary": list(hsn_rows.values()),
        "invoices": list(entries),
        "generated_at": stamp.isoformat(),
    }


def summarize_entries(entries: Iterable[Any]) -> dict[str, Any]:
    """
    Dashboard summary over a set of entries.

    Only the five known return labels are counted in ``return_stats``;
    entries carrying any other label still count toward the overall totals.
    """
    return_stats: dict[str, dict[str, Any]] = {
        return_type.value: {"count": 0, "tax": ZERO, "amount": ZERO}
        for return_type in GSTReturnType
    }
    total_entries = 0
    total_tax = ZERO
    total_invoice_value = ZERO

    for entry in entries:
        tax = to_decimal(entry.total_tax)
        amount = to_decimal(entry.total_amount)
        total_entries += 1
        total_tax += tax
        total_invoice_value += amount

        stats = return_stats.get(entry.gst_return)
        if stats is None:
            logger.debug("Skipping unknown return type %r in summary stats", entry.gst_return)
            continue
        stats["count"] += 1
        stats["tax"] += tax
        stats["amount"] += amount

    avg_tax_rate = total_tax / total_invoice_value if total_invoice_value > 0 else ZERO

    return {
        "total_entries": total_entries,
        "total_tax_amount": total_tax,
        "total_invoice_value": total_invoice_value,
        "avg_tax_rate": avg_tax_rate,
        "return_stats": return_stats,
    }
