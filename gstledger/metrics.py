"""Metrics facade.

Service code should ONLY call the semantic helpers here so we can change the
backend freely.

Metrics:
- tax_slabs_created_total       Slabs created (individually or via bulk seed)
- tax_default_slab_changes_total Writes that moved the default flag
- tax_entries_created_total     Tax entries recorded, by return type
- gst_returns_generated_total   Returns generated, by return type
- gst_return_invoices           Invoices per generated return
- tax_summaries_served_total    Dashboard summaries served
"""

from __future__ import annotations

import logging

from prometheus_client import Counter, Histogram

logger = logging.getLogger("metrics")

_TAX_SLABS_CREATED = Counter("tax_slabs_created_total", "Tax slabs created", ["source"])
_DEFAULT_SLAB_CHANGES = Counter("tax_default_slab_changes_total", "Writes that set a new default tax slab")
_TAX_ENTRIES_CREATED = Counter("tax_entries_created_total", "Tax entries recorded", ["gst_return"])
_GST_RETURNS_GENERATED = Counter("gst_returns_generated_total", "GST returns generated", ["return_type"])
_GST_RETURN_INVOICES = Histogram(
    "gst_return_invoices",
    "Number of invoices aggregated into a generated return",
    buckets=(0, 1, 5, 10, 25, 50, 100, 250, 500, 1000, 5000),
)
_TAX_SUMMARIES = Counter("tax_summaries_served_total", "Tax dashboard summaries served")


def tax_slab_created(source: str = "single", count: int = 1):
    _TAX_SLABS_CREATED.labels(source=source).inc(count)
    logger.debug("metric tax_slabs_created_total{source=%s} += %s", source, count)


def default_slab_changed():
    _DEFAULT_SLAB_CHANGES.inc()


def tax_entry_created(gst_return: str):
    _TAX_ENTRIES_CREATED.labels(gst_return=gst_return).inc()


def gst_return_generated(return_type: str, invoice_count: int):
    _GST_RETURNS_GENERATED.labels(return_type=return_type).inc()
    _GST_RETURN_INVOICES.observe(invoice_count)


def tax_summary_served():
    _TAX_SUMMARIES.inc()
