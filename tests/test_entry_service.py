"""Tests for tax entry recording."""
from datetime import date
from decimal import Decimal

import pytest

from gstledger.core.exceptions import DuplicateError, TaxEntryNotFoundError, ValidationError
from gstledger.core.config import settings


@pytest.fixture
def slabs(slab_factory):
    return {
        "18": slab_factory("GST 18%", 18, is_default=True),
        "5": slab_factory("GST 5%", 5),
    }


def _items(slabs):
    return [
        {"name": "Keyboard", "quantity": 2, "price": 100, "tax_slab_id": slabs["18"].id, "hsn": "8471"},
        {"name": "Rice", "quantity": 1, "price": 50, "tax_slab_id": slabs["5"].id, "hsn": "1006"},
    ]


def test_create_entry_freezes_totals(entry_factory, slabs):
    entry = entry_factory(_items(slabs))

    assert entry.id is not None
    assert entry.taxable_value == Decimal("250")
    assert entry.total_tax == Decimal("38.5")
    assert entry.total_amount == Decimal("288.5")
    assert entry.status == "Draft"
    assert entry.gst_return == "GSTR-1"
    assert [item.position for item in entry.items] == [0, 1]
    assert entry.items[0].slab.name == "GST 18%"


def test_create_entry_without_items(entry_factory):
    entry = entry_factory([])
    assert entry.taxable_value == entry.total_tax == entry.total_amount == Decimal("0")
    assert entry.items == []


def test_create_entry_unknown_slab_taxed_at_zero(entry_factory):
    entry = entry_factory([{"quantity": 3, "price": 10, "tax_slab_id": 999}])
    assert entry.taxable_value == Decimal("30")
    assert entry.total_tax == Decimal("0")
    assert entry.items[0].slab is None


def test_create_entry_duplicate_invoice(entry_factory, slabs):
    entry_factory(_items(slabs), invoice_no="INV-DUP")
    with pytest.raises(DuplicateError) as exc_info:
        entry_factory(_items(slabs), invoice_no="INV-DUP")
    assert exc_info.value.details["field"] == "invoice_no"


@pytest.mark.parametrize("missing", ["invoice_no", "date", "customer", "gst_return"])
def test_create_entry_missing_required_field(service, missing):
    data = {
        "invoice_no": "INV-1",
        "date": "2024-03-01",
        "customer": "Acme",
        "gst_return": "GSTR-1",
        "items": [],
    }
    data.pop(missing)
    with pytest.raises(ValidationError) as exc_info:
        service.create_entry(data)
    assert missing in {err["field"] for err in exc_info.value.details["errors"]}


@pytest.mark.parametrize("field,value", [("quantity", -1), ("price", -5)])
def test_create_entry_rejects_negative_item_values(entry_factory, field, value):
    item = {"quantity": 1, "price": 10}
    item[field] = value
    with pytest.raises(ValidationError):
        entry_factory([item])


def test_create_entry_rejects_unknown_return_type(entry_factory):
    with pytest.raises(ValidationError):
        entry_factory([], gst_return="GSTR-9")


def test_slab_rate_change_does_not_touch_existing_entry(service, entry_factory, slabs):
    entry = entry_factory(_items(slabs))
    service.update_slab(slabs["18"].id, {"rate": 28})

    reloaded = service.get_entry(entry.id)
    assert reloaded.total_tax == Decimal("38.5")
    assert reloaded.items[0].slab.rate == Decimal("28")


def test_slab_delete_leaves_dangling_reference(service, entry_factory, slabs):
    entry = entry_factory(_items(slabs))
    service.delete_slab(slabs["5"].id)

    reloaded = service.get_entry(entry.id)
    assert reloaded.items[1].tax_slab_id == slabs["5"].id
    assert reloaded.items[1].slab is None
    assert reloaded.total_tax == Decimal("38.5")


def test_preview_entry(service, slabs):
    totals, split = service.preview_entry({"items": _items(slabs), "is_inter_state": True})
    assert totals.total_tax == Decimal("38.5")
    assert split.igst == Decimal("38.5")
    assert service.list_entries()[1]["total"] == 0


def test_update_entry_fields(service, entry_factory, slabs):
    entry = entry_factory(_items(slabs))
    updated = service.update_entry(entry.id, {"customer": "Beta Stores", "notes": "follow up"})
    assert updated.customer == "Beta Stores"
    assert updated.notes == "follow up"
    assert updated.total_tax == Decimal("38.5")
    assert len(updated.items) == 2


def test_update_entry_items_recomputes_totals(service, entry_factory, slabs):
    entry = entry_factory(_items(slabs))
    updated = service.update_entry(
        entry.id,
        {"items": [{"quantity": 1, "price": 1000, "tax_slab_id": slabs["18"].id}]},
    )
    assert updated.taxable_value == Decimal("1000")
    assert updated.total_tax == Decimal("180")
    assert updated.total_amount == Decimal("1180")
    assert len(updated.items) == 1


def test_update_entry_invoice_no_is_immutable(service, entry_factory):
    entry = entry_factory([], invoice_no="INV-A")
    assert service.update_entry(entry.id, {"invoice_no": "INV-A"}).invoice_no == "INV-A"
    with pytest.raises(ValidationError):
        service.update_entry(entry.id, {"invoice_no": "INV-B"})


def test_update_missing_entry(service):
    with pytest.raises(TaxEntryNotFoundError):
        service.update_entry(12345, {"customer": "X"})


@pytest.mark.parametrize("status", ["Pending", "Paid", "Cancelled", "Draft"])
def test_update_entry_status(service, entry_factory, status):
    entry = entry_factory([])
    assert service.update_entry_status(entry.id, status).status == status


def test_update_entry_status_rejects_unknown(service, entry_factory):
    entry = entry_factory([])
    with pytest.raises(ValidationError):
        service.update_entry_status(entry.id, "Refunded")


def test_delete_entry_removes_items(service, entry_factory, slabs, db_session):
    from gstledger.models.tax_models import TaxEntryItem

    entry = entry_factory(_items(slabs))
    service.delete_entry(entry.id)
    with pytest.raises(TaxEntryNotFoundError):
        service.get_entry(entry.id)
    assert db_session.query(TaxEntryItem).count() == 0


def test_list_entries_filters(service, entry_factory):
    entry_factory([], invoice_no="INV-MAR", customer="Acme", date="2024-03-10")
    entry_factory([], invoice_no="INV-APR", customer="Beta", date="2024-04-10", gst_return="GSTR-3B", status="Paid")
    entry_factory([], invoice_no="INV-MAY", customer="Gamma", date="2024-05-10", is_inter_state=True)

    entries, pagination = service.list_entries()
    assert [e.invoice_no for e in entries] == ["INV-MAY", "INV-APR", "INV-MAR"]
    assert pagination == {"page": 1, "limit": settings.DEFAULT_PAGE_SIZE, "total": 3, "pages": 1}

    assert [e.invoice_no for e in service.list_entries(search="beta")[0]] == ["INV-APR"]
    assert [e.invoice_no for e in service.list_entries(gst_return="GSTR-3B")[0]] == ["INV-APR"]
    assert [e.invoice_no for e in service.list_entries(status="Paid")[0]] == ["INV-APR"]
    assert [e.invoice_no for e in service.list_entries(is_inter_state=True)[0]] == ["INV-MAY"]
    in_window = service.list_entries(start_date=date(2024, 3, 1), end_date=date(2024, 4, 30))[0]
    assert [e.invoice_no for e in in_window] == ["INV-APR", "INV-MAR"]


def test_list_entries_pagination(service, entry_factory):
    for day in range(1, 6):
        entry_factory([], date=f"2024-03-{day:02d}")

    page, pagination = service.list_entries(page=2, limit=2)
    assert [e.date for e in page] == [date(2024, 3, 3), date(2024, 3, 2)]
    assert pagination == {"page": 2, "limit": 2, "total": 5, "pages": 3}

    empty, pagination = service.list_entries(page=4, limit=2)
    assert empty == []
    assert pagination["pages"] == 3


@pytest.mark.parametrize("page,limit", [(0, 10), (1, 0), (1, 1000)])
def test_list_entries_rejects_bad_pagination(service, page, limit):
    with pytest.raises(ValidationError):
        service.list_entries(page=page, limit=limit)


@pytest.mark.parametrize("customer", ["  ", ""])
def test_update_entry_rejects_blank_customer(service, entry_factory, customer):
    entry = entry_factory([], customer="Acme Traders")
    with pytest.raises(ValidationError) as exc_info:
        service.update_entry(entry.id, {"customer": customer})
    assert exc_info.value.details["errors"][0]["field"] == "customer"
    assert service.get_entry(entry.id).customer == "Acme Traders"


def test_update_entry_strips_customer_and_invoice_no(service, entry_factory):
    entry = entry_factory([], invoice_no="INV-A")
    updated = service.update_entry(entry.id, {"customer": "  Beta Stores ", "invoice_no": " INV-A "})
    assert updated.customer == "Beta Stores"
    assert updated.invoice_no == "INV-A"
    with pytest.raises(ValidationError):
        service.update_entry(entry.id, {"invoice_no": "   "})


@pytest.mark.parametrize("filters", [{"status": "Refunded"}, {"gst_return": "GSTR-9"}])
def test_list_entries_unknown_filter_value_is_validation_error(service, filters):
    with pytest.raises(ValidationError) as exc_info:
        service.list_entries(**filters)
    assert exc_info.value.status_code == 400
    assert exc_info.value.details["errors"][0]["field"] in filters
