"""HTTP tests for the /gst API."""
GSTIN = "29ABCDE1234F1Z5"


def _seed(client):
    resp = client.post("/gst/slabs/bulk-create")
    assert resp.status_code == 201, resp.text
    return {slab["name"]: slab for slab in resp.json()["data"]}


def _entry_payload(slabs, **overrides):
    payload = {
        "invoice_no": "INV-0001",
        "date": "2024-03-15",
        "customer": "Acme Traders",
        "gstin": GSTIN,
        "items": [
            {"name": "Keyboard", "quantity": 2, "price": 100, "tax_slab_id": slabs["GST 18%"]["id"], "hsn": "8471"},
            {"name": "Rice", "quantity": 1, "price": 50, "tax_slab_id": slabs["GST 5%"]["id"], "hsn": "1006"},
        ],
        "gst_return": "GSTR-1",
    }
    payload.update(overrides)
    return payload


def test_slab_crud_flow(client):
    created = client.post("/gst/slabs", json={"name": "GST 12%", "rate": 12, "category": "Standard"})
    assert created.status_code == 201, created.text
    slab = created.json()
    assert slab["rate"] == 12
    assert slab["status"] == "active"

    listing = client.get("/gst/slabs")
    assert listing.status_code == 200
    body = listing.json()
    assert body["count"] == 1
    assert body["cached"] is False

    got = client.get(f"/gst/slabs/{slab['id']}")
    assert got.json()["name"] == "GST 12%"

    updated = client.put(f"/gst/slabs/{slab['id']}", json={"description": "Processed food"})
    assert updated.status_code == 200
    assert updated.json()["description"] == "Processed food"
    assert updated.json()["rate"] == 12

    toggled = client.patch(f"/gst/slabs/{slab['id']}/toggle-status")
    assert toggled.json()["status"] == "inactive"
    assert client.get("/gst/slabs/active").json() == []

    deleted = client.delete(f"/gst/slabs/{slab['id']}")
    assert deleted.status_code == 200
    assert deleted.json()["message"] == "Tax slab deleted successfully"

    missing = client.get(f"/gst/slabs/{slab['id']}")
    assert missing.status_code == 404
    assert missing.json()["error"]["code"] == "GST002"


def test_slab_rate_out_of_range_rejected(client):
    resp = client.post("/gst/slabs", json={"name": "Bad", "rate": 101, "category": "Standard"})
    assert resp.status_code == 422


def test_duplicate_slab_name_conflict(client):
    client.post("/gst/slabs", json={"name": "GST 5%", "rate": 5, "category": "Essential Goods"})
    resp = client.post("/gst/slabs", json={"name": "GST 5%", "rate": 5, "category": "Essential Goods"})
    assert resp.status_code == 409
    assert resp.json()["error"]["code"] == "GST003"


def test_bulk_create_and_default(client):
    slabs = _seed(client)
    assert len(slabs) == 5
    assert slabs["GST 18%"]["is_default"] is True

    default = client.get("/gst/slabs/default")
    assert default.status_code == 200
    assert default.json()["name"] == "GST 18%"

    again = client.post("/gst/slabs/bulk-create")
    assert again.status_code == 400
    error = again.json()["error"]
    assert error["code"] == "GST004"
    assert error["message"] == "Found 5 existing tax slabs. Delete them first or use individual create endpoint."


def test_default_without_slabs(client):
    resp = client.get("/gst/slabs/default")
    assert resp.status_code == 404


def test_entry_lifecycle(client):
    slabs = _seed(client)
    created = client.post("/gst/entries", json=_entry_payload(slabs))
    assert created.status_code == 201, created.text
    entry = created.json()
    assert entry["taxable_value"] == 250
    assert entry["total_tax"] == 38.5
    assert entry["total_amount"] == 288.5
    assert entry["items"][0]["slab"]["name"] == "GST 18%"

    dup = client.post("/gst/entries", json=_entry_payload(slabs))
    assert dup.status_code == 409

    status = client.patch(f"/gst/entries/{entry['id']}/status", json={"status": "Paid"})
    assert status.status_code == 200
    assert status.json()["status"] == "Paid"

    updated = client.put(f"/gst/entries/{entry['id']}", json={"notes": "checked"})
    assert updated.json()["notes"] == "checked"
    assert updated.json()["total_tax"] == 38.5

    listing = client.get("/gst/entries", params={"status": "Paid"})
    assert listing.status_code == 200
    assert listing.json()["pagination"] == {"page": 1, "limit": 20, "total": 1, "pages": 1}

    deleted = client.delete(f"/gst/entries/{entry['id']}")
    assert deleted.json()["message"] == "Tax entry deleted successfully"
    assert client.get(f"/gst/entries/{entry['id']}").status_code == 404


def test_entry_validation_errors(client):
    resp = client.post("/gst/entries", json={"date": "2024-03-15", "gst_return": "GSTR-1"})
    assert resp.status_code == 422

    resp = client.get("/gst/entries", params={"limit": 0})
    assert resp.status_code == 422


def test_preview_entry(client):
    slabs = _seed(client)
    resp = client.post(
        "/gst/entries/preview",
        json={"items": _entry_payload(slabs)["items"], "is_inter_state": False},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["total_tax"] == 38.5
    assert body["cgst"] == 19.25
    assert body["sgst"] == 19.25
    assert body["igst"] == 0
    assert [line["item_tax"] for line in body["lines"]] == [36, 2.5]


def test_generate_return_and_summary(client):
    slabs = _seed(client)
    client.post("/gst/entries", json=_entry_payload(slabs))
    client.post("/gst/entries", json=_entry_payload(slabs, invoice_no="INV-0002", is_inter_state=True))
    client.post("/gst/entries", json=_entry_payload(slabs, invoice_no="INV-0003", date="2024-04-02"))

    resp = client.post("/gst/reports/gstr1", json={"gstin": GSTIN, "month": 3, "year": 2024})
    assert resp.status_code == 200, resp.text
    report = resp.json()
    assert report["period"] == "03/2024"
    assert report["return_type"] == "GSTR-1"
    assert report["summary"]["total_invoices"] == 2
    assert report["summary"]["cgst"] == 19.25
    assert report["summary"]["igst"] == 38.5
    assert len(report["invoices"]) == 2
    assert {row["hsn"] for row in report["hsn_summary"]} == {"8471", "1006"}

    summary = client.get("/gst/summary").json()
    assert summary["total_entries"] == 3
    assert summary["return_stats"]["GSTR-1"]["count"] == 3


def test_generate_return_unknown_code(client):
    resp = client.post("/gst/reports/gstr9", json={"gstin": GSTIN, "month": 3, "year": 2024})
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "GST001"


def test_health(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}
