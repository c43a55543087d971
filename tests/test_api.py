"""HTTP tests against the FastAPI app, seeded with the sample data."""

import pytest
from fastapi.testclient import TestClient

import main
from backoffice.sample_data import load_sample_data
from backoffice.store import BackOffice


@pytest.fixture
def client():
    main.office = load_sample_data(BackOffice())
    return TestClient(main.app)


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_version(client):
    body = client.get("/version").json()
    assert body["status"] == "ok"
    assert body["app_version"]


# ---------------------------------------------------------------------------
# Bill preview
# ---------------------------------------------------------------------------

class TestPreview:
    @pytest.fixture(autouse=True)
    def setup(self, client):
        self.client = client

    def test_preview_from_locations(self):
        resp = self.client.post(
            "/bills/preview",
            json={
                "origin": "Mumbai, Maharashtra",
                "destination": "New Delhi, Delhi",
                "gst_paid_by": "consignee",
                "articles": [{"quantity": 50, "amount": 1000}],
            },
        )
        assert resp.status_code == 200
        totals = resp.json()["totals"]
        assert totals["subtotal"] == pytest.approx(50000)
        assert totals["igst"] == pytest.approx(9000)
        assert totals["grand_total"] == pytest.approx(59000)
        assert totals["is_intra_state"] is False

    def test_preview_structured_locations(self):
        resp = self.client.post(
            "/bills/preview",
            json={
                "origin": {"city": "Pune", "state": "Maharashtra"},
                "destination": {"city": "Mumbai", "state": "Maharashtra"},
                "articles": [{"quantity": 100, "amount": 150}],
            },
        )
        totals = resp.json()["totals"]
        assert totals["cgst"] == pytest.approx(1350)
        assert totals["sgst"] == pytest.approx(1350)
        assert totals["display"]["tax_total"] == 2700.0

    def test_preview_for_shipment(self):
        resp = self.client.post(
            "/bills/preview",
            json={
                "shipment_id": "LRN2025004",
                "gst_paid_by": "transport",
                "articles": [{"quantity": 30, "amount": 100}],
                "charges": {"freight": 1000, "hamali": 300},
            },
        )
        totals = resp.json()["totals"]
        assert totals["freight"] == pytest.approx(4000)
        assert totals["cgst"] == pytest.approx(100)
        assert totals["grand_total"] == pytest.approx(4500)

    def test_preview_malformed_location(self):
        resp = self.client.post(
            "/bills/preview",
            json={"origin": "Unknown", "destination": "Pune, Maharashtra", "articles": []},
        )
        assert resp.status_code == 422
        assert resp.json()["detail"]["field"] == "origin"

    def test_preview_unknown_payer(self):
        resp = self.client.post(
            "/bills/preview",
            json={"origin": "Pune, Maharashtra", "destination": "Pune, Maharashtra", "gst_paid_by": "broker"},
        )
        assert resp.status_code == 422

    def test_preview_rejects_non_object(self):
        resp = self.client.post("/bills/preview", json=[1, 2])
        assert resp.status_code == 400


# ---------------------------------------------------------------------------
# Bills
# ---------------------------------------------------------------------------

class TestBills:
    @pytest.fixture(autouse=True)
    def setup(self, client):
        self.client = client

    def test_list_all(self):
        body = self.client.get("/bills").json()
        assert body["count"] == 3
        assert body["bills"][0]["consignor"] == "ABC Textiles"

    def test_list_filtered(self):
        body = self.client.get("/bills", params={"bill_status": "Overdue"}).json()
        assert [b["id"] for b in body["bills"]] == ["BILL2025003"]

    def test_list_by_date(self):
        body = self.client.get("/bills", params={"date_from": "2025-07-22"}).json()
        assert [b["id"] for b in body["bills"]] == ["BILL2025002"]

    def test_create_bill(self):
        resp = self.client.post(
            "/bills",
            json={
                "shipment_id": "LRN2025004",
                "date": "2025-07-25",
                "gst_paid_by": "consignee",
                "articles": [{"quantity": 30, "package_type": "Bale", "amount": 100}],
            },
        )
        assert resp.status_code == 200
        bill = resp.json()["bill"]
        assert bill["id"] == "BILL2025004"
        assert bill["igst"] == pytest.approx(540)
        assert bill["total"] == pytest.approx(3540)
        assert bill["due_date"] == "2025-08-24"
        assert main.office.shipments.get("LRN2025004").bill_id == "BILL2025004"

    def test_create_bill_for_billed_shipment(self):
        resp = self.client.post(
            "/bills",
            json={"shipment_id": "LRN2025001", "articles": [{"quantity": 1, "amount": 10}]},
        )
        assert resp.status_code == 422
        assert resp.json()["detail"]["field"] == "shipment_id"

    def test_create_bill_without_articles(self):
        resp = self.client.post("/bills", json={"shipment_id": "LRN2025004"})
        assert resp.status_code == 422
        assert resp.json()["detail"]["field"] == "articles"

    def test_create_bill_missing_shipment(self):
        assert self.client.post("/bills", json={}).status_code == 400
        assert self.client.post("/bills", json={"shipment_id": "LRN0"}).status_code == 404

    def test_get_bill(self):
        body = self.client.get("/bills/BILL2025002").json()
        assert body["bill"]["route"] == "New Delhi -> Jaipur"
        assert self.client.get("/bills/BILL0").status_code == 404

    def test_save_bill_recomputes(self):
        resp = self.client.put("/bills/BILL2025003", json={"gst_paid_by": "transport", "status": "Paid"})
        assert resp.status_code == 200
        bill = resp.json()["bill"]
        assert bill["cgst"] == pytest.approx(375)
        assert bill["sgst"] == pytest.approx(375)
        assert bill["total"] == pytest.approx(15750)
        assert bill["status"] == "Paid"

    def test_create_bill_rejects_nan_rate(self):
        resp = self.client.post(
            "/bills",
            content='{"shipment_id": "LRN2025004", "articles": [{"quantity": 1, "amount": NaN}]}',
            headers={"content-type": "application/json"},
        )
        assert resp.status_code == 422
        assert resp.json()["detail"]["field"] == "articles[0].amount"
        assert len(main.office.bills) == 3
        assert main.office.shipments.get("LRN2025004").bill_id is None
        assert self.client.get("/dashboard").json()["outstanding"] == pytest.approx(41300)

    def test_preview_rejects_infinite_charge(self):
        resp = self.client.post(
            "/bills/preview",
            content=(
                '{"origin": "Pune, Maharashtra", "destination": "Mumbai, Maharashtra",'
                ' "articles": [{"quantity": 1, "amount": 10}], "charges": {"freight": Infinity}}'
            ),
            headers={"content-type": "application/json"},
        )
        assert resp.status_code == 422
        assert resp.json()["detail"]["field"] == "charges.freight"

    def test_delete_bill_frees_shipment(self):
        resp = self.client.delete("/bills/BILL2025001")
        assert resp.status_code == 200
        assert "BILL2025001" not in main.office.bills
        assert main.office.shipments.get("LRN2025001").bill_id is None

        resp = self.client.post(
            "/bills",
            json={"shipment_id": "LRN2025001", "date": "2025-08-01", "articles": [{"quantity": 50, "amount": 1000}]},
        )
        assert resp.status_code == 200
        assert resp.json()["bill"]["id"] == "BILL2025004"

    def test_delete_unknown_bill(self):
        assert self.client.delete("/bills/BILL0").status_code == 404

    def test_mark_overdue(self):
        resp = self.client.post("/bills/mark-overdue", params={"today": "2025-09-01"})
        assert resp.json()["overdue"] == ["BILL2025002"]

    def test_invoice_html(self):
        resp = self.client.get("/bills/BILL2025001/invoice")
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/html")
        assert "IGST (18%)" in resp.text
        assert "Ramesh Kumar" in resp.text


# ---------------------------------------------------------------------------
# Shipments, loading sheets, fleet
# ---------------------------------------------------------------------------

def test_list_shipments_with_counts(client):
    body = client.get("/shipments").json()
    assert len(body["shipments"]) == 5
    assert body["counts"] == {"Pending": 1, "In Transit": 2, "Delivered": 2, "Cancelled": 0}


def test_book_shipment(client):
    resp = client.post(
        "/shipments",
        json={
            "date": "2025-07-26",
            "origin": "Chennai, Tamil Nadu",
            "destination": {"city": "Bangalore", "state": "Karnataka"},
            "consignor": {"name": "Port Traders"},
            "consignee": {"name": "City Mart"},
            "status": "Delivered",
        },
    )
    assert resp.status_code == 200
    shipment = resp.json()["shipment"]
    assert shipment["id"] == "LRN2025006"
    assert shipment["status"] == "Pending"
    assert shipment["origin"] == {"city": "Chennai", "state": "Tamil Nadu"}


def test_book_shipment_bad_location(client):
    resp = client.post(
        "/shipments",
        json={
            "origin": "Chennai",
            "destination": "Bangalore, Karnataka",
            "consignor": {"name": "Port Traders"},
            "consignee": {"name": "City Mart"},
        },
    )
    assert resp.status_code == 422


def test_book_shipment_blank_structured_state(client):
    resp = client.post(
        "/shipments",
        json={
            "origin": "Chennai, Tamil Nadu",
            "destination": {"city": "Bangalore", "state": ""},
            "consignor": {"name": "Port Traders"},
            "consignee": {"name": "City Mart"},
        },
    )
    assert resp.status_code == 422
    assert len(main.office.shipments) == 5


def test_shipment_status_change(client):
    resp = client.post("/shipments/LRN2025002/status", json={"status": "Delivered"})
    assert resp.json()["shipment"]["status"] == "Delivered"
    resp = client.post("/shipments/LRN2025002/status", json={"status": "Pending"})
    assert resp.status_code == 422


def test_create_loading_sheet(client):
    resp = client.post(
        "/loading-sheets",
        json={
            "date": "2025-07-25",
            "vehicle_id": "V003",
            "driver_id": "D03",
            "branch_id": "B006",
            "shipment_ids": ["LRN2025003"],
        },
    )
    assert resp.status_code == 200
    assert resp.json()["loading_sheet"]["id"] == "LS003"
    assert client.get("/shipments/LRN2025003").json()["shipment"]["status"] == "In Transit"


def test_loading_sheet_unknown_vehicle(client):
    resp = client.post(
        "/loading-sheets",
        json={"vehicle_id": "V999", "driver_id": "D03", "branch_id": "B006", "shipment_ids": ["LRN2025003"]},
    )
    assert resp.status_code == 404


def test_add_driver_with_vehicle(client):
    resp = client.post(
        "/drivers",
        json={
            "name": "Manoj Tiwari",
            "phone": "9876543299",
            "license_number": "MP0920200011111",
            "license_expiry": "2029-01-01",
            "salary": 30000,
            "vehicle_id": "V005",
        },
    )
    assert resp.status_code == 200
    assert resp.json()["driver"]["id"] == "D08"
    vehicles = {v["id"]: v for v in client.get("/vehicles", params={"vehicle_status": "Available"}).json()["vehicles"]}
    assert vehicles["V005"]["driver_id"] == "D08"


def test_add_driver_invalid_phone(client):
    resp = client.post(
        "/drivers",
        json={
            "name": "Manoj Tiwari",
            "phone": "12345",
            "license_number": "MP0920200011111",
            "license_expiry": "2029-01-01",
            "salary": 30000,
        },
    )
    assert resp.status_code == 422
    assert resp.json()["detail"]["field"] == "phone"


def test_add_driver_unknown_vehicle_writes_nothing(client):
    resp = client.post(
        "/drivers",
        json={
            "name": "Manoj Tiwari",
            "phone": "9876543299",
            "license_number": "MP0920200011111",
            "license_expiry": "2029-01-01",
            "salary": 30000,
            "vehicle_id": "V999",
        },
    )
    assert resp.status_code == 404
    assert main.office.drivers.ids() == ["D01", "D02", "D03", "D04", "D05", "D06", "D07"]


def test_update_driver_unknown_vehicle_writes_nothing(client):
    resp = client.put("/drivers/D05", json={"name": "Anil Kumar Yadav", "vehicle_id": "V999"})
    assert resp.status_code == 404
    driver = main.office.drivers.get("D05")
    assert driver.name == "Anil Yadav"
    assert driver.vehicle_id is None


def test_delete_driver_releases_vehicle(client):
    client.delete("/drivers/D02")
    vehicles = {v["id"]: v for v in client.get("/vehicles").json()["vehicles"]}
    assert vehicles["V002"]["driver_id"] is None


def test_delete_branch_with_loading_sheet(client):
    assert client.delete("/branches/B003").status_code == 409
    assert client.delete("/branches/B001").status_code == 200


def test_fleet_expiring(client):
    body = client.get("/fleet/expiring", params={"today": "2025-07-20"}).json()
    assert [a["id"] for a in body["alerts"]] == ["V004", "V002"]


def test_dashboard(client):
    body = client.get("/dashboard").json()
    assert body["revenue"] == pytest.approx(59000)
    assert body["outstanding"] == pytest.approx(41300)
