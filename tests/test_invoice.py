"""Tests for printable invoice rendering."""

import pytest

from backoffice.billing import BillDraft, update_bill
from backoffice.invoice import render_invoice_html, render_invoice_text, tax_rows
from backoffice.sample_data import load_sample_data
from backoffice.store import BackOffice


@pytest.fixture
def office():
    return load_sample_data(BackOffice())


def _pair(office, bill_id):
    bill = office.bills.get(bill_id)
    return bill, office.shipments.get(bill.shipment_id)


# ---------------------------------------------------------------------------
# tax_rows
# ---------------------------------------------------------------------------

def test_tax_rows_intra_state(office):
    bill, shipment = _pair(office, "BILL2025003")
    assert tax_rows(bill, shipment) == [("CGST (9%)", 1350.0), ("SGST (9%)", 1350.0)]


def test_tax_rows_inter_state(office):
    bill, shipment = _pair(office, "BILL2025001")
    assert tax_rows(bill, shipment) == [("IGST (18%)", 9000.0)]


def test_tax_rows_transport(office):
    bill, shipment = _pair(office, "BILL2025001")
    draft = BillDraft.model_validate({**bill.model_dump(), "gst_paid_by": "transport"})
    update_bill(bill, shipment, draft)
    assert tax_rows(bill, shipment) == [("CGST (2.5%)", 1250.0), ("SGST (2.5%)", 1250.0)]


# ---------------------------------------------------------------------------
# Text rendering
# ---------------------------------------------------------------------------

def test_text_invoice_totals(office):
    bill, shipment = _pair(office, "BILL2025002")
    text = render_invoice_text(bill, shipment)
    assert "Bill No: BILL2025002" in text
    assert "From: New Delhi, Delhi    To: Jaipur, Rajasthan" in text
    assert "150 x Crate Handicrafts @ ₹120.00 = ₹18,000.00" in text
    assert "Hamali Charges: ₹1,500.00" in text
    assert "Door Delivery: ₹500.00" in text
    assert "Sub Total: ₹20,000.00" in text
    assert "IGST (18%): ₹3,600.00" in text
    assert "Grand Total: ₹23,600.00" in text


def test_text_invoice_skips_zero_charges(office):
    bill, shipment = _pair(office, "BILL2025003")
    text = render_invoice_text(bill, shipment)
    assert "Surcharge" not in text
    assert "Freight Charges" not in text


def test_text_invoice_transport_details(office):
    bill, shipment = _pair(office, "BILL2025001")
    vehicle = office.vehicles.get("V001")
    driver = office.drivers.get("D01")
    text = render_invoice_text(bill, shipment, vehicle, driver)
    assert "LR No: LRN2025001" in text
    assert "Vehicle No: MH 01 AB 1234" in text
    assert "Driver Name: Ramesh Kumar" in text


def test_text_invoice_footer(office):
    bill, shipment = _pair(office, "BILL2025001")
    text = render_invoice_text(bill, shipment)
    assert text.endswith(
        "Terms & Conditions: Payment due within 30 days. "
        "Please make all cheques payable to Vahan Sarthi Logistics."
    )


# ---------------------------------------------------------------------------
# HTML rendering
# ---------------------------------------------------------------------------

def test_html_invoice_contains_rows(office):
    bill, shipment = _pair(office, "BILL2025003")
    html = render_invoice_html(bill, shipment)
    assert html.startswith("<!DOCTYPE html>")
    assert "<title>Invoice BILL2025003</title>" in html
    assert "CGST (9%)" in html
    assert "₹17,700.00" in html


def test_html_invoice_escapes_party_names(office):
    bill, shipment = _pair(office, "BILL2025001")
    shipment.consignor.name = "Shah & Sons <Mumbai>"
    html = render_invoice_html(bill, shipment)
    assert "Shah &amp; Sons &lt;Mumbai&gt;" in html
    assert "<Mumbai>" not in html
