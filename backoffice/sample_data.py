from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict

from backoffice.billing import BillDraft, create_bill
from backoffice.models import Branch, Driver, LoadingSheet, Shipment, Vehicle
from backoffice.store import BackOffice

logger = logging.getLogger(__name__)


BRANCHES: list[Dict[str, Any]] = [
    {"id": "B001", "name": "Mumbai Central", "city": "Mumbai", "state": "Maharashtra", "pincode": "400001", "type": "Delivery & Pickup", "contact": "022-23456789"},
    {"id": "B002", "name": "Delhi Hub", "city": "New Delhi", "state": "Delhi", "pincode": "110001", "type": "Delivery & Pickup", "contact": "011-29876543"},
    {"id": "B003", "name": "Bangalore South", "city": "Bangalore", "state": "Karnataka", "pincode": "560001", "type": "Delivery Only", "contact": "080-21234567"},
    {"id": "B004", "name": "Chennai Port", "city": "Chennai", "state": "Tamil Nadu", "pincode": "600001", "type": "Delivery & Pickup", "contact": "044-27654321"},
    {"id": "B005", "name": "Kolkata East", "city": "Kolkata", "state": "West Bengal", "pincode": "700001", "type": "Delivery Only", "contact": "033-25432198"},
    {"id": "B006", "name": "Pune Hub", "city": "Pune", "state": "Maharashtra", "pincode": "411001", "type": "Delivery & Pickup", "contact": "020-29876543"},
]

DRIVERS: list[Dict[str, Any]] = [
    {"id": "D01", "name": "Ramesh Kumar", "phone": "9876543210", "license_number": "DL1420200012345", "license_expiry": "2028-10-15", "vehicle_id": "V001", "salary": 35000},
    {"id": "D02", "name": "Suresh Singh", "phone": "9876543211", "license_number": "MH0120210054321", "license_expiry": "2027-05-20", "vehicle_id": "V002", "salary": 40000},
    {"id": "D03", "name": "Amit Patel", "phone": "9876543212", "license_number": "GJ0520190098765", "license_expiry": "2029-01-30", "vehicle_id": "V003", "salary": 38000},
    {"id": "D04", "name": "Vijay Sharma", "phone": "9876543213", "license_number": "RJ1420220011223", "license_expiry": "2026-11-22", "vehicle_id": "V004", "salary": 42000},
    {"id": "D05", "name": "Anil Yadav", "phone": "9876543214", "license_number": "UP7820180044556", "license_expiry": "2028-08-01", "vehicle_id": None, "salary": 32000},
    {"id": "D06", "name": "Sunil Gupta", "phone": "9876543215", "license_number": "PB0220230078901", "license_expiry": "2029-03-12", "vehicle_id": "V006", "salary": 36000},
    {"id": "D07", "name": "Rajesh Meena", "phone": "9876543217", "license_number": "RJ2720210087654", "license_expiry": "2026-07-18", "vehicle_id": None, "salary": 33000},
]

VEHICLES: list[Dict[str, Any]] = [
    {"id": "V001", "registration_number": "MH 01 AB 1234", "model": "Tata Prima 4028", "type": "20ft Container", "driver_id": "D01", "status": "On Road", "permit_expiry": "2026-03-31", "maintenance_due": "2025-09-10"},
    {"id": "V002", "registration_number": "DL 1C CD 5678", "model": "Ashok Leyland 4220", "type": "40ft Container", "driver_id": "D02", "status": "On Road", "permit_expiry": "2025-12-31", "maintenance_due": "2025-08-15"},
    {"id": "V003", "registration_number": "KA 05 EF 9012", "model": "Eicher Pro 6028", "type": "Open Body", "driver_id": "D03", "status": "Available", "permit_expiry": "2027-06-30", "maintenance_due": "2025-11-01"},
    {"id": "V004", "registration_number": "TN 22 GH 3456", "model": "BharatBenz 2823", "type": "Tanker", "driver_id": "D04", "status": "Maintenance", "permit_expiry": "2026-01-15", "maintenance_due": "2025-07-25"},
    {"id": "V005", "registration_number": "WB 11 IJ 7890", "model": "Tata Signa 2823", "type": "20ft Container", "driver_id": None, "status": "Available", "permit_expiry": "2028-02-28", "maintenance_due": "2026-01-20"},
    {"id": "V006", "registration_number": "PB 02 KL 3456", "model": "Ashok Leyland 3120", "type": "20ft Container", "driver_id": "D06", "status": "On Road", "permit_expiry": "2027-01-15", "maintenance_due": "2025-12-10"},
]

SHIPMENTS: list[Dict[str, Any]] = [
    {
        "id": "LRN2025001", "date": "2025-07-15", "origin": "Mumbai, Maharashtra", "destination": "New Delhi, Delhi",
        "consignor": {"name": "ABC Textiles", "address": "123 Textile Market, Mumbai", "gst": "27AAAAA0000A1Z5", "phone": "9811111111"},
        "consignee": {"name": "XYZ Retail", "address": "456 Karol Bagh, New Delhi", "gst": "07BBBBB0000B1Z5", "phone": "9822222222"},
        "packages": 50, "weight": 5000, "value": 750000, "status": "Delivered", "vehicle_id": "V001",
    },
    {
        "id": "LRN2025002", "date": "2025-07-18", "origin": "Bangalore, Karnataka", "destination": "Chennai, Tamil Nadu",
        "consignor": {"name": "PQR Electronics", "address": "789 Electronic City, Bangalore", "gst": "29CCCCC0000C1Z5", "phone": "9833333333"},
        "consignee": {"name": "LMN Distributors", "address": "101 Mount Road, Chennai", "gst": "33DDDDD0000D1Z5", "phone": "9844444444"},
        "packages": 200, "weight": 2500, "value": 1200000, "status": "In Transit", "vehicle_id": "V002",
    },
    {
        "id": "LRN2025003", "date": "2025-07-20", "origin": "Pune, Maharashtra", "destination": "Mumbai, Maharashtra",
        "consignor": {"name": "Pharma Co", "address": "654 Hinjewadi, Pune", "gst": "27EEEEE0000E1Z5", "phone": "9855555555"},
        "consignee": {"name": "HealthCare Ltd", "address": "321 MIDC, Mumbai", "gst": "27FFFFF0000F1Z5", "phone": "9866666666"},
        "packages": 100, "weight": 1000, "value": 400000, "status": "Pending", "vehicle_id": "V003",
    },
    {
        "id": "LRN2025004", "date": "2025-07-21", "origin": "Kolkata, West Bengal", "destination": "Patna, Bihar",
        "consignor": {"name": "Jute Industries", "address": "111 Howrah, Kolkata", "gst": "19GGGGG0000G1Z5", "phone": "9877777777"},
        "consignee": {"name": "Bihar Traders", "address": "222 Boring Road, Patna", "gst": "10HHHHH0000H1Z5", "phone": "9888888888"},
        "packages": 30, "weight": 3000, "value": 90000, "status": "In Transit", "vehicle_id": "V001",
    },
    {
        "id": "LRN2025005", "date": "2025-07-22", "origin": "New Delhi, Delhi", "destination": "Jaipur, Rajasthan",
        "consignor": {"name": "Crafts Emporium", "address": "777 Dilli Haat, New Delhi", "gst": "07IIIII0000I1Z5", "phone": "9899999999"},
        "consignee": {"name": "Rajasthali", "address": "888 MI Road, Jaipur", "gst": "08JJJJJ0000J1Z5", "phone": "9800000000"},
        "packages": 150, "weight": 1500, "value": 300000, "status": "Delivered", "vehicle_id": "V004",
    },
]

# (bill id, shipment id, draft)
BILLS: list[tuple[str, str, Dict[str, Any]]] = [
    ("BILL2025001", "LRN2025001", {
        "date": "2025-07-16", "status": "Paid", "charge_status": "Paid", "gst_paid_by": "consignee",
        "articles": [{"quantity": 50, "package_type": "Bale", "details": "Cotton Bales", "amount": 1000}],
    }),
    ("BILL2025002", "LRN2025005", {
        "date": "2025-07-23", "status": "Unpaid", "charge_status": "To Pay", "gst_paid_by": "consignor",
        "articles": [{"quantity": 150, "package_type": "Crate", "details": "Handicrafts", "amount": 120}],
        "charges": {"hamali": 1500, "door_delivery": 500},
    }),
    ("BILL2025003", "LRN2025003", {
        "date": "2025-07-21", "status": "Overdue", "charge_status": "TBB", "gst_paid_by": "consignor",
        "articles": [{"quantity": 100, "package_type": "Box", "details": "Medicines", "amount": 150}],
    }),
]

LOADING_SHEETS: list[Dict[str, Any]] = [
    {"id": "LS001", "date": "2025-07-18", "vehicle_id": "V002", "driver_id": "D02", "branch_id": "B003", "shipment_ids": ["LRN2025002"], "route": "Bangalore -> Chennai"},
    {"id": "LS002", "date": "2025-07-21", "vehicle_id": "V001", "driver_id": "D01", "branch_id": "B005", "shipment_ids": ["LRN2025004"], "route": "Kolkata -> Patna"},
]


def load_sample_data(office: BackOffice) -> BackOffice:
    for row in BRANCHES:
        office.branches.add(Branch.model_validate(row))
    for row in VEHICLES:
        office.vehicles.add(Vehicle.model_validate(row))
    for row in DRIVERS:
        office.drivers.add(Driver.model_validate(row))
    for row in SHIPMENTS:
        office.shipments.add(Shipment.model_validate(row))

    for bill_id, shipment_id, draft in BILLS:
        shipment = office.shipments.get(shipment_id)
        office.bills.add(create_bill(shipment, BillDraft.model_validate(draft), bill_id, today=date(2025, 7, 1)))

    for row in LOADING_SHEETS:
        sheet = office.loading_sheets.add(LoadingSheet.model_validate(row))
        for shipment_id in sheet.shipment_ids:
            office.shipments.get(shipment_id).loading_sheet_id = sheet.id

    logger.info("Sample data loaded", extra=office.counts())
    return office
