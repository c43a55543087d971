from __future__ import annotations

import logging
import re
from datetime import date
from typing import Iterable

from backoffice.errors import ValidationError
from backoffice.models import LoadingSheet, Shipment
from backoffice.shipments import transition_shipment
from backoffice.store import BackOffice

logger = logging.getLogger(__name__)


def next_loading_sheet_id(existing: Iterable[str]) -> str:
    highest = 0
    for record_id in existing:
        match = re.match(r"^LS(\d+)$", record_id or "")
        if match:
            highest = max(highest, int(match.group(1)))
    return f"LS{highest + 1:03d}"


def route_label(shipments: list[Shipment]) -> str:
    """``"<origin city> -> <destination city>"`` over the distinct cities, in load order."""
    origins: list[str] = []
    destinations: list[str] = []
    for shipment in shipments:
        if shipment.origin.city not in origins:
            origins.append(shipment.origin.city)
        if shipment.destination.city not in destinations:
            destinations.append(shipment.destination.city)
    return f"{' / '.join(origins)} -> {' / '.join(destinations)}"


def create_loading_sheet(
    office: BackOffice,
    sheet_id: str,
    sheet_date: date,
    vehicle_id: str,
    driver_id: str,
    branch_id: str,
    shipment_ids: list[str],
) -> LoadingSheet:
    vehicle = office.vehicles.get(vehicle_id)
    office.drivers.get(driver_id)
    office.branches.get(branch_id)

    if vehicle.status == "Maintenance":
        raise ValidationError(f"Vehicle {vehicle.registration_number} is under maintenance", field="vehicle_id")
    if not shipment_ids:
        raise ValidationError("At least one shipment is required", field="shipment_ids")
    if len(set(shipment_ids)) != len(shipment_ids):
        raise ValidationError("Duplicate shipment in loading sheet", field="shipment_ids")

    shipments = [office.shipments.get(shipment_id) for shipment_id in shipment_ids]
    for shipment in shipments:
        if shipment.status != "Pending":
            raise ValidationError(
                f"Shipment {shipment.id} is {shipment.status}; only Pending shipments can be loaded",
                field="shipment_ids",
            )

    sheet = LoadingSheet(
        id=sheet_id,
        date=sheet_date,
        vehicle_id=vehicle.id,
        driver_id=driver_id,
        branch_id=branch_id,
        shipment_ids=list(shipment_ids),
        route=route_label(shipments),
    )
    office.loading_sheets.add(sheet)

    for shipment in shipments:
        transition_shipment(shipment, "In Transit")
        shipment.vehicle_id = vehicle.id
        shipment.loading_sheet_id = sheet.id
    vehicle.status = "On Road"

    logger.info(
        "Loading sheet created",
        extra={"sheet_id": sheet.id, "vehicle_id": vehicle.id, "shipments": len(shipments)},
    )
    return sheet
