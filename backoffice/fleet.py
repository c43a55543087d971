from __future__ import annotations

import logging
import re
from datetime import date, timedelta
from typing import Any, Dict, Iterable

from backoffice.errors import ValidationError
from backoffice.models import Driver, Vehicle
from backoffice.store import InMemoryRepository

logger = logging.getLogger(__name__)

_PHONE_RE = re.compile(r"^\d{10}$")


def validate_driver(driver: Driver) -> None:
    """Same rules as the driver form."""
    if len(driver.name.strip()) < 2:
        raise ValidationError("Name must be at least 2 characters.", field="name")
    if driver.salary <= 0:
        raise ValidationError("Salary must be a positive number.", field="salary")
    if not _PHONE_RE.match(driver.phone or ""):
        raise ValidationError("Phone number must be 10 digits.", field="phone")
    if len((driver.license_number or "").strip()) < 5:
        raise ValidationError("A valid license number is required.", field="license_number")


def next_driver_id(existing: Iterable[str]) -> str:
    highest = 0
    for record_id in existing:
        match = re.match(r"^D(\d+)$", record_id or "")
        if match:
            highest = max(highest, int(match.group(1)))
    return f"D{highest + 1:02d}"


def release_driver(vehicles: InMemoryRepository[Vehicle], drivers: InMemoryRepository[Driver], driver_id: str) -> None:
    driver = drivers.get(driver_id)
    vehicle = vehicles.find(driver.vehicle_id)
    if vehicle is not None and vehicle.driver_id == driver.id:
        vehicle.driver_id = None
    driver.vehicle_id = None


def assign_driver(
    vehicles: InMemoryRepository[Vehicle],
    drivers: InMemoryRepository[Driver],
    vehicle_id: str,
    driver_id: str,
) -> Vehicle:
    """Link a driver and a vehicle, releasing whatever either was linked to."""
    vehicle = vehicles.get(vehicle_id)
    driver = drivers.get(driver_id)

    if driver.vehicle_id and driver.vehicle_id != vehicle.id:
        release_driver(vehicles, drivers, driver.id)
    if vehicle.driver_id and vehicle.driver_id != driver.id:
        previous = drivers.find(vehicle.driver_id)
        if previous is not None:
            previous.vehicle_id = None

    vehicle.driver_id = driver.id
    driver.vehicle_id = vehicle.id
    logger.info("Driver assigned", extra={"vehicle_id": vehicle.id, "driver_id": driver.id})
    return vehicle


def available_drivers(drivers: Iterable[Driver]) -> list[Driver]:
    return [driver for driver in drivers if not driver.vehicle_id]


def _alert(kind: str, record_id: str, label: str, due: date, today: date) -> Dict[str, Any]:
    days_left = (due - today).days
    return {
        "kind": kind,
        "id": record_id,
        "label": label,
        "due": due.isoformat(),
        "days_left": days_left,
        "overdue": days_left < 0,
    }


def expiring_documents(
    vehicles: Iterable[Vehicle],
    drivers: Iterable[Driver],
    today: date,
    within_days: int = 30,
) -> list[Dict[str, Any]]:
    """Permits, maintenance and licences due within the window, soonest first."""
    horizon = today + timedelta(days=within_days)
    alerts: list[Dict[str, Any]] = []
    for vehicle in vehicles:
        if vehicle.permit_expiry <= horizon:
            alerts.append(_alert("permit", vehicle.id, vehicle.registration_number, vehicle.permit_expiry, today))
        if vehicle.maintenance_due <= horizon:
            alerts.append(_alert("maintenance", vehicle.id, vehicle.registration_number, vehicle.maintenance_due, today))
    for driver in drivers:
        if driver.license_expiry <= horizon:
            alerts.append(_alert("license", driver.id, driver.name, driver.license_expiry, today))
    alerts.sort(key=lambda item: (item["due"], item["kind"], item["id"]))
    return alerts
