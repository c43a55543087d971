from __future__ import annotations

import logging
import os
from datetime import date
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import HTMLResponse
from pydantic import BaseModel
from pydantic import ValidationError as PayloadError

from backoffice import config
from backoffice.billing import (
    BillDraft,
    BillFilters,
    create_bill,
    filter_bills,
    mark_overdue,
    next_bill_id,
    next_lr_number,
    preview_totals,
    update_bill,
)
from backoffice.dashboard import dashboard_summary
from backoffice.errors import NotFoundError, ValidationError
from backoffice.fleet import assign_driver, expiring_documents, next_driver_id, release_driver, validate_driver
from backoffice.gst import compute_invoice_totals
from backoffice.invoice import render_invoice_html
from backoffice.loading_sheets import create_loading_sheet, next_loading_sheet_id
from backoffice.models import Bill, Branch, Driver, InvoiceTotals, Location, Shipment, Vehicle
from backoffice.parse_utils import money, parse_date
from backoffice.sample_data import load_sample_data
from backoffice.shipments import shipments_by_status, transition_shipment
from backoffice.store import BackOffice


logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger("freight-backoffice")

app = FastAPI(title="Freight Back-Office")


def _build_office() -> BackOffice:
    built = BackOffice()
    if config.SEED_SAMPLE_DATA:
        load_sample_data(built)
    return built


office = _build_office()


@app.get("/version")
async def version() -> Dict[str, Any]:
    return {
        "status": "ok",
        "service": os.getenv("K_SERVICE"),
        "app_version": config.APP_VERSION,
    }


@app.get("/health")
async def health() -> Dict[str, str]:
    return {"status": "ok"}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _unprocessable(exc: ValidationError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=exc.to_dict())


def _not_found(exc: NotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


def _payload_errors(exc: PayloadError) -> HTTPException:
    errors = [{"loc": list(err.get("loc", ())), "msg": err.get("msg")} for err in exc.errors()]
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=errors)


async def _read_json(request: Request) -> Dict[str, Any]:
    try:
        payload = await request.json()
    except Exception as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid JSON payload") from exc

    if not isinstance(payload, dict):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="JSON payload must be an object")
    return payload


def _validate(model: type[BaseModel], payload: Dict[str, Any]) -> Any:
    try:
        return model.model_validate(payload)
    except PayloadError as exc:
        raise _payload_errors(exc) from exc


def _get(repository: Any, record_id: str) -> Any:
    try:
        return repository.get(record_id)
    except NotFoundError as exc:
        raise _not_found(exc) from exc


def _dump(record: BaseModel) -> Dict[str, Any]:
    return record.model_dump(mode="json")


def _location_from_payload(value: Any) -> Any:
    if isinstance(value, dict):
        return _validate(Location, value)
    return value or ""


def _totals_payload(totals: InvoiceTotals) -> Dict[str, Any]:
    data = totals.model_dump()
    data["tax_total"] = totals.tax_total
    data["display"] = {
        key: money(data[key])
        for key in ("article_total", "charge_total", "freight", "subtotal", "cgst", "sgst", "igst", "tax_total", "grand_total")
    }
    return data


# ---------------------------------------------------------------------------
# Branches
# ---------------------------------------------------------------------------

@app.get("/branches")
async def list_branches() -> Dict[str, Any]:
    return {"status": "ok", "branches": [_dump(b) for b in office.branches]}


@app.get("/branches/{branch_id}")
async def get_branch(branch_id: str) -> Dict[str, Any]:
    return {"status": "ok", "branch": _dump(_get(office.branches, branch_id))}


@app.post("/branches")
async def add_branch(request: Request) -> Dict[str, Any]:
    branch = _validate(Branch, await _read_json(request))
    try:
        office.branches.add(branch)
    except ValidationError as exc:
        raise _unprocessable(exc) from exc
    return {"status": "ok", "branch": _dump(branch)}


@app.delete("/branches/{branch_id}")
async def delete_branch(branch_id: str) -> Dict[str, Any]:
    _get(office.branches, branch_id)
    if any(sheet.branch_id == branch_id for sheet in office.loading_sheets):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Branch has loading sheets")
    office.branches.delete(branch_id)
    return {"status": "ok", "deleted": branch_id}


# ---------------------------------------------------------------------------
# Fleet: vehicles and drivers
# ---------------------------------------------------------------------------

@app.get("/vehicles")
async def list_vehicles(vehicle_status: Optional[str] = None) -> Dict[str, Any]:
    vehicles = office.vehicles.list(lambda v: not vehicle_status or v.status == vehicle_status)
    return {"status": "ok", "vehicles": [_dump(v) for v in vehicles]}


@app.post("/vehicles")
async def add_vehicle(request: Request) -> Dict[str, Any]:
    vehicle = _validate(Vehicle, await _read_json(request))
    if vehicle.driver_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Assign drivers through /vehicles/{vehicle_id}/driver",
        )
    try:
        office.vehicles.add(vehicle)
    except ValidationError as exc:
        raise _unprocessable(exc) from exc
    return {"status": "ok", "vehicle": _dump(vehicle)}


@app.post("/vehicles/{vehicle_id}/driver")
async def assign_vehicle_driver(vehicle_id: str, request: Request) -> Dict[str, Any]:
    payload = await _read_json(request)
    driver_id = payload.get("driver_id")
    if not driver_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing driver_id")
    try:
        vehicle = assign_driver(office.vehicles, office.drivers, vehicle_id, str(driver_id))
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    return {"status": "ok", "vehicle": _dump(vehicle)}


@app.delete("/vehicles/{vehicle_id}")
async def delete_vehicle(vehicle_id: str) -> Dict[str, Any]:
    vehicle = _get(office.vehicles, vehicle_id)
    if vehicle.driver_id:
        release_driver(office.vehicles, office.drivers, vehicle.driver_id)
    office.vehicles.delete(vehicle_id)
    return {"status": "ok", "deleted": vehicle_id}


@app.get("/drivers")
async def list_drivers(name: str = "") -> Dict[str, Any]:
    needle = name.strip().casefold()
    drivers = office.drivers.list(lambda d: needle in d.name.casefold())
    return {"status": "ok", "drivers": [_dump(d) for d in drivers]}


@app.get("/drivers/{driver_id}")
async def get_driver(driver_id: str) -> Dict[str, Any]:
    return {"status": "ok", "driver": _dump(_get(office.drivers, driver_id))}


@app.post("/drivers")
async def add_driver(request: Request) -> Dict[str, Any]:
    payload = await _read_json(request)
    payload["id"] = next_driver_id(office.drivers.ids())
    vehicle_id = payload.pop("vehicle_id", None)
    driver = _validate(Driver, payload)
    if vehicle_id:
        _get(office.vehicles, str(vehicle_id))
    try:
        validate_driver(driver)
        office.drivers.add(driver)
        if vehicle_id:
            assign_driver(office.vehicles, office.drivers, str(vehicle_id), driver.id)
    except ValidationError as exc:
        raise _unprocessable(exc) from exc
    except NotFoundError as exc:
        raise _not_found(exc) from exc

    logger.info("Driver added", extra={"driver_id": driver.id})
    return {"status": "ok", "driver": _dump(driver)}


@app.put("/drivers/{driver_id}")
async def update_driver(driver_id: str, request: Request) -> Dict[str, Any]:
    current = _get(office.drivers, driver_id)
    payload = await _read_json(request)
    vehicle_id = payload.pop("vehicle_id", current.vehicle_id)
    merged = {**_dump(current), **payload, "id": driver_id, "vehicle_id": current.vehicle_id}
    driver = _validate(Driver, merged)
    if vehicle_id and vehicle_id != current.vehicle_id:
        _get(office.vehicles, str(vehicle_id))
    try:
        validate_driver(driver)
        office.drivers.update(driver)
        if vehicle_id and vehicle_id != current.vehicle_id:
            assign_driver(office.vehicles, office.drivers, str(vehicle_id), driver_id)
        elif not vehicle_id and current.vehicle_id:
            release_driver(office.vehicles, office.drivers, driver_id)
    except ValidationError as exc:
        raise _unprocessable(exc) from exc
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    return {"status": "ok", "driver": _dump(office.drivers.get(driver_id))}


@app.delete("/drivers/{driver_id}")
async def delete_driver(driver_id: str) -> Dict[str, Any]:
    _get(office.drivers, driver_id)
    release_driver(office.vehicles, office.drivers, driver_id)
    office.drivers.delete(driver_id)
    return {"status": "ok", "deleted": driver_id}


@app.get("/fleet/expiring")
async def fleet_expiring(within_days: int = config.DOCUMENT_ALERT_DAYS, today: Optional[str] = None) -> Dict[str, Any]:
    as_of = parse_date(today) if today else date.today()
    if as_of is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid today")
    alerts = expiring_documents(office.vehicles, office.drivers, as_of, within_days)
    return {"status": "ok", "as_of": as_of.isoformat(), "alerts": alerts}


# ---------------------------------------------------------------------------
# Shipments and loading sheets
# ---------------------------------------------------------------------------

@app.get("/shipments")
async def list_shipments(shipment_status: Optional[str] = None) -> Dict[str, Any]:
    if shipment_status:
        shipments = office.shipments.list(lambda s: s.status == shipment_status)
        return {"status": "ok", "shipments": [_dump(s) for s in shipments]}
    grouped = shipments_by_status(office.shipments)
    return {
        "status": "ok",
        "shipments": [_dump(s) for s in office.shipments],
        "counts": {key: len(items) for key, items in grouped.items()},
    }


@app.get("/shipments/{shipment_id}")
async def get_shipment(shipment_id: str) -> Dict[str, Any]:
    return {"status": "ok", "shipment": _dump(_get(office.shipments, shipment_id))}


@app.post("/shipments")
async def add_shipment(request: Request) -> Dict[str, Any]:
    payload = await _read_json(request)
    shipment_date = parse_date(str(payload.get("date") or "")) or date.today()
    payload["date"] = shipment_date.isoformat()
    payload["id"] = next_lr_number(office.shipments.ids(), shipment_date.year)
    payload["status"] = "Pending"
    for key in ("bill_id", "loading_sheet_id"):
        payload.pop(key, None)
    shipment = _validate(Shipment, payload)
    office.shipments.add(shipment)
    logger.info("Shipment booked", extra={"shipment_id": shipment.id})
    return {"status": "ok", "shipment": _dump(shipment)}


@app.post("/shipments/{shipment_id}/status")
async def change_shipment_status(shipment_id: str, request: Request) -> Dict[str, Any]:
    shipment = _get(office.shipments, shipment_id)
    payload = await _read_json(request)
    try:
        transition_shipment(shipment, payload.get("status"))
    except ValidationError as exc:
        raise _unprocessable(exc) from exc
    return {"status": "ok", "shipment": _dump(shipment)}


@app.get("/loading-sheets")
async def list_loading_sheets() -> Dict[str, Any]:
    return {"status": "ok", "loading_sheets": [_dump(s) for s in office.loading_sheets]}


@app.post("/loading-sheets")
async def add_loading_sheet(request: Request) -> Dict[str, Any]:
    payload = await _read_json(request)
    sheet_date = parse_date(str(payload.get("date") or "")) or date.today()
    shipment_ids = payload.get("shipment_ids") or []
    if not isinstance(shipment_ids, list):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="shipment_ids must be a list")
    try:
        sheet = create_loading_sheet(
            office,
            next_loading_sheet_id(office.loading_sheets.ids()),
            sheet_date,
            str(payload.get("vehicle_id") or ""),
            str(payload.get("driver_id") or ""),
            str(payload.get("branch_id") or ""),
            [str(item) for item in shipment_ids],
        )
    except ValidationError as exc:
        raise _unprocessable(exc) from exc
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    return {"status": "ok", "loading_sheet": _dump(sheet)}


# ---------------------------------------------------------------------------
# Billing
# ---------------------------------------------------------------------------

def _bill_summary(bill: Bill, shipment: Shipment) -> Dict[str, Any]:
    return {
        **_dump(bill),
        "consignor": shipment.consignor.name,
        "consignee": shipment.consignee.name,
        "route": f"{shipment.origin.city} -> {shipment.destination.city}",
    }


@app.get("/bills")
async def list_bills(
    search_term: str = "",
    from_branch: Optional[str] = None,
    to_branch: Optional[str] = None,
    amount_from: Optional[float] = None,
    amount_to: Optional[float] = None,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    bill_status: Optional[str] = None,
    charge_status: Optional[str] = None,
) -> Dict[str, Any]:
    filters = _validate(
        BillFilters,
        {
            "search_term": search_term,
            "from_branch": from_branch,
            "to_branch": to_branch,
            "amount_from": amount_from,
            "amount_to": amount_to,
            "date_from": parse_date(date_from) if date_from else None,
            "date_to": parse_date(date_to) if date_to else None,
            "status": bill_status or None,
            "charge_status": charge_status or None,
        },
    )
    matches = filter_bills(office.bills, office.shipments, office.branches, filters)
    return {
        "status": "ok",
        "count": len(matches),
        "bills": [_bill_summary(bill, shipment) for bill, shipment in matches],
    }


@app.post("/bills/preview")
async def preview_bill(request: Request) -> Dict[str, Any]:
    payload = await _read_json(request)
    draft = _validate(BillDraft, payload)
    try:
        if payload.get("shipment_id"):
            totals = preview_totals(_get(office.shipments, str(payload["shipment_id"])), draft)
        else:
            totals = compute_invoice_totals(
                _location_from_payload(payload.get("origin")),
                _location_from_payload(payload.get("destination")),
                draft.articles,
                draft.charges,
                draft.gst_paid_by,
            )
    except ValidationError as exc:
        raise _unprocessable(exc) from exc
    return {"status": "ok", "totals": _totals_payload(totals)}


@app.post("/bills")
async def add_bill(request: Request) -> Dict[str, Any]:
    payload = await _read_json(request)
    shipment_id = payload.get("shipment_id")
    if not shipment_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing shipment_id")
    shipment = _get(office.shipments, str(shipment_id))
    draft = _validate(BillDraft, payload)

    bill_date = draft.date or date.today()
    draft.date = bill_date
    try:
        bill = create_bill(shipment, draft, next_bill_id(office.bills.ids(), bill_date.year))
        office.bills.add(bill)
    except ValidationError as exc:
        logger.info("Bill rejected", extra={"shipment_id": shipment.id, "field": exc.field})
        raise _unprocessable(exc) from exc
    return {"status": "ok", "bill": _bill_summary(bill, shipment)}


@app.get("/bills/{bill_id}")
async def get_bill(bill_id: str) -> Dict[str, Any]:
    bill = _get(office.bills, bill_id)
    shipment = _get(office.shipments, bill.shipment_id)
    return {"status": "ok", "bill": _bill_summary(bill, shipment)}


@app.put("/bills/{bill_id}")
async def save_bill(bill_id: str, request: Request) -> Dict[str, Any]:
    bill = _get(office.bills, bill_id)
    shipment = _get(office.shipments, bill.shipment_id)
    payload = await _read_json(request)
    draft = _validate(BillDraft, {**_dump(bill), **payload})
    try:
        update_bill(bill, shipment, draft)
    except ValidationError as exc:
        raise _unprocessable(exc) from exc
    return {"status": "ok", "bill": _bill_summary(bill, shipment)}


@app.delete("/bills/{bill_id}")
async def delete_bill(bill_id: str) -> Dict[str, Any]:
    bill = _get(office.bills, bill_id)
    shipment = office.shipments.find(bill.shipment_id)
    if shipment is not None and shipment.bill_id == bill.id:
        shipment.bill_id = None
    office.bills.delete(bill_id)
    return {"status": "ok", "deleted": bill_id}


@app.post("/bills/mark-overdue")
async def bills_mark_overdue(today: Optional[str] = None) -> Dict[str, Any]:
    as_of = parse_date(today) if today else date.today()
    if as_of is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid today")
    changed = mark_overdue(office.bills, as_of)
    return {"status": "ok", "overdue": [bill.id for bill in changed]}


@app.get("/bills/{bill_id}/invoice", response_class=HTMLResponse)
async def bill_invoice(bill_id: str) -> HTMLResponse:
    bill = _get(office.bills, bill_id)
    shipment = _get(office.shipments, bill.shipment_id)
    vehicle = office.vehicles.find(shipment.vehicle_id)
    driver = office.drivers.find(vehicle.driver_id) if vehicle else None
    try:
        content = render_invoice_html(bill, shipment, vehicle, driver)
    except Exception as exc:
        logger.exception("Invoice render failed: %s", exc)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Invoice render failed") from exc
    return HTMLResponse(content=content, status_code=200)


@app.get("/dashboard")
async def dashboard() -> Dict[str, Any]:
    return {"status": "ok", **dashboard_summary(office)}
