from __future__ import annotations

import logging
import re
import datetime as dt
from datetime import timedelta
from typing import Iterable, Optional

from pydantic import BaseModel, Field

from backoffice import config
from backoffice.errors import ValidationError
from backoffice.gst import compute_invoice_totals
from backoffice.models import (
    Bill,
    BillArticle,
    BillCharges,
    BillStatus,
    Branch,
    ChargeStatus,
    GstPayer,
    InvoiceTotals,
    Shipment,
)

logger = logging.getLogger(__name__)


class BillDraft(BaseModel):
    """The editable part of a bill, as collected by the bill form."""

    date: Optional[dt.date] = None
    status: BillStatus = "Unpaid"
    charge_status: ChargeStatus = "To Pay"
    gst_paid_by: GstPayer = "consignor"
    articles: list[BillArticle] = []
    charges: BillCharges = Field(default_factory=BillCharges)


class BillFilters(BaseModel):
    search_term: str = ""
    from_branch: Optional[str] = None
    to_branch: Optional[str] = None
    amount_from: Optional[float] = None
    amount_to: Optional[float] = None
    date_from: Optional[dt.date] = None
    date_to: Optional[dt.date] = None
    status: Optional[BillStatus] = None
    charge_status: Optional[ChargeStatus] = None


def _next_sequence_id(prefix: str, existing: Iterable[str], year: int) -> str:
    pattern = re.compile(rf"^{re.escape(prefix)}{year}(\d+)$")
    highest = 0
    for record_id in existing:
        match = pattern.match(record_id or "")
        if match:
            highest = max(highest, int(match.group(1)))
    return f"{prefix}{year}{highest + 1:03d}"


def next_bill_id(existing: Iterable[str], year: int) -> str:
    return _next_sequence_id("BILL", existing, year)


def next_lr_number(existing: Iterable[str], year: int) -> str:
    return _next_sequence_id("LRN", existing, year)


def validate_draft(draft: BillDraft) -> None:
    """Reject drafts the bill form would not submit."""
    if not draft.articles:
        raise ValidationError("At least one article is required", field="articles")
    for index, article in enumerate(draft.articles):
        if article.quantity <= 0:
            raise ValidationError("Quantity is required", field=f"articles[{index}].quantity")
        if article.amount <= 0:
            raise ValidationError("Rate is required", field=f"articles[{index}].amount")


def preview_totals(shipment: Shipment, draft: BillDraft) -> InvoiceTotals:
    return compute_invoice_totals(
        shipment.origin,
        shipment.destination,
        draft.articles,
        draft.charges,
        draft.gst_paid_by,
    )


def _apply_totals(bill: Bill, totals: InvoiceTotals) -> Bill:
    bill.subtotal = totals.subtotal
    bill.cgst = totals.cgst
    bill.sgst = totals.sgst
    bill.igst = totals.igst
    bill.total = totals.grand_total
    return bill


def create_bill(shipment: Shipment, draft: BillDraft, bill_id: str, today: Optional[dt.date] = None) -> Bill:
    if shipment.bill_id:
        raise ValidationError(f"Shipment {shipment.id} already billed as {shipment.bill_id}", field="shipment_id")
    if shipment.status == "Cancelled":
        raise ValidationError(f"Shipment {shipment.id} is cancelled", field="shipment_id")

    validate_draft(draft)
    totals = preview_totals(shipment, draft)

    bill_date = draft.date or today or dt.date.today()
    bill = Bill(
        id=bill_id,
        shipment_id=shipment.id,
        date=bill_date,
        due_date=bill_date + timedelta(days=config.PAYMENT_TERMS_DAYS),
        status=draft.status,
        charge_status=draft.charge_status,
        gst_paid_by=draft.gst_paid_by,
        articles=list(draft.articles),
        charges=draft.charges,
    )
    _apply_totals(bill, totals)
    shipment.bill_id = bill.id

    logger.info(
        "Bill created",
        extra={"bill_id": bill.id, "shipment_id": shipment.id, "total": bill.total},
    )
    return bill


def update_bill(bill: Bill, shipment: Shipment, draft: BillDraft) -> Bill:
    if bill.shipment_id != shipment.id:
        raise ValidationError(f"Bill {bill.id} does not belong to shipment {shipment.id}", field="shipment_id")

    validate_draft(draft)
    totals = preview_totals(shipment, draft)

    bill_date = draft.date or bill.date
    bill.date = bill_date
    bill.due_date = bill_date + timedelta(days=config.PAYMENT_TERMS_DAYS)
    bill.status = draft.status
    bill.charge_status = draft.charge_status
    bill.gst_paid_by = draft.gst_paid_by
    bill.articles = list(draft.articles)
    bill.charges = draft.charges
    _apply_totals(bill, totals)

    logger.info("Bill updated", extra={"bill_id": bill.id, "total": bill.total})
    return bill


def mark_overdue(bills: Iterable[Bill], today: dt.date) -> list[Bill]:
    changed: list[Bill] = []
    for bill in bills:
        if bill.status == "Unpaid" and bill.due_date < today:
            bill.status = "Overdue"
            changed.append(bill)
    if changed:
        logger.info("Bills marked overdue: %s", ", ".join(b.id for b in changed))
    return changed


def _branch_city(branches: dict[str, Branch], branch_id: str) -> Optional[str]:
    branch = branches.get(branch_id)
    return branch.city.casefold() if branch else None


def filter_bills(
    bills: Iterable[Bill],
    shipments: Iterable[Shipment],
    branches: Iterable[Branch],
    filters: BillFilters,
) -> list[tuple[Bill, Shipment]]:
    shipment_map = {s.id: s for s in shipments}
    branch_map = {b.id: b for b in branches}
    term = filters.search_term.strip().casefold()

    results: list[tuple[Bill, Shipment]] = []
    for bill in bills:
        shipment = shipment_map.get(bill.shipment_id)
        if shipment is None:
            continue
        if term and not (
            term in bill.id.casefold()
            or term in shipment.consignor.name.casefold()
            or term in shipment.consignee.name.casefold()
        ):
            continue
        if filters.from_branch and _branch_city(branch_map, filters.from_branch) != shipment.origin.city.casefold():
            continue
        if filters.to_branch and _branch_city(branch_map, filters.to_branch) != shipment.destination.city.casefold():
            continue
        if filters.amount_from is not None and bill.total < filters.amount_from:
            continue
        if filters.amount_to is not None and bill.total > filters.amount_to:
            continue
        if filters.date_from and bill.date < filters.date_from:
            continue
        if filters.date_to and bill.date > filters.date_to:
            continue
        if filters.status and bill.status != filters.status:
            continue
        if filters.charge_status and bill.charge_status != filters.charge_status:
            continue
        results.append((bill, shipment))
    return results
