from __future__ import annotations

import math
from typing import Iterable, Union

from backoffice.errors import ValidationError
from backoffice.models import GST_PAYERS, BillArticle, BillCharges, InvoiceTotals, Location

# Percentages, applied as amount * rate / 100.
GST_RATE = 18.0
TRANSPORT_GST_RATE = 5.0

LocationLike = Union[Location, str]


def _as_location(value: LocationLike, field: str) -> Location:
    if isinstance(value, Location):
        if not value.city.strip():
            raise ValidationError("Missing city", field=field)
        if not value.state.strip():
            raise ValidationError("Missing state", field=field)
        return value
    return Location.parse(value, field=field)


def _check_articles(line_items: Iterable[BillArticle]) -> list[BillArticle]:
    articles = list(line_items)
    for index, article in enumerate(articles):
        if article.quantity < 0:
            raise ValidationError(
                f"Quantity must not be negative (got {article.quantity})",
                field=f"articles[{index}].quantity",
            )
        if not math.isfinite(article.amount):
            raise ValidationError(
                f"Amount must be a finite number (got {article.amount})",
                field=f"articles[{index}].amount",
            )
        if article.amount < 0:
            raise ValidationError(
                f"Amount must not be negative (got {article.amount})",
                field=f"articles[{index}].amount",
            )
    return articles


def _check_charges(charges: BillCharges) -> None:
    for name, value in charges.items():
        if not math.isfinite(value):
            raise ValidationError(f"Charge must be a finite number (got {value})", field=f"charges.{name}")
        if value < 0:
            raise ValidationError(f"Charge must not be negative (got {value})", field=f"charges.{name}")


def is_intra_state(origin: LocationLike, destination: LocationLike) -> bool:
    return _as_location(origin, "origin").same_state(_as_location(destination, "destination"))


def compute_invoice_totals(
    origin: LocationLike,
    destination: LocationLike,
    line_items: Iterable[BillArticle],
    charges: BillCharges,
    gst_paid_by: str,
) -> InvoiceTotals:
    """Derive subtotal, GST split and grand total for a freight bill.

    Articles carry a per-unit rate, so each line contributes
    ``quantity * amount``. Article value prices the carriage: it is added to
    the freight charge and to the subtotal alongside the other charges.

    When the transporter is liable, CGST and SGST are 2.5% each on freight
    only. Otherwise 18% is levied on the subtotal, split 9% + 9% within a
    state and charged as IGST across states.

    Amounts are kept at full precision; round at presentation.
    """
    source = _as_location(origin, "origin")
    target = _as_location(destination, "destination")
    if gst_paid_by not in GST_PAYERS:
        raise ValidationError(f"Unknown GST payer: {gst_paid_by!r}", field="gst_paid_by")

    articles = _check_articles(line_items)
    _check_charges(charges)

    article_total = sum(article.quantity * article.amount for article in articles)
    charge_total = charges.total
    freight = article_total + charges.freight
    subtotal = article_total + charge_total
    intra_state = source.same_state(target)

    cgst = sgst = igst = 0.0
    if gst_paid_by == "transport":
        cgst = freight * (TRANSPORT_GST_RATE / 2) / 100
        sgst = freight * (TRANSPORT_GST_RATE / 2) / 100
    elif intra_state:
        cgst = subtotal * (GST_RATE / 2) / 100
        sgst = subtotal * (GST_RATE / 2) / 100
    else:
        igst = subtotal * GST_RATE / 100

    return InvoiceTotals(
        gst_paid_by=gst_paid_by,
        is_intra_state=intra_state,
        article_total=article_total,
        charge_total=charge_total,
        freight=freight,
        subtotal=subtotal,
        cgst=cgst,
        sgst=sgst,
        igst=igst,
        grand_total=subtotal + cgst + sgst + igst,
    )
