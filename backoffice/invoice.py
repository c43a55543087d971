from __future__ import annotations

from html import escape
from typing import Optional

from backoffice import config
from backoffice.gst import GST_RATE, TRANSPORT_GST_RATE
from backoffice.models import Bill, Customer, Driver, Shipment, Vehicle
from backoffice.parse_utils import format_money


def _rate(value: float) -> str:
    return f"{value:g}%"


def tax_rows(bill: Bill, shipment: Shipment) -> list[tuple[str, float]]:
    if bill.gst_paid_by == "transport":
        half = _rate(TRANSPORT_GST_RATE / 2)
        return [(f"CGST ({half})", bill.cgst), (f"SGST ({half})", bill.sgst)]
    if shipment.origin.same_state(shipment.destination):
        half = _rate(GST_RATE / 2)
        return [(f"CGST ({half})", bill.cgst), (f"SGST ({half})", bill.sgst)]
    return [(f"IGST ({_rate(GST_RATE)})", bill.igst)]


def _party_lines(role: str, party: Customer) -> list[str]:
    lines = [f"{role}: {party.name}"]
    if party.address:
        lines.append(f"  {party.address}")
    if party.phone:
        lines.append(f"  Phone: {party.phone}")
    if party.gst:
        lines.append(f"  GSTIN: {party.gst}")
    return lines


def _transport_lines(shipment: Shipment, vehicle: Optional[Vehicle], driver: Optional[Driver]) -> list[str]:
    lines = [f"LR No: {shipment.id}"]
    if vehicle:
        lines.append(f"Vehicle No: {vehicle.registration_number}")
    if driver:
        lines.append(f"Driver Name: {driver.name}")
    return lines


def _footer() -> str:
    return (
        f"Payment due within {config.PAYMENT_TERMS_DAYS} days. "
        f"Please make all cheques payable to {config.COMPANY_NAME}."
    )


def render_invoice_text(
    bill: Bill,
    shipment: Shipment,
    vehicle: Optional[Vehicle] = None,
    driver: Optional[Driver] = None,
) -> str:
    lines = [config.COMPANY_NAME]
    if config.COMPANY_GSTIN:
        lines.append(f"GSTIN: {config.COMPANY_GSTIN}")
    lines += [
        "TAX INVOICE",
        f"Bill No: {bill.id}    Date: {bill.date.isoformat()}    Due: {bill.due_date.isoformat()}",
        f"From: {shipment.origin}    To: {shipment.destination}",
        "",
    ]
    lines += _party_lines("Consignor", shipment.consignor)
    lines += _party_lines("Consignee", shipment.consignee)
    lines.append("")

    for article in bill.articles:
        lines.append(
            f"{article.quantity} x {article.package_type or '-'} {article.details}".rstrip()
            + f" @ {format_money(article.amount)} = {format_money(article.line_total)}"
        )
    for label, value in bill.charges.charge_rows():
        lines.append(f"{label}: {format_money(value)}")
    lines.append("")

    lines += _transport_lines(shipment, vehicle, driver)
    lines.append(f"Sub Total: {format_money(bill.subtotal)}")
    for label, value in tax_rows(bill, shipment):
        lines.append(f"{label}: {format_money(value)}")
    lines.append(f"Grand Total: {format_money(bill.total)}")
    lines.append("")
    lines.append(f"Terms & Conditions: {_footer()}")
    return "\n".join(lines)


def _html_party(role: str, party: Customer) -> str:
    parts = [f"<h3>{escape(role)}</h3>", f"<p><strong>{escape(party.name)}</strong></p>"]
    if party.address:
        parts.append(f"<p>{escape(party.address)}</p>")
    if party.phone:
        parts.append(f"<p>Phone: {escape(party.phone)}</p>")
    if party.gst:
        parts.append(f"<p>GSTIN: {escape(party.gst)}</p>")
    return "<div>" + "".join(parts) + "</div>"


def _html_row(label: str, value: str) -> str:
    return f"<tr><td>{escape(label)}</td><td style=\"text-align:right\">{escape(value)}</td></tr>"


def render_invoice_html(
    bill: Bill,
    shipment: Shipment,
    vehicle: Optional[Vehicle] = None,
    driver: Optional[Driver] = None,
) -> str:
    article_rows = "".join(
        "<tr>"
        f"<td>{article.quantity}</td>"
        f"<td>{escape(article.package_type)}</td>"
        f"<td>{escape(article.details)}</td>"
        f"<td style=\"text-align:right\">{escape(format_money(article.amount))}</td>"
        f"<td style=\"text-align:right\">{escape(format_money(article.line_total))}</td>"
        "</tr>"
        for article in bill.articles
    )
    charge_rows = "".join(
        f"<tr><td colspan=\"4\">{escape(label)}</td>"
        f"<td style=\"text-align:right\">{escape(format_money(value))}</td></tr>"
        for label, value in bill.charges.charge_rows()
    )
    totals = [_html_row("Sub Total", format_money(bill.subtotal))]
    totals += [_html_row(label, format_money(value)) for label, value in tax_rows(bill, shipment)]
    totals.append(_html_row("Grand Total", format_money(bill.total)))

    transport = "".join(f"<p>{escape(line)}</p>" for line in _transport_lines(shipment, vehicle, driver))
    gstin = f"<p>GSTIN: {escape(config.COMPANY_GSTIN)}</p>" if config.COMPANY_GSTIN else ""

    return (
        "<!DOCTYPE html><html><head><meta charset=\"utf-8\">"
        f"<title>Invoice {escape(bill.id)}</title></head><body>"
        f"<header><h1>{escape(config.COMPANY_NAME)}</h1>{gstin}<h2>TAX INVOICE</h2>"
        f"<p>Bill No: {escape(bill.id)} | Date: {bill.date.isoformat()} | Due: {bill.due_date.isoformat()}</p>"
        f"<p>From: {escape(str(shipment.origin))} | To: {escape(str(shipment.destination))}</p></header>"
        "<section>"
        + _html_party("Consignor", shipment.consignor)
        + _html_party("Consignee", shipment.consignee)
        + "</section>"
        "<table><thead><tr><th>Qty</th><th>Package</th><th>Details</th><th>Rate</th><th>Amount</th></tr></thead>"
        f"<tbody>{article_rows}{charge_rows}</tbody></table>"
        f"<section>{transport}<table><tbody>{''.join(totals)}</tbody></table></section>"
        f"<footer><p><strong>Terms &amp; Conditions:</strong> {escape(_footer())}</p></footer>"
        "</body></html>"
    )
