#!/usr/bin/env python3
"""Quote GST and totals for a freight bill from the command line.

    python scripts/compute_invoice.py --origin "Mumbai, Maharashtra" \
        --destination "Pune, Maharashtra" --article 100:150:Box:Medicines \
        --hamali 500 --gst-paid-by consignor
"""
from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Dict

from backoffice.errors import ValidationError
from backoffice.gst import compute_invoice_totals
from backoffice.models import GST_PAYERS, BillArticle, BillCharges
from backoffice.parse_utils import format_money, money, parse_money


def _parse_article(value: str) -> BillArticle:
    # quantity:rate[:package_type[:details]]
    parts = value.split(":", 3)
    if len(parts) < 2:
        raise argparse.ArgumentTypeError(f"Expected quantity:rate[:package[:details]], got {value!r}")
    try:
        quantity = int(parts[0])
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid quantity: {parts[0]!r}") from exc
    rate = parse_money(parts[1])
    if rate is None:
        raise argparse.ArgumentTypeError(f"Invalid rate: {parts[1]!r}")
    return BillArticle(
        quantity=quantity,
        amount=rate,
        package_type=parts[2] if len(parts) > 2 else "",
        details=parts[3] if len(parts) > 3 else "",
    )


def _money_arg(value: str) -> float:
    parsed = parse_money(value)
    if parsed is None:
        raise argparse.ArgumentTypeError(f"Invalid amount: {value!r}")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Compute GST and totals for a freight bill")
    parser.add_argument("--origin", required=True, help='"<city>, <state>"')
    parser.add_argument("--destination", required=True, help='"<city>, <state>"')
    parser.add_argument("--article", action="append", default=[], type=_parse_article)
    parser.add_argument("--freight", type=_money_arg, default=0.0)
    parser.add_argument("--surcharge", type=_money_arg, default=0.0)
    parser.add_argument("--hamali", type=_money_arg, default=0.0)
    parser.add_argument("--door-delivery", type=_money_arg, default=0.0)
    parser.add_argument("--other", type=_money_arg, default=0.0)
    parser.add_argument("--gst-paid-by", choices=GST_PAYERS, default="consignor")
    parser.add_argument("--json", action="store_true", help="Print raw totals as JSON")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    charges = BillCharges(
        freight=args.freight,
        surcharge=args.surcharge,
        hamali=args.hamali,
        door_delivery=args.door_delivery,
        other=args.other,
    )
    try:
        totals = compute_invoice_totals(args.origin, args.destination, args.article, charges, args.gst_paid_by)
    except ValidationError as exc:
        print(f"Invalid {exc.field or 'input'}: {exc.message}", file=sys.stderr)
        return 2

    if args.json:
        payload: Dict[str, Any] = totals.model_dump()
        payload["rounded"] = {key: money(value) for key, value in payload.items() if isinstance(value, float)}
        print(json.dumps(payload, indent=2))
        return 0

    print(f"Intra-state: {'yes' if totals.is_intra_state else 'no'}")
    print(f"Sub Total:   {format_money(totals.subtotal)}")
    if totals.cgst or totals.sgst:
        print(f"CGST:        {format_money(totals.cgst)}")
        print(f"SGST:        {format_money(totals.sgst)}")
    if totals.igst:
        print(f"IGST:        {format_money(totals.igst)}")
    print(f"Grand Total: {format_money(totals.grand_total)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
