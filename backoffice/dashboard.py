from __future__ import annotations

from typing import Any, Dict

from backoffice.fleet import available_drivers
from backoffice.store import BackOffice


def dashboard_summary(office: BackOffice, recent: int = 5) -> Dict[str, Any]:
    shipments = office.shipments.list()
    bills = office.bills.list()

    revenue = sum(bill.total for bill in bills if bill.status == "Paid")
    outstanding = sum(bill.total for bill in bills if bill.status in ("Unpaid", "Overdue"))
    latest = sorted(shipments, key=lambda s: (s.date, s.id), reverse=True)[:recent]

    return {
        "total_shipments": len(shipments),
        "active_shipments": sum(1 for s in shipments if s.status == "In Transit"),
        "vehicles_on_road": sum(1 for v in office.vehicles if v.status == "On Road"),
        "available_drivers": len(available_drivers(office.drivers)),
        "revenue": revenue,
        "outstanding": outstanding,
        "recent_shipments": [
            {
                "id": s.id,
                "date": s.date.isoformat(),
                "route": f"{s.origin.city} -> {s.destination.city}",
                "status": s.status,
            }
            for s in latest
        ],
    }
