from __future__ import annotations

import logging
from typing import Dict, Iterable

from backoffice.errors import ValidationError
from backoffice.models import Shipment, ShipmentStatus

logger = logging.getLogger(__name__)

SHIPMENT_STATUSES: tuple[str, ...] = ("Pending", "In Transit", "Delivered", "Cancelled")

_TRANSITIONS: Dict[str, tuple[str, ...]] = {
    "Pending": ("In Transit", "Cancelled"),
    "In Transit": ("Delivered", "Cancelled"),
    "Delivered": (),
    "Cancelled": (),
}


def can_transition(current: str, target: str) -> bool:
    return target in _TRANSITIONS.get(current, ())


def transition_shipment(shipment: Shipment, target: ShipmentStatus) -> Shipment:
    if target not in SHIPMENT_STATUSES:
        raise ValidationError(f"Unknown shipment status: {target!r}", field="status")
    if not can_transition(shipment.status, target):
        raise ValidationError(
            f"Cannot move shipment {shipment.id} from {shipment.status} to {target}",
            field="status",
        )
    previous = shipment.status
    shipment.status = target
    logger.info(
        "Shipment status changed",
        extra={"shipment_id": shipment.id, "from": previous, "to": target},
    )
    return shipment


def shipments_by_status(shipments: Iterable[Shipment]) -> Dict[str, list[Shipment]]:
    grouped: Dict[str, list[Shipment]] = {status: [] for status in SHIPMENT_STATUSES}
    for shipment in shipments:
        grouped[shipment.status].append(shipment)
    return grouped
