# backoffice/models.py
from __future__ import annotations

import datetime as dt
from typing import Any, Iterator, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from backoffice.errors import ValidationError
from backoffice.parse_utils import normalize_state


GstPayer = Literal["consignor", "consignee", "transport"]
BillStatus = Literal["Paid", "Unpaid", "Overdue"]
ChargeStatus = Literal["Paid", "To Pay", "TBB"]
ShipmentStatus = Literal["Pending", "In Transit", "Delivered", "Cancelled"]
BranchType = Literal["Delivery & Pickup", "Delivery Only"]
VehicleType = Literal["20ft Container", "40ft Container", "Open Body", "Tanker"]
VehicleStatus = Literal["On Road", "Available", "Maintenance"]

GST_PAYERS: tuple[str, ...] = ("consignor", "consignee", "transport")


class Location(BaseModel):
    city: str
    state: str

    @classmethod
    def parse(cls, text: str | None, field: str = "location") -> "Location":
        """Build a Location from the legacy ``"<city>, <state>"`` encoding."""
        parts = (text or "").split(", ")
        if len(parts) != 2:
            raise ValidationError(f"Expected '<city>, <state>', got {text!r}", field=field)
        city, state = parts
        city = city.strip()
        state = state.strip()
        if not city:
            raise ValidationError(f"Missing city in {text!r}", field=field)
        if not state:
            raise ValidationError(f"Missing state in {text!r}", field=field)
        return cls(city=city, state=state)

    @field_validator("city", "state")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    def same_state(self, other: "Location") -> bool:
        return normalize_state(self.state) == normalize_state(other.state)

    def __str__(self) -> str:
        return f"{self.city}, {self.state}"


def _coerce_location(value: Any, field: str) -> Any:
    if isinstance(value, str):
        return Location.parse(value, field=field)
    return value


class Customer(BaseModel):
    name: str
    address: str = ""
    gst: Optional[str] = None
    phone: Optional[str] = None


class BillArticle(BaseModel):
    quantity: int = 0
    package_type: str = ""
    details: str = ""
    # Rate per unit; the line contributes quantity * amount.
    amount: float = 0.0

    @property
    def line_total(self) -> float:
        return self.quantity * self.amount


_CHARGE_LABELS: tuple[tuple[str, str], ...] = (
    ("freight", "Freight Charges"),
    ("surcharge", "Surcharge"),
    ("hamali", "Hamali Charges"),
    ("door_delivery", "Door Delivery"),
    ("other", "Other Charges"),
)


class BillCharges(BaseModel):
    freight: float = 0.0
    surcharge: float = 0.0
    hamali: float = 0.0
    door_delivery: float = 0.0
    other: float = 0.0

    def items(self) -> Iterator[tuple[str, float]]:
        for name, _ in _CHARGE_LABELS:
            yield name, getattr(self, name)

    @property
    def total(self) -> float:
        return sum(value for _, value in self.items())

    def charge_rows(self) -> list[tuple[str, float]]:
        """Label/value pairs for the charges worth printing (non-zero)."""
        return [(label, getattr(self, name)) for name, label in _CHARGE_LABELS if getattr(self, name) > 0]


class InvoiceTotals(BaseModel):
    gst_paid_by: GstPayer
    is_intra_state: bool
    article_total: float
    charge_total: float
    freight: float
    subtotal: float
    cgst: float
    sgst: float
    igst: float
    grand_total: float

    @property
    def tax_total(self) -> float:
        return self.cgst + self.sgst + self.igst


class Bill(BaseModel):
    id: str
    shipment_id: str
    date: dt.date
    due_date: dt.date
    status: BillStatus = "Unpaid"
    charge_status: ChargeStatus = "To Pay"
    gst_paid_by: GstPayer = "consignor"
    articles: list[BillArticle] = []
    charges: BillCharges = Field(default_factory=BillCharges)

    subtotal: float = 0.0
    cgst: float = 0.0
    sgst: float = 0.0
    igst: float = 0.0
    total: float = 0.0


class Shipment(BaseModel):
    id: str  # LR number
    date: dt.date
    origin: Location
    destination: Location
    consignor: Customer
    consignee: Customer
    packages: int = 0
    weight: float = 0.0
    value: float = 0.0
    status: ShipmentStatus = "Pending"
    vehicle_id: Optional[str] = None
    bill_id: Optional[str] = None
    loading_sheet_id: Optional[str] = None

    @field_validator("origin", mode="before")
    @classmethod
    def _parse_origin(cls, value: Any) -> Any:
        return _coerce_location(value, "origin")

    @field_validator("destination", mode="before")
    @classmethod
    def _parse_destination(cls, value: Any) -> Any:
        return _coerce_location(value, "destination")


class Branch(BaseModel):
    id: str
    name: str
    city: str
    state: str
    pincode: str = ""
    type: BranchType = "Delivery & Pickup"
    contact: str = ""

    @property
    def location(self) -> Location:
        return Location(city=self.city, state=self.state)


class Vehicle(BaseModel):
    id: str
    registration_number: str
    model: str = ""
    type: VehicleType
    driver_id: Optional[str] = None
    status: VehicleStatus = "Available"
    permit_expiry: dt.date
    maintenance_due: dt.date


class Driver(BaseModel):
    id: str
    name: str
    phone: str
    license_number: str
    license_expiry: dt.date
    vehicle_id: Optional[str] = None
    salary: float


class LoadingSheet(BaseModel):
    id: str
    date: dt.date
    vehicle_id: str
    driver_id: str
    branch_id: str
    shipment_ids: list[str]
    route: str = ""
