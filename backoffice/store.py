from __future__ import annotations

import logging
from typing import Callable, Dict, Generic, Iterable, Iterator, Optional, TypeVar

from pydantic import BaseModel

from backoffice.errors import NotFoundError, ValidationError
from backoffice.models import Bill, Branch, Driver, LoadingSheet, Shipment, Vehicle

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


class InMemoryRepository(Generic[RecordT]):
    """Records of one kind keyed by their ``id``, in insertion order."""

    def __init__(self, kind: str, records: Iterable[RecordT] = ()) -> None:
        self.kind = kind
        self._records: Dict[str, RecordT] = {}
        for record in records:
            self.add(record)

    def add(self, record: RecordT) -> RecordT:
        record_id = getattr(record, "id")
        if record_id in self._records:
            raise ValidationError(f"{self.kind} already exists: {record_id}", field="id")
        self._records[record_id] = record
        logger.debug("Added record", extra={"kind": self.kind, "record_id": record_id})
        return record

    def get(self, record_id: str) -> RecordT:
        record = self._records.get(record_id)
        if record is None:
            raise NotFoundError(self.kind, record_id)
        return record

    def find(self, record_id: Optional[str]) -> Optional[RecordT]:
        if not record_id:
            return None
        return self._records.get(record_id)

    def list(self, predicate: Optional[Callable[[RecordT], bool]] = None) -> list[RecordT]:
        records = list(self._records.values())
        if predicate is None:
            return records
        return [record for record in records if predicate(record)]

    def update(self, record: RecordT) -> RecordT:
        record_id = getattr(record, "id")
        if record_id not in self._records:
            raise NotFoundError(self.kind, record_id)
        self._records[record_id] = record
        return record

    def delete(self, record_id: str) -> RecordT:
        record = self.get(record_id)
        del self._records[record_id]
        logger.info("Deleted record", extra={"kind": self.kind, "record_id": record_id})
        return record

    def ids(self) -> list[str]:
        return list(self._records)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._records

    def __iter__(self) -> Iterator[RecordT]:
        return iter(list(self._records.values()))

    def __len__(self) -> int:
        return len(self._records)


class BackOffice:
    """One repository per entity, passed explicitly to the operations that need lookups."""

    def __init__(self) -> None:
        self.branches: InMemoryRepository[Branch] = InMemoryRepository("Branch")
        self.vehicles: InMemoryRepository[Vehicle] = InMemoryRepository("Vehicle")
        self.drivers: InMemoryRepository[Driver] = InMemoryRepository("Driver")
        self.shipments: InMemoryRepository[Shipment] = InMemoryRepository("Shipment")
        self.bills: InMemoryRepository[Bill] = InMemoryRepository("Bill")
        self.loading_sheets: InMemoryRepository[LoadingSheet] = InMemoryRepository("LoadingSheet")

    def branch_for_city(self, city: str) -> Optional[Branch]:
        wanted = (city or "").strip().casefold()
        for branch in self.branches:
            if branch.city.strip().casefold() == wanted:
                return branch
        return None

    def counts(self) -> Dict[str, int]:
        return {
            "branches": len(self.branches),
            "vehicles": len(self.vehicles),
            "drivers": len(self.drivers),
            "shipments": len(self.shipments),
            "bills": len(self.bills),
            "loading_sheets": len(self.loading_sheets),
        }
