from __future__ import annotations

import logging
from typing import Any, Dict, List

from sqlalchemy import String, cast, func, select, update
from sqlalchemy.orm import Session

from app.exceptions import VehicleNotFoundError
from app.models.vehicle import Vehicle

logger = logging.getLogger(__name__)


class VehicleRepository:
    """CRUD and counter operations over the `vehicles` table.

    Every mutating method commits before returning, so each call is one
    single-statement unit of work.
    """

    def __init__(self, db: Session):
        self.db = db

    def list(self) -> List[Vehicle]:
        """All rows. The order is whatever the backend returns."""
        return list(self.db.scalars(select(Vehicle)))

    def get(self, vehicle_id: int) -> Vehicle | None:
        return self.db.get(Vehicle, vehicle_id)

    def create(self, make: str, model: str, year: int) -> int:
        vehicle = self.insert(make, model, year, count=0)
        return vehicle.id

    def insert(self, make: str, model: str, year: int, count: int = 0) -> Vehicle:
        vehicle = Vehicle(make=make, model=model, year=year, count=count)
        self.db.add(vehicle)
        self.db.commit()
        self.db.refresh(vehicle)
        return vehicle

    def update(self, vehicle_id: int, make: str, model: str, year: int) -> int:
        """Overwrite make/model/year. Returns the number of rows changed (0 for a missing id)."""
        result = self.db.execute(
            update(Vehicle)
            .where(Vehicle.id == vehicle_id)
            .values(make=make, model=model, year=year)
        )
        self.db.commit()
        return result.rowcount

    def delete(self, vehicle_id: int) -> None:
        """Delete by id. A missing id is not an error."""
        vehicle = self.db.get(Vehicle, vehicle_id)
        if vehicle is not None:
            self.db.delete(vehicle)
        self.db.commit()

    def increment_count(self, vehicle_id: int) -> int:
        """Atomically add one to `count` and return the new value.

        Raises:
            VehicleNotFoundError: no row has this id.
        """
        result = self.db.execute(
            update(Vehicle)
            .where(Vehicle.id == vehicle_id)
            .values(count=Vehicle.count + 1)
        )
        self.db.commit()
        if result.rowcount == 0:
            raise VehicleNotFoundError(vehicle_id)

        new_count = self.db.scalar(select(Vehicle.count).where(Vehicle.id == vehicle_id))
        if new_count is None:
            # Deleted between the update and the read-back
            raise VehicleNotFoundError(vehicle_id)
        return new_count

    def total_count(self) -> int:
        return self.db.scalar(select(func.coalesce(func.sum(Vehicle.count), 0))) or 0

    def analysis(self) -> Dict[str, Any]:
        return {"vehicles": self.list(), "totalCount": self.total_count()}

    def find_by_natural_key(self, make: str, model: str, year: str) -> Vehicle | None:
        """Look up a row by (make, model, year), ignoring case and surrounding spaces.

        `year` is compared as trimmed text so that it matches whatever the
        backend stored. Names are case-folded in Python: SQLite's `lower()`
        only folds ASCII letters.
        """
        candidates = self.db.scalars(
            select(Vehicle).where(func.trim(cast(Vehicle.year, String)) == year.strip())
        )
        key = (fold(make), fold(model))
        for vehicle in candidates:
            if (fold(vehicle.make), fold(vehicle.model)) == key:
                return vehicle
        return None


def fold(value: str | None) -> str:
    return (value or "").strip().casefold()
