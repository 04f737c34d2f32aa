from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List

from app.database import get_db
from app.schemas.vehicle import (
    CreatedResponse,
    SuccessResponse,
    UpdatedResponse,
    VehicleIn,
    VehicleOut,
    VehiclePage,
)
from app.services.analysis import filter_vehicles, paginate
from app.services.vehicle_repository import VehicleRepository

router = APIRouter()


@router.get("/vehicles", response_model=List[VehicleOut])
async def list_vehicles(db: Session = Depends(get_db)):
    """List every vehicle in the inventory."""
    return VehicleRepository(db).list()


@router.get("/vehicles/page", response_model=VehiclePage)
async def list_vehicles_page(
    search: str = Query(default="", description="Matches make, model or year"),
    page: int = Query(default=1),
    db: Session = Depends(get_db),
):
    """One page of the (optionally filtered) inventory for the admin table."""
    vehicles = filter_vehicles(VehicleRepository(db).list(), search)
    result = paginate(vehicles, page)
    return VehiclePage(
        items=[VehicleOut.model_validate(v) for v in result.items],
        page=result.page,
        pageCount=result.pageCount,
        pages=result.pages,
    )


@router.post("/vehicles", response_model=CreatedResponse)
async def create_vehicle(vehicle: VehicleIn, db: Session = Depends(get_db)):
    """Add a vehicle with a count of 0. Duplicates are not checked here."""
    vehicle_id = VehicleRepository(db).create(vehicle.make, vehicle.model, vehicle.year)
    return CreatedResponse(id=vehicle_id)


@router.put("/vehicles/{vehicle_id}", response_model=UpdatedResponse)
async def update_vehicle(vehicle_id: int, vehicle: VehicleIn, db: Session = Depends(get_db)):
    """
    Overwrite make, model and year. The count is left untouched.
    An unknown id still succeeds, with `changes` set to 0.
    """
    changes = VehicleRepository(db).update(vehicle_id, vehicle.make, vehicle.model, vehicle.year)
    return UpdatedResponse(changes=changes)


@router.delete("/vehicles/{vehicle_id}", response_model=SuccessResponse)
async def delete_vehicle(vehicle_id: int, db: Session = Depends(get_db)):
    """Delete a vehicle. Deleting an unknown id is a no-op."""
    VehicleRepository(db).delete(vehicle_id)
    return SuccessResponse()
