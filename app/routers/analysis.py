from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.vehicle import AnalysisResponse, ChartsResponse, CountResponse
from app.services.analysis import filter_vehicles, make_distribution, top_vehicles, total_count
from app.services.vehicle_repository import VehicleRepository

router = APIRouter()


@router.get("/analysis", response_model=AnalysisResponse)
async def get_analysis(db: Session = Depends(get_db)):
    """All vehicles plus the sum of their counts."""
    return VehicleRepository(db).analysis()


@router.get("/analysis/charts", response_model=ChartsResponse)
async def get_charts(
    search: str = Query(default="", description="Restrict the charts to matching vehicles"),
    db: Session = Depends(get_db),
):
    """Series for the top-20 bar chart and the vehicles-by-make pie chart."""
    vehicles = filter_vehicles(VehicleRepository(db).list(), search)
    return ChartsResponse(
        topVehicles=top_vehicles(vehicles),
        makes=make_distribution(vehicles),
        totalCount=total_count(vehicles),
    )


@router.post("/count/{vehicle_id}", response_model=CountResponse)
async def increment_count(vehicle_id: int, db: Session = Depends(get_db)):
    """
    Add one to a vehicle's popularity count.
    Raises:
        VehicleNotFoundError (404): no vehicle has this id.
    """
    repository = VehicleRepository(db)
    new_count = repository.increment_count(vehicle_id)
    return CountResponse(
        message="Count incremented successfully",
        newCount=new_count,
        totalCount=repository.total_count(),
    )
