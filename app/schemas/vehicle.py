from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List

from app.models.vehicle import INTEGER_MAX, INTEGER_MIN


class VehicleIn(BaseModel):
    """Body of POST /api/vehicles and PUT /api/vehicles/{id}.

    Empty names and odd years are accepted; the year only has to fit the
    INTEGER column.
    """
    make: str = Field(description="Manufacturer, e.g. 'Toyota'")
    model: str = Field(description="Model name, e.g. 'Corolla'")
    year: int = Field(ge=INTEGER_MIN, le=INTEGER_MAX, description="Model year, e.g. 2020")


class VehicleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    make: str | None = None
    model: str | None = None
    year: int | None = None
    count: int = 0


class CreatedResponse(BaseModel):
    success: bool = True
    id: int


class UpdatedResponse(BaseModel):
    success: bool = True
    changes: int


class SuccessResponse(BaseModel):
    success: bool = True


class AnalysisResponse(BaseModel):
    vehicles: List[VehicleOut]
    totalCount: int


class CountResponse(BaseModel):
    message: str
    newCount: int
    totalCount: int


class ImportSummary(BaseModel):
    message: str
    imported: int
    skipped: int
    invalid: int


class VehiclePage(BaseModel):
    items: List[VehicleOut]
    page: int
    pageCount: int
    pages: List[int] = Field(description="Page numbers to offer as buttons around the current page")


class ChartBar(BaseModel):
    label: str
    count: int


class ChartsResponse(BaseModel):
    topVehicles: List[ChartBar]
    makes: Dict[str, int]
    totalCount: int
