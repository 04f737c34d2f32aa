import logging

from fastapi import APIRouter, Depends, File, Response, UploadFile
from sqlalchemy.orm import Session
from typing import Optional

from app.database import get_db
from app.exceptions import MissingUploadError
from app.schemas.vehicle import ImportSummary
from app.services.csv_export import EXPORT_FILENAME, export_csv
from app.services.csv_import import CsvImporter
from app.services.vehicle_repository import VehicleRepository

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/export")
async def export_vehicles(db: Session = Depends(get_db)):
    """Download the whole inventory as `vehicles_export.csv`."""
    logger.info("Export request received")
    content = export_csv(VehicleRepository(db).list())
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={EXPORT_FILENAME}"},
    )


@router.post("/import", response_model=ImportSummary)
async def import_vehicles(file: Optional[UploadFile] = File(None), db: Session = Depends(get_db)):
    """
    Merge an uploaded CSV into the inventory.
    Rows already present (same make, model and year) are skipped and rows
    without make, model or year are counted as invalid.
    Raises:
        MissingUploadError (400): no `file` field in the form.
        CsvParseError (400): the file is not readable CSV.
    """
    logger.info("Import request received")
    if file is None:
        raise MissingUploadError()

    content = await file.read()
    result = CsvImporter(db).run(content)
    return ImportSummary(
        message=result.message,
        imported=result.imported,
        skipped=result.skipped,
        invalid=result.invalid,
    )
