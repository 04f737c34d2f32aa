from fastapi import APIRouter
from app.routers import analysis, transfer, vehicles

router = APIRouter()

router.include_router(vehicles.router, tags=["Vehicles"])
router.include_router(analysis.router, tags=["Analysis"])
router.include_router(transfer.router, tags=["Import/Export"])
