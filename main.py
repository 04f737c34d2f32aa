import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

import uvicorn
from fastapi import FastAPI
from dotenv import load_dotenv
from fastapi.staticfiles import StaticFiles
from fastapi.responses import FileResponse
from app.core.config import get_host, get_port
from app.core.logging import setup_logging
from app.database import Storage, create_storage
from app.exceptions import InventoryError, register_exception_handlers
from app.routers import api

# Load Environment Variables (PRODUCTION, DATABASE_URL, PORT)
load_dotenv()
setup_logging()

logger = logging.getLogger(__name__)

FRONTEND_DIR = Path(__file__).resolve().parent / "frontend"


def create_app(storage: Optional[Storage] = None) -> FastAPI:
    """
    Build the application. Without an explicit storage the backend is chosen
    from the environment when the app starts.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Any failure here aborts startup: the server must not run without its table
        try:
            app.state.storage = storage or create_storage()
            app.state.storage.init_schema()
        except InventoryError:
            logger.exception("Database bootstrap failed, aborting startup")
            raise
        try:
            yield
        finally:
            app.state.storage.dispose()

    app = FastAPI(
        title="Vehicle Inventory",
        description="Track vehicle inventory, popularity counts and CSV import/export.",
        version="1.0.0",
        lifespan=lifespan,
    )
    register_exception_handlers(app)

    app.include_router(api.router, prefix="/api")

    @app.get("/health")
    async def health_check():
        database = "ok" if app.state.storage.ping() else "unavailable"
        return {"status": "ok", "service": "VehicleInventory", "database": database}

    # Serve Frontend at Root
    @app.get("/")
    async def read_index():
        return FileResponse(FRONTEND_DIR / "index.html")

    # Serve Static Files (mounted last to avoid shadowing routes)
    app.mount("/static", StaticFiles(directory=FRONTEND_DIR), name="static")
    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run("main:app", host=get_host(), port=get_port())
