import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class InventoryError(Exception):
    """Base class for errors raised by the inventory services."""


class ConfigurationError(InventoryError):
    pass


class StorageError(InventoryError):
    """The database could not be reached or the schema could not be created."""


class VehicleNotFoundError(InventoryError):
    def __init__(self, vehicle_id: int):
        self.vehicle_id = vehicle_id
        super().__init__("Vehicle not found")


class UserInputError(InventoryError):
    pass


class MissingUploadError(UserInputError):
    def __init__(self):
        super().__init__("No file uploaded")


class CsvParseError(UserInputError):
    pass


async def not_found_exception_handler(request: Request, exc: VehicleNotFoundError):
    return JSONResponse(status_code=404, content={"error": str(exc)})


async def user_input_exception_handler(request: Request, exc: UserInputError):
    return JSONResponse(status_code=400, content={"error": str(exc)})


def describe_validation_errors(exc: RequestValidationError) -> str:
    """Failed fields joined with "; ", e.g. "body.year: Input should be a valid integer"."""
    return "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=422, content={"error": describe_validation_errors(exc)})


async def upstream_exception_handler(request: Request, exc: Exception):
    logger.error(
        "Database failure while handling %s %s", request.method, request.url.path,
        exc_info=exc,
    )
    return JSONResponse(status_code=500, content={"error": str(exc) or "An unknown error occurred"})


def register_exception_handlers(app) -> None:
    app.add_exception_handler(VehicleNotFoundError, not_found_exception_handler)
    app.add_exception_handler(UserInputError, user_input_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StorageError, upstream_exception_handler)
    app.add_exception_handler(SQLAlchemyError, upstream_exception_handler)
