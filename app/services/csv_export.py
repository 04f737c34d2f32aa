import logging
from typing import Iterable

from app.models.vehicle import Vehicle

logger = logging.getLogger(__name__)

EXPORT_FILENAME = "vehicles_export.csv"
EXPORT_HEADER = "ID,Make,Model,Year,Count"


def _field(value) -> str:
    return "" if value is None else str(value)


def export_csv(vehicles: Iterable[Vehicle]) -> str:
    """
    Serialize vehicles as CSV text, one line per row.
    Fields are joined with plain commas and never quoted, so a make or model
    containing a comma produces a line with extra fields.
    """
    lines = [EXPORT_HEADER]
    for v in vehicles:
        lines.append(",".join(_field(x) for x in (v.id, v.make, v.model, v.year, v.count)))
    logger.info("Exported vehicles to CSV", extra={"rows": len(lines) - 1})
    return "\n".join(lines) + "\n"
