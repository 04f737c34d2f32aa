"""
CSV import for the vehicle inventory.

The upload is parsed once with pandas, then merged into the database one
record at a time:

1. Header names are matched case-insensitively ("brand" means "make");
   other columns are ignored.
2. make/model are trimmed and inner whitespace collapsed; year/count are
   trimmed as text.
3. A record missing make, model or year is *invalid*.
4. A record whose (make, model, year) already exists, ignoring case and
   surrounding spaces, is *skipped*.
5. Anything else is inserted, with count defaulting to 0.

A bad record never stops the import: it is rolled back on its own and counted
as invalid.
"""
from __future__ import annotations

import io
import logging
import re
from dataclasses import dataclass
from typing import Dict, Iterator, Optional

import pandas as pd
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.exceptions import CsvParseError, MissingUploadError
from app.models.vehicle import INTEGER_MAX, INTEGER_MIN
from app.services.vehicle_repository import VehicleRepository

logger = logging.getLogger(__name__)

COLUMN_SYNONYMS = {"brand": "make"}
RECOGNIZED_COLUMNS = ("make", "model", "year", "count")

_WHITESPACE_RUN = re.compile(r"\s+")


@dataclass
class ImportResult:
    imported: int = 0
    skipped: int = 0
    invalid: int = 0

    @property
    def message(self) -> str:
        return (
            f"Successfully imported {self.imported} new vehicles. "
            f"Skipped {self.skipped} existing vehicles. "
            f"Found {self.invalid} invalid records."
        )


@dataclass
class VehicleRecord:
    make: str
    model: str
    year: str
    count: str

    def is_valid(self) -> bool:
        return bool(self.make and self.model and self.year)


def collapse_whitespace(value: str) -> str:
    return _WHITESPACE_RUN.sub(" ", value.strip())


def clean_header(name: str) -> str:
    # Excel exports often prefix the first header with a BOM
    return str(name).strip().lstrip("\ufeff").strip().lower()


def normalize_header(name: str) -> str:
    key = clean_header(name)
    return COLUMN_SYNONYMS.get(key, key)


def parse_year(text: str) -> int:
    """Raises ValueError for text that is not an integer the INTEGER column can hold."""
    year = int(text)
    if not INTEGER_MIN <= year <= INTEGER_MAX:
        raise ValueError(f"year out of range: {text}")
    return year


def parse_count(text: str) -> int:
    """Count column value; anything that is not a plain non-negative integer is 0.

    Raises ValueError for a count too large to store.
    """
    if not text.isdigit():
        return 0
    count = int(text)
    if count > INTEGER_MAX:
        raise ValueError(f"count out of range: {text}")
    return count


def read_csv(content: bytes | str) -> pd.DataFrame:
    """Parse the whole upload, keeping every cell as text.

    Raises:
        CsvParseError: the document is not valid CSV.
    """
    if isinstance(content, bytes):
        try:
            content = content.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise CsvParseError(f"File is not valid UTF-8 text: {e}") from e

    try:
        df = pd.read_csv(
            io.StringIO(content),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            index_col=False,
        )
    except pd.errors.EmptyDataError as e:
        raise CsvParseError(f"CSV file is empty: {e}") from e
    except pd.errors.ParserError as e:
        raise CsvParseError(f"Could not parse CSV: {e}") from e

    return select_columns(df.fillna(""))


def select_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Keep the recognized columns, renamed to their canonical names.

    The first column for each name wins, except that an explicit "make"
    column replaces an earlier "brand" one.
    """
    chosen: Dict[str, str] = {}
    for original in df.columns:
        key = normalize_header(original)
        if key not in RECOGNIZED_COLUMNS:
            continue
        if key not in chosen:
            chosen[key] = original
        elif clean_header(original) == key and clean_header(chosen[key]) != key:
            chosen[key] = original
    selected = df[list(chosen.values())]
    return selected.rename(columns={original: key for key, original in chosen.items()})


def iter_records(df: pd.DataFrame) -> Iterator[VehicleRecord]:
    for row in df.to_dict(orient="records"):
        yield VehicleRecord(
            make=collapse_whitespace(row.get("make") or ""),
            model=collapse_whitespace(row.get("model") or ""),
            year=(row.get("year") or "").strip(),
            count=(row.get("count") or "").strip(),
        )


class CsvImporter:
    """Merges parsed CSV records into the vehicles table."""

    def __init__(self, db: Session):
        self.db = db
        self.repository = VehicleRepository(db)

    def run(self, content: Optional[bytes | str]) -> ImportResult:
        if content is None:
            raise MissingUploadError()

        df = read_csv(content)
        result = ImportResult()
        for record in iter_records(df):
            outcome = self.import_record(record)
            setattr(result, outcome, getattr(result, outcome) + 1)

        logger.info(
            "CSV import finished",
            extra={"imported": result.imported, "skipped": result.skipped, "invalid": result.invalid},
        )
        return result

    def import_record(self, record: VehicleRecord) -> str:
        """Returns which counter the record belongs to: imported, skipped or invalid."""
        if not record.is_valid():
            return "invalid"

        try:
            if self.repository.find_by_natural_key(record.make, record.model, record.year):
                return "skipped"
            self.repository.insert(
                make=record.make,
                model=record.model,
                year=parse_year(record.year),
                count=parse_count(record.count),
            )
        except OperationalError:
            # Lost the database, no point in trying the next record
            self.db.rollback()
            raise
        except (ValueError, OverflowError, SQLAlchemyError):
            self.db.rollback()
            logger.warning(
                "Rejected CSV record",
                extra={"make": record.make, "model": record.model, "year": record.year},
                exc_info=True,
            )
            return "invalid"
        return "imported"
