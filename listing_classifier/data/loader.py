"""Load raw listing records from the realtor CSV export."""

from __future__ import annotations

import logging
import math
from pathlib import Path

import pandas as pd

from .errors import RecordLoadError, UnknownCategoryError
from .models import Record, State

logger = logging.getLogger(__name__)

NUMERIC_COLUMNS = ("price", "bed", "bath", "acre_lot", "zip_code", "house_size")
STATE_COLUMN = "state"
REQUIRED_COLUMNS = (*NUMERIC_COLUMNS, STATE_COLUMN)


def load_records(path: Path | str) -> list[Record]:
    """
    Read listings from a CSV file.

    Empty or non-numeric cells become missing values. States outside the
    supported enumeration are treated as missing rather than rejected,
    because the export covers more states than the classifier does.
    Extra columns are ignored.

    Args:
        path: Path to the CSV file

    Returns:
        One Record per CSV row, in file order

    Raises:
        RecordLoadError: If the file is missing or lacks a required column
    """
    path = Path(path)
    try:
        frame = pd.read_csv(path, dtype={STATE_COLUMN: "string"})
    except FileNotFoundError as e:
        raise RecordLoadError(f"Listing file not found: {path}") from e
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise RecordLoadError(f"Cannot parse listing file {path}: {e}") from e

    missing = [c for c in REQUIRED_COLUMNS if c not in frame.columns]
    if missing:
        raise RecordLoadError(f"Listing file {path} missing columns: {missing}")

    records = records_from_frame(frame)
    logger.info(f"Loaded {len(records)} records from {path}")
    return records


def records_from_frame(frame: pd.DataFrame) -> list[Record]:
    """Convert a DataFrame with the listing columns to records."""
    numeric = {
        column: pd.to_numeric(frame[column], errors="coerce").tolist()
        for column in NUMERIC_COLUMNS
    }

    unknown_states = 0
    states: list[State | None] = []
    for raw in frame[STATE_COLUMN].tolist():
        state = None
        if isinstance(raw, str) and raw.strip():
            try:
                state = State.parse(raw)
            except UnknownCategoryError:
                unknown_states += 1
        states.append(state)

    if unknown_states:
        logger.debug(f"{unknown_states} rows had a state outside the enumeration")

    return [
        Record(
            **{column: _optional(numeric[column][row]) for column in NUMERIC_COLUMNS},
            state=states[row],
        )
        for row in range(len(frame))
    ]


def _optional(value: float) -> float | None:
    if value is None or math.isnan(value):
        return None
    return float(value)
