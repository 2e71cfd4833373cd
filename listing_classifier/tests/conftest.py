"""Pytest configuration and shared fixtures."""

from collections.abc import Callable
from pathlib import Path

import numpy as np
import pytest

from listing_classifier.data import Record, State

CSV_HEADER = (
    "brokered_by,status,price,bed,bath,acre_lot,street,city,"
    "state,zip_code,house_size,prev_sold_date"
)

_STATES = [State.NEW_YORK, State.NEW_JERSEY, State.MAINE, State.VERMONT]


def _listing(i: int) -> Record:
    return Record(
        price=100_000.0 + i * 10_000.0,
        bed=float(1 + i % 4),
        bath=float(1 + i % 3),
        acre_lot=0.1 + (i % 5) * 0.05,
        zip_code=1000.0 + i,
        house_size=800.0 + i * 20.0,
        state=_STATES[i % len(_STATES)],
    )


@pytest.fixture
def rng() -> np.random.Generator:
    """Seeded generator for deterministic tests."""
    return np.random.default_rng(1234)


@pytest.fixture
def make_listing() -> Callable[[int], Record]:
    """
    Factory for deterministic, varied listings.

    Usage in tests:
        def test_something(make_listing):
            record = make_listing(3)
    """
    return _listing


@pytest.fixture
def sample_records() -> list[Record]:
    """A corpus of 60 complete listings."""
    return [_listing(i) for i in range(60)]


@pytest.fixture
def write_listing_csv() -> Callable[..., Path]:
    """Factory writing a realtor-style CSV with n_rows listings."""

    def _write(path: Path, n_rows: int = 60) -> Path:
        lines = [CSV_HEADER]
        for i in range(n_rows):
            r = _listing(i)
            lines.append(
                f"{i},for_sale,{r.price},{r.bed},{r.bath},{r.acre_lot},street-{i},"
                f"City,{r.state.value},{int(r.zip_code)},{r.house_size},"
            )
        path.write_text("\n".join(lines) + "\n")
        return path

    return _write


@pytest.fixture
def listing_csv(tmp_path: Path, write_listing_csv: Callable[..., Path]) -> Path:
    """Path to a CSV of 60 listings."""
    return write_listing_csv(tmp_path / "realtor-data.csv")
