"""Load the mock vehicle fleet from CSV."""

import csv
import os
from pathlib import Path
from typing import Optional
from uuid import uuid4

from itp_bot.domain.entities.vehicle import FuelType, Vehicle
from itp_bot.infrastructure.logging.logger import logger

DEFAULT_CSV_PATH = Path(__file__).parent.parent.parent.parent.parent / "data" / "catalog.csv"


def _map_row_to_vehicle(row: dict[str, str]) -> Optional[Vehicle]:
    """
    Map CSV row to a Vehicle with a freshly generated id.

    Args:
        row: CSV row as dictionary

    Returns:
        Vehicle, or None if the row is invalid
    """
    try:
        maker = str(row["maker"]).strip()
        model = str(row["model"]).strip()
        year = int(row["year"])
        if not maker or not model or year <= 0:
            return None

        return Vehicle(
            id=uuid4().hex,
            maker=maker,
            model=model,
            year=year,
            fiscal_power=row["fiscal_power"].strip(),
            fiscal_value=row["fiscal_value"].strip(),
            fuel_type=FuelType(row["fuel_type"].strip().lower()),
        )
    except (ValueError, KeyError, ArithmeticError):
        return None


def load_fleet(csv_path: Optional[str] = None) -> list[Vehicle]:
    """
    Read the fleet CSV in file order.

    Args:
        csv_path: Path to CSV file. Defaults to data/catalog.csv in the project root.

    Returns:
        Vehicles in file order, skipping invalid rows

    Raises:
        FileNotFoundError: If the CSV file does not exist
    """
    path = csv_path or str(DEFAULT_CSV_PATH)
    if not os.path.exists(path):
        raise FileNotFoundError(f"Catalog CSV file not found: {path}")

    vehicles = []
    with open(path, "r", encoding="utf-8") as file:
        reader = csv.DictReader(file)
        for line_number, row in enumerate(reader, start=2):
            vehicle = _map_row_to_vehicle(row)
            if vehicle is None:
                logger.warning(f"Skipping invalid catalog row {line_number} in {path}")
                continue
            vehicles.append(vehicle)
    return vehicles
