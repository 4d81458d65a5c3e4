import csv
import time
from pathlib import Path

from sqlalchemy import inspect, select
from sqlalchemy.orm import Session

from shared.core import get_logger, setup_logging
from relief_inventory.application.catalog import clear_lookup_cache
from relief_inventory.domain.enums import ItemCategory, LocationLevel
from relief_inventory.domain.models import ItemType, Location
from relief_inventory.infrastructure.db import engine as default_engine

MAX_ATTEMPTS = 30
SLEEP_SECONDS = 2

DATA_DIR = Path(__file__).parent / "seed_data"

logger = get_logger(__name__)

def read_rows(file: str) -> list:
    with open(DATA_DIR / file, newline="", encoding="utf-8") as f:
        return list(csv.DictReader(f))

def _optional_int(value: str):
    return int(value) if value not in (None, "") else None

def _flag(value: str) -> bool:
    return str(value).strip().lower() in ("1", "true", "yes")

def wait_for_tables(engine, tables) -> bool:
    # The service creates the schema on startup; the seeder may start first
    for attempt in range(1, MAX_ATTEMPTS + 1):
        existing = set(inspect(engine).get_table_names())
        missing = [t for t in tables if t not in existing]
        if not missing:
            return True
        if attempt == 1:
            logger.info(f"Waiting for tables {missing} to exist...")
        time.sleep(SLEEP_SECONDS)
    return False

def seed_item_types(db: Session, rows) -> int:
    """Insert item types not yet present; (category, subcategory) identifies a type."""
    existing = {(t.category, t.subcategory) for t in db.scalars(select(ItemType))}
    created = 0
    for row in rows:
        category = ItemCategory(row["category"])
        if (category, row["subcategory"]) in existing:
            continue
        db.add(ItemType(
            category=category,
            subcategory=row["subcategory"],
            name=row["name"],
            description=row.get("description") or None,
            unit=row.get("unit") or "pieces",
            is_perishable=_flag(row.get("is_perishable")),
            shelf_life_days=_optional_int(row.get("shelf_life_days")),
            is_active=True,
            sort_order=_optional_int(row.get("sort_order")) or 0,
        ))
        existing.add((category, row["subcategory"]))
        created += 1
    return created

def seed_locations(db: Session, rows) -> int:
    existing = set(db.scalars(select(Location.code)))
    created = 0
    for row in rows:
        if row["code"] in existing:
            continue
        db.add(Location(
            code=row["code"],
            name=row["name"],
            level=LocationLevel(row["level"]),
            parent_code=row.get("parent_code") or None,
        ))
        existing.add(row["code"])
        created += 1
    return created

def seed(engine=default_engine) -> dict:
    if not wait_for_tables(engine, ["item_types", "locations"]):
        logger.error("Reference tables not found after waiting; nothing seeded")
        return {"item_types": 0, "locations": 0}
    with Session(engine) as db:
        counts = {
            "item_types": seed_item_types(db, read_rows("item_types.csv")),
            "locations": seed_locations(db, read_rows("locations.csv")),
        }
        db.commit()
    clear_lookup_cache()
    logger.info("Seeding complete", extra={'extra_fields': counts})
    return counts

def main():
    setup_logging(service_name="relief-inventory-seed")
    seed()

if __name__ == "__main__":
    main()
