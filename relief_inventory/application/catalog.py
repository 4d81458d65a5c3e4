"""
Read-only collaborators: the item-type catalog and the location directory.

Both are administered elsewhere; the core only resolves references against
them and joins their display names into read models. Display names are kept
in a small TTL cache since they change rarely and every listing needs them.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from cachetools import TTLCache
from sqlalchemy import select
from sqlalchemy.orm import Session

from relief_inventory.core_settings import get_settings
from relief_inventory.domain.enums import ItemCategory, LocationLevel
from relief_inventory.domain.errors import NotFoundError, ValidationError
from relief_inventory.domain.models import ItemType, Location

_settings = get_settings()
_item_cache: TTLCache = TTLCache(maxsize=1024, ttl=_settings.LOOKUP_CACHE_TTL)
_location_cache: TTLCache = TTLCache(maxsize=4096, ttl=_settings.LOOKUP_CACHE_TTL)


def clear_lookup_cache() -> None:
    _item_cache.clear()
    _location_cache.clear()


@dataclass(frozen=True)
class ItemTypeSummary:
    id: int
    name: str
    unit: str
    category: ItemCategory


@dataclass(frozen=True)
class ResolvedLocation:
    district: Location
    tehsil: Location
    village: Optional[Location] = None


class ItemCatalog:
    def __init__(self, db: Session):
        self.db = db

    def list(self, category: Optional[ItemCategory] = None, include_inactive: bool = False) -> List[ItemType]:
        query = select(ItemType)
        if not include_inactive:
            query = query.where(ItemType.is_active.is_(True))
        if category is not None:
            query = query.where(ItemType.category == category)
        query = query.order_by(ItemType.category, ItemType.sort_order, ItemType.name)
        return list(self.db.scalars(query))

    def resolve_item_type(self, item_type_id: int, require_active: bool = True) -> ItemType:
        item_type = self.db.get(ItemType, item_type_id)
        if item_type is None or (require_active and not item_type.is_active):
            raise NotFoundError("Item type", item_type_id)
        return item_type

    def summary(self, item_type_id: int) -> Optional[ItemTypeSummary]:
        cached = _item_cache.get(item_type_id)
        if cached is not None:
            return cached
        item_type = self.db.get(ItemType, item_type_id)
        if item_type is None:
            return None
        result = ItemTypeSummary(
            id=item_type.id,
            name=item_type.name,
            unit=item_type.unit,
            category=ItemCategory(item_type.category),
        )
        _item_cache[item_type_id] = result
        return result


class LocationDirectory:
    def __init__(self, db: Session):
        self.db = db

    def _fetch(self, code: str, level: LocationLevel) -> Location:
        location = self.db.get(Location, code)
        if location is None or location.level != level:
            raise NotFoundError(level.value.capitalize(), code)
        return location

    def resolve_location(self, district_code: str, tehsil_code: str,
                         village_code: Optional[str] = None) -> ResolvedLocation:
        """Check that the codes exist and nest district > tehsil > village."""
        district = self._fetch(district_code, LocationLevel.DISTRICT)
        tehsil = self._fetch(tehsil_code, LocationLevel.TEHSIL)
        if tehsil.parent_code != district.code:
            raise ValidationError.for_field(
                "tehsil_code", f"Tehsil {tehsil_code} is not in district {district_code}"
            )
        village = None
        if village_code:
            village = self._fetch(village_code, LocationLevel.VILLAGE)
            if village.parent_code != tehsil.code:
                raise ValidationError.for_field(
                    "village_code", f"Village {village_code} is not in tehsil {tehsil_code}"
                )
        return ResolvedLocation(district=district, tehsil=tehsil, village=village)

    def names(self, codes: Iterable[Optional[str]]) -> Dict[str, str]:
        result: Dict[str, str] = {}
        missing = []
        for code in codes:
            if not code or code in result:
                continue
            cached = _location_cache.get(code)
            if cached is not None:
                result[code] = cached
            else:
                missing.append(code)
        if missing:
            rows = self.db.scalars(select(Location).where(Location.code.in_(missing)))
            for row in rows:
                _location_cache[row.code] = row.name
                result[row.code] = row.name
        return result

