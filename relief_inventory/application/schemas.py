from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import Dict, List, Optional

from relief_inventory.domain.enums import (
    AvailabilityMode,
    DonationStatus,
    ItemCategory,
    ItemCondition,
    ResupplyStatus,
    ReviewDecision,
    StockStatus,
    Urgency,
    Visibility,
)

# Inventory entries

class InventoryEntryCreate(BaseModel):
    # Defaults to the acting provider; admins may file on behalf of another provider
    provider_id: Optional[str] = None
    item_type_id: int
    district_code: str
    tehsil_code: str
    village_code: Optional[str] = None
    quantity_total: int
    # Omitted means fully stocked (equal to quantity_total)
    quantity_available: Optional[int] = None
    condition: ItemCondition = ItemCondition.NEW
    status: Optional[StockStatus] = None
    availability_mode: AvailabilityMode = AvailabilityMode.IMMEDIATE
    available_from: Optional[datetime] = None
    available_until: Optional[datetime] = None
    response_hours: Optional[int] = None
    batch_number: Optional[str] = None
    expiry_date: Optional[date] = None
    storage_location: Optional[str] = None
    notes: Optional[str] = None
    evidence_urls: List[str] = Field(default_factory=list)
    visibility: Visibility = Visibility.PUBLIC
    is_verified: bool = False

class InventoryEntryUpdate(BaseModel):
    """Partial update; only fields present in the request body are applied."""
    quantity_total: Optional[int] = None
    quantity_available: Optional[int] = None
    condition: Optional[ItemCondition] = None
    status: Optional[StockStatus] = None
    availability_mode: Optional[AvailabilityMode] = None
    available_from: Optional[datetime] = None
    available_until: Optional[datetime] = None
    response_hours: Optional[int] = None
    batch_number: Optional[str] = None
    expiry_date: Optional[date] = None
    storage_location: Optional[str] = None
    notes: Optional[str] = None
    evidence_urls: Optional[List[str]] = None
    visibility: Optional[Visibility] = None
    is_verified: Optional[bool] = None

class InventoryFilter(BaseModel):
    provider_id: Optional[str] = None
    # Matches the district, tehsil or village code of an entry
    location_code: Optional[str] = None
    category: Optional[ItemCategory] = None
    status: Optional[StockStatus] = None
    low_stock_only: bool = False

class InventoryEntryRead(BaseModel):
    id: int
    provider_id: str
    item_type_id: int
    item_type_name: Optional[str] = None
    item_unit: Optional[str] = None
    item_category: Optional[ItemCategory] = None
    district_code: str
    district_name: Optional[str] = None
    tehsil_code: str
    tehsil_name: Optional[str] = None
    village_code: Optional[str] = None
    village_name: Optional[str] = None
    quantity_total: int
    quantity_available: int
    condition: ItemCondition
    status: StockStatus
    availability_mode: AvailabilityMode
    available_from: Optional[datetime] = None
    available_until: Optional[datetime] = None
    response_hours: Optional[int] = None
    is_offerable_now: bool = False
    batch_number: Optional[str] = None
    expiry_date: Optional[date] = None
    storage_location: Optional[str] = None
    notes: Optional[str] = None
    evidence_urls: List[str] = Field(default_factory=list)
    visibility: Visibility
    is_verified: bool = False
    pending_resupply_count: int = 0
    open_donation_count: int = 0
    version: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    class Config:
        from_attributes = True

class InventorySummaryRead(BaseModel):
    total_entries: int
    by_status: Dict[StockStatus, int]
    low_stock_entries: int
    pending_resupply_requests: int
    open_donation_offers: int

# Resupply requests

class ResupplyRequestCreate(BaseModel):
    quantity_requested: int
    urgency: Urgency = Urgency.NORMAL
    reason: Optional[str] = None
    preferred_delivery_date: Optional[date] = None

class ResupplyReview(BaseModel):
    decision: ReviewDecision
    notes: Optional[str] = None

class ResupplyRequestRead(BaseModel):
    id: int
    entry_id: int
    item_type_name: Optional[str] = None
    item_unit: Optional[str] = None
    requested_by: str
    quantity_requested: int
    urgency: Urgency
    reason: Optional[str] = None
    preferred_delivery_date: Optional[date] = None
    status: ResupplyStatus
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    review_notes: Optional[str] = None
    fulfilled_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    class Config:
        from_attributes = True

# Donation offers

class DonationOfferCreate(BaseModel):
    donor_name: str
    donor_contact: str
    quantity_offered: int
    condition: ItemCondition = ItemCondition.NEW
    available_date: Optional[date] = None
    delivery_method: Optional[str] = None
    notes: Optional[str] = None

class DonationOfferRead(BaseModel):
    id: int
    entry_id: int
    item_type_name: Optional[str] = None
    item_unit: Optional[str] = None
    offered_by: str
    donor_name: str
    donor_contact: str
    quantity_offered: int
    condition: ItemCondition
    available_date: Optional[date] = None
    delivery_method: Optional[str] = None
    notes: Optional[str] = None
    status: DonationStatus
    declined: bool = False
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    class Config:
        from_attributes = True

# Catalog

class ItemTypeRead(BaseModel):
    id: int
    category: ItemCategory
    subcategory: str
    name: str
    description: Optional[str] = None
    unit: str
    is_perishable: bool
    shelf_life_days: Optional[int] = None
    is_active: bool
    sort_order: int
    class Config:
        from_attributes = True
