from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy import CheckConstraint, String, Integer, ForeignKey, DateTime, Date, Boolean, Text, JSON, Enum as SAEnum
from datetime import datetime, date, timezone
from typing import Optional

from .enums import (
    AvailabilityMode,
    DonationStatus,
    ItemCategory,
    ItemCondition,
    LocationLevel,
    ResupplyStatus,
    StockStatus,
    Urgency,
    Visibility,
)

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

def enum_column(enum_cls, length: int = 30):
    # Stored as VARCHAR holding the enum value; loaded back as the enum member
    return SAEnum(
        enum_cls,
        native_enum=False,
        length=length,
        values_callable=lambda members: [m.value for m in members],
    )

class Base(DeclarativeBase):
    pass

class ItemType(Base):
    """Catalog reference row; the coordination core only reads these."""
    __tablename__ = "item_types"
    id: Mapped[int] = mapped_column(primary_key=True)
    category: Mapped[ItemCategory] = mapped_column(enum_column(ItemCategory), index=True)
    subcategory: Mapped[str] = mapped_column(String(100))
    name: Mapped[str] = mapped_column(String(200))
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    unit: Mapped[str] = mapped_column(String(30), default="pieces")
    is_perishable: Mapped[bool] = mapped_column(Boolean, default=False)
    shelf_life_days: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    sort_order: Mapped[int] = mapped_column(Integer, default=0)

class Location(Base):
    """District / tehsil / village reference row, addressed by code."""
    __tablename__ = "locations"
    code: Mapped[str] = mapped_column(String(20), primary_key=True)
    name: Mapped[str] = mapped_column(String(200))
    level: Mapped[LocationLevel] = mapped_column(enum_column(LocationLevel, 10))
    parent_code: Mapped[Optional[str]] = mapped_column(String(20), nullable=True, index=True)

class InventoryEntry(Base):
    __tablename__ = "inventory_entries"
    id: Mapped[int] = mapped_column(primary_key=True)
    # Provider ids come from the auth collaborator (no FK)
    provider_id: Mapped[str] = mapped_column(String(64), index=True)
    item_type_id: Mapped[int] = mapped_column(ForeignKey("item_types.id", ondelete="RESTRICT"), index=True)
    district_code: Mapped[str] = mapped_column(String(20), index=True)
    tehsil_code: Mapped[str] = mapped_column(String(20), index=True)
    # NULL village means the whole tehsil
    village_code: Mapped[Optional[str]] = mapped_column(String(20), nullable=True, index=True)

    quantity_total: Mapped[int] = mapped_column(Integer)
    quantity_available: Mapped[int] = mapped_column(Integer)
    condition: Mapped[ItemCondition] = mapped_column(enum_column(ItemCondition, 10), default=ItemCondition.NEW)
    status: Mapped[StockStatus] = mapped_column(enum_column(StockStatus, 20), default=StockStatus.AVAILABLE, index=True)

    availability_mode: Mapped[AvailabilityMode] = mapped_column(
        enum_column(AvailabilityMode, 20), default=AvailabilityMode.IMMEDIATE
    )
    available_from: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    available_until: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    response_hours: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    batch_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    expiry_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    storage_location: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    evidence_urls: Mapped[list] = mapped_column(JSON, default=list)
    visibility: Mapped[Visibility] = mapped_column(enum_column(Visibility, 20), default=Visibility.PUBLIC)
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False)

    version: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, index=True)

    item_type: Mapped[ItemType] = relationship("ItemType")
    resupply_requests: Mapped[list["ResupplyRequest"]] = relationship(
        "ResupplyRequest", back_populates="entry", cascade="all, delete-orphan"
    )
    donation_offers: Mapped[list["DonationOffer"]] = relationship(
        "DonationOffer", back_populates="entry", cascade="all, delete-orphan"
    )

    # Every UPDATE checks and bumps the version; a lost race raises StaleDataError
    __mapper_args__ = {"version_id_col": version}
    __table_args__ = (
        CheckConstraint(
            "quantity_available >= 0 AND quantity_available <= quantity_total",
            name="ck_inventory_entries_quantities",
        ),
    )

class ResupplyRequest(Base):
    __tablename__ = "resupply_requests"
    id: Mapped[int] = mapped_column(primary_key=True)
    entry_id: Mapped[int] = mapped_column(ForeignKey("inventory_entries.id", ondelete="CASCADE"), index=True)
    requested_by: Mapped[str] = mapped_column(String(64), index=True)
    quantity_requested: Mapped[int] = mapped_column(Integer)
    urgency: Mapped[Urgency] = mapped_column(enum_column(Urgency, 10), default=Urgency.NORMAL)
    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    preferred_delivery_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    status: Mapped[ResupplyStatus] = mapped_column(enum_column(ResupplyStatus, 20), default=ResupplyStatus.PENDING, index=True)
    reviewed_by: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    review_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    fulfilled_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
    entry: Mapped[InventoryEntry] = relationship("InventoryEntry", back_populates="resupply_requests")

class DonationOffer(Base):
    __tablename__ = "donation_offers"
    id: Mapped[int] = mapped_column(primary_key=True)
    entry_id: Mapped[int] = mapped_column(ForeignKey("inventory_entries.id", ondelete="CASCADE"), index=True)
    offered_by: Mapped[str] = mapped_column(String(64), index=True)
    donor_name: Mapped[str] = mapped_column(String(200))
    donor_contact: Mapped[str] = mapped_column(String(200))
    quantity_offered: Mapped[int] = mapped_column(Integer)
    condition: Mapped[ItemCondition] = mapped_column(enum_column(ItemCondition, 10), default=ItemCondition.NEW)
    available_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    delivery_method: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[DonationStatus] = mapped_column(enum_column(DonationStatus, 20), default=DonationStatus.OFFERED, index=True)
    reviewed_by: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    delivered_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
    entry: Mapped[InventoryEntry] = relationship("InventoryEntry", back_populates="donation_offers")

    @property
    def declined(self) -> bool:
        # A reviewer-initiated cancellation is a decline
        return self.status == DonationStatus.CANCELLED and self.reviewed_by is not None
