"""Closed value sets shared by the models, schemas and workflows."""

from enum import Enum


class ItemCategory(str, Enum):
    FOOD = "FOOD"
    SHELTER = "SHELTER"
    MEDICAL = "MEDICAL"
    WATER_SANITATION = "WATER_SANITATION"
    TRANSPORT = "TRANSPORT"
    COMMUNICATION = "COMMUNICATION"
    OTHER = "OTHER"


class LocationLevel(str, Enum):
    DISTRICT = "DISTRICT"
    TEHSIL = "TEHSIL"
    VILLAGE = "VILLAGE"


class ItemCondition(str, Enum):
    NEW = "NEW"
    GOOD = "GOOD"
    FAIR = "FAIR"
    POOR = "POOR"


class StockStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    LOW_STOCK = "LOW_STOCK"
    OUT_OF_STOCK = "OUT_OF_STOCK"
    RESERVED = "RESERVED"
    DAMAGED = "DAMAGED"
    EXPIRED = "EXPIRED"

    @property
    def is_override(self) -> bool:
        return self in OVERRIDE_STATUSES


OVERRIDE_STATUSES = frozenset(
    {StockStatus.RESERVED, StockStatus.DAMAGED, StockStatus.EXPIRED}
)


class AvailabilityMode(str, Enum):
    IMMEDIATE = "IMMEDIATE"
    SCHEDULED = "SCHEDULED"
    ON_REQUEST = "ON_REQUEST"
    LIMITED_TIME = "LIMITED_TIME"


class Visibility(str, Enum):
    PUBLIC = "PUBLIC"
    COORDINATORS = "COORDINATORS"
    PRIVATE = "PRIVATE"


class Urgency(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    CRITICAL = "critical"


class ResupplyStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    FULFILLED = "FULFILLED"
    CANCELLED = "CANCELLED"


class ResupplyAction(str, Enum):
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    FULFILL = "FULFILL"
    CANCEL = "CANCEL"


class ReviewDecision(str, Enum):
    APPROVE = "APPROVE"
    REJECT = "REJECT"


class DonationStatus(str, Enum):
    OFFERED = "OFFERED"
    ACCEPTED = "ACCEPTED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class DonationAction(str, Enum):
    ACCEPT = "ACCEPT"
    DECLINE = "DECLINE"
    WITHDRAW = "WITHDRAW"
    DELIVER = "DELIVER"
