"""Stock-status derivation for inventory entries."""

from dataclasses import dataclass
from typing import Optional

from relief_inventory.domain.enums import StockStatus


@dataclass(frozen=True)
class StockThresholds:
    min_units: int = 5
    ratio: float = 0.2

    @classmethod
    def from_settings(cls, settings) -> "StockThresholds":
        return cls(min_units=settings.LOW_STOCK_MIN_UNITS, ratio=settings.LOW_STOCK_RATIO)

    def low_stock_limit(self, quantity_total: int) -> float:
        return max(self.min_units, self.ratio * quantity_total)


DEFAULT_THRESHOLDS = StockThresholds()


def _coerce(status) -> Optional[StockStatus]:
    if status is None:
        return None
    return StockStatus(status)


def quantity_status(quantity_available: int, quantity_total: int,
                    thresholds: StockThresholds = DEFAULT_THRESHOLDS) -> StockStatus:
    """Status implied by quantities alone."""
    if quantity_available == 0:
        return StockStatus.OUT_OF_STOCK
    if quantity_available <= thresholds.low_stock_limit(quantity_total):
        return StockStatus.LOW_STOCK
    return StockStatus.AVAILABLE


def derive_status(entry, thresholds: StockThresholds = DEFAULT_THRESHOLDS) -> StockStatus:
    """
    Compute the displayed status of an entry.

    Administrator overrides (RESERVED, DAMAGED, EXPIRED) win until cleared;
    otherwise the status follows the quantities. Running it twice on an
    unchanged entry gives the same answer.
    """
    current = _coerce(entry.status)
    if current is not None and current.is_override:
        return current
    return quantity_status(entry.quantity_available, entry.quantity_total, thresholds)


def is_low_stock(entry, thresholds: StockThresholds = DEFAULT_THRESHOLDS) -> bool:
    """Quantity test behind the "low stock only" listing filter (includes empty entries)."""
    return entry.quantity_available <= thresholds.low_stock_limit(entry.quantity_total)


def apply_status(entry, requested: Optional[StockStatus] = None,
                 thresholds: StockThresholds = DEFAULT_THRESHOLDS) -> StockStatus:
    """
    Store the status an entry should carry after a mutation.

    `requested` is the status the caller explicitly asked for, if any: an
    override is kept verbatim, any other value clears a standing override and
    falls back to derivation.
    """
    if requested is not None:
        requested = StockStatus(requested)
        if requested.is_override:
            entry.status = requested
            return requested
        entry.status = quantity_status(entry.quantity_available, entry.quantity_total, thresholds)
        return entry.status
    entry.status = derive_status(entry, thresholds)
    return entry.status
