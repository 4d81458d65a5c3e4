from types import SimpleNamespace

import pytest

from relief_inventory.application.status import (
    StockThresholds,
    apply_status,
    derive_status,
    is_low_stock,
    quantity_status,
)
from relief_inventory.domain.enums import StockStatus

def entry(available, total, status=StockStatus.AVAILABLE):
    return SimpleNamespace(quantity_available=available, quantity_total=total, status=status)

@pytest.mark.parametrize("available,total,expected", [
    (0, 100, StockStatus.OUT_OF_STOCK),
    (10, 100, StockStatus.LOW_STOCK),
    (20, 100, StockStatus.LOW_STOCK),
    (21, 100, StockStatus.AVAILABLE),
    (5, 10, StockStatus.LOW_STOCK),
    (6, 10, StockStatus.AVAILABLE),
    (0, 0, StockStatus.OUT_OF_STOCK),
])
def test_quantity_status_thresholds(available, total, expected):
    assert quantity_status(available, total) == expected

def test_overrides_win_over_quantities():
    for override in (StockStatus.RESERVED, StockStatus.DAMAGED, StockStatus.EXPIRED):
        assert derive_status(entry(0, 100, override)) == override
        assert derive_status(entry(100, 100, override)) == override

def test_stale_derived_status_is_recomputed():
    assert derive_status(entry(0, 100, StockStatus.AVAILABLE)) == StockStatus.OUT_OF_STOCK
    assert derive_status(entry(100, 100, StockStatus.OUT_OF_STOCK)) == StockStatus.AVAILABLE

def test_derive_status_is_idempotent():
    e = entry(10, 100)
    e.status = derive_status(e)
    assert derive_status(e) == e.status == StockStatus.LOW_STOCK

def test_custom_thresholds():
    thresholds = StockThresholds(min_units=1, ratio=0.5)
    assert quantity_status(50, 100, thresholds) == StockStatus.LOW_STOCK
    assert quantity_status(51, 100, thresholds) == StockStatus.AVAILABLE

def test_is_low_stock_includes_empty_entries():
    assert is_low_stock(entry(0, 100))
    assert is_low_stock(entry(20, 100))
    assert not is_low_stock(entry(21, 100))

def test_apply_status_keeps_requested_override():
    e = entry(100, 100)
    assert apply_status(e, StockStatus.DAMAGED) == StockStatus.DAMAGED
    assert e.status == StockStatus.DAMAGED

def test_apply_status_derived_request_clears_override():
    e = entry(0, 100, StockStatus.RESERVED)
    assert apply_status(e, StockStatus.AVAILABLE) == StockStatus.OUT_OF_STOCK

def test_apply_status_without_request_preserves_override():
    e = entry(0, 100, StockStatus.EXPIRED)
    assert apply_status(e) == StockStatus.EXPIRED

def test_override_flag_on_status_values():
    assert {s for s in StockStatus if s.is_override} == {
        StockStatus.RESERVED, StockStatus.DAMAGED, StockStatus.EXPIRED,
    }
    assert not StockStatus.OUT_OF_STOCK.is_override
