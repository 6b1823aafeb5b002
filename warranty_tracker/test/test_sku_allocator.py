"""
Tests for SKU generation
"""
import re

from warranty_tracker.business.equipment.sku_allocator import SkuAllocator, to_base36

SKU_PATTERN = re.compile(r'^EQ-[0-9A-Z]+-[0-9A-Z]+$')


def test_base36():
    assert to_base36(0) == '0'
    assert to_base36(35) == 'Z'
    assert to_base36(36) == '10'
    assert to_base36(1295) == 'ZZ'


def test_format():
    sku = SkuAllocator().allocate()
    assert SKU_PATTERN.match(sku)
    assert len(sku.split('-')[2]) == 4


def test_timestamp_segment_comes_from_clock():
    allocator = SkuAllocator(clock=lambda: 36 ** 3)
    assert allocator.allocate().split('-')[1] == '1000'


def test_thousand_allocations_are_distinct():
    allocator = SkuAllocator()
    skus = {allocator.allocate() for _ in range(1000)}
    assert len(skus) == 1000
    assert all(SKU_PATTERN.match(sku) for sku in skus)


def test_fixed_clock_still_varies_suffix():
    allocator = SkuAllocator(clock=lambda: 123456)
    skus = {allocator.allocate() for _ in range(50)}
    assert len(skus) > 1
