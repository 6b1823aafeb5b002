"""
Tests for the warranty status evaluator
"""
from datetime import date, datetime, timedelta, timezone

import pytest

from warranty_tracker.business.equipment.warranty import (
    EXPIRED,
    EXPIRING,
    NONE,
    VALID,
    WarrantyStatus,
    evaluate_warranty,
)

NOW = datetime(2024, 1, 1, 12, 0, 0)


def test_missing_date_has_no_warranty():
    result = evaluate_warranty(None, NOW)
    assert result == WarrantyStatus(NONE)
    assert result.days is None
    assert result.label == 'No warranty'
    assert not result.is_covered


@pytest.mark.parametrize('valid_until, expected_status, expected_days', [
    (date(2023, 12, 1), EXPIRED, -31),
    (datetime(2024, 1, 1, 11, 59), EXPIRED, 0),
    (datetime(2024, 1, 1, 12, 0), EXPIRING, 0),
    (date(2024, 1, 10), EXPIRING, 9),
    (NOW + timedelta(days=30), EXPIRING, 30),
    (NOW + timedelta(days=30, seconds=1), VALID, 31),
    (date(2024, 6, 1), VALID, 152),
])
def test_status_and_days(valid_until, expected_status, expected_days):
    result = evaluate_warranty(valid_until, NOW)
    assert result.status == expected_status
    assert result.days == expected_days


def test_plain_date_means_midnight():
    midnight = datetime(2024, 2, 1)
    assert evaluate_warranty(date(2024, 2, 1), midnight).status == EXPIRING
    assert evaluate_warranty(date(2024, 2, 1), midnight + timedelta(minutes=1)).status == EXPIRED


def test_window_boundaries_hold_for_many_instants():
    valid_until = datetime(2024, 3, 15, 8, 30)
    for hours in range(-24 * 40, 24 * 5, 7):
        now = valid_until + timedelta(hours=hours)
        status = evaluate_warranty(valid_until, now).status
        if valid_until < now:
            assert status == EXPIRED
        elif valid_until <= now + timedelta(days=30):
            assert status == EXPIRING
        else:
            assert status == VALID


def test_custom_window():
    assert evaluate_warranty(date(2024, 1, 20), NOW, window_days=7).status == VALID
    assert evaluate_warranty(date(2024, 1, 5), NOW, window_days=7).status == EXPIRING


def test_aware_now_is_compared_in_utc():
    aware = datetime(2024, 1, 1, 9, 0, tzinfo=timezone(timedelta(hours=-3)))
    # 09:00 at UTC-3 is 12:00 UTC
    assert evaluate_warranty(datetime(2024, 1, 1, 11, 0), aware).status == EXPIRED


def test_labels():
    assert evaluate_warranty(date(2023, 1, 1), NOW).label == 'Warranty expired'
    assert evaluate_warranty(NOW + timedelta(days=1), NOW).label == 'Expires in 1 day'
    assert evaluate_warranty(NOW + timedelta(days=5), NOW).label == 'Expires in 5 days'
    assert evaluate_warranty(date(2025, 1, 1), NOW).label == 'Warranty valid'


def test_to_dict():
    assert evaluate_warranty(date(2024, 1, 10), NOW).to_dict() == {
        'status': EXPIRING,
        'days': 9,
        'label': 'Expires in 9 days',
    }
