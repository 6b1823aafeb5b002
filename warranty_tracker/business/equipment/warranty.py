"""
Warranty Status Evaluator

Pure derivation of a warranty status from a validity date and "now":

    none      no validity date
    expired   valid_until <  now
    expiring  now <= valid_until <= now + window
    valid     valid_until >  now + window
"""

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional, Union

from warranty_tracker.utils.dates import as_naive_utc, utc_now

EXPIRING_WINDOW_DAYS = 30

NONE = 'none'
EXPIRED = 'expired'
EXPIRING = 'expiring'
VALID = 'valid'

STATUSES = (NONE, EXPIRED, EXPIRING, VALID)

SECONDS_PER_DAY = 24 * 60 * 60


@dataclass(frozen=True)
class WarrantyStatus:
    """Result of evaluating one validity date"""
    status: str
    days: Optional[int] = None  # ceil(days from now to the validity date); None for status "none"

    @property
    def label(self) -> str:
        if self.status == NONE:
            return 'No warranty'
        if self.status == EXPIRED:
            return 'Warranty expired'
        if self.status == EXPIRING:
            return f'Expires in {self.days} day' + ('' if self.days == 1 else 's')
        return 'Warranty valid'

    @property
    def is_covered(self) -> bool:
        """Still under warranty (expiring counts as covered)"""
        return self.status in (EXPIRING, VALID)

    def to_dict(self):
        return {'status': self.status, 'days': self.days, 'label': self.label}


def evaluate_warranty(
    valid_until: Optional[Union[date, datetime]],
    now: Optional[datetime] = None,
    window_days: Optional[int] = None,
) -> WarrantyStatus:
    """
    Evaluate the warranty status of a validity date.

    Args:
        valid_until: Warranty validity date; a plain date means midnight of that day
        now: Reference instant (defaults to the current UTC time)
        window_days: Length of the "expiring" window (defaults to 30 days)

    Returns:
        WarrantyStatus with the status and the day count used for display
    """
    if valid_until is None:
        return WarrantyStatus(NONE)

    window = EXPIRING_WINDOW_DAYS if window_days is None else window_days
    reference = as_naive_utc(now) if now is not None else utc_now()
    expires_at = as_naive_utc(valid_until)

    delta = expires_at - reference
    days = math.ceil(delta.total_seconds() / SECONDS_PER_DAY)

    if expires_at < reference:
        return WarrantyStatus(EXPIRED, days)
    if expires_at <= reference + timedelta(days=window):
        return WarrantyStatus(EXPIRING, days)
    return WarrantyStatus(VALID, days)
