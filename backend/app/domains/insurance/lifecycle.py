"""
Insurance policy lifecycle rules.

Pure functions over plain values: no session, no clock. Callers pass `now`
explicitly so every rule can be evaluated (and tested) at a fixed instant.

Lifecycle status, evaluated on every write:

    days_until_expiry < 0                       -> expired
    days_until_expiry <= notify_before_days     -> expiring
    otherwise, unless currently cancelled       -> active
    currently cancelled                         -> cancelled

Verification status is a separate sub-state (pending, verified, rejected,
requires_update) that only the explicit verify / reject / request-update
actions move.
"""
import math
from datetime import datetime, timedelta, timezone
from typing import Protocol

from app.domains.insurance.models import DEFAULT_NOTIFY_BEFORE_DAYS, PolicyStatus

SECONDS_PER_DAY = timedelta(days=1).total_seconds()

REMINDER_STATUSES = frozenset({PolicyStatus.EXPIRING.value, PolicyStatus.EXPIRED.value})


class MissingExpiryDate(ValueError):
    """Raised when status is derived for a policy without an expiry date."""
    pass


class LifecycleFields(Protocol):
    expiry_date: datetime | None
    notify_before_days: int | None
    status: str | None
    last_notification_sent: datetime | None


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC; some drivers drop the offset on read."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def days_until_expiry(now: datetime, expiry_date: datetime) -> int:
    """Whole days until expiry, rounded up; negative once the expiry has passed."""
    delta = as_utc(expiry_date) - as_utc(now)
    return math.ceil(delta.total_seconds() / SECONDS_PER_DAY)


def derive_status(
    now: datetime,
    expiry_date: datetime | None,
    notify_before_days: int | None,
    current_status: str | None,
) -> PolicyStatus:
    if expiry_date is None:
        raise MissingExpiryDate("Expiry date is required to determine policy status")
    window = DEFAULT_NOTIFY_BEFORE_DAYS if notify_before_days is None else notify_before_days

    days = days_until_expiry(now, expiry_date)
    if days < 0:
        return PolicyStatus.EXPIRED
    if days <= window:
        return PolicyStatus.EXPIRING
    if current_status != PolicyStatus.CANCELLED.value:
        return PolicyStatus.ACTIVE
    return PolicyStatus.CANCELLED


def derive_policy_status(now: datetime, policy: LifecycleFields) -> PolicyStatus:
    return derive_status(now, policy.expiry_date, policy.notify_before_days, policy.status)


def start_of_month(now: datetime) -> datetime:
    return as_utc(now).replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def is_due_for_reminder(now: datetime, policy: LifecycleFields) -> bool:
    """
    Expiring or expired, and no reminder sent yet this calendar month.

    A policy without an expiry date is never due.
    """
    if policy.expiry_date is None:
        return False
    if derive_policy_status(now, policy).value not in REMINDER_STATUSES:
        return False
    if policy.last_notification_sent is None:
        return True
    return as_utc(policy.last_notification_sent) < start_of_month(now)
