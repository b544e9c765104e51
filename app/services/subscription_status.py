# app/services/subscription_status.py
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

ACTIVE = "active"
INACTIVE = "inactive"


def _field(record: Any, *names: str):
    for name in names:
        if isinstance(record, dict):
            if name in record:
                return record[name]
        elif hasattr(record, name):
            return getattr(record, name)
    return None


def _as_utc(value) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, (int, float)):
        # Epoch milliseconds, as stored by the billing webhook
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def resolve_subscription_status(
    records: Iterable[Any], now: Optional[datetime] = None
) -> str:
    """
    Derive a user's subscription label from their billing records.

    A user is ``active`` when any record has status ``"active"`` and an
    end date strictly after ``now``; otherwise ``inactive``. Records can be
    ORM rows, schemas, or plain dicts using either ``end_date`` or
    ``endDate``. Naive datetimes are read as UTC.
    """
    now = _as_utc(now or datetime.now(timezone.utc))

    for record in records or []:
        if _field(record, "status") != ACTIVE:
            continue
        end_date = _as_utc(_field(record, "end_date", "endDate"))
        if end_date is not None and end_date > now:
            return ACTIVE

    return INACTIVE
