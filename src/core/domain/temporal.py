"""Date arguments accepted by the request builder.

The API wants epoch seconds. Callers hold either a calendar day or a precise
instant, so the two cases are modelled as a small sum type and resolved once
at the call site (`as_temporal`), instead of sniffing types deep inside the
builder.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DateOnly:
    """A calendar day, sent as the start of that day in the local zone."""

    value: date

    def epoch_seconds(self) -> int:
        return int(datetime.combine(self.value, time.min).timestamp())


@dataclass(frozen=True)
class DateTime:
    """A precise instant; naive values are interpreted in the local zone."""

    value: datetime

    def epoch_seconds(self) -> int:
        return int(self.value.timestamp())


Temporal = Union[DateOnly, DateTime]


def as_temporal(value: object) -> Temporal | None:
    """Resolve a caller value into the sum type, or `None` if unsupported."""

    if isinstance(value, (DateOnly, DateTime)):
        return value
    # datetime is a subclass of date: check it first.
    if isinstance(value, datetime):
        return DateTime(value)
    if isinstance(value, date):
        return DateOnly(value)
    return None


def to_epoch_seconds(value: object, *, field: str = "date") -> int:
    """Epoch seconds for `value`; unsupported input is logged and becomes 0."""

    temporal = as_temporal(value)
    if temporal is None:
        logger.error("Unsupported temporal value for %r: %r (%s); using 0", field, value, type(value).__name__)
        return 0
    return temporal.epoch_seconds()
