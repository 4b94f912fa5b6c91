"""
HL7 FHIR dateTime formatting.

FHIR dateTime values with a time component need second precision, a
four-digit year and a timezone offset written as [+-]HH:MM. strftime's %z
gives [+-]HHMM (or [+-]HHMMSS for historical zones with sub-minute offsets)
and %Y is not zero-padded on every platform, so the string is assembled by hand.

See https://www.hl7.org/fhir/datatypes.html#dateTime
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional


def _format_offset(instant: datetime) -> str:
    # Seconds are dropped; FHIR offsets only go down to minutes.
    total = int(instant.utcoffset().total_seconds())
    sign = "-" if total < 0 else "+"
    hours, minutes = divmod(abs(total) // 60, 60)
    return f"{sign}{hours:02d}:{minutes:02d}"


def format_timestamp(instant: Optional[datetime] = None) -> str:
    """
    Format an instant as a FHIR dateTime: YYYY-MM-DDTHH:MM:SS+HH:MM.

    Args:
        instant: The time to format. Defaults to now. Naive datetimes are
                 interpreted in the process's local timezone.

    Returns:
        The formatted string, with the offset in the local (or given) timezone.

    Example:
        >>> format_timestamp(datetime(2024, 5, 1, 13, 7, 9, tzinfo=timezone.utc))
        '2024-05-01T13:07:09+00:00'
    """
    if instant is None:
        instant = datetime.now()
    if instant.tzinfo is None or instant.utcoffset() is None:
        instant = instant.astimezone()

    return (
        f"{instant.year:04d}-{instant.month:02d}-{instant.day:02d}"
        f"T{instant.hour:02d}:{instant.minute:02d}:{instant.second:02d}"
        f"{_format_offset(instant)}"
    )
