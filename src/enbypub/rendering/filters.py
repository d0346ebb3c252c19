"""Custom Jinja2 filters for site templates."""

from datetime import UTC, datetime
from email.utils import format_datetime as _format_rfc2822


def format_datetime(value: datetime, format_str: str = "%Y-%m-%d %H:%M:%S") -> str:
    """Format datetime object.

    Args:
        value: Datetime to format
        format_str: strftime format string

    Returns:
        Formatted datetime string

    """
    if not isinstance(value, datetime):
        return str(value)
    return value.strftime(format_str)


def isoformat(value: datetime) -> str:
    """Format datetime as ISO 8601 string."""
    if not isinstance(value, datetime):
        return str(value)
    return value.isoformat()


def rfc1123(value: datetime) -> str:
    """Format datetime the way RSS ``pubDate`` expects, e.g. ``Tue, 31 Aug 1993 23:59:59 GMT``.

    Naive datetimes are taken to be UTC.
    """
    if not isinstance(value, datetime):
        return str(value)
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return _format_rfc2822(value.astimezone(UTC), usegmt=True)
