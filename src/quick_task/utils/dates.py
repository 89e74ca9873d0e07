"""
Date helpers.

Dates are opaque strings to the parser and serializer; only the editing
layer stamps new ones.
"""

from datetime import date, datetime
from typing import Optional


def today_iso(now: Optional[datetime] = None) -> str:
    """Return today's (local) date as YYYY-MM-DD."""
    if now is not None:
        return now.date().isoformat()
    return date.today().isoformat()
