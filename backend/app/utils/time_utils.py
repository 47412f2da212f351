# backend/app/utils/time_utils.py

import re
from datetime import date, datetime, timedelta
from typing import Optional

import pytz


MONTHS = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}

DAY_MONTH_RE = re.compile(r"^(\d{1,2})(?:st|nd|rd|th)?\s+([a-zA-Z]+)$")


def today_in(timezone_name: str = "UTC") -> date:
    return datetime.now(pytz.timezone(timezone_name)).date()


def tomorrow_iso(today: date) -> str:
    return (today + timedelta(days=1)).isoformat()


def parse_travel_date(text: str, today: date) -> Optional[str]:
    """
    Accepts formats like:
    - 2025-03-12
    - 12/03/2025
    - today / tomorrow
    - 12 March / 12th March (next occurrence, this year or next)

    Returns an ISO date string, or None when nothing usable was recognised.
    """
    text = (text or "").strip().lower()
    if not text:
        return None

    if text == "today":
        return today.isoformat()
    if text == "tomorrow":
        return tomorrow_iso(today)

    # Format dd/mm/yyyy
    if "/" in text:
        try:
            d, m, y = text.split("/")
            return date(int(y), int(m), int(d)).isoformat()
        except ValueError:
            return None

    # Already ISO
    if len(text) == 10 and text[4] == "-":
        try:
            return date.fromisoformat(text).isoformat()
        except ValueError:
            return None

    match = DAY_MONTH_RE.match(text)
    if match:
        month = MONTHS.get(match.group(2)[:3])
        if not month:
            return None
        try:
            candidate = date(today.year, month, int(match.group(1)))
            if candidate < today:
                candidate = date(today.year + 1, month, int(match.group(1)))
        except ValueError:
            return None
        return candidate.isoformat()

    return None
