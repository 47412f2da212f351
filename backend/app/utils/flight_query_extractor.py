# backend/app/utils/flight_query_extractor.py

import re
from datetime import date
from typing import Optional

from pydantic import BaseModel

from app.utils.time_utils import parse_travel_date, tomorrow_iso


# "from X to Y (on|for) DATE" -- best effort, not a validated location lookup
ROUTE_RE = re.compile(
    r"\bfrom\s+(?P<origin>[a-zA-Z\s]+?)\s+to\s+(?P<destination>[a-zA-Z\s]+?)"
    r"(?=\s+(?:on|for)\b|[^a-zA-Z\s]|$)",
    re.IGNORECASE,
)
DATE_RE = re.compile(
    r"\b(?:on|for)\s+([0-9]{1,2}(?:st|nd|rd|th)?\s+[a-zA-Z]+|[0-9]{4}-[0-9]{2}-[0-9]{2}"
    r"|[0-9]{1,2}/[0-9]{1,2}/[0-9]{4}|tomorrow|today)",
    re.IGNORECASE,
)


class FlightQuery(BaseModel):
    origin: str
    destination: str
    date: str
    date_recovered: bool = False
    adults: int = 1


def location_code(name: str) -> str:
    """
    Stand-in for a location code: first three characters, upper-cased.
    Multi-word or unknown names give an arbitrary code; callers must not
    treat it as resolved.
    """
    return name.strip().upper()[:3]


def extract_flight_query(message: str, today: date) -> Optional[FlightQuery]:
    """Origin/destination/date from free text, or None when no route is found."""
    route_match = ROUTE_RE.search(message or "")
    if not route_match:
        return None

    origin = location_code(route_match.group("origin"))
    destination = location_code(route_match.group("destination"))
    if not origin or not destination:
        return None

    search_date = None
    date_match = DATE_RE.search(message)
    if date_match:
        search_date = parse_travel_date(date_match.group(1), today)

    return FlightQuery(
        origin=origin,
        destination=destination,
        date=search_date or tomorrow_iso(today),
        date_recovered=search_date is not None,
    )
