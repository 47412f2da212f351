# backend/app/services/flight_service.py

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import requests
from pydantic import BaseModel, Field, ValidationError

from app.core.errors import AuthError, ParseError, UpstreamError
from app.core.logger import logger
from app.models.agent_models import DispatchConfig
from app.models.result_models import FlightResult


MAX_OFFERS = 5


@dataclass
class ProviderToken:
    """Bearer credential from the flight provider. Lives for one dispatch only."""

    access_token: str
    expires_at: datetime
    token_type: str = "Bearer"

    def is_expired(self, buffer_seconds: int = 30) -> bool:
        threshold = datetime.now(timezone.utc) + timedelta(seconds=buffer_seconds)
        return self.expires_at <= threshold


# -------------------------------------------------------------
# PROVIDER OFFER (only the fields we read)
# -------------------------------------------------------------
class _Endpoint(BaseModel):
    iataCode: str
    at: Optional[str] = None


class _Segment(BaseModel):
    departure: _Endpoint
    arrival: _Endpoint
    carrierCode: str
    number: str


class _Itinerary(BaseModel):
    duration: str = ""
    segments: List[_Segment] = Field(min_length=1)


class _Price(BaseModel):
    total: str
    currency: str


class FlightOffer(BaseModel):
    id: str
    price: _Price
    itineraries: List[_Itinerary] = Field(min_length=1)

    @property
    def first_segment(self) -> _Segment:
        return self.itineraries[0].segments[0]

    @property
    def stops(self) -> int:
        return len(self.itineraries[0].segments) - 1

    @property
    def price_token(self) -> str:
        return f"{self.price.currency} {self.price.total}"

    @property
    def duration_text(self) -> str:
        # ISO-8601 "PT5H30M" -> "5h30m"
        return self.itineraries[0].duration.replace("PT", "").lower()

    def to_result(self) -> FlightResult:
        segments = self.itineraries[0].segments
        return FlightResult(
            airline=self.first_segment.carrierCode,
            flight_number=f"{self.first_segment.carrierCode} {self.first_segment.number}",
            origin=segments[0].departure.iataCode,
            destination=segments[-1].arrival.iataCode,
            departure=segments[0].departure.at,
            price=self.price_token,
            duration=self.duration_text or None,
            stops=self.stops,
        )

    def summary(self) -> str:
        stops = "Direct" if self.stops == 0 else f"{self.stops} stop(s)"
        segment = self.first_segment
        return (
            f"**{segment.carrierCode} {segment.number}**\n"
            f"- **{self.price_token}** | {self.duration_text} | {stops}"
        )


class FlightService:
    """
    Flight-offer lookup against the Amadeus self-service API.

    authenticate() exchanges client credentials for a ProviderToken;
    search_offers() returns up to MAX_OFFERS offers in provider ranking.
    Every failure is raised (AuthError / UpstreamError / ParseError); the
    flight agent decides to degrade, this class never does.
    """

    def __init__(self, config: DispatchConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.base_url = config.amadeus_base_url.rstrip("/")
        self.timeout = config.flight_timeout_seconds
        self.session = session or requests.Session()
        self.token: Optional[ProviderToken] = None

    # ---------------------------------------------------------
    # CREDENTIAL EXCHANGE
    # ---------------------------------------------------------
    def authenticate(self) -> ProviderToken:
        if not self.config.amadeus_api_key or not self.config.amadeus_api_secret:
            raise AuthError("Amadeus credentials not configured")

        try:
            response = self.session.post(
                f"{self.base_url}/v1/security/oauth2/token",
                data={
                    "grant_type": "client_credentials",
                    "client_id": self.config.amadeus_api_key,
                    "client_secret": self.config.amadeus_api_secret,
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise AuthError(f"token request failed: {e}") from e

        if not response.ok:
            raise AuthError("Failed to get Amadeus access token", response.status_code)

        try:
            data = response.json()
            self.token = ProviderToken(
                access_token=data["access_token"],
                expires_at=datetime.now(timezone.utc) + timedelta(seconds=int(data.get("expires_in", 0))),
                token_type=data.get("token_type", "Bearer"),
            )
        except (ValueError, KeyError, TypeError) as e:
            raise AuthError("malformed token response") from e

        return self.token

    # ---------------------------------------------------------
    # OFFER SEARCH
    # ---------------------------------------------------------
    def search_offers(self, origin: str, destination: str, date: str, adults: int = 1) -> List[FlightOffer]:
        if self.token is None or self.token.is_expired():
            self.authenticate()

        params: Dict[str, Any] = {
            "originLocationCode": origin,
            "destinationLocationCode": destination,
            "departureDate": date,
            "adults": adults,
            "max": MAX_OFFERS,
        }

        logger.info(f"Searching Amadeus: {origin} -> {destination} on {date}")

        try:
            response = self.session.get(
                f"{self.base_url}/v2/shopping/flight-offers",
                params=params,
                headers={"Authorization": f"Bearer {self.token.access_token}"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise UpstreamError("flight", f"search request failed: {e}") from e

        if not response.ok:
            raise UpstreamError("flight", "Failed to search flights", response.status_code)

        try:
            raw = response.json()
            return [FlightOffer.model_validate(item) for item in (raw.get("data") or [])[:MAX_OFFERS]]
        except (ValueError, AttributeError, ValidationError) as e:
            raise ParseError(f"unparseable flight offers: {e}") from e
