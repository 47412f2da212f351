# backend/app/models/result_models.py

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter


# ----------------------------------------------------------
# TYPED RESULT RECORDS
# ----------------------------------------------------------
class FlightResult(BaseModel):
    airline: str
    flight_number: str
    origin: str
    destination: str
    departure: Optional[str] = None
    price: str                       # "USD 245.30"
    duration: Optional[str] = None   # "5h30m"
    stops: int = 0


class HotelResult(BaseModel):
    name: str
    location: Optional[str] = None
    price_per_night: Optional[str] = None
    rating: Optional[float] = Field(default=None, ge=0, le=5)
    amenities: List[str] = Field(default_factory=list)


# ----------------------------------------------------------
# MESSAGE METADATA (tagged variant)
# ----------------------------------------------------------
class FlightResults(BaseModel):
    kind: Literal["flight"] = "flight"
    results: List[FlightResult]


class HotelResults(BaseModel):
    kind: Literal["hotel"] = "hotel"
    results: List[HotelResult]


ResultMetadata = Annotated[Union[FlightResults, HotelResults], Field(discriminator="kind")]

result_metadata_adapter = TypeAdapter(ResultMetadata)
