from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import List, Optional

class CamelModel(BaseModel):
    # JSON keys are camelCase to match what the frontend already consumes
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class LocationSuggestion(CamelModel):
    iata_code: Optional[str] = None
    name: str
    city_name: str

class Segment(CamelModel):
    departure_date: str
    arrival_date: str
    departure_time: str
    arrival_time: str
    duration: str
    origin: str
    destination: str
    carrier_code: str
    carrier_name: str
    flight_number: Optional[str] = None
    aircraft: str = ""
    cabin_class: str = Field("", alias="class")
    stop_duration: Optional[str] = None

class Itinerary(CamelModel):
    duration: str
    stops: str
    stop_count: int
    segments: List[Segment]
    departure_airport: str
    departure_time: str
    departure_date: str
    arrival_airport: str
    arrival_time: str
    arrival_date: str

    # Set on inbound itineraries, each keeps the price of the offer it came from
    offer_id: Optional[str] = None
    price: Optional[float] = None
    price_formatted: Optional[str] = None

class Offer(CamelModel):
    price: float
    currency: str
    price_from: str
    validating_airline: Optional[str] = None
    outbound: Itinerary
    inbounds: List[Itinerary] = Field(default_factory=list)

class PriceResult(CamelModel):
    """Cheapest price for one date pair. Both fields are unset when that pair's lookup failed."""
    price: Optional[float] = None
    price_formatted: Optional[str] = None

class DatepairsRequest(CamelModel):
    origin: str = Field(..., min_length=3, max_length=3, description="IATA Airport Code")
    destination: str = Field(..., min_length=3, max_length=3, description="IATA Airport Code")
    adults: int = Field(1, ge=1, le=9)
    travel_class: str = Field("ECONOMY", description="ECONOMY, PREMIUM_ECONOMY, BUSINESS or FIRST")
    datepairs: List[str] = Field(..., description="YYYY-MM-DD>YYYY-MM-DD pairs")

    @field_validator("origin", "destination", "travel_class")
    def upper(cls, v):
        return v.strip().upper()
