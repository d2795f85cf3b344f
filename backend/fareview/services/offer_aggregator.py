"""
Reshapes an Amadeus flight-offers response into outbound-grouped Offers.

Amadeus returns one offer per (outbound, inbound) combination. Offers whose
outbound legs are flown by the same carriers are folded into a single Offer
listing every inbound option, so the client can pick an outbound first and a
return second.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from fareview.schemas.flight_offer_schema import Itinerary, Offer, Segment
from fareview.services.formatting import (
    format_currency,
    format_date,
    format_duration,
    format_stop_duration,
    format_time,
    format_title_case,
)

logger = logging.getLogger(__name__)


def stops_label(segment_count: int) -> str:
    if segment_count <= 1:
        return "Nonstop"
    stops = segment_count - 1
    return f"{stops} stop" + ("s" if stops >= 2 else "")


def outbound_key(itinerary: Itinerary) -> Tuple[int, Tuple[str, ...]]:
    """Segment count plus the set of carriers flying the itinerary. Equal keys mean "same outbound flights"."""
    carriers = {seg.carrier_code + seg.carrier_name for seg in itinerary.segments}
    return (len(itinerary.segments), tuple(sorted(carriers)))


def _cabin_for_segment(raw_offer: Dict[str, Any], segment_id: Optional[str]) -> str:
    traveler_pricings = raw_offer.get("travelerPricings") or []
    if not traveler_pricings:
        return ""
    for fare in traveler_pricings[0].get("fareDetailsBySegment", []):
        if fare.get("segmentId") == segment_id:
            return format_title_case((fare.get("cabin") or "").replace("_", " "))
    return ""


def build_itinerary(raw_itinerary: Dict[str, Any],
                    raw_offer: Dict[str, Any],
                    dictionaries: Dict[str, Any]) -> Itinerary:
    carriers = dictionaries.get("carriers", {})
    aircraft = dictionaries.get("aircraft", {})
    raw_segments = raw_itinerary.get("segments", [])

    segments = []
    for i, raw_segment in enumerate(raw_segments):
        departure = raw_segment["departure"]
        arrival = raw_segment["arrival"]
        departure_at = datetime.fromisoformat(departure["at"])
        arrival_at = datetime.fromisoformat(arrival["at"])

        # Codeshares are displayed under the airline actually flying the leg
        carrier_code = (raw_segment.get("operating") or {}).get("carrierCode") or raw_segment["carrierCode"]
        aircraft_code = (raw_segment.get("aircraft") or {}).get("code")

        stop_duration = None
        if i < len(raw_segments) - 1:
            next_departure_at = datetime.fromisoformat(raw_segments[i + 1]["departure"]["at"])
            stop_duration = format_stop_duration(arrival_at, next_departure_at)

        segments.append(Segment(
            departure_date=format_date(departure_at),
            arrival_date=format_date(arrival_at),
            departure_time=format_time(departure_at),
            arrival_time=format_time(arrival_at),
            duration=format_duration(raw_segment.get("duration")),
            origin=departure["iataCode"],
            destination=arrival["iataCode"],
            carrier_code=carrier_code,
            carrier_name=format_title_case(carriers.get(carrier_code, carrier_code)),
            flight_number=raw_segment.get("number"),
            aircraft=format_title_case(aircraft.get(aircraft_code, aircraft_code or "")),
            cabin_class=_cabin_for_segment(raw_offer, raw_segment.get("id")),
            stop_duration=stop_duration,
        ))

    if not segments:
        raise ValueError("itinerary has no segments")

    first, last = segments[0], segments[-1]
    return Itinerary(
        duration=format_duration(raw_itinerary.get("duration")),
        stops=stops_label(len(segments)),
        stop_count=len(segments) - 1,
        segments=segments,
        departure_airport=first.origin,
        departure_time=first.departure_time,
        departure_date=first.departure_date,
        arrival_airport=last.destination,
        arrival_time=last.arrival_time,
        arrival_date=last.arrival_date,
    )


def build_offers(response: Dict[str, Any]) -> List[Offer]:
    """Group raw offers by outbound, merging their inbound itineraries. First-seen order is kept."""
    dictionaries = response.get("dictionaries") or {}
    offers: List[Offer] = []
    by_outbound: Dict[Tuple[int, Tuple[str, ...]], Offer] = {}

    for raw_offer in response.get("data") or []:
        raw_itineraries = raw_offer.get("itineraries") or []
        if not raw_itineraries:
            continue

        price_data = raw_offer.get("price", {})
        currency = price_data.get("currency", "")
        price = float(price_data.get("total", 0.0))
        price_formatted = format_currency(price, currency)

        outbound = build_itinerary(raw_itineraries[0], raw_offer, dictionaries)
        key = outbound_key(outbound)

        inbound = None
        if len(raw_itineraries) > 1:
            inbound = build_itinerary(raw_itineraries[1], raw_offer, dictionaries)
            inbound.offer_id = raw_offer.get("id")
            inbound.price = price
            inbound.price_formatted = price_formatted

            existing = by_outbound.get(key)
            if existing is not None:
                existing.inbounds.append(inbound)
                continue

        validating = raw_offer.get("validatingAirlineCodes") or [None]
        offer = Offer(
            price=price,
            currency=currency,
            price_from=price_formatted,
            validating_airline=validating[0],
            outbound=outbound,
            inbounds=[inbound] if inbound else [],
        )
        offers.append(offer)
        # One-way offers have no inbound list to merge into
        if inbound is not None:
            by_outbound.setdefault(key, offer)

    logger.info(f"Grouped {len(response.get('data') or [])} upstream offers into {len(offers)} outbound offers")
    return offers
