import os

# Settings are read at import time and refuse to load without credentials
os.environ.setdefault("AMADEUS_CLIENT_ID", "test-client-id")
os.environ.setdefault("AMADEUS_CLIENT_SECRET", "test-client-secret")
os.environ.setdefault("AMADEUS_ENV", "test")

import pytest


DICTIONARIES = {
    "carriers": {
        "AF": "AIR FRANCE",
        "KL": "KLM ROYAL DUTCH AIRLINES",
        "DL": "DELTA AIR LINES",
        "BA": "BRITISH AIRWAYS",
    },
    "aircraft": {
        "320": "AIRBUS A320",
        "333": "AIRBUS A330-300",
        "77W": "BOEING 777-300ER",
    },
}


def make_segment(seg_id, origin, destination, departure_at, arrival_at, carrier,
                 number="1000", aircraft="320", duration="PT2H", operating=None):
    segment = {
        "id": seg_id,
        "departure": {"iataCode": origin, "at": departure_at},
        "arrival": {"iataCode": destination, "at": arrival_at},
        "carrierCode": carrier,
        "number": number,
        "aircraft": {"code": aircraft},
        "duration": duration,
    }
    if operating:
        segment["operating"] = {"carrierCode": operating}
    return segment


def make_offer(offer_id, outbound, inbound=None, total="250.00", currency="EUR",
               validating="AF", cabin="ECONOMY"):
    itineraries = [{"duration": "PT8H30M", "segments": outbound}]
    if inbound is not None:
        itineraries.append({"duration": "PT9H5M", "segments": inbound})
    segments = [seg for itinerary in itineraries for seg in itinerary["segments"]]
    return {
        "type": "flight-offer",
        "id": offer_id,
        "itineraries": itineraries,
        "price": {"currency": currency, "total": total, "grandTotal": total},
        "validatingAirlineCodes": [validating],
        "travelerPricings": [{
            "travelerId": "1",
            "fareDetailsBySegment": [
                {"segmentId": seg["id"], "cabin": cabin} for seg in segments
            ],
        }],
    }


def make_response(*offers):
    return {"meta": {"count": len(offers)}, "data": list(offers), "dictionaries": DICTIONARIES}


def paris_new_york_outbound(carrier="AF", prefix="o"):
    return [
        make_segment(f"{prefix}1", "CDG", "AMS", "2024-06-10T07:00:00", "2024-06-10T08:25:00",
                     carrier, number="1240", duration="PT1H25M"),
        make_segment(f"{prefix}2", "AMS", "JFK", "2024-06-10T10:00:00", "2024-06-10T12:30:00",
                     "KL", number="641", aircraft="77W", duration="PT8H30M"),
    ]


def new_york_paris_inbound(departure_at="2024-06-17T18:00:00", arrival_at="2024-06-18T07:20:00",
                           carrier="AF", prefix="i"):
    return [
        make_segment(f"{prefix}1", "JFK", "CDG", departure_at, arrival_at,
                     carrier, number="7", aircraft="333", duration="PT7H20M"),
    ]


@pytest.fixture
def round_trip_response():
    """Two offers sharing the AF/KL outbound, one offer on a DL outbound."""
    return make_response(
        make_offer("1", paris_new_york_outbound(), new_york_paris_inbound(), total="512.30"),
        make_offer("2", paris_new_york_outbound(), new_york_paris_inbound("2024-06-17T22:15:00", "2024-06-18T11:35:00"),
                   total="540.00"),
        make_offer("3", paris_new_york_outbound(carrier="DL"), new_york_paris_inbound(carrier="DL"),
                   total="498.10", validating="DL"),
    )
