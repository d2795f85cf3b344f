"""
Calendar pricing: cheapest round-trip price for a grid of (departure, return) dates.

Every date pair is an independent `max=1` flight-offers query. All of them are
dispatched at once and paced by the shared rate limiter; the scan resolves only
after each query has either produced a price or failed.
"""
import asyncio
import logging
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Tuple, Union

from fareview.schemas.flight_offer_schema import PriceResult
from fareview.services.amadeus_service import AmadeusService
from fareview.services.formatting import format_currency

logger = logging.getLogger(__name__)

DATEPAIR_SEPARATOR = ">"
CALENDAR_WINDOW_DAYS = 3


def _as_date(value: Union[str, date]) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(value, "%Y-%m-%d").date()


def format_datepair(departure_date: date, return_date: date) -> str:
    return f"{departure_date:%Y-%m-%d}{DATEPAIR_SEPARATOR}{return_date:%Y-%m-%d}"


def parse_datepair(datepair: str) -> Tuple[str, str]:
    """Split "2024-06-10>2024-06-17" into its departure and return ISO dates."""
    departure, sep, ret = datepair.partition(DATEPAIR_SEPARATOR)
    if not sep:
        raise ValueError(f"Malformed datepair: {datepair!r}")
    # Validate both halves before spending an API call on them
    return _as_date(departure.strip()).isoformat(), _as_date(ret.strip()).isoformat()


def generate_calendar_datepairs(departure_date: Union[str, date],
                                return_date: Union[str, date],
                                window: int = CALENDAR_WINDOW_DAYS) -> List[str]:
    """Every combination of departure and return shifted by -window..+window days, departure-major."""
    departure = _as_date(departure_date)
    ret = _as_date(return_date)
    offsets = range(-window, window + 1)
    return [
        format_datepair(departure + timedelta(days=i), ret + timedelta(days=j))
        for i in offsets
        for j in offsets
    ]


class DatepairScanner:
    def __init__(self, service: AmadeusService):
        self._service = service

    async def _price_for_datepair(self,
                                  origin: str,
                                  destination: str,
                                  adults: int,
                                  travel_class: str,
                                  datepair: str) -> PriceResult:
        departure_date, return_date = parse_datepair(datepair)
        response = await self._service.search_flight_offers(
            origin=origin,
            destination=destination,
            departure_date=departure_date,
            return_date=return_date,
            adults=adults,
            travel_class=travel_class,
            max_results=1,
        )
        cheapest = response["data"][0]["price"]
        return PriceResult(
            price=float(cheapest["total"]),
            price_formatted=format_currency(cheapest["total"], cheapest["currency"]),
        )

    async def _settle(self, origin, destination, adults, travel_class, datepair) -> PriceResult:
        try:
            return await self._price_for_datepair(origin, destination, adults, travel_class, datepair)
        except Exception as e:
            # One failed pair leaves an empty cell, the rest of the calendar still renders
            logger.warning(f"No price for {origin}-{destination} {datepair}: {e}")
            return PriceResult()

    async def prices_for_datepairs(self,
                                   origin: str,
                                   destination: str,
                                   adults: int,
                                   travel_class: str,
                                   datepairs: Iterable[str]) -> Dict[str, PriceResult]:
        datepairs = list(dict.fromkeys(datepairs))
        results = await asyncio.gather(*(
            self._settle(origin, destination, adults, travel_class, datepair)
            for datepair in datepairs
        ))
        flights = dict(zip(datepairs, results))

        errors = sum(1 for result in results if result.price is None)
        logger.info(f"Request completed with {len(results) - errors} successes and {errors} errors.")
        return flights

    async def calendar_prices(self,
                              origin: str,
                              destination: str,
                              departure_date: Union[str, date],
                              return_date: Union[str, date],
                              adults: int = 1,
                              travel_class: str = "ECONOMY") -> Dict[str, PriceResult]:
        datepairs = generate_calendar_datepairs(departure_date, return_date)
        return await self.prices_for_datepairs(origin, destination, adults, travel_class, datepairs)
