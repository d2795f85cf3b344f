from datetime import date
from fastapi import APIRouter, Depends, Query
from typing import Dict
import logging

from fareview.dependencies import get_datepair_scanner
from fareview.schemas.flight_offer_schema import DatepairsRequest, PriceResult
from fareview.services.datepair_scanner import DatepairScanner

logger = logging.getLogger(__name__)

router = APIRouter(tags=["calendar"])

@router.get("/calendar-view", response_model=Dict[str, PriceResult], response_model_exclude_none=True)
async def calendar_view(origin: str = Query(..., description="Origin location code"),
                        destination: str = Query(..., description="Destination location code"),
                        departure_date: date = Query(..., alias="departureDate", description="YYYY-MM-DD"),
                        return_date: date = Query(..., alias="returnDate", description="YYYY-MM-DD"),
                        adults: int = Query(1, description="Number of adults"),
                        travel_class: str = Query("ECONOMY", alias="travelClass", description="Travel class"),
                        scanner: DatepairScanner = Depends(get_datepair_scanner)):
    """
    Prices for every departure/return combination within 3 days of the requested dates.
    Pairs without a price map to an empty object.
    """
    return await scanner.calendar_prices(
        origin=origin,
        destination=destination,
        departure_date=departure_date,
        return_date=return_date,
        adults=adults,
        travel_class=travel_class
    )

@router.post("/flights-for-datepairs", response_model=Dict[str, PriceResult], response_model_exclude_none=True)
async def flights_for_datepairs(request: DatepairsRequest,
                                scanner: DatepairScanner = Depends(get_datepair_scanner)):
    """
    Prices for an explicit list of YYYY-MM-DD>YYYY-MM-DD date pairs.
    """
    logger.info(f"Pricing {len(request.datepairs)} datepairs for {request.origin}-{request.destination}")
    return await scanner.prices_for_datepairs(
        origin=request.origin,
        destination=request.destination,
        adults=request.adults,
        travel_class=request.travel_class,
        datepairs=request.datepairs
    )
