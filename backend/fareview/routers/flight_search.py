from fastapi import APIRouter, Depends, Query
from typing import List, Optional
import logging

from fareview.dependencies import get_amadeus_service
from fareview.errors import UpstreamError
from fareview.schemas.flight_offer_schema import Offer
from fareview.services.amadeus_service import AmadeusService
from fareview.services.offer_aggregator import build_offers

logger = logging.getLogger(__name__)

router = APIRouter(tags=["flights"])

@router.get("/get-flight-offers", response_model=List[Offer], response_model_exclude_none=True)
async def get_flight_offers(origin: str = Query(..., description="Origin location code"),
                            destination: str = Query(..., description="Destination location code"),
                            departure_date: str = Query(..., alias="departureDate", description="YYYY-MM-DD"),
                            return_date: Optional[str] = Query(None, alias="returnDate", description="YYYY-MM-DD"),
                            adults: int = Query(1, description="Number of adults"),
                            travel_class: str = Query("ECONOMY", alias="travelClass", description="Travel class"),
                            amadeus_svc: AmadeusService = Depends(get_amadeus_service)):
    """
    Search Amadeus and group the offers by outbound flights, each listing its inbound options.
    """
    response = await amadeus_svc.search_flight_offers(
        origin=origin,
        destination=destination,
        departure_date=departure_date,
        return_date=return_date,
        adults=adults,
        travel_class=travel_class
    )

    try:
        return build_offers(response)
    except (KeyError, IndexError, TypeError, ValueError) as e:
        logger.error(f"Could not reshape Amadeus offers for {origin}-{destination}: {e!r}")
        raise UpstreamError(f"Malformed flight-offers payload: {e!r}")
