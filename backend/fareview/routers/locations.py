from fastapi import APIRouter, Depends, Query
from typing import List
import logging

from fareview.dependencies import get_amadeus_service
from fareview.schemas.flight_offer_schema import LocationSuggestion
from fareview.services.amadeus_service import AmadeusService
from fareview.services.formatting import format_title_case

logger = logging.getLogger(__name__)

router = APIRouter(tags=["locations"])

@router.get("/search-suggestions", response_model=List[LocationSuggestion])
async def search_suggestions(keyword: str = Query(..., description="Keyword to search for"),
                             amadeus_svc: AmadeusService = Depends(get_amadeus_service)):
    """
    Airports and cities matching the keyword, with display-cased names.
    """
    locations = await amadeus_svc.search_locations(keyword)
    return [
        LocationSuggestion(
            iata_code=entry.get("iataCode"),
            name=format_title_case(entry.get("name")),
            city_name=format_title_case((entry.get("address") or {}).get("cityName")),
        )
        for entry in locations
    ]
