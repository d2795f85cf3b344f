import asyncio
import httpx
from datetime import datetime, timedelta
from typing import Dict, Any, List, Optional
import logging

from fareview.config import settings
from fareview.errors import UpstreamError
from fareview.services.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

LOCATION_SUBTYPES = "AIRPORT,CITY"

class AmadeusService:
    def __init__(self,
                 limiter: RateLimiter,
                 base_url: Optional[str] = None,
                 client_id: Optional[str] = None,
                 client_secret: Optional[str] = None,
                 timeout: Optional[float] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.limiter = limiter
        self.base_url = (base_url or settings.amadeus_host).rstrip("/")
        self.client_id = client_id or settings.amadeus_client_id
        self.client_secret = client_secret or settings.amadeus_client_secret
        self.timeout = timeout or settings.amadeus_timeout
        self._transport = transport

        self._access_token: Optional[str] = None
        self._token_expiry: Optional[datetime] = None
        self._token_lock = asyncio.Lock()

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=timeout, transport=self._transport)

    def _token_valid(self) -> bool:
        return bool(self._access_token and self._token_expiry
                    and datetime.now() < (self._token_expiry - timedelta(seconds=60)))

    async def _get_token(self) -> str:
        """
        Retrieves the OAuth 2.0 access token from Amadeus.
        Caches it locally and returns it. Automatically refreshes 60 seconds prior to expiry.
        Concurrent callers wait on the same refresh instead of each requesting a token.
        """
        if self._token_valid():
            return self._access_token

        async with self._token_lock:
            # Another caller may have refreshed while we waited
            if self._token_valid():
                return self._access_token

            auth_url = f"{self.base_url}/v1/security/oauth2/token"
            data = {
                "grant_type": "client_credentials",
                "client_id": self.client_id,
                "client_secret": self.client_secret
            }

            try:
                async with self._client(10.0) as client:
                    response = await client.post(auth_url, data=data)
                    response.raise_for_status()

                    auth_data = response.json()
                    self._access_token = auth_data.get("access_token")
                    expires_in = auth_data.get("expires_in", 1799)

                    # Set new expiry using absolute time
                    self._token_expiry = datetime.now() + timedelta(seconds=expires_in)
                    return self._access_token

            except httpx.HTTPStatusError as e:
                logger.error(f"Amadeus Authentication failed with status code: {e.response.status_code}")
                raise UpstreamError("Upstream authentication failed.",
                                    status_code=e.response.status_code,
                                    payload=_error_payload(e.response))
            except (httpx.RequestError, ValueError) as e:
                logger.error(f"Failed to fetch Amadeus Token: {str(e)}")
                raise UpstreamError(f"Could not authenticate with Amadeus: {e}")

    async def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        token = await self._get_token()
        headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.amadeus+json"
        }
        url = f"{self.base_url}{path}"

        try:
            async with self._client(self.timeout) as client:
                response = await client.get(url, headers=headers, params=params)
                response.raise_for_status()
                data = response.json()
                if not isinstance(data, dict):
                    logger.error(f"Amadeus returned a non-object payload for {path}")
                    raise UpstreamError("Amadeus returned a malformed payload.",
                                        status_code=response.status_code,
                                        payload={"errors": [{"detail": "Expected a JSON object"}], "body": data})
                return data

        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 401:
                # Force token refresh next time around
                self._access_token = None
                self._token_expiry = None
            elif status == 429:
                logger.warning("Amadeus Rate Limit Exceeded")
            logger.error(f"Amadeus request {path} failed: status {status}")
            raise UpstreamError(f"Amadeus request failed with status {status}",
                                status_code=status,
                                payload=_error_payload(e.response))
        except httpx.RequestError as e:
            logger.error(f"Network error querying Amadeus: {e}")
            raise UpstreamError(f"Amadeus is unreachable: {e}")
        except ValueError as e:
            logger.error(f"Amadeus returned a non-JSON payload for {path}: {e}")
            raise UpstreamError("Amadeus returned a malformed payload.", status_code=response.status_code)

    async def search_locations(self, keyword: str) -> List[Dict[str, Any]]:
        """Airports and cities matching keyword, as raw Amadeus location records."""
        params = {
            "subType": LOCATION_SUBTYPES,
            "keyword": keyword,
        }
        data = await self.limiter.schedule(self._get, "/v1/reference-data/locations", params)
        return data.get("data", [])

    async def search_flight_offers(self,
                                   origin: str,
                                   destination: str,
                                   departure_date: str,
                                   return_date: Optional[str] = None,
                                   adults: int = 1,
                                   travel_class: str = "ECONOMY",
                                   max_results: Optional[int] = None) -> Dict[str, Any]:
        """
        Queries the Amadeus Flight Offers Search API.
        Returns the raw response: offers under `data`, carrier and aircraft names under `dictionaries`.
        """
        params = {
            "originLocationCode": origin,
            "destinationLocationCode": destination,
            "departureDate": departure_date,
            "adults": adults,
            "travelClass": travel_class,
        }

        if return_date:
            params["returnDate"] = return_date
        if max_results:
            params["max"] = max_results

        return await self.limiter.schedule(self._get, "/v2/shopping/flight-offers", params)


def _error_payload(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return {"errors": [{"status": response.status_code, "detail": response.text}]}
