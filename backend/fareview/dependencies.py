from functools import lru_cache

from fastapi import Depends

from fareview.config import settings
from fareview.services.amadeus_service import AmadeusService
from fareview.services.datepair_scanner import DatepairScanner
from fareview.services.rate_limiter import RateLimiter, build_rate_limiter

# One limiter and one service per process: the limiter's accounting and the
# service's OAuth token must be shared by every request.

@lru_cache()
def get_rate_limiter() -> RateLimiter:
    return build_rate_limiter(settings.amadeus_env)

@lru_cache()
def get_amadeus_service() -> AmadeusService:
    return AmadeusService(get_rate_limiter())

def get_datepair_scanner(service: AmadeusService = Depends(get_amadeus_service)) -> DatepairScanner:
    return DatepairScanner(service)
