from contextlib import asynccontextmanager
import os
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from fareview.config import settings
from fareview.errors import UpstreamError
import logging

# Configure basic logging
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Server started successfully. Environment: {settings.amadeus_env}. Listening on port {settings.port}")
    yield

app = FastAPI(
    title=settings.app_name,
    description="Amadeus flight search, grouped offers and calendar pricing",
    version="1.0.0",
    docs_url="/api-docs",
    lifespan=lifespan
)

# CORS setup, any origin unless an allow-list is configured
origins = settings.allowed_origins or ["*"]

logger.info(f"CORS origins: {origins}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed = time.perf_counter() - started
    client = request.client.host if request.client else "-"
    logger.info(f"Request from {client} completed in {elapsed:.2f}s. {request.method} {request.url.path} -> {response.status_code}")
    return response

@app.exception_handler(UpstreamError)
async def upstream_error_handler(request: Request, exc: UpstreamError):
    # The raw Amadeus error body is passed through so the client can show its detail
    logger.error(f"Upstream failure on {request.url.path}: {exc} (status {exc.status_code})")
    return JSONResponse(status_code=500, content=exc.payload)

from fareview.routers import calendar, flight_search, locations
app.include_router(locations.router)
app.include_router(flight_search.router)
app.include_router(calendar.router)

@app.get("/health")
def health_check():
    """
    Basic health check endpoint to verify service is running.
    """
    return {"status": "ok", "environment": settings.amadeus_env}

# Mounted last so the API routes above take precedence
if settings.static_dir and os.path.isdir(settings.static_dir):
    app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")

def run():
    import uvicorn
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())

if __name__ == "__main__":
    run()
