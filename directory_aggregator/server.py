"""
FastAPI Server for the Directory Aggregator

Provides API endpoints for:
- Searching Google Places by keyword and location
- Scraping the FGAS company directory
- Querying the REFCOM registry

Every endpoint answers with NormalizedRecord rows.
"""

import logging
from typing import Annotated, Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, BeforeValidator, Field

from .config import API_HOST, API_PORT, DEFAULT_NUMBER_OF_RECORDS
from .exceptions import DirectoryAggregatorError, InvalidRequest
from .extraction import scrape_directory, search_places, search_registry

logger = logging.getLogger(__name__)


# FastAPI app
app = FastAPI(title="Directory Aggregator API")

# Enable CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request Models
def scalar_text(value: Any) -> Any:
    """JSON numbers (and booleans) are accepted as text, e.g. a numeric certificate code."""
    if isinstance(value, (int, float)):
        return str(value)
    return value


Text = Annotated[Optional[str], BeforeValidator(scalar_text)]


class GoogleSearchRequest(BaseModel):
    keyword: Text = None
    location: Text = None


class FgasSearchRequest(BaseModel):
    companyName: Text = ""
    city: Text = ""
    numberOfRecords: int = Field(DEFAULT_NUMBER_OF_RECORDS, ge=0)


class RefcomSearchRequest(BaseModel):
    companyName: Text = ""
    postcode: Text = ""
    registrationNumber: Text = ""


def serialize(result: Dict[str, Any]) -> Dict[str, Any]:
    """Convert the records in a {source, normalized} result to dicts."""
    return {
        "source": result["source"],
        "normalized": [record.to_dict() for record in result["normalized"]],
    }


# Error handlers
@app.exception_handler(InvalidRequest)
async def invalid_request_handler(request: Request, exc: InvalidRequest):
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    messages = [f"{'.'.join(str(p) for p in err['loc'][1:])}: {err['msg']}" for err in exc.errors()]
    return JSONResponse(status_code=400, content={"error": "; ".join(messages) or "Invalid request body."})


@app.exception_handler(DirectoryAggregatorError)
async def upstream_error_handler(request: Request, exc: DirectoryAggregatorError):
    logger.error("%s %s failed: %s", request.method, request.url.path, exc, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal Server Error"})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal Server Error"})


# API Endpoints
@app.get("/", response_class=PlainTextResponse)
async def index():
    """Liveness message."""
    return "Scraper API is running."


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok"}


@app.post("/scrape/google")
async def scrape_google(request: GoogleSearchRequest) -> List[Dict[str, Any]]:
    """Search Google Places. Returns a bare array of records."""
    records = await search_places(request.keyword, request.location)
    return [record.to_dict() for record in records]


@app.post("/scrape/fgas")
async def scrape_fgas(request: FgasSearchRequest):
    """Scrape the FGAS company directory."""
    result = await scrape_directory(
        company_name=request.companyName or "",
        city=request.city or "",
        number_of_records=request.numberOfRecords,
    )
    return serialize(result)


@app.post("/scrape/refcom")
async def scrape_refcom(request: RefcomSearchRequest):
    """Query the REFCOM registry."""
    result = await search_registry(
        company_name=request.companyName or "",
        postcode=request.postcode or "",
        registration_number=request.registrationNumber or "",
    )
    return serialize(result)


def run_server(host: str = API_HOST, port: int = API_PORT):
    """Run the API server."""
    import uvicorn
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run_server()
