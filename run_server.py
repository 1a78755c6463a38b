#!/usr/bin/env python
"""
Run the API Server

Starts the FastAPI server for directory aggregation.

Usage:
    python run_server.py

The server listens on $HOST:$PORT (default 0.0.0.0:3000).

Endpoints:
    GET  /              - Liveness message
    GET  /api/health    - Health check
    POST /scrape/google - Google Places search
    POST /scrape/fgas   - FGAS directory scrape
    POST /scrape/refcom - REFCOM registry search
"""

import uvicorn

from directory_aggregator.cli import configure_logging
from directory_aggregator.config import API_HOST, API_PORT

configure_logging()
uvicorn.run("directory_aggregator.server:app", host=API_HOST, port=API_PORT, reload=False)
