"""
Extraction module for collecting directory data.

- places.py: Google geocode + Places search and details
- registry.py: REFCOM public registry queries
- directory.py: FGAS directory scraping with headless Chromium
"""

from .places import search_places, text_search, fetch_place_details
from .registry import search_registry
from .directory import scrape_directory, FgasDirectoryScraper, ResultAccumulator, collect_pages
