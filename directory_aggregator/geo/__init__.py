"""
Geographic utilities module.

- geocode.py: Location name to coordinates via the Google Geocoding API
"""

from .geocode import Coordinates, geocode_location
