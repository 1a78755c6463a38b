"""
Parsers module for reshaping source records.

- record.py: NormalizedRecord output schema and Source tags
- normalize.py: Per-source field mapping onto NormalizedRecord
"""

from .record import NormalizedRecord, Source
from .normalize import normalize, join_parts, safe_get, dedupe_key
