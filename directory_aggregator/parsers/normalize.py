"""
Record Normalizer

Maps a source-specific record onto NormalizedRecord.

Each source has a static table of (attribute, extractor) pairs. Extractors
read the raw mapping leniently: absent, None or empty values become "",
so a malformed record still yields a complete NormalizedRecord.

Source keys:
    google  Places text-search stub merged with place details
            (name, formatted_address, formatted_phone_number, types, plus_code)
    refcom  REFCOM PublicCompany entry
            (companyName, telephoneNo, email, addressLine1-3, town, county, postcode, fGas, fGasCode)
    fgas    FGAS directory entry
            (Company, Telephone, Address_1-4, City, Zip_Code, FGasCode)
"""

import json
import logging
from typing import Any, Callable, Dict, List, Mapping, Tuple, Union

from .record import NormalizedRecord, Source

logger = logging.getLogger(__name__)

FGAS_REGISTERED = "FGAS Registered"
ADDRESS_SEPARATOR = ", "

Extractor = Callable[[Mapping], Any]


def safe_get(obj: Any, *keys, default=None) -> Any:
    """Safely traverse nested mappings"""
    current = obj
    for key in keys:
        if not isinstance(current, Mapping):
            return default
        current = current.get(key)
        if current is None:
            return default
    return current


def dedupe_key(value: Any) -> Any:
    """Hashable identity for a raw value; lists and mappings become canonical JSON."""
    try:
        hash(value)
    except TypeError:
        return json.dumps(value, sort_keys=True, default=str)
    return value


def text(value: Any) -> str:
    """Coerce a raw scalar to a string, treating falsy values as empty."""
    if not value:
        return ""
    return value if isinstance(value, str) else str(value)


def join_parts(parts: List[Any], separator: str = ADDRESS_SEPARATOR) -> str:
    """Join the non-empty parts in their original order."""
    return separator.join(text(part) for part in parts if part)


def field_of(*keys) -> Extractor:
    return lambda raw: text(safe_get(raw, *keys))


def joined(*keys) -> Extractor:
    return lambda raw: join_parts([safe_get(raw, key) for key in keys])


def first_of(*keys) -> Extractor:
    def extract(raw):
        for key in keys:
            value = text(safe_get(raw, key))
            if value:
                return value
        return ""
    return extract


def _google_types(raw: Mapping) -> str:
    types = safe_get(raw, "types")
    if isinstance(types, (list, tuple)):
        return join_parts(list(types))
    return text(types)


def _google_area(raw: Mapping) -> str:
    # compound_code looks like "GV8F+2X London, UK"
    compound = text(safe_get(raw, "plus_code", "compound_code"))
    return compound.split(" ")[0] if compound else ""


GOOGLE_FIELDS: List[Tuple[str, Extractor]] = [
    ("company_name", field_of("name")),
    ("phone_number", field_of("formatted_phone_number")),
    ("address", field_of("formatted_address")),
    ("services_offered", _google_types),
    ("areas_covered", _google_area),
]

REFCOM_FIELDS: List[Tuple[str, Extractor]] = [
    ("company_name", field_of("companyName")),
    ("phone_number", field_of("telephoneNo")),
    ("email_address", field_of("email")),
    ("address", joined("addressLine1", "addressLine2", "addressLine3", "town", "county", "postcode")),
    ("areas_covered", first_of("county", "town")),
    ("services_offered", lambda raw: FGAS_REGISTERED if safe_get(raw, "fGas") else ""),
    ("file_number", field_of("fGasCode")),
]

FGAS_FIELDS: List[Tuple[str, Extractor]] = [
    ("company_name", field_of("Company")),
    ("phone_number", field_of("Telephone")),
    ("address", joined("Address_1", "Address_2", "Address_3", "Address_4", "City", "Zip_Code")),
    ("areas_covered", field_of("City")),
    ("file_number", field_of("FGasCode")),
    ("services_offered", lambda raw: FGAS_REGISTERED),
]

FIELD_MAPS: Dict[Source, List[Tuple[str, Extractor]]] = {
    Source.GOOGLE: GOOGLE_FIELDS,
    Source.REFCOM: REFCOM_FIELDS,
    Source.FGAS: FGAS_FIELDS,
}


def resolve_source(source: Union[Source, str]) -> Union[Source, None]:
    """Return the Source for a tag, or None if the tag is unknown."""
    if isinstance(source, Source):
        return source
    try:
        return Source(str(source).strip().lower())
    except ValueError:
        return None


def normalize(raw: Any, source: Union[Source, str]) -> NormalizedRecord:
    """
    Normalize a raw source record.

    Args:
        raw: Source-specific mapping (anything else is treated as empty)
        source: Source tag, e.g. Source.FGAS or "fgas"

    Returns:
        A fully populated NormalizedRecord. Unknown sources log a warning
        and get an all-default record.
    """
    record = NormalizedRecord()

    resolved = resolve_source(source)
    if resolved is None:
        logger.warning("Unknown source: %s", source)
        return record

    if not isinstance(raw, Mapping):
        raw = {}

    for attribute, extract in FIELD_MAPS[resolved]:
        setattr(record, attribute, extract(raw))

    return record
