"""
Normalized Record

The single output schema shared by every source. Field labels are the
column names of the downstream sheet, so they are kept verbatim.
"""

from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List


class Source(str, Enum):
    """Origin of a raw record."""
    GOOGLE = "google"
    REFCOM = "refcom"
    FGAS = "fgas"


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with milliseconds, e.g. 2025-01-31T09:15:02.113Z"""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _label(name: str):
    return field(default="", metadata={"label": name})


@dataclass
class NormalizedRecord:
    phone_number: str = _label("Phone Number")
    company_name: str = _label("Company Name")
    full_name: str = _label("Full Name")
    areas_covered: str = _label("Areas Covered In The UK")
    address: str = _label("Address")
    email_address: str = _label("Email Address")
    attachments: List[str] = field(default_factory=list, metadata={"label": "Attachments"})
    working_days: str = _label("Working Days")
    working_times: str = _label("Working Times")
    bank_registration: str = _label("Bank Registration...")
    file_number: str = _label("Betters/File Num...")
    services_offered: str = _label("Services Offered")
    skls_2025_date: str = _label("S.K.L.S. (2025) date")
    skills_2024: str = _label("S.K.I.L.L.S (2024)")
    signature: str = _label("Signature")
    insurances_licences: str = _label("Insurances & Licences")
    jobs_assigned: str = _label("Jobs Assigned")
    last_modified: str = field(default_factory=utc_timestamp, metadata={"label": "Last Modified"})
    broadcast_messages: str = _label("Broadcast Messages")
    jobs: str = _label("Jobs")
    jobs_2: str = _label("Jobs 2")
    jobs_3: str = _label("Jobs 3")
    jobs_4: str = _label("Jobs 4")
    sms_responses: str = _label("SMS Responses")

    @classmethod
    def labels(cls) -> List[str]:
        """Output column names, in order."""
        return [f.metadata["label"] for f in fields(cls)]

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with the output column names as keys."""
        result = {}
        for f in fields(self):
            value = getattr(self, f.name)
            result[f.metadata["label"]] = list(value) if isinstance(value, list) else value
        return result
