from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .entity import entity

"""Sample entity used by the demo configuration and the test suite.

Headers of the sample workbook differ from the field names, so reads go
through SAMPLE_MAPPING.
"""

__all__ = ["Person", "SAMPLE_MAPPING", "sample_mapping"]


@entity(name="person")
@dataclass
class Person:
    id: int = 0
    name: str | None = None
    date_of_birth: datetime | None = None
    job_title: str | None = None


SAMPLE_MAPPING: dict[str, str] = {
    "myId": "id",
    "Name of the Person": "name",
    "Date of birth": "date_of_birth",
    "The Job Title": "job_title",
}


def sample_mapping() -> dict[str, str]:
    """Fresh copy of SAMPLE_MAPPING (callers may extend it)."""
    return dict(SAMPLE_MAPPING)
