"""
records/models.py -- Field projection and query filters for CV records.

CV_RECORD_FIELDS is the contract between the cv_records table and the API:
each external field name maps to exactly one storage column. records/store.py
builds its SELECT list from it, so the JSON shape never depends on storage
naming. The mapping is total (every exposed field has a source) and
injective (no column feeds two fields).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

# external field name -> storage column, in response order
CV_RECORD_FIELDS: dict[str, str] = {
    "id": "id",
    "name": "name",
    "surname": "surname",
    "idPassport": "id_passport",
    "email": "email",
    "phone": "phone",
    "department": "department",
    "position": "position",
    "roleTitle": "role_title",
    "sapKLevel": "sap_k_level",
    "experience": "experience",
    "experienceInSimilarRole": "experience_similar_role",
    "experienceWithITSMTools": "experience_itsm_tools",
    "qualifications": "qualifications",
    "instituteName": "institute_name",
    "yearCompleted": "year_completed",
    "languages": "languages",
    "workExperiences": "work_experiences",  # JSON array serialized as text
    "certificates": "certificate_types",  # JSON array serialized as text
    "status": "status",
    "cv_file": "cv_file",
    "submittedAt": "submitted_at",
}

# "all" is what the UI sends for an unset dropdown.
_ANY = "all"


@dataclass
class RecordFilters:
    """Optional narrowing for GET /cv-records.

    search matches name, surname or email case-insensitively as a substring.
    status, department and position are exact matches. None, "" and "all"
    all mean "no filter".
    """

    search: Optional[str] = None
    status: Optional[str] = None
    department: Optional[str] = None
    position: Optional[str] = None

    def exact_matches(self) -> dict[str, str]:
        """Return {storage_column: value} for the exact-match filters that are set."""
        candidates = {
            "status": self.status,
            "department": self.department,
            "position": self.position,
        }
        return {column: value for column, value in candidates.items() if value and value != _ANY}

    def search_term(self) -> Optional[str]:
        term = (self.search or "").strip()
        return term or None
