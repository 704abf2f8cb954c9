# resume_intake/candidate_store.py
"""Maps CandidateRecord onto the fixed Candidates table and back."""
import datetime
from typing import Any, Dict, List, Optional

from . import airtable_client, config
from .models import CandidateRecord
from .validators import parse_salary

TABLE_FIELDS = [
    "Name", "Email", "Phone", "Location", "Skills", "Education", "Experience",
    "Projects", "Preferred Role", "Expected Salary", "LinkedIn URL",
    "Availability", "Portfolio URL", "ResumeFile", "CreatedAt",
]
NUMERIC_FIELDS = ("Expected Salary",)


def to_table_fields(record: CandidateRecord, resume_file: str = "",
                    today: Optional[datetime.date] = None) -> Dict[str, Any]:
    """One value per table column; columns the parser never fills stay empty."""
    fields: Dict[str, Any] = dict.fromkeys(TABLE_FIELDS, "")
    fields.update({
        "Name": record.name,
        "Email": record.email,
        "Phone": record.phone,
        "Location": record.location,
        "Skills": record.skills,
        "Education": record.education,
        "Experience": record.experience,
        "Preferred Role": record.current_job_title,
        "Expected Salary": parse_salary(record.expected_salary),
        "LinkedIn URL": record.linkedin_url,
        "ResumeFile": resume_file,
        "CreatedAt": (today or datetime.date.today()).isoformat(),
    })
    return fields

def coerce_update(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Numeric columns must not receive strings; everything else passes through."""
    out = dict(fields)
    for name in NUMERIC_FIELDS:
        if name in out:
            out[name] = parse_salary(out[name])
    return out


def save_candidate(record: CandidateRecord, resume_file: str = "") -> Dict[str, Any]:
    return airtable_client.create_record(config.AIRTABLE_TABLE_NAME, to_table_fields(record, resume_file))

def get_candidate(record_id: str) -> Dict[str, Any]:
    return airtable_client.get_record(config.AIRTABLE_TABLE_NAME, record_id)

def list_candidates() -> List[Dict[str, Any]]:
    return airtable_client.list_records(config.AIRTABLE_TABLE_NAME)

def update_candidate(record_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    return airtable_client.update_record(config.AIRTABLE_TABLE_NAME, record_id, coerce_update(fields))

def email_exists(email: str) -> bool:
    return airtable_client.record_exists(config.AIRTABLE_TABLE_NAME, "Email", email)
