# resume_intake/__init__.py
"""
Resume intake: PDF text extraction, field heuristics, optional AI
normalization and Airtable persistence.
Allows imports like:
    from resume_intake import parse_resume, parse_resume_text
"""

from .models import CandidateRecord, fallback_record
from .heuristics import parse_resume_text
from .pipeline import parse_resume, extract_text
from .candidate_store import (
    save_candidate,
    get_candidate,
    list_candidates,
    update_candidate,
)

__all__ = [
    "CandidateRecord",
    "fallback_record",
    "parse_resume_text",
    "parse_resume",
    "extract_text",
    "save_candidate",
    "get_candidate",
    "list_candidates",
    "update_candidate",
]
