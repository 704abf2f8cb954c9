# resume_intake/models.py
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

FALLBACK_METHOD = "Fallback"


class CandidateRecord(BaseModel):
    """Fields extracted from one resume. Serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str = ""
    email: str = ""
    phone: str = ""
    location: str = ""
    linkedin_url: str = ""
    summary: str = ""
    areas_of_expertise: str = ""
    qualifications: str = ""
    experience: str = ""
    education: str = ""
    skills: str = ""
    languages: str = ""
    current_job_title: str = ""
    years_of_experience: str = ""
    expected_salary: str = ""
    resume_text: str = ""
    parsing_method: str = ""

    def to_api(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


# keys the AI prompt asks for, in wire form
EXTRACTION_KEYS = [
    "name", "email", "phone", "location", "linkedinUrl", "summary",
    "areasOfExpertise", "qualifications", "experience", "education",
    "skills", "languages", "currentJobTitle", "yearsOfExperience",
    "expectedSalary",
]


def fallback_record(resume_text: str = "") -> CandidateRecord:
    return CandidateRecord(resume_text=resume_text, parsing_method=FALLBACK_METHOD)
