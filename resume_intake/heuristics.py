# resume_intake/heuristics.py
"""
Regex/keyword heuristics that turn raw resume text into a CandidateRecord.

Each field has an ordered list of patterns and the first match wins. Skills are
the exception: every vocabulary term found in the text is kept.
"""
import datetime
import logging
import re
from typing import Callable, Dict, Iterable, List, Optional, Pattern, Tuple

from .models import CandidateRecord
from .validators import EMAIL_RE, digit_count

logger = logging.getLogger(__name__)

IS = re.IGNORECASE | re.DOTALL

NAME_STOPWORDS = [
    "LINKEDIN", "PROFILE", "EMAIL", "PHONE", "ADDRESS", "RESUME", "CURRICULUM",
    "VITAE", "CONTACT", "INFORMATION", "BUSINESS", "DEVELOPMENT", "PROFESSIONAL",
    "EXPERIENCE", "OBJECTIVE", "SUMMARY", "SKILLS", "EDUCATION", "TECHNICAL",
    "WORK", "PROJECT", "CERTIFICATE", "ACHIEVEMENT", "PORTFOLIO",
]
MAILBOX_WORDS = ["gmail", "yahoo", "hotmail", "outlook", "test", "user", "admin", "info", "contact"]
LOCATION_STOPWORDS = ["email", "phone", "linkedin", "profile", "skills", "experience"]

PROPER_NAME_RE = re.compile(r"^[A-Z][a-z]+(?:\s+[A-Z][a-z]+){1,3}$")
CAPS_NAME_RE = re.compile(r"^[A-Z]+(?:\s+[A-Z]+){1,3}$")
PHONE_RE = re.compile(r"(\+?[\d\s\-().]{7,})")
LINKEDIN_RE = re.compile(r"linkedin\.com/in/[a-zA-Z0-9\-_]+", re.IGNORECASE)

JOB_TITLES = (
    r"Backend Developer|Frontend Developer|Full Stack Developer|Software Developer|"
    r"Web Developer|Data Scientist|Machine Learning Engineer|Business Development Manager|"
    r"Account Executive|Manager|Director|Senior|Lead|Principal|Engineer|Analyst|"
    r"Consultant|Specialist"
)

# Headings that end a section body.
_AFTER_EXPERIENCE = r"(?=Education|Skills|Projects|Languages|Certifications|References|$)"
_AFTER_PROFILE = r"(?=Experience|Work|Skills|Professional|Employment|Education|$)"
_AFTER_EDUCATION = r"(?=Experience|Work|Skills|Professional|Employment|Projects|Languages|Certifications|$)"
_AFTER_BLOCK = r"(?=Experience|Work|Professional|Employment|Education|$)"

# value up to a comma or newline; thousands separators are kept
_AMOUNT = r"((?:\d,\d|[^,\n])+)"


def _p(pattern: str, flags: int = 0) -> Pattern:
    return re.compile(pattern, flags)


# field -> (ordered patterns, max lines kept, group holding the value)
FIELD_HEURISTICS: Dict[str, Tuple[List[Pattern], Optional[int], int]] = {
    "location": ([
        _p(r"([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*,\s*[A-Z]{2}\s*\d{5})"),
        _p(r"([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*,\s*[A-Z]{2})\b"),
        _p(r"([A-Z][a-z]+(?:[ \t]+[A-Z][a-z]+)*,[ \t]*[A-Z][a-z]+)"),
        _p(r"([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*\s+City)", re.IGNORECASE),
        _p(r"\b(India|United States|USA|Canada|United Kingdom|UK|Australia|Germany|"
           r"France|Japan|China|Brazil|Mexico)\b", re.IGNORECASE),
    ], None, 1),
    "experience": ([
        _p(r"(?:PROFESSIONAL EXPERIENCE|Work Experience|Work History|Employment History|"
           r"Professional Background|Experience|Employment|Career)[:\s]*(.+?)" + _AFTER_EXPERIENCE, IS),
    ], 30, 1),
    "education": ([
        _p(r"Education(?:al)?[:\s]*(.+?)" + _AFTER_EDUCATION, IS),
        _p(r"Academic[:\s]*(.+?)" + _AFTER_EDUCATION, IS),
        _p(r"((?:University|College)\b.+?)" + _AFTER_EDUCATION, IS),
    ], 4, 1),
    "summary": ([
        _p(r"(?:PROFESSIONAL SUMMARY|Summary|Profile|Objective|About)[:\s]*(.+?)" + _AFTER_PROFILE, IS),
        _p(r"(?:Business Development)[:\s]*(.+?)"
           r"(?=AREAS OF EXPERTISE|Experience|Work|Skills|Professional|Employment|Education|$)", IS),
    ], 5, 1),
    "areas_of_expertise": ([
        _p(r"(?:AREAS OF EXPERTISE|Key Skills|Expertise)[:\s]*(.+?)" + _AFTER_BLOCK, IS),
        _p(r"(?:TECHNICAL SKILLS)[:\s]*(.+?)" + _AFTER_BLOCK, IS),
        _p(r"(?:Skills)[:\s]*(.+?)" + _AFTER_BLOCK, IS),
    ], 10, 1),
    "qualifications": ([
        _p(r"(?:HIGHLIGHTED QUALIFICATIONS|Key Qualifications|Qualifications)[:\s]*(.+?)" + _AFTER_BLOCK, IS),
        _p(r"(?:ACHIEVEMENTS|CERTIFICATES)[:\s]*(.+?)" + _AFTER_BLOCK, IS),
        _p(r"(?:PROJECT EXPERIENCE|PROJECTS)[:\s]*(.+?)" + _AFTER_BLOCK, IS),
    ], 8, 1),
    "languages": ([
        _p(r"(?:Fluent in|Speaks)[:\s]*([^,\n]+)", re.IGNORECASE),
        _p(r"(?:Languages|Language|Fluent)[:\s]*([^,\n]+)", re.IGNORECASE),
    ], None, 1),
    "expected_salary": ([
        _p(r"Expected Salary[:\s]*" + _AMOUNT, re.IGNORECASE),
        _p(r"Salary[:\s]*" + _AMOUNT, re.IGNORECASE),
        _p(r"Compensation[:\s]*" + _AMOUNT, re.IGNORECASE),
        _p(r"(\$[\d,]+(?:\s*-\s*\$[\d,]+)?(?:\s*(?:per year|annually|annual|yearly))?)", re.IGNORECASE),
    ], None, 1),
    "current_job_title": ([
        _p(r"(?:" + JOB_TITLES + r")[^,\n]*", re.IGNORECASE),
    ], None, 0),
    "years_of_experience": ([
        _p(r"(\d+)\+?\s*(?:years?|yrs?)\s*(?:of\s*)?(?:experience|exp)", re.IGNORECASE),
        _p(r"(?:experience|exp)[:\s]*(\d+)\+?\s*(?:years?|yrs?)", re.IGNORECASE),
    ], None, 1),
}

SKILL_VOCABULARY: Dict[str, List[str]] = {
    "programming": [
        "JavaScript", "Python", "Java", "C++", "C#", "PHP", "Ruby", "Go", "Swift", "Kotlin",
        "R", "MATLAB", "Scala", "Rust", "TypeScript", "Dart", "Perl", "Lua", "Haskell", "Clojure",
    ],
    "web": [
        "HTML", "CSS", "React", "Angular", "Vue", "Node.js", "Express", "Django", "Flask",
        "Spring", "Laravel", "Rails", "FastAPI", "Next.js", "Nuxt.js", "Svelte", "Ember",
        "jQuery", "Bootstrap", "Tailwind", ".NET",
    ],
    "database": [
        "SQL", "MySQL", "PostgreSQL", "MongoDB", "Redis", "Elasticsearch", "Cassandra",
        "DynamoDB", "SQLite", "Oracle", "SQL Server", "MariaDB", "CouchDB", "Neo4j", "InfluxDB",
    ],
    "cloud": [
        "AWS", "Azure", "Google Cloud", "Heroku", "DigitalOcean", "Linode", "Vercel", "Netlify",
        "Firebase", "Supabase", "Cloudflare", "Docker", "Kubernetes", "Terraform", "Ansible", "Linux",
    ],
    "tools": [
        "Git", "GitHub", "GitLab", "Jenkins", "CI/CD", "Jira", "Confluence", "Slack", "Trello",
        "Figma", "VS Code", "IntelliJ", "Eclipse", "Postman", "Swagger",
    ],
    "data": [
        "Machine Learning", "AI", "Data Science", "Analytics", "Statistics", "Pandas", "NumPy",
        "TensorFlow", "PyTorch", "Scikit-learn", "Keras", "OpenCV", "NLTK", "SpaCy",
    ],
    "business": [
        "Sales", "Business Development", "Account Management", "Customer Relations",
        "Lead Generation", "CRM", "Salesforce", "HubSpot", "Marketing", "Project Management",
        "Agile", "Scrum", "Cold Calling", "Market Research", "Client Acquisition",
        "Pipeline Management", "Territory Management", "Key Account Management",
        "Partnership Development", "Contract Negotiations",
    ],
    "logistics": [
        "Logistics", "Supply Chain", "Freight Forwarding", "International Trade",
        "Transportation", "Warehousing", "Inventory Management", "Customs", "Import/Export",
        "Ocean Freight", "Air Freight", "Procurement", "Distribution", "Shipping",
    ],
    "soft": [
        "Communication", "Leadership", "Team Management", "Problem Solving", "Analytical",
        "Time Management", "Presentation", "Public Speaking", "Negotiation",
        "Customer Service", "Collaboration",
    ],
    "office": ["Microsoft Office", "Excel", "PowerPoint", "Outlook"],
}


def _skill_pattern(skill: str) -> Pattern:
    # lookarounds instead of \b so that C++, C# and .NET match
    flags = 0 if len(skill) <= 2 else re.IGNORECASE
    return re.compile(r"(?<![\w])" + re.escape(skill) + r"(?![\w])", flags)


def _build_skill_patterns() -> List[Tuple[str, Pattern]]:
    patterns: Dict[str, Pattern] = {}
    for terms in SKILL_VOCABULARY.values():
        for term in terms:
            patterns.setdefault(term, _skill_pattern(term))
    return list(patterns.items())


_SKILL_PATTERNS = _build_skill_patterns()


def first_match(text: str, patterns: Iterable[Pattern], group: int = 1,
                accept: Callable[[str], bool] = lambda v: True) -> str:
    for pattern in patterns:
        m = pattern.search(text)
        if m and m.group(group):
            value = m.group(group).strip()
            if value and accept(value):
                return value
    return ""


def _truncate_lines(value: str, max_lines: Optional[int]) -> str:
    if not max_lines:
        return value
    lines = [ln.strip() for ln in value.split("\n")]
    return " ".join(ln for ln in lines[:max_lines] if ln)


def extract_field(field: str, text: str) -> str:
    patterns, max_lines, group = FIELD_HEURISTICS[field]
    accept = _location_ok if field == "location" else (lambda v: True)
    return _truncate_lines(first_match(text, patterns, group, accept), max_lines)


def _location_ok(value: str) -> bool:
    low = value.lower()
    return not any(w in low for w in LOCATION_STOPWORDS)


def _lines(text: str) -> List[str]:
    return [ln.strip() for ln in text.split("\n") if ln.strip()]


def extract_name(text: str) -> str:
    for line in _lines(text)[:15]:
        if any(w in line.upper() for w in NAME_STOPWORDS):
            continue
        if PROPER_NAME_RE.match(line) and len(line) < 50:
            return line
        if CAPS_NAME_RE.match(line):
            return line.title()

    email = extract_email(text)
    if email:
        local = email.split("@")[0]
        guess = re.sub(r"\d+", "", re.sub(r"[._-]", " ", local)).strip()
        guess = re.sub(r"\s+", " ", guess)
        if 2 < len(guess) < 20 and not any(w in guess.lower() for w in MAILBOX_WORDS):
            return guess.title()
    return ""


def extract_email(text: str) -> str:
    m = EMAIL_RE.search(text)
    return m.group(0) if m else ""


def extract_phone(text: str) -> str:
    candidates = [p for p in PHONE_RE.findall(text) if 7 <= digit_count(p) <= 15]
    if not candidates:
        return ""
    for p in candidates:
        stripped = p.strip()
        if stripped.startswith("+") or digit_count(p) >= 10:
            return stripped
    return candidates[0].strip()


def extract_linkedin(text: str) -> str:
    m = LINKEDIN_RE.search(text)
    return f"https://{m.group(0)}" if m else ""


def extract_skills(text: str) -> str:
    return ", ".join(skill for skill, pattern in _SKILL_PATTERNS if pattern.search(text))


def extract_years_of_experience(text: str, today: Optional[datetime.date] = None) -> str:
    years = extract_field("years_of_experience", text)
    if years:
        return f"{years} years"

    # no explicit statement: count from the earliest "YYYY - Present" range
    starts = [int(y) for y in re.findall(r"\b((?:19|20)\d{2})\b[^0-9\n]*(?:Present|Current|Now)\b",
                                         text, re.IGNORECASE)]
    if starts:
        span = (today or datetime.date.today()).year - min(starts)
        if 0 < span < 20:
            return f"{span} years"
    return ""


def parse_resume_text(text: str) -> CandidateRecord:
    """Apply every field heuristic to `text`."""
    logger.info("Running field heuristics over %d characters", len(text))
    return CandidateRecord(
        name=extract_name(text),
        email=extract_email(text),
        phone=extract_phone(text),
        location=extract_field("location", text),
        linkedin_url=extract_linkedin(text),
        summary=extract_field("summary", text),
        areas_of_expertise=extract_field("areas_of_expertise", text),
        qualifications=extract_field("qualifications", text),
        experience=extract_field("experience", text),
        education=extract_field("education", text),
        skills=extract_skills(text),
        languages=extract_field("languages", text),
        current_job_title=extract_field("current_job_title", text),
        years_of_experience=extract_years_of_experience(text),
        expected_salary=extract_field("expected_salary", text),
        resume_text=text,
    )
