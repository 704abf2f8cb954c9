# resume_intake/validators.py
import re
from typing import Optional

EMAIL_RE = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")


def normalize_email(email: str) -> str:
    if not email or not isinstance(email, str):
        return ""
    email = email.strip().lower()
    if re.match(r"[^@]+@[^@]+\.[^@]+", email):
        return email
    return ""

def is_valid_email(email: str) -> bool:
    return bool(normalize_email(email))

def digit_count(value: str) -> int:
    return len(re.sub(r"\D", "", value or ""))

def normalize_skills(skills) -> str:
    """Comma-join skills, dropping blanks and case-insensitive duplicates."""
    if not skills:
        return ""
    if isinstance(skills, str):
        items = re.split(r",|;|\n", skills)
    elif isinstance(skills, (list, tuple, set)):
        items = [str(s) for s in skills if s]
    else:
        return str(skills).strip()
    seen = set()
    out = []
    for item in items:
        s = item.strip()
        if s and s.lower() not in seen:
            seen.add(s.lower())
            out.append(s)
    return ", ".join(out)

def parse_salary(value) -> Optional[int]:
    """'$85,000' -> 85000. Returns None when no amount is present."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    m = re.search(r"\$?\s*(\d[\d,]*)", str(value))
    if not m:
        return None
    digits = m.group(1).replace(",", "")
    return int(digits) if digits else None

def as_text(value) -> str:
    """Coerce a model-provided value to a plain string."""
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(as_text(v) for v in value if v not in (None, ""))
    if isinstance(value, dict):
        return "; ".join(f"{k}: {as_text(v)}" for k, v in value.items() if v not in (None, ""))
    return str(value).strip()
