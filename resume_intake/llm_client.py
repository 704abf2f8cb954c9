# resume_intake/llm_client.py
import base64
import json
import logging
import re
from typing import Any, Dict, Optional

from openai import OpenAI

from . import config
from .models import EXTRACTION_KEYS, CandidateRecord
from .validators import as_text, normalize_skills

logger = logging.getLogger(__name__)


def make_client(api_key: Optional[str]) -> Optional[OpenAI]:
    # single attempt per call
    return OpenAI(api_key=api_key, max_retries=0) if api_key else None


client: Optional[OpenAI] = make_client(config.OPENAI_API_KEY)
if client is None:
    logger.warning("OpenAI not configured (OPENAI_API_KEY missing). AI enhancement and vision are disabled.")

MAX_PROMPT_CHARS = 16000

JSON_PROMPT_TMPL = """You are an expert resume parser. Respond with JSON ONLY (no prose).
Return a single JSON object with keys exactly:
{keys}

Rules:
- If a value is missing, return empty string ""
- name: full name, convert ALL CAPS to proper case
- email: any email address in the resume
- phone: phone number in any format
- location: city, state, country or address
- linkedinUrl: LinkedIn profile URL (add https:// if missing)
- summary: professional summary, objective or profile statement
- areasOfExpertise: key skills, specializations or areas of expertise
- qualifications: certifications, achievements or highlighted qualifications
- experience: work experience with company names, job titles, dates and responsibilities
- education: degrees, institutions and dates
- skills: all technical and soft skills, comma-separated
- languages: languages spoken, comma-separated
- currentJobTitle: current or most recent job title
- yearsOfExperience: total years of experience, e.g. "5 years"
- expectedSalary: salary expectation if mentioned
- Do not return extra keys

Resume text:
{resume}
"""

VISION_TRANSCRIBE_PROMPT = (
    "Extract all text from this resume image. Return only the raw text content, "
    "no formatting or JSON. Include all information: name, contact details, "
    "experience, skills, education, etc."
)


def is_configured() -> bool:
    return client is not None

def _clean_model_output(raw: str) -> str:
    if not raw:
        return ""
    s = raw.strip()
    s = re.sub(r"^```(?:json)?\s*", "", s, flags=re.IGNORECASE)
    s = re.sub(r"\s*```$", "", s, flags=re.IGNORECASE)
    return s.strip()

def _extract_json(text: str) -> Dict[str, Any]:
    start = text.find("{")
    if start == -1:
        raise ValueError("No JSON object found in model response")
    sub = text[start:]
    depth = 0
    for i, ch in enumerate(sub):
        if ch == "{": depth += 1
        elif ch == "}": depth -= 1
        if depth == 0:
            candidate = sub[:i+1]
            try:
                return json.loads(candidate)
            except json.JSONDecodeError:
                pass
    return json.loads(text)

def _message_content(response) -> str:
    try:
        choice = response.choices[0]
        content = getattr(choice.message, "content", "") if hasattr(choice, "message") else getattr(choice, "text", "")
        return str(content or "").strip()
    except (AttributeError, IndexError) as e:
        raise ValueError(f"Failed to extract assistant content; raw response: {str(response)[:1000]}") from e

def _call_openai_chat(messages, model: str, max_tokens: int = 3000) -> str:
    if client is None:
        raise RuntimeError("OpenAI client not configured")
    logger.info("Calling OpenAI model %s", model)
    response = client.chat.completions.create(
        model=model,
        messages=messages,
        max_tokens=max_tokens,
        temperature=0.1,
    )
    return _message_content(response)

def parse_model_json(raw: str) -> Dict[str, Any]:
    """Parse model output, tolerating a ```json fence around the object."""
    parsed = _extract_json(_clean_model_output(raw))
    if not isinstance(parsed, dict):
        raise ValueError("Model response is not a JSON object")
    return parsed

def record_from_model(parsed: Dict[str, Any], resume_text: str) -> CandidateRecord:
    data = {key: as_text(parsed.get(key)) for key in EXTRACTION_KEYS}
    data["skills"] = normalize_skills(data["skills"])
    linkedin = data["linkedinUrl"]
    if linkedin and not linkedin.lower().startswith("http"):
        data["linkedinUrl"] = f"https://{linkedin}"
    return CandidateRecord(**data, resumeText=resume_text)

def enhance_with_ai(resume_text: str) -> CandidateRecord:
    """
    Ask the model for a structured record. Single attempt: any API or parse
    error propagates so the caller can keep the heuristic result.
    """
    if not isinstance(resume_text, str):
        raise ValueError("resume_text must be a string")
    prompt = JSON_PROMPT_TMPL.format(keys=", ".join(EXTRACTION_KEYS), resume=resume_text[:MAX_PROMPT_CHARS])
    raw = _call_openai_chat(
        [
            {"role": "system", "content": "You are a helpful assistant that extracts structured JSON from resumes."},
            {"role": "user", "content": prompt},
        ],
        model=config.OPENAI_MODEL,
    )
    logger.debug("AI response: %s", raw[:200])
    return record_from_model(parse_model_json(raw), resume_text)

def transcribe_page_image(png_bytes: bytes) -> str:
    """Plain-text transcription of one rendered resume page."""
    b64 = base64.b64encode(png_bytes).decode("ascii")
    return _call_openai_chat(
        [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": VISION_TRANSCRIBE_PROMPT},
                    {"type": "image_url", "image_url": {"url": f"data:image/png;base64,{b64}"}},
                ],
            }
        ],
        model=config.OPENAI_VISION_MODEL,
        max_tokens=2000,
    )
