# resume_intake/text_extraction.py
"""
Ordered text extraction strategies.

A strategy is a named callable returning text for a source (a PDF path, or a
list of rendered page images). `run_cascade` tries them in order and keeps the
first output that is long enough and does not look like raw PDF bytes.
"""
import logging
import re
import unicodedata
from collections import namedtuple
from typing import Any, Iterable, Tuple

import pdfplumber
from pypdf import PdfReader

logger = logging.getLogger(__name__)

Strategy = namedtuple("Strategy", ["name", "attempt"])

RAW_TEXT_LIMIT = 5000
GARBLED_RATIO = 0.25
GARBAGE_CATEGORIES = ("Cc", "Co", "Cs", "Cn")

PDF_ARTIFACT_RE = re.compile(r"%PDF-|\bendobj\b|\bendstream\b|\bxref\b|\bstartxref\b|FlateDecode|/Filter\b")
# (string) Tj  or  [(str) -120 (ing)] TJ
SHOW_TEXT_RE = re.compile(rb"\(((?:[^()\\]|\\.)*)\)\s*Tj|\[((?:[^\]\\]|\\.)*)\]\s*TJ", re.DOTALL)
PDF_STRING_RE = re.compile(rb"\(((?:[^()\\]|\\.)*)\)")
PRINTABLE_RUN_RE = re.compile(rb"[A-Za-z0-9\s@.,\-+()]{10,}")


def _is_garbage(ch: str) -> bool:
    return ch == "\ufffd" or unicodedata.category(ch) in GARBAGE_CATEGORIES

def garbled_ratio(text: str) -> float:
    """
    Share of control, private-use, surrogate and replacement characters,
    ignoring whitespace. Letters of any script count as good text.
    """
    total = bad = 0
    for ch in text:
        if ch.isspace():
            continue
        total += 1
        if _is_garbage(ch):
            bad += 1
    return bad / total if total else 1.0

def has_binary_artifacts(text: str) -> bool:
    return bool(PDF_ARTIFACT_RE.search(text)) or garbled_ratio(text) > GARBLED_RATIO

def is_usable(text: str, min_length: int) -> bool:
    stripped = (text or "").strip()
    return len(stripped) >= min_length and not has_binary_artifacts(stripped)


def run_cascade(strategies: Iterable[Strategy], source: Any, min_length: int) -> Tuple[str, str]:
    """Return (text, strategy name) from the first usable strategy, or ("", "")."""
    for strategy in strategies:
        try:
            logger.info("Attempting %s extraction...", strategy.name)
            text = strategy.attempt(source) or ""
        except Exception as e:
            logger.warning("%s extraction failed: %s", strategy.name, e)
            continue
        logger.info("%s extracted %d characters", strategy.name, len(text))
        if is_usable(text, min_length):
            return text, strategy.name
        logger.info("%s output rejected (too short or binary)", strategy.name)
    return "", ""


def extract_with_pypdf(path: str) -> str:
    return "\n".join((pg.extract_text() or "") for pg in PdfReader(path).pages)

def extract_with_pdfplumber(path: str) -> str:
    with pdfplumber.open(path) as pdf:
        return "\n".join((page.extract_text() or "") for page in pdf.pages)

_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", "b": "", "f": ""}

def _unescape_pdf_string(raw: bytes) -> str:
    s = raw.decode("latin-1")
    return re.sub(r"\\(.)", lambda m: _ESCAPES.get(m.group(1), m.group(1)), s, flags=re.DOTALL)

def extract_raw_binary(path: str) -> str:
    """
    Scrape show-text operands from uncompressed content streams. When the file
    has none, fall back to runs of plain printable bytes; runs that are really
    PDF syntax get rejected by `is_usable`.
    """
    with open(path, "rb") as fh:
        data = fh.read()
    parts = []
    for m in SHOW_TEXT_RE.finditer(data):
        if m.group(1) is not None:
            parts.append(_unescape_pdf_string(m.group(1)))
        else:
            parts.append("".join(_unescape_pdf_string(s) for s in PDF_STRING_RE.findall(m.group(2))))
    if not any(p.strip() for p in parts):
        logger.info("No text operators found, scraping printable runs")
        parts = [run.decode("ascii").strip() for run in PRINTABLE_RUN_RE.findall(data)]
    return "\n".join(p for p in parts if p.strip())[:RAW_TEXT_LIMIT]


TEXT_LAYER_STRATEGIES = [
    Strategy("pypdf", extract_with_pypdf),
    Strategy("pdfplumber", extract_with_pdfplumber),
    Strategy("Raw Binary", extract_raw_binary),
]
