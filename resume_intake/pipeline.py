# resume_intake/pipeline.py
import logging
import pathlib
from typing import Tuple

from . import config, llm_client, ocr, text_extraction
from .heuristics import parse_resume_text
from .models import CandidateRecord, fallback_record
from .text_extraction import run_cascade

logger = logging.getLogger(__name__)

AI_SUFFIX = " + AI Enhancement"
AI_MIN_TEXT_LENGTH = 50


def extract_text(pdf_path: str) -> Tuple[str, str]:
    """
    Run the text-layer strategies, then the image strategies.
    Returns (text, method); both empty when every strategy failed.
    """
    text, method = run_cascade(text_extraction.TEXT_LAYER_STRATEGIES, pdf_path, config.MIN_TEXT_LENGTH)
    if text:
        return text, method

    logger.info("No usable text layer in %s, falling back to page images", pdf_path)
    scratch = ocr.make_scratch_dir()
    try:
        try:
            pages = ocr.render_pages(pdf_path, scratch)
        except Exception as e:
            logger.warning("Converting PDF to images failed: %s", e)
            return "", ""
        return run_cascade(ocr.IMAGE_STRATEGIES, pages, config.MIN_IMAGE_TEXT_LENGTH)
    finally:
        ocr.cleanup_scratch_dir(scratch)


def build_record(text: str, method: str) -> CandidateRecord:
    if llm_client.is_configured() and len(text) > AI_MIN_TEXT_LENGTH:
        try:
            logger.info("Using AI to enhance parsing...")
            record = llm_client.enhance_with_ai(text)
            record.parsing_method = method + AI_SUFFIX
            return record
        except Exception as e:
            logger.warning("AI enhancement failed, using text heuristics: %s", e)

    record = parse_resume_text(text)
    record.parsing_method = method
    return record


def parse_resume(pdf_path: str) -> CandidateRecord:
    """Never raises: any failure ends in the all-empty fallback record."""
    logger.info("Parsing resume %s", pathlib.Path(pdf_path).name)
    try:
        text, method = extract_text(pdf_path)
        if not text:
            logger.info("No text extracted from any method, using fallback record")
            return fallback_record()
        logger.info("Final extraction method: %s, text length: %d", method, len(text))
        return build_record(text, method)
    except Exception:
        logger.exception("Error parsing resume %s", pdf_path)
        return fallback_record()
