# resume_intake/ocr.py
"""
Image fallback for PDFs without a usable text layer: render pages to PNG in a
scratch directory, then OCR them locally or have the vision model transcribe them.
"""
import logging
import re
import shutil
import tempfile
from pathlib import Path
from typing import List

import fitz
import pytesseract
from PIL import Image

from . import config, llm_client
from .text_extraction import Strategy

logger = logging.getLogger(__name__)

if config.TESSERACT_CMD:
    pytesseract.pytesseract.tesseract_cmd = config.TESSERACT_CMD


def make_scratch_dir() -> Path:
    base = Path(config.TEMP_DIR)
    base.mkdir(parents=True, exist_ok=True)
    return Path(tempfile.mkdtemp(prefix="pages-", dir=base))

def cleanup_scratch_dir(path: Path) -> None:
    shutil.rmtree(path, ignore_errors=True)


def render_pages(pdf_path: str, out_dir: Path, dpi: int = config.OCR_DPI) -> List[Path]:
    """Rasterize every page of `pdf_path` to out_dir/page-N.png."""
    paths = []
    with fitz.open(pdf_path) as doc:
        for i, page in enumerate(doc, start=1):
            pix = page.get_pixmap(dpi=dpi, alpha=False)
            target = out_dir / f"page-{i}.png"
            pix.save(str(target))
            paths.append(target)
    logger.info("Rendered %d page image(s) from %s", len(paths), pdf_path)
    if not paths:
        raise ValueError("No images generated from PDF")
    return paths


def clean_ocr_text(text: str) -> str:
    if not text:
        return ""
    text = text.replace("\f", "\n").replace("\r\n", "\n").replace("\r", "\n")
    text = re.sub(r"[ \t]+\n", "\n", text)
    text = re.sub(r"\n[ \t]+", "\n", text)
    text = re.sub(r"[ \t]{2,}", " ", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def ocr_pages(pages: List[Path]) -> str:
    chunks = []
    for i, page in enumerate(pages, start=1):
        with Image.open(page) as img:
            text = pytesseract.image_to_string(img, lang=config.OCR_LANG) or ""
        logger.info("OCR extracted %d characters from page %d", len(text), i)
        if text.strip():
            chunks.append(text)
    return clean_ocr_text("\n\n".join(chunks))


def vision_transcribe_pages(pages: List[Path]) -> str:
    if not llm_client.is_configured():
        raise RuntimeError("OpenAI not available for image processing")
    chunks = []
    for i, page in enumerate(pages[:config.MAX_VISION_PAGES], start=1):
        try:
            chunks.append(llm_client.transcribe_page_image(page.read_bytes()))
        except Exception as e:
            # one bad page should not lose the others
            logger.warning("Vision transcription failed on page %d: %s", i, e)
    return "\n\n".join(c for c in chunks if c).strip()


IMAGE_STRATEGIES = [
    Strategy("OCR", ocr_pages),
    Strategy("OpenAI Vision", vision_transcribe_pages),
]
