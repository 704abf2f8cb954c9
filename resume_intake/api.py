# resume_intake/api.py
import logging
import os
import pathlib
import tempfile
import time
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, FastAPI, File, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import airtable_client, candidate_store, config, llm_client
from .airtable_client import RecordNotFound
from .pipeline import parse_resume

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPES = {"application/pdf", "application/x-pdf"}

router = APIRouter()


def _error(status_code: int, error: str, details: Optional[str] = None) -> JSONResponse:
    content = {"error": error}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def _save_upload(upload: UploadFile, data: bytes) -> pathlib.Path:
    upload_dir = pathlib.Path(config.UPLOAD_DIR)
    upload_dir.mkdir(parents=True, exist_ok=True)
    safe_name = pathlib.Path(upload.filename or "resume.pdf").name
    # unique per request even for identical names
    fd, name = tempfile.mkstemp(dir=upload_dir, prefix=f"{int(time.time() * 1000)}-", suffix=f"-{safe_name}")
    with os.fdopen(fd, "wb") as fh:
        fh.write(data)
    return pathlib.Path(name)


@router.post("/upload")
def upload_resume(resume: Optional[UploadFile] = File(None)):
    if resume is None or not resume.filename:
        return _error(400, "No file uploaded")
    if resume.content_type not in PDF_CONTENT_TYPES and not resume.filename.lower().endswith(".pdf"):
        return _error(400, "Only PDF files are allowed")

    data = resume.file.read(config.MAX_UPLOAD_BYTES + 1)
    if len(data) > config.MAX_UPLOAD_BYTES:
        return _error(413, "File too large", f"Maximum size is {config.MAX_UPLOAD_MB:g}MB")

    path = _save_upload(resume, data)
    try:
        record = parse_resume(str(path))
        logger.info("Parsed %s using %s", resume.filename, record.parsing_method)
        candidate = candidate_store.save_candidate(record, resume.filename)
    except Exception as e:
        logger.exception("Upload error: %s", e)
        return _error(500, "Failed to process resume", str(e))
    finally:
        try:
            os.remove(path)
        except OSError as e:
            logger.warning("Could not remove upload %s: %s", path, e)

    return {
        "message": f"Resume uploaded and parsed successfully using {record.parsing_method}",
        "candidateId": candidate.get("id"),
        "parsingMethod": record.parsing_method,
        "data": record.to_api(),
    }


@router.get("/candidate/{record_id}")
def get_candidate(record_id: str):
    logger.info("Fetching candidate with ID: %s", record_id)
    try:
        return candidate_store.get_candidate(record_id)
    except RecordNotFound:
        return _error(404, "Candidate not found")
    except Exception as e:
        logger.exception("Get candidate error: %s", e)
        return _error(500, "Failed to get candidate", str(e))


@router.get("/candidates")
def list_candidates():
    try:
        return candidate_store.list_candidates()
    except Exception as e:
        logger.exception("Get candidates error: %s", e)
        return _error(500, "Failed to get candidates", str(e))


@router.put("/candidate/{record_id}")
def update_candidate(record_id: str, fields: Dict[str, Any] = Body(...)):
    try:
        return candidate_store.update_candidate(record_id, fields)
    except RecordNotFound:
        return _error(404, "Candidate not found")
    except Exception as e:
        logger.exception("Update candidate error: %s", e)
        return _error(500, "Failed to update candidate", str(e))


@router.get("/health")
def health():
    return {"status": "ok", "airtable": airtable_client.is_configured(), "openai": llm_client.is_configured()}


def create_app() -> FastAPI:
    app = FastAPI(title="Resume Intake API", version="1.0.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router, prefix=config.API_PREFIX)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
