import pathlib

import pytest
from fastapi.testclient import TestClient

from resume_intake import candidate_store, config
from resume_intake.api import create_app
from resume_intake.heuristics import parse_resume_text

P = config.API_PREFIX


@pytest.fixture
def client():
    return TestClient(create_app())


def _upload(client, path, content_type="application/pdf"):
    with open(path, "rb") as fh:
        return client.post(f"{P}/upload", files={"resume": (path.name, fh, content_type)})


def test_upload_text_pdf(client, text_pdf):
    resp = _upload(client, text_pdf())
    assert resp.status_code == 200
    body = resp.json()
    assert body["candidateId"].startswith("mock_")
    assert body["parsingMethod"] == "pypdf"
    assert body["message"] == "Resume uploaded and parsed successfully using pypdf"
    assert body["data"]["email"] == "jane.doe@example.com"
    assert body["data"]["linkedinUrl"] == "https://linkedin.com/in/janedoe"
    assert "jane.doe@example.com" in body["data"]["resumeText"]
    # the stored upload is removed once parsed
    assert list(pathlib.Path(config.UPLOAD_DIR).iterdir()) == []


def test_upload_scanned_pdf_without_ocr_or_ai_still_succeeds(client, image_pdf, monkeypatch):
    from resume_intake import ocr
    from resume_intake.text_extraction import Strategy

    def no_tesseract(_pages):
        raise RuntimeError("tesseract is not installed")

    monkeypatch.setattr(ocr, "IMAGE_STRATEGIES", [Strategy("OCR", no_tesseract), ocr.IMAGE_STRATEGIES[1]])
    resp = _upload(client, image_pdf())
    assert resp.status_code == 200
    body = resp.json()
    assert body["parsingMethod"] == "Fallback"
    assert body["data"]["name"] == ""


def test_upload_persists_table_row(client, text_pdf, fake_airtable):
    resp = _upload(client, text_pdf(name="jane.pdf"))
    assert resp.status_code == 200
    fields = fake_airtable.records[resp.json()["candidateId"]]
    assert fields["Email"] == "jane.doe@example.com"
    assert fields["Expected Salary"] == 120000
    assert fields["ResumeFile"] == "jane.pdf"


def test_same_named_uploads_get_distinct_paths(monkeypatch):
    from types import SimpleNamespace

    from resume_intake import api

    monkeypatch.setattr(api.time, "time", lambda: 1700000000.0)
    upload = SimpleNamespace(filename="../../cv.pdf")
    first = api._save_upload(upload, b"first")
    second = api._save_upload(upload, b"second")
    assert first != second
    assert first.read_bytes() == b"first"
    assert second.read_bytes() == b"second"
    for path in (first, second):
        assert path.parent == pathlib.Path(config.UPLOAD_DIR)
        assert path.name.startswith("1700000000000-")
        assert path.name.endswith("-cv.pdf")


def test_upload_without_file(client):
    resp = client.post(f"{P}/upload", data={"note": "no attachment"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "No file uploaded"}


def test_upload_rejects_non_pdf(client, tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("hello")
    resp = _upload(client, path, content_type="text/plain")
    assert resp.status_code == 400
    assert resp.json()["error"] == "Only PDF files are allowed"


def test_upload_rejects_large_files(client, text_pdf, monkeypatch):
    monkeypatch.setattr(config, "MAX_UPLOAD_BYTES", 100)
    resp = _upload(client, text_pdf())
    assert resp.status_code == 413
    assert resp.json()["error"] == "File too large"


def test_upload_storage_failure_is_500(client, text_pdf, monkeypatch):
    def broken(record, resume_file=""):
        raise RuntimeError("disk full")

    monkeypatch.setattr(candidate_store, "save_candidate", broken)
    resp = _upload(client, text_pdf())
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to process resume", "details": "disk full"}


def test_get_candidate_mock_mode(client):
    resp = client.get(f"{P}/candidate/recWHATEVER")
    assert resp.status_code == 200
    assert resp.json()["Name"] == "Mock Candidate"


def test_get_candidate_not_found(client, fake_airtable):
    resp = client.get(f"{P}/candidate/recMISSING")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Candidate not found"}


def test_list_candidates(client, fake_airtable):
    candidate_store.save_candidate(parse_resume_text("Ann Lee\nann@example.com"))
    candidate_store.save_candidate(parse_resume_text("Bob Ray\nbob@example.com"))
    resp = client.get(f"{P}/candidates")
    assert resp.status_code == 200
    assert [c["Email"] for c in resp.json()] == ["ann@example.com", "bob@example.com"]
    assert resp.json()[0]["id"] == "rec1"


def test_list_candidates_mock_mode(client):
    assert client.get(f"{P}/candidates").json() == [
        {"id": "mock_1", "Name": "Mock Candidate", "Email": "mock@example.com"}
    ]


def test_update_candidate_patches_given_fields(client, fake_airtable):
    saved = candidate_store.save_candidate(parse_resume_text("Ann Lee\nann@example.com"))
    resp = client.put(f"{P}/candidate/{saved['id']}", json={"Phone": "+1 555 0100", "Expected Salary": "$90,000"})
    assert resp.status_code == 200
    assert resp.json()["Phone"] == "+1 555 0100"
    assert resp.json()["Expected Salary"] == 90000
    after = client.get(f"{P}/candidate/{saved['id']}").json()
    assert after["Email"] == "ann@example.com"
    assert after["Phone"] == "+1 555 0100"


def test_update_unknown_candidate(client, fake_airtable):
    resp = client.put(f"{P}/candidate/recMISSING", json={"Phone": "1"})
    assert resp.status_code == 404


def test_health(client):
    assert client.get(f"{P}/health").json() == {"status": "ok", "airtable": False, "openai": False}
