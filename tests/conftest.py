import io
import json as jsonlib

import fitz
import pytest
import requests
from PIL import Image

from resume_intake import airtable_client, config, llm_client

SAMPLE_RESUME = """JANE DOE
Austin, TX 78701
jane.doe@example.com | +1 (512) 555-0199
linkedin.com/in/janedoe

Summary
Backend engineer with 7 years of experience building APIs.

Experience
Senior Software Engineer, Acme Corp 2019 - Present
Built services in Python and Django on AWS with Docker.

Education
B.S. Computer Science, University of Texas, 2015

Skills
Python, Django, PostgreSQL, Docker, AWS, Leadership

Languages: English, Spanish
Expected Salary: $120,000
"""


@pytest.fixture(autouse=True)
def offline(monkeypatch, tmp_path):
    """No real OpenAI or Airtable, scratch dirs under tmp_path."""
    monkeypatch.setattr(llm_client, "client", None)
    monkeypatch.setattr(airtable_client, "_AIRTABLE_CONFIGURED", False)
    monkeypatch.setattr(config, "UPLOAD_DIR", str(tmp_path / "uploads"))
    monkeypatch.setattr(config, "TEMP_DIR", str(tmp_path / "temp"))


@pytest.fixture
def text_pdf(tmp_path):
    def make(text=SAMPLE_RESUME, name="resume.pdf"):
        path = tmp_path / name
        doc = fitz.open()
        page = doc.new_page()
        page.insert_text((50, 60), text, fontsize=10)
        doc.save(str(path))
        doc.close()
        return path
    return make


@pytest.fixture
def image_pdf(tmp_path):
    """A 'scanned' PDF: one page holding only a picture, no text layer."""
    def make(name="scanned.pdf"):
        buf = io.BytesIO()
        Image.new("RGB", (40, 40), "white").save(buf, format="PNG")
        path = tmp_path / name
        doc = fitz.open()
        page = doc.new_page()
        page.insert_image(fitz.Rect(72, 72, 272, 272), stream=buf.getvalue())
        doc.save(str(path))
        doc.close()
        return path
    return make


class FakeResponse:
    def __init__(self, status_code=200, body=None):
        self.status_code = status_code
        self._body = body if body is not None else {}
        self.text = jsonlib.dumps(self._body)

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        return self._body

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class FakeAirtable:
    """In-memory stand-in for the Airtable REST API, installed as requests.request."""

    def __init__(self, base="appTEST"):
        self.base = base
        self.records = {}
        self.calls = []
        self.page_size = 100

    def _split(self, url):
        prefix = f"{airtable_client.API_BASE}/{self.base}/"
        parts = url[len(prefix):].split("/")
        return parts[0], (parts[1] if len(parts) > 1 else None)

    def __call__(self, method, url, headers=None, timeout=None, params=None, json=None):
        self.calls.append({"method": method, "url": url, "params": params, "json": json})
        _, record_id = self._split(url)
        if method == "POST":
            rid = f"rec{len(self.records) + 1}"
            self.records[rid] = dict(json["fields"])
            return FakeResponse(200, {"id": rid, "fields": self.records[rid]})
        if method == "GET" and record_id:
            if record_id not in self.records:
                return FakeResponse(404, {"error": "NOT_FOUND"})
            return FakeResponse(200, {"id": record_id, "fields": self.records[record_id]})
        if method == "GET":
            items = [{"id": k, "fields": v} for k, v in self.records.items()]
            start = int((params or {}).get("offset", 0))
            page = items[start:start + self.page_size]
            body = {"records": page}
            if start + self.page_size < len(items):
                body["offset"] = str(start + self.page_size)
            return FakeResponse(200, body)
        if method == "PATCH":
            if record_id not in self.records:
                return FakeResponse(404, {"error": "NOT_FOUND"})
            self.records[record_id].update(json["fields"])
            return FakeResponse(200, {"id": record_id, "fields": self.records[record_id]})
        return FakeResponse(405, {"error": "METHOD_NOT_ALLOWED"})


@pytest.fixture
def fake_airtable(monkeypatch):
    fake = FakeAirtable()
    monkeypatch.setattr(airtable_client, "_AIRTABLE_CONFIGURED", True)
    monkeypatch.setattr(airtable_client, "BASE", fake.base)
    monkeypatch.setattr(airtable_client.requests, "request", fake)
    return fake


class FakeCompletions:
    def __init__(self, replies):
        self.replies = list(replies)
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        message = type("Message", (), {"content": reply})()
        choice = type("Choice", (), {"message": message})()
        return type("Response", (), {"choices": [choice]})()


@pytest.fixture
def fake_openai(monkeypatch):
    def install(*replies):
        completions = FakeCompletions(replies)
        chat = type("Chat", (), {"completions": completions})()
        monkeypatch.setattr(llm_client, "client", type("Client", (), {"chat": chat})())
        return completions
    return install
