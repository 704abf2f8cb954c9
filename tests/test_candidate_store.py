import datetime

from conftest import SAMPLE_RESUME
from resume_intake import candidate_store
from resume_intake.heuristics import parse_resume_text
from resume_intake.models import CandidateRecord


def test_table_fields_mapping():
    record = parse_resume_text(SAMPLE_RESUME)
    fields = candidate_store.to_table_fields(record, "1700000000000-cv.pdf", today=datetime.date(2024, 5, 2))
    assert list(fields) == candidate_store.TABLE_FIELDS
    assert fields["Name"] == "Jane Doe"
    assert fields["Email"] == "jane.doe@example.com"
    assert fields["Preferred Role"] == record.current_job_title
    assert fields["Expected Salary"] == 120000
    assert fields["LinkedIn URL"] == "https://linkedin.com/in/janedoe"
    assert fields["ResumeFile"] == "1700000000000-cv.pdf"
    assert fields["CreatedAt"] == "2024-05-02"
    assert fields["Projects"] == fields["Availability"] == fields["Portfolio URL"] == ""


def test_table_layout_drives_the_payload(monkeypatch):
    monkeypatch.setattr(candidate_store, "TABLE_FIELDS", candidate_store.TABLE_FIELDS + ["Notes"])
    fields = candidate_store.to_table_fields(CandidateRecord(name="Ann Lee"))
    assert list(fields)[-1] == "Notes"
    assert fields["Notes"] == ""
    assert fields["Name"] == "Ann Lee"


def test_missing_salary_is_sent_as_null():
    fields = candidate_store.to_table_fields(CandidateRecord(expected_salary="negotiable"))
    assert fields["Expected Salary"] is None


def test_coerce_update_only_converts_numeric_columns():
    out = candidate_store.coerce_update({"Expected Salary": "$95,500", "Phone": "555 0100"})
    assert out == {"Expected Salary": 95500, "Phone": "555 0100"}


def test_save_and_update_round_trip(fake_airtable):
    record = parse_resume_text(SAMPLE_RESUME)
    saved = candidate_store.save_candidate(record, "cv.pdf")
    updated = candidate_store.update_candidate(saved["id"], {"Expected Salary": "130000"})
    assert updated["Expected Salary"] == 130000
    assert updated["Name"] == "Jane Doe"
    assert candidate_store.get_candidate(saved["id"]) == updated


def test_email_exists(fake_airtable):
    assert not candidate_store.email_exists("jane.doe@example.com")
    candidate_store.save_candidate(parse_resume_text(SAMPLE_RESUME))
    assert candidate_store.email_exists("jane.doe@example.com")
