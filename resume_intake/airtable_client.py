# resume_intake/airtable_client.py
import json
import logging
import time
import urllib.parse
from typing import Any, Dict, List, Optional

import requests
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from . import config

logger = logging.getLogger(__name__)

API_BASE = "https://api.airtable.com/v0"
TOKEN = config.AIRTABLE_TOKEN
BASE = config.AIRTABLE_BASE_ID
HEADERS = {"Content-Type": "application/json"}
if TOKEN:
    HEADERS["Authorization"] = f"Bearer {TOKEN}"
TIMEOUT = 30

_AIRTABLE_CONFIGURED = bool(TOKEN and BASE)
if not _AIRTABLE_CONFIGURED:
    logger.warning("Airtable not configured (AIRTABLE_TOKEN/AIRTABLE_BASE_ID missing). Using mock mode.")

MOCK_CANDIDATE = {"Name": "Mock Candidate", "Email": "mock@example.com"}


class AirtableError(Exception):
    pass

class RecordNotFound(AirtableError):
    pass

class _TransientError(AirtableError):
    """429 or 5xx; retried."""


def is_configured() -> bool:
    return _AIRTABLE_CONFIGURED

def _mock_id() -> str:
    return f"mock_{int(time.time() * 1000)}"

def _quote_table(table: str) -> str:
    return urllib.parse.quote(table, safe="")

def _table_url(table: str, record_id: Optional[str] = None) -> str:
    url = f"{API_BASE}/{BASE}/{_quote_table(table)}"
    if record_id:
        url += "/" + urllib.parse.quote(record_id, safe="")
    return url


@retry(stop=stop_after_attempt(3), wait=wait_exponential(min=1, max=8),
       retry=retry_if_exception_type(_TransientError), reraise=True)
def _send(method: str, url: str, **kwargs) -> requests.Response:
    try:
        r = requests.request(method, url, headers=HEADERS, timeout=TIMEOUT, **kwargs)
    except requests.RequestException as ex:
        logger.exception("Network error calling Airtable %s %s: %s", method, url, ex)
        raise AirtableError(f"Network error: {ex}") from ex
    if r.status_code == 429 or r.status_code >= 500:
        logger.warning("Airtable returned %s for %s %s; retrying", r.status_code, method, url)
        raise _TransientError(f"Airtable status {r.status_code}")
    return r

def _check(r: requests.Response, action: str) -> Dict[str, Any]:
    if r.status_code == 404:
        raise RecordNotFound(f"Airtable {action}: record not found")
    if r.status_code in (401, 403):
        logger.error("Airtable %s unauthorized (status=%s). Check AIRTABLE_TOKEN.", action, r.status_code)
        raise AirtableError(f"Airtable {action} unauthorized (status={r.status_code})")
    if r.status_code == 422:
        logger.error("Airtable returned 422 Unprocessable Entity on %s. Response: %s", action, r.text[:2000])
    try:
        r.raise_for_status()
    except requests.HTTPError as ex:
        raise AirtableError(f"Airtable {action} failed (status={r.status_code}): {r.text[:500]}") from ex
    return r.json()


def create_record(table: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    """
    Create a record. If Airtable is not configured, or rejects the token,
    return a mock record instead.
    """
    if not _AIRTABLE_CONFIGURED:
        mock_id = _mock_id()
        logger.info("Airtable not configured, returning mock record id=%s for table=%s", mock_id, table)
        return {"id": mock_id, "fields": fields}

    payload = {"fields": fields, "typecast": True}
    r = _send("POST", _table_url(table), json=payload)
    if r.status_code in (401, 403):
        logger.error("Airtable create unauthorized (status=%s). Returning mock record. Check AIRTABLE_TOKEN.", r.status_code)
        return {"id": _mock_id(), "fields": fields}
    if r.status_code == 422:
        logger.error("Payload that caused 422: %s", json.dumps(payload, indent=2))
    return _check(r, "create")


def get_record(table: str, record_id: str) -> Dict[str, Any]:
    """Return the `fields` of one record."""
    if not _AIRTABLE_CONFIGURED:
        logger.info("Airtable not configured, returning mock data")
        return dict(MOCK_CANDIDATE)
    return _check(_send("GET", _table_url(table, record_id)), "get").get("fields", {})


def list_records(table: str) -> List[Dict[str, Any]]:
    """All records as flat dicts: {"id": ..., **fields}. Follows the offset cursor."""
    if not _AIRTABLE_CONFIGURED:
        logger.info("Airtable not configured, returning mock data")
        return [{"id": "mock_1", **MOCK_CANDIDATE}]

    out: List[Dict[str, Any]] = []
    params: Dict[str, Any] = {"pageSize": 100}
    while True:
        body = _check(_send("GET", _table_url(table), params=params), "list")
        for rec in body.get("records", []):
            out.append({"id": rec.get("id"), **rec.get("fields", {})})
        offset = body.get("offset")
        if not offset:
            break
        params["offset"] = offset
    logger.info("Fetched %d records from %s", len(out), table)
    return out


def update_record(table: str, record_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    """PATCH only the given fields; returns the record's fields after the update."""
    if not _AIRTABLE_CONFIGURED:
        logger.info("Airtable not configured, returning mock data")
        return fields
    body = _check(_send("PATCH", _table_url(table, record_id), json={"fields": fields, "typecast": True}), "update")
    return body.get("fields", {})


def record_exists(table: str, key_field: str, key_value: str) -> bool:
    if not _AIRTABLE_CONFIGURED:
        return False
    safe_val = str(key_value).replace("'", "\\'")
    formula = f"{{{key_field}}}='{safe_val}'"
    try:
        r = _send("GET", _table_url(table), params={"filterByFormula": formula, "maxRecords": 1})
        records = _check(r, "record_exists").get("records", [])
    except AirtableError as ex:
        logger.warning("Airtable record_exists failed: %s", ex)
        return False
    return bool(records)


def check_connection(table: str) -> Dict[str, Any]:
    """One lightweight GET (maxRecords=1); reports what happened."""
    report = {"configured": _AIRTABLE_CONFIGURED, "base": BASE, "table": table, "token_present": bool(TOKEN)}
    if not _AIRTABLE_CONFIGURED:
        report["ok"] = False
        report["error"] = "AIRTABLE_TOKEN/AIRTABLE_BASE_ID missing"
        return report
    try:
        r = _send("GET", _table_url(table), params={"maxRecords": 1})
    except AirtableError as ex:
        report.update(ok=False, error=str(ex))
        return report
    report["status_code"] = r.status_code
    report["ok"] = r.ok
    if r.ok:
        records = r.json().get("records", [])
        report["fields"] = sorted(records[0].get("fields", {}).keys()) if records else []
    else:
        report["error"] = r.text[:1000]
    return report
