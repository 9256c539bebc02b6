"""REST API exposing DNS lookup, record inspection and DMARC generation.

Endpoints:
  GET  /api/v1/health
  GET  /api/v1/dns/lookup?domain=&type=&selector=   fetch + inspect
  POST /api/v1/records/inspect                      inspect a pasted record
  POST /api/v1/dmarc/generate                       build a DMARC record

Authentication:
  Authorization: Bearer <DMARC_INSPECTOR_API_KEY env var>
"""

import logging
import os
import uuid
from datetime import datetime
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, Field, field_validator

from .dns_fetcher import RecordLookup, create_fetcher
from .exceptions import DnsError, ValidationError
from .inspector import inspect_record
from .models import DmarcConfig, DmarcPolicy
from .record_generator import RecordGenerator
from .report_json import JsonReporter

logger = logging.getLogger(__name__)

app = FastAPI(
    title="DMARC Inspector API",
    description="Parse, validate and generate DMARC, SPF and DKIM DNS records.",
    version="0.1.0",
    docs_url="/docs",
    openapi_url="/openapi.json",
)

_reporter = JsonReporter()
_generator = RecordGenerator()


# ── Request models ─────────────────────────────────────────────────────────────

class InspectRequest(BaseModel):
    type: str
    record: Optional[str] = None
    domain: Optional[str] = None


class GenerateRequest(BaseModel):
    domain: str
    policy: DmarcPolicy = DmarcPolicy.NONE
    subdomain_policy: Optional[DmarcPolicy] = None
    percentage: int = Field(default=100, ge=0, le=100)
    rua_emails: list[str] = []
    ruf_emails: list[str] = []
    dkim_alignment: str = "r"
    spf_alignment: str = "r"
    report_interval: int = 86400
    failure_options: str = "0"

    @field_validator("domain")
    @classmethod
    def domain_trimmed(cls, v: str) -> str:
        return v.strip().lower()


# ── Auth ───────────────────────────────────────────────────────────────────────

_bearer = HTTPBearer(auto_error=False)


def _get_api_key() -> str:
    key = os.environ.get("DMARC_INSPECTOR_API_KEY", "")
    if not key:
        raise RuntimeError("DMARC_INSPECTOR_API_KEY environment variable is not set")
    return key


def _require_auth(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> str:
    if credentials is None or credentials.credentials != _get_api_key():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": {"code": "AUTH_FAILED", "message": "Invalid or missing API key"}},
        )
    return credentials.credentials


def _error_response(code: str, message: str, http_status: int) -> JSONResponse:
    body = {
        "error": {
            "code": code,
            "message": message,
            "request_id": str(uuid.uuid4()),
            "timestamp": datetime.utcnow().isoformat() + "Z",
        }
    }
    return JSONResponse(status_code=http_status, content=body)


# ── Routes ─────────────────────────────────────────────────────────────────────

@app.get("/api/v1/health", tags=["system"])
def health() -> dict:
    """Returns service health. No authentication required."""
    return {"status": "ok", "timestamp": datetime.utcnow().isoformat() + "Z", "version": "0.1.0"}


@app.get("/api/v1/dns/lookup", tags=["records"])
def dns_lookup(
    domain: str,
    type: str,
    selector: Optional[str] = None,
    _api_key: str = Depends(_require_auth),
) -> JSONResponse:
    """Fetch a DMARC, SPF or DKIM record and return its inspection report."""
    try:
        result = RecordLookup(create_fetcher()).lookup(domain, type, selector)
    except ValidationError as exc:
        return _error_response("INVALID_REQUEST", str(exc), 400)
    except DnsError as exc:
        logger.error("DNS lookup failed for %s %s: %s", type, domain, exc)
        return _error_response("DNS_FAILURE", "DNS lookup failed. Please try again.", 503)

    report = inspect_record(result.record_type, result.record, result.domain)
    return JSONResponse(status_code=200, content=_reporter.to_dict(report, result))


@app.post("/api/v1/records/inspect", tags=["records"])
def inspect(body: InspectRequest, _api_key: str = Depends(_require_auth)) -> JSONResponse:
    """Parse and validate a record string supplied by the caller."""
    try:
        report = inspect_record(body.type, body.record, body.domain)
    except ValidationError as exc:
        return _error_response("INVALID_REQUEST", str(exc), 400)
    return JSONResponse(status_code=200, content=_reporter.to_dict(report))


@app.post("/api/v1/dmarc/generate", tags=["records"])
def generate(body: GenerateRequest, _api_key: str = Depends(_require_auth)) -> JSONResponse:
    """Build a DMARC record from generator settings."""
    config = DmarcConfig(**body.model_dump())
    try:
        spec = _generator.record_spec(config)
        issues = _generator.warnings(config)
    except ValidationError as exc:
        return _error_response("INVALID_CONFIG", str(exc), 400)
    return JSONResponse(status_code=200, content=_reporter.generated_to_dict(spec, issues))


# ── Global exception handlers ──────────────────────────────────────────────────

@app.exception_handler(HTTPException)
async def _http_exc(request: Request, exc: HTTPException) -> JSONResponse:
    """Reformat HTTPException so auth errors use our standard error envelope."""
    if isinstance(exc.detail, dict):
        return JSONResponse(status_code=exc.status_code, content=exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": {"code": "HTTP_ERROR", "message": str(exc.detail)}},
    )


@app.exception_handler(Exception)
async def _unhandled(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s", request.url.path)
    return _error_response("INTERNAL_ERROR", "An unexpected error occurred.", 500)
