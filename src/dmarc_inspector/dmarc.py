"""DMARC record parser and validator."""

import math
import re
from typing import Optional

from . import descriptions as d
from .models import DmarcPolicy, DmarcRecord, ParsedTag, Severity, TagStatus, ValidationIssue
from .tokenizer import split_tag_pairs

VERSION = "DMARC1"
DEFAULT_PERCENTAGE = 100
DEFAULT_INTERVAL = 86400

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_POLICIES = {p.value: p for p in DmarcPolicy}


def parse_dmarc_record(raw: Optional[str]) -> DmarcRecord:
    """Parse a DMARC TXT value into a DmarcRecord with one ParsedTag per tag."""
    record = DmarcRecord(raw_record=raw or "")
    seen = set()

    for key, value in split_tag_pairs(raw):
        name = key.lower()
        handler = _TAG_HANDLERS.get(name)
        if handler is None:
            record.tags.append(ParsedTag(key, value, d.DMARC_UNKNOWN, TagStatus.INFO))
            continue
        # Repeated tags are annotated but only the first one fills the model
        target = record if name not in seen else DmarcRecord(raw_record="")
        seen.add(name)
        record.tags.append(handler(target, value))

    return record


# ── Tag Handlers ───────────────────────────────────────────────────────────────

def _version(record: DmarcRecord, value: str) -> ParsedTag:
    record.version = value
    status = TagStatus.GOOD if value == VERSION else TagStatus.ERROR
    return ParsedTag("v", value, d.DMARC_VERSION, status)


def _policy(record: DmarcRecord, value: str) -> ParsedTag:
    record.policy = _POLICIES.get(value.lower())
    status = d.POLICY_STATUS.get(value.lower(), TagStatus.ERROR)
    description = d.DMARC_POLICY.get(value.lower(), d.DMARC_POLICY_FALLBACK)
    return ParsedTag("p", value, description, status)


def _subdomain_policy(record: DmarcRecord, value: str) -> ParsedTag:
    record.subdomain_policy = _POLICIES.get(value.lower())
    status = d.POLICY_STATUS.get(value.lower(), TagStatus.INFO)
    description = d.DMARC_SUBDOMAIN_POLICY.get(value.lower(), d.DMARC_SUBDOMAIN_POLICY_FALLBACK)
    return ParsedTag("sp", value, description, status)


def _rua(record: DmarcRecord, value: str) -> ParsedTag:
    record.rua_emails = parse_report_addresses(value)
    return ParsedTag("rua", value, d.DMARC_RUA, TagStatus.GOOD)


def _ruf(record: DmarcRecord, value: str) -> ParsedTag:
    record.ruf_emails = parse_report_addresses(value)
    return ParsedTag("ruf", value, d.DMARC_RUF, TagStatus.GOOD)


def _percentage(record: DmarcRecord, value: str) -> ParsedTag:
    pct = parse_int(value)
    if pct is None:
        # Unparseable pct is displayed as-is rather than rejected
        return ParsedTag("pct", value, "Policy applies to NaN% of emails", TagStatus.WARNING)

    record.percentage = max(0, min(100, pct))
    if pct == 100:
        return ParsedTag("pct", value, "Policy applies to all emails", TagStatus.GOOD)
    return ParsedTag("pct", value, f"Policy applies to {pct}% of emails", TagStatus.WARNING)


def _dkim_alignment(record: DmarcRecord, value: str) -> ParsedTag:
    return _alignment(record, "adkim", value)


def _spf_alignment(record: DmarcRecord, value: str) -> ParsedTag:
    return _alignment(record, "aspf", value)


def _alignment(record: DmarcRecord, tag: str, value: str) -> ParsedTag:
    mode = "s" if value == "s" else "r"
    if value in ("r", "s"):
        setattr(record, "dkim_alignment" if tag == "adkim" else "spf_alignment", value)
    status = TagStatus.GOOD if mode == "s" else TagStatus.INFO
    return ParsedTag(tag, value, d.DMARC_ALIGNMENT[(tag, mode)], status)


def _failure_options(record: DmarcRecord, value: str) -> ParsedTag:
    record.failure_options = value
    description = d.DMARC_FAILURE_OPTIONS.get(value, d.DMARC_FAILURE_OPTIONS_FALLBACK)
    return ParsedTag("fo", value, description, TagStatus.INFO)


def _report_interval(record: DmarcRecord, value: str) -> ParsedTag:
    seconds = parse_int(value)
    if seconds is None:
        return ParsedTag("ri", value, d.DMARC_INTERVAL_SECONDS, TagStatus.INFO)

    record.report_interval = seconds
    hours = math.floor(seconds / 3600 + 0.5)
    if hours > 0:
        plural = "s" if hours > 1 else ""
        description = f"Reports sent every {hours} hour{plural}"
    else:
        description = d.DMARC_INTERVAL_SECONDS
    return ParsedTag("ri", value, description, TagStatus.INFO)


_TAG_HANDLERS = {
    "v": _version,
    "p": _policy,
    "sp": _subdomain_policy,
    "rua": _rua,
    "ruf": _ruf,
    "pct": _percentage,
    "adkim": _dkim_alignment,
    "aspf": _spf_alignment,
    "fo": _failure_options,
    "ri": _report_interval,
}


# ── Helpers ────────────────────────────────────────────────────────────────────

def parse_report_addresses(value: str) -> list:
    """Parse comma-separated mailto: URIs into bare addresses."""
    result = []
    for addr in value.split(","):
        addr = addr.strip()
        if addr.lower().startswith("mailto:"):
            addr = addr[7:].strip()
        if addr:
            result.append(addr)
    return result


def parse_int(value: str) -> Optional[int]:
    """Leading-integer parse: '50' and '50abc' give 50, 'abc' gives None."""
    match = _LEADING_INT.match(value or "")
    return int(match.group(1)) if match else None


# ── Validation ─────────────────────────────────────────────────────────────────

def validate_dmarc_record(raw: Optional[str]) -> list:
    """Return ValidationIssues for a DMARC TXT value. Never raises."""
    issues = []
    record = (raw or "").strip()

    if not record.startswith(f"v={VERSION}"):
        issues.append(ValidationIssue(
            Severity.ERROR, f"Invalid DMARC record. Must start with v={VERSION}", "v",
        ))
        return issues

    tags = {}
    for key, value in split_tag_pairs(record):
        name = key.lower()
        if name in tags:
            issues.append(ValidationIssue(
                Severity.WARNING, f"Tag '{name}' appears more than once; receivers may reject the record", name,
            ))
            continue
        tags[name] = value

    policy = tags.get("p", "").lower()
    rua = parse_report_addresses(tags.get("rua", ""))
    pct = parse_int(tags["pct"]) if "pct" in tags else DEFAULT_PERCENTAGE

    if "p" not in tags:
        issues.append(ValidationIssue(Severity.ERROR, "Missing required policy (p=) tag", "p"))
    elif policy not in _POLICIES:
        issues.append(ValidationIssue(
            Severity.ERROR, f"Unknown policy '{tags['p']}'. Use none, quarantine or reject", "p",
        ))
    elif policy == "none":
        issues.append(ValidationIssue(
            Severity.WARNING, 'Policy is set to "none" - emails are not being quarantined or rejected', "p",
        ))

    if "sp" in tags and tags["sp"].lower() not in _POLICIES:
        issues.append(ValidationIssue(
            Severity.WARNING, f"Unknown subdomain policy '{tags['sp']}'; receivers will ignore it", "sp",
        ))

    if not rua:
        issues.append(ValidationIssue(
            Severity.INFO, "No aggregate report (rua) address configured. You will not receive DMARC reports.", "rua",
        ))
        if policy == "none":
            issues.append(ValidationIssue(
                Severity.WARNING, 'Policy is set to "none" with no reporting configured. This provides minimal protection.', "p",
            ))
        elif policy in ("quarantine", "reject") and pct == 100:
            issues.append(ValidationIssue(
                Severity.WARNING,
                f"Using p={policy} at 100% without monitoring reports can cause legitimate emails to be "
                "blocked. Consider starting with p=none or using a lower percentage.",
                "pct",
            ))

    if pct is None:
        issues.append(ValidationIssue(Severity.WARNING, f"pct value '{tags['pct']}' is not a number", "pct"))
    elif pct < 0 or pct > 100:
        issues.append(ValidationIssue(Severity.WARNING, f"pct={pct} is outside the 0-100 range", "pct"))
    elif pct < 100:
        issues.append(ValidationIssue(
            Severity.INFO, f"Policy applies to only {pct}% of emails. Consider 100% for full protection.", "pct",
        ))

    if tags.get("adkim") == "s":
        issues.append(ValidationIssue(Severity.INFO, "DKIM alignment is set to strict mode", "adkim"))
    if tags.get("aspf") == "s":
        issues.append(ValidationIssue(Severity.INFO, "SPF alignment is set to strict mode", "aspf"))

    return issues
